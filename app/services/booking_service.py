import logging
from datetime import date, datetime
from typing import Any, Callable, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import Config
from ..enums import BookingStatus
from ..exceptions import APIException, BookingValidationException, StoreException
from ..models import InboundMessage, Service
from ..schemas.booking import (
    BookingConfigResponse,
    BookingConfirmation,
    BookingQuoteResponse,
    BookingRequest,
    BookingSlotsResponse,
)
from ..schemas.coupon import CouponSnapshot
from .booking_draft import BookingDraft, BookingPolicy
from .coupon_service import CouponLedger, coupon_ledger
from .site_settings_service import site_settings_service


logger = logging.getLogger(__name__)

Notifier = Callable[[Dict[str, Any]], None]

HOLDING_STATUSES = (BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value)


def calculate_final_price(price: Optional[float], coupon: Optional[CouponSnapshot]) -> Optional[float]:
    """
    ``price * (1 - discount_percent / 100)`` with a coupon, the listed price
    without one, and None for services that have no price.
    """

    if price is None:
        return None

    if coupon is None:
        return round(float(price), 2)

    return round(float(price) * (100 - coupon.discount_percent) / 100, 2)


def booking_reference(record_id: int) -> str:
    return f"BK-{record_id:06d}"


class BookingPipeline:
    """
    Turns a completed booking draft into a booking record.

    The record is stored as an inbound message (``source`` = ``BOOKING_SOURCE``)
    so it shows up in the admin inbox. When a coupon was applied its usage
    counter is redeemed as well. With ``atomic_commit`` both writes share one
    transaction; without it the record is committed first and a failed
    redemption leaves the booking in place with the coupon unredeemed.

    Attributes:
        ledger (CouponLedger): Coupon validation and redemption.
        atomic_commit (bool): Commit the record and the redemption together.
        source (str): Discriminator written to the inbound message.
    """

    def __init__(self, ledger: Optional[CouponLedger] = None, atomic_commit: Optional[bool] = None, source: Optional[str] = None):
        self.ledger = ledger or coupon_ledger
        self.atomic_commit = Config.BOOKING_ATOMIC_COMMIT if atomic_commit is None else atomic_commit
        self.source = source or Config.BOOKING_SOURCE


    async def _get_service(self, service_id: int, db: AsyncSession) -> Service:
        try:
            service = await db.get(Service, service_id)
        except SQLAlchemyError as e:
            logger.error("Service lookup for %s failed: %s", service_id, e)
            raise StoreException() from e

        if not service or not service.is_active:
            raise BookingValidationException("The selected service is not available")

        return service


    def build_subject(self, service: Service) -> str:
        return f"Booking request: {service.name}"


    def build_message(self, service: Service, draft: BookingDraft, final_price: Optional[float]) -> str:
        """
        Human-readable body for the admin inbox.
        """

        lines = [
            f"Service: {service.name}",
            f"Date: {draft.selected_date.isoformat()}",
            f"Time: {draft.selected_time}",
        ]

        if draft.coupon:
            lines.append(f"Coupon: {draft.coupon.code} ({draft.coupon.discount_percent}% off)")

        lines.append(f"Price: {final_price:.2f}" if final_price is not None else "Price: on request")
        lines.append(f"Contact: {draft.name}, {draft.email}, {draft.phone}")
        return "\n".join(lines)


    async def apply_coupon(self, draft: BookingDraft, code: str, db: AsyncSession, now: Optional[datetime] = None) -> CouponSnapshot:
        """ Validates ``code`` and attaches the coupon snapshot to the draft. """

        coupon = await self.ledger.validate(code, db, now=now)
        draft.apply_coupon(coupon)
        return coupon


    async def quote(self, service_id: int, db: AsyncSession, coupon_code: Optional[str] = None, now: Optional[datetime] = None) -> BookingQuoteResponse:
        """ Price preview for a service with an optional coupon; nothing is written. """

        service = await self._get_service(service_id, db)
        coupon = await self.ledger.validate(coupon_code, db, now=now) if coupon_code else None

        return BookingQuoteResponse(
            service_id=service.id,
            service_name=service.name,
            listed_price=service.price,
            coupon_code=coupon.code if coupon else None,
            discount_percent=coupon.discount_percent if coupon else None,
            final_price=calculate_final_price(service.price, coupon),
        )


    async def _find_by_idempotency_key(self, key: str, db: AsyncSession) -> Optional[InboundMessage]:
        try:
            stmt = select(InboundMessage).where(InboundMessage.idempotency_key == key)
            return (await db.execute(stmt)).scalars().first()
        except SQLAlchemyError as e:
            logger.error("Idempotency lookup for %s failed: %s", key, e)
            raise StoreException() from e


    async def booked_slots(self, day: date, db: AsyncSession) -> List[str]:
        """
        Time slots on ``day`` already held by a pending or confirmed booking.
        Cancelled bookings free their slot.
        """

        stmt = (
            select(InboundMessage.appointment_time)
            .where(
                InboundMessage.source == self.source,
                InboundMessage.appointment_date == day,
                InboundMessage.status.in_(HOLDING_STATUSES),
            )
            .distinct()
        )

        try:
            result = await db.execute(stmt)
        except SQLAlchemyError as e:
            logger.error("Booked slot lookup for %s failed: %s", day, e)
            raise StoreException() from e

        return sorted(slot for slot in result.scalars().all() if slot)


    async def slot_availability(self, day: date, db: AsyncSession, policy: Optional[BookingPolicy] = None) -> BookingSlotsResponse:
        policy = policy or await site_settings_service.booking_policy(db)
        booked = set(await self.booked_slots(day, db))

        return BookingSlotsResponse(
            appointment_date=day,
            time_slots=list(policy.time_slots),
            booked=[slot for slot in policy.time_slots if slot in booked],
            available=[slot for slot in policy.time_slots if slot not in booked],
        )


    def _confirmation(self, record: InboundMessage, duplicate: bool = False) -> BookingConfirmation:
        reference = booking_reference(record.id)

        if duplicate:
            description = f"This booking was already received. Reference: {reference}"
        else:
            description = f"Your request was received. Reference: {reference}"

        return BookingConfirmation(
            id=record.id,
            reference=reference,
            description=description,
            final_price=record.final_price,
            coupon_code=record.coupon_code,
            discount_percent=record.discount_percent,
            coupon_redeemed=record.coupon_redeemed,
            duplicate=duplicate,
        )


    async def _replay(self, idempotency_key: Optional[str], db: AsyncSession) -> Optional[BookingConfirmation]:
        """ The stored confirmation for an already used idempotency key, if any. """

        if not idempotency_key:
            return None

        existing = await self._find_by_idempotency_key(idempotency_key, db)
        if existing is None:
            return None

        logger.info("Duplicate booking submission %s, returning booking %s", idempotency_key, existing.id)
        return self._confirmation(existing, duplicate=True)


    async def submit(
        self,
        draft: BookingDraft,
        db: AsyncSession,
        idempotency_key: Optional[str] = None,
        notify: Optional[Notifier] = None,
    ) -> BookingConfirmation:
        """
        Commits a booking draft.

        Args:
            draft (BookingDraft): A draft in the ``details`` step.
            db (AsyncSession): The asynchronous database session.
            idempotency_key (str): Repeating a key returns the first booking instead of writing again.
            notify (Callable): Called with the booking details once the record is committed.

        Returns:
            BookingConfirmation: Reference, final price and whether a coupon was redeemed.

        Raises:
            BookingValidationException: A required field is empty or the service is unavailable. Nothing is written.
            CouponLimitReachedException: The coupon ran out before the booking landed (atomic commit only).
            StoreException: The database rejected a read or write.
        """

        draft.ensure_submittable()

        duplicate = await self._replay(idempotency_key, db)
        if duplicate:
            draft.reset()
            return duplicate

        service = await self._get_service(draft.service_id, db)
        coupon = draft.coupon
        final_price = calculate_final_price(service.price, coupon)
        # a failed legacy redemption rolls back and expires loaded rows
        service_id, service_name = service.id, service.name

        record = InboundMessage(
            name=draft.name,
            email=draft.email,
            phone=draft.phone,
            subject=self.build_subject(service),
            message=self.build_message(service, draft, final_price),
            source=self.source,
            idempotency_key=idempotency_key,
            appointment_date=draft.selected_date,
            appointment_time=draft.selected_time,
            status=BookingStatus.PENDING.value,
            coupon_code=coupon.code if coupon else None,
            discount_percent=coupon.discount_percent if coupon else None,
            final_price=final_price,
            coupon_redeemed=False,
        )

        try:
            db.add(record)

            if self.atomic_commit:
                await db.flush()
                if coupon:
                    await self.ledger.redeem(coupon.id, coupon.current_uses, db, commit=False)
                    record.coupon_redeemed = True
                await db.commit()
            else:
                await db.commit()
                record_id = record.id
                if coupon:
                    try:
                        await self.ledger.redeem(coupon.id, coupon.current_uses, db)
                    except APIException as e:
                        logger.warning(
                            "Booking %s was recorded but coupon %s was not redeemed: %s",
                            record_id, coupon.code, type(e).__name__,
                        )
                        # the failed redemption rolled back and expired the record
                        record = await db.get(InboundMessage, record_id)
                    else:
                        record.coupon_redeemed = True
                        await db.commit()
        except APIException:
            await db.rollback()
            raise
        except IntegrityError as e:
            await db.rollback()
            # another request with the same key committed between the lookup and this insert
            duplicate = await self._replay(idempotency_key, db)
            if duplicate is None:
                logger.error("Booking insert failed: %s", e)
                raise StoreException() from e
            draft.reset()
            return duplicate
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Booking insert failed: %s", e)
            raise StoreException() from e

        confirmation = self._confirmation(record)
        logger.info(
            "Booking %s committed for service %s on %s %s (coupon: %s)",
            confirmation.reference, service_id, draft.selected_date, draft.selected_time, confirmation.coupon_code,
        )

        if notify:
            notify({
                "name": draft.name,
                "email": draft.email,
                "phone": draft.phone,
                "service_name": service_name,
                "appointment_date": draft.selected_date.isoformat(),
                "appointment_time": draft.selected_time,
                "coupon_code": confirmation.coupon_code,
                "discount_percent": confirmation.discount_percent,
                "final_price": final_price,
                "reference": confirmation.reference,
            })

        draft.reset()
        return confirmation


    async def submit_request(
        self,
        payload: BookingRequest,
        db: AsyncSession,
        policy: Optional[BookingPolicy] = None,
        idempotency_key: Optional[str] = None,
        notify: Optional[Notifier] = None,
        today: Optional[date] = None,
        now: Optional[datetime] = None,
    ) -> BookingConfirmation:
        """
        Replays an HTTP submission through a fresh draft so the date, slot,
        required-field and coupon rules are all checked server-side.

        A repeated ``idempotency_key`` short-circuits before any of those
        checks: the retry gets the stored confirmation even when the coupon
        has been used up or the date has passed since.
        """

        duplicate = await self._replay(idempotency_key, db)
        if duplicate:
            return duplicate

        policy = policy or await site_settings_service.booking_policy(db)

        draft = BookingDraft(policy=policy)
        draft.open()
        draft.set_service(payload.service_id)
        draft.set_contact(payload.name, payload.email, payload.phone)
        draft.select_date(payload.selected_date, today=today, booked_slots=await self.booked_slots(payload.selected_date, db))
        draft.select_time(payload.selected_time)
        draft.ensure_submittable()

        if payload.coupon_code:
            await self.apply_coupon(draft, payload.coupon_code, db, now=now)

        return await self.submit(draft, db, idempotency_key=idempotency_key, notify=notify)


    async def booking_config(self, db: AsyncSession) -> BookingConfigResponse:
        """ What the booking widget needs before it renders. """

        settings = await site_settings_service.load(db)

        return BookingConfigResponse(
            enabled=settings.booking_popup_enabled,
            button_text=settings.booking_popup_text,
            time_slots=settings.booking_time_slots,
            blackout_weekdays=sorted(settings.booking_blackout_days),
        )


booking_pipeline = BookingPipeline()
