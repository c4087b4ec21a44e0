import logging
import secrets
import string
from datetime import datetime
from typing import List, Optional

from sqlalchemy import select, update, or_
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import Config
from ..enums import RedemptionStrategy
from ..exceptions import (
    ConflictException,
    CouponInvalidException,
    CouponLimitReachedException,
    NotFoundException,
    StoreException,
)
from ..models import Coupon
from ..schemas.coupon import CouponCreate, CouponSnapshot, CouponUpdate, normalize_code


logger = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits


class CouponLedger:
    """
    Answers "is this code redeemable right now" and applies redemptions.

    A code that does not exist, is switched off, has expired or is not valid
    yet is reported with the same ``CouponInvalidException``; the real reason
    is only written to the log. Reaching the usage cap is reported separately.

    Redemption either runs as a single conditional UPDATE (``atomic``) or, for
    the ``read_then_write`` strategy, writes back ``expected_current_uses + 1``
    taken from an earlier read, which lets two concurrent redemptions of the
    last use both succeed.
    """

    def __init__(self, strategy: Optional[RedemptionStrategy] = None):
        self.strategy = RedemptionStrategy(strategy or Config.COUPON_REDEMPTION_STRATEGY)


    async def validate(self, code: str, db: AsyncSession, now: Optional[datetime] = None) -> CouponSnapshot:
        """
        Look up a redeemable coupon by its (case-insensitive) code.

        Args:
            code (str): The code as typed by the customer.
            db (AsyncSession): The asynchronous database session.
            now (datetime): Reference time for the validity window, defaults to the current time.

        Returns:
            CouponSnapshot: The coupon with the usage count read by this lookup.

        Raises:
            CouponInvalidException: No active, in-window coupon carries this code.
            CouponLimitReachedException: The coupon has used up its ``max_uses``.
        """

        now = now or datetime.now()
        normalized = normalize_code(code or "")

        stmt = select(Coupon).where(
            Coupon.code == normalized,
            Coupon.is_active == True,
            Coupon.valid_until >= now,
            or_(Coupon.valid_from.is_(None), Coupon.valid_from <= now),
        )

        try:
            coupon = (await db.execute(stmt)).scalars().first()
        except SQLAlchemyError as e:
            logger.error("Coupon lookup for %r failed: %s", normalized, e)
            raise StoreException() from e

        if not coupon:
            await self._log_rejection(normalized, now, db)
            raise CouponInvalidException()

        if coupon.max_uses is not None and coupon.current_uses >= coupon.max_uses:
            logger.info("Coupon %s rejected: usage limit %s reached", coupon.code, coupon.max_uses)
            raise CouponLimitReachedException()

        return CouponSnapshot.model_validate(coupon)


    async def _log_rejection(self, code: str, now: datetime, db: AsyncSession) -> None:
        # diagnostics only, the caller always sees the collapsed error
        try:
            coupon = (await db.execute(select(Coupon).where(Coupon.code == code))).scalars().first()
        except SQLAlchemyError as e:
            logger.warning("Coupon %r rejected, reason unavailable: %s", code, e)
            return

        if not coupon:
            reason = "unknown code"
        elif not coupon.is_active:
            reason = "inactive"
        elif coupon.valid_until < now:
            reason = f"expired at {coupon.valid_until.isoformat()}"
        else:
            reason = f"not valid before {coupon.valid_from.isoformat()}"

        logger.info("Coupon %r rejected: %s", code, reason)


    async def redeem(self, coupon_id: int, expected_current_uses: int, db: AsyncSession, commit: bool = True) -> None:
        """
        Record one use of a coupon.

        Args:
            coupon_id (int): The coupon to redeem.
            expected_current_uses (int): ``current_uses`` as read by ``validate``.
            db (AsyncSession): The asynchronous database session.
            commit (bool): Commit right away. Pass False to leave the write in the caller's transaction.

        Raises:
            CouponLimitReachedException: The cap was reached before this redemption landed (atomic strategy).
            CouponInvalidException: The coupon no longer exists.
            StoreException: The database rejected the update.
        """

        if self.strategy == RedemptionStrategy.ATOMIC:
            stmt = (
                update(Coupon)
                .where(
                    Coupon.id == coupon_id,
                    or_(Coupon.max_uses.is_(None), Coupon.current_uses < Coupon.max_uses),
                )
                .values(current_uses=Coupon.current_uses + 1, updated_at=datetime.now())
                .returning(Coupon.current_uses)
                .execution_options(synchronize_session=False)
            )
        else:
            stmt = (
                update(Coupon)
                .where(Coupon.id == coupon_id)
                .values(current_uses=expected_current_uses + 1, updated_at=datetime.now())
                .returning(Coupon.current_uses)
                .execution_options(synchronize_session=False)
            )

        try:
            new_count = (await db.execute(stmt)).scalar_one_or_none()

            if new_count is None:
                exists = (await db.execute(select(Coupon.id).where(Coupon.id == coupon_id))).scalar_one_or_none()
                if commit:
                    await db.rollback()
                if exists is None:
                    raise CouponInvalidException()
                logger.info("Coupon %s not redeemed: usage limit reached", coupon_id)
                raise CouponLimitReachedException()

            if commit:
                await db.commit()
        except SQLAlchemyError as e:
            await db.rollback()
            logger.error("Redemption of coupon %s failed: %s", coupon_id, e)
            raise StoreException() from e

        logger.info("Coupon %s redeemed, current_uses is now %s", coupon_id, new_count)


    async def list_coupons(self, db: AsyncSession) -> List[Coupon]:
        """ Returns every coupon, newest first. """

        result = await db.execute(select(Coupon).order_by(Coupon.created_at.desc(), Coupon.id.desc()))
        return result.scalars().all()


    async def get_coupon(self, coupon_id: int, db: AsyncSession) -> Coupon:
        coupon = await db.get(Coupon, coupon_id)

        if not coupon:
            raise NotFoundException("Coupon not found")

        return coupon


    async def create_coupon(self, data: CouponCreate, db: AsyncSession) -> Coupon:
        """ Creates a coupon; ``valid_from`` falls back to the creation time. """

        coupon_data = data.model_dump()
        coupon_data["valid_from"] = coupon_data.get("valid_from") or datetime.now()

        coupon = Coupon(**coupon_data, current_uses=0)
        db.add(coupon)

        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictException(f"Coupon code {data.code} already exists")

        await db.refresh(coupon)
        logger.info("Coupon %s created (%s%% off)", coupon.code, coupon.discount_percent)
        return coupon


    async def update_coupon(self, coupon_id: int, data: CouponUpdate, db: AsyncSession) -> Coupon:
        coupon = await self.get_coupon(coupon_id, db)

        for field, value in data.model_dump(exclude_unset=True).items():
            setattr(coupon, field, value)

        try:
            await db.commit()
        except IntegrityError:
            await db.rollback()
            raise ConflictException(f"Coupon code {data.code} already exists")

        await db.refresh(coupon)
        return coupon


    async def toggle_active(self, coupon_id: int, db: AsyncSession) -> Coupon:
        coupon = await self.get_coupon(coupon_id, db)
        coupon.is_active = not coupon.is_active

        await db.commit()
        await db.refresh(coupon)
        return coupon


    async def delete_coupon(self, coupon_id: int, db: AsyncSession) -> None:
        coupon = await self.get_coupon(coupon_id, db)

        await db.delete(coupon)
        await db.commit()


    def generate_code(self, length: int = 8) -> str:
        """ Random uppercase alphanumeric code for the admin "Generate" button. """
        return "".join(secrets.choice(CODE_ALPHABET) for _ in range(length))


coupon_ledger = CouponLedger()
