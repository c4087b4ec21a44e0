from datetime import date
from fastapi import APIRouter, BackgroundTasks, Depends, Header, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional

from ..core.config import Config
from ..core.dependencies import get_booking_policy, get_db
from ..schemas.booking import (
    BookingConfigResponse,
    BookingConfirmation,
    BookingQuoteRequest,
    BookingQuoteResponse,
    BookingRequest,
    BookingSlotsResponse,
)
from ..services.booking_draft import BookingPolicy
from ..services.booking_service import booking_pipeline
from ..services.email_service import email_service


router = APIRouter()


@router.get("/config", response_model=BookingConfigResponse)
async def get_booking_config(db: AsyncSession = Depends(get_db)):
    """
    Booking widget settings: whether the floating button is shown, its label,
    the offered time slots and the closed weekdays (Monday is 0).
    """
    return await booking_pipeline.booking_config(db)


@router.get("/slots", response_model=BookingSlotsResponse)
async def get_booking_slots(
    appointment_date: date = Query(..., alias="date", description="Day to check, YYYY-MM-DD"),
    policy: BookingPolicy = Depends(get_booking_policy),
    db: AsyncSession = Depends(get_db),
):
    """
    Offered time slots for a day, split into booked and available.
    Slots held by a pending or confirmed booking cannot be chosen.
    """
    return await booking_pipeline.slot_availability(appointment_date, db, policy=policy)


@router.post("/quote", response_model=BookingQuoteResponse)
async def quote_booking(data: BookingQuoteRequest, db: AsyncSession = Depends(get_db)):
    """
    Price preview for a service, with the discount of an optional coupon. Nothing is redeemed.
    """
    return await booking_pipeline.quote(data.service_id, db, coupon_code=data.coupon_code)


@router.post("/", response_model=BookingConfirmation, status_code=status.HTTP_201_CREATED)
async def submit_booking(
    data: BookingRequest,
    background_tasks: BackgroundTasks,
    idempotency_key: Optional[str] = Header(None, alias="Idempotency-Key"),
    policy: BookingPolicy = Depends(get_booking_policy),
    db: AsyncSession = Depends(get_db),
):
    """
    **Submit a Booking**

    - Re-checks the date (not today or earlier, not a closed weekday) and the time slot (offered and not already booked).
    - Requires service, name, email and phone.
    - Applies and redeems the coupon when one is given.
    - Stores the booking in the admin inbox.

    Sending the same `Idempotency-Key` twice returns the first booking.
    """

    notify = None
    if Config.NOTIFY_ON_BOOKING:
        recipient = await email_service.resolve_recipient(db)
        if recipient:
            def notify(details):
                background_tasks.add_task(email_service.send_booking_notification, recipient, details)

    return await booking_pipeline.submit_request(
        data,
        db,
        policy=policy,
        idempotency_key=idempotency_key,
        notify=notify,
    )
