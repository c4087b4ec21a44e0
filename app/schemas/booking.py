from datetime import date
from pydantic import BaseModel, field_validator
from typing import List, Optional
import bleach


def _clean_text(value):
    """Strip markup and surrounding whitespace from user-typed text."""
    if value is None:
        return value
    return bleach.clean(str(value), tags=[], strip=True).strip()


class BookingRequest(BaseModel):
    """
    A completed booking widget submission.

    Contact fields default to empty strings so that a missing value reaches the
    booking pipeline and is reported as a booking validation error.
    """

    service_id: Optional[int] = None
    selected_date: date
    selected_time: str
    name: str = ""
    email: str = ""
    phone: str = ""
    coupon_code: Optional[str] = None

    @field_validator('name', 'email', 'phone', 'selected_time')
    @classmethod
    def clean_text_fields(cls, v):
        return _clean_text(v)

    @field_validator('coupon_code')
    @classmethod
    def blank_coupon_is_none(cls, v):
        v = _clean_text(v)
        return v or None


class BookingQuoteRequest(BaseModel):
    service_id: int
    coupon_code: Optional[str] = None


class BookingQuoteResponse(BaseModel):
    service_id: int
    service_name: str
    listed_price: Optional[float] = None
    coupon_code: Optional[str] = None
    discount_percent: Optional[int] = None
    final_price: Optional[float] = None


class BookingConfirmation(BaseModel):
    id: int
    reference: str
    title: str = "Booking Submitted!"
    description: str = "Your appointment request has been received. We'll confirm it shortly."
    final_price: Optional[float] = None
    coupon_code: Optional[str] = None
    discount_percent: Optional[int] = None
    coupon_redeemed: bool = False
    duplicate: bool = False


class BookingConfigResponse(BaseModel):
    enabled: bool
    button_text: str
    time_slots: List[str]
    blackout_weekdays: List[int]


class BookingSlotsResponse(BaseModel):
    appointment_date: date
    time_slots: List[str]
    booked: List[str]
    available: List[str]
