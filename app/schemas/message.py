from datetime import date, datetime
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
import bleach

from ..enums import BookingStatus


class ContactMessageCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    email: str = Field(..., min_length=3, max_length=254)
    phone: Optional[str] = Field(None, max_length=50)
    subject: Optional[str] = Field(None, max_length=200)
    message: str = Field(..., min_length=1)

    @field_validator('name', 'email', 'phone', 'subject', 'message')
    @classmethod
    def sanitize(cls, v):
        """Contact form text is shown in the admin inbox, so no markup is kept."""
        if v is None:
            return v
        return bleach.clean(v, tags=[], strip=True).strip()


class InboundMessageResponse(BaseModel):
    id: int
    name: str
    email: str
    phone: Optional[str] = None
    subject: Optional[str] = None
    message: str
    source: Optional[str] = None
    is_read: bool
    appointment_date: Optional[date] = None
    appointment_time: Optional[str] = None
    status: Optional[str] = None
    final_price: Optional[float] = None
    coupon_code: Optional[str] = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class BookingStatusUpdate(BaseModel):
    status: BookingStatus
