from sqlalchemy import Column, Date, Float, Integer, String, Text, Boolean

from ..db.base import Base
from .base import TimeStampMixin


class InboundMessage(Base, TimeStampMixin):
    """
    A message addressed to the administrators. Contact-form submissions and
    booking requests share this table and are told apart by ``source``.

    Booking requests also carry the booked slot, their status and the price
    that was confirmed to the customer; those columns stay empty for
    contact-form messages.
    """

    __tablename__ = "contact_messages"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    phone = Column(String, nullable=True)
    subject = Column(String, nullable=True)
    message = Column(Text, nullable=False)
    source = Column(String(50), nullable=True, index=True)
    is_read = Column(Boolean, nullable=False, default=False)
    idempotency_key = Column(String(100), nullable=True, unique=True)

    # booking requests only
    appointment_date = Column(Date, nullable=True, index=True)
    appointment_time = Column(String(20), nullable=True)
    status = Column(String(20), nullable=True)
    coupon_code = Column(String(50), nullable=True)
    discount_percent = Column(Integer, nullable=True)
    final_price = Column(Float, nullable=True)
    coupon_redeemed = Column(Boolean, nullable=False, default=False)
