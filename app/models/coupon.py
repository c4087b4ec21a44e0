from sqlalchemy import Column, Integer, String, DateTime, Boolean, CheckConstraint
from datetime import datetime

from ..db.base import Base
from app.models.base import TimeStampMixin

class Coupon(Base, TimeStampMixin):
    __tablename__ = "coupons"

    id = Column(Integer, primary_key=True, index=True)
    code = Column(String(50), nullable=False, unique=True, index=True)  # always stored uppercase
    discount_percent = Column(Integer, nullable=False)
    valid_from = Column(DateTime, nullable=True, default=datetime.now)
    valid_until = Column(DateTime, nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)
    max_uses = Column(Integer, nullable=True)  # None means unlimited
    current_uses = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        CheckConstraint("discount_percent BETWEEN 1 AND 100", name="ck_coupon_discount_percent"),
        CheckConstraint("current_uses >= 0", name="ck_coupon_current_uses_non_negative"),
    )

    def __repr__(self):
        return f'<Coupon(code={self.code}, discount_percent={self.discount_percent}, current_uses={self.current_uses})>'
