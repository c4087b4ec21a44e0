from sqlalchemy import Column, Integer, String, Text, Boolean, Float

from ..db.base import Base
from app.models.base import TimeStampMixin


class Service(Base, TimeStampMixin):
    __tablename__ = "services"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    price = Column(Float, nullable=True)  # "price on request" services have none
    duration_minutes = Column(Integer, nullable=True)
    display_order = Column(Integer, nullable=False, default=0)
    is_active = Column(Boolean, nullable=False, default=True)
    is_visible = Column(Boolean, nullable=False, default=True)


    def __repr__(self):
        return f'<Service(name={self.name}, price={self.price})>'
