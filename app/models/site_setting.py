from sqlalchemy import Column, Integer, String, Text

from ..db.base import Base
from .base import TimeStampMixin


class SiteSetting(Base, TimeStampMixin):
    __tablename__ = "site_settings"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(100), nullable=False, unique=True, index=True)
    value = Column(Text, nullable=False)
