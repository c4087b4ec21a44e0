from pydantic import BaseModel, Field
from typing import Dict, List, Optional, Set


class SiteSettingValue(BaseModel):
    value: str


class SiteSettingResponse(BaseModel):
    key: str
    value: str


class SiteSettingsMap(BaseModel):
    settings: Dict[str, str]


class SiteSettingsSnapshot(BaseModel):
    """Typed view over the key/value ``site_settings`` table."""

    booking_popup_enabled: bool = False
    booking_popup_text: str = "Book Appointment"
    booking_time_slots: List[str] = Field(default_factory=list)
    booking_blackout_days: Set[int] = Field(default_factory=set)
    notification_email: Optional[str] = None
    raw: Dict[str, str] = Field(default_factory=dict)
