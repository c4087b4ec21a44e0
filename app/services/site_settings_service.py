import asyncio
import logging
from typing import Dict, Optional, Set

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import Config
from ..enums import SettingsEvent, Weekday
from ..exceptions import NotFoundException
from ..models import SiteSetting
from ..schemas.site_settings import SiteSettingsSnapshot
from .booking_draft import BookingPolicy


logger = logging.getLogger(__name__)

TRUE_VALUES = ("true", "1", "yes", "on")


def parse_list(value: Optional[str]) -> list:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def parse_weekdays(value: Optional[str]) -> Set[int]:
    """Accepts weekday names ("sunday") or numbers with Monday as 0."""
    days = set()
    for item in parse_list(value):
        if item.isdigit():
            days.add(Weekday(int(item)).value)
        else:
            days.add(Weekday[item.upper()].value)
    return days


class SiteSettingsService:
    """
    Process-wide key/value configuration stored in ``site_settings``.

    Components read a typed snapshot through ``load`` instead of querying the
    table themselves, and can ``subscribe`` to a queue of change events that
    every ``set``/``delete`` publishes.
    """

    def __init__(self):
        self._subscribers: Set[asyncio.Queue] = set()


    async def get_all(self, db: AsyncSession) -> Dict[str, str]:
        result = await db.execute(select(SiteSetting.key, SiteSetting.value))
        return {key: value for key, value in result.all()}


    async def get(self, key: str, db: AsyncSession, default: Optional[str] = None) -> Optional[str]:
        value = (await db.execute(select(SiteSetting.value).where(SiteSetting.key == key))).scalar_one_or_none()
        return default if value is None else value


    async def load(self, db: AsyncSession) -> SiteSettingsSnapshot:
        """
        Reads every setting and converts the ones the application understands.

        A malformed weekday list is logged and replaced with the configured default.
        """

        raw = await self.get_all(db)

        try:
            blackout = parse_weekdays(raw["booking_blackout_days"]) if "booking_blackout_days" in raw \
                else set(Config.DEFAULT_BLACKOUT_WEEKDAYS)
        except (KeyError, ValueError):
            logger.warning("Ignoring malformed booking_blackout_days setting: %r", raw.get("booking_blackout_days"))
            blackout = set(Config.DEFAULT_BLACKOUT_WEEKDAYS)

        return SiteSettingsSnapshot(
            booking_popup_enabled=raw.get("booking_popup_enabled", "").lower() in TRUE_VALUES,
            booking_popup_text=raw.get("booking_popup_text") or "Book Appointment",
            booking_time_slots=parse_list(raw.get("booking_time_slots")) or list(Config.DEFAULT_TIME_SLOTS),
            booking_blackout_days=blackout,
            notification_email=raw.get("notification_email") or None,
            raw=raw,
        )


    async def booking_policy(self, db: AsyncSession) -> BookingPolicy:
        snapshot = await self.load(db)
        return BookingPolicy(
            time_slots=tuple(snapshot.booking_time_slots),
            blackout_weekdays=frozenset(snapshot.booking_blackout_days),
        )


    async def set(self, key: str, value: str, db: AsyncSession) -> SiteSetting:
        """ Inserts or updates a setting and notifies subscribers. """

        setting = (await db.execute(select(SiteSetting).where(SiteSetting.key == key))).scalars().first()

        if setting:
            setting.value = value
        else:
            setting = SiteSetting(key=key, value=value)
            db.add(setting)

        await db.commit()
        await db.refresh(setting)

        self.publish({"event": SettingsEvent.UPDATE.value, "key": key, "value": value})
        return setting


    async def delete(self, key: str, db: AsyncSession) -> None:
        setting = (await db.execute(select(SiteSetting).where(SiteSetting.key == key))).scalars().first()

        if not setting:
            raise NotFoundException(f"Setting {key} not found")

        await db.delete(setting)
        await db.commit()

        self.publish({"event": SettingsEvent.DELETE.value, "key": key, "value": None})


    def subscribe(self) -> asyncio.Queue:
        queue = asyncio.Queue()
        self._subscribers.add(queue)
        return queue


    def unsubscribe(self, queue: asyncio.Queue) -> None:
        self._subscribers.discard(queue)


    def publish(self, event: dict) -> None:
        logger.info("Site setting %s: %s", event["event"].lower(), event["key"])
        for queue in list(self._subscribers):
            queue.put_nowait(event)


site_settings_service = SiteSettingsService()
