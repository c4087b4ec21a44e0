from dataclasses import dataclass, field
from datetime import date
from typing import FrozenSet, Iterable, List, Optional, Tuple

from ..core.config import Config
from ..enums import BookingStep
from ..exceptions import BookingValidationException
from ..schemas.coupon import CouponSnapshot


REQUIRED_FIELDS = ("service_id", "name", "email", "phone")


@dataclass(frozen=True)
class BookingPolicy:
    """Which time slots are offered and which weekdays are closed (Monday is 0)."""

    time_slots: Tuple[str, ...] = tuple(Config.DEFAULT_TIME_SLOTS)
    blackout_weekdays: FrozenSet[int] = frozenset(Config.DEFAULT_BLACKOUT_WEEKDAYS)

    def is_bookable_day(self, day: date, today: date) -> bool:
        # the calendar disables every day before "now", today included
        return day > today and day.weekday() not in self.blackout_weekdays


@dataclass
class BookingDraft:
    """
    In-progress booking: a linear ``date -> time -> details`` state machine plus
    the context collected along the way.

    Going back to ``date`` only forgets the date and time; the service, contact
    details and an applied coupon survive the detour.
    """

    policy: BookingPolicy = field(default_factory=BookingPolicy)
    step: BookingStep = BookingStep.DATE
    is_open: bool = False
    service_id: Optional[int] = None
    selected_date: Optional[date] = None
    selected_time: str = ""
    name: str = ""
    email: str = ""
    phone: str = ""
    coupon: Optional[CouponSnapshot] = None
    booked_slots: FrozenSet[str] = frozenset()

    def open(self) -> None:
        self.is_open = True

    def _require_step(self, *steps: BookingStep) -> None:
        if self.step not in steps:
            allowed = ", ".join(s.value for s in steps)
            raise BookingValidationException(f"This action is only available in the {allowed} step, not {self.step.value}")

    def select_date(self, day: date, today: Optional[date] = None, booked_slots: Iterable[str] = ()) -> None:
        """``booked_slots`` are the slots already held by pending or confirmed bookings on ``day``."""
        self._require_step(BookingStep.DATE)
        today = today or date.today()

        if not self.policy.is_bookable_day(day, today):
            raise BookingValidationException(f"{day.isoformat()} is not available for booking")

        self.selected_date = day
        self.selected_time = ""
        self.booked_slots = frozenset(booked_slots)
        self.step = BookingStep.TIME

    def select_time(self, slot: str) -> None:
        self._require_step(BookingStep.TIME)

        if slot not in self.policy.time_slots:
            raise BookingValidationException(f"{slot!r} is not one of the offered time slots")

        if slot in self.booked_slots:
            raise BookingValidationException(f"{slot} is already booked on {self.selected_date.isoformat()}")

        self.selected_time = slot
        self.step = BookingStep.DETAILS

    def change_date(self) -> None:
        self._require_step(BookingStep.TIME, BookingStep.DETAILS)

        self.selected_date = None
        self.selected_time = ""
        self.booked_slots = frozenset()
        self.step = BookingStep.DATE

    def set_service(self, service_id: Optional[int]) -> None:
        self.service_id = service_id

    def set_contact(self, name: str = "", email: str = "", phone: str = "") -> None:
        self.name = (name or "").strip()
        self.email = (email or "").strip()
        self.phone = (phone or "").strip()

    def apply_coupon(self, coupon: CouponSnapshot) -> None:
        self._require_step(BookingStep.DETAILS)

        if self.coupon is not None:
            raise BookingValidationException(f"Coupon {self.coupon.code} is already applied")

        self.coupon = coupon

    def missing_fields(self) -> List[str]:
        return [name for name in REQUIRED_FIELDS if not getattr(self, name)]

    def ensure_submittable(self) -> None:
        missing = self.missing_fields()

        if missing:
            raise BookingValidationException("Please enter your name, email and phone and choose a service", missing_fields=missing)

        if self.step != BookingStep.DETAILS:
            raise BookingValidationException("Please complete all steps")

    def reset(self) -> None:
        self.step = BookingStep.DATE
        self.service_id = None
        self.selected_date = None
        self.selected_time = ""
        self.name = ""
        self.email = ""
        self.phone = ""
        self.coupon = None
        self.booked_slots = frozenset()
        self.is_open = False
