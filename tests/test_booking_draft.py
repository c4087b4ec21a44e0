from datetime import date, timedelta

import pytest

from app.enums import BookingStep
from app.exceptions import BookingValidationException
from app.schemas.coupon import CouponSnapshot
from app.services.booking_draft import BookingDraft, BookingPolicy


TODAY = date(2026, 10, 14)          # a Wednesday
THURSDAY = date(2026, 10, 15)
SUNDAY = date(2026, 10, 18)

COUPON = CouponSnapshot(id=1, code="SAVE20", discount_percent=20, current_uses=0)


@pytest.fixture
def draft():
    return BookingDraft(policy=BookingPolicy(time_slots=("09:00 AM", "12:00 PM"), blackout_weekdays=frozenset({6})))


def fill_to_details(draft):
    draft.select_date(THURSDAY, today=TODAY)
    draft.select_time("09:00 AM")


def test_walks_date_time_details(draft):
    assert draft.step == BookingStep.DATE

    draft.select_date(THURSDAY, today=TODAY)
    assert draft.step == BookingStep.TIME
    assert draft.selected_date == THURSDAY

    draft.select_time("12:00 PM")
    assert draft.step == BookingStep.DETAILS
    assert draft.selected_time == "12:00 PM"


@pytest.mark.parametrize("day", [TODAY, TODAY - timedelta(days=3), SUNDAY], ids=["today", "past", "blackout"])
def test_rejects_unbookable_days(draft, day):
    with pytest.raises(BookingValidationException):
        draft.select_date(day, today=TODAY)

    assert draft.step == BookingStep.DATE
    assert draft.selected_date is None


def test_blackout_days_are_configurable():
    draft = BookingDraft(policy=BookingPolicy(time_slots=("10:00 AM",), blackout_weekdays=frozenset({3})))

    draft.select_date(SUNDAY, today=TODAY)
    assert draft.step == BookingStep.TIME

    other = BookingDraft(policy=BookingPolicy(time_slots=("10:00 AM",), blackout_weekdays=frozenset({3})))
    with pytest.raises(BookingValidationException):
        other.select_date(THURSDAY, today=TODAY)


def test_rejects_unknown_slot(draft):
    draft.select_date(THURSDAY, today=TODAY)

    with pytest.raises(BookingValidationException):
        draft.select_time("03:00 AM")

    assert draft.step == BookingStep.TIME


def test_steps_cannot_be_skipped(draft):
    with pytest.raises(BookingValidationException):
        draft.select_time("09:00 AM")

    with pytest.raises(BookingValidationException):
        draft.apply_coupon(COUPON)

    with pytest.raises(BookingValidationException):
        draft.change_date()


def test_change_date_keeps_service_contact_and_coupon(draft):
    draft.set_service(7)
    draft.set_contact("Asha", "asha@example.com", "+91 7026292525")
    fill_to_details(draft)
    draft.apply_coupon(COUPON)

    draft.change_date()

    assert draft.step == BookingStep.DATE
    assert draft.selected_date is None
    assert draft.selected_time == ""
    assert draft.service_id == 7
    assert (draft.name, draft.email, draft.phone) == ("Asha", "asha@example.com", "+91 7026292525")
    assert draft.coupon == COUPON


def test_reselecting_a_date_clears_the_time(draft):
    draft.select_date(THURSDAY, today=TODAY)
    draft.change_date()
    draft.select_date(THURSDAY + timedelta(days=1), today=TODAY)

    assert draft.selected_time == ""
    assert draft.step == BookingStep.TIME


def test_second_coupon_is_rejected(draft):
    fill_to_details(draft)
    draft.apply_coupon(COUPON)

    with pytest.raises(BookingValidationException):
        draft.apply_coupon(CouponSnapshot(id=2, code="OTHER", discount_percent=5))

    assert draft.coupon == COUPON


def test_missing_fields_are_reported(draft):
    fill_to_details(draft)
    draft.set_contact("Asha", "", "  ")

    with pytest.raises(BookingValidationException) as exc_info:
        draft.ensure_submittable()

    assert exc_info.value.missing_fields == ["service_id", "email", "phone"]


def test_submittable_only_in_details(draft):
    draft.set_service(1)
    draft.set_contact("Asha", "asha@example.com", "123")

    with pytest.raises(BookingValidationException):
        draft.ensure_submittable()

    fill_to_details(draft)
    draft.ensure_submittable()


def test_reset_clears_everything(draft):
    draft.open()
    draft.set_service(1)
    draft.set_contact("Asha", "asha@example.com", "123")
    fill_to_details(draft)
    draft.apply_coupon(COUPON)

    draft.reset()

    assert draft.step == BookingStep.DATE
    assert draft.is_open is False
    assert draft.service_id is None
    assert draft.selected_date is None
    assert draft.selected_time == ""
    assert draft.coupon is None
    assert draft.missing_fields() == ["service_id", "name", "email", "phone"]


def test_booked_slot_cannot_be_chosen(draft):
    draft.select_date(THURSDAY, today=TODAY, booked_slots=["09:00 AM"])

    with pytest.raises(BookingValidationException):
        draft.select_time("09:00 AM")

    assert draft.step == BookingStep.TIME

    draft.select_time("12:00 PM")
    assert draft.step == BookingStep.DETAILS


def test_booked_slots_belong_to_the_selected_day(draft):
    draft.select_date(THURSDAY, today=TODAY, booked_slots=["09:00 AM"])
    draft.change_date()

    assert draft.booked_slots == frozenset()

    draft.select_date(THURSDAY + timedelta(days=1), today=TODAY)
    draft.select_time("09:00 AM")
    assert draft.selected_time == "09:00 AM"
