import enum


class BookingStep(str, enum.Enum):
    DATE = "date"
    TIME = "time"
    DETAILS = "details"


class MessageSource(str, enum.Enum):
    BOOKING_POPUP = "booking_popup"
    CONTACT_FORM = "contact_form"


class RedemptionStrategy(str, enum.Enum):
    ATOMIC = "atomic"
    READ_THEN_WRITE = "read_then_write"


class SettingsEvent(str, enum.Enum):
    UPDATE = "UPDATE"
    DELETE = "DELETE"


class Weekday(int, enum.Enum):
    MONDAY = 0
    TUESDAY = 1
    WEDNESDAY = 2
    THURSDAY = 3
    FRIDAY = 4
    SATURDAY = 5
    SUNDAY = 6


class BookingStatus(str, enum.Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"
