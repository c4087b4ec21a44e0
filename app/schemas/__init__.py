from .booking import (
    BookingConfigResponse,
    BookingConfirmation,
    BookingQuoteRequest,
    BookingQuoteResponse,
    BookingRequest,
    BookingSlotsResponse,
)
from .coupon import (
    CouponCreate,
    CouponResponse,
    CouponSnapshot,
    CouponUpdate,
    CouponValidateRequest,
    CouponValidateResponse,
    GeneratedCodeResponse,
)
from .message import (
    BookingStatusUpdate,
    ContactMessageCreate,
    InboundMessageResponse,
)
from .service import (
    BookableServiceResponse,
    ServiceCreate,
    ServiceResponse,
    ServiceUpdate,
)
from .site_settings import (
    SiteSettingResponse,
    SiteSettingsMap,
    SiteSettingsSnapshot,
    SiteSettingValue,
)


__all__ = [
    # booking schemas
    "BookingConfigResponse",
    "BookingConfirmation",
    "BookingQuoteRequest",
    "BookingQuoteResponse",
    "BookingRequest",
    "BookingSlotsResponse",

    # coupon schemas
    "CouponCreate",
    "CouponResponse",
    "CouponSnapshot",
    "CouponUpdate",
    "CouponValidateRequest",
    "CouponValidateResponse",
    "GeneratedCodeResponse",

    # message schemas
    "BookingStatusUpdate",
    "ContactMessageCreate",
    "InboundMessageResponse",

    # service schemas
    "BookableServiceResponse",
    "ServiceCreate",
    "ServiceResponse",
    "ServiceUpdate",

    # site settings schemas
    "SiteSettingResponse",
    "SiteSettingsMap",
    "SiteSettingsSnapshot",
    "SiteSettingValue",
]
