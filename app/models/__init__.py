from .coupon import Coupon
from .inbound_message import InboundMessage
from .service import Service
from .site_setting import SiteSetting


__all__ = [
    "Coupon",
    "InboundMessage",
    "Service",
    "SiteSetting",
]
