"""Closed enums for user tiers, platforms, modes and consultation review tiers."""

from enum import Enum


class UserTier(str, Enum):
    """Authentication tier; selects the daily question cap."""

    BASIC = "basic"
    AUTHENTICATED = "authenticated"
    MEDICAL = "medical"

    @classmethod
    def _missing_(cls, value):
        # Older clients send "anonymous" for signed-out users
        if isinstance(value, str) and value.lower() == "anonymous":
            return cls.BASIC
        return None


class Platform(str, Enum):
    MINIAPP = "miniapp"
    WEB = "web"


class ConsultationMode(str, Enum):
    FAST = "fast"
    NORMAL = "normal"


class ConsultationTier(str, Enum):
    """Review tier of a consultation. Only ever moves forward along ORDER."""

    STANDARD = "standard"
    COMPLETE = "complete"
    VERIFIED = "verified"
    EXCEPTIONAL = "exceptional"

    @property
    def rank(self) -> int:
        return CONSULTATION_TIER_ORDER.index(self)


CONSULTATION_TIER_ORDER = (
    ConsultationTier.STANDARD,
    ConsultationTier.COMPLETE,
    ConsultationTier.VERIFIED,
    ConsultationTier.EXCEPTIONAL,
)
