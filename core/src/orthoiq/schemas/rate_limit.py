"""Rate limit schemas."""

from datetime import datetime

from pydantic import Field

from ..core.schemas import CamelModel
from ..models.tier import Platform, UserTier


class RateLimitStatus(CamelModel):
    """Rate limit status / decision returned to clients."""

    allowed: bool
    remaining: int
    total: int
    reset_time: datetime
    tier: UserTier
    platform: Platform
    used: int = 0
    soft_warning: str | None = None
    upgrade_prompt: str | None = None


class RateLimitResetRequest(CamelModel):
    identifier: str | None = Field(None, max_length=255)
    platform: Platform | None = None


class RateLimitResetResponse(CamelModel):
    cleared: str
    count: int


class RateLimitPurgeResponse(CamelModel):
    purged: int
    before: str
