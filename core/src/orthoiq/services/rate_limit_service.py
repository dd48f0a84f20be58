"""Tiered daily rate limiting for AI questions.

Counters live in the ``rate_limits`` table, one row per identifier, platform
and UTC day. Admission is a single atomic upsert, so concurrent handlers in
different processes can never admit more than the tier cap.

Storage errors fail closed: the evaluator raises ``StorageUnavailableError``
and no request is admitted while the counter store is unreachable.
"""

import logging
import re
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime, time, timedelta
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import RateLimitSettings, settings
from ..core.exceptions import StorageUnavailableError, ValidationError
from ..crud.crud_rate_limit import crud_rate_limits
from ..models.tier import ConsultationMode, Platform, UserTier

LOGGER = logging.getLogger(__name__)

IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z0-9:._@\-]{1,255}$")

NEAR_LIMIT_WARNING_THRESHOLD = 2

UPGRADE_PROMPTS = {
    UserTier.BASIC: "Sign in to unlock more questions per day!",
    UserTier.AUTHENTICATED: "Upgrade to medical access for up to 10 questions per day.",
    UserTier.MEDICAL: None,
}

STORAGE_ERRORS = (SQLAlchemyError, OSError, TimeoutError)


def build_daily_caps(rate_settings: RateLimitSettings) -> dict[UserTier, int]:
    """Cap lookup table: one fixed daily cap per tier."""
    return {
        UserTier.BASIC: rate_settings.RATE_LIMIT_BASIC_DAILY,
        UserTier.AUTHENTICATED: rate_settings.RATE_LIMIT_AUTHENTICATED_DAILY,
        UserTier.MEDICAL: rate_settings.RATE_LIMIT_MEDICAL_DAILY,
    }


def utc_now() -> datetime:
    return datetime.now(UTC)


def window_for(now: datetime) -> date:
    """The UTC calendar day a moment belongs to."""
    return now.astimezone(UTC).date()


def next_reset(now: datetime) -> datetime:
    """Next UTC midnight after ``now``."""
    return datetime.combine(window_for(now) + timedelta(days=1), time.min, tzinfo=UTC)


def validate_identifier(identifier: Any) -> str:
    if not isinstance(identifier, str) or not IDENTIFIER_PATTERN.match(identifier.strip()):
        raise ValidationError(
            "identifier must be 1-255 characters of letters, digits or ':._@-'",
            field="identifier",
        )
    return identifier.strip()


def parse_enum(enum_cls, value: Any, field: str):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(f"{field} must be one of: {allowed}", field=field) from None


@dataclass
class RateLimitDecision:
    """Outcome of a status check or a consume attempt."""

    allowed: bool
    remaining: int
    total: int
    reset_time: datetime
    tier: UserTier
    platform: Platform
    used: int = 0
    soft_warning: str | None = None
    upgrade_prompt: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "allowed": self.allowed,
            "remaining": self.remaining,
            "total": self.total,
            "resetTime": self.reset_time.isoformat(),
            "tier": self.tier.value,
            "platform": self.platform.value,
            "used": self.used,
            "softWarning": self.soft_warning,
            "upgradePrompt": self.upgrade_prompt,
        }


class RateLimitEvaluator:
    """Decide allow/deny and remaining quota against the current UTC day."""

    def __init__(
        self,
        db: AsyncSession,
        caps: dict[UserTier, int] | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.db = db
        self.caps = caps or build_daily_caps(settings)
        self.clock = clock
        for tier, cap in self.caps.items():
            if cap < 1:
                raise ValueError(f"Daily cap for {tier.value} must be at least 1, got {cap}")

    def cap_for(self, tier: UserTier) -> int:
        return self.caps[tier]

    async def evaluate(self, identifier: str, tier: UserTier | str, platform: Platform | str) -> RateLimitDecision:
        """Read-only status for today's window. Nothing is written."""
        identifier = validate_identifier(identifier)
        tier = parse_enum(UserTier, tier, "tier")
        platform = parse_enum(Platform, platform, "platform")

        now = self.clock()
        cap = self.cap_for(tier)
        try:
            record = await crud_rate_limits.get(self.db, identifier, platform.value, window_for(now))
        except STORAGE_ERRORS as e:
            LOGGER.error(f"Rate limit lookup failed for {identifier}: {e}")
            raise StorageUnavailableError("Rate limit store is unavailable") from e

        count = record.count if record else 0
        return self._decision(count < cap, count, cap, tier, platform, now)

    async def consume(
        self,
        identifier: str,
        tier: UserTier | str,
        platform: Platform | str,
        mode: ConsultationMode | str = ConsultationMode.FAST,
        commit: bool = True,
    ) -> RateLimitDecision:
        """Admit one question if today's count is below the cap, counting it atomically.

        With ``commit=False`` the increment joins the caller's transaction, so it
        is rolled back together with whatever the caller writes next.
        """
        identifier = validate_identifier(identifier)
        tier = parse_enum(UserTier, tier, "tier")
        platform = parse_enum(Platform, platform, "platform")
        mode = parse_enum(ConsultationMode, mode, "mode")

        now = self.clock()
        window_start = window_for(now)
        cap = self.cap_for(tier)
        try:
            new_count = await crud_rate_limits.increment_if_below(
                self.db,
                identifier=identifier,
                platform=platform.value,
                window_start=window_start,
                tier=tier.value,
                mode=mode.value,
                cap=cap,
            )
            if commit:
                await self.db.commit()
        except STORAGE_ERRORS as e:
            await self._safe_rollback()
            LOGGER.error(f"Rate limit increment failed for {identifier}: {e}")
            raise StorageUnavailableError("Rate limit store is unavailable") from e

        if new_count is None:
            LOGGER.info(f"Rate limit denied: identifier={identifier}, tier={tier.value}, platform={platform.value}")
            return self._decision(False, cap, cap, tier, platform, now)

        LOGGER.info(
            f"Rate limit accepted: identifier={identifier}, tier={tier.value}, "
            f"platform={platform.value}, count={new_count}/{cap}"
        )
        return self._decision(True, new_count, cap, tier, platform, now, consumed=True)

    async def reset(self, identifier: str | None = None, platform: Platform | str | None = None) -> int:
        """Delete counters for one identifier, or every counter when none is given."""
        if identifier is not None:
            identifier = validate_identifier(identifier)
        platform_value = parse_enum(Platform, platform, "platform").value if platform is not None else None
        try:
            removed = await crud_rate_limits.delete(self.db, identifier=identifier, platform=platform_value)
            await self.db.commit()
        except STORAGE_ERRORS as e:
            await self._safe_rollback()
            raise StorageUnavailableError("Rate limit store is unavailable") from e
        LOGGER.info(f"Reset rate limits for {identifier or 'all identifiers'}: {removed} rows removed")
        return removed

    async def purge_expired(self, before: date | None = None) -> int:
        """Drop counters from windows older than ``before`` (default: today)."""
        cutoff = before or window_for(self.clock())
        try:
            removed = await crud_rate_limits.delete_before(self.db, cutoff)
            await self.db.commit()
        except STORAGE_ERRORS as e:
            await self._safe_rollback()
            raise StorageUnavailableError("Rate limit store is unavailable") from e
        LOGGER.info(f"Purged {removed} rate limit rows older than {cutoff.isoformat()}")
        return removed

    def _decision(
        self,
        allowed: bool,
        count: int,
        cap: int,
        tier: UserTier,
        platform: Platform,
        now: datetime,
        consumed: bool = False,
    ) -> RateLimitDecision:
        remaining = max(0, cap - count)
        soft_warning = None
        upgrade_prompt = None

        if remaining == 0 and not (consumed and allowed):
            soft_warning = (
                "You've used your free question for today."
                if cap == 1
                else f"You've reached today's limit of {cap} questions."
            )
            upgrade_prompt = UPGRADE_PROMPTS[tier]
        elif 0 < remaining <= NEAR_LIMIT_WARNING_THRESHOLD:
            soft_warning = f"{remaining} question{'' if remaining == 1 else 's'} remaining today."

        return RateLimitDecision(
            allowed=allowed,
            remaining=remaining,
            total=cap,
            reset_time=next_reset(now),
            tier=tier,
            platform=platform,
            used=min(count, cap),
            soft_warning=soft_warning,
            upgrade_prompt=upgrade_prompt,
        )

    async def _safe_rollback(self) -> None:
        try:
            await self.db.rollback()
        except STORAGE_ERRORS as e:
            LOGGER.warning(f"Rollback after storage failure also failed: {e}")
