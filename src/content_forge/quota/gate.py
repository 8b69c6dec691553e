import logging
from dataclasses import dataclass
from typing import Protocol

from content_forge.config import FREE_GENERATION_LIMIT
from content_forge.models import Profile

logger = logging.getLogger(__name__)


class ProfileStore(Protocol):
    async def get(self, user_id: str) -> Profile | None: ...

    async def insert(self, profile: Profile) -> None: ...

    async def update(self, user_id: str, fields: dict) -> None: ...


@dataclass(frozen=True)
class QuotaDecision:
    allowed: bool
    profile: Profile
    limit: int

    def as_usage(self) -> dict:
        used = self.profile.generations_used
        return {
            "user_id": self.profile.id,
            "generations_used": used,
            "limit": self.limit,
            "is_pro": self.profile.is_pro,
            "remaining": None if self.profile.is_pro else max(self.limit - used, 0),
        }


class QuotaGate:
    """Free-tier gate over the profiles table.

    The check and the increment are two separate round trips, so two
    concurrent requests from one user can both pass before either commits.
    """

    def __init__(self, store: ProfileStore, limit: int = FREE_GENERATION_LIMIT) -> None:
        self.store = store
        self.limit = limit

    async def check_and_reserve(self, user_id: str) -> QuotaDecision:
        profile = await self.store.get(user_id)
        if profile is None:
            profile = Profile(id=user_id)
            await self.store.insert(profile)
            logger.info("quota.profile_created user=%s", user_id)
            return QuotaDecision(allowed=True, profile=profile, limit=self.limit)

        allowed = profile.is_pro or profile.generations_used < self.limit
        if not allowed:
            logger.info("quota.blocked user=%s used=%d limit=%d", user_id, profile.generations_used, self.limit)
        return QuotaDecision(allowed=allowed, profile=profile, limit=self.limit)

    async def commit(self, user_id: str, profile: Profile) -> int:
        """Record one successful generation and return the new used count.

        A failed write is logged and swallowed: the document has already been
        produced and is still returned to the caller.
        """
        new_count = profile.generations_used + 1
        if profile.is_pro:
            return new_count
        try:
            await self.store.update(user_id, {"generations_used": new_count})
        except Exception as exc:
            logger.error(
                "quota.commit_failed user=%s used=%d type=%s detail=%s",
                user_id,
                new_count,
                exc.__class__.__name__,
                str(exc),
            )
        else:
            logger.info("quota.committed user=%s used=%d", user_id, new_count)
        return new_count

    async def usage(self, user_id: str) -> QuotaDecision:
        profile = await self.store.get(user_id) or Profile(id=user_id)
        allowed = profile.is_pro or profile.generations_used < self.limit
        return QuotaDecision(allowed=allowed, profile=profile, limit=self.limit)
