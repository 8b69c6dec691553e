import json
import logging
from typing import Any

import httpx

from content_forge.config import Settings
from content_forge.errors import ConfigError, StoreError
from content_forge.models import Profile

logger = logging.getLogger(__name__)
PAYLOAD_LOG_LIMIT = 1000
NOT_FOUND_CODE = "PGRST116"
SINGLE_OBJECT = "application/vnd.pgrst.object+json"
DUPLICATE_KEY_CODE = "23505"


class SupabaseProfileStore:
    """PostgREST client for the `profiles` table, authenticated with the service-role key."""

    table = "profiles"

    def __init__(self, settings: Settings, transport: httpx.AsyncBaseTransport | None = None) -> None:
        self.settings = settings
        self.transport = transport

    async def get(self, user_id: str) -> Profile | None:
        """Return the profile row, or None when PostgREST reports zero rows."""
        logger.info("store.request op=get table=%s id=%s", self.table, user_id)
        response = await self._request(
            "get",
            "GET",
            params={"select": "id,generations_used,is_pro", "id": f"eq.{user_id}"},
            headers={"Accept": SINGLE_OBJECT},
        )
        if response.status_code == httpx.codes.NOT_ACCEPTABLE and self._error_code(response) == NOT_FOUND_CODE:
            logger.info("store.response op=get id=%s found=false", user_id)
            return None
        self._raise_for_status("get", response)
        profile = Profile.from_row(user_id, response.json())
        logger.info(
            "store.response op=get id=%s used=%d is_pro=%s",
            user_id,
            profile.generations_used,
            profile.is_pro,
        )
        return profile

    async def insert(self, profile: Profile) -> None:
        row = {"id": profile.id, "generations_used": profile.generations_used, "is_pro": profile.is_pro}
        logger.info("store.request op=insert payload=%s", self._clip(self._to_json(row), PAYLOAD_LOG_LIMIT))
        response = await self._request(
            "insert",
            "POST",
            json=[row],
            headers={"Prefer": "resolution=ignore-duplicates,return=minimal"},
        )
        if response.status_code == httpx.codes.CONFLICT and self._error_code(response) == DUPLICATE_KEY_CODE:
            logger.info("store.response op=insert id=%s duplicate=true", profile.id)
            return
        self._raise_for_status("insert", response)

    async def update(self, user_id: str, fields: dict[str, Any]) -> None:
        logger.info(
            "store.request op=update id=%s payload=%s",
            user_id,
            self._clip(self._to_json(fields), PAYLOAD_LOG_LIMIT),
        )
        response = await self._request(
            "update",
            "PATCH",
            params={"id": f"eq.{user_id}"},
            json=fields,
            headers={"Prefer": "return=minimal"},
        )
        self._raise_for_status("update", response)

    async def _request(self, op: str, method: str, **kwargs: Any) -> httpx.Response:
        async with self._client() as client:
            try:
                return await client.request(method, self.table, **kwargs)
            except httpx.HTTPError as exc:
                logger.error("store.error op=%s type=%s detail=%s", op, exc.__class__.__name__, str(exc))
                raise StoreError(f"Profile store {op} failed: {exc}") from exc

    def _client(self) -> httpx.AsyncClient:
        if not self.settings.supabase_url or not self.settings.supabase_service_role_key:
            raise ConfigError("Profile store is not configured. Check SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY.")
        key = self.settings.supabase_service_role_key
        return httpx.AsyncClient(
            base_url=f"{self.settings.supabase_url}/rest/v1/",
            headers={"apikey": key, "Authorization": f"Bearer {key}"},
            timeout=self.settings.store_timeout_seconds,
            transport=self.transport,
        )

    def _raise_for_status(self, op: str, response: httpx.Response) -> None:
        if response.is_success:
            return
        code = self._error_code(response)
        logger.error(
            "store.error op=%s status_code=%d code=%s body=%s",
            op,
            response.status_code,
            code,
            self._clip(response.text, PAYLOAD_LOG_LIMIT),
        )
        raise StoreError(
            f"Profile store {op} failed with status {response.status_code}",
            status_code=response.status_code,
            code=code,
        )

    @staticmethod
    def _error_code(response: httpx.Response) -> str | None:
        try:
            payload = response.json()
        except ValueError:
            return None
        if isinstance(payload, dict) and payload.get("code"):
            return str(payload["code"])
        return None

    @staticmethod
    def _clip(text: str, limit: int) -> str:
        normalized = " ".join(text.split()).strip()
        if len(normalized) <= limit:
            return normalized
        return f"{normalized[:limit]}...(truncated)"

    @staticmethod
    def _to_json(payload: Any) -> str:
        try:
            return json.dumps(payload, ensure_ascii=False, separators=(",", ":"))
        except Exception:
            return str(payload)
