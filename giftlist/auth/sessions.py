from __future__ import annotations

import json
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from redis.asyncio import Redis

SESSION_KEY_PREFIX = "backoffice_sessions:"


def generate_session_id() -> str:
    return uuid.uuid4().hex


class SessionStore:
    """Backoffice sessions kept in Redis, expiring with the cookie."""

    def __init__(self, redis: Redis, ttl_seconds: int):
        self.redis = redis
        self.ttl_seconds = ttl_seconds

    @staticmethod
    def _key(session_id: str) -> str:
        return f"{SESSION_KEY_PREFIX}{session_id}"

    async def open(self, payload: Optional[Dict[str, Any]] = None) -> str:
        session_id = generate_session_id()
        data = {"created_at": datetime.now(timezone.utc).isoformat(), **(payload or {})}
        await self.redis.set(self._key(session_id), json.dumps(data), ex=self.ttl_seconds)
        return session_id

    async def get(self, session_id: Optional[str]) -> Optional[Dict[str, Any]]:
        if not session_id:
            return None
        raw = await self.redis.get(self._key(session_id))
        if not raw:
            return None
        return json.loads(raw)

    async def is_valid(self, session_id: Optional[str]) -> bool:
        return await self.get(session_id) is not None

    async def close(self, session_id: Optional[str]) -> None:
        if session_id:
            await self.redis.delete(self._key(session_id))
