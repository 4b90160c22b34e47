"""Redis connection held on ``app.state`` for backoffice sessions."""
from __future__ import annotations

from typing import Optional

from fastapi import FastAPI, Request
from redis.asyncio import Redis, from_url

from giftlist.config import get_settings


async def init_redis(url: Optional[str] = None) -> Redis:
    return from_url(url or get_settings().redis_url, decode_responses=True)


async def close_redis(app: FastAPI) -> None:
    redis: Optional[Redis] = getattr(app.state, "redis", None)
    if redis is not None:
        await redis.aclose()


async def get_redis(request: Request) -> Redis:
    redis: Redis = request.app.state.redis
    return redis
