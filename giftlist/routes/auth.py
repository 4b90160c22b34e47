from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from redis.asyncio import Redis
from starlette import status

from giftlist.auth.deps import get_gate_config
from giftlist.auth.gate import GateConfig, clear_session_cookie, set_session_cookie, verify_password
from giftlist.auth.sessions import SessionStore
from giftlist.redis_client import get_redis
from giftlist.schemas.scrape import LoginRequest

router = APIRouter(prefix="/api/auth", tags=["auth"])
logger = logging.getLogger(__name__)


@router.post("/login", summary="Connexion au backoffice")
async def login(
    data: LoginRequest,
    request: Request,
    redis: Redis = Depends(get_redis),
    config: GateConfig = Depends(get_gate_config),
):
    if not verify_password(data.password, config):
        logger.warning(f"Failed backoffice login from {request.client.host if request.client else 'unknown'}")
        return JSONResponse({"error": "Invalid password"}, status_code=status.HTTP_401_UNAUTHORIZED)

    session_id = await SessionStore(redis, config.ttl_seconds).open()
    response = JSONResponse({"success": True})
    set_session_cookie(response, session_id, config)
    return response


@router.post("/logout", summary="Déconnexion du backoffice")
async def logout(
    request: Request,
    redis: Redis = Depends(get_redis),
    config: GateConfig = Depends(get_gate_config),
):
    await SessionStore(redis, config.ttl_seconds).close(request.cookies.get(config.cookie_name))
    response = JSONResponse({"success": True})
    clear_session_cookie(response, config)
    return response
