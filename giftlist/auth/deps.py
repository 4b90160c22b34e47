from __future__ import annotations

from fastapi import Request
from starlette import status

from giftlist.auth.gate import GateConfig, is_authenticated
from giftlist.config import get_settings
from giftlist.utils.errors import AppError


def get_gate_config() -> GateConfig:
    return GateConfig.from_settings(get_settings())


async def require_backoffice(request: Request) -> None:
    """Guard for backoffice JSON endpoints; pages are covered by the middleware."""
    if not await is_authenticated(request, get_gate_config()):
        raise AppError("unauthorized", "Authentication required", status.HTTP_401_UNAUTHORIZED)
