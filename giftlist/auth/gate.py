"""Single shared-password gate in front of the backoffice.

This is a coarse single-tenant gate: one password, one cookie, no user
accounts. The cookie carries an opaque session id stored in Redis.
"""
from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass
from typing import Callable, Optional

from fastapi import Request, Response
from fastapi.responses import RedirectResponse
from starlette import status
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from giftlist.auth.sessions import SessionStore
from giftlist.config import Settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GateConfig:
    cookie_name: str
    secret_source: Callable[[], str]
    ttl_seconds: int
    protected_prefix: str = "/backoffice"
    login_path: str = "/backoffice/login"
    home_path: str = "/backoffice"
    cookie_secure: bool = True
    cookie_samesite: str = "lax"
    cookie_domain: Optional[str] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "GateConfig":
        return cls(
            cookie_name=settings.backoffice_cookie_name,
            secret_source=lambda: settings.backoffice_password,
            ttl_seconds=settings.backoffice_session_ttl_seconds,
            cookie_secure=settings.session_cookie_secure,
            cookie_samesite=settings.session_cookie_samesite,
            cookie_domain=settings.session_cookie_domain,
        )

    def is_protected(self, path: str) -> bool:
        return path == self.protected_prefix or path.startswith(self.protected_prefix + "/")


def verify_password(candidate: Optional[str], config: GateConfig) -> bool:
    if not candidate:
        return False
    return hmac.compare_digest(candidate.encode("utf-8"), config.secret_source().encode("utf-8"))


def build_set_cookie_kwargs(config: GateConfig) -> dict:
    return {
        "httponly": True,
        "secure": config.cookie_secure,
        "samesite": config.cookie_samesite.lower(),
        "domain": config.cookie_domain,
        "path": "/",
        "max_age": config.ttl_seconds,
    }


def set_session_cookie(response: Response, session_id: str, config: GateConfig) -> None:
    response.set_cookie(key=config.cookie_name, value=session_id, **build_set_cookie_kwargs(config))


def clear_session_cookie(response: Response, config: GateConfig) -> None:
    response.delete_cookie(key=config.cookie_name, domain=config.cookie_domain, path="/")


def session_store_for(request: Request, config: GateConfig) -> SessionStore:
    return SessionStore(request.app.state.redis, config.ttl_seconds)


async def is_authenticated(request: Request, config: GateConfig) -> bool:
    session_id = request.cookies.get(config.cookie_name)
    if not session_id:
        return False
    return await session_store_for(request, config).is_valid(session_id)


class BackofficeGateMiddleware(BaseHTTPMiddleware):
    """Redirects anonymous visitors to the login page and signed-in ones away from it."""

    def __init__(self, app: ASGIApp, config: GateConfig):
        super().__init__(app)
        self.config = config

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        path = request.url.path
        if not self.config.is_protected(path):
            return await call_next(request)

        authenticated = await is_authenticated(request, self.config)
        on_login_page = path == self.config.login_path

        if not authenticated and not on_login_page:
            return RedirectResponse(self.config.login_path, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
        if authenticated and on_login_page:
            return RedirectResponse(self.config.home_path, status_code=status.HTTP_307_TEMPORARY_REDIRECT)
        return await call_next(request)
