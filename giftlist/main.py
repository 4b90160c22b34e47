from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from giftlist import __version__
from giftlist.auth.gate import BackofficeGateMiddleware, GateConfig
from giftlist.config import get_settings
from giftlist.pages.backoffice import router as backoffice_pages_router
from giftlist.pages.routes import router as pages_router
from giftlist.redis_client import close_redis, init_redis
from giftlist.routes.auth import router as auth_router
from giftlist.routes.backoffice import router as backoffice_router
from giftlist.routes.public import router as public_router
from giftlist.routes.scrape import router as scrape_router
from giftlist.utils.errors import install_exception_handlers

settings = get_settings()

logging.basicConfig(
    level=getattr(logging, settings.log_level.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.redis = await init_redis()
    logger.info(f"Giftlist {__version__} starting (env={settings.env})")
    try:
        yield
    finally:
        await close_redis(app)


app = FastAPI(title="Giftlist", version=__version__, debug=settings.debug, lifespan=lifespan)

app.add_middleware(BackofficeGateMiddleware, config=GateConfig.from_settings(settings))

install_exception_handlers(app)
app.include_router(auth_router)
app.include_router(scrape_router)
app.include_router(backoffice_router)
app.include_router(public_router)
app.include_router(pages_router)
app.include_router(backoffice_pages_router)


@app.get("/health")
async def health() -> dict:
    return {"status": "ok"}
