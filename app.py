import asyncio
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

import config
from bot_instance import close_bot
from db import create_db_and_tables
from middleware.rate_limit import close_redis
from processing.processing import processing_router
from services.notification import NotificationService
from utils.error_handler import register_exception_handlers
from web.api_router import admin_router, api_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan event handler for startup and shutdown."""
    # Startup
    await create_db_and_tables()
    logging.info("[Startup] Database ready")

    if config.STAFF_TELEGRAM_ALERTS_ENABLED:
        await NotificationService.send_to_staff("Restaurant backend is running")

    yield

    # Shutdown
    logging.warning('Shutting down..')

    # Let queued notifications finish before the bot session goes away
    pending = list(NotificationService._background_tasks)
    if pending:
        logging.info(f"[Shutdown] Waiting for {len(pending)} notification task(s)")
        await asyncio.gather(*pending, return_exceptions=True)

    await close_redis()
    await close_bot()
    logging.warning('Bye!')


app = FastAPI(lifespan=lifespan, title="Restaurant Ordering API")

if config.CORS_ALLOWED_ORIGINS:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ALLOWED_ORIGINS,
        allow_credentials=False,
        allow_methods=["GET", "POST", "PATCH"],
        allow_headers=["Content-Type", "X-User-Id", "X-Staff-Token"],
    )
    logging.info(f"[Startup] CORS middleware enabled for origins: {config.CORS_ALLOWED_ORIGINS}")
else:
    logging.debug("[Startup] CORS middleware disabled (no allowed origins configured)")

register_exception_handlers(app)

app.include_router(processing_router)
app.include_router(api_router)
app.include_router(admin_router)


# Health check endpoint (for Docker container monitoring)
@app.get("/health")
async def health_check():
    """Health check endpoint for Docker healthcheck."""
    return {"status": "healthy"}


def main() -> None:
    uvicorn.run(app, host=config.WEBAPP_HOST, port=config.WEBAPP_PORT)
