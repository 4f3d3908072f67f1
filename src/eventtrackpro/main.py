#!/usr/bin/env python3
"""EventTrackPro - Event registration API with outbound webhooks"""

from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from sqlmodel import Session
from starlette.middleware.sessions import SessionMiddleware
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from eventtrackpro.config import config
from eventtrackpro.logging_config import get_logger, setup_logging
from eventtrackpro.models.database import engine, init_db
from eventtrackpro.routers.auth import router as auth_router
from eventtrackpro.routers.events import router as events_router
from eventtrackpro.routers.forms import router as forms_router
from eventtrackpro.routers.health import health
from eventtrackpro.routers.registrations import router as registrations_router
from eventtrackpro.routers.webhooks import router as webhooks_router
from eventtrackpro.services.user_service import UserService

# Configure logging (INFO -> stdout, WARNING/ERROR -> stderr)
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    init_db()
    with Session(engine) as session:
        UserService(session).ensure_admin(
            config["admin_username"], config["admin_password"]
        )
    yield


# Create FastAPI app
app = FastAPI(
    title="EventTrackPro",
    description="Event registration management with Zapier-compatible webhooks",
    version="1.0.0",
    lifespan=lifespan,
)

# Trust proxy headers so request.base_url reflects the public scheme and host
app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")

session_secret_key = config["session_secret_key"]
if not session_secret_key or len(session_secret_key) < 32:
    raise RuntimeError(
        "SESSION_SECRET_KEY must be set to a secure random string (>=32 characters)."
    )

app.add_middleware(
    SessionMiddleware,
    secret_key=session_secret_key,
    max_age=60 * 60 * 24,  # 1 day
    https_only=config["session_https_only"],
    same_site="lax",
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Render request validation failures as 400 with the offending fields"""
    return JSONResponse(
        status_code=400,
        content={
            "detail": "Validation error",
            "errors": jsonable_encoder(exc.errors()),
        },
    )


# Include routers
app.include_router(health)
app.include_router(auth_router)
app.include_router(events_router)
app.include_router(forms_router)
app.include_router(registrations_router)
app.include_router(webhooks_router)


if __name__ == "__main__":
    port = config.get("port")
    logger.info(f"Starting EventTrackPro on 0.0.0.0:{port}")
    logger.info(f"Health check available at /health")

    try:
        uvicorn.run(
            app, host="0.0.0.0", port=port, log_level=config["log_level"].lower()
        )
    except Exception as e:
        logger.error(f"Failed to start server: {e}")
        raise
