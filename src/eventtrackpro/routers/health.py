from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlmodel import Session, select, text

from eventtrackpro.config import config
from eventtrackpro.models.database import get_db
from eventtrackpro.models.webhook import Webhook

health = APIRouter(tags=["Health"])


def _base_status() -> dict:
    return {
        "status": "healthy",
        "service": "eventtrackpro",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": config.get("environment") or "development",
    }


@health.get("/health")
async def health_check():
    """Liveness check"""
    return _base_status()


@health.get("/health/detailed")
async def detailed_health_check(db: Session = Depends(get_db)):
    """Readiness check covering the database, the webhook registry and config"""
    health_status = {**_base_status(), "checks": {}}
    checks = health_status["checks"]

    try:
        result = db.exec(text("SELECT 1")).first()
        checks["database"] = "healthy" if result else "unhealthy"
        statement = select(Webhook.id).where(Webhook.active == True)  # noqa: E712
        checks["active_webhooks"] = len(db.exec(statement).all())
    except Exception as e:
        checks["database"] = f"unhealthy: {str(e)}"
        health_status["status"] = "unhealthy"

    if not config.get("session_secret_key"):
        checks["environment"] = "missing: SESSION_SECRET_KEY"
        health_status["status"] = "unhealthy"
    else:
        checks["environment"] = "healthy"

    if health_status["status"] == "unhealthy":
        raise HTTPException(status_code=503, detail=health_status)

    return health_status
