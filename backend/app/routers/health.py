from fastapi import APIRouter

from app.core.config import settings
from app.services.telegram import telegram_healthcheck

router = APIRouter(tags=["health"])


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/health/live")
def live():
    return {"status": "live"}


@router.get("/health/telegram")
def telegram():
    ok, reason = telegram_healthcheck()
    return {"ok": ok, "reason": reason, "configured": settings.telegram_enabled}
