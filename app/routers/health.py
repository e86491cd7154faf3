# app/routers/health.py
"""
Health check for load balancers and the ops dashboard.
Reports database reachability, how mail is delivered, and whether the
outbound status-change webhook is configured.
"""

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from app.config import settings
from app.database import get_db
from app.utils.logger import get_logger
from app.utils.time import utc_now

router = APIRouter()
logger = get_logger(__name__)


def _database_state(db: Session) -> str:
    try:
        db.execute(text("SELECT 1"))
    except Exception as e:
        # Detail stays in the log; callers only see the state
        logger.error(f"Health check: database unreachable: {e}")
        return "error"
    return "ok"


@router.get("/health", summary="Service health")
def health_check(db: Session = Depends(get_db)):
    database = _database_state(db)
    return {
        "status": "ok" if database == "ok" else "degraded",
        "timestamp": utc_now().isoformat(),
        "database": database,
        "mail": "smtp" if settings.mail_enabled else "mock",
        "status_webhook": "configured" if settings.NOTIFICATION_WEBHOOK_URL else "disabled",
    }
