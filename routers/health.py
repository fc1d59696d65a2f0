# routers/health.py

from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlmodel import Session

from core.logging_config import logger
from database import get_session

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


# -----------------------------------------------------
# GET /health/db
# Checks the database connection
# No auth required
# -----------------------------------------------------
@router.get("/db", summary="Database health check")
def health_db(session: Session = Depends(get_session)):
    """
    Runs a trivial query against the configured database.
    Safe for external health monitors (no auth required).
    """
    try:
        session.connection().execute(text("SELECT 1"))
        return {"service": "database", "status": "ok"}

    except Exception as e:
        logger.error(f"Database health check failed: {e}")
        return {
            "service": "database",
            "status": "error",
            "error": str(e),
        }


# -----------------------------------------------------
# GET /health/app
# -----------------------------------------------------
@router.get("/app", summary="App health check")
async def health_app():
    """
    Lightweight health check for uptime monitors.
    """
    return {
        "service": "MapShare API",
        "status": "ok",
    }
