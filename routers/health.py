# routers/health.py

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from core.logging_config import logger
from database import Database, get_database
from dependencies.auth import get_settings

router = APIRouter(
    prefix="/health",
    tags=["Health"],
)


# -----------------------------------------------------
# GET /health/db
# Runs SELECT 1 against the configured database
# No auth required
# -----------------------------------------------------
@router.get("/db", summary="Database health check")
def health_db(db: Database = Depends(get_database)):
    """
    Safe for external health monitors (no auth required).
    """
    try:
        with db.session() as session:
            session.execute(text("SELECT 1"))
        return {"service": "Database", "status": "ok"}

    except SQLAlchemyError as e:
        logger.error(f"Database health check failed: {e}")
        return {
            "service": "Database",
            "status": "error",
            "error": str(e),
        }


# -----------------------------------------------------
# GET /health/app
# Simple API health check for uptime monitors
# -----------------------------------------------------
@router.get("/app", summary="App health check")
def health_app(request: Request):
    return {
        "service": get_settings(request).PROJECT_NAME,
        "status": "ok",
    }
