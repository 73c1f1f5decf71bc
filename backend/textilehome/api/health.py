from fastapi import APIRouter, Request
from sqlalchemy import text

from textilehome.db import engine

router = APIRouter()


@router.get("/health", tags=["health"])
def health(request: Request):
    db_ok = False
    try:
        with engine.connect() as conn:
            conn.execute(text("SELECT 1"))
            db_ok = True
    except Exception:
        db_ok = False

    scheduler = getattr(request.app.state, "scheduler", None)
    scheduler_ok = bool(scheduler and scheduler.running)

    return {
        "status": "ok" if db_ok and scheduler_ok else "degraded",
        "db": db_ok,
        "scheduler": scheduler_ok,
    }
