"""Health check endpoint."""

from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.orm import Session

from src.db.database import get_db

router = APIRouter()


@router.get("/health")
def health_check(request: Request, db: Session = Depends(get_db)) -> dict[str, str]:
    """Return application, database and game status."""
    service = getattr(request.app.state, "guild_service", None)
    game = service.guild.status.value if service is not None else "not_started"
    try:
        db.execute(text("SELECT 1"))
        return {"status": "ok", "database": "connected", "game": game}
    except Exception:
        return {"status": "error", "database": "disconnected", "game": game}
