from fastapi import APIRouter, Depends, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from ..logging_setup import get_logger
from ..store import Store, get_store

logger = get_logger("democracy_lens.routes.health")

router = APIRouter(tags=["Health"])


@router.get("/health")
def health():
    return {"status": "ok"}


@router.get("/health/details")
def health_details(request: Request, store: Store = Depends(get_store)):
    """Database reachability, analyzer mode and scheduler state."""
    try:
        with store.session() as s:
            s.connection().execute(text("SELECT 1"))
        database = "ok"
    except SQLAlchemyError as e:
        logger.exception("HEALTH_DB_FAILED", extra={"handled": True, "error": type(e).__name__})
        database = "unavailable"

    scheduler = request.app.state.scheduler
    return {
        "status": "ok" if database == "ok" else "degraded",
        "database": database,
        "analyzer": "openai" if request.app.state.analyzer.enabled else "heuristic",
        "scheduler": "running" if scheduler is not None and scheduler.running else "stopped",
    }


@router.get("/")
def read_root():
    return {"status": "ok", "message": "Democracy Lens API. See /docs."}
