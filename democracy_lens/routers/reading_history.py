# democracy_lens/routers/reading_history.py
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, status
from sqlmodel import Session

from ..analyzer import LLMAnalyzer
from ..deps import get_analyzer, get_session, require_article, require_guest
from ..logging_setup import get_logger
from ..repository import clear_history, delete_history_entry, get_guest, reading_history, track_read
from ..schema import ReadIn
from ..store import Store, get_store
from ..tasks import locate_article_task

logger = get_logger("democracy_lens.routes.reading_history")

router = APIRouter(prefix="/reading-history", tags=["Reading history"])


@router.post("")
def post_read(
    body: ReadIn,
    bg: BackgroundTasks,
    s: Session = Depends(get_session),
    store: Store = Depends(get_store),
    analyzer: LLMAnalyzer = Depends(get_analyzer),
):
    guest = require_guest(s, body.guest_id)
    article = require_article(s, body.article_id)
    entry = track_read(s, guest.id, article.id)
    logger.info("READ_TRACKED", extra={"article_id": article.id, "history_id": entry.id})

    if article.location_lat is None or article.location_lng is None:
        bg.add_task(locate_article_task, store, analyzer, article.id)
    return {"success": True}


@router.get("")
def get_history(
    guest_id: str,
    limit: int = Query(5, ge=1, le=200),
    offset: int = Query(0, ge=0),
    with_location: bool = False,
    s: Session = Depends(get_session),
):
    guest = get_guest(s, guest_id)
    if guest is None:
        return {"success": True, "data": []}
    rows = reading_history(s, guest.id, limit=limit, offset=offset, with_location=with_location)
    data = [{**entry.model_dump(), "article": article} for entry, article in rows]
    return {"success": True, "data": data}


@router.delete("")
def delete_history(guest_id: str, s: Session = Depends(get_session)):
    guest = require_guest(s, guest_id)
    clear_history(s, guest.id)
    logger.info("HISTORY_CLEARED", extra={"guest_id": guest_id})
    return {"success": True}


@router.delete("/{entry_id}")
def delete_history_item(entry_id: int, guest_id: str, s: Session = Depends(get_session)):
    guest = require_guest(s, guest_id)
    if not delete_history_entry(s, entry_id, guest.id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="History entry not found")
    return {"success": True}
