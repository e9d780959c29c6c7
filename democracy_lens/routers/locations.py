# democracy_lens/routers/locations.py
from typing import Any, Dict, Optional
import math

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlmodel import Session

from ..deps import get_session
from ..logging_setup import get_logger
from ..models import Article
from ..repository import articles_with_location, get_guest, reading_history

logger = get_logger("democracy_lens.routes.locations")

router = APIRouter(prefix="/article-locations", tags=["Map"])


def _pin(article: Article) -> Dict[str, Any]:
    return {
        "id": article.id,
        "title": article.title or "Untitled Article",
        "description": article.description or "",
        "source": article.source or "Unknown Source",
        "source_type": article.source_type or "center",
        "political_score": article.political_score or 0,
        "published_at": article.published_at,
        "url": article.url or "#",
        "location": article.location_name or "Unknown Location",
        "lat": article.location_lat,
        "lng": article.location_lng,
    }


def _has_coordinates(pin: Dict[str, Any]) -> bool:
    lat, lng = pin.get("lat"), pin.get("lng")
    return isinstance(lat, (int, float)) and isinstance(lng, (int, float)) and math.isfinite(lat) and math.isfinite(lng)


@router.get("")
def get_article_locations(
    guest_id: Optional[str] = None,
    user_only: bool = False,
    limit: int = Query(50, ge=1, le=500),
    s: Session = Depends(get_session),
):
    """Map pins: every located article, or only the ones this guest has read."""
    if user_only and not guest_id:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing guest_id parameter for user_only query")

    if user_only:
        guest = get_guest(s, guest_id)
        rows = reading_history(s, guest.id, limit=limit, with_location=True) if guest else []
        pins = [{**_pin(article), "read_at": entry.read_at} for entry, article in rows if article is not None]
    else:
        pins = [_pin(a) for a in articles_with_location(s, limit=limit)]

    pins = [p for p in pins if _has_coordinates(p)]
    logger.debug(f"Map pins: {len(pins)} (user_only={user_only})")
    return {"success": True, "data": pins}
