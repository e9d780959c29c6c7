# democracy_lens/routers/dashboard.py
from datetime import datetime
from typing import List

import pytz
from fastapi import APIRouter, Depends
from sqlmodel import Session

from ..config import TIMEZONE
from ..democracy import CHALLENGES, ReadingEntry, calculate_democracy_score, check_challenge_completion
from ..deps import get_session
from ..logging_setup import get_logger
from ..repository import get_guest, reading_entries
from ..streaks import reading_streak

logger = get_logger("democracy_lens.routes.dashboard")

router = APIRouter(prefix="/dashboard", tags=["Dashboard"])

# how much recent history each widget looks at
DEMOCRACY_HISTORY_LIMIT = 50
STREAK_HISTORY_LIMIT = 100


def _entries(s: Session, guest_id: str, limit: int) -> List[ReadingEntry]:
    guest = get_guest(s, guest_id)
    return reading_entries(s, guest.id, limit=limit) if guest else []


@router.get("/democracy-score")
def get_democracy_score(guest_id: str, s: Session = Depends(get_session)):
    result = calculate_democracy_score(_entries(s, guest_id, DEMOCRACY_HISTORY_LIMIT))
    return {"success": True, "data": result.as_dict()}


@router.get("/streaks")
def get_streaks(guest_id: str, s: Session = Depends(get_session)):
    tz = pytz.timezone(TIMEZONE)
    result = reading_streak(_entries(s, guest_id, STREAK_HISTORY_LIMIT), tz=tz)
    return {"success": True, "data": result.as_dict()}


@router.get("/challenges")
def get_challenges(guest_id: str, s: Session = Depends(get_session)):
    tz = pytz.timezone(TIMEZONE)
    today = datetime.now(tz).date()
    entries = _entries(s, guest_id, STREAK_HISTORY_LIMIT)
    data = [
        {**c, "completed": check_challenge_completion(c["id"], entries, today=today, tz=tz)}
        for c in CHALLENGES
    ]
    return {"success": True, "data": data}
