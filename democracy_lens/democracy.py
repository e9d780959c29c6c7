"""
Democracy score and daily challenges, derived from a user's reading history.

Every dimension starts at 50 and only ever gains points; media freedom and
deliberation are capped at 100. Pure functions of their input.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence
import math

from .models import Article

BASE = 50
CENTER_BAND = 3.0

WEIGHTS = {
    "media_freedom": 0.30,
    "deliberation": 0.30,
    "electoral_process": 0.15,
    "civil_liberties": 0.15,
    "rule_of_law": 0.10,
}


@dataclass(frozen=True)
class ReadingEntry:
    read_at: datetime
    article: Optional[Article] = None


@dataclass
class DemocracyDimensions:
    media_freedom: float = BASE
    electoral_process: float = BASE
    civil_liberties: float = BASE
    rule_of_law: float = BASE
    deliberation: float = BASE

    def as_dict(self) -> Dict[str, float]:
        return {
            "mediaFreedom": self.media_freedom,
            "electoralProcess": self.electoral_process,
            "civilLiberties": self.civil_liberties,
            "ruleOfLaw": self.rule_of_law,
            "deliberation": self.deliberation,
        }


@dataclass
class DemocracyScoreResult:
    score: int
    dimensions: DemocracyDimensions

    def as_dict(self) -> Dict[str, Any]:
        return {"score": self.score, "dimensions": self.dimensions.as_dict()}


def round_half_up(x: float) -> int:
    return int(math.floor(x + 0.5))


def _articles(history: Iterable[ReadingEntry]) -> List[Article]:
    return [entry.article for entry in history or [] if entry.article is not None]


def _deliberation(scores: Sequence[float]) -> float:
    if not scores:
        return BASE
    left = sum(1 for s in scores if s < 0)
    right = sum(1 for s in scores if s > 0)
    # overlaps with left/right on purpose: mild leans count as centre too
    center = sum(1 for s in scores if -CENTER_BAND <= s <= CENTER_BAND)
    hi, lo = max(left, right), min(left, right)
    balance = lo / hi if hi > 0 else 0.0
    return min(100, BASE + balance * 30 + center * 2)


def calculate_democracy_score(history: Iterable[ReadingEntry]) -> DemocracyScoreResult:
    articles = _articles(history)
    if not articles:
        return DemocracyScoreResult(score=BASE, dimensions=DemocracyDimensions())

    total = len(articles)
    sources = len({a.source for a in articles})
    scores = [a.political_score for a in articles if a.political_score is not None]

    dims = DemocracyDimensions(
        media_freedom=min(100, BASE + sources * 10),
        deliberation=_deliberation(scores),
        electoral_process=BASE + (15 if total > 5 else 0) + (15 if sources > 3 else 0),
        civil_liberties=BASE + (25 if total > 3 else 0),
        rule_of_law=BASE + (20 if total > 4 else 0),
    )
    overall = round_half_up(sum(getattr(dims, name) * w for name, w in WEIGHTS.items()))
    return DemocracyScoreResult(score=overall, dimensions=dims)


# ---------- Daily challenges ----------

CHALLENGES: List[Dict[str, Any]] = [
    {"id": 1, "title": "Explore Opposing Viewpoints",
     "description": "Read at least one left-leaning and one right-leaning article today."},
    {"id": 2, "title": "Discover New Sources",
     "description": "Read articles from three different sources today."},
    {"id": 3, "title": "Fact Check Challenge",
     "description": "Read three articles today."},
]


def _as_date(read_at: datetime, tz) -> date:
    if read_at.tzinfo is None:
        read_at = read_at.replace(tzinfo=timezone.utc)
    return read_at.astimezone(tz).date()


def check_challenge_completion(
    challenge_id: int,
    history: Iterable[ReadingEntry],
    today: Optional[date] = None,
    tz=None,
) -> bool:
    history = list(history or [])
    if not history:
        return False
    tz = tz or timezone.utc
    today = today or datetime.now(tz).date()

    todays = [e.article for e in history if e.article is not None and _as_date(e.read_at, tz) == today]

    if challenge_id == 1:
        has_left = any(a.political_score is not None and a.political_score < 0 for a in todays)
        has_right = any(a.political_score is not None and a.political_score > 0 for a in todays)
        return has_left and has_right
    if challenge_id == 2:
        return len({a.source for a in todays}) >= 3
    if challenge_id == 3:
        return len(todays) >= 3
    return False
