# democracy_lens/llm_parsing.py
"""
Interpret free-form model completions.

The model is not contractually bound to its output format: answers arrive
wrapped in markdown fences, with trailing prose, as partial JSON or with
numbers quoted as strings. Everything here degrades to a well-typed value;
no function in this module raises on bad input.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional
import json
import math
import re

from .heuristics import SCORE_MAX, SCORE_MIN, clamp_score
from .logging_setup import get_logger

logger = get_logger("democracy_lens.llm_parsing")

FALLBACK_COMMENT_SUMMARY = "This comment expresses a viewpoint on the topic."
UNKNOWN_LOCATION = "Unknown Location"
DEFAULT_CONFIDENCE = 0.5

_LEADING_FLOAT = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?")
_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")
_PLACE_IN_TITLE = re.compile(r"\b(?:in|at)\s+([A-Z][a-zA-Z]*(?:\s+[A-Z][a-zA-Z]*)*)")


@dataclass
class CommentAnalysis:
    summary: str
    political_score: float

    def as_dict(self) -> Dict[str, Any]:
        return {"summary": self.summary, "politicalScore": self.political_score}


@dataclass
class Coordinates:
    lat: float
    lng: float


@dataclass
class LocationResult:
    location: str
    coordinates: Optional[Coordinates]
    confidence: float

    def as_dict(self) -> Dict[str, Any]:
        coords = {"lat": self.coordinates.lat, "lng": self.coordinates.lng} if self.coordinates else None
        return {"location": self.location, "coordinates": coords, "confidence": self.confidence}


def fallback_comment_analysis() -> CommentAnalysis:
    return CommentAnalysis(summary=FALLBACK_COMMENT_SUMMARY, political_score=0.0)


def _to_float(value: Any) -> Optional[float]:
    """Numbers pass through, strings go through a leading-number parse; bools and NaN/inf are rejected."""
    if isinstance(value, bool) or value is None:
        return None
    try:
        if isinstance(value, (int, float)):
            f = float(value)
        elif isinstance(value, str):
            m = _LEADING_FLOAT.match(value.strip())
            if not m:
                return None
            f = float(m.group(0))
        else:
            return None
    except OverflowError:
        # JSON ints have no size limit
        return None
    return f if math.isfinite(f) else None


def parse_political_score(text: Optional[str]) -> Optional[float]:
    """A score in [-10, 10], or None when the caller must fall back."""
    score = _to_float((text or "").strip())
    if score is None or score < SCORE_MIN or score > SCORE_MAX:
        return None
    return score


def strip_code_fence(text: str) -> str:
    t = (text or "").strip()
    start = t.find("```")
    end = t.rfind("```")
    if start == -1 or start == end:
        return t
    inner = t[start + 3:end].strip()
    # drop a language hint such as ```json
    first_break = inner.find("\n")
    if first_break > 0 and not inner[:first_break].lstrip().startswith(("{", "[")):
        inner = inner[first_break:].strip()
    return inner


def load_json_object(text: Optional[str]) -> Optional[Dict[str, Any]]:
    cleaned = strip_code_fence(text or "")
    try:
        data = json.loads(cleaned)
    except (ValueError, RecursionError):
        m = _JSON_OBJECT.search(cleaned)
        if not m:
            return None
        try:
            data = json.loads(m.group(0))
        except (ValueError, RecursionError):
            return None
    return data if isinstance(data, dict) else None


def parse_comment_analysis(text: Optional[str]) -> CommentAnalysis:
    data = load_json_object(text)
    if data is None:
        logger.warning("COMMENT_ANALYSIS_UNPARSEABLE", extra={"raw": (text or "")[:200]})
        return fallback_comment_analysis()

    summary = data.get("summary")
    raw_score = data.get("politicalScore")
    if not isinstance(summary, str) or isinstance(raw_score, bool) or not isinstance(raw_score, (int, float)):
        logger.warning("COMMENT_ANALYSIS_INVALID_SHAPE", extra={"keys": sorted(data.keys())})
        return fallback_comment_analysis()
    score = _to_float(raw_score)
    if score is None:
        logger.warning("COMMENT_ANALYSIS_SCORE_UNUSABLE", extra={"score_type": type(raw_score).__name__})
        return fallback_comment_analysis()

    return CommentAnalysis(summary=summary, political_score=clamp_score(score))


def location_from_title(title: Optional[str]) -> Optional[str]:
    """Best guess at a place name in headlines like 'Floods in New Orleans ...'."""
    m = _PLACE_IN_TITLE.search(title or "")
    return m.group(1).strip() if m else None


def fallback_location(title: Optional[str], source: Optional[str]) -> LocationResult:
    name = location_from_title(title) or source or UNKNOWN_LOCATION
    return LocationResult(location=name, coordinates=None, confidence=0.0)


def _coerce_coordinates(raw: Any) -> Optional[Coordinates]:
    if not isinstance(raw, dict):
        return None
    lat = _to_float(raw.get("lat"))
    lng = _to_float(raw.get("lng"))
    if lat is None or lng is None:
        return None
    return Coordinates(lat=lat, lng=lng)


def parse_location(text: Optional[str], title: Optional[str] = None, source: Optional[str] = None) -> LocationResult:
    data = load_json_object(text)
    if data is None or not isinstance(data.get("location"), str):
        logger.warning("LOCATION_UNPARSEABLE", extra={"raw": (text or "")[:200]})
        return fallback_location(title, source)

    coordinates = _coerce_coordinates(data.get("coordinates"))

    confidence = _to_float(data.get("confidence"))
    if confidence is None:
        confidence = DEFAULT_CONFIDENCE if coordinates else 0.0
    confidence = max(0.0, min(1.0, confidence))

    return LocationResult(location=data["location"], coordinates=coordinates, confidence=confidence)
