"""
Fallback political-leaning estimator.

Used whenever the LLM call fails or returns something unusable. Scores run
from -10 (left) to +10 (right). The source table and keyword lists are data:
they can be replaced by pointing BIAS_TABLE_PATH at a JSON file shaped like

    {"source_bias": {"Reuters": 0.3}, "left_keywords": [...],
     "right_keywords": [...], "keyword_step": 0.5, "jitter": 1.0}
"""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union
import json
import random

from .logging_setup import get_logger

logger = get_logger("democracy_lens.heuristics")

SCORE_MIN = -10.0
SCORE_MAX = 10.0
LEFT_THRESHOLD = -3.0
RIGHT_THRESHOLD = 3.0

DEFAULT_SOURCE_BIAS: Dict[str, float] = {
    "CNN": -6.5,
    "MSNBC": -7.8,
    "New York Times": -5.2,
    "Washington Post": -4.8,
    "NPR": -3.5,
    "BBC": -1.2,
    "Reuters": 0.3,
    "Associated Press": 0.1,
    "Wall Street Journal": 3.8,
    "Fox News": 7.2,
    "Breitbart": 8.5,
    "Daily Wire": 7.9,
}

DEFAULT_LEFT_KEYWORDS: List[str] = [
    "progressive", "equity", "climate change", "social justice", "diversity", "inclusion",
]
DEFAULT_RIGHT_KEYWORDS: List[str] = [
    "traditional", "freedom", "liberty", "tax cuts", "small government", "family values",
]


@dataclass
class BiasTable:
    source_bias: Dict[str, float] = field(default_factory=lambda: dict(DEFAULT_SOURCE_BIAS))
    left_keywords: List[str] = field(default_factory=lambda: list(DEFAULT_LEFT_KEYWORDS))
    right_keywords: List[str] = field(default_factory=lambda: list(DEFAULT_RIGHT_KEYWORDS))
    keyword_step: float = 0.5
    jitter: float = 1.0


DEFAULT_BIAS_TABLE = BiasTable()


def load_bias_table(path: Union[str, Path]) -> BiasTable:
    """Read a BiasTable from JSON; keys missing from the file keep their defaults."""
    raw = json.loads(Path(path).read_text(encoding="utf-8"))
    defaults = BiasTable()
    table = BiasTable(
        source_bias={str(k): float(v) for k, v in (raw.get("source_bias") or defaults.source_bias).items()},
        left_keywords=[str(k) for k in raw.get("left_keywords", defaults.left_keywords)],
        right_keywords=[str(k) for k in raw.get("right_keywords", defaults.right_keywords)],
        keyword_step=float(raw.get("keyword_step", defaults.keyword_step)),
        jitter=float(raw.get("jitter", defaults.jitter)),
    )
    logger.info(
        "BIAS_TABLE_LOADED",
        extra={"path": str(path), "sources": len(table.source_bias),
               "keywords": len(table.left_keywords) + len(table.right_keywords)},
    )
    return table


def configured_bias_table() -> BiasTable:
    """The table named by BIAS_TABLE_PATH, or the built-in one."""
    from .config import BIAS_TABLE_PATH

    if not BIAS_TABLE_PATH:
        return DEFAULT_BIAS_TABLE
    try:
        return load_bias_table(BIAS_TABLE_PATH)
    except (OSError, ValueError, TypeError, AttributeError) as e:
        logger.exception("BIAS_TABLE_LOAD_FAILED", extra={"path": BIAS_TABLE_PATH, "error": type(e).__name__})
        return DEFAULT_BIAS_TABLE


def clamp_score(score: float) -> float:
    return max(SCORE_MIN, min(SCORE_MAX, score))


def source_type_for(score: Optional[float]) -> str:
    if score is None:
        return "center"
    if score <= LEFT_THRESHOLD:
        return "left"
    if score >= RIGHT_THRESHOLD:
        return "right"
    return "center"


def heuristic_political_score(
    source: str,
    text: str,
    table: Optional[BiasTable] = None,
    rng: Optional[random.Random] = None,
) -> float:
    table = table or DEFAULT_BIAS_TABLE
    rng = rng or random

    score = table.source_bias.get(source, 0.0)
    # jitter so repeated scoring of one outlet is not perfectly uniform
    if table.jitter:
        score += rng.uniform(-table.jitter, table.jitter)

    t = (text or "").lower()
    # each keyword counts once, however often it occurs
    score -= table.keyword_step * sum(k.lower() in t for k in table.left_keywords)
    score += table.keyword_step * sum(k.lower() in t for k in table.right_keywords)

    return clamp_score(score)


def source_based_score(
    source: str,
    title: str,
    description: str,
    table: Optional[BiasTable] = None,
    rng: Optional[random.Random] = None,
) -> float:
    text = f"{title or ''} {description or ''}".lower()
    return heuristic_political_score(source, text, table=table, rng=rng)
