# democracy_lens/routers/news.py
from typing import List

import requests
from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..analyzer import LLMAnalyzer
from ..deps import get_analyzer
from ..ingest import ingest_items, refresh_feeds
from ..logging_setup import get_logger
from ..repository import vote_counts
from ..sources import BaseProvider, NYTimesProvider, RSSProvider
from ..store import Store, get_store

logger = get_logger("democracy_lens.routes.news")

router = APIRouter(prefix="/news", tags=["News"])


def get_nyt_provider() -> NYTimesProvider:
    return NYTimesProvider()


def get_feed_providers() -> List[BaseProvider]:
    return [RSSProvider()]


@router.get("")
def get_news(
    q: str = Query("", description="Article Search query; empty means Top Stories"),
    section: str = Query("home", description="Top Stories section"),
    page: int = Query(1, ge=1),
    store: Store = Depends(get_store),
    analyzer: LLMAnalyzer = Depends(get_analyzer),
    provider: NYTimesProvider = Depends(get_nyt_provider),
):
    """
    New York Times stories, cached and scored. Articles seen before keep their
    stored score; new or unscored ones go through the analyzer.
    """
    try:
        res = provider.fetch(query=q, section=section, page=page)
    except (requests.RequestException, RuntimeError, ValueError) as e:
        logger.exception("NYT_FETCH_FAILED", extra={"handled": True, "q": q, "section": section, "error": type(e).__name__})
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Failed to fetch NYT news")

    articles = ingest_items(store, analyzer, res.items)
    with store.session() as s:
        data = [{**a.model_dump(), "votes": vote_counts(s, a.id), "user_vote": None} for a in articles]
    return {"success": True, "data": data, "source": "nyt_api"}


@router.post("/refresh")
def refresh_now(
    store: Store = Depends(get_store),
    analyzer: LLMAnalyzer = Depends(get_analyzer),
    providers: List[BaseProvider] = Depends(get_feed_providers),
):
    """Run one feed refresh right now (the scheduler runs the same job)."""
    logger.info("Manual feed refresh invoked")
    return {"success": True, "data": refresh_feeds(store, analyzer, providers=providers)}
