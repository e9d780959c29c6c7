# democracy_lens/routers/articles.py
from datetime import datetime
from typing import Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlmodel import Session

from ..analyzer import LLMAnalyzer
from ..deps import get_analyzer, get_session, require_article, require_guest
from ..logging_setup import get_logger
from ..repository import get_guest, search_articles, user_vote, vote_counts, vote_on_article
from ..schema import VoteIn
from ..text_extraction import fetch_article_body

logger = get_logger("democracy_lens.routes.articles")

router = APIRouter(prefix="/articles", tags=["Articles"])


@router.get("")
def list_articles(
    q: str = Query("", description="Matches title or description"),
    from_date: Optional[datetime] = None,
    sort_by: Literal["published_at", "relevancy", "popularity"] = "published_at",
    limit: int = Query(10, ge=1, le=100),
    offset: int = Query(0, ge=0),
    s: Session = Depends(get_session),
):
    """Search the cached articles, newest first."""
    articles = search_articles(s, query=q, from_date=from_date, limit=limit, offset=offset)
    logger.info(f"Article search q={q!r} sort_by={sort_by} -> {len(articles)}")
    return {"success": True, "data": articles}


@router.get("/{article_id}")
def get_article(article_id: int, s: Session = Depends(get_session)):
    return {"success": True, "data": require_article(s, article_id)}


@router.get("/{article_id}/summary")
def get_article_summary(
    article_id: int,
    regen: bool = Query(False, description="Ignore the stored summary and build a new one"),
    s: Session = Depends(get_session),
    analyzer: LLMAnalyzer = Depends(get_analyzer),
):
    """
    Short AI summary of the article, stored on first request.
    The body is fetched from the article URL when the cache only has the teaser.
    """
    article = require_article(s, article_id)
    if article.ai_summary and not regen:
        return {"success": True, "data": {"summary": article.ai_summary}}

    if not article.content and article.url:
        body = fetch_article_body(article.url)
        if body:
            article.content = body

    article.ai_summary = analyzer.summarize_article(article)
    s.add(article)
    s.commit()
    logger.info("SUMMARY_STORED", extra={"article_id": article_id})
    return {"success": True, "data": {"summary": article.ai_summary}}


@router.get("/{article_id}/votes")
def get_votes(article_id: int, guest_id: Optional[str] = None, s: Session = Depends(get_session)):
    require_article(s, article_id)
    data = {**vote_counts(s, article_id), "user_vote": None}
    guest = get_guest(s, guest_id) if guest_id else None
    if guest:
        vote = user_vote(s, article_id, guest.id)
        data["user_vote"] = vote.vote_type if vote else None
    return {"success": True, "data": data}


@router.post("/{article_id}/vote")
def post_vote(article_id: int, body: VoteIn, s: Session = Depends(get_session)):
    require_article(s, article_id)
    guest = require_guest(s, body.guest_id)
    vote_on_article(s, article_id, guest.id, body.vote_type)
    logger.info(f"Vote: article={article_id} guest={guest.guest_id} vote={body.vote_type}")
    return {"success": True, "data": {**vote_counts(s, article_id), "user_vote": body.vote_type}}
