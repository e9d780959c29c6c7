# democracy_lens/ingest.py
from typing import Any, Dict, Iterable, List, Optional
import time
import uuid
from collections import Counter

from sqlalchemy.exc import IntegrityError

from .analyzer import LLMAnalyzer
from .heuristics import source_type_for
from .logging_setup import get_logger
from .models import Article
from .repository import get_article_by_external_id, unscored_articles
from .sources import BaseProvider, RSSProvider, external_id_for
from .store import Store

logger = get_logger("democracy_lens.ingest")

BACKFILL_BATCH = 25


def score_article(analyzer: LLMAnalyzer, article: Article) -> Article:
    """Set political_score and keep source_type consistent with it."""
    article.political_score = analyzer.political_leaning(article)
    article.source_type = source_type_for(article.political_score)
    return article


def ingest_items(store: Store, analyzer: LLMAnalyzer, items: Iterable[Dict[str, Any]]) -> List[Article]:
    """
    Upsert provider items into the article cache:
    - new articles are scored and inserted
    - known articles without a score are scored and updated
    - known scored articles are returned untouched
    A failure on one item is logged and skipped.
    """
    run_id = uuid.uuid4().hex[:8]
    t0 = time.perf_counter()
    out: List[Article] = []
    counts = Counter()

    with store.session() as s:
        for it in items:
            url = it.get("url") or ""
            try:
                external_id = it.get("external_id") or external_id_for(url)
                article = get_article_by_external_id(s, external_id)
                if article is None:
                    article = Article(
                        external_id=external_id,
                        title=it.get("title") or "",
                        description=it.get("description") or "",
                        content=it.get("content"),
                        source=it.get("source") or "",
                        published_at=it.get("published_at"),
                        url=url,
                        image_url=it.get("image_url"),
                    )
                    counts["inserted"] += 1
                elif article.political_score is not None:
                    counts["cached"] += 1
                    out.append(article)
                    continue
                else:
                    counts["rescored"] += 1

                score_article(analyzer, article)
                s.add(article)
                s.commit()
                s.refresh(article)
                out.append(article)
            except IntegrityError:
                # another ingestion run (scheduler or /news) inserted this URL first
                s.rollback()
                counts["inserted"] -= 1
                existing = get_article_by_external_id(s, external_id)
                if existing is None:
                    counts["errors"] += 1
                    logger.exception("INGEST_ITEM_FAILED", extra={"run_id": run_id, "handled": True, "url": url})
                    continue
                counts["cached"] += 1
                logger.info("INGEST_RACE_LOST", extra={"run_id": run_id, "url": url, "article_id": existing.id})
                out.append(existing)
            except Exception as e:
                s.rollback()
                counts["errors"] += 1
                logger.exception(
                    "INGEST_ITEM_FAILED",
                    extra={"run_id": run_id, "handled": True, "url": url, "error": type(e).__name__},
                )

    logger.info(
        "INGEST_DONE",
        extra={
            "run_id": run_id,
            "count": len(out),
            "metrics": dict(counts),
            "elapsed_ms": round((time.perf_counter() - t0) * 1000),
        },
    )
    return out


def backfill_scores(store: Store, analyzer: LLMAnalyzer, limit: int = BACKFILL_BATCH) -> int:
    """Score cached articles that never got a political score."""
    done = 0
    with store.session() as s:
        for article in unscored_articles(s, limit=limit):
            score_article(analyzer, article)
            s.add(article)
            done += 1
        s.commit()
    if done:
        logger.info("BACKFILL_DONE", extra={"scored": done})
    return done


def refresh_feeds(
    store: Store,
    analyzer: LLMAnalyzer,
    providers: Optional[List[BaseProvider]] = None,
    max_items_per_provider: int = 20,
) -> Dict[str, Any]:
    """Scheduled job: pull every provider, ingest, then backfill missing scores."""
    providers = providers if providers is not None else [RSSProvider()]
    t0 = time.perf_counter()
    fetched = 0
    ingested = 0
    per_provider: Dict[str, int] = {}

    for p in providers:
        try:
            res = p.fetch(max_items=max_items_per_provider)
        except Exception as e:
            # soft-fail one provider; continue others
            logger.exception("FETCH_FAILED", extra={"provider": p.name, "handled": True, "error": type(e).__name__})
            continue
        fetched += len(res.items)
        per_provider[res.source_name] = len(res.items)
        ingested += len(ingest_items(store, analyzer, res.items))

    backfilled = backfill_scores(store, analyzer)
    summary = {
        "fetched": fetched,
        "ingested": ingested,
        "backfilled": backfilled,
        "per_provider": per_provider,
        "elapsed_ms": round((time.perf_counter() - t0) * 1000),
    }
    logger.info("REFRESH_FEEDS_DONE", extra=summary)
    return summary
