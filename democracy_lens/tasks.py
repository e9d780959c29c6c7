# democracy_lens/tasks.py
"""
Follow-up work queued on FastAPI BackgroundTasks after a response is sent.

Each task opens its own session. Failures are logged and swallowed: the
request that queued the task has already succeeded, and a missing score or
map pin must never surface as an error.
"""
from .analyzer import LLMAnalyzer
from .logging_setup import get_logger
from .repository import apply_comment_analysis, get_article, get_comment, update_article_location
from .store import Store

logger = get_logger("democracy_lens.tasks")


def analyze_comment_task(store: Store, analyzer: LLMAnalyzer, comment_id: int, content: str) -> None:
    try:
        result = analyzer.analyze_comment(content)
        with store.session() as s:
            comment = get_comment(s, comment_id)
            if comment is None:
                logger.warning("COMMENT_GONE", extra={"comment_id": comment_id})
                return
            if comment.content != content:
                # edited again since this task was queued; the newer task owns the result
                logger.info("COMMENT_ANALYSIS_STALE", extra={"comment_id": comment_id})
                return
            apply_comment_analysis(s, comment, result.summary, result.political_score)
        logger.info("COMMENT_ANALYZED", extra={"comment_id": comment_id, "political_score": result.political_score})
    except Exception as e:
        logger.exception("COMMENT_ANALYSIS_FAILED", extra={"handled": True, "comment_id": comment_id, "error": type(e).__name__})


def locate_article_task(store: Store, analyzer: LLMAnalyzer, article_id: int) -> None:
    try:
        with store.session() as s:
            article = get_article(s, article_id)
            if article is None or (article.location_lat is not None and article.location_lng is not None):
                return
            result = analyzer.extract_location(article)
            if result.coordinates is None:
                # a name without coordinates gives no map pin; leave the article for a later read
                logger.info("LOCATION_WITHOUT_COORDINATES", extra={"article_id": article_id, "location": result.location})
                return
            update_article_location(s, article, result.location, result.coordinates.lat, result.coordinates.lng)
        logger.info("ARTICLE_LOCATED", extra={"article_id": article_id, "location": result.location})
    except Exception as e:
        logger.exception("LOCATE_ARTICLE_FAILED", extra={"handled": True, "article_id": article_id, "error": type(e).__name__})
