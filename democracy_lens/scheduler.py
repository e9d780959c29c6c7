# democracy_lens/scheduler.py
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.interval import IntervalTrigger
from apscheduler.events import EVENT_JOB_ERROR, EVENT_JOB_EXECUTED
import pytz

from .analyzer import LLMAnalyzer
from .config import TIMEZONE, FEED_REFRESH_MINUTES
from .ingest import refresh_feeds
from .logging_setup import get_logger
from .store import Store

logger = get_logger("democracy_lens.scheduler")


def _job_listener(event):
    if event.exception:
        logger.error(
            "JOB_ERROR",
            exc_info=(type(event.exception), event.exception, event.exception.__traceback__),
            extra={"handled": False, "job_id": event.job_id, "run_time": str(event.scheduled_run_time)},
        )
    else:
        logger.info(
            "JOB_OK",
            extra={"job_id": event.job_id, "run_time": str(event.scheduled_run_time)}
        )


def build_scheduler(store: Store, analyzer: LLMAnalyzer, minutes: int = FEED_REFRESH_MINUTES) -> BackgroundScheduler:
    tz = pytz.timezone(TIMEZONE)
    scheduler = BackgroundScheduler(timezone=tz)
    if minutes <= 0:
        raise ValueError(f"FEED_REFRESH_MINUTES must be positive, got {minutes}")
    trigger = IntervalTrigger(minutes=minutes, timezone=tz)
    scheduler.add_job(
        refresh_feeds, trigger, args=[store, analyzer],
        id="refresh_feeds", replace_existing=True, coalesce=True, max_instances=1,
    )
    scheduler.add_listener(_job_listener, EVENT_JOB_EXECUTED | EVENT_JOB_ERROR)
    logger.info(f"Job registered: refresh_feeds every {minutes} min ({TIMEZONE})")
    return scheduler


def start_scheduler(scheduler: BackgroundScheduler) -> None:
    if not scheduler.running:
        scheduler.start()
        logger.info("APScheduler started")


def shutdown_scheduler(scheduler: BackgroundScheduler, wait: bool = False) -> None:
    if scheduler.running:
        scheduler.shutdown(wait=wait)
        logger.info("APScheduler stopped")
