# democracy_lens/lifespan.py
from contextlib import asynccontextmanager
from fastapi import FastAPI

from .logging_setup import get_logger
from .scheduler import build_scheduler, start_scheduler, shutdown_scheduler

logger = get_logger("democracy_lens.lifespan")

@asynccontextmanager
async def lifespan(app: FastAPI):
    # ---- Startup ----
    logger.info("APP STARTUP")
    app.state.store.init_db()

    if app.state.enable_scheduler and getattr(app.state, "scheduler", None) is None:
        logger.info("Registering scheduler jobs")
        app.state.scheduler = build_scheduler(app.state.store, app.state.analyzer)
        start_scheduler(app.state.scheduler)

    yield

    # ---- Shutdown ----
    logger.info("APP SHUTDOWN")
    scheduler = getattr(app.state, "scheduler", None)
    if scheduler is not None:
        logger.info("Stopping scheduler")
        shutdown_scheduler(scheduler, wait=False)
        app.state.scheduler = None
