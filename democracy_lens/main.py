# democracy_lens/main.py
from typing import Optional

from fastapi import FastAPI

from .analyzer import LLMAnalyzer
from .config import ENABLE_SCHEDULER, build_openai_client
from .exception_handling import register_exception_handlers
from .heuristics import configured_bias_table
from .lifespan import lifespan
from .logging_setup import setup_logging, get_logger
from .middleware import RequestContextMiddleware
from .store import Store, build_store

from .routers import articles, comments, dashboard, guests, health, locations, news, reading_history

logger = get_logger("democracy_lens.main")


def create_app(
    store: Optional[Store] = None,
    analyzer: Optional[LLMAnalyzer] = None,
    enable_scheduler: Optional[bool] = None,
) -> FastAPI:
    """
    Build the API around an explicit store and analyzer.
    Anything not passed in is built from the environment.
    """
    app = FastAPI(title="Democracy Lens", version="0.1.0", lifespan=lifespan)
    app.state.store = store or build_store()
    app.state.analyzer = analyzer or LLMAnalyzer(client=build_openai_client(), bias_table=configured_bias_table())
    app.state.enable_scheduler = ENABLE_SCHEDULER if enable_scheduler is None else enable_scheduler
    app.state.scheduler = None

    app.add_middleware(RequestContextMiddleware)
    register_exception_handlers(app)

    app.include_router(health.router)
    app.include_router(guests.router)
    app.include_router(articles.router)
    app.include_router(news.router)
    app.include_router(comments.router)
    app.include_router(reading_history.router)
    app.include_router(locations.router)
    app.include_router(dashboard.router)

    if not app.state.analyzer.enabled:
        logger.warning("OPENAI_API_KEY not set; analysis runs on heuristic fallbacks only")
    return app


def build_app() -> FastAPI:
    """uvicorn entry point: `uvicorn democracy_lens.main:build_app --factory`."""
    setup_logging()  # <-- set up logging ASAP
    return create_app()
