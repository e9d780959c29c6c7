"""
store.py
========
Database gateway for the app.

A `Store` wraps one SQLAlchemy engine. It is built once (in `create_app`, or by
a test fixture) and handed to whoever needs it: route handlers get it through
the `get_store` dependency, background tasks and scheduler jobs receive it as
an argument. Nothing in the package keeps a module-level engine.
"""

from typing import Optional

from fastapi import Request
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session, create_engine


class Store:
    def __init__(self, url: str, echo: bool = False):
        self.url = url
        kwargs = {}
        if url.startswith("sqlite"):
            # route handlers, background tasks and the scheduler share the engine across threads
            kwargs["connect_args"] = {"check_same_thread": False}
            if url in ("sqlite://", "sqlite:///:memory:"):
                # one shared connection, otherwise every session sees its own empty database
                kwargs["poolclass"] = StaticPool
        self.engine = create_engine(url, echo=echo, **kwargs)

    def init_db(self) -> None:
        """
        Create all tables for the SQLModel classes in models.py.
        Safe to call on every startup; it only creates missing tables.
        """
        from . import models  # noqa: F401  (import just to register models with SQLModel)

        SQLModel.metadata.create_all(self.engine)

    def session(self) -> Session:
        """
        Open a Session bound to this store's engine.

          with store.session() as s:
              s.add(obj)
              s.commit()

        Objects stay readable after commit so they can be returned from routes.
        """
        return Session(self.engine, expire_on_commit=False)

    def dispose(self) -> None:
        self.engine.dispose()


def build_store(url: Optional[str] = None) -> Store:
    from .config import DB_URL

    return Store(url or DB_URL)


def get_store(request: Request) -> Store:
    """FastAPI dependency: the store attached to the running app."""
    return request.app.state.store
