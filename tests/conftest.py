# tests/conftest.py
import random
from datetime import datetime, timezone

import pytest

@pytest.fixture()
def store(tmp_path):
    from democracy_lens.store import Store
    st = Store(f"sqlite:///{tmp_path / 'test.db'}")
    st.init_db()
    yield st
    st.dispose()

@pytest.fixture()
def analyzer():
    # no OpenAI client: every call takes the fallback path; zero jitter keeps scores exact
    from democracy_lens.analyzer import LLMAnalyzer
    from democracy_lens.heuristics import BiasTable
    return LLMAnalyzer(client=None, bias_table=BiasTable(jitter=0.0), rng=random.Random(7))

@pytest.fixture()
def app(store, analyzer):
    from democracy_lens.main import create_app
    return create_app(store=store, analyzer=analyzer, enable_scheduler=False)

@pytest.fixture()
def client(app):
    from fastapi.testclient import TestClient
    return TestClient(app)

@pytest.fixture()
def guest(store):
    from democracy_lens.repository import register_guest
    with store.session() as s:
        g, _ = register_guest(s, "guest_alice")
    return g

@pytest.fixture()
def make_article(store):
    from democracy_lens.models import Article

    def _make(**kw):
        defaults = {
            "external_id": f"ext-{random.random()}",
            "title": "Budget vote",
            "description": "Lawmakers debate",
            "source": "Reuters",
            "url": "https://example.com/a",
            "published_at": datetime(2025, 1, 1, tzinfo=timezone.utc),
        }
        defaults.update(kw)
        with store.session() as s:
            a = Article(**defaults)
            s.add(a); s.commit(); s.refresh(a)
            return a
    return _make
