# tests/test_ingest.py
from datetime import datetime, timezone

from sqlmodel import select

from democracy_lens.ingest import backfill_scores, ingest_items, refresh_feeds
from democracy_lens.models import Article
from democracy_lens.sources import BaseProvider, ProviderResult


def _item(url, source="Fox News", title="Budget vote"):
    return {
        "url": url, "title": title, "description": "", "source": source,
        "published_at": datetime(2025, 1, 2, tzinfo=timezone.utc), "image_url": None,
    }


def test_new_items_are_scored_and_typed(store, analyzer):
    out = ingest_items(store, analyzer, [_item("http://a"), _item("http://b", source="MSNBC")])
    assert [a.source_type for a in out] == ["right", "left"]
    assert out[0].political_score == 7.2
    assert out[0].id is not None

def test_scored_articles_are_served_from_cache(store, analyzer, mocker):
    ingest_items(store, analyzer, [_item("http://a")])
    spy = mocker.spy(analyzer, "political_leaning")
    out = ingest_items(store, analyzer, [_item("http://a", title="Changed headline")])
    assert spy.call_count == 0
    assert out[0].title == "Budget vote"
    with store.session() as s:
        assert len(s.exec(select(Article)).all()) == 1

def test_unscored_cached_article_is_rescored(store, analyzer, make_article):
    from democracy_lens.sources import external_id_for
    make_article(external_id=external_id_for("http://a"), source="Fox News", political_score=None)
    out = ingest_items(store, analyzer, [_item("http://a")])
    assert out[0].political_score == 7.2

def test_one_bad_item_does_not_stop_the_batch(store, analyzer, mocker):
    mocker.patch.object(analyzer, "political_leaning", side_effect=[RuntimeError("x"), 1.0])
    out = ingest_items(store, analyzer, [_item("http://bad"), _item("http://good")])
    assert [a.url for a in out] == ["http://good"]

def test_backfill_scores(store, analyzer, make_article):
    make_article(source="MSNBC", political_score=None)
    make_article(source="Fox News", political_score=2.0)
    assert backfill_scores(store, analyzer) == 1
    with store.session() as s:
        scores = sorted(a.political_score for a in s.exec(select(Article)).all())
    assert scores == [-7.8, 2.0]


class _Provider(BaseProvider):
    def __init__(self, name, items=None, error=None):
        self.name = name
        self.items = items or []
        self.error = error

    def fetch(self, max_items=50):
        if self.error:
            raise self.error
        return ProviderResult(items=self.items[:max_items], source_name=self.name)


def test_refresh_feeds_soft_fails_one_provider(store, analyzer):
    providers = [
        _Provider("broken", error=ConnectionError("down")),
        _Provider("rss", items=[_item("http://1"), _item("http://2")]),
    ]
    summary = refresh_feeds(store, analyzer, providers=providers)
    assert summary["fetched"] == 2
    assert summary["ingested"] == 2
    assert summary["per_provider"] == {"rss": 2}
    assert summary["backfilled"] == 0


def test_item_inserted_concurrently_is_treated_as_cached(store, analyzer, mocker):
    from democracy_lens import ingest
    real_lookup = ingest.get_article_by_external_id
    ingest_items(store, analyzer, [_item("http://a")])
    calls = []

    def _lookup(s, external_id):
        # first lookup misses, as if another run inserted the row after it
        calls.append(external_id)
        return None if len(calls) == 1 else real_lookup(s, external_id)

    mocker.patch("democracy_lens.ingest.get_article_by_external_id", side_effect=_lookup)
    out = ingest_items(store, analyzer, [_item("http://a", title="Changed headline")])
    assert len(calls) == 2
    assert [a.title for a in out] == ["Budget vote"]
    with store.session() as s:
        assert len(s.exec(select(Article)).all()) == 1

def test_lost_race_leaves_session_usable_for_next_item(store, analyzer, mocker):
    from democracy_lens import ingest
    real_lookup = ingest.get_article_by_external_id
    ingest_items(store, analyzer, [_item("http://a")])
    misses = {"n": 0}

    def _lookup(s, external_id):
        misses["n"] += 1
        return None if misses["n"] == 1 else real_lookup(s, external_id)

    mocker.patch("democracy_lens.ingest.get_article_by_external_id", side_effect=_lookup)
    out = ingest_items(store, analyzer, [_item("http://a"), _item("http://b", source="MSNBC")])
    assert [a.url for a in out] == ["http://a", "http://b"]
    assert out[1].political_score == -7.8
