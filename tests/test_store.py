# tests/test_store.py
import pytest
from sqlalchemy.exc import IntegrityError
from sqlmodel import select

from democracy_lens.models import Article, ReadingHistory
from democracy_lens.repository import (
    clear_history,
    delete_history_entry,
    reading_entries,
    reading_history,
    register_guest,
    search_articles,
    track_read,
    vote_counts,
    vote_on_article,
)
from democracy_lens.store import Store


def test_db_roundtrip(store):
    with store.session() as s:
        a = Article(url="u", title="t")
        s.add(a); s.commit(); s.refresh(a)
        got = s.exec(select(Article).where(Article.id == a.id)).first()
        assert got and got.title == "t"

def test_in_memory_store_shares_one_database():
    st = Store("sqlite://")
    st.init_db()
    with st.session() as s:
        s.add(Article(title="kept")); s.commit()
    with st.session() as s:
        assert s.exec(select(Article)).first().title == "kept"
    st.dispose()

def test_register_guest_is_idempotent(store):
    with store.session() as s:
        g1, created1 = register_guest(s, "guest_bob")
        g2, created2 = register_guest(s, "guest_bob")
        fresh, _ = register_guest(s)
    assert (created1, created2) == (True, False)
    assert g1.id == g2.id
    assert fresh.guest_id.startswith("guest_") and fresh.guest_id != "guest_bob"

def test_track_read_keeps_one_row_per_article(store, guest, make_article):
    a = make_article()
    with store.session() as s:
        first = track_read(s, guest.id, a.id)
        again = track_read(s, guest.id, a.id)
        assert first.id == again.id
        assert len(s.exec(select(ReadingHistory)).all()) == 1

def test_history_unique_constraint(store, guest, make_article):
    a = make_article()
    with store.session() as s:
        s.add(ReadingHistory(user_id=guest.id, article_id=a.id)); s.commit()
        s.add(ReadingHistory(user_id=guest.id, article_id=a.id))
        with pytest.raises(IntegrityError):
            s.commit()

def test_article_external_id_is_unique(store):
    with store.session() as s:
        s.add(Article(external_id="ext-1", title="a")); s.commit()
        s.add(Article(external_id="ext-1", title="b"))
        with pytest.raises(IntegrityError):
            s.commit()

def test_articles_without_external_id_may_coexist(store):
    with store.session() as s:
        s.add(Article(title="a")); s.add(Article(title="b")); s.commit()
        assert len(s.exec(select(Article)).all()) == 2

def test_history_filters_and_entries(store, guest, make_article):
    pinned = make_article(title="Pinned", location_lat=1.0, location_lng=2.0)
    plain = make_article(title="Plain")
    with store.session() as s:
        track_read(s, guest.id, pinned.id)
        track_read(s, guest.id, plain.id)
        rows = reading_history(s, guest.id, with_location=True)
        assert [a.title for _, a in rows] == ["Pinned"]
        entries = reading_entries(s, guest.id)
        assert {e.article.title for e in entries} == {"Pinned", "Plain"}

def test_delete_history_entry_checks_owner(store, guest, make_article):
    a = make_article()
    with store.session() as s:
        other, _ = register_guest(s, "guest_other")
        entry = track_read(s, guest.id, a.id)
        assert delete_history_entry(s, entry.id, other.id) is False
        assert delete_history_entry(s, entry.id, guest.id) is True
        track_read(s, guest.id, a.id)
        clear_history(s, guest.id)
        assert reading_history(s, guest.id) == []

def test_votes_toggle(store, guest, make_article):
    a = make_article()
    with store.session() as s:
        vote_on_article(s, a.id, guest.id, "up")
        assert vote_counts(s, a.id) == {"upvotes": 1, "downvotes": 0}
        vote_on_article(s, a.id, guest.id, "down")
        assert vote_counts(s, a.id) == {"upvotes": 0, "downvotes": 1}
        vote_on_article(s, a.id, guest.id, None)
        assert vote_counts(s, a.id) == {"upvotes": 0, "downvotes": 0}

def test_search_matches_title_or_description(store, make_article):
    make_article(title="Senate passes bill", description="")
    make_article(title="Weather", description="Storm over the senate lawn")
    make_article(title="Sports", description="Final score")
    with store.session() as s:
        assert len(search_articles(s, query="senate")) == 2
        assert search_articles(s, query="nothing-like-this") == []
