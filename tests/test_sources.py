# tests/test_sources.py
import time

import feedparser
import pytest
import requests

from democracy_lens.sources import NYTimesProvider, RSSProvider, external_id_for


def _entry(link, title, published=None, **extra):
    e = type("E", (), {})()
    e.link = link
    e.title = title
    e.summary = "sum"
    e.published_parsed = time.strptime(published, "%Y-%m-%d %H:%M") if published else None
    for k, v in extra.items():
        setattr(e, k, v)
    return e

def _feed(entries, bozo=False):
    f = type("F", (), {})()
    f.entries = entries
    f.bozo = bozo
    return f


def test_rss_items_carry_outlet_name(mocker):
    fake = _feed([
        _entry("http://a", "A", "2025-01-01 12:00", media_thumbnail=[{"url": "http://img/a.jpg"}]),
        _entry("http://b", "B"),
    ])
    mocker.patch.object(feedparser, "parse", return_value=fake)

    res = RSSProvider(feeds={"BBC": "http://feed"}).fetch(max_items=5)
    assert res.source_name == "rss"
    assert [it["title"] for it in res.items] == ["A", "B"]
    first = res.items[0]
    for k in ["url", "title", "description", "published_at", "source", "image_url"]:
        assert k in first
    assert first["source"] == "BBC"
    assert first["image_url"] == "http://img/a.jpg"
    assert first["published_at"].year == 2025
    assert res.items[1]["published_at"] is None

def test_rss_dedupes_across_feeds_and_skips_broken(mocker):
    good = _feed([_entry("http://same", "Same story")])
    broken = _feed([], bozo=True)
    mocker.patch.object(feedparser, "parse", side_effect=[good, broken, good])

    res = RSSProvider(feeds={"BBC": "u1", "NPR": "u2", "Fox News": "u3"}).fetch()
    assert len(res.items) == 1


class _Resp:
    def __init__(self, payload):
        self._payload = payload

    def raise_for_status(self):
        pass

    def json(self):
        return self._payload


def test_nyt_requires_key():
    with pytest.raises(RuntimeError):
        NYTimesProvider(api_key="").fetch()

def test_nyt_top_stories(mocker):
    payload = {"results": [
        {"url": "https://nyt.com/1", "title": "One", "abstract": "first", "published_date": "2025-02-01T10:00:00-05:00",
         "multimedia": [{"format": "Standard Thumbnail", "url": "t.jpg"}, {"format": "superJumbo", "url": "big.jpg"}]},
        {"url": "", "title": "No link"},
    ]}
    get = mocker.patch.object(requests, "get", return_value=_Resp(payload))

    res = NYTimesProvider(api_key="k").fetch(section="politics")
    assert get.call_args.args[0].endswith("/topstories/v2/politics.json")
    assert get.call_args.kwargs["params"] == {"api-key": "k"}
    assert len(res.items) == 1
    it = res.items[0]
    assert it["source"] == "New York Times"
    assert it["image_url"] == "big.jpg"
    assert it["published_at"].hour == 15  # normalized to UTC

def test_nyt_search(mocker):
    payload = {"response": {"docs": [
        {"web_url": "https://nyt.com/s", "headline": {"main": "Found"}, "abstract": "x", "pub_date": "2025-02-01T10:00:00Z",
         "multimedia": [{"type": "image", "subtype": "xlarge", "url": "images/x.jpg"}]},
    ]}}
    get = mocker.patch.object(requests, "get", return_value=_Resp(payload))

    res = NYTimesProvider(api_key="k").fetch(query="election", page=2)
    assert get.call_args.kwargs["params"]["page"] == 1
    assert res.items[0]["title"] == "Found"
    assert res.items[0]["image_url"] == "https://www.nytimes.com/images/x.jpg"

def test_external_id_is_stable_and_url_safe():
    a = external_id_for("https://example.com/a?b=c")
    assert a == external_id_for("https://example.com/a?b=c")
    assert "/" not in a and "+" not in a
