# democracy_lens/sources.py
"""
News providers feeding the article cache.
  - NYTimesProvider: Top Stories / Article Search APIs, requires NYT_API_KEY
  - RSSProvider: a fixed list of outlet feeds, one outlet name per feed

Every provider yields plain dicts with the keys
  url, title, description, published_at, source, image_url
which `ingest.ingest_items` turns into scored Article rows.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple
import base64
import hashlib

import feedparser
import requests

from .config import NYT_API_KEY, REQUESTS_TIMEOUT
from .logging_setup import get_logger

logger = get_logger("democracy_lens.sources")

# ---------- Utilities ----------

def external_id_for(url: str) -> str:
    """Stable article id derived from its URL."""
    return base64.urlsafe_b64encode((url or "").encode("utf-8")).decode("ascii")

def _coerce_datetime(dt: Optional[datetime]) -> Optional[datetime]:
    if not dt:
        return None
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)

def _parse_iso(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    try:
        return _coerce_datetime(datetime.fromisoformat(value.replace("Z", "+00:00")))
    except ValueError:
        return None

def _parse_feed_datetime(entry: Any) -> Optional[datetime]:
    tt = getattr(entry, "published_parsed", None) or getattr(entry, "updated_parsed", None)
    if not tt:
        return None
    return datetime(*tt[:6], tzinfo=timezone.utc)

def _dedupe(items: List[Dict]) -> List[Dict]:
    """Deduplicate by normalized URL or title hash."""
    seen: set[str] = set()
    out: List[Dict] = []
    for it in items:
        key_raw = (it.get("url") or "").strip().lower() or (it.get("title") or "").strip().lower()
        key = hashlib.sha1(key_raw.encode("utf-8", errors="ignore")).hexdigest()
        if key in seen:
            continue
        seen.add(key)
        out.append(it)
    return out

# ---------- Provider base ----------

@dataclass
class ProviderResult:
    items: List[Dict]
    source_name: str

class BaseProvider:
    name = "base"

    def fetch(self, max_items: int = 50) -> ProviderResult:
        raise NotImplementedError

# ---------- New York Times ----------

class NYTimesProvider(BaseProvider):
    """
    Top Stories when no query is given, Article Search otherwise.
    The two APIs shape their documents differently; `normalize` handles both.
    """

    name = "nyt"
    source = "New York Times"
    TOP_STORIES_URL = "https://api.nytimes.com/svc/topstories/v2/{section}.json"
    SEARCH_URL = "https://api.nytimes.com/svc/search/v2/articlesearch.json"

    def __init__(self, api_key: str = NYT_API_KEY, timeout: float = REQUESTS_TIMEOUT):
        self.api_key = api_key
        self.timeout = timeout

    def _request(self, query: str, section: str, page: int) -> Tuple[str, Dict[str, Any]]:
        if query:
            # Article Search pages are zero-based
            return self.SEARCH_URL, {"q": query, "page": max(0, page - 1), "api-key": self.api_key}
        return self.TOP_STORIES_URL.format(section=section or "home"), {"api-key": self.api_key}

    def normalize(self, doc: Dict[str, Any]) -> Dict[str, Any]:
        is_search = "headline" in doc
        image_url = None
        media = doc.get("multimedia") or []
        if is_search:
            m = next((m for m in media if m.get("type") == "image" and m.get("subtype") == "xlarge"), None)
            if m and m.get("url"):
                image_url = f"https://www.nytimes.com/{m['url']}"
        else:
            m = next((m for m in media if m.get("format") in ("superJumbo", "Large")), None)
            if m:
                image_url = m.get("url")

        return {
            "url": doc.get("web_url") if is_search else doc.get("url"),
            "title": (doc.get("headline") or {}).get("main", "") if is_search else doc.get("title", ""),
            "description": doc.get("abstract") or "",
            "published_at": _parse_iso(doc.get("pub_date") if is_search else doc.get("published_date")),
            "source": self.source,
            "image_url": image_url,
        }

    def fetch(self, max_items: int = 50, query: str = "", section: str = "home", page: int = 1) -> ProviderResult:
        if not self.api_key:
            raise RuntimeError("NYT_API_KEY missing")
        url, params = self._request(query, section, page)
        r = requests.get(url, params=params, timeout=self.timeout)
        r.raise_for_status()
        data = r.json()
        docs = (data.get("response") or {}).get("docs", []) if query else data.get("results", [])
        items = [self.normalize(d) for d in docs]
        items = [it for it in items if it.get("url")]
        return ProviderResult(items=_dedupe(items)[:max_items], source_name=self.name)

# ---------- Outlet RSS feeds ----------

DEFAULT_FEEDS: Dict[str, str] = {
    "BBC": "https://feeds.bbci.co.uk/news/world/rss.xml",
    "NPR": "https://feeds.npr.org/1001/rss.xml",
    "Fox News": "https://moxie.foxnews.com/google-publisher/politics.xml",
    "Washington Post": "https://feeds.washingtonpost.com/rss/politics",
    "Wall Street Journal": "https://feeds.a.dj.com/rss/RSSWorldNews.xml",
    "Daily Wire": "https://www.dailywire.com/feeds/rss.xml",
}

class RSSProvider(BaseProvider):
    """Outlet feeds keyed by the outlet name used in the bias table."""

    name = "rss"

    def __init__(self, feeds: Optional[Dict[str, str]] = None):
        self.feeds = feeds if feeds is not None else DEFAULT_FEEDS

    def fetch(self, max_items: int = 50) -> ProviderResult:
        items: List[Dict] = []
        for outlet, url in self.feeds.items():
            feed = feedparser.parse(url)
            if getattr(feed, "bozo", False) and not feed.entries:
                logger.warning("FEED_UNREADABLE", extra={"outlet": outlet, "url": url})
                continue
            for e in feed.entries[:max_items]:
                thumb = (getattr(e, "media_thumbnail", None) or [{}])[0].get("url")
                items.append({
                    "url": getattr(e, "link", ""),
                    "title": getattr(e, "title", ""),
                    "description": getattr(e, "summary", ""),
                    "published_at": _parse_feed_datetime(e),
                    "source": outlet,
                    "image_url": thumb,
                })
        return ProviderResult(items=_dedupe([it for it in items if it["url"]]), source_name=self.name)
