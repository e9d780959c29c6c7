# democracy_lens/text_extraction.py
from __future__ import annotations
from typing import Optional, Tuple

import httpx
import trafilatura
from trafilatura.metadata import extract_metadata
from bs4 import BeautifulSoup

from .config import REQUESTS_TIMEOUT
from .logging_setup import get_logger

logger = get_logger("democracy_lens.text_extraction")

USER_AGENT = "DemocracyLensBot/1.0 (+https://example.com)"


def fetch_html(url: str, timeout: float = REQUESTS_TIMEOUT) -> Optional[str]:
    try:
        with httpx.Client(follow_redirects=True, timeout=timeout) as client:
            r = client.get(url, headers={"User-Agent": USER_AGENT})
            r.raise_for_status()
            return r.text
    except httpx.HTTPError as e:
        logger.warning("FETCH_HTML_FAILED", extra={"url": url, "error": type(e).__name__})
        return None


def extract_text_and_title(html: str) -> Tuple[str, Optional[str]]:
    """
    Main text and a title guess. trafilatura first, BeautifulSoup when it finds
    nothing, raw html as the last resort.
    """
    text = trafilatura.extract(html, include_comments=False, favor_recall=True) or ""
    if text:
        md = extract_metadata(html)
        return text, (md.title if md and md.title else None)

    soup = BeautifulSoup(html, "html.parser")
    title = soup.title.string.strip() if soup.title and soup.title.string else None
    for tag in soup(["script", "style", "noscript"]):
        tag.decompose()
    text = " ".join(s for s in soup.stripped_strings)
    return (text or html), title


def fetch_article_body(url: str) -> str:
    """Article body text for `url`, or "" when it cannot be fetched."""
    if not url or url == "#":
        return ""
    html = fetch_html(url)
    if not html:
        return ""
    body, _ = extract_text_and_title(html)
    return body
