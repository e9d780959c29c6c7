# democracy_lens/deps.py
from fastapi import Depends, HTTPException, Request, status
from sqlmodel import Session

from .analyzer import LLMAnalyzer
from .models import Article, GuestUser
from .repository import get_article, get_guest
from .store import Store, get_store


def get_analyzer(request: Request) -> LLMAnalyzer:
    return request.app.state.analyzer


def get_session(store: Store = Depends(get_store)):
    with store.session() as s:
        yield s


def require_guest(s: Session, guest_id: str) -> GuestUser:
    guest = get_guest(s, guest_id)
    if guest is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Unknown guest")
    return guest


def require_article(s: Session, article_id: int) -> Article:
    article = get_article(s, article_id)
    if article is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Article not found")
    return article
