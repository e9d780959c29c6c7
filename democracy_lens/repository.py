# democracy_lens/repository.py
"""
Queries and writes used by the routes, background tasks and ingestion.

Functions take an open Session and leave committing to the caller unless their
name says otherwise (`track_read`, `vote_on_article`, ... commit themselves).
"""
from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional, Tuple
import secrets

from sqlmodel import Session, col, or_, select

from .democracy import ReadingEntry
from .models import Article, ArticleVote, Comment, GuestUser, ReadingHistory, utc_now


# ---------- Guests ----------

def new_guest_id() -> str:
    return "guest_" + secrets.token_hex(12)


def get_guest(s: Session, guest_id: str) -> Optional[GuestUser]:
    return s.exec(select(GuestUser).where(GuestUser.guest_id == guest_id)).first()


def register_guest(s: Session, guest_id: Optional[str] = None) -> Tuple[GuestUser, bool]:
    """Create the guest, or touch last_active_at when it exists. Returns (guest, created)."""
    guest_id = guest_id or new_guest_id()
    guest = get_guest(s, guest_id)
    created = guest is None
    if created:
        guest = GuestUser(guest_id=guest_id)
    else:
        guest.last_active_at = utc_now()
    s.add(guest)
    s.commit()
    s.refresh(guest)
    return guest, created


# ---------- Articles ----------

def get_article(s: Session, article_id: int) -> Optional[Article]:
    return s.get(Article, article_id)


def get_article_by_external_id(s: Session, external_id: str) -> Optional[Article]:
    return s.exec(select(Article).where(Article.external_id == external_id)).first()


def search_articles(
    s: Session,
    query: str = "",
    from_date: Optional[datetime] = None,
    limit: int = 10,
    offset: int = 0,
) -> List[Article]:
    stmt = select(Article)
    if query:
        pattern = f"%{query}%"
        stmt = stmt.where(or_(col(Article.title).ilike(pattern), col(Article.description).ilike(pattern)))
    if from_date:
        stmt = stmt.where(col(Article.published_at) >= from_date)
    # relevancy/popularity have no index of their own yet; everything sorts newest first
    stmt = stmt.order_by(col(Article.published_at).desc()).offset(offset).limit(limit)
    return list(s.exec(stmt).all())


def articles_with_location(s: Session, limit: int = 50) -> List[Article]:
    stmt = (
        select(Article)
        .where(col(Article.location_lat).is_not(None), col(Article.location_lng).is_not(None))
        .order_by(col(Article.published_at).desc())
        .limit(limit)
    )
    return list(s.exec(stmt).all())


def unscored_articles(s: Session, limit: int = 50) -> List[Article]:
    stmt = select(Article).where(col(Article.political_score).is_(None)).limit(limit)
    return list(s.exec(stmt).all())


def update_article_location(s: Session, article: Article, name: str, lat: float, lng: float) -> Article:
    article.location_name = name
    article.location_lat = lat
    article.location_lng = lng
    s.add(article)
    s.commit()
    return article


# ---------- Votes ----------

def vote_counts(s: Session, article_id: int) -> Dict[str, int]:
    votes = s.exec(select(ArticleVote.vote_type).where(ArticleVote.article_id == article_id)).all()
    return {
        "upvotes": sum(1 for v in votes if v == "up"),
        "downvotes": sum(1 for v in votes if v == "down"),
    }


def user_vote(s: Session, article_id: int, user_id: int) -> Optional[ArticleVote]:
    stmt = select(ArticleVote).where(ArticleVote.article_id == article_id, ArticleVote.user_id == user_id)
    return s.exec(stmt).first()


def vote_on_article(s: Session, article_id: int, user_id: int, vote_type: Optional[str]) -> None:
    """vote_type None removes the user's vote; otherwise insert or change it."""
    existing = user_vote(s, article_id, user_id)
    if vote_type is None:
        if existing:
            s.delete(existing)
            s.commit()
        return
    if existing:
        existing.vote_type = vote_type
        existing.updated_at = utc_now()
        s.add(existing)
    else:
        s.add(ArticleVote(article_id=article_id, user_id=user_id, vote_type=vote_type))
    s.commit()


# ---------- Reading history ----------

def track_read(s: Session, user_id: int, article_id: int) -> ReadingHistory:
    """One row per (user, article); reading again only moves read_at."""
    stmt = select(ReadingHistory).where(
        ReadingHistory.user_id == user_id, ReadingHistory.article_id == article_id
    )
    entry = s.exec(stmt).first()
    if entry:
        entry.read_at = utc_now()
    else:
        entry = ReadingHistory(user_id=user_id, article_id=article_id)
    s.add(entry)
    s.commit()
    s.refresh(entry)
    return entry


def reading_history(
    s: Session,
    user_id: int,
    limit: Optional[int] = None,
    offset: int = 0,
    with_location: bool = False,
) -> List[Tuple[ReadingHistory, Optional[Article]]]:
    stmt = (
        select(ReadingHistory, Article)
        .join(Article, Article.id == ReadingHistory.article_id, isouter=True)
        .where(ReadingHistory.user_id == user_id)
    )
    if with_location:
        stmt = stmt.where(col(Article.location_lat).is_not(None), col(Article.location_lng).is_not(None))
    stmt = stmt.order_by(col(ReadingHistory.read_at).desc()).offset(offset)
    if limit is not None:
        stmt = stmt.limit(limit)
    return [(entry, article) for entry, article in s.exec(stmt).all()]


def reading_entries(s: Session, user_id: int, limit: Optional[int] = None) -> List[ReadingEntry]:
    """History in the shape the democracy score and streak calculators consume."""
    return [ReadingEntry(read_at=e.read_at, article=a) for e, a in reading_history(s, user_id, limit=limit)]


def delete_history_entry(s: Session, entry_id: int, user_id: int) -> bool:
    entry = s.get(ReadingHistory, entry_id)
    if not entry or entry.user_id != user_id:
        return False
    s.delete(entry)
    s.commit()
    return True


def clear_history(s: Session, user_id: int) -> None:
    for entry in s.exec(select(ReadingHistory).where(ReadingHistory.user_id == user_id)).all():
        s.delete(entry)
    s.commit()


# ---------- Comments ----------

def get_comment(s: Session, comment_id: int) -> Optional[Comment]:
    return s.get(Comment, comment_id)


def comments_for_article(s: Session, article_id: int) -> List[Tuple[Comment, List[Comment]]]:
    """Top-level comments newest first, each with its replies oldest first. Deleted ones are hidden."""
    top_stmt = (
        select(Comment)
        .where(Comment.article_id == article_id, col(Comment.parent_id).is_(None), Comment.is_deleted == False)  # noqa: E712
        .order_by(col(Comment.created_at).desc(), col(Comment.id).desc())
    )
    out = []
    for comment in s.exec(top_stmt).all():
        replies_stmt = (
            select(Comment)
            .where(Comment.parent_id == comment.id, Comment.is_deleted == False)  # noqa: E712
            .order_by(col(Comment.created_at).asc(), col(Comment.id).asc())
        )
        out.append((comment, list(s.exec(replies_stmt).all())))
    return out


def guest_ids_by_user(s: Session, user_ids: List[int]) -> Dict[int, str]:
    if not user_ids:
        return {}
    rows = s.exec(select(GuestUser).where(col(GuestUser.id).in_(user_ids))).all()
    return {g.id: g.guest_id for g in rows}


def create_comment(s: Session, article_id: int, user_id: int, content: str, parent_id: Optional[int] = None) -> Comment:
    comment = Comment(article_id=article_id, user_id=user_id, content=content, parent_id=parent_id)
    s.add(comment)
    s.commit()
    s.refresh(comment)
    return comment


def apply_comment_analysis(s: Session, comment: Comment, summary: str, political_score: float) -> Comment:
    comment.ai_summary = summary
    comment.political_score = political_score
    comment.updated_at = utc_now()
    s.add(comment)
    s.commit()
    return comment
