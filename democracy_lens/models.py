from typing import Optional
from datetime import datetime, timezone
from sqlmodel import SQLModel, Field, UniqueConstraint


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class GuestUser(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    guest_id: str = Field(index=True, unique=True)
    created_at: datetime = Field(default_factory=utc_now)
    last_active_at: datetime = Field(default_factory=utc_now)


class Article(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    external_id: Optional[str] = Field(default=None, index=True, unique=True)  # set by ingestion, from the URL
    title: str = ""
    description: str = ""
    content: Optional[str] = None
    source: str = ""
    source_type: str = "center"  # left | center | right, derived from political_score
    political_score: Optional[float] = None  # -10 (left) .. +10 (right)
    published_at: Optional[datetime] = None
    url: str = ""
    image_url: Optional[str] = None
    ai_summary: Optional[str] = None
    location_name: Optional[str] = None
    location_lat: Optional[float] = None
    location_lng: Optional[float] = None
    created_at: datetime = Field(default_factory=utc_now)


class ArticleVote(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("article_id", "user_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    article_id: int = Field(index=True)
    user_id: int = Field(index=True)
    vote_type: str  # up | down
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class Comment(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    article_id: int = Field(index=True)
    parent_id: Optional[int] = Field(default=None, index=True)  # replies are one level deep
    user_id: int
    content: str
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    ai_summary: Optional[str] = None
    political_score: Optional[float] = None
    is_deleted: bool = False


class ReadingHistory(SQLModel, table=True):
    __table_args__ = (UniqueConstraint("user_id", "article_id"),)

    id: Optional[int] = Field(default=None, primary_key=True)
    user_id: int = Field(index=True)
    article_id: int = Field(index=True)
    read_at: datetime = Field(default_factory=utc_now)
