from pydantic import BaseModel, Field
from typing import Literal, Optional

class GuestIn(BaseModel):
    guest_id: Optional[str] = None

class VoteIn(BaseModel):
    guest_id: str
    vote_type: Optional[Literal["up", "down"]] = None   # None clears the vote

class CommentIn(BaseModel):
    article_id: int
    guest_id: str
    content: str = Field(min_length=1)
    parent_id: Optional[int] = None

class CommentEditIn(BaseModel):
    comment_id: int
    guest_id: str
    content: str = Field(min_length=1)

class ReadIn(BaseModel):
    article_id: int
    guest_id: str
