# democracy_lens/routers/comments.py
from typing import Any, Dict, Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlmodel import Session

from ..analyzer import LLMAnalyzer
from ..deps import get_analyzer, get_session, require_article, require_guest
from ..logging_setup import get_logger
from ..models import Comment, GuestUser, utc_now
from ..repository import (
    apply_comment_analysis,
    comments_for_article,
    create_comment,
    get_comment,
    guest_ids_by_user,
)
from ..schema import CommentEditIn, CommentIn
from ..store import Store, get_store
from ..tasks import analyze_comment_task

logger = get_logger("democracy_lens.routes.comments")

router = APIRouter(prefix="/comments", tags=["Comments"])


def _serialize(comment: Comment, guest_ids: Dict[int, str]) -> Dict[str, Any]:
    return {**comment.model_dump(), "user": {"guest_id": guest_ids.get(comment.user_id)}}


def _owned_comment(s: Session, comment_id: int, guest: GuestUser) -> Comment:
    comment = get_comment(s, comment_id)
    if comment is None or comment.is_deleted:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Comment not found")
    if comment.user_id != guest.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User does not own this comment")
    return comment


@router.get("")
def list_comments(article_id: int, s: Session = Depends(get_session)):
    threads = comments_for_article(s, article_id)
    user_ids = {c.user_id for c, replies in threads} | {r.user_id for _, replies in threads for r in replies}
    guest_ids = guest_ids_by_user(s, list(user_ids))
    data = [
        {**_serialize(c, guest_ids), "replies": [_serialize(r, guest_ids) for r in replies]}
        for c, replies in threads
    ]
    return {"success": True, "data": data}


@router.post("")
def post_comment(
    body: CommentIn,
    bg: BackgroundTasks,
    s: Session = Depends(get_session),
    store: Store = Depends(get_store),
    analyzer: LLMAnalyzer = Depends(get_analyzer),
):
    guest = require_guest(s, body.guest_id)
    require_article(s, body.article_id)

    parent: Optional[Comment] = None
    if body.parent_id is not None:
        parent = get_comment(s, body.parent_id)
        if parent is None or parent.is_deleted or parent.article_id != body.article_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid parent comment")
        if parent.parent_id is not None:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Replies cannot be nested")

    comment = create_comment(s, body.article_id, guest.id, body.content, parent_id=body.parent_id)
    logger.info("COMMENT_CREATED", extra={"comment_id": comment.id, "article_id": body.article_id})

    # scored after the response goes out
    bg.add_task(analyze_comment_task, store, analyzer, comment.id, comment.content)
    return {"success": True, "data": comment}


@router.put("")
def put_comment(
    body: CommentEditIn,
    bg: BackgroundTasks,
    s: Session = Depends(get_session),
    store: Store = Depends(get_store),
    analyzer: LLMAnalyzer = Depends(get_analyzer),
):
    guest = require_guest(s, body.guest_id)
    comment = _owned_comment(s, body.comment_id, guest)

    comment.content = body.content
    comment.updated_at = utc_now()
    s.add(comment)
    s.commit()
    logger.info("COMMENT_UPDATED", extra={"comment_id": comment.id})

    bg.add_task(analyze_comment_task, store, analyzer, comment.id, comment.content)
    return {"success": True}


@router.delete("")
def delete_comment(comment_id: int, guest_id: str, s: Session = Depends(get_session)):
    """Soft delete: the row and its content stay, the comment disappears from listings."""
    guest = require_guest(s, guest_id)
    comment = _owned_comment(s, comment_id, guest)

    comment.is_deleted = True
    comment.updated_at = utc_now()
    s.add(comment)
    s.commit()
    logger.info("COMMENT_DELETED", extra={"comment_id": comment_id})
    return {"success": True}


@router.patch("")
def analyze_comment_now(
    body: CommentEditIn,
    s: Session = Depends(get_session),
    analyzer: LLMAnalyzer = Depends(get_analyzer),
):
    """Analyze `content` right away and store the result on the comment."""
    guest = require_guest(s, body.guest_id)
    comment = _owned_comment(s, body.comment_id, guest)

    result = analyzer.analyze_comment(body.content)
    apply_comment_analysis(s, comment, result.summary, result.political_score)
    return {"success": True, "data": result.as_dict()}
