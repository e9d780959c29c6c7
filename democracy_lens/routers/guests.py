from fastapi import APIRouter, Depends
from sqlmodel import Session

from ..deps import get_session
from ..logging_setup import get_logger
from ..repository import register_guest
from ..schema import GuestIn

logger = get_logger("democracy_lens.routes.guests")

router = APIRouter(prefix="/guests", tags=["Guests"])

@router.post("")
def post_guest(body: GuestIn, s: Session = Depends(get_session)):
    """Register a guest id (generated when omitted) or refresh its last-active time."""
    guest, created = register_guest(s, body.guest_id)
    if created:
        logger.info("GUEST_REGISTERED", extra={"guest_id": guest.guest_id})
    return {"success": True, "data": guest, "created": created}
