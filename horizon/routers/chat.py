"""
Live chat. The session id is the conversation key; see crud.chat_messages_query
for who may read which messages.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from sqlalchemy.orm import Session

from .. import crud, models, schemas
from ..auth import caller_id, get_optional_claims, is_admin_caller, require_admin
from ..database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/chat", tags=["Chat"])

SUPPORT_SENDER = "BT2 Support"


async def publish(request: Request, row: models.ChatMessage) -> schemas.ChatMessageResponse:
    """Broadcast a stored message as new_message"""
    message = schemas.ChatMessageResponse.model_validate(row)
    await request.app.state.broadcaster.broadcast("new_message", message.model_dump(mode="json"))
    return message


@router.get("/messages", response_model=List[schemas.ChatMessageResponse])
def list_messages(
    session_id: Optional[str] = Query(None, alias="sessionId"),
    db: Session = Depends(get_db),
    claims: Optional[dict] = Depends(get_optional_claims),
    is_admin: bool = Depends(is_admin_caller),
):
    """Oldest first"""
    query = crud.chat_messages_query(db, session_id, is_admin=is_admin, user_id=caller_id(claims))
    if query is None:
        return []
    return query.all()


@router.post("/messages", response_model=schemas.ChatPostResponse)
async def post_message(
    body: schemas.ChatMessageIn,
    request: Request,
    db: Session = Depends(get_db),
    claims: Optional[dict] = Depends(get_optional_claims),
):
    if not body.session_id or not body.message:
        raise HTTPException(status_code=400, detail="Session ID and message are required")

    row = crud.chat_messages.insert(
        db,
        session_id=body.session_id,
        user_id=caller_id(claims, body.user_id),
        sender_name=body.sender_name or "Anonymous",
        sender_email=body.sender_email or None,
        message=body.message,
        is_admin=False,
    )
    return {"success": True, "message": await publish(request, row)}


@router.post("/admin-reply", response_model=schemas.ChatPostResponse)
async def admin_reply(
    body: schemas.AdminReplyIn,
    request: Request,
    db: Session = Depends(get_db),
    admin: dict = Depends(require_admin),
):
    if not body.session_id or not body.message:
        raise HTTPException(status_code=400, detail="Session ID and message are required")

    row = crud.chat_messages.insert(
        db,
        session_id=body.session_id,
        sender_name=SUPPORT_SENDER,
        message=body.message,
        is_admin=True,
        read_at=None,
    )
    return {"success": True, "message": await publish(request, row)}


@router.post("/mark-read")
def mark_read(body: schemas.MarkReadIn, db: Session = Depends(get_db)):
    """Admin replies in the session count as seen"""
    if not body.session_id:
        raise HTTPException(status_code=400, detail="Session ID is required")

    crud.mark_session_read(db, body.session_id)
    return {"success": True}
