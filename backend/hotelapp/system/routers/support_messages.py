"""
Support inbox API
Prefix: /support-messages

Each customer has one thread keyed by their identity subject. Clients post
into and read their own thread; staff read every thread and answer.
"""
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel
from sqlalchemy.orm import Session

from hotelapp.database import get_db
from hotelapp.models.schemas import SupportMessageCreate, SupportMessageResponse
from hotelapp.security.auth import (
    ROLE_EMPLOYEE,
    CurrentUser, get_current_user, require_admin, require_any_role, require_staff
)
from hotelapp.system.services.message_service import SupportMessageService

router = APIRouter(prefix="/support-messages", tags=["Support messages"])


class SupportMessagePage(BaseModel):
    items: List[SupportMessageResponse]
    total: int


SENDER_ADMIN = "ADMIN"
SENDER_EMPLOYEE = "EMPLOYEE"
SENDER_CLIENT = "CLIENT"


def _sender_for(user: CurrentUser) -> str:
    if user.is_admin:
        return SENDER_ADMIN
    if user.has_any_role(ROLE_EMPLOYEE):
        return SENDER_EMPLOYEE
    return SENDER_CLIENT


@router.get("", response_model=SupportMessagePage)
def list_messages(
    user_id: Optional[str] = None,
    is_active: Optional[bool] = True,
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff),
):
    """All threads or one thread (staff)"""
    items, total = SupportMessageService(db).get_messages(user_id, is_active, limit, offset)
    return SupportMessagePage(items=items, total=total)


@router.get("/mine", response_model=SupportMessagePage)
def list_my_messages(
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    items, total = SupportMessageService(db).get_messages(current_user.subject, True, limit, offset)
    return SupportMessagePage(items=items, total=total)


@router.get("/unread-count")
def unread_count(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    """Unread messages across all threads for staff, in the caller's thread otherwise"""
    user_id = None if current_user.is_staff else current_user.subject
    return {"unread_count": SupportMessageService(db).get_unread_count(user_id)}


@router.post("", response_model=SupportMessageResponse, status_code=status.HTTP_201_CREATED)
def post_message(
    data: SupportMessageCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_any_role),
):
    if current_user.is_staff:
        if not data.user_id:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="user_id is required")
        thread_id = data.user_id
        user_name = data.user_name
    else:
        if data.user_id and data.user_id != current_user.subject:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Not your conversation")
        thread_id = current_user.subject
        user_name = current_user.display_name

    return SupportMessageService(db).post(
        user_id=thread_id,
        content=data.content,
        sender=_sender_for(current_user),
        user_name=user_name,
        reservation_id=data.reservation_id,
    )


@router.post("/{message_id}/read")
def mark_read(
    message_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(get_current_user),
):
    user_id = None if current_user.is_staff else current_user.subject
    if not SupportMessageService(db).mark_read(message_id, user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")
    return {"success": True}


@router.post("/{message_id}/activate", response_model=SupportMessageResponse)
def activate_message(
    message_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff),
):
    msg = SupportMessageService(db).set_active(message_id, True)
    if not msg:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")
    return msg


@router.post("/{message_id}/deactivate", response_model=SupportMessageResponse)
def deactivate_message(
    message_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff),
):
    msg = SupportMessageService(db).set_active(message_id, False)
    if not msg:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")
    return msg


@router.delete("/{message_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_message(
    message_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    if not SupportMessageService(db).delete(message_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Message not found")
