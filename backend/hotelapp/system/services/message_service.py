"""
Support inbox service: customer threads, read state, soft delete
"""
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from hotelapp.system.models.message import SupportMessage


class SupportMessageService:
    def __init__(self, db: Session):
        self.db = db

    def post(
        self,
        user_id: str,
        content: str,
        sender: str,
        user_name: Optional[str] = None,
        reservation_id: Optional[int] = None,
    ) -> SupportMessage:
        """Append a message to user_id's thread"""
        msg = SupportMessage(
            user_id=user_id,
            user_name=user_name,
            content=content,
            sender=sender,
            reservation_id=reservation_id,
            sent_at=datetime.utcnow(),
            is_read=False,
            is_active=True,
        )
        self.db.add(msg)
        self.db.commit()
        self.db.refresh(msg)
        return msg

    def get_messages(
        self,
        user_id: Optional[str] = None,
        is_active: Optional[bool] = True,
        limit: int = 100,
        offset: int = 0,
    ) -> tuple[List[SupportMessage], int]:
        """Messages, newest first (paged)"""
        query = self.db.query(SupportMessage)
        if user_id:
            query = query.filter(SupportMessage.user_id == user_id)
        if is_active is not None:
            query = query.filter(SupportMessage.is_active == is_active)

        total = query.count()
        messages = query.order_by(SupportMessage.sent_at.desc(), SupportMessage.id.desc()) \
            .offset(offset).limit(limit).all()
        return messages, total

    def get_message(self, message_id: int) -> Optional[SupportMessage]:
        return self.db.query(SupportMessage).filter(SupportMessage.id == message_id).first()

    def get_unread_count(self, user_id: Optional[str] = None) -> int:
        query = self.db.query(SupportMessage).filter(
            SupportMessage.is_read == False,
            SupportMessage.is_active == True,
        )
        if user_id:
            query = query.filter(SupportMessage.user_id == user_id)
        return query.count()

    def mark_read(self, message_id: int, user_id: Optional[str] = None) -> bool:
        """Mark one message read; with user_id, only inside that thread"""
        query = self.db.query(SupportMessage).filter(SupportMessage.id == message_id)
        if user_id:
            query = query.filter(SupportMessage.user_id == user_id)
        msg = query.first()
        if not msg:
            return False
        msg.is_read = True
        self.db.commit()
        return True

    def set_active(self, message_id: int, active: bool) -> Optional[SupportMessage]:
        msg = self.get_message(message_id)
        if not msg:
            return None
        msg.is_active = active
        self.db.commit()
        self.db.refresh(msg)
        return msg

    def delete(self, message_id: int) -> bool:
        msg = self.get_message(message_id)
        if not msg:
            return False
        self.db.delete(msg)
        self.db.commit()
        return True
