"""
Support inbox channel: notifications become SupportMessage rows in the
customer's support thread
"""
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hotelcore.notification import INotificationChannel, Notification
from hotelapp.system.models.message import SupportMessage

logger = logging.getLogger(__name__)


class SupportMessageChannel(INotificationChannel):
    """Writes notifications into the support inbox"""

    def __init__(self, db: Session):
        self.db = db

    def send(self, notification: Notification) -> None:
        message = SupportMessage(
            content=notification.content,
            sent_at=notification.sent_at,
            user_id=notification.recipient_id,
            user_name=notification.recipient_name,
            sender=notification.sender,
            is_read=notification.is_read,
            is_active=notification.is_active,
            reservation_id=notification.reservation_id,
        )
        try:
            self.db.add(message)
            self.db.commit()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        logger.debug(f"Support message {message.id} stored for {notification.recipient_id}")

    def get_channel_type(self) -> str:
        return "support"
