"""
Notification channel interface: framework-agnostic notification abstraction

The app layer implements INotificationChannel for concrete channels (the
support-message inbox, e-mail, ...). Channels may raise; callers decide
whether a failed delivery matters.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

SYSTEM_SENDER = "SYSTEM"


@dataclass
class Notification:
    """A message addressed to one customer"""

    recipient_id: str
    recipient_name: str
    content: str
    sent_at: datetime
    sender: str = SYSTEM_SENDER
    is_read: bool = False
    is_active: bool = True
    reservation_id: Optional[int] = None


class INotificationChannel(ABC):
    """Notification channel"""

    @abstractmethod
    def send(self, notification: Notification) -> None:
        """Deliver a notification

        Raises:
            any exception when the delivery failed
        """

    @abstractmethod
    def get_channel_type(self) -> str:
        """Channel identifier, e.g. 'support', 'email'"""
