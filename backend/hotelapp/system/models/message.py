"""
Support inbox ORM model
- SupportMessage: one message of a customer's support thread, keyed by the
  customer's identity-provider subject
"""
from datetime import datetime

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Text, ForeignKey
from sqlalchemy.orm import relationship

from hotelapp.database import Base


class SupportMessage(Base):
    """Support-chat message"""
    __tablename__ = "support_messages"

    id = Column(Integer, primary_key=True, index=True)
    content = Column(Text, nullable=False)
    sent_at = Column(DateTime, default=datetime.utcnow, nullable=False, index=True)
    user_id = Column(String(100), nullable=False, index=True)
    user_name = Column(String(200))
    sender = Column(String(20), nullable=False, default="SYSTEM")  # SYSTEM, CLIENT, EMPLOYEE, ADMIN
    is_read = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    reservation_id = Column(Integer, ForeignKey("reservations.id"))

    reservation = relationship("Reservation")
