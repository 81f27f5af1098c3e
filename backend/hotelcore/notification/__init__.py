"""
Notification channel abstraction: interfaces only, the app layer implements channels
"""
from hotelcore.notification.channel import INotificationChannel, Notification, SYSTEM_SENDER

__all__ = ["INotificationChannel", "Notification", "SYSTEM_SENDER"]
