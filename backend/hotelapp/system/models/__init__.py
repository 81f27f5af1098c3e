"""
System ORM models
"""
from hotelapp.system.models.config import SystemConfig, ConfigType
from hotelapp.system.models.message import SupportMessage

__all__ = ["SystemConfig", "ConfigType", "SupportMessage"]
