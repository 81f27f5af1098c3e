"""
System configuration ORM model
- SystemConfig: key/value entries; message templates are TEMPLATE-typed entries
"""
from datetime import datetime
from enum import Enum

from sqlalchemy import Column, Integer, String, Boolean, DateTime, Enum as SQLEnum

from hotelapp.database import Base


class ConfigType(str, Enum):
    TEXT = "text"
    NUMBER = "number"
    BOOLEAN = "boolean"
    TEMPLATE = "template"


class SystemConfig(Base):
    """System configuration entry"""
    __tablename__ = "system_config"

    id = Column(Integer, primary_key=True, index=True)
    key = Column(String(100), unique=True, nullable=False, index=True)
    value = Column(String(2000))
    value_type = Column(SQLEnum(ConfigType), default=ConfigType.TEXT, nullable=False)
    category = Column(String(50), index=True)  # messages, general, ...
    description = Column(String(500))
    is_active = Column(Boolean, default=True, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
