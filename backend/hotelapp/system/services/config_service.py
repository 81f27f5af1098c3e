"""
System configuration service: key/value entries and message templates
"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from hotelapp.system.models.config import SystemConfig, ConfigType

logger = logging.getLogger(__name__)


class ConfigService:
    def __init__(self, db: Session):
        self.db = db

    def get_all(self, category: Optional[str] = None,
                is_active: Optional[bool] = None) -> List[SystemConfig]:
        query = self.db.query(SystemConfig)
        if category:
            query = query.filter(SystemConfig.category == category)
        if is_active is not None:
            query = query.filter(SystemConfig.is_active == is_active)
        return query.order_by(SystemConfig.category, SystemConfig.key).all()

    def get_by_id(self, config_id: int) -> Optional[SystemConfig]:
        return self.db.query(SystemConfig).filter(SystemConfig.id == config_id).first()

    def get_by_key(self, key: str) -> Optional[SystemConfig]:
        return self.db.query(SystemConfig).filter(SystemConfig.key == key).first()

    def find_by_key(self, key: str) -> Optional[str]:
        """Value of an active entry, or None; inactive entries count as missing

        A failed lookup rolls the session back before re-raising so the
        caller can keep using it.
        """
        try:
            cfg = self.db.query(SystemConfig).filter(
                SystemConfig.key == key,
                SystemConfig.is_active == True,
            ).first()
        except SQLAlchemyError:
            self.db.rollback()
            raise
        return cfg.value if cfg else None

    def get_categories(self) -> List[str]:
        rows = self.db.query(SystemConfig.category).filter(
            SystemConfig.category.isnot(None)
        ).distinct().all()
        return sorted(r[0] for r in rows)

    def create(self, key: str, value: Optional[str] = None,
               value_type: ConfigType = ConfigType.TEXT,
               category: Optional[str] = None, description: Optional[str] = None,
               is_active: bool = True) -> SystemConfig:
        if self.get_by_key(key):
            raise ValueError(f"Config key already exists: {key}")
        cfg = SystemConfig(
            key=key, value=value, value_type=value_type,
            category=category, description=description, is_active=is_active,
        )
        self.db.add(cfg)
        self.db.commit()
        self.db.refresh(cfg)
        logger.info(f"Config created: {key}")
        return cfg

    def update(self, config_id: int, **fields) -> SystemConfig:
        cfg = self.get_by_id(config_id)
        if not cfg:
            raise ValueError("Config entry not found")
        new_key = fields.get("key")
        if new_key and new_key != cfg.key and self.get_by_key(new_key):
            raise ValueError(f"Config key already exists: {new_key}")
        for field_name, value in fields.items():
            setattr(cfg, field_name, value)
        cfg.updated_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(cfg)
        return cfg

    def delete(self, config_id: int) -> bool:
        cfg = self.get_by_id(config_id)
        if not cfg:
            return False
        self.db.delete(cfg)
        self.db.commit()
        logger.info(f"Config deleted: {cfg.key}")
        return True
