"""
System configuration API
Prefix: /configs
"""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, status
from pydantic import BaseModel, ConfigDict, Field
from sqlalchemy.orm import Session

from hotelapp.database import get_db
from hotelapp.models.schemas import PartialUpdate
from hotelapp.security.auth import CurrentUser, require_admin
from hotelapp.system.models.config import ConfigType
from hotelapp.system.services.config_service import ConfigService

router = APIRouter(prefix="/configs", tags=["System config"])


# ---- Pydantic schemas ----

class ConfigCreate(BaseModel):
    key: str = Field(..., min_length=1, max_length=100)
    value: Optional[str] = Field(None, max_length=2000)
    value_type: ConfigType = ConfigType.TEXT
    category: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = Field(None, max_length=255)
    is_active: bool = True


class ConfigUpdate(PartialUpdate):
    NOT_NULL = ("key", "value_type", "is_active")

    key: Optional[str] = Field(None, min_length=1, max_length=100)
    value: Optional[str] = Field(None, max_length=2000)
    value_type: Optional[ConfigType] = None
    category: Optional[str] = Field(None, max_length=50)
    description: Optional[str] = Field(None, max_length=255)
    is_active: Optional[bool] = None


class ConfigResponse(BaseModel):
    id: int
    key: str
    value: Optional[str] = None
    value_type: ConfigType
    category: Optional[str] = None
    description: Optional[str] = None
    is_active: bool
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(from_attributes=True)


class ConfigValueResponse(BaseModel):
    key: str
    value: str


# ---- Endpoints ----

@router.get("", response_model=List[ConfigResponse])
def list_configs(
    category: Optional[str] = None,
    is_active: Optional[bool] = None,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    """Config entries, optionally by category"""
    return ConfigService(db).get_all(category=category, is_active=is_active)


@router.get("/categories", response_model=List[str])
def list_config_categories(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    return ConfigService(db).get_categories()


@router.get("/key/{config_key}", response_model=ConfigValueResponse)
def get_config_value(config_key: str, db: Session = Depends(get_db)):
    """Value of an active entry (no auth)"""
    value = ConfigService(db).find_by_key(config_key)
    if value is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Config key '{config_key}' not found")
    return ConfigValueResponse(key=config_key, value=value)


@router.get("/{config_id}", response_model=ConfigResponse)
def get_config(
    config_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    config = ConfigService(db).get_by_id(config_id)
    if not config:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Config entry not found")
    return config


@router.post("", response_model=ConfigResponse, status_code=status.HTTP_201_CREATED)
def create_config(
    data: ConfigCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    try:
        return ConfigService(db).create(**data.model_dump())
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.put("/{config_id}", response_model=ConfigResponse)
def update_config(
    config_id: int,
    data: ConfigUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    service = ConfigService(db)
    if not service.get_by_id(config_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Config entry not found")
    try:
        return service.update(config_id, **data.model_dump(exclude_unset=True))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("/{config_id}")
def delete_config(
    config_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin),
):
    if not ConfigService(db).delete(config_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Config entry not found")
    return {"success": True, "message": "Config entry deleted"}
