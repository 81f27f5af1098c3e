"""
Rooms and room categories
Listings and availability are public; changes need staff, deletes need admin
"""
from typing import List, Optional
from datetime import datetime
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from hotelapp.database import get_db
from hotelapp.models.ontology import Room, RoomStatus
from hotelapp.models.schemas import (
    RoomCategoryCreate, RoomCategoryUpdate, RoomCategoryResponse,
    RoomCreate, RoomUpdate, RoomResponse
)
from hotelapp.security.auth import CurrentUser, require_admin, require_staff
from hotelapp.services.room_service import RoomService

router = APIRouter(prefix="/rooms", tags=["Rooms"])
category_router = APIRouter(prefix="/room-categories", tags=["Room categories"])


def _room_response(room: Room) -> RoomResponse:
    response = RoomResponse.model_validate(room)
    response.category_name = room.category.name if room.category else None
    return response


# ============== Categories ==============

@category_router.get("", response_model=List[RoomCategoryResponse])
def list_categories(
    is_active: Optional[bool] = None,
    db: Session = Depends(get_db)
):
    """All room categories"""
    service = RoomService(db)
    return [RoomCategoryResponse(**service.get_category_with_count(c.id))
            for c in service.get_categories(is_active)]


@category_router.get("/{category_id}", response_model=RoomCategoryResponse)
def get_category(category_id: int, db: Session = Depends(get_db)):
    data = RoomService(db).get_category_with_count(category_id)
    if not data:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room category not found")
    return RoomCategoryResponse(**data)


@category_router.post("", response_model=RoomCategoryResponse, status_code=status.HTTP_201_CREATED)
def create_category(
    data: RoomCategoryCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin)
):
    service = RoomService(db)
    try:
        category = service.create_category(data)
        return RoomCategoryResponse(**service.get_category_with_count(category.id))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@category_router.put("/{category_id}", response_model=RoomCategoryResponse)
def update_category(
    category_id: int,
    data: RoomCategoryUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin)
):
    service = RoomService(db)
    if not service.get_category(category_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room category not found")
    try:
        category = service.update_category(category_id, data)
        return RoomCategoryResponse(**service.get_category_with_count(category.id))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@category_router.delete("/{category_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_category(
    category_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin)
):
    service = RoomService(db)
    if not service.get_category(category_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room category not found")
    try:
        service.delete_category(category_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


# ============== Rooms ==============

@router.get("", response_model=List[RoomResponse])
def list_rooms(
    category_id: Optional[int] = None,
    room_status: Optional[RoomStatus] = Query(None, alias="status"),
    is_active: Optional[bool] = None,
    db: Session = Depends(get_db)
):
    """Rooms, optionally filtered"""
    rooms = RoomService(db).get_rooms(category_id, room_status, is_active)
    return [_room_response(r) for r in rooms]


@router.get("/active", response_model=List[RoomResponse])
def list_active_rooms(db: Session = Depends(get_db)):
    return [_room_response(r) for r in RoomService(db).get_rooms(is_active=True)]


@router.get("/inactive", response_model=List[RoomResponse])
def list_inactive_rooms(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    return [_room_response(r) for r in RoomService(db).get_rooms(is_active=False)]


@router.get("/available", response_model=List[RoomResponse])
def list_available_rooms(
    start: datetime,
    end: datetime,
    category_id: Optional[int] = None,
    min_capacity: Optional[int] = Query(None, ge=1),
    db: Session = Depends(get_db)
):
    """Active rooms with no overlapping booking in [start, end)"""
    try:
        rooms = RoomService(db).get_available_rooms(start, end, category_id, min_capacity)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    return [_room_response(r) for r in rooms]


@router.get("/{room_id}", response_model=RoomResponse)
def get_room(room_id: int, db: Session = Depends(get_db)):
    room = RoomService(db).get_room(room_id)
    if not room:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    return _room_response(room)


@router.post("", response_model=RoomResponse, status_code=status.HTTP_201_CREATED)
def create_room(
    data: RoomCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    try:
        return _room_response(RoomService(db).create_room(data))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.put("/{room_id}", response_model=RoomResponse)
def update_room(
    room_id: int,
    data: RoomUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    service = RoomService(db)
    if not service.get_room(room_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    try:
        return _room_response(service.update_room(room_id, data))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.post("/{room_id}/activate", response_model=RoomResponse)
def activate_room(
    room_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    service = RoomService(db)
    if not service.get_room(room_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    return _room_response(service.set_room_active(room_id, True))


@router.post("/{room_id}/deactivate", response_model=RoomResponse)
def deactivate_room(
    room_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_staff)
):
    service = RoomService(db)
    if not service.get_room(room_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    return _room_response(service.set_room_active(room_id, False))


@router.delete("/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_room(
    room_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin)
):
    service = RoomService(db)
    if not service.get_room(room_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    try:
        service.delete_room(room_id)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
