"""
Room service: categories, rooms and availability over a date range
"""
from datetime import datetime
from typing import List, Optional, Set
from sqlalchemy.orm import Session
from hotelcore.clock import to_naive_utc
from hotelapp.models.ontology import (
    Room, RoomCategory, RoomStatus, Reservation, ReservationDetail, ReservationStatus
)
from hotelapp.models.schemas import (
    RoomCategoryCreate, RoomCategoryUpdate, RoomCreate, RoomUpdate
)

# Reservations in these states never hold a room
NON_BLOCKING_STATUSES = (ReservationStatus.CANCELLED, ReservationStatus.FINALIZED)


class RoomService:
    """Room service"""

    def __init__(self, db: Session):
        self.db = db

    # ============== Categories ==============

    def get_categories(self, is_active: Optional[bool] = None) -> List[RoomCategory]:
        query = self.db.query(RoomCategory)
        if is_active is not None:
            query = query.filter(RoomCategory.is_active == is_active)
        return query.order_by(RoomCategory.name).all()

    def get_category(self, category_id: int) -> Optional[RoomCategory]:
        return self.db.query(RoomCategory).filter(RoomCategory.id == category_id).first()

    def get_category_by_name(self, name: str) -> Optional[RoomCategory]:
        return self.db.query(RoomCategory).filter(RoomCategory.name == name).first()

    def create_category(self, data: RoomCategoryCreate) -> RoomCategory:
        if self.get_category_by_name(data.name):
            raise ValueError(f"Room category '{data.name}' already exists")

        category = RoomCategory(**data.model_dump())
        self.db.add(category)
        self.db.commit()
        self.db.refresh(category)
        return category

    def update_category(self, category_id: int, data: RoomCategoryUpdate) -> RoomCategory:
        category = self.get_category(category_id)
        if not category:
            raise ValueError("Room category not found")

        update_data = data.model_dump(exclude_unset=True)
        if 'name' in update_data:
            existing = self.get_category_by_name(update_data['name'])
            if existing and existing.id != category_id:
                raise ValueError(f"Room category '{update_data['name']}' already exists")

        for key, value in update_data.items():
            setattr(category, key, value)

        self.db.commit()
        self.db.refresh(category)
        return category

    def delete_category(self, category_id: int) -> bool:
        category = self.get_category(category_id)
        if not category:
            raise ValueError("Room category not found")

        room_count = self.db.query(Room).filter(Room.category_id == category_id).count()
        if room_count > 0:
            raise ValueError(f"Category still has {room_count} rooms, deactivate it instead")

        self.db.delete(category)
        self.db.commit()
        return True

    def get_category_with_count(self, category_id: int) -> Optional[dict]:
        category = self.get_category(category_id)
        if not category:
            return None

        room_count = self.db.query(Room).filter(
            Room.category_id == category_id,
            Room.is_active == True
        ).count()

        return {
            'id': category.id,
            'name': category.name,
            'description': category.description,
            'base_price': category.base_price,
            'is_active': category.is_active,
            'created_at': category.created_at,
            'room_count': room_count,
        }

    # ============== Rooms ==============

    def get_rooms(self, category_id: Optional[int] = None, status: Optional[RoomStatus] = None,
                  is_active: Optional[bool] = None) -> List[Room]:
        query = self.db.query(Room)
        if category_id:
            query = query.filter(Room.category_id == category_id)
        if status:
            query = query.filter(Room.status == status)
        if is_active is not None:
            query = query.filter(Room.is_active == is_active)
        return query.order_by(Room.number).all()

    def get_room(self, room_id: int) -> Optional[Room]:
        return self.db.query(Room).filter(Room.id == room_id).first()

    def get_room_by_number(self, number: str) -> Optional[Room]:
        return self.db.query(Room).filter(Room.number == number).first()

    def create_room(self, data: RoomCreate) -> Room:
        if self.get_room_by_number(data.number):
            raise ValueError(f"Room number '{data.number}' already exists")

        if data.category_id is not None and not self.get_category(data.category_id):
            raise ValueError("Room category not found")

        room = Room(**data.model_dump())
        self.db.add(room)
        self.db.commit()
        self.db.refresh(room)
        return room

    def update_room(self, room_id: int, data: RoomUpdate) -> Room:
        room = self.get_room(room_id)
        if not room:
            raise ValueError("Room not found")

        update_data = data.model_dump(exclude_unset=True)

        if update_data.get('category_id') is not None:
            if not self.get_category(update_data['category_id']):
                raise ValueError("Room category not found")
        if 'number' in update_data:
            existing = self.get_room_by_number(update_data['number'])
            if existing and existing.id != room_id:
                raise ValueError(f"Room number '{update_data['number']}' already exists")

        for key, value in update_data.items():
            setattr(room, key, value)

        self.db.commit()
        self.db.refresh(room)
        return room

    def set_room_active(self, room_id: int, active: bool) -> Room:
        room = self.get_room(room_id)
        if not room:
            raise ValueError("Room not found")
        room.is_active = active
        self.db.commit()
        self.db.refresh(room)
        return room

    def delete_room(self, room_id: int) -> bool:
        room = self.get_room(room_id)
        if not room:
            raise ValueError("Room not found")

        line_count = self.db.query(ReservationDetail).filter(ReservationDetail.room_id == room_id).count()
        if line_count > 0:
            raise ValueError("Room has reservation history, deactivate it instead")

        self.db.delete(room)
        self.db.commit()
        return True

    # ============== Availability ==============

    def get_occupied_room_ids(self, start: datetime, end: datetime,
                              exclude_detail_id: Optional[int] = None,
                              exclude_reservation_id: Optional[int] = None) -> Set[int]:
        """Rooms held by an active, non-cancelled, non-finalized reservation overlapping [start, end)"""
        start, end = to_naive_utc(start), to_naive_utc(end)
        query = self.db.query(ReservationDetail.room_id).join(Reservation).filter(
            ReservationDetail.is_active == True,
            Reservation.is_active == True,
            ~Reservation.status.in_(NON_BLOCKING_STATUSES),
            Reservation.start_at < end,
            Reservation.end_at > start,
        )
        if exclude_detail_id is not None:
            query = query.filter(ReservationDetail.id != exclude_detail_id)
        if exclude_reservation_id is not None:
            query = query.filter(ReservationDetail.reservation_id != exclude_reservation_id)
        return {row[0] for row in query.distinct().all()}

    def get_available_rooms(self, start: datetime, end: datetime,
                            category_id: Optional[int] = None,
                            min_capacity: Optional[int] = None) -> List[Room]:
        """Active rooms free over [start, end)"""
        if to_naive_utc(end) <= to_naive_utc(start):
            raise ValueError("End of the range must be after its start")

        occupied = self.get_occupied_room_ids(start, end)
        query = self.db.query(Room).filter(Room.is_active == True)
        if occupied:
            query = query.filter(~Room.id.in_(occupied))
        if category_id:
            query = query.filter(Room.category_id == category_id)
        if min_capacity:
            query = query.filter(Room.capacity >= min_capacity)
        return query.order_by(Room.number).all()
