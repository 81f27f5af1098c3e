"""
Landing page content: hero, carousel and contact sections
"""
from typing import List, Optional
from sqlalchemy.orm import Session
from hotelapp.models.ontology import HeroSection, CarouselItem, ContactSection
from hotelapp.models.schemas import (
    HeroSectionUpsert, CarouselItemCreate, CarouselItemUpdate, ContactSectionUpsert
)


class LandingService:
    """Landing content"""

    def __init__(self, db: Session):
        self.db = db

    def _upsert_single(self, model, values: dict):
        """Hero and contact keep one active record; it is updated in place"""
        record = self.db.query(model).filter(model.is_active == True).order_by(model.id).first()
        if record is None:
            record = model(is_active=True, **values)
            self.db.add(record)
        else:
            for key, value in values.items():
                setattr(record, key, value)
        self.db.commit()
        self.db.refresh(record)
        return record

    def get_hero(self) -> Optional[HeroSection]:
        return self.db.query(HeroSection).filter(HeroSection.is_active == True) \
            .order_by(HeroSection.id).first()

    def upsert_hero(self, data: HeroSectionUpsert) -> HeroSection:
        return self._upsert_single(HeroSection, data.model_dump())

    def get_contact(self) -> Optional[ContactSection]:
        return self.db.query(ContactSection).filter(ContactSection.is_active == True) \
            .order_by(ContactSection.id).first()

    def upsert_contact(self, data: ContactSectionUpsert) -> ContactSection:
        return self._upsert_single(ContactSection, data.model_dump())

    # ============== Carousel ==============

    def get_carousel(self, active_only: bool = True) -> List[CarouselItem]:
        query = self.db.query(CarouselItem)
        if active_only:
            query = query.filter(CarouselItem.is_active == True)
        return query.order_by(CarouselItem.position, CarouselItem.id).all()

    def get_carousel_item(self, item_id: int) -> Optional[CarouselItem]:
        return self.db.query(CarouselItem).filter(CarouselItem.id == item_id).first()

    def create_carousel_item(self, data: CarouselItemCreate) -> CarouselItem:
        item = CarouselItem(**data.model_dump())
        self.db.add(item)
        self.db.commit()
        self.db.refresh(item)
        return item

    def update_carousel_item(self, item_id: int, data: CarouselItemUpdate) -> CarouselItem:
        item = self.get_carousel_item(item_id)
        if not item:
            raise ValueError("Carousel item not found")
        for key, value in data.model_dump(exclude_unset=True).items():
            setattr(item, key, value)
        self.db.commit()
        self.db.refresh(item)
        return item

    def delete_carousel_item(self, item_id: int) -> bool:
        item = self.get_carousel_item(item_id)
        if not item:
            return False
        self.db.delete(item)
        self.db.commit()
        return True

    def get_landing(self) -> dict:
        return {
            'hero': self.get_hero(),
            'carousel': self.get_carousel(),
            'contact': self.get_contact(),
        }
