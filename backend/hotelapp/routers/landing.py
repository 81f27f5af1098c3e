"""
Public landing page content; edits need admin
"""
from typing import List
from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from hotelapp.database import get_db
from hotelapp.models.schemas import (
    HeroSectionUpsert, HeroSectionResponse,
    CarouselItemCreate, CarouselItemUpdate, CarouselItemResponse,
    ContactSectionUpsert, ContactSectionResponse, LandingResponse
)
from hotelapp.security.auth import CurrentUser, require_admin
from hotelapp.services.landing_service import LandingService

router = APIRouter(prefix="/landing", tags=["Landing"])


@router.get("", response_model=LandingResponse)
def get_landing(db: Session = Depends(get_db)):
    return LandingService(db).get_landing()


@router.put("/hero", response_model=HeroSectionResponse)
def upsert_hero(
    data: HeroSectionUpsert,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin)
):
    return LandingService(db).upsert_hero(data)


@router.put("/contact", response_model=ContactSectionResponse)
def upsert_contact(
    data: ContactSectionUpsert,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin)
):
    return LandingService(db).upsert_contact(data)


# ============== Carousel ==============

@router.get("/carousel", response_model=List[CarouselItemResponse])
def list_carousel(
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin)
):
    """Every carousel item, hidden ones included"""
    return LandingService(db).get_carousel(active_only=False)


@router.post("/carousel", response_model=CarouselItemResponse, status_code=status.HTTP_201_CREATED)
def create_carousel_item(
    data: CarouselItemCreate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin)
):
    return LandingService(db).create_carousel_item(data)


@router.put("/carousel/{item_id}", response_model=CarouselItemResponse)
def update_carousel_item(
    item_id: int,
    data: CarouselItemUpdate,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin)
):
    try:
        return LandingService(db).update_carousel_item(item_id, data)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.delete("/carousel/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_carousel_item(
    item_id: int,
    db: Session = Depends(get_db),
    current_user: CurrentUser = Depends(require_admin)
):
    if not LandingService(db).delete_carousel_item(item_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Carousel item not found")
