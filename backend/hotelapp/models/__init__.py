# Domain models
from hotelapp.models.ontology import (
    RoomCategory, Room, Customer, Reservation, ReservationDetail,
    Service, ServiceAvailability, ServiceContract, Payment,
    HeroSection, CarouselItem, ContactSection
)

__all__ = [
    'RoomCategory', 'Room', 'Customer', 'Reservation', 'ReservationDetail',
    'Service', 'ServiceAvailability', 'ServiceContract', 'Payment',
    'HeroSection', 'CarouselItem', 'ContactSection'
]
