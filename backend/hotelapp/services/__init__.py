# Business Services
from hotelapp.services.room_service import RoomService
from hotelapp.services.customer_service import CustomerService
from hotelapp.services.reservation_service import ReservationService
from hotelapp.services.catalog_service import CatalogService
from hotelapp.services.service_contract_service import ServiceContractService
from hotelapp.services.payment_service import PaymentService
from hotelapp.services.landing_service import LandingService
from hotelapp.services.notification_service import NotificationService

__all__ = [
    'RoomService', 'CustomerService', 'ReservationService',
    'CatalogService', 'ServiceContractService', 'PaymentService',
    'LandingService', 'NotificationService'
]
