# API Routers
from hotelapp.routers import rooms, customers, reservations, services, payments, landing, jobs

__all__ = ['rooms', 'customers', 'reservations', 'services', 'payments', 'landing', 'jobs']
