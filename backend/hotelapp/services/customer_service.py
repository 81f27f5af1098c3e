"""
Customer service
"""
from typing import List, Optional
from sqlalchemy import or_
from sqlalchemy.orm import Session
from hotelapp.models.ontology import Customer
from hotelapp.models.schemas import CustomerCreate, CustomerUpdate


class CustomerService:
    """Customer service"""

    def __init__(self, db: Session):
        self.db = db

    def get_customers(self, search: Optional[str] = None,
                      is_active: Optional[bool] = None) -> List[Customer]:
        query = self.db.query(Customer)
        if search:
            query = query.filter(or_(
                Customer.first_name.contains(search),
                Customer.last_name.contains(search),
                Customer.email.contains(search),
                Customer.id_number.contains(search),
            ))
        if is_active is not None:
            query = query.filter(Customer.is_active == is_active)
        return query.order_by(Customer.last_name, Customer.first_name).all()

    def get_customer(self, customer_id: int) -> Optional[Customer]:
        return self.db.query(Customer).filter(Customer.id == customer_id).first()

    def get_by_email(self, email: str) -> Optional[Customer]:
        return self.db.query(Customer).filter(Customer.email == email).first()

    def get_by_keycloak_id(self, keycloak_id: str) -> Optional[Customer]:
        return self.db.query(Customer).filter(Customer.keycloak_id == keycloak_id).first()

    def _check_unique(self, email: Optional[str], keycloak_id: Optional[str],
                      customer_id: Optional[int] = None) -> None:
        if email:
            existing = self.get_by_email(email)
            if existing and existing.id != customer_id:
                raise ValueError(f"Email '{email}' is already registered")
        if keycloak_id:
            existing = self.get_by_keycloak_id(keycloak_id)
            if existing and existing.id != customer_id:
                raise ValueError("Identity account is already linked to another customer")

    def create_customer(self, data: CustomerCreate) -> Customer:
        self._check_unique(data.email, data.keycloak_id)
        customer = Customer(**data.model_dump())
        self.db.add(customer)
        self.db.commit()
        self.db.refresh(customer)
        return customer

    def update_customer(self, customer_id: int, data: CustomerUpdate) -> Customer:
        customer = self.get_customer(customer_id)
        if not customer:
            raise ValueError("Customer not found")

        update_data = data.model_dump(exclude_unset=True)
        self._check_unique(update_data.get('email'), update_data.get('keycloak_id'), customer_id)

        for key, value in update_data.items():
            setattr(customer, key, value)

        self.db.commit()
        self.db.refresh(customer)
        return customer

    def delete_customer(self, customer_id: int) -> bool:
        customer = self.get_customer(customer_id)
        if not customer:
            raise ValueError("Customer not found")
        if customer.reservations:
            raise ValueError("Customer has reservations, deactivate instead")

        self.db.delete(customer)
        self.db.commit()
        return True
