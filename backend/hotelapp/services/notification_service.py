"""
Customer notifications built from configurable message templates

Templates are configuration entries whose value holds {placeholder} tokens.
A missing, empty or unreadable template falls back to the built-in default
for the same key, rendered with the same values.
"""
import logging
import re
from typing import Dict, Optional

from sqlalchemy.orm import Session

from hotelcore.clock import Clock, SystemClock
from hotelcore.notification import INotificationChannel, Notification, SYSTEM_SENDER
from hotelapp.jobs.interfaces import ConfigLookup
from hotelapp.models.ontology import Customer, Reservation, ServiceContract
from hotelapp.system.notification.internal_channel import SupportMessageChannel
from hotelapp.system.services.config_service import ConfigService

logger = logging.getLogger(__name__)

# Template keys
MSG_RESERVA_AUTO_CHECKOUT = "MSG_RESERVA_AUTO_CHECKOUT"
MSG_ADMIN_FINALIZE = "MSG_ADMIN_FINALIZE"
MSG_ADMIN_FORCED_FINALIZE = "MSG_ADMIN_FORCED_FINALIZE"
MSG_SERVICE_CONFIRMADO = "MSG_SERVICE_CONFIRMADO"
MSG_SERVICE_COMPLETADO = "MSG_SERVICE_COMPLETADO"
MSG_SERVICE_CANCELADO = "MSG_SERVICE_CANCELADO"

_FINALIZED_DEFAULT = "Su reserva con ID {reservaId} ha sido finalizada. Gracias por su estancia."

DEFAULT_MESSAGES: Dict[str, str] = {
    MSG_RESERVA_AUTO_CHECKOUT: _FINALIZED_DEFAULT,
    MSG_ADMIN_FINALIZE: _FINALIZED_DEFAULT,
    MSG_ADMIN_FORCED_FINALIZE: _FINALIZED_DEFAULT,
    MSG_SERVICE_CONFIRMADO: "Su servicio \"{servicioNombre}\" para {fechaServicio} ha sido confirmado.",
    MSG_SERVICE_COMPLETADO: "✔️ El servicio \"{servicioNombre}\" ha sido marcado como completado.",
    MSG_SERVICE_CANCELADO: "Su servicio \"{servicioNombre}\" para {fechaServicio} ha sido cancelado.",
}

UNKNOWN_RECIPIENT = "unknown"
DEFAULT_FIRST_NAME = "Cliente"
DEFAULT_SERVICE_NAME = "Servicio"

_TOKEN = re.compile(r"\{(\w+)\}")


def render_template(template: str, values: Dict[str, str]) -> str:
    """Replace {token} with values[token]; unknown tokens stay verbatim"""
    def _sub(match):
        name = match.group(1)
        return str(values[name]) if name in values else match.group(0)
    return _TOKEN.sub(_sub, template)


def customer_display_name(customer: Customer) -> str:
    first = customer.first_name or DEFAULT_FIRST_NAME
    last = customer.last_name or ""
    return f"{first} {last}".strip()


def _iso(value) -> str:
    return value.isoformat() if value is not None else ""


def reservation_values(reservation: Reservation) -> Dict[str, str]:
    """Placeholder values for reservation messages"""
    customer = reservation.customer
    first_name = customer.first_name if customer is not None else None
    return {
        "reservaId": str(reservation.id) if reservation.id is not None else "",
        "clienteNombre": first_name or DEFAULT_FIRST_NAME,
        "fechaInicio": _iso(reservation.start_at),
        "fechaFin": _iso(reservation.end_at),
    }


def contract_values(contract: ServiceContract) -> Dict[str, str]:
    """Placeholder values for contracted-service messages"""
    service = contract.service
    total = contract.total
    return {
        "servicioNombre": service.name if service is not None and service.name else DEFAULT_SERVICE_NAME,
        "fechaServicio": _iso(contract.scheduled_at),
        "total": str(total) if total is not None else "",
        "reservaId": str(contract.reservation_id) if contract.reservation_id is not None else "",
    }


class NotificationService:
    """Renders templated messages and hands them to a channel"""

    def __init__(self, config: ConfigLookup, channel: INotificationChannel,
                 clock: Optional[Clock] = None):
        self.config = config
        self.channel = channel
        self.clock = clock or SystemClock()

    def resolve_text(self, key: str, values: Dict[str, str]) -> str:
        """Configured template for key rendered with values, or the default for key"""
        template = None
        try:
            template = self.config.find_by_key(key)
        except Exception:
            logger.exception(f"Template lookup failed for {key}, using default message")

        if not template:
            template = DEFAULT_MESSAGES.get(key, "")
        return render_template(template, values)

    def build(self, customer: Customer, key: str, values: Dict[str, str],
              reservation_id: Optional[int] = None) -> Notification:
        return Notification(
            recipient_id=customer.keycloak_id or UNKNOWN_RECIPIENT,
            recipient_name=customer_display_name(customer),
            content=self.resolve_text(key, values),
            sent_at=self.clock.now(),
            sender=SYSTEM_SENDER,
            is_read=False,
            is_active=True,
            reservation_id=reservation_id,
        )

    def notify_customer(self, customer: Optional[Customer], key: str, values: Dict[str, str],
                        reservation_id: Optional[int] = None) -> Optional[Notification]:
        """Build and send a message to customer

        Returns the delivered notification, or None when there is no customer
        or the channel failed. Channel failures are logged, never raised.
        """
        if customer is None:
            return None

        notification = self.build(customer, key, values, reservation_id)
        try:
            self.channel.send(notification)
        except Exception:
            logger.exception(
                f"{self.channel.get_channel_type()} channel failed to deliver {key} "
                f"to {notification.recipient_id}"
            )
            return None
        return notification

    def notify_reservation(self, reservation: Reservation, key: str) -> Optional[Notification]:
        return self.notify_customer(
            reservation.customer, key, reservation_values(reservation),
            reservation_id=reservation.id,
        )

    def notify_contract(self, contract: ServiceContract, key: str) -> Optional[Notification]:
        return self.notify_customer(
            contract.customer, key, contract_values(contract),
            reservation_id=contract.reservation_id,
        )


def build_notifier(db: Session, clock: Optional[Clock] = None) -> NotificationService:
    """Notifier reading templates from system config and writing to the support inbox"""
    return NotificationService(ConfigService(db), SupportMessageChannel(db), clock)
