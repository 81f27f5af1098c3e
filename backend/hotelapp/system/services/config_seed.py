"""
System configuration seed data: default customer message templates
"""
from sqlalchemy.orm import Session

from hotelapp.services.notification_service import (
    MSG_RESERVA_AUTO_CHECKOUT, MSG_ADMIN_FINALIZE, MSG_ADMIN_FORCED_FINALIZE,
    MSG_SERVICE_CONFIRMADO, MSG_SERVICE_COMPLETADO, MSG_SERVICE_CANCELADO,
)
from hotelapp.system.models.config import SystemConfig, ConfigType


SEED_CONFIGS = [
    # ========== Reservation messages ==========
    {
        "key": MSG_RESERVA_AUTO_CHECKOUT, "category": "messages",
        "value": "Hola {clienteNombre}, su reserva #{reservaId} finalizó el {fechaFin}. "
                 "Gracias por su estancia.",
        "description": "Sent when a reservation is finalized automatically after its end date. "
                       "Placeholders: {reservaId}, {clienteNombre}, {fechaInicio}, {fechaFin}",
    },
    {
        "key": MSG_ADMIN_FINALIZE, "category": "messages",
        "value": "Hola {clienteNombre}, su reserva #{reservaId} ha sido finalizada. "
                 "Gracias por su estancia.",
        "description": "Sent when staff finalize a checked-in reservation. "
                       "Placeholders: {reservaId}, {clienteNombre}, {fechaInicio}, {fechaFin}",
    },
    {
        "key": MSG_ADMIN_FORCED_FINALIZE, "category": "messages",
        "value": "Hola {clienteNombre}, su reserva #{reservaId} ha sido finalizada por la administración.",
        "description": "Sent when an administrator finalizes a reservation that never checked in. "
                       "Placeholders: {reservaId}, {clienteNombre}, {fechaInicio}, {fechaFin}",
    },
    # ========== Service messages ==========
    {
        "key": MSG_SERVICE_CONFIRMADO, "category": "messages",
        "value": "Su servicio \"{servicioNombre}\" para {fechaServicio} ha sido confirmado. Total: {total}",
        "description": "Sent when a contracted service is confirmed. "
                       "Placeholders: {servicioNombre}, {fechaServicio}, {total}",
    },
    {
        "key": MSG_SERVICE_COMPLETADO, "category": "messages",
        "value": "✔️ El servicio \"{servicioNombre}\" ha sido marcado como completado.",
        "description": "Sent when a contracted service is completed, manually or automatically. "
                       "Placeholders: {servicioNombre}, {fechaServicio}, {total}",
    },
    {
        "key": MSG_SERVICE_CANCELADO, "category": "messages",
        "value": "Su servicio \"{servicioNombre}\" para {fechaServicio} ha sido cancelado.",
        "description": "Sent when a contracted service is cancelled. "
                       "Placeholders: {servicioNombre}, {fechaServicio}, {total}",
    },
]


def seed_config_data(db: Session) -> dict:
    """Seed default message templates. Idempotent: skips existing keys.

    Returns dict with count of created items.
    """
    stats = {"configs": 0}

    for cfg in SEED_CONFIGS:
        existing = db.query(SystemConfig).filter(SystemConfig.key == cfg["key"]).first()
        if not existing:
            db.add(SystemConfig(value_type=ConfigType.TEMPLATE, **cfg))
            stats["configs"] += 1

    if stats["configs"] > 0:
        db.commit()
    return stats
