"""
SQL stores and the scheduler wiring of the lifecycle jobs
"""
from datetime import datetime
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from sqlalchemy.exc import OperationalError

from hotelcore.clock import FixedClock
from hotelapp.jobs import scheduling
from hotelapp.jobs.interfaces import StoreUnavailableError
from hotelapp.jobs.scheduling import (
    AUTO_CHECKOUT_JOB_ID, AUTO_COMPLETION_JOB_ID,
    build_auto_checkout_job, build_auto_completion_job, register_lifecycle_jobs,
    run_auto_checkout, run_auto_completion,
)
from hotelapp.jobs.stores import SqlReservationStore, SqlServiceContractStore
from hotelapp.models.ontology import (
    Reservation, ReservationStatus, ServiceContract, ServiceContractStatus
)
from hotelapp.services.notification_service import MSG_RESERVA_AUTO_CHECKOUT
from hotelapp.system.models.config import SystemConfig
from hotelapp.system.models.message import SupportMessage


def _add_reservation(db, customer, end_at, status):
    reservation = Reservation(start_at=datetime(2023, 12, 28), end_at=end_at,
                              status=status, customer_id=customer.id)
    db.add(reservation)
    db.commit()
    db.refresh(reservation)
    return reservation


def _add_contract(db, service, reservation, status, scheduled_at=None, customer=None):
    contract = ServiceContract(
        service_id=service.id, reservation_id=reservation.id if reservation else None,
        customer_id=customer.id if customer else None, status=status,
        scheduled_at=scheduled_at, quantity=1, unit_price=Decimal("25.00"),
    )
    db.add(contract)
    db.commit()
    db.refresh(contract)
    return contract


# ── Stores ────────────────────────────────────────────────


class TestSqlStores:

    def test_find_overdue_active(self, db_session, sample_customer):
        now = datetime(2024, 1, 2)
        overdue = _add_reservation(db_session, sample_customer, datetime(2024, 1, 1), ReservationStatus.CONFIRMED)
        checked_in = _add_reservation(db_session, sample_customer, datetime(2024, 1, 1), ReservationStatus.CHECK_IN)
        _add_reservation(db_session, sample_customer, datetime(2024, 1, 1), ReservationStatus.PENDING)
        _add_reservation(db_session, sample_customer, now, ReservationStatus.CONFIRMED)

        found = SqlReservationStore(db_session).find_overdue_active(now)

        assert [r.id for r in found] == [overdue.id, checked_in.id]

    def test_find_overdue_confirmed(self, db_session, sample_customer, spa_service):
        now = datetime(2024, 1, 2)
        due = _add_contract(db_session, spa_service, None, ServiceContractStatus.CONFIRMED, datetime(2024, 1, 1))
        _add_contract(db_session, spa_service, None, ServiceContractStatus.PENDING, datetime(2024, 1, 1))
        _add_contract(db_session, spa_service, None, ServiceContractStatus.CONFIRMED, now)
        _add_contract(db_session, spa_service, None, ServiceContractStatus.CONFIRMED, None)

        found = SqlServiceContractStore(db_session).find_overdue_confirmed(now)

        assert [c.id for c in found] == [due.id]

    def test_save_persists(self, db_session, sample_customer):
        reservation = _add_reservation(db_session, sample_customer, datetime(2024, 1, 1), ReservationStatus.CONFIRMED)
        reservation.status = ReservationStatus.FINALIZED

        SqlReservationStore(db_session).save(reservation)
        db_session.expire_all()

        assert db_session.get(Reservation, reservation.id).status == ReservationStatus.FINALIZED

    def test_database_error_becomes_store_unavailable(self):
        db = MagicMock()
        db.query.side_effect = OperationalError("SELECT", {}, Exception("disk I/O error"))

        with pytest.raises(StoreUnavailableError):
            SqlReservationStore(db).find_overdue_active(datetime(2024, 1, 1))
        db.rollback.assert_called_once()


# ── Builders over a real session ──────────────────────────


class TestJobBuilders:

    def test_auto_checkout_end_to_end(self, db_session, sample_customer, spa_service):
        reservation = _add_reservation(db_session, sample_customer, datetime(2024, 1, 1), ReservationStatus.CONFIRMED)
        confirmed = _add_contract(db_session, spa_service, reservation, ServiceContractStatus.CONFIRMED)
        pending = _add_contract(db_session, spa_service, reservation, ServiceContractStatus.PENDING)

        summary = build_auto_checkout_job(db_session, FixedClock(datetime(2024, 1, 2))).run()

        db_session.expire_all()
        assert summary.processed == 1
        assert db_session.get(Reservation, reservation.id).status == ReservationStatus.FINALIZED
        assert db_session.get(ServiceContract, confirmed.id).status == ServiceContractStatus.COMPLETED
        assert db_session.get(ServiceContract, pending.id).status == ServiceContractStatus.CANCELLED

        messages = db_session.query(SupportMessage).all()
        assert len(messages) == 1
        assert messages[0].user_id == "kc-client-1"
        assert messages[0].user_name == "Ana García"
        assert messages[0].sender == "SYSTEM"
        assert messages[0].reservation_id == reservation.id
        assert messages[0].sent_at == datetime(2024, 1, 2)
        assert messages[0].content == (
            f"Su reserva con ID {reservation.id} ha sido finalizada. Gracias por su estancia."
        )

    def test_auto_checkout_uses_configured_template(self, db_session, sample_customer):
        db_session.add(SystemConfig(key=MSG_RESERVA_AUTO_CHECKOUT, value="Booking #{reservaId} done"))
        db_session.commit()
        reservation = _add_reservation(db_session, sample_customer, datetime(2024, 1, 1), ReservationStatus.CHECK_IN)

        build_auto_checkout_job(db_session, FixedClock(datetime(2024, 1, 2))).run()

        message = db_session.query(SupportMessage).one()
        assert message.content == f"Booking #{reservation.id} done"

    def test_inactive_template_falls_back_to_default(self, db_session, sample_customer):
        db_session.add(SystemConfig(key=MSG_RESERVA_AUTO_CHECKOUT, value="Booking #{reservaId} done",
                                    is_active=False))
        db_session.commit()
        reservation = _add_reservation(db_session, sample_customer, datetime(2024, 1, 1), ReservationStatus.CHECK_IN)

        build_auto_checkout_job(db_session, FixedClock(datetime(2024, 1, 2))).run()

        message = db_session.query(SupportMessage).one()
        assert message.content.startswith(f"Su reserva con ID {reservation.id} ")

    def test_auto_completion_end_to_end(self, db_session, sample_customer, spa_service):
        due = _add_contract(db_session, spa_service, None, ServiceContractStatus.CONFIRMED,
                            datetime(2024, 1, 1, 10, 0), customer=sample_customer)

        summary = build_auto_completion_job(db_session, FixedClock(datetime(2024, 1, 1, 11, 0))).run()

        db_session.expire_all()
        assert summary.processed == 1
        assert db_session.get(ServiceContract, due.id).status == ServiceContractStatus.COMPLETED
        message = db_session.query(SupportMessage).one()
        assert message.content == '✔️ El servicio "Spa" ha sido marcado como completado.'


# ── Scheduler entry points ────────────────────────────────


class TestSchedulerEntryPoints:

    def test_run_auto_checkout_opens_its_own_session(self, session_factory, db_session, sample_customer):
        reservation = _add_reservation(db_session, sample_customer, datetime(2000, 1, 1), ReservationStatus.CONFIRMED)

        summary = run_auto_checkout(session_factory)

        db_session.expire_all()
        assert summary.processed == 1
        assert db_session.get(Reservation, reservation.id).status == ReservationStatus.FINALIZED

    def test_run_auto_completion_with_nothing_due(self, session_factory):
        summary = run_auto_completion(session_factory)

        assert summary.processed == 0

    def test_store_outage_is_logged_not_raised(self, session_factory, monkeypatch, caplog):
        broken_job = MagicMock()
        broken_job.run.side_effect = StoreUnavailableError("database down")
        monkeypatch.setitem(scheduling.JOB_BUILDERS, AUTO_COMPLETION_JOB_ID, lambda db: broken_job)

        assert run_auto_completion(session_factory) is None
        assert "store unavailable" in caplog.text

    def test_register_lifecycle_jobs(self):
        backend = MagicMock()

        register_lifecycle_jobs(backend)

        calls = {c.args[0]: c for c in backend.add_job.call_args_list}
        assert set(calls) == {AUTO_CHECKOUT_JOB_ID, AUTO_COMPLETION_JOB_ID}
        assert calls[AUTO_CHECKOUT_JOB_ID].args[1] is run_auto_checkout
        assert calls[AUTO_CHECKOUT_JOB_ID].args[2] == "cron"
        assert calls[AUTO_CHECKOUT_JOB_ID].kwargs["cron_expression"] == "0 * * * *"
        assert calls[AUTO_COMPLETION_JOB_ID].args[1] is run_auto_completion
