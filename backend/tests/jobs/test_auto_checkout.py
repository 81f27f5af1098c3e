"""
AutoCheckoutJob tests.

Covers:
- overdue CONFIRMED / CHECK_IN reservations are finalized, others untouched
- contract cascade on finalize
- customer notification (default text, configured template, missing customer)
- failure isolation and store outages
"""
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from typing import Dict, List

import pytest

from hotelcore.clock import FixedClock
from hotelapp.jobs.auto_checkout import AutoCheckoutJob
from hotelapp.jobs.base import CHECKOUT_ELIGIBLE_STATUSES
from hotelapp.jobs.interfaces import StoreUnavailableError
from hotelapp.models.ontology import (
    Customer, Reservation, ReservationStatus, Service, ServiceContract, ServiceContractStatus
)
from hotelapp.services.notification_service import NotificationService, MSG_RESERVA_AUTO_CHECKOUT


NOW = datetime(2024, 1, 2, 0, 0)


# ── Fakes ─────────────────────────────────────────────────


class FakeReservationStore:
    def __init__(self, reservations: List[Reservation]):
        self.reservations = reservations
        self.saved: List[int] = []

    def find_overdue_active(self, before: datetime) -> List[Reservation]:
        return [r for r in self.reservations
                if r.status in CHECKOUT_ELIGIBLE_STATUSES and r.end_at < before]

    def save(self, reservation: Reservation) -> None:
        self.saved.append(reservation.id)


class FakeContractStore:
    def __init__(self, contracts: List[ServiceContract] = None):
        self.contracts = contracts or []
        self.saved: List[int] = []

    def find_by_reservation(self, reservation_id: int) -> List[ServiceContract]:
        return [c for c in self.contracts if c.reservation_id == reservation_id]

    def find_overdue_confirmed(self, before: datetime) -> List[ServiceContract]:
        return [c for c in self.contracts
                if c.status == ServiceContractStatus.CONFIRMED and c.scheduled_at < before]

    def save(self, contract: ServiceContract) -> None:
        self.saved.append(contract.id)


class FakeConfig:
    def __init__(self, values: Dict[str, str] = None):
        self.values = values or {}

    def find_by_key(self, key: str):
        return self.values.get(key)


def _customer(keycloak_id="kc-7", first_name="Ana", last_name="García"):
    return Customer(first_name=first_name, last_name=last_name,
                    email=f"{keycloak_id}@example.com", keycloak_id=keycloak_id)


def _reservation(id, end_at, status=ReservationStatus.CONFIRMED, customer=None):
    return Reservation(id=id, start_at=end_at - timedelta(days=3), end_at=end_at,
                       status=status, customer=customer)


def _contract(id, reservation_id, status):
    return ServiceContract(id=id, reservation_id=reservation_id, status=status,
                           quantity=1, unit_price=Decimal("10.00"),
                           service=Service(name="Spa"))


@pytest.fixture
def make_job(recording_channel):
    def _make(reservations, contracts=None, config=None, channel=None):
        res_store = FakeReservationStore(reservations)
        con_store = FakeContractStore(contracts)
        notifier = NotificationService(config or FakeConfig(), channel or recording_channel,
                                       FixedClock(NOW))
        return AutoCheckoutJob(res_store, con_store, notifier, FixedClock(NOW)), res_store, con_store
    return _make


# ── Transitions ───────────────────────────────────────────


class TestAutoCheckoutTransitions:

    def test_overdue_confirmed_reservation_is_finalized_and_notified(self, make_job, recording_channel):
        customer = _customer()
        reservation = _reservation(7, datetime(2024, 1, 1, 0, 0), customer=customer)
        job, res_store, _ = make_job([reservation])

        summary = job.run(datetime(2024, 1, 2, 0, 0, tzinfo=timezone.utc))

        assert reservation.status == ReservationStatus.FINALIZED
        assert res_store.saved == [7]
        assert summary.processed == 1
        assert summary.notified == 1
        assert len(recording_channel.sent) == 1
        notification = recording_channel.sent[0]
        assert notification.recipient_id == "kc-7"
        assert notification.recipient_name == "Ana García"
        assert notification.reservation_id == 7
        assert notification.sender == "SYSTEM"
        assert notification.is_read is False
        assert notification.content == "Su reserva con ID 7 ha sido finalizada. Gracias por su estancia."

    def test_checked_in_reservation_is_finalized(self, make_job):
        reservation = _reservation(3, NOW - timedelta(hours=1), status=ReservationStatus.CHECK_IN)
        job, _, _ = make_job([reservation])

        job.run()

        assert reservation.status == ReservationStatus.FINALIZED

    @pytest.mark.parametrize("status", [
        ReservationStatus.PENDING, ReservationStatus.CANCELLED, ReservationStatus.FINALIZED,
    ])
    def test_other_statuses_are_ignored(self, make_job, recording_channel, status):
        reservation = _reservation(5, NOW - timedelta(days=2), status=status)
        job, res_store, _ = make_job([reservation])

        summary = job.run()

        assert reservation.status == status
        assert summary.processed == 0
        assert res_store.saved == []
        assert recording_channel.sent == []

    def test_end_not_before_now_is_untouched(self, make_job):
        at_now = _reservation(1, NOW)
        later = _reservation(2, NOW + timedelta(minutes=1))
        job, _, _ = make_job([at_now, later])

        summary = job.run()

        assert at_now.status == ReservationStatus.CONFIRMED
        assert later.status == ReservationStatus.CONFIRMED
        assert summary.processed == 0

    def test_second_run_with_same_now_changes_nothing(self, make_job, recording_channel):
        reservation = _reservation(7, NOW - timedelta(days=1), customer=_customer())
        job, res_store, _ = make_job([reservation])

        job.run()
        second = job.run()

        assert reservation.status == ReservationStatus.FINALIZED
        assert second.processed == 0
        assert res_store.saved == [7]
        assert len(recording_channel.sent) == 1

    def test_clock_is_used_when_now_is_omitted(self, make_job):
        reservation = _reservation(4, NOW - timedelta(seconds=1))
        job, _, _ = make_job([reservation])

        summary = job.run()

        assert summary.now == NOW
        assert reservation.status == ReservationStatus.FINALIZED


# ── Cascade ───────────────────────────────────────────────


class TestAutoCheckoutCascade:

    def test_cascade_settles_contracts(self, make_job):
        reservation = _reservation(10, NOW - timedelta(days=1))
        confirmed = _contract(1, 10, ServiceContractStatus.CONFIRMED)
        pending = _contract(2, 10, ServiceContractStatus.PENDING)
        completed = _contract(3, 10, ServiceContractStatus.COMPLETED)
        cancelled = _contract(4, 10, ServiceContractStatus.CANCELLED)
        unrelated = _contract(5, 99, ServiceContractStatus.CONFIRMED)
        job, _, con_store = make_job([reservation], [confirmed, pending, completed, cancelled, unrelated])

        summary = job.run()

        assert confirmed.status == ServiceContractStatus.COMPLETED
        assert pending.status == ServiceContractStatus.CANCELLED
        assert completed.status == ServiceContractStatus.COMPLETED
        assert cancelled.status == ServiceContractStatus.CANCELLED
        assert unrelated.status == ServiceContractStatus.CONFIRMED
        assert summary.cascaded == 2
        assert con_store.saved == [1, 2]

    def test_cascade_without_contracts(self, make_job):
        reservation = _reservation(11, NOW - timedelta(days=1))
        job, _, _ = make_job([reservation])

        assert job.cascade(reservation) == 0


# ── Notifications ─────────────────────────────────────────


class TestAutoCheckoutNotification:

    def test_configured_template_is_rendered(self, make_job, recording_channel):
        reservation = _reservation(42, NOW - timedelta(days=1), customer=_customer())
        config = FakeConfig({MSG_RESERVA_AUTO_CHECKOUT: "Booking #{reservaId} done"})
        job, _, _ = make_job([reservation], config=config)

        job.run()

        assert recording_channel.sent[0].content == "Booking #42 done"

    def test_missing_customer_skips_notification(self, make_job, recording_channel):
        reservation = _reservation(8, NOW - timedelta(days=1), customer=None)
        job, _, _ = make_job([reservation])

        summary = job.run()

        assert reservation.status == ReservationStatus.FINALIZED
        assert summary.notified == 0
        assert summary.failed == []
        assert recording_channel.sent == []

    def test_customer_without_identity_is_addressed_as_unknown(self, make_job, recording_channel):
        customer = _customer(keycloak_id=None, first_name=None, last_name=None)
        reservation = _reservation(8, NOW - timedelta(days=1), customer=customer)
        job, _, _ = make_job([reservation])

        job.run()

        assert recording_channel.sent[0].recipient_id == "unknown"
        assert recording_channel.sent[0].recipient_name == "Cliente"

    def test_channel_failure_keeps_finalized_status(self, make_job, failing_channel):
        first = _reservation(1, NOW - timedelta(days=1), customer=_customer("kc-1"))
        second = _reservation(2, NOW - timedelta(days=1), customer=_customer("kc-2"))
        job, res_store, _ = make_job([first, second], channel=failing_channel)

        summary = job.run()

        assert first.status == ReservationStatus.FINALIZED
        assert second.status == ReservationStatus.FINALIZED
        assert res_store.saved == [1, 2]
        assert summary.notified == 0


# ── Failures ──────────────────────────────────────────────


class TestAutoCheckoutFailures:

    def test_follow_up_error_is_isolated_per_reservation(self, make_job):
        first = _reservation(1, NOW - timedelta(days=1))
        second = _reservation(2, NOW - timedelta(days=1))
        job, _, con_store = make_job([first, second])

        calls = []

        def flaky(reservation_id):
            calls.append(reservation_id)
            if reservation_id == 1:
                raise RuntimeError("boom")
            return []
        con_store.find_by_reservation = flaky

        summary = job.run()

        assert calls == [1, 2]
        assert first.status == ReservationStatus.FINALIZED
        assert second.status == ReservationStatus.FINALIZED
        assert summary.failed == [1]
        assert summary.processed == 2

    def test_store_outage_aborts_the_run(self, make_job):
        reservation = _reservation(1, NOW - timedelta(days=1))
        job, res_store, _ = make_job([reservation])

        def broken(before):
            raise StoreUnavailableError("database down")
        res_store.find_overdue_active = broken

        with pytest.raises(StoreUnavailableError):
            job.run()

    def test_store_outage_during_cascade_propagates(self, make_job):
        reservation = _reservation(1, NOW - timedelta(days=1))
        job, _, con_store = make_job([reservation])

        def broken(reservation_id):
            raise StoreUnavailableError("database down")
        con_store.find_by_reservation = broken

        with pytest.raises(StoreUnavailableError):
            job.run()
        assert reservation.status == ReservationStatus.FINALIZED

    def test_summary_to_dict(self, make_job):
        job, _, _ = make_job([_reservation(1, NOW - timedelta(days=1))])

        data = job.run().to_dict()

        assert data["job_id"] == "reservation_auto_checkout"
        assert data["now"] == NOW.isoformat()
        assert data["processed"] == 1
