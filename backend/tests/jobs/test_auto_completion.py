"""
AutoCompletionJob tests: expired CONFIRMED contracts are completed, nothing else moves
"""
from datetime import datetime
from decimal import Decimal

import pytest

from hotelcore.clock import FixedClock
from hotelapp.jobs.auto_completion import AutoCompletionJob
from hotelapp.jobs.interfaces import StoreUnavailableError
from hotelapp.models.ontology import Customer, Service, ServiceContract, ServiceContractStatus
from hotelapp.services.notification_service import NotificationService, MSG_SERVICE_COMPLETADO


class FakeContractStore:
    def __init__(self, contracts):
        self.contracts = contracts
        self.saved = []

    def find_by_reservation(self, reservation_id):
        return [c for c in self.contracts if c.reservation_id == reservation_id]

    def find_overdue_confirmed(self, before):
        return [c for c in self.contracts
                if c.status == ServiceContractStatus.CONFIRMED
                and c.scheduled_at is not None and c.scheduled_at < before]

    def save(self, contract):
        self.saved.append(contract.id)


class DictConfig(dict):
    def find_by_key(self, key):
        return self.get(key)


def _contract(id, scheduled_at, status=ServiceContractStatus.CONFIRMED, customer=None):
    return ServiceContract(
        id=id, scheduled_at=scheduled_at, status=status, quantity=2,
        unit_price=Decimal("12.50"), reservation_id=3,
        service=Service(name="Masaje"), customer=customer,
    )


@pytest.fixture
def make_job(recording_channel):
    def _make(contracts, now, config=None, channel=None):
        store = FakeContractStore(contracts)
        clock = FixedClock(now)
        notifier = NotificationService(config or DictConfig(), channel or recording_channel, clock)
        return AutoCompletionJob(store, notifier, clock), store
    return _make


class TestAutoCompletion:

    def test_contract_scheduled_later_stays_confirmed(self, make_job, recording_channel):
        contract = _contract(9, datetime(2024, 1, 1, 10, 0), customer=Customer(keycloak_id="kc-9"))
        job, store = make_job([contract], datetime(2024, 1, 1, 9, 0))

        summary = job.run()

        assert contract.status == ServiceContractStatus.CONFIRMED
        assert summary.processed == 0
        assert store.saved == []
        assert recording_channel.sent == []

    def test_expired_contract_is_completed_and_notified(self, make_job, recording_channel):
        contract = _contract(9, datetime(2024, 1, 1, 10, 0),
                             customer=Customer(first_name="Ana", keycloak_id="kc-9"))
        job, store = make_job([contract], datetime(2024, 1, 1, 11, 0))

        summary = job.run()

        assert contract.status == ServiceContractStatus.COMPLETED
        assert store.saved == [9]
        assert summary.notified == 1
        notification = recording_channel.sent[0]
        assert notification.recipient_id == "kc-9"
        assert notification.reservation_id == 3
        assert notification.content == '✔️ El servicio "Masaje" ha sido marcado como completado.'

    def test_scheduled_exactly_now_is_untouched(self, make_job):
        now = datetime(2024, 1, 1, 10, 0)
        contract = _contract(1, now)
        job, _ = make_job([contract], now)

        job.run()

        assert contract.status == ServiceContractStatus.CONFIRMED

    @pytest.mark.parametrize("status", [
        ServiceContractStatus.PENDING, ServiceContractStatus.COMPLETED, ServiceContractStatus.CANCELLED,
    ])
    def test_non_confirmed_contracts_are_never_touched(self, make_job, status):
        contract = _contract(1, datetime(2023, 12, 1, 10, 0), status=status)
        job, store = make_job([contract], datetime(2024, 1, 1))

        job.run()

        assert contract.status == status
        assert store.saved == []

    def test_template_placeholders(self, make_job, recording_channel):
        contract = _contract(1, datetime(2024, 1, 1, 10, 0), customer=Customer(keycloak_id="kc-1"))
        config = DictConfig({MSG_SERVICE_COMPLETADO: "{servicioNombre} x {total} @ {fechaServicio} ({reservaId}) {otro}"})
        job, _ = make_job([contract], datetime(2024, 1, 2), config=config)

        job.run()

        assert recording_channel.sent[0].content == "Masaje x 25.00 @ 2024-01-01T10:00:00 (3) {otro}"

    def test_contract_without_customer_is_completed_silently(self, make_job, recording_channel):
        contract = _contract(1, datetime(2024, 1, 1, 10, 0))
        job, _ = make_job([contract], datetime(2024, 1, 2))

        summary = job.run()

        assert contract.status == ServiceContractStatus.COMPLETED
        assert summary.notified == 0
        assert recording_channel.sent == []

    def test_channel_failure_does_not_stop_the_run(self, make_job, failing_channel):
        contracts = [
            _contract(1, datetime(2024, 1, 1, 10, 0), customer=Customer(keycloak_id="kc-1")),
            _contract(2, datetime(2024, 1, 1, 11, 0), customer=Customer(keycloak_id="kc-2")),
        ]
        job, store = make_job(contracts, datetime(2024, 1, 2), channel=failing_channel)

        summary = job.run()

        assert [c.status for c in contracts] == [ServiceContractStatus.COMPLETED] * 2
        assert store.saved == [1, 2]
        assert summary.processed == 2

    def test_store_outage_aborts_the_run(self, make_job):
        job, store = make_job([], datetime(2024, 1, 2))

        def broken(before):
            raise StoreUnavailableError("database down")
        store.find_overdue_confirmed = broken

        with pytest.raises(StoreUnavailableError):
            job.run()

    def test_run_later_picks_up_the_contract(self, make_job):
        contract = _contract(1, datetime(2024, 1, 1, 10, 0))
        job, _ = make_job([contract], datetime(2024, 1, 1, 9, 0))

        job.run()
        assert contract.status == ServiceContractStatus.CONFIRMED

        job.clock.advance(hours=2)
        job.run()
        assert contract.status == ServiceContractStatus.COMPLETED
