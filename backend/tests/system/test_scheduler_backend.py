"""
APSchedulerBackend tests (scheduler never started unless a test starts it)
"""
import pytest
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger

from hotelapp.jobs.scheduling import (
    AUTO_CHECKOUT_JOB_ID, AUTO_COMPLETION_JOB_ID, register_lifecycle_jobs
)
from hotelapp.system.services.scheduler_backend import APSchedulerBackend


def _noop():
    pass


@pytest.fixture
def backend():
    b = APSchedulerBackend(BackgroundScheduler(timezone="UTC"))
    yield b
    b.shutdown()


class TestAPSchedulerBackend:

    def test_add_cron_job(self, backend):
        backend.add_job("hourly", _noop, "cron", cron_expression="0 * * * *")

        job = backend.scheduler.get_job("hourly")
        assert isinstance(job.trigger, CronTrigger)
        assert job.max_instances == 1
        assert job.coalesce is True

    def test_get_jobs_before_start(self, backend):
        backend.add_job("hourly", _noop, "cron", cron_expression="0 * * * *")

        jobs = backend.get_jobs()

        assert len(jobs) == 1
        assert jobs[0]["id"] == "hourly"
        assert jobs[0]["status"] == "pending"
        assert jobs[0]["next_run_time"] is None

    def test_get_jobs_after_start(self, backend):
        backend.add_job("hourly", _noop, "cron", cron_expression="0 * * * *")
        backend.start()

        [job] = backend.get_jobs()

        assert backend.running is True
        assert job["status"] == "active"
        assert job["next_run_time"] is not None

    def test_add_job_replaces_existing(self, backend):
        backend.start()
        backend.add_job("hourly", _noop, "cron", cron_expression="0 * * * *")
        backend.add_job("hourly", _noop, "cron", cron_expression="30 * * * *")

        assert len(backend.get_jobs()) == 1

    def test_lifecycle_jobs_run_hourly(self, backend):
        register_lifecycle_jobs(backend)

        ids = {j["id"] for j in backend.get_jobs()}
        assert ids == {AUTO_CHECKOUT_JOB_ID, AUTO_COMPLETION_JOB_ID}
        trigger = backend.scheduler.get_job(AUTO_CHECKOUT_JOB_ID).trigger
        assert str(trigger.fields[trigger.FIELD_NAMES.index("minute")]) == "0"
        assert str(trigger.fields[trigger.FIELD_NAMES.index("hour")]) == "*"

    def test_backend_exposes_only_registration_and_listing(self):
        assert not hasattr(APSchedulerBackend, "trigger_job")
        assert not hasattr(APSchedulerBackend, "remove_job")
