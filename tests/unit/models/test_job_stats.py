"""Unit tests for Job and JobStats models."""

import pytest
from pydantic import ValidationError

from models import Job, JobStats, JobStatus


class TestJob:

    def test_defaults(self):
        job = Job(id="job_1", type="export")
        assert job.status == JobStatus.PENDING
        assert job.progress == 0
        assert not job.is_finished

    def test_progress_bounds(self):
        with pytest.raises(ValidationError):
            Job(id="job_1", type="export", progress=101)

    @pytest.mark.parametrize("status", [JobStatus.COMPLETED, JobStatus.FAILED])
    def test_finished_states(self, status):
        assert Job(id="job_1", type="export", status=status).is_finished


class TestJobStats:
    """Test JobStats model."""

    def test_create_default(self):
        stats = JobStats()
        assert stats.runs == 0
        assert stats.successes == 0
        assert stats.errors == 0
        assert stats.last_run is None

    def test_record_run(self):
        stats = JobStats()
        stats.record_run("export")

        assert stats.runs == 1
        assert stats.last_run is not None
        assert stats.last_type == "export"

    def test_record_success(self):
        stats = JobStats()
        stats.record_success()

        assert stats.successes == 1
        assert stats.last_success is not None

    def test_record_error(self):
        stats = JobStats()
        stats.record_error("Something failed")

        assert stats.errors == 1
        assert stats.last_error is not None
        assert stats.last_error_message == "Something failed"

    def test_success_rate_no_runs(self):
        assert JobStats().success_rate == 0.0

    def test_success_rate_calculated(self):
        stats = JobStats(runs=10, successes=8)
        assert stats.success_rate == 0.8

    def test_is_healthy_not_enough_data(self):
        assert JobStats(runs=2).is_healthy

    def test_is_healthy_bad_rate(self):
        stats = JobStats(runs=10, successes=4, errors=6)
        assert not stats.is_healthy

    def test_to_dict(self):
        stats = JobStats(runs=5, successes=4, errors=1)
        stats.record_run("import")

        d = stats.to_dict()

        assert d["runs"] == 6
        assert d["successes"] == 4
        assert d["last_type"] == "import"
        assert "healthy" in d
