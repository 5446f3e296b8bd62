"""
Job models - background job records and aggregate stats.
"""

from datetime import datetime
from enum import Enum
from typing import Optional
from pydantic import BaseModel, Field

from .base import utc_now


class JobStatus(str, Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    COMPLETED = "completed"
    FAILED = "failed"


class Job(BaseModel):
    """A queued unit of background work and its progress."""
    id: str
    type: str
    status: JobStatus = JobStatus.PENDING
    progress: int = Field(default=0, ge=0, le=100)
    created_at: datetime = Field(default_factory=utc_now)
    completed_at: Optional[datetime] = None
    error: Optional[str] = None

    @property
    def is_finished(self) -> bool:
        return self.status in (JobStatus.COMPLETED, JobStatus.FAILED)


class JobStats(BaseModel):
    """
    Statistics for the job service.
    """
    runs: int = 0
    successes: int = 0
    errors: int = 0

    last_run: Optional[datetime] = None
    last_success: Optional[datetime] = None
    last_error: Optional[datetime] = None
    last_error_message: Optional[str] = None
    last_type: Optional[str] = None

    def record_run(self, job_type: str = None) -> None:
        """Record a job starting."""
        self.runs += 1
        self.last_run = utc_now()
        if job_type:
            self.last_type = job_type

    def record_success(self) -> None:
        self.successes += 1
        self.last_success = utc_now()

    def record_error(self, message: str = None) -> None:
        self.errors += 1
        self.last_error = utc_now()
        self.last_error_message = message

    @property
    def success_rate(self) -> float:
        """Success rate as a fraction of runs."""
        if self.runs == 0:
            return 0.0
        return self.successes / self.runs

    @property
    def is_healthy(self) -> bool:
        if self.runs < 3:
            return True  # Not enough data
        return self.success_rate > 0.5

    def to_dict(self) -> dict:
        return {
            "runs": self.runs,
            "successes": self.successes,
            "errors": self.errors,
            "last_run": self.last_run.isoformat() if self.last_run else None,
            "last_error": self.last_error_message,
            "last_type": self.last_type,
            "healthy": self.is_healthy,
        }
