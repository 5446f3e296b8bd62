"""
Base entity classes.
"""

import threading
from datetime import datetime, timedelta, timezone
from typing import Optional
from pydantic import BaseModel, Field, ConfigDict, field_validator, model_validator


_clock_lock = threading.Lock()
_last_issued: Optional[datetime] = None


def utc_now() -> datetime:
    """
    Current UTC time, strictly increasing within the process.

    Two calls in the same microsecond still yield ordered values, so an
    update stamped right after a create always sorts after it.
    """
    global _last_issued
    with _clock_lock:
        now = datetime.now(timezone.utc)
        if _last_issued is not None and now <= _last_issued:
            now = _last_issued + timedelta(microseconds=1)
        _last_issued = now
        return now


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes as UTC so every timestamp compares."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def reject_cleared(model: BaseModel, fields) -> None:
    """Raise if any of fields was explicitly set to None on a partial update."""
    cleared = [name for name in fields if name in model.model_fields_set and getattr(model, name) is None]
    if cleared:
        raise ValueError(f"cannot clear required field(s): {', '.join(cleared)}")


class TimestampMixin(BaseModel):
    """Mixin for created/updated timestamps."""
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @field_validator("created_at", "updated_at")
    @classmethod
    def as_utc(cls, value):
        return ensure_utc(value)


class BaseEntity(TimestampMixin):
    """
    Base for all remotely persisted entities.

    Records crossing the backend boundary are validated into a subclass;
    anything that fails here never reaches an in-memory collection.
    """
    model_config = ConfigDict(
        validate_assignment=True,
        extra="ignore",  # Backends may add bookkeeping columns
        str_strip_whitespace=True,
    )

    id: str = Field(min_length=1)
    created_by: str

    @model_validator(mode="after")
    def check_timestamps(self):
        if self.updated_at < self.created_at:
            raise ValueError("updated_at precedes created_at")
        return self

    def touch(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = utc_now()
