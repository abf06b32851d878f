"""
Pydantic models for transformation jobs and their notifications.
"""

import uuid
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, StrictStr

from journal_core.utils.time import utc_now


class JobState(str, Enum):
    """Lifecycle of one transformation job."""

    SUBMITTED = "submitted"
    TRANSFORMING = "transforming"
    SUCCEEDED = "succeeded"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobState.SUCCEEDED, JobState.FAILED)


class NotificationKind(str, Enum):
    TRANSFORMING = "transforming"
    SUCCESS = "success"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self is not NotificationKind.TRANSFORMING


class TransformJob(BaseModel):
    """One submission to the transformation API."""

    model_config = ConfigDict(frozen=True)

    job_id: StrictStr = Field(..., description="Caller-generated, unique per submission")
    state: JobState = JobState.SUBMITTED
    error_message: StrictStr | None = None
    result_url: StrictStr | None = None


class Notification(BaseModel):
    """The single notification currently shown to the user."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    kind: NotificationKind
    message: StrictStr
    related_job_id: StrictStr | None = Field(
        None,
        description="Job a success/error refers to; None for the aggregate notification",
    )
    created_at: datetime = Field(default_factory=utc_now)


class TrackerSnapshot(BaseModel):
    """What observers of the tracker receive after every change."""

    model_config = ConfigDict(frozen=True)

    active_jobs: frozenset[str]
    notification: Notification | None
