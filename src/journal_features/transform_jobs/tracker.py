"""
Tracking of in-flight transformation jobs and the single user notification.
"""

from aws_lambda_powertools import Logger

from journal_core.utils.constants import (
    ERROR_DISMISS_DELAY_SECONDS,
    ERROR_MESSAGE,
    SUCCESS_DISMISS_DELAY_SECONDS,
    SUCCESS_MESSAGE,
    TRANSFORMING_MANY_MESSAGE,
    TRANSFORMING_SINGLE_MESSAGE,
)
from journal_core.utils.observable import Observable
from journal_core.utils.scheduler import AsyncioScheduler, ScheduledHandle, Scheduler
from journal_features.transform_jobs.models import (
    JobState,
    Notification,
    NotificationKind,
    TrackerSnapshot,
    TransformJob,
)

logger = Logger(UTC=True)


class InFlightJobTracker(Observable[TrackerSnapshot]):
    """Aggregates concurrent transformation jobs into one notification.

    Rules:
    - While no success/error notification is visible, the notification
      reflects the active set: none, "Transforming image..." for one job,
      "Transforming N images..." for more.
    - A success/error notification takes priority while visible and
      auto-dismisses after a fixed delay. Once it goes away the
      transforming notification is recomputed from the active set.
    - Any notification replacing another cancels the pending dismiss
      timer, so a stale timer never dismisses a newer notification.

    All methods are meant to run on the UI context and never raise.
    """

    def __init__(
        self,
        *,
        scheduler: Scheduler | None = None,
        success_delay: float = SUCCESS_DISMISS_DELAY_SECONDS,
        error_delay: float = ERROR_DISMISS_DELAY_SECONDS,
    ) -> None:
        super().__init__()
        self._scheduler = scheduler or AsyncioScheduler()
        self._success_delay = success_delay
        self._error_delay = error_delay

        # Insertion-ordered set of active job ids
        self._active: dict[str, None] = {}
        self._jobs: dict[str, TransformJob] = {}
        self._notification: Notification | None = None
        self._dismiss_handle: ScheduledHandle | None = None

    @property
    def active_jobs(self) -> frozenset[str]:
        return frozenset(self._active)

    @property
    def active_count(self) -> int:
        return len(self._active)

    @property
    def current_notification(self) -> Notification | None:
        return self._notification

    @property
    def status_summary(self) -> str:
        return f"Transforming: {len(self._active)} photos"

    def job(self, job_id: str) -> TransformJob | None:
        """Return the record of *job_id* while it is still tracked."""
        return self._jobs.get(job_id)

    def snapshot(self) -> TrackerSnapshot:
        return TrackerSnapshot(active_jobs=self.active_jobs, notification=self._notification)

    def begin(self, job_id: str) -> None:
        """Register *job_id* as transforming."""
        submitted = TransformJob(job_id=job_id)
        self._jobs[job_id] = submitted.model_copy(update={"state": JobState.TRANSFORMING})
        self._active[job_id] = None

        logger.debug("Transform job started", extra={"job_id": job_id, "active": len(self._active)})

        if self._terminal_visible():
            self._notify(self.snapshot())
            return

        self._show_transforming()

    def succeed(self, job_id: str, *, result_url: str | None = None) -> None:
        """Mark *job_id* as succeeded and show the success notification."""
        self._active.pop(job_id, None)
        self._jobs[job_id] = TransformJob(
            job_id=job_id,
            state=JobState.SUCCEEDED,
            result_url=result_url,
        )

        logger.info("Transform job succeeded", extra={"job_id": job_id, "active": len(self._active)})

        self._show_terminal(
            Notification(
                kind=NotificationKind.SUCCESS,
                message=SUCCESS_MESSAGE,
                related_job_id=job_id,
            ),
            delay=self._success_delay,
        )

    def fail(self, job_id: str, error_message: str) -> None:
        """Mark *job_id* as failed and show the error notification."""
        self._active.pop(job_id, None)
        self._jobs[job_id] = TransformJob(
            job_id=job_id,
            state=JobState.FAILED,
            error_message=error_message,
        )

        logger.warning(
            "Transform job failed",
            extra={"job_id": job_id, "error": error_message, "active": len(self._active)},
        )

        self._show_terminal(
            Notification(
                kind=NotificationKind.ERROR,
                message=ERROR_MESSAGE.format(error=error_message),
                related_job_id=job_id,
            ),
            delay=self._error_delay,
        )

    def discard(self, job_id: str) -> None:
        """Stop tracking *job_id* without a terminal notification."""
        if self._active.pop(job_id, None) is None and job_id not in self._jobs:
            return

        self._jobs.pop(job_id, None)
        logger.debug("Transform job discarded", extra={"job_id": job_id})

        if self._terminal_visible():
            self._notify(self.snapshot())
        else:
            self._show_transforming()

    def dismiss(self) -> None:
        """Clear the current notification immediately.

        Dismissing a success/error notification reveals the transforming
        notification of any jobs still active.
        """
        current = self._notification
        if current is None:
            return

        if current.kind.is_terminal:
            self._show_transforming()
        else:
            self._replace_notification(None)

    def _terminal_visible(self) -> bool:
        return self._notification is not None and self._notification.kind.is_terminal

    def _show_transforming(self) -> None:
        count = len(self._active)

        if count == 0:
            self._replace_notification(None)
            return

        message = TRANSFORMING_SINGLE_MESSAGE if count == 1 else TRANSFORMING_MANY_MESSAGE.format(count=count)
        current = self._notification
        if current is not None and current.kind is NotificationKind.TRANSFORMING and current.message == message:
            self._notify(self.snapshot())
            return

        self._replace_notification(Notification(kind=NotificationKind.TRANSFORMING, message=message))

    def _show_terminal(self, notification: Notification, *, delay: float) -> None:
        self._replace_notification(notification)

        try:
            self._dismiss_handle = self._scheduler.call_later(
                delay,
                lambda: self._on_dismiss_timer(notification.id),
            )
        except Exception:
            # Without a timer the notification stays until dismissed manually
            logger.exception(
                "Unable to schedule notification dismissal",
                extra={"notification_id": notification.id},
            )

    def _on_dismiss_timer(self, notification_id: str) -> None:
        self._dismiss_handle = None

        if self._notification is None or self._notification.id != notification_id:
            return

        logger.debug("Notification auto-dismissed", extra={"notification_id": notification_id})
        self.dismiss()

    def _replace_notification(self, notification: Notification | None) -> None:
        if self._dismiss_handle is not None:
            self._dismiss_handle.cancel()
            self._dismiss_handle = None

        previous = self._notification
        next_job_id = notification.related_job_id if notification is not None else None
        if (
            previous is not None
            and previous.kind.is_terminal
            and previous.related_job_id
            and previous.related_job_id != next_job_id
        ):
            self._prune_terminal(previous.related_job_id)

        self._notification = notification
        self._notify(self.snapshot())

    def _prune_terminal(self, job_id: str) -> None:
        record = self._jobs.get(job_id)
        if record is not None and record.state.is_terminal:
            del self._jobs[job_id]
