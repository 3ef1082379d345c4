"""
Extraction Task State

An extraction call is slow and can fail. Rather than scattering
"is_loading" / "error" flags around the UI, the in-flight call is modeled
as one small state machine:

    idle ──start──▶ pending ──succeed──▶ idle
                       │
                       └──fail──▶ error ──start──▶ pending

The UI disables the submit controls while the task is pending and shows
error_message while it is in the error state.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class TaskStatus(str, Enum):
    """Where the extraction task currently is."""
    IDLE = "idle"
    PENDING = "pending"
    ERROR = "error"


class ExtractionMode(str, Enum):
    """Which kind of input the extraction was started for."""
    TEXT = "text"
    IMAGE = "image"


class TaskInProgressError(Exception):
    """An extraction was started while another one was still pending."""
    pass


class ExtractionTask(BaseModel):
    """State of the single extraction slot owned by the tracker."""

    status: TaskStatus = TaskStatus.IDLE
    mode: Optional[ExtractionMode] = None
    error_message: Optional[str] = None
    started_at: Optional[datetime] = Field(
        default=None,
        description="When the current (or last) extraction started"
    )

    @property
    def is_pending(self) -> bool:
        return self.status == TaskStatus.PENDING

    @property
    def has_error(self) -> bool:
        return self.status == TaskStatus.ERROR

    def start(self, mode: ExtractionMode) -> None:
        """Move to pending. Clears any previous error."""
        if self.is_pending:
            raise TaskInProgressError(
                f"An extraction ({self.mode.value}) is already in progress"
            )
        self.status = TaskStatus.PENDING
        self.mode = mode
        self.error_message = None
        self.started_at = datetime.now(timezone.utc)

    def succeed(self) -> None:
        self._require_pending("succeed")
        self.status = TaskStatus.IDLE
        self.error_message = None

    def fail(self, message: str) -> None:
        self._require_pending("fail")
        self.status = TaskStatus.ERROR
        self.error_message = message

    def dismiss(self) -> None:
        """Clear a shown error without starting a new extraction."""
        if self.has_error:
            self.status = TaskStatus.IDLE
            self.error_message = None

    def _require_pending(self, transition: str) -> None:
        if not self.is_pending:
            raise RuntimeError(
                f"Cannot {transition} a task that is {self.status.value}"
            )
