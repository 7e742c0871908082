"""Core models shared by every form controller.

Submission status tracking, user-facing notifications and the
outcome returned from a submit attempt.
"""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, Field


class SubmissionStatus(str, Enum):
    """Status of a form's submission."""

    IDLE = "idle"  # Nothing in flight, no message showing
    SUBMITTING = "submitting"  # One request in flight
    SUCCEEDED = "succeeded"  # Last request succeeded, message showing
    FAILED = "failed"  # Last request failed, message showing


class Notification(BaseModel):
    """A user-facing message raised by a form."""

    level: Literal["success", "error", "info"]
    message: str


class SubmissionOutcome(BaseModel):
    """Result of a single submit invocation.

    Attributes:
        accepted: Whether the gate let the submission through to the network.
        status: The gate status after the attempt.
        message: The success or error message shown to the user, if any.
        data: The unwrapped response payload on success.
        errors: Field errors that blocked the submission.
        redirect: Path the caller should navigate to after success.
        reload: Whether the caller should force a full refresh after success.
        discarded: True when the owning form closed while the request was in flight.
    """

    accepted: bool
    status: SubmissionStatus
    message: str | None = None
    data: Any = None
    errors: dict[str, str] = Field(default_factory=dict)
    redirect: str | None = None
    reload: bool = False
    discarded: bool = False

    @property
    def succeeded(self) -> bool:
        """Whether the submission reached the backend and succeeded."""
        return self.accepted and self.status == SubmissionStatus.SUCCEEDED
