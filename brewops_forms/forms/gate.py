"""Submission gate: at most one in-flight request per form."""

import logging
import threading
from collections.abc import Callable, Mapping
from typing import Any

from pydantic import BaseModel

from brewops_forms.api.envelope import ApiEnvelope
from brewops_forms.api.errors import ApiError, ResponseParseError, ServerError, TransportError
from brewops_forms.core.lifetime import Lifetime
from brewops_forms.core.models import Notification, SubmissionOutcome, SubmissionStatus
from brewops_forms.core.scheduler import ScheduledTask
from brewops_forms.notifications import Notifier

logger = logging.getLogger(__name__)

DEFAULT_MESSAGE_TIMEOUT = 3.0
ALREADY_SUBMITTING = "Submission already in progress"
DEFAULT_SUCCESS = "Saved successfully"


class SubmissionMessages(BaseModel):
    """User-facing messages for one kind of submission.

    ``success`` may be a plain string or a function of the response data.
    ``failure`` is shown when the server gives no message of its own, and
    ``network`` when the request never reached the server.
    """

    success: str | Callable[[Any], str] = DEFAULT_SUCCESS
    failure: str = "Something went wrong. Please try again."
    network: str | None = None
    server_prefix: str = ""

    def success_text(self, data: Any) -> str:
        if callable(self.success):
            return self.success(data)
        return self.success

    def server_text(self, message: str | None) -> str:
        """Text for a server-reported failure, or ``failure`` without one."""
        if not message:
            return self.failure
        return f"{self.server_prefix}{message}"

    @property
    def network_text(self) -> str:
        return self.network or self.failure


class SubmissionGate:
    """Guards a form's submissions and tracks their status.

    Rules:
    1. Submission proceeds only when there are no field errors
    2. A submission is rejected while another one is in flight
    3. Exactly one request per accepted submission, never retried
    4. A result arriving after the owning lifetime ended is discarded
    """

    def __init__(
        self,
        lifetime: Lifetime,
        notifier: Notifier | None = None,
        message_timeout: float = DEFAULT_MESSAGE_TIMEOUT,
    ) -> None:
        """Initialize the gate.

        Args:
            lifetime: Lifetime of the owning form.
            notifier: Receives success/error notifications.
            message_timeout: Seconds before a result message clears and the
                             gate returns to idle.
        """
        self.lifetime = lifetime
        self.notifier = notifier
        self.message_timeout = message_timeout

        self.status = SubmissionStatus.IDLE
        self.message: str | None = None

        self._clear_task: ScheduledTask | None = None
        self._lock = threading.Lock()

    @property
    def submitting(self) -> bool:
        return self.status == SubmissionStatus.SUBMITTING

    def can_submit(self, errors: Mapping[str, str] | None = None) -> bool:
        """Whether a submit invoked now would reach the network."""
        return not errors and not self.submitting and not self.lifetime.cancelled

    def submit(
        self,
        send: Callable[[], ApiEnvelope],
        errors: Mapping[str, str] | None = None,
        messages: SubmissionMessages | None = None,
        on_success: Callable[[ApiEnvelope], None] | None = None,
    ) -> SubmissionOutcome:
        """Run one submission through the gate.

        Args:
            send: Issues the request and returns the decoded envelope.
            errors: Current field errors; any error blocks the submission.
            messages: Messages for this submission.
            on_success: Called with the envelope after a successful response.

        Returns:
            The outcome. ``accepted`` is False when the gate refused to send.
        """
        messages = messages if messages is not None else SubmissionMessages()

        with self._lock:
            if self.status == SubmissionStatus.SUBMITTING:
                logger.debug("Rejected submit: request already in flight")
                return SubmissionOutcome(
                    accepted=False, status=self.status, message=ALREADY_SUBMITTING
                )
            if errors:
                return SubmissionOutcome(
                    accepted=False, status=self.status, errors=dict(errors)
                )
            if self.lifetime.cancelled:
                return SubmissionOutcome(accepted=False, status=self.status)
            self._cancel_clear()
            self.status = SubmissionStatus.SUBMITTING
            self.message = None

        try:
            envelope = send()
        except ServerError as e:
            return self._fail(messages.server_text(e.message))
        except TransportError as e:
            logger.warning("Submission failed to reach the server: %s", e)
            return self._fail(messages.network_text)
        except ResponseParseError:
            logger.exception("Submission response could not be parsed")
            return self._fail(messages.failure)
        except ApiError as e:
            logger.warning("Submission failed: %s", e)
            return self._fail(messages.failure)
        except Exception:
            logger.exception("Unexpected error during submission")
            return self._fail(messages.failure)

        if self.lifetime.cancelled:
            return self._discard()

        # The server accepted the request; local follow-up errors only get logged
        try:
            text = messages.success_text(envelope.data)
        except Exception:
            logger.exception("Could not build the success message")
            text = DEFAULT_SUCCESS
        with self._lock:
            self.status = SubmissionStatus.SUCCEEDED
            self.message = text
        if on_success is not None:
            try:
                on_success(envelope)
            except Exception:
                logger.exception("Post-submit hook failed")
        self._notify("success", text)
        self._schedule_clear()
        return SubmissionOutcome(
            accepted=True,
            status=SubmissionStatus.SUCCEEDED,
            message=text,
            data=envelope.data,
        )

    def _fail(self, text: str) -> SubmissionOutcome:
        if self.lifetime.cancelled:
            return self._discard()
        with self._lock:
            self.status = SubmissionStatus.FAILED
            self.message = text
        logger.warning("Submission failed: %s", text)
        self._notify("error", text)
        self._schedule_clear()
        return SubmissionOutcome(accepted=True, status=SubmissionStatus.FAILED, message=text)

    def _discard(self) -> SubmissionOutcome:
        logger.debug("Discarding response for a closed form")
        with self._lock:
            self.status = SubmissionStatus.IDLE
            self.message = None
        return SubmissionOutcome(accepted=True, status=SubmissionStatus.IDLE, discarded=True)

    def _notify(self, level: str, text: str) -> None:
        if self.notifier is not None:
            self.notifier.notify(Notification(level=level, message=text))

    def _schedule_clear(self) -> None:
        with self._lock:
            self._cancel_clear()
            self._clear_task = self.lifetime.call_later(self.message_timeout, self._clear)

    def _cancel_clear(self) -> None:
        if self._clear_task is not None:
            self._clear_task.cancel()
            self._clear_task = None

    def _clear(self) -> None:
        with self._lock:
            self._clear_task = None
            if self.status in (SubmissionStatus.SUCCEEDED, SubmissionStatus.FAILED):
                self.status = SubmissionStatus.IDLE
                self.message = None

    def reset(self) -> None:
        """Return to idle and drop any pending message-clear."""
        with self._lock:
            self._cancel_clear()
            self.status = SubmissionStatus.IDLE
            self.message = None
