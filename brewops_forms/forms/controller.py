"""Form controller: field state, debounced validation and gated submission."""

import logging
from collections.abc import Callable
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from brewops_forms.api.client import BrewOpsClient
from brewops_forms.api.envelope import ApiEnvelope
from brewops_forms.api.errors import ApiError
from brewops_forms.core.lifetime import Lifetime
from brewops_forms.core.models import Notification, SubmissionOutcome, SubmissionStatus
from brewops_forms.core.scheduler import Scheduler, ThreadingScheduler
from brewops_forms.forms.gate import (
    ALREADY_SUBMITTING,
    DEFAULT_MESSAGE_TIMEOUT,
    SubmissionGate,
    SubmissionMessages,
)
from brewops_forms.notifications import Notifier
from brewops_forms.validation.validator import DEFAULT_DEBOUNCE_SECONDS, FieldValidator

logger = logging.getLogger(__name__)


class FieldSpec(BaseModel):
    """Definition of one form field.

    Attributes:
        name: Field name, also the key in the form state.
        label: Human-readable label.
        rule: Validation rule. Called as rule(value), or rule(value, values)
              when depends_on is set. None means always valid.
        initial: Value the field starts with and resets to.
        sensitive: Cleared after a successful submission (passwords).
        read_only: Shown but not editable (e.g. generated identifiers).
        depends_on: Fields whose changes re-run this field's validation.
    """

    name: str
    label: str
    rule: Callable[..., str | None] | None = None
    initial: Any = ""
    sensitive: bool = False
    read_only: bool = False
    depends_on: tuple[str, ...] = ()


class FormDefinition(BaseModel):
    """Complete declarative description of a form."""

    name: str
    title: str
    fields: list[FieldSpec]
    method: str = "POST"
    path: str
    messages: SubmissionMessages = Field(default_factory=SubmissionMessages)
    build_payload: Callable[[dict[str, Any]], dict[str, Any]] | None = None
    on_success: Callable[[ApiEnvelope, dict[str, Any]], None] | None = None
    load_path: str | None = None
    load_fields: Callable[[dict[str, Any]], dict[str, Any]] | None = None
    load_failure_message: str = "Failed to load data"
    redirect: str | None = None
    reload: bool = False
    reset_on_success: bool = True

    model_config = ConfigDict(arbitrary_types_allowed=True)

    def get_field(self, name: str) -> FieldSpec | None:
        """Get a field by its name."""
        for spec in self.fields:
            if spec.name == name:
                return spec
        return None

    @property
    def field_names(self) -> list[str]:
        return [spec.name for spec in self.fields]


class UnknownFieldError(KeyError):
    """Raised when a form is given a field name it does not define."""

    def __init__(self, form: str, field: str) -> None:
        self.form = form
        self.field = field
        super().__init__(f"Form '{form}' has no field '{field}'")


class FormController:
    """One live instance of a form.

    Owns the form state, one debounced validator per field and a
    submission gate. Everything scheduled by the controller is tied to
    its lifetime, so close() leaves nothing running.
    """

    def __init__(
        self,
        definition: FormDefinition,
        client: BrewOpsClient | None = None,
        scheduler: Scheduler | None = None,
        notifier: Notifier | None = None,
        debounce: float = DEFAULT_DEBOUNCE_SECONDS,
        message_timeout: float = DEFAULT_MESSAGE_TIMEOUT,
    ) -> None:
        """Initialize the controller.

        Args:
            definition: The form to run.
            client: API client used by load() and submit().
            scheduler: Runs debounce and message-clear timers.
                       Defaults to a ThreadingScheduler.
            notifier: Receives success/error notifications.
            debounce: Debounce delay in seconds.
            message_timeout: Seconds before a result message clears.
        """
        self.definition = definition
        self.client = client
        self.notifier = notifier
        self.lifetime = Lifetime(scheduler if scheduler is not None else ThreadingScheduler())
        self.gate = SubmissionGate(self.lifetime, notifier, message_timeout)

        self._initial: dict[str, Any] = {spec.name: spec.initial for spec in definition.fields}
        self._values: dict[str, Any] = dict(self._initial)
        self.validators: dict[str, FieldValidator] = {
            spec.name: FieldValidator(
                spec.name,
                self._bind_rule(spec),
                lifetime=self.lifetime,
                delay=debounce,
                value=spec.initial,
            )
            for spec in definition.fields
        }

        # field name -> fields whose rules depend on it
        self._dependents: dict[str, list[str]] = {}
        for spec in definition.fields:
            for dependency in spec.depends_on:
                self._dependents.setdefault(dependency, []).append(spec.name)

    def _bind_rule(self, spec: FieldSpec) -> Callable[[Any], str | None]:
        rule = spec.rule
        if rule is None:
            return lambda value: None
        if spec.depends_on:
            return lambda value: rule(value, self._values)
        return rule

    @property
    def name(self) -> str:
        return self.definition.name

    @property
    def closed(self) -> bool:
        return self.lifetime.cancelled

    @property
    def values(self) -> dict[str, Any]:
        """Snapshot of the current form state."""
        return dict(self._values)

    @property
    def errors(self) -> dict[str, str]:
        """Current field errors; only touched fields can have one."""
        return {
            name: validator.error
            for name, validator in self.validators.items()
            if validator.error
        }

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def status(self) -> SubmissionStatus:
        return self.gate.status

    @property
    def can_submit(self) -> bool:
        """Whether the submit control should be enabled."""
        return self.gate.can_submit(self.errors)

    def _validator(self, name: str) -> FieldValidator:
        if name not in self.validators:
            raise UnknownFieldError(self.name, name)
        return self.validators[name]

    def set_value(self, name: str, value: Any) -> None:
        """Apply a user edit to a field."""
        validator = self._validator(name)
        self._values[name] = value
        validator.change(value)
        for dependent in self._dependents.get(name, []):
            self.validators[dependent].revalidate()

    def set_values(self, **values: Any) -> None:
        for name, value in values.items():
            self.set_value(name, value)

    def blur(self, name: str) -> str | None:
        """Field lost focus; returns its error, if any."""
        return self._validator(name).blur()

    def validate_all(self) -> dict[str, str]:
        """Touch every field and validate immediately."""
        for validator in self.validators.values():
            validator.blur()
        return self.errors

    def load(self, **path_params: Any) -> dict[str, Any] | None:
        """Pre-populate the form from the backend.

        Loaded values become the form's initial values and leave every
        field untouched, so no errors show until the user edits.

        Args:
            path_params: Values substituted into the definition's load path.

        Returns:
            The loaded field values, or None if loading failed or the
            form was closed before the response arrived.
        """
        if self.definition.load_path is None:
            return {}
        client = self._require_client()
        path = _format_path(self.definition.load_path, path_params)
        try:
            envelope = client.request("GET", path)
        except ApiError as e:
            logger.warning("Loading %s failed: %s", self.name, e)
            self._notify_error(self.definition.load_failure_message)
            return None

        if self.closed:
            logger.debug("Dropping load result for closed form %s", self.name)
            return None

        data = envelope.data if isinstance(envelope.data, dict) else {}
        if self.definition.load_fields is not None:
            loaded = self.definition.load_fields(data)
        else:
            loaded = {name: data[name] for name in self.definition.field_names if name in data}

        for name, value in loaded.items():
            validator = self._validator(name)
            self._initial[name] = value
            self._values[name] = value
            validator.update(value)
        return loaded

    def submit(self, **path_params: Any) -> SubmissionOutcome:
        """Validate every field and submit through the gate.

        Args:
            path_params: Values substituted into the definition's path.

        Returns:
            The submission outcome.
        """
        if self.closed:
            return SubmissionOutcome(accepted=False, status=self.status)
        if self.gate.submitting:
            return SubmissionOutcome(
                accepted=False, status=self.status, message=ALREADY_SUBMITTING
            )

        errors = self.validate_all()
        if errors:
            return self.gate.submit(_never_sent, errors=errors)

        client = self._require_client()
        definition = self.definition
        path = _format_path(definition.path, path_params)
        snapshot = self.values

        def send() -> ApiEnvelope:
            payload = (
                definition.build_payload(snapshot)
                if definition.build_payload is not None
                else snapshot
            )
            return client.request(definition.method, path, payload)

        outcome = self.gate.submit(
            send,
            errors=errors,
            messages=definition.messages,
            on_success=lambda envelope: self._after_success(envelope, snapshot),
        )
        if outcome.succeeded:
            outcome.redirect = definition.redirect
            outcome.reload = definition.reload
        return outcome

    def _after_success(self, envelope: ApiEnvelope, sent: dict[str, Any]) -> None:
        if self.definition.on_success is not None:
            try:
                self.definition.on_success(envelope, sent)
            except Exception:
                logger.exception("Success hook for %s failed", self.name)
        if self.definition.reset_on_success:
            self.reset()
            return
        for spec in self.definition.fields:
            if spec.sensitive:
                self._values[spec.name] = spec.initial
                self.validators[spec.name].reset(spec.initial)

    def reset(self) -> None:
        """Restore initial values and clear touch state and errors."""
        self._values = dict(self._initial)
        for name, validator in self.validators.items():
            validator.reset(self._initial[name])

    def close(self) -> None:
        """Dispose of the form.

        Pending timers are cancelled and any in-flight result will be
        discarded when it arrives.
        """
        self.lifetime.cancel()
        self.gate.reset()
        self.reset()

    def _require_client(self) -> BrewOpsClient:
        if self.client is None:
            raise ValueError(f"Form '{self.name}' needs an API client to talk to the backend")
        return self.client

    def _notify_error(self, text: str) -> None:
        if self.notifier is not None:
            self.notifier.notify(Notification(level="error", message=text))


def _never_sent() -> ApiEnvelope:
    raise AssertionError("Gate sent a submission that had field errors")


def _format_path(template: str, params: dict[str, Any]) -> str:
    try:
        return template.format(**params)
    except KeyError as e:
        raise ValueError(f"Missing path parameter {e.args[0]!r} for {template}") from e
