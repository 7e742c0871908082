"""User-facing notifications raised by forms.

Forms never display anything themselves; they hand messages to an
injected notifier.
"""

from typing import Protocol, runtime_checkable

from rich.console import Console

from brewops_forms.core.models import Notification


@runtime_checkable
class Notifier(Protocol):
    """Receives success and error messages from forms."""

    def notify(self, notification: Notification) -> None:
        ...


class RecordingNotifier:
    """Notifier that keeps every notification in memory."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    @property
    def messages(self) -> list[str]:
        return [n.message for n in self.notifications]

    @property
    def last(self) -> Notification | None:
        return self.notifications[-1] if self.notifications else None

    def clear(self) -> None:
        self.notifications.clear()


class ConsoleNotifier:
    """Notifier that prints to a rich console."""

    _styles = {"success": "green", "error": "red", "info": "blue"}

    def __init__(self, console: Console | None = None) -> None:
        self.console = console if console is not None else Console()

    def notify(self, notification: Notification) -> None:
        style = self._styles[notification.level]
        label = notification.level.capitalize()
        self.console.print(f"[{style}]{label}:[/{style}] {notification.message}")
