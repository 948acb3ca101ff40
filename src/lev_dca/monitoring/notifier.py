"""Notification backends."""

from __future__ import annotations

from dataclasses import dataclass, field


class Notifier:
    def notify(self, event: str, message: str) -> None:  # pragma: no cover - interface
        raise NotImplementedError


@dataclass
class LogNotifier(Notifier):
    prefix: str = "[LEV-DCA]"

    def notify(self, event: str, message: str) -> None:
        print(f"{self.prefix} {event}: {message}")


@dataclass
class MemoryNotifier(Notifier):
    events: list[tuple[str, str]] = field(default_factory=list)

    def notify(self, event: str, message: str) -> None:
        self.events.append((event, message))
