"""
Notification channel for user-facing progress and outcomes.

Resolvers and the update orchestrator never print; they are handed a
Reporter and call through it, so tests can capture every notification.
"""

from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from enum import Enum
from typing import TextIO

from .render import colorize, GREEN, RED, YELLOW


class ToastStyle(str, Enum):
    """Notification styles."""

    ANIMATED = "animated"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass(frozen=True)
class Notification:
    """One transient notification."""
    style: ToastStyle
    title: str
    message: str | None = None


class Reporter:
    """Notification sink. Subclasses implement notify(); the helpers build Notifications."""

    def notify(self, notification: Notification) -> None:
        raise NotImplementedError

    def animated(self, title: str, message: str | None = None) -> None:
        self.notify(Notification(ToastStyle.ANIMATED, title, message))

    def success(self, title: str, message: str | None = None) -> None:
        self.notify(Notification(ToastStyle.SUCCESS, title, message))

    def failure(self, title: str, message: str | None = None) -> None:
        self.notify(Notification(ToastStyle.FAILURE, title, message))


class ConsoleReporter(Reporter):
    """Prints notifications as single status lines on a stream (stderr by default)."""

    SYMBOLS = {
        ToastStyle.ANIMATED: ("…", YELLOW),
        ToastStyle.SUCCESS: ("✓", GREEN),
        ToastStyle.FAILURE: ("✗", RED),
    }

    def __init__(self, stream: TextIO | None = None):
        self.stream = stream

    def notify(self, notification: Notification) -> None:
        symbol, color = self.SYMBOLS[notification.style]
        line = f"{colorize(symbol, color)} {notification.title}"
        if notification.message:
            line = f"{line}: {notification.message}"
        print(line, file=self.stream or sys.stderr, flush=True)


class LoggingReporter(Reporter):
    """Routes notifications into the logging framework."""

    LEVELS = {
        ToastStyle.ANIMATED: logging.INFO,
        ToastStyle.SUCCESS: logging.INFO,
        ToastStyle.FAILURE: logging.ERROR,
    }

    def __init__(self, logger: logging.Logger | None = None):
        self.logger = logger or logging.getLogger("easy_vibe")

    def notify(self, notification: Notification) -> None:
        text = notification.title
        if notification.message:
            text = f"{text}: {notification.message}"
        self.logger.log(self.LEVELS[notification.style], text)


class RecordingReporter(Reporter):
    """Keeps notifications in memory (used for --json runs and tests)."""

    def __init__(self):
        self.notifications: list[Notification] = []

    def notify(self, notification: Notification) -> None:
        self.notifications.append(notification)

    @property
    def titles(self) -> list[str]:
        return [n.title for n in self.notifications]

    def by_style(self, style: ToastStyle) -> list[Notification]:
        return [n for n in self.notifications if n.style == style]
