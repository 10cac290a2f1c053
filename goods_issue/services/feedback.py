from __future__ import annotations

import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

DEFAULT_FEEDBACK_TIMEOUT_MS = 3000


class Severity(Enum):
    SUCCESS = "success"
    ERROR = "error"
    WARNING = "warning"
    INFO = "info"


@dataclass(frozen=True)
class Feedback:
    """Transient toast message; the client dismisses it after ``timeout_ms``."""
    message: str
    severity: Severity
    timeout_ms: int = DEFAULT_FEEDBACK_TIMEOUT_MS

    @classmethod
    def success(cls, message: str, timeout_ms: int = DEFAULT_FEEDBACK_TIMEOUT_MS) -> "Feedback":
        return cls(message, Severity.SUCCESS, timeout_ms)

    @classmethod
    def error(cls, message: str, timeout_ms: int = DEFAULT_FEEDBACK_TIMEOUT_MS) -> "Feedback":
        return cls(message, Severity.ERROR, timeout_ms)

    @classmethod
    def warning(cls, message: str, timeout_ms: int = DEFAULT_FEEDBACK_TIMEOUT_MS) -> "Feedback":
        return cls(message, Severity.WARNING, timeout_ms)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'message': self.message,
            'type': self.severity.value,
            'timeout_ms': self.timeout_ms,
        }


class FeedbackSlot:
    """Holds at most one Feedback and forgets it once its timeout elapses."""

    def __init__(self, clock: Callable[[], float] = time.monotonic):
        self._clock = clock
        self._feedback: Optional[Feedback] = None
        self._shown_at = 0.0

    def show(self, feedback: Feedback) -> Feedback:
        self._feedback = feedback
        self._shown_at = self._clock()
        return feedback

    def clear(self) -> None:
        self._feedback = None

    @property
    def current(self) -> Optional[Feedback]:
        if self._feedback is None:
            return None
        elapsed_ms = (self._clock() - self._shown_at) * 1000
        if elapsed_ms >= self._feedback.timeout_ms:
            self._feedback = None
        return self._feedback
