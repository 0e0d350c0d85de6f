"""
Non-blocking notifications queued for the next response to a session.
"""

import itertools
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List


class ToastKind(str, Enum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"


@dataclass
class Toast:
    id: int
    kind: ToastKind
    message: str
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        return {"id": self.id, "kind": self.kind.value, "message": self.message}


class ToastStore:
    """Pending toasts for one session, oldest first"""

    def __init__(self):
        self._toasts: List[Toast] = []
        self._ids = itertools.count(1)

    def add(self, kind: ToastKind, message: str) -> Toast:
        toast = Toast(id=next(self._ids), kind=kind, message=message)
        self._toasts.append(toast)
        return toast

    def success(self, message: str) -> Toast:
        return self.add(ToastKind.SUCCESS, message)

    def error(self, message: str) -> Toast:
        return self.add(ToastKind.ERROR, message)

    def info(self, message: str) -> Toast:
        return self.add(ToastKind.INFO, message)

    def dismiss(self, toast_id: int) -> None:
        self._toasts = [t for t in self._toasts if t.id != toast_id]

    def pending(self) -> List[Toast]:
        return list(self._toasts)

    def drain(self) -> List[Toast]:
        """Return and clear everything queued so far."""
        toasts, self._toasts = self._toasts, []
        return toasts
