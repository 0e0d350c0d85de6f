"""
Confirmation dialog for destructive admin actions.
"""

import logging
from typing import Awaitable, Callable, Optional

logger = logging.getLogger(__name__)


class ConfirmDialog:
    """
    Runs `action` only after confirmation. When `confirm_text` is set the
    user must type it exactly (e.g. "DELETE") before confirming.
    """

    def __init__(
        self,
        title: str,
        message: str,
        action: Callable[[], Awaitable[None]],
        confirm_label: str = "Confirm",
        confirm_text: Optional[str] = None,
        variant: str = "default",
    ):
        self.title = title
        self.message = message
        self.confirm_label = confirm_label
        self.confirm_text = confirm_text
        self.variant = variant
        self._action = action
        self.is_open = True
        self.input_value = ""
        self.submitting = False
        self.error: Optional[str] = None

    def type(self, value: str) -> None:
        self.input_value = value

    @property
    def confirm_disabled(self) -> bool:
        if self.submitting:
            return True
        return bool(self.confirm_text) and self.input_value != self.confirm_text

    async def confirm(self) -> bool:
        """True when the action ran and the dialog closed."""
        if self.confirm_disabled:
            return False
        self.submitting = True
        try:
            await self._action()
        except Exception as e:
            logger.error(f"[CONFIRM] {self.title} failed: {e}")
            self.error = str(e)
            return False
        finally:
            self.submitting = False
            self.input_value = ""
        self.error = None
        self.is_open = False
        return True

    def close(self) -> None:
        if self.submitting:
            return
        self.input_value = ""
        self.is_open = False

    def to_dict(self) -> dict:
        return {
            "title": self.title,
            "message": self.message,
            "confirm_label": self.confirm_label,
            "confirm_text": self.confirm_text,
            "variant": self.variant,
            "is_open": self.is_open,
            "confirm_disabled": self.confirm_disabled,
            "error": self.error,
        }
