"""
Domain errors raised across the service boundary.
Backend failures are normalized into these at the repository layer.
"""

from typing import Dict, Optional

# Postgres error code for unique_violation
UNIQUE_VIOLATION = "23505"


class PlayrError(Exception):
    """Base error for the application"""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class BackendError(PlayrError):
    """A query, RPC or storage call to the hosted backend failed"""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[str] = None,
        hint: Optional[str] = None,
    ):
        super().__init__(message)
        self.code = code
        self.details = details
        self.hint = hint

    @property
    def is_unique_violation(self) -> bool:
        return self.code == UNIQUE_VIOLATION

    def with_prefix(self, prefix: str) -> "BackendError":
        """Copy of this error with a human-readable action prefix."""
        return BackendError(f"{prefix}: {self.message}", self.code, self.details, self.hint)


class AuthFailure(PlayrError):
    """Authentication service rejected the request"""

    def __init__(self, message: str, status: Optional[int] = None, code: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.code = code

    @property
    def is_unconfirmed_email(self) -> bool:
        return self.code == "email_not_confirmed" or "email not confirmed" in self.message.lower()

    @property
    def is_already_registered(self) -> bool:
        return self.code == "user_already_exists" or "already registered" in self.message.lower()


class ValidationFailed(PlayrError):
    """Local form validation failed; errors are keyed by field name"""

    def __init__(self, errors: Dict[str, str]):
        super().__init__(next(iter(errors.values()), "Invalid input"))
        self.errors = errors


def is_unique_violation(error: Exception) -> bool:
    return isinstance(error, BackendError) and error.is_unique_violation
