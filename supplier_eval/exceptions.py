"""Exception hierarchy for the evaluation and selection engine."""

from __future__ import annotations


class SupplierEvalError(Exception):
    """Base exception for all engine errors.

    Args:
        message: Human-readable error description.
        context: Optional dict of extra context for logging/debugging.
    """

    def __init__(self, message: str = "", context: dict | None = None) -> None:
        super().__init__(message)
        self.context = context or {}


class ConfigurationError(SupplierEvalError):
    """Raised when a weight configuration is invalid and must not be stored."""


class UnknownCategoryTypeError(ConfigurationError):
    """Raised when a category type has no criteria catalog.

    This is a configuration bug, callers are not expected to recover from it.
    """


class ValidationError(SupplierEvalError):
    """Raised when submitted input is incomplete or out of range.

    Args:
        message: Human-readable error description.
        missing: Identifiers (criterion ids, field names) still missing.
        context: Optional dict of extra context.
    """

    def __init__(
        self,
        message: str = "",
        missing: list[str] | None = None,
        context: dict | None = None,
    ) -> None:
        super().__init__(message, context)
        self.missing = list(missing or [])


class StaleStateError(SupplierEvalError):
    """Raised when a record in a terminal state is asked to change.

    Args:
        message: Human-readable error description.
        state: The state the record was found in.
        context: Optional dict of extra context.
    """

    def __init__(self, message: str = "", state: str = "", context: dict | None = None) -> None:
        super().__init__(message, context)
        self.state = state


class NotFoundError(SupplierEvalError):
    """Raised when a provider, category, evaluation or event does not exist."""


class NotificationError(SupplierEvalError):
    """Raised by notifiers when a message could not be delivered."""


class PermissionDeniedError(SupplierEvalError):
    """Raised when the acting user may not perform an operation."""


class StorageError(SupplierEvalError):
    """Raised when a storage key lock cannot be acquired in time."""
