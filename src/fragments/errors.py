"""Typed errors for fragments."""


class FragmentsError(Exception):
    """Base exception for all fragments errors."""


class ValidationError(FragmentsError):
    """Raised for malformed or missing required input."""


class NotFoundError(FragmentsError):
    """Raised when no fragment (or payload) exists for an owner/id pair."""

    def __init__(self, owner_id: str, fragment_id: str, *, what: str = "Fragment") -> None:
        """Initialize with the owner and fragment IDs that could not be resolved."""
        self.owner_id = owner_id
        self.fragment_id = fragment_id
        super().__init__(f"{what} not found: {fragment_id}")


class UnsupportedMediaTypeError(FragmentsError):
    """Raised when a type is not accepted or no conversion edge exists."""

    def __init__(self, message: str, *, source_type: str | None = None, target_type: str | None = None) -> None:
        """Initialize with a message and the source/target types involved."""
        self.source_type = source_type
        self.target_type = target_type
        super().__init__(message)


class ConversionFailedError(FragmentsError):
    """Raised when a conversion edge exists but the payload cannot be transformed."""

    def __init__(self, source_type: str, target_type: str, reason: str) -> None:
        """Initialize with the attempted conversion and the underlying reason."""
        self.source_type = source_type
        self.target_type = target_type
        self.reason = reason
        super().__init__(f"Cannot convert {source_type} to {target_type}: {reason}")


class StorageError(FragmentsError):
    """Raised when an underlying store fails to read or write."""

    def __init__(self, operation: str, key: str, reason: str) -> None:
        """Initialize with the failing store operation, its key, and the reason."""
        self.operation = operation
        self.key = key
        self.reason = reason
        super().__init__(f"Storage {operation} failed for {key}: {reason}")
