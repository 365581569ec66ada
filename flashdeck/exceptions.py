from typing import Optional


class FlashdeckError(Exception):
    """Base exception for flashdeck errors."""

    def __init__(
        self, message: str, original_exception: Optional[Exception] = None
    ):
        super().__init__(message)
        self.original_exception = original_exception


class CardValidationError(FlashdeckError):
    """Raised when a card's question or answer is empty.

    The message is meant to be shown to the user as-is.
    """

    pass


class StorageError(FlashdeckError):
    """Base exception for persistence-related errors."""

    pass


class StorageConnectionError(StorageError):
    """Raised for errors connecting to the storage database."""

    pass


class SchemaInitializationError(StorageError):
    """Raised for errors during schema setup."""

    pass


class StorageOperationError(StorageError):
    """Raised when reading or writing a stored value fails."""

    pass


class MarshallingError(FlashdeckError):
    """Indicates an error during conversion between the stored payload
    and Card models."""

    pass
