"""Errors raised by the retention record store."""


class RetentionStoreError(Exception):
    """Base class for record store failures."""

    def __init__(self, message: str, category: str = None):
        super().__init__(message)
        self.category = category


class StoreUnavailable(RetentionStoreError):
    """Connection or transport failure talking to the store."""
    pass


class ConstraintViolation(RetentionStoreError):
    """Malformed filter or statement rejected by the store."""
    pass


class PartialBatchFailure(RetentionStoreError):
    """Store failed mid-statement; the batch had no effect."""
    pass
