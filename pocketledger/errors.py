"""
Store Exceptions

DESIGN DECISION: Each failure class maps to one outcome for the caller:
- ValidationError: bad user input, operation rejected, state untouched
- NotFoundError: id lookup missed, nothing changed
- InvalidOperationError: forbidden operation, state untouched
- PersistenceError: storage read/write failed; the store logs it and
  keeps the in-memory state, so callers normally never see it
"""


class StoreError(Exception):
    """Base exception for financial store operations."""
    pass


class ValidationError(StoreError):
    """User input failed a business rule (empty name, non-positive amount)."""
    pass


class NotFoundError(StoreError):
    """No budget, expense or asset has the requested ID."""
    pass


class InvalidOperationError(StoreError):
    """Operation is not allowed in the current state."""
    pass


class PersistenceError(StoreError):
    """A partition could not be encoded, decoded, read or written."""

    def __init__(self, message: str, partition: str = ""):
        super().__init__(message)
        self.partition = partition
