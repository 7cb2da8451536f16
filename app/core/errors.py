"""Error types raised by the store services.

Routers translate these into HTTP responses through the handlers registered
in ``app.main``.
"""

from typing import Optional


class StoreError(Exception):
    """Base class for store errors."""

    def __init__(self, message: str, cause: Optional[Exception] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message


class ValidationError(StoreError):
    """Caller-correctable input problem (empty cart, bad quantity, ...).

    The draft that produced it is left untouched so it can be fixed in place.
    """


class PersistenceError(StoreError):
    """The store could not complete the operation.

    Raised after any partial write has been rolled back. Safe to retry.
    """


class NotFoundError(PersistenceError):
    """A referenced row does not exist."""

    def __init__(self, entity: str, entity_id: int):
        super().__init__(f"{entity} not found")
        self.entity = entity
        self.entity_id = entity_id
