"""Exception types raised by the insight engine and its storage backends."""

from __future__ import annotations


class InsightEngineError(Exception):
    """Base class for every error this package raises on purpose."""


class InsufficientDataError(InsightEngineError):
    """Not enough journal entries to run the analysis."""

    def __init__(self, required: int, actual: int):
        self.required = required
        self.actual = actual
        super().__init__(
            f"Need at least {required} entries for analysis (have {actual})"
        )

    @property
    def missing(self) -> int:
        return max(0, self.required - self.actual)


class StorageError(InsightEngineError):
    """A read or write against the repository failed."""


class DuplicateEntryError(StorageError):
    """A journal entry already exists for this user and date."""


class InsightNotFoundError(StorageError):
    pass


class InvalidStatusTransitionError(StorageError):
    def __init__(self, current: str, requested: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move insight from '{current}' to '{requested}'")
