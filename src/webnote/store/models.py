"""Result types returned by annotation stores."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class StoreResult:
    """Acknowledgment of a store write.

    Attributes:
        success: Whether the write was applied.
        error: Error type if the write failed.
    """

    success: bool
    error: str | None = None


STORE_OK = StoreResult(success=True)


class StoreError(Exception):
    """The store could not be read."""
