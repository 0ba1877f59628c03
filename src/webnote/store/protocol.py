"""Protocol defining the annotation store interface.

Both MemoryStore and JsonFileStore implement this protocol, allowing them
to be used interchangeably by the controller.  Writes are acknowledged with
a ``StoreResult``; the controller reconciles its in-memory state when an
acknowledgment reports failure.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from webnote.models import HighlightRecord
    from webnote.store.models import StoreResult


class AnnotationStoreProtocol(Protocol):
    """Per-document storage of highlight records."""

    async def load_records(self, document_id: str) -> list[HighlightRecord]:
        """Return the stored records for a document (possibly empty, unsorted).

        Args:
            document_id: Storage key of the document (see ``document_key``).
        """
        ...

    async def save_record(
        self,
        document_id: str,
        record: HighlightRecord,
        *,
        url: str = "",
        title: str = "",
    ) -> StoreResult:
        """Insert *record*, or merge it into the stored record with the same id.

        Args:
            document_id: Storage key of the document.
            record: The highlight to persist.
            url: Document URL, kept alongside the records.
            title: Document title, kept alongside the records.
        """
        ...

    async def update_note(
        self, document_id: str, highlight_id: str, note: str
    ) -> StoreResult:
        """Set the note of a stored highlight and bump its ``updatedAt``."""
        ...

    async def delete_record(self, document_id: str, highlight_id: str) -> StoreResult:
        """Remove a stored highlight."""
        ...
