"""In-memory annotation store.

Implements AnnotationStoreProtocol with a plain dict keyed by document id.
Used by tests and by the ``memory`` backend.  ``fail_writes`` makes every
write acknowledge failure, which exercises the controller's reconciliation.
"""

from __future__ import annotations

import logging

from webnote.models import HighlightRecord, PageAnnotations
from webnote.store.models import STORE_OK, StoreResult
from webnote.store.pages import drop_record, set_note, upsert_record

logger = logging.getLogger(__name__)


class MemoryStore:
    """Dict-backed implementation of AnnotationStoreProtocol."""

    def __init__(self, *, fail_writes: bool = False) -> None:
        self.pages: dict[str, PageAnnotations] = {}
        self.fail_writes = fail_writes

    def _rejected(self, operation: str, document_id: str) -> StoreResult:
        logger.warning("MemoryStore rejected %s for %s", operation, document_id)
        return StoreResult(success=False, error="write_rejected")

    async def load_records(self, document_id: str) -> list[HighlightRecord]:
        page = self.pages.get(document_id)
        if page is None:
            return []
        return [record.model_copy(deep=True) for record in page.highlights]

    async def save_record(
        self,
        document_id: str,
        record: HighlightRecord,
        *,
        url: str = "",
        title: str = "",
    ) -> StoreResult:
        if self.fail_writes:
            return self._rejected("save", document_id)
        page = self.pages.setdefault(document_id, PageAnnotations(url=url))
        upsert_record(page, record, url=url, title=title)
        return STORE_OK

    async def update_note(
        self, document_id: str, highlight_id: str, note: str
    ) -> StoreResult:
        if self.fail_writes:
            return self._rejected("update_note", document_id)
        page = self.pages.get(document_id)
        if page is None or not set_note(page, highlight_id, note):
            return StoreResult(success=False, error="not_found")
        return STORE_OK

    async def delete_record(self, document_id: str, highlight_id: str) -> StoreResult:
        if self.fail_writes:
            return self._rejected("delete", document_id)
        page = self.pages.get(document_id)
        if page is None or not drop_record(page, highlight_id):
            return StoreResult(success=False, error="not_found")
        return STORE_OK
