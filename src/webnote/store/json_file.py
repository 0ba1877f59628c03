"""JSON file annotation store.

All documents live in one JSON object keyed by document id, each value in
the persisted ``{url, title, highlights, lastModified}`` shape.  Every write
reloads the file, applies one change and replaces the file atomically.
Blocking file I/O runs in a worker thread; an ``asyncio.Lock`` serialises
read-modify-write cycles within one process.

Entries are validated one at a time.  A highlight that fails validation is
skipped on load and written back untouched; a page whose envelope fails is
kept as-is and refuses writes.  Only a file that is not a JSON object makes
the whole store unreadable.
"""

from __future__ import annotations

import asyncio
import logging
import os
import tempfile
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from pydantic import TypeAdapter, ValidationError

from webnote.models import HighlightRecord, PageAnnotations
from webnote.store.models import STORE_OK, StoreError, StoreResult
from webnote.store.pages import drop_record, set_note, upsert_record

if TYPE_CHECKING:
    from collections.abc import Callable
    from pathlib import Path

logger = logging.getLogger(__name__)

_ENTRIES = TypeAdapter(dict[str, Any])


@dataclass
class _StoreFile:
    """Parsed store contents.

    Attributes:
        pages: Validated pages, holding only their valid highlights.
        skipped: Raw highlight entries that failed validation, per page.
        unreadable: Raw page entries whose envelope failed validation.
    """

    pages: dict[str, PageAnnotations] = field(default_factory=dict)
    skipped: dict[str, list[Any]] = field(default_factory=dict)
    unreadable: dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> bytes:
        entries: dict[str, Any] = dict(self.unreadable)
        for document_id, page in self.pages.items():
            data = page.model_dump(by_alias=True, mode="json")
            data["highlights"].extend(self.skipped.get(document_id, ()))
            entries[document_id] = data
        return _ENTRIES.dump_json(entries, indent=2)


def _load_page(store: _StoreFile, document_id: str, raw: Any) -> None:
    highlights = raw.get("highlights", []) if isinstance(raw, dict) else None
    if not isinstance(highlights, list):
        logger.warning("Skipping unreadable page %s: not a page object", document_id)
        store.unreadable[document_id] = raw
        return
    try:
        page = PageAnnotations.model_validate({**raw, "highlights": []})
    except ValidationError as exc:
        logger.warning("Skipping unreadable page %s: %s", document_id, exc)
        store.unreadable[document_id] = raw
        return
    for item in highlights:
        try:
            page.highlights.append(HighlightRecord.model_validate(item))
        except ValidationError as exc:
            logger.warning("Skipping unreadable highlight in %s: %s", document_id, exc)
            store.skipped.setdefault(document_id, []).append(item)
    store.pages[document_id] = page


class JsonFileStore:
    """File-backed implementation of AnnotationStoreProtocol."""

    def __init__(self, path: Path) -> None:
        self.path = path
        self._lock = asyncio.Lock()

    # --- blocking helpers (run via asyncio.to_thread) ---

    def _read(self) -> _StoreFile:
        try:
            raw = self.path.read_bytes()
        except FileNotFoundError:
            return _StoreFile()
        except OSError as exc:
            msg = f"Cannot read annotation store {self.path}: {exc}"
            raise StoreError(msg) from exc
        if not raw.strip():
            return _StoreFile()
        try:
            entries = _ENTRIES.validate_json(raw)
        except ValidationError as exc:
            msg = f"Annotation store {self.path} is not valid: {exc}"
            raise StoreError(msg) from exc
        store = _StoreFile()
        for document_id, value in entries.items():
            _load_page(store, document_id, value)
        return store

    def _write(self, store: _StoreFile) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        payload = store.to_json()
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "wb") as fh:
                fh.write(payload)
            os.replace(tmp_name, self.path)
        except OSError:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def _modify(
        self, document_id: str, change: Callable[[_StoreFile], bool]
    ) -> StoreResult:
        store = self._read()
        if document_id in store.unreadable:
            return StoreResult(success=False, error="unreadable_page")
        if not change(store):
            return StoreResult(success=False, error="not_found")
        self._write(store)
        return STORE_OK

    async def _locked_modify(
        self, document_id: str, change: Callable[[_StoreFile], bool]
    ) -> StoreResult:
        async with self._lock:
            try:
                return await asyncio.to_thread(self._modify, document_id, change)
            except (OSError, StoreError) as exc:
                logger.warning(
                    "Write to %s failed for %s: %s", self.path, document_id, exc
                )
                return StoreResult(success=False, error="write_failed")

    # --- AnnotationStoreProtocol ---

    async def load_records(self, document_id: str) -> list[HighlightRecord]:
        async with self._lock:
            store = await asyncio.to_thread(self._read)
        if document_id in store.unreadable:
            msg = f"Annotations for {document_id} in {self.path} are not valid"
            raise StoreError(msg)
        page = store.pages.get(document_id)
        return list(page.highlights) if page is not None else []

    async def save_record(
        self,
        document_id: str,
        record: HighlightRecord,
        *,
        url: str = "",
        title: str = "",
    ) -> StoreResult:
        def change(store: _StoreFile) -> bool:
            page = store.pages.setdefault(document_id, PageAnnotations(url=url))
            upsert_record(page, record, url=url, title=title)
            return True

        return await self._locked_modify(document_id, change)

    async def update_note(
        self, document_id: str, highlight_id: str, note: str
    ) -> StoreResult:
        def change(store: _StoreFile) -> bool:
            page = store.pages.get(document_id)
            return page is not None and set_note(page, highlight_id, note)

        return await self._locked_modify(document_id, change)

    async def delete_record(self, document_id: str, highlight_id: str) -> StoreResult:
        def change(store: _StoreFile) -> bool:
            page = store.pages.get(document_id)
            if page is None or not drop_record(page, highlight_id):
                return False
            if not page.highlights and document_id not in store.skipped:
                del store.pages[document_id]
            return True

        return await self._locked_modify(document_id, change)
