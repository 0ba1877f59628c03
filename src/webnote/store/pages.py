"""Record-list operations shared by the store implementations.

Each function mutates one ``PageAnnotations`` value in place and stamps
``last_modified``; callers decide how the value is kept.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from webnote.models import now_ms

if TYPE_CHECKING:
    from webnote.models import HighlightRecord, PageAnnotations


def upsert_record(
    page: PageAnnotations, record: HighlightRecord, *, url: str = "", title: str = ""
) -> None:
    """Append *record*, or replace the stored record with the same id.

    A replaced record gets a fresh ``updated_at``.
    """
    for idx, existing in enumerate(page.highlights):
        if existing.id == record.id:
            page.highlights[idx] = record.model_copy(update={"updated_at": now_ms()})
            break
    else:
        page.highlights.append(record.model_copy())
    if url:
        page.url = url
    if title:
        page.title = title
    page.last_modified = now_ms()


def set_note(page: PageAnnotations, highlight_id: str, note: str) -> bool:
    for record in page.highlights:
        if record.id == highlight_id:
            record.note = note
            record.updated_at = now_ms()
            page.last_modified = now_ms()
            return True
    return False


def drop_record(page: PageAnnotations, highlight_id: str) -> bool:
    kept = [r for r in page.highlights if r.id != highlight_id]
    if len(kept) == len(page.highlights):
        return False
    page.highlights = kept
    page.last_modified = now_ms()
    return True
