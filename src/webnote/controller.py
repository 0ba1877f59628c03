"""Highlight lifecycle for one loaded document.

``HighlightController`` ties the anchoring core to a store: it restores the
stored highlights of a document once the tree has settled, creates new
highlights from selections, and keeps markers, in-memory records and the
store consistent when the user removes, recolours or annotates one.

The controller owns the live marker table for its document instance.  A
new document instance (a reload) needs a new controller.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from webnote.anchoring.capture import capture
from webnote.anchoring.errors import MarkerApplyFailure, RangeDegenerate
from webnote.anchoring.markers import MarkerApplier, highlight_id_at
from webnote.anchoring.resolver import SpanResolver
from webnote.config import Settings, get_settings
from webnote.models import HighlightRecord, generate_highlight_id, now_ms
from webnote.store.models import StoreError

if TYPE_CHECKING:
    from webnote.anchoring.markers import LiveMarkerSet
    from webnote.dom.range import TextRange
    from webnote.dom.tree import Document, Node
    from webnote.store.protocol import AnnotationStoreProtocol

logger = logging.getLogger(__name__)

NO_TEXT_IN_RANGE = "no-text-in-range"
INVALID_COLOR = "invalid-color"
MARKER_APPLY_FAILED = "marker-apply-failed"
STORE_REJECTED = "store-rejected"


@dataclass(frozen=True)
class RestoreSummary:
    """Counts from one restoration pass."""

    restored_count: int
    failed_count: int


@dataclass(frozen=True)
class CreateFailure:
    """Why a selection did not become a highlight.

    Attributes:
        reason: One of ``no-text-in-range``, ``invalid-color``,
            ``marker-apply-failed`` or ``store-rejected``.
    """

    reason: str


async def wait_for_document_stable(
    document: Document,
    *,
    timeout: float = 2.0,
    quiet_period: float = 0.3,
    settle_delay: float = 0.1,
    poll_interval: float = 0.05,
) -> bool:
    """Wait until *document* stops changing, within *timeout* seconds.

    A fully loaded document only gets a short *settle_delay*.  Otherwise the
    wait ends once ``mutation_count`` has not moved for *quiet_period*.

    Returns:
        True if the document settled, False if the timeout cut the wait
        short.  Either way the caller proceeds with the current tree.
    """
    if document.ready_state == "complete":
        await asyncio.sleep(settle_delay)
        return True

    loop = asyncio.get_running_loop()
    deadline = loop.time() + timeout
    last_count = document.mutation_count
    quiet_since = loop.time()
    while True:
        now = loop.time()
        if now - quiet_since >= quiet_period:
            return True
        if now >= deadline:
            logger.debug("Document still changing after %.2fs; proceeding", timeout)
            return False
        await asyncio.sleep(min(poll_interval, deadline - now))
        if document.mutation_count != last_count:
            last_count = document.mutation_count
            quiet_since = loop.time()


class HighlightController:
    """Creates, restores and edits the highlights of one document."""

    def __init__(
        self,
        document: Document,
        store: AnnotationStoreProtocol,
        document_id: str,
        settings: Settings | None = None,
        *,
        url: str = "",
        title: str = "",
    ) -> None:
        self.document = document
        self.store = store
        self.document_id = document_id
        self.settings = settings if settings is not None else get_settings()
        self.url = url
        self.title = title
        self._records: dict[str, HighlightRecord] = {}
        self._unrestorable: set[str] = set()
        self._applier = MarkerApplier()
        self._resolver = SpanResolver(document)

    @property
    def records(self) -> list[HighlightRecord]:
        """Known records for this document, restored or not."""
        return list(self._records.values())

    @property
    def markers(self) -> LiveMarkerSet:
        return self._applier.markers

    def get_record(self, highlight_id: str) -> HighlightRecord | None:
        return self._records.get(highlight_id)

    def highlight_id_at(self, node: Node) -> str | None:
        return highlight_id_at(node)

    # --- Restoration ---

    async def restore_all(self) -> RestoreSummary:
        """Re-attach every stored highlight of this document.

        Each record is attempted once, in stored order.  A record that no
        tier can place stays in the store and in ``records``; it is only
        counted as failed.
        """
        restore = self.settings.restore
        await wait_for_document_stable(
            self.document,
            timeout=restore.stabilize_timeout,
            quiet_period=restore.quiet_period,
            settle_delay=restore.settle_delay,
            poll_interval=restore.poll_interval,
        )
        try:
            stored = await self.store.load_records(self.document_id)
        except StoreError as exc:
            logger.error("Cannot load highlights for %s: %s", self.document_id, exc)
            return RestoreSummary(restored_count=0, failed_count=0)

        restored = failed = 0
        for record in stored:
            self._records[record.id] = record
            if self.restore_record(record):
                restored += 1
            else:
                failed += 1
        if failed:
            logger.warning(
                "Failed to restore %d/%d highlights for %s",
                failed,
                len(stored),
                self.document_id,
            )
        return RestoreSummary(restored_count=restored, failed_count=failed)

    def restore_record(self, record: HighlightRecord) -> bool:
        """Locate *record* in the current tree and mark it; False if not placed."""
        if record.id in self.markers:
            return True
        if record.id in self._unrestorable:
            return False
        resolution = self._resolver.resolve(record.text, record.position)
        if not resolution.resolved or resolution.range is None:
            logger.debug(
                "Highlight %s unrestorable: %s",
                record.id,
                "; ".join(str(f) for f in resolution.failures),
            )
            self._unrestorable.add(record.id)
            return False
        try:
            self._applier.apply(resolution.range, record.color, record.id)
        except MarkerApplyFailure as exc:
            logger.debug("Highlight %s resolved but not applied: %s", record.id, exc)
            self._unrestorable.add(record.id)
            return False
        return True

    # --- Creation ---

    async def create_at(
        self, text_range: TextRange, color: str | None = None, note: str = ""
    ) -> HighlightRecord | CreateFailure:
        """Turn a selection into a stored, marked highlight.

        The descriptor is captured before any marker is inserted, since
        wrapping splits text nodes and would change the addresses.
        """
        anchor = self.settings.anchor
        color = color or anchor.default_color
        if color not in anchor.colors:
            return CreateFailure(INVALID_COLOR)

        text = text_range.text().strip()
        if not text:
            return CreateFailure(NO_TEXT_IN_RANGE)
        try:
            position = capture(text_range, context_length=anchor.context_length)
        except RangeDegenerate as exc:
            logger.debug("Selection rejected: %s", exc)
            return CreateFailure(NO_TEXT_IN_RANGE)

        highlight_id = generate_highlight_id()
        try:
            self._applier.apply(text_range, color, highlight_id)
        except MarkerApplyFailure as exc:
            logger.warning("Could not mark new highlight: %s", exc)
            return CreateFailure(MARKER_APPLY_FAILED)

        created = now_ms()
        record = HighlightRecord(
            id=highlight_id,
            text=text,
            color=color,
            note=note,
            created_at=created,
            updated_at=created,
            position=position,
        )
        result = await self.store.save_record(
            self.document_id, record, url=self.url, title=self.title
        )
        if not result.success:
            logger.warning(
                "Store rejected highlight %s (%s); removing its markers",
                highlight_id,
                result.error,
            )
            self._applier.remove(highlight_id)
            return CreateFailure(STORE_REJECTED)

        self._records[highlight_id] = record
        logger.info("Created highlight %s on %s", highlight_id, self.document_id)
        return record

    # --- Editing ---

    async def remove_by_id(self, highlight_id: str) -> bool:
        """Unmark and delete a highlight.

        Returns False if the id is neither live nor known.  When the store
        rejects the delete, the markers are still gone but the record is
        kept in ``records`` so a later restore can bring it back.
        """
        live = highlight_id in self.markers
        if not live and highlight_id not in self._records:
            return False
        self._applier.remove(highlight_id)
        result = await self.store.delete_record(self.document_id, highlight_id)
        if result.success:
            self._records.pop(highlight_id, None)
        else:
            logger.warning(
                "Store rejected delete of %s (%s)", highlight_id, result.error
            )
        return live or result.success

    async def recolor(self, highlight_id: str, color: str) -> bool:
        """Change a highlight's colour on screen and in the store."""
        if color not in self.settings.anchor.colors:
            return False
        record = self._records.get(highlight_id)
        if record is None:
            return self._applier.recolor(highlight_id, color)

        self._applier.recolor(highlight_id, color)
        updated = record.model_copy(update={"color": color, "updated_at": now_ms()})
        result = await self.store.save_record(
            self.document_id, updated, url=self.url, title=self.title
        )
        if not result.success:
            logger.warning(
                "Store rejected recolour of %s (%s)", highlight_id, result.error
            )
            self._applier.recolor(highlight_id, record.color)
            return False
        self._records[highlight_id] = updated
        return True

    async def update_note(self, highlight_id: str, note: str) -> bool:
        """Attach *note* (trimmed) to a highlight."""
        record = self._records.get(highlight_id)
        if record is None:
            return False
        note = note.strip()
        result = await self.store.update_note(self.document_id, highlight_id, note)
        if not result.success:
            logger.warning(
                "Store rejected note for %s (%s)", highlight_id, result.error
            )
            return False
        self._records[highlight_id] = record.model_copy(
            update={"note": note, "updated_at": now_ms()}
        )
        return True
