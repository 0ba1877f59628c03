"""Annotation store factory.

Provides a factory function to get the annotation store selected by
configuration (JSON file on disk, or in-memory for tests and dry runs).
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from webnote.config import get_settings

if TYPE_CHECKING:
    from webnote.store.protocol import AnnotationStoreProtocol


# Cached memory store instance so records survive across calls in one process
_memory_store_instance: AnnotationStoreProtocol | None = None


def get_store() -> AnnotationStoreProtocol:
    """Get the annotation store for the configured backend.

    If STORE__BACKEND=memory, returns a process-wide MemoryStore.
    Otherwise, returns a JsonFileStore writing to STORE__PATH.

    Returns:
        A store implementing AnnotationStoreProtocol.
    """
    global _memory_store_instance  # noqa: PLW0603
    settings = get_settings()

    if settings.store.backend == "memory":
        if _memory_store_instance is None:
            from webnote.store.memory import MemoryStore

            _memory_store_instance = MemoryStore()
        return _memory_store_instance

    from webnote.store.json_file import JsonFileStore

    return JsonFileStore(settings.store.path)


def clear_store_cache() -> None:
    """Clear the configuration and memory store caches.

    Useful for testing when you need to reload configuration
    or start from an empty memory store.
    """
    global _memory_store_instance  # noqa: PLW0603
    get_settings.cache_clear()
    _memory_store_instance = None
