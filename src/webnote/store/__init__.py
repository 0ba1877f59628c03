"""Annotation persistence: store protocol, implementations and key helper."""

from webnote.store.factory import clear_store_cache, get_store
from webnote.store.json_file import JsonFileStore
from webnote.store.keys import KEY_PREFIX, document_key
from webnote.store.memory import MemoryStore
from webnote.store.models import STORE_OK, StoreError, StoreResult
from webnote.store.protocol import AnnotationStoreProtocol

__all__ = [
    "KEY_PREFIX",
    "STORE_OK",
    "AnnotationStoreProtocol",
    "JsonFileStore",
    "MemoryStore",
    "StoreError",
    "StoreResult",
    "clear_store_cache",
    "document_key",
    "get_store",
]
