"""Document identity for storage."""

from __future__ import annotations

from urllib.parse import urlsplit

KEY_PREFIX = "annotations_"


def document_key(url: str) -> str:
    """Storage key for the document at *url*: origin plus path.

    Query strings and fragments are ignored, so ``https://a.test/p?x=1#top``
    and ``https://a.test/p`` share their highlights.  ``file:`` URLs key on
    their path.

    Raises:
        ValueError: If *url* has no scheme or host.
    """
    parts = urlsplit(url)
    if parts.scheme == "file" and parts.path:
        return f"{KEY_PREFIX}file://{parts.path}"
    if not parts.scheme or not parts.hostname:
        msg = f"Cannot derive a document key from {url!r}"
        raise ValueError(msg)
    host = parts.hostname if parts.port is None else f"{parts.hostname}:{parts.port}"
    return f"{KEY_PREFIX}{parts.scheme.lower()}://{host}{parts.path or '/'}"
