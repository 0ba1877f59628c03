"""Persisted highlight records.

``HighlightRecord`` is the only structured object that crosses the boundary
between the anchoring core and a store.  Field names serialise in camelCase,
which is the persisted schema; Python code uses snake_case attributes.
Addresses are stored in their string form.
"""

from __future__ import annotations

import random
import string
import time
from typing import Annotated, Any

from pydantic import (
    AliasChoices,
    BaseModel,
    ConfigDict,
    Field,
    NonNegativeInt,
    PlainSerializer,
    PlainValidator,
)
from pydantic.alias_generators import to_camel

from webnote.anchoring.path import PathAddress

_ID_ALPHABET = string.digits + string.ascii_lowercase


def _coerce_address(value: Any) -> PathAddress:
    if isinstance(value, PathAddress):
        return value
    if isinstance(value, str):
        return PathAddress.parse(value)
    msg = f"Expected an address string, got {type(value).__name__}"
    raise ValueError(msg)


Address = Annotated[
    PathAddress,
    PlainValidator(_coerce_address),
    PlainSerializer(str, return_type=str),
]


def now_ms() -> int:
    """Current time in epoch milliseconds."""
    return int(time.time() * 1000)


def generate_highlight_id() -> str:
    """Unique id: epoch-ms time component plus a random base-36 suffix."""
    suffix = "".join(random.choices(_ID_ALPHABET, k=9))  # nosec B311
    return f"hl_{now_ms()}_{suffix}"


class SpanDescriptor(BaseModel):
    """Where a highlight lives: an address pair, offsets and literal context."""

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True
    )

    start_address: Address = Field(
        validation_alias=AliasChoices("startAddress", "startXPath", "start_address")
    )
    start_offset: NonNegativeInt
    end_address: Address = Field(
        validation_alias=AliasChoices("endAddress", "endXPath", "end_address")
    )
    end_offset: NonNegativeInt
    context_before: str = ""
    context_after: str = ""


class HighlightRecord(BaseModel):
    """A stored highlight."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    text: str
    color: str
    note: str = ""
    created_at: int = Field(default_factory=now_ms)
    updated_at: int = Field(default_factory=now_ms)
    position: SpanDescriptor

    def to_json_dict(self) -> dict[str, Any]:
        """camelCase dict, as persisted."""
        return self.model_dump(by_alias=True, mode="json")


class PageAnnotations(BaseModel):
    """Everything stored for one document identity."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    url: str = ""
    title: str = ""
    highlights: list[HighlightRecord] = Field(default_factory=list)
    last_modified: int = Field(default_factory=now_ms)
