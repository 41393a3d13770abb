"""Tolerant data contracts for the raw graph payload."""
from __future__ import annotations

import math
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class _RawRecord(BaseModel):
    """Base model for payload records; unknown keys are ignored."""

    model_config = ConfigDict(frozen=True, extra="ignore")


def _as_text(value: Any) -> str:
    """Coerce scalar payload values into text, ``""`` for missing ones."""

    if value is None or isinstance(value, (dict, list)):
        return ""
    if isinstance(value, bool):
        return str(value).lower()
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def _as_number(value: Any) -> float:
    """Parse a numeric payload value leniently, returning ``0.0`` when unusable."""

    if isinstance(value, bool) or value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    if math.isnan(number) or math.isinf(number):
        return 0.0
    return number


class RawNodeRecord(_RawRecord):
    """Node entry as found in the ``nodes`` array of the dataset."""

    id: str = Field(..., min_length=1)
    term_so: str = ""
    term_en: str = ""
    tags: str = ""
    degree: float = 0.0

    @field_validator("id", "term_so", "term_en", "tags", mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return _as_text(value)

    @field_validator("degree", mode="before")
    @classmethod
    def _coerce_degree(cls, value: Any) -> float:
        return _as_number(value)


class RawLinkRecord(_RawRecord):
    """Relation entry as found in the ``links`` array of the dataset.

    ``term_so``/``term_en`` label the source node and ``target_en`` the target
    node; they only feed label backfill and are not kept on the edge.
    """

    source_id: str = ""
    target_id: str = ""
    weight: float = 1.0
    term_so: str = ""
    term_en: str = ""
    target_en: str = ""
    def_so: str = ""
    def_en: str = ""

    @field_validator(
        "source_id",
        "target_id",
        "term_so",
        "term_en",
        "target_en",
        "def_so",
        "def_en",
        mode="before",
    )
    @classmethod
    def _coerce_text(cls, value: Any) -> str:
        return _as_text(value)

    @field_validator("weight", mode="before")
    @classmethod
    def _coerce_weight(cls, value: Any) -> float:
        number = _as_number(value)
        return number if number > 0 else 1.0


class RawGraphPayload(_RawRecord):
    """Top-level dataset object holding ``nodes`` and ``links`` arrays."""

    nodes: List[Any] = Field(default_factory=list)
    links: List[Any] = Field(default_factory=list)

    @field_validator("nodes", "links", mode="before")
    @classmethod
    def _ensure_list(cls, value: Any) -> List[Any]:
        if isinstance(value, list):
            return value
        return []


def parse_node_record(value: Any) -> Optional[RawNodeRecord]:
    """Validate one node entry, returning ``None`` when it has no usable id."""

    if not isinstance(value, dict):
        return None
    try:
        return RawNodeRecord.model_validate(value)
    except ValueError:
        return None


def parse_link_record(value: Any) -> Optional[RawLinkRecord]:
    """Validate one link entry, returning ``None`` for non-mapping entries."""

    if not isinstance(value, dict):
        return None
    return RawLinkRecord.model_validate(value)


__all__ = [
    "RawGraphPayload",
    "RawLinkRecord",
    "RawNodeRecord",
    "parse_link_record",
    "parse_node_record",
]
