"""Language-dependent label and definition resolution."""
from __future__ import annotations

import re
import unicodedata
from enum import Enum
from typing import Iterable, List, Set

from kasmo.graph.model import Edge, Node

_WHITESPACE = re.compile(r"\s+")
_TAG_SEPARATORS = re.compile(r"[,\s;]+")


class DisplayLanguage(str, Enum):
    """Active rendering language for labels and definitions."""

    SOMALI = "so"
    ENGLISH = "en"

    @property
    def other(self) -> "DisplayLanguage":
        return DisplayLanguage.ENGLISH if self is DisplayLanguage.SOMALI else DisplayLanguage.SOMALI


def resolve_label(node: Node, language: DisplayLanguage) -> str:
    """Return the node's label in ``language``, falling back to the other language and then the id."""

    if language is DisplayLanguage.ENGLISH:
        return node.term_en or node.term_so or node.id
    return node.term_so or node.term_en or node.id


def definition_from_links(node_id: str, edges: Iterable[Edge], language: DisplayLanguage) -> str:
    """Pick the definition a node contributes as the source of its relations.

    Only edges whose source is ``node_id`` are considered. Whitespace is
    collapsed, empty fragments and exact repeats are dropped, and the longest
    remaining fragment wins; among equal lengths the first encountered is kept.

    Returns:
        str: The chosen definition, or ``""`` when none exists in ``language``.
    """

    snippets: List[str] = []
    seen: Set[str] = set()
    for edge in edges:
        if edge.source != node_id:
            continue
        text = edge.def_en if language is DisplayLanguage.ENGLISH else edge.def_so
        cleaned = _WHITESPACE.sub(" ", text or "").strip()
        if cleaned and cleaned not in seen:
            seen.add(cleaned)
            snippets.append(cleaned)
    if not snippets:
        return ""
    return max(snippets, key=len)


def tag_tokens(tags: str) -> Set[str]:
    """Split a free-text tag field into lowercase tokens."""

    return {token for token in _TAG_SEPARATORS.split((tags or "").lower()) if token}


def collation_key(text: str) -> str:
    """Case- and accent-insensitive sort key for displayed labels."""

    decomposed = unicodedata.normalize("NFKD", text)
    stripped = "".join(char for char in decomposed if not unicodedata.combining(char))
    return stripped.casefold()


__all__ = [
    "DisplayLanguage",
    "collation_key",
    "definition_from_links",
    "resolve_label",
    "tag_tokens",
]
