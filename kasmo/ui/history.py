"""Address-bar fragment serialisation of the current selection."""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import List, Optional, Protocol, runtime_checkable
from urllib.parse import quote, unquote

_FRAGMENT_ID = re.compile(r"id=([^&]+)")

# Characters encodeURIComponent leaves untouched besides alphanumerics and "-_.~"
_SAFE = "!*'()"


def encode_fragment(node_id: str) -> str:
    return f"#id={quote(node_id, safe=_SAFE)}"


def parse_fragment(fragment: str) -> Optional[str]:
    """Return the decoded node id carried by ``#id=...``, if any."""

    match = _FRAGMENT_ID.search(fragment or "")
    if match is None:
        return None
    return unquote(match.group(1))


@runtime_checkable
class AddressBar(Protocol):
    """Browser-location collaborator; only ever replaced, never pushed."""

    @property
    def hash(self) -> str: ...

    def replace_state(self, fragment: str) -> None: ...


@dataclass
class MemoryAddressBar:
    """Address bar stand-in that keeps a history entry count."""

    hash: str = ""
    entries: int = 1
    replacements: List[str] = field(default_factory=list)

    def replace_state(self, fragment: str) -> None:
        self.hash = "" if fragment == "#" else fragment
        self.replacements.append(fragment)


__all__ = ["AddressBar", "MemoryAddressBar", "encode_fragment", "parse_fragment"]
