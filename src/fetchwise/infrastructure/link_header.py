"""HTTP Link header parser (RFC 8288)"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional

_URI_PATTERN = re.compile(r"\s*<([^>]*)>\s*")
_PARAM_PATTERN = re.compile(
    r"""\s*;\s*([!#$%&'*+.^_`|~0-9A-Za-z-]+\*?)\s*(?:=\s*(?:"((?:[^"\\]|\\.)*)"|([^\s;,"]+)))?\s*"""
)
_QUOTED_ESCAPE = re.compile(r"\\(.)")


class LinkHeaderError(ValueError):
    """Malformed Link header."""

    pass


@dataclass(frozen=True)
class LinkEntry:
    """Single link of a Link header"""

    uri: str
    params: Dict[str, str] = field(default_factory=dict)

    @property
    def rels(self) -> List[str]:
        """Relation types of the link, lowercased"""
        return self.params.get("rel", "").lower().split()


class LinkHeader:
    """Parsed Link header"""

    def __init__(self, entries: Optional[List[LinkEntry]] = None):
        self.entries: List[LinkEntry] = list(entries or [])

    def __bool__(self) -> bool:
        return bool(self.entries)

    def __len__(self) -> int:
        return len(self.entries)

    def __repr__(self) -> str:
        return f"LinkHeader({self.entries!r})"

    @classmethod
    def parse(cls, value: str) -> "LinkHeader":
        """Parse a Link header value

        Args:
            value: Raw header value, e.g. ``<https://x/?page=2>; rel="next"``

        Returns:
            Parsed LinkHeader (empty for a blank value)

        Raises:
            LinkHeaderError: If the value is not a valid Link header
        """
        entries: List[LinkEntry] = []
        pos = 0
        length = len(value)
        while pos < length:
            # Skip separators and blank list elements
            while pos < length and value[pos] in " \t,":
                pos += 1
            if pos >= length:
                break

            uri_match = _URI_PATTERN.match(value, pos)
            if uri_match is None:
                raise LinkHeaderError(
                    f"Expected '<uri>' at position {pos} of Link header: {value!r}"
                )
            uri = uri_match.group(1).strip()
            pos = uri_match.end()

            params: Dict[str, str] = {}
            while pos < length and value[pos] != ",":
                param_match = _PARAM_PATTERN.match(value, pos)
                if param_match is None:
                    raise LinkHeaderError(
                        f"Invalid link parameter at position {pos} of Link header: {value!r}"
                    )
                name = param_match.group(1).lower()
                if param_match.group(2) is not None:
                    param_value = _QUOTED_ESCAPE.sub(r"\1", param_match.group(2))
                else:
                    param_value = param_match.group(3) or ""
                # Only the first occurrence of a parameter counts
                params.setdefault(name, param_value)
                pos = param_match.end()

            entries.append(LinkEntry(uri=uri, params=params))
        return cls(entries)

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> "LinkHeader":
        """Parse the Link header of a response

        A missing header gives an empty LinkHeader.

        Raises:
            LinkHeaderError: If the header is present but malformed
        """
        value = headers.get("Link")
        if value is None:
            return cls()
        return cls.parse(value)

    def get_by_rel(self, rel: str) -> List[LinkEntry]:
        """Get links with the given relation type (case-insensitive)"""
        rel = rel.lower()
        return [entry for entry in self.entries if rel in entry.rels]
