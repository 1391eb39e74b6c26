"""Label text -> canonical field key for the trademark detail view."""

from __future__ import annotations

from types import MappingProxyType
from typing import Mapping, Optional

from .utils import collapse_whitespace

# Order matters: the first key contained in a label wins.
FIELD_MAPPINGS: Mapping[str, str] = MappingProxyType(
    {
        "Name/Title": "nameTitle",
        "Status": "status",
        "Application date": "applicationDate",
        "Revelation date": "revelationDate",
        "Application number": "applicationNumber",
        "Category of rights": "categoryOfRights",
        "Registration number": "registrationNumber",
        "Trademark type": "trademarkType",
    }
)

CANONICAL_KEYS: tuple[str, ...] = tuple(FIELD_MAPPINGS.values())


def match_label(label_text: str | None, mappings: Mapping[str, str] = FIELD_MAPPINGS) -> Optional[str]:
    """Return the canonical key for ``label_text`` using substring containment."""

    label = collapse_whitespace(label_text)
    if not label:
        return None
    for needle, key in mappings.items():
        if needle in label:
            return key
    return None


__all__ = ["FIELD_MAPPINGS", "CANONICAL_KEYS", "match_label"]
