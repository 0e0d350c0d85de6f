"""Small text helpers shared by forms and repositories."""

import re
from typing import Optional

_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(value: str) -> str:
    """Lowercase, collapse non-alphanumeric runs to '-', strip edge dashes."""
    return _NON_ALNUM.sub("-", value.lower()).strip("-")


def blank_to_none(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    trimmed = value.strip()
    return trimmed or None


def normalize_club_name(name: str) -> str:
    return " ".join(name.lower().split())
