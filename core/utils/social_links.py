"""
Social link validation and cleanup for profile forms.
"""

import re
from typing import Dict, Tuple

from core.domain.constants import SOCIAL_PLATFORMS, MAX_SOCIAL_URL_LENGTH

_URL_RE = re.compile(r"^https?://", re.IGNORECASE)


def validate_social_url(url: str) -> bool:
    """Empty values are valid; otherwise http(s) URL up to the length limit."""
    if not url or not url.strip():
        return True
    trimmed = url.strip()
    return bool(_URL_RE.match(trimmed)) and len(trimmed) <= MAX_SOCIAL_URL_LENGTH


def validate_social_links(links: Dict[str, str]) -> Tuple[bool, str]:
    for key, value in links.items():
        if key not in SOCIAL_PLATFORMS:
            return False, f"Invalid social platform: {key}"
        if value and not validate_social_url(value):
            return False, f"Invalid URL for {key}. URLs must start with http:// or https://"
    return True, ""


def clean_social_links(links: Dict[str, str]) -> Dict[str, str]:
    """Drop blank values and trim the rest."""
    cleaned = {}
    for key, value in links.items():
        trimmed = (value or "").strip()
        if trimmed:
            cleaned[key] = trimmed
    return cleaned
