# careerforge/utils.py
# Text normalization helpers.

import re
from typing import List, Optional


_TAG_RE = re.compile(r"<[^>]*>")
_WS_RE = re.compile(r"\s+")


def collapse_whitespace(s: Optional[str]) -> str:
    if not s:
        return ""
    return _WS_RE.sub(" ", s).strip()


def strip_tags(s: Optional[str]) -> str:
    """Replace HTML-like tags with a space so adjacent words stay separated."""
    if not s:
        return ""
    return _TAG_RE.sub(" ", s)


def normalize_message(s: Optional[str]) -> str:
    """Strip tags, collapse whitespace, and trim a free-text chat message."""
    return collapse_whitespace(strip_tags(s))


def truncate(s: str, limit: int) -> str:
    return s if len(s) <= limit else s[:limit]


def split_description(description: Optional[str], max_items: int = 8, min_length: int = 10) -> List[str]:
    """
    Turn a free-form job description into requirement lines.
    Tags are removed, text is split on newlines and bullet characters,
    and short fragments (<= min_length chars) are dropped.
    """
    if not description:
        return []
    text = strip_tags(description)
    parts = [p.strip() for p in re.split(r"[\n•·]", text)]
    return [p for p in parts if len(p) > min_length][:max_items]
