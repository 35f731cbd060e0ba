"""
Canonical form of joke text used for duplicate comparison.
"""

import re
from typing import Optional

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_content(text: Optional[str]) -> str:
    """
    Trim, lowercase and collapse whitespace runs to a single space.

    The result is only used for comparison and is never persisted.
    """
    if not text:
        return ""
    return _WHITESPACE_RE.sub(" ", text.strip().lower())
