"""Text cleanup before analytics storage."""

import re
from typing import Optional

_CONTROL_RE = re.compile(r"[\x00-\x08\x0b\x0c\x0e-\x1f\x7f]")
_WHITESPACE_RE = re.compile(r"\s+")

MAX_SANITIZED_LENGTH = 1000


def sanitize_text(text: Optional[str], max_length: int = MAX_SANITIZED_LENGTH) -> str:
    """
    Normalize free text for storage.

    Removes control characters, collapses whitespace and truncates to
    ``max_length`` characters (with a trailing ellipsis when cut).
    """
    if not text:
        return ""
    cleaned = _CONTROL_RE.sub("", str(text))
    cleaned = _WHITESPACE_RE.sub(" ", cleaned).strip()
    if len(cleaned) > max_length:
        cleaned = cleaned[: max_length - 3].rstrip() + "..."
    return cleaned
