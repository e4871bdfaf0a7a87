"""HTML normalization applied to both snapshots before diffing."""

from __future__ import annotations

import re

# Doctype plus anything (comments, whitespace) up to the root element.
_PREAMBLE_RE = re.compile(r"^\s*<!doctype\s+html\b[^>]*>.*?<html\b", re.IGNORECASE | re.DOTALL)
_META_RE = re.compile(r"<meta\b([^>]*?)\s*/?>", re.IGNORECASE)


def normalize(html: str, *, canonicalize_meta: bool = True) -> str:
    """Canonicalize server/client markup for line diffing.

    Rules:
    - leading doctype and any preamble before <html collapse to the bare start tag
    - <meta .../> and <meta ...> are written as <meta ...> when canonicalize_meta is set
    - surrounding whitespace is trimmed

    Never raises; markup without a doctype passes through unchanged apart from trimming.
    """

    result = _PREAMBLE_RE.sub("<html", html, count=1)
    if canonicalize_meta:
        result = _META_RE.sub(_meta_replacement, result)
    return result.strip()


def _meta_replacement(match: re.Match[str]) -> str:
    attributes = match.group(1).rstrip(" \t\r\n/")
    return f"<meta{attributes}>"
