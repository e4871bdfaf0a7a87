"""Relevance filtering of mismatch records against the hydration root."""

from __future__ import annotations

import re
from collections.abc import Callable, Iterable, Sequence

from core.diag.models import DEFAULT_ROOT_MARKERS, MismatchRecord

RelevancePredicate = Callable[[str], bool]


def marker_predicate(patterns: Sequence[str] = DEFAULT_ROOT_MARKERS) -> RelevancePredicate:
    """Build a predicate matching snippets that contain any root marker regex."""

    if not patterns:
        raise ValueError("At least one root marker pattern is required")
    try:
        compiled = re.compile("|".join(f"(?:{pattern})" for pattern in patterns))
    except re.error as exc:
        raise ValueError(f"Invalid root marker pattern: {exc}") from exc

    def _matches(snippet: str) -> bool:
        return compiled.search(snippet) is not None

    return _matches


def match_all(snippet: str) -> bool:
    """Predicate that keeps every record."""

    return True


def filter_records(
    records: Iterable[MismatchRecord],
    predicate: RelevancePredicate,
) -> list[MismatchRecord]:
    """Keep records with at least one server/client line matching predicate.

    The predicate sees the display snippet, not the full line, so a marker
    past max_snippet_width is not matched.
    """

    return [
        record
        for record in records
        if any(predicate(info.snippet) for info in record.changed_lines())
    ]
