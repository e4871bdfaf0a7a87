"""Group a line edit script into mismatch records with server-side context."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field

from core.diag.models import ELLIPSIS, DiffChunk, LineInfo, MismatchRecord

DEFAULT_CONTEXT_LINES = 2
DEFAULT_MAX_WIDTH = 120

# Characters str.splitlines() breaks on.
_LINE_BREAKS = frozenset("\n\r\v\f\x1c\x1d\x1e\x85\u2028\u2029")


@dataclass
class _OpenRecord:
    anchor: int
    context_before: list[LineInfo]
    server_lines: list[LineInfo] = field(default_factory=list)
    client_lines: list[LineInfo] = field(default_factory=list)

    def close(self, context_after: list[LineInfo]) -> MismatchRecord:
        return MismatchRecord(
            context_before=tuple(self.context_before),
            server_lines=tuple(self.server_lines),
            client_lines=tuple(self.client_lines),
            context_after=tuple(context_after),
        )


def group(
    chunks: Sequence[DiffChunk],
    server_lines: Sequence[str],
    *,
    context_lines: int = DEFAULT_CONTEXT_LINES,
    max_width: int = DEFAULT_MAX_WIDTH,
    keep_full_text: bool = False,
) -> list[MismatchRecord]:
    """Fold the edit script into records in document order.

    Rules:
    - cursor is a 0-based offset into server_lines; removed and unchanged chunks advance it
    - removed and added lines of one record are both numbered from the record anchor
    - context_before ends right before the anchor, context_after starts at the cursor
      reached when the record closes
    - a record closes at the next unchanged chunk or at the end of the script
    """

    def line_info(number: int, full: str) -> LineInfo:
        return _line_info(number, full, max_width=max_width, keep_full_text=keep_full_text)

    def context(start: int, stop: int) -> list[LineInfo]:
        start = max(0, start)
        stop = min(len(server_lines), stop)
        return [line_info(index + 1, server_lines[index]) for index in range(start, stop)]

    records: list[MismatchRecord] = []
    cursor = 0
    current: _OpenRecord | None = None

    # True while that side's last chunk ended mid-line.
    server_open = client_open = False

    for chunk in chunks:
        ends_open = chunk.text[-1:] not in _LINE_BREAKS
        if chunk.kind == "added":
            lines = _reported_lines(chunk.text, continues_line=client_open)
            client_open = ends_open
        else:
            lines = _reported_lines(chunk.text, continues_line=server_open)
            server_open = ends_open
            if not chunk.changed:
                client_open = ends_open

        if not chunk.changed:
            if current is not None:
                records.append(current.close(context(cursor, cursor + context_lines)))
                current = None
            cursor += len(lines)
            continue

        if not lines:
            continue

        if current is None:
            current = _OpenRecord(
                anchor=cursor,
                context_before=context(cursor - context_lines, cursor),
            )

        if chunk.kind == "removed":
            base = current.anchor + len(current.server_lines)
            current.server_lines.extend(
                line_info(base + offset + 1, full) for offset, full in enumerate(lines)
            )
            cursor += len(lines)
        else:
            base = current.anchor + len(current.client_lines)
            current.client_lines.extend(
                line_info(base + offset + 1, full) for offset, full in enumerate(lines)
            )

    if current is not None:
        records.append(current.close(context(cursor, cursor + context_lines)))

    return records


def _reported_lines(text: str, *, continues_line: bool) -> list[str]:
    """Split chunk text into lines.

    A leading break that finishes the previous chunk's last line is not a
    line of its own.
    """

    if continues_line:
        if text.startswith("\r\n"):
            text = text[2:]
        elif text[:1] in _LINE_BREAKS:
            text = text[1:]
    return text.splitlines()


def truncate_snippet(full: str, max_width: int = DEFAULT_MAX_WIDTH) -> str:
    """Cut a line to max_width characters, marking cut lines with an ellipsis."""

    if len(full) <= max_width:
        return full
    return full[:max_width] + ELLIPSIS


def _line_info(number: int, full: str, *, max_width: int, keep_full_text: bool) -> LineInfo:
    return LineInfo(
        line=number,
        snippet=truncate_snippet(full, max_width),
        length=len(full),
        text=full if keep_full_text else None,
    )
