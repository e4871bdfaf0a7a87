"""Text and JSON rendering for mismatch reports."""

from __future__ import annotations

import json
from collections.abc import Callable, Iterable
from typing import Literal

from core.diag.models import LineInfo, MismatchReport

ReportFormat = Literal["text", "json"]
StyleRole = Literal["header", "context", "removed", "added", "success"]
Styler = Callable[[StyleRole, str], str]

SUCCESS_MESSAGE = "✅ No hydration mismatches detected."


def render(
    report: MismatchReport,
    fmt: ReportFormat,
    *,
    style: Styler | None = None,
) -> tuple[str, int]:
    """Render report as text or JSON and return (output, exit_code)."""

    if fmt == "json":
        return render_json(report), report.exit_code
    if fmt == "text":
        return render_text(report, style=style), report.exit_code
    raise ValueError(f"Unsupported report format: {fmt}")


def render_json(report: MismatchReport) -> str:
    return json.dumps(report.to_payload(), ensure_ascii=False, indent=2)


def render_text(report: MismatchReport, *, style: Styler | None = None) -> str:
    """Render one block per mismatch, numbered from 1."""

    paint = style or _plain
    if not report.mismatches:
        return paint("success", SUCCESS_MESSAGE)

    lines: list[str] = []
    for index, record in enumerate(report.mismatches, start=1):
        if index > 1:
            lines.append("")
        lines.append(paint("header", f"Mismatch #{index}"))
        lines.extend(_prefixed(record.context_before, " ", "context", paint))
        lines.extend(_prefixed(record.server_lines, "-", "removed", paint))
        lines.extend(_prefixed(record.client_lines, "+", "added", paint))
        lines.extend(_prefixed(record.context_after, " ", "context", paint))
    return "\n".join(lines)


def _prefixed(
    infos: Iterable[LineInfo],
    marker: str,
    role: StyleRole,
    paint: Styler,
) -> list[str]:
    return [paint(role, f"{marker} {info.line} | {info.snippet}") for info in infos]


def _plain(role: StyleRole, text: str) -> str:
    return text
