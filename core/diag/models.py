"""Data models for diff chunks, mismatch records, and reports."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

ChunkKind = Literal["unchanged", "removed", "added"]

ELLIPSIS = "…"

DEFAULT_ROOT_MARKERS: tuple[str, ...] = ('<div id="root"', "<h1")


class DiagPolicy(BaseModel):
    """Detection policy loaded from YAML."""

    model_config = ConfigDict(extra="forbid")

    root_markers: list[str] = Field(default_factory=lambda: list(DEFAULT_ROOT_MARKERS))
    canonicalize_meta: bool = True
    context_lines: int = Field(default=2, ge=0)
    max_snippet_width: int = Field(default=120, ge=1)
    settle_ms: int = Field(default=500, ge=0)


class DiffChunk(BaseModel):
    """One unit of a line-level edit script."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    kind: ChunkKind
    text: str

    @property
    def changed(self) -> bool:
        return self.kind != "unchanged"


class LineInfo(BaseModel):
    """One reported line.

    Rules:
    - line is 1-based in normalized server numbering
    - snippet is the line, cut to the display width with ELLIPSIS appended when cut
    - length is always the untruncated line length
    - text carries the full line only in verbose JSON runs
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    line: int
    snippet: str
    length: int
    text: str | None = None


class MismatchRecord(BaseModel):
    """One hydration discrepancy with surrounding server context."""

    model_config = ConfigDict(
        extra="forbid",
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
    )

    context_before: tuple[LineInfo, ...] = ()
    server_lines: tuple[LineInfo, ...] = ()
    client_lines: tuple[LineInfo, ...] = ()
    context_after: tuple[LineInfo, ...] = ()

    def changed_lines(self) -> tuple[LineInfo, ...]:
        return self.server_lines + self.client_lines


class MismatchReport(BaseModel):
    """Filtered mismatches of one run, in document order."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    mismatches: tuple[MismatchRecord, ...] = ()

    @property
    def exit_code(self) -> int:
        return 1 if self.mismatches else 0

    def to_payload(self) -> dict[str, object]:
        """Return the JSON document shape with camelCase keys."""

        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
