"""Snapshot acquisition models and source interface."""

from __future__ import annotations

from typing import Protocol

from pydantic import BaseModel, ConfigDict, Field


class Snapshot(BaseModel):
    """Server response body and hydrated DOM for one page load."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    url: str
    status: int
    server_html: str
    client_html: str
    console_messages: list[str] = Field(default_factory=list)
    page_errors: list[str] = Field(default_factory=list)


class SnapshotSource(Protocol):
    """Protocol for collaborators that load and hydrate one page."""

    def capture(self, url: str) -> Snapshot:
        """Return the pre-hydration and post-hydration markup of url."""
