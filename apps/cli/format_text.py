"""Terminal colors for the text mismatch report."""

from __future__ import annotations

from typing import Any

import typer

from core.diag.reporter import StyleRole

_ROLE_STYLES: dict[str, dict[str, Any]] = {
    "header": {"fg": typer.colors.YELLOW},
    "context": {"dim": True},
    "removed": {"fg": typer.colors.RED},
    "added": {"fg": typer.colors.GREEN},
    "success": {"fg": typer.colors.GREEN},
}


def terminal_style(role: StyleRole, text: str) -> str:
    """Wrap text in ANSI styles for role; typer.echo strips them off-TTY."""

    return typer.style(text, **_ROLE_STYLES[role])
