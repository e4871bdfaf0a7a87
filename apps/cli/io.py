"""CLI I/O helpers for atomic report writing."""

from __future__ import annotations

import json
import tempfile
from pathlib import Path
from typing import Any


def write_report_json_atomic(path: Path, payload: dict[str, Any]) -> None:
    """Write the JSON report using a temporary file + replace."""

    path.parent.mkdir(parents=True, exist_ok=True)
    _atomic_write_json(path, payload)


def _atomic_write_json(path: Path, payload: dict[str, Any]) -> None:
    with tempfile.NamedTemporaryFile(
        mode="w",
        encoding="utf-8",
        dir=path.parent,
        delete=False,
        prefix=f"{path.name}.",
        suffix=".tmp",
    ) as tmp:
        tmp_path = Path(tmp.name)
        try:
            json.dump(payload, tmp, ensure_ascii=False, indent=2)
        except Exception:
            tmp.close()
            tmp_path.unlink(missing_ok=True)
            raise

    tmp_path.replace(path)
