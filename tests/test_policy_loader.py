from __future__ import annotations

from pathlib import Path

import pytest

from core.diag.policy_loader import load_policy


def test_load_default_policy() -> None:
    policy = load_policy()

    assert policy.root_markers == ['<div id="root"', "<h1"]
    assert policy.canonicalize_meta is True
    assert policy.context_lines == 2
    assert policy.max_snippet_width == 120
    assert policy.settle_ms == 500


def test_load_policy_fills_defaults_for_partial_file(tmp_path: Path) -> None:
    path = tmp_path / "policy.yaml"
    path.write_text(
        """
root_markers:
  - '<main id="app"'
settle_ms: 0
""",
        encoding="utf-8",
    )

    policy = load_policy(path)

    assert policy.root_markers == ['<main id="app"']
    assert policy.settle_ms == 0
    assert policy.context_lines == 2


def test_load_policy_accepts_empty_file(tmp_path: Path) -> None:
    path = tmp_path / "policy.yaml"
    path.write_text("", encoding="utf-8")

    assert load_policy(path).max_snippet_width == 120


def test_load_policy_raises_for_invalid_type(tmp_path: Path) -> None:
    path = tmp_path / "policy.yaml"
    path.write_text("context_lines: many\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid policy schema"):
        load_policy(path)


def test_load_policy_raises_for_unknown_key(tmp_path: Path) -> None:
    path = tmp_path / "policy.yaml"
    path.write_text("root_marker: '<div'\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid policy schema"):
        load_policy(path)


def test_load_policy_raises_for_negative_width(tmp_path: Path) -> None:
    path = tmp_path / "policy.yaml"
    path.write_text("max_snippet_width: 0\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid policy schema"):
        load_policy(path)


def test_load_policy_raises_for_empty_markers(tmp_path: Path) -> None:
    path = tmp_path / "policy.yaml"
    path.write_text("root_markers: []\n", encoding="utf-8")

    with pytest.raises(ValueError, match="at least one root marker"):
        load_policy(path)


def test_load_policy_raises_for_non_mapping(tmp_path: Path) -> None:
    path = tmp_path / "policy.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")

    with pytest.raises(ValueError, match="must contain a mapping"):
        load_policy(path)


def test_load_policy_raises_for_invalid_yaml(tmp_path: Path) -> None:
    path = tmp_path / "policy.yaml"
    path.write_text("root_markers: [unclosed\n", encoding="utf-8")

    with pytest.raises(ValueError, match="Invalid YAML"):
        load_policy(path)


def test_load_policy_raises_for_missing_file(tmp_path: Path) -> None:
    with pytest.raises(ValueError, match="Policy file not found"):
        load_policy(tmp_path / "missing.yaml")
