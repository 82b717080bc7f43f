"""Shared fixtures for writing configs and template trees to disk."""

from __future__ import annotations

import typing as typ
from textwrap import dedent

import pytest

if typ.TYPE_CHECKING:
    from pathlib import Path


@pytest.fixture
def base_layout() -> str:
    """Return a base layout that includes the target template in <main>."""
    return (
        "<html><head><title>{{ base.site }} | {{ title }}</title></head>"
        "<body><main>{% include page_template %}</main></body></html>\n"
    )


@pytest.fixture
def write_config(tmp_path: Path) -> typ.Callable[[str], Path]:
    """Return a helper that writes dedented YAML to ``config.yml``."""

    def _write(text: str) -> Path:
        path = tmp_path / "config.yml"
        path.write_text(dedent(text).strip() + "\n", encoding="utf-8")
        return path

    return _write


@pytest.fixture
def templates_dir(tmp_path: Path) -> Path:
    """Return an empty template ``pages`` directory."""
    path = tmp_path / "template" / "pages"
    path.mkdir(parents=True)
    return path


@pytest.fixture
def write_templates(templates_dir: Path) -> typ.Callable[..., Path]:
    """Return a helper that writes ``name=source`` pairs as ``<name>.html``."""

    def _write(**templates: str) -> Path:
        for name, source in templates.items():
            (templates_dir / f"{name}.html").write_text(source, encoding="utf-8")
        return templates_dir

    return _write


@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Return a not-yet-created output directory."""
    return tmp_path / "site"
