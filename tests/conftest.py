"""Pytest configuration helpers for code_thumbnailer tests."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

# Ensure the source directory is importable without requiring an editable install.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point the preference store at a throwaway INI file for every test."""

    from code_thumbnailer.config import THEME_ENV_VAR, configure
    from code_thumbnailer.settings import SETTINGS_FILE_ENV_VAR

    settings_file = tmp_path / "settings.ini"
    monkeypatch.setenv(SETTINGS_FILE_ENV_VAR, str(settings_file))
    monkeypatch.delenv(THEME_ENV_VAR, raising=False)
    configure()
    yield settings_file
    configure()


@pytest.fixture()
def fake_measure():
    """Deterministic text measurer: every character is half the font size wide."""

    def measure(text: str, family: str, size: float) -> float:
        return len(text) * size * 0.5

    return measure


@pytest.fixture()
def python_source() -> bytes:
    return (
        b"import os\n"
        b"\n"
        b"\n"
        b"def greet(name: str) -> str:\n"
        b"    \"\"\"Return a greeting.\"\"\"\n"
        b"\treturn f\"Hello, {name}!\"  # tabbed\n"
        b"\n"
        b"\n"
        b"class Greeter:\n"
        b"    pass\n"
    )
