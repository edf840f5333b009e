"""Tests for source and output path handling."""

from __future__ import annotations

from pathlib import Path

import pytest

from code_thumbnailer.utils.paths import expand_path, optional_path, source_file, thumbnail_target


def test_expand_path_resolves_home(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("HOME", str(tmp_path))

    assert expand_path("~/thumbs") == (tmp_path / "thumbs").resolve()


def test_expand_path_rejects_blank_values() -> None:
    with pytest.raises(ValueError, match="empty"):
        expand_path("   ")


@pytest.mark.parametrize("value", [None, "", "  "])
def test_optional_path_unset(value: str | None) -> None:
    assert optional_path(value) is None


def test_optional_path_is_absolute(tmp_path: Path) -> None:
    assert optional_path(f"  {tmp_path / 'settings.ini'} ") == tmp_path.resolve() / "settings.ini"


def test_source_file_accepts_existing_file(tmp_path: Path) -> None:
    source = tmp_path / "main.py"
    source.write_text("pass\n", encoding="utf-8")

    assert source_file(source) == source.resolve()


def test_source_file_missing(tmp_path: Path) -> None:
    with pytest.raises(FileNotFoundError, match="No such file"):
        source_file(tmp_path / "missing.py")


def test_source_file_directory(tmp_path: Path) -> None:
    with pytest.raises(IsADirectoryError):
        source_file(tmp_path)


def test_thumbnail_target_uses_file_name(tmp_path: Path) -> None:
    target = thumbnail_target(Path("/src/pkg/util.py"), tmp_path, set())

    assert target == tmp_path / "util.py.png"


def test_thumbnail_target_prefixes_parent_directories(tmp_path: Path) -> None:
    taken: set[Path] = set()
    names = []
    for source in (Path("/src/a/util.py"), Path("/src/b/util.py"), Path("/lib/b/util.py")):
        target = thumbnail_target(source, tmp_path, taken)
        taken.add(target)
        names.append(target.name)

    assert names == ["util.py.png", "b_util.py.png", "lib_b_util.py.png"]


def test_thumbnail_target_falls_back_to_counter(tmp_path: Path) -> None:
    taken = {tmp_path / "util.py.png", tmp_path / "a_util.py.png"}

    target = thumbnail_target(Path("/a/util.py"), tmp_path, taken)

    assert target == tmp_path / "a_util.py-2.png"
