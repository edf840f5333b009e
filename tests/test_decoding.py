"""Tests for turning source bytes into renderable text."""

from __future__ import annotations

from pathlib import Path

import pytest

from code_thumbnailer.decoding import decode_source, excerpt, read_source
from code_thumbnailer.errors import INVALID_ENCODING, UNREADABLE, DecodeError


@pytest.mark.parametrize(
    "text",
    [
        "",
        "print('hello')\n",
        "naïve café — ünïcödé\r\n",
        "﻿starts with a BOM",
        "emoji 🐍 and CJK 漢字",
        "tabs\tand\x00nul",
    ],
)
def test_valid_utf8_round_trips(text: str) -> None:
    assert decode_source(text.encode("utf-8")) == text


def test_bytearray_and_memoryview_accepted() -> None:
    payload = "x = 1\n".encode("utf-8")
    assert decode_source(bytearray(payload)) == "x = 1\n"
    assert decode_source(memoryview(payload)) == "x = 1\n"


@pytest.mark.parametrize(
    ("payload", "offset"),
    [
        (bytes([0xFF, 0xFE, 0x00]), 0),
        (b"abc\xc3", 3),
        (b"ok\xed\xa0\x80", 2),
    ],
)
def test_invalid_utf8_raises_decode_error(payload: bytes, offset: int) -> None:
    with pytest.raises(DecodeError) as excinfo:
        decode_source(payload)

    assert excinfo.value.reason == INVALID_ENCODING
    assert excinfo.value.offset == offset


def test_read_source_returns_bytes(tmp_path: Path) -> None:
    path = tmp_path / "module.py"
    path.write_bytes(b"x = 1\n")
    assert read_source(path) == b"x = 1\n"


def test_read_source_missing_file(tmp_path: Path) -> None:
    with pytest.raises(DecodeError) as excinfo:
        read_source(tmp_path / "missing.py")
    assert excinfo.value.reason == UNREADABLE


def test_excerpt_limits_lines() -> None:
    text = "".join(f"line {index}\n" for index in range(500))
    head = excerpt(text, max_lines=10)
    assert head == "".join(f"line {index}\n" for index in range(10))


def test_excerpt_limits_characters() -> None:
    text = "x" * 100
    assert excerpt(text, max_chars=25) == "x" * 25


def test_excerpt_keeps_short_text_unchanged() -> None:
    text = "a\r\nb\n"
    assert excerpt(text) == text


def test_excerpt_rejects_non_positive_bounds() -> None:
    with pytest.raises(ValueError):
        excerpt("abc", max_lines=0)
