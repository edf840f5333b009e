"""Tests covering region layout and caption font fitting."""

from __future__ import annotations

import pytest

from code_thumbnailer.config import ThumbnailConfig
from code_thumbnailer.layout import (
    ASPECT_RATIO,
    BASE_HEIGHT,
    BASE_WIDTH,
    TAG_FIT_MARGIN,
    TAG_HEIGHT,
    LayoutEngine,
    Rect,
    canvas_size,
    fit_tag_font_size,
)


@pytest.fixture()
def config() -> ThumbnailConfig:
    return ThumbnailConfig(tag_font_size=110.0, tag_min_font_size=72.0)


@pytest.mark.parametrize("height", [1.0, 37.5, 40.0, 100.0, 200.0, 333.3])
def test_canvas_width_follows_aspect_ratio(height: float) -> None:
    width, result_height = canvas_size(height)

    assert result_height == height
    assert width == pytest.approx(ASPECT_RATIO * height)


def test_regions(config: ThumbnailConfig, fake_measure) -> None:
    layout = LayoutEngine(fake_measure).compute(canvas_size(200), config, "Python")
    base = Rect(0.0, 0.0, BASE_WIDTH, BASE_HEIGHT)

    assert layout.code_region == base
    assert layout.tag_region.y >= base.y
    assert layout.tag_region.x + layout.tag_region.width <= base.width
    assert layout.tag_region.height == TAG_HEIGHT
    assert layout.tag_region.bottom == layout.code_region.bottom
    assert layout.tag_region.x == layout.code_region.x
    assert layout.output_size == (280, 200)


def test_layout_is_idempotent(config: ThumbnailConfig, fake_measure) -> None:
    engine = LayoutEngine(fake_measure)
    results = [engine.compute(canvas_size(123.0), config, "JavaScript+Genshi Text") for _ in range(3)]

    assert results[0] == results[1] == results[2]


def test_caption_that_fits_keeps_nominal_size(config: ThumbnailConfig, fake_measure) -> None:
    layout = LayoutEngine(fake_measure).compute(canvas_size(100), config, "Python")

    assert layout.resolved_tag_font_size == config.tag_font_size
    assert layout.degraded is False


def test_wide_caption_scales_down_by_ratio(config: ThumbnailConfig, fake_measure) -> None:
    label = "A" * 20
    layout = LayoutEngine(fake_measure).compute(canvas_size(100), config, label)

    available = BASE_WIDTH - TAG_FIT_MARGIN
    measured = fake_measure(label, config.tag_font_name, config.tag_font_size)
    expected = config.tag_font_size * available / measured

    assert layout.resolved_tag_font_size == pytest.approx(expected)
    assert config.tag_min_font_size <= layout.resolved_tag_font_size < config.tag_font_size
    assert layout.degraded is False


def test_very_wide_caption_clamps_to_minimum(config: ThumbnailConfig, fake_measure) -> None:
    layout = LayoutEngine(fake_measure).compute(canvas_size(40), config, "x" * 40)

    assert layout.resolved_tag_font_size == config.tag_min_font_size
    assert layout.degraded is True


def test_caption_measured_uppercased_with_tag_font(config: ThumbnailConfig) -> None:
    calls: list[tuple[str, str, float]] = []

    def measure(text: str, family: str, size: float) -> float:
        calls.append((text, family, size))
        return 10.0

    LayoutEngine(measure).compute(canvas_size(100), config, "Python")

    assert calls == [("PYTHON", config.tag_font_name, config.tag_font_size)]


@pytest.mark.parametrize("length", [1, 5, 17, 18, 30, 60, 200])
def test_fit_is_monotonic(length: int) -> None:
    def measure(text: str, size: float) -> float:
        return len(text) * size * 0.5

    text = "W" * length
    nominal, minimum, available = 100.0, 40.0, 876.0
    size, degraded = fit_tag_font_size(
        text,
        nominal=nominal,
        minimum=minimum,
        available_width=available,
        measure=measure,
    )

    if measure(text, nominal) > available:
        assert minimum <= size < nominal
    else:
        assert size == nominal
        assert not degraded
    assert degraded == (size == minimum and measure(text, nominal) > available)


def test_fit_uses_a_single_measurement() -> None:
    calls: list[float] = []

    def measure(text: str, size: float) -> float:
        calls.append(size)
        return 5000.0

    size, degraded = fit_tag_font_size(
        "LONG",
        nominal=110.0,
        minimum=72.0,
        available_width=876.0,
        measure=measure,
    )

    assert calls == [110.0]
    assert size == 72.0
    assert degraded is True
