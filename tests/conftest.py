"""Shared fixtures for image macro tests."""

from __future__ import annotations

from typing import Callable, Mapping

import pytest

from domain.image_macro import GlyphMetrics, GlyphRasterKey, RasterizedGlyph
from service.fonts import LineMetrics, MacroFont, load_builtin_font


class BoxFont(MacroFont):
    """Font whose glyphs are solid boxes filling the whole line band.

    At size s every glyph is s // 2 pixels wide, the ascent is 4s/5 and the
    descent the remainder, which keeps layout arithmetic exact in tests.
    """

    def __init__(self, coverage_by_character: Mapping[str, int] | None = None) -> None:
        super().__init__("box", self._missing_face)
        self.coverage_by_character = dict(coverage_by_character or {})
        self.rasterize_calls = 0

    @staticmethod
    def _missing_face(size: int):
        raise AssertionError("box font has no Pillow face")

    def line_metrics(self, size: int) -> LineMetrics:
        ascent = size * 4 // 5
        return LineMetrics(ascent=ascent, descent=size - ascent)

    def advance(self, character: str, size: int) -> float:
        return float(size // 2)

    def kerning(self, left_character: str, right_character: str, size: int) -> float:
        return 0.0

    def rasterize(self, key: GlyphRasterKey) -> RasterizedGlyph:
        self.rasterize_calls += 1
        line_metrics = self.line_metrics(key.size)
        glyph_width = key.size // 2
        if key.character.isspace():
            return RasterizedGlyph(
                metrics=GlyphMetrics(0, 0, 0, 0, float(glyph_width)), coverage=b""
            )
        coverage_value = self.coverage_by_character.get(key.character, 255)
        glyph_height = line_metrics.line_height
        return RasterizedGlyph(
            metrics=GlyphMetrics(
                width=glyph_width,
                height=glyph_height,
                bearing_x=0,
                bearing_y=-line_metrics.ascent,
                advance=float(glyph_width),
            ),
            coverage=bytes([coverage_value]) * (glyph_width * glyph_height),
        )


@pytest.fixture
def box_font() -> BoxFont:
    return BoxFont()


@pytest.fixture
def make_box_font() -> Callable[..., BoxFont]:
    return BoxFont


@pytest.fixture(scope="session")
def builtin_font() -> MacroFont:
    return load_builtin_font()
