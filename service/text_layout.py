"""Word-wrapped, aligned placement of caption glyphs."""

from __future__ import annotations

import logging
import math
import re
import unicodedata
from typing import Callable, Mapping, Sequence

from domain.image_macro import (
    INVALID_LAYOUT_CODE,
    GlyphPlacement,
    HorizontalAlign,
    LayoutLine,
    LayoutSettings,
    MacroValidationError,
    TextLayout,
    VerticalAlign,
    WrapStyle,
)
from service.fonts import MacroFont

TOKEN_PATTERN = re.compile(r"\s+|\S+")
LOGGER = logging.getLogger("render_image_macro.text_layout")

MeasureText = Callable[[str], float]
LineBreaker = Callable[[str, MeasureText, "float | None"], list[str]]


def is_control_character(character: str) -> bool:
    """Return True for characters that never produce ink or advance."""
    return unicodedata.category(character) == "Cc"


class TextMeasurer:
    """Measure strings at one font size, memoizing advances and kerning."""

    def __init__(self, font: MacroFont, font_size: int) -> None:
        self._font = font
        self._font_size = font_size
        self._advances: dict[str, float] = {}
        self._kerning: dict[tuple[str, str], float] = {}

    def advance(self, character: str) -> float:
        if is_control_character(character):
            return 0.0
        value = self._advances.get(character)
        if value is None:
            value = self._font.advance(character, self._font_size)
            self._advances[character] = value
        return value

    def kerning(self, left_character: str, right_character: str) -> float:
        pair = (left_character, right_character)
        value = self._kerning.get(pair)
        if value is None:
            value = self._font.kerning(left_character, right_character, self._font_size)
            self._kerning[pair] = value
        return value

    def measure(self, text_value: str) -> float:
        """Return the pen advance needed to set the string on one line."""
        width = 0.0
        previous_character: str | None = None
        for character in text_value:
            if is_control_character(character):
                continue
            if previous_character is not None:
                width += self.kerning(previous_character, character)
            width += self.advance(character)
            previous_character = character
        return width


def wrap_words(
    paragraph: str, measure: MeasureText, max_width: float | None
) -> list[str]:
    """Greedily wrap a paragraph, breaking only between words."""
    if max_width is None:
        return [paragraph.rstrip()]
    lines: list[str] = []
    current_line = ""
    for token in TOKEN_PATTERN.findall(paragraph):
        if token.isspace():
            current_line += token
            continue
        candidate = current_line + token
        if current_line.strip() and measure(candidate) > max_width:
            lines.append(current_line.rstrip())
            current_line = token
        else:
            current_line = candidate
    lines.append(current_line.rstrip())
    return lines


def wrap_letters(
    paragraph: str, measure: MeasureText, max_width: float | None
) -> list[str]:
    """Greedily wrap a paragraph, breaking between any two characters."""
    if max_width is None:
        return [paragraph.rstrip()]
    lines: list[str] = []
    current_line = ""
    for character in paragraph:
        candidate = current_line + character
        if (
            current_line.strip()
            and not character.isspace()
            and measure(candidate) > max_width
        ):
            lines.append(current_line.rstrip())
            current_line = character
        else:
            current_line = candidate
    lines.append(current_line.rstrip())
    return lines


DEFAULT_LINE_BREAKERS: Mapping[WrapStyle, LineBreaker] = {
    WrapStyle.WORD: wrap_words,
    WrapStyle.LETTER: wrap_letters,
}


def split_paragraphs(text_value: str, wrap_hard_breaks: bool) -> list[str]:
    """Split text at hard line breaks, or fold them into spaces."""
    if wrap_hard_breaks:
        return text_value.splitlines()
    if not text_value:
        return []
    return [" ".join(text_value.splitlines())]


def break_lines(
    text_value: str,
    measure: MeasureText,
    settings: LayoutSettings,
    line_breakers: Mapping[WrapStyle, LineBreaker] = DEFAULT_LINE_BREAKERS,
) -> list[str]:
    """Break text into display lines according to the layout settings."""
    line_breaker = line_breakers[settings.wrap_style]
    lines: list[str] = []
    for paragraph in split_paragraphs(text_value, settings.wrap_hard_breaks):
        lines.extend(line_breaker(paragraph, measure, settings.max_width))
    return lines


def compute_line_start_x(
    line_width: float, settings: LayoutSettings
) -> float:
    """Return the pen x where a line of the given width starts."""
    if settings.max_width is None:
        return 0.0
    if settings.horizontal_align == HorizontalAlign.CENTER:
        return (settings.max_width - line_width) / 2.0
    if settings.horizontal_align == HorizontalAlign.RIGHT:
        return settings.max_width - line_width
    return 0.0


def compute_block_top_y(block_height: int, settings: LayoutSettings) -> int:
    """Return the top of the text block inside the layout box."""
    if settings.max_height is None:
        return 0
    if settings.vertical_align == VerticalAlign.MIDDLE:
        return int(math.floor((settings.max_height - block_height) / 2.0))
    if settings.vertical_align == VerticalAlign.BOTTOM:
        return int(math.floor(settings.max_height - block_height))
    return 0


class LayoutEngine:
    """Turn text into glyph placements inside a layout box.

    The wrap algorithm is looked up by wrap style, so a different breaker can
    be supplied without touching rasterization or compositing.
    """

    def __init__(
        self, line_breakers: Mapping[WrapStyle, LineBreaker] | None = None
    ) -> None:
        self._line_breakers = dict(DEFAULT_LINE_BREAKERS)
        if line_breakers:
            self._line_breakers.update(line_breakers)

    def layout(
        self,
        font: MacroFont,
        font_size: int,
        settings: LayoutSettings,
        text_value: str,
    ) -> TextLayout:
        if font_size <= 0:
            raise MacroValidationError(
                INVALID_LAYOUT_CODE, "font_size must be positive"
            )
        measurer = TextMeasurer(font, font_size)
        line_metrics = font.line_metrics(font_size)
        line_height = line_metrics.line_height

        line_texts = break_lines(
            text_value, measurer.measure, settings, self._line_breakers
        )
        block_height = len(line_texts) * line_height
        block_top_y = compute_block_top_y(block_height, settings)

        placements: list[GlyphPlacement] = []
        lines: list[LayoutLine] = []
        for line_index, line_text in enumerate(line_texts):
            line_width = measurer.measure(line_text)
            baseline_y = block_top_y + line_index * line_height + line_metrics.ascent
            lines.append(
                LayoutLine(text=line_text, width=line_width, baseline_y=baseline_y)
            )
            placements.extend(
                self._place_line(
                    font,
                    font_size,
                    measurer,
                    line_text,
                    compute_line_start_x(line_width, settings),
                    baseline_y,
                    line_index,
                )
            )

        LOGGER.debug(
            "laid out %d glyphs on %d lines at size %d",
            len(placements),
            len(lines),
            font_size,
        )
        return TextLayout(
            placements=tuple(placements),
            lines=tuple(lines),
            height=block_height,
            line_height=line_height,
        )

    def _place_line(
        self,
        font: MacroFont,
        font_size: int,
        measurer: TextMeasurer,
        line_text: str,
        start_x: float,
        baseline_y: int,
        line_index: int,
    ) -> Sequence[GlyphPlacement]:
        placements: list[GlyphPlacement] = []
        pen_x = start_x
        previous_character: str | None = None
        for character in line_text:
            if is_control_character(character):
                continue
            if previous_character is not None:
                pen_x += measurer.kerning(previous_character, character)
            if not character.isspace():
                placements.append(
                    GlyphPlacement(
                        key=font.glyph_key(character, font_size),
                        x=int(math.floor(pen_x)),
                        y=baseline_y,
                        line_index=line_index,
                    )
                )
            pen_x += measurer.advance(character)
            previous_character = character
        return placements


def layout_text(
    font: MacroFont,
    font_size: int,
    max_width: float | None,
    max_height: float | None,
    text_value: str,
) -> TextLayout:
    """Center-aligned, top-anchored word-wrapped layout."""
    settings = LayoutSettings(
        max_width=max_width,
        max_height=max_height,
        horizontal_align=HorizontalAlign.CENTER,
        vertical_align=VerticalAlign.TOP,
        wrap_style=WrapStyle.WORD,
        wrap_hard_breaks=True,
    )
    return LayoutEngine().layout(font, font_size, settings, text_value)
