"""Domain types and validation for render_image_macro."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import re
from typing import Tuple

INVALID_CONFIG_CODE = "render_image_macro.input.invalid_config"
INVALID_COLOR_CODE = "render_image_macro.input.invalid_color"
INVALID_STYLE_CODE = "render_image_macro.input.invalid_style"
INVALID_LAYOUT_CODE = "render_image_macro.input.invalid_layout"
INVALID_GLYPH_CODE = "render_image_macro.input.invalid_glyph"
INVALID_IMAGE_MODE_CODE = "render_image_macro.input.invalid_image_mode"
OUTPUT_FILE_CODE = "render_image_macro.input.output_file"
FONT_LOAD_CODE = "render_image_macro.resource.font_unloadable"
IMAGE_LOAD_CODE = "render_image_macro.resource.image_unloadable"
IMAGE_WRITE_CODE = "render_image_macro.resource.image_unwritable"

DEFAULT_FONT_SIZE_RATIO = 1.0 / 8.0
DEFAULT_CAPTION_HEIGHT_RATIO = 1.0 / 4.0


class MacroValidationError(ValueError):
    """Validation error with a stable error code."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code


class MacroResourceError(RuntimeError):
    """Failure to load or store a raster or font resource."""

    def __init__(self, code: str, message: str) -> None:
        super().__init__(message)
        self.code = code


class HorizontalAlign(str, Enum):
    """Horizontal placement of each line inside the layout box."""

    LEFT = "left"
    CENTER = "center"
    RIGHT = "right"


class VerticalAlign(str, Enum):
    """Vertical placement of the whole text block inside the layout box."""

    TOP = "top"
    MIDDLE = "middle"
    BOTTOM = "bottom"


class WrapStyle(str, Enum):
    """Where soft line breaks are allowed."""

    WORD = "word"
    LETTER = "letter"


@dataclass(frozen=True)
class Color:
    """Opaque RGB tint applied to every glyph pixel."""

    red: int
    green: int
    blue: int

    def __post_init__(self) -> None:
        for channel in (self.red, self.green, self.blue):
            if channel < 0 or channel > 255:
                raise MacroValidationError(
                    INVALID_COLOR_CODE, "color channel out of range"
                )

    @property
    def rgb(self) -> Tuple[int, int, int]:
        return (self.red, self.green, self.blue)

    @property
    def rgba(self) -> Tuple[int, int, int, int]:
        return (self.red, self.green, self.blue, 255)


WHITE = Color(255, 255, 255)


@dataclass(frozen=True)
class GlyphRasterKey:
    """Everything that determines the pixels of one rasterized glyph.

    Equal keys always rasterize to identical coverage, which is what makes
    the key usable as a cache key.
    """

    font_id: str
    character: str
    size: int

    def __post_init__(self) -> None:
        if len(self.character) != 1:
            raise MacroValidationError(
                INVALID_GLYPH_CODE, "glyph key must name exactly one character"
            )
        if self.size <= 0:
            raise MacroValidationError(
                INVALID_GLYPH_CODE, "glyph size must be positive"
            )


@dataclass(frozen=True)
class GlyphMetrics:
    """Bitmap size and pen-relative offset of a rasterized glyph."""

    width: int
    height: int
    bearing_x: int
    bearing_y: int
    advance: float

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0


@dataclass(frozen=True)
class RasterizedGlyph:
    """Glyph metrics plus row-major 8-bit coverage, top row first."""

    metrics: GlyphMetrics
    coverage: bytes

    def __post_init__(self) -> None:
        expected_length = max(0, self.metrics.width) * max(0, self.metrics.height)
        if len(self.coverage) != expected_length:
            raise MacroValidationError(
                INVALID_GLYPH_CODE,
                f"coverage holds {len(self.coverage)} bytes, expected {expected_length}",
            )


@dataclass(frozen=True)
class GlyphPlacement:
    """A visible glyph and its integer pen position inside the text region."""

    key: GlyphRasterKey
    x: int
    y: int
    line_index: int

    @property
    def character(self) -> str:
        return self.key.character


@dataclass(frozen=True)
class LayoutLine:
    """One wrapped line: its text, measured width and baseline."""

    text: str
    width: float
    baseline_y: int


@dataclass(frozen=True)
class TextLayout:
    """Result of laying out a caption."""

    placements: Tuple[GlyphPlacement, ...]
    lines: Tuple[LayoutLine, ...]
    height: int
    line_height: int


@dataclass(frozen=True)
class LayoutSettings:
    """Box and policy for laying out one block of text."""

    max_width: float | None = None
    max_height: float | None = None
    horizontal_align: HorizontalAlign = HorizontalAlign.CENTER
    vertical_align: VerticalAlign = VerticalAlign.TOP
    wrap_style: WrapStyle = WrapStyle.WORD
    wrap_hard_breaks: bool = True

    def __post_init__(self) -> None:
        if self.max_width is not None and self.max_width < 0:
            raise MacroValidationError(
                INVALID_LAYOUT_CODE, "max_width must be non-negative"
            )
        if self.max_height is not None and self.max_height < 0:
            raise MacroValidationError(
                INVALID_LAYOUT_CODE, "max_height must be non-negative"
            )
        if not isinstance(self.horizontal_align, HorizontalAlign):
            raise MacroValidationError(
                INVALID_LAYOUT_CODE, "horizontal_align is invalid"
            )
        if not isinstance(self.vertical_align, VerticalAlign):
            raise MacroValidationError(
                INVALID_LAYOUT_CODE, "vertical_align is invalid"
            )
        if not isinstance(self.wrap_style, WrapStyle):
            raise MacroValidationError(INVALID_LAYOUT_CODE, "wrap_style is invalid")


@dataclass(frozen=True)
class MacroConfig:
    """Validated configuration for generating one image macro."""

    font_size_ratio: float = DEFAULT_FONT_SIZE_RATIO
    caption_height_ratio: float = DEFAULT_CAPTION_HEIGHT_RATIO
    text_color: Color = WHITE

    def __post_init__(self) -> None:
        if self.font_size_ratio <= 0 or self.font_size_ratio > 1:
            raise MacroValidationError(
                INVALID_CONFIG_CODE, "font_size_ratio must be in (0, 1]"
            )
        if self.caption_height_ratio <= 0 or self.caption_height_ratio > 1:
            raise MacroValidationError(
                INVALID_CONFIG_CODE, "caption_height_ratio must be in (0, 1]"
            )
        if not isinstance(self.text_color, Color):
            raise MacroValidationError(INVALID_CONFIG_CODE, "text_color is invalid")


def parse_hex_color(color_value: str) -> Color:
    """Parse a #RRGGBB token into a Color."""
    match_value = re.fullmatch(r"#([0-9a-fA-F]{6})", color_value.strip())
    if not match_value:
        raise MacroValidationError(
            INVALID_COLOR_CODE, f"invalid color value: {color_value!r}"
        )

    rgb_hex = match_value.group(1)
    return Color(
        int(rgb_hex[0:2], 16),
        int(rgb_hex[2:4], 16),
        int(rgb_hex[4:6], 16),
    )
