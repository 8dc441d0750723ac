"""Font faces, metrics and single-glyph rasterization."""

from __future__ import annotations

from dataclasses import dataclass
import logging
from typing import Callable

from PIL import Image, ImageDraw, ImageFont

from domain.image_macro import (
    FONT_LOAD_CODE,
    GlyphMetrics,
    GlyphRasterKey,
    MacroResourceError,
    RasterizedGlyph,
)

BUILTIN_FONT_ID = "pillow-default"
BUILTIN_FONT_PROBE_SIZE = 32
LOGGER = logging.getLogger("render_image_macro.fonts")


@dataclass(frozen=True)
class LineMetrics:
    """Vertical metrics of a face at one pixel size."""

    ascent: int
    descent: int

    @property
    def line_height(self) -> int:
        return self.ascent + self.descent


class MacroFont:
    """A parsed font that can measure and rasterize glyphs at any size.

    Pillow binds a face to a single size, so faces are created on first use
    for each size and reused afterwards. Nothing observable about the font
    changes after construction.
    """

    def __init__(
        self,
        font_id: str,
        face_loader: Callable[[int], ImageFont.FreeTypeFont],
    ) -> None:
        self._font_id = font_id
        self._face_loader = face_loader
        self._faces: dict[int, ImageFont.FreeTypeFont] = {}

    @property
    def font_id(self) -> str:
        return self._font_id

    def face(self, size: int) -> ImageFont.FreeTypeFont:
        """Return the face for a pixel size, loading it once."""
        face = self._faces.get(size)
        if face is None:
            face = self._face_loader(size)
            self._faces[size] = face
        return face

    def line_metrics(self, size: int) -> LineMetrics:
        ascent, descent = self.face(size).getmetrics()
        return LineMetrics(ascent=int(ascent), descent=abs(int(descent)))

    def advance(self, character: str, size: int) -> float:
        return float(self.face(size).getlength(character))

    def kerning(self, left_character: str, right_character: str, size: int) -> float:
        """Return the pair adjustment applied between two adjacent glyphs."""
        face = self.face(size)
        pair_length = face.getlength(left_character + right_character)
        return float(
            pair_length - face.getlength(left_character) - face.getlength(right_character)
        )

    def glyph_key(self, character: str, size: int) -> GlyphRasterKey:
        return GlyphRasterKey(font_id=self._font_id, character=character, size=size)

    def rasterize(self, key: GlyphRasterKey) -> RasterizedGlyph:
        """Rasterize one glyph into an 8-bit coverage bitmap.

        The bitmap is cropped to the glyph's ink box; the bearings give the
        offset of that box from the pen position on the baseline.
        """
        face = self.face(key.size)
        left, top, right, bottom = face.getbbox(key.character, anchor="ls")
        left, top = int(left), int(top)
        glyph_width = max(0, int(right) - left)
        glyph_height = max(0, int(bottom) - top)
        advance = float(face.getlength(key.character))
        if glyph_width == 0 or glyph_height == 0:
            return RasterizedGlyph(
                metrics=GlyphMetrics(0, 0, left, top, advance), coverage=b""
            )

        glyph_image = Image.new("L", (glyph_width, glyph_height), 0)
        glyph_draw = ImageDraw.Draw(glyph_image)
        glyph_draw.text((-left, -top), key.character, font=face, fill=255, anchor="ls")
        return RasterizedGlyph(
            metrics=GlyphMetrics(
                width=glyph_width,
                height=glyph_height,
                bearing_x=left,
                bearing_y=top,
                advance=advance,
            ),
            coverage=glyph_image.tobytes(),
        )


def load_default_face(size: int) -> ImageFont.FreeTypeFont:
    """Load Pillow's bundled FreeType face at a pixel size."""
    try:
        face = ImageFont.load_default(size=size)
    except (OSError, ImportError) as exc:
        raise MacroResourceError(
            FONT_LOAD_CODE, f"failed to load built-in font at size {size}"
        ) from exc
    if not isinstance(face, ImageFont.FreeTypeFont):
        raise MacroResourceError(
            FONT_LOAD_CODE, "built-in font requires Pillow with FreeType support"
        )
    return face


def load_builtin_font() -> MacroFont:
    """Load the embedded font, failing fast when it cannot be parsed."""
    font = MacroFont(BUILTIN_FONT_ID, load_default_face)
    family_name, style_name = font.face(BUILTIN_FONT_PROBE_SIZE).getname()
    LOGGER.debug("loaded built-in font %s %s", family_name, style_name)
    return font
