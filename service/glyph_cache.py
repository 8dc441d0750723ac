"""Per-call memoization of rasterized glyphs."""

from __future__ import annotations

import logging

from domain.image_macro import (
    INVALID_GLYPH_CODE,
    GlyphRasterKey,
    MacroValidationError,
    RasterizedGlyph,
)
from service.fonts import MacroFont

LOGGER = logging.getLogger("render_image_macro.glyph_cache")


class GlyphCache:
    """Rasterize each distinct glyph key at most once.

    A cache is bound to a single font and lives for one macro generation;
    entries are never evicted or replaced.
    """

    def __init__(self, font: MacroFont) -> None:
        self._font = font
        self._entries: dict[GlyphRasterKey, RasterizedGlyph] = {}
        self.hits = 0
        self.misses = 0

    @property
    def font(self) -> MacroFont:
        return self._font

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get_or_rasterize(self, key: GlyphRasterKey) -> RasterizedGlyph:
        """Return the cached glyph for the key, rasterizing on first request."""
        cached_glyph = self._entries.get(key)
        if cached_glyph is not None:
            self.hits += 1
            return cached_glyph
        if key.font_id != self._font.font_id:
            raise MacroValidationError(
                INVALID_GLYPH_CODE,
                f"glyph key for font {key.font_id!r} requested from cache for "
                f"{self._font.font_id!r}",
            )
        glyph = self._font.rasterize(key)
        self._entries[key] = glyph
        self.misses += 1
        return glyph

    def log_stats(self) -> None:
        LOGGER.debug(
            "glyph cache: %d entries, %d hits, %d misses",
            len(self._entries),
            self.hits,
            self.misses,
        )
