"""Coverage mask painting and alpha compositing onto RGBA images."""

from __future__ import annotations

import logging
from typing import Iterable, Tuple

import numpy as np
from PIL import Image

from domain.image_macro import (
    INVALID_IMAGE_MODE_CODE,
    Color,
    GlyphPlacement,
    MacroValidationError,
)
from service.glyph_cache import GlyphCache

LOGGER = logging.getLogger("render_image_macro.compositing")


def clip_span(start: int, length: int, limit: int) -> Tuple[int, int]:
    """Clip [start, start + length) to [0, limit)."""
    return max(start, 0), min(start + length, limit)


def render_mask(
    placements: Iterable[GlyphPlacement],
    glyph_cache: GlyphCache,
    size: Tuple[int, int],
) -> np.ndarray:
    """Paint glyph coverage into a zeroed mask of the given (width, height).

    Each glyph bitmap replaces whatever lies under its rectangle, so
    overlapping glyphs never accumulate coverage. Parts of a glyph that fall
    outside the mask are dropped.
    """
    mask_width = max(0, int(size[0]))
    mask_height = max(0, int(size[1]))
    mask = np.zeros((mask_height, mask_width), dtype=np.uint8)
    if mask_width == 0 or mask_height == 0:
        return mask

    for placement in placements:
        glyph = glyph_cache.get_or_rasterize(placement.key)
        metrics = glyph.metrics
        if metrics.is_empty:
            continue
        left = placement.x + metrics.bearing_x
        top = placement.y + metrics.bearing_y
        x_start, x_end = clip_span(left, metrics.width, mask_width)
        y_start, y_end = clip_span(top, metrics.height, mask_height)
        if x_start >= x_end or y_start >= y_end:
            continue
        coverage = np.frombuffer(glyph.coverage, dtype=np.uint8).reshape(
            metrics.height, metrics.width
        )
        mask[y_start:y_end, x_start:x_end] = coverage[
            y_start - top : y_end - top, x_start - left : x_end - left
        ]
    return mask


def blend_over(
    destination: np.ndarray, coverage: np.ndarray, color: Color
) -> np.ndarray:
    """Composite the tint over RGBA pixels using coverage as source alpha.

    Straight-alpha "over": pixels with zero coverage are returned unchanged
    and full coverage yields the opaque tint.
    """
    source_alpha = coverage.astype(np.float64)[..., np.newaxis] / 255.0
    destination_rgb = destination[..., :3].astype(np.float64)
    destination_alpha = destination[..., 3:4].astype(np.float64) / 255.0
    tint = np.array(color.rgb, dtype=np.float64)

    out_alpha = source_alpha + destination_alpha * (1.0 - source_alpha)
    premultiplied_rgb = tint * source_alpha + destination_rgb * destination_alpha * (
        1.0 - source_alpha
    )
    safe_alpha = np.where(out_alpha > 0.0, out_alpha, 1.0)
    out_rgb = premultiplied_rgb / safe_alpha

    blended = np.empty_like(destination)
    blended[..., :3] = np.clip(np.rint(out_rgb), 0, 255).astype(np.uint8)
    blended[..., 3] = np.clip(np.rint(out_alpha[..., 0] * 255.0), 0, 255).astype(
        np.uint8
    )
    untouched = coverage == 0
    blended[untouched] = destination[untouched]
    return blended


def blend_mask(
    image: Image.Image,
    mask: np.ndarray,
    color: Color,
    offset: Tuple[int, int],
) -> None:
    """Blend a tinted coverage mask onto an RGBA image in place.

    The mask's top-left corner lands at offset, which may be negative; mask
    pixels that fall outside the image are skipped.
    """
    if image.mode != "RGBA":
        raise MacroValidationError(
            INVALID_IMAGE_MODE_CODE, f"expected an RGBA image, got {image.mode}"
        )
    mask_height, mask_width = mask.shape
    offset_x, offset_y = int(offset[0]), int(offset[1])
    x_start, x_end = clip_span(offset_x, mask_width, image.width)
    y_start, y_end = clip_span(offset_y, mask_height, image.height)
    if x_start >= x_end or y_start >= y_end:
        LOGGER.debug("mask at %s lies outside the image", (offset_x, offset_y))
        return

    coverage = mask[
        y_start - offset_y : y_end - offset_y, x_start - offset_x : x_end - offset_x
    ]
    if not coverage.any():
        return
    destination = np.array(image.crop((x_start, y_start, x_end, y_end)))
    blended = blend_over(destination, coverage, color)
    image.paste(Image.fromarray(blended), (x_start, y_start))
