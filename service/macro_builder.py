"""Top and bottom caption composition for image macros."""

from __future__ import annotations

import logging
from typing import Tuple

import numpy as np
from PIL import Image

from domain.image_macro import (
    IMAGE_LOAD_CODE,
    HorizontalAlign,
    LayoutSettings,
    MacroConfig,
    MacroResourceError,
    TextLayout,
    VerticalAlign,
    WrapStyle,
)
from service.compositing import blend_mask, render_mask
from service.fonts import MacroFont
from service.glyph_cache import GlyphCache
from service.text_layout import LayoutEngine

BUILTIN_BASE_SIZE = (640, 480)
BUILTIN_BASE_TOP_RGB = (38, 70, 83)
BUILTIN_BASE_BOTTOM_RGB = (12, 18, 24)
DEFAULT_MACRO_CONFIG = MacroConfig()
LOGGER = logging.getLogger("render_image_macro.macro_builder")


def compute_font_size(image_height: int, config: MacroConfig) -> int:
    """Derive the caption pixel size from the image height."""
    return max(1, int(image_height * config.font_size_ratio))


def compute_caption_region(
    image_width: int, image_height: int, config: MacroConfig
) -> Tuple[int, int]:
    """Return the (width, height) box a single caption is laid out in."""
    return image_width, int(image_height * config.caption_height_ratio)


def build_caption_settings(region: Tuple[int, int]) -> LayoutSettings:
    """Centered, top-anchored word wrap that honors explicit line breaks."""
    return LayoutSettings(
        max_width=float(region[0]),
        max_height=float(region[1]),
        horizontal_align=HorizontalAlign.CENTER,
        vertical_align=VerticalAlign.TOP,
        wrap_style=WrapStyle.WORD,
        wrap_hard_breaks=True,
    )


def build_builtin_base_image() -> Image.Image:
    """Render the embedded base image: a plain vertical gradient."""
    width, height = BUILTIN_BASE_SIZE
    top_color = np.array(BUILTIN_BASE_TOP_RGB, dtype=np.float32)
    bottom_color = np.array(BUILTIN_BASE_BOTTOM_RGB, dtype=np.float32)
    ramp = np.linspace(0.0, 1.0, height, dtype=np.float32)[:, np.newaxis, np.newaxis]
    gradient = (1.0 - ramp) * top_color + ramp * bottom_color
    gradient_array = np.broadcast_to(gradient, (height, width, 3))
    rgb_array = np.clip(np.rint(gradient_array), 0, 255).astype(np.uint8)
    return Image.fromarray(rgb_array).convert("RGBA")


def load_base_image(image_path: str) -> Image.Image:
    """Decode a base image from disk as RGBA."""
    try:
        with Image.open(image_path) as image:
            image.load()
            return image.convert("RGBA")
    except FileNotFoundError as exc:
        raise MacroResourceError(
            IMAGE_LOAD_CODE, f"base image not found: {image_path}"
        ) from exc
    except Exception as exc:
        raise MacroResourceError(
            IMAGE_LOAD_CODE, f"failed to read base image: {image_path}"
        ) from exc


def render_caption(
    image: Image.Image,
    layout: TextLayout,
    glyph_cache: GlyphCache,
    region: Tuple[int, int],
    offset: Tuple[int, int],
    config: MacroConfig,
) -> None:
    """Paint a laid-out caption into a mask and blend it at offset."""
    mask = render_mask(layout.placements, glyph_cache, region)
    blend_mask(image, mask, config.text_color, offset)


def generate_macro(
    base_image: Image.Image,
    font: MacroFont,
    top_text: str | None,
    bottom_text: str | None,
    config: MacroConfig = DEFAULT_MACRO_CONFIG,
) -> Image.Image:
    """Overlay top and bottom captions on a copy of the base image.

    The top caption is anchored to the image's top edge and the bottom
    caption's block is shifted up by its own laid-out height so that it ends
    on the image's bottom edge. A caption that is None is skipped entirely.
    """
    image = base_image.convert("RGBA")
    if top_text is None and bottom_text is None:
        LOGGER.debug("no captions supplied; returning base image")
        return image

    image_width, image_height = image.size
    font_size = compute_font_size(image_height, config)
    region = compute_caption_region(image_width, image_height, config)
    settings = build_caption_settings(region)
    layout_engine = LayoutEngine()
    glyph_cache = GlyphCache(font)
    LOGGER.debug(
        "image %dx%d: font size %d, caption region %dx%d",
        image_width,
        image_height,
        font_size,
        region[0],
        region[1],
    )

    if top_text is not None:
        layout = layout_engine.layout(font, font_size, settings, top_text)
        render_caption(image, layout, glyph_cache, region, (0, 0), config)

    if bottom_text is not None:
        layout = layout_engine.layout(font, font_size, settings, bottom_text)
        text_y = image_height - layout.height
        render_caption(image, layout, glyph_cache, region, (0, text_y), config)

    glyph_cache.log_stats()
    return image
