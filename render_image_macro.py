#!/usr/bin/env -S uv run
# /// script
# requires-python = ">=3.11"
# dependencies = [
#   "pillow>=10.1",
#   "numpy>=1.26"
# ]
# ///
"""Render an image macro with SpOnGiFy-capitalized top and bottom captions."""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import dataclass
from typing import Sequence

from PIL import Image

from domain.capitalization import (
    CapitalizationStrategy,
    capitalize_text,
    create_capitalization_engine,
    parse_capitalization_strategy,
)
from domain.image_macro import (
    IMAGE_WRITE_CODE,
    INVALID_CONFIG_CODE,
    OUTPUT_FILE_CODE,
    MacroConfig,
    MacroResourceError,
    MacroValidationError,
    parse_hex_color,
)
from service.fonts import load_builtin_font
from service.macro_builder import (
    build_builtin_base_image,
    generate_macro,
    load_base_image,
)

LOGGER = logging.getLogger("render_image_macro")


@dataclass(frozen=True)
class MacroRequest:
    """Parsed CLI request and runtime options."""

    top_text: str | None
    bottom_text: str | None
    base_image_path: str | None
    output_image_file: str
    strategy: CapitalizationStrategy | None
    capitalization_seed: int | None
    emit_text: bool
    config: MacroConfig

    def __post_init__(self) -> None:
        if not self.output_image_file.lower().endswith(".png"):
            raise MacroValidationError(
                OUTPUT_FILE_CODE, "output_image_file must end with .png"
            )
        if self.base_image_path is not None and not self.base_image_path.strip():
            raise MacroValidationError(
                INVALID_CONFIG_CODE, "base_image_path must be non-empty"
            )


def configure_logging() -> None:
    """Configure logging for CLI output."""
    logging.basicConfig(level=logging.INFO, format="%(message)s")


def parse_args(argv: Sequence[str]) -> tuple[MacroRequest, bool]:
    """Parse CLI arguments into a MacroRequest and the verbosity flag."""
    parser = argparse.ArgumentParser(prog="render_image_macro.py", add_help=True)
    parser.add_argument("--top-text", default=None)
    parser.add_argument("--bottom-text", default=None)
    parser.add_argument("--base-image", default=None)
    parser.add_argument("--output-image", default="macro.png")
    parser.add_argument(
        "--style",
        default=CapitalizationStrategy.ALTERNATING_INITIAL_UPPERCASE.value,
        help='"LiKe tHiS", "LiKe ThIs", "lIkE ThIs", "lIkE tHiS" or "randomly"',
    )
    parser.add_argument("--keep-case", action="store_true")
    parser.add_argument("--capitalization-seed", type=int, default=None)
    parser.add_argument("--text-color", default="#FFFFFF", help="#RRGGBB")
    parser.add_argument("--emit-text", action="store_true")
    parser.add_argument("--verbose", action="store_true")

    parsed = parser.parse_args(argv)
    strategy = None if parsed.keep_case else parse_capitalization_strategy(parsed.style)
    config = MacroConfig(text_color=parse_hex_color(parsed.text_color))
    request = MacroRequest(
        top_text=parsed.top_text,
        bottom_text=parsed.bottom_text,
        base_image_path=parsed.base_image,
        output_image_file=parsed.output_image,
        strategy=strategy,
        capitalization_seed=parsed.capitalization_seed,
        emit_text=parsed.emit_text,
        config=config,
    )
    return request, parsed.verbose


def capitalize_captions(request: MacroRequest) -> tuple[str | None, str | None]:
    """Apply the requested style to both captions with one shared engine."""
    if request.strategy is None:
        return request.top_text, request.bottom_text
    engine = create_capitalization_engine(
        request.strategy, request.capitalization_seed
    )
    top_text = (
        capitalize_text(request.top_text, engine)
        if request.top_text is not None
        else None
    )
    bottom_text = (
        capitalize_text(request.bottom_text, engine)
        if request.bottom_text is not None
        else None
    )
    return top_text, bottom_text


def emit_captions(top_text: str | None, bottom_text: str | None) -> None:
    """Print the captions that would be rendered."""
    for caption in (top_text, bottom_text):
        if caption is not None:
            sys.stdout.write(caption + "\n")
    sys.stdout.flush()


def save_image(image: Image.Image, output_path: str) -> None:
    """Write the composite image as PNG."""
    try:
        image.save(output_path, format="PNG")
    except OSError as exc:
        raise MacroResourceError(
            IMAGE_WRITE_CODE, f"failed to write output image: {output_path}"
        ) from exc


def main(argv: Sequence[str] | None = None) -> int:
    """CLI entrypoint."""
    configure_logging()

    try:
        request, verbose = parse_args(sys.argv[1:] if argv is None else argv)
        if verbose:
            logging.getLogger().setLevel(logging.DEBUG)
        top_text, bottom_text = capitalize_captions(request)
        if request.emit_text:
            emit_captions(top_text, bottom_text)
            return 0
        font = load_builtin_font()
        base_image = (
            load_base_image(request.base_image_path)
            if request.base_image_path is not None
            else build_builtin_base_image()
        )
        image = generate_macro(
            base_image, font, top_text, bottom_text, request.config
        )
        save_image(image, request.output_image_file)
        LOGGER.info("wrote %s", request.output_image_file)
        return 0
    except MacroValidationError as exc:
        LOGGER.error("%s: %s", exc.code, str(exc).strip())
        return 1
    except MacroResourceError as exc:
        LOGGER.error("%s: %s", exc.code, str(exc).strip())
        return 1
    except Exception as exc:
        LOGGER.error("render_image_macro.unhandled_error: %s", str(exc).strip())
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
