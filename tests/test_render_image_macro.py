"""Integration tests for render_image_macro CLI."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path
from typing import List

from PIL import Image


def run_render_image_macro(args: List[str], repo_root: Path) -> subprocess.CompletedProcess[str]:
    """Run render_image_macro.py with the provided arguments."""
    return subprocess.run(
        [sys.executable, str(repo_root / "render_image_macro.py"), *args],
        cwd=repo_root,
        text=True,
        capture_output=True,
        check=False,
    )


def test_emit_text_prints_capitalized_captions() -> None:
    """Print the styled captions without rendering."""
    repo_root = Path(__file__).resolve().parents[1]
    result = run_render_image_macro(
        ["--top-text", "taco truck", "--bottom-text", "taco\ntruck", "--emit-text"],
        repo_root,
    )

    assert result.returncode == 0
    assert result.stdout == "TaCo tRuCk\nTaCo\nTrUcK\n"


def test_keep_case_leaves_text_alone() -> None:
    """Skip capitalization when asked to."""
    repo_root = Path(__file__).resolve().parents[1]
    result = run_render_image_macro(
        ["--top-text", "Taco Truck", "--keep-case", "--emit-text"], repo_root
    )

    assert result.returncode == 0
    assert result.stdout == "Taco Truck\n"


def test_render_with_builtin_base_image(tmp_path: Path) -> None:
    """Render onto the built-in base image."""
    repo_root = Path(__file__).resolve().parents[1]
    output_path = tmp_path / "macro.png"
    result = run_render_image_macro(
        [
            "--top-text",
            "when the tests",
            "--bottom-text",
            "pass first try",
            "--output-image",
            str(output_path),
        ],
        repo_root,
    )

    assert result.returncode == 0, result.stderr
    with Image.open(output_path) as image:
        assert image.size == (640, 480)
        assert image.mode == "RGBA"


def test_render_keeps_base_image_dimensions(tmp_path: Path) -> None:
    """The output has the dimensions of the supplied base image."""
    repo_root = Path(__file__).resolve().parents[1]
    base_path = tmp_path / "base.png"
    Image.new("RGB", (320, 200), (0, 0, 0)).save(base_path)
    output_path = tmp_path / "out.png"

    result = run_render_image_macro(
        [
            "--top-text",
            "top",
            "--base-image",
            str(base_path),
            "--output-image",
            str(output_path),
            "--text-color",
            "#FF0000",
        ],
        repo_root,
    )

    assert result.returncode == 0, result.stderr
    with Image.open(output_path) as image:
        assert image.size == (320, 200)
        colors = {color for _, color in image.getcolors(maxcolors=320 * 200)}
        assert (0, 0, 0, 255) in colors
        assert any(color[0] > 0 and color[1] == 0 for color in colors if color != (0, 0, 0, 255))


def test_invalid_style_fails() -> None:
    """Unknown styles are reported with their error code."""
    repo_root = Path(__file__).resolve().parents[1]
    result = run_render_image_macro(
        ["--top-text", "taco", "--style", "like this", "--emit-text"], repo_root
    )

    assert result.returncode == 1
    assert "render_image_macro.input.invalid_style" in result.stderr


def test_non_png_output_fails(tmp_path: Path) -> None:
    """Only PNG output paths are accepted."""
    repo_root = Path(__file__).resolve().parents[1]
    result = run_render_image_macro(
        ["--top-text", "taco", "--output-image", str(tmp_path / "out.jpg")],
        repo_root,
    )

    assert result.returncode == 1
    assert "render_image_macro.input.output_file" in result.stderr


def test_invalid_color_fails(tmp_path: Path) -> None:
    """Text colors must be #RRGGBB."""
    repo_root = Path(__file__).resolve().parents[1]
    result = run_render_image_macro(
        ["--top-text", "taco", "--text-color", "white", "--emit-text"], repo_root
    )

    assert result.returncode == 1
    assert "render_image_macro.input.invalid_color" in result.stderr


def test_missing_base_image_fails(tmp_path: Path) -> None:
    """A base image that cannot be read is a resource error."""
    repo_root = Path(__file__).resolve().parents[1]
    output_path = tmp_path / "out.png"
    result = run_render_image_macro(
        [
            "--top-text",
            "taco",
            "--base-image",
            str(tmp_path / "missing.png"),
            "--output-image",
            str(output_path),
        ],
        repo_root,
    )

    assert result.returncode == 1
    assert "render_image_macro.resource.image_unloadable" in result.stderr
    assert not output_path.exists()
