"""Tests for caption capitalization styles."""

from __future__ import annotations

import pytest

from domain.capitalization import (
    AlternatingCapitalizationEngine,
    CapitalizationStrategy,
    capitalize_text,
    create_capitalization_engine,
    parse_capitalization_strategy,
)
from domain.image_macro import INVALID_STYLE_CODE, MacroValidationError


@pytest.mark.parametrize(
    ("style_name", "expected_text"),
    [
        ("LiKe tHiS", "TaCo tRuCk"),
        ("lIkE ThIs", "tAcO TrUcK"),
        ("LiKe ThIs", "TaCo TrUcK"),
        ("lIkE tHiS", "tAcO tRuCk"),
    ],
)
def test_alternating_styles(style_name: str, expected_text: str) -> None:
    """Each alternating style matches its own name's pattern."""
    strategy = parse_capitalization_strategy(style_name)
    engine = create_capitalization_engine(strategy)
    assert capitalize_text("taco truck", engine) == expected_text


def test_state_carries_across_lines() -> None:
    """Line breaks are kept and do not reset the alternation."""
    engine = create_capitalization_engine(
        CapitalizationStrategy.ALTERNATING_INITIAL_UPPERCASE
    )
    assert capitalize_text("taco\ntruck", engine) == "TaCo\nTrUcK"


def test_shared_engine_continues_between_captions() -> None:
    """Reusing one engine continues the pattern into the next caption."""
    engine = AlternatingCapitalizationEngine(next_is_capital=True, skip_whitespace=False)
    assert capitalize_text("abc", engine) == "AbC"
    assert capitalize_text("abc", engine) == "aBc"


def test_parse_random_style_ignores_case() -> None:
    """Only the random style name is matched case-insensitively."""
    assert parse_capitalization_strategy("RaNDOmlY") == CapitalizationStrategy.RANDOMLY
    assert parse_capitalization_strategy("randomly") == CapitalizationStrategy.RANDOMLY


@pytest.mark.parametrize("style_name", ["like this", "LIKE THIS", "spongebob", ""])
def test_parse_rejects_unknown_styles(style_name: str) -> None:
    """Unknown or differently-cased alternating names are rejected."""
    with pytest.raises(MacroValidationError) as exc_info:
        parse_capitalization_strategy(style_name)
    assert exc_info.value.code == INVALID_STYLE_CODE


def test_seeded_random_style_is_deterministic() -> None:
    """Equal seeds give equal random capitalization."""
    text_value = "the quick brown fox jumps over the lazy dog"
    first = capitalize_text(
        text_value, create_capitalization_engine(CapitalizationStrategy.RANDOMLY, 7)
    )
    second = capitalize_text(
        text_value, create_capitalization_engine(CapitalizationStrategy.RANDOMLY, 7)
    )
    assert first == second
    assert first.lower() == text_value
