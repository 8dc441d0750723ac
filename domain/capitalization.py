"""Alternating and random capitalization of caption text."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import random

from domain.image_macro import INVALID_STYLE_CODE, MacroValidationError

RANDOM_STYLE_NAME = "randomly"


class CapitalizationStrategy(str, Enum):
    """Supported capitalization styles, named by example."""

    ALTERNATING_INITIAL_UPPERCASE = "LiKe tHiS"
    ALTERNATING_INITIAL_LOWERCASE = "lIkE ThIs"
    ALTERNATING_INITIAL_UPPERCASE_SKIP_WHITESPACE = "LiKe ThIs"
    ALTERNATING_INITIAL_LOWERCASE_SKIP_WHITESPACE = "lIkE tHiS"
    RANDOMLY = "RAnDOmlY"


@dataclass
class AlternatingCapitalizationEngine:
    """Flip between upper and lower case on every counted character."""

    next_is_capital: bool
    skip_whitespace: bool

    def should_capitalize(self, index_value: int, character: str) -> bool:
        result = self.next_is_capital
        if not (self.skip_whitespace and character.isspace()):
            self.next_is_capital = not self.next_is_capital
        return result


class RandomCapitalizationEngine:
    """Capitalize each character with probability one half."""

    def __init__(self, rng: random.Random) -> None:
        self._rng = rng

    def should_capitalize(self, index_value: int, character: str) -> bool:
        return self._rng.random() < 0.5


def parse_capitalization_strategy(value: str) -> CapitalizationStrategy:
    """Parse a style name; only the random style ignores case."""
    for strategy in CapitalizationStrategy:
        if strategy is not CapitalizationStrategy.RANDOMLY and value == strategy.value:
            return strategy
    if value.strip().lower() == RANDOM_STYLE_NAME:
        return CapitalizationStrategy.RANDOMLY
    raise MacroValidationError(
        INVALID_STYLE_CODE, f"unknown capitalization {value!r}"
    )


def create_capitalization_engine(
    strategy: CapitalizationStrategy, seed: int | None = None
) -> AlternatingCapitalizationEngine | RandomCapitalizationEngine:
    """Build a stateful engine for the strategy."""
    if strategy == CapitalizationStrategy.RANDOMLY:
        return RandomCapitalizationEngine(random.Random(seed))
    return AlternatingCapitalizationEngine(
        next_is_capital=strategy
        in (
            CapitalizationStrategy.ALTERNATING_INITIAL_UPPERCASE,
            CapitalizationStrategy.ALTERNATING_INITIAL_UPPERCASE_SKIP_WHITESPACE,
        ),
        skip_whitespace=strategy
        in (
            CapitalizationStrategy.ALTERNATING_INITIAL_UPPERCASE_SKIP_WHITESPACE,
            CapitalizationStrategy.ALTERNATING_INITIAL_LOWERCASE_SKIP_WHITESPACE,
        ),
    )


def capitalize_text(
    text_value: str,
    engine: AlternatingCapitalizationEngine | RandomCapitalizationEngine,
) -> str:
    """Apply the engine line by line, carrying its state across lines."""
    output_lines: list[str] = []
    for line_text in text_value.split("\n"):
        characters: list[str] = []
        for index_value, character in enumerate(line_text):
            if engine.should_capitalize(index_value, character):
                characters.append(character.upper())
            else:
                characters.append(character.lower())
        output_lines.append("".join(characters))
    return "\n".join(output_lines)
