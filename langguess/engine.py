"""
Pure game logic (no HTTP, no storage).

compare() classifies one attribute of the guessed language against the target:
- set-valued (paradigm): exact if the listed tags are identical in order,
  close if they share at least one tag, wrong otherwise
- first appeared year: exact if equal, close within 5 years, wrong otherwise,
  plus a direction ("up" = target is later, "down" = target is earlier)
- everything else: exact if equal, wrong otherwise

score_guess() runs compare() over every attribute and builds the feedback lines.
The revealed value is always the TARGET's value, never the guessed one.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import re
from typing import Dict, List, Optional, Tuple

from .catalog import ATTRIBUTE_FIELDS, LanguageRecord
from .types import AttributeMatch, AttributeName, Direction, LineKind

YEAR_CLOSE_WINDOW = 5

SET_ATTRIBUTES = {"paradigm"}
ORDERED_ATTRIBUTES = {"firstAppeared"}

# Fixed scoring order; the feedback lines follow it
ATTRIBUTES: Tuple[AttributeName, ...] = tuple(ATTRIBUTE_FIELDS)

MATCH_SYMBOLS = {"exact": "✓", "close": "≈", "wrong": "✗"}
DIRECTION_ARROWS = {"up": "↑", "down": "↓"}
MATCH_LINE_KINDS: Dict[str, LineKind] = {"exact": "success", "close": "warning", "wrong": "error"}

# Empty value shown for each attribute until the first guess reveals it
_HIDDEN_VALUES = {
    "paradigm": (),
    "typing": "",
    "garbageCollection": False,
    "designedBy": "",
    "firstAppeared": 0,
    "mainUseCase": "",
}


@dataclass(frozen=True)
class AttributeResult:
    value: object
    match: AttributeMatch
    direction: Optional[Direction] = None


@dataclass(frozen=True)
class FeedbackLine:
    text: str
    kind: LineKind


@dataclass
class ScoreResult:
    attributes: Dict[str, AttributeResult]
    lines: List[FeedbackLine] = field(default_factory=list)
    is_win: bool = False


def hidden_attributes() -> Dict[str, AttributeResult]:
    return {key: AttributeResult(value=_HIDDEN_VALUES[key], match="hidden") for key in ATTRIBUTES}


def _compare_sets(target, guessed) -> AttributeMatch:
    # Ordered equality: the same tags listed in another order only count as close
    if tuple(target) == tuple(guessed):
        return "exact"
    if any(tag in guessed for tag in target):
        return "close"
    return "wrong"


def _compare_years(target: int, guessed: int) -> Tuple[AttributeMatch, Optional[Direction]]:
    direction: Optional[Direction] = None
    if guessed < target:
        direction = "up"
    elif guessed > target:
        direction = "down"

    if target == guessed:
        return "exact", None
    if abs(target - guessed) <= YEAR_CLOSE_WINDOW:
        return "close", direction
    return "wrong", direction


def compare(attribute: str, target, guessed) -> Tuple[AttributeMatch, Optional[Direction]]:
    """
    Example:
      compare("firstAppeared", 2010, 1995) -> ("wrong", "up")
      compare("paradigm", ("A", "B"), ("B", "C")) -> ("close", None)
      compare("typing", "Static", "Static") -> ("exact", None)
    """
    if attribute not in ATTRIBUTE_FIELDS:
        raise ValueError(f"Unknown attribute: {attribute!r}")

    if attribute in SET_ATTRIBUTES:
        return _compare_sets(target, guessed), None
    if attribute in ORDERED_ATTRIBUTES:
        return _compare_years(int(target), int(guessed))
    return ("exact" if target == guessed else "wrong"), None


def snake_case(name: str) -> str:
    return re.sub(r"([A-Z])", r"_\1", name).lower()


def format_feedback(attribute: str, match: AttributeMatch, direction: Optional[Direction]) -> str:
    symbol = MATCH_SYMBOLS[match]
    if direction:
        symbol += " " + DIRECTION_ARROWS[direction]
    return f"{snake_case(attribute)}: {symbol}"


def score_guess(target: LanguageRecord, guessed: LanguageRecord) -> ScoreResult:
    # Same language (by name) -> everything exact, single success line
    if guessed.name.lower() == target.name.lower():
        attributes = {
            key: AttributeResult(value=target.attribute(key), match="exact")
            for key in ATTRIBUTES
        }
        line = FeedbackLine(f"Match found! Language identified: {target.name}", "success")
        return ScoreResult(attributes=attributes, lines=[line], is_win=True)

    attributes: Dict[str, AttributeResult] = {}
    lines: List[FeedbackLine] = []
    for key in ATTRIBUTES:
        match, direction = compare(key, target.attribute(key), guessed.attribute(key))
        attributes[key] = AttributeResult(value=target.attribute(key), match=match, direction=direction)
        lines.append(FeedbackLine(format_feedback(key, match, direction), MATCH_LINE_KINDS[match]))

    return ScoreResult(attributes=attributes, lines=lines, is_win=False)
