"""
Answer codec: canonical representation, "has an answer" predicate and wire
conversion for each question kind.

Canonical answer values:
    text / radio  -> str, or None when absent
    checkbox      -> tuple of distinct option strings (order of selection kept)
    number        -> finite int/float, or None when absent

Incoming data comes from a backend whose answer shape has drifted over time
(checkbox answers stored as comma strings, numbers stored as strings), so
`normalize_incoming` accepts anything and never raises.
"""
import logging
import math
import re
from collections.abc import Sequence
from typing import Any, Dict, List, Optional, Tuple, Union

from .models import QuestionKind

logger = logging.getLogger(__name__)

Number = Union[int, float]
AnswerValue = Union[str, Tuple[str, ...], int, float, None]

# Plain decimal or exponent notation; no digit separators, no non-ASCII digits
NUMBER_PATTERN = re.compile(r"[+-]?([0-9]+\.?[0-9]*|\.[0-9]+)([eE][+-]?[0-9]+)?")
INTEGER_PATTERN = re.compile(r"[+-]?[0-9]+")

CHECKBOX_CONTAINERS = (tuple, list, set, frozenset)


def parse_number(raw: Any) -> Optional[Number]:
    """
    Parses a loosely-typed numeric value.

    Returns None for empty input, unparseable strings, booleans and
    non-finite results.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, (int, float)):
        return raw if math.isfinite(raw) else None
    text = str(raw).strip()
    if not NUMBER_PATTERN.fullmatch(text):
        return None
    if INTEGER_PATTERN.fullmatch(text):
        return int(text)
    value = float(text)
    return value if math.isfinite(value) else None


def _unique(options) -> Tuple[str, ...]:
    seen: List[str] = []
    for option in options:
        if option not in seen:
            seen.append(option)
    return tuple(seen)


class TextCodec:
    """Text and radio answers are plain strings."""

    def is_answered(self, value: Any) -> bool:
        return isinstance(value, str) and value != ""

    def normalize_incoming(self, raw: Any) -> str:
        if raw is None:
            return ""
        if isinstance(raw, (list, tuple, dict, set)):
            logger.warning(f"Unexpected {type(raw).__name__} for a text answer, treating as empty")
            return ""
        return str(raw)

    def to_wire(self, value: Any) -> str:
        return "" if value is None else str(value)

    def empty_wire(self) -> str:
        return ""


class CheckboxCodec:
    """Checkbox answers are the selected options; the backend also stores them as comma strings."""

    def is_answered(self, value: Any) -> bool:
        return isinstance(value, CHECKBOX_CONTAINERS) and len(value) > 0

    def normalize_incoming(self, raw: Any) -> Tuple[str, ...]:
        if isinstance(raw, str):
            return _unique(part.strip() for part in raw.split(",") if part.strip())
        if isinstance(raw, (set, frozenset)):
            return _unique(sorted(str(option) for option in raw if option is not None))
        if isinstance(raw, Sequence):
            return _unique(str(option) for option in raw if option is not None)
        if raw is not None:
            logger.warning(f"Unexpected {type(raw).__name__} for a checkbox answer, treating as empty")
        return ()

    def to_wire(self, value: Any) -> List[str]:
        if value is None:
            return []
        if isinstance(value, (str, set, frozenset)):
            return list(self.normalize_incoming(value))
        return list(value)

    def empty_wire(self) -> List[str]:
        return []


class NumberCodec:
    """Number answers; bounds on the question are advisory and not checked here."""

    def is_answered(self, value: Any) -> bool:
        # 0 is a valid answer
        return value is not None and value != ""

    def normalize_incoming(self, raw: Any) -> Optional[Number]:
        value = parse_number(raw)
        if value is None and raw not in (None, ""):
            logger.warning(f"Could not read {raw!r} as a number answer, treating as empty")
        return value

    def to_wire(self, value: Any) -> Optional[Number]:
        # Stray strings are coerced once more at submission time
        return parse_number(value)

    def empty_wire(self) -> None:
        return None


_TEXT = TextCodec()

CODECS: Dict[QuestionKind, Any] = {
    QuestionKind.TEXT: _TEXT,
    QuestionKind.RADIO: _TEXT,
    QuestionKind.CHECKBOX: CheckboxCodec(),
    QuestionKind.NUMBER: NumberCodec(),
}


def codec_for(kind: QuestionKind):
    return CODECS[QuestionKind(kind)]


def is_answered(kind: QuestionKind, value: Any) -> bool:
    return codec_for(kind).is_answered(value)


def normalize_incoming(kind: QuestionKind, raw: Any) -> AnswerValue:
    return codec_for(kind).normalize_incoming(raw)


def to_wire(kind: QuestionKind, value: Any):
    return codec_for(kind).to_wire(value)


def empty_wire(kind: QuestionKind):
    return codec_for(kind).empty_wire()
