"""
Write-time rules for tour records.

Each field maps to an ordered list of rules; a rule pairs a predicate with the
message reported when it fails. Rules other than ``required`` are skipped when
the value is missing. Only the first failing rule of a field is reported.
"""

import math
from dataclasses import dataclass
from enum import Enum
from numbers import Integral, Real
from typing import Any, Callable, Mapping, Sequence

from pydantic.alias_generators import to_camel

from ..core.exceptions import ValidationError

NAME_MIN_LENGTH = 10
NAME_MAX_LENGTH = 40
RATING_MIN = 1.0
RATING_MAX = 5.0
DEFAULT_RATINGS_AVERAGE = 4.5


class Difficulty(str, Enum):
    """Tour difficulty enumeration."""
    EASY = "easy"
    MEDIUM = "medium"
    DIFFICULT = "difficult"


@dataclass(frozen=True)
class Rule:
    """A predicate over (value, whole record) and the message for its failure."""

    check: Callable[[Any, Mapping[str, Any]], bool]
    message: str
    skip_missing: bool = True

    def violated_by(self, value: Any, record: Mapping[str, Any]) -> bool:
        if value is None and self.skip_missing:
            return False
        return not self.check(value, record)

    def render(self, value: Any) -> str:
        return self.message.format(value=value)


def required(message: str) -> Rule:
    return Rule(lambda value, _: value is not None and value != "", message, skip_missing=False)


def is_number(message: str) -> Rule:
    # NaN and infinities are rejected
    return Rule(
        lambda value, _: isinstance(value, Real) and not isinstance(value, bool)
        and (isinstance(value, Integral) or math.isfinite(value)),
        message,
    )


def is_text(message: str) -> Rule:
    return Rule(lambda value, _: isinstance(value, str), message)


def is_boolean(message: str) -> Rule:
    return Rule(lambda value, _: isinstance(value, bool), message)


def min_length(limit: int, message: str) -> Rule:
    return Rule(lambda value, _: len(value) >= limit, message)


def max_length(limit: int, message: str) -> Rule:
    return Rule(lambda value, _: len(value) <= limit, message)


def letters_and_spaces(message: str) -> Rule:
    # str.isalpha is Unicode-aware, so accented names pass
    return Rule(lambda value, _: all(ch.isalpha() or ch == " " for ch in value), message)


def one_of(choices: Sequence[str], message: str) -> Rule:
    return Rule(lambda value, _: value in choices, message)


def between(low: float, high: float, message: str) -> Rule:
    return Rule(lambda value, _: low <= value <= high, message)


def below_field(other: str, message: str) -> Rule:
    def check(value: Any, record: Mapping[str, Any]) -> bool:
        limit = record.get(other)
        # a missing or malformed price is reported on the price field itself
        if not isinstance(limit, Real):
            return True
        return value < limit

    return Rule(check, message)


def text_list(message: str) -> Rule:
    return Rule(
        lambda value, _: isinstance(value, (list, tuple)) and all(isinstance(item, str) for item in value),
        message,
    )


TOUR_RULES: dict[str, list[Rule]] = {
    "name": [
        required("A tour must have a name"),
        is_text("A tour name must be text"),
        max_length(NAME_MAX_LENGTH, f"A tour name must have at most {NAME_MAX_LENGTH} characters"),
        min_length(NAME_MIN_LENGTH, f"A tour name must have at least {NAME_MIN_LENGTH} characters"),
        letters_and_spaces("A tour name must only contain letters and spaces"),
    ],
    "duration": [
        required("A tour must have a duration"),
        is_number("Duration must be a number"),
    ],
    "max_group_size": [
        required("A tour must have a group size"),
        is_number("Max group size must be a number"),
    ],
    "difficulty": [
        required("A tour must have a difficulty"),
        one_of([d.value for d in Difficulty], "Difficulty is either: easy, medium, difficult"),
    ],
    "price": [
        required("A tour must have a price"),
        is_number("Price must be a number"),
    ],
    "price_discount": [
        is_number("Price discount must be a number"),
        below_field("price", "Discount price ({value}) should be below regular price"),
    ],
    "ratings_average": [
        is_number("Rating must be a number"),
        between(RATING_MIN, RATING_MAX, "Rating must be between 1.0 and 5.0"),
    ],
    "ratings_quantity": [
        is_number("Ratings quantity must be a number"),
    ],
    "summary": [
        required("A tour must have a summary"),
        is_text("Summary must be text"),
    ],
    "description": [
        is_text("Description must be text"),
    ],
    "image_cover": [
        required("A tour must have a cover image"),
        is_text("Cover image must be text"),
    ],
    "images": [
        text_list("Images must be a list of file names"),
    ],
    "secret_tour": [
        is_boolean("Secret tour must be true or false"),
    ],
}

TRIMMED_FIELDS = ("name", "summary", "description")


def collect_errors(record: Mapping[str, Any], rules: Mapping[str, Sequence[Rule]] = TOUR_RULES) -> dict[str, str]:
    """Evaluate every field's rules and return the first failure per field."""
    errors: dict[str, str] = {}
    for field, field_rules in rules.items():
        value = record.get(field)
        for rule in field_rules:
            if rule.violated_by(value, record):
                errors[field] = rule.render(value)
                break
    return errors


def trim_text(record: Mapping[str, Any]) -> dict[str, Any]:
    """Return a copy of the record with the trimmed text fields stripped."""
    trimmed = dict(record)
    for field in TRIMMED_FIELDS:
        if isinstance(trimmed.get(field), str):
            trimmed[field] = trimmed[field].strip()
    return trimmed


def validate_tour(record: Mapping[str, Any]) -> dict[str, Any]:
    """
    Gate a candidate tour.

    Args:
        record: Candidate values keyed by model attribute name

    Returns:
        The normalized record (text trimmed)

    Raises:
        ValidationError: With one message per offending field, keyed by the
            camelCase API field name
    """
    normalized = trim_text(record)
    errors = collect_errors(normalized)
    if errors:
        raise ValidationError(errors={to_camel(field): message for field, message in errors.items()})
    return normalized


def round_rating(value: float) -> float:
    """Round to one decimal, halves away from zero."""
    return math.floor(value * 10 + 0.5) / 10
