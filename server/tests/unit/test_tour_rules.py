"""Unit tests for the tour write rules."""

import pytest

from tours_api.core.exceptions import ValidationError
from tours_api.models.tour_rules import collect_errors, round_rating, validate_tour


def valid_record(**overrides):
    record = {
        "name": "The Park Camper",
        "duration": 10,
        "max_group_size": 15,
        "difficulty": "medium",
        "price": 1497,
        "summary": "Breathing in Nature",
        "image_cover": "tour-5-cover.jpg",
    }
    record.update(overrides)
    return record


def test_valid_record_has_no_errors():
    """A complete, valid record passes every rule."""
    assert collect_errors(valid_record()) == {}


@pytest.mark.parametrize(
    "field",
    ["name", "duration", "max_group_size", "difficulty", "price", "summary", "image_cover"],
)
def test_missing_required_field(field):
    """Each required field is reported when absent."""
    record = valid_record()
    del record[field]

    errors = collect_errors(record)

    assert list(errors) == [field]


def test_one_message_per_field():
    """Several violations on different fields are all reported, one message each."""
    errors = collect_errors(valid_record(name="Short", difficulty="extreme", ratings_average=7))

    assert errors == {
        "name": "A tour name must have at least 10 characters",
        "difficulty": "Difficulty is either: easy, medium, difficult",
        "ratings_average": "Rating must be between 1.0 and 5.0",
    }


@pytest.mark.parametrize(
    "name",
    ["A", "Too Short", "A" * 41, "Tour Number 9 Trip", "The Forest-Hiker", "Hike & Bike Trip"],
)
def test_invalid_names_rejected(name):
    """Names outside 10-40 characters or with non-letters are rejected."""
    assert "name" in collect_errors(valid_record(name=name))


@pytest.mark.parametrize("name", ["The Forest Hiker", "Ça Va Été Montagne", "A" * 40, "Ab" * 5])
def test_valid_names_accepted(name):
    """Letters from any alphabet and spaces are allowed."""
    assert "name" not in collect_errors(valid_record(name=name))


def test_price_discount_must_be_below_price():
    """The discount rule compares against the price of the same record."""
    assert collect_errors(valid_record(price=100, price_discount=150)) == {
        "price_discount": "Discount price (150) should be below regular price"
    }
    assert "price_discount" in collect_errors(valid_record(price=100, price_discount=100))
    assert collect_errors(valid_record(price=100, price_discount=50)) == {}


def test_price_discount_without_price_reports_price_only():
    """A missing price is not also blamed on the discount."""
    record = valid_record(price_discount=50)
    del record["price"]

    assert list(collect_errors(record)) == ["price"]


@pytest.mark.parametrize("rating", [0.99, 5.01, -1, 10])
def test_rating_outside_range_rejected(rating):
    """Ratings must stay within 1 and 5."""
    assert "ratings_average" in collect_errors(valid_record(ratings_average=rating))


def test_boolean_is_not_a_number():
    """True is not accepted as a numeric value."""
    assert "duration" in collect_errors(valid_record(duration=True))


def test_validate_tour_trims_and_uses_api_field_names():
    """Errors are keyed by camelCase names and text fields are trimmed first."""
    normalized = validate_tour(valid_record(name="  The Park Camper  ", summary=" Nature "))
    assert normalized["name"] == "The Park Camper"
    assert normalized["summary"] == "Nature"

    with pytest.raises(ValidationError) as exc_info:
        validate_tour(valid_record(max_group_size=None, image_cover=""))

    assert exc_info.value.status_code == 400
    assert set(exc_info.value.errors) == {"maxGroupSize", "imageCover"}


def test_whitespace_only_name_is_missing():
    """A name of blanks trims to empty and counts as missing."""
    with pytest.raises(ValidationError) as exc_info:
        validate_tour(valid_record(name="           "))

    assert exc_info.value.errors == {"name": "A tour must have a name"}


@pytest.mark.parametrize(
    "value,expected",
    [(4.666, 4.7), (4.5, 4.5), (4.44, 4.4), (1, 1.0), (4.75, 4.8)],
)
def test_round_rating(value, expected):
    """Ratings keep one decimal."""
    assert round_rating(value) == expected


@pytest.mark.parametrize("field", ["price", "duration", "ratings_average", "price_discount"])
@pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf")])
def test_non_finite_numbers_rejected(field, value):
    """NaN and infinities are not numbers a tour can store."""
    assert field in collect_errors(valid_record(**{field: value}))


def test_infinite_price_does_not_disable_discount_check():
    errors = collect_errors(valid_record(price=float("inf"), price_discount=1e308))

    assert errors == {"price": "Price must be a number"}
