"""Unit tests for tour statement construction."""

import pytest

from tours_api.core.exceptions import ValidationError
from tours_api.models.tour import Tour
from tours_api.services.tour_query import (
    aggregate_tours,
    build_filters,
    build_ordering,
    list_statement,
    select_tours,
)

SECRET_CLAUSE = "tours.secret_tour IS NOT"


def test_select_tours_excludes_secret_tours():
    """The exclusion is conjoined with the caller's criteria."""
    sql = str(select_tours(Tour.price < 500))

    assert SECRET_CLAUSE in sql
    assert " AND " in sql


def test_include_secret_opts_out():
    assert SECRET_CLAUSE not in str(select_tours(include_secret=True))
    assert SECRET_CLAUSE not in str(aggregate_tours(Tour.name, include_secret=True))


def test_aggregate_tours_excludes_secret_tours():
    assert SECRET_CLAUSE in str(aggregate_tours(Tour.difficulty))


def test_explicit_secret_filter_replaces_exclusion():
    """Filtering on secretTour lets the caller see secret tours."""
    sql = str(list_statement([("secretTour", "true")]))

    assert SECRET_CLAUSE not in sql
    assert "tours.secret_tour =" in sql


def test_build_filters_operators():
    criteria, scoped_secret = build_filters(
        [("price[lte]", "500"), ("duration[gt]", "3"), ("difficulty", "easy"), ("sort", "price")]
    )

    assert len(criteria) == 3
    assert scoped_secret is False
    compiled = criteria[0].compile()
    assert str(compiled) == "tours.price <= :price_1"
    assert compiled.params == {"price_1": 500.0}


@pytest.mark.parametrize(
    "params",
    [
        [("colour", "red")],
        [("price[ne]", "5")],
        [("duration", "five")],
        [("secretTour", "maybe")],
    ],
)
def test_build_filters_rejects_bad_input(params):
    with pytest.raises(ValidationError):
        build_filters(params)


def test_build_ordering():
    clauses = build_ordering("-ratingsAverage, price")

    assert [str(c) for c in clauses] == ["tours.ratings_average DESC", "tours.price ASC"]
    assert [str(c) for c in build_ordering(None)] == ["tours.created_at DESC"]


def test_build_ordering_rejects_unknown_field():
    with pytest.raises(ValidationError) as exc_info:
        build_ordering("-popularity")

    assert exc_info.value.errors == {"sort": "Cannot sort by 'popularity'"}
