"""
Construction of tour read and aggregation statements.

Every tour query is built here so that the secret-tour exclusion is always
conjoined onto it. Callers that need secret tours say so with
``include_secret=True``, or by filtering on ``secretTour`` themselves.
"""

import re
from datetime import datetime
from typing import Any, Iterable

from sqlalchemy import Boolean, ColumnElement, DateTime, Float, Integer, Select, select
from sqlalchemy.orm import InstrumentedAttribute

from ..core.exceptions import ValidationError
from ..models.tour import Tour

SECRET_FILTER = Tour.secret_tour.is_not(True)

# API field name -> mapped column, for filtering and sorting
QUERYABLE_FIELDS: dict[str, InstrumentedAttribute] = {
    "name": Tour.name,
    "slug": Tour.slug,
    "duration": Tour.duration,
    "maxGroupSize": Tour.max_group_size,
    "difficulty": Tour.difficulty,
    "price": Tour.price,
    "priceDiscount": Tour.price_discount,
    "ratingsAverage": Tour.ratings_average,
    "ratingsQuantity": Tour.ratings_quantity,
    "secretTour": Tour.secret_tour,
    "createdAt": Tour.created_at,
}

DEFAULT_SORT = "-createdAt"

RESERVED_PARAMS = {"sort", "fields", "page", "limit"}

_FILTER_KEY = re.compile(r"^(?P<field>\w+)(?:\[(?P<op>gte|gt|lte|lt)\])?$")

_OPERATORS = {
    None: lambda column, value: column == value,
    "gte": lambda column, value: column >= value,
    "gt": lambda column, value: column > value,
    "lte": lambda column, value: column <= value,
    "lt": lambda column, value: column < value,
}


def scope_visible(stmt: Select, include_secret: bool = False) -> Select:
    """Conjoin the secret-tour exclusion onto a statement over tours."""
    if include_secret:
        return stmt
    return stmt.where(SECRET_FILTER)


def select_tours(*criteria: ColumnElement[bool], include_secret: bool = False) -> Select:
    """Build a find-style select of Tour entities."""
    return scope_visible(select(Tour), include_secret=include_secret).where(*criteria)


def aggregate_tours(*columns: Any, include_secret: bool = False) -> Select:
    """
    Start an aggregation over tours.

    The secret-tour exclusion is the first stage; callers add joins,
    further filters and grouping on top of it.
    """
    return scope_visible(select(*columns).select_from(Tour), include_secret=include_secret)


def _coerce(column: InstrumentedAttribute, field: str, raw: str) -> Any:
    column_type = column.type
    try:
        if isinstance(column_type, Boolean):
            lowered = raw.lower()
            if lowered not in ("true", "false"):
                raise ValueError(raw)
            return lowered == "true"
        if isinstance(column_type, Integer):
            return int(raw)
        if isinstance(column_type, Float):
            return float(raw)
        if isinstance(column_type, DateTime):
            return datetime.fromisoformat(raw)
    except ValueError:
        raise ValidationError(errors={field: f"Invalid filter value '{raw}'"})
    return raw


def build_filters(params: Iterable[tuple[str, str]]) -> tuple[list[ColumnElement[bool]], bool]:
    """
    Translate query-string pairs such as ``price[lte]=500`` into criteria.

    Returns:
        The criteria, and whether the caller scoped ``secretTour`` explicitly
    """
    criteria: list[ColumnElement[bool]] = []
    scoped_secret = False
    for key, raw in params:
        if key in RESERVED_PARAMS:
            continue
        match = _FILTER_KEY.match(key)
        if not match or match.group("field") not in QUERYABLE_FIELDS:
            raise ValidationError(errors={key: f"Unknown filter field '{key}'"})
        field = match.group("field")
        column = QUERYABLE_FIELDS[field]
        value = _coerce(column, field, raw)
        criteria.append(_OPERATORS[match.group("op")](column, value))
        if field == "secretTour":
            scoped_secret = True
    return criteria, scoped_secret


def build_ordering(sort: str | None) -> list[ColumnElement[Any]]:
    """Translate ``-ratingsAverage,price`` into ORDER BY clauses."""
    clauses = []
    for token in (sort or DEFAULT_SORT).split(","):
        token = token.strip()
        if not token:
            continue
        descending = token.startswith("-")
        field = token.lstrip("-")
        if field not in QUERYABLE_FIELDS:
            raise ValidationError(errors={"sort": f"Cannot sort by '{field}'"})
        column = QUERYABLE_FIELDS[field]
        clauses.append(column.desc() if descending else column.asc())
    return clauses


def list_statement(
    params: Iterable[tuple[str, str]] = (),
    sort: str | None = None,
    include_secret: bool = False,
    limit: int | None = None,
) -> Select:
    """Build the statement behind the tour listing."""
    criteria, scoped_secret = build_filters(params)
    stmt = select_tours(*criteria, include_secret=include_secret or scoped_secret)
    stmt = stmt.order_by(*build_ordering(sort), Tour.id)
    if limit is not None:
        stmt = stmt.limit(limit)
    return stmt

