"""Tour-related Pydantic schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    """Base schema exposing camelCase names on the wire."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class TourWrite(CamelModel):
    """
    Request schema for creating or updating a tour.

    Only types are enforced here; required fields and value rules are
    applied by the model's write hooks so that every write path reports
    them the same way.
    """

    model_config = ConfigDict(extra="ignore")

    name: str | None = Field(None, description="Tour name, 10-40 letters and spaces")
    duration: int | None = Field(None, description="Duration in days")
    max_group_size: int | None = Field(None, description="Maximum group size")
    difficulty: str | None = Field(None, description="easy, medium or difficult")
    price: float | None = Field(None, description="Regular price")
    price_discount: float | None = Field(None, description="Discounted price, below the regular price")
    ratings_average: float | None = Field(None, description="Average rating between 1 and 5")
    ratings_quantity: int | None = Field(None, description="Number of ratings")
    summary: str | None = Field(None, description="Short summary")
    description: str | None = Field(None, description="Long description")
    image_cover: str | None = Field(None, description="Cover image file name")
    images: list[str] | None = Field(None, description="Gallery image file names")
    start_dates: list[datetime] | None = Field(None, description="Scheduled start dates (ISO 8601)")
    secret_tour: bool | None = Field(None, description="Hide the tour from default listings")

    def to_model_values(self, partial: bool = False) -> dict[str, Any]:
        """Values keyed by model attribute; unset fields are dropped."""
        return self.model_dump(exclude_unset=True) if partial else self.model_dump(exclude_none=True)


class Tour(CamelModel):
    """Tour response schema."""

    id: str = Field(..., description="Unique tour ID")
    name: str
    slug: str
    duration: int
    max_group_size: int
    difficulty: str
    price: float
    price_discount: float | None = None
    ratings_average: float
    ratings_quantity: int
    summary: str
    description: str | None = None
    image_cover: str
    images: list[str] = Field(default_factory=list)
    start_dates: list[datetime] = Field(default_factory=list)
    secret_tour: bool
    created_at: datetime
    duration_weeks: float = Field(..., description="Virtual field: duration / 7")


# Returned unless explicitly requested through ``fields``
HIDDEN_BY_DEFAULT = {"createdAt"}


class TourStats(CamelModel):
    """Per-difficulty statistics over well-rated tours."""

    difficulty: str
    num_tours: int
    num_ratings: int
    avg_rating: float
    avg_price: float
    min_price: float
    max_price: float


class MonthlyPlanEntry(CamelModel):
    """Tour starts scheduled in one month."""

    month: int = Field(..., ge=1, le=12)
    num_tour_starts: int
    tours: list[str]
