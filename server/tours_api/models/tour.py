"""Tour model definition and its write hooks."""

from datetime import datetime, timezone
from uuid import UUID, uuid4

from slugify import slugify
from sqlalchemy import JSON, Boolean, DateTime, Float, ForeignKey, Integer, String, Text, Uuid, event
from sqlalchemy.ext.associationproxy import AssociationProxy, association_proxy
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from ..core.database import Base
from .tour_rules import DEFAULT_RATINGS_AVERAGE, TOUR_RULES, round_rating, validate_tour


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


# Applied on every save when the attribute is unset or cleared
FIELD_DEFAULTS = {
    "ratings_average": lambda: DEFAULT_RATINGS_AVERAGE,
    "ratings_quantity": lambda: 0,
    "images": list,
    "secret_tour": lambda: False,
}


class TourStartDate(Base):
    """One scheduled start of a tour; the ordered rows form ``Tour.start_dates``."""

    __tablename__ = "tour_start_dates"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    tour_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("tours.id", ondelete="CASCADE"),
        nullable=False,
        index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    starts_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, index=True)

    tour: Mapped["Tour"] = relationship("Tour", back_populates="start_date_rows")

    @validates("starts_at")
    def validate_starts_at(self, key: str, value: datetime) -> datetime:
        """Store start dates in UTC; naive values are taken as UTC already."""
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def __repr__(self) -> str:
        return f"<TourStartDate(tour_id={self.tour_id}, position={self.position}, starts_at={self.starts_at})>"


class Tour(Base):
    """Tour entity representing a bookable travel package."""

    __tablename__ = "tours"

    # Primary key
    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    # Tour information
    name: Mapped[str] = mapped_column(String(40), nullable=False, unique=True, index=True)
    slug: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    duration: Mapped[int] = mapped_column(Integer, nullable=False)
    max_group_size: Mapped[int] = mapped_column(Integer, nullable=False)
    difficulty: Mapped[str] = mapped_column(String(20), nullable=False)

    # Pricing and ratings
    price: Mapped[float] = mapped_column(Float, nullable=False)
    price_discount: Mapped[float | None] = mapped_column(Float, nullable=True)
    ratings_average: Mapped[float] = mapped_column(Float, nullable=False, default=DEFAULT_RATINGS_AVERAGE)
    ratings_quantity: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Content
    summary: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_cover: Mapped[str] = mapped_column(String(255), nullable=False)
    images: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)

    secret_tour: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)

    # Timestamps
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_utcnow)

    # Relationships
    start_date_rows: Mapped[list[TourStartDate]] = relationship(
        TourStartDate,
        back_populates="tour",
        order_by=TourStartDate.position,
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
        lazy="selectin"
    )

    start_dates: AssociationProxy[list[datetime]] = association_proxy(
        "start_date_rows",
        "starts_at",
        creator=lambda starts_at: TourStartDate(starts_at=starts_at)
    )

    @property
    def duration_weeks(self) -> float | None:
        """Virtual field: the duration expressed in weeks."""
        if self.duration is None:
            return None
        return self.duration / 7

    def __repr__(self) -> str:
        return f"<Tour(id={self.id}, name='{self.name}', slug='{self.slug}')>"


def _prepare_for_save(target: Tour) -> None:
    record = {field: getattr(target, field) for field in TOUR_RULES}
    for field, default in FIELD_DEFAULTS.items():
        if record[field] is None:
            record[field] = default()

    record = validate_tour(record)

    for field, value in record.items():
        setattr(target, field, value)
    target.slug = slugify(target.name)
    target.ratings_average = round_rating(target.ratings_average)


@event.listens_for(Tour, "before_insert")
def tour_before_insert(mapper, connection, target: Tour) -> None:
    """Gate new tours and derive slug and rounded rating."""
    _prepare_for_save(target)


@event.listens_for(Tour, "before_update")
def tour_before_update(mapper, connection, target: Tour) -> None:
    """Gate merged updates and re-derive slug and rounded rating."""
    _prepare_for_save(target)
