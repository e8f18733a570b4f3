"""Tour service for business logic operations."""

import logging
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional, Sequence
from uuid import UUID

from sqlalchemy import delete, extract, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.exc import IntegrityError

from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..core.observability import metrics_collector
from ..models.tour import Tour, TourStartDate
from ..schemas.tour import MonthlyPlanEntry, TourStats
from .tour_query import aggregate_tours, list_statement, select_tours

logger = logging.getLogger(__name__)

TOP_CHEAP_SORT = "-ratingsAverage,price"
TOP_CHEAP_LIMIT = 5
STATS_MIN_RATING = 4.5


def _build_tour(values: Mapping[str, Any]) -> Tour:
    values = dict(values)
    start_dates = values.pop("start_dates", None) or []
    tour = Tour(**values)
    tour.start_dates = list(start_dates)
    return tour


class TourService:
    """Service for tour-related operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _commit(self, action: str, context: dict[str, Any]) -> None:
        """Commit, rolling back and translating failures of the write gate and unique index."""
        try:
            await self.db.commit()
        except ValidationError as e:
            await self.db.rollback()
            metrics_collector.record_validation_failure(e.errors)
            raise
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning(
                f"Tour {action} failed due to integrity constraint",
                extra={**context, "error": str(e.orig)}
            )
            name = context.get("tour_name")
            raise ConflictError(
                detail=f"Tour with name '{name}' already exists" if name else "Tour name must be unique",
                conflicting_resource={"name": name} if name else None
            )

    async def create_tour(self, values: Mapping[str, Any]) -> Tour:
        """
        Create a new tour.

        Args:
            values: Candidate values keyed by model attribute

        Returns:
            Created tour entity

        Raises:
            ValidationError: If the candidate violates a field rule
            ConflictError: If a tour with the same name already exists
        """
        name = values.get("name")
        if isinstance(name, str):
            existing_tour = await self.get_tour_by_name(name.strip())
            if existing_tour:
                logger.warning(
                    "Tour creation failed - name already exists",
                    extra={"tour_name": name, "existing_tour_id": str(existing_tour.id)}
                )
                raise ConflictError(
                    detail=f"Tour with name '{existing_tour.name}' already exists",
                    conflicting_resource={
                        "id": str(existing_tour.id),
                        "name": existing_tour.name,
                        "slug": existing_tour.slug
                    }
                )

        tour = _build_tour(values)
        self.db.add(tour)
        await self._commit("creation", {"tour_name": name})

        metrics_collector.record_tours_created()
        logger.info(
            "Tour created successfully",
            extra={
                "tour_id": str(tour.id),
                "slug": tour.slug,
                "tour_name": tour.name
            }
        )
        return tour

    async def get_tour(self, tour_id: UUID, include_secret: bool = False) -> Optional[Tour]:
        """
        Get tour by ID.

        Returns:
            Tour if found and visible, None otherwise
        """
        result = await self.db.execute(select_tours(Tour.id == tour_id, include_secret=include_secret))
        return result.scalar_one_or_none()

    async def get_tour_or_raise(self, tour_id: UUID) -> Tour:
        """
        Get tour by ID or raise NotFoundError.

        Raises:
            NotFoundError: If tour not found or secret
        """
        tour = await self.get_tour(tour_id)
        if not tour:
            logger.warning(
                "Tour not found",
                extra={"tour_id": str(tour_id)}
            )
            raise NotFoundError(
                resource_type="tour",
                resource_id=str(tour_id)
            )
        return tour

    async def get_tour_by_name(self, name: str) -> Optional[Tour]:
        """Look a tour up by name; names are unique across secret tours too."""
        result = await self.db.execute(select_tours(Tour.name == name, include_secret=True))
        return result.scalar_one_or_none()

    async def list_tours(
        self,
        filters: Iterable[tuple[str, str]] = (),
        sort: Optional[str] = None,
        include_secret: bool = False,
        limit: Optional[int] = None,
    ) -> list[Tour]:
        """
        List visible tours.

        Args:
            filters: ``(field, value)`` pairs, field optionally suffixed by
                ``[gte]``, ``[gt]``, ``[lte]`` or ``[lt]``
            sort: Comma-separated fields, ``-`` prefix for descending
            include_secret: Also return secret tours
            limit: Maximum number of tours

        Returns:
            Matching tours
        """
        stmt = list_statement(filters, sort=sort, include_secret=include_secret, limit=limit)
        result = await self.db.execute(stmt)
        return list(result.scalars())

    async def get_top_cheap_tours(self) -> list[Tour]:
        """Best rated, then cheapest, five tours."""
        return await self.list_tours(sort=TOP_CHEAP_SORT, limit=TOP_CHEAP_LIMIT)

    async def update_tour(self, tour_id: UUID, changes: Mapping[str, Any]) -> Tour:
        """
        Find a visible tour and apply partial changes.

        The write hooks validate the merged record and re-derive the slug.

        Raises:
            NotFoundError: If tour not found or secret
            ValidationError: If the merged record violates a field rule
            ConflictError: If the new name is taken
        """
        tour = await self.get_tour_or_raise(tour_id)

        changes = dict(changes)
        if "start_dates" in changes:
            tour.start_dates = list(changes.pop("start_dates") or [])
        for attribute, value in changes.items():
            setattr(tour, attribute, value)

        await self._commit("update", {"tour_id": str(tour_id), "tour_name": changes.get("name")})

        logger.info(
            "Tour updated successfully",
            extra={"tour_id": str(tour.id), "fields": sorted(changes)}
        )
        return tour

    async def delete_tour(self, tour_id: UUID) -> None:
        """
        Find a visible tour and delete it.

        Raises:
            NotFoundError: If tour not found or secret
        """
        tour = await self.get_tour_or_raise(tour_id)
        await self.db.delete(tour)
        await self.db.commit()

        metrics_collector.record_tours_deleted()
        logger.info("Tour deleted successfully", extra={"tour_id": str(tour_id)})

    async def import_tours(self, records: Sequence[Mapping[str, Any]]) -> list[Tour]:
        """
        Insert many tours in one transaction; nothing is written if any fails.

        Raises:
            ValidationError: If any record violates a field rule
            ConflictError: If any name is duplicated
        """
        tours = [_build_tour(values) for values in records]
        self.db.add_all(tours)
        await self._commit("import", {"count": len(tours)})

        metrics_collector.record_tours_created(len(tours), source="import")
        logger.info("Tours imported successfully", extra={"count": len(tours)})
        return tours

    async def delete_all_tours(self) -> int:
        """
        Delete every tour, secret ones included.

        Returns:
            Number of tours removed; zero on an empty collection
        """
        await self.db.execute(delete(TourStartDate))
        result = await self.db.execute(delete(Tour))
        await self.db.commit()

        deleted = result.rowcount or 0
        metrics_collector.record_tours_deleted(deleted)
        logger.info("All tours deleted", extra={"count": deleted})
        return deleted

    async def get_tour_stats(self) -> list[TourStats]:
        """Aggregate well-rated tours per difficulty, cheapest average first."""
        difficulty = func.upper(Tour.difficulty)
        avg_price = func.avg(Tour.price)
        stmt = (
            aggregate_tours(
                difficulty.label("difficulty"),
                func.count(Tour.id).label("num_tours"),
                func.sum(Tour.ratings_quantity).label("num_ratings"),
                func.avg(Tour.ratings_average).label("avg_rating"),
                avg_price.label("avg_price"),
                func.min(Tour.price).label("min_price"),
                func.max(Tour.price).label("max_price"),
            )
            .where(Tour.ratings_average >= STATS_MIN_RATING)
            .group_by(difficulty)
            .order_by(avg_price)
        )
        result = await self.db.execute(stmt)
        return [TourStats.model_validate(dict(row._mapping)) for row in result]

    async def get_monthly_plan(self, year: int) -> list[MonthlyPlanEntry]:
        """
        Count tour starts per month of ``year``, busiest month first.

        Each start date of a tour counts once.
        """
        month = extract("month", TourStartDate.starts_at)
        stmt = (
            aggregate_tours(month.label("month"), Tour.name)
            .join(Tour.start_date_rows)
            .where(
                TourStartDate.starts_at >= datetime(year, 1, 1, tzinfo=timezone.utc),
                TourStartDate.starts_at < datetime(year + 1, 1, 1, tzinfo=timezone.utc),
            )
            .order_by(month, TourStartDate.starts_at)
        )
        result = await self.db.execute(stmt)

        tours_by_month: dict[int, list[str]] = defaultdict(list)
        for row in result:
            tours_by_month[int(row.month)].append(row.name)

        plan = [
            MonthlyPlanEntry(month=m, num_tour_starts=len(names), tours=names)
            for m, names in tours_by_month.items()
        ]
        plan.sort(key=lambda entry: (-entry.num_tour_starts, entry.month))
        return plan
