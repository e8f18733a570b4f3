"""Tour router for tour catalog operations."""

import logging
from typing import Any, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request, Response, status
from fastapi.responses import JSONResponse
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.database import get_db
from ..core.exceptions import ProblemDetailsException, ValidationError
from ..models.tour import Tour as TourModel
from ..schemas.common import PROBLEM_RESPONSES
from ..schemas.tour import HIDDEN_BY_DEFAULT, Tour, TourWrite
from ..services.tour_service import TourService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/tours", tags=["tours"], responses=PROBLEM_RESPONSES)


def _convert_tour_to_schema(tour: TourModel) -> Tour:
    """Convert tour model to schema, including the virtual fields."""
    return Tour(
        id=str(tour.id),
        name=tour.name,
        slug=tour.slug,
        duration=tour.duration,
        max_group_size=tour.max_group_size,
        difficulty=tour.difficulty,
        price=tour.price,
        price_discount=tour.price_discount,
        ratings_average=tour.ratings_average,
        ratings_quantity=tour.ratings_quantity,
        summary=tour.summary,
        description=tour.description,
        image_cover=tour.image_cover,
        images=list(tour.images or []),
        start_dates=list(tour.start_dates),
        secret_tour=tour.secret_tour,
        created_at=tour.created_at,
        duration_weeks=tour.duration_weeks
    )


def _project(tour: TourModel, fields: Optional[str] = None) -> dict[str, Any]:
    """
    Serialize a tour with camelCase keys.

    Without ``fields``, the fields hidden by default are dropped; with it,
    only the named fields (and ``id``) are kept.
    """
    data = _convert_tour_to_schema(tour).model_dump(by_alias=True, mode="json")
    if not fields:
        return {key: value for key, value in data.items() if key not in HIDDEN_BY_DEFAULT}

    requested = {name.strip() for name in fields.split(",") if name.strip()}
    unknown = requested - data.keys()
    if unknown:
        raise ValidationError(errors={"fields": f"Unknown fields: {', '.join(sorted(unknown))}"})
    return {key: value for key, value in data.items() if key in requested or key == "id"}


def _tours_payload(tours: list[TourModel], fields: Optional[str] = None) -> dict[str, Any]:
    return {
        "status": "success",
        "results": len(tours),
        "data": {"tours": [_project(tour, fields) for tour in tours]},
    }


@router.get("")
async def list_tours(
    request: Request,
    sort: Optional[str] = Query(None, description="Comma-separated fields, '-' prefix for descending"),
    fields: Optional[str] = Query(None, description="Comma-separated fields to return"),
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """
    List tours.

    Any other query parameter filters on a tour field, for example
    ``difficulty=easy`` or ``price[lte]=500``. Secret tours are only
    returned when ``secretTour`` is filtered on explicitly.
    """
    tours = await TourService(db).list_tours(request.query_params.multi_items(), sort=sort)
    return JSONResponse(status_code=200, content=_tours_payload(tours, fields))


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_tour(
    request: TourWrite,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """Create a new tour."""
    tour_service = TourService(db)

    try:
        tour = await tour_service.create_tour(request.to_model_values())

        return JSONResponse(
            status_code=201,
            content={"status": "success", "data": {"tour": _project(tour)}}
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in tour creation",
            extra={"tour_name": request.name, "error": str(e)},
            exc_info=True
        )
        raise HTTPException(
            status_code=500,
            detail="Internal server error"
        )


@router.get("/top-5-cheap")
async def top_cheap_tours(
    fields: Optional[str] = Query(None, description="Comma-separated fields to return"),
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """The five best rated tours, cheapest first among equal ratings."""
    tours = await TourService(db).get_top_cheap_tours()
    return JSONResponse(status_code=200, content=_tours_payload(tours, fields))


@router.get("/tour-stats")
async def tour_stats(db: AsyncSession = Depends(get_db)) -> JSONResponse:
    """Statistics per difficulty over tours rated 4.5 and above."""
    stats = await TourService(db).get_tour_stats()
    return JSONResponse(
        status_code=200,
        content={
            "status": "success",
            "data": {"stats": [entry.model_dump(by_alias=True) for entry in stats]},
        }
    )


@router.get("/monthly-plan/{year}")
async def monthly_plan(
    year: int = Path(..., ge=1, le=9998),
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """Tour starts per month of the given year, busiest month first."""
    plan = await TourService(db).get_monthly_plan(year)
    return JSONResponse(
        status_code=200,
        content={
            "status": "success",
            "results": len(plan),
            "data": {"plan": [entry.model_dump(by_alias=True) for entry in plan]},
        }
    )


@router.get("/{tour_id}")
async def get_tour(
    tour_id: UUID,
    fields: Optional[str] = Query(None, description="Comma-separated fields to return"),
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """Get one visible tour."""
    tour = await TourService(db).get_tour_or_raise(tour_id)
    return JSONResponse(
        status_code=200,
        content={"status": "success", "data": {"tour": _project(tour, fields)}}
    )


@router.patch("/{tour_id}")
async def update_tour(
    tour_id: UUID,
    request: TourWrite,
    db: AsyncSession = Depends(get_db)
) -> JSONResponse:
    """Apply a partial update; the merged tour is validated again."""
    tour_service = TourService(db)

    try:
        tour = await tour_service.update_tour(tour_id, request.to_model_values(partial=True))

        return JSONResponse(
            status_code=200,
            content={"status": "success", "data": {"tour": _project(tour)}}
        )

    except ProblemDetailsException:
        raise

    except Exception as e:
        logger.error(
            "Unexpected error in tour update",
            extra={"tour_id": str(tour_id), "error": str(e)},
            exc_info=True
        )
        raise HTTPException(
            status_code=500,
            detail="Internal server error"
        )


@router.delete("/{tour_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tour(
    tour_id: UUID,
    db: AsyncSession = Depends(get_db)
) -> Response:
    """Delete one visible tour."""
    await TourService(db).delete_tour(tour_id)
    return Response(status_code=204)
