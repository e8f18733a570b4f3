"""Models module exporting all database models."""

from .tour import Tour, TourStartDate
from .tour_rules import Difficulty

__all__ = [
    "Tour",
    "TourStartDate",
    "Difficulty",
]
