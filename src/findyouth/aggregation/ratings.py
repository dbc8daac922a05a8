"""Organization rating aggregation.

One precision policy everywhere: the mean is clamped to [1, 5] and
rounded half-up to one decimal place. List and detail views therefore
always show the same number for the same organization.
"""

from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable

from findyouth.models.domain import RatingSummary

DEFAULT_RATING = 4
MIN_RATING = 1
MAX_RATING = 5


def average_rating(ratings: Iterable[int]) -> float:
    """Compute the displayed rating for one organization.

    Args:
        ratings: Individual ratings (1-5).

    Returns:
        Mean rounded to one decimal, or DEFAULT_RATING when empty.

    Examples:
        >>> average_rating([])
        4.0
        >>> average_rating([5, 3])
        4.0
        >>> average_rating([5, 4])
        4.5
    """
    values = list(ratings)
    if not values:
        return float(DEFAULT_RATING)

    mean = Decimal(sum(values)) / Decimal(len(values))
    mean = min(max(mean, Decimal(MIN_RATING)), Decimal(MAX_RATING))
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def summarize_ratings(ratings: Iterable[int]) -> RatingSummary:
    """Compute average and count for one organization."""
    values = list(ratings)
    return RatingSummary(average=average_rating(values), count=len(values))
