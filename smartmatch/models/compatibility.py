"""
Static Compatibility Measures

Pairwise measures shared by pattern mining and scoring. All return values in [0, 1].
"""

from collections.abc import Collection
from typing import Optional

from smartmatch.models.entities import Profile


def industry_overlap(a: Collection[str], b: Collection[str]) -> float:
    """Shared industries relative to the larger of the two sets.

    0 for disjoint (or empty) sets, 1 for identical non-empty sets.
    """
    if not a or not b:
        return 0.0
    common = set(a) & set(b)
    return len(common) / max(len(set(a)), len(set(b)))


def interval_alignment(
    a: Optional[tuple[float, float]],
    b: Optional[tuple[float, float]],
) -> float:
    """Closeness of two investment intervals.

    1.0 when the intervals overlap, otherwise the ratio of the nearer endpoints
    (the lower interval's top over the upper interval's bottom).
    """
    if a is None or b is None:
        return 0.0

    low, high = sorted((a, b))
    if low[1] >= high[0]:
        return 1.0
    if low[1] <= 0 or high[0] <= 0:
        return 0.0
    return low[1] / high[0]


def investment_alignment(a: Profile, b: Profile) -> float:
    """How well one party's ask matches the other's capacity."""
    return interval_alignment(a.investment_interval, b.investment_interval)


def experience_gap(a: Profile, b: Profile) -> Optional[float]:
    """Absolute difference in years of experience, None when either is unknown."""
    if a.years_experience is None or b.years_experience is None:
        return None
    return abs(a.years_experience - b.years_experience)


def experience_proximity(gap: float, scale_years: float = 10.0) -> float:
    """Invert an experience gap so that smaller gaps score higher."""
    if scale_years <= 0:
        return 1.0 if gap == 0 else 0.0
    return max(0.0, 1.0 - gap / scale_years)


def hour_overlap(a: Collection[int], b: Collection[int]) -> float:
    """Share of ``a`` covered by ``b``."""
    if not a or not b:
        return 0.0
    return len(set(a) & set(b)) / len(set(a))
