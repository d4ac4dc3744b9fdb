"""
Contextual Boosts

Time, activity and connection driven adjustments applied after base scoring.
"""

import logging
from datetime import datetime, timedelta

from pydantic import BaseModel, ConfigDict, Field

from smartmatch.models.entities import (
    Candidate,
    InteractionEvent,
    Timestamp,
    day_of_week,
    to_naive_utc,
)
from smartmatch.models.scoring import MAX_SCORE, clamp_score

logger = logging.getLogger(__name__)


class ContextSnapshot(BaseModel):
    """Recent interactions around the requesting user, pinned to a reference time."""
    model_config = ConfigDict(frozen=True)

    now: Timestamp
    interactions: tuple[InteractionEvent, ...] = ()
    window_days: int = 30

    @property
    def since(self) -> datetime:
        return self.now - timedelta(days=self.window_days)

    def active_since(self, user_id: str, since: datetime) -> bool:
        """Whether ``user_id`` performed any interaction in [since, now]."""
        since = to_naive_utc(since)
        return any(
            i.user_id == user_id and since <= i.created_at <= self.now
            for i in self.interactions
        )


class ContextualFactors(BaseModel):
    """The facts that drove a candidate's contextual boost."""
    model_config = ConfigDict(frozen=True)

    optimal_time: bool = False
    recently_active: bool = False
    mutual_connections: int = Field(default=0, ge=0)


class ContextualBooster:
    """Applies multiplicative boosts to smart scores.

    Formula:
        boosted = score * 1.10 (optimal time)
                        * 1.15 (active in last 24h)
                        * (1 + 0.05 * mutual_connections)
        result = min(boosted, 100)
    """

    def __init__(
        self,
        optimal_time_multiplier: float = 1.10,
        recent_activity_multiplier: float = 1.15,
        mutual_connection_step: float = 0.05,
        recent_window_hours: int = 24,
        max_score: float = MAX_SCORE,
    ):
        """Initialize booster with configuration.

        Args:
            optimal_time_multiplier: Boost when now falls in the candidate's window
            recent_activity_multiplier: Boost when the candidate was active recently
            mutual_connection_step: Boost per mutual connection
            recent_window_hours: Size of the "recently active" window
            max_score: Ceiling applied to the boosted score
        """
        self.optimal_time_multiplier = optimal_time_multiplier
        self.recent_activity_multiplier = recent_activity_multiplier
        self.mutual_connection_step = mutual_connection_step
        self.recent_window_hours = recent_window_hours
        self.max_score = max_score

    def is_optimal_time(self, candidate: Candidate, now: datetime) -> bool:
        """Whether now falls inside the candidate's declared activity window."""
        activity = candidate.activity
        if activity is None:
            return False
        return now.hour in activity.optimal_hours and day_of_week(now) in activity.active_days

    def has_recent_activity(self, candidate: Candidate, context: ContextSnapshot) -> bool:
        """Whether the candidate interacted within the recent window."""
        since = context.now - timedelta(hours=self.recent_window_hours)
        return context.active_since(candidate.user_id, since)

    def contextual_factors(
        self,
        candidate: Candidate,
        context: ContextSnapshot,
    ) -> ContextualFactors:
        """Collect the boost factors for a candidate."""
        return ContextualFactors(
            optimal_time=self.is_optimal_time(candidate, context.now),
            recently_active=self.has_recent_activity(candidate, context),
            mutual_connections=candidate.mutual_connections,
        )

    def apply_factors(self, score: float, factors: ContextualFactors) -> float:
        """Compose the boosts by sequential multiplication and clamp."""
        boosted = score

        if factors.optimal_time:
            boosted *= self.optimal_time_multiplier

        if factors.recently_active:
            boosted *= self.recent_activity_multiplier

        if factors.mutual_connections > 0:
            boosted *= 1 + factors.mutual_connections * self.mutual_connection_step

        return clamp_score(boosted, self.max_score)

    def boost(
        self,
        score: float,
        candidate: Candidate,
        context: ContextSnapshot,
    ) -> tuple[float, ContextualFactors]:
        """Boost one candidate's smart score.

        Returns:
            Tuple of (boosted score, contextual factors)
        """
        factors = self.contextual_factors(candidate, context)
        return self.apply_factors(score, factors), factors

