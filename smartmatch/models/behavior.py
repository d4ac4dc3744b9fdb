"""
Behavior Profile Builder

Derives a compact behavioral signature from a user's swipe and message history.
"""

import logging
from collections import Counter
from collections.abc import Sequence
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from smartmatch.models.entities import (
    InvestmentRange,
    MatchRecord,
    MatchStatus,
    MessageThreadSample,
    SlotSet,
    SwipeEvent,
    TagSet,
    day_of_week,
)

logger = logging.getLogger(__name__)


class BehaviorProfile(BaseModel):
    """Observed preferences and activity rhythm of one user."""
    model_config = ConfigDict(frozen=True)

    preferred_industries: TagSet = frozenset()
    investment_range: Optional[InvestmentRange] = None
    active_hours: SlotSet = frozenset()
    active_days: SlotSet = frozenset()
    response_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    historical_match_rate: float = Field(default=0.0, ge=0.0, le=1.0)

    @property
    def is_empty(self) -> bool:
        return (
            not self.preferred_industries
            and self.investment_range is None
            and not self.active_hours
            and not self.active_days
            and self.response_rate == 0.0
            and self.historical_match_rate == 0.0
        )


class BehaviorProfileBuilder:
    """Builds a BehaviorProfile from raw history.

    Industries only count as preferred once they have been seen often enough
    (``min_industry_samples``) and liked strictly more often than
    ``min_like_rate``.
    """

    def __init__(
        self,
        min_industry_samples: int = 5,
        min_like_rate: float = 0.6,
        activity_min_events: int = 2,
        activity_min_share: float = 0.05,
    ):
        """Initialize builder with configuration.

        Args:
            min_industry_samples: Swipes needed before an industry is judged
            min_like_rate: Like rate an industry must exceed to be preferred
            activity_min_events: Messages needed for an hour/day bucket to count
            activity_min_share: Share of all messages a bucket must reach
        """
        self.min_industry_samples = min_industry_samples
        self.min_like_rate = min_like_rate
        self.activity_min_events = activity_min_events
        self.activity_min_share = activity_min_share

    def analyze_industry_preferences(self, swipes: Sequence[SwipeEvent]) -> frozenset[str]:
        """Industries with enough swipes and a high enough like rate."""
        likes: Counter[str] = Counter()
        totals: Counter[str] = Counter()

        for swipe in swipes:
            for industry in swipe.target_industries:
                totals[industry] += 1
                if swipe.is_like:
                    likes[industry] += 1

        return frozenset(
            industry
            for industry, total in totals.items()
            if total >= self.min_industry_samples
            and likes[industry] / total > self.min_like_rate
        )

    def analyze_investment_preferences(
        self, swipes: Sequence[SwipeEvent]
    ) -> Optional[InvestmentRange]:
        """Span of investment figures among liked targets."""
        amounts = [
            s.target_investment
            for s in swipes
            if s.is_like and s.target_investment is not None
        ]
        if not amounts:
            return None
        return InvestmentRange(min=min(amounts), max=max(amounts))

    def _active_buckets(self, counts: Counter[int], total: int) -> frozenset[int]:
        return frozenset(
            bucket
            for bucket, count in counts.items()
            if count >= self.activity_min_events
            and count / total >= self.activity_min_share
        )

    def analyze_activity_patterns(
        self, threads: Sequence[MessageThreadSample]
    ) -> tuple[frozenset[int], frozenset[int]]:
        """Hours of day and days of week with activity above the noise floor."""
        timestamps = [ts for thread in threads for ts in thread.message_timestamps]
        if not timestamps:
            return frozenset(), frozenset()

        hours = Counter(ts.hour for ts in timestamps)
        days = Counter(day_of_week(ts) for ts in timestamps)
        total = len(timestamps)

        return self._active_buckets(hours, total), self._active_buckets(days, total)

    def calculate_response_rate(self, threads: Sequence[MessageThreadSample]) -> float:
        """Share of conversations that got past the first message."""
        conversations: dict[str, int] = {}
        for thread in threads:
            conversations[thread.conversation_id] = (
                conversations.get(thread.conversation_id, 0) + thread.message_count
            )

        if not conversations:
            return 0.0

        responded = sum(1 for count in conversations.values() if count > 1)
        return responded / len(conversations)

    def calculate_match_rate(self, matches: Sequence[MatchRecord]) -> float:
        """Share of match records that reached mutual acceptance."""
        if not matches:
            return 0.0
        accepted = sum(1 for m in matches if m.status is MatchStatus.MATCHED)
        return accepted / len(matches)

    def build(
        self,
        swipes: Sequence[SwipeEvent],
        threads: Sequence[MessageThreadSample],
        matches: Sequence[MatchRecord] = (),
    ) -> BehaviorProfile:
        """Build the behavior profile.

        Args:
            swipes: The user's swipe history
            threads: Message samples grouped by conversation
            matches: All match records initiated by or with the user

        Returns:
            BehaviorProfile (empty when there is no history)
        """
        active_hours, active_days = self.analyze_activity_patterns(threads)

        profile = BehaviorProfile(
            preferred_industries=self.analyze_industry_preferences(swipes),
            investment_range=self.analyze_investment_preferences(swipes),
            active_hours=active_hours,
            active_days=active_days,
            response_rate=self.calculate_response_rate(threads),
            historical_match_rate=self.calculate_match_rate(matches),
        )

        logger.debug(
            f"Behavior profile from {len(swipes)} swipes, {len(threads)} threads, "
            f"{len(matches)} matches: {len(profile.preferred_industries)} preferred industries"
        )

        return profile
