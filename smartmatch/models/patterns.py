"""
Match Pattern Mining

Turns a user's mutually accepted matches into reusable success patterns.
"""

import logging
from collections.abc import Sequence
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from smartmatch.models.compatibility import (
    experience_gap,
    experience_proximity,
    industry_overlap,
    investment_alignment,
)
from smartmatch.models.entities import (
    Profile,
    SuccessfulMatch,
    VerificationLevel,
    to_naive_utc,
    utc_now,
)

logger = logging.getLogger(__name__)


class MatchPattern(BaseModel):
    """Fingerprint of one historical successful match."""
    model_config = ConfigDict(frozen=True)

    industry_alignment: float = Field(ge=0.0, le=1.0)
    experience_gap: float = Field(ge=0.0, description="Years between the two parties")
    investment_alignment: float = Field(ge=0.0, le=1.0)
    verification_level: VerificationLevel = VerificationLevel.NONE
    conversion_rate: float = Field(ge=0.0, le=1.0)

    def experience_proximity(self, scale_years: float = 10.0) -> float:
        return experience_proximity(self.experience_gap, scale_years)


class PatternMiner:
    """Mines MatchPatterns from successful matches.

    Conversion rate:
        messages / (messages + match_age_days + 1)

    It grows with the number of messages exchanged and shrinks as a match
    ages without conversation.
    """

    def __init__(self, experience_scale_years: float = 10.0):
        """Initialize miner.

        Args:
            experience_scale_years: Gap assumed when experience is unknown
        """
        self.experience_scale_years = experience_scale_years

    def calculate_conversion_rate(
        self,
        messages_exchanged: int,
        matched_at: Optional[datetime],
        reference_date: Optional[datetime] = None,
    ) -> float:
        """Calculate how strongly a match turned into sustained conversation.

        An unknown match date counts as a match made on the reference date.
        """
        if matched_at is None:
            age_days = 0
        else:
            reference_date = to_naive_utc(reference_date or utc_now())
            age_days = max((reference_date - to_naive_utc(matched_at)).days, 0)
        messages = max(messages_exchanged, 0)
        return messages / (messages + age_days + 1)

    def mine_pattern(
        self,
        user: Profile,
        match: SuccessfulMatch,
        reference_date: Optional[datetime] = None,
    ) -> MatchPattern:
        """Build the pattern for a single successful match."""
        counterparty = match.counterparty

        gap = experience_gap(user, counterparty)
        if gap is None:
            gap = self.experience_scale_years

        return MatchPattern(
            industry_alignment=industry_overlap(user.industries, counterparty.industries),
            experience_gap=gap,
            investment_alignment=investment_alignment(user, counterparty),
            verification_level=counterparty.verification_level,
            conversion_rate=self.calculate_conversion_rate(
                match.metadata.messages_exchanged,
                match.metadata.matched_at,
                reference_date,
            ),
        )

    def mine(
        self,
        user: Profile,
        matches: Sequence[SuccessfulMatch],
        reference_date: Optional[datetime] = None,
    ) -> list[MatchPattern]:
        """Build one pattern per successful match, in input order.

        Args:
            user: The requesting user's profile
            matches: The user's mutually accepted matches
            reference_date: Date match age is measured from (default: now)

        Returns:
            Pattern library for the user (empty without successful matches)
        """
        reference_date = reference_date or utc_now()
        patterns = [self.mine_pattern(user, m, reference_date) for m in matches]

        logger.debug(f"Mined {len(patterns)} success patterns for {user.user_id}")

        return patterns
