"""
Pytest Configuration and Shared Fixtures
"""

import asyncio
import pytest
from datetime import datetime, timedelta
from typing import Optional

from smartmatch.models.entities import (
    ActivityPattern,
    Candidate,
    InteractionEvent,
    InvestmentRange,
    MatchMetadata,
    MatchRecord,
    MatchStatus,
    MessageThreadSample,
    Profile,
    ProfileType,
    SuccessfulMatch,
    SwipeDirection,
    SwipeEvent,
    VerificationLevel,
)
from smartmatch.pipeline.data_access import DataAccess


# Wednesday 2024-06-12 10:00
REFERENCE_NOW = datetime(2024, 6, 12, 10, 0)


@pytest.fixture
def now() -> datetime:
    """Fixed reference time used across tests."""
    return REFERENCE_NOW


@pytest.fixture
def sample_user() -> Profile:
    """An entrepreneur asking for 500k in fintech."""
    return Profile(
        user_id="u_001",
        profile_type=ProfileType.ENTREPRENEUR,
        display_name="Ada Founder",
        industries=frozenset({"fintech", "saas"}),
        years_experience=8,
        desired_investment=500_000,
        verification_level=VerificationLevel.BUSINESS_PLAN,
    )


@pytest.fixture
def sample_candidate() -> Candidate:
    """A funder closely aligned with the sample user."""
    return Candidate(
        user_id="f_001",
        profile_type=ProfileType.FUNDER,
        display_name="Grace Capital",
        industries=frozenset({"fintech", "saas"}),
        years_experience=12,
        investment_range=InvestmentRange(min=250_000, max=1_000_000),
        verification_level=VerificationLevel.USE_CASE,
        activity=ActivityPattern(optimal_hours=frozenset({9, 10, 11}), active_days=frozenset({1, 2, 3})),
        mutual_connections=0,
    )


@pytest.fixture
def candidate_pool() -> list[Candidate]:
    """Funders with decreasing alignment to the sample user."""
    return [
        Candidate(
            user_id="f_low",
            profile_type=ProfileType.FUNDER,
            display_name="Low Fit",
            industries=frozenset({"biotech"}),
            years_experience=30,
            investment_range=InvestmentRange(min=5_000_000, max=10_000_000),
        ),
        Candidate(
            user_id="f_high",
            profile_type=ProfileType.FUNDER,
            display_name="High Fit",
            industries=frozenset({"fintech", "saas"}),
            years_experience=8,
            investment_range=InvestmentRange(min=250_000, max=1_000_000),
        ),
        Candidate(
            user_id="f_mid",
            profile_type=ProfileType.FUNDER,
            display_name="Mid Fit",
            industries=frozenset({"fintech", "biotech"}),
            years_experience=15,
            investment_range=InvestmentRange(min=600_000, max=2_000_000),
        ),
    ]


def make_swipe(
    industries: set[str],
    direction: SwipeDirection = SwipeDirection.LIKE,
    target_investment: Optional[float] = None,
    timestamp: datetime = REFERENCE_NOW,
    target_user_id: str = "t",
) -> SwipeEvent:
    """Build a swipe by u_001."""
    return SwipeEvent(
        subject_user_id="u_001",
        target_user_id=target_user_id,
        target_industries=frozenset(industries),
        direction=direction,
        timestamp=timestamp,
        target_investment=target_investment,
    )


@pytest.fixture
def sample_swipes() -> list[SwipeEvent]:
    """Five fintech swipes (4 likes, 1 pass) and two biotech passes."""
    swipes = [
        make_swipe({"fintech"}, target_investment=400_000, target_user_id=f"t{i}")
        for i in range(4)
    ]
    swipes.append(make_swipe({"fintech"}, SwipeDirection.PASS, target_user_id="t4"))
    swipes.append(make_swipe({"biotech"}, SwipeDirection.PASS, target_user_id="t5"))
    swipes.append(make_swipe({"biotech"}, SwipeDirection.PASS, target_user_id="t6"))
    return swipes


@pytest.fixture
def sample_threads() -> list[MessageThreadSample]:
    """Two conversations, one answered and one not."""
    return [
        MessageThreadSample(
            conversation_id="m_1",
            message_timestamps=(
                datetime(2024, 6, 3, 9, 15),
                datetime(2024, 6, 3, 9, 40),
                datetime(2024, 6, 4, 9, 5),
            ),
        ),
        MessageThreadSample(
            conversation_id="m_2",
            message_timestamps=(datetime(2024, 6, 5, 21, 0),),
        ),
    ]


@pytest.fixture
def sample_successful_match(now) -> SuccessfulMatch:
    """A funder the user matched with and talked to."""
    return SuccessfulMatch(
        counterparty=Profile(
            user_id="f_past",
            profile_type=ProfileType.FUNDER,
            industries=frozenset({"fintech", "saas"}),
            years_experience=10,
            investment_range=InvestmentRange(min=300_000, max=800_000),
            verification_level=VerificationLevel.USE_CASE,
        ),
        metadata=MatchMetadata(
            match_id="m_1",
            matched_at=now - timedelta(days=9),
            messages_exchanged=30,
        ),
    )


class InMemoryDataAccess(DataAccess):
    """DataAccess backed by plain dictionaries, for tests."""

    def __init__(
        self,
        profiles: Optional[dict[str, Profile]] = None,
        swipes: Optional[list[SwipeEvent]] = None,
        threads: Optional[list[MessageThreadSample]] = None,
        matches: Optional[list[MatchRecord]] = None,
        successful: Optional[list[SuccessfulMatch]] = None,
        interactions: Optional[list[InteractionEvent]] = None,
        pool: Optional[list] = None,
        delay_seconds: float = 0.0,
    ):
        self.profiles = profiles or {}
        self.swipes = swipes or []
        self.threads = threads or []
        self.matches = matches or []
        self.successful = successful or []
        self.interactions = interactions or []
        self.pool = pool or []
        self.delay_seconds = delay_seconds
        self.calls = 0
        self.completed_reads = 0

    async def _pause(self) -> None:
        if self.delay_seconds:
            await asyncio.sleep(self.delay_seconds)

    async def fetch_user_profile(self, user_id):
        self.calls += 1
        return self.profiles.get(user_id)

    async def fetch_swipe_history(self, user_id):
        return list(self.swipes)

    async def fetch_message_samples(self, user_id):
        return list(self.threads)

    async def fetch_match_history(self, user_id):
        return list(self.matches)

    async def fetch_successful_matches(self, user_id):
        await self._pause()
        self.completed_reads += 1
        return list(self.successful)

    async def fetch_recent_interactions(self, user_id, since):
        return [i for i in self.interactions if i.created_at >= since]

    async def fetch_candidate_pool(self, user_id):
        return list(self.pool)


@pytest.fixture
def data_access(sample_user, candidate_pool) -> InMemoryDataAccess:
    """Data access with the sample user and a candidate pool but no history."""
    return InMemoryDataAccess(
        profiles={sample_user.user_id: sample_user},
        pool=candidate_pool,
    )


@pytest.fixture
def match_records() -> list[MatchRecord]:
    """Four match records, one of them accepted."""
    return [
        MatchRecord(match_id="m_1", user_id="u_001", matched_with_id="f_past", status=MatchStatus.MATCHED),
        MatchRecord(match_id="m_2", user_id="u_001", matched_with_id="f_a", status=MatchStatus.PENDING),
        MatchRecord(match_id="m_3", user_id="f_b", matched_with_id="u_001", status=MatchStatus.REJECTED),
        MatchRecord(match_id="m_4", user_id="u_001", matched_with_id="f_c", status=MatchStatus.PENDING),
    ]
