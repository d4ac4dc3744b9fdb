"""
Tests for Candidate Scoring
"""

import pytest

from smartmatch.errors import MalformedCandidateError
from smartmatch.models.behavior import BehaviorProfile
from smartmatch.models.entities import (
    Candidate,
    InvestmentRange,
    ProfileType,
    VerificationLevel,
)
from smartmatch.models.patterns import MatchPattern
from smartmatch.models.scoring import ScoringEngine, clamp_score


@pytest.fixture
def engine():
    return ScoringEngine()


@pytest.fixture
def sample_pattern():
    return MatchPattern(
        industry_alignment=1.0,
        experience_gap=2,
        investment_alignment=1.0,
        verification_level=VerificationLevel.USE_CASE,
        conversion_rate=0.75,
    )


class TestClampScore:
    """Tests for clamp_score."""

    def test_within_bounds(self):
        assert clamp_score(42.0) == 42.0

    def test_bounds(self):
        assert clamp_score(-3.0) == 0.0
        assert clamp_score(250.0) == 100.0
        assert clamp_score(80.0, ceiling=60.0) == 60.0


class TestBaseScore:
    """Tests for static compatibility."""

    def test_aligned_candidate(self, engine, sample_user, sample_candidate):
        """Test weighted industry, investment and experience alignment."""
        # industry 1.0, investment 1.0, experience gap 4y -> 0.6
        expected = (0.35 * 1.0 + 0.25 * 1.0 + 0.15 * 0.6) / 0.75 * 100

        assert engine.calculate_base_score(sample_user, sample_candidate) == pytest.approx(expected)

    def test_disjoint_candidate_scores_low(self, engine, sample_user, candidate_pool):
        low = candidate_pool[0]

        assert engine.calculate_base_score(sample_user, low) < 20.0


class TestBehaviorScore:
    """Tests for behavior alignment."""

    def test_empty_profile_is_neutral(self, engine, sample_candidate):
        """Test that users without history get the neutral score."""
        score, signals = engine.calculate_behavior_score(sample_candidate, BehaviorProfile())

        assert score == 50.0
        assert signals == {}

    def test_components_are_averaged(self, engine, sample_candidate):
        profile = BehaviorProfile(
            preferred_industries=frozenset({"fintech"}),
            investment_range=InvestmentRange(min=400_000, max=400_000),
            active_hours=frozenset({9}),
        )

        score, signals = engine.calculate_behavior_score(sample_candidate, profile)

        assert signals["industry_preference_match"] == pytest.approx(0.5)
        assert signals["investment_in_range"] is False
        assert signals["activity_overlap"] == pytest.approx(1 / 3)
        assert score == pytest.approx((0.5 + 1.0 + 1 / 3) / 3 * 100)

    def test_investment_in_range(self, engine, sample_candidate):
        profile = BehaviorProfile(investment_range=InvestmentRange(min=500_000, max=700_000))

        score, signals = engine.calculate_behavior_score(sample_candidate, profile)

        assert signals["investment_in_range"] is True
        assert score == 100.0


class TestPatternScore:
    """Tests for success pattern alignment."""

    def test_no_patterns_is_neutral(self, engine, sample_user, sample_candidate):
        score, signals = engine.calculate_pattern_score(sample_user, sample_candidate, [])

        assert score == 50.0
        assert signals == {}

    def test_similarity(self, engine, sample_user, sample_candidate, sample_pattern):
        """Test that similarity averages the field deltas and verification."""
        # industry 1 vs 1, proximity 0.6 vs 0.8, investment 1 vs 1, verification met
        expected = (1.0 + 0.8 + 1.0 + 1.0) / 4

        similarity = engine.pattern_similarity(sample_user, sample_candidate, sample_pattern)

        assert similarity == pytest.approx(expected)

    def test_lower_verification_is_penalized(self, engine, sample_user, sample_candidate, sample_pattern):
        unverified = sample_candidate.model_copy(update={"verification_level": VerificationLevel.NONE})

        verified_score = engine.pattern_similarity(sample_user, sample_candidate, sample_pattern)
        unverified_score = engine.pattern_similarity(sample_user, unverified, sample_pattern)

        assert verified_score - unverified_score == pytest.approx(0.5 / 4)

    def test_best_pattern_wins(self, engine, sample_user, sample_candidate, sample_pattern):
        weak = MatchPattern(
            industry_alignment=0.0,
            experience_gap=30,
            investment_alignment=0.0,
            conversion_rate=0.9,
        )

        score, signals = engine.calculate_pattern_score(
            sample_user, sample_candidate, [weak, sample_pattern]
        )

        assert signals["best_pattern"] == sample_pattern
        assert score == pytest.approx(95.0)

    def test_ties_prefer_higher_conversion(self, engine, sample_user, sample_candidate, sample_pattern):
        better = sample_pattern.model_copy(update={"conversion_rate": 0.9})

        _, signals = engine.calculate_pattern_score(
            sample_user, sample_candidate, [sample_pattern, better]
        )

        assert signals["best_pattern"].conversion_rate == 0.9


class TestScore:
    """Tests for the combined smart score."""

    def test_new_user_falls_back_to_base(self, engine, sample_user, sample_candidate):
        """Test smart = 0.4 * base + 0.3 * 50 + 0.3 * 50 without history."""
        result = engine.score(sample_user, sample_candidate, BehaviorProfile(), [])

        assert result.behavior_score == 50.0
        assert result.pattern_score == 50.0
        assert result.smart_score == pytest.approx(0.4 * result.base_score + 30.0)

    def test_scores_are_bounded(self, sample_user, sample_candidate, sample_pattern):
        """Test that oversized weights still produce scores within [0, 100]."""
        engine = ScoringEngine(weights={"base": 2.0, "behavior": 2.0, "pattern": 2.0})

        result = engine.score(sample_user, sample_candidate, BehaviorProfile(), [sample_pattern])

        assert 0.0 <= result.base_score <= 100.0
        assert result.smart_score == 100.0

    def test_missing_fields_raise(self, engine, sample_user):
        """Test that candidates without required attributes are rejected."""
        incomplete = Candidate(user_id="f_bad", profile_type=ProfileType.FUNDER, years_experience=3)

        with pytest.raises(MalformedCandidateError) as exc_info:
            engine.score(sample_user, incomplete, BehaviorProfile(), [])

        assert exc_info.value.candidate_id == "f_bad"
        assert "industries" in exc_info.value.missing_fields
        assert "investment" in exc_info.value.missing_fields

    def test_score_is_deterministic(self, engine, sample_user, sample_candidate, sample_pattern):
        first = engine.score(sample_user, sample_candidate, BehaviorProfile(), [sample_pattern])
        second = engine.score(sample_user, sample_candidate, BehaviorProfile(), [sample_pattern])

        assert first == second
