"""
Candidate Scoring

Computes the bounded composite score of a candidate from static compatibility,
behavior alignment and success pattern alignment.
"""

import logging
from collections.abc import Sequence
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from smartmatch.errors import MalformedCandidateError
from smartmatch.models.behavior import BehaviorProfile
from smartmatch.models.compatibility import (
    experience_gap,
    experience_proximity,
    hour_overlap,
    industry_overlap,
    interval_alignment,
    investment_alignment,
)
from smartmatch.models.entities import Candidate, Profile
from smartmatch.models.patterns import MatchPattern

logger = logging.getLogger(__name__)

MAX_SCORE = 100.0


def clamp_score(score: float, ceiling: float = MAX_SCORE) -> float:
    """Bound a score to [0, ceiling]."""
    return max(0.0, min(score, ceiling))


class ScoringSignals(BaseModel):
    """Intermediate signals computed while scoring one candidate.

    ``None`` means the signal was not available for this user/candidate.
    """
    model_config = ConfigDict(frozen=True)

    industry_preference_match: Optional[float] = None
    investment_in_range: Optional[bool] = None
    activity_overlap: Optional[float] = None
    best_pattern: Optional[MatchPattern] = None
    pattern_similarity: Optional[float] = None


class CandidateScore(BaseModel):
    """Score components of one candidate, each within [0, 100]."""
    model_config = ConfigDict(frozen=True)

    base_score: float = Field(ge=0.0, le=MAX_SCORE)
    behavior_score: float = Field(ge=0.0, le=MAX_SCORE)
    pattern_score: float = Field(ge=0.0, le=MAX_SCORE)
    smart_score: float = Field(ge=0.0, le=MAX_SCORE)
    signals: ScoringSignals = Field(default_factory=ScoringSignals)


class ScoringEngine:
    """Scores candidates against a user, their behavior and their patterns.

    Formula:
        smart = 0.4 * base + 0.3 * behavior + 0.3 * pattern

    Users without behavior or pattern signal get the neutral score for that
    component, so ranking falls back to static compatibility.
    """

    DEFAULT_WEIGHTS = {
        "base": 0.4,
        "behavior": 0.3,
        "pattern": 0.3,
    }

    DEFAULT_BASE_WEIGHTS = {
        "industry": 0.35,
        "investment": 0.25,
        "experience": 0.15,
    }

    def __init__(
        self,
        weights: Optional[dict[str, float]] = None,
        base_weights: Optional[dict[str, float]] = None,
        neutral_score: float = 50.0,
        experience_scale_years: float = 10.0,
    ):
        """Initialize scoring engine.

        Args:
            weights: Weights of base, behavior and pattern scores
            base_weights: Weights of industry, investment and experience in the base score
            neutral_score: Score used when a component has no signal
            experience_scale_years: Experience gap at which proximity reaches 0
        """
        self.weights = self.DEFAULT_WEIGHTS.copy()
        if weights:
            self.weights.update(weights)

        self.base_weights = self.DEFAULT_BASE_WEIGHTS.copy()
        if base_weights:
            self.base_weights.update(base_weights)

        self.neutral_score = clamp_score(neutral_score)
        self.experience_scale_years = experience_scale_years

    def _experience_proximity(self, user: Profile, candidate: Profile) -> float:
        gap = experience_gap(user, candidate)
        if gap is None:
            return 0.0
        return experience_proximity(gap, self.experience_scale_years)

    def calculate_base_score(self, user: Profile, candidate: Candidate) -> float:
        """Static compatibility, independent of behavioral history."""
        components = {
            "industry": industry_overlap(user.industries, candidate.industries),
            "investment": investment_alignment(user, candidate),
            "experience": self._experience_proximity(user, candidate),
        }

        total_weight = sum(self.base_weights.get(name, 0.0) for name in components)
        if total_weight <= 0:
            return 0.0

        weighted = sum(
            value * self.base_weights.get(name, 0.0)
            for name, value in components.items()
        )
        return clamp_score(weighted / total_weight * MAX_SCORE)

    def calculate_behavior_score(
        self,
        candidate: Candidate,
        profile: BehaviorProfile,
    ) -> tuple[float, dict]:
        """Alignment with the user's observed preferences.

        Returns:
            Tuple of (score, signals) where signals feed ScoringSignals
        """
        components: list[float] = []
        signals: dict = {}

        if profile.preferred_industries and candidate.industries:
            preferred = candidate.industries & profile.preferred_industries
            match = len(preferred) / len(candidate.industries)
            signals["industry_preference_match"] = match
            components.append(match)

        figure = candidate.investment_figure
        if profile.investment_range is not None and figure is not None:
            preferred_range = profile.investment_range
            in_range = preferred_range.contains(figure)
            signals["investment_in_range"] = in_range
            if in_range:
                components.append(1.0)
            else:
                components.append(interval_alignment(
                    candidate.investment_interval,
                    (preferred_range.min, preferred_range.max),
                ))

        if profile.active_hours and candidate.activity and candidate.activity.optimal_hours:
            overlap = hour_overlap(candidate.activity.optimal_hours, profile.active_hours)
            signals["activity_overlap"] = overlap
            components.append(overlap)

        if not components:
            return self.neutral_score, signals

        return clamp_score(sum(components) / len(components) * MAX_SCORE), signals

    def pattern_similarity(
        self,
        user: Profile,
        candidate: Candidate,
        pattern: MatchPattern,
    ) -> float:
        """Similarity in [0, 1] between a candidate and one success pattern."""
        industry = industry_overlap(user.industries, candidate.industries)
        investment = investment_alignment(user, candidate)
        proximity = self._experience_proximity(user, candidate)

        verification = (
            1.0
            if candidate.verification_level.rank >= pattern.verification_level.rank
            else 0.5
        )

        terms = [
            1.0 - abs(industry - pattern.industry_alignment),
            1.0 - abs(proximity - pattern.experience_proximity(self.experience_scale_years)),
            1.0 - abs(investment - pattern.investment_alignment),
            verification,
        ]
        return sum(terms) / len(terms)

    def calculate_pattern_score(
        self,
        user: Profile,
        candidate: Candidate,
        patterns: Sequence[MatchPattern],
    ) -> tuple[float, dict]:
        """Best alignment with the user's successful match patterns.

        Returns:
            Tuple of (score, signals) where signals feed ScoringSignals
        """
        if not patterns:
            return self.neutral_score, {}

        best_pattern: Optional[MatchPattern] = None
        best_similarity = -1.0

        for pattern in patterns:
            similarity = self.pattern_similarity(user, candidate, pattern)
            if best_pattern is None or (similarity, pattern.conversion_rate) > (
                best_similarity, best_pattern.conversion_rate
            ):
                best_pattern = pattern
                best_similarity = similarity

        signals = {"best_pattern": best_pattern, "pattern_similarity": best_similarity}
        return clamp_score(best_similarity * MAX_SCORE), signals

    def combine(self, base: float, behavior: float, pattern: float) -> float:
        """Weighted combination of bounded components."""
        return clamp_score(
            self.weights["base"] * clamp_score(base)
            + self.weights["behavior"] * clamp_score(behavior)
            + self.weights["pattern"] * clamp_score(pattern)
        )

    def score(
        self,
        user: Profile,
        candidate: Candidate,
        profile: BehaviorProfile,
        patterns: Sequence[MatchPattern],
    ) -> CandidateScore:
        """Score one candidate.

        Args:
            user: The requesting user's static profile
            candidate: The candidate to score
            profile: The requesting user's behavior profile
            patterns: The requesting user's success patterns

        Returns:
            CandidateScore with all components and the signals behind them

        Raises:
            MalformedCandidateError: If required static attributes are missing
        """
        missing = candidate.missing_fields()
        if missing:
            raise MalformedCandidateError(candidate.user_id, missing)

        base = self.calculate_base_score(user, candidate)
        behavior, behavior_signals = self.calculate_behavior_score(candidate, profile)
        pattern, pattern_signals = self.calculate_pattern_score(user, candidate, patterns)

        return CandidateScore(
            base_score=base,
            behavior_score=behavior,
            pattern_score=pattern,
            smart_score=self.combine(base, behavior, pattern),
            signals=ScoringSignals(**behavior_signals, **pattern_signals),
        )
