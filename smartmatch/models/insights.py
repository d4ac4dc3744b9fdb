"""
Recommendation Insights

Human-readable explanations derived from the signals already used for scoring.
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict

from smartmatch.models.patterns import MatchPattern
from smartmatch.models.scoring import ScoringSignals


class InsightType(str, Enum):
    """What an insight explains."""
    INDUSTRY = "industry"
    INVESTMENT = "investment"
    ACTIVITY = "activity"
    SUCCESS = "success"


class InsightConfidence(str, Enum):
    """How strongly the signal supports the insight."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class Insight(BaseModel):
    """A single explanation attached to a ranked candidate."""
    model_config = ConfigDict(frozen=True)

    type: InsightType
    confidence: InsightConfidence
    message: str
    details: Optional[dict[str, Any]] = None


class InsightGenerator:
    """Explains candidate scores without feeding back into them."""

    def __init__(
        self,
        industry_threshold: float = 0.5,
        industry_high_confidence: float = 0.8,
        pattern_match_threshold: float = 0.8,
    ):
        self.industry_threshold = industry_threshold
        self.industry_high_confidence = industry_high_confidence
        self.pattern_match_threshold = pattern_match_threshold

    def _pattern_details(self, pattern: MatchPattern, similarity: float) -> dict[str, Any]:
        return {
            "industry_alignment": round(pattern.industry_alignment, 3),
            "experience_gap": round(pattern.experience_gap, 1),
            "investment_alignment": round(pattern.investment_alignment, 3),
            "verification_level": pattern.verification_level.value,
            "conversion_rate": round(pattern.conversion_rate, 3),
            "similarity": round(similarity, 3),
        }

    def generate(self, signals: ScoringSignals) -> list[Insight]:
        """Derive insights for one candidate, in a fixed order.

        Args:
            signals: Signals computed by the ScoringEngine for the candidate

        Returns:
            Zero or more insights (industry, investment, activity, success)
        """
        insights = []

        industry = signals.industry_preference_match
        if industry is not None and industry >= self.industry_threshold:
            confidence = (
                InsightConfidence.HIGH
                if industry >= self.industry_high_confidence
                else InsightConfidence.MEDIUM
            )
            insights.append(Insight(
                type=InsightType.INDUSTRY,
                confidence=confidence,
                message="Strong industry match based on your preferences",
            ))

        if signals.investment_in_range:
            insights.append(Insight(
                type=InsightType.INVESTMENT,
                confidence=InsightConfidence.HIGH,
                message="Investment range aligns with profiles you have liked",
            ))

        if signals.activity_overlap:
            insights.append(Insight(
                type=InsightType.ACTIVITY,
                confidence=InsightConfidence.MEDIUM,
                message="Active during similar times as you",
            ))

        similarity = signals.pattern_similarity
        if (
            signals.best_pattern is not None
            and similarity is not None
            and similarity >= self.pattern_match_threshold
        ):
            insights.append(Insight(
                type=InsightType.SUCCESS,
                confidence=InsightConfidence.HIGH,
                message="Similar to your successful matches",
                details=self._pattern_details(signals.best_pattern, similarity),
            ))

        return insights
