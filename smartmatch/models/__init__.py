"""
Data Models and Ranking Components

Pydantic models for platform entities and the components that score them.
"""

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
from smartmatch.models.behavior import BehaviorProfile, BehaviorProfileBuilder
from smartmatch.models.patterns import MatchPattern, PatternMiner
from smartmatch.models.scoring import CandidateScore, ScoringEngine, ScoringSignals
from smartmatch.models.boosts import ContextSnapshot, ContextualBooster, ContextualFactors
from smartmatch.models.insights import Insight, InsightConfidence, InsightGenerator, InsightType

__all__ = [
    "ActivityPattern",
    "Candidate",
    "InteractionEvent",
    "InvestmentRange",
    "MatchMetadata",
    "MatchRecord",
    "MatchStatus",
    "MessageThreadSample",
    "Profile",
    "ProfileType",
    "SuccessfulMatch",
    "SwipeDirection",
    "SwipeEvent",
    "VerificationLevel",
    "BehaviorProfile",
    "BehaviorProfileBuilder",
    "MatchPattern",
    "PatternMiner",
    "CandidateScore",
    "ScoringEngine",
    "ScoringSignals",
    "ContextSnapshot",
    "ContextualBooster",
    "ContextualFactors",
    "Insight",
    "InsightConfidence",
    "InsightGenerator",
    "InsightType",
]
