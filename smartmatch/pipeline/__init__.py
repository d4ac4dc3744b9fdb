"""
Recommendation Pipeline

Components for loading platform data, ranking candidates and writing reports.
"""

from smartmatch.pipeline.ingest import load_platform_snapshot, PlatformSnapshot
from smartmatch.pipeline.data_access import DataAccess, SnapshotDataAccess
from smartmatch.pipeline.orchestrator import (
    RankedCandidate,
    RecommendationOrchestrator,
    UserSignals,
)
from smartmatch.pipeline.outputs import OutputGenerator, summarize_ranking

__all__ = [
    "load_platform_snapshot",
    "PlatformSnapshot",
    "DataAccess",
    "SnapshotDataAccess",
    "RankedCandidate",
    "RecommendationOrchestrator",
    "UserSignals",
    "OutputGenerator",
    "summarize_ranking",
]
