"""
Recommendation Errors

Exceptions raised by the recommendation pipeline.
"""

from typing import Optional


class RecommendationError(Exception):
    """Base class for recommendation pipeline errors."""


class UserNotFoundError(RecommendationError, LookupError):
    """The requesting user does not resolve via the data-access layer."""

    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User not found: {user_id}")


class UpstreamTimeoutError(RecommendationError, TimeoutError):
    """An upstream read did not complete before the pipeline deadline."""

    def __init__(self, user_id: str, timeout_seconds: float):
        self.user_id = user_id
        self.timeout_seconds = timeout_seconds
        super().__init__(
            f"Upstream reads for {user_id} exceeded {timeout_seconds:.1f}s deadline"
        )


class MalformedCandidateError(RecommendationError, ValueError):
    """A candidate record is missing required static attributes."""

    def __init__(
        self,
        candidate_id: Optional[str],
        missing_fields: Optional[list[str]] = None,
        reason: Optional[str] = None,
    ):
        self.candidate_id = candidate_id
        self.missing_fields = missing_fields or []
        detail = reason or f"missing {', '.join(self.missing_fields)}"
        super().__init__(f"Malformed candidate {candidate_id or '<unknown>'}: {detail}")
