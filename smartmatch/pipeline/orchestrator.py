"""
Recommendation Orchestrator

Composes behavior profiling, pattern mining, scoring, contextual boosts and
insights into the public recommendation pipeline.
"""

import asyncio
import logging
from collections.abc import Sequence
from datetime import datetime, timedelta
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from smartmatch.errors import MalformedCandidateError, UpstreamTimeoutError, UserNotFoundError
from smartmatch.models.behavior import BehaviorProfile, BehaviorProfileBuilder
from smartmatch.models.boosts import ContextSnapshot, ContextualBooster, ContextualFactors
from smartmatch.models.entities import Candidate, Profile, to_naive_utc, utc_now
from smartmatch.models.insights import Insight, InsightGenerator
from smartmatch.models.patterns import MatchPattern, PatternMiner
from smartmatch.models.scoring import ScoringEngine
from smartmatch.pipeline.data_access import CandidateRecord, DataAccess
from smartmatch.utils.cache import RecommendationCache
from smartmatch.utils.config import Config

logger = logging.getLogger(__name__)


class RankedCandidate(BaseModel):
    """A scored, boosted and explained candidate."""
    model_config = ConfigDict(frozen=True)

    candidate: Candidate
    base_score: float = Field(ge=0.0, le=100.0)
    behavior_score: float = Field(ge=0.0, le=100.0)
    pattern_score: float = Field(ge=0.0, le=100.0)
    smart_score: float = Field(ge=0.0, le=100.0)
    insights: tuple[Insight, ...] = ()
    contextual_factors: ContextualFactors = Field(default_factory=ContextualFactors)


class UserSignals(BaseModel):
    """Per-request signals derived for the requesting user."""
    model_config = ConfigDict(frozen=True)

    user: Profile
    profile: BehaviorProfile
    patterns: tuple[MatchPattern, ...] = ()


_RANKING_ADAPTER = TypeAdapter(list[RankedCandidate])


class _UpstreamData(BaseModel):
    """Everything the fan-out reads return for one request."""
    signals: UserSignals
    context: ContextSnapshot
    candidates: list = Field(default_factory=list)


class RecommendationOrchestrator:
    """Runs the recommendation pipeline for one user at a time.

    All intermediate state lives in the call; the orchestrator itself holds
    only collaborators and configuration, so one instance can serve
    concurrent requests.
    """

    def __init__(
        self,
        data_access: DataAccess,
        behavior_builder: Optional[BehaviorProfileBuilder] = None,
        pattern_miner: Optional[PatternMiner] = None,
        scoring_engine: Optional[ScoringEngine] = None,
        booster: Optional[ContextualBooster] = None,
        insight_generator: Optional[InsightGenerator] = None,
        cache: Optional[RecommendationCache] = None,
        timeout_seconds: float = 10.0,
        context_window_days: int = 30,
    ):
        """Initialize orchestrator.

        Args:
            data_access: Read-only source of user, history and candidate data
            behavior_builder: Builds the behavior profile
            pattern_miner: Mines success patterns
            scoring_engine: Scores candidates
            booster: Applies contextual boosts
            insight_generator: Explains scores
            cache: Transient ranking cache
            timeout_seconds: Deadline for all upstream reads together
            context_window_days: How far back recent interactions are read
        """
        self.data_access = data_access
        self.behavior_builder = behavior_builder or BehaviorProfileBuilder()
        self.pattern_miner = pattern_miner or PatternMiner()
        self.scoring_engine = scoring_engine or ScoringEngine()
        self.booster = booster or ContextualBooster()
        self.insight_generator = insight_generator or InsightGenerator()
        self.cache = cache or RecommendationCache(enabled=False)
        self.timeout_seconds = timeout_seconds
        self.context_window_days = context_window_days

    @classmethod
    def from_config(
        cls,
        config: Config,
        data_access: DataAccess,
        cache: Optional[RecommendationCache] = None,
    ) -> "RecommendationOrchestrator":
        """Build an orchestrator with every component configured from ``config``."""
        if cache is None and config.cache.enabled:
            cache = RecommendationCache(
                cache_path=config.cache.path,
                ttl_seconds=config.cache.ttl_seconds,
                bucket_minutes=config.cache.bucket_minutes,
                max_size_mb=config.cache.max_size_mb,
            )

        return cls(
            data_access=data_access,
            behavior_builder=BehaviorProfileBuilder(
                min_industry_samples=config.behavior.min_industry_samples,
                min_like_rate=config.behavior.min_like_rate,
                activity_min_events=config.behavior.activity_min_events,
                activity_min_share=config.behavior.activity_min_share,
            ),
            pattern_miner=PatternMiner(
                experience_scale_years=config.scoring.experience_scale_years,
            ),
            scoring_engine=ScoringEngine(
                weights=config.scoring.weights,
                base_weights=config.scoring.base_weights,
                neutral_score=config.scoring.neutral_score,
                experience_scale_years=config.scoring.experience_scale_years,
            ),
            booster=ContextualBooster(
                optimal_time_multiplier=config.boosts.optimal_time_multiplier,
                recent_activity_multiplier=config.boosts.recent_activity_multiplier,
                mutual_connection_step=config.boosts.mutual_connection_step,
                recent_window_hours=config.boosts.recent_window_hours,
                max_score=config.boosts.max_score,
            ),
            insight_generator=InsightGenerator(
                industry_threshold=config.insights.industry_threshold,
                industry_high_confidence=config.insights.industry_high_confidence,
                pattern_match_threshold=config.scoring.pattern_match_threshold,
            ),
            cache=cache,
            timeout_seconds=config.pipeline.timeout_seconds,
            context_window_days=config.boosts.context_window_days,
        )

    async def _fetch_behavior_inputs(self, user_id: str) -> tuple:
        profile, swipes, threads, matches = await asyncio.gather(
            self.data_access.fetch_user_profile(user_id),
            self.data_access.fetch_swipe_history(user_id),
            self.data_access.fetch_message_samples(user_id),
            self.data_access.fetch_match_history(user_id),
        )
        if profile is None:
            raise UserNotFoundError(user_id)
        return profile, swipes, threads, matches

    async def _fetch_all(self, user_id: str, now: datetime) -> tuple:
        """Fan out the four independent upstream reads and join them.

        If any read fails, the reads still in flight are cancelled before the
        error propagates.
        """
        since = now - timedelta(days=self.context_window_days)
        tasks = [
            asyncio.ensure_future(self._fetch_behavior_inputs(user_id)),
            asyncio.ensure_future(self.data_access.fetch_successful_matches(user_id)),
            asyncio.ensure_future(self.data_access.fetch_recent_interactions(user_id, since)),
            asyncio.ensure_future(self.data_access.fetch_candidate_pool(user_id)),
        ]
        try:
            return await asyncio.gather(*tasks)
        except Exception:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _load(self, user_id: str, now: datetime) -> _UpstreamData:
        """Read and derive everything a ranking needs, under one deadline."""
        try:
            behavior_inputs, successful, interactions, pool = await asyncio.wait_for(
                self._fetch_all(user_id, now),
                timeout=self.timeout_seconds,
            )
        except asyncio.TimeoutError:
            logger.error(
                f"Upstream reads for {user_id} timed out after {self.timeout_seconds}s"
            )
            raise UpstreamTimeoutError(user_id, self.timeout_seconds)

        user, swipes, threads, matches = behavior_inputs

        profile = self.behavior_builder.build(swipes, threads, matches)
        patterns = self.pattern_miner.mine(user, successful, reference_date=now)

        context = ContextSnapshot(
            now=now,
            interactions=tuple(interactions),
            window_days=self.context_window_days,
        )

        return _UpstreamData(
            signals=UserSignals(user=user, profile=profile, patterns=tuple(patterns)),
            context=context,
            candidates=list(pool),
        )

    def _coerce_candidate(self, record: CandidateRecord) -> Candidate:
        if isinstance(record, Candidate):
            return record
        try:
            return Candidate.model_validate(record)
        except ValidationError as e:
            candidate_id = record.get("user_id") if hasattr(record, "get") else None
            raise MalformedCandidateError(
                candidate_id,
                reason=f"{e.error_count()} validation errors",
            ) from e

    def rank_candidate(
        self,
        record: CandidateRecord,
        signals: UserSignals,
        context: ContextSnapshot,
    ) -> RankedCandidate:
        """Score, boost and explain one candidate.

        Pure with respect to its inputs, so candidates can be ranked in any
        order or in parallel.

        Raises:
            MalformedCandidateError: If the candidate cannot be scored
        """
        candidate = self._coerce_candidate(record)
        score = self.scoring_engine.score(
            signals.user, candidate, signals.profile, signals.patterns
        )
        smart_score, factors = self.booster.boost(score.smart_score, candidate, context)

        return RankedCandidate(
            candidate=candidate,
            base_score=score.base_score,
            behavior_score=score.behavior_score,
            pattern_score=score.pattern_score,
            smart_score=smart_score,
            insights=tuple(self.insight_generator.generate(score.signals)),
            contextual_factors=factors,
        )

    def rank_candidates(
        self,
        records: Sequence[CandidateRecord],
        signals: UserSignals,
        context: ContextSnapshot,
    ) -> list[RankedCandidate]:
        """Rank a candidate pool, skipping malformed candidates.

        Returns:
            Ranked candidates sorted by smart score, pool order on ties
        """
        ranked = []
        skipped = 0

        for record in records:
            try:
                ranked.append(self.rank_candidate(record, signals, context))
            except MalformedCandidateError as e:
                skipped += 1
                logger.warning(f"Skipping candidate: {e}")

        # sorted() is stable, so equal scores keep pool order
        ranked = sorted(ranked, key=lambda r: r.smart_score, reverse=True)

        if skipped:
            logger.info(f"Skipped {skipped} malformed candidates for {signals.user.user_id}")

        return ranked

    async def get_user_signals(
        self,
        user_id: str,
        now: Optional[datetime] = None,
    ) -> UserSignals:
        """Behavior profile and success patterns for diagnostics.

        Raises:
            UserNotFoundError: If the user does not exist
            UpstreamTimeoutError: If upstream reads exceed the deadline
        """
        now = to_naive_utc(now) if now is not None else utc_now()
        data = await self._load(user_id, now)
        return data.signals

    async def get_recommendations(
        self,
        user_id: str,
        now: Optional[datetime] = None,
        limit: Optional[int] = None,
    ) -> list[RankedCandidate]:
        """Rank candidates for a user.

        Args:
            user_id: The requesting user
            now: Reference time for boosts and recency (default: current UTC
                time); aware values are converted to naive UTC
            limit: Maximum number of results, at least 0 (default: all)

        Returns:
            Ranked candidates, highest smart score first. An empty list is a
            valid result.

        Raises:
            UserNotFoundError: If the user does not exist
            UpstreamTimeoutError: If upstream reads exceed the deadline
            ValueError: If limit is negative
        """
        if limit is not None and limit < 0:
            raise ValueError(f"limit must be at least 0, got {limit}")

        now = to_naive_utc(now) if now is not None else utc_now()

        cached = self.cache.get(user_id, now, limit)
        if cached:
            try:
                return _RANKING_ADAPTER.validate_json(cached)
            except ValidationError as e:
                logger.warning(
                    f"Discarding unreadable cached ranking for {user_id}: "
                    f"{e.error_count()} errors"
                )

        data = await self._load(user_id, now)
        ranked = self.rank_candidates(data.candidates, data.signals, data.context)

        if limit is not None:
            ranked = ranked[:limit]

        logger.info(
            f"Ranked {len(ranked)} candidates for {user_id} "
            f"({len(data.signals.patterns)} patterns, "
            f"{len(data.signals.profile.preferred_industries)} preferred industries)"
        )

        self.cache.set(user_id, now, _RANKING_ADAPTER.dump_json(ranked).decode(), limit)

        return ranked
