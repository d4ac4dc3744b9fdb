"""
Data Access Layer

Interface to the platform's durable storage, plus an implementation served
from a loaded platform snapshot.

Usage:
    from smartmatch.pipeline import SnapshotDataAccess, load_platform_snapshot

    data_access = SnapshotDataAccess(load_platform_snapshot("./export"))
    profile = await data_access.fetch_user_profile("u_001")
"""

import logging
from abc import ABC, abstractmethod
from collections.abc import Mapping
from datetime import datetime
from typing import Any, Optional, Union

from pydantic import ValidationError

from smartmatch.models.entities import (
    Candidate,
    InteractionEvent,
    MatchMetadata,
    MatchRecord,
    MatchStatus,
    MessageThreadSample,
    Profile,
    ProfileType,
    SuccessfulMatch,
    SwipeEvent,
    to_naive_utc,
)
from smartmatch.pipeline.ingest import PlatformSnapshot

logger = logging.getLogger(__name__)

CandidateRecord = Union[Candidate, Mapping[str, Any]]


class DataAccess(ABC):
    """Read-only source of the snapshots the recommendation engine consumes.

    Implementations own consistency and retries; the engine treats every
    method as an independent read.
    """

    @abstractmethod
    async def fetch_user_profile(self, user_id: str) -> Optional[Profile]:
        """Return the user's static profile, or None if the user does not exist."""
        pass

    @abstractmethod
    async def fetch_swipe_history(self, user_id: str) -> list[SwipeEvent]:
        """Return swipes made by the user."""
        pass

    @abstractmethod
    async def fetch_message_samples(self, user_id: str) -> list[MessageThreadSample]:
        """Return the user's messages grouped by conversation."""
        pass

    @abstractmethod
    async def fetch_match_history(self, user_id: str) -> list[MatchRecord]:
        """Return all match records initiated by or with the user."""
        pass

    @abstractmethod
    async def fetch_successful_matches(self, user_id: str) -> list[SuccessfulMatch]:
        """Return mutually accepted matches with the counterparty profile."""
        pass

    @abstractmethod
    async def fetch_recent_interactions(
        self,
        user_id: str,
        since: datetime,
    ) -> list[InteractionEvent]:
        """Return interactions by or with the user created at or after ``since``."""
        pass

    @abstractmethod
    async def fetch_candidate_pool(self, user_id: str) -> list[CandidateRecord]:
        """Return candidate profiles, either as models or raw records."""
        pass


class SnapshotDataAccess(DataAccess):
    """DataAccess served from an in-memory PlatformSnapshot."""

    def __init__(self, snapshot: PlatformSnapshot):
        self.snapshot = snapshot
        self._users: dict[str, dict[str, Any]] = {}
        for record in snapshot.users:
            user_id = record.get("user_id")
            if user_id:
                self._users.setdefault(str(user_id), record)

    def _profile(self, user_id: str) -> Optional[Profile]:
        record = self._users.get(user_id)
        if record is None:
            return None
        try:
            return Profile.model_validate(record)
        except ValidationError as e:
            logger.warning(f"Invalid profile record for {user_id}: {e.error_count()} errors")
            return Profile(user_id=user_id)

    async def fetch_user_profile(self, user_id: str) -> Optional[Profile]:
        return self._profile(user_id)

    async def fetch_swipe_history(self, user_id: str) -> list[SwipeEvent]:
        return [s for s in self.snapshot.swipes if s.subject_user_id == user_id]

    async def fetch_message_samples(self, user_id: str) -> list[MessageThreadSample]:
        conversations: dict[str, list[datetime]] = {}
        participants: dict[str, set[str]] = {}

        for message in self.snapshot.messages:
            conversations.setdefault(message.conversation_id, []).append(message.sent_at)
            members = participants.setdefault(message.conversation_id, set())
            members.add(message.sender_id)
            if message.recipient_id:
                members.add(message.recipient_id)

        return [
            MessageThreadSample(
                conversation_id=conversation_id,
                message_timestamps=tuple(sorted(timestamps)),
            )
            for conversation_id, timestamps in conversations.items()
            if user_id in participants[conversation_id]
        ]

    async def fetch_match_history(self, user_id: str) -> list[MatchRecord]:
        return [m for m in self.snapshot.matches if m.involves(user_id)]

    async def fetch_successful_matches(self, user_id: str) -> list[SuccessfulMatch]:
        results = []
        for match in self.snapshot.matches:
            if match.status is not MatchStatus.MATCHED or not match.involves(user_id):
                continue

            counterparty = self._profile(match.counterparty_of(user_id))
            if counterparty is None:
                logger.warning(f"Match {match.match_id} references unknown user, skipping")
                continue

            messages = sum(
                1 for m in self.snapshot.messages if m.conversation_id == match.match_id
            )
            results.append(SuccessfulMatch(
                counterparty=counterparty,
                metadata=MatchMetadata(
                    match_id=match.match_id,
                    matched_at=match.created_at,
                    messages_exchanged=messages,
                ),
            ))
        return results

    async def fetch_recent_interactions(
        self,
        user_id: str,
        since: datetime,
    ) -> list[InteractionEvent]:
        since = to_naive_utc(since)
        return sorted(
            (
                i for i in self.snapshot.interactions
                if user_id in (i.user_id, i.target_user_id) and i.created_at >= since
            ),
            key=lambda i: i.created_at,
            reverse=True,
        )

    async def fetch_candidate_pool(self, user_id: str) -> list[CandidateRecord]:
        """Users of the opposite side who have no match record with the user."""
        user = self._users.get(user_id)
        if user is None:
            return []

        excluded = {
            m.counterparty_of(user_id) for m in self.snapshot.matches if m.involves(user_id)
        }
        excluded.add(user_id)

        wanted: Optional[str] = None
        try:
            wanted = ProfileType(user.get("profile_type")).counterpart.value
        except ValueError:
            logger.warning(f"User {user_id} has no valid profile type, using all profiles")

        return [
            record
            for uid, record in self._users.items()
            if uid not in excluded
            and (wanted is None or record.get("profile_type") in (wanted, None))
        ]
