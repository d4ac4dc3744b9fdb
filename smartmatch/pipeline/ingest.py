"""
Platform Export Ingestion

Loads a platform data export (CSV files) into a read-only snapshot.

Expected files:
    users.csv         required; one row per profile
    swipes.csv        optional; swipe actions
    messages.csv      optional; chat messages (conversation_id = match_id)
    matches.csv       optional; match records in any state
    interactions.csv  optional; views, swipes and messages as raw events

Multi-valued cells (industries, optimal_hours, active_days) are pipe-separated.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import pandas as pd
from pydantic import BaseModel, Field

from smartmatch.models.entities import (
    InteractionEvent,
    MatchRecord,
    SwipeDirection,
    SwipeEvent,
    Timestamp,
    to_naive_utc,
)

logger = logging.getLogger(__name__)

LIST_SEPARATOR = "|"

_LIKE_ALIASES = {"like", "right", "yes", "superlike"}
_PASS_ALIASES = {"pass", "left", "no"}


class MessageRecord(BaseModel):
    """Raw message row from messages.csv."""
    conversation_id: str
    sender_id: str
    recipient_id: Optional[str] = None
    sent_at: Timestamp


class PlatformSnapshot(BaseModel):
    """Container for all loaded platform export data."""
    users: list[dict[str, Any]] = Field(default_factory=list)
    swipes: list[SwipeEvent] = Field(default_factory=list)
    messages: list[MessageRecord] = Field(default_factory=list)
    matches: list[MatchRecord] = Field(default_factory=list)
    interactions: list[InteractionEvent] = Field(default_factory=list)

    # Metadata
    source_directory: Optional[str] = None
    loaded_files: list[str] = Field(default_factory=list)
    skipped_files: list[str] = Field(default_factory=list)


def _parse_date(value: Any, formats: list[str] = None) -> Optional[datetime]:
    """Parse a timestamp cell with multiple format support."""
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None

    formats = formats or [
        "%Y-%m-%dT%H:%M:%S%z",  # ISO with UTC offset
        "%Y-%m-%d %H:%M:%S%z",
        "%Y-%m-%dT%H:%M:%S",  # ISO with time
        "%Y-%m-%d %H:%M:%S",
        "%Y-%m-%dT%H:%M",
        "%Y-%m-%d %H:%M",
        "%Y-%m-%d",
        "%m/%d/%Y %H:%M",
        "%m/%d/%Y",
    ]

    value = str(value).strip()
    if not value:
        return None

    for fmt in formats:
        try:
            return to_naive_utc(datetime.strptime(value, fmt))
        except ValueError:
            continue

    logger.warning(f"Could not parse date: {value}")
    return None


def _clean(value: Any) -> Optional[str]:
    """Strip a text cell, mapping blanks and NaN to None."""
    if value is None or (not isinstance(value, str) and pd.isna(value)):
        return None
    text = str(value).strip()
    return text or None


def _split_list(value: Any) -> list[str]:
    """Split a pipe-separated cell into its non-empty parts."""
    text = _clean(value)
    if text is None:
        return []
    return [part.strip() for part in text.split(LIST_SEPARATOR) if part.strip()]


def _to_float(value: Any) -> Optional[float]:
    text = _clean(value)
    if text is None:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def _read_csv(filepath: Path) -> pd.DataFrame:
    """Read a CSV with every cell as text and normalized column names."""
    df = pd.read_csv(filepath, dtype=str, keep_default_na=True)
    df.columns = [col.strip().lower().replace(" ", "_") for col in df.columns]
    return df


def _user_record(row: pd.Series) -> dict[str, Any]:
    """Shape a users.csv row like a Candidate, leaving validation to the pipeline."""
    record: dict[str, Any] = {
        "user_id": _clean(row.get("user_id")),
        "profile_type": (_clean(row.get("profile_type")) or "").lower() or None,
        "display_name": _clean(row.get("display_name")),
        "industries": _split_list(row.get("industries")),
        "years_experience": _clean(row.get("years_experience")),
        "desired_investment": _to_float(row.get("desired_investment")),
        "verification_level": _clean(row.get("verification_level")) or "None",
        "mutual_connections": _clean(row.get("mutual_connections")) or 0,
    }

    investment_min = _to_float(row.get("investment_min"))
    investment_max = _to_float(row.get("investment_max"))
    if investment_min is not None and investment_max is not None:
        record["investment_range"] = {"min": investment_min, "max": investment_max}

    optimal_hours = _split_list(row.get("optimal_hours"))
    active_days = _split_list(row.get("active_days"))
    if optimal_hours or active_days:
        record["activity"] = {"optimal_hours": optimal_hours, "active_days": active_days}

    return record


def _load_users(filepath: Path) -> list[dict[str, Any]]:
    """Load users.csv as raw profile records."""
    try:
        df = _read_csv(filepath)
    except Exception as e:
        logger.error(f"Error loading users from {filepath}: {e}")
        raise

    records = []
    for _, row in df.iterrows():
        record = _user_record(row)
        if record["user_id"] is None:
            logger.warning("Skipping user row without user_id")
            continue
        records.append(record)

    logger.info(f"Loaded {len(records)} users from {filepath.name}")
    return records


def _parse_direction(value: Any) -> SwipeDirection:
    text = (_clean(value) or "").lower()
    if text in _LIKE_ALIASES:
        return SwipeDirection.LIKE
    if text in _PASS_ALIASES:
        return SwipeDirection.PASS
    raise ValueError(f"unknown swipe direction {value!r}")


def _load_swipes(filepath: Path) -> list[SwipeEvent]:
    """Load swipes.csv."""
    records = []
    df = _read_csv(filepath)

    for _, row in df.iterrows():
        try:
            records.append(SwipeEvent(
                subject_user_id=_clean(row.get("user_id")),
                target_user_id=_clean(row.get("target_user_id")),
                target_industries=_split_list(row.get("target_industries")),
                direction=_parse_direction(row.get("direction")),
                timestamp=_parse_date(row.get("created_at")),
                target_investment=_to_float(row.get("target_investment")),
            ))
        except Exception as e:
            logger.warning(f"Skipping malformed swipe row: {e}")

    logger.info(f"Loaded {len(records)} swipes from {filepath.name}")
    return records


def _load_messages(filepath: Path) -> list[MessageRecord]:
    """Load messages.csv."""
    records = []
    df = _read_csv(filepath)

    for _, row in df.iterrows():
        try:
            records.append(MessageRecord(
                conversation_id=_clean(row.get("conversation_id")),
                sender_id=_clean(row.get("sender_id")),
                recipient_id=_clean(row.get("recipient_id")),
                sent_at=_parse_date(row.get("sent_at")),
            ))
        except Exception as e:
            logger.warning(f"Skipping malformed message row: {e}")

    logger.info(f"Loaded {len(records)} messages from {filepath.name}")
    return records


def _load_matches(filepath: Path) -> list[MatchRecord]:
    """Load matches.csv."""
    records = []
    df = _read_csv(filepath)

    for _, row in df.iterrows():
        try:
            records.append(MatchRecord(
                match_id=_clean(row.get("match_id")),
                user_id=_clean(row.get("user_id")),
                matched_with_id=_clean(row.get("matched_with_id")),
                status=(_clean(row.get("status")) or "pending").lower(),
                created_at=_parse_date(row.get("created_at")),
            ))
        except Exception as e:
            logger.warning(f"Skipping malformed match row: {e}")

    logger.info(f"Loaded {len(records)} matches from {filepath.name}")
    return records


def _load_interactions(filepath: Path) -> list[InteractionEvent]:
    """Load interactions.csv."""
    records = []
    df = _read_csv(filepath)

    for _, row in df.iterrows():
        try:
            records.append(InteractionEvent(
                user_id=_clean(row.get("user_id")),
                target_user_id=_clean(row.get("target_user_id")),
                kind=_clean(row.get("kind")) or "interaction",
                created_at=_parse_date(row.get("created_at")),
            ))
        except Exception as e:
            logger.warning(f"Skipping malformed interaction row: {e}")

    logger.info(f"Loaded {len(records)} interactions from {filepath.name}")
    return records


def _find_file(directory: Path, patterns: list[str]) -> Optional[Path]:
    """Find a file matching one of the patterns (case-insensitive)."""
    for pattern in patterns:
        exact_path = directory / pattern
        if exact_path.exists():
            return exact_path

        for f in directory.iterdir():
            if f.name.lower() == pattern.lower():
                return f

    return None


def load_platform_snapshot(directory: str | Path) -> PlatformSnapshot:
    """Load a platform export from directory.

    Args:
        directory: Path to the export directory

    Returns:
        PlatformSnapshot containing all loaded data

    Raises:
        FileNotFoundError: If the directory or users.csv is missing
        ValueError: If no users could be loaded
    """
    directory = Path(directory)

    if not directory.exists():
        raise FileNotFoundError(f"Directory not found: {directory}")

    snapshot = PlatformSnapshot(source_directory=str(directory))

    users_file = _find_file(directory, ["users.csv", "profiles.csv"])
    if users_file is None:
        raise FileNotFoundError(f"users.csv not found in {directory}")

    snapshot.users = _load_users(users_file)
    snapshot.loaded_files.append(users_file.name)

    if not snapshot.users:
        raise ValueError(f"No users loaded from {users_file.name}")

    optional_files = [
        ("swipes", "swipes.csv", _load_swipes),
        ("messages", "messages.csv", _load_messages),
        ("matches", "matches.csv", _load_matches),
        ("interactions", "interactions.csv", _load_interactions),
    ]

    for attribute, filename, loader in optional_files:
        filepath = _find_file(directory, [filename])
        if filepath is None:
            snapshot.skipped_files.append(filename)
            continue
        setattr(snapshot, attribute, loader(filepath))
        snapshot.loaded_files.append(filepath.name)

    logger.info(
        f"Platform export loaded: {len(snapshot.users)} users, "
        f"{len(snapshot.swipes)} swipes, {len(snapshot.messages)} messages, "
        f"{len(snapshot.matches)} matches, "
        f"{len(snapshot.loaded_files)} files loaded, "
        f"{len(snapshot.skipped_files)} files skipped"
    )

    return snapshot
