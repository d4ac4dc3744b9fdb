"""
Core Data Models

Pydantic models for the read-only snapshots the recommendation engine consumes:
profiles, swipes, message samples, matches and interactions.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Optional

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    field_validator,
    model_validator,
)


def _sorted_list(values: frozenset) -> list:
    return sorted(values)


# Sets serialize as sorted lists so dumped output is stable across processes
TagSet = Annotated[frozenset[str], PlainSerializer(_sorted_list, return_type=list[str])]
SlotSet = Annotated[frozenset[int], PlainSerializer(_sorted_list, return_type=list[int])]


def to_naive_utc(timestamp: datetime) -> datetime:
    """Normalize a timestamp to naive UTC; naive values are taken as UTC already."""
    if timestamp.tzinfo is None or timestamp.utcoffset() is None:
        return timestamp
    return timestamp.astimezone(timezone.utc).replace(tzinfo=None)


def utc_now() -> datetime:
    """Current time as naive UTC."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


# All timestamps are compared as naive UTC
Timestamp = Annotated[datetime, AfterValidator(to_naive_utc)]


def day_of_week(timestamp: datetime) -> int:
    """Day index 0-6 with 0 = Sunday, as stored in platform activity data."""
    return (timestamp.weekday() + 1) % 7


class SwipeDirection(str, Enum):
    """Direction of a swipe action."""
    LIKE = "like"
    PASS = "pass"


class ProfileType(str, Enum):
    """The two sides of the marketplace."""
    ENTREPRENEUR = "entrepreneur"
    FUNDER = "funder"

    @property
    def counterpart(self) -> "ProfileType":
        if self is ProfileType.ENTREPRENEUR:
            return ProfileType.FUNDER
        return ProfileType.ENTREPRENEUR


class VerificationLevel(str, Enum):
    """Verification tiers, lowest first."""
    NONE = "None"
    BUSINESS_PLAN = "BusinessPlan"
    USE_CASE = "UseCase"
    DEMOGRAPHIC_ALIGNMENT = "DemographicAlignment"
    APP_UX_UI = "AppUXUI"
    FISCAL_ANALYSIS = "FiscalAnalysis"

    @property
    def rank(self) -> int:
        return list(VerificationLevel).index(self)


class MatchStatus(str, Enum):
    """Lifecycle state of a match record."""
    PENDING = "pending"
    MATCHED = "matched"
    REJECTED = "rejected"


class InvestmentRange(BaseModel):
    """Inclusive investment amount range."""
    model_config = ConfigDict(frozen=True)

    min: float = Field(ge=0.0)
    max: float = Field(ge=0.0)

    @model_validator(mode="after")
    def _check_order(self) -> "InvestmentRange":
        if self.min > self.max:
            raise ValueError(f"investment range min {self.min} exceeds max {self.max}")
        return self

    def contains(self, amount: float) -> bool:
        return self.min <= amount <= self.max

    @property
    def midpoint(self) -> float:
        return (self.min + self.max) / 2


class ActivityPattern(BaseModel):
    """Declared activity window of a profile."""
    model_config = ConfigDict(frozen=True)

    optimal_hours: SlotSet = frozenset()
    active_days: SlotSet = frozenset()

    @field_validator("optimal_hours")
    @classmethod
    def _check_hours(cls, value: frozenset[int]) -> frozenset[int]:
        if any(h < 0 or h > 23 for h in value):
            raise ValueError("optimal hours must be within 0-23")
        return value

    @field_validator("active_days")
    @classmethod
    def _check_days(cls, value: frozenset[int]) -> frozenset[int]:
        if any(d < 0 or d > 6 for d in value):
            raise ValueError("active days must be within 0-6")
        return value


class Profile(BaseModel):
    """Static attributes of a platform user."""
    model_config = ConfigDict(frozen=True)

    user_id: str = Field(min_length=1)
    profile_type: Optional[ProfileType] = None
    display_name: Optional[str] = None
    industries: TagSet = frozenset()
    years_experience: Optional[float] = Field(default=None, ge=0.0)
    desired_investment: Optional[float] = Field(
        default=None,
        ge=0.0,
        description="Amount an entrepreneur is asking for",
    )
    investment_range: Optional[InvestmentRange] = Field(
        default=None,
        description="Capacity a funder is willing to deploy",
    )
    verification_level: VerificationLevel = VerificationLevel.NONE

    @property
    def name(self) -> str:
        return self.display_name or self.user_id

    @property
    def investment_interval(self) -> Optional[tuple[float, float]]:
        """Investment ask as [amount, amount] or capacity as [min, max]."""
        ask = None
        if self.desired_investment is not None:
            ask = (self.desired_investment, self.desired_investment)
        capacity = None
        if self.investment_range is not None:
            capacity = (self.investment_range.min, self.investment_range.max)

        if self.profile_type is ProfileType.FUNDER:
            return capacity or ask
        return ask or capacity

    @property
    def investment_figure(self) -> Optional[float]:
        """Single representative investment amount."""
        interval = self.investment_interval
        if interval is None:
            return None
        return (interval[0] + interval[1]) / 2


class Candidate(Profile):
    """A profile under consideration for recommendation."""
    activity: Optional[ActivityPattern] = None
    mutual_connections: int = Field(default=0, ge=0)

    def missing_fields(self) -> list[str]:
        """Required static attributes that are absent."""
        missing = []
        if self.profile_type is None:
            missing.append("profile_type")
        if not self.industries:
            missing.append("industries")
        if self.years_experience is None:
            missing.append("years_experience")
        if self.investment_interval is None:
            missing.append("investment")
        return missing

    @property
    def is_complete(self) -> bool:
        return not self.missing_fields()


class SwipeEvent(BaseModel):
    """A single like/pass decision made by the subject user."""
    model_config = ConfigDict(frozen=True)

    subject_user_id: str
    target_user_id: str
    target_industries: TagSet = frozenset()
    direction: SwipeDirection
    timestamp: Timestamp
    target_investment: Optional[float] = Field(default=None, ge=0.0)

    @property
    def is_like(self) -> bool:
        return self.direction is SwipeDirection.LIKE


class MessageThreadSample(BaseModel):
    """Message timestamps of one conversation the user took part in."""
    model_config = ConfigDict(frozen=True)

    conversation_id: str
    message_timestamps: tuple[Timestamp, ...] = ()

    @property
    def message_count(self) -> int:
        return len(self.message_timestamps)


class MatchRecord(BaseModel):
    """A match initiated by or with the user, in any state."""
    model_config = ConfigDict(frozen=True)

    match_id: str
    user_id: str
    matched_with_id: str
    status: MatchStatus = MatchStatus.PENDING
    created_at: Optional[Timestamp] = None

    def involves(self, user_id: str) -> bool:
        return user_id in (self.user_id, self.matched_with_id)

    def counterparty_of(self, user_id: str) -> str:
        return self.matched_with_id if self.user_id == user_id else self.user_id


class MatchMetadata(BaseModel):
    """Conversation facts about a mutually accepted match."""
    model_config = ConfigDict(frozen=True)

    match_id: str
    matched_at: Optional[Timestamp] = Field(default=None, description="None when not recorded")
    messages_exchanged: int = Field(default=0, ge=0)


class SuccessfulMatch(BaseModel):
    """A mutually accepted match together with the other party's profile."""
    model_config = ConfigDict(frozen=True)

    counterparty: Profile
    metadata: MatchMetadata


class InteractionEvent(BaseModel):
    """Any platform interaction between two users (view, swipe, message)."""
    model_config = ConfigDict(frozen=True)

    user_id: str = Field(description="User who performed the interaction")
    target_user_id: str
    kind: str = "interaction"
    created_at: Timestamp
