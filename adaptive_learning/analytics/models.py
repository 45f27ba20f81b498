"""
Analytics Models

Data types shared by the attempt ledger, session tracker and the performance
calculators: the immutable attempt record, learning sessions and the derived
per-concept, per-realm and per-user summaries.
"""

import enum
import datetime
from typing import Any, Dict, List, Optional, Tuple
from dataclasses import dataclass, field

from adaptive_learning.common.exceptions import ConfigurationError
from adaptive_learning.common.serialization import SerializableMixin


class Trend(enum.Enum):
    """Short-term direction of a learner's accuracy on a concept."""
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"

    @classmethod
    def from_delta(cls, delta: float, threshold: float = 0.1) -> 'Trend':
        """
        Classify an accuracy change.

        Args:
            delta: Recent accuracy minus older accuracy
            threshold: Minimum absolute change that counts as movement

        Returns:
            Corresponding trend
        """
        if delta > threshold:
            return cls.IMPROVING
        if delta < -threshold:
            return cls.DECLINING
        return cls.STABLE


class Priority(enum.Enum):
    """Remediation priority of a weak area."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"

    @property
    def weight(self) -> int:
        """Sort weight, higher first."""
        return {
            Priority.HIGH: 3,
            Priority.MEDIUM: 2,
            Priority.LOW: 1
        }[self]


class SessionType(enum.Enum):
    """Kind of activity a learning session was started for."""
    PRACTICE = "practice"
    DAILY_QUEST = "daily_quest"
    BOSS_BATTLE = "boss_battle"
    TOURNAMENT = "tournament"


class StreakType(enum.Enum):
    """What a streak counts."""
    DAILY = "daily"
    CHALLENGE = "challenge"
    PERFECT_SCORE = "perfect_score"


class TimeWindow(enum.Enum):
    """Sliding windows supported by the velocity calculation."""
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"

    @property
    def days(self) -> int:
        """Length of the window in days."""
        return {
            TimeWindow.DAILY: 1,
            TimeWindow.WEEKLY: 7,
            TimeWindow.MONTHLY: 30
        }[self]

    @classmethod
    def parse(cls, value: Any) -> 'TimeWindow':
        """
        Convert a window name to a TimeWindow.

        Raises:
            ConfigurationError: If the name is not a known window
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower())
        except ValueError as e:
            raise ConfigurationError(
                f"Unknown time window '{value}', expected one of {[w.value for w in cls]}",
                config_key="time_window",
                original_exception=e
            )


@dataclass(frozen=True)
class ChallengeMetadata:
    """Challenge context supplied by the challenge-evaluation collaborator."""
    realm_id: str
    challenge_type: str
    concepts: Tuple[str, ...] = ()
    device_type: str = "desktop"
    session_type: SessionType = SessionType.PRACTICE

    def __post_init__(self):
        # Accept any iterable of tags but store an immutable tuple
        object.__setattr__(self, "concepts", tuple(self.concepts))


@dataclass(frozen=True)
class AnswerSubmission:
    """The learner's answer and how long it took."""
    response: Any
    time_elapsed: float
    hints_used: int = 0


@dataclass(frozen=True)
class ChallengeOutcome:
    """Evaluation result for an answer."""
    is_correct: bool
    score: float


@dataclass(frozen=True)
class AttemptMetadata(SerializableMixin):
    """Per-attempt context copied from the challenge."""
    realm_id: str
    challenge_type: str
    concepts: Tuple[str, ...] = ()
    device_type: str = "desktop"


@dataclass(frozen=True)
class AttemptRecord(SerializableMixin):
    """One evaluated response to one challenge. Never mutated once created."""
    id: str
    user_id: str
    challenge_id: str
    start_time: datetime.datetime
    end_time: datetime.datetime
    is_correct: bool
    score: float
    time_elapsed: float
    hints_used: int = 0
    response: Any = None
    metadata: AttemptMetadata = field(default_factory=lambda: AttemptMetadata(realm_id="", challenge_type=""))

    @property
    def concepts(self) -> Tuple[str, ...]:
        return self.metadata.concepts


@dataclass
class LearningSession(SerializableMixin):
    """A run of temporally adjacent attempts by one learner."""

    __computed_fields__ = ["duration_seconds"]

    id: str
    user_id: str
    start_time: datetime.datetime
    end_time: datetime.datetime
    attempt_ids: List[str] = field(default_factory=list)
    challenges_attempted: List[str] = field(default_factory=list)
    total_score: float = 0.0
    concepts_reinforced: List[str] = field(default_factory=list)
    new_concepts_learned: List[str] = field(default_factory=list)
    session_type: SessionType = SessionType.PRACTICE
    device_type: str = "desktop"

    @property
    def duration_seconds(self) -> float:
        """Session duration in seconds."""
        return (self.end_time - self.start_time).total_seconds()

    @property
    def attempt_count(self) -> int:
        return len(self.attempt_ids)


@dataclass(frozen=True)
class ConceptPerformance(SerializableMixin):
    """Aggregated performance of one learner on one concept tag."""
    concept: str
    accuracy: float
    average_time: float
    total_attempts: int
    recent_trend: Trend = Trend.STABLE
    confidence: float = 0.3


@dataclass
class StreakData(SerializableMixin):
    """Consecutive-day activity streak."""
    current_streak: int = 0
    longest_streak: int = 0
    last_activity_date: Optional[datetime.datetime] = None
    streak_type: StreakType = StreakType.DAILY
    streak_multiplier: float = 1.0

    @staticmethod
    def multiplier_for(current_streak: int) -> float:
        """Reward multiplier, capped at 2.0x."""
        return 1 + min(current_streak * 0.1, 1.0)


@dataclass(frozen=True)
class RealmProgress(SerializableMixin):
    """Roll-up of a learner's work inside one curriculum area."""
    realm_id: str
    realm_name: str
    completion_percentage: float
    average_score: float
    time_spent: float
    challenges_completed: int
    total_challenges: int
    strongest_challenge_types: List[str] = field(default_factory=list)
    weakest_challenge_types: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class WeakArea(SerializableMixin):
    """A concept the learner keeps getting wrong, with where it hurts most."""
    concept: str
    challenge_type: str
    realm_id: str
    accuracy: float
    sample_size: int
    priority: Priority
    recommended_actions: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class LearningVelocityData(SerializableMixin):
    """Rate of improvement over a time window."""
    user_id: str
    time_window: TimeWindow
    concepts_learned: int
    challenges_completed: int
    accuracy_improvement: float
    speed_improvement: float
    difficulty_progression: float
    calculated_at: datetime.datetime


@dataclass
class PerformanceMetrics(SerializableMixin):
    """Per-learner performance snapshot."""
    user_id: str
    overall_accuracy: float = 0.0
    average_response_time: float = 0.0
    strongest_concepts: List[ConceptPerformance] = field(default_factory=list)
    weakest_concepts: List[ConceptPerformance] = field(default_factory=list)
    concept_performance: Dict[str, ConceptPerformance] = field(default_factory=dict)
    learning_velocity: int = 0
    streak_data: StreakData = field(default_factory=StreakData)
    realm_progress: List[RealmProgress] = field(default_factory=list)
    total_challenges_completed: int = 0
    total_time_spent: float = 0.0
    last_updated: Optional[datetime.datetime] = None

    def realm(self, realm_id: str) -> Optional[RealmProgress]:
        """Progress for ``realm_id``, or None if the learner never played it."""
        for progress in self.realm_progress:
            if progress.realm_id == realm_id:
                return progress
        return None

    def is_stale(self, now: datetime.datetime, max_age_seconds: float) -> bool:
        """Whether this snapshot is older than ``max_age_seconds``."""
        if self.last_updated is None:
            return True
        return (now - self.last_updated).total_seconds() > max_age_seconds
