"""
Difficulty Models

Records produced by the adaptive difficulty engine: difficulty adjustments,
recommendations and personalized learning paths.
"""

import enum
import datetime
from typing import List, Optional
from dataclasses import dataclass, field

from adaptive_learning.common.exceptions import ValidationError
from adaptive_learning.common.serialization import SerializableMixin


@enum.unique
class AdjustmentSource(enum.Enum):
    """What produced a difficulty adjustment."""
    BATCH = "batch"  # Recommendation from aggregated performance
    REAL_TIME = "real_time"  # Rule triggered during play
    COLD_START = "cold_start"  # No relevant performance data


class RecommendationType(enum.Enum):
    CHALLENGE = "challenge"
    REALM = "realm"
    CONCEPT_REVIEW = "concept_review"
    DIFFICULTY_ADJUSTMENT = "difficulty_adjustment"


@dataclass(frozen=True)
class DifficultyAdjustment(SerializableMixin):
    """
    A difficulty decision for one learner and skill category.

    Adjustments are never modified after creation; a newer adjustment for the
    same category supersedes older ones.
    """

    __computed_fields__ = ["magnitude"]

    user_id: str
    skill_category: str
    current_difficulty: int
    recommended_difficulty: int
    reason: str
    confidence: float
    effective_date: datetime.datetime
    source: AdjustmentSource = AdjustmentSource.BATCH

    @property
    def magnitude(self) -> int:
        """Get the magnitude of the adjustment."""
        return self.recommended_difficulty - self.current_difficulty


@dataclass(frozen=True)
class RecentPerformance:
    """Short-window performance reported by the game client during play."""
    accuracy: float
    average_time: float
    streak: int = 0

    def validate(self) -> None:
        """
        Check the values are in range.

        Raises:
            ValidationError: If any value is out of range
        """
        errors = {}
        if not 0 <= self.accuracy <= 1:
            errors["accuracy"] = "must be between 0 and 1"
        if self.average_time < 0:
            errors["average_time"] = "must not be negative"
        if self.streak < 0:
            errors["streak"] = "must not be negative"
        if errors:
            raise ValidationError("Invalid recent performance", errors=errors)


@dataclass(frozen=True)
class Recommendation(SerializableMixin):
    """A suggested next activity."""
    id: str
    type: RecommendationType
    title: str
    description: str
    priority: int
    estimated_time: int
    expected_benefit: str
    challenge_id: Optional[str] = None
    realm_id: Optional[str] = None
    concepts: List[str] = field(default_factory=list)


@dataclass(frozen=True)
class LearningPathNode(SerializableMixin):
    """One step of a learning path."""
    challenge_id: str
    skill_category: str
    difficulty: int
    concepts: List[str]
    prerequisites: List[str]
    estimated_time: int
    priority: int


@dataclass
class PersonalizedLearningPath(SerializableMixin):
    """Ordered sequence of challenges towards a target level."""
    user_id: str
    current_level: int
    target_level: int
    path: List[LearningPathNode] = field(default_factory=list)
    estimated_completion_time: int = 0
    adaptation_history: List[DifficultyAdjustment] = field(default_factory=list)
    last_updated: Optional[datetime.datetime] = None


@dataclass(frozen=True)
class AdjustmentEffectiveness(SerializableMixin):
    """How well the learner is doing at the level an adjustment chose."""
    adjustment: DifficultyAdjustment
    mean_accuracy: Optional[float]
    effectiveness: float
