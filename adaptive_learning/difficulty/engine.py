"""
Adaptive Difficulty Engine

Chooses difficulty levels and learning sequences from a learner's performance
snapshot. Batch recommendations weigh accuracy, speed, data volume and trend;
real-time adjustments react to short bursts of play; learning paths walk the
curriculum progression and order unfinished work by need.
"""

import math
import datetime
from typing import Callable, Dict, List, Optional, Sequence

from adaptive_learning.common.config import AppConfig, get_config
from adaptive_learning.common.exceptions import NotFoundError, ValidationError
from adaptive_learning.common.logger import LoggerAdapter, app_logger, log_execution_time
from adaptive_learning.analytics.concepts import matching_concepts, mean_accuracy, round_half_up
from adaptive_learning.analytics.models import ConceptPerformance, PerformanceMetrics, Priority, Trend
from adaptive_learning.analytics.service import AnalyticsService
from adaptive_learning.analytics.store import MemoryUserStateStore, UserStateStore
from adaptive_learning.curriculum import CurriculumConfig
from adaptive_learning.difficulty.models import (
    AdjustmentEffectiveness, AdjustmentSource, DifficultyAdjustment, LearningPathNode,
    PersonalizedLearningPath, RecentPerformance, Recommendation, RecommendationType
)

# Module logger
logger = app_logger.getChild("difficulty.engine")

COLD_START_REASON = "No performance data available - starting with easier difficulty"

RECOMMENDATION_PRIORITY = {
    Priority.HIGH: 10,
    Priority.MEDIUM: 7,
    Priority.LOW: 4
}


def majority_trend(performances: Sequence[ConceptPerformance]) -> Trend:
    """Trend shared by more concepts, stable on a tie."""
    improving = sum(1 for p in performances if p.recent_trend == Trend.IMPROVING)
    declining = sum(1 for p in performances if p.recent_trend == Trend.DECLINING)
    if improving > declining:
        return Trend.IMPROVING
    if declining > improving:
        return Trend.DECLINING
    return Trend.STABLE


def node_priority(performances: Sequence[ConceptPerformance]) -> int:
    """Learning path priority, higher where the learner is weaker."""
    accuracy = mean_accuracy(performances)
    if accuracy is None:
        return 5
    if accuracy < 0.5:
        return 10
    if accuracy < 0.7:
        return 7
    if accuracy < 0.85:
        return 5
    return 3


def calculate_current_level(metrics: PerformanceMetrics) -> int:
    """
    Overall level of a learner.

    Combines accuracy (40 points), volume of work (30), realms entered
    (5 each) and the current streak (25), ten points per level.
    """
    accuracy_score = metrics.overall_accuracy * 40
    completion_score = min(metrics.total_challenges_completed / 10, 1) * 30
    realm_score = len(metrics.realm_progress) * 5
    streak_score = min(metrics.streak_data.current_streak / 7, 1) * 25

    return math.floor((accuracy_score + completion_score + realm_score + streak_score) / 10) + 1


class AdaptiveDifficultyEngine:
    """
    Per-learner, per-category difficulty decisions.

    Every adjustment the engine records is kept in the learner's history; the
    most recent adjustment for a category defines the learner's current
    difficulty there.
    """

    def __init__(
        self,
        analytics: AnalyticsService,
        config: Optional[AppConfig] = None,
        curriculum: Optional[CurriculumConfig] = None,
        history_store: Optional[UserStateStore[List[DifficultyAdjustment]]] = None,
        path_store: Optional[UserStateStore[PersonalizedLearningPath]] = None,
        clock: Optional[Callable[[], datetime.datetime]] = None
    ):
        """
        Initialize the engine.

        Args:
            analytics: Source of performance snapshots and weak areas
            config: Application configuration (the loaded global config if not provided)
            curriculum: Category mapping and learning progression
            history_store: Store for adjustment histories
            path_store: Store for the last generated learning path per user
            clock: Callable returning the current time (the analytics clock if not provided)
        """
        self.analytics = analytics
        self.config = config or analytics.config or get_config()
        self.settings = self.config.difficulty
        self.curriculum = curriculum or analytics.curriculum
        self.history_store = history_store or MemoryUserStateStore(name="difficulty_adjustments")
        self.path_store = path_store or MemoryUserStateStore(name="learning_paths")
        self.clock = clock or analytics.clock

    def _clamp(self, value: float) -> int:
        return int(max(self.settings.min_level, min(self.settings.max_level, value)))

    def _check_level(self, level: int, name: str) -> None:
        if not self.settings.min_level <= level <= self.settings.max_level:
            raise ValidationError(
                f"{name} must be between {self.settings.min_level} and {self.settings.max_level}",
                errors={name: level}
            )

    def _relevant_concepts(self, metrics: PerformanceMetrics, skill_category: str) -> List[ConceptPerformance]:
        return matching_concepts(metrics.concept_performance, self.curriculum.concepts_for(skill_category))

    def _record(self, adjustment: DifficultyAdjustment) -> None:
        self.history_store.get_or_create(adjustment.user_id, list).append(adjustment)

    @staticmethod
    def _adjustment_logger(adjustment: DifficultyAdjustment) -> LoggerAdapter:
        return LoggerAdapter(logger, {
            "user_id": adjustment.user_id,
            "skill_category": adjustment.skill_category,
            "source": adjustment.source.value
        })

    def get_adjustment_history(self, user_id: str) -> List[DifficultyAdjustment]:
        """All adjustments recorded for a learner, oldest first."""
        return list(self.history_store.get(user_id) or [])

    def get_current_difficulty(self, user_id: str, skill_category: str) -> int:
        """
        Current difficulty of a learner in a category.

        Returns:
            The recommended difficulty of the most recent adjustment for the
            category, or the default difficulty when there is none
        """
        latest = None
        for adjustment in self.get_adjustment_history(user_id):
            if adjustment.skill_category != skill_category:
                continue
            if latest is None or adjustment.effective_date >= latest.effective_date:
                latest = adjustment
        return latest.recommended_difficulty if latest else self.settings.default_difficulty

    async def calculate_optimal_difficulty(
        self,
        user_id: str,
        skill_category: str,
        current_difficulty: Optional[int] = None
    ) -> DifficultyAdjustment:
        """
        Recommend a difficulty from the learner's aggregated performance.

        The recommendation is not stored; see ``recalculate_difficulty``.

        Args:
            user_id: Learner id
            skill_category: Skill category to evaluate
            current_difficulty: Baseline level (the learner's current difficulty if not provided)

        Returns:
            Proposed difficulty adjustment

        Raises:
            ValidationError: If ``current_difficulty`` is out of range
        """
        if current_difficulty is not None:
            self._check_level(current_difficulty, "current_difficulty")

        settings = self.settings
        metrics = await self.analytics.get_performance_metrics(user_id)

        # Read after the await so adjustments recorded meanwhile are the baseline
        if current_difficulty is None:
            current_difficulty = self.get_current_difficulty(user_id, skill_category)
            self._check_level(current_difficulty, "current_difficulty")
        relevant = self._relevant_concepts(metrics, skill_category)
        now = self.clock()

        if not relevant:
            return DifficultyAdjustment(
                user_id=user_id,
                skill_category=skill_category,
                current_difficulty=current_difficulty,
                recommended_difficulty=max(settings.min_level, current_difficulty - 1),
                reason=COLD_START_REASON,
                confidence=settings.cold_start_confidence,
                effective_date=now,
                source=AdjustmentSource.COLD_START
            )

        accuracy = sum(p.accuracy for p in relevant) / len(relevant)
        avg_time = sum(p.average_time for p in relevant) / len(relevant)
        avg_attempts = sum(p.total_attempts for p in relevant) / len(relevant)
        target = settings.speed_target_seconds

        delta = 0.0
        confidence = settings.base_confidence
        reasons = []

        if accuracy > 0.9 and avg_time < target:
            delta += 2
            reasons.append("High accuracy and fast completion - increasing difficulty.")
        elif accuracy > 0.8 and avg_time < target * 1.2:
            delta += 1
            reasons.append("Good performance - slight difficulty increase.")
        elif accuracy < 0.5:
            delta -= 2
            reasons.append("Low accuracy - decreasing difficulty significantly.")
        elif accuracy < 0.6:
            delta -= 1
            reasons.append("Below target accuracy - decreasing difficulty.")

        if avg_time > target * 2:
            delta -= 1
            reasons.append("Slow completion times - reducing complexity.")

        if avg_attempts < settings.min_attempts_for_adjustment:
            confidence *= settings.low_sample_confidence_factor
            reasons.append("Limited data available.")

        trend = majority_trend(relevant)
        if trend == Trend.IMPROVING:
            delta += 0.5
            reasons.append("Improving trend detected.")
        elif trend == Trend.DECLINING:
            delta -= 0.5
            reasons.append("Declining performance - being conservative.")

        max_jump = settings.max_difficulty_jump
        delta = max(-max_jump, min(max_jump, delta))

        return DifficultyAdjustment(
            user_id=user_id,
            skill_category=skill_category,
            current_difficulty=current_difficulty,
            recommended_difficulty=self._clamp(round_half_up(current_difficulty + delta)),
            reason=" ".join(reasons),
            confidence=confidence,
            effective_date=now,
            source=AdjustmentSource.BATCH
        )

    async def recalculate_difficulty(self, user_id: str, skill_category: str) -> DifficultyAdjustment:
        """Compute a batch recommendation and record it in the learner's history."""
        adjustment = await self.calculate_optimal_difficulty(user_id, skill_category)
        self._record(adjustment)
        self._adjustment_logger(adjustment).info(
            f"Difficulty for user {user_id} in {skill_category}: "
            f"{adjustment.current_difficulty} -> {adjustment.recommended_difficulty} ({adjustment.reason})"
        )
        return adjustment

    async def adjust_difficulty_real_time(
        self,
        user_id: str,
        skill_category: str,
        recent_performance: RecentPerformance
    ) -> Optional[DifficultyAdjustment]:
        """
        React to performance reported during play.

        Rules are checked in order and the first match wins: an excellent run
        with a streak steps up, a poor run with no streak steps down, fast and
        accurate play steps up.

        Args:
            user_id: Learner id
            skill_category: Skill category being played
            recent_performance: Accuracy, average time and streak of the recent window

        Returns:
            The recorded adjustment, or None when no rule matched

        Raises:
            ValidationError: If ``recent_performance`` is out of range
        """
        recent_performance.validate()
        current = self.get_current_difficulty(user_id, skill_category)

        if recent_performance.accuracy >= 0.95 and recent_performance.streak >= 3:
            step, reason = 1, "Excellent recent performance with streak"
        elif recent_performance.accuracy <= 0.3 and recent_performance.streak == 0:
            step, reason = -1, "Poor recent performance - providing easier challenges"
        elif recent_performance.accuracy >= 0.8 and recent_performance.average_time < 30:
            step, reason = 1, "Fast and accurate - ready for harder challenges"
        else:
            return None

        adjustment = DifficultyAdjustment(
            user_id=user_id,
            skill_category=skill_category,
            current_difficulty=current,
            recommended_difficulty=self._clamp(current + step),
            reason=reason,
            confidence=self.settings.realtime_confidence,
            effective_date=self.clock(),
            source=AdjustmentSource.REAL_TIME
        )
        self._record(adjustment)
        self._adjustment_logger(adjustment).info(
            f"Real-time difficulty change for user {user_id} in {skill_category}: "
            f"{current} -> {adjustment.recommended_difficulty} ({reason})"
        )
        return adjustment

    def estimate_time(self, difficulty: int) -> int:
        """Estimated minutes for a challenge at ``difficulty``."""
        return round_half_up(self.settings.base_node_minutes * (1 + 0.3 * (difficulty - 1)))

    async def generate_challenge_recommendations(self, user_id: str) -> List[Recommendation]:
        """
        Suggest what the learner should do next.

        Covers up to three weak areas, up to two strong concepts ready for
        harder work, and a short challenge to keep an active streak.

        Returns:
            Recommendations, highest priority first
        """
        metrics = await self.analytics.get_performance_metrics(user_id)
        weak_areas = await self.analytics.identify_weak_areas(user_id)
        recommendations = []

        for weak_area in weak_areas[:3]:
            category = self.curriculum.resolve_category(weak_area.challenge_type)
            difficulty = (await self.calculate_optimal_difficulty(user_id, category)).recommended_difficulty
            recommendations.append(Recommendation(
                id=f"weak-area-{weak_area.concept}",
                type=RecommendationType.CHALLENGE,
                title=f"Practice {weak_area.concept}",
                description=f"Focus on {weak_area.concept} with {difficulty}/{self.settings.max_level} difficulty",
                priority=RECOMMENDATION_PRIORITY[weak_area.priority],
                challenge_id=f"{weak_area.challenge_type}-{difficulty}",
                realm_id=weak_area.realm_id or None,
                concepts=[weak_area.concept],
                estimated_time=self.estimate_time(difficulty),
                expected_benefit=f"Improve {weak_area.concept} accuracy by 15-25%"
            ))

        for concept in metrics.strongest_concepts[:2]:
            if concept.accuracy > 0.85:
                recommendations.append(Recommendation(
                    id=f"advance-{concept.concept}",
                    type=RecommendationType.CHALLENGE,
                    title=f"Advanced {concept.concept}",
                    description=f"Take on harder {concept.concept} challenges",
                    priority=6,
                    concepts=[concept.concept],
                    estimated_time=25,
                    expected_benefit="Master advanced concepts and earn bonus XP"
                ))

        streak = metrics.streak_data.current_streak
        if streak > 0:
            difficulty = (await self.calculate_optimal_difficulty(
                user_id, self.curriculum.streak_category
            )).recommended_difficulty
            recommendations.append(Recommendation(
                id="streak-maintenance",
                type=RecommendationType.CHALLENGE,
                title="Maintain Your Streak",
                description=f"Quick {difficulty}/{self.settings.max_level} difficulty challenge to keep your streak",
                priority=8,
                estimated_time=10,
                expected_benefit=f"Maintain {streak}-day streak"
            ))

        return sorted(recommendations, key=lambda r: r.priority, reverse=True)

    @log_execution_time(logger)
    async def generate_personalized_learning_path(self, user_id: str, target_level: int) -> PersonalizedLearningPath:
        """
        Build a learning path over the realms the learner has not finished.

        A realm counts as finished once its completion reaches the configured
        threshold (80% by default). Each skill category of an unfinished realm
        becomes one node. Nodes are ordered by priority, then by how few
        prerequisites they have. The path replaces the learner's cached path.

        Args:
            user_id: Learner id
            target_level: Level the learner is working towards

        Returns:
            The new learning path

        Raises:
            ValidationError: If ``target_level`` is below 1
        """
        if target_level < 1:
            raise ValidationError("target_level must be at least 1", errors={"target_level": target_level})

        metrics = await self.analytics.get_performance_metrics(user_id)
        nodes = []

        for stage in self.curriculum.progression:
            progress = metrics.realm(stage.realm_id)
            if progress is not None and progress.completion_percentage >= self.settings.path_completion_threshold:
                continue

            for category in stage.skill_categories:
                difficulty = (await self.calculate_optimal_difficulty(user_id, category)).recommended_difficulty
                nodes.append(LearningPathNode(
                    challenge_id=f"{category}-{difficulty}",
                    skill_category=category,
                    difficulty=difficulty,
                    concepts=list(stage.concepts),
                    prerequisites=list(stage.prerequisites),
                    estimated_time=self.estimate_time(difficulty),
                    priority=node_priority(self._relevant_concepts(metrics, category))
                ))

        path = PersonalizedLearningPath(
            user_id=user_id,
            current_level=calculate_current_level(metrics),
            target_level=target_level,
            path=sorted(nodes, key=lambda n: (-n.priority, len(n.prerequisites))),
            estimated_completion_time=sum(n.estimated_time for n in nodes),
            adaptation_history=self.get_adjustment_history(user_id),
            last_updated=self.clock()
        )
        self.path_store.put(user_id, path)
        logger.debug(f"Built learning path for user {user_id} with {len(path.path)} nodes")
        return path

    def get_cached_learning_path(self, user_id: str) -> PersonalizedLearningPath:
        """
        The last learning path generated for a learner.

        Raises:
            NotFoundError: If no path has been generated yet
        """
        path = self.path_store.get(user_id)
        if path is None:
            raise NotFoundError("LearningPath", user_id)
        return path

    async def evaluate_adjustment_effectiveness(self, user_id: str) -> List[AdjustmentEffectiveness]:
        """
        Score each recorded adjustment against current performance.

        An adjustment is effective when the learner's accuracy on the
        category's concepts sits near the target accuracy (75%). Scores are
        ``max(0, 1 - 2 * |accuracy - target|)``, or 0.5 when there is no data.
        The history itself is left untouched.
        """
        metrics = await self.analytics.get_performance_metrics(user_id)
        target = self.settings.target_accuracy
        cache: Dict[str, Optional[float]] = {}
        results = []

        for adjustment in self.get_adjustment_history(user_id):
            category = adjustment.skill_category
            if category not in cache:
                cache[category] = mean_accuracy(self._relevant_concepts(metrics, category))
            accuracy = cache[category]

            if accuracy is None:
                score = 0.5
            else:
                score = max(0.0, 1 - 2 * abs(accuracy - target))

            results.append(AdjustmentEffectiveness(
                adjustment=adjustment,
                mean_accuracy=accuracy,
                effectiveness=score
            ))

        return results
