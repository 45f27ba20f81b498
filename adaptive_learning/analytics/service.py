"""
Analytics Service

Entry point for the analytics side of the engine. It records evaluated
attempts into the ledger and session tracker, and produces the per-learner
performance snapshot, weak areas and learning velocity consumed by the
difficulty engine.
"""

import copy
import datetime
from typing import Callable, Dict, List, Optional, Union

from adaptive_learning.common.cache import CacheBackend, MemoryCacheBackend
from adaptive_learning.common.config import AppConfig, get_config
from adaptive_learning.common.logger import app_logger, log_execution_time
from adaptive_learning.analytics import concepts as concept_stats
from adaptive_learning.analytics.ledger import AttemptLedger
from adaptive_learning.analytics.models import (
    AnswerSubmission, AttemptRecord, ChallengeMetadata, ChallengeOutcome,
    LearningVelocityData, PerformanceMetrics, StreakData, TimeWindow, WeakArea
)
from adaptive_learning.analytics.realms import calculate_realm_progress
from adaptive_learning.analytics.sessions import SessionTracker
from adaptive_learning.analytics.streaks import calculate_streak
from adaptive_learning.analytics.velocity import calculate_velocity
from adaptive_learning.analytics.weak_areas import find_weak_areas
from adaptive_learning.curriculum import CurriculumConfig

# Module logger
logger = app_logger.getChild("analytics.service")

Clock = Callable[[], datetime.datetime]


class AnalyticsService:
    """
    Records attempts and computes learner analytics.

    Performance snapshots are cached per user and reused while they are
    younger than the configured staleness window (five minutes by default).
    Recording an attempt drops the user's cached snapshot and bumps a per-user
    generation counter; a snapshot computed under an older generation is never
    left in the cache. Callers receive copies, never the cached object.
    """

    def __init__(
        self,
        config: Optional[AppConfig] = None,
        curriculum: Optional[CurriculumConfig] = None,
        cache: Optional[CacheBackend] = None,
        ledger: Optional[AttemptLedger] = None,
        sessions: Optional[SessionTracker] = None,
        clock: Clock = datetime.datetime.now
    ):
        """
        Initialize the analytics service.

        Args:
            config: Application configuration (the loaded global config if not provided)
            curriculum: Curriculum used for realm names and sizes
            cache: Cache backend for performance snapshots
            ledger: Attempt ledger
            sessions: Session tracker
            clock: Callable returning the current time
        """
        self.config = config or get_config()
        self.settings = self.config.analytics
        self.curriculum = curriculum or CurriculumConfig()
        self.ledger = ledger or AttemptLedger()
        self.sessions = sessions or SessionTracker(gap_minutes=self.settings.session_gap_minutes)
        self.clock = clock

        if cache is None and self.config.cache.enabled:
            cache = MemoryCacheBackend(
                max_size=self.config.cache.max_size,
                cleanup_interval=self.config.cache.cleanup_interval,
                name="performance_metrics"
            )
        self.cache = cache
        self._generations: Dict[str, int] = {}

    @staticmethod
    def _cache_key(user_id: str) -> str:
        return f"metrics:{user_id}"

    def _generation(self, user_id: str) -> int:
        return self._generations.get(user_id, 0)

    async def record_attempt(
        self,
        user_id: str,
        challenge_id: str,
        challenge_metadata: ChallengeMetadata,
        answer: AnswerSubmission,
        outcome: ChallengeOutcome
    ) -> AttemptRecord:
        """
        Record an evaluated attempt.

        The attempt is appended to the ledger and attached to the learner's
        current session (or a new one). The learner's cached snapshot is
        invalidated afterwards.

        Args:
            user_id: Learner id
            challenge_id: Challenge that was answered
            challenge_metadata: Realm, type and concept tags of the challenge
            answer: The submitted answer and elapsed time
            outcome: Evaluation result

        Returns:
            The stored attempt record
        """
        now = self.clock()
        record = self.ledger.build_record(user_id, challenge_id, challenge_metadata, answer, outcome, now)

        seen = set(self.ledger.seen_concepts(user_id))
        new_concepts = [c for c in dict.fromkeys(record.concepts) if c not in seen]

        self.ledger.append(record)
        session = self.sessions.track(
            record, now,
            session_type=challenge_metadata.session_type,
            new_concepts=new_concepts
        )

        self._generations[user_id] = self._generation(user_id) + 1

        if new_concepts:
            logger.debug(f"User {user_id} met new concepts {new_concepts} in session {session.id}")

        if self.cache is not None:
            await self.cache.delete(self._cache_key(user_id))

        return record

    @log_execution_time(logger)
    def compute_performance_metrics(self, user_id: str, now: Optional[datetime.datetime] = None) -> PerformanceMetrics:
        """
        Compute a fresh performance snapshot from the ledger, bypassing the cache.

        Args:
            user_id: Learner id
            now: Reference time (the service clock if not provided)
        """
        now = now or self.clock()
        attempts = self.ledger.attempts_for(user_id)

        if not attempts:
            return PerformanceMetrics(user_id=user_id, streak_data=StreakData(), last_updated=now)

        settings = self.settings
        performance = concept_stats.aggregate_concepts(
            attempts,
            min_attempts=settings.min_concept_attempts,
            trend_window=settings.trend_window,
            trend_threshold=settings.trend_threshold
        )
        sessions = self.sessions.sessions_for(user_id)
        weekly = calculate_velocity(user_id, attempts, sessions, TimeWindow.WEEKLY, now)

        return PerformanceMetrics(
            user_id=user_id,
            overall_accuracy=concept_stats.accuracy_of(attempts),
            average_response_time=concept_stats.mean_time(attempts),
            strongest_concepts=concept_stats.rank_concepts(
                performance, settings.top_concepts, settings.min_concept_attempts, strongest=True
            ),
            weakest_concepts=concept_stats.rank_concepts(
                performance, settings.top_concepts, settings.min_concept_attempts, strongest=False
            ),
            concept_performance=performance,
            learning_velocity=weekly.challenges_completed,
            streak_data=calculate_streak(sessions, now),
            realm_progress=calculate_realm_progress(attempts, self.curriculum),
            total_challenges_completed=len(attempts),
            total_time_spent=sum(s.duration_seconds for s in sessions),
            last_updated=now
        )

    async def get_performance_metrics(self, user_id: str) -> PerformanceMetrics:
        """
        Get the learner's performance snapshot.

        A cached snapshot is used while it is fresh and no attempt was
        recorded since it was read; otherwise a new one is computed and cached.
        The returned snapshot is a copy the caller may modify freely.

        Args:
            user_id: Learner id

        Returns:
            Performance snapshot
        """
        now = self.clock()
        key = self._cache_key(user_id)

        if self.cache is not None:
            generation = self._generation(user_id)
            cached = await self.cache.get(key)
            if (
                cached.hit
                and generation == self._generation(user_id)
                and not cached.value.is_stale(now, self.settings.metrics_stale_seconds)
            ):
                return copy.deepcopy(cached.value)

        generation = self._generation(user_id)
        metrics = self.compute_performance_metrics(user_id, now)
        logger.debug(
            f"Computed performance metrics for user {user_id}: "
            f"{metrics.total_challenges_completed} attempts, accuracy {metrics.overall_accuracy:.2f}"
        )

        if self.cache is not None:
            await self.cache.set(key, copy.deepcopy(metrics), ttl=self.settings.metrics_stale_seconds)
            # An attempt recorded while the snapshot was being stored makes it outdated
            if generation != self._generation(user_id):
                await self.cache.delete(key)
        return metrics

    async def identify_weak_areas(self, user_id: str) -> List[WeakArea]:
        """
        Identify concepts the learner is struggling with.

        Returns:
            Weak areas ordered by priority
        """
        metrics = await self.get_performance_metrics(user_id)
        settings = self.settings
        return find_weak_areas(
            self.ledger.attempts_for(user_id),
            metrics.concept_performance,
            weak_threshold=settings.weak_accuracy_threshold,
            min_attempts=settings.min_concept_attempts,
            high_accuracy=settings.high_priority_accuracy,
            high_min_attempts=settings.high_priority_min_attempts,
            slow_seconds=settings.slow_answer_seconds
        )

    async def calculate_learning_velocity(
        self,
        user_id: str,
        time_window: Union[TimeWindow, str] = TimeWindow.WEEKLY
    ) -> LearningVelocityData:
        """
        Calculate learning velocity over a sliding window.

        Args:
            user_id: Learner id
            time_window: Window, as a TimeWindow or its name

        Raises:
            ConfigurationError: If the window name is unknown
        """
        window = TimeWindow.parse(time_window)
        return calculate_velocity(
            user_id,
            self.ledger.attempts_for(user_id),
            self.sessions.sessions_for(user_id),
            window,
            self.clock()
        )

    async def get_cache_stats(self) -> Optional[dict]:
        """Statistics of the snapshot cache, or None when caching is disabled."""
        if self.cache is None:
            return None
        return await self.cache.get_stats()
