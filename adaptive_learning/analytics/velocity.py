"""
Learning Velocity

How fast a learner is improving inside a sliding time window.
"""

import datetime
from typing import Sequence

from adaptive_learning.analytics.concepts import accuracy_of, mean_time
from adaptive_learning.analytics.models import (
    AttemptRecord, LearningSession, LearningVelocityData, TimeWindow
)

MIN_HALF_SIZE = 2


def split_halves(attempts: Sequence[AttemptRecord]):
    """Split chronologically ordered attempts at ``len // 2``."""
    middle = len(attempts) // 2
    return attempts[:middle], attempts[middle:]


def accuracy_trend(attempts: Sequence[AttemptRecord]) -> float:
    """
    Second-half accuracy minus first-half accuracy.

    Returns 0 when either half has fewer than two attempts.
    """
    first, second = split_halves(attempts)
    if len(first) < MIN_HALF_SIZE or len(second) < MIN_HALF_SIZE:
        return 0.0
    return accuracy_of(second) - accuracy_of(first)


def speed_trend(attempts: Sequence[AttemptRecord]) -> float:
    """
    Relative reduction in answer time between the two halves.

    Positive values mean the learner got faster.
    """
    first, second = split_halves(attempts)
    if len(first) < MIN_HALF_SIZE or len(second) < MIN_HALF_SIZE:
        return 0.0
    first_avg = mean_time(first)
    if first_avg == 0:
        return 0.0
    return (first_avg - mean_time(second)) / first_avg


def calculate_velocity(
    user_id: str,
    attempts: Sequence[AttemptRecord],
    sessions: Sequence[LearningSession],
    time_window: TimeWindow,
    now: datetime.datetime
) -> LearningVelocityData:
    """
    Velocity for the window ending at ``now``.

    Args:
        user_id: Learner id
        attempts: The learner's attempts in chronological order
        sessions: The learner's sessions
        time_window: Window to consider
        now: End of the window
    """
    since = now - datetime.timedelta(days=time_window.days)
    recent_attempts = [a for a in attempts if a.start_time >= since]
    recent_sessions = [s for s in sessions if s.start_time >= since]

    learned = set()
    for session in recent_sessions:
        learned.update(session.new_concepts_learned)

    return LearningVelocityData(
        user_id=user_id,
        time_window=time_window,
        concepts_learned=len(learned),
        challenges_completed=sum(1 for a in recent_attempts if a.is_correct),
        accuracy_improvement=accuracy_trend(recent_attempts),
        speed_improvement=speed_trend(recent_attempts),
        difficulty_progression=min(len(recent_attempts) / 100, 1.0),
        calculated_at=now
    )
