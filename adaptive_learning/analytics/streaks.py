"""
Streak Calculation

Daily activity streaks derived from the calendar dates on which a learner
started sessions.
"""

import datetime
from typing import Iterable, List, Sequence

from adaptive_learning.analytics.models import LearningSession, StreakData, StreakType


def activity_dates(sessions: Iterable[LearningSession]) -> List[datetime.date]:
    """Distinct session start dates in ascending order."""
    return sorted({s.start_time.date() for s in sessions})


def current_streak(dates: Sequence[datetime.date], today: datetime.date) -> int:
    """
    Count consecutive active days ending today or yesterday.

    Args:
        dates: Distinct activity dates, ascending
        today: The reference date

    Returns:
        Length of the streak, 0 if the learner was not active today or yesterday
    """
    if not dates:
        return 0

    one_day = datetime.timedelta(days=1)
    if dates[-1] not in (today, today - one_day):
        return 0

    streak = 1
    last = dates[-1]
    for date in reversed(dates[:-1]):
        if last - date != one_day:
            break
        streak += 1
        last = date
    return streak


def longest_streak(dates: Sequence[datetime.date]) -> int:
    """Length of the longest run of consecutive active days."""
    if not dates:
        return 0

    longest = run = 1
    for previous, date in zip(dates, dates[1:]):
        if date - previous == datetime.timedelta(days=1):
            run += 1
            longest = max(longest, run)
        else:
            run = 1
    return longest


def calculate_streak(sessions: Sequence[LearningSession], now: datetime.datetime) -> StreakData:
    """
    Build the streak summary for a learner.

    Args:
        sessions: The learner's sessions in creation order
        now: Reference time

    Returns:
        Streak data with the reward multiplier applied
    """
    dates = activity_dates(sessions)
    current = current_streak(dates, now.date())

    return StreakData(
        current_streak=current,
        longest_streak=longest_streak(dates),
        last_activity_date=sessions[-1].start_time if sessions else now,
        streak_type=StreakType.DAILY,
        streak_multiplier=StreakData.multiplier_for(current)
    )
