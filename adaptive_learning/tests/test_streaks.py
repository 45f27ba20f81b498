import datetime
import unittest

from adaptive_learning.analytics.models import StreakData
from adaptive_learning.analytics.streaks import (
    activity_dates, calculate_streak, current_streak, longest_streak
)
from adaptive_learning.tests.helpers import make_session

TODAY = datetime.date(2024, 3, 10)


def days_ago(*offsets):
    return [TODAY - datetime.timedelta(days=n) for n in sorted(offsets, reverse=True)]


class TestStreaks(unittest.TestCase):
    """Test daily streak calculation."""

    def test_no_activity(self):
        self.assertEqual(current_streak([], TODAY), 0)
        self.assertEqual(longest_streak([]), 0)

    def test_streak_ending_today(self):
        self.assertEqual(current_streak(days_ago(0, 1, 2), TODAY), 3)

    def test_streak_ending_yesterday(self):
        self.assertEqual(current_streak(days_ago(1, 2), TODAY), 2)

    def test_streak_broken_before_yesterday(self):
        self.assertEqual(current_streak(days_ago(2, 3, 4), TODAY), 0)

    def test_gap_stops_the_walk(self):
        self.assertEqual(current_streak(days_ago(0, 1, 3, 4, 5), TODAY), 2)

    def test_longest_streak(self):
        self.assertEqual(longest_streak(days_ago(0, 1, 3, 4, 5, 6, 9)), 4)
        self.assertEqual(longest_streak(days_ago(7)), 1)

    def test_activity_dates_are_distinct_and_sorted(self):
        base = datetime.datetime(2024, 3, 10, 9, 0)
        sessions = [
            make_session(base),
            make_session(base - datetime.timedelta(days=1)),
            make_session(base + datetime.timedelta(hours=5)),
        ]
        self.assertEqual(activity_dates(sessions), [datetime.date(2024, 3, 9), datetime.date(2024, 3, 10)])

    def test_multiplier(self):
        self.assertEqual(StreakData.multiplier_for(0), 1.0)
        self.assertAlmostEqual(StreakData.multiplier_for(5), 1.5)
        self.assertEqual(StreakData.multiplier_for(10), 2.0)
        self.assertEqual(StreakData.multiplier_for(15), 2.0)


class TestCalculateStreak(unittest.TestCase):

    def test_five_consecutive_days(self):
        now = datetime.datetime(2024, 3, 10, 18, 0)
        sessions = [make_session(now - datetime.timedelta(days=n, hours=2)) for n in range(4, -1, -1)]

        streak = calculate_streak(sessions, now)

        self.assertEqual(streak.current_streak, 5)
        self.assertEqual(streak.longest_streak, 5)
        self.assertAlmostEqual(streak.streak_multiplier, 1.5)
        self.assertEqual(streak.last_activity_date, sessions[-1].start_time)

    def test_twelve_day_streak_is_capped(self):
        now = datetime.datetime(2024, 3, 10, 18, 0)
        sessions = [make_session(now - datetime.timedelta(days=n, hours=2)) for n in range(11, -1, -1)]

        streak = calculate_streak(sessions, now)

        self.assertEqual(streak.current_streak, 12)
        self.assertEqual(streak.streak_multiplier, 2.0)

    def test_no_sessions(self):
        now = datetime.datetime(2024, 3, 10, 18, 0)

        streak = calculate_streak([], now)

        self.assertEqual(streak.current_streak, 0)
        self.assertEqual(streak.streak_multiplier, 1.0)
        self.assertEqual(streak.last_activity_date, now)


if __name__ == '__main__':
    unittest.main()
