import datetime
import unittest

from adaptive_learning.analytics.models import TimeWindow
from adaptive_learning.analytics.velocity import accuracy_trend, calculate_velocity, speed_trend
from adaptive_learning.common.exceptions import ConfigurationError
from adaptive_learning.tests.helpers import BASE_TIME, make_attempt, make_attempts, make_session


class TestTimeWindow(unittest.TestCase):

    def test_days(self):
        self.assertEqual(TimeWindow.DAILY.days, 1)
        self.assertEqual(TimeWindow.WEEKLY.days, 7)
        self.assertEqual(TimeWindow.MONTHLY.days, 30)

    def test_parse(self):
        self.assertEqual(TimeWindow.parse("weekly"), TimeWindow.WEEKLY)
        self.assertEqual(TimeWindow.parse(TimeWindow.DAILY), TimeWindow.DAILY)
        with self.assertRaises(ConfigurationError):
            TimeWindow.parse("yearly")


class TestTrends(unittest.TestCase):
    """Test the half-split accuracy and speed trends."""

    def test_accuracy_improvement(self):
        self.assertAlmostEqual(accuracy_trend(make_attempts("0011")), 1.0)
        self.assertAlmostEqual(accuracy_trend(make_attempts("100111")), 2 / 3)

    def test_small_halves_give_zero(self):
        self.assertEqual(accuracy_trend(make_attempts("011")), 0.0)
        self.assertEqual(speed_trend(make_attempts("011")), 0.0)

    def test_speed_improvement(self):
        times = [100.0, 100.0, 50.0, 50.0]
        attempts = [make_attempt(time_elapsed=t) for t in times]
        self.assertAlmostEqual(speed_trend(attempts), 0.5)

    def test_zero_first_half_time(self):
        times = [0.0, 0.0, 50.0, 50.0]
        attempts = [make_attempt(time_elapsed=t) for t in times]
        self.assertEqual(speed_trend(attempts), 0.0)


class TestCalculateVelocity(unittest.TestCase):
    """Test the windowed velocity report."""

    def test_window_filters_old_activity(self):
        now = BASE_TIME
        old = now - datetime.timedelta(days=10)
        attempts = (
            make_attempts("1111", start_time=old)
            + make_attempts("0101", start_time=now - datetime.timedelta(days=2))
        )
        sessions = [
            make_session(old, new_concepts=["Gas Tests"]),
            make_session(now - datetime.timedelta(days=2), new_concepts=["Stoichiometry", "Flame Colors"]),
            make_session(now - datetime.timedelta(days=1), new_concepts=["Stoichiometry"]),
        ]

        velocity = calculate_velocity("user-1", attempts, sessions, TimeWindow.WEEKLY, now)

        self.assertEqual(velocity.time_window, TimeWindow.WEEKLY)
        self.assertEqual(velocity.concepts_learned, 2)
        self.assertEqual(velocity.challenges_completed, 2)
        self.assertAlmostEqual(velocity.accuracy_improvement, 0.0)
        self.assertAlmostEqual(velocity.difficulty_progression, 0.04)
        self.assertEqual(velocity.calculated_at, now)

    def test_monthly_window_includes_more(self):
        now = BASE_TIME
        attempts = make_attempts("1111", start_time=now - datetime.timedelta(days=10))

        velocity = calculate_velocity("user-1", attempts, [], TimeWindow.MONTHLY, now)

        self.assertEqual(velocity.challenges_completed, 4)
        self.assertEqual(velocity.concepts_learned, 0)

    def test_difficulty_progression_is_capped(self):
        attempts = make_attempts("1" * 120)

        velocity = calculate_velocity("user-1", attempts, [], TimeWindow.DAILY, BASE_TIME)

        self.assertEqual(velocity.difficulty_progression, 1.0)


if __name__ == '__main__':
    unittest.main()
