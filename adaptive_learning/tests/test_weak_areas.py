import unittest

from adaptive_learning.analytics.concepts import aggregate_concepts
from adaptive_learning.analytics.models import Priority
from adaptive_learning.analytics.weak_areas import (
    classify_priority, find_weak_areas, recommended_actions, worst_context
)
from adaptive_learning.tests.helpers import make_attempt, make_attempts


def weak_areas_for(attempts):
    return find_weak_areas(attempts, aggregate_concepts(attempts))


class TestPriority(unittest.TestCase):

    def test_high_needs_five_attempts(self):
        self.assertEqual(classify_priority(0.2, 5), Priority.HIGH)
        self.assertEqual(classify_priority(0.25, 4), Priority.MEDIUM)

    def test_medium(self):
        self.assertEqual(classify_priority(0.5, 3), Priority.MEDIUM)

    def test_low(self):
        self.assertEqual(classify_priority(0.7, 10), Priority.LOW)
        self.assertEqual(classify_priority(0.2, 2), Priority.LOW)

    def test_weights(self):
        self.assertGreater(Priority.HIGH.weight, Priority.MEDIUM.weight)
        self.assertGreater(Priority.MEDIUM.weight, Priority.LOW.weight)


class TestRecommendedActions(unittest.TestCase):

    def test_very_weak(self):
        self.assertEqual(
            recommended_actions(0.3, 60.0),
            ["Review fundamental concepts", "Practice with easier difficulty levels"]
        )

    def test_weak_and_slow(self):
        self.assertEqual(
            recommended_actions(0.5, 150.0),
            ["Focus on specific problem areas", "Use hints more strategically",
             "Practice speed drills", "Review formula shortcuts"]
        )


class TestFindWeakAreas(unittest.TestCase):
    """Test weak area identification."""

    def test_concept_needs_three_attempts(self):
        self.assertEqual(weak_areas_for(make_attempts("00", concepts=("Gas Tests",))), [])

    def test_accuracy_at_threshold_is_not_weak(self):
        attempts = make_attempts("11100", concepts=("Gas Tests",))
        self.assertEqual(weak_areas_for(attempts), [])

    def test_high_priority_weak_area(self):
        attempts = make_attempts("10000", concepts=("Organic Chemistry",), challenge_type="organic_naming",
                                 realm_id="forest-of-isomers")

        areas = weak_areas_for(attempts)

        self.assertEqual(len(areas), 1)
        area = areas[0]
        self.assertEqual(area.concept, "Organic Chemistry")
        self.assertEqual(area.priority, Priority.HIGH)
        self.assertAlmostEqual(area.accuracy, 0.2)
        self.assertEqual(area.sample_size, 5)
        self.assertEqual(area.challenge_type, "organic_naming")
        self.assertEqual(area.realm_id, "forest-of-isomers")
        self.assertIn("Review fundamental concepts", area.recommended_actions)

    def test_four_attempts_at_quarter_accuracy_is_medium(self):
        attempts = make_attempts("1000", concepts=("Organic Chemistry",))

        areas = weak_areas_for(attempts)

        self.assertEqual(areas[0].priority, Priority.MEDIUM)

    def test_sorted_by_priority_then_discovery(self):
        attempts = (
            make_attempts("100", concepts=("Gas Tests",))
            + make_attempts("00000", concepts=("Stoichiometry",))
            + make_attempts("110", concepts=("Flame Colors",))
            + make_attempts("010", concepts=("Lab Techniques",))
        )

        areas = weak_areas_for(attempts)

        self.assertEqual(
            [a.concept for a in areas],
            ["Stoichiometry", "Gas Tests", "Lab Techniques"]
        )
        self.assertEqual([a.priority for a in areas], [Priority.HIGH, Priority.MEDIUM, Priority.MEDIUM])

    def test_worst_context_is_reported(self):
        attempts = [
            make_attempt(True, concepts=("Gas Tests",), challenge_type="gas_test", realm_id="memory-labyrinth"),
            make_attempt(False, concepts=("Gas Tests",), challenge_type="memory_match", realm_id="memory-labyrinth"),
            make_attempt(False, concepts=("Gas Tests",), challenge_type="memory_match", realm_id="memory-labyrinth"),
        ]

        self.assertEqual(worst_context(attempts), ("memory_match", "memory-labyrinth", 0.0))

    def test_worst_context_first_wins_ties(self):
        attempts = [
            make_attempt(False, challenge_type="gas_test", realm_id="a"),
            make_attempt(False, challenge_type="gas_test", realm_id="b"),
        ]

        self.assertEqual(worst_context(attempts)[:2], ("gas_test", "a"))


if __name__ == '__main__':
    unittest.main()
