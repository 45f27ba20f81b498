"""
Weak Area Identification

Finds concepts a learner keeps getting wrong, locates the challenge type and
realm where each one hurts most, and suggests remediation.
"""

from typing import Dict, List, Sequence, Tuple

from adaptive_learning.analytics.concepts import accuracy_of, group_by_concept
from adaptive_learning.analytics.models import AttemptRecord, ConceptPerformance, Priority, WeakArea


def classify_priority(
    accuracy: float,
    attempts: int,
    weak_threshold: float = 0.6,
    high_accuracy: float = 0.4,
    high_min_attempts: int = 5,
    min_attempts: int = 3
) -> Priority:
    """
    Priority of a weak concept.

    Args:
        accuracy: Concept accuracy (0-1)
        attempts: Number of attempts on the concept
    """
    if accuracy < high_accuracy and attempts >= high_min_attempts:
        return Priority.HIGH
    if accuracy < weak_threshold and attempts >= min_attempts:
        return Priority.MEDIUM
    return Priority.LOW


def recommended_actions(accuracy: float, average_time: float, slow_seconds: float = 120.0) -> List[str]:
    """Remediation steps for a weak concept."""
    actions = []
    if accuracy < 0.4:
        actions.extend(["Review fundamental concepts", "Practice with easier difficulty levels"])
    elif accuracy < 0.6:
        actions.extend(["Focus on specific problem areas", "Use hints more strategically"])
    if average_time > slow_seconds:
        actions.extend(["Practice speed drills", "Review formula shortcuts"])
    return actions


def worst_context(attempts: Sequence[AttemptRecord]) -> Tuple[str, str, float]:
    """
    The (challenge type, realm) pair with the lowest accuracy.

    Returns:
        Tuple of (challenge_type, realm_id, accuracy); the first pair seen wins ties
    """
    groups: Dict[Tuple[str, str], List[AttemptRecord]] = {}
    for attempt in attempts:
        key = (attempt.metadata.challenge_type, attempt.metadata.realm_id)
        groups.setdefault(key, []).append(attempt)

    worst_key, worst_accuracy = None, None
    for key, group in groups.items():
        accuracy = accuracy_of(group)
        if worst_accuracy is None or accuracy < worst_accuracy:
            worst_key, worst_accuracy = key, accuracy

    if worst_key is None:
        return "", "", 0.0
    return worst_key[0], worst_key[1], worst_accuracy


def find_weak_areas(
    attempts: Sequence[AttemptRecord],
    performance: Dict[str, ConceptPerformance],
    weak_threshold: float = 0.6,
    min_attempts: int = 3,
    high_accuracy: float = 0.4,
    high_min_attempts: int = 5,
    slow_seconds: float = 120.0
) -> List[WeakArea]:
    """
    Identify weak concepts.

    A concept is weak when its accuracy is below ``weak_threshold`` with at
    least ``min_attempts`` attempts.

    Args:
        attempts: The learner's full attempt log
        performance: Concept performance computed from the same log

    Returns:
        Weak areas, highest priority first, ties in discovery order
    """
    by_concept = group_by_concept(attempts)
    weak_areas = []

    for concept, perf in performance.items():
        if perf.accuracy >= weak_threshold or perf.total_attempts < min_attempts:
            continue

        challenge_type, realm_id, _ = worst_context(by_concept.get(concept, []))
        weak_areas.append(WeakArea(
            concept=concept,
            challenge_type=challenge_type,
            realm_id=realm_id,
            accuracy=perf.accuracy,
            sample_size=perf.total_attempts,
            priority=classify_priority(
                perf.accuracy, perf.total_attempts,
                weak_threshold, high_accuracy, high_min_attempts, min_attempts
            ),
            recommended_actions=recommended_actions(perf.accuracy, perf.average_time, slow_seconds)
        ))

    return sorted(weak_areas, key=lambda area: area.priority.weight, reverse=True)
