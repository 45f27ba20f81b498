"""
Concept Performance Aggregation

Turns a list of attempts into per-concept accuracy, timing, trend and
confidence figures. An attempt tagged with several concepts counts towards
each of them.
"""

import math
import statistics
from typing import Dict, Iterable, List, Optional, Sequence

from adaptive_learning.analytics.models import AttemptRecord, ConceptPerformance, Trend

LOW_SAMPLE_CONFIDENCE = 0.3
MIN_CONFIDENCE = 0.1


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def group_by_concept(attempts: Iterable[AttemptRecord]) -> Dict[str, List[AttemptRecord]]:
    """
    Group attempts by concept tag.

    Returns:
        Mapping of concept to its attempts, in the order concepts are first seen
    """
    groups: Dict[str, List[AttemptRecord]] = {}
    for attempt in attempts:
        for concept in attempt.concepts:
            groups.setdefault(concept, []).append(attempt)
    return groups


def accuracy_of(attempts: Sequence[AttemptRecord]) -> float:
    """Share of correct attempts, 0 for an empty sequence."""
    if not attempts:
        return 0.0
    return sum(1 for a in attempts if a.is_correct) / len(attempts)


def mean_time(attempts: Sequence[AttemptRecord]) -> float:
    if not attempts:
        return 0.0
    return sum(a.time_elapsed for a in attempts) / len(attempts)


def score_confidence(attempts: Sequence[AttemptRecord], min_attempts: int = 3) -> float:
    """
    Confidence in a concept estimate, from score consistency.

    Fewer than ``min_attempts`` attempts give a fixed low confidence. Otherwise
    the population standard deviation of scores (0-100) is mapped onto
    ``[0.1, 1.0]``, consistent scores giving high confidence.
    """
    if len(attempts) < min_attempts:
        return LOW_SAMPLE_CONFIDENCE
    std_dev = statistics.pstdev([a.score for a in attempts])
    return max(MIN_CONFIDENCE, 1 - min(std_dev / 100, 1.0))


def recent_trend(attempts: Sequence[AttemptRecord], window: int = 5, threshold: float = 0.1) -> Trend:
    """
    Compare accuracy of the last ``window`` attempts with the ``window`` before.

    Args:
        attempts: Attempts in chronological order
        window: Size of each comparison window
        threshold: Minimum accuracy change counted as a trend

    Returns:
        Trend of the recent window relative to the older one
    """
    if len(attempts) < window:
        return Trend.STABLE

    recent = attempts[-window:]
    older = attempts[max(0, len(attempts) - 2 * window):len(attempts) - window]
    if not older:
        return Trend.STABLE

    return Trend.from_delta(accuracy_of(recent) - accuracy_of(older), threshold)


def concept_performance(
    concept: str,
    attempts: Sequence[AttemptRecord],
    min_attempts: int = 3,
    trend_window: int = 5,
    trend_threshold: float = 0.1
) -> ConceptPerformance:
    """Aggregate the attempts for a single concept."""
    return ConceptPerformance(
        concept=concept,
        accuracy=accuracy_of(attempts),
        average_time=mean_time(attempts),
        total_attempts=len(attempts),
        recent_trend=recent_trend(attempts, trend_window, trend_threshold),
        confidence=score_confidence(attempts, min_attempts)
    )


def aggregate_concepts(
    attempts: Iterable[AttemptRecord],
    min_attempts: int = 3,
    trend_window: int = 5,
    trend_threshold: float = 0.1
) -> Dict[str, ConceptPerformance]:
    """
    Compute performance for every concept present in ``attempts``.

    Returns:
        Mapping of concept to performance, insertion ordered by first appearance
    """
    return {
        concept: concept_performance(concept, group, min_attempts, trend_window, trend_threshold)
        for concept, group in group_by_concept(attempts).items()
    }


def rank_concepts(
    performance: Dict[str, ConceptPerformance],
    limit: int = 5,
    min_attempts: int = 3,
    strongest: bool = True
) -> List[ConceptPerformance]:
    """
    Pick the strongest or weakest concepts by accuracy.

    Only concepts with at least ``min_attempts`` attempts qualify. The sort is
    stable, so equal accuracies keep their first-seen order.
    """
    eligible = [p for p in performance.values() if p.total_attempts >= min_attempts]
    ranked = sorted(eligible, key=lambda p: p.accuracy, reverse=strongest)
    return ranked[:limit]


def matching_concepts(
    performance: Dict[str, ConceptPerformance],
    names: Iterable[str]
) -> List[ConceptPerformance]:
    """
    Concepts whose tag contains any of ``names``.

    Args:
        performance: Concept performance keyed by tag
        names: Concept names from the curriculum mapping

    Returns:
        Matching performances in the order of ``performance``
    """
    names = list(names)
    return [p for tag, p in performance.items() if any(name in tag for name in names)]


def mean_accuracy(performances: Sequence[ConceptPerformance]) -> Optional[float]:
    """Mean accuracy of ``performances``, or None if there are none."""
    if not performances:
        return None
    return sum(p.accuracy for p in performances) / len(performances)
