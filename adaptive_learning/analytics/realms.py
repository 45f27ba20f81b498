"""
Realm Progress

Per-realm roll-up of a learner's attempts: completion against the realm
catalog, score, time and the challenge types the learner does best and worst
at inside the realm.
"""

from typing import Dict, List, Sequence

from adaptive_learning.analytics.concepts import accuracy_of
from adaptive_learning.analytics.models import AttemptRecord, RealmProgress
from adaptive_learning.curriculum import CurriculumConfig


def group_by_realm(attempts: Sequence[AttemptRecord]) -> Dict[str, List[AttemptRecord]]:
    groups: Dict[str, List[AttemptRecord]] = {}
    for attempt in attempts:
        groups.setdefault(attempt.metadata.realm_id, []).append(attempt)
    return groups


def rank_challenge_types(attempts: Sequence[AttemptRecord], limit: int = 3):
    """
    Order challenge types in a realm by accuracy.

    Returns:
        Tuple of (strongest, weakest) type lists, each at most ``limit`` long
    """
    by_type: Dict[str, List[AttemptRecord]] = {}
    for attempt in attempts:
        by_type.setdefault(attempt.metadata.challenge_type, []).append(attempt)

    accuracies = [(challenge_type, accuracy_of(group)) for challenge_type, group in by_type.items()]
    strongest = [t for t, _ in sorted(accuracies, key=lambda item: item[1], reverse=True)[:limit]]
    weakest = [t for t, _ in sorted(accuracies, key=lambda item: item[1])[:limit]]
    return strongest, weakest


def realm_progress(realm_id: str, attempts: Sequence[AttemptRecord], curriculum: CurriculumConfig) -> RealmProgress:
    """
    Summarize one realm.

    Args:
        realm_id: Realm identifier
        attempts: The learner's attempts in that realm
        curriculum: Realm catalog used for names and challenge counts
    """
    total_challenges = curriculum.realm_size(realm_id)
    unique_challenges = len({a.challenge_id for a in attempts})
    strongest, weakest = rank_challenge_types(attempts)

    return RealmProgress(
        realm_id=realm_id,
        realm_name=curriculum.realm_name(realm_id),
        completion_percentage=min(unique_challenges / total_challenges * 100, 100.0),
        average_score=sum(a.score for a in attempts) / len(attempts) if attempts else 0.0,
        time_spent=sum(a.time_elapsed for a in attempts),
        challenges_completed=unique_challenges,
        total_challenges=total_challenges,
        strongest_challenge_types=strongest,
        weakest_challenge_types=weakest
    )


def calculate_realm_progress(attempts: Sequence[AttemptRecord], curriculum: CurriculumConfig) -> List[RealmProgress]:
    """Progress for every realm the learner has played, in first-seen order."""
    return [
        realm_progress(realm_id, group, curriculum)
        for realm_id, group in group_by_realm(attempts).items()
    ]
