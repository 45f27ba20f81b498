"""
Attempt Ledger

Append-only, per-user log of evaluated challenge attempts. Records are kept in
arrival order and never modified or removed.
"""

import datetime
import uuid
from typing import List, Optional

from adaptive_learning.common.logger import app_logger
from adaptive_learning.analytics.models import (
    AttemptMetadata, AttemptRecord, AnswerSubmission, ChallengeMetadata, ChallengeOutcome
)
from adaptive_learning.analytics.store import MemoryUserStateStore, UserStateStore

# Module logger
logger = app_logger.getChild("analytics.ledger")


class AttemptLedger:
    """Per-user ordered attempt log."""

    def __init__(self, store: Optional[UserStateStore[List[AttemptRecord]]] = None):
        """
        Initialize the ledger.

        Args:
            store: Backing store for attempt lists (in-memory if not provided)
        """
        self.store = store or MemoryUserStateStore(name="attempts")

    @staticmethod
    def build_record(
        user_id: str,
        challenge_id: str,
        challenge_metadata: ChallengeMetadata,
        answer: AnswerSubmission,
        outcome: ChallengeOutcome,
        now: datetime.datetime
    ) -> AttemptRecord:
        """
        Create an attempt record that ends at ``now``.

        The start time is derived from the answer's elapsed time.
        """
        return AttemptRecord(
            id=str(uuid.uuid4()),
            user_id=user_id,
            challenge_id=challenge_id,
            start_time=now - datetime.timedelta(seconds=answer.time_elapsed),
            end_time=now,
            is_correct=outcome.is_correct,
            score=outcome.score,
            time_elapsed=answer.time_elapsed,
            hints_used=answer.hints_used,
            response=answer.response,
            metadata=AttemptMetadata(
                realm_id=challenge_metadata.realm_id,
                challenge_type=challenge_metadata.challenge_type,
                concepts=tuple(challenge_metadata.concepts),
                device_type=challenge_metadata.device_type
            )
        )

    def append(self, record: AttemptRecord) -> None:
        """Append a record to its user's log."""
        attempts = self.store.get_or_create(record.user_id, list)
        attempts.append(record)
        logger.debug(
            f"Recorded attempt {record.id} for user {record.user_id} "
            f"(challenge={record.challenge_id}, correct={record.is_correct})"
        )

    def attempts_for(self, user_id: str) -> List[AttemptRecord]:
        """
        Get a user's attempts in arrival order.

        Returns:
            A copy of the log; empty if the user has no attempts
        """
        return list(self.store.get(user_id) or [])

    def seen_concepts(self, user_id: str) -> List[str]:
        """Distinct concept tags across a user's attempts, first seen order."""
        seen = {}
        for attempt in self.attempts_for(user_id):
            for concept in attempt.concepts:
                seen.setdefault(concept, None)
        return list(seen)
