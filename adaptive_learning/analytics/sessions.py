"""
Session Tracker

Groups a learner's attempts into learning sessions. An attempt joins the
current session unless the session was last updated more than the configured
gap (30 minutes by default) before the attempt was recorded.
"""

import datetime
import uuid
from typing import Iterable, List, Optional

from adaptive_learning.common.logger import app_logger
from adaptive_learning.analytics.models import AttemptRecord, LearningSession, SessionType
from adaptive_learning.analytics.store import MemoryUserStateStore, UserStateStore

# Module logger
logger = app_logger.getChild("analytics.sessions")


class SessionTracker:
    """Gap-based session segmentation."""

    def __init__(
        self,
        gap_minutes: int = 30,
        store: Optional[UserStateStore[List[LearningSession]]] = None
    ):
        self.gap = datetime.timedelta(minutes=gap_minutes)
        self.store = store or MemoryUserStateStore(name="sessions")

    def current_session(self, user_id: str) -> Optional[LearningSession]:
        """The user's most recent session, if any."""
        sessions = self.store.get(user_id)
        return sessions[-1] if sessions else None

    def sessions_for(self, user_id: str) -> List[LearningSession]:
        return list(self.store.get(user_id) or [])

    def track(
        self,
        attempt: AttemptRecord,
        now: datetime.datetime,
        session_type: SessionType = SessionType.PRACTICE,
        new_concepts: Iterable[str] = ()
    ) -> LearningSession:
        """
        Attach an attempt to the user's current session or open a new one.

        Args:
            attempt: The attempt just appended to the ledger
            now: Time the attempt was recorded
            session_type: Activity type used when a new session is opened
            new_concepts: Concepts the user meets for the first time in this attempt

        Returns:
            The session the attempt belongs to
        """
        session = self.current_session(attempt.user_id)

        if session is None or now - session.end_time > self.gap:
            session = LearningSession(
                id=str(uuid.uuid4()),
                user_id=attempt.user_id,
                start_time=attempt.start_time,
                end_time=now,
                session_type=session_type,
                device_type=attempt.metadata.device_type
            )
            self.store.get_or_create(attempt.user_id, list).append(session)
            logger.debug(f"Started session {session.id} for user {attempt.user_id}")

        session.attempt_ids.append(attempt.id)
        session.challenges_attempted.append(attempt.challenge_id)
        session.total_score += attempt.score
        session.end_time = now

        for concept in attempt.concepts:
            if concept not in session.concepts_reinforced:
                session.concepts_reinforced.append(concept)
        for concept in new_concepts:
            if concept not in session.new_concepts_learned:
                session.new_concepts_learned.append(concept)

        return session
