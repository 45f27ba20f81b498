"""Shared fixtures for the adaptive learning tests."""

import pytest

from adaptive_learning.common.config import AppConfig
from adaptive_learning.analytics.models import (
    AnswerSubmission, ChallengeMetadata, ChallengeOutcome, SessionType
)
from adaptive_learning.analytics.service import AnalyticsService
from adaptive_learning.difficulty.engine import AdaptiveDifficultyEngine

from adaptive_learning.tests.helpers import FakeClock


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def config():
    return AppConfig()


@pytest.fixture
def analytics(config, clock):
    return AnalyticsService(config=config, clock=clock)


@pytest.fixture
def engine(analytics):
    return AdaptiveDifficultyEngine(analytics)


@pytest.fixture
def record(analytics):
    """Coroutine function recording one attempt with sensible defaults."""

    async def _record(
        user_id="user-1",
        challenge_id="ch-1",
        concepts=("Chemical Equations",),
        is_correct=True,
        score=None,
        time_elapsed=30.0,
        realm_id="mathmage-trials",
        challenge_type="equation_balance",
        session_type=SessionType.PRACTICE
    ):
        if score is None:
            score = 100.0 if is_correct else 0.0
        return await analytics.record_attempt(
            user_id,
            challenge_id,
            ChallengeMetadata(
                realm_id=realm_id,
                challenge_type=challenge_type,
                concepts=tuple(concepts),
                session_type=session_type
            ),
            AnswerSubmission(response="answer", time_elapsed=time_elapsed),
            ChallengeOutcome(is_correct=is_correct, score=score)
        )

    return _record
