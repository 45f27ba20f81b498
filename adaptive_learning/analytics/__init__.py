"""
Learner Analytics

Attempt ledger, session tracking and the performance calculations derived
from them.
"""

from adaptive_learning.analytics.models import (
    Trend, Priority, SessionType, StreakType, TimeWindow,
    ChallengeMetadata, AnswerSubmission, ChallengeOutcome,
    AttemptMetadata, AttemptRecord, LearningSession, ConceptPerformance,
    StreakData, RealmProgress, WeakArea, LearningVelocityData, PerformanceMetrics
)
from adaptive_learning.analytics.store import UserStateStore, MemoryUserStateStore
from adaptive_learning.analytics.ledger import AttemptLedger
from adaptive_learning.analytics.sessions import SessionTracker
from adaptive_learning.analytics.service import AnalyticsService

__all__ = [
    'Trend', 'Priority', 'SessionType', 'StreakType', 'TimeWindow',
    'ChallengeMetadata', 'AnswerSubmission', 'ChallengeOutcome',
    'AttemptMetadata', 'AttemptRecord', 'LearningSession', 'ConceptPerformance',
    'StreakData', 'RealmProgress', 'WeakArea', 'LearningVelocityData', 'PerformanceMetrics',
    'UserStateStore', 'MemoryUserStateStore',
    'AttemptLedger', 'SessionTracker', 'AnalyticsService',
]
