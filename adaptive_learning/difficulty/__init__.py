"""
Adaptive Difficulty

Difficulty recommendations, real-time adjustment and personalized learning
paths built on top of learner analytics.
"""

from adaptive_learning.difficulty.models import (
    AdjustmentSource, RecommendationType, DifficultyAdjustment, RecentPerformance,
    Recommendation, LearningPathNode, PersonalizedLearningPath, AdjustmentEffectiveness
)
from adaptive_learning.difficulty.engine import AdaptiveDifficultyEngine, calculate_current_level

__all__ = [
    'AdjustmentSource', 'RecommendationType', 'DifficultyAdjustment', 'RecentPerformance',
    'Recommendation', 'LearningPathNode', 'PersonalizedLearningPath', 'AdjustmentEffectiveness',
    'AdaptiveDifficultyEngine', 'calculate_current_level',
]
