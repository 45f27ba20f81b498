"""
Adaptive Learning Engine

Learner analytics (attempt ledger, sessions, concept performance, streaks,
weak areas, learning velocity) and adaptive difficulty (batch and real-time
adjustment, recommendations, learning paths).
"""

__version__ = "0.1.0"
