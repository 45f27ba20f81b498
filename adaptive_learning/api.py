"""
HTTP Adapter

FastAPI routes exposing attempt recording, learner analytics and difficulty
decisions. Services are taken from ``app.state`` (see ``main.create_app``).
"""

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request
from pydantic import BaseModel, Field

from adaptive_learning.common.exceptions import ConfigurationError, NotFoundError, ValidationError
from adaptive_learning.common.logger import app_logger
from adaptive_learning.analytics.models import (
    AnswerSubmission, ChallengeMetadata, ChallengeOutcome, SessionType
)
from adaptive_learning.analytics.service import AnalyticsService
from adaptive_learning.difficulty.engine import AdaptiveDifficultyEngine
from adaptive_learning.difficulty.models import RecentPerformance

# Set up module logger
logger = app_logger.getChild("api")

analytics_router = APIRouter(prefix="/analytics", tags=["Analytics"])
difficulty_router = APIRouter(prefix="/difficulty", tags=["Difficulty"])


# Request models
class AttemptRequest(BaseModel):
    challenge_id: str = Field(..., description="Challenge that was answered")
    realm_id: str = Field(..., description="Realm the challenge belongs to")
    challenge_type: str = Field(..., description="Challenge type tag")
    concepts: List[str] = Field(default_factory=list, description="Concept tags of the challenge")
    device_type: str = Field("desktop", description="Device class")
    session_type: SessionType = Field(SessionType.PRACTICE, description="Activity type")
    response: Any = Field(None, description="The learner's answer")
    time_elapsed: float = Field(..., ge=0, description="Seconds taken to answer")
    hints_used: int = Field(0, ge=0, description="Number of hints used")
    is_correct: bool = Field(..., description="Whether the answer was correct")
    score: float = Field(..., ge=0, le=100, description="Score awarded (0-100)")


class RecentPerformanceRequest(BaseModel):
    accuracy: float = Field(..., ge=0, le=1, description="Accuracy over the recent window")
    average_time: float = Field(..., ge=0, description="Average seconds per answer")
    streak: int = Field(0, ge=0, description="Current correct-answer streak")


def get_analytics(request: Request) -> AnalyticsService:
    return request.app.state.analytics


def get_engine(request: Request) -> AdaptiveDifficultyEngine:
    return request.app.state.engine


@analytics_router.post("/{user_id}/attempts", status_code=201)
async def record_attempt(
    user_id: str,
    attempt: AttemptRequest,
    analytics: AnalyticsService = Depends(get_analytics)
) -> Dict[str, Any]:
    """
    Record an evaluated attempt.

    Returns:
        The stored attempt record
    """
    record = await analytics.record_attempt(
        user_id,
        attempt.challenge_id,
        ChallengeMetadata(
            realm_id=attempt.realm_id,
            challenge_type=attempt.challenge_type,
            concepts=tuple(attempt.concepts),
            device_type=attempt.device_type,
            session_type=attempt.session_type
        ),
        AnswerSubmission(
            response=attempt.response,
            time_elapsed=attempt.time_elapsed,
            hints_used=attempt.hints_used
        ),
        ChallengeOutcome(is_correct=attempt.is_correct, score=attempt.score)
    )
    return record.to_dict()


@analytics_router.get("/{user_id}/metrics")
async def get_performance_metrics(
    user_id: str,
    analytics: AnalyticsService = Depends(get_analytics)
) -> Dict[str, Any]:
    """Get the learner's performance snapshot."""
    metrics = await analytics.get_performance_metrics(user_id)
    return metrics.to_dict()


@analytics_router.get("/{user_id}/weak-areas")
async def get_weak_areas(
    user_id: str,
    analytics: AnalyticsService = Depends(get_analytics)
) -> List[Dict[str, Any]]:
    weak_areas = await analytics.identify_weak_areas(user_id)
    return [area.to_dict() for area in weak_areas]


@analytics_router.get("/{user_id}/velocity")
async def get_learning_velocity(
    user_id: str,
    window: str = Query("weekly", description="Time window: daily, weekly or monthly"),
    analytics: AnalyticsService = Depends(get_analytics)
) -> Dict[str, Any]:
    """
    Get learning velocity over a time window.

    Args:
        window: Time window name
    """
    try:
        velocity = await analytics.calculate_learning_velocity(user_id, window)
    except ConfigurationError as e:
        raise HTTPException(status_code=400, detail=e.message)
    return velocity.to_dict()


@difficulty_router.get("/{user_id}/recommendations")
async def get_recommendations(
    user_id: str,
    engine: AdaptiveDifficultyEngine = Depends(get_engine)
) -> List[Dict[str, Any]]:
    """Get suggested next activities, highest priority first."""
    recommendations = await engine.generate_challenge_recommendations(user_id)
    return [recommendation.to_dict() for recommendation in recommendations]


@difficulty_router.get("/{user_id}/learning-path")
async def get_learning_path(
    user_id: str,
    target_level: Optional[int] = Query(None, description="Level to work towards; returns the cached path when omitted"),
    engine: AdaptiveDifficultyEngine = Depends(get_engine)
) -> Dict[str, Any]:
    """
    Build a personalized learning path.

    Without ``target_level`` the last path built for the learner is returned.
    """
    try:
        if target_level is None:
            path = engine.get_cached_learning_path(user_id)
        else:
            path = await engine.generate_personalized_learning_path(user_id, target_level)
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail={"message": e.message, "errors": e.errors})
    return path.to_dict()


@difficulty_router.get("/{user_id}/{category}")
async def get_difficulty(
    user_id: str,
    category: str,
    engine: AdaptiveDifficultyEngine = Depends(get_engine)
) -> Dict[str, Any]:
    """
    Get the current difficulty and a fresh recommendation for a category.
    """
    adjustment = await engine.calculate_optimal_difficulty(user_id, category)
    return {
        "user_id": user_id,
        "skill_category": category,
        "current_difficulty": engine.get_current_difficulty(user_id, category),
        "recommendation": adjustment.to_dict()
    }


@difficulty_router.post("/{user_id}/{category}/realtime")
async def adjust_difficulty_real_time(
    user_id: str,
    category: str,
    performance: RecentPerformanceRequest,
    engine: AdaptiveDifficultyEngine = Depends(get_engine)
) -> Dict[str, Any]:
    """
    Apply a real-time adjustment.

    Returns:
        ``{"adjusted": false}`` when no rule matched, otherwise the adjustment
    """
    try:
        adjustment = await engine.adjust_difficulty_real_time(
            user_id,
            category,
            RecentPerformance(
                accuracy=performance.accuracy,
                average_time=performance.average_time,
                streak=performance.streak
            )
        )
    except ValidationError as e:
        raise HTTPException(status_code=422, detail={"message": e.message, "errors": e.errors})

    if adjustment is None:
        return {"adjusted": False, "current_difficulty": engine.get_current_difficulty(user_id, category)}
    return {"adjusted": True, "adjustment": adjustment.to_dict()}
