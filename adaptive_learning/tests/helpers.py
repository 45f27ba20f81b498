"""Builders for attempt and session records used across the tests."""

import asyncio
import datetime
import itertools
from typing import Sequence

from adaptive_learning.common.cache import MemoryCacheBackend
from adaptive_learning.analytics.models import AttemptMetadata, AttemptRecord, LearningSession

BASE_TIME = datetime.datetime(2024, 3, 10, 12, 0, 0)

_ids = itertools.count(1)


def make_attempt(
    is_correct: bool = True,
    concepts: Sequence[str] = ("Chemical Equations",),
    score: float = None,
    time_elapsed: float = 30.0,
    start_time: datetime.datetime = BASE_TIME,
    challenge_id: str = None,
    challenge_type: str = "equation_balance",
    realm_id: str = "mathmage-trials",
    user_id: str = "user-1"
) -> AttemptRecord:
    n = next(_ids)
    return AttemptRecord(
        id=f"attempt-{n}",
        user_id=user_id,
        challenge_id=challenge_id or f"challenge-{n}",
        start_time=start_time,
        end_time=start_time + datetime.timedelta(seconds=time_elapsed),
        is_correct=is_correct,
        score=score if score is not None else (100.0 if is_correct else 0.0),
        time_elapsed=time_elapsed,
        metadata=AttemptMetadata(
            realm_id=realm_id,
            challenge_type=challenge_type,
            concepts=tuple(concepts)
        )
    )


def make_attempts(pattern: str, **kwargs):
    """Attempts from a string of ``1`` (correct) and ``0`` (wrong), one minute apart."""
    start_time = kwargs.pop("start_time", BASE_TIME)
    return [
        make_attempt(
            is_correct=flag == "1",
            start_time=start_time + datetime.timedelta(minutes=i),
            **kwargs
        )
        for i, flag in enumerate(pattern)
    ]


def make_session(start_time: datetime.datetime, minutes: int = 10, new_concepts: Sequence[str] = ()) -> LearningSession:
    n = next(_ids)
    return LearningSession(
        id=f"session-{n}",
        user_id="user-1",
        start_time=start_time,
        end_time=start_time + datetime.timedelta(minutes=minutes),
        new_concepts_learned=list(new_concepts)
    )


class FakeClock:
    """Controllable replacement for ``datetime.datetime.now``."""

    def __init__(self, now: datetime.datetime = BASE_TIME):
        self.now = now

    def __call__(self) -> datetime.datetime:
        return self.now

    def advance(self, **kwargs) -> datetime.datetime:
        self.now += datetime.timedelta(**kwargs)
        return self.now


class YieldingCacheBackend(MemoryCacheBackend):
    """Memory cache that hands control back to the event loop before reads and writes."""

    def __init__(self, yield_on=("get", "set"), **kwargs):
        super().__init__(**kwargs)
        self.yield_on = set(yield_on)

    async def get(self, key):
        if "get" in self.yield_on:
            await asyncio.sleep(0)
        return await super().get(key)

    async def set(self, key, value, ttl=None):
        if "set" in self.yield_on:
            await asyncio.sleep(0)
        return await super().set(key, value, ttl=ttl)
