"""
User State Store

This module provides the storage abstraction for per-learner state (attempt
logs, sessions, adjustment histories and cached learning paths), together with
the in-process implementation used by default.
"""

import threading
from abc import ABC, abstractmethod
from typing import Callable, Dict, Generic, Optional, TypeVar

from adaptive_learning.common.logger import app_logger

T = TypeVar('T')

# Module logger
logger = app_logger.getChild("analytics.store")


class UserStateStore(ABC, Generic[T]):
    """
    Abstract base class for per-user state.

    Each store holds one value per user id. Services never share a store
    between two kinds of state.
    """

    @abstractmethod
    def get(self, user_id: str) -> Optional[T]:
        """
        Retrieve the state held for a user.

        Args:
            user_id: User identifier

        Returns:
            Stored value or None if the user has no state
        """
        pass

    @abstractmethod
    def put(self, user_id: str, value: T) -> None:
        """
        Store the state for a user, replacing any previous value.

        Args:
            user_id: User identifier
            value: Value to store
        """
        pass

    @abstractmethod
    def evict(self, user_id: str) -> bool:
        """
        Remove the state held for a user.

        Returns:
            True if something was removed
        """
        pass

    def get_or_create(self, user_id: str, factory: Callable[[], T]) -> T:
        """
        Return the user's state, storing ``factory()`` first if there is none.

        Args:
            user_id: User identifier
            factory: Zero-argument callable producing the initial value
        """
        value = self.get(user_id)
        if value is None:
            value = factory()
            self.put(user_id, value)
        return value


class MemoryUserStateStore(UserStateStore[T]):
    """
    In-memory implementation of UserStateStore.

    Values are kept by reference, so mutable values (lists of attempts,
    sessions) may be appended to in place after ``get_or_create``.
    """

    def __init__(self, name: str = "memory"):
        self.name = name
        self._data: Dict[str, T] = {}
        self._lock = threading.RLock()

    def get(self, user_id: str) -> Optional[T]:
        with self._lock:
            return self._data.get(user_id)

    def put(self, user_id: str, value: T) -> None:
        with self._lock:
            self._data[user_id] = value

    def evict(self, user_id: str) -> bool:
        with self._lock:
            if user_id in self._data:
                del self._data[user_id]
                logger.debug(f"Evicted state for user {user_id} from store '{self.name}'")
                return True
            return False
