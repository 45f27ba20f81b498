"""
Common Components

Infrastructure shared by the analytics and difficulty packages:

1. Logging - package logger and helpers
2. Configuration - pydantic models loaded from file and environment
3. Caching - cache backend interface and in-memory backend
4. Errors - exception hierarchy
5. Serialization - dataclass to dict/JSON conversion
"""

from adaptive_learning.common.logger import app_logger
from adaptive_learning.common.exceptions import (
    BaseError, ValidationError, ConfigurationError, NotFoundError
)
from adaptive_learning.common.config import AppConfig, get_config, reload_config
from adaptive_learning.common.cache import (
    CacheBackend, CacheResult, CacheEntry, MemoryCacheBackend
)

__all__ = [
    'app_logger',
    'BaseError', 'ValidationError', 'ConfigurationError', 'NotFoundError',
    'AppConfig', 'get_config', 'reload_config',
    'CacheBackend', 'CacheResult', 'CacheEntry', 'MemoryCacheBackend',
]
