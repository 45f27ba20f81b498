"""
Centralized Configuration

This module provides the configuration system for the analytics and difficulty
engine. Values come from defaults, an optional YAML or JSON file and
environment variables (highest priority, optionally read from a ``.env``
file), and are validated with pydantic.
"""

import os
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)


class AnalyticsConfig(BaseModel):
    """Thresholds used by the attempt analytics."""
    session_gap_minutes: int = Field(default=30, ge=1)
    metrics_stale_seconds: int = Field(default=300, ge=0)  # 5 minutes
    min_concept_attempts: int = Field(default=3, ge=1)
    top_concepts: int = Field(default=5, ge=1)
    trend_window: int = Field(default=5, ge=1)
    trend_threshold: float = Field(default=0.1, ge=0)
    weak_accuracy_threshold: float = Field(default=0.6, ge=0, le=1)
    high_priority_accuracy: float = Field(default=0.4, ge=0, le=1)
    high_priority_min_attempts: int = Field(default=5, ge=1)
    slow_answer_seconds: float = Field(default=120.0, gt=0)


class DifficultyConfig(BaseModel):
    """Parameters of the adaptive difficulty engine."""
    min_level: int = Field(default=1, ge=1)
    max_level: int = Field(default=5, ge=1)
    default_difficulty: int = Field(default=3, ge=1)
    speed_target_seconds: float = Field(default=90.0, gt=0)
    min_attempts_for_adjustment: int = Field(default=3, ge=1)
    max_difficulty_jump: float = Field(default=2.0, gt=0)
    base_confidence: float = Field(default=0.8, ge=0, le=1)
    cold_start_confidence: float = Field(default=0.5, ge=0, le=1)
    low_sample_confidence_factor: float = Field(default=0.6, ge=0, le=1)
    realtime_confidence: float = Field(default=0.9, ge=0, le=1)
    path_completion_threshold: float = Field(default=80.0, ge=0, le=100)
    base_node_minutes: int = Field(default=15, ge=1)
    target_accuracy: float = Field(default=0.75, ge=0, le=1)
    curriculum_path: Optional[str] = None

    @field_validator('max_level')
    @classmethod
    def validate_range(cls, v, info):
        """Validate the level range is not inverted"""
        min_level = info.data.get('min_level', 1)
        if v < min_level:
            raise ValueError(f"max_level ({v}) must not be below min_level ({min_level})")
        return v


class CacheConfig(BaseModel):
    """Metrics cache configuration"""
    enabled: bool = True
    max_size: int = Field(default=10000, ge=1)
    cleanup_interval: int = Field(default=60, ge=1)


class LoggingConfig(BaseModel):
    """Logging configuration"""
    level: str = "INFO"
    use_json: bool = False
    file_path: Optional[str] = None

    @field_validator('level')
    @classmethod
    def validate_level(cls, v):
        """Validate log level"""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()


class EnvironmentConfig(BaseModel):
    """Environment configuration"""
    env: str = "development"
    testing: bool = False

    @field_validator('env')
    @classmethod
    def validate_env(cls, v):
        """Validate environment"""
        valid_envs = ['development', 'testing', 'staging', 'production']
        if v.lower() not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of {valid_envs}")
        return v.lower()


class AppConfig(BaseModel):
    """Main application configuration"""
    app_name: str = "Adaptive Learning Engine"
    version: str = "0.1.0"
    analytics: AnalyticsConfig = Field(default_factory=AnalyticsConfig)
    difficulty: DifficultyConfig = Field(default_factory=DifficultyConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    environment: EnvironmentConfig = Field(default_factory=EnvironmentConfig)

    @property
    def is_testing(self) -> bool:
        """Check if environment is testing"""
        return self.environment.env == "testing" or self.environment.testing

    @property
    def is_production(self) -> bool:
        """Check if environment is production"""
        return self.environment.env == "production"


# Environment variable -> (section, field)
ENV_OVERRIDES: Dict[str, Tuple[str, str]] = {
    "SESSION_GAP_MINUTES": ("analytics", "session_gap_minutes"),
    "METRICS_STALE_SECONDS": ("analytics", "metrics_stale_seconds"),
    "WEAK_ACCURACY_THRESHOLD": ("analytics", "weak_accuracy_threshold"),
    "DIFFICULTY_DEFAULT": ("difficulty", "default_difficulty"),
    "DIFFICULTY_SPEED_TARGET": ("difficulty", "speed_target_seconds"),
    "DIFFICULTY_MAX_JUMP": ("difficulty", "max_difficulty_jump"),
    "CURRICULUM_PATH": ("difficulty", "curriculum_path"),
    "CACHE_ENABLED": ("cache", "enabled"),
    "CACHE_MAX_SIZE": ("cache", "max_size"),
    "LOG_LEVEL": ("logging", "level"),
    "LOG_JSON": ("logging", "use_json"),
    "LOG_FILE": ("logging", "file_path"),
    "ENV": ("environment", "env"),
    "TESTING": ("environment", "testing"),
}


class ConfigLoader:
    """
    Configuration loader for the application.

    Loads configuration from:
    1. Default values
    2. Config file
    3. Environment variables (highest priority)
    """

    def __init__(self, config_path: Optional[str] = None, env_file: Optional[str] = ".env"):
        """
        Initialize the config loader.

        Args:
            config_path: Path to config file (YAML or JSON)
            env_file: Optional dotenv file read before the environment is inspected
        """
        self.config_path = config_path or os.environ.get("CONFIG_PATH")
        self.env_file = env_file
        self._config: Optional[AppConfig] = None

    def load(self) -> AppConfig:
        """
        Load configuration from all sources.

        Returns:
            Loaded configuration
        """
        if self._config is not None:
            return self._config

        if self.env_file:
            load_dotenv(self.env_file, override=False)

        data: Dict[str, Any] = {}
        if self.config_path:
            data = self._load_from_file(self.config_path)

        self._apply_env_overrides(data)
        self._config = AppConfig(**data)
        return self._config

    @staticmethod
    def _apply_env_overrides(data: Dict[str, Any]) -> None:
        for env_name, (section, field) in ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is None:
                continue
            data.setdefault(section, {})[field] = value

    def _load_from_file(self, path: str) -> Dict[str, Any]:
        """
        Load configuration from a file.

        Args:
            path: Path to config file

        Returns:
            Loaded configuration dictionary
        """
        path = Path(path)
        if not path.exists():
            logger.warning(f"Config file not found: {path}")
            return {}

        try:
            if path.suffix.lower() in ['.yaml', '.yml']:
                with open(path, 'r') as f:
                    return yaml.safe_load(f) or {}
            elif path.suffix.lower() == '.json':
                with open(path, 'r') as f:
                    return json.load(f)
            else:
                logger.warning(f"Unsupported config file format: {path.suffix}")
                return {}
        except (OSError, yaml.YAMLError, json.JSONDecodeError) as e:
            logger.error(f"Error loading config file: {e}")
            return {}


config_loader = ConfigLoader()
config = config_loader.load()


def get_config() -> AppConfig:
    """
    Get the loaded configuration.

    Returns:
        Loaded configuration
    """
    return config


def reload_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Reload the configuration.

    Args:
        config_path: Path to config file

    Returns:
        Reloaded configuration
    """
    global config_loader, config
    config_loader = ConfigLoader(config_path)
    config = config_loader.load()
    return config
