"""Application settings and engine configuration."""
from datetime import timedelta
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from .errors import ConfigurationError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Logging
    log_level: str = Field(default="INFO")

    # Optional YAML file with a ``trending:`` section for TrendingConfig
    config_path: Optional[str] = Field(default=None)

    app_name: str = "TrendBot"
    environment: str = Field(default="development")

    model_config = SettingsConfigDict(
        env_prefix="TRENDBOT_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )


@lru_cache()
def get_settings() -> Settings:
    """Get settings singleton."""
    return Settings()


class TrendingConfig(BaseModel):
    """Validated options for the trending engine.

    Every recognized option is listed here with its default. Unknown keys
    are rejected, so a typo in a YAML file fails loudly at construction
    instead of silently falling back to a default.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    # Trending thresholds
    min_mentions: int = Field(default=3, ge=0)
    min_velocity: float = Field(default=0.5, ge=0.0)  # mentions per hour

    # Time windows
    short_window: timedelta = timedelta(hours=1)
    medium_window: timedelta = timedelta(hours=4)
    long_window: timedelta = timedelta(hours=24)

    # Scoring weights
    velocity_weight: float = Field(default=0.4, ge=0.0)
    volume_weight: float = Field(default=0.3, ge=0.0)
    recency_weight: float = Field(default=0.2, ge=0.0)
    credibility_weight: float = Field(default=0.1, ge=0.0)
    normalize_weights: bool = False

    # Clustering
    similarity_threshold: float = Field(default=0.6, ge=0.0, le=1.0)
    max_cluster_size: int = Field(default=10, ge=1)

    # Keyword extraction (2 admits acronyms like "AI")
    min_keyword_length: int = Field(default=2, ge=1)
    max_keyword_length: int = Field(default=20, ge=1)

    @field_validator("short_window", "medium_window", "long_window")
    @classmethod
    def validate_window(cls, v: timedelta) -> timedelta:
        """Windows must be strictly positive."""
        if v.total_seconds() <= 0:
            raise ValueError("time windows must be positive")
        return v

    @model_validator(mode="after")
    def validate_relations(self) -> "TrendingConfig":
        """Cross-field checks."""
        if not (self.short_window <= self.medium_window <= self.long_window):
            raise ValueError("windows must satisfy short_window <= medium_window <= long_window")
        if self.min_keyword_length > self.max_keyword_length:
            raise ValueError("min_keyword_length cannot exceed max_keyword_length")
        if self.weight_total <= 0:
            raise ValueError("at least one scoring weight must be positive")
        return self

    # Declared last so it wraps the validators above
    @model_validator(mode="wrap")
    @classmethod
    def wrap_errors(cls, data: Any, handler):
        """Report every invalid construction as a ConfigurationError."""
        try:
            return handler(data)
        except ValidationError as e:
            raise ConfigurationError(f"Invalid trending configuration: {e}") from e

    @property
    def weight_total(self) -> float:
        return self.velocity_weight + self.volume_weight + self.recency_weight + self.credibility_weight

    @property
    def weights(self) -> Dict[str, float]:
        """Scoring weights, normalized to sum to 1 when normalize_weights is set."""
        weights = {
            'velocity': self.velocity_weight,
            'volume': self.volume_weight,
            'recency': self.recency_weight,
            'credibility': self.credibility_weight,
        }
        if self.normalize_weights:
            total = self.weight_total
            for key in weights:
                weights[key] /= total
        return weights

    @property
    def short_window_hours(self) -> float:
        return self.short_window.total_seconds() / 3600

    @property
    def medium_window_hours(self) -> float:
        return self.medium_window.total_seconds() / 3600

    @property
    def long_window_hours(self) -> float:
        return self.long_window.total_seconds() / 3600

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]] = None) -> "TrendingConfig":
        """Create from dictionary."""
        if data is not None and not isinstance(data, dict):
            raise ConfigurationError("Trending configuration must be a mapping")
        return cls(**(data or {}))

    @classmethod
    def load_from_yaml(cls, yaml_path: Union[str, Path]) -> "TrendingConfig":
        """Load configuration from a YAML file.

        The file may hold the options at top level or under a ``trending`` key.
        """
        try:
            with open(yaml_path, 'r', encoding='utf-8') as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigurationError(f"Cannot read trending config from {yaml_path}: {e}") from e

        if not isinstance(data, dict):
            raise ConfigurationError(f"Trending config in {yaml_path} must be a mapping")

        return cls.from_dict(data.get('trending', data))


def load_trending_config(settings: Optional[Settings] = None) -> TrendingConfig:
    """Build the engine configuration from application settings."""
    settings = settings or get_settings()
    if settings.config_path:
        return TrendingConfig.load_from_yaml(settings.config_path)
    return TrendingConfig()
