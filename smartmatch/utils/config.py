"""
Configuration Management

Loads configuration from YAML files with environment variable resolution.
"""

import os
from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, Field


class ScoringConfig(BaseModel):
    """Composite score configuration."""
    weights: dict[str, float] = Field(default_factory=lambda: {
        "base": 0.4,
        "behavior": 0.3,
        "pattern": 0.3,
    })
    base_weights: dict[str, float] = Field(default_factory=lambda: {
        "industry": 0.35,
        "investment": 0.25,
        "experience": 0.15,
    })
    neutral_score: float = Field(default=50.0, ge=0.0, le=100.0)
    experience_scale_years: float = 10.0
    pattern_match_threshold: float = 0.8


class BehaviorConfig(BaseModel):
    """Behavior profile inference configuration."""
    min_industry_samples: int = 5
    min_like_rate: float = 0.6
    activity_min_events: int = 2
    activity_min_share: float = 0.05


class BoostConfig(BaseModel):
    """Contextual boost configuration."""
    optimal_time_multiplier: float = 1.10
    recent_activity_multiplier: float = 1.15
    mutual_connection_step: float = 0.05
    recent_window_hours: int = 24
    context_window_days: int = 30
    max_score: float = Field(default=100.0, gt=0.0, le=100.0)


class InsightConfig(BaseModel):
    """Insight generation thresholds."""
    industry_threshold: float = 0.5
    industry_high_confidence: float = 0.8


class PipelineConfig(BaseModel):
    """Recommendation pipeline configuration."""
    timeout_seconds: float = 10.0
    max_results: Optional[int] = None


class CacheConfig(BaseModel):
    """Transient ranking cache configuration."""
    enabled: bool = False
    path: str = ".cache/recommendations.db"
    ttl_seconds: int = 3600
    bucket_minutes: int = 60
    max_size_mb: int = 100


class OutputConfig(BaseModel):
    """Output generation configuration."""
    directory: str = "./outputs"
    formats: list[str] = Field(default_factory=lambda: ["csv", "markdown", "json"])
    timestamp_filenames: bool = True
    markdown: dict[str, Any] = Field(default_factory=lambda: {
        "include_methodology": True,
        "max_items_per_section": 20,
    })


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = "INFO"
    file: Optional[str] = None
    timestamps: bool = True


class Config(BaseModel):
    """Root configuration object."""
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    behavior: BehaviorConfig = Field(default_factory=BehaviorConfig)
    boosts: BoostConfig = Field(default_factory=BoostConfig)
    insights: InsightConfig = Field(default_factory=InsightConfig)
    pipeline: PipelineConfig = Field(default_factory=PipelineConfig)
    cache: CacheConfig = Field(default_factory=CacheConfig)
    output: OutputConfig = Field(default_factory=OutputConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def _resolve_env_vars(data: Any) -> Any:
    """Recursively resolve environment variables in config values.

    Supports ${VAR_NAME} and ${VAR_NAME:-default} syntax.
    """
    if isinstance(data, str):
        if data.startswith("${") and data.endswith("}"):
            var_expr = data[2:-1]
            if ":-" in var_expr:
                var_name, default = var_expr.split(":-", 1)
                return os.environ.get(var_name, default)
            return os.environ.get(var_expr, data)
        return data
    elif isinstance(data, dict):
        return {k: _resolve_env_vars(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_resolve_env_vars(item) for item in data]
    return data


def load_config(
    config_path: Optional[Path] = None,
    local_config_path: Optional[Path] = None,
) -> Config:
    """Load configuration from YAML files.

    Args:
        config_path: Path to main config file (default: config.yaml)
        local_config_path: Path to local overrides (default: config.local.yaml)

    Returns:
        Merged and validated Config object
    """
    project_root = Path(__file__).parent.parent.parent

    if config_path is None:
        config_path = project_root / "config.yaml"
    if local_config_path is None:
        local_config_path = project_root / "config.local.yaml"

    config_data: dict[str, Any] = {}

    if config_path.exists():
        with open(config_path) as f:
            config_data = yaml.safe_load(f) or {}

    # Merge local overrides
    if local_config_path.exists():
        with open(local_config_path) as f:
            local_data = yaml.safe_load(f) or {}
            config_data = _deep_merge(config_data, local_data)

    config_data = _resolve_env_vars(config_data)

    return Config(**config_data)


def _deep_merge(base: dict, override: dict) -> dict:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result
