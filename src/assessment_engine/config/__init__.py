from .loader import load_settings
from .schema import (
    ESSAY_FALLBACK_SCORE,
    PASSING_THRESHOLD,
    LoggingConfig,
    ModelConfig,
    PathsConfig,
    ScoringConfig,
    Settings,
)

__all__ = [
    "ESSAY_FALLBACK_SCORE",
    "PASSING_THRESHOLD",
    "LoggingConfig",
    "ModelConfig",
    "PathsConfig",
    "ScoringConfig",
    "Settings",
    "load_settings",
]
