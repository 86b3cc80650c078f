"""Configuration for the backlog prioritizer.

Settings are read from environment variables. The CLI loads a ``.env`` file
with python-dotenv before calling :func:`load_config`.
"""

import math
import os

from pydantic import BaseModel, Field, ValidationError, model_validator

from .exceptions import ConfigurationError

WEIGHT_TOLERANCE = 1e-6
DEFAULT_CACHE_TTL_HOURS = 24
DEFAULT_CACHE_DIR = ".cache"


class ScoringWeights(BaseModel):
    """Coefficients of the final score formula.

    final = relevance * W_rel + value * W_val + complexity * W_cpx
    value = priority * W_pri + recency * W_rec + interactions * W_int

    Both groups must sum to 1.0. Nothing downstream renormalizes them.
    """

    relevance: float = Field(0.5, ge=0.0, le=1.0)
    value: float = Field(0.2, ge=0.0, le=1.0)
    complexity: float = Field(0.3, ge=0.0, le=1.0)
    priority: float = Field(0.5, ge=0.0, le=1.0)
    recency: float = Field(0.3, ge=0.0, le=1.0)
    interactions: float = Field(0.2, ge=0.0, le=1.0)

    @model_validator(mode="after")
    def check_sums(self) -> "ScoringWeights":
        outer = self.relevance + self.value + self.complexity
        if not math.isclose(outer, 1.0, abs_tol=WEIGHT_TOLERANCE):
            raise ValueError(
                f"relevance, value and complexity weights must sum to 1.0 "
                f"(got {outer:.4f})"
            )
        inner = self.priority + self.recency + self.interactions
        if not math.isclose(inner, 1.0, abs_tol=WEIGHT_TOLERANCE):
            raise ValueError(
                f"priority, recency and interactions weights must sum to 1.0 "
                f"(got {inner:.4f})"
            )
        return self


class PrioritizerConfig(BaseModel):
    """Settings for one prioritization run."""

    team_id: str = Field(..., min_length=1)
    backlog_state_id: str = Field(..., min_length=1)
    target_project: str | None = None
    relevance_keywords: list[str] = Field(default_factory=list)
    employee_aliases: list[str] = Field(default_factory=list)
    cache_ttl_hours: float = Field(DEFAULT_CACHE_TTL_HOURS, gt=0)
    cache_dir: str = DEFAULT_CACHE_DIR
    weights: ScoringWeights = Field(default_factory=ScoringWeights)


def parse_list(value: str | None) -> list[str]:
    """Split a comma-separated setting, dropping blanks."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be a number, got '{raw}'")


def load_weights() -> ScoringWeights:
    """Build scoring weights from LINEAR_WEIGHT_* variables.

    Raises:
        ConfigurationError: If a weight is not numeric or a group does not
            sum to 1.0
    """
    defaults = ScoringWeights()
    try:
        return ScoringWeights(
            relevance=_env_float("LINEAR_WEIGHT_RELEVANCE", defaults.relevance),
            value=_env_float("LINEAR_WEIGHT_VALUE", defaults.value),
            complexity=_env_float("LINEAR_WEIGHT_COMPLEXITY", defaults.complexity),
            priority=_env_float("LINEAR_WEIGHT_PRIORITY", defaults.priority),
            recency=_env_float("LINEAR_WEIGHT_RECENCY", defaults.recency),
            interactions=_env_float(
                "LINEAR_WEIGHT_INTERACTIONS", defaults.interactions
            ),
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid scoring weights: {_first_error(e)}")


def load_config() -> PrioritizerConfig:
    """Load configuration from environment variables.

    Returns:
        Validated PrioritizerConfig

    Raises:
        ConfigurationError: If LINEAR_TEAM_ID or LINEAR_BACKLOG_STATE_ID is
            missing, or any value is malformed
    """
    team_id = os.getenv("LINEAR_TEAM_ID", "").strip()
    backlog_state_id = os.getenv("LINEAR_BACKLOG_STATE_ID", "").strip()
    if not team_id or not backlog_state_id:
        raise ConfigurationError(
            "LINEAR_TEAM_ID and LINEAR_BACKLOG_STATE_ID environment variables "
            "are required. Run 'linear-prioritizer find-ids' to look them up."
        )

    ttl_raw = os.getenv("LINEAR_CACHE_TTL_HOURS", str(DEFAULT_CACHE_TTL_HOURS))
    try:
        cache_ttl_hours = int(ttl_raw)
    except ValueError:
        raise ConfigurationError(
            f"LINEAR_CACHE_TTL_HOURS must be an integer, got '{ttl_raw}'"
        )

    try:
        return PrioritizerConfig(
            team_id=team_id,
            backlog_state_id=backlog_state_id,
            target_project=os.getenv("LINEAR_TARGET_PROJECT") or None,
            relevance_keywords=parse_list(os.getenv("LINEAR_RELEVANCE_KEYWORDS")),
            employee_aliases=parse_list(os.getenv("LINEAR_EMPLOYEE_ALIASES")),
            cache_ttl_hours=cache_ttl_hours,
            cache_dir=os.getenv("LINEAR_CACHE_DIR") or DEFAULT_CACHE_DIR,
            weights=load_weights(),
        )
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {_first_error(e)}")


def get_api_key() -> str:
    """Return LINEAR_API_KEY or raise ConfigurationError."""
    api_key = os.getenv("LINEAR_API_KEY")
    if not api_key:
        raise ConfigurationError(
            "LINEAR_API_KEY environment variable is not set. "
            "Create a personal API key in Linear settings."
        )
    return api_key


def _first_error(error: ValidationError) -> str:
    details = error.errors()
    if not details:
        return str(error)
    first = details[0]
    location = ".".join(str(part) for part in first.get("loc", ()))
    message = first.get("msg", str(error))
    return f"{location}: {message}" if location else message
