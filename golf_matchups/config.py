"""
Configuration management for the golf matchup value engine.
Holds environment-driven settings and the tunable scoring constants.
"""

import os
from dataclasses import dataclass
from typing import List

from dotenv import load_dotenv


# Load environment variables from .env file
load_dotenv()


# ============================================================================
# SCORING CONSTANTS
# Values carried over from the production filters. They have no documented
# derivation; treat them as tunables, not as optimal settings.
# ============================================================================

# Sentinel for players whose required SG source is missing
EXCLUDED_SG = -999.0

# Blend policies (tournament share of the blend)
RECENT_TOURNAMENT_WEIGHT = 0.85
SEASON_TOURNAMENT_WEIGHT = 0.25
DEFAULT_TOURNAMENT_WEIGHT = 0.6

# Percentile ranking precision (decimals)
PERCENTILE_PRECISION = 2

# Course fit
NEUTRAL_COURSE_FIT = 1.0
DEFAULT_COURSE_FIT_WEIGHT = 0.2

# Odds window in American-odds terms ("999" means no limit)
DEFAULT_MIN_ODDS = -999
DEFAULT_MAX_ODDS = 999

# Implied probability band considered a sane market price
SANE_PROBABILITY_MIN = 0.01
SANE_PROBABILITY_MAX = 0.99

# Group comparator
ODDS_GAP_AMERICAN_THRESHOLD = 5    # +100 vs +105
SG_TIE_TOLERANCE = 0.01            # Differences at or below this are rounding noise
DOMINANCE_MIN_GAP = 0.05           # Category lead needed to count as dominant
DOMINANCE_MIN_CATEGORIES = 2       # Categories (of 4) needed for overall dominance
PUTTING_EDGE_THRESHOLD = 0.3
BALL_STRIKING_EDGE_THRESHOLD = 0.5
DISAGREEMENT_MILD_THRESHOLD = 0.1
DISAGREEMENT_STRONG_THRESHOLD = 0.2

# Filter defaults
DEFAULT_MIN_SG_THRESHOLD = 0.0
DEFAULT_MIN_VALUE_SCORE = 0.1
DEFAULT_HEAVY_FAVORITE_GAP = 0.4   # Decimal odds points


@dataclass
class Config:
    """Application configuration."""
    # Course fit service
    course_fit_api_url: str = ""
    course_fit_api_key: str = ""
    course_fit_timeout: float = 5.0
    course_fit_max_workers: int = 8

    # Scoring
    course_fit_weight: float = DEFAULT_COURSE_FIT_WEIGHT

    # Logging
    log_level: str = "INFO"

    def __post_init__(self):
        """Load settings from environment."""
        self.course_fit_api_url = os.getenv("COURSE_FIT_API_URL", self.course_fit_api_url)
        self.course_fit_api_key = os.getenv("COURSE_FIT_API_KEY", self.course_fit_api_key)
        self.log_level = os.getenv("GOLF_MATCHUPS_LOG_LEVEL", self.log_level).upper()

        try:
            self.course_fit_timeout = float(os.getenv("COURSE_FIT_TIMEOUT", self.course_fit_timeout))
            self.course_fit_max_workers = int(os.getenv("COURSE_FIT_MAX_WORKERS", self.course_fit_max_workers))
            self.course_fit_weight = float(os.getenv("COURSE_FIT_WEIGHT", self.course_fit_weight))
        except ValueError as e:
            raise ValueError(f"Invalid numeric setting in environment: {e}") from e

    def validate_config(self, require_course_fit: bool = False) -> List[str]:
        """Return a list of configuration problems (empty when valid)."""
        errors = []
        if require_course_fit and not self.course_fit_api_url:
            errors.append(
                "COURSE_FIT_API_URL not configured. "
                "Set it to the base URL of the course fit service."
            )
        if self.course_fit_timeout <= 0:
            errors.append("COURSE_FIT_TIMEOUT must be positive")
        if self.course_fit_max_workers < 1:
            errors.append("COURSE_FIT_MAX_WORKERS must be at least 1")
        if self.course_fit_weight < 0:
            errors.append("COURSE_FIT_WEIGHT must not be negative")
        return errors

    def is_configured(self) -> bool:
        """Whether the course fit service can be called."""
        return bool(self.course_fit_api_url)


def get_config() -> Config:
    """Get application configuration."""
    return Config()
