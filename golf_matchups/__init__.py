"""
Golf Matchup Value Engine
Odds normalization, strokes gained blending and value scoring for
2-ball and 3-ball golf matchups.
"""

__version__ = "1.0.0"
__author__ = "Eric"

from .models import (
    OddsFormat, BlendMode, SeasonSource, DisagreementType, SGLine, PlayerRecord,
    ScoredPlayer, FilterResult, PlayerComparison, MatchupAnalysis, MatchupComparison,
    CategoryDominance, FilterBadge,
)
from .config import get_config
from .odds import implied_probability, remove_vig, detect_format, to_decimal, to_american
from .blender import BlendCache, blend_sg, weighted_sg
from .percentiles import percentiles
from .course_fit import CourseFitAdapter, CourseFitClient, FieldFit
from .scoring import ValueScorer, ValueScoringOptions
from .comparison import MatchupComparisonEngine, compare_matchup
from .filters import (
    SGHeavyOptions, SGValueOptions, HeavyFavoritesOptions, BalancedOptions, SGCategoryLeadersOptions,
    get_filter, list_filters, apply_filter,
)
from .matchup_filters import MatchupFilterCriteria, filter_matchups, matchup_badges, value_players
from .loader import load_field, group_by_matchup

__all__ = [
    # Models
    "OddsFormat", "BlendMode", "SeasonSource", "DisagreementType", "SGLine", "PlayerRecord",
    "ScoredPlayer", "FilterResult", "PlayerComparison", "MatchupAnalysis", "MatchupComparison",
    "CategoryDominance", "FilterBadge",
    # Config
    "get_config",
    # Odds
    "implied_probability", "remove_vig", "detect_format", "to_decimal", "to_american",
    # Scoring
    "BlendCache", "blend_sg", "weighted_sg", "percentiles",
    "CourseFitAdapter", "CourseFitClient", "FieldFit", "ValueScorer", "ValueScoringOptions",
    # Comparison and filters
    "MatchupComparisonEngine", "compare_matchup",
    "SGHeavyOptions", "SGValueOptions", "HeavyFavoritesOptions", "BalancedOptions",
    "SGCategoryLeadersOptions",
    "get_filter", "list_filters", "apply_filter",
    "MatchupFilterCriteria", "filter_matchups", "matchup_badges", "value_players",
    # Loading
    "load_field", "group_by_matchup",
]
