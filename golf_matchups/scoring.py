"""
Value scoring engine.

Composes the blender, odds normalizer, percentile ranker and course fit
adapter into one value score per player:

    base_value_score  = performance_percentile - market_percentile
    course_adjustment = (course_fit_factor - 1) * course_fit_weight
    value_score       = base_value_score * (1 + course_adjustment)
    value_quality     = value_score * overall_confidence
"""

import logging
from collections import defaultdict
from dataclasses import dataclass, field, replace, asdict
from typing import Any, Dict, List, Optional, Tuple, Union

from .blender import BlendCache, blend_sg, resolve_mode, resolve_season_source, validate_weight
from .config import (
    DEFAULT_TOURNAMENT_WEIGHT, DEFAULT_COURSE_FIT_WEIGHT, DEFAULT_MIN_ODDS,
    DEFAULT_MAX_ODDS, SANE_PROBABILITY_MIN, SANE_PROBABILITY_MAX, NEUTRAL_COURSE_FIT,
)
from .course_fit import CourseFitAdapter, FieldFit
from .models import PlayerRecord, ScoredPlayer, BlendMode, SeasonSource, OddsFormat, MatchupId
from .odds import implied_probability, remove_vig, to_american, format_resolved, resolve_format
from .percentiles import percentile_map

logger = logging.getLogger(__name__)

# Fewer eligible players than this and a matchup has nothing to compare
MIN_GROUP_PLAYERS = 2

PlayerKey = Tuple[MatchupId, int]


@dataclass
class ValueScoringOptions:
    """Knobs for one value scoring pass."""
    blend_mode: Union[BlendMode, str] = BlendMode.RECENT
    tournament_weight: float = DEFAULT_TOURNAMENT_WEIGHT
    season_source: Union[SeasonSource, str] = SeasonSource.AGGREGATE
    course_fit_weight: float = DEFAULT_COURSE_FIT_WEIGHT
    min_odds: float = DEFAULT_MIN_ODDS  # American-equivalent
    max_odds: float = DEFAULT_MAX_ODDS
    remove_vig: bool = True
    odds_format: Optional[Union[OddsFormat, str]] = None  # None = auto-detect

    def __post_init__(self):
        self.blend_mode = resolve_mode(self.blend_mode)
        self.season_source = resolve_season_source(self.season_source)
        self.tournament_weight = validate_weight(self.tournament_weight)
        self.odds_format = resolve_format(self.odds_format)
        if self.course_fit_weight < 0:
            raise ValueError(f"course_fit_weight must not be negative, got {self.course_fit_weight}")
        if self.min_odds > self.max_odds:
            raise ValueError(f"min_odds ({self.min_odds}) is greater than max_odds ({self.max_odds})")

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["blend_mode"] = self.blend_mode.value
        data["season_source"] = self.season_source.value
        data["odds_format"] = self.odds_format.value if self.odds_format else "auto"
        return data


@dataclass
class ScoreBreakdown:
    """Result of scoring one player."""
    value_score: float
    value_quality: float
    debug: Dict[str, Any] = field(default_factory=dict)


@dataclass
class FieldScoring:
    """Everything computed for the active field in one pass."""
    scored: List[ScoredPlayer] = field(default_factory=list)
    total_players: int = 0
    excluded: Dict[str, int] = field(default_factory=dict)  # reason -> count
    skipped_groups: int = 0  # Matchups left with fewer than 2 eligible players

    @property
    def eligible_players(self) -> int:
        return len(self.scored)

    def by_matchup(self) -> Dict[MatchupId, List[ScoredPlayer]]:
        groups: Dict[MatchupId, List[ScoredPlayer]] = defaultdict(list)
        for p in self.scored:
            groups[p.matchup_id].append(p)
        return dict(groups)


def performance_confidence(player: PlayerRecord) -> float:
    """More SG sources means more trust in the performance side."""
    confidence = 0.0
    if player.has_tournament_sg:
        confidence += 0.4
    if player.has_season_sg:
        confidence += 0.4
    if player.has_tournament_sg and player.has_season_sg:
        confidence += 0.2
    return min(1.0, confidence)


def odds_confidence(odds, fmt: Optional[OddsFormat] = None) -> float:
    """Sane price plus a confidently resolved format."""
    confidence = 0.0
    prob = implied_probability(odds, fmt)
    if SANE_PROBABILITY_MIN < prob < SANE_PROBABILITY_MAX:
        confidence += 0.5
    if format_resolved(odds, fmt):
        confidence += 0.5
    return confidence


class ValueScorer:
    """Scores a field of matchup players for value against the market."""

    def __init__(
        self,
        options: Optional[ValueScoringOptions] = None,
        course_fit: Optional[CourseFitAdapter] = None,
        cache: Optional[BlendCache] = None,
    ):
        self.options = options or ValueScoringOptions()
        self.course_fit = course_fit
        self.cache = cache if cache is not None else BlendCache()

    def _exclusion_reason(self, player: PlayerRecord, excluded: bool) -> Optional[str]:
        if excluded:
            return "no_sg_data"
        if player.odds is None:
            return "no_odds"
        american = to_american(player.odds, self.options.odds_format)
        if american is None:
            return "no_odds"
        if not self.options.min_odds <= american <= self.options.max_odds:
            return "odds_out_of_range"
        return None

    def _group_probabilities(self, players: List[PlayerRecord]) -> Dict[PlayerKey, float]:
        """Vig-adjusted implied probability per (matchup, player), computed within each matchup."""
        groups: Dict[MatchupId, List[PlayerRecord]] = defaultdict(list)
        for p in players:
            if p.odds is not None:
                groups[p.matchup_id].append(p)

        adjusted: Dict[PlayerKey, float] = {}
        for matchup_id, group in groups.items():
            raw = [implied_probability(p.odds, self.options.odds_format) for p in group]
            probs = remove_vig(raw) if self.options.remove_vig else raw
            for p, prob in zip(group, probs):
                adjusted[(matchup_id, p.player_id)] = prob
        return adjusted

    def score_field(self, players: List[PlayerRecord]) -> FieldScoring:
        """
        Build the field context and score every eligible player.
        Ineligible players are left out entirely (not scored as zero), and so
        is every group left with fewer than 2 eligible players.
        """
        opts = self.options
        result = FieldScoring(total_players=len(players))
        excluded_counts: Dict[str, int] = defaultdict(int)

        by_group: Dict[MatchupId, List[ScoredPlayer]] = {}
        for player in players:
            group = by_group.setdefault(player.matchup_id, [])
            blend = blend_sg(player, opts.blend_mode, opts.tournament_weight, opts.season_source, self.cache)
            reason = self._exclusion_reason(player, blend.is_excluded)
            if reason:
                excluded_counts[reason] += 1
                continue
            group.append(ScoredPlayer(
                player=player,
                weighted_sg=blend.value,
                calculation_method=blend.method,
                implied_probability=implied_probability(player.odds, opts.odds_format),
            ))

        eligible: List[ScoredPlayer] = []
        for matchup_id, group in by_group.items():
            if len(group) < MIN_GROUP_PLAYERS:
                logger.debug(f"Value scoring: matchup {matchup_id} has {len(group)} eligible players, skipped")
                result.skipped_groups += 1
                if group:
                    excluded_counts["incomplete_group"] += len(group)
                continue
            eligible.extend(group)

        adjusted = self._group_probabilities(players)
        perf_pct = percentile_map((p.key, p.weighted_sg) for p in eligible)
        market_pct = percentile_map((p.key, adjusted.get(p.key)) for p in eligible)

        if self.course_fit is not None:
            fit = self.course_fit.lookup_field((p.player_id, p.player.event_name) for p in eligible)
        else:
            fit = FieldFit()

        for p in eligible:
            p = replace(
                p,
                adjusted_probability=adjusted.get(p.key),
                performance_percentile=perf_pct.get(p.key),
                odds_percentile=market_pct.get(p.key),
                course_fit_factor=fit.factors.get(p.player_id, NEUTRAL_COURSE_FIT),
            )
            breakdown = self.score(p, course_fit_fallback=fit.failures.get(p.player_id))
            result.scored.append(replace(
                p,
                value_score=breakdown.value_score,
                value_quality=breakdown.value_quality,
                confidence=breakdown.debug["overall_confidence"],
                debug=breakdown.debug,
            ))

        result.excluded = dict(excluded_counts)
        logger.info(
            f"Value scoring: {result.eligible_players}/{result.total_players} players eligible, "
            f"{result.skipped_groups} groups skipped (excluded: {result.excluded or 'none'})"
        )
        return result

    def score(self, player: ScoredPlayer, course_fit_fallback: Optional[str] = None) -> ScoreBreakdown:
        """
        Score one player whose field-relative fields are already attached
        (performance_percentile, odds_percentile, course_fit_factor).
        """
        opts = self.options
        perf = player.performance_percentile if player.performance_percentile is not None else 0.5
        market = player.odds_percentile if player.odds_percentile is not None else 0.5

        base_value_score = perf - market
        course_adjustment = (player.course_fit_factor - 1) * opts.course_fit_weight
        value_score = base_value_score * (1 + course_adjustment)

        perf_conf = performance_confidence(player.player)
        odds_conf = odds_confidence(player.odds, opts.odds_format)
        overall = (perf_conf + odds_conf) / 2

        debug = {
            "weighted_sg": player.weighted_sg,
            "calculation_method": player.calculation_method,
            "performance_percentile": perf,
            "market_percentile": market,
            "base_value_score": base_value_score,
            "course_fit_factor": player.course_fit_factor,
            "course_adjustment": course_adjustment,
            "performance_confidence": perf_conf,
            "odds_confidence": odds_conf,
            "overall_confidence": overall,
        }
        if course_fit_fallback:
            debug["course_fit_fallback"] = course_fit_fallback

        return ScoreBreakdown(
            value_score=value_score,
            value_quality=value_score * overall,
            debug=debug,
        )
