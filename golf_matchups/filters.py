"""
Filter pipeline: SG-Heavy, SG-Value, Heavy-Favorites, Balanced and
SG-Category-Leaders.

Every filter groups the field by matchup id, derives a per-player value,
applies its qualification rule, keeps the top qualifier per group (or every
qualifier with include_underdogs) and sorts the flat result. Groups without a
qualifier are left out of the output but still counted in the metadata.
"""

import logging
from dataclasses import dataclass, asdict, replace
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, Union

import numpy as np

from .blender import (
    BlendCache, blend_sg, blend_categories, resolve_mode, resolve_season_source, validate_weight,
)
from .config import (
    DEFAULT_MIN_SG_THRESHOLD, DEFAULT_TOURNAMENT_WEIGHT, DEFAULT_MIN_VALUE_SCORE,
    DEFAULT_MIN_ODDS, DEFAULT_MAX_ODDS, DEFAULT_COURSE_FIT_WEIGHT, DEFAULT_HEAVY_FAVORITE_GAP,
)
from .course_fit import CourseFitAdapter
from .loader import group_by_matchup
from .models import (
    PlayerRecord, ScoredPlayer, FilterResult, BlendMode, SeasonSource, OddsFormat, MatchupId,
)
from .odds import resolve_format, to_decimal, to_american, decimal_to_american
from .percentiles import percentiles
from .scoring import ValueScorer, ValueScoringOptions, MIN_GROUP_PLAYERS

logger = logging.getLogger(__name__)


# ============================================================================
# Helpers
# ============================================================================

def _options_dict(options) -> Dict[str, Any]:
    data = asdict(options)
    for key, value in data.items():
        if isinstance(value, Enum):
            data[key] = value.value
        elif value is None and key == "odds_format":
            data[key] = "auto"
    return data


def _num(value: Optional[float], default: float = 0.0) -> float:
    return default if value is None else value


def _normalize(values: Sequence[float]) -> List[float]:
    """Min-max scale to [0, 1]; a flat list scales to all ones."""
    if not values:
        return []
    lo, hi = min(values), max(values)
    if hi - lo > 0:
        return [(v - lo) / (hi - lo) for v in values]
    return [1.0] * len(values)


def _check_sort(sort_by: str, allowed: Tuple[str, ...]) -> str:
    if sort_by not in allowed:
        raise ValueError(f"Unknown sort key '{sort_by}'. Expected one of: {', '.join(allowed)}")
    return sort_by


def with_group_context(
    scored: List[ScoredPlayer],
    group: Sequence[PlayerRecord],
    odds_format: Optional[OddsFormat] = None,
) -> List[ScoredPlayer]:
    """
    Attach group-relative fields to each scored player: SG gap to the best
    of the rest and odds gap to the group favorite. The favorite is taken
    from the whole group, scored or not.
    """
    priced = [(p, to_decimal(p.odds, odds_format)) for p in group]
    priced = [(p, d) for p, d in priced if d is not None]
    favorite_decimal = min((d for _, d in priced), default=None)

    result = []
    for sp in scored:
        others = [o for o in scored if o.player_id != sp.player_id and o.weighted_sg is not None]
        updates: Dict[str, Any] = {}
        if others and sp.weighted_sg is not None:
            next_best = max(others, key=lambda o: o.weighted_sg)
            updates.update(
                sg_gap_to_next=sp.weighted_sg - next_best.weighted_sg,
                next_best_player=next_best.name,
                next_best_sg=next_best.weighted_sg,
                next_best_odds=next_best.odds,
            )

        decimal = to_decimal(sp.odds, odds_format)
        if decimal is not None and favorite_decimal is not None:
            updates.update(
                odds_gap_to_favorite=decimal - favorite_decimal,
                american_odds_gap=abs(decimal_to_american(decimal) - decimal_to_american(favorite_decimal)),
            )
        result.append(replace(sp, **updates))
    return result


# ============================================================================
# Options
# ============================================================================

@dataclass
class SGHeavyOptions:
    """Options for the SG-Heavy filter."""
    min_sg_threshold: float = DEFAULT_MIN_SG_THRESHOLD
    tournament_weight: float = DEFAULT_TOURNAMENT_WEIGHT
    blend_mode: Union[BlendMode, str] = BlendMode.RECENT
    season_source: Union[SeasonSource, str] = SeasonSource.AGGREGATE
    min_odds_gap: float = 0.0  # Decimal odds points behind the group favorite
    max_odds: float = DEFAULT_MAX_ODDS  # American-equivalent
    include_underdogs: bool = False
    sort_by: str = "sg"
    odds_format: Optional[Union[OddsFormat, str]] = None

    SORT_KEYS = ("sg", "odds-gap", "composite")

    def __post_init__(self):
        self.blend_mode = resolve_mode(self.blend_mode)
        self.season_source = resolve_season_source(self.season_source)
        self.tournament_weight = validate_weight(self.tournament_weight)
        self.odds_format = resolve_format(self.odds_format)
        self.sort_by = _check_sort(self.sort_by, self.SORT_KEYS)
        if self.min_odds_gap < 0:
            raise ValueError(f"min_odds_gap must not be negative, got {self.min_odds_gap}")


@dataclass
class SGValueOptions:
    """Options for the SG-Value filter."""
    min_value_score: float = DEFAULT_MIN_VALUE_SCORE
    min_odds: float = DEFAULT_MIN_ODDS
    max_odds: float = DEFAULT_MAX_ODDS
    course_fit_weight: float = DEFAULT_COURSE_FIT_WEIGHT
    remove_vig: bool = True
    tournament_weight: float = DEFAULT_TOURNAMENT_WEIGHT
    blend_mode: Union[BlendMode, str] = BlendMode.RECENT
    season_source: Union[SeasonSource, str] = SeasonSource.AGGREGATE
    include_underdogs: bool = False
    sort_by: str = "value"
    odds_format: Optional[Union[OddsFormat, str]] = None

    SORT_KEYS = ("value", "quality", "sg")

    def __post_init__(self):
        self.sort_by = _check_sort(self.sort_by, self.SORT_KEYS)
        # Validates and normalizes the shared scoring knobs
        scoring = self.scoring_options()
        self.blend_mode = scoring.blend_mode
        self.season_source = scoring.season_source
        self.tournament_weight = scoring.tournament_weight
        self.odds_format = scoring.odds_format

    def scoring_options(self) -> ValueScoringOptions:
        return ValueScoringOptions(
            blend_mode=self.blend_mode,
            tournament_weight=self.tournament_weight,
            season_source=self.season_source,
            course_fit_weight=self.course_fit_weight,
            min_odds=self.min_odds,
            max_odds=self.max_odds,
            remove_vig=self.remove_vig,
            odds_format=self.odds_format,
        )


@dataclass
class HeavyFavoritesOptions:
    """Options for the Heavy-Favorites filter."""
    odds_gap: float = DEFAULT_HEAVY_FAVORITE_GAP  # Decimal odds points
    sort_by: str = "composite"
    odds_format: Optional[Union[OddsFormat, str]] = None

    SORT_KEYS = ("composite", "odds-gap")

    def __post_init__(self):
        self.odds_format = resolve_format(self.odds_format)
        self.sort_by = _check_sort(self.sort_by, self.SORT_KEYS)
        if self.odds_gap < 0:
            raise ValueError(f"odds_gap must not be negative, got {self.odds_gap}")


@dataclass
class BalancedOptions:
    """Options for the Balanced filter."""
    max_deviation: float = 1.0  # Field standard deviations allowed per category
    tournament_weight: float = DEFAULT_TOURNAMENT_WEIGHT
    blend_mode: Union[BlendMode, str] = BlendMode.RECENT
    season_source: Union[SeasonSource, str] = SeasonSource.AGGREGATE
    include_underdogs: bool = False
    sort_by: str = "balance"

    SORT_KEYS = ("balance", "sg")

    def __post_init__(self):
        self.blend_mode = resolve_mode(self.blend_mode)
        self.season_source = resolve_season_source(self.season_source)
        self.tournament_weight = validate_weight(self.tournament_weight)
        self.sort_by = _check_sort(self.sort_by, self.SORT_KEYS)
        if self.max_deviation < 0:
            raise ValueError(f"max_deviation must not be negative, got {self.max_deviation}")


@dataclass
class SGCategoryLeadersOptions:
    """Options for the SG-Category-Leaders filter."""
    category: str = "total"
    min_category_value: float = 0.5
    min_percentile: float = 70.0  # 0-100, rank of the category value in the field
    top_n_per_group: int = 1
    require_consistency: bool = False
    tournament_weight: float = 0.7
    blend_mode: Union[BlendMode, str] = BlendMode.EXTENDED
    season_source: Union[SeasonSource, str] = SeasonSource.AGGREGATE
    sort_by: str = "category"

    CATEGORIES = ("total", "putting", "approach", "around_green", "off_tee", "all")
    SORT_KEYS = ("category", "consistency")

    def __post_init__(self):
        self.category = str(self.category).lower().replace("-", "_")
        if self.category not in self.CATEGORIES:
            raise ValueError(
                f"Unknown SG category '{self.category}'. Expected one of: {', '.join(self.CATEGORIES)}"
            )
        if not 0 <= self.min_percentile <= 100:
            raise ValueError(f"min_percentile must be between 0 and 100, got {self.min_percentile}")
        if self.top_n_per_group < 1:
            raise ValueError(f"top_n_per_group must be at least 1, got {self.top_n_per_group}")
        self.top_n_per_group = int(self.top_n_per_group)
        self.blend_mode = resolve_mode(self.blend_mode)
        self.season_source = resolve_season_source(self.season_source)
        self.tournament_weight = validate_weight(self.tournament_weight)
        self.sort_by = _check_sort(self.sort_by, self.SORT_KEYS)


# ============================================================================
# Filters
# ============================================================================

class BaseFilter:
    """Common plumbing for the matchup filters."""

    id = ""
    name = ""
    description = ""
    options_class: type = dict

    def __init__(self, course_fit: Optional[CourseFitAdapter] = None):
        self.course_fit = course_fit

    def resolve_options(self, options=None):
        """Accept an options instance, a plain dict, or None for defaults."""
        if options is None:
            return self.options_class()
        if isinstance(options, self.options_class):
            return options
        if isinstance(options, dict):
            try:
                return self.options_class(**options)
            except TypeError as e:
                raise ValueError(f"Invalid options for filter '{self.id}': {e}") from None
        raise ValueError(f"Options for filter '{self.id}' must be a dict or {self.options_class.__name__}")

    def apply(self, players: List[PlayerRecord], options=None) -> FilterResult:
        raise NotImplementedError

    def _result(
        self,
        filtered: List[ScoredPlayer],
        opts,
        players: List[PlayerRecord],
        groups: Dict[MatchupId, List[PlayerRecord]],
        eligible: int,
        qualified: int,
        groups_with_qualifiers: int,
        extra: Optional[Dict[str, Any]] = None,
    ) -> FilterResult:
        meta = {
            "total_players": len(players),
            "total_groups": len(groups),
            "eligible_players": eligible,
            "qualified_players": qualified,
            "groups_with_qualifiers": groups_with_qualifiers,
            "options": _options_dict(opts),
            "debug": [self._trace(p) for p in filtered],
        }
        if extra:
            meta.update(extra)
        logger.info(
            f"{self.name}: {len(filtered)} picks from {groups_with_qualifiers}/{len(groups)} groups "
            f"({eligible} eligible, {qualified} qualified of {len(players)} players)"
        )
        return FilterResult(filter_id=self.id, filtered=filtered, meta=meta)

    @staticmethod
    def _trace(p: ScoredPlayer) -> Dict[str, Any]:
        return {
            "player_id": p.player_id,
            "name": p.name,
            "matchup_id": p.matchup_id,
            "weighted_sg": p.weighted_sg,
            "calculation_method": p.calculation_method,
            "sg_gap_to_next": p.sg_gap_to_next,
            "odds_gap_to_favorite": p.odds_gap_to_favorite,
            "value_score": p.value_score,
            "composite_score": p.composite_score,
        }


class SGHeavyFilter(BaseFilter):
    """Players whose blended strokes gained stands out in their group."""

    id = "sg-heavy"
    name = "SG Heavy"
    description = (
        "Players with the strongest blended strokes gained in their group, "
        "with a minor odds gap influence."
    )
    options_class = SGHeavyOptions

    @staticmethod
    def _qualifies(p: ScoredPlayer, opts: SGHeavyOptions) -> bool:
        if p.weighted_sg < opts.min_sg_threshold:
            return False
        if _num(p.odds_gap_to_favorite) < opts.min_odds_gap:
            return False
        american = to_american(p.odds, opts.odds_format)
        if american is not None and american > opts.max_odds:
            return False
        return True

    @staticmethod
    def _sort_key(sort_by: str) -> Callable[[ScoredPlayer], Tuple]:
        if sort_by == "odds-gap":
            return lambda p: (_num(p.odds_gap_to_favorite), p.weighted_sg)
        if sort_by == "composite":
            return lambda p: (_num(p.composite_score), p.weighted_sg)
        return lambda p: (p.weighted_sg, _num(p.odds_gap_to_favorite), _num(p.sg_gap_to_next))

    def apply(self, players: List[PlayerRecord], options=None) -> FilterResult:
        opts = self.resolve_options(options)
        cache = BlendCache()
        groups = group_by_matchup(players)

        picks: List[ScoredPlayer] = []
        eligible = qualified = groups_with_qualifiers = skipped_groups = 0
        for matchup_id, group in groups.items():
            scored = []
            for player in group:
                blend = blend_sg(player, opts.blend_mode, opts.tournament_weight, opts.season_source, cache)
                if blend.is_excluded:
                    continue
                scored.append(ScoredPlayer(player=player, weighted_sg=blend.value, calculation_method=blend.method))
            if len(scored) < MIN_GROUP_PLAYERS:
                logger.debug(f"SG Heavy: fewer than 2 players with SG in matchup {matchup_id}")
                skipped_groups += 1
                continue
            eligible += len(scored)

            scored = with_group_context(scored, group, opts.odds_format)
            qualifiers = [p for p in scored if self._qualifies(p, opts)]
            if not qualifiers:
                logger.debug(f"SG Heavy: no qualifiers in matchup {matchup_id}")
                continue

            qualifiers.sort(key=lambda p: p.weighted_sg, reverse=True)
            qualified += len(qualifiers)
            groups_with_qualifiers += 1
            picks.extend(qualifiers if opts.include_underdogs else qualifiers[:1])

        # Composite: 90% SG gap, 10% odds gap, both scaled across the picks
        sg_norm = _normalize([_num(p.sg_gap_to_next) for p in picks])
        odds_norm = _normalize([_num(p.odds_gap_to_favorite) for p in picks])
        picks = [
            replace(p, composite_score=0.9 * s + 0.1 * o)
            for p, s, o in zip(picks, sg_norm, odds_norm)
        ]
        picks.sort(key=self._sort_key(opts.sort_by), reverse=True)

        return self._result(
            picks, opts, players, groups, eligible, qualified, groups_with_qualifiers,
            extra={"skipped_groups": skipped_groups},
        )


class SGValueFilter(BaseFilter):
    """Players whose performance percentile outruns their market percentile."""

    id = "sg-value"
    name = "SG Value"
    description = (
        "Players whose blended strokes gained ranks higher in the field than "
        "their vig-adjusted odds do, adjusted for course fit."
    )
    options_class = SGValueOptions

    @staticmethod
    def _sort_key(sort_by: str) -> Callable[[ScoredPlayer], Tuple]:
        if sort_by == "quality":
            return lambda p: (p.value_quality, p.value_score, p.weighted_sg)
        if sort_by == "sg":
            return lambda p: (p.weighted_sg, p.value_score, p.value_quality)
        return lambda p: (p.value_score, p.value_quality, p.weighted_sg)

    def apply(self, players: List[PlayerRecord], options=None) -> FilterResult:
        opts = self.resolve_options(options)
        scorer = ValueScorer(opts.scoring_options(), course_fit=self.course_fit, cache=BlendCache())
        field = scorer.score_field(players)
        scored_by_matchup = field.by_matchup()
        groups = group_by_matchup(players)
        rank = self._sort_key(opts.sort_by)

        picks: List[ScoredPlayer] = []
        qualified = groups_with_qualifiers = 0
        for matchup_id, group in groups.items():
            scored = with_group_context(scored_by_matchup.get(matchup_id, []), group, opts.odds_format)
            qualifiers = [p for p in scored if p.value_score >= opts.min_value_score]
            if not qualifiers:
                logger.debug(f"SG Value: no qualifiers in matchup {matchup_id}")
                continue

            qualifiers.sort(key=rank, reverse=True)
            qualified += len(qualifiers)
            groups_with_qualifiers += 1
            picks.extend(qualifiers if opts.include_underdogs else qualifiers[:1])

        picks.sort(key=rank, reverse=True)
        return self._result(
            picks, opts, players, groups, field.eligible_players, qualified, groups_with_qualifiers,
            extra={
                "excluded": field.excluded,
                "skipped_groups": field.skipped_groups,
                "value_debug": {f"{p.matchup_id}:{p.player_id}": p.debug for p in picks},
            },
        )


class HeavyFavoritesFilter(BaseFilter):
    """Group favorites priced well clear of the next best player."""

    id = "heavy-favorites"
    name = "Heavy Favorites"
    description = (
        "Favorites whose decimal odds are at least the configured gap shorter "
        "than the next best player in their group."
    )
    options_class = HeavyFavoritesOptions

    @staticmethod
    def _sg_total(player: PlayerRecord) -> Tuple[Optional[float], str]:
        if player.tournament_sg.total is not None:
            return player.tournament_sg.total, "tournament"
        if player.season_sg.total is not None:
            return player.season_sg.total, "season"
        return None, "no SG data"

    @staticmethod
    def _sort_key(sort_by: str) -> Callable[[ScoredPlayer], Tuple]:
        def avg(p: ScoredPlayer) -> float:
            # Lower scoring average ranks first under a descending sort
            season_avg = p.player.season_avg
            return -season_avg if season_avg is not None else float("-inf")

        if sort_by == "odds-gap":
            return lambda p: (p.odds_gap_to_next, _num(p.weighted_sg), avg(p))
        return lambda p: (p.composite_score, p.odds_gap_to_next, _num(p.weighted_sg), avg(p))

    @staticmethod
    def _composite(picks: List[ScoredPlayer]) -> List[ScoredPlayer]:
        """70% odds gap, 20% SG total, 10% season scoring average (lower is better)."""
        odds_norm = _normalize([p.odds_gap_to_next for p in picks])
        sg_norm = _normalize([_num(p.weighted_sg) for p in picks])

        averages = [p.player.season_avg for p in picks if p.player.season_avg is not None]
        if averages and max(averages) - min(averages) > 0:
            best, worst = min(averages), max(averages)
            avg_norm = [
                (worst - _num(p.player.season_avg, worst)) / (worst - best)
                for p in picks
            ]
        else:
            avg_norm = [1.0] * len(picks)

        return [
            replace(p, composite_score=0.7 * o + 0.2 * s + 0.1 * a)
            for p, o, s, a in zip(picks, odds_norm, sg_norm, avg_norm)
        ]

    def apply(self, players: List[PlayerRecord], options=None) -> FilterResult:
        opts = self.resolve_options(options)
        groups = group_by_matchup(players)

        picks: List[ScoredPlayer] = []
        eligible = skipped_groups = 0
        for matchup_id, group in groups.items():
            priced = [(p, to_decimal(p.odds, opts.odds_format)) for p in group]
            priced = [(p, d) for p, d in priced if d is not None and d > 1]
            if len(priced) < MIN_GROUP_PLAYERS:
                logger.debug(f"Heavy Favorites: fewer than 2 priced players in matchup {matchup_id}")
                skipped_groups += 1
                continue
            eligible += len(priced)

            priced.sort(key=lambda item: item[1])
            (favorite, fav_decimal), (next_best, next_decimal) = priced[0], priced[1]
            gap = next_decimal - fav_decimal
            # Rounded so 2.4 - 2.0 clears a 0.4 threshold
            if round(gap, 6) < opts.odds_gap:
                logger.debug(f"Heavy Favorites: gap {gap:.2f} too small in matchup {matchup_id}")
                continue

            sg, method = self._sg_total(favorite)
            next_sg, _ = self._sg_total(next_best)
            picks.append(ScoredPlayer(
                player=favorite,
                weighted_sg=sg,
                calculation_method=method,
                odds_gap_to_favorite=0.0,
                odds_gap_to_next=gap,
                american_odds_gap=abs(decimal_to_american(next_decimal) - decimal_to_american(fav_decimal)),
                next_best_player=next_best.name,
                next_best_sg=next_sg,
                next_best_odds=next_best.odds,
            ))

        picks = self._composite(picks)
        picks.sort(key=self._sort_key(opts.sort_by), reverse=True)
        return self._result(
            picks, opts, players, groups, eligible, len(picks), len(picks),
            extra={"skipped_groups": skipped_groups},
        )


class BalancedFilter(BaseFilter):
    """
    Players with no glaring hole in their game.

    A player qualifies when blended total, putting, off-the-tee and approach
    SG all sit within max_deviation standard deviations of the field mean.
    composite_score is 1 / (1 + mean absolute z-score), so 1.0 is a player
    exactly on the field mean everywhere.
    """

    id = "balanced"
    name = "Balanced"
    description = (
        "Players whose strokes gained stays close to the field average in "
        "every key category."
    )
    options_class = BalancedOptions

    CATEGORIES = ("total", "putting", "off_tee", "approach")

    @staticmethod
    def _sort_key(sort_by: str) -> Callable[[ScoredPlayer], Tuple]:
        if sort_by == "sg":
            return lambda p: (p.weighted_sg, p.composite_score)
        return lambda p: (p.composite_score, p.weighted_sg)

    def apply(self, players: List[PlayerRecord], options=None) -> FilterResult:
        opts = self.resolve_options(options)
        groups = group_by_matchup(players)

        usable: Dict[MatchupId, List[Tuple[PlayerRecord, Dict[str, float]]]] = {}
        skipped_groups = 0
        for matchup_id, group in groups.items():
            lines = []
            for player in group:
                cats = blend_categories(player, opts.blend_mode, opts.tournament_weight, opts.season_source)
                if all(cats[c] is not None for c in self.CATEGORIES):
                    lines.append((player, cats))
            if len(lines) < MIN_GROUP_PLAYERS:
                logger.debug(f"Balanced: fewer than 2 players with full SG in matchup {matchup_id}")
                skipped_groups += 1
                continue
            usable[matchup_id] = lines

        everyone = [cats for lines in usable.values() for _, cats in lines]
        stats = {}
        for category in self.CATEGORIES:
            values = np.asarray([cats[category] for cats in everyone], dtype=float)
            if len(values):
                stats[category] = (float(np.mean(values)), float(np.std(values)))

        picks: List[ScoredPlayer] = []
        qualified = groups_with_qualifiers = 0
        for matchup_id, lines in usable.items():
            qualifiers = []
            for player, cats in lines:
                deviations = {c: abs(cats[c] - stats[c][0]) for c in self.CATEGORIES}
                if any(deviations[c] > opts.max_deviation * stats[c][1] for c in self.CATEGORIES):
                    continue
                z_scores = [deviations[c] / stats[c][1] if stats[c][1] > 0 else 0.0 for c in self.CATEGORIES]
                qualifiers.append(ScoredPlayer(
                    player=player,
                    weighted_sg=cats["total"],
                    calculation_method=f"balanced ({opts.blend_mode.value})",
                    composite_score=1 / (1 + float(np.mean(z_scores))),
                    debug={"categories": cats, "z_scores": dict(zip(self.CATEGORIES, z_scores))},
                ))
            if not qualifiers:
                logger.debug(f"Balanced: no qualifiers in matchup {matchup_id}")
                continue

            qualifiers = with_group_context(qualifiers, groups[matchup_id])
            qualifiers.sort(key=self._sort_key(opts.sort_by), reverse=True)
            qualified += len(qualifiers)
            groups_with_qualifiers += 1
            picks.extend(qualifiers if opts.include_underdogs else qualifiers[:1])

        picks.sort(key=self._sort_key(opts.sort_by), reverse=True)
        return self._result(
            picks, opts, players, groups, len(everyone), qualified, groups_with_qualifiers,
            extra={
                "skipped_groups": skipped_groups,
                "field_stats": {c: {"mean": m, "std": s} for c, (m, s) in stats.items()},
            },
        )


def consistency_score(values: Sequence[float]) -> int:
    """0-100; 100 means identical SG in every category, each 0.1 of spread costs 4 points."""
    if len(values) < 2:
        return 0
    return int(round(max(0.0, 100 - float(np.std(values)) * 40)))


def is_consistent(values: Sequence[float]) -> bool:
    """Three or more categories, modest spread, no disaster, at least one strength."""
    if len(values) < 3:
        return False
    return float(np.std(values)) < 1.0 and all(v > -2.0 for v in values) and any(v > 0 for v in values)


class SGCategoryLeadersFilter(BaseFilter):
    """
    Specialists: the best players in one SG category, or in their own best
    category with category="all".

    weighted_sg carries the blended total, composite_score the value in the
    focus category and performance_percentile its rank in the field.
    """

    id = "sg-category-leaders"
    name = "SG Category Leaders"
    description = (
        "Players who excel in a chosen strokes gained category such as "
        "putting or approach."
    )
    options_class = SGCategoryLeadersOptions

    @staticmethod
    def _category_value(cats: Dict[str, Optional[float]], category: str) -> Optional[float]:
        if category == "all":
            values = [v for v in cats.values() if v is not None]
            return max(values) if values else None
        return cats.get(category)

    @staticmethod
    def _sort_key(sort_by: str) -> Callable[[ScoredPlayer], Tuple]:
        def consistency(p: ScoredPlayer) -> int:
            return p.debug.get("consistency_score", 0)

        if sort_by == "consistency":
            return lambda p: (consistency(p), p.composite_score, _num(p.weighted_sg))
        return lambda p: (p.composite_score, consistency(p), _num(p.weighted_sg))

    def apply(self, players: List[PlayerRecord], options=None) -> FilterResult:
        opts = self.resolve_options(options)
        groups = group_by_matchup(players)

        usable: Dict[MatchupId, List[Tuple[PlayerRecord, Dict[str, Optional[float]]]]] = {}
        skipped_groups = 0
        for matchup_id, group in groups.items():
            lines = []
            for player in group:
                cats = blend_categories(player, opts.blend_mode, opts.tournament_weight, opts.season_source)
                if any(v is not None for v in cats.values()):
                    lines.append((player, cats))
            if len(lines) < MIN_GROUP_PLAYERS:
                logger.debug(f"SG Category Leaders: fewer than 2 players with SG in matchup {matchup_id}")
                skipped_groups += 1
                continue
            usable[matchup_id] = lines

        entries = [
            (matchup_id, player, cats, self._category_value(cats, opts.category))
            for matchup_id, lines in usable.items()
            for player, cats in lines
        ]
        ranks = percentiles([value for _, _, _, value in entries])

        by_group: Dict[MatchupId, List[ScoredPlayer]] = {}
        for (matchup_id, player, cats, value), rank in zip(entries, ranks):
            if value is None or value < opts.min_category_value:
                continue
            if rank * 100 < opts.min_percentile:
                continue
            values = [v for v in cats.values() if v is not None]
            if opts.require_consistency and not is_consistent(values):
                continue
            by_group.setdefault(matchup_id, []).append(ScoredPlayer(
                player=player,
                weighted_sg=cats["total"],
                calculation_method=f"{opts.category} leader ({opts.blend_mode.value})",
                performance_percentile=rank,
                composite_score=value,
                debug={
                    "category": opts.category,
                    "category_value": value,
                    "categories": cats,
                    "consistency_score": consistency_score(values),
                },
            ))

        picks: List[ScoredPlayer] = []
        qualified = 0
        for matchup_id, qualifiers in by_group.items():
            qualifiers = with_group_context(qualifiers, groups[matchup_id])
            qualifiers.sort(key=self._sort_key("category"), reverse=True)
            qualified += len(qualifiers)
            for i, p in enumerate(qualifiers[:opts.top_n_per_group], 1):
                p.debug.update(category_rank_in_group=i, group_size=len(usable[matchup_id]))
                picks.append(p)

        picks.sort(key=self._sort_key(opts.sort_by), reverse=True)
        return self._result(
            picks, opts, players, groups, len(entries), qualified, len(by_group),
            extra={"category": opts.category, "skipped_groups": skipped_groups},
        )


# ============================================================================
# Registry
# ============================================================================

FILTERS: Dict[str, type] = {
    SGHeavyFilter.id: SGHeavyFilter,
    SGValueFilter.id: SGValueFilter,
    HeavyFavoritesFilter.id: HeavyFavoritesFilter,
    BalancedFilter.id: BalancedFilter,
    SGCategoryLeadersFilter.id: SGCategoryLeadersFilter,
}


def get_filter(filter_id: str, course_fit: Optional[CourseFitAdapter] = None) -> BaseFilter:
    """Instantiate a filter by id."""
    try:
        filter_class = FILTERS[filter_id]
    except KeyError:
        raise ValueError(
            f"Unknown filter '{filter_id}'. Available: {', '.join(FILTERS)}"
        ) from None
    return filter_class(course_fit=course_fit)


def list_filters() -> List[Dict[str, Any]]:
    """Id, name, description and sort keys for every registered filter."""
    return [
        {
            "id": cls.id,
            "name": cls.name,
            "description": cls.description,
            "sort_keys": list(cls.options_class.SORT_KEYS),
        }
        for cls in FILTERS.values()
    ]


def apply_filter(
    filter_id: str,
    players: List[PlayerRecord],
    options=None,
    course_fit: Optional[CourseFitAdapter] = None,
) -> FilterResult:
    """Run one filter over a field of players."""
    return get_filter(filter_id, course_fit=course_fit).apply(players, options)
