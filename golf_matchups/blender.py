"""
Performance blender: combines in-tournament and season-long strokes gained
into a single weighted SG value per player.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

from .config import (
    EXCLUDED_SG, RECENT_TOURNAMENT_WEIGHT, SEASON_TOURNAMENT_WEIGHT,
    DEFAULT_TOURNAMENT_WEIGHT,
)
from .models import PlayerRecord, BlendMode, SeasonSource, SGLine

logger = logging.getLogger(__name__)

BLEND_CATEGORIES = ("total", "off_tee", "approach", "around_green", "putting")


@dataclass(frozen=True)
class BlendResult:
    """A blended SG value and how it was produced."""
    value: float
    method: str

    @property
    def is_excluded(self) -> bool:
        return self.value == EXCLUDED_SG


class BlendCache:
    """
    Memoizes blend results for one scoring pass.

    Keys include every input that affects the result, so a cache shared by
    two passes can never return a value computed from different data. Call
    clear() between passes anyway when the underlying values may change.
    """

    def __init__(self):
        self._entries: Dict[Tuple, BlendResult] = {}
        self.hits = 0
        self.misses = 0

    def get(self, key: Tuple) -> Optional[BlendResult]:
        result = self._entries.get(key)
        if result is None:
            self.misses += 1
        else:
            self.hits += 1
        return result

    def put(self, key: Tuple, result: BlendResult):
        self._entries[key] = result

    def clear(self):
        self._entries.clear()
        self.hits = 0
        self.misses = 0

    def __len__(self) -> int:
        return len(self._entries)


def is_excluded(value: Optional[float]) -> bool:
    """True for missing or excluded SG values."""
    return value is None or value == EXCLUDED_SG


def resolve_mode(mode: Union[BlendMode, str]) -> BlendMode:
    if isinstance(mode, BlendMode):
        return mode
    try:
        return BlendMode(str(mode).lower())
    except ValueError:
        raise ValueError(
            f"Unknown blend mode '{mode}'. Expected one of: "
            f"{', '.join(m.value for m in BlendMode)}"
        ) from None


def resolve_season_source(source: Union[SeasonSource, str]) -> SeasonSource:
    if isinstance(source, SeasonSource):
        return source
    try:
        return SeasonSource(str(source).lower())
    except ValueError:
        raise ValueError(
            f"Unknown season data source '{source}'. Expected one of: "
            f"{', '.join(s.value for s in SeasonSource)}"
        ) from None


def validate_weight(tournament_weight: float) -> float:
    """Tournament weight must lie in [0, 1]."""
    try:
        weight = float(tournament_weight)
    except (TypeError, ValueError):
        raise ValueError(f"tournament_weight must be a number, got {tournament_weight!r}") from None
    if not 0.0 <= weight <= 1.0:
        raise ValueError(f"tournament_weight must be between 0 and 1, got {weight}")
    return weight


def select_season_value(
    player: PlayerRecord,
    source: Union[SeasonSource, str] = SeasonSource.AGGREGATE,
    category: str = "total",
) -> Optional[float]:
    """
    Season SG for one category from the configured provider.
    AGGREGATE averages both providers when both exist, else uses whichever exists.
    """
    source = resolve_season_source(source)
    pga = player.season_sg.get(category)
    dg = player.skill_sg.get(category)

    if source == SeasonSource.PGA_TOUR:
        return pga
    if source == SeasonSource.DATA_GOLF:
        return dg
    if pga is not None and dg is not None:
        return (pga + dg) / 2
    return pga if pga is not None else dg


def _policy_weight(mode: BlendMode, tournament_weight: float) -> float:
    if mode == BlendMode.RECENT:
        return RECENT_TOURNAMENT_WEIGHT
    if mode == BlendMode.SEASON:
        return SEASON_TOURNAMENT_WEIGHT
    return tournament_weight


def _blend_values(
    tournament: Optional[float],
    season: Optional[float],
    mode: BlendMode,
    weight: float,
) -> BlendResult:
    # Explicit 0/1 weights demand the pinned source
    if weight == 1.0:
        if tournament is None:
            return BlendResult(EXCLUDED_SG, "excluded: tournament-only weight without tournament data")
        return BlendResult(tournament, "tournament-only (pinned)")
    if weight == 0.0:
        if season is None:
            return BlendResult(EXCLUDED_SG, "excluded: season-only weight without season data")
        return BlendResult(season, "season-only (pinned)")

    if tournament is not None and season is not None:
        w = _policy_weight(mode, weight)
        value = w * tournament + (1 - w) * season
        return BlendResult(
            value,
            f"{mode.value}: {round(w * 100)}% tournament / {round((1 - w) * 100)}% season",
        )
    if tournament is not None:
        return BlendResult(tournament, "tournament-only (no season data)")
    if season is not None:
        return BlendResult(season, "season-only (no tournament data)")
    return BlendResult(EXCLUDED_SG, "excluded: no SG data")


def blend_sg(
    player: PlayerRecord,
    mode: Union[BlendMode, str] = BlendMode.RECENT,
    tournament_weight: float = DEFAULT_TOURNAMENT_WEIGHT,
    season_source: Union[SeasonSource, str] = SeasonSource.AGGREGATE,
    cache: Optional[BlendCache] = None,
) -> BlendResult:
    """
    Blend a player's tournament SG total with their season SG total.

    A tournament_weight of exactly 0 or 1 pins the data source: the player is
    excluded when the pinned source is missing, even if the other one exists.
    Otherwise a single available source is used as-is.
    """
    mode = resolve_mode(mode)
    season_source = resolve_season_source(season_source)
    weight = validate_weight(tournament_weight)

    tournament = player.tournament_sg.total
    season = select_season_value(player, season_source)

    key = (player.player_id, mode, weight, season_source, tournament,
           player.season_sg.total, player.skill_sg.total)
    if cache is not None:
        cached = cache.get(key)
        if cached is not None:
            return cached

    result = _blend_values(tournament, season, mode, weight)
    if result.is_excluded:
        logger.debug(f"{player.name} ({player.player_id}) {result.method}")

    if cache is not None:
        cache.put(key, result)
    return result


def weighted_sg(
    player: PlayerRecord,
    mode: Union[BlendMode, str] = BlendMode.RECENT,
    tournament_weight: float = DEFAULT_TOURNAMENT_WEIGHT,
    season_source: Union[SeasonSource, str] = SeasonSource.AGGREGATE,
    cache: Optional[BlendCache] = None,
) -> float:
    """Blended SG total, or EXCLUDED_SG."""
    return blend_sg(player, mode, tournament_weight, season_source, cache).value


def blend_categories(
    player: PlayerRecord,
    mode: Union[BlendMode, str] = BlendMode.RECENT,
    tournament_weight: float = DEFAULT_TOURNAMENT_WEIGHT,
    season_source: Union[SeasonSource, str] = SeasonSource.AGGREGATE,
) -> Dict[str, Optional[float]]:
    """
    Blend every SG category with the same policy.
    Categories with no data in either source come back as None.
    """
    mode = resolve_mode(mode)
    weight = validate_weight(tournament_weight)
    blended = {}
    for category in BLEND_CATEGORIES:
        tournament = player.tournament_sg.get(category)
        season = select_season_value(player, season_source, category)
        result = _blend_values(tournament, season, mode, weight)
        blended[category] = None if result.is_excluded else result.value
    return blended


def blended_line(
    player: PlayerRecord,
    mode: Union[BlendMode, str] = BlendMode.RECENT,
    tournament_weight: float = DEFAULT_TOURNAMENT_WEIGHT,
    season_source: Union[SeasonSource, str] = SeasonSource.AGGREGATE,
) -> SGLine:
    """Per-category blend packed back into an SGLine."""
    return SGLine(**blend_categories(player, mode, tournament_weight, season_source))
