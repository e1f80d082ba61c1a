"""
Matchup-relative filters over comparison results.

Works on MatchupComparison objects rather than players: selects whole
matchups by their comparative signals, labels them with badges, and pulls
out the player worth backing in each selected matchup.
"""

import logging
from dataclasses import dataclass, fields, replace
from typing import Dict, Iterable, List, Optional, Union

from .config import DISAGREEMENT_MILD_THRESHOLD
from .models import (
    MatchupComparison, PlayerComparison, FilterBadge, DisagreementType, OddsFormat, MatchupId,
)
from .odds import to_decimal, to_american, decimal_to_american

logger = logging.getLogger(__name__)

# Underdog within this much SG of the favorite still counts as competitive
COMPETITIVE_SG_MARGIN = 0.3
NEARLY_EVEN_SG = 0.1


@dataclass
class MatchupFilterCriteria:
    """
    Matchup selection criteria. Unset (None/False) criteria are inactive;
    with no active criteria every matchup passes. Active checks combine with
    OR by default, AND when require_all is set.
    """
    # Odds
    min_odds_gap: Optional[float] = None          # Decimal odds points
    show_odds_sg_mismatch: bool = False
    max_odds_spread: Optional[float] = None       # Cents between the shortest and longest price
    show_book_model_disagreement: bool = False
    # Strokes gained
    sg_total_gap_min: Optional[float] = None
    sg_category_dominance: Optional[int] = None   # Categories led (2-4)
    sg_putt_gap_min: Optional[float] = None
    sg_ball_striking_gap_min: Optional[float] = None
    # Form
    position_gap_min: Optional[int] = None
    score_gap_today: Optional[int] = None
    show_position_mismatch: bool = False
    # Data Golf vs PGA Tour
    show_data_source_disagreement: bool = False
    show_data_consensus: bool = False
    dg_advantage_min: Optional[float] = None
    strong_disagreement_only: bool = False

    require_all: bool = False

    @property
    def active_count(self) -> int:
        return sum(
            1 for f in fields(self)
            if f.name != "require_all" and getattr(self, f.name) not in (None, False)
        )

    @property
    def is_active(self) -> bool:
        return self.active_count > 0

    @classmethod
    def from_preset(cls, preset: str, **overrides) -> "MatchupFilterCriteria":
        """Criteria for a named preset, optionally adjusted."""
        try:
            values = FILTER_PRESETS[preset]
        except KeyError:
            raise ValueError(
                f"Unknown preset '{preset}'. Available: {', '.join(FILTER_PRESETS)}"
            ) from None
        return replace(cls(**values), **overrides)


FILTER_PRESETS: Dict[str, Dict[str, Union[bool, float, int]]] = {
    "fade-chalk": {"show_odds_sg_mismatch": True, "show_position_mismatch": True},
    "stat-dom": {"sg_category_dominance": 2, "sg_total_gap_min": 0.3},
    "coin-flip": {"max_odds_spread": 30, "sg_total_gap_min": 0.2},
    "form-play": {"show_position_mismatch": True, "score_gap_today": 2},
    "value": {"min_odds_gap": 0.05, "show_book_model_disagreement": True},
}


@dataclass
class ValuePlayer:
    """A player singled out as the value side of a matchup."""
    player_id: int
    name: str
    odds: Optional[float]
    matchup_id: MatchupId
    reason: str
    sg_total: Optional[float] = None


def odds_spread_cents(prices: Iterable[Optional[int]]) -> Optional[float]:
    """
    Distance in cents between the shortest and longest American price,
    measured through even money: -115 vs +105 is a 20 cent spread.
    """
    centered = [p - 100 if p > 0 else p + 100 for p in prices if p is not None and p != 0]
    if len(centered) < 2:
        return None
    return max(centered) - min(centered)


def _range(values: Iterable[Optional[float]]) -> Optional[float]:
    present = [v for v in values if v is not None]
    if len(present) < 2:
        return None
    return max(present) - min(present)


def _checks(comparison: MatchupComparison, criteria: MatchupFilterCriteria, odds_format) -> List[bool]:
    a = comparison.analysis
    players = comparison.players
    checks = []

    if criteria.min_odds_gap is not None:
        checks.append(a.has_odds_gap and a.odds_gap_size >= criteria.min_odds_gap)
    if criteria.show_odds_sg_mismatch:
        checks.append(a.has_odds_sg_mismatch)
    if criteria.max_odds_spread is not None:
        spread = odds_spread_cents(to_american(p.odds, odds_format) for p in players)
        checks.append(spread is not None and spread <= criteria.max_odds_spread)
    if criteria.show_book_model_disagreement:
        checks.append(a.has_book_model_disagreement)

    if criteria.sg_total_gap_min is not None:
        checks.append(a.sg_leader is not None and a.sg_gap_size >= criteria.sg_total_gap_min)
    if criteria.sg_category_dominance is not None:
        checks.append(
            a.sg_category_dominance is not None
            and a.sg_category_dominance.categories >= criteria.sg_category_dominance
        )
    if criteria.sg_putt_gap_min is not None:
        checks.append(a.has_putting_edge and a.putting_gap_size >= criteria.sg_putt_gap_min)
    if criteria.sg_ball_striking_gap_min is not None:
        checks.append(a.has_ball_striking_edge and a.ball_striking_gap_size >= criteria.sg_ball_striking_gap_min)

    if criteria.show_position_mismatch:
        checks.append(a.has_position_mismatch)
    if criteria.position_gap_min is not None:
        gap = _range(p.position for p in players)
        checks.append(gap is not None and gap >= criteria.position_gap_min)
    if criteria.score_gap_today is not None:
        gap = _range(p.today_score for p in players)
        checks.append(gap is not None and gap >= criteria.score_gap_today)

    if criteria.show_data_source_disagreement:
        checks.append(a.has_data_source_disagreement)
    if criteria.show_data_consensus:
        checks.append(a.has_data_consensus)
    if criteria.dg_advantage_min is not None:
        checks.append(a.dg_advantage_size >= criteria.dg_advantage_min)
    if criteria.strong_disagreement_only:
        checks.append(a.data_source_disagreement_type == DisagreementType.STRONG)

    return checks


def passes_criteria(
    comparison: MatchupComparison,
    criteria: MatchupFilterCriteria,
    odds_format: Optional[OddsFormat] = None,
) -> bool:
    """Whether one matchup satisfies the criteria."""
    if not criteria.is_active:
        return True
    checks = _checks(comparison, criteria, odds_format)
    return all(checks) if criteria.require_all else any(checks)


def filter_matchups(
    comparisons: Iterable[MatchupComparison],
    criteria: MatchupFilterCriteria,
    odds_format: Optional[OddsFormat] = None,
) -> List[MatchupComparison]:
    """Matchups that satisfy the criteria, in input order."""
    comparisons = list(comparisons)
    selected = [c for c in comparisons if passes_criteria(c, criteria, odds_format)]
    logger.info(f"Matchup filters: {len(selected)}/{len(comparisons)} matchups selected")
    return selected


def matchup_badges(comparison: MatchupComparison) -> List[FilterBadge]:
    """Badges for every signal the matchup shows."""
    a = comparison.analysis
    badges = []

    if a.has_odds_gap:
        badges.append(FilterBadge("odds-gap", "Odds Gap", f"{a.american_odds_gap}pts", "yellow"))
    if a.has_odds_sg_mismatch:
        badges.append(FilterBadge("sg-mismatch", "SG Mismatch", color="red"))
    if a.sg_category_dominance:
        badges.append(FilterBadge("stat-dom", f"{a.sg_category_dominance.categories}/4 Categories", color="green"))
    if a.has_putting_edge:
        badges.append(FilterBadge("putting-edge", "Putting Edge", f"+{a.putting_gap_size:.2f}", "blue"))
    if a.has_ball_striking_edge:
        badges.append(FilterBadge("ball-striking", "Ball Striking", f"+{a.ball_striking_gap_size:.2f}", "blue"))
    if a.has_position_mismatch:
        badges.append(FilterBadge("form", "Position Mismatch", color="yellow"))
    if a.has_data_source_disagreement:
        label = (
            "Strong Data Disagreement"
            if a.data_source_disagreement_type == DisagreementType.STRONG
            else "Data Disagreement"
        )
        badges.append(FilterBadge("data-disagreement", label, color="purple"))
    if a.has_data_consensus:
        badges.append(FilterBadge("data-consensus", "Data Consensus", color="green"))
    if a.dg_advantage_size > DISAGREEMENT_MILD_THRESHOLD and a.dg_advantage_player:
        badges.append(FilterBadge("dg-advantage", "DataGolf Advantage", f"+{a.dg_advantage_size:.2f}", "purple"))
    if a.has_book_model_disagreement:
        badges.append(FilterBadge("book-model", "Book/Model Disagreement", color="purple"))

    return badges


def highlight_player(comparison: MatchupComparison) -> Optional[str]:
    """Player the explanation panel should emphasize."""
    a = comparison.analysis
    return a.dg_advantage_player or a.sg_leader or a.odds_leader


def _best_sg(p: PlayerComparison) -> float:
    """Data Golf total when present, else PGA Tour."""
    if p.dg_sg_total is not None:
        return p.dg_sg_total
    return p.sg_total if p.sg_total is not None else 0.0


def _competitive_underdog(comparison: MatchupComparison, odds_format) -> Optional[ValuePlayer]:
    candidates = [
        p for p in comparison.players
        if to_decimal(p.odds, odds_format) is not None
        and (p.dg_sg_total is not None or p.sg_total is not None)
    ]
    if len(candidates) < 2:
        return None

    candidates.sort(key=lambda p: to_decimal(p.odds, odds_format))
    favorite, underdogs = candidates[0], candidates[1:]
    fav_sg = _best_sg(favorite)
    competitive = [d for d in underdogs if fav_sg - _best_sg(d) <= COMPETITIVE_SG_MARGIN]
    if not competitive:
        return None

    # Smallest SG deficit, then the longer price
    best = min(competitive, key=lambda d: (fav_sg - _best_sg(d), -to_decimal(d.odds, odds_format)))
    sg_diff = fav_sg - _best_sg(best)
    odds_gap = (
        decimal_to_american(to_decimal(best.odds, odds_format))
        - decimal_to_american(to_decimal(favorite.odds, odds_format))
    )

    reason = f"{odds_gap}pt odds gap"
    if best.dg_sg_total is not None and favorite.dg_sg_total is not None:
        reason += " (DataGolf)"
    if sg_diff < 0:
        reason += f", leads SG by {abs(sg_diff):.2f}"
    elif sg_diff <= NEARLY_EVEN_SG:
        reason += ", nearly even SG"
    else:
        reason += f", only {sg_diff:.2f} SG behind"

    return ValuePlayer(best.player_id, best.name, best.odds, comparison.matchup_id, reason, _best_sg(best))


def value_players(
    comparisons: Iterable[MatchupComparison],
    criteria: MatchupFilterCriteria,
    odds_format: Optional[OddsFormat] = None,
) -> List[ValuePlayer]:
    """
    The value side of every matchup selected by the criteria, one entry per
    player and matchup. Which player is picked depends on which criteria are
    active.
    """
    picks: List[ValuePlayer] = []
    for comparison in filter_matchups(comparisons, criteria, odds_format):
        a = comparison.analysis
        mid = comparison.matchup_id

        if criteria.min_odds_gap and a.has_odds_gap:
            underdog = _competitive_underdog(comparison, odds_format)
            if underdog:
                picks.append(underdog)

        if criteria.show_odds_sg_mismatch and a.has_odds_sg_mismatch:
            leader = comparison.player_by_name(a.sg_leader)
            if leader:
                picks.append(ValuePlayer(leader.player_id, leader.name, leader.odds, mid,
                                         "Better SG than favorite", leader.sg_total))

        if criteria.sg_category_dominance and a.sg_category_dominance:
            dominator = comparison.player_by_name(a.sg_category_dominance.player)
            if dominator:
                picks.append(ValuePlayer(
                    dominator.player_id, dominator.name, dominator.odds, mid,
                    f"Leads {a.sg_category_dominance.categories} SG categories by 0.05+",
                    dominator.sg_total,
                ))

        if criteria.show_book_model_disagreement and a.has_book_model_disagreement:
            both = [p for p in comparison.players if p.odds is not None and p.alt_odds is not None]
            if both:
                model_favorite = min(both, key=lambda p: to_decimal(p.alt_odds, odds_format))
                picks.append(ValuePlayer(model_favorite.player_id, model_favorite.name, model_favorite.odds,
                                         mid, "Model favorite but not book favorite", model_favorite.sg_total))

        if criteria.show_data_source_disagreement and a.has_data_source_disagreement and a.dg_advantage_player:
            player = comparison.player_by_name(a.dg_advantage_player)
            if player:
                reason = f"DataGolf rates {a.dg_advantage_size:.2f} SG higher than PGA Tour"
                if a.data_source_disagreement_type == DisagreementType.STRONG:
                    reason = f"Strong data disagreement - {reason}"
                picks.append(ValuePlayer(player.player_id, player.name, player.odds, mid, reason, player.dg_sg_total))

    # Same player picked for several reasons keeps the first
    seen = set()
    unique = []
    for pick in picks:
        key = (pick.player_id, pick.matchup_id)
        if key not in seen:
            seen.add(key)
            unique.append(pick)
    return unique
