"""
Matchup comparison engine.

Computes comparative signals for a single 2-ball or 3-ball group: odds gap,
SG leader and gap, category dominance, putting and ball-striking edges, form,
and disagreement between the PGA Tour and Data Golf ratings. A comparison
never looks outside its group, and no signal is reported from fewer than two
data points.
"""

import logging
from typing import Callable, Dict, List, Optional, Sequence, Tuple

from .config import (
    ODDS_GAP_AMERICAN_THRESHOLD, SG_TIE_TOLERANCE, DOMINANCE_MIN_GAP,
    DOMINANCE_MIN_CATEGORIES, PUTTING_EDGE_THRESHOLD, BALL_STRIKING_EDGE_THRESHOLD,
    DISAGREEMENT_MILD_THRESHOLD, DISAGREEMENT_STRONG_THRESHOLD,
)
from .models import (
    PlayerRecord, PlayerComparison, MatchupComparison, MatchupAnalysis,
    CategoryDominance, DisagreementType, OddsFormat,
)
from .odds import to_decimal, decimal_to_american

logger = logging.getLogger(__name__)

DG_CATEGORIES = ("dg_sg_putt", "dg_sg_app", "dg_sg_arg", "dg_sg_ott")
PGA_CATEGORIES = ("sg_putt", "sg_app", "sg_arg", "sg_ott")


def _value(attr: str) -> Callable[[PlayerComparison], Optional[float]]:
    return lambda p: getattr(p, attr)


def _with(players: Sequence[PlayerComparison], attr: str) -> List[PlayerComparison]:
    return [p for p in players if getattr(p, attr) is not None]


class MatchupComparisonEngine:
    """Comparison signals for one matchup group at a time."""

    def __init__(
        self,
        odds_gap_threshold: int = ODDS_GAP_AMERICAN_THRESHOLD,
        dominance_min_gap: float = DOMINANCE_MIN_GAP,
        dominance_min_categories: int = DOMINANCE_MIN_CATEGORIES,
        odds_format: Optional[OddsFormat] = None,
    ):
        self.odds_gap_threshold = odds_gap_threshold
        self.dominance_min_gap = dominance_min_gap
        self.dominance_min_categories = dominance_min_categories
        self.odds_format = odds_format

    def compare(self, group: Sequence[PlayerRecord]) -> MatchupComparison:
        """Analyze one matchup group of 2 or 3 players."""
        if not 2 <= len(group) <= 3:
            raise ValueError(f"Matchup groups have 2 or 3 players, got {len(group)}")
        matchup_ids = {p.matchup_id for p in group}
        if len(matchup_ids) != 1:
            raise ValueError(f"Players belong to different matchups: {sorted(map(str, matchup_ids))}")

        players = [PlayerComparison.from_record(p) for p in group]
        analysis = MatchupAnalysis()
        self._analyze_odds(players, analysis)
        self._analyze_sg(players, analysis)
        self._analyze_categories(players, analysis)
        self._analyze_data_golf(players, analysis)
        self._analyze_data_source_disagreement(players, analysis)
        self._analyze_form(players, analysis)

        return MatchupComparison(
            matchup_id=group[0].matchup_id,
            matchup_type="3ball" if len(group) == 3 else "2ball",
            players=players,
            analysis=analysis,
        )

    def compare_all(self, groups: Dict) -> Dict:
        """Compare every group; groups that cannot be compared are skipped."""
        results = {}
        for matchup_id, group in groups.items():
            try:
                results[matchup_id] = self.compare(group)
            except ValueError as e:
                logger.warning(f"Skipping matchup {matchup_id}: {e}")
        logger.info(f"Compared {len(results)}/{len(groups)} matchups")
        return results

    # ------------------------------------------------------------------
    # Odds
    # ------------------------------------------------------------------

    def _decimal_odds(self, p: PlayerComparison) -> Optional[float]:
        return to_decimal(p.odds, self.odds_format)

    def _sorted_by_odds(self, players: Sequence[PlayerComparison]) -> List[PlayerComparison]:
        priced = [p for p in players if self._decimal_odds(p) is not None]
        return sorted(priced, key=self._decimal_odds)

    def _analyze_odds(self, players: List[PlayerComparison], analysis: MatchupAnalysis):
        by_odds = self._sorted_by_odds(players)
        if len(by_odds) < 2:
            return

        favorite, next_best = by_odds[0], by_odds[1]
        fav_decimal = self._decimal_odds(favorite)
        next_decimal = self._decimal_odds(next_best)
        american_gap = abs(decimal_to_american(next_decimal) - decimal_to_american(fav_decimal))

        analysis.odds_leader = favorite.name
        analysis.odds_gap_size = next_decimal - fav_decimal
        analysis.american_odds_gap = american_gap
        analysis.has_odds_gap = american_gap >= self.odds_gap_threshold

        # Favorite rated worse than the SG leader
        with_sg = _with(players, "sg_total")
        if len(with_sg) >= 2:
            sg_leader = max(with_sg, key=_value("sg_total"))
            analysis.has_odds_sg_mismatch = (
                favorite.player_id != sg_leader.player_id
                and favorite.sg_total is not None
                and favorite.sg_total < sg_leader.sg_total
            )

        # Book favorite vs model favorite
        both = [p for p in players if p.odds is not None and p.alt_odds is not None]
        if len(both) >= 2:
            book_fav = min(both, key=self._decimal_odds)
            model_fav = min(both, key=lambda p: to_decimal(p.alt_odds, self.odds_format))
            analysis.has_book_model_disagreement = book_fav.player_id != model_fav.player_id

    # ------------------------------------------------------------------
    # Strokes gained
    # ------------------------------------------------------------------

    def _analyze_sg(self, players: List[PlayerComparison], analysis: MatchupAnalysis):
        with_dg = _with(players, "dg_sg_total")
        with_pga = _with(players, "sg_total")

        # Prefer Data Golf when its coverage is at least as good
        if len(with_dg) >= len(with_pga) and len(with_dg) >= 2:
            candidates, attr, source = with_dg, "dg_sg_total", "data_golf"
        elif len(with_pga) >= 2:
            candidates, attr, source = with_pga, "sg_total", "pga_tour"
        else:
            return

        ranked = sorted(candidates, key=_value(attr), reverse=True)
        leader = ranked[0]
        leader_value = getattr(leader, attr)
        analysis.sg_source = source

        # Gap against the first competitor that is not tied within rounding noise
        for competitor in ranked[1:]:
            gap = abs(leader_value - getattr(competitor, attr))
            if gap > SG_TIE_TOLERANCE:
                analysis.sg_leader = leader.name
                analysis.sg_gap_size = gap
                break

    def _analyze_categories(self, players: List[PlayerComparison], analysis: MatchupAnalysis):
        analysis.sg_category_dominance = self._analyze_category_dominance(players)

        putting = self._edge_with_fallback(players, "dg_sg_putt", "sg_putt", PUTTING_EDGE_THRESHOLD)
        analysis.has_putting_edge, analysis.putting_edge_player, analysis.putting_gap_size = putting

        striking = self._analyze_ball_striking(players)
        analysis.has_ball_striking_edge, analysis.ball_striking_edge_player, analysis.ball_striking_gap_size = striking

    def _analyze_category_dominance(self, players: List[PlayerComparison]) -> Optional[CategoryDominance]:
        """
        Dominance uses one source for everyone: Data Golf if every player has
        all four categories there, else PGA Tour under the same rule. Partial
        coverage disqualifies the whole computation.
        """
        if all(all(getattr(p, c) is not None for c in DG_CATEGORIES) for p in players):
            categories = DG_CATEGORIES
        elif all(all(getattr(p, c) is not None for c in PGA_CATEGORIES) for p in players):
            categories = PGA_CATEGORIES
        else:
            return None

        scores: Dict[str, Tuple[int, float]] = {}
        for category in categories:
            ranked = sorted(players, key=_value(category), reverse=True)
            leader, second = ranked[0], ranked[1]
            gap = getattr(leader, category) - getattr(second, category)
            if round(gap, 6) >= self.dominance_min_gap:
                count, total_gap = scores.get(leader.name, (0, 0.0))
                scores[leader.name] = (count + 1, total_gap + gap)

        best: Optional[CategoryDominance] = None
        for name, (count, total_gap) in scores.items():
            if (best is None or count > best.categories
                    or (count == best.categories and total_gap > best.total_gap)):
                best = CategoryDominance(player=name, categories=count, total_gap=total_gap)

        if best is None or best.categories < self.dominance_min_categories:
            return None
        return best

    @staticmethod
    def _edge(players: List[PlayerComparison], attr: str, threshold: float) -> Tuple[bool, Optional[str], float]:
        if len(players) < 2:
            return False, None, 0.0
        ranked = sorted(players, key=_value(attr), reverse=True)
        gap = getattr(ranked[0], attr) - getattr(ranked[1], attr)
        has_edge = gap >= threshold
        return has_edge, ranked[0].name if has_edge else None, gap

    def _edge_with_fallback(
        self,
        players: List[PlayerComparison],
        primary: str,
        fallback: str,
        threshold: float,
    ) -> Tuple[bool, Optional[str], float]:
        with_primary = _with(players, primary)
        with_fallback = _with(players, fallback)
        if len(with_primary) >= len(with_fallback) and len(with_primary) >= 2:
            return self._edge(with_primary, primary, threshold)
        if len(with_fallback) >= 2:
            return self._edge(with_fallback, fallback, threshold)
        return False, None, 0.0

    def _analyze_ball_striking(self, players: List[PlayerComparison]) -> Tuple[bool, Optional[str], float]:
        # Tee-to-green first (tournament only), then off-the-tee
        with_t2g = _with(players, "sg_t2g")
        if len(with_t2g) >= 2:
            return self._edge(with_t2g, "sg_t2g", BALL_STRIKING_EDGE_THRESHOLD)
        return self._edge_with_fallback(players, "dg_sg_ott", "sg_ott", BALL_STRIKING_EDGE_THRESHOLD)

    def _analyze_data_golf(self, players: List[PlayerComparison], analysis: MatchupAnalysis):
        with_dg = _with(players, "dg_sg_total")
        if len(with_dg) < 2:
            return
        ranked = sorted(with_dg, key=_value("dg_sg_total"), reverse=True)
        analysis.dg_leader = ranked[0].name
        analysis.dg_gap_size = ranked[0].dg_sg_total - ranked[1].dg_sg_total

    def _analyze_data_source_disagreement(self, players: List[PlayerComparison], analysis: MatchupAnalysis):
        both = [p for p in players if p.sg_total is not None and p.dg_sg_total is not None]
        if len(both) < 2:
            return

        pga_leader = max(both, key=_value("sg_total"))
        dg_leader = max(both, key=_value("dg_sg_total"))

        if pga_leader.player_id == dg_leader.player_id:
            analysis.has_data_consensus = True
            return

        analysis.has_data_source_disagreement = True
        # How much better Data Golf rates its own leader than the PGA Tour leader
        advantage = dg_leader.dg_sg_total - pga_leader.dg_sg_total
        if advantage > DISAGREEMENT_STRONG_THRESHOLD:
            analysis.data_source_disagreement_type = DisagreementType.STRONG
            analysis.dg_advantage_player = dg_leader.name
        elif advantage > DISAGREEMENT_MILD_THRESHOLD:
            analysis.data_source_disagreement_type = DisagreementType.MILD
            analysis.dg_advantage_player = dg_leader.name
        analysis.dg_advantage_size = abs(advantage)

    # ------------------------------------------------------------------
    # Form
    # ------------------------------------------------------------------

    def _analyze_form(self, players: List[PlayerComparison], analysis: MatchupAnalysis):
        with_position = _with(players, "position")
        if len(with_position) >= 2:
            priced = self._sorted_by_odds(with_position)
            if priced:
                favorite = priced[0]
                best_position = min(p.position for p in with_position)
                analysis.has_position_mismatch = favorite.position > best_position

        with_today = _with(players, "today_score")
        if len(with_today) >= 2:
            analysis.form_leader = min(with_today, key=_value("today_score")).name


def compare_matchup(group: Sequence[PlayerRecord]) -> MatchupComparison:
    """Convenience wrapper using the default thresholds."""
    return MatchupComparisonEngine().compare(group)
