"""
Tests for matchup_filters.py - Matchup-relative filtering, badges and value players.
"""

from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from golf_matchups.matchup_filters import (
    MatchupFilterCriteria, FILTER_PRESETS, odds_spread_cents, passes_criteria,
    filter_matchups, matchup_badges, highlight_player, value_players,
)
from golf_matchups.models import (
    PlayerComparison, MatchupAnalysis, MatchupComparison, CategoryDominance, DisagreementType,
)


def comparison_player(player_id, name, odds=None, **kwargs):
    values = dict(
        player_id=player_id, name=name, odds=odds, alt_odds=None,
        sg_total=None, sg_putt=None, sg_app=None, sg_arg=None, sg_ott=None, sg_t2g=None,
        dg_sg_total=None, dg_sg_putt=None, dg_sg_app=None, dg_sg_arg=None, dg_sg_ott=None,
        position=None, today_score=None, total_score=None,
    )
    values.update(kwargs)
    return PlayerComparison(**values)


def comparison(matchup_id, players, **analysis):
    return MatchupComparison(
        matchup_id=matchup_id,
        matchup_type="3ball" if len(players) == 3 else "2ball",
        players=players,
        analysis=MatchupAnalysis(**analysis),
    )


@pytest.fixture
def mismatch_matchup():
    """Favorite with worse SG than the underdog."""
    return comparison(
        1,
        [
            comparison_player(1, "Favorite", odds=-150, sg_total=0.2, position=10),
            comparison_player(2, "Underdog", odds=130, sg_total=0.9, position=3),
        ],
        has_odds_gap=True, odds_gap_size=0.63, american_odds_gap=280, odds_leader="Favorite",
        has_odds_sg_mismatch=True, sg_leader="Underdog", sg_gap_size=0.7,
        has_position_mismatch=True,
    )


@pytest.fixture
def quiet_matchup():
    """Nothing notable."""
    return comparison(
        2,
        [
            comparison_player(3, "Even A", odds=-110, sg_total=0.5),
            comparison_player(4, "Even B", odds=-110, sg_total=0.5),
        ],
        odds_leader="Even A",
    )


class TestCriteria:
    """Tests for criteria and presets."""

    def test_inactive_criteria_pass_everything(self, mismatch_matchup, quiet_matchup):
        """Test that no active criteria selects every matchup."""
        criteria = MatchupFilterCriteria()
        assert not criteria.is_active
        assert filter_matchups([mismatch_matchup, quiet_matchup], criteria) == [mismatch_matchup, quiet_matchup]

    def test_require_all_is_not_a_criterion(self):
        """Test that require_all alone leaves the criteria inactive."""
        assert MatchupFilterCriteria(require_all=True).active_count == 0

    def test_presets(self):
        """Test preset contents."""
        assert set(FILTER_PRESETS) == {"fade-chalk", "stat-dom", "coin-flip", "form-play", "value"}
        fade = MatchupFilterCriteria.from_preset("fade-chalk")
        assert fade.show_odds_sg_mismatch and fade.show_position_mismatch
        assert fade.active_count == 2
        assert MatchupFilterCriteria.from_preset("coin-flip").max_odds_spread == 30

    def test_preset_overrides(self):
        """Test that a preset can be adjusted."""
        criteria = MatchupFilterCriteria.from_preset("stat-dom", require_all=True)
        assert criteria.require_all
        assert criteria.sg_category_dominance == 2

    def test_unknown_preset(self):
        """Test that an unknown preset raises ValueError."""
        with pytest.raises(ValueError, match="Unknown preset"):
            MatchupFilterCriteria.from_preset("longshots")


class TestPassesCriteria:
    """Tests for OR/AND combination of checks."""

    def test_or_by_default(self, mismatch_matchup):
        """Test that one matching check is enough by default."""
        criteria = MatchupFilterCriteria(show_odds_sg_mismatch=True, show_data_consensus=True)
        assert passes_criteria(mismatch_matchup, criteria)

    def test_require_all(self, mismatch_matchup):
        """Test that require_all needs every active check to match."""
        criteria = MatchupFilterCriteria(show_odds_sg_mismatch=True, show_data_consensus=True, require_all=True)
        assert not passes_criteria(mismatch_matchup, criteria)

        criteria = MatchupFilterCriteria(show_odds_sg_mismatch=True, show_position_mismatch=True, require_all=True)
        assert passes_criteria(mismatch_matchup, criteria)

    def test_min_odds_gap(self, mismatch_matchup, quiet_matchup):
        """Test the decimal odds gap check."""
        criteria = MatchupFilterCriteria(min_odds_gap=0.5)
        assert filter_matchups([mismatch_matchup, quiet_matchup], criteria) == [mismatch_matchup]
        assert not passes_criteria(mismatch_matchup, MatchupFilterCriteria(min_odds_gap=1.0))

    def test_max_odds_spread(self, mismatch_matchup, quiet_matchup):
        """Test that tight pricing passes the spread check."""
        criteria = MatchupFilterCriteria(max_odds_spread=30)
        assert passes_criteria(quiet_matchup, criteria)
        assert not passes_criteria(mismatch_matchup, criteria)

    def test_sg_gap(self, mismatch_matchup, quiet_matchup):
        """Test that the SG gap check needs a leader."""
        criteria = MatchupFilterCriteria(sg_total_gap_min=0.3)
        assert passes_criteria(mismatch_matchup, criteria)
        assert not passes_criteria(quiet_matchup, criteria)

    def test_category_dominance(self):
        """Test dominance count check."""
        matchup = comparison(
            3,
            [comparison_player(1, "A"), comparison_player(2, "B")],
            sg_category_dominance=CategoryDominance("A", 3, 0.6),
        )
        assert passes_criteria(matchup, MatchupFilterCriteria(sg_category_dominance=3))
        assert not passes_criteria(matchup, MatchupFilterCriteria(sg_category_dominance=4))

    def test_position_and_score_gaps(self):
        """Test leaderboard position and today's score ranges."""
        matchup = comparison(
            4,
            [
                comparison_player(1, "A", position=2, today_score=-4),
                comparison_player(2, "B", position=12, today_score=-1),
            ],
        )
        assert passes_criteria(matchup, MatchupFilterCriteria(position_gap_min=10))
        assert not passes_criteria(matchup, MatchupFilterCriteria(position_gap_min=11))
        assert passes_criteria(matchup, MatchupFilterCriteria(score_gap_today=3))
        assert not passes_criteria(matchup, MatchupFilterCriteria(score_gap_today=4))

    def test_strong_disagreement_only(self):
        """Test that mild disagreement fails the strong-only check."""
        mild = comparison(
            5, [comparison_player(1, "A"), comparison_player(2, "B")],
            has_data_source_disagreement=True, data_source_disagreement_type=DisagreementType.MILD,
            dg_advantage_player="B", dg_advantage_size=0.15,
        )
        assert passes_criteria(mild, MatchupFilterCriteria(show_data_source_disagreement=True))
        assert not passes_criteria(mild, MatchupFilterCriteria(strong_disagreement_only=True))
        assert passes_criteria(mild, MatchupFilterCriteria(dg_advantage_min=0.1))


class TestOddsSpread:
    """Tests for odds_spread_cents."""

    @pytest.mark.parametrize("prices,spread", [
        ([-115, 105], 20),
        ([-110, -110], 0),
        ([-150, 130], 80),
        ([120, 140], 20),
    ])
    def test_spread(self, prices, spread):
        """Test spreads measured through even money."""
        assert odds_spread_cents(prices) == spread

    def test_needs_two_prices(self):
        """Test that a single price has no spread."""
        assert odds_spread_cents([-110, None]) is None


class TestBadges:
    """Tests for matchup badges."""

    def test_badges_for_signals(self, mismatch_matchup):
        """Test that each signal gets its badge."""
        badges = {b.type: b for b in matchup_badges(mismatch_matchup)}
        assert set(badges) == {"odds-gap", "sg-mismatch", "form"}
        assert badges["odds-gap"].value == "280pts"

    def test_no_badges(self, quiet_matchup):
        """Test that a quiet matchup has no badges."""
        assert matchup_badges(quiet_matchup) == []

    def test_data_source_badges(self):
        """Test strong disagreement and Data Golf advantage badges."""
        matchup = comparison(
            6, [comparison_player(1, "A"), comparison_player(2, "B")],
            has_data_source_disagreement=True, data_source_disagreement_type=DisagreementType.STRONG,
            dg_advantage_player="B", dg_advantage_size=0.35,
        )
        badges = {b.type: b for b in matchup_badges(matchup)}
        assert badges["data-disagreement"].label == "Strong Data Disagreement"
        assert badges["dg-advantage"].value == "+0.35"

    def test_highlight_player(self, mismatch_matchup, quiet_matchup):
        """Test that the SG leader is emphasized, else the odds leader."""
        assert highlight_player(mismatch_matchup) == "Underdog"
        assert highlight_player(quiet_matchup) == "Even A"


class TestValuePlayers:
    """Tests for value player extraction."""

    def test_mismatch_picks_sg_leader(self, mismatch_matchup, quiet_matchup):
        """Test that a mismatch picks the better SG player."""
        picks = value_players([mismatch_matchup, quiet_matchup], MatchupFilterCriteria(show_odds_sg_mismatch=True))
        assert len(picks) == 1
        assert picks[0].name == "Underdog"
        assert picks[0].reason == "Better SG than favorite"
        assert picks[0].matchup_id == 1

    def test_competitive_underdog(self, mismatch_matchup):
        """Test that the odds gap rule picks an underdog who leads on SG."""
        picks = value_players([mismatch_matchup], MatchupFilterCriteria(min_odds_gap=0.05))
        assert [p.name for p in picks] == ["Underdog"]
        assert picks[0].reason == "280pt odds gap, leads SG by 0.70"

    def test_outclassed_underdog_not_picked(self):
        """Test that an underdog well behind on SG is not a value pick."""
        matchup = comparison(
            7,
            [
                comparison_player(1, "Fav", odds=-200, sg_total=1.5),
                comparison_player(2, "Dog", odds=170, sg_total=0.2),
            ],
            has_odds_gap=True, odds_gap_size=1.2, american_odds_gap=370,
        )
        assert value_players([matchup], MatchupFilterCriteria(min_odds_gap=0.05)) == []

    def test_duplicates_collapse(self, mismatch_matchup):
        """Test that a player picked for two reasons appears once."""
        criteria = MatchupFilterCriteria(min_odds_gap=0.05, show_odds_sg_mismatch=True)
        picks = value_players([mismatch_matchup], criteria)
        assert len(picks) == 1

    def test_book_model_pick(self):
        """Test that the model favorite is picked when the books disagree."""
        matchup = comparison(
            8,
            [
                comparison_player(1, "Book Fav", odds=-130, alt_odds=120),
                comparison_player(2, "Model Fav", odds=110, alt_odds=-140),
            ],
            has_book_model_disagreement=True,
        )
        picks = value_players([matchup], MatchupFilterCriteria(show_book_model_disagreement=True))
        assert [p.name for p in picks] == ["Model Fav"]

    def test_data_source_pick(self):
        """Test that a Data Golf advantage names the player and size."""
        matchup = comparison(
            9,
            [comparison_player(1, "A", dg_sg_total=1.0), comparison_player(2, "B", dg_sg_total=1.3)],
            has_data_source_disagreement=True, data_source_disagreement_type=DisagreementType.STRONG,
            dg_advantage_player="B", dg_advantage_size=0.3,
        )
        picks = value_players([matchup], MatchupFilterCriteria(show_data_source_disagreement=True))
        assert picks[0].name == "B"
        assert picks[0].reason.startswith("Strong data disagreement")
        assert picks[0].sg_total == 1.3
