"""
Tests for odds.py - Odds normalization.
"""

from pathlib import Path

import pytest

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from golf_matchups.models import OddsFormat
from golf_matchups.odds import (
    detect_format, implied_probability, remove_vig, vig_margin, to_decimal,
    decimal_to_american, to_american, resolve_format, format_resolved,
)


class TestDetectFormat:
    """Tests for the format detection heuristic."""

    @pytest.mark.parametrize("odds", [-150, -100, 100, 130, 2500])
    def test_american_boundaries(self, odds):
        """Test that negatives and values of 100 or more are American."""
        assert detect_format(odds) == OddsFormat.AMERICAN

    @pytest.mark.parametrize("odds", [1, 1.1, 2.3, 50])
    def test_decimal_boundaries(self, odds):
        """Test that 1 through 50 is decimal."""
        assert detect_format(odds) == OddsFormat.DECIMAL

    @pytest.mark.parametrize("odds", [0, 0.5, 50.5, 99])
    def test_everything_else_is_fractional(self, odds):
        """Test that values outside the other bands are fractional."""
        assert detect_format(odds) == OddsFormat.FRACTIONAL


class TestImpliedProbability:
    """Tests for implied probability conversion."""

    def test_scenario_two_player_market(self):
        """Test -150 / +130 implied probabilities."""
        assert implied_probability(-150) == pytest.approx(0.60)
        assert implied_probability(130) == pytest.approx(100 / 230)

    @pytest.mark.parametrize("odds", [-10000, -500, -101, -100, 100, 101, 250, 5000])
    def test_american_in_open_unit_interval(self, odds):
        """Test that valid non-zero American odds map strictly inside (0, 1)."""
        prob = implied_probability(odds, OddsFormat.AMERICAN)
        assert 0 < prob < 1

    def test_higher_positive_odds_mean_lower_probability(self):
        """Test monotonicity across positive American odds."""
        probs = [implied_probability(o) for o in (100, 150, 200, 400, 1000)]
        assert probs == sorted(probs, reverse=True)
        assert len(set(probs)) == len(probs)

    def test_american_even_money(self):
        """Test that explicit American 0 is treated as even money."""
        assert implied_probability(0, OddsFormat.AMERICAN) == 0.5

    def test_decimal(self):
        """Test decimal odds conversion."""
        assert implied_probability(2.5) == pytest.approx(0.4)
        assert implied_probability(2.0, "decimal") == pytest.approx(0.5)

    def test_decimal_at_or_below_one_is_zero(self):
        """Test that decimal prices of 1 or less are invalid."""
        assert implied_probability(1.0) == 0.0
        assert implied_probability(0.9, OddsFormat.DECIMAL) == 0.0

    def test_fractional(self):
        """Test fractional odds expressed as a decimal multiplier."""
        assert implied_probability(0.5) == pytest.approx(1 / 1.5)
        assert implied_probability(3, OddsFormat.FRACTIONAL) == pytest.approx(0.25)

    def test_override_resolves_ambiguous_price(self):
        """Test that an explicit format overrides detection."""
        # 110 auto-detects as American +110, but could be meant as something else
        assert implied_probability(110) == pytest.approx(100 / 210)
        assert implied_probability(1.10, "decimal") == pytest.approx(1 / 1.1)

    @pytest.mark.parametrize("bad", [None, "abc", float("nan"), float("inf"), True, [1]])
    def test_malformed_odds_degrade_to_zero(self, bad):
        """Test that malformed odds never raise."""
        assert implied_probability(bad) == 0.0

    def test_numeric_strings_are_accepted(self):
        """Test that numeric strings parse."""
        assert implied_probability("-150") == pytest.approx(0.6)

    def test_unknown_format_raises(self):
        """Test that an unknown format name is a caller error."""
        with pytest.raises(ValueError):
            implied_probability(-150, "moneyline")


class TestRemoveVig:
    """Tests for vig removal."""

    def test_scenario_rescales_to_one(self):
        """Test the -150 / +130 market sums to 1 after rescaling by ~1.035."""
        raw = [implied_probability(-150), implied_probability(130)]
        assert sum(raw) == pytest.approx(1.035, abs=0.001)

        fair = remove_vig(raw)
        assert sum(fair) == pytest.approx(1.0)
        assert fair[0] == pytest.approx(raw[0] / sum(raw))

    def test_idempotent(self):
        """Test that removing vig twice changes nothing."""
        raw = [0.55, 0.52, 0.10]
        once = remove_vig(raw)
        assert remove_vig(once) == pytest.approx(once)

    def test_thin_market_left_unscaled(self):
        """Test that a sum at or below 1 is returned unchanged."""
        assert remove_vig([0.4]) == [0.4]
        assert remove_vig([0.3, 0.5]) == [0.3, 0.5]

    def test_margin(self):
        """Test bookmaker margin calculation."""
        assert vig_margin([0.55, 0.50]) == pytest.approx(0.05)
        assert vig_margin([0.4, 0.4]) == 0.0


class TestConversions:
    """Tests for price conversions."""

    def test_to_decimal(self):
        """Test decimal-equivalent prices."""
        assert to_decimal(-150) == pytest.approx(1 + 100 / 150)
        assert to_decimal(130) == pytest.approx(2.3)
        assert to_decimal(2.5) == 2.5
        assert to_decimal(0.5) == 1.5
        assert to_decimal(None) is None

    def test_decimal_to_american(self):
        """Test decimal to American conversion."""
        assert decimal_to_american(2.3) == 130
        assert decimal_to_american(1.5) == -200
        assert decimal_to_american(2.0) == 100
        assert decimal_to_american(1.0) == 0

    def test_to_american(self):
        """Test American-equivalent prices."""
        assert to_american(-150) == -150
        assert to_american(2.5) == 150
        assert to_american("junk") is None

    def test_format_resolved(self):
        """Test that only American and decimal count as resolved."""
        assert format_resolved(-150)
        assert format_resolved(2.5)
        assert not format_resolved(0.5)
        assert not format_resolved(None)

    def test_resolve_format(self):
        """Test format name coercion."""
        assert resolve_format(None) is None
        assert resolve_format("auto") is None
        assert resolve_format("American") == OddsFormat.AMERICAN
        assert resolve_format(OddsFormat.DECIMAL) == OddsFormat.DECIMAL
        with pytest.raises(ValueError):
            resolve_format(3)
