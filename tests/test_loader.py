"""
Tests for loader.py - Field snapshot loading.
"""

import json
from pathlib import Path

import pandas as pd
import pytest

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from golf_matchups.loader import (
    load_field, records_from_frame, group_by_matchup, parse_position, parse_score,
)


class TestParsing:
    """Tests for leaderboard value parsing."""

    @pytest.mark.parametrize("value,expected", [
        ("T5", 5), ("t12", 12), ("3", 3), (7, 7), ("CUT", None), ("WD", None), ("", None), (None, None),
    ])
    def test_parse_position(self, value, expected):
        """Test position strings."""
        assert parse_position(value) == expected

    @pytest.mark.parametrize("value,expected", [
        ("E", 0), ("-3", -3), ("+2", 2), (4.0, 4), ("", None), (None, None),
    ])
    def test_parse_score(self, value, expected):
        """Test scores relative to par."""
        assert parse_score(value) == expected


class TestLoadField:
    """Tests for file loading."""

    def test_load_csv(self, sample_csv):
        """Test that a CSV snapshot loads into records."""
        players = load_field(sample_csv)
        assert len(players) == 4

        scheffler = players[0]
        assert scheffler.player_id == 1
        assert scheffler.name == "Scottie Scheffler"
        assert scheffler.matchup_id == 101
        assert scheffler.odds == -150
        assert scheffler.tournament_sg.total == 1.5
        assert scheffler.season_sg.total == 1.2
        assert scheffler.skill_sg.total == 2.1
        assert scheffler.position == 5
        assert scheffler.today_score == -3
        assert scheffler.event_name == "The Masters"

    def test_blank_and_special_values(self, sample_csv):
        """Test that blanks become None and E / CUT are parsed."""
        players = {p.player_id: p for p in load_field(sample_csv)}
        assert players[2].today_score == 0
        assert players[3].tournament_sg.total is None
        assert players[3].position is None
        assert players[3].today_score is None
        assert players[4].today_score == 1
        assert players[1].tournament_sg.putting is None

    def test_load_json(self, temp_dir):
        """Test that a JSON snapshot loads into records."""
        path = temp_dir / "field.json"
        path.write_text(json.dumps([
            {"dg_id": 10, "player_name": "Jon Rahm", "matchup": "7", "odds": 2.1, "sg_total": 0.8},
            {"dg_id": 11, "player_name": "Tom Kim", "matchup": "7", "odds": 1.8, "pos": "T9"},
        ]))
        players = load_field(path)
        assert [p.player_id for p in players] == [10, 11]
        assert all(p.matchup_id == 7 for p in players)
        assert players[1].position == 9
        assert players[1].tournament_sg.total is None

    def test_missing_file(self, temp_dir):
        """Test that a missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_field(temp_dir / "nope.csv")

    def test_unsupported_suffix(self, temp_dir):
        """Test that unknown file types are rejected."""
        path = temp_dir / "field.xlsx"
        path.write_text("")
        with pytest.raises(ValueError, match="Unsupported"):
            load_field(path)

    def test_missing_required_columns(self, temp_dir):
        """Test that a snapshot without matchup ids is rejected."""
        path = temp_dir / "field.csv"
        path.write_text("player_id,name,odds\n1,A,-110\n")
        with pytest.raises(ValueError, match="matchup_id"):
            load_field(path)


class TestRecordsFromFrame:
    """Tests for DataFrame conversion."""

    def test_rows_without_identity_skipped(self):
        """Test that rows missing a required field are dropped."""
        df = pd.DataFrame([
            {"player_id": 1, "name": "A", "matchup_id": 5},
            {"player_id": None, "name": "B", "matchup_id": 5},
            {"player_id": 3, "name": "C", "matchup_id": None},
        ])
        records = records_from_frame(df)
        assert [r.name for r in records] == ["A"]
        assert records[0].matchup_id == 5

    def test_string_matchup_ids_kept(self):
        """Test that non-numeric matchup ids are kept as strings."""
        df = pd.DataFrame([{"player_id": 1, "name": "A", "matchup_id": "R1-07"}])
        assert records_from_frame(df)[0].matchup_id == "R1-07"


class TestGroupByMatchup:
    """Tests for matchup grouping."""

    def test_groups_keep_first_seen_order(self, sample_field):
        """Test that groups follow input order."""
        groups = group_by_matchup(sample_field)
        assert list(groups) == [1, 2, 3]
        assert [p.player_id for p in groups[3]] == [5, 6, 7]

    def test_empty(self):
        """Test an empty field."""
        assert group_by_matchup([]) == {}
