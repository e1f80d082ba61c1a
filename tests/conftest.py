"""
Shared pytest fixtures for golf matchup tests.
"""

import os
import sys
import tempfile
from pathlib import Path
from unittest.mock import patch

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent))

from golf_matchups.models import PlayerRecord, SGLine


def make_player(
    player_id,
    matchup_id=1,
    odds=None,
    tournament=None,
    season=None,
    skill=None,
    name=None,
    **kwargs,
):
    """
    Build a PlayerRecord. tournament/season/skill accept either a total
    (float) or a dict of SGLine fields.
    """
    def line(value):
        if value is None:
            return SGLine()
        if isinstance(value, dict):
            return SGLine(**value)
        return SGLine(total=value)

    return PlayerRecord(
        player_id=player_id,
        name=name or f"Player {player_id}",
        matchup_id=matchup_id,
        odds=odds,
        tournament_sg=line(tournament),
        season_sg=line(season),
        skill_sg=line(skill),
        **kwargs,
    )


@pytest.fixture
def player_factory():
    """Factory for PlayerRecords."""
    return make_player


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def mock_env_no_course_fit():
    """Mock environment with no course fit service configured."""
    with patch.dict(os.environ, {
        "COURSE_FIT_API_URL": "",
        "COURSE_FIT_API_KEY": "",
    }, clear=False):
        yield


@pytest.fixture
def mock_env_with_course_fit():
    """Mock environment with the course fit service configured."""
    with patch.dict(os.environ, {
        "COURSE_FIT_API_URL": "https://coursefit.example.com/api",
        "COURSE_FIT_API_KEY": "test_key_12345",
    }, clear=False):
        yield


@pytest.fixture
def sample_field():
    """Three matchups (two 2-balls and a 3-ball) with mixed data coverage."""
    return [
        # Matchup 1: clear SG favorite who is also the odds favorite
        make_player(1, 1, odds=-150, tournament=1.5, season=1.2, name="Scottie Scheffler", event_name="The Masters"),
        make_player(2, 1, odds=130, tournament=0.2, season=0.4, name="Max Homa", event_name="The Masters"),
        # Matchup 2: underdog with better SG
        make_player(3, 2, odds=-120, tournament=0.1, season=0.3, name="Jordan Spieth", event_name="The Masters"),
        make_player(4, 2, odds=100, tournament=0.9, season=1.0, name="Xander Schauffele", event_name="The Masters"),
        # Matchup 3: 3-ball, one player without odds
        make_player(5, 3, odds=150, tournament=0.5, season=0.6, name="Rory McIlroy", event_name="The Masters"),
        make_player(6, 3, odds=175, tournament=None, season=1.1, name="Viktor Hovland", event_name="The Masters"),
        make_player(7, 3, odds=None, tournament=0.3, season=0.2, name="Tony Finau", event_name="The Masters"),
    ]


@pytest.fixture
def sample_csv(temp_dir):
    """A small matchup snapshot on disk."""
    path = temp_dir / "field.csv"
    path.write_text(
        "player_id,name,matchup_id,odds,sg_total,season_sg_total,dg_sg_total,position,today_score,event_name\n"
        "1,Scottie Scheffler,101,-150,1.5,1.2,2.1,T5,-3,The Masters\n"
        "2,Max Homa,101,130,0.2,0.4,0.9,22,E,The Masters\n"
        "3,Jordan Spieth,102,-110,,0.3,0.5,CUT,,The Masters\n"
        "4,Xander Schauffele,102,-110,0.9,1.0,1.4,3,+1,The Masters\n"
    )
    return path
