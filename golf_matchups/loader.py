"""
Field loader: reads matchup snapshots (CSV or JSON) into PlayerRecords.

Expected columns, one row per player per matchup:

    player_id, name, matchup_id, odds, alt_odds
    sg_total, sg_ott, sg_app, sg_arg, sg_putt, sg_t2g        (tournament)
    season_sg_total, season_sg_ott, ... season_sg_putt       (PGA Tour season)
    dg_sg_total, dg_sg_ott, ... dg_sg_putt                   (Data Golf skill)
    position, today_score, total_score, season_avg, event_name, round_num
    value_rating, confidence_score

Only player_id, name and matchup_id are required.
"""

import logging
import math
import re
from collections import OrderedDict
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, TypeVar, Union

import pandas as pd

from .models import PlayerRecord, SGLine, MatchupId

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS = ("player_id", "name", "matchup_id")

# Alternate column names seen in exports
COLUMN_ALIASES = {
    "dg_id": "player_id",
    "player_name": "name",
    "matchup": "matchup_id",
    "pos": "position",
    "today": "today_score",
    "total": "total_score",
}

SG_SUFFIXES = {
    "total": "total",
    "ott": "off_tee",
    "app": "approach",
    "arg": "around_green",
    "putt": "putting",
}

T = TypeVar("T")


def _clean(value: Any) -> Any:
    """NaN and empty strings become None."""
    if value is None:
        return None
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, str) and not value.strip():
        return None
    return value


def _float(value: Any) -> Optional[float]:
    value = _clean(value)
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        logger.debug(f"Ignoring non-numeric value {value!r}")
        return None


def _int(value: Any) -> Optional[int]:
    number = _float(value)
    return int(number) if number is not None else None


def parse_position(value: Any) -> Optional[int]:
    """Leaderboard position as an int: 'T5' -> 5, '12' -> 12, 'CUT'/'WD' -> None."""
    value = _clean(value)
    if value is None:
        return None
    if isinstance(value, (int, float)):
        return int(value)
    match = re.match(r"^\s*T?(\d+)\s*$", str(value), re.IGNORECASE)
    return int(match.group(1)) if match else None


def parse_score(value: Any) -> Optional[int]:
    """Score relative to par: 'E' -> 0, '-3' -> -3, '+2' -> 2."""
    value = _clean(value)
    if value is None:
        return None
    if isinstance(value, str) and value.strip().upper() == "E":
        return 0
    return _int(value)


def _matchup_id(value: Any) -> MatchupId:
    value = _clean(value)
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return value


def _sg_line(row: Dict[str, Any], prefix: str) -> SGLine:
    return SGLine(**{
        field: _float(row.get(f"{prefix}{suffix}"))
        for suffix, field in SG_SUFFIXES.items()
    })


def record_from_row(row: Dict[str, Any]) -> PlayerRecord:
    """Build a PlayerRecord from one flat row."""
    return PlayerRecord(
        player_id=_int(row["player_id"]),
        name=str(row["name"]).strip(),
        matchup_id=_matchup_id(row["matchup_id"]),
        odds=_float(row.get("odds")),
        alt_odds=_float(row.get("alt_odds")),
        tournament_sg=_sg_line(row, "sg_"),
        season_sg=_sg_line(row, "season_sg_"),
        skill_sg=_sg_line(row, "dg_sg_"),
        sg_t2g=_float(row.get("sg_t2g")),
        position=parse_position(row.get("position")),
        today_score=parse_score(row.get("today_score")),
        total_score=parse_score(row.get("total_score")),
        season_avg=_float(row.get("season_avg")),
        event_name=_clean(row.get("event_name")),
        round_num=_int(row.get("round_num")),
        value_rating=_float(row.get("value_rating")),
        confidence_score=_float(row.get("confidence_score")),
    )


def records_from_frame(df: pd.DataFrame) -> List[PlayerRecord]:
    """Convert a DataFrame to PlayerRecords, skipping rows missing identity fields."""
    df = df.rename(columns={k: v for k, v in COLUMN_ALIASES.items() if v not in df.columns})
    missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
    if missing:
        raise ValueError(f"Field data is missing required columns: {', '.join(missing)}")

    df = df.astype(object).where(pd.notna(df), None)

    records = []
    skipped = 0
    for row in df.to_dict(orient="records"):
        if any(_clean(row.get(c)) is None for c in REQUIRED_COLUMNS):
            skipped += 1
            continue
        try:
            records.append(record_from_row(row))
        except (TypeError, ValueError) as e:
            logger.warning(f"Skipping row for {row.get('name')!r}: {e}")
            skipped += 1

    if skipped:
        logger.warning(f"Skipped {skipped} rows with missing or invalid identity fields")
    return records


def load_field(path: Union[str, Path]) -> List[PlayerRecord]:
    """Load a matchup field snapshot from a .csv or .json file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Field file not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".csv":
        df = pd.read_csv(path, dtype={"position": str, "today_score": str, "total_score": str})
    elif suffix == ".json":
        df = pd.read_json(path, orient="records", dtype=False)
    else:
        raise ValueError(f"Unsupported field file type '{suffix}' (expected .csv or .json)")

    records = records_from_frame(df)
    logger.info(f"Loaded {len(records)} players from {path.name}")
    return records


def group_by_matchup(players: Iterable[T]) -> Dict[MatchupId, List[T]]:
    """Group players by matchup id, keeping first-seen order."""
    groups: Dict[MatchupId, List[T]] = OrderedDict()
    for player in players:
        groups.setdefault(player.matchup_id, []).append(player)
    return groups
