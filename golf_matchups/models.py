"""
Data models for the golf matchup value engine.
"""

from dataclasses import dataclass, field, asdict
from typing import Optional, List, Dict, Any, Tuple, Union
from enum import Enum


class OddsFormat(Enum):
    """Betting odds representation."""
    AMERICAN = "american"    # -150, +130
    DECIMAL = "decimal"      # 1.67, 2.30
    FRACTIONAL = "fractional"  # 1.3 meaning 13/10


class BlendMode(Enum):
    """Tournament vs season SG blending policy."""
    RECENT = "recent"      # Exponential-decay style, fixed 85/15 split
    EXTENDED = "extended"  # Linear blend using the caller's tournament weight
    SEASON = "season"      # Favors season data, fixed 25/75 split


class SeasonSource(Enum):
    """Which season-long SG provider to read."""
    PGA_TOUR = "pga_tour"
    DATA_GOLF = "data_golf"
    AGGREGATE = "aggregate"  # Mean of both when both exist


class DisagreementType(Enum):
    """Strength of a PGA Tour vs Data Golf leader disagreement."""
    MILD = "mild"
    STRONG = "strong"


MatchupId = Union[int, str]


@dataclass(frozen=True)
class SGLine:
    """Strokes gained total plus the four shot categories."""
    total: Optional[float] = None
    off_tee: Optional[float] = None
    approach: Optional[float] = None
    around_green: Optional[float] = None
    putting: Optional[float] = None

    CATEGORIES = ("off_tee", "approach", "around_green", "putting")

    @property
    def has_all_categories(self) -> bool:
        """True when every shot category is populated."""
        return all(getattr(self, c) is not None for c in self.CATEGORIES)

    @property
    def is_empty(self) -> bool:
        return self.total is None and not any(
            getattr(self, c) is not None for c in self.CATEGORIES
        )

    def get(self, category: str) -> Optional[float]:
        return getattr(self, category)


@dataclass(frozen=True)
class PlayerRecord:
    """
    One player in one matchup group, already joined from persistence.
    Never mutated by the engine.
    """
    player_id: int
    name: str
    matchup_id: MatchupId
    odds: Optional[float] = None
    alt_odds: Optional[float] = None  # Model/second-book price for the same matchup
    tournament_sg: SGLine = field(default_factory=SGLine)
    season_sg: SGLine = field(default_factory=SGLine)  # PGA Tour season stats
    skill_sg: SGLine = field(default_factory=SGLine)   # Data Golf skill ratings
    sg_t2g: Optional[float] = None  # Tournament tee-to-green
    position: Optional[int] = None
    today_score: Optional[int] = None
    total_score: Optional[int] = None
    season_avg: Optional[float] = None  # Scoring average, lower is better
    event_name: Optional[str] = None
    round_num: Optional[int] = None
    # Display fields carried from upstream
    value_rating: Optional[float] = None
    confidence_score: Optional[float] = None

    @property
    def has_odds(self) -> bool:
        return self.odds is not None

    @property
    def has_tournament_sg(self) -> bool:
        return self.tournament_sg.total is not None

    @property
    def has_season_sg(self) -> bool:
        return self.season_sg.total is not None or self.skill_sg.total is not None


@dataclass(frozen=True)
class ScoredPlayer:
    """
    A player record plus everything derived for it in one scoring pass.

    weighted_sg            blended SG, or EXCLUDED_SG when required inputs are missing
    calculation_method     human-readable tag describing the blend
    performance_percentile 0-1 rank of weighted_sg within the active field
    implied_probability    raw probability implied by the odds
    adjusted_probability   implied probability after vig removal within the group
    odds_percentile        0-1 rank of adjusted_probability within the active field
    course_fit_factor      multiplicative fit factor, 1.0 is neutral
    value_score            (performance - market percentile) x (1 + course adjustment)
    value_quality          value_score discounted by confidence
    confidence             mean of performance and odds confidence
    """
    player: PlayerRecord
    weighted_sg: Optional[float] = None
    calculation_method: str = ""
    performance_percentile: Optional[float] = None
    implied_probability: Optional[float] = None
    adjusted_probability: Optional[float] = None
    odds_percentile: Optional[float] = None
    course_fit_factor: float = 1.0
    value_score: Optional[float] = None
    value_quality: Optional[float] = None
    confidence: Optional[float] = None
    # Group-relative fields set by the filters
    sg_gap_to_next: Optional[float] = None
    odds_gap_to_favorite: Optional[float] = None
    odds_gap_to_next: Optional[float] = None
    american_odds_gap: Optional[int] = None
    next_best_player: Optional[str] = None
    next_best_sg: Optional[float] = None
    next_best_odds: Optional[float] = None
    composite_score: Optional[float] = None
    debug: Dict[str, Any] = field(default_factory=dict, compare=False)

    @property
    def player_id(self) -> int:
        return self.player.player_id

    @property
    def name(self) -> str:
        return self.player.name

    @property
    def matchup_id(self) -> MatchupId:
        return self.player.matchup_id

    @property
    def odds(self) -> Optional[float]:
        return self.player.odds

    @property
    def key(self) -> Tuple[MatchupId, int]:
        """A player can appear in several matchups of one field."""
        return self.player.matchup_id, self.player.player_id

    def to_dict(self) -> Dict[str, Any]:
        """Flatten into the JSON shape consumed by the API layer."""
        data = asdict(self)
        player = data.pop("player")
        return {**player, **data}


@dataclass
class FilterResult:
    """Output of one filter run."""
    filter_id: str
    filtered: List[ScoredPlayer] = field(default_factory=list)
    meta: Dict[str, Any] = field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.filtered)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filter_id": self.filter_id,
            "filtered": [p.to_dict() for p in self.filtered],
            "meta": self.meta,
        }


@dataclass
class PlayerComparison:
    """Per-player view used inside a matchup comparison."""
    player_id: int
    name: str
    odds: Optional[float]
    alt_odds: Optional[float]
    sg_total: Optional[float]
    sg_putt: Optional[float]
    sg_app: Optional[float]
    sg_arg: Optional[float]
    sg_ott: Optional[float]
    sg_t2g: Optional[float]
    dg_sg_total: Optional[float]
    dg_sg_putt: Optional[float]
    dg_sg_app: Optional[float]
    dg_sg_arg: Optional[float]
    dg_sg_ott: Optional[float]
    position: Optional[int]
    today_score: Optional[int]
    total_score: Optional[int]

    @classmethod
    def from_record(cls, record: PlayerRecord) -> "PlayerComparison":
        return cls(
            player_id=record.player_id,
            name=record.name,
            odds=record.odds,
            alt_odds=record.alt_odds,
            sg_total=record.season_sg.total,
            sg_putt=record.season_sg.putting,
            sg_app=record.season_sg.approach,
            sg_arg=record.season_sg.around_green,
            sg_ott=record.season_sg.off_tee,
            sg_t2g=record.sg_t2g,
            dg_sg_total=record.skill_sg.total,
            dg_sg_putt=record.skill_sg.putting,
            dg_sg_app=record.skill_sg.approach,
            dg_sg_arg=record.skill_sg.around_green,
            dg_sg_ott=record.skill_sg.off_tee,
            position=record.position,
            today_score=record.today_score,
            total_score=record.total_score,
        )


@dataclass
class CategoryDominance:
    """A player leading at least two SG categories by a meaningful margin."""
    player: str
    categories: int
    total_gap: float = 0.0


@dataclass
class MatchupAnalysis:
    """Comparative signals for one matchup group."""
    # Odds
    has_odds_gap: bool = False
    odds_gap_size: float = 0.0       # Decimal odds gap
    american_odds_gap: int = 0
    odds_leader: Optional[str] = None
    has_odds_sg_mismatch: bool = False
    has_book_model_disagreement: bool = False
    # Strokes gained
    sg_leader: Optional[str] = None
    sg_gap_size: float = 0.0
    sg_source: Optional[str] = None
    sg_category_dominance: Optional[CategoryDominance] = None
    has_putting_edge: bool = False
    putting_edge_player: Optional[str] = None
    putting_gap_size: float = 0.0
    has_ball_striking_edge: bool = False
    ball_striking_edge_player: Optional[str] = None
    ball_striking_gap_size: float = 0.0
    # Form
    has_position_mismatch: bool = False
    form_leader: Optional[str] = None
    # Data Golf vs PGA Tour
    dg_leader: Optional[str] = None
    dg_gap_size: float = 0.0
    has_data_source_disagreement: bool = False
    data_source_disagreement_type: Optional[DisagreementType] = None
    has_data_consensus: bool = False
    dg_advantage_player: Optional[str] = None
    dg_advantage_size: float = 0.0


@dataclass
class MatchupComparison:
    """Full comparison result for one matchup, consumed by the explanation panel."""
    matchup_id: MatchupId
    matchup_type: str  # "2ball" or "3ball"
    players: List[PlayerComparison]
    analysis: MatchupAnalysis

    def player_by_name(self, name: Optional[str]) -> Optional[PlayerComparison]:
        if name is None:
            return None
        return next((p for p in self.players if p.name == name), None)

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        disagreement = self.analysis.data_source_disagreement_type
        data["analysis"]["data_source_disagreement_type"] = (
            disagreement.value if disagreement else None
        )
        return data


@dataclass
class FilterBadge:
    """Label shown next to a matchup that matched a signal."""
    type: str
    label: str
    value: Optional[str] = None
    color: str = "blue"
