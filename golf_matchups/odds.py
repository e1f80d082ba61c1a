"""
Odds normalization: format detection, implied probability and vig removal.

Format detection is a best-effort heuristic, not a guarantee. The boundaries
are the contract:

    odds < 0 or odds >= 100  -> American
    1 <= odds <= 50          -> decimal
    anything else            -> fractional (expressed as a decimal multiplier)

A +110 American price and a 1.10 decimal price are both plausible inputs, so
every function that accepts odds also accepts an explicit ``OddsFormat``
override.
"""

import logging
import math
from typing import List, Optional, Sequence, Union

from .models import OddsFormat

logger = logging.getLogger(__name__)

FormatArg = Optional[Union[OddsFormat, str]]


def resolve_format(fmt: FormatArg) -> Optional[OddsFormat]:
    """Coerce a format name or enum; None means auto-detect."""
    if fmt is None or isinstance(fmt, OddsFormat):
        return fmt
    if isinstance(fmt, str):
        if fmt.lower() == "auto":
            return None
        try:
            return OddsFormat(fmt.lower())
        except ValueError:
            raise ValueError(
                f"Unknown odds format '{fmt}'. "
                f"Expected one of: auto, {', '.join(f.value for f in OddsFormat)}"
            ) from None
    raise ValueError(f"Unknown odds format: {fmt!r}")


def _as_number(odds) -> Optional[float]:
    """Return odds as a finite float, or None if unusable."""
    if odds is None or isinstance(odds, bool):
        return None
    try:
        value = float(odds)
    except (TypeError, ValueError):
        return None
    if math.isnan(value) or math.isinf(value):
        return None
    return value


def detect_format(odds: float) -> OddsFormat:
    """Guess the odds format from its magnitude."""
    if odds < 0 or odds >= 100:
        return OddsFormat.AMERICAN
    if 1 <= odds <= 50:
        return OddsFormat.DECIMAL
    return OddsFormat.FRACTIONAL


def _american_probability(odds: float) -> float:
    if odds > 0:
        return 100 / (odds + 100)
    if odds < 0:
        return abs(odds) / (abs(odds) + 100)
    return 0.5  # Even


def _decimal_probability(odds: float) -> float:
    if odds <= 1:
        return 0.0  # Invalid decimal price
    return 1 / odds


def _fractional_probability(odds: float) -> float:
    if odds <= 0:
        return 0.0
    return 1 / (odds + 1)


def implied_probability(odds, fmt: FormatArg = None) -> float:
    """
    Convert odds to an implied probability in [0, 1].

    Malformed odds never raise: they come back as 0.0, which callers should
    read as "low confidence" rather than "missing".
    """
    value = _as_number(odds)
    if value is None:
        logger.debug(f"Unusable odds value {odds!r}, treating as 0 probability")
        return 0.0

    resolved = resolve_format(fmt) or detect_format(value)
    if resolved == OddsFormat.AMERICAN:
        return _american_probability(value)
    if resolved == OddsFormat.DECIMAL:
        return _decimal_probability(value)
    return _fractional_probability(value)


def remove_vig(probabilities: Sequence[float]) -> List[float]:
    """
    Rescale a market's probabilities so they sum to 1.

    Only applied when the sum exceeds 1 (bookmaker margin). A sum at or below
    1 is returned unchanged: that is an incomplete or thin market and is not
    treated as an error.
    """
    probs = [float(p) for p in probabilities]
    total = sum(probs)
    if total > 1:
        return [p / total for p in probs]
    return probs


def vig_margin(probabilities: Sequence[float]) -> float:
    """Bookmaker margin embedded in a market (0 when none)."""
    return max(0.0, sum(probabilities) - 1)


def to_decimal(odds, fmt: FormatArg = None) -> Optional[float]:
    """Decimal-equivalent price, used to order players by favoritism."""
    value = _as_number(odds)
    if value is None:
        return None

    resolved = resolve_format(fmt) or detect_format(value)
    if resolved == OddsFormat.AMERICAN:
        if value > 0:
            return 1 + value / 100
        if value < 0:
            return 1 + 100 / abs(value)
        return 2.0
    if resolved == OddsFormat.DECIMAL:
        return value
    return value + 1


def decimal_to_american(decimal: float) -> int:
    """Convert a decimal price to American odds (0 for invalid prices)."""
    if decimal <= 1.01:
        return 0
    if decimal >= 2.0:
        return round((decimal - 1) * 100)
    return round(-100 / (decimal - 1))


def to_american(odds, fmt: FormatArg = None) -> Optional[int]:
    """American-equivalent odds, or None when the odds are unusable."""
    value = _as_number(odds)
    if value is None:
        return None
    resolved = resolve_format(fmt) or detect_format(value)
    if resolved == OddsFormat.AMERICAN:
        return round(value)
    decimal = to_decimal(value, resolved)
    return decimal_to_american(decimal)


def format_resolved(odds, fmt: FormatArg = None) -> bool:
    """Whether the odds resolve to an American or decimal price."""
    value = _as_number(odds)
    if value is None:
        return False
    resolved = resolve_format(fmt) or detect_format(value)
    return resolved in (OddsFormat.AMERICAN, OddsFormat.DECIMAL)
