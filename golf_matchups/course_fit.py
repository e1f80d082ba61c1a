"""
Course fit adapter.

Looks up a 0-100 course fit score per (player, event) from the external
course fit service and turns it into a multiplicative factor around 1.0.
A failed lookup never aborts a scoring pass: it degrades to the neutral factor.
"""

import json
import logging
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Tuple

import requests

from .config import get_config, NEUTRAL_COURSE_FIT

logger = logging.getLogger(__name__)


def fit_to_factor(fit_score: float) -> float:
    """Convert a 0-100 fit score to a factor in [0.5, 1.5]."""
    score = min(100.0, max(0.0, float(fit_score)))
    return 0.5 + score / 100


def score_to_grade(fit_score: float) -> str:
    """Letter grade for a fit score."""
    if fit_score >= 90:
        return "A"
    elif fit_score >= 80:
        return "B+"
    elif fit_score >= 70:
        return "B"
    elif fit_score >= 60:
        return "C+"
    elif fit_score >= 50:
        return "C"
    return "D"


class CourseFitClient:
    """HTTP client for the course fit service."""

    def __init__(
        self,
        base_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: int = 1,
    ):
        """Initialize API client."""
        config = get_config()
        self.base_url = (base_url or config.course_fit_api_url).rstrip("/")
        self.api_key = api_key or config.course_fit_api_key
        self.timeout = timeout or config.course_fit_timeout
        self.max_retries = max(1, max_retries)
        self._session = requests.Session()
        self.last_error: str = ""  # Track last error for debug output

    def _request(self, endpoint: str, params: Optional[Dict] = None) -> Optional[Dict]:
        """Make a GET request with a bounded timeout and short backoff between attempts."""
        if not self.base_url:
            self.last_error = "COURSE_FIT_API_URL not configured"
            raise ValueError(
                "COURSE_FIT_API_URL not configured. "
                "Set the COURSE_FIT_API_URL environment variable."
            )

        url = f"{self.base_url}{endpoint}"
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}
        base_delay = 0.5  # seconds

        for attempt in range(self.max_retries):
            try:
                response = self._session.get(url, params=params or {}, headers=headers, timeout=self.timeout)
                response.raise_for_status()

                try:
                    data = response.json()
                except json.JSONDecodeError as e:
                    self.last_error = f"Failed to parse JSON from {endpoint}: {e}"
                    logger.error(self.last_error)
                    return None

                self.last_error = ""
                return data
            except requests.RequestException as e:
                self.last_error = f"Course fit request failed: {e}"
                if attempt < self.max_retries - 1:
                    delay = base_delay * (2 ** attempt)
                    logger.warning(f"Course fit request failed (attempt {attempt + 1}/{self.max_retries}): {e}. Retrying in {delay}s...")
                    time.sleep(delay)
                else:
                    logger.error(f"Course fit request failed after {self.max_retries} attempts: {e}")
                    return None

        return None

    def analyze_player_course_fit(self, player_id: int, event_name: str) -> Optional[Dict[str, Any]]:
        """
        Fetch the course fit analysis for one player at one event.
        Returns {"fit_score", "fit_grade", "category_fit"} or None.
        """
        data = self._request(
            "/course-fit",
            params={"dg_id": player_id, "event_name": event_name},
        )
        if not data or not isinstance(data, dict):
            return None
        if data.get("fit_score") is None:
            return None

        return {
            "fit_score": data.get("fit_score"),
            "fit_grade": data.get("fit_grade"),
            "category_fit": data.get("category_fit", {}),
        }


@dataclass
class FieldFit:
    """Course fit factors for one scoring pass, plus why any lookup fell back."""
    factors: Dict[int, float] = field(default_factory=dict)
    failures: Dict[int, str] = field(default_factory=dict)  # player_id -> reason


class CourseFitAdapter:
    """
    Turns course fit lookups into multiplicative factors.

    The service is any object exposing analyze_player_course_fit(player_id, event_name).
    Exceptions, timeouts, missing events and missing results all come back as
    the neutral factor 1.0. The adapter holds no per-pass state, so one instance
    can serve any number of passes.
    """

    def __init__(self, service=None, timeout: Optional[float] = None, max_workers: Optional[int] = None):
        config = get_config()
        self.service = service
        self.timeout = timeout or config.course_fit_timeout
        self.max_workers = max_workers or config.course_fit_max_workers

    def _lookup(self, player_id: int, event_name: Optional[str]) -> Tuple[float, Optional[str]]:
        """Factor and fallback reason (None when the lookup succeeded)."""
        if self.service is None:
            return NEUTRAL_COURSE_FIT, None
        if not event_name:
            return NEUTRAL_COURSE_FIT, "no event name"

        try:
            result = self.service.analyze_player_course_fit(player_id, event_name)
        except Exception as e:
            logger.warning(f"Course fit lookup failed for player {player_id} at {event_name}: {e}")
            return NEUTRAL_COURSE_FIT, f"error: {e}"

        if not result or result.get("fit_score") is None:
            return NEUTRAL_COURSE_FIT, "no fit result"

        try:
            return fit_to_factor(result["fit_score"]), None
        except (TypeError, ValueError):
            logger.warning(f"Invalid fit score for player {player_id}: {result.get('fit_score')!r}")
            return NEUTRAL_COURSE_FIT, "invalid fit score"

    def course_fit_factor(self, player_id: int, event_name: Optional[str]) -> float:
        """Fit factor for one player, 1.0 on any failure."""
        factor, _ = self._lookup(player_id, event_name)
        return factor

    def lookup_field(self, lookups: Iterable[Tuple[int, Optional[str]]]) -> FieldFit:
        """
        Fan out lookups for a field concurrently and merge results by player id.
        Lookups still running when the timeout expires get the neutral factor.
        """
        lookups = list(dict.fromkeys(lookups))
        fit = FieldFit(factors={player_id: NEUTRAL_COURSE_FIT for player_id, _ in lookups})
        if self.service is None or not lookups:
            return fit

        executor = ThreadPoolExecutor(max_workers=min(self.max_workers, len(lookups)))
        try:
            futures = {
                player_id: executor.submit(self._lookup, player_id, event_name)
                for player_id, event_name in lookups
            }
            deadline = time.monotonic() + self.timeout
            for player_id, future in futures.items():
                remaining = max(0.0, deadline - time.monotonic())
                try:
                    factor, reason = future.result(timeout=remaining)
                except FutureTimeoutError:
                    logger.warning(f"Course fit lookup timed out for player {player_id}")
                    fit.failures[player_id] = "timeout"
                    continue
                except Exception as e:
                    logger.warning(f"Course fit lookup failed for player {player_id}: {e}")
                    fit.failures[player_id] = f"error: {e}"
                    continue
                fit.factors[player_id] = factor
                if reason:
                    fit.failures[player_id] = reason
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

        logger.info(
            f"Course fit factors resolved for {len(fit.factors) - len(fit.failures)}/{len(fit.factors)} players"
        )
        return fit

    def factors_for_field(self, lookups: Iterable[Tuple[int, Optional[str]]]) -> Dict[int, float]:
        """{player_id: factor} for a field; see lookup_field for fallback reasons."""
        return self.lookup_field(lookups).factors
