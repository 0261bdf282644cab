"""b365api client routed through the caching proxy, with rate limiting and backoff."""

import json
import time
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urlencode

import requests

from ..config import DEMO_TOKEN, Settings, get_settings
from ..utils.logging import get_logger
from ..utils.rate_limit import RateLimiter
from ..utils.retry import NonRetryableError, RetryableError, retry_with_backoff
from .models import MatchInfo, OddsSnapshot

logger = get_logger(__name__)

FOOTBALL_SPORT_ID = 1


class ApiError(NonRetryableError):
    """Upstream call failed and should not be retried."""


class AccessDeniedError(ApiError):
    """The proxy or upstream refused the token (HTTP 403)."""


class UpstreamError(ApiError):
    """Any other non-2xx response."""

    def __init__(self, status_code: int, message: str = ""):
        self.status_code = status_code
        super().__init__(message or f"Upstream returned HTTP {status_code}")


class RateLimitedError(RetryableError):
    """HTTP 429; retried with exponential backoff."""


def is_demo_token(token: Optional[str]) -> bool:
    """True for an empty token or the demo sentinel."""
    return not token or token == DEMO_TOKEN


def _is_success(flag: Any) -> bool:
    return flag == 1 or flag == "1"


class LiveOddsClient:
    """Client for the in-play and event-odds endpoints.

    Every HTTP attempt first waits on the shared RateLimiter. A 429 is retried
    with exponential backoff; 403 and other errors are not. Public fetch methods
    never raise: failures are logged and reported as no data.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        rate_limiter: Optional[RateLimiter] = None,
        session: Optional[requests.Session] = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.settings = settings or get_settings()
        self.rate_limiter = rate_limiter or RateLimiter(
            self.settings.min_api_call_interval_seconds, sleep=sleep
        )
        self.session = session or requests.Session()
        self.requests_made = 0

        self._get_json = retry_with_backoff(
            max_retries=self.settings.max_retries,
            initial_delay=self.settings.initial_retry_delay_seconds,
            backoff_factor=2.0,
            exceptions=(RateLimitedError,),
            sleep=sleep,
        )(self._get_json_once)

    def _proxied(self, upstream_url: str) -> str:
        return f"{self.settings.proxy_url}?{urlencode({'target': upstream_url})}"

    def _get_json_once(self, upstream_url: str) -> Optional[Any]:
        """One rate-limited GET through the proxy. Empty or non-JSON bodies give None."""
        self.rate_limiter.acquire()
        self.requests_made += 1

        response = self.session.get(
            self._proxied(upstream_url),
            timeout=self.settings.request_timeout_seconds,
        )

        if response.status_code == 403:
            raise AccessDeniedError("Access denied (403)")
        if response.status_code == 429:
            raise RateLimitedError("Rate limited (429)")
        if not response.ok:
            raise UpstreamError(response.status_code)

        text = response.text
        if not text or not text.strip():
            logger.debug(f"Empty body from {upstream_url}")
            return None
        try:
            return json.loads(text)
        except ValueError:
            logger.warning(f"Malformed JSON body from {upstream_url}")
            return None

    def _safe_get(self, upstream_url: str) -> Optional[Any]:
        try:
            return self._get_json(upstream_url)
        except (ApiError, RateLimitedError) as e:
            logger.error(f"API request failed: {e}")
        except requests.exceptions.RequestException as e:
            logger.error(f"API request failed: {e}")
        return None

    def _inplay_url(self, token: str) -> str:
        query = urlencode({"sport_id": FOOTBALL_SPORT_ID, "token": token})
        return f"{self.settings.inplay_url}?{query}"

    def _odds_url(self, token: str, match_id: str) -> str:
        query = urlencode({"token": token, "event_id": match_id})
        return f"{self.settings.odds_url}?{query}"

    def _resolve_token(self, token: Optional[str]) -> Optional[str]:
        return token if token is not None else self.settings.b365_token

    def fetch_inplay_events(self, token: Optional[str] = None) -> List[MatchInfo]:
        """Live football events, excluding e-soccer leagues."""
        token = self._resolve_token(token)
        if is_demo_token(token):
            logger.debug("Demo mode, skipping in-play fetch")
            return []

        data = self._safe_get(self._inplay_url(token))
        if not isinstance(data, dict) or not _is_success(data.get("success")):
            return []

        events = []
        for raw in data.get("results") or []:
            if not isinstance(raw, dict):
                continue
            league = raw.get("league")
            if not isinstance(league, dict) or not league.get("name"):
                continue
            if "esoccer" in str(league["name"]).lower():
                continue
            events.append(MatchInfo.from_api(raw))

        logger.info(f"Fetched {len(events)} in-play events")
        return events

    def fetch_match_detail(self, match_id: str, token: Optional[str] = None) -> Optional[MatchInfo]:
        """Current snapshot of one event, looked up in the in-play list."""
        token = self._resolve_token(token)
        if is_demo_token(token):
            return None

        data = self._safe_get(self._inplay_url(token))
        if not isinstance(data, dict):
            return None

        for raw in data.get("results") or []:
            if isinstance(raw, dict) and str(raw.get("id")) == str(match_id):
                return MatchInfo.from_api(raw)

        logger.info(f"Match {match_id} not in the in-play list")
        return None

    def fetch_match_odds(self, match_id: str, token: Optional[str] = None) -> Optional[OddsSnapshot]:
        """Quote histories for the handicap and goal line markets of one event."""
        token = self._resolve_token(token)
        if is_demo_token(token):
            return None

        data = self._safe_get(self._odds_url(token, match_id))
        if not isinstance(data, dict) or data.get("success") in (0, "0"):
            return None

        return OddsSnapshot.from_api(data)

    def get_usage_stats(self) -> Dict[str, Any]:
        """Request counters for display."""
        return {
            "requests_made": self.requests_made,
            "min_interval_seconds": self.rate_limiter.min_interval,
            "next_call_in_seconds": round(self.rate_limiter.wait_time(), 1),
        }
