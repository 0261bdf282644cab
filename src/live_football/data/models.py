"""Typed views over the b365api payloads."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from ..utils.odds import parse_int, parse_price

# Market ids under results.odds
MARKET_HANDICAP = "1_2"
MARKET_OVER_UNDER = "1_3"
MARKET_H1_HANDICAP = "1_5"
MARKET_H1_OVER_UNDER = "1_6"

MARKET_NAMES = {
    MARKET_HANDICAP: "Asian Handicap",
    MARKET_OVER_UNDER: "Goal Line",
    MARKET_H1_HANDICAP: "1st Half Asian Handicap",
    MARKET_H1_OVER_UNDER: "1st Half Goal Line",
}


@dataclass
class Timer:
    """Match clock as reported by the feed."""

    tm: int = 0  # minute
    ts: int = 0  # second
    tt: str = "0"  # ticking flag
    ta: int = 0  # added time
    md: int = 0  # half

    @classmethod
    def from_api(cls, data: Optional[Dict[str, Any]]) -> Optional["Timer"]:
        if not isinstance(data, dict):
            return None
        return cls(
            tm=parse_int(data.get("tm")),
            ts=parse_int(data.get("ts")),
            tt=str(data.get("tt", "0")),
            ta=parse_int(data.get("ta")),
            md=parse_int(data.get("md")),
        )


@dataclass
class MatchInfo:
    """Snapshot of one in-play event. Replaced wholesale on every poll."""

    id: str
    league_name: str
    home_name: str
    away_name: str
    ss: Optional[str] = None
    time: Optional[str] = None
    timer: Optional[Timer] = None
    stats: Dict[str, List[str]] = field(default_factory=dict)
    raw: Dict[str, Any] = field(default_factory=dict, repr=False)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "MatchInfo":
        """Build from one element of the in-play ``results`` array."""
        league = data.get("league") or {}
        home = data.get("home") or {}
        away = data.get("away") or {}
        stats = data.get("stats")
        return cls(
            id=str(data.get("id", "")),
            league_name=str(league.get("name", "")),
            home_name=str(home.get("name", "")),
            away_name=str(away.get("name", "")),
            ss=data.get("ss"),
            time=data.get("time"),
            timer=Timer.from_api(data.get("timer")),
            stats=stats if isinstance(stats, dict) else {},
            raw=data,
        )

    @property
    def name(self) -> str:
        return f"{self.home_name} vs {self.away_name}"

    @property
    def minute(self) -> int:
        """Current clock minute, 0 when the feed has no timer."""
        return self.timer.tm if self.timer else 0

    @property
    def score(self) -> Tuple[int, int]:
        """Goals as (home, away) parsed from the ``ss`` string."""
        parts = (self.ss or "0-0").split("-")
        if len(parts) != 2:
            return 0, 0
        return parse_int(parts[0]), parse_int(parts[1])

    @property
    def is_live(self) -> bool:
        # The feed reports tt == "1" once a match is over
        return self.timer is not None and parse_int(self.timer.tt) != 1

    def to_dict(self) -> Dict[str, Any]:
        """Original payload, used when the match is persisted."""
        return dict(self.raw)


@dataclass(frozen=True)
class OddsQuotePoint:
    """One observed quote of a two-outcome market."""

    minute: int
    handicap: str
    over: float = 0.0
    under: float = 0.0
    home: float = 0.0
    away: float = 0.0
    add_time: int = 0

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "OddsQuotePoint":
        return cls(
            minute=parse_int(data.get("time_str")),
            handicap=str(data.get("handicap")).strip(),
            over=parse_price(data.get("over_od")),
            under=parse_price(data.get("under_od")),
            home=parse_price(data.get("home_od")),
            away=parse_price(data.get("away_od")),
            add_time=parse_int(data.get("add_time")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "minute": self.minute,
            "handicap": self.handicap,
            "over": self.over,
            "under": self.under,
            "home": self.home,
            "away": self.away,
            "add_time": self.add_time,
        }


@dataclass
class OddsSnapshot:
    """Quote histories per market from one odds response."""

    markets: Dict[str, List[OddsQuotePoint]] = field(default_factory=dict)

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "OddsSnapshot":
        """Parse ``results.odds``; quotes without a handicap are dropped."""
        results = data.get("results") or {}
        odds = results.get("odds") if isinstance(results, dict) else None
        markets: Dict[str, List[OddsQuotePoint]] = {}
        if isinstance(odds, dict):
            for market_id in MARKET_NAMES:
                quotes = odds.get(market_id)
                if not isinstance(quotes, list):
                    continue
                markets[market_id] = [
                    OddsQuotePoint.from_api(q)
                    for q in quotes
                    if isinstance(q, dict) and q.get("handicap") not in (None, "")
                ]
        return cls(markets=markets)

    def market(self, market_id: str) -> List[OddsQuotePoint]:
        return self.markets.get(market_id, [])

    @property
    def over_under(self) -> List[OddsQuotePoint]:
        return self.market(MARKET_OVER_UNDER)

    @property
    def handicap(self) -> List[OddsQuotePoint]:
        return self.market(MARKET_HANDICAP)

    @property
    def is_empty(self) -> bool:
        return not any(self.markets.values())
