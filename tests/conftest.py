"""Pytest fixtures for the live football test suite."""

import os
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

# Keep log files out of the user's home while modules are imported
os.environ.setdefault("LOG_TO_FILE", "false")


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point settings and the database at a temporary directory."""
    from live_football.config import get_settings
    from live_football.database import init_db, reset_engine

    monkeypatch.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'test.db'}")
    monkeypatch.setenv("DATA_DIR", str(tmp_path / "data"))
    monkeypatch.setenv("LOGS_DIR", str(tmp_path / "logs"))
    monkeypatch.setenv("LOG_TO_FILE", "false")
    monkeypatch.setenv("B365_TOKEN", "test-token")
    monkeypatch.setenv("MIN_API_CALL_INTERVAL_SECONDS", "0")
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("SHEET_WEBHOOK_URL", raising=False)
    monkeypatch.delenv("RECONCILIATION_STRATEGY", raising=False)

    get_settings.cache_clear()
    reset_engine()
    init_db()

    yield get_settings()

    reset_engine()
    get_settings.cache_clear()


@pytest.fixture
def settings(isolated_settings):
    return isolated_settings


def make_response(status_code=200, json_body=None, text=None):
    """Build a requests.Response stand-in."""
    import json

    response = MagicMock()
    response.status_code = status_code
    response.ok = 200 <= status_code < 300
    if text is None:
        text = json.dumps(json_body) if json_body is not None else ""
    response.text = text
    response.json.side_effect = lambda: json.loads(text)
    return response


@pytest.fixture
def sample_event():
    """One in-play event as returned under ``results``."""
    return {
        "id": "9876543",
        "sport_id": "1",
        "time": "1760890000",
        "time_status": "1",
        "league": {"id": "94", "name": "England Premier League"},
        "home": {"id": "1", "name": "Arsenal"},
        "away": {"id": "2", "name": "Chelsea"},
        "ss": "1-0",
        "timer": {"tm": 34, "ts": 12, "tt": "0", "ta": 0, "md": 0},
        "stats": {
            "attacks": ["40", "31"],
            "dangerous_attacks": ["22", "15"],
            "on_target": ["4", "2"],
            "off_target": ["3", "5"],
            "corners": ["5", "1"],
            "yellowcards": ["1", "2"],
            "redcards": ["0", "0"],
        },
    }


@pytest.fixture
def sample_inplay_response(sample_event):
    """In-play payload with one real event, one e-soccer event and one without league."""
    return {
        "success": 1,
        "pager": {"page": 1, "per_page": 50, "total": 3},
        "results": [
            sample_event,
            {
                "id": "555",
                "league": {"name": "Esoccer Battle - 8 mins play"},
                "home": {"name": "Napoli (Boris)"},
                "away": {"name": "Roma (Kray)"},
                "ss": "3-2",
                "timer": {"tm": 6, "ts": 0, "tt": "0"},
            },
            {"id": "777", "home": {"name": "A"}, "away": {"name": "B"}},
        ],
    }


def quote(minute, handicap, over="0.900", under="0.950", add_time=None, **extra):
    """One raw odds quote as found under results.odds[market]."""
    data = {
        "id": f"q{minute}{handicap}",
        "over_od": over,
        "under_od": under,
        "handicap": handicap,
        "ss": "0-0",
        "time_str": str(minute),
        "add_time": str(add_time if add_time is not None else 1760890000 + minute * 60),
    }
    data.update(extra)
    return data


@pytest.fixture
def sample_odds_response():
    """Odds payload for the goal line and handicap markets."""
    return {
        "success": 1,
        "results": {
            "stats": {"matching_dir": 1},
            "odds": {
                "1_3": [
                    quote(10, "0.5"),
                    quote(11, "0.75"),
                    quote(12, "0.5", over="0.875", under="0.975"),
                ],
                "1_2": [
                    {
                        "id": "h1",
                        "home_od": "0.950",
                        "away_od": "0.900",
                        "handicap": "-0.25",
                        "time_str": "12",
                        "add_time": "1760890720",
                    },
                    {
                        "id": "h0",
                        "home_od": "0.925",
                        "away_od": "0.925",
                        "handicap": "-0.25",
                        "time_str": "8",
                        "add_time": "1760890480",
                    },
                ],
            },
        },
    }
