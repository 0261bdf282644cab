"""Configuration module.

Usage:
    from live_football.config import get_settings

    settings = get_settings()
    print(settings.proxy_url)
    print(settings.reconciliation_strategy)
"""

from .settings import DEMO_TOKEN, ReconciliationStrategy, Settings, get_settings

__all__ = ["DEMO_TOKEN", "ReconciliationStrategy", "Settings", "get_settings"]
