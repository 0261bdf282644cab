"""Match polling workflow."""

from .monitor import DashboardSnapshot, MatchMonitor

__all__ = ["DashboardSnapshot", "MatchMonitor"]
