"""Outbound notifications."""

from .sheets import SheetWebhook

__all__ = ["SheetWebhook"]
