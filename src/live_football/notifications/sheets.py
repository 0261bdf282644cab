"""Outbound push of the ticket list to a spreadsheet webhook.

The endpoint (typically a published Apps Script) does not acknowledge
anything useful, so only transport failures count as errors.
"""

from typing import Iterable, Optional

import requests

from ..config import get_settings
from ..database import BetTicket
from ..utils.logging import get_logger
from ..utils.retry import retry_with_backoff

logger = get_logger(__name__)


class SheetWebhook:
    """Spreadsheet webhook client."""

    def __init__(self, webhook_url: Optional[str] = None, session: Optional[requests.Session] = None):
        settings = get_settings()
        self.webhook_url = webhook_url or settings.sheet_webhook_url
        self.session = session or requests.Session()

        if not self.webhook_url:
            logger.debug("Sheet webhook URL not configured")

    @property
    def enabled(self) -> bool:
        return bool(self.webhook_url)

    @retry_with_backoff(max_retries=2, initial_delay=1.0, exceptions=(requests.exceptions.RequestException,))
    def _post(self, payload: dict) -> None:
        # Status and body are not inspected
        self.session.post(
            self.webhook_url,
            json=payload,
            headers={"Content-Type": "application/json"},
            timeout=10,
        )

    def push(self, tickets: Iterable[BetTicket]) -> bool:
        """Send the tickets as ``{"tickets": [...]}``.

        Returns:
            True once the request went out, False if disabled or unreachable
        """
        if not self.enabled:
            logger.debug("Sheet webhook disabled, skipping")
            return False

        rows = [ticket.to_dict() for ticket in tickets]
        try:
            self._post({"tickets": rows})
        except requests.exceptions.RequestException as e:
            logger.error(f"Failed to push tickets to sheet webhook: {e}")
            return False

        logger.info(f"Pushed {len(rows)} tickets to sheet webhook")
        return True
