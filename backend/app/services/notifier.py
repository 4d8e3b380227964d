import requests
import logging
import os
import time
from typing import Optional

from app.models.quotation import Quotation

logger = logging.getLogger(__name__)

QUOTE_WEBHOOK_URL = os.getenv("QUOTE_WEBHOOK_URL")


class QuoteNotifier:
    """Posts a short summary of each saved quotation to an optional webhook."""

    def __init__(self, webhook_url: Optional[str] = None, max_retries: int = 3, backoff: float = 0.5):
        self.webhook = webhook_url if webhook_url is not None else QUOTE_WEBHOOK_URL
        self.max_retries = max_retries
        self.backoff = backoff
        logger.debug("QuoteNotifier initialized with webhook=%s max_retries=%s", self.webhook, self.max_retries)

    @property
    def enabled(self) -> bool:
        return bool(self.webhook)

    def payload(self, quotation: Quotation) -> dict:
        return {
            "createdAt": quotation.created_at.isoformat(),
            "source": quotation.source,
            "totalPrice": quotation.total_price,
            "pageCount": len(quotation.pages),
        }

    def notify(self, quotation: Quotation) -> bool:
        if not self.enabled:
            return False

        payload = self.payload(quotation)
        # a retried delivery of the same quotation carries the same key
        headers = {"Content-Type": "application/json", "Idempotency-Key": f"quotation-{payload['createdAt']}"}

        for attempt in range(1, self.max_retries + 1):
            try:
                logger.debug("Sending quotation webhook attempt=%s url=%s", attempt, self.webhook)
                resp = requests.post(self.webhook, json=payload, timeout=5, headers=headers)
                resp.raise_for_status()
                logger.info("Quotation webhook delivered url=%s status=%s", self.webhook, resp.status_code)
                return True
            except requests.RequestException as e:
                logger.warning("Attempt %s: quotation webhook failed: %s", attempt, e)
            if attempt < self.max_retries:
                time.sleep(self.backoff * attempt)

        logger.error("Quotation webhook gave up after %s attempts url=%s", self.max_retries, self.webhook)
        return False
