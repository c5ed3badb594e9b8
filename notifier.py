"""Best-effort Discord-style webhook notifications."""

import logging
from datetime import datetime, timezone
from typing import List, Optional

import requests

GREEN = 0x00FF00
RED = 0xFF0000

log = logging.getLogger("checker.notifier")


def embed(title: str, description: str, color: int) -> dict:
    return {
        "title": title,
        "description": description,
        "color": color,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


class Notifier:
    def __init__(self, webhook_url: str = "", session: Optional[requests.Session] = None, timeout: int = 10):
        self.webhook_url = webhook_url
        self.session = session or requests.Session()
        self.timeout = timeout

    @property
    def enabled(self) -> bool:
        return bool(self.webhook_url)

    def notify(self, message: Optional[str], embeds: Optional[List[dict]] = None) -> bool:
        """Post a message; never raises. Returns True if the webhook accepted it."""
        if not self.enabled:
            log.debug("Webhook disabled | message=%s", message)
            return False
        try:
            r = self.session.post(self.webhook_url, json={"content": message, "embeds": embeds or []},
                                  timeout=self.timeout)
            r.raise_for_status()
        except Exception as e:
            log.warning("Webhook notification failed | error=%s", str(e))
            return False
        return True

    def run_started(self, description: str) -> bool:
        return self.notify(None, [embed("SAC Check Started", description, GREEN)])

    def run_finished(self, total: int, confirmed: int, absent: int) -> bool:
        description = (
            f"Total SACs Checked: {total}\n"
            f"Working SACs Found: {confirmed}\n"
            f"Unused SACs: {absent}"
        )
        return self.notify("SAC Checking Complete!", [embed("Final Results", description, RED)])
