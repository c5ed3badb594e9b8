"""
Remote SAC lookup and single-candidate classification.

Known limitation: a failed lookup (timeout, transport error, non-2xx,
malformed body) is recorded as absent, the same as a lookup that reports
the code does not exist. Failed codes are not retried on later runs.
"""

import logging
from typing import Optional

import requests

from ledger import Ledger

DEFAULT_LOOKUP_URL = "https://fortnite-api.com/v2/creatorcode"
DEFAULT_TIMEOUT = 5.0

log = logging.getLogger("checker.verifier")


class LookupClient:
    def __init__(self, base_url: str = DEFAULT_LOOKUP_URL, timeout: float = DEFAULT_TIMEOUT,
                 session: Optional[requests.Session] = None):
        self.base_url = base_url
        self.timeout = timeout
        self.session = session or requests.Session()

    def lookup(self, name: str) -> bool:
        """True when the API returns a non-empty `data` payload for `name`."""
        r = self.session.get(self.base_url, params={"name": name}, timeout=self.timeout)
        r.raise_for_status()
        body = r.json()
        return bool(isinstance(body, dict) and body.get("data"))


class Verifier:
    def __init__(self, ledger: Ledger, client: LookupClient):
        self.ledger = ledger
        self.client = client

    def check(self, candidate: str) -> None:
        if not self.ledger.mark_seen(candidate):
            return
        try:
            found = self.client.lookup(candidate)
        except requests.RequestException as e:
            log.debug("Lookup failed, marking absent | sac=%s error=%s", candidate, str(e))
            found = False
        except ValueError as e:
            log.debug("Lookup returned bad JSON, marking absent | sac=%s error=%s", candidate, str(e))
            found = False
        except Exception as e:
            log.warning("Lookup error, marking absent | sac=%s error=%s", candidate, str(e))
            found = False

        if found:
            self.ledger.mark_confirmed(candidate)
            log.info("Working SAC | sac=%s", candidate)
        else:
            self.ledger.mark_absent(candidate)
