"""
Persistent record of checked SACs.

Two JSON files hold the confirmed (claimed) and absent (unclaimed) codes,
each as {"<field>": [...], "count": n}. The "seen" set is never written; it
is rebuilt as the union of both files on load.
"""

import json
import logging
import os
import tempfile
import threading
from typing import Dict, Iterable, Optional, Set

WORKING_FIELD = "workingSacs"
UNUSED_FIELD = "unusedSacs"

log = logging.getLogger("checker.ledger")


def read_record(path: str, field: str) -> Set[str]:
    if not os.path.exists(path):
        log.debug("Ledger file missing | path=%s", path)
        return set()
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        log.warning("Ledger file unreadable, starting empty | path=%s error=%s", path, str(e))
        return set()
    items = data.get(field) if isinstance(data, dict) else None
    if not isinstance(items, list):
        log.warning("Ledger file has no %s list, starting empty | path=%s", field, path)
        return set()
    return {str(x) for x in items}


def write_record(path: str, field: str, items: Iterable[str]) -> None:
    # Write to a sibling temp file then swap it in so a crash never leaves a torn record.
    values = sorted(items)
    folder = os.path.dirname(os.path.abspath(path))
    os.makedirs(folder, exist_ok=True)
    fd, tmp = tempfile.mkstemp(prefix=".ledger-", suffix=".json", dir=folder)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump({field: values, "count": len(values)}, f, indent=2)
        os.replace(tmp, path)
    except BaseException:
        if os.path.exists(tmp):
            os.remove(tmp)
        raise


class Ledger:
    def __init__(self, confirmed_path: str, absent_path: str,
                 confirmed: Optional[Iterable[str]] = None, absent: Optional[Iterable[str]] = None):
        self.confirmed_path = confirmed_path
        self.absent_path = absent_path
        self.confirmed: Set[str] = set(confirmed or ())
        self.absent: Set[str] = set(absent or ()) - self.confirmed
        self.seen: Set[str] = self.confirmed | self.absent
        self._lock = threading.Lock()

    @classmethod
    def load(cls, confirmed_path: str, absent_path: str) -> "Ledger":
        confirmed = read_record(confirmed_path, WORKING_FIELD)
        absent = read_record(absent_path, UNUSED_FIELD)
        overlap = confirmed & absent
        if overlap:
            log.warning("Ledger overlap resolved as confirmed | count=%d", len(overlap))
        ledger = cls(confirmed_path, absent_path, confirmed, absent)
        log.info("Ledger loaded | confirmed=%d absent=%d", len(ledger.confirmed), len(ledger.absent))
        return ledger

    def has(self, candidate: str) -> bool:
        with self._lock:
            return candidate in self.seen

    def mark_seen(self, candidate: str) -> bool:
        """Claim `candidate` for checking. Returns False if it was already seen."""
        with self._lock:
            if candidate in self.seen:
                return False
            self.seen.add(candidate)
            return True

    def mark_confirmed(self, candidate: str) -> None:
        with self._lock:
            if candidate in self.absent:
                return
            self.confirmed.add(candidate)
            self.seen.add(candidate)

    def mark_absent(self, candidate: str) -> None:
        with self._lock:
            if candidate in self.confirmed:
                return
            self.absent.add(candidate)
            self.seen.add(candidate)

    def snapshot(self) -> Dict[str, int]:
        with self._lock:
            return {"confirmed": len(self.confirmed), "absent": len(self.absent), "seen": len(self.seen)}

    def flush(self) -> None:
        with self._lock:
            confirmed = list(self.confirmed)
            absent = list(self.absent)
        write_record(self.confirmed_path, WORKING_FIELD, confirmed)
        write_record(self.absent_path, UNUSED_FIELD, absent)
        log.debug("Ledger flushed | confirmed=%d absent=%d", len(confirmed), len(absent))
