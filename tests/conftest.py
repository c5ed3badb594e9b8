"""Pytest configuration and fixtures for the SAC checker tests."""

import sys
from pathlib import Path
from unittest.mock import Mock

import pytest
import requests

project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from ledger import Ledger  # noqa: E402


def make_response(status_code=200, json_data=None, text=""):
    resp = Mock()
    resp.status_code = status_code
    resp.text = text
    resp.json.return_value = json_data
    if status_code >= 400:
        resp.raise_for_status.side_effect = requests.HTTPError(f"{status_code} error", response=resp)
    else:
        resp.raise_for_status.return_value = None
    return resp


class FakeLookupSession:
    """Answers creator-code lookups from a dict of name -> outcome.

    An outcome is True (code exists), False (empty payload), an int status
    code >= 400, or an exception instance to raise.
    """

    def __init__(self, outcomes=None, default=False):
        self.outcomes = dict(outcomes or {})
        self.default = default
        self.calls = []

    def get(self, url, params=None, timeout=None):
        name = (params or {}).get("name")
        self.calls.append(name)
        outcome = self.outcomes.get(name, self.default)
        if isinstance(outcome, Exception):
            raise outcome
        if outcome is True:
            return make_response(200, {"status": 200, "data": {"code": name}})
        if outcome is False:
            return make_response(200, {"status": 404, "data": None})
        return make_response(int(outcome), {"status": outcome})


@pytest.fixture
def ledger_paths(tmp_path):
    return str(tmp_path / "working_sacs.json"), str(tmp_path / "unused_sacs.json")


@pytest.fixture
def ledger(ledger_paths):
    return Ledger.load(*ledger_paths)
