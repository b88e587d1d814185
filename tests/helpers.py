"""Test doubles: a scripted Duolingo client and a fake requests session."""

from datetime import datetime

import jwt

from duo_core.errors import CredentialError
from duo_core.models import DailyProgress, Lesson

# Local midnight of the fixed test day, as epoch seconds
TODAY = datetime(2026, 10, 18)
NOW = datetime(2026, 10, 18, 12, 0, 0)
MIDNIGHT = int(TODAY.timestamp())

# Signature is never verified; long enough to keep PyJWT quiet
SIGNING_KEY = "not-checked-by-the-enforcer-0000"


def make_token(sub="12345"):
    return jwt.encode({"sub": sub}, SIGNING_KEY, algorithm="HS256")


def progress(*lessons, goal=100, cutoff=MIDNIGHT):
    """DailyProgress from (time, xp) pairs, filtered at `cutoff`."""
    return DailyProgress.from_lessons(goal, [Lesson(t, xp) for t, xp in lessons], cutoff)


class FakeClient:
    """Returns (or raises) the next scripted result on each poll."""

    def __init__(self, token, results):
        self.token = token
        self.user_id = f"user-{token}"
        self._results = results
        self.closed = False
        self.polls = 0

    def get_daily_progress(self):
        self.polls += 1
        if not self._results:
            return DailyProgress(xp_goal=0)
        result = self._results[min(self.polls, len(self._results)) - 1]
        if isinstance(result, Exception):
            raise result
        return result

    def close(self):
        self.closed = True


class ClientFactory:
    """Stands in for DuolingoClient(token). Tokens in `rejected` fail."""

    def __init__(self, results=None, rejected=("", "bad")):
        self.results = list(results or [])
        self.rejected = set(rejected)
        self.built = []

    def __call__(self, token):
        if token in self.rejected:
            raise CredentialError(f"Failed to decode JWT's sub: {token!r}")
        client = FakeClient(token, self.results)
        self.built.append(client)
        return client


class FakeResponse:
    def __init__(self, status_code=200, data=None, text=None):
        self.status_code = status_code
        self._data = data
        self.text = text if text is not None else ("" if data is None else str(data))

    def json(self):
        if self._data is None:
            raise ValueError("No JSON object could be decoded")
        return self._data


class FakeSession:
    """Maps the `fields` query param to a FakeResponse or an exception."""

    def __init__(self, routes):
        self.routes = routes
        self.calls = []
        self.closed = False

    def get(self, url, params=None, headers=None, timeout=None):
        self.calls.append({"url": url, "params": params, "headers": headers, "timeout": timeout})
        result = self.routes[params["fields"]]
        if isinstance(result, Exception):
            raise result
        return result

    def close(self):
        self.closed = True
