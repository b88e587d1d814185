"""
Duolingo private API client — credential check and daily XP progress.

All calls are blocking and are only made from the polling actor thread.
The JWT is decoded WITHOUT signature verification just to read the user
id (`sub`); the live username lookup is what proves it works.
"""

from datetime import datetime

import jwt
import requests

from .config import log
from .constants import API_TIMEOUT_SEC, DUOLINGO_API_BASE
from .day_boundary import cutoff_for
from .errors import CredentialError, NetworkError, RemoteProtocolError
from .models import DailyProgress, Lesson
from . import http_client


def decode_user_id(token):
    """Read the `sub` claim from an unverified JWT."""
    try:
        claims = jwt.decode(
            token,
            options={"verify_signature": False},
            algorithms=["HS256", "RS256", "ES256"],
        )
    except jwt.PyJWTError as e:
        raise CredentialError(f"Failed to decode JWT's sub: {e}") from e
    sub = claims.get("sub")
    if sub is None or sub == "":
        raise CredentialError("JWT has no sub claim")
    return str(sub)


class DuolingoClient:
    """
    One client per credential. Never mutated after construction —
    a new JWT means a brand new client.
    """

    def __init__(self, token, session=None, timeout=API_TIMEOUT_SEC, clock=None):
        token = (token or "").strip()
        if not token:
            raise CredentialError("empty JWT")
        self._jwt = token
        self._timeout = timeout
        self._clock = clock or datetime.now
        self._session = session or http_client.create_session()
        self.user_id = decode_user_id(token)
        self.username = self.check_auth()

    # ─── Requests ────────────────────────────────────────────────

    def _get(self, fields):
        url = f"{DUOLINGO_API_BASE}/users/{self.user_id}"
        headers = {"Authorization": f"Bearer {self._jwt}"}
        try:
            return self._session.get(
                url, params={"fields": fields}, headers=headers, timeout=self._timeout,
            )
        except requests.Timeout as e:
            raise NetworkError(f"request timed out after {self._timeout}s") from e
        except requests.RequestException as e:
            self._session = http_client.reset_session(self._session)
            raise NetworkError(f"network error: {e}") from e

    @staticmethod
    def _check_status(resp, what):
        if resp.status_code == 200:
            return
        body = (resp.text or "")[:200]
        if resp.status_code in (401, 403):
            raise CredentialError(f"{what} rejected (status={resp.status_code}): {body}")
        raise RemoteProtocolError(f"{what} returned status={resp.status_code}, {body}")

    @staticmethod
    def _json(resp, what):
        try:
            data = resp.json()
        except ValueError as e:
            raise RemoteProtocolError(f"{what}: invalid JSON body") from e
        if not isinstance(data, dict):
            raise RemoteProtocolError(f"{what}: expected a JSON object")
        return data

    # ─── API ─────────────────────────────────────────────────────

    def check_auth(self):
        """Username lookup — proves the token is accepted. Returns the username."""
        resp = self._get("username")
        self._check_status(resp, "username fetch")
        data = self._json(resp, "username fetch")
        username = data.get("username")
        if not isinstance(username, str):
            raise RemoteProtocolError("username fetch: missing username")
        log.debug("Got username %s", username)
        return username

    def get_daily_progress(self):
        """Fetch goal + recent XP gains and keep the ones after today's cutoff."""
        resp = self._get("xpGoal,xpGains,streakData")
        self._check_status(resp, "daily xp fetch")
        data = self._json(resp, "daily xp fetch")

        try:
            xp_goal = data["xpGoal"]
            gains = data["xpGains"]
        except KeyError as e:
            raise RemoteProtocolError(f"daily xp fetch: missing field {e}") from e
        if isinstance(xp_goal, bool) or not isinstance(xp_goal, (int, float)):
            raise RemoteProtocolError(f"daily xp fetch: bad xpGoal {xp_goal!r}")
        if not isinstance(gains, list):
            raise RemoteProtocolError("daily xp fetch: xpGains is not a list")

        lessons = [Lesson.from_dict(g) for g in gains]
        streak = data.get("streakData") or {}
        reported = streak.get("updatedTimestamp") if isinstance(streak, dict) else None
        cutoff = cutoff_for(reported, self._clock())

        progress = DailyProgress.from_lessons(int(xp_goal), lessons, cutoff)
        log.debug(
            "Daily progress: %d/%d XP from %d lessons (cutoff=%d)",
            progress.xp_today, progress.xp_goal, len(progress.lessons_today), cutoff,
        )
        return progress

    def close(self):
        try:
            self._session.close()
        except Exception:
            pass
