"""
HTTP session with connection pooling, a single connect retry, and SSL.

Polling never retries on its own beyond the next timer tick, so only a
failed connect (typically a stale pooled socket) is retried here.
"""

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from .constants import USER_AGENT

_retry_strategy = Retry(
    total=1,
    connect=1,
    read=0,
    status=0,
    backoff_factor=0.2,
    allowed_methods=["GET"],
)


def _get_ca_bundle():
    """certifi bundle when available, otherwise requests' default."""
    try:
        import certifi
        return certifi.where()
    except ImportError:
        return True


def create_session():
    """Create a new requests.Session with connection pooling, retry, and SSL."""
    session = requests.Session()
    adapter = HTTPAdapter(
        pool_connections=1,
        pool_maxsize=2,
        max_retries=_retry_strategy,
    )
    session.mount("http://", adapter)
    session.mount("https://", adapter)
    session.verify = _get_ca_bundle()
    session.headers["User-Agent"] = USER_AGENT
    return session


def reset_session(session):
    """Close and recreate the HTTP session (fixes stale connections)."""
    try:
        session.close()
    except Exception:
        pass
    return create_session()
