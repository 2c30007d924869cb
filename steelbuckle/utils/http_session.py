"""
HTTP session setup for outbound calls (connection pooling + retry).

IMPORTANT: Read `DESIGN.md` before making changes.
"""

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

# (connect, read) seconds
DEFAULT_TIMEOUT = (5, 30)


def create_session(total_retries: int = 2, allowed_methods=("GET", "HEAD")) -> requests.Session:
    """Create a requests session that retries idempotent calls on gateway errors."""
    session = requests.Session()

    retry_strategy = Retry(
        total=total_retries,
        backoff_factor=0.2,
        status_forcelist=[502, 503, 504],
        allowed_methods=frozenset(allowed_methods),
    )

    adapter = HTTPAdapter(pool_connections=10, pool_maxsize=20, max_retries=retry_strategy)
    session.mount("http://", adapter)
    session.mount("https://", adapter)

    return session
