"""
Client for the public content API, used by consumers outside this process
(static builds, previews) as the fetcher behind their own stores.
"""
import logging

import requests

from steelbuckle.errors import UpstreamError
from steelbuckle.utils.http_session import DEFAULT_TIMEOUT, create_session
from steelbuckle.utils.media_resolver import now_ms

logger = logging.getLogger(__name__)


class ContentClient:
    def __init__(self, base_url, session=None, timeout=DEFAULT_TIMEOUT):
        self.base_url = base_url.rstrip("/")
        self.session = session or create_session()
        self.timeout = timeout

    def _get(self, path, params=None):
        url = f"{self.base_url}{path}"
        try:
            response = self.session.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
            return response.json()
        except (requests.exceptions.RequestException, ValueError) as e:
            logger.warning(f"Content API request failed: {url}: {e}")
            raise UpstreamError(f"Content API request failed: {path}") from e

    def fetch_translations(self, lang):
        return self._get("/api/translations", {"lang": lang})

    def fetch_media(self, keys=None, page_id=None):
        """{reference_key: url} for the given keys and/or page prefix."""
        params = {"_t": now_ms()}
        if keys:
            params["keys"] = ",".join(keys)
        if page_id:
            params["pageId"] = page_id
        return self._get("/api/media", params)

    def content_version(self):
        return self._get("/api/content-version")
