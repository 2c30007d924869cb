"""
Remote media host client (Cloudinary REST API).

Uploads and deletions are signed with the API secret; listing uses basic auth.
Every failure surfaces as UpstreamError.

IMPORTANT: Read `DESIGN.md` before making changes.
"""
import hashlib
import logging
import re
import time

import requests

from steelbuckle.errors import UpstreamError
from steelbuckle.utils.http_session import DEFAULT_TIMEOUT, create_session

logger = logging.getLogger(__name__)

API_BASE = "https://api.cloudinary.com/v1_1"
_VERSION_SEGMENT = re.compile(r"^v\d+$")


def public_id_from_url(url):
    """
    Derive the remote public id from a hosted URL.

    .../image/upload/v1744754188/media/logo.svg?_t=1 -> media/logo
    Returns None for URLs without an `upload` segment.
    """
    if not url:
        return None
    parts = url.split("?", 1)[0].split("/")
    if "upload" not in parts:
        return None
    rest = parts[parts.index("upload") + 1:]
    if rest and _VERSION_SEGMENT.match(rest[0]):
        rest = rest[1:]
    if not rest or not rest[-1]:
        return None
    rest[-1] = rest[-1].rsplit(".", 1)[0]
    return "/".join(rest)


def sign_params(params, api_secret):
    """Cloudinary signature: sha1 of the sorted `k=v` pairs joined by & plus the secret."""
    to_sign = "&".join(f"{k}={params[k]}" for k in sorted(params) if params[k] not in (None, ""))
    return hashlib.sha1(f"{to_sign}{api_secret}".encode("utf-8")).hexdigest()


class MediaHost:
    def __init__(self, cloud_name, api_key, api_secret, session=None):
        self.cloud_name = cloud_name
        self.api_key = api_key
        self.api_secret = api_secret
        self.session = session or create_session(total_retries=1)

    @classmethod
    def from_config(cls, config):
        return cls(
            config.get("CLOUDINARY_CLOUD_NAME"),
            config.get("CLOUDINARY_API_KEY"),
            config.get("CLOUDINARY_API_SECRET"),
        )

    @property
    def configured(self):
        return bool(self.cloud_name and self.api_key and self.api_secret)

    def _require_config(self):
        if not self.configured:
            raise UpstreamError("Media host is not configured")

    def _signed(self, params):
        params = dict(params, timestamp=int(time.time()))
        params["signature"] = sign_params(params, self.api_secret)
        params["api_key"] = self.api_key
        return params

    def _call(self, method, url, **kwargs):
        kwargs.setdefault("timeout", DEFAULT_TIMEOUT)
        try:
            response = self.session.request(method, url, **kwargs)
        except requests.exceptions.RequestException as e:
            logger.error(f"Media host request failed: {method} {url}: {e}")
            raise UpstreamError("Media host is unreachable") from e
        if response.status_code >= 400:
            logger.error(f"Media host returned {response.status_code} for {method} {url}: {response.text[:300]}")
            raise UpstreamError(f"Media host error ({response.status_code})")
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamError("Media host returned an invalid response") from e

    def upload(self, stream, filename, content_type, folder="media"):
        """Upload a file; returns {public_id, secure_url, ...} as reported by the host."""
        self._require_config()
        data = self._signed({"folder": folder})
        files = {"file": (filename, stream, content_type)}
        result = self._call("POST", f"{API_BASE}/{self.cloud_name}/image/upload", data=data, files=files)
        if not result.get("secure_url") or not result.get("public_id"):
            raise UpstreamError("Media host response is missing the uploaded URL")
        return result

    def destroy(self, public_id):
        self._require_config()
        data = self._signed({"public_id": public_id})
        result = self._call("POST", f"{API_BASE}/{self.cloud_name}/image/destroy", data=data)
        return result.get("result") == "ok"

    def list_resources(self, prefix=""):
        """All uploaded public ids under `prefix`, following pagination cursors."""
        self._require_config()
        url = f"{API_BASE}/{self.cloud_name}/resources/image/upload"
        public_ids = []
        cursor = None
        while True:
            params = {"prefix": prefix, "max_results": 500}
            if cursor:
                params["next_cursor"] = cursor
            page = self._call("GET", url, params=params, auth=(self.api_key, self.api_secret))
            public_ids.extend(r["public_id"] for r in page.get("resources", []) if r.get("public_id"))
            cursor = page.get("next_cursor")
            if not cursor:
                return public_ids


def find_orphaned_assets(host, folder="media"):
    """Remote public ids under `folder` that no local Media row points at."""
    from steelbuckle.models.media import Media

    known = set()
    for media in Media.query.all():
        if media.cloudinary_id:
            known.add(media.cloudinary_id)
        derived = public_id_from_url(media.path)
        if derived:
            known.add(derived)

    prefix = f"{folder.rstrip('/')}/" if folder else ""
    return sorted(pid for pid in host.list_resources(prefix) if pid not in known)
