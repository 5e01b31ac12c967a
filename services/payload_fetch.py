from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional
from urllib.parse import urlparse

import requests

from config.settings import get_settings
from pipelines.errors import PayloadFetchError


logger = logging.getLogger(__name__)


def validate_source_url(url: str) -> str:
    parsed = urlparse((url or "").strip())
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise PayloadFetchError("Invalid URL format")
    return parsed.geturl()


class HttpPayloadFetcher:
    """Downloads a newline-delimited JSON export over HTTP(S)."""

    def __init__(self, timeout_seconds: Optional[float] = None) -> None:
        self.timeout_seconds = timeout_seconds or get_settings().http_timeout_seconds

    def fetch(self, source: str) -> str:
        url = validate_source_url(source)
        try:
            resp = requests.get(url, timeout=self.timeout_seconds)
        except requests.exceptions.RequestException as e:
            raise PayloadFetchError(f"Failed to fetch data: {e}") from e
        if not resp.ok:
            raise PayloadFetchError(f"Failed to fetch data: {resp.status_code} {resp.reason}")
        logger.info("Fetched payload (%s bytes)", len(resp.content or b""), extra={"step": "fetch", "status": resp.status_code})
        return resp.text


class FilePayloadFetcher:
    """Reads a newline-delimited JSON export from a local file."""

    def fetch(self, source: str) -> str:
        path = Path(source)
        try:
            text = path.read_text(encoding="utf-8")
        except OSError as e:
            raise PayloadFetchError(f"Failed to read {path}: {e}") from e
        logger.info("Read payload from %s", path, extra={"step": "fetch"})
        return text
