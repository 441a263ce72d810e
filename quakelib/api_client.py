"""HTTP client for the open-data catalog feeds.

``BaseAPIClient`` wraps ``httpx.Client`` with what the CWA file API needs:
a pause between requests, exponential backoff on rate-limit and server
errors, and an optional ``ResponseCache`` for text feeds. Archives are
returned as bytes and never cached, since the cache stores JSON values.

Usage::

    from quakelib.api_client import BaseAPIClient
    from quakelib.cache import ResponseCache

    with BaseAPIClient(
        base_url="https://opendata.cwa.gov.tw/fileapi/v1/opendataapi",
        cache=ResponseCache(db_path="data/cache.db"),
    ) as client:
        xml_text = client.get_text("/E-A0073-001", params={...})
        archive = client.get_bytes("/E-A0073-002", params={...})
"""

import logging
import time

import httpx

from quakelib.cache import ResponseCache

logger = logging.getLogger(__name__)

USER_AGENT = "ShindoOutlook/1.0"
RETRY_STATUS = frozenset({429, 500, 502, 503, 504})
MAX_BACKOFF = 60.0


class BaseAPIClient:
    """GET-only client with retry, request spacing and a text cache.

    Args:
        base_url: Prefix for relative paths; absolute URLs bypass it.
        cache: Optional ``ResponseCache`` for ``get_text``.
        timeout: Request timeout in seconds. The history archive is
            tens of megabytes, hence the generous default.
        rate_limit_delay: Minimum seconds between requests; 0 disables.
        max_retries: Retries after the first attempt.
        backoff_base: First retry delay; doubles per attempt up to a minute.
        transport: Optional httpx transport (``httpx.MockTransport`` in tests).
    """

    def __init__(
        self,
        *,
        base_url: str = "",
        cache: ResponseCache | None = None,
        timeout: float = 120.0,
        rate_limit_delay: float = 0.5,
        max_retries: int = 3,
        backoff_base: float = 2.0,
        transport: httpx.BaseTransport | None = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.cache = cache
        self.rate_limit_delay = rate_limit_delay
        self.max_retries = max_retries
        self.backoff_base = backoff_base

        self._last_request_time = 0.0
        self._request_count = 0
        self._cache_hits = 0

        self._http = httpx.Client(
            timeout=timeout,
            headers={"User-Agent": USER_AGENT},
            follow_redirects=True,
            transport=transport,
        )

    def get_text(self, path: str, params: dict | None = None, use_cache: bool = True) -> str:
        """GET *path* and return the body as text, via the cache if one is set.

        Raises:
            httpx.HTTPStatusError: On a non-retryable status, or once
                retries are exhausted.
        """
        url = self._build_url(path)
        key = ResponseCache.make_key(url, params) if use_cache and self.cache else None

        if key:
            cached = self.cache.get(key)
            if cached is not None:
                self._cache_hits += 1
                logger.debug("cache hit for %s", url)
                return cached

        response = self._request_with_retry(url, params)
        self._request_count += 1
        if key:
            self.cache.put(key, response.text, response.status_code)
        return response.text

    def get_bytes(self, path: str, params: dict | None = None) -> bytes:
        """GET *path* and return the raw body. Never cached."""
        response = self._request_with_retry(self._build_url(path), params)
        self._request_count += 1
        return response.content

    @property
    def stats(self) -> dict:
        return {"requests": self._request_count, "cache_hits": self._cache_hits}

    def close(self) -> None:
        if self._http:
            self._http.close()
            self._http = None
        if self.cache:
            self.cache.close()
            self.cache = None

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.close()

    # --- internals ---

    def _build_url(self, path: str) -> str:
        if path.startswith(("http://", "https://")) or not self.base_url:
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    def _wait_turn(self):
        if self.rate_limit_delay <= 0:
            return
        elapsed = time.time() - self._last_request_time
        if elapsed < self.rate_limit_delay:
            time.sleep(self.rate_limit_delay - elapsed)
        self._last_request_time = time.time()

    def _sleep_before_retry(self, attempt: int, reason: str, url: str):
        delay = min(self.backoff_base * (2 ** attempt), MAX_BACKOFF)
        logger.warning("%s from %s, retrying in %.1fs", reason, url, delay)
        time.sleep(delay)

    def _request_with_retry(self, url: str, params: dict | None) -> httpx.Response:
        """GET with backoff on timeouts, connection errors and RETRY_STATUS.

        The last failure propagates: ``httpx.HTTPStatusError`` for a bad
        status, or the transport exception itself.
        """
        attempt = 0
        while True:
            self._wait_turn()
            try:
                response = self._http.get(url, params=params)
            except (httpx.TimeoutException, httpx.ConnectError) as exc:
                if attempt >= self.max_retries:
                    raise
                self._sleep_before_retry(attempt, type(exc).__name__, url)
                attempt += 1
                continue

            if response.status_code in RETRY_STATUS and attempt < self.max_retries:
                self._sleep_before_retry(attempt, f"HTTP {response.status_code}", url)
                attempt += 1
                continue

            response.raise_for_status()
            return response
