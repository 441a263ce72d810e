"""CWA open-data client for the earthquake catalogs.

Two file-API datasets are used:

- ``E-A0073-001``: earthquake catalog for the current year (XML)
- ``E-A0073-002``: historical earthquake catalog (ZIP holding one XML)

Both require an authorization code issued by the CWA open-data platform.

Example:
    >>> with CWAClient(auth_code="CWA-...") as client:
    ...     current = client.fetch_current_year()
    ...     history = client.fetch_history()
"""

import logging

import httpx

from quakelib.api_client import BaseAPIClient
from quakelib.cache import ResponseCache
from shindo_outlook.cwa.parser import extract_catalog_xml, parse_catalog_xml

logger = logging.getLogger(__name__)

BASE_URL = "https://opendata.cwa.gov.tw/fileapi/v1/opendataapi"
CURRENT_YEAR_DATASET = "E-A0073-001"
HISTORY_DATASET = "E-A0073-002"


class CWAClient(BaseAPIClient):
    """Client for the CWA earthquake catalog file API.

    Args:
        auth_code: CWA open-data authorization code.
        cache_path: Path to SQLite response cache. If None, caching is disabled.
        cache_ttl: Cache lifetime in seconds for the current-year feed.
        transport: Optional httpx transport for testing.
        **kwargs: Additional arguments passed to ``BaseAPIClient``.
    """

    def __init__(
        self,
        auth_code: str,
        cache_path: str | None = None,
        cache_ttl: int = 3600,
        transport: httpx.BaseTransport | None = None,
        **kwargs,
    ):
        cache = None
        if cache_path:
            cache = ResponseCache(db_path=cache_path, ttl=cache_ttl)

        super().__init__(
            base_url=BASE_URL,
            cache=cache,
            transport=transport,
            **kwargs,
        )
        self.auth_code = auth_code

    def _params(self, fmt):
        return {
            "Authorization": self.auth_code,
            "downloadType": "WEB",
            "format": fmt,
        }

    def fetch_current_year(self) -> dict:
        """Download and parse the current-year catalog."""
        xml_text = self.get_text(f"/{CURRENT_YEAR_DATASET}", params=self._params("XML"))
        logger.info("fetched %s (%d chars)", CURRENT_YEAR_DATASET, len(xml_text))
        return parse_catalog_xml(xml_text)

    def fetch_history(self) -> dict:
        """Download, unpack and parse the historical catalog."""
        archive = self.get_bytes(f"/{HISTORY_DATASET}", params=self._params("ZIP"))
        logger.info("fetched %s (%d bytes)", HISTORY_DATASET, len(archive))
        return parse_catalog_xml(extract_catalog_xml(archive))
