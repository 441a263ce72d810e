"""CWA open-data client and catalog decoding."""

from .client import CWAClient
from .parser import CatalogFormatError, parse_catalog_xml

__all__ = ["CWAClient", "CatalogFormatError", "parse_catalog_xml"]
