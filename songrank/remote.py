"""Fetch tables from published spreadsheet URLs."""

from urllib.parse import urlparse

import httpx

# Import sources to register them
from songrank.sources import csv_source  # noqa: F401
from songrank.sources import html_source  # noqa: F401

from songrank.errors import AnalysisError
from songrank.sources import detect_source, detect_source_by_content, get_supported_url_formats
from songrank.store import Table


def fetch_url(url: str, client: httpx.Client | None = None) -> bytes:
    """Fetch the raw content of a URL.

    Raises:
        AnalysisError: If the URL is invalid or the request fails
    """
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https"):
        raise AnalysisError(f"Invalid URL scheme: {parsed.scheme}")

    try:
        if client is not None:
            response = client.get(url)
            response.raise_for_status()
            return response.content
        with httpx.Client(follow_redirects=True, timeout=30.0) as own_client:
            response = own_client.get(url)
            response.raise_for_status()
            return response.content
    except httpx.HTTPStatusError as e:
        raise AnalysisError(f"HTTP error fetching URL: {e.response.status_code}")
    except httpx.RequestError as e:
        raise AnalysisError(f"Error fetching URL: {e}")


def parse_table(source: str, content: bytes) -> Table:
    """Parse fetched content, picking the format by URL and then by content.

    Raises:
        AnalysisError: If no format matches or parsing fails
    """
    parser = detect_source(source) or detect_source_by_content(content, source)
    if parser is None:
        raise AnalysisError(
            f"We couldn't determine the table format of {source}.\n\n"
            f"{get_supported_url_formats()}"
        )
    try:
        return parser.parse(source, content)
    except ValueError as e:
        raise AnalysisError(f"Failed to parse table: {e}") from e


def load_remote_table(url: str, client: httpx.Client | None = None) -> Table:
    return parse_table(url, fetch_url(url, client))
