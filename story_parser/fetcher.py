"""
Downloads the raw HTML export of a shared document.

This is an I/O collaborator of the parser, not part of it: the parser only
ever sees the returned string. No retries and no authentication: the
document must be shared publicly.
"""

import os
from typing import Optional

import requests

from .exceptions import FetchError
from .logger import get_module_logger

logger = get_module_logger("fetcher")

DEFAULT_EXPORT_URL = "https://docs.google.com/document/d/{doc_id}/export?format=html"
DEFAULT_TIMEOUT = 30.0


def export_url(doc_id: str) -> str:
    """Export URL for a document id (template overridable via STORY_EXPORT_URL)."""
    template = os.getenv("STORY_EXPORT_URL", DEFAULT_EXPORT_URL)
    return template.format(doc_id=doc_id)


def fetch_export(doc_id: str, timeout: Optional[float] = None) -> str:
    """
    Fetch the HTML export of a document.

    Args:
        doc_id: Document id as it appears in the sharing URL
        timeout: Request timeout in seconds (default: STORY_FETCH_TIMEOUT or 30)

    Returns:
        The export as text

    Raises:
        FetchError: network failure or a non-200 response
    """
    if timeout is None:
        timeout = float(os.getenv("STORY_FETCH_TIMEOUT", DEFAULT_TIMEOUT))

    url = export_url(doc_id)
    logger.info(f"Fetching export for {doc_id}")

    try:
        response = requests.get(url, timeout=timeout)
    except requests.RequestException as e:
        raise FetchError(
            f"Could not download document {doc_id}: {e}",
            doc_id=doc_id,
            details={"url": url, "error": str(e)}
        )

    if response.status_code != 200:
        raise FetchError(
            f"Document {doc_id} not found (HTTP {response.status_code}). Is it shared publicly?",
            doc_id=doc_id,
            status_code=response.status_code,
            details={"url": url}
        )

    # The export is UTF-8 but is not always labelled as such
    if 'charset' not in response.headers.get('content-type', '').lower():
        response.encoding = 'utf-8'
    return response.text.strip()
