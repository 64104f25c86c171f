"""Submission of SBOMs to the vulnerability-analysis backend.

One request per analysis, no retries and no authentication.
"""

from typing import Any, Optional

import requests

from . import __version__
from .exceptions import BackendError
from .logging_config import logger
from .serialization import CYCLONEDX_MEDIA_TYPE

ANALYSIS_PATH = "/api/v4/analysis"
DEFAULT_TIMEOUT = 120

USER_AGENT = f"sbomgraph/{__version__}"


def get_default_headers(content_type: Optional[str] = None) -> dict:
    """
    Get default HTTP headers with user agent.

    Args:
        content_type: Optional Content-Type header value

    Returns:
        Dictionary of HTTP headers
    """
    headers = {"User-Agent": USER_AGENT, "Accept": "application/json"}
    if content_type:
        headers["Content-Type"] = content_type
    return headers


def submit_sbom(
    backend_url: str,
    sbom: str,
    media_type: str = CYCLONEDX_MEDIA_TYPE,
    timeout: int = DEFAULT_TIMEOUT,
) -> Any:
    """
    Post an SBOM to the backend and return the decoded JSON response.

    Args:
        backend_url: Backend base URL
        sbom: Serialized SBOM document
        media_type: Content-Type of the document
        timeout: Request timeout in seconds

    Returns:
        Decoded JSON response body

    Raises:
        BackendError: If the request fails or the backend rejects it
    """
    url = backend_url.rstrip("/") + ANALYSIS_PATH
    logger.info(f"Submitting SBOM to {url}")

    try:
        response = requests.post(url, data=sbom.encode("utf-8"), headers=get_default_headers(media_type), timeout=timeout)
    except requests.exceptions.ConnectionError as e:
        raise BackendError(f"Failed to connect to backend at {backend_url}") from e
    except requests.exceptions.Timeout as e:
        raise BackendError("Backend request timed out") from e

    if not response.ok:
        raise BackendError(f"Backend rejected the SBOM. [{response.status_code}] {response.text[:500]}")

    try:
        return response.json()
    except ValueError as e:
        raise BackendError("Backend response is not valid JSON") from e
