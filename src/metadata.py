"""
Metadata Resolver - Project number and access token lookups against the
instance metadata server.
"""

import logging
from typing import Optional

import requests

logger = logging.getLogger(__name__)

METADATA_BASE_URL = "http://metadata.google.internal/computeMetadata/v1"
PROJECT_NUMBER_URL = f"{METADATA_BASE_URL}/project/numeric-project-id"
ACCESS_TOKEN_URL = f"{METADATA_BASE_URL}/instance/service-accounts/default/token"
METADATA_HEADERS = {"Metadata-Flavor": "Google"}


class MetadataResolver:
    """Best-effort lookups against the local metadata server.

    Every lookup is a single attempt. Failures are logged and reported as None
    so that callers can tell a failed lookup apart from an empty value.
    """

    def __init__(self, timeout: Optional[float] = None):
        """
        Initialize the resolver.

        Args:
            timeout: Seconds to wait for each metadata call (None waits forever)
        """
        self.timeout = timeout

    def _get(self, url: str) -> Optional[requests.Response]:
        try:
            response = requests.get(url, headers=METADATA_HEADERS, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as e:
            logger.error("Metadata request to %s failed: %s", url, e)
            return None
        return response

    def get_project_number(self) -> Optional[str]:
        """
        Fetch the numeric project ID.

        Returns:
            Trimmed project number, or None if the lookup failed
        """
        response = self._get(PROJECT_NUMBER_URL)
        if response is None:
            return None
        return response.text.strip()

    def get_access_token(self) -> Optional[str]:
        """
        Fetch an access token for the default service account.

        A fresh token is requested on every call; nothing is cached.

        Returns:
            Access token ("" if the response carried none), or None if the
            request itself failed
        """
        response = self._get(ACCESS_TOKEN_URL)
        if response is None:
            return None

        try:
            token_data = response.json()
        except ValueError as e:
            logger.warning("Could not parse token response: %s", e)
            return ""

        if not isinstance(token_data, dict):
            logger.warning("Unexpected token response type: %s", type(token_data).__name__)
            return ""
        return token_data.get("access_token") or ""


def resolve_project_number(configured: Optional[str], resolver: MetadataResolver) -> str:
    """
    Resolve the project number: configured value first, then a live lookup.

    Args:
        configured: Explicitly configured project number (may be empty)
        resolver: MetadataResolver used for the fallback lookup

    Returns:
        The project number, or "" if it could not be determined
    """
    if configured:
        return configured

    logger.info(
        "The GCP_PROJECT_NUMBER environment variable is not set. "
        "Requesting the information from metadata server..."
    )
    project_number = resolver.get_project_number()
    if project_number is None:
        logger.warning("Project number lookup on metadata server failed")
        return ""
    return project_number
