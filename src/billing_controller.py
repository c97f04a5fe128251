"""
Billing Controller - Unlinks a project from its billing account.
"""

import logging
from typing import Any, Dict, Optional, Tuple

import requests

from metadata import MetadataResolver, resolve_project_number

logger = logging.getLogger(__name__)

CLOUD_BILLING_URL = "https://cloudbilling.googleapis.com/v1"


def build_disable_request(project_number: str) -> Tuple[str, Dict[str, Any]]:
    """
    Build the URL and body that unlink a project's billing account.

    An empty billingAccountName detaches the project from its billing account.

    Args:
        project_number: Numeric project ID

    Returns:
        Tuple of (billing info URL, JSON body)
    """
    name = f"projects/{project_number}/billingInfo"
    return f"{CLOUD_BILLING_URL}/{name}", {"name": name, "billingAccountName": ""}


class BillingController:
    """Issues the billing unlink call for a project."""

    def __init__(
        self,
        resolver: Optional[MetadataResolver] = None,
        dry_run: bool = False,
        timeout: Optional[float] = None,
    ):
        """
        Initialize the billing controller.

        Args:
            resolver: MetadataResolver for project number fallback and tokens
            dry_run: If True, log the unlink without calling the billing API
            timeout: Seconds to wait for the billing call (None waits forever)
        """
        self.resolver = resolver or MetadataResolver(timeout=timeout)
        self.dry_run = dry_run
        self.timeout = timeout

        if self.dry_run:
            logger.info("DRY-RUN MODE: Billing will not be unlinked")

    def disable_billing(self, project_number: str) -> bool:
        """
        Unlink billing for a project in a single attempt.

        Args:
            project_number: Numeric project ID; looked up on the metadata
                            server when empty

        Returns:
            bool: True if the billing API answered 200, False otherwise
        """
        project_number = resolve_project_number(project_number, self.resolver)
        if not project_number:
            logger.error("FAILURE: Could not determine Project Number.")
            return False

        url, body = build_disable_request(project_number)

        if self.dry_run:
            logger.info("DRY-RUN: Would unlink billing for project %s (PUT %s)", project_number, url)
            return True

        token = self.resolver.get_access_token()
        if token is None:
            logger.error("Token Error: could not obtain an access token for project %s", project_number)
            return False
        if not token:
            logger.warning("Access token is empty, billing call will likely be rejected")

        logger.debug("Executing PUT to [%s]", url)
        headers = {
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

        try:
            response = requests.put(url, json=body, headers=headers, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error("Request Error: %s", e)
            return False

        if response.status_code == 200:
            logger.info("SUCCESS: Project %s unlinked from billing.", project_number)
            return True

        logger.error(
            "FAILURE: Status %s %s - Body: %s",
            response.status_code,
            response.reason,
            response.text,
        )
        return False
