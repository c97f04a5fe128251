#!/usr/bin/env python3
"""
Script to send test budget alert push notifications to a running receiver.

This script wraps a budget alert in the same envelope a Pub/Sub push
subscription delivers and POSTs it to the receiver, e.g. one started locally
with `DRY_RUN=true GCP_PROJECT_NUMBER=12345 python src/main.py`.

Usage:
    # Basic usage (critical scenario against localhost:8080)
    python send-budget-alert.py

    # Predefined scenarios
    python send-budget-alert.py --scenario=critical  # 100% threshold, unlinks billing
    python send-budget-alert.py --scenario=high      # 90% threshold, ignored
    python send-budget-alert.py --scenario=warning   # 50% threshold, ignored

    # Explicit threshold and receiver URL
    python send-budget-alert.py --threshold=1.2 --url=https://receiver-abc.a.run.app/
"""

import argparse
import base64
import json
import logging
import os
import sys
from typing import Any, Dict

import requests

logging.basicConfig(level=logging.INFO, format="%(message)s")
logger = logging.getLogger(__name__)


SCENARIOS = {
    "critical": {
        "threshold": 1.0,
        "budget": 1000,
        "cost": 1000,
        "description": "Critical threshold (100%)",
    },
    "high": {
        "threshold": 0.9,
        "budget": 1000,
        "cost": 900,
        "description": "High threshold (90%)",
    },
    "warning": {
        "threshold": 0.5,
        "budget": 1000,
        "cost": 500,
        "description": "Warning threshold (50%)",
    },
}


def create_envelope(
    threshold: float,
    budget_amount: float,
    cost_amount: float,
    billing_account_id: str,
    budget_id: str,
) -> Dict[str, Any]:
    """
    Create a push envelope carrying a budget alert.

    Args:
        threshold: alertThresholdExceeded value (1.0 = 100%)
        budget_amount: Total budget amount
        cost_amount: Current cost amount
        billing_account_id: Billing account ID (message attribute)
        budget_id: Budget ID (message attribute)

    Returns:
        Envelope dictionary ready to be sent as JSON
    """
    alert = {
        "budgetDisplayName": "Test Budget Alert",
        "alertThresholdExceeded": threshold,
        "costAmount": cost_amount,
        "budgetAmount": budget_amount,
        "currencyCode": "USD",
    }
    return {
        "message": {
            "data": base64.b64encode(json.dumps(alert).encode("utf-8")).decode("ascii"),
            "attributes": {
                "billingAccountId": billing_account_id,
                "budgetId": budget_id,
            },
        },
        "subscription": "projects/local-gcp-test-project/subscriptions/billing-alerts-push",
    }


def main():
    """Main function to send a test budget alert."""
    parser = argparse.ArgumentParser(
        description="Send test budget alert push notifications to the receiver",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument(
        "--scenario",
        choices=list(SCENARIOS.keys()),
        default="critical",
        help="Use predefined test scenario (default: critical)",
    )
    parser.add_argument(
        "--threshold",
        type=float,
        help="Explicit alertThresholdExceeded value (overrides the scenario)",
    )
    parser.add_argument(
        "--url",
        default=os.getenv("RECEIVER_URL", "http://localhost:8080/"),
        help="Receiver URL (default: $RECEIVER_URL or http://localhost:8080/)",
    )
    parser.add_argument(
        "--billing-account",
        default="012345-6789AB-CDEF01",
        help="Billing account ID (default: 012345-6789AB-CDEF01)",
    )
    parser.add_argument(
        "--budget-id",
        default="f47ac10b-58cc-4372-a567-0e02b2c3d479",
        help="Budget ID UUID",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=30.0,
        help="Request timeout in seconds (default: 30)",
    )

    args = parser.parse_args()

    scenario = SCENARIOS[args.scenario]
    threshold = args.threshold if args.threshold is not None else scenario["threshold"]
    logger.info("Using scenario: %s - %s", args.scenario, scenario["description"])

    envelope = create_envelope(
        threshold=threshold,
        budget_amount=scenario["budget"],
        cost_amount=scenario["cost"],
        billing_account_id=args.billing_account,
        budget_id=args.budget_id,
    )

    logger.info("")
    logger.info("Sending budget alert to %s:", args.url)
    logger.info("  Threshold:           %.2f", threshold)
    logger.info("  Billing Account ID:  %s", args.billing_account)
    logger.info("  Budget ID:           %s", args.budget_id)
    logger.info("")

    try:
        response = requests.post(args.url, json=envelope, timeout=args.timeout)
    except requests.RequestException as e:
        logger.error("Failed to send alert: %s", e)
        sys.exit(1)

    logger.info("Receiver answered %s %s", response.status_code, response.reason)
    if not response.ok:
        sys.exit(1)


if __name__ == "__main__":
    main()
