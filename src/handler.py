"""
HTTP handler for budget alert push notifications.
"""

import base64
import binascii
import json
import logging
import math
from typing import Any, Dict

import functions_framework

from billing_controller import BillingController
from config import load_settings
from metadata import MetadataResolver, resolve_project_number

logger = logging.getLogger(__name__)

DISABLE_THRESHOLD = 1.0

# Optional budget fields carried along for logging
ALERT_CONTEXT_FIELDS = ("budgetDisplayName", "costAmount", "budgetAmount", "currencyCode")


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


class EnvelopeError(ValueError):
    """The push envelope could not be decoded."""


class AlertPayloadError(ValueError):
    """The alert payload inside the envelope could not be decoded."""


def decode_envelope(body: bytes) -> Dict[str, Any]:
    """
    Decode a push envelope.

    Args:
        body: Raw request body

    Returns:
        Dictionary with "data" (decoded payload bytes, empty when absent)
        and "attributes" (message attributes)

    Raises:
        EnvelopeError: If the body is not a JSON object or data is not valid base64
    """
    try:
        envelope = json.loads(body, parse_constant=_reject_constant)
    except (TypeError, ValueError) as e:
        raise EnvelopeError(f"invalid JSON body: {e}") from e

    if not isinstance(envelope, dict):
        raise EnvelopeError(f"expected a JSON object, got {type(envelope).__name__}")

    message = envelope.get("message")
    if message is None:
        message = {}
    if not isinstance(message, dict):
        raise EnvelopeError("message must be a JSON object")

    raw_data = message.get("data")
    if raw_data is None:
        data = b""
    elif isinstance(raw_data, str):
        try:
            data = base64.b64decode(raw_data, validate=True)
        except binascii.Error as e:
            raise EnvelopeError(f"message data is not valid base64: {e}") from e
    else:
        raise EnvelopeError("message data must be a base64 string")

    attributes = message.get("attributes") or {}
    if not isinstance(attributes, dict):
        attributes = {}

    return {"data": data, "attributes": attributes}


def parse_alert_payload(data: bytes) -> Dict[str, Any]:
    """
    Parse the budget alert carried in the envelope.

    Args:
        data: Decoded message data

    Returns:
        Dictionary with "threshold" plus any optional budget fields present

    Raises:
        AlertPayloadError: If data is not a JSON object or the threshold is not numeric
    """
    try:
        payload = json.loads(data, parse_constant=_reject_constant)
    except (TypeError, ValueError) as e:
        raise AlertPayloadError(f"invalid JSON payload: {e}") from e

    if not isinstance(payload, dict):
        raise AlertPayloadError(f"expected a JSON object, got {type(payload).__name__}")

    threshold = payload.get("alertThresholdExceeded", 0.0)
    if isinstance(threshold, bool) or not isinstance(threshold, (int, float)):
        raise AlertPayloadError(f"alertThresholdExceeded must be a number, got {threshold!r}")
    try:
        threshold = float(threshold)
    except OverflowError as e:
        raise AlertPayloadError(f"alertThresholdExceeded out of range: {e}") from e
    # 1e400 parses to inf
    if not math.isfinite(threshold):
        raise AlertPayloadError(f"alertThresholdExceeded must be finite, got {threshold!r}")

    alert = {"threshold": threshold}
    for field in ALERT_CONTEXT_FIELDS:
        if field in payload:
            alert[field] = payload[field]
    return alert


@functions_framework.http
def billing_alert_handler(request):
    """
    HTTP entry point for budget alert push notifications.

    Args:
        request: flask.Request carrying the push envelope

    Returns:
        ("", 200) once the envelope decodes, ("Bad Request", 400) otherwise
    """
    try:
        envelope = decode_envelope(request.get_data())
    except EnvelopeError as e:
        logger.error("Error decoding: %s", e)
        return "Bad Request", 400

    try:
        alert = parse_alert_payload(envelope["data"])
    except AlertPayloadError as e:
        logger.error("Error unmarshaling inner data: %s", e)
        return "", 200

    logger.info("Alert received! Threshold: %.2f", alert["threshold"])
    attributes = envelope["attributes"]
    if attributes:
        logger.info(
            "Budget %s on billing account %s",
            attributes.get("budgetId", "unknown"),
            attributes.get("billingAccountId", "unknown"),
        )
    context = {k: v for k, v in alert.items() if k != "threshold"}
    if context:
        logger.debug("Alert details: %s", context)

    if alert["threshold"] < DISABLE_THRESHOLD:
        return "", 200

    settings = load_settings()
    resolver = MetadataResolver(timeout=settings["http_timeout"])
    project_number = resolve_project_number(settings["project_number"], resolver)

    if not project_number:
        logger.error("ERROR: Threshold reached but Project Number is unknown!")
        return "", 200

    logger.warning("CRITICAL: 100% threshold reached. Initiating billing disconnect...")
    controller = BillingController(
        resolver, dry_run=settings["dry_run"], timeout=settings["http_timeout"]
    )
    controller.disable_billing(project_number)

    return "", 200
