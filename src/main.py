"""
GCP Billing Kill Switch - Budget Alert Receiver

This service receives budget alert push notifications over HTTP and unlinks the
hosting project from its billing account once spend reaches 100% of the budget.

Main entry point that imports and exposes the handler function. Running this
module directly serves the handler on $PORT.
"""

import logging
import os
import sys

from functions_framework import create_app

from config import load_settings
from handler import billing_alert_handler

# Configure logging
log_level = load_settings()["log_level"]
logging.basicConfig(
    level=getattr(logging, log_level, logging.INFO),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)

HANDLER_SOURCE = os.path.join(os.path.dirname(os.path.abspath(__file__)), "handler.py")


def serve() -> None:
    """Serve billing_alert_handler on every route until the process is stopped."""
    settings = load_settings()
    port = settings["port"]

    app = create_app(target="billing_alert_handler", source=HANDLER_SOURCE, signature_type="http")

    logger.info("Listening on port %s", port)
    try:
        app.run(host="0.0.0.0", port=port)
    # werkzeug reports bind errors by calling sys.exit(1)
    except (OSError, SystemExit) as e:
        logger.critical("Server failed: %s", e)
        sys.exit(1)


# Export for Cloud Functions runtime
__all__ = ["billing_alert_handler", "serve"]


if __name__ == "__main__":
    serve()
