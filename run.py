#!/usr/bin/env python3
"""
Entry point script to watch a remote operation until it finishes.

This script should be run from the project root directory:
    python run.py [SERVER_URL]

Environment variables:
    STATUS_SERVER_URL: Status service base URL (used when no argument is given)
    STATUS_USE_WEBSOCKET: Use the WebSocket transport (default: true)
    STATUS_POLLING_METHOD: fixed, exponential or adaptive (default: fixed)
    STATUS_INITIAL_DELAY / STATUS_MAX_DELAY: Poll delays in ms (default: 1000 / 10000)
    STATUS_MAX_RETRIES: Poll retry budget (default: 50)
    STATUS_TIMEOUT: Overall deadline in ms (default: 60000)
    STATUS_CLIENT_LOG_LEVEL: Log level (default: INFO)
"""
import asyncio
import logging
import sys

from status_client.common.exceptions import StatusClientError
from status_client.common.logging_config import configure_logging
from status_client.config import WatchConfig
from status_client.models import Status
from status_client.services.watcher import watch_status

logger = logging.getLogger("status_client.run")


def main() -> int:
    configure_logging()
    server_url = sys.argv[1] if len(sys.argv) > 1 else None

    try:
        config = WatchConfig.from_env(server_url=server_url)
    except StatusClientError as e:
        logger.error(f"Invalid configuration: {e}")
        return 2

    try:
        status = asyncio.run(watch_status(config))
    except Exception as e:
        logger.error(f"Monitoring failed: {e}")
        return 1

    print(f"Final status: {status.value}")
    return 0 if status == Status.COMPLETED else 1


if __name__ == "__main__":
    sys.exit(main())
