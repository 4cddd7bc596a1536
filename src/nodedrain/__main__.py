"""
Main entry point for NodeDrain when run as a module.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""
import json
import logging
import signal
import sys
import threading

from nodedrain import settings
from nodedrain.drain import DrainRequest, InvalidDrainRequestException, NodeDrainer
from nodedrain.logging import setup_logging

logger = logging.getLogger(__name__)


def _build_request() -> DrainRequest:
    """Build the drain request from DRAIN_ARGS when set, from the individual settings otherwise.

    :return: Drain request
    :raises InvalidDrainRequestException: If DRAIN_ARGS is not a JSON object
    """
    if not settings.DRAIN_ARGS:
        return DrainRequest.from_settings()
    try:
        args = json.loads(settings.DRAIN_ARGS)
    except ValueError as e:
        raise InvalidDrainRequestException(f"DRAIN_ARGS is not valid JSON: {e}") from e
    if not isinstance(args, dict):
        raise InvalidDrainRequestException("DRAIN_ARGS must be a JSON object")
    return DrainRequest.from_args(args)


def main() -> int:
    """Run the configured NodeDrain action.

    :return: Process exit code, 1 if any pod failed to drain
    """
    setup_logging()
    drainer = NodeDrainer()

    match settings.DRAIN_ACTION:
        case "cordon":
            drainer.cordon(settings.NODE_NAME)
            return 0
        case "uncordon":
            drainer.uncordon(settings.NODE_NAME)
            return 0
        case "drain":
            cancel_event = threading.Event()

            def _cancel(signum, frame) -> None:
                logger.warning(f"Received signal {signum}, cancelling drain")
                cancel_event.set()

            signal.signal(signal.SIGTERM, _cancel)
            report = drainer.run(_build_request(), cancel_event=cancel_event)
            print(report.to_json())
            return 1 if report.failures else 0
        case _:
            raise InvalidDrainRequestException(f"Unknown DRAIN_ACTION '{settings.DRAIN_ACTION}'")


if __name__ == "__main__":
    sys.exit(main())
