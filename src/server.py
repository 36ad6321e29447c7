"""Protean Engine runner for the notifications domain.

Starts the Engine workers that process events asynchronously:
- OutboxProcessor: polls the outbox table, publishes events to Redis Streams
- StreamSubscriptions: reads Redis Streams, invokes projectors and event handlers
  (collaborator events, email dispatch, realtime publishing)

Usage:
    python src/server.py
    python src/server.py --test-mode   # Drain pending messages and exit
"""

import argparse
import asyncio

from notifications.domain import notifications
from notifications.utils.logging import configure_logging
from protean.server.engine import Engine


async def run(test_mode: bool = False):
    notifications.init()
    engine = Engine(notifications, test_mode=test_mode)
    await engine.run()


def main():
    parser = argparse.ArgumentParser(description="Storefront notifications Engine runner")
    parser.add_argument(
        "--test-mode",
        action="store_true",
        help="Process pending messages once and exit",
    )
    args = parser.parse_args()

    configure_logging(log_file_prefix="notifications-engine")
    asyncio.run(run(test_mode=args.test_mode))


if __name__ == "__main__":
    main()
