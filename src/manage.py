"""Storefront notifications management CLI.

Database schema commands plus the two periodic jobs an external cron
invokes (every minute for scheduled notifications, every ~15 minutes for
triggers).

Usage:
    python src/manage.py setup-db            # Create all tables
    python src/manage.py drop-db             # Drop all tables
    python src/manage.py process-scheduled   # Release due scheduled notifications
    python src/manage.py process-triggers    # Cart reminders and restock alerts
"""

import argparse
import sys
from datetime import datetime

import structlog

logger = structlog.get_logger(__name__)


def _domain():
    from notifications.domain import notifications

    notifications.init()
    return notifications


def setup_database():
    from notifications.utils.db import setup_db

    domain = _domain()
    print("Creating notifications database schema...")
    setup_db(domain)
    print("Done.")


def drop_database():
    from notifications.utils.db import drop_db

    domain = _domain()
    print("Dropping notifications database schema...")
    drop_db(domain)
    print("Done.")


def process_scheduled(as_of: datetime | None = None) -> dict:
    from notifications.notification.scheduler import ProcessScheduledNotifications

    domain = _domain()
    with domain.domain_context():
        result = domain.process(ProcessScheduledNotifications(as_of=as_of), asynchronous=False)
    logger.info("process-scheduled finished", **result)
    return result


def process_triggers(as_of: datetime | None = None) -> dict:
    from notifications.trigger.engine import ProcessNotificationTriggers

    domain = _domain()
    with domain.domain_context():
        result = domain.process(ProcessNotificationTriggers(as_of=as_of), asynchronous=False)
    logger.info("process-triggers finished", **result)
    return result


def main():
    from notifications.utils.logging import configure_logging

    parser = argparse.ArgumentParser(description="Storefront notifications management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    for name, help_text in (
        ("process-scheduled", "Release scheduled notifications that are due"),
        ("process-triggers", "Send due abandoned-cart reminders and restock alerts"),
    ):
        job = subparsers.add_parser(name, help=help_text)
        job.add_argument(
            "--as-of",
            type=datetime.fromisoformat,
            default=None,
            help="Evaluate as of this ISO-8601 time (default: now)",
        )

    args = parser.parse_args()
    configure_logging(log_file_prefix="notifications-cli")

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "process-scheduled":
        print(process_scheduled(args.as_of))
    elif args.command == "process-triggers":
        print(process_triggers(args.as_of))
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
