# src/novelhub/scripts/publish_due.py
"""
Cron job to publish scheduled chapters and purge expired view credits.

Run this from crontab (for example once a minute) when no external HTTP
scheduler calls the ``/api/v1/cron/publish`` endpoint:
1. Publish every SCHEDULED chapter whose publish time has passed
2. Delete view-credit ledger rows whose day window has closed
"""

from __future__ import annotations

import argparse
import logging
import sys
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError

from novelhub.core.errors import StoreUnavailableError
from novelhub.db.session import SessionLocal
from novelhub.db.time import as_utc
from novelhub.repositories.content_store import ContentStore
from novelhub.services.publishing import PublicationSweeper
from novelhub.services.views import ViewAccountingService

logger = logging.getLogger(__name__)


def _parse_now(value: str) -> datetime:
    try:
        return as_utc(datetime.fromisoformat(value))
    except ValueError as err:
        raise argparse.ArgumentTypeError(f"invalid ISO-8601 instant: {value!r}") from err


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Publish due chapters and purge expired view credits")
    parser.add_argument(
        "--now",
        type=_parse_now,
        default=None,
        help="Treat this ISO-8601 instant as the current time (defaults to now)",
    )
    parser.add_argument(
        "--skip-purge",
        action="store_true",
        help="Do not delete expired view-credit rows.",
    )
    parser.add_argument(
        "--no-notify",
        action="store_true",
        help="Publish without notifying library followers.",
    )
    return parser


def run(now: datetime | None = None, *, purge: bool = True, notify: bool = True) -> int:
    """Run one sweep (and purge); return a process exit code.

    Exit codes: 0 on success, 1 when the store is unavailable or the purge
    fails, 2 when some chapters could not be published.
    """
    with SessionLocal() as db:
        store = ContentStore(db)
        try:
            result = PublicationSweeper(store, notify_subscribers=notify).sweep(now)
        except StoreUnavailableError as exc:
            print(f"[publish_due] ERROR: {exc}", file=sys.stderr)
            return 1

        print(f"[publish_due] published {result.published_count} chapter(s): {result.published_ids}")
        if result.failed_ids:
            print(f"[publish_due] failed to publish: {result.failed_ids}", file=sys.stderr)

        if purge:
            try:
                removed = ViewAccountingService(store).purge_expired_credits(now)
            except SQLAlchemyError:
                logger.exception("Failed to purge expired view credits")
                print("[publish_due] ERROR: could not purge expired view credits", file=sys.stderr)
                return 1
            print(f"[publish_due] purged {removed} expired view credit(s)")

    return 2 if result.failed_ids else 0


def main(argv: list[str] | None = None) -> None:
    logging.basicConfig(level=logging.INFO)
    args = build_parser().parse_args(argv)
    sys.exit(run(args.now, purge=not args.skip_purge, notify=not args.no_notify))


if __name__ == "__main__":
    main()
