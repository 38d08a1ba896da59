#!/usr/bin/env python3
"""Move existing members onto transport-safe short links.

Usage:
    python scripts/migrate_short_urls.py [--dry-run] [--database-url URL]

Members whose profile_url is not already "{base}/s/{id}" get a fresh edit
token and a short link. Configuration (secrets, base URL, database) comes
from the usual GOLDPASS_* environment variables.
"""

import argparse
import sys

from goldpass.logging_config import configure_logging
from goldpass.maintenance import migrate_short_urls
from goldpass.services import build_services


def main():
    parser = argparse.ArgumentParser(
        description="Create short links for members that lack them",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--dry-run", action="store_true", help="Report what would change")
    parser.add_argument("--database-url", help="Override GOLDPASS_DATABASE_URL")
    args = parser.parse_args()

    configure_logging(log_file="")
    services = build_services(args.database_url)
    try:
        report = migrate_short_urls(services, dry_run=args.dry_run)
    finally:
        services.close()

    print(f"Migration {'(dry run) ' if args.dry_run else ''}complete: {report.summary()}")
    if report.failed:
        print("Failed UIDs:")
        for uid in report.failed:
            print(f"  {uid}")
        sys.exit(1)


if __name__ == "__main__":
    main()
