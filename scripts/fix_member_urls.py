#!/usr/bin/env python3
"""Rewrite member URLs against GOLDPASS_BASE_URL.

Usage:
    python scripts/fix_member_urls.py [--dry-run] [--database-url URL]

Run after changing the public domain. public_url becomes "{base}/u/{uid}";
short profile links keep their id and long ones keep their token.
"""

import argparse
import sys

from goldpass.logging_config import configure_logging
from goldpass.maintenance import fix_member_urls
from goldpass.services import build_services


def main():
    parser = argparse.ArgumentParser(
        description="Rewrite member public and profile URLs",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )
    parser.add_argument("--dry-run", action="store_true", help="Report what would change")
    parser.add_argument("--database-url", help="Override GOLDPASS_DATABASE_URL")
    args = parser.parse_args()

    configure_logging(log_file="")
    services = build_services(args.database_url)
    try:
        report = fix_member_urls(services, dry_run=args.dry_run)
    finally:
        services.close()

    print(f"URL fix {'(dry run) ' if args.dry_run else ''}complete: {report.summary()}")
    sys.exit(1 if report.failed else 0)


if __name__ == "__main__":
    main()
