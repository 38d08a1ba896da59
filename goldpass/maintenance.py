"""One-off maintenance jobs over the members table.

Used by scripts/migrate_short_urls.py and scripts/fix_member_urls.py.
Each job processes members one at a time; a failure on one member is
logged and counted, and the job moves on.
"""

import logging
import re
from dataclasses import dataclass, field
from urllib.parse import parse_qs, urlsplit

from goldpass.exceptions import GoldPassError
from goldpass.passes.urls import sanitize_url
from goldpass.services import Services

log = logging.getLogger(__name__)

SHORT_PATH = re.compile(r"/s/([0-9a-f]{8})$")


@dataclass
class JobReport:
    processed: int = 0
    updated: int = 0
    skipped: int = 0
    failed: list[str] = field(default_factory=list)

    def summary(self) -> str:
        return (
            f"processed={self.processed} updated={self.updated} "
            f"skipped={self.skipped} failed={len(self.failed)}"
        )


def migrate_short_urls(services: Services, dry_run: bool = False) -> JobReport:
    """Give every member with no short_urls mapping a fresh short link.

    The old plaintext edit token is unrecoverable from its hash, so a new
    edit token is minted; its hash replaces edit_token_hash and the short
    link carries the new plaintext. Existing passes pick up the new link
    the next time they are downloaded.
    """
    total = len(services.store.list_all())
    candidates = services.store.list_without_short_links()
    report = JobReport(processed=total, skipped=total - len(candidates))
    for member in candidates:
        if dry_run:
            log.info(f"Would migrate {member.uid}", extra={"uid": member.uid})
            report.updated += 1
            continue
        try:
            token = services.tokens.generate_edit_token()
            short_id = services.short_links.create(member.uid, token)
            services.store.update(
                member.uid,
                edit_token_hash=services.tokens.hash_token(token),
                profile_url=services.short_links.create_short_url(short_id),
            )
            report.updated += 1
            log.info(f"Migrated {member.uid} to /s/{short_id}", extra={"uid": member.uid})
        except GoldPassError as e:
            report.failed.append(member.uid)
            log.error(f"Migration failed for {member.uid}: {e}", extra={"uid": member.uid})
    return report


def rebased_urls(services: Services, uid: str, profile_url: str | None) -> tuple[str, str]:
    """Public and profile URLs for uid under the configured base URL."""
    public_url = sanitize_url(services.public_url(uid))
    if not profile_url:
        return public_url, sanitize_url(f"{services.base_url}/complete/{uid}")

    parts = urlsplit(sanitize_url(profile_url))
    match = SHORT_PATH.search(parts.path)
    if match:
        return public_url, services.short_links.create_short_url(match.group(1))

    token = parse_qs(parts.query).get("token", [""])[0]
    suffix = f"?token={token}" if token else ""
    return public_url, sanitize_url(f"{services.base_url}/complete/{uid}{suffix}")


def fix_member_urls(services: Services, dry_run: bool = False) -> JobReport:
    """Rewrite public_url and profile_url against the configured base URL."""
    report = JobReport()
    for member in services.store.list_all():
        report.processed += 1
        public_url, profile_url = rebased_urls(services, member.uid, member.profile_url)
        if member.public_url == public_url and member.profile_url == profile_url:
            report.skipped += 1
            continue
        if dry_run:
            log.info(f"Would rewrite URLs for {member.uid}", extra={"uid": member.uid})
            report.updated += 1
            continue
        try:
            services.store.update(member.uid, public_url=public_url, profile_url=profile_url)
            report.updated += 1
        except GoldPassError as e:
            report.failed.append(member.uid)
            log.error(f"URL fix failed for {member.uid}: {e}", extra={"uid": member.uid})
    return report
