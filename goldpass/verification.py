"""Public membership verification.

A QR scan of a pass lands on GET /u/{uid}. verify_member() turns the
stored record into a VerificationResult; both the JSON body and the HTML
card are rendered from that one value.
"""

import logging
from dataclasses import dataclass

from goldpass.db.store import PASS_STATUS_ACTIVE, PASS_STATUS_VOIDED, MemberStore
from goldpass.exceptions import StoreUnavailableError

log = logging.getLogger(__name__)

STATUS_ACTIVE = PASS_STATUS_ACTIVE
STATUS_VOIDED = PASS_STATUS_VOIDED
STATUS_NOT_FOUND = "not_found"
STATUS_ERROR = "error"

DEFAULT_TIER = "GOLD"

HTTP_STATUS = {
    STATUS_ACTIVE: 200,
    STATUS_VOIDED: 200,
    STATUS_NOT_FOUND: 404,
    STATUS_ERROR: 500,
}


@dataclass(frozen=True)
class VerificationResult:
    uid: str
    status: str
    tier: str = DEFAULT_TIER
    member_name: str | None = None

    @property
    def verified(self) -> bool:
        return self.status == STATUS_ACTIVE

    @property
    def found(self) -> bool:
        return self.status in (STATUS_ACTIVE, STATUS_VOIDED)

    @property
    def http_status(self) -> int:
        return HTTP_STATUS[self.status]

    def to_dict(self) -> dict:
        """JSON representation. Not-found and error bodies carry no member data."""
        data = {"uid": self.uid, "tier": self.tier, "status": self.status}
        if self.found:
            data["memberName"] = self.member_name
            data["verified"] = self.verified
        return data


def display_name(name: str | None) -> str:
    """First name plus last initial ("Ada L."), or "Member" when empty."""
    parts = (name or "").split()
    if not parts:
        return "Member"
    if len(parts) == 1:
        return parts[0]
    return f"{parts[0]} {parts[-1][0].upper()}."


def verify_member(store: MemberStore, uid: str) -> VerificationResult:
    """Look up uid and classify its pass status. Never raises."""
    try:
        member = store.find_by_uid(uid)
    except StoreUnavailableError:
        log.error(f"Verification lookup failed for {uid}", extra={"uid": uid})
        return VerificationResult(uid=uid, status=STATUS_ERROR)

    if member is None:
        return VerificationResult(uid=uid, status=STATUS_NOT_FOUND)

    return VerificationResult(
        uid=member.uid,
        status=STATUS_ACTIVE if member.is_active else STATUS_VOIDED,
        tier=(member.tier or DEFAULT_TIER).upper(),
        member_name=display_name(member.name),
    )


def _parse_accept(accept: str) -> list[tuple[str, float]]:
    ranges = []
    for item in accept.split(","):
        media, _, params = item.strip().partition(";")
        media = media.strip().lower()
        if not media:
            continue
        q = 1.0
        for param in params.split(";"):
            key, _, value = param.strip().partition("=")
            if key.strip().lower() == "q":
                try:
                    q = float(value)
                except ValueError:
                    q = 0.0
        ranges.append((media, q))
    return ranges


def _quality(ranges: list[tuple[str, float]], media_type: str) -> float:
    """q-value of the most specific range matching media_type."""
    major = media_type.split("/")[0]
    best, specificity = 0.0, -1
    for media, q in ranges:
        if media == media_type:
            rank = 2
        elif media == f"{major}/*":
            rank = 1
        elif media == "*/*":
            rank = 0
        else:
            continue
        if rank > specificity:
            best, specificity = q, rank
    return best


def prefers_html(accept: str | None) -> bool:
    """True when Accept ranks text/html strictly above application/json."""
    if not accept:
        return False
    ranges = _parse_accept(accept)
    return _quality(ranges, "text/html") > _quality(ranges, "application/json")
