"""Gold Pass claim endpoint.

POST /claim turns {name, email, phone} into a member record. The UID is
derived from the canonical identity, so claiming twice returns the same
member with existing=true and no new edit token.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, BackgroundTasks, Depends, Request

from goldpass.api.deps import client_ip, get_services
from goldpass.api.models import ClaimRequest, ClaimResponse
from goldpass.audit.events import CLAIM_SUBMITTED
from goldpass.db.store import MemberRecord
from goldpass.exceptions import StoreUnavailableError, UpstreamUnavailableError
from goldpass.identity.canonical import canonicalize
from goldpass.links.shortlinks import ShortLinkTarget
from goldpass.passes.urls import sanitize_url
from goldpass.services import CLAIM_ACTION, Services

log = logging.getLogger(__name__)
router = APIRouter(tags=["claim"])


def _existing_response(services: Services, member: MemberRecord) -> ClaimResponse:
    return ClaimResponse(
        uid=member.uid,
        add_to_wallet_url=services.add_to_wallet_url(member.uid),
        profile_url=member.profile_url,
        existing=True,
    )


def _link_profile(services: Services, uid: str, token: str, long_url: str) -> str:
    """Swap a new member's profile URL to a short link; returns the URL in use.

    The member row already holds the long completion URL, so any store
    failure here leaves a working link behind.
    """
    try:
        short_id = services.short_links.create(uid, token)
        short_url = services.short_links.create_short_url(short_id)
        services.store.update(uid, profile_url=short_url)
    except UpstreamUnavailableError as e:
        log.warning(f"Short link setup failed, keeping long profile URL for {uid}: {e}", extra={"uid": uid})
        return long_url
    return short_url


@router.post("/claim", response_model=ClaimResponse, response_model_exclude_none=True)
def claim(
    body: ClaimRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    services: Services = Depends(get_services),
) -> ClaimResponse:
    """Claim a Gold Pass.

    Returns the member UID, the wallet download URL and the profile
    completion link. editToken is present only when the member was
    created by this call.
    """
    services.rate_limiter.hit(CLAIM_ACTION, client_ip(request))

    identity = canonicalize(body.name, body.email, body.phone, services.default_country_code)
    uid = services.uids.derive(identity)

    member = services.store.find_by_uid(uid)
    if member is not None:
        try:
            services.store.touch_last_seen(uid)
        except StoreUnavailableError as e:
            log.warning(f"Failed to update last_seen_at for {uid}: {e}", extra={"uid": uid})
        background_tasks.add_task(services.events.emit, uid, CLAIM_SUBMITTED, {"existing": True})
        log.info(f"Existing member reclaimed {uid}", extra={"uid": uid})
        return _existing_response(services, member)

    if body.device_id:
        token = services.tokens.generate_owner_token(uid, body.device_id)
    else:
        token = services.tokens.generate_edit_token()

    long_url = sanitize_url(services.short_links.completion_url(ShortLinkTarget(uid=uid, token=token)))
    now = datetime.utcnow()
    record = MemberRecord(
        uid=uid,
        name=identity.name,
        email=identity.email,
        phone_e164=identity.phone_e164,
        edit_token_hash=services.tokens.hash_token(token),
        public_url=sanitize_url(services.public_url(uid)),
        profile_url=long_url,
        created_at=now,
        last_seen_at=now,
    )

    if not services.store.insert(record):
        # Lost a race with a concurrent claim of the same identity
        member = services.store.find_by_uid(uid)
        if member is None:
            raise StoreUnavailableError()
        background_tasks.add_task(services.events.emit, uid, CLAIM_SUBMITTED, {"existing": True})
        return _existing_response(services, member)

    profile_url = _link_profile(services, uid, token, long_url)

    background_tasks.add_task(
        services.events.emit,
        uid,
        CLAIM_SUBMITTED,
        {"existing": False, "device_bound": bool(body.device_id)},
    )
    log.info(f"Created member {uid}", extra={"uid": uid})

    return ClaimResponse(
        uid=uid,
        add_to_wallet_url=services.add_to_wallet_url(uid),
        profile_url=profile_url,
        existing=False,
        edit_token=token,
    )
