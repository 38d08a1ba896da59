"""Profile completion: POST /profile/complete.

Authorized by the edit token alone. An unknown UID and a wrong token get
the same 403 so the endpoint cannot be used to discover members.
"""

import logging
from datetime import datetime

from fastapi import APIRouter, BackgroundTasks, Depends, Request

from goldpass.api.deps import client_ip, get_services
from goldpass.api.models import ProfileCompleteRequest, ProfileCompleteResponse
from goldpass.audit.events import PROFILE_SAVED
from goldpass.exceptions import AuthorizationError, ValidationError
from goldpass.identity.profile import validate_profile
from goldpass.services import PROFILE_ACTION, Services

log = logging.getLogger(__name__)
router = APIRouter(prefix="/profile", tags=["profile"])


@router.post("/complete", response_model=ProfileCompleteResponse)
def complete_profile(
    body: ProfileCompleteRequest,
    request: Request,
    background_tasks: BackgroundTasks,
    services: Services = Depends(get_services),
) -> ProfileCompleteResponse:
    services.rate_limiter.hit(PROFILE_ACTION, client_ip(request))

    if not body.uid or not body.token:
        raise ValidationError(["uid and token are required"])

    changes = validate_profile(
        city=body.city,
        state=body.state,
        zip_code=body.zip,
        gender=body.gender,
        age=body.age,
        street1=body.street1,
    )

    member = services.store.find_by_uid(body.uid)
    if member is None or not services.tokens.verify_token(body.token, member.edit_token_hash):
        log.warning("Profile update rejected", extra={"uid": body.uid})
        raise AuthorizationError()

    # Member may have been removed between lookup and update
    if not services.store.update(member.uid, last_seen_at=datetime.utcnow(), **changes):
        raise AuthorizationError()

    saved = sorted(k.removeprefix("profile_") for k in changes if k != "profile_last_updated_at")
    background_tasks.add_task(services.events.emit, member.uid, PROFILE_SAVED, {"fields": saved})
    log.info(f"Profile updated for {member.uid}", extra={"uid": member.uid})

    return ProfileCompleteResponse(success=True, message="Profile completed successfully")
