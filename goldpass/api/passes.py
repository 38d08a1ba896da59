"""Gold Pass issuance: GET/POST /passes/gold.

Builds the payload from the member record, has the external signer
produce the .pkpass archive and streams it back. Nothing partial is ever
returned: signer failures become a 503 JSON body.
"""

import logging
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends
from fastapi.responses import Response
from starlette.concurrency import run_in_threadpool

from goldpass.api.deps import get_services
from goldpass.api.models import PassRequest
from goldpass.audit.events import PASS_ISSUED
from goldpass.exceptions import NotFoundError, PassInactiveError, StoreUnavailableError, ValidationError
from goldpass.passes.signer import PKPASS_CONTENT_TYPE
from goldpass.services import Services

log = logging.getLogger(__name__)
router = APIRouter(prefix="/passes", tags=["passes"])


def record_issue(services: Services, uid: str, serial: str) -> None:
    """Backfill pass_serial and log issuance. Best-effort."""
    try:
        services.store.update(uid, pass_serial=serial, pass_last_generated_at=datetime.utcnow())
    except StoreUnavailableError:
        log.warning(f"Could not record pass serial for {uid}", extra={"uid": uid})
    services.events.emit(uid, PASS_ISSUED, {"serial": serial, "family": services.gold_passes.family.name})


async def issue_gold_pass(services: Services, uid: Optional[str], background_tasks: BackgroundTasks) -> Response:
    if not uid:
        raise ValidationError(["uid parameter required"])

    member = await run_in_threadpool(services.store.find_by_uid, uid)
    if member is None:
        raise NotFoundError.member(uid)
    if not member.is_active:
        raise PassInactiveError()

    payload = services.gold_passes.build(member, relevant_date=datetime.utcnow())
    signed = await services.signer.sign(payload)

    background_tasks.add_task(record_issue, services, member.uid, signed.serial)
    log.info(f"Gold pass generated for {member.uid} serial={signed.serial}", extra={"uid": member.uid})

    return Response(
        content=signed.data,
        media_type=PKPASS_CONTENT_TYPE,
        headers={
            "Content-Disposition": f'attachment; filename="HushhGold-{member.uid}.pkpass"',
            "X-Pass-Serial": signed.serial,
            "X-Pass-Type": "gold",
            "Cache-Control": "no-cache, no-store, must-revalidate",
        },
        background=background_tasks,
    )


@router.get("/gold")
async def get_gold_pass(
    background_tasks: BackgroundTasks,
    uid: Optional[str] = None,
    services: Services = Depends(get_services),
) -> Response:
    """Download the member's Gold Pass as application/vnd.apple.pkpass."""
    return await issue_gold_pass(services, uid, background_tasks)


@router.post("/gold")
async def post_gold_pass(
    body: PassRequest,
    background_tasks: BackgroundTasks,
    services: Services = Depends(get_services),
) -> Response:
    """Same as GET, with the UID in a JSON body."""
    return await issue_gold_pass(services, body.uid, background_tasks)
