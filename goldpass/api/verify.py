"""Public verification endpoint (the QR code target)."""

import logging
from pathlib import Path

from fastapi import APIRouter, BackgroundTasks, Depends, Request
from fastapi.responses import JSONResponse
from fastapi.templating import Jinja2Templates

from goldpass.api.deps import client_ip, get_services
from goldpass.audit.events import API_ERROR, QR_SCANNED
from goldpass.exceptions import StoreUnavailableError
from goldpass.services import Services
from goldpass.verification import STATUS_ERROR, prefers_html, verify_member

log = logging.getLogger(__name__)
router = APIRouter(tags=["verification"])

templates = Jinja2Templates(directory=str(Path(__file__).parent.parent / "templates"))

UTM_PARAMS = ("utm_source", "utm_medium", "utm_campaign")


def record_scan(services: Services, uid: str, meta: dict) -> None:
    """Touch last_seen_at and log the scan. Runs after the response."""
    try:
        services.store.touch_last_seen(uid)
    except StoreUnavailableError:
        log.warning(f"Could not update last_seen_at for {uid}", extra={"uid": uid})
    services.events.emit(uid, QR_SCANNED, meta)


@router.get("/u/{uid}")
def verify(
    uid: str,
    request: Request,
    background_tasks: BackgroundTasks,
    services: Services = Depends(get_services),
):
    """Verify a member by UID.

    Browsers (Accept preferring text/html) get a status card; everything
    else gets JSON. 200 for active or voided passes, 404 for unknown UIDs,
    500 when the store could not be reached.
    """
    result = verify_member(services.store, uid)

    if result.found:
        meta = {
            "user_agent": request.headers.get("user-agent"),
            "ip": client_ip(request),
        }
        meta.update({k: request.query_params.get(k) for k in UTM_PARAMS})
        background_tasks.add_task(record_scan, services, result.uid, meta)
    elif result.status == STATUS_ERROR:
        background_tasks.add_task(services.events.emit, uid, API_ERROR, {"route": "/u/{uid}"})

    if prefers_html(request.headers.get("accept")):
        return templates.TemplateResponse(
            request,
            "verification.html",
            {"result": result},
            status_code=result.http_status,
            background=background_tasks,
        )
    return JSONResponse(
        status_code=result.http_status,
        content=result.to_dict(),
        background=background_tasks,
    )
