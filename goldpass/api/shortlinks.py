"""Short link redirect: GET /s/{short_id}."""

import logging

from fastapi import APIRouter, BackgroundTasks, Depends
from fastapi.responses import RedirectResponse

from goldpass.api.deps import get_services
from goldpass.audit.events import API_ERROR, PROFILE_OPENED
from goldpass.exceptions import NotFoundError, StoreUnavailableError
from goldpass.services import Services

log = logging.getLogger(__name__)
router = APIRouter(tags=["links"])


def record_open(services: Services, short_id: str, uid: str) -> None:
    services.short_links.record_access(short_id)
    services.events.emit(uid, PROFILE_OPENED, {"short_id": short_id})


@router.get("/s/{short_id}")
def follow_short_link(
    short_id: str,
    background_tasks: BackgroundTasks,
    services: Services = Depends(get_services),
):
    """Redirect to the profile-completion page, or to / if unresolvable."""
    try:
        target = services.short_links.resolve(short_id)
    except NotFoundError:
        log.info(f"Unknown short link {short_id!r}")
        return RedirectResponse(url="/", status_code=302)
    except StoreUnavailableError:
        background_tasks.add_task(services.events.emit, None, API_ERROR, {"route": "/s/{short_id}"})
        return RedirectResponse(url="/", status_code=302, background=background_tasks)

    background_tasks.add_task(record_open, services, short_id, target.uid)
    return RedirectResponse(
        url=services.short_links.completion_url(target),
        status_code=302,
        background=background_tasks,
    )
