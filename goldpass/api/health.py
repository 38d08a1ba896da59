"""Health check endpoints."""
import logging

from fastapi import APIRouter, Depends
from sqlalchemy import text

from goldpass.api.deps import get_services
from goldpass.api.models import HealthResponse
from goldpass.services import Services

log = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


@router.get("/healthz", response_model=HealthResponse)
def healthz(services: Services = Depends(get_services)) -> HealthResponse:
    """Health check endpoint.

    The service reports ok even when the database ping fails; the
    database flag tells the two apart.
    """
    try:
        with services.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
        return HealthResponse(ok=True, database=True)
    except Exception as e:
        log.warning(f"Health check warning: {e}")
        return HealthResponse(ok=True, database=False)
