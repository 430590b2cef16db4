"""Health check endpoint with store connectivity check."""

from fastapi import APIRouter

from sarvatra.api.deps import SettingsDep, StoreDep
from sarvatra.schemas.health import HealthResponse

router = APIRouter()


@router.get("/", response_model=HealthResponse)
def get_health(store: StoreDep, settings: SettingsDep) -> HealthResponse:
    """
    Return service health status and store connectivity.
    Public; used by load balancers and monitoring.
    """
    return HealthResponse(
        status="ok",
        environment=settings.APP_ENV,
        store=store.backend,
        database="connected" if store.ping() else "disconnected",
    )
