"""
Health check routes.
"""

from fastapi import APIRouter, Depends, Response, status

from lendshelf import __version__
from lendshelf.api.dependencies import ServiceContainer, get_service_container
from lendshelf.api.schemas import HealthResponse

router = APIRouter(prefix="/health", tags=["System"])


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Liveness check. Does not touch the database."""
    return HealthResponse(status="healthy", version=__version__)


@router.get(
    "/db",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse, "description": "Database unreachable"}},
)
async def health_check_db(
    response: Response,
    container: ServiceContainer = Depends(get_service_container),
) -> HealthResponse:
    """Readiness check. Runs a trivial query against the database."""
    if await container.pool.ping():
        return HealthResponse(
            status="healthy",
            version=__version__,
            components={"database": "healthy"},
        )

    response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    return HealthResponse(
        status="unhealthy",
        version=__version__,
        components={"database": "unreachable"},
    )
