from fastapi import APIRouter, Request

from api.dependencies.rate_limits import get_limiter
from infrastructure.services import get_settings

router = APIRouter(tags=["System"])
limiter = get_limiter()


def system_rate_limit() -> str:
    return get_settings().server.SYSTEM_RATE_LIMIT


# Load balancer health checks hit these frequently; the limit stays generous.
@router.get("/version")
@limiter.limit(system_rate_limit)
def get_version(request: Request):  # pylint: disable=unused-argument
    """Get the version of the application."""
    return {"version": get_settings().GIT_SHA}


@router.get("/health")
@limiter.limit(system_rate_limit)
def get_health(request: Request):  # pylint: disable=unused-argument
    """Healthcheck endpoint."""
    return {"status": "ok"}
