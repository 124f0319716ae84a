from unittest.mock import Mock

import httpx
import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from api.dependencies import rate_limits
from api.routes.system import router as system_router


def test_get_limiter_returns_shared_instance():
    assert rate_limits.get_limiter() is rate_limits.limiter


def test_setup_rate_limiter_registers_state():
    app = FastAPI()

    rate_limits.setup_rate_limiter(app)

    assert app.state.limiter is rate_limits.limiter


@pytest.mark.asyncio
async def test_rate_limit_handler():
    mock_request = Mock(spec=Request)

    response = await rate_limits.rate_limit_handler(mock_request, Mock())

    assert isinstance(response, JSONResponse)
    assert response.status_code == 429
    assert response.body.decode("utf-8") == (
        '{"success":false,"error":"Rate limit exceeded",'
        '"error_code":"RATE_LIMITED","details":null}'
    )


@pytest.mark.asyncio
async def test_system_endpoint_rate_limiting():
    """The system routes allow 50 requests per minute per client."""
    rate_limits.limiter.reset()
    app = FastAPI()
    rate_limits.setup_rate_limiter(app)
    app.include_router(system_router)

    transport = httpx.ASGITransport(app=app)

    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        # Make requests up to the default SYSTEM_RATE_LIMIT of 50/minute
        for _ in range(50):
            response = await client.get("/version")
            assert response.status_code == 200

        response = await client.get("/version")
        assert response.status_code == 429
        assert response.json()["error_code"] == "RATE_LIMITED"
    rate_limits.limiter.reset()
