"""
Tests for the backend HTTP client against an in-process aiohttp server.
"""

import socket
from unittest.mock import Mock

import aiohttp
import pytest
import pytest_asyncio
from aiohttp import web
from aiohttp import test_utils

from config import settings
from dashboard_data.api.api_client import BackendClient
from dashboard_data.api.api_errors import ApiError, NetworkError, ResponseDecodeError
from dashboard_data.api.backend_api import BackendAPI


class FakeBackend:
    """Records incoming requests and answers with canned responses per path."""

    def __init__(self):
        self.requests = []
        self.responses = {}

    async def handle(self, request: web.Request) -> web.Response:
        self.requests.append({
            "method": request.method,
            "path": request.path,
            "query": dict(request.query),
            "headers": dict(request.headers),
        })
        if request.path not in self.responses:
            return web.Response(status=404, text="not found")
        status, body = self.responses[request.path]
        if isinstance(body, str):
            return web.Response(status=status, text=body)
        return web.json_response(body, status=status)


@pytest_asyncio.fixture
async def backend():
    fake = FakeBackend()
    app = web.Application()
    app.router.add_route("*", "/{tail:.*}", fake.handle)
    server = test_utils.TestServer(app)
    await server.start_server()
    fake.url = f"http://{server.host}:{server.port}"
    try:
        yield fake
    finally:
        await server.close()


def unused_port() -> int:
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.mark.asyncio
async def test_request_returns_parsed_json(backend):
    backend.responses["/health"] = (200, {"status": "OK", "timestamp": 1700000000000})

    async with BackendClient(base_url=backend.url, api_key="") as client:
        data = await client.request("/health")

    assert data == {"status": "OK", "timestamp": 1700000000000}
    assert backend.requests[0]["method"] == "GET"


@pytest.mark.asyncio
async def test_request_sends_json_content_type_and_query(backend):
    backend.responses["/api/binance/prices"] = (200, {"BTCUSDT": "45000.00"})

    async with BackendClient(base_url=backend.url + "/", api_key="") as client:
        await client.request("/api/binance/prices", {"symbols": "BTCUSDT,ETHUSDT", "skip": None})

    sent = backend.requests[0]
    assert sent["headers"]["Content-Type"] == "application/json"
    assert sent["query"] == {"symbols": "BTCUSDT,ETHUSDT"}
    assert "x-api-key" not in {k.lower() for k in sent["headers"]}


@pytest.mark.asyncio
async def test_api_key_header_attached_when_configured(backend):
    backend.responses["/health"] = (200, {"status": "OK"})

    async with BackendClient(base_url=backend.url, api_key="secret-key") as client:
        await client.request("/health")

    headers = {k.lower(): v for k, v in backend.requests[0]["headers"].items()}
    assert headers["x-api-key"] == "secret-key"


@pytest.mark.asyncio
async def test_placeholder_api_key_is_not_sent(backend):
    backend.responses["/health"] = (200, {"status": "OK"})

    async with BackendClient(base_url=backend.url, api_key=settings.API_KEY_PLACEHOLDER) as client:
        await client.request("/health")

    assert "x-api-key" not in {k.lower() for k in backend.requests[0]["headers"]}


@pytest.mark.asyncio
async def test_non_2xx_raises_api_error_with_status_and_body(backend):
    backend.responses["/api/binance/portfolio"] = (500, "db down")

    async with BackendClient(base_url=backend.url, api_key="") as client:
        with pytest.raises(ApiError) as exc_info:
            await client.request("/api/binance/portfolio")

    error = exc_info.value
    assert error.status == 500
    assert error.status_text == "Internal Server Error"
    assert error.body == "db down"
    assert "500" in str(error)
    assert "db down" in str(error)


@pytest.mark.asyncio
async def test_invalid_json_raises_decode_error(backend):
    backend.responses["/health"] = (200, "<html>oops</html>")

    async with BackendClient(base_url=backend.url, api_key="") as client:
        with pytest.raises(ResponseDecodeError) as exc_info:
            await client.request("/health")

    assert exc_info.value.body == "<html>oops</html>"


@pytest.mark.asyncio
async def test_unreachable_backend_raises_network_error():
    base_url = f"http://127.0.0.1:{unused_port()}"

    async with BackendClient(base_url=base_url, api_key="") as client:
        with pytest.raises(NetworkError) as exc_info:
            await client.request("/health")

    assert exc_info.value.url == f"{base_url}/health"
    assert "Make sure the backend server is running" in str(exc_info.value)


@pytest.mark.asyncio
async def test_defaults_come_from_settings(monkeypatch):
    monkeypatch.setattr(settings, "API_URL", "http://backend.local:4000/")
    monkeypatch.setattr(settings, "API_KEY", "from-env")

    client = BackendClient()

    assert client.base_url == "http://backend.local:4000"
    assert client._build_headers()["x-api-key"] == "from-env"
    await client.close()


def failing_session(error: Exception) -> Mock:
    session = Mock(closed=False)
    session.request = Mock(side_effect=error)
    return session


@pytest.mark.asyncio
@pytest.mark.parametrize("error", [
    aiohttp.ClientPayloadError("Response payload is not completed"),
    aiohttp.InvalidURL("http://backend:notaport/health"),
])
async def test_other_client_errors_become_network_error(error):
    client = BackendClient(base_url="http://backend.local:4000", api_key="",
                           session=failing_session(error))

    with pytest.raises(NetworkError) as exc_info:
        await client.request("/health")

    assert exc_info.value.url == "http://backend.local:4000/health"
    assert exc_info.value.__cause__ is error
    await client.close()


@pytest.mark.asyncio
async def test_truncated_response_keeps_accessor_prefix():
    client = BackendClient(base_url="http://backend.local:4000", api_key="",
                           session=failing_session(aiohttp.ClientPayloadError("truncated")))
    api = BackendAPI(client)

    with pytest.raises(NetworkError) as exc_info:
        await api.fetch_portfolio()

    assert str(exc_info.value).startswith("Failed to fetch portfolio: Network error")
