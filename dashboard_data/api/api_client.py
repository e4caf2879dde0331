import asyncio
import json
import logging
import time
import urllib.parse
from typing import Any, Dict, Optional

import aiohttp

from config import settings
from config.logging_config import log_endpoint_request
from .api_errors import ApiError, NetworkError, ResponseDecodeError

logger = logging.getLogger(__name__)


class BackendClient:
    """
    Thin HTTP client for the dashboard backend.

    One attempt per call: no retries, no circuit breaking and, unless
    REQUEST_TIMEOUT is configured, no timeout. Callers own retry policy.
    """

    def __init__(self, base_url: Optional[str] = None, api_key: Optional[str] = None,
                 timeout: Optional[float] = None, session: Optional[aiohttp.ClientSession] = None):
        self.base_url = (base_url or settings.API_URL).rstrip('/')
        self.api_key = settings.API_KEY if api_key is None else api_key
        self.timeout = settings.REQUEST_TIMEOUT if timeout is None else timeout
        self.session = session
        self._owns_session = session is None

    async def _get_session(self) -> aiohttp.ClientSession:
        if self.session is None or self.session.closed:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout)
            )
            self._owns_session = True
        return self.session

    def _build_url(self, path: str, params: Optional[Dict[str, Any]] = None) -> str:
        if not path.startswith('/'):
            path = f"/{path}"
        url = f"{self.base_url}{path}"
        if params:
            query = urllib.parse.urlencode(
                {k: v for k, v in params.items() if v is not None}
            )
            if query:
                url = f"{url}?{query}"
        return url

    def _build_headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        headers = {'Content-Type': 'application/json'}
        if extra:
            headers.update(extra)

        # Only a real key is sent; the placeholder from .env templates is ignored
        if settings.has_api_key(self.api_key or ""):
            headers['x-api-key'] = self.api_key
        return headers

    async def request(self, path: str, params: Optional[Dict[str, Any]] = None,
                      method: str = "GET", headers: Optional[Dict[str, str]] = None,
                      json_body: Any = None) -> Any:
        """
        Perform one request against the backend and return the decoded JSON.

        Args:
            path: Endpoint path, e.g. '/api/binance/portfolio'
            params: Query parameters; None values are dropped
            method: HTTP method
            headers: Extra headers merged over the defaults
            json_body: Optional JSON request body

        Returns:
            The parsed JSON value

        Raises:
            NetworkError: the backend could not be reached or the transfer failed
            ApiError: the backend answered with a non-2xx status
            ResponseDecodeError: a 2xx body was not valid JSON
        """
        url = self._build_url(path, params)
        session = await self._get_session()
        started = time.monotonic()

        try:
            async with session.request(method, url, headers=self._build_headers(headers),
                                       json=json_body) as response:
                body = await response.text()
                log_endpoint_request(method, path, response.status, time.monotonic() - started)

                if not 200 <= response.status < 300:
                    raise ApiError(response.status, response.reason or "", body)

                try:
                    return json.loads(body)
                except ValueError:
                    raise ResponseDecodeError(url, body)

        except aiohttp.ClientResponseError as e:
            log_endpoint_request(method, path, e.status, time.monotonic() - started)
            raise ApiError(e.status, e.message or "", "") from e
        except asyncio.TimeoutError as e:
            log_endpoint_request(method, path, "timeout", time.monotonic() - started)
            raise NetworkError(url, "timed out") from e
        except (aiohttp.ClientConnectionError, OSError) as e:
            log_endpoint_request(method, path, "unreachable", time.monotonic() - started)
            logger.warning(f"Backend unreachable at {url}: {e}")
            raise NetworkError(url, str(e)) from e
        except aiohttp.ClientError as e:
            # Truncated bodies, invalid URLs and other client-side transport failures
            log_endpoint_request(method, path, "failed", time.monotonic() - started)
            logger.warning(f"Request to {url} failed: {e!r}")
            raise NetworkError(url, repr(e)) from e

    async def close(self):
        if self.session and self._owns_session and not self.session.closed:
            await self.session.close()
        self.session = None

    async def __aenter__(self) -> "BackendClient":
        await self._get_session()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.close()
