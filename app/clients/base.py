"""Shared HTTP plumbing for the REST API clients."""
from typing import Any

import httpx

from app.config.settings import get_settings
from app.core.exceptions import NetworkError, ServerError, error_from_response
from app.core.logging import get_logger
from app.security.session import EditorSession

logger = get_logger(__name__)


class ApiClient:
    """
    Async client for the gym API.

    Responses use the envelope ``{"success": bool, "message": str, "data": ...}``;
    ``request`` returns ``data`` and turns failures into domain errors:
    transport and other request failures raise NetworkError, non-2xx responses raise the error
    mapped from their status code with the server's ``message``.
    """

    def __init__(
        self,
        session: EditorSession | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        settings = get_settings()
        self.session = session or EditorSession()
        self.base_url = (base_url or settings.api_base_url).rstrip('/')
        self.prefix = settings.api_prefix.rstrip('/')
        self.timeout = timeout or settings.api_timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout),
                headers={"Content-Type": "application/json"},
                transport=self._transport,
            )
        return self._client

    async def close(self):
        """Close the HTTP client."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, *args) -> None:
        await self.close()

    async def request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: Any = None,
    ) -> Any:
        client = await self._get_client()
        url = f"{self.prefix}{path}"
        logger.debug("api_request", method=method, url=url)

        try:
            response = await client.request(
                method,
                url,
                params=params,
                json=json,
                headers=self.session.auth_headers(),
            )
        except httpx.TimeoutException as e:
            logger.warning("api_timeout", method=method, url=url)
            raise NetworkError(f"Request timed out: {method} {url}") from e
        except httpx.TransportError as e:
            logger.warning("api_unreachable", method=method, url=url, error=str(e))
            raise NetworkError(f"Could not reach the server: {e}") from e
        except httpx.RequestError as e:
            # undecodable bodies, redirect loops
            logger.warning("api_request_failed", method=method, url=url, error_type=type(e).__name__)
            raise NetworkError(f"Request failed: {e}") from e

        if response.is_error:
            message, details = _error_body(response)
            logger.warning("api_error", method=method, url=url, status=response.status_code, message=message)
            raise error_from_response(response.status_code, message, details)

        if response.status_code == 204 or not response.content:
            return None

        try:
            body = response.json()
        except ValueError as e:
            raise ServerError("Invalid JSON in API response", status_code=response.status_code) from e

        if isinstance(body, dict):
            if body.get("success") is False:
                raise ServerError(body.get("message") or "Request failed", status_code=response.status_code)
            if "data" in body:
                return body["data"]
        return body


def _error_body(response: httpx.Response) -> tuple[str, dict]:
    try:
        body = response.json()
    except ValueError:
        return response.reason_phrase or f"HTTP {response.status_code}", {}
    if not isinstance(body, dict):
        return response.reason_phrase or f"HTTP {response.status_code}", {}
    message = body.get("message") or response.reason_phrase or f"HTTP {response.status_code}"
    details = {k: v for k, v in body.items() if k not in ("success", "message")}
    return message, details
