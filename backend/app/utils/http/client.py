"""
HTTP client utilities for making HTTP requests to external APIs.
"""
import json
import logging
from typing import Any, Dict, Optional
from contextlib import asynccontextmanager

import httpx
from pydantic import BaseModel, ConfigDict

from app.core.errors import TransportError

logger = logging.getLogger(__name__)

class HttpResponse(BaseModel):
    """Model for HTTP response data."""
    status_code: int
    text: str = ""
    headers: Dict[str, str] = {}

    def json(self) -> Any:
        """
        Parse the response body as JSON.

        Raises:
            ValueError: If the body is not valid JSON
        """
        return json.loads(self.text)

class HttpClientConfig(BaseModel):
    """Configuration for HTTP client."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    base_url: str = ""
    headers: Dict[str, str] = {}
    timeout: float = 30.0
    verify: bool = True
    follow_redirects: bool = True
    # Overrides the network transport, e.g. httpx.MockTransport in tests
    transport: Optional[httpx.AsyncBaseTransport] = None

@asynccontextmanager
async def get_http_client(config: Optional[HttpClientConfig] = None):
    """
    Get an HTTP client with the specified configuration.

    Args:
        config: Configuration for the HTTP client

    Yields:
        An HTTP client instance
    """
    client_config = config or HttpClientConfig()

    async with httpx.AsyncClient(
        base_url=client_config.base_url,
        headers=client_config.headers,
        timeout=client_config.timeout,
        verify=client_config.verify,
        follow_redirects=client_config.follow_redirects,
        transport=client_config.transport,
    ) as client:
        yield client

async def make_request(
    method: str,
    url: str,
    *,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    json_data: Optional[Dict[str, Any]] = None,
    config: Optional[HttpClientConfig] = None,
) -> HttpResponse:
    """
    Make an HTTP request.

    Args:
        method: HTTP method (GET, POST, PATCH, DELETE, etc.)
        url: URL to make the request to
        params: Query parameters
        headers: HTTP headers
        json_data: JSON data to send in the request body
        config: HTTP client configuration

    Returns:
        HTTP response, whatever its status code

    Raises:
        TransportError: If the request could not be completed
    """
    method = method.upper()
    client_config = config or HttpClientConfig()
    merged_headers = {**client_config.headers, **(headers or {})}

    try:
        async with get_http_client(client_config) as client:
            response = await client.request(
                method=method,
                url=url,
                params=params,
                headers=merged_headers,
                json=json_data,
            )

            return HttpResponse(
                status_code=response.status_code,
                text=response.text,
                headers=dict(response.headers),
            )
    except httpx.RequestError as e:
        logger.error(f"HTTP request error: {method} {url}: {str(e)}")
        raise TransportError(str(e) or e.__class__.__name__) from e

async def get(
    url: str,
    *,
    params: Optional[Dict[str, Any]] = None,
    headers: Optional[Dict[str, str]] = None,
    config: Optional[HttpClientConfig] = None,
) -> HttpResponse:
    """Make a GET request."""
    return await make_request("GET", url, params=params, headers=headers, config=config)

