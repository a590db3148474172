"""
Cloudflare zone provider implementation.

This module implements the zone provider interface on top of the Cloudflare v4 API.
"""
import logging
from typing import Any, Dict, Optional

import httpx
from pydantic import BaseModel, ConfigDict

from app.core.config import Settings
from app.core.errors import ProviderError
from app.services.domains.dns_providers.base import DNSRecord, ZoneProvider
from app.utils.http.client import HttpClientConfig, HttpResponse, make_request
from app.utils.metrics.prometheus import track_dependency_call

logger = logging.getLogger(__name__)

class CloudflareConfig(BaseModel):
    """Credentials and endpoints for the Cloudflare API."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    email: str
    api_key: str
    base_url: str = "https://api.cloudflare.com/client/v4"
    proxy_name: str = "proxy.xylophonexyz.com"
    timeout: float = 30.0
    transport: Optional[httpx.AsyncBaseTransport] = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "CloudflareConfig":
        return cls(
            email=settings.CLOUDFLARE_ID,
            api_key=settings.CLOUDFLARE_KEY,
            base_url=settings.CLOUDFLARE_ENDPOINT,
            proxy_name=settings.DNS_PROXY_NAME,
            timeout=settings.REQUEST_TIMEOUT,
        )

class CloudflareZoneProvider(ZoneProvider):
    """Cloudflare zone provider implementation."""

    def __init__(self, config: CloudflareConfig):
        """Initialize the Cloudflare zone provider."""
        self.config = config
        self.http_config = HttpClientConfig(
            base_url=config.base_url,
            headers=self._get_headers(),
            timeout=config.timeout,
            transport=config.transport,
        )
        logger.info("Initialized Cloudflare zone provider")

    @property
    def proxy_name(self) -> str:
        return self.config.proxy_name

    def _get_headers(self) -> Dict[str, str]:
        """
        Get headers for Cloudflare API requests.

        Returns:
            Headers for API requests
        """
        return {
            "Content-Type": "application/json",
            "X-Auth-Email": self.config.email,
            "X-Auth-Key": self.config.api_key,
        }

    async def _request(
        self,
        operation: str,
        method: str,
        path: str,
        json_data: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """
        Send a request and unwrap the Cloudflare response envelope.

        Raises:
            TransportError: If the request could not be completed
            ProviderError: If the envelope reports a failure or is malformed
        """
        response = await make_request(method, path, json_data=json_data, config=self.http_config)
        return self._handle_response(operation, response)

    def _handle_response(self, operation: str, response: HttpResponse) -> Dict[str, Any]:
        try:
            body = response.json()
        except ValueError:
            logger.error(f"Cloudflare {operation} returned a malformed body (HTTP {response.status_code})")
            raise ProviderError(response.text)

        if not isinstance(body, dict) or not body.get("success"):
            errors = body.get("errors") if isinstance(body, dict) else None
            logger.error(f"Cloudflare API error during {operation}: {errors}")
            raise ProviderError(response.text)

        return body

    @track_dependency_call("cloudflare", "create_zone")
    async def create_zone(self, domain_name: str) -> Dict[str, Any]:
        """
        Create a zone for a domain, with DNS records scanned on creation.

        Args:
            domain_name: Domain name

        Returns:
            Cloudflare response; the zone is under "result"
        """
        body = await self._request(
            "create_zone",
            "POST",
            "/zones",
            json_data={"name": domain_name, "jump_start": True},
        )
        logger.info(f"Created Cloudflare zone {(body.get('result') or {}).get('id')} for {domain_name}")
        return body

    @track_dependency_call("cloudflare", "get_zone")
    async def get_zone(self, zone_id: str) -> Dict[str, Any]:
        return await self._request("get_zone", "GET", f"/zones/{zone_id}")

    @track_dependency_call("cloudflare", "add_dns_record")
    async def add_dns_record(self, zone_id: str, record: DNSRecord) -> Dict[str, Any]:
        """
        Create a DNS record in a zone.

        Args:
            zone_id: Zone ID
            record: DNS record to create

        Returns:
            Cloudflare response
        """
        body = await self._request(
            "add_dns_record",
            "POST",
            f"/zones/{zone_id}/dns_records",
            json_data=record.to_dict(),
        )
        logger.info(f"Added {record!r} to zone {zone_id}")
        return body

    @track_dependency_call("cloudflare", "set_always_use_https")
    async def set_always_use_https(self, zone_id: str, enabled: bool = True) -> Dict[str, Any]:
        return await self._request(
            "set_always_use_https",
            "PATCH",
            f"/zones/{zone_id}/settings/always_use_https",
            json_data={"value": "on" if enabled else "off"},
        )

    @track_dependency_call("cloudflare", "delete_zone")
    async def delete_zone(self, zone_id: str) -> Dict[str, Any]:
        body = await self._request("delete_zone", "DELETE", f"/zones/{zone_id}")
        logger.info(f"Deleted Cloudflare zone {zone_id}")
        return body
