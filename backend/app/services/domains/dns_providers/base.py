"""
Base interface for zone providers.

This module defines the interface the provisioning workflow expects from a
DNS/CDN provider: zones, DNS records and zone security settings.
"""
import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, Dict

logger = logging.getLogger(__name__)

ROOT_RECORD_NAME = "@"
WWW_RECORD_NAME = "www"

class RecordType(str, Enum):
    """DNS record types."""
    CNAME = "CNAME"

class DNSRecord:
    """Model for a DNS record to create in a zone."""

    def __init__(
        self,
        name: str,
        type: RecordType,
        content: str,
        proxied: bool = False,
    ):
        """
        Initialize a DNS record.

        Args:
            name: Record name ("@" for the zone apex, "www", ...)
            type: Record type
            content: Record content (e.g., target host name)
            proxied: Whether traffic is proxied through the provider
        """
        self.name = name
        self.type = type
        self.content = content
        self.proxied = proxied

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the provider request payload."""
        return {
            "type": self.type.value,
            "name": self.name,
            "content": self.content,
            "proxied": self.proxied,
        }

    @classmethod
    def root_record(cls, proxy_name: str) -> "DNSRecord":
        """Proxied CNAME for the zone apex."""
        return cls(name=ROOT_RECORD_NAME, type=RecordType.CNAME, content=proxy_name, proxied=True)

    @classmethod
    def www_record(cls, proxy_name: str) -> "DNSRecord":
        """Proxied CNAME for the www alias."""
        return cls(name=WWW_RECORD_NAME, type=RecordType.CNAME, content=proxy_name, proxied=True)

    def __repr__(self) -> str:
        return f"DNSRecord({self.type.value} {self.name} -> {self.content}, proxied={self.proxied})"

class ZoneProvider(ABC):
    """
    Base interface for zone providers.

    Every operation resolves with the provider's parsed response body, or raises
    TransportError on network failure and ProviderError on a failure envelope.
    """

    @abstractmethod
    async def create_zone(self, domain_name: str) -> Dict[str, Any]:
        """
        Create a zone for a domain.

        Args:
            domain_name: Domain name

        Returns:
            Provider response; the zone is under "result"
        """
        pass

    @abstractmethod
    async def get_zone(self, zone_id: str) -> Dict[str, Any]:
        """
        Get a specific zone.

        Args:
            zone_id: Zone ID

        Returns:
            Provider response; the zone is under "result"
        """
        pass

    @abstractmethod
    async def add_dns_record(self, zone_id: str, record: DNSRecord) -> Dict[str, Any]:
        """
        Create a DNS record in a zone.

        Args:
            zone_id: Zone ID
            record: DNS record to create

        Returns:
            Provider response
        """
        pass

    @abstractmethod
    async def set_always_use_https(self, zone_id: str, enabled: bool = True) -> Dict[str, Any]:
        """
        Toggle HTTPS redirection for a zone.

        Args:
            zone_id: Zone ID
            enabled: Whether plain HTTP requests are redirected

        Returns:
            Provider response
        """
        pass

    @abstractmethod
    async def delete_zone(self, zone_id: str) -> Dict[str, Any]:
        """
        Delete a zone and every record under it.

        Args:
            zone_id: Zone ID

        Returns:
            Provider response
        """
        pass
