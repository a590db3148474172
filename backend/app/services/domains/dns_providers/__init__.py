"""
Zone provider factory and initialization.

This module provides the factory function for getting the zone provider implementation.
"""
import logging
from typing import Optional

from app.core.config import Settings, settings as default_settings
from app.services.domains.dns_providers.base import ZoneProvider
from app.services.domains.dns_providers.cloudflare import CloudflareConfig, CloudflareZoneProvider

logger = logging.getLogger(__name__)

# Global provider instance
_provider: Optional[ZoneProvider] = None

def get_zone_provider(settings: Optional[Settings] = None) -> ZoneProvider:
    """
    Get the zone provider, creating it from settings on first use.

    Args:
        settings: Settings to build the provider from (defaults to the app settings)

    Returns:
        Zone provider implementation
    """
    global _provider

    # Check if provider is already initialized
    if _provider is not None:
        return _provider

    _provider = CloudflareZoneProvider(CloudflareConfig.from_settings(settings or default_settings))
    return _provider
