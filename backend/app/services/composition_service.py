"""
Client for the composition API.

The composition API owns sites and users. This service only reads from it to
decide whether the caller may manage the custom domain of a site.
"""

import logging
from typing import Dict, Optional

from pydantic import ValidationError

from app.core.config import Settings, settings as default_settings
from app.core.errors import AuthorizationError, DataError
from app.models.site import Site, User
from app.utils.http.client import HttpClientConfig, HttpResponse, get
from app.utils.metrics.prometheus import track_dependency_call

logger = logging.getLogger(__name__)

SITE_AUTHOR_UNKNOWN = "Unable to determine site author"
NOT_SITE_OWNER = "Not allowed. Current user does not own resource"


class CompositionService:
    """
    Service for looking up sites and verifying their ownership.
    """

    def __init__(self, settings: Optional[Settings] = None, http_config: Optional[HttpClientConfig] = None):
        settings = settings or default_settings
        self.http_config = http_config or HttpClientConfig(
            base_url=settings.API_ENDPOINT,
            timeout=settings.REQUEST_TIMEOUT,
        )

    def _get_headers(self, auth_credential: str) -> Dict[str, str]:
        return {
            "Authorization": auth_credential,
            "Content-Type": "application/json",
        }

    @track_dependency_call("composition_api", "get_site")
    async def get_site(self, site_id: str, auth_credential: str) -> HttpResponse:
        return await get(f"/v1/compositions/{site_id}", headers=self._get_headers(auth_credential), config=self.http_config)

    @track_dependency_call("composition_api", "get_current_user")
    async def get_current_user(self, auth_credential: str) -> HttpResponse:
        return await get("/v1/me", headers=self._get_headers(auth_credential), config=self.http_config)

    async def authorize(self, site_id: str, auth_credential: str) -> Site:
        """
        Verify that the caller owns a site.

        Args:
            site_id: ID of the site
            auth_credential: Caller's Authorization header, forwarded as-is

        Returns:
            The site record

        Raises:
            TransportError: If either lookup fails at the network level
            DataError: If either response is not a valid site/user record
            AuthorizationError: If the caller does not own the site
        """
        site_response = await self.get_site(site_id, auth_credential)
        user_response = await self.get_current_user(auth_credential)

        try:
            site = Site.model_validate(site_response.json())
            user = User.model_validate(user_response.json())
        except (ValueError, ValidationError) as e:
            logger.error(
                f"Could not parse ownership records for site {site_id} "
                f"(HTTP {site_response.status_code}/{user_response.status_code}): {e}"
            )
            raise DataError(SITE_AUTHOR_UNKNOWN) from e

        if site.user.id != user.id:
            logger.warning(f"User {user.id} attempted to manage site {site_id} owned by {site.user.id}")
            raise AuthorizationError(NOT_SITE_OWNER)

        return site


_service: Optional[CompositionService] = None


def get_composition_service() -> CompositionService:
    """Get the process-wide composition service."""
    global _service
    if _service is None:
        _service = CompositionService()
    return _service
