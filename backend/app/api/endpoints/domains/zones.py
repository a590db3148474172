"""
Custom domain zone endpoints.
Provision and tear down the DNS zone behind a site's custom domain.
"""

from typing import Any, Dict, Optional
from fastapi import APIRouter, Body, Depends, Query

from app.api.endpoints.domains.common import require_params, to_http_exception
from app.core.auth import get_auth_credential
from app.core.errors import ProvisioningError
from app.models.domain import DomainRequest
from app.services.domains.provisioning import ProvisioningService, get_provisioning_service

router = APIRouter()


@router.post("/zones", response_model=Dict[str, Any])
async def create_full_zone(
    payload: Optional[DomainRequest] = Body(default=None),
    auth_credential: str = Depends(get_auth_credential),
    service: ProvisioningService = Depends(get_provisioning_service),
):
    """
    Provision a custom domain: zone, DNS records, HTTPS and routing records.
    """
    payload = payload or DomainRequest()
    require_params(siteId=payload.site_id, domainName=payload.domain_name)

    try:
        result = await service.create_full_zone(payload.site_id, payload.domain_name, auth_credential)
    except ProvisioningError as e:
        raise to_http_exception(e)

    return result.to_response()


@router.delete("/zones", response_model=Dict[str, Any])
async def delete_full_zone(
    site_id: Optional[str] = Query(None, alias="siteId"),
    zone_id: Optional[str] = Query(None, alias="zoneId"),
    auth_credential: str = Depends(get_auth_credential),
    service: ProvisioningService = Depends(get_provisioning_service),
):
    """
    Delete the custom domain zone of a site and its routing records.
    """
    require_params(siteId=site_id)

    try:
        result = await service.delete_full_zone(site_id, auth_credential, zone_id=zone_id)
    except ProvisioningError as e:
        raise to_http_exception(e)

    return result.model_dump()
