"""
Domain routing record endpoints.
Maintain the domain -> site/landing page records used by the edge proxy.
"""

from typing import Any, Dict, Optional
from fastapi import APIRouter, Body, Depends, Query

from app.api.endpoints.domains.common import require_params, to_http_exception
from app.core.auth import get_auth_credential
from app.core.errors import ProvisioningError
from app.models.domain import DomainRequest
from app.services.domains.provisioning import ProvisioningService, get_provisioning_service

router = APIRouter()


@router.post("", response_model=Dict[str, Any])
async def insert_key_pair(
    payload: Optional[DomainRequest] = Body(default=None),
    auth_credential: str = Depends(get_auth_credential),
    service: ProvisioningService = Depends(get_provisioning_service),
):
    """
    Point a domain at a site and its landing page.
    """
    payload = payload or DomainRequest()
    require_params(siteId=payload.site_id, domainName=payload.domain_name)

    try:
        result = await service.insert_key_pair(payload.site_id, payload.domain_name, auth_credential)
    except ProvisioningError as e:
        raise to_http_exception(e)

    return result.to_response()


@router.delete("/landing-page", response_model=Dict[str, Any])
async def clear_landing_page_id(
    site_id: Optional[str] = Query(None, alias="siteId"),
    domain_name: Optional[str] = Query(None, alias="domainName"),
    auth_credential: str = Depends(get_auth_credential),
    service: ProvisioningService = Depends(get_provisioning_service),
):
    """
    Remove the landing page of a domain.
    """
    require_params(siteId=site_id, domainName=domain_name)

    try:
        result = await service.clear_landing_page_id(site_id, domain_name, auth_credential)
    except ProvisioningError as e:
        raise to_http_exception(e)

    return result.to_response()


@router.delete("", response_model=Dict[str, Any])
async def delete_key_pair(
    site_id: Optional[str] = Query(None, alias="siteId"),
    domain_name: Optional[str] = Query(None, alias="domainName"),
    auth_credential: str = Depends(get_auth_credential),
    service: ProvisioningService = Depends(get_provisioning_service),
):
    """
    Remove the routing record of a domain.
    """
    require_params(siteId=site_id, domainName=domain_name)

    try:
        result = await service.delete_key_pair(site_id, domain_name, auth_credential)
    except ProvisioningError as e:
        raise to_http_exception(e)

    return result.to_response()
