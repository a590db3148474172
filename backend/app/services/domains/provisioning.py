"""
Custom domain provisioning.

This module drives the zone provider and the domain store through the custom
domain workflows: full zone creation with rollback, full zone teardown, and
management of the routing record of a domain.
"""
import asyncio
import logging
import time
from contextlib import contextmanager
from typing import Any, Awaitable, Iterator, List, Optional, TypeVar

from app.core.errors import (
    AuthorizationError,
    DataError,
    MissingParameterError,
    ProvisioningError,
    RollbackError,
    TransportError,
)
from app.models.domain import (
    LANDING_PAGE_ID_FIELD,
    SITE_ID_FIELD,
    CreateFullZoneResult,
    DeleteFullZoneResult,
    KeyPairResult,
    canonical_domain_name,
    normalize_domain_name,
    www_alias,
)
from app.models.site import Site
from app.services.composition_service import CompositionService, get_composition_service
from app.services.domains.dns_providers import get_zone_provider
from app.services.domains.dns_providers.base import DNSRecord, ZoneProvider
from app.services.domains.domain_store import DomainStore, get_domain_store
from app.utils.metrics import domain_operation_duration, domain_operations, zone_rollbacks

logger = logging.getLogger(__name__)

T = TypeVar("T")


def select_landing_page_id(site: Site) -> Optional[str]:
    """
    Pick the page a custom domain routes to.

    Among navigation pages with an index, the lowest index wins; on a tie the
    last such page wins. Returns None when no page qualifies.
    """
    selected = None
    for page in site.pages:
        if not page.metadata.navigation_item or page.metadata.index is None:
            continue
        if selected is None or page.metadata.index <= selected.metadata.index:
            selected = page
    return str(selected.id) if selected is not None else None


async def join_all(*aws: Awaitable[Any]) -> List[Any]:
    """
    Run awaitables concurrently and wait for every one of them.

    A failure does not cancel the others. Once all have finished, the first
    failure in argument order is raised.
    """
    results = await asyncio.gather(*aws, return_exceptions=True)
    for result in results:
        if isinstance(result, BaseException):
            raise result
    return results


async def best_effort(aw: Awaitable[T], description: str) -> Optional[T]:
    """
    Await an optional step. A ProvisioningError is logged and discarded.
    """
    try:
        return await aw
    except ProvisioningError as e:
        logger.warning(f"Optional step '{description}' failed: {e}")
        return None


@contextmanager
def _track(operation: str) -> Iterator[None]:
    started = time.perf_counter()
    try:
        yield
    except Exception:
        domain_operations.labels(operation=operation, status="error").inc()
        raise
    else:
        domain_operations.labels(operation=operation, status="success").inc()
    finally:
        domain_operation_duration.labels(operation=operation).observe(time.perf_counter() - started)


class ProvisioningService:
    """
    Service for provisioning and tearing down custom domains of sites.

    Every public operation first checks with the composition API that the
    caller owns the site, and aborts with AuthorizationError otherwise.
    """

    def __init__(
        self,
        composition_service: Optional[CompositionService] = None,
        zone_provider: Optional[ZoneProvider] = None,
        domain_store: Optional[DomainStore] = None,
        proxy_name: Optional[str] = None,
    ):
        self.composition_service = composition_service or get_composition_service()
        self.zone_provider = zone_provider or get_zone_provider()
        self.domain_store = domain_store or get_domain_store()
        self.proxy_name = proxy_name or getattr(self.zone_provider, "proxy_name", None)
        if not self.proxy_name:
            raise ValueError("A DNS proxy host name is required")

    async def _authorize(self, site_id: str, auth_credential: str) -> Site:
        """Authorize the caller, reporting any oracle failure as an authorization failure."""
        try:
            return await self.composition_service.authorize(site_id, auth_credential)
        except (TransportError, DataError) as e:
            raise AuthorizationError(str(e)) from e

    async def _write_landing_page_id(self, domain_name: str, landing_page_id: Optional[str]) -> bool:
        # A hash field cannot hold a null, so no landing page means no field
        if landing_page_id is None:
            return await self.domain_store.delete_field(domain_name, LANDING_PAGE_ID_FIELD)
        return await self.domain_store.set_field(domain_name, LANDING_PAGE_ID_FIELD, landing_page_id)

    async def _write_domain_records(self, site_id: str, domain_name: str, landing_page_id: Optional[str]) -> bool:
        """Write the routing fields of a domain and of its www alias concurrently."""
        alias = www_alias(domain_name)
        await join_all(
            self.domain_store.set_field(domain_name, SITE_ID_FIELD, site_id),
            self.domain_store.set_field(alias, SITE_ID_FIELD, site_id),
            self._write_landing_page_id(domain_name, landing_page_id),
            self._write_landing_page_id(alias, landing_page_id),
        )
        return True

    async def _rollback_zone(self, zone_id: str, error: Exception) -> None:
        """Delete a freshly created zone after a failed provisioning."""
        logger.error(f"Provisioning of zone {zone_id} failed, deleting it: {error}")
        try:
            await self.zone_provider.delete_zone(zone_id)
        except ProvisioningError as delete_zone_error:
            zone_rollbacks.labels(outcome="failed").inc()
            logger.error(f"Rollback of zone {zone_id} failed: {delete_zone_error}")
            raise RollbackError(error, delete_zone_error) from error
        zone_rollbacks.labels(outcome="deleted").inc()

    async def create_full_zone(self, site_id: str, domain_name: str, auth_credential: str) -> CreateFullZoneResult:
        """
        Provision a custom domain for a site.

        Creates the zone, then concurrently adds the root record, enforces
        HTTPS and writes the routing records. If any of those fail the zone is
        deleted again. The www record is added last and is optional.

        Args:
            site_id: ID of the site
            domain_name: Domain to provision
            auth_credential: Caller's Authorization header

        Returns:
            Aggregate result of every step

        Raises:
            InvalidDomainError: If the domain is not a valid host name
            AuthorizationError: If the caller may not manage the site
            RollbackError: If a step failed and the zone could not be deleted
            ProvisioningError: The original failure otherwise
        """
        with _track("create_full_zone"):
            domain_name = canonical_domain_name(domain_name)
            site = await self._authorize(site_id, auth_credential)
            landing_page_id = select_landing_page_id(site)

            create_zone_result = await self.zone_provider.create_zone(domain_name)
            zone_id = (create_zone_result.get("result") or {}).get("id")
            if not zone_id:
                raise DataError(f"Zone provider returned no zone id for {domain_name}")

            try:
                add_root_dns_result, enable_https_result, insert_key_pair_result = await join_all(
                    self.zone_provider.add_dns_record(zone_id, DNSRecord.root_record(self.proxy_name)),
                    self.zone_provider.set_always_use_https(zone_id, True),
                    self._write_domain_records(site_id, domain_name, landing_page_id),
                )
            except Exception as e:
                await self._rollback_zone(zone_id, e)
                raise

            add_www_dns_result = await best_effort(
                self.zone_provider.add_dns_record(zone_id, DNSRecord.www_record(self.proxy_name)),
                f"add www record for {domain_name}",
            )

            logger.info(f"Provisioned {domain_name} (zone {zone_id}) for site {site_id}")
            return CreateFullZoneResult(
                create_zone_result=create_zone_result,
                add_root_dns_result=add_root_dns_result,
                enable_always_use_https_result=enable_https_result,
                insert_key_pair_result=insert_key_pair_result,
                add_www_dns_result=add_www_dns_result,
            )

    async def delete_full_zone(
        self,
        site_id: str,
        auth_credential: str,
        zone_id: Optional[str] = None,
    ) -> DeleteFullZoneResult:
        """
        Tear down the custom domain of a site.

        Args:
            site_id: ID of the site
            auth_credential: Caller's Authorization header
            zone_id: Zone to delete; defaults to the zone recorded on the site

        Raises:
            AuthorizationError: If the caller may not manage the site
            MissingParameterError: If no zone id is known
            ProvisioningError: If the zone could not be deleted
        """
        with _track("delete_full_zone"):
            site = await self._authorize(site_id, auth_credential)
            custom_domain = site.metadata.custom_domain

            zone_id = zone_id or (custom_domain.zone_id if custom_domain else None)
            if not zone_id:
                raise MissingParameterError("zoneId")
            domain_name = custom_domain.domain_name if custom_domain else None
            if domain_name:
                domain_name = normalize_domain_name(domain_name)

            await self.zone_provider.delete_zone(zone_id)

            if domain_name:
                await best_effort(
                    join_all(
                        self.domain_store.delete_record(domain_name),
                        self.domain_store.delete_record(www_alias(domain_name)),
                    ),
                    f"remove domain records for {domain_name}",
                )
            else:
                logger.warning(f"Site {site_id} has no custom domain name, no domain records removed")

            logger.info(f"Deleted zone {zone_id} of site {site_id}")
            return DeleteFullZoneResult()

    async def insert_key_pair(self, site_id: str, domain_name: str, auth_credential: str) -> KeyPairResult:
        """
        Point a domain at a site and its landing page.

        The site id is written first; a failure writing the landing page does
        not undo it.
        """
        with _track("insert_key_pair"):
            domain_name = canonical_domain_name(domain_name)
            site = await self._authorize(site_id, auth_credential)
            landing_page_id = select_landing_page_id(site)

            await self.domain_store.set_field(domain_name, SITE_ID_FIELD, site_id)
            await self._write_landing_page_id(domain_name, landing_page_id)

            return KeyPairResult(message=f"Key pair inserted for {domain_name}")

    async def clear_landing_page_id(self, site_id: str, domain_name: str, auth_credential: str) -> KeyPairResult:
        """Remove the landing page of a domain, keeping its site id."""
        with _track("clear_landing_page_id"):
            domain_name = canonical_domain_name(domain_name)
            await self._authorize(site_id, auth_credential)
            await self.domain_store.delete_field(domain_name, LANDING_PAGE_ID_FIELD)
            return KeyPairResult()

    async def delete_key_pair(self, site_id: str, domain_name: str, auth_credential: str) -> KeyPairResult:
        """Remove the record of a domain. The www alias record is left in place."""
        with _track("delete_key_pair"):
            domain_name = canonical_domain_name(domain_name)
            await self._authorize(site_id, auth_credential)
            await self.domain_store.delete_record(domain_name)
            return KeyPairResult()


_service: Optional[ProvisioningService] = None


def get_provisioning_service() -> ProvisioningService:
    """Get the process-wide provisioning service."""
    global _service
    if _service is None:
        _service = ProvisioningService()
    return _service
