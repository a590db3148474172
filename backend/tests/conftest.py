"""Shared fixtures: in-memory stand-ins for Redis, Cloudflare and the composition API."""

import itertools
from typing import Any, Dict, List, Optional, Tuple

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from app.core.errors import AuthorizationError, ProviderError
from app.models.site import Site
from app.services.domains.dns_providers.base import DNSRecord, ZoneProvider
from app.services.domains.domain_store import DomainStore
from app.services.domains.provisioning import ProvisioningService

PROXY_NAME = "proxy.example.test"


class FakeRedis:
    """One connection to a FakeRedisServer."""

    def __init__(self, server: "FakeRedisServer"):
        self.server = server
        self.closed = False

    async def hset(self, key: str, field: str, value: str) -> int:
        self.server.check("hset", key, field)
        record = self.server.data.setdefault(key, {})
        created = field not in record
        record[field] = value
        return int(created)

    async def hdel(self, key: str, field: str) -> int:
        self.server.check("hdel", key, field)
        return int(self.server.data.get(key, {}).pop(field, None) is not None)

    async def delete(self, key: str) -> int:
        self.server.check("delete", key, None)
        return int(self.server.data.pop(key, None) is not None)

    async def hgetall(self, key: str) -> Dict[str, str]:
        self.server.check("hgetall", key, None)
        return dict(self.server.data.get(key, {}))

    async def aclose(self) -> None:
        self.closed = True


class FakeRedisServer:
    """Shared in-memory hash store with injectable command failures."""

    def __init__(self):
        self.data: Dict[str, Dict[str, str]] = {}
        self.clients: List[FakeRedis] = []
        self.failures: List[Tuple[str, Optional[str], Optional[str]]] = []

    def client(self) -> FakeRedis:
        client = FakeRedis(self)
        self.clients.append(client)
        return client

    def fail(self, command: str, key: Optional[str] = None, field: Optional[str] = None) -> None:
        self.failures.append((command, key, field))

    def check(self, command: str, key: str, field: Optional[str]) -> None:
        for failed_command, failed_key, failed_field in self.failures:
            if failed_command != command:
                continue
            if failed_key is not None and failed_key != key:
                continue
            if failed_field is not None and failed_field != field:
                continue
            raise RedisConnectionError(f"{command} {key} failed")

    @property
    def all_closed(self) -> bool:
        return all(client.closed for client in self.clients)


class InMemoryZoneProvider(ZoneProvider):
    """Zone provider keeping zones in memory, with injectable failures per operation."""

    def __init__(self, proxy_name: str = PROXY_NAME):
        self.proxy_name = proxy_name
        self.zones: Dict[str, Dict[str, Any]] = {}
        self.failures: Dict[str, str] = {}
        self.calls: List[Tuple[str, Any]] = []
        self._ids = itertools.count(1)

    def fail(self, operation: str, body: str = '{"success":false,"errors":[{"code":1000}]}') -> None:
        self.failures[operation] = body

    def _check(self, operation: str, argument: Any) -> None:
        self.calls.append((operation, argument))
        if operation in self.failures:
            raise ProviderError(self.failures[operation])

    def _zone(self, zone_id: str) -> Dict[str, Any]:
        if zone_id not in self.zones:
            raise ProviderError('{"success":false,"errors":[{"code":1001,"message":"Invalid zone identifier"}]}')
        return self.zones[zone_id]

    def calls_to(self, operation: str) -> List[Any]:
        return [argument for name, argument in self.calls if name == operation]

    async def create_zone(self, domain_name: str) -> Dict[str, Any]:
        self._check("create_zone", domain_name)
        zone_id = f"zone-{next(self._ids)}"
        zone = {"id": zone_id, "name": domain_name, "status": "pending", "records": [], "always_use_https": "off"}
        self.zones[zone_id] = zone
        return {"success": True, "errors": [], "result": {"id": zone_id, "name": domain_name, "status": "pending"}}

    async def get_zone(self, zone_id: str) -> Dict[str, Any]:
        self._check("get_zone", zone_id)
        zone = self._zone(zone_id)
        return {"success": True, "result": {"id": zone["id"], "name": zone["name"], "status": zone["status"]}}

    async def add_dns_record(self, zone_id: str, record: DNSRecord) -> Dict[str, Any]:
        self._check(f"add_dns_record:{record.name}", zone_id)
        zone = self._zone(zone_id)
        zone["records"].append(record.to_dict())
        return {"success": True, "result": {"zone_id": zone_id, **record.to_dict()}}

    async def set_always_use_https(self, zone_id: str, enabled: bool = True) -> Dict[str, Any]:
        self._check("set_always_use_https", zone_id)
        zone = self._zone(zone_id)
        zone["always_use_https"] = "on" if enabled else "off"
        return {"success": True, "result": {"id": "always_use_https", "value": zone["always_use_https"]}}

    async def delete_zone(self, zone_id: str) -> Dict[str, Any]:
        self._check("delete_zone", zone_id)
        self._zone(zone_id)
        del self.zones[zone_id]
        return {"success": True, "result": {"id": zone_id}}


class FakeCompositionService:
    """Composition API stand-in returning a fixed site, or raising a fixed error."""

    def __init__(self, site: Site, error: Optional[Exception] = None):
        self.site = site
        self.error = error
        self.calls: List[Tuple[str, str]] = []

    async def authorize(self, site_id: str, auth_credential: str) -> Site:
        self.calls.append((site_id, auth_credential))
        if self.error is not None:
            raise self.error
        if auth_credential != "Bearer owner-token":
            raise AuthorizationError("Not allowed. Current user does not own resource")
        return self.site


def make_site(pages: Optional[List[Dict[str, Any]]] = None, custom_domain: Optional[Dict[str, Any]] = None) -> Site:
    return Site.model_validate({
        "id": "site-1",
        "user": {"id": "user-1"},
        "metadata": {"customDomain": custom_domain} if custom_domain else {},
        "pages": pages or [],
    })


@pytest.fixture
def redis_server() -> FakeRedisServer:
    return FakeRedisServer()


@pytest.fixture
def domain_store(redis_server) -> DomainStore:
    return DomainStore(client_factory=redis_server.client)


@pytest.fixture
def zone_provider() -> InMemoryZoneProvider:
    return InMemoryZoneProvider()


@pytest.fixture
def site() -> Site:
    return make_site(
        pages=[
            {"id": "page-home", "metadata": {"navigationItem": True, "index": 2}},
            {"id": "page-about", "metadata": {"navigationItem": True, "index": 5}},
            {"id": "page-hidden", "metadata": {"navigationItem": False, "index": 1}},
        ],
        custom_domain={"zoneId": "zone-stored", "domainName": "example.com"},
    )


@pytest.fixture
def composition_service(site) -> FakeCompositionService:
    return FakeCompositionService(site)


@pytest.fixture
def provisioning_service(composition_service, zone_provider, domain_store) -> ProvisioningService:
    return ProvisioningService(
        composition_service=composition_service,
        zone_provider=zone_provider,
        domain_store=domain_store,
    )


@pytest.fixture
def site_factory():
    return make_site
