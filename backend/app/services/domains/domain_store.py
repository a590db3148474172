"""
Key-value store for domain routing records.

Each custom domain (and its www alias) maps to a Redis hash holding the owning
site id and, optionally, the landing page to route to. Every logical operation
opens its own connection and closes it on every exit path.
"""
import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, Callable, Dict, Optional

import redis.asyncio as redis
from redis.exceptions import RedisError

from app.core.config import Settings, settings as default_settings
from app.core.errors import StoreError
from app.utils.metrics.prometheus import track_dependency_call

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], Any]


class DomainStore:
    """
    Redis-backed store of domain records.

    Key format: {domain name}
    Value: hash with "siteId" and "landingPageId" fields
    """

    def __init__(self, settings: Optional[Settings] = None, client_factory: Optional[ClientFactory] = None):
        self.settings = settings or default_settings
        self._client_factory = client_factory or self._create_client

    def _create_client(self) -> redis.Redis:
        return redis.Redis(
            host=self.settings.REDIS_HOST,
            port=self.settings.REDIS_PORT,
            db=self.settings.REDIS_DB,
            socket_timeout=self.settings.REQUEST_TIMEOUT,
            socket_connect_timeout=self.settings.REQUEST_TIMEOUT,
            decode_responses=True,
        )

    @asynccontextmanager
    async def _connection(self) -> AsyncIterator[redis.Redis]:
        """Open a connection for one logical operation and always close it."""
        client = self._client_factory()
        try:
            yield client
        finally:
            try:
                await client.aclose()
            except RedisError as e:
                logger.warning(f"Error closing Redis connection: {e}")

    @track_dependency_call("redis", "set_field")
    async def set_field(self, domain_name: str, field: str, value: str) -> bool:
        """
        Set one field of a domain record. Setting the same value twice is a no-op.

        Raises:
            StoreError: If the connection or the command fails
        """
        try:
            async with self._connection() as client:
                await client.hset(domain_name, field, value)
        except RedisError as e:
            logger.error(f"Failed to set {field} for {domain_name}: {e}")
            raise StoreError(str(e)) from e

        logger.debug(f"Set {field}={value} for {domain_name}")
        return True

    @track_dependency_call("redis", "delete_field")
    async def delete_field(self, domain_name: str, field: str) -> bool:
        """
        Remove one field of a domain record.

        Raises:
            StoreError: If the connection or the command fails
        """
        try:
            async with self._connection() as client:
                await client.hdel(domain_name, field)
        except RedisError as e:
            logger.error(f"Failed to delete {field} for {domain_name}: {e}")
            raise StoreError(str(e)) from e

        logger.debug(f"Deleted {field} for {domain_name}")
        return True

    @track_dependency_call("redis", "delete_record")
    async def delete_record(self, domain_name: str) -> bool:
        """
        Remove a domain record entirely.

        Raises:
            StoreError: If the connection or the command fails
        """
        try:
            async with self._connection() as client:
                await client.delete(domain_name)
        except RedisError as e:
            logger.error(f"Failed to delete record for {domain_name}: {e}")
            raise StoreError(str(e)) from e

        logger.info(f"Deleted domain record {domain_name}")
        return True

    @track_dependency_call("redis", "get_record")
    async def get_record(self, domain_name: str) -> Dict[str, str]:
        """
        Read a domain record. Missing records read as an empty dict.

        Raises:
            StoreError: If the connection or the command fails
        """
        try:
            async with self._connection() as client:
                return await client.hgetall(domain_name)
        except RedisError as e:
            logger.error(f"Failed to read record for {domain_name}: {e}")
            raise StoreError(str(e)) from e


_store: Optional[DomainStore] = None


def get_domain_store() -> DomainStore:
    """Get the process-wide domain store."""
    global _store
    if _store is None:
        _store = DomainStore()
    return _store
