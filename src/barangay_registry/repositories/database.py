"""Connection management for the Redis store backing the registry."""

from contextlib import contextmanager
from typing import Generator

import redis
from loguru import logger
from redis.client import Pipeline
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError, TimeoutError as RedisTimeoutError, WatchError

from barangay_registry.config import get_config
from barangay_registry.repositories.errors import (
    BatchStatusUnknownError,
    ConcurrentModificationError,
    StoreUnavailableError,
)


class RedisConnection:
    """Owns the Redis client handle shared by every repository.

    The handle is opened explicitly (or injected) and closed explicitly;
    components receive the ``RedisConnection`` through their constructor.
    """

    def __init__(
        self,
        url: str | None = None,
        client: redis.Redis | None = None,
    ) -> None:
        """Initialize connection manager.

        Args:
            url: Redis URL. If None, uses config.
            client: Pre-built client (must use ``decode_responses=True``).
                When given, ``url`` is ignored and no connection is opened.
        """
        self.url = url or get_config().redis_url
        self._client: redis.Redis | None = client

    def connect(self) -> redis.Redis:
        """Return the client, creating it on first use."""
        if self._client is None:
            self._client = redis.Redis.from_url(self.url, decode_responses=True)
            logger.info(f"Connected to Redis store: {self.url}")
        return self._client

    @property
    def client(self) -> redis.Redis:
        return self.connect()

    def close(self) -> None:
        """Close the client and release its connection pool."""
        if self._client is not None:
            self._client.close()
            self._client = None
            logger.info("Redis connection closed")

    @contextmanager
    def transaction(
        self, *watch_keys: str, description: str = "batch"
    ) -> Generator[Pipeline, None, None]:
        """Context manager for one atomic MULTI/EXEC batch.

        When ``watch_keys`` are given the pipeline starts in immediate mode
        so the caller can read its snapshot; the caller must then call
        ``pipe.multi()`` before queueing writes. The batch is executed on a
        clean exit and discarded if the body raises.

        Raises:
            ConcurrentModificationError: a watched key changed before EXEC.
            BatchStatusUnknownError: the connection failed during EXEC.
            StoreUnavailableError: any other store failure during EXEC.

        Example:
            with db.transaction("households:hh:1") as pipe:
                existing = pipe.hgetall("households:hh:1")
                pipe.multi()
                pipe.hset("households:hh:1", mapping=fields)
        """
        pipe = self.client.pipeline(transaction=True)
        try:
            if watch_keys:
                pipe.watch(*watch_keys)
            yield pipe
            try:
                pipe.execute()
            except WatchError as e:
                logger.warning(f"{description} aborted, watched key changed: {watch_keys}")
                raise ConcurrentModificationError(", ".join(watch_keys)) from e
            except (RedisConnectionError, RedisTimeoutError) as e:
                logger.error(f"{description} status unknown, connection failed during EXEC: {e}")
                raise BatchStatusUnknownError(
                    f"{description}: connection failed while the batch was in flight; "
                    "the write may or may not have been applied"
                ) from e
            except RedisError as e:
                logger.error(f"{description} failed: {e}")
                raise StoreUnavailableError(str(e)) from e
            logger.debug(f"{description} committed")
        finally:
            pipe.reset()

    def test_connection(self) -> bool:
        """Ping the store.

        Returns:
            True if the store answered, False otherwise.
        """
        try:
            self.client.ping()
            logger.info("Redis connection test successful")
            return True
        except RedisError as e:
            logger.error(f"Redis connection test failed: {e}")
            return False

    def __enter__(self) -> "RedisConnection":
        """Context manager entry."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:  # type: ignore
        """Context manager exit."""
        self.close()
