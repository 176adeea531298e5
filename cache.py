from typing import Any, Callable, TypeVar
from redis import Redis, RedisError
from pydantic import TypeAdapter
import logging

from core.config import get_settings

logger = logging.getLogger(__name__)
settings = get_settings()

T = TypeVar("T")

redis_client = Redis(
    host=settings.REDIS_HOST,
    port=settings.REDIS_PORT,
    db=settings.REDIS_DB,
    decode_responses=True
)


class LookupCache:
    """Redis-backed cache for small reference tables.

    Values are stored as JSON produced by a pydantic ``TypeAdapter`` so the
    cached form round-trips to the same models the services return. Any
    backend error is logged and the loader result is served uncached.
    """

    def __init__(self, client: Redis, prefix: str | None = None):
        self.client = client
        self.prefix = prefix if prefix is not None else settings.CACHE_KEY_PREFIX

    def key(self, name: str) -> str:
        return f"{self.prefix}:{name}"

    def get_or_load(
        self,
        name: str,
        loader: Callable[[], T],
        adapter: TypeAdapter,
        expire: int | None = None,
    ) -> T:
        cache_key = self.key(name)
        try:
            cached = self.client.get(cache_key)
            if cached is not None:
                return adapter.validate_json(cached)
        except RedisError as e:
            logger.error(f"Cache read error for {cache_key}: {str(e)}")
            return loader()

        result = loader()
        try:
            self.client.setex(
                cache_key,
                expire or settings.LOOKUP_CACHE_EXPIRE_TIME,
                adapter.dump_json(result),
            )
        except RedisError as e:
            logger.error(f"Cache write error for {cache_key}: {str(e)}")
        return result

    def invalidate(self, *names: str) -> None:
        if not names:
            return
        try:
            self.client.delete(*[self.key(name) for name in names])
        except RedisError as e:
            logger.error(f"Cache invalidation error for {names}: {str(e)}")

    def invalidate_prefix(self, name_prefix: str) -> int:
        """Delete every key under ``name_prefix``; returns how many went."""
        removed = 0
        try:
            keys = list(self.client.scan_iter(match=f"{self.key(name_prefix)}*"))
            if keys:
                removed = self.client.delete(*keys)
        except RedisError as e:
            logger.error(f"Cache invalidation error for {name_prefix}*: {str(e)}")
        return removed

    def clear(self) -> int:
        return self.invalidate_prefix("")

    def ping(self) -> Any:
        return self.client.ping()


def get_lookup_cache() -> LookupCache:
    return LookupCache(redis_client)
