"""
Authorization decision cache.

Decisions are stored in an aiocache backend (in-process memory by default,
redis when configured) under keys that embed two generation counters:
one per principal and one global. Invalidation bumps a counter instead
of scanning keys, so it works the same on a shared redis store. Entries
left behind under an old generation are unreachable and expire with
their TTL.

Per-principal counters expire too, one TTL after the last invalidation or
decision written under them. By then every decision keyed on the counter
has expired, so a counter falling back to 0 cannot revive an old entry.
The global counter is a single key and never expires.
"""

import logging
from typing import NamedTuple, Optional

from aiocache import Cache

from studio_backend.redis_cache import create_cache_backend
from studio_backend.settings import AuthorizationSettings

logger = logging.getLogger(__name__)


class CacheGeneration(NamedTuple):
    """Snapshot of the invalidation counters a decision was computed under"""
    global_generation: int
    principal_generation: int


class AuthorizationCache:
    """
    Process-wide (principal, permission) -> bool cache

    Every stored decision carries the configured TTL; an expired entry is a
    miss even if no invalidation was issued.
    """

    def __init__(self, settings: AuthorizationSettings, backend: Optional[Cache] = None):
        self.settings = settings
        # A zero TTL would mean "never expires"; treat it as caching off
        self.enabled = settings.cache_enabled and settings.cache_ttl > 0
        self.ttl_seconds = settings.cache_ttl
        self.prefix = f"{settings.cache_prefix}authz:"
        self.backend = backend if backend is not None else create_cache_backend(settings)

    def _global_generation_key(self) -> str:
        return f"{self.prefix}gen"

    def _principal_generation_key(self, principal_id: str) -> str:
        return f"{self.prefix}gen:{principal_id}"

    def _decision_key(self, principal_id: str, permission: str,
                      generation: CacheGeneration) -> str:
        return (
            f"{self.prefix}decision:{principal_id}:"
            f"{generation.global_generation}:{generation.principal_generation}:{permission}"
        )

    async def generation(self, principal_id: str) -> CacheGeneration:
        """Read the current invalidation counters for a principal"""
        if not self.enabled:
            return CacheGeneration(0, 0)

        values = await self.backend.multi_get([
            self._global_generation_key(),
            self._principal_generation_key(principal_id),
        ])
        global_generation, principal_generation = (int(v or 0) for v in values)
        return CacheGeneration(global_generation, principal_generation)

    async def get(self, principal_id: str, permission: str,
                  generation: Optional[CacheGeneration] = None) -> Optional[bool]:
        """
        Get a cached decision

        Returns:
            Cached decision or None on a miss
        """
        if not self.enabled:
            return None

        if generation is None:
            generation = await self.generation(principal_id)

        key = self._decision_key(principal_id, permission, generation)
        cached_value = await self.backend.get(key)

        if cached_value is None:
            logger.debug(f"Cache miss for {key}")
            return None

        logger.debug(f"Cache hit for {key}")
        return bool(cached_value)

    async def put(self, principal_id: str, permission: str, decision: bool,
                  generation: Optional[CacheGeneration] = None):
        """
        Store a decision

        Pass the generation captured before the decision was computed so a
        concurrent invalidation is never overwritten by a stale value.
        """
        if not self.enabled:
            return

        if generation is None:
            generation = await self.generation(principal_id)

        key = self._decision_key(principal_id, permission, generation)
        await self.backend.set(key, bool(decision), ttl=self.ttl_seconds)
        if generation.principal_generation:
            await self.backend.expire(self._principal_generation_key(principal_id), self.ttl_seconds)
        logger.debug(f"Cached decision for {key}: {decision}")

    async def invalidate(self, principal_id: str):
        """Drop every cached decision for one principal"""
        if not self.enabled:
            return

        key = self._principal_generation_key(principal_id)
        await self.backend.increment(key)
        await self.backend.expire(key, self.ttl_seconds)
        logger.debug(f"Invalidated authorization cache for principal {principal_id}")

    async def invalidate_all(self):
        """Drop every cached decision"""
        if not self.enabled:
            return

        await self.backend.increment(self._global_generation_key())
        logger.info("Authorization cache invalidated globally")
