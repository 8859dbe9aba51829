from aiocache import Cache

from studio_backend.settings import AuthorizationSettings


def create_cache_backend(settings: AuthorizationSettings) -> Cache:
    """Build the aiocache backend that stores authorization decisions"""
    if settings.cache_backend == "redis":
        return Cache(
            Cache.REDIS,
            endpoint=settings.redis_host,
            port=settings.redis_port,
            password=settings.redis_password,
            pool_max_size=10,
            db=0
        )

    return Cache(Cache.MEMORY)
