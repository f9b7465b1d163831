"""
Application configuration.

Values come from the environment (a .env file is loaded first by
create_app). Durations are configured in seconds and converted to the
millisecond TTLs the caches use.
"""

import os
from dataclasses import dataclass
from typing import Optional


def _env_bool(name: str, default: str = 'false') -> bool:
    return os.environ.get(name, default).lower() in ('1', 'true', 'yes', 'on')


def _env_int(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == '':
        return default
    return int(raw)


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == '':
        return default
    return float(raw)


@dataclass
class Config:
    # Search result cache
    search_cache_max_size: int = 200
    search_cache_ttl: int = 10 * 60
    # Suggestion cache
    suggestion_cache_max_size: int = 50
    suggestion_cache_ttl: int = 30 * 60
    # Seconds between background sweeps, 0 disables them
    cache_sweep_interval: float = 60.0

    # Durable store: memory, redis or database
    persistent_store: str = 'memory'
    redis_url: Optional[str] = None
    database_url: Optional[str] = None

    # Remote search endpoint for SearchClient
    search_api_url: str = 'http://127.0.0.1:5000/api/search'
    search_api_timeout: float = 10.0

    content_index_path: Optional[str] = None

    search_rate_limit: str = '20 per minute'
    rate_limit_storage_uri: str = 'memory://'
    disable_rate_limiting: bool = False

    host: str = '127.0.0.1'
    port: int = 5000
    debug: bool = False

    @classmethod
    def from_env(cls) -> 'Config':
        return cls(
            search_cache_max_size=_env_int('SEARCH_CACHE_MAX_SIZE', cls.search_cache_max_size),
            search_cache_ttl=_env_int('SEARCH_CACHE_TTL', cls.search_cache_ttl),
            suggestion_cache_max_size=_env_int('SUGGESTION_CACHE_MAX_SIZE', cls.suggestion_cache_max_size),
            suggestion_cache_ttl=_env_int('SUGGESTION_CACHE_TTL', cls.suggestion_cache_ttl),
            cache_sweep_interval=_env_float('CACHE_SWEEP_INTERVAL', cls.cache_sweep_interval),
            persistent_store=os.environ.get('PERSISTENT_STORE', cls.persistent_store),
            redis_url=os.environ.get('REDIS_URL') or None,
            database_url=os.environ.get('DATABASE_URL') or None,
            search_api_url=os.environ.get('SEARCH_API_URL', cls.search_api_url),
            search_api_timeout=_env_float('SEARCH_API_TIMEOUT', cls.search_api_timeout),
            content_index_path=os.environ.get('CONTENT_INDEX_PATH') or None,
            search_rate_limit=os.environ.get('SEARCH_RATE_LIMIT', cls.search_rate_limit),
            rate_limit_storage_uri=os.environ.get('RATELIMIT_STORAGE_URI', cls.rate_limit_storage_uri),
            disable_rate_limiting=_env_bool('DISABLE_RATE_LIMITING'),
            host=os.environ.get('FLASK_HOST', cls.host),
            port=_env_int('FLASK_PORT', cls.port),
            debug=_env_bool('FLASK_DEBUG'),
        )

    @property
    def sweep_interval(self) -> Optional[float]:
        return self.cache_sweep_interval if self.cache_sweep_interval > 0 else None
