"""
================================================================================
SiteSearch - Durable Key/Value Stores
================================================================================
Backends for the persistent search cache. Every backend speaks the same small
string-keyed contract (get / set / remove / keys), so the cache above it does
not care whether entries live in Redis, a SQL table or process memory.

Backends:
  - MemoryBackend   - process memory, used by tests and as the fallback
  - RedisBackend    - shared across workers, survives app restarts
  - DatabaseBackend - kv_store table through SQLAlchemy
================================================================================
"""

import hashlib
import logging
import threading
from typing import Dict, List, Optional, Protocol

try:
    import redis
    HAS_REDIS = True
except ImportError:
    HAS_REDIS = False

from sqlalchemy.orm import sessionmaker

from .database import (
    check_database_connection,
    create_db_engine,
    get_database_url,
    init_database,
    make_session_factory,
    session_scope,
)
from .models import KEY_MAX_LENGTH, KeyValueEntry

logger = logging.getLogger(__name__)


class KeyValueStore(Protocol):
    """String-keyed durable store used by PersistentCache."""

    def get(self, key: str) -> Optional[str]:
        """Return the stored string or None."""
        ...

    def set(self, key: str, value: str) -> None:
        ...

    def remove(self, key: str) -> None:
        ...

    def keys(self, prefix: str = "") -> List[str]:
        """Return all keys starting with prefix."""
        ...


class MemoryBackend:
    """In-memory storage."""

    def __init__(self):
        self._data: Dict[str, str] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        with self._lock:
            self._data[key] = value

    def remove(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)

    def keys(self, prefix: str = "") -> List[str]:
        with self._lock:
            return [k for k in self._data if k.startswith(prefix)]


class RedisBackend:
    """Redis-based storage for shared state."""

    def __init__(self, url: Optional[str] = None, client=None):
        if client is None:
            if not HAS_REDIS:
                raise RuntimeError("redis package is not installed")
            client = redis.from_url(url, decode_responses=True)
        self.client = client
        self.url = url

    def ping(self) -> bool:
        return bool(self.client.ping())

    def get(self, key: str) -> Optional[str]:
        try:
            return self.client.get(key)
        except Exception as e:
            logger.error(f"Redis GET failed: {e}")
            return None

    def set(self, key: str, value: str) -> None:
        try:
            self.client.set(key, value)
        except Exception as e:
            logger.error(f"Redis SET failed: {e}")

    def remove(self, key: str) -> None:
        try:
            self.client.delete(key)
        except Exception as e:
            logger.error(f"Redis DELETE failed: {e}")

    def keys(self, prefix: str = "") -> List[str]:
        try:
            return list(self.client.scan_iter(match=f"{prefix}*"))
        except Exception as e:
            logger.error(f"Redis SCAN failed: {e}")
            return []


# Room left for the digest once a long key is shortened
HASHED_KEY_HEAD = KEY_MAX_LENGTH - 65


def storage_key(key: str) -> str:
    """
    Fit a key into the kv_store key column.

    Keys longer than the column keep their head (so prefix scans still match)
    followed by a sha256 digest of the full key. Short keys are unchanged,
    which makes the mapping idempotent for keys returned by keys().
    """
    if len(key) <= KEY_MAX_LENGTH:
        return key
    digest = hashlib.sha256(key.encode('utf-8')).hexdigest()
    return f"{key[:HASHED_KEY_HEAD]}#{digest}"


class DatabaseBackend:
    """SQL table storage (kv_store) through SQLAlchemy sessions."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    @classmethod
    def from_engine(cls, engine) -> "DatabaseBackend":
        init_database(engine)
        return cls(make_session_factory(engine))

    @classmethod
    def from_url(cls, db_url: Optional[str] = None) -> "DatabaseBackend":
        return cls.from_engine(create_db_engine(get_database_url(db_url)))

    def get(self, key: str) -> Optional[str]:
        try:
            with session_scope(self._session_factory) as session:
                entry = session.get(KeyValueEntry, storage_key(key))
                return entry.value if entry else None
        except Exception as e:
            logger.error(f"Database GET failed: {e}")
            return None

    def set(self, key: str, value: str) -> None:
        try:
            with session_scope(self._session_factory) as session:
                session.merge(KeyValueEntry(key=storage_key(key), value=value))
        except Exception as e:
            logger.error(f"Database SET failed: {e}")

    def remove(self, key: str) -> None:
        try:
            with session_scope(self._session_factory) as session:
                session.query(KeyValueEntry).filter(KeyValueEntry.key == storage_key(key)).delete()
        except Exception as e:
            logger.error(f"Database DELETE failed: {e}")

    def keys(self, prefix: str = "") -> List[str]:
        try:
            with session_scope(self._session_factory) as session:
                rows = (
                    session.query(KeyValueEntry.key)
                    .filter(KeyValueEntry.key.startswith(prefix, autoescape=True))
                    .all()
                )
                return [row[0] for row in rows]
        except Exception as e:
            logger.error(f"Database key scan failed: {e}")
            return []


def create_store(kind: str = "memory", redis_url: Optional[str] = None,
                 database_url: Optional[str] = None) -> KeyValueStore:
    """
    Build the configured durable store.

    Args:
        kind: "memory", "redis" or "database"
        redis_url: Redis connection URL (kind="redis")
        database_url: SQLAlchemy URL (kind="database", falls back to SQLite)

    Redis and database connection failures fall back to memory with a warning.
    """
    kind = (kind or "memory").lower()

    if kind == "redis":
        if HAS_REDIS and redis_url:
            try:
                backend = RedisBackend(redis_url)
                backend.ping()
                logger.info(f"Persistent store initialized with Redis: {redis_url}")
                return backend
            except Exception as e:
                logger.warning(f"Redis connection failed, falling back to memory: {e}")
        else:
            logger.warning("Redis store requested but redis or REDIS_URL is missing, using memory")
        return MemoryBackend()

    if kind == "database":
        engine = create_db_engine(get_database_url(database_url))
        if not check_database_connection(engine):
            logger.warning("Database unreachable, falling back to memory")
            return MemoryBackend()
        logger.info("Persistent store initialized with database backend")
        return DatabaseBackend.from_engine(engine)

    if kind != "memory":
        raise ValueError(f"Unknown persistent store kind: {kind}")

    logger.info("Persistent store initialized with MemoryBackend")
    return MemoryBackend()
