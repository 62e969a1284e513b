"""
Storage gateway for paste records, backed by Redis with an in-memory store for development.

Each paste lives in a Redis hash at ``paste:<url>`` holding the fields
id, url, password_hash, content, date_published and date_edited.
Business validation does not happen here; callers get a small error taxonomy.
"""
import copy
import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Union

from pydantic import ValidationError
from redis import Redis
from redis.exceptions import RedisError, ResponseError, WatchError

from pasties.models import Paste

logger = logging.getLogger(__name__)

KEY_PREFIX = "paste:"
SCHEMA_KEY = "pasties:schema"
SCHEMA_VERSION = "1"
MEMORY_URL = "memory://"


class StorageError(Exception):
    """Base class for storage gateway failures."""


class RecordNotFoundError(StorageError):
    """No paste is stored under the requested url."""


class StorageReadError(StorageError):
    """The store failed while reading a record."""


class StorageWriteError(StorageError):
    """The store rejected or failed a write."""


class StorageConflictError(StorageWriteError):
    """A write targeted a url that is already taken."""


class StorageInitError(StorageError):
    """The store could not be connected to or prepared. Fatal at startup."""


class InMemoryStore:
    """Simple in-memory store for development/testing, speaking the Redis subset the gateway uses."""

    def __init__(self):
        self.store: Dict[str, Any] = {}
        # bumped on every write so watched transactions can detect interference
        self.versions: Dict[str, int] = {}
        self._lock = threading.RLock()

    def _touch(self, *keys: str):
        for key in keys:
            self.versions[key] = self.versions.get(key, 0) + 1

    def hset(self, key: str, mapping: Dict[str, Any]):
        """Set hash fields, creating the hash if needed."""
        with self._lock:
            fields = self.store.setdefault(key, {})
            fields.update({field: str(value) for field, value in mapping.items()})
            self._touch(key)
            return len(mapping)

    def hgetall(self, key: str) -> Dict[str, str]:
        """Retrieve hash data."""
        with self._lock:
            return dict(self.store.get(key, {}))

    def exists(self, key: str) -> int:
        with self._lock:
            return int(key in self.store)

    def rename(self, src: str, dst: str) -> bool:
        """Rename a key, overwriting the destination."""
        with self._lock:
            if src not in self.store:
                raise ResponseError("no such key")
            self.store[dst] = self.store.pop(src)
            self._touch(src, dst)
            return True

    def setnx(self, key: str, value: Any) -> bool:
        with self._lock:
            if key in self.store:
                return False
            self.store[key] = str(value)
            self._touch(key)
            return True

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            value = self.store.get(key)
            return value if isinstance(value, str) else None

    def delete(self, key: str) -> int:
        """Delete a key."""
        with self._lock:
            if self.store.pop(key, None) is None:
                return 0
            self._touch(key)
            return 1

    def ping(self):
        """Health check."""
        return True

    def transaction(self, func: Callable, *watches: str, value_from_callable: bool = False):
        """
        Run ``func`` against a watched pipeline, retrying when a watched key
        changes before the queued commands are applied. Mirrors ``Redis.transaction``.
        """
        while True:
            pipe = InMemoryPipeline(self, watches)
            func_value = func(pipe)
            try:
                exec_value = pipe.execute()
            except WatchError:
                continue
            return func_value if value_from_callable else exec_value


class InMemoryPipeline:
    """
    Pipeline over an InMemoryStore.

    Commands run immediately until ``multi()``; after that they are queued
    and ``execute()`` applies them all or none.
    """

    def __init__(self, store: InMemoryStore, watches=()):
        self.store = store
        self.queued: Optional[List[Callable[[], Any]]] = None
        with store._lock:
            self.watched = {key: store.versions.get(key, 0) for key in watches}

    def multi(self):
        self.queued = []

    def _command(self, command: Callable[[], Any]):
        if self.queued is None:
            return command()
        self.queued.append(command)

    def exists(self, key: str):
        return self._command(lambda: self.store.exists(key))

    def hgetall(self, key: str):
        return self._command(lambda: self.store.hgetall(key))

    def hset(self, key: str, mapping: Dict[str, Any]):
        return self._command(lambda: self.store.hset(key, mapping=mapping))

    def rename(self, src: str, dst: str):
        return self._command(lambda: self.store.rename(src, dst))

    def delete(self, key: str):
        return self._command(lambda: self.store.delete(key))

    def execute(self) -> List[Any]:
        with self.store._lock:
            for key, version in self.watched.items():
                if self.store.versions.get(key, 0) != version:
                    raise WatchError(f"watched key {key} changed")
            snapshot = copy.deepcopy(self.store.store)
            try:
                return [command() for command in self.queued or []]
            except RedisError:
                self.store.store = snapshot
                raise


def _key(url: str) -> str:
    return f"{KEY_PREFIX}{url}"


class PasteDatabase:
    """Wrapper for Redis operations on pastes."""

    def __init__(self, redis: Union[Redis, InMemoryStore]):
        self.redis = redis

    @property
    def using_fallback(self) -> bool:
        return isinstance(self.redis, InMemoryStore)

    def is_healthy(self) -> bool:
        """Check if database connection is alive."""
        try:
            self.redis.ping()
            return True
        except RedisError as e:
            logger.error(f"Health check failed: {e}")
        return False

    def insert(self, paste: Paste) -> None:
        """
        Store a new paste.

        The existence check and the write run in one watched transaction, so
        two writers racing on the same url cannot both succeed and a failed
        write leaves nothing behind.

        Raises:
            StorageConflictError: a paste with this url already exists
            StorageWriteError: the store failed the write
        """
        key = _key(paste.url)
        fields = {
            "id": str(paste.id),
            "url": paste.url,
            "password_hash": paste.password_hash,
            "content": paste.content,
            "date_published": str(paste.date_published),
            "date_edited": str(paste.date_edited),
        }

        def write(pipe):
            if pipe.exists(key):
                raise StorageConflictError(f"paste {paste.url} already exists")
            pipe.multi()
            pipe.hset(key, mapping=fields)

        try:
            self.redis.transaction(write, key)
        except RedisError as e:
            logger.error(f"Error saving paste {paste.url}: {e}")
            raise StorageWriteError(str(e)) from e
        logger.debug(f"Paste {paste.url} stored")

    def retrieve(self, url: str) -> Paste:
        """
        Fetch a paste by url.

        Raises:
            RecordNotFoundError: nothing is stored under this url
            StorageReadError: the store failed or returned an unreadable record
        """
        try:
            data = self.redis.hgetall(_key(url))
        except RedisError as e:
            logger.error(f"Error fetching paste {url}: {e}")
            raise StorageReadError(str(e)) from e

        if not data:
            raise RecordNotFoundError(url)

        try:
            return Paste.model_validate(data)
        except ValidationError as e:
            logger.error(f"Paste {url} has an unreadable record: {e}")
            raise StorageReadError(f"unreadable record for {url}") from e

    def exists(self, url: str) -> bool:
        try:
            return bool(self.redis.exists(_key(url)))
        except RedisError as e:
            logger.error(f"Error checking paste {url}: {e}")
            raise StorageReadError(str(e)) from e

    def update(
        self,
        url: str,
        content: str,
        password_hash: str,
        date_edited: int,
        new_url: Optional[str] = None,
    ) -> None:
        """
        Replace the mutable fields of the paste stored under ``url``.

        Passing a different ``new_url`` renames the paste. A missing paste is
        not an error: like an UPDATE matching zero rows, nothing happens.
        The rename and the field write are applied together or not at all.

        Raises:
            StorageConflictError: ``new_url`` is already taken
            StorageWriteError: the store failed the write
        """
        target = new_url or url
        source_key, target_key = _key(url), _key(target)

        def write(pipe):
            if not pipe.exists(source_key):
                return False
            if target_key != source_key and pipe.exists(target_key):
                raise StorageConflictError(f"paste {target} already exists")
            pipe.multi()
            if target_key != source_key:
                pipe.rename(source_key, target_key)
            pipe.hset(target_key, mapping={
                "url": target,
                "password_hash": password_hash,
                "content": content,
                "date_edited": str(date_edited),
            })
            return True

        try:
            updated = self.redis.transaction(
                write, source_key, target_key, value_from_callable=True,
            )
        except RedisError as e:
            logger.error(f"Error updating paste {url}: {e}")
            raise StorageWriteError(str(e)) from e
        if not updated:
            logger.debug(f"Update of missing paste {url} matched nothing")

    def delete(self, url: str) -> None:
        """Delete a paste. Deleting a missing paste succeeds."""
        try:
            self.redis.delete(_key(url))
        except RedisError as e:
            logger.error(f"Error deleting paste {url}: {e}")
            raise StorageWriteError(str(e)) from e


def init_database(redis_url: str) -> PasteDatabase:
    """
    Connect to the store and prepare the schema marker.

    ``memory://`` selects the in-memory store. Any other value is handed to
    ``Redis.from_url``; there is no silent fallback when it is unreachable.

    Raises:
        StorageInitError: connection or schema preparation failed
    """
    if redis_url.startswith(MEMORY_URL):
        logger.warning("Using in-memory store. Data will NOT persist across restarts.")
        redis: Union[Redis, InMemoryStore] = InMemoryStore()
    else:
        logger.info(f"Attempting to connect to Redis: {redis_url[:30]}...")
        try:
            redis = Redis.from_url(redis_url, decode_responses=True)
            redis.ping()
        except RedisError as e:
            raise StorageInitError(
                f"Failed to connect to Redis: {type(e).__name__}: {e}"
            ) from e
        except ValueError as e:
            raise StorageInitError(f"Invalid REDIS_URL: {e}") from e

    try:
        redis.setnx(SCHEMA_KEY, SCHEMA_VERSION)
        version = redis.get(SCHEMA_KEY)
    except RedisError as e:
        raise StorageInitError(f"Failed to prepare paste storage: {e}") from e
    if version != SCHEMA_VERSION:
        raise StorageInitError(
            f"Unsupported paste storage schema {version!r}, expected {SCHEMA_VERSION!r}"
        )

    logger.info("Paste storage ready")
    return PasteDatabase(redis)
