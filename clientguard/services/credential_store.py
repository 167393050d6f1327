"""
Credential storage with an environment-dependent two-tier policy.

Writes go to one tier, chosen once from the environment:
- production: the ephemeral session tier, dropped when the session ends
- otherwise: the durable tier, shared across sessions

Reads always check the session tier first and fall back to the durable
tier, whatever the environment. Storage failures are logged and absorbed.
"""

from abc import ABC, abstractmethod
from typing import Dict, Optional

import redis
from redis.exceptions import RedisError

from clientguard.config import Settings, settings as default_settings
from clientguard.models.credential import StorageTier, StoredCredential
from clientguard.utils.logging import EventLogger, get_event_logger


ACCESS_TOKEN_KEY = "carenest_auth_token"
REFRESH_TOKEN_KEY = "carenest_refresh_token"


class StorageError(Exception):
    """Raised by a storage backend that cannot complete an operation."""
    pass


class StorageBackend(ABC):
    """Key/value storage tier."""

    @abstractmethod
    def get_item(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        pass

    @abstractmethod
    def clear(self) -> None:
        pass


class MemoryStorage(StorageBackend):
    """In-process storage tier."""

    def __init__(self, max_items: Optional[int] = None):
        """
        Args:
            max_items: Optional quota; writing a new key beyond it raises StorageError
        """
        self._items: Dict[str, str] = {}
        self._max_items = max_items

    def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    def set_item(self, key: str, value: str) -> None:
        if self._max_items is not None and key not in self._items and len(self._items) >= self._max_items:
            raise StorageError(f"Storage quota of {self._max_items} items exceeded")
        self._items[key] = value

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    def clear(self) -> None:
        self._items.clear()

    def __len__(self) -> int:
        return len(self._items)


class RedisStorage(StorageBackend):
    """
    Durable storage tier backed by Redis.

    Keys are written under a namespace prefix; clear() removes only keys in
    that namespace.

    Args:
        client: Redis client created with decode_responses=True
        namespace: Key prefix (e.g. the configured token storage key)
    """

    def __init__(self, client: redis.Redis, namespace: str):
        self._client = client
        self._namespace = namespace

    @classmethod
    def from_url(cls, redis_url: str, namespace: str) -> "RedisStorage":
        """Create a storage tier from a Redis connection URL."""
        client = redis.Redis.from_url(redis_url, decode_responses=True)
        return cls(client, namespace)

    def _key(self, key: str) -> str:
        return f"{self._namespace}:{key}"

    def get_item(self, key: str) -> Optional[str]:
        try:
            return self._client.get(self._key(key))
        except RedisError as e:
            raise StorageError(f"Failed to read {key}: {e}") from e

    def set_item(self, key: str, value: str) -> None:
        try:
            self._client.set(self._key(key), value)
        except RedisError as e:
            raise StorageError(f"Failed to write {key}: {e}") from e

    def remove_item(self, key: str) -> None:
        try:
            self._client.delete(self._key(key))
        except RedisError as e:
            raise StorageError(f"Failed to remove {key}: {e}") from e

    def clear(self) -> None:
        try:
            keys = list(self._client.scan_iter(match=f"{self._namespace}:*"))
            if keys:
                self._client.delete(*keys)
        except RedisError as e:
            raise StorageError(f"Failed to clear namespace {self._namespace}: {e}") from e


def create_durable_storage(settings: Optional[Settings] = None) -> StorageBackend:
    """Durable tier for the configured environment: Redis when a URL is set, else in-process."""
    settings = settings or default_settings
    if settings.credential_store_url:
        return RedisStorage.from_url(settings.credential_store_url, settings.token_storage_key)
    return MemoryStorage()


class CredentialStore:
    """
    Two-tier credential storage.

    Args:
        settings: Environment configuration selecting the write tier
        session_storage: Ephemeral tier (default: new in-process storage)
        durable_storage: Durable tier (default: per create_durable_storage)
        event_logger: Logger for storage failures (default: process-wide logger)

    Example:
        store = CredentialStore(settings)
        store.set(ACCESS_TOKEN_KEY, token)
        token = store.get(ACCESS_TOKEN_KEY)
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        session_storage: Optional[StorageBackend] = None,
        durable_storage: Optional[StorageBackend] = None,
        event_logger: Optional[EventLogger] = None
    ):
        self.settings = settings or default_settings
        self.session_storage = session_storage if session_storage is not None else MemoryStorage()
        self.durable_storage = durable_storage if durable_storage is not None else create_durable_storage(self.settings)
        self._event_logger = event_logger

    @property
    def event_logger(self) -> EventLogger:
        return self._event_logger or get_event_logger()

    @property
    def write_tier(self) -> StorageTier:
        """Tier every write goes to in this environment."""
        return StorageTier.SESSION if self.settings.is_production else StorageTier.PERSISTENT

    def set(self, key: str, value: str) -> Optional[StoredCredential]:
        """
        Store a credential in the environment's write tier.

        Returns:
            The stored credential, or None if the storage failed
        """
        tier = self.write_tier
        storage = self.session_storage if tier == StorageTier.SESSION else self.durable_storage

        try:
            storage.set_item(key, value)
        except Exception as e:
            self.event_logger.error("Failed to store token", {"key": key, "error": str(e)})
            return None

        return StoredCredential(key=key, value=value, tier=tier)

    def get(self, key: str) -> Optional[str]:
        """Read a credential from the session tier, falling back to the durable tier."""
        try:
            return self.session_storage.get_item(key) or self.durable_storage.get_item(key)
        except Exception as e:
            self.event_logger.error("Failed to retrieve token", {"key": key, "error": str(e)})
            return None

    def remove(self, key: str) -> None:
        """Remove a credential from both tiers."""
        try:
            self.session_storage.remove_item(key)
            self.durable_storage.remove_item(key)
        except Exception as e:
            self.event_logger.error("Failed to remove token", {"key": key, "error": str(e)})

    def clear(self) -> None:
        """Wipe both tiers."""
        try:
            self.session_storage.clear()
            self.durable_storage.clear()
        except Exception as e:
            self.event_logger.error("Failed to clear storage", {"error": str(e)})

    def save_session(self, access_token: str, refresh_token: Optional[str] = None) -> bool:
        """
        Persist the tokens of a successful login or refresh.

        Returns:
            True if every token was stored
        """
        stored = self.set(ACCESS_TOKEN_KEY, access_token) is not None
        if refresh_token is not None:
            stored = self.set(REFRESH_TOKEN_KEY, refresh_token) is not None and stored
        return stored

    def clear_session(self) -> None:
        """Drop the tokens of the current session (logout)."""
        self.remove(ACCESS_TOKEN_KEY)
        self.remove(REFRESH_TOKEN_KEY)
