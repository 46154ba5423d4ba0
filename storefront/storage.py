"""
Storage Module - durable key-value backends

Provides the persisted state layer shared by the cart and session stores:
- MemoryStorage: process-local dict (tests, ephemeral sessions)
- FileStorage: one JSON document on disk (the local-storage analogue)
- RedisStorage: Upstash Redis over REST

Absent keys are a valid "empty / logged out" state, never an error.
"""

import asyncio
import json
import os
from pathlib import Path
from typing import Dict, Optional

from upstash_redis.asyncio import Redis as AsyncRedis

from storefront.config import Settings
from storefront.logging import get_logger

logger = get_logger(__name__)


class StorageKeys:
    """Key names of the persisted state layout."""

    TOKEN = "token"
    USER = "user"
    CART = "cart"

    def __init__(self, prefix: str = ""):
        self.prefix = prefix

    def _key(self, name: str) -> str:
        return f"{self.prefix}{name}"

    @property
    def token(self) -> str:
        return self._key(self.TOKEN)

    @property
    def user(self) -> str:
        return self._key(self.USER)

    @property
    def cart(self) -> str:
        return self._key(self.CART)


class BaseStorage:
    """Async key-value interface every backend implements."""

    def __init__(self, keys: Optional[StorageKeys] = None) -> None:
        self.keys = keys or StorageKeys()

    async def get(self, key: str) -> Optional[str]:
        raise NotImplementedError

    async def set(self, key: str, value: str) -> None:
        raise NotImplementedError

    async def delete(self, *keys: str) -> None:
        raise NotImplementedError

    async def aclose(self) -> None:
        """Release backend resources (no-op by default)."""


class MemoryStorage(BaseStorage):
    """Dict-backed storage, lost when the process exits."""

    def __init__(self, keys: Optional[StorageKeys] = None, data: Optional[Dict[str, str]] = None) -> None:
        super().__init__(keys)
        self.data: Dict[str, str] = dict(data or {})

    async def get(self, key: str) -> Optional[str]:
        return self.data.get(key)

    async def set(self, key: str, value: str) -> None:
        self.data[key] = value

    async def delete(self, *keys: str) -> None:
        for key in keys:
            self.data.pop(key, None)


class FileStorage(BaseStorage):
    """
    Storage backed by a single JSON object on disk.

    The whole document is re-read on every access so that several processes
    sharing one file see each other's writes. Writes go to a temp file that
    then replaces the existing file. Disk access runs in a worker thread so
    the event loop is not blocked; there is no cross-process locking, so the
    file suits one local user.
    """

    def __init__(self, path: str | os.PathLike, keys: Optional[StorageKeys] = None) -> None:
        super().__init__(keys)
        self.path = Path(path).expanduser()
        # Serializes read-modify-write cycles within this process
        self._lock = asyncio.Lock()

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8") or "{}")
        except json.JSONDecodeError as e:
            logger.warning(f"Storage file {self.path} is corrupted, starting empty: {e}")
            return {}
        if not isinstance(data, dict):
            logger.warning(f"Storage file {self.path} is not a JSON object, starting empty")
            return {}
        return data

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(data), encoding="utf-8")
        tmp_path.replace(self.path)

    def _set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)

    def _delete(self, keys: tuple[str, ...]) -> None:
        data = self._read()
        removed = [key for key in keys if data.pop(key, None) is not None]
        if removed:
            self._write(data)

    async def get(self, key: str) -> Optional[str]:
        value = (await asyncio.to_thread(self._read)).get(key)
        return None if value is None else str(value)

    async def set(self, key: str, value: str) -> None:
        async with self._lock:
            await asyncio.to_thread(self._set, key, value)

    async def delete(self, *keys: str) -> None:
        async with self._lock:
            await asyncio.to_thread(self._delete, keys)


class RedisStorage(BaseStorage):
    """Upstash Redis storage (REST client, async)."""

    def __init__(self, client: AsyncRedis, keys: Optional[StorageKeys] = None) -> None:
        super().__init__(keys)
        self.client = client

    @classmethod
    def from_credentials(cls, url: str, token: str, keys: Optional[StorageKeys] = None) -> "RedisStorage":
        if not url or not token:
            raise ValueError("UPSTASH_REDIS_REST_URL and UPSTASH_REDIS_REST_TOKEN must be set")
        return cls(AsyncRedis(url=url, token=token), keys)

    async def get(self, key: str) -> Optional[str]:
        value = await self.client.get(key)
        return None if value is None else str(value)

    async def set(self, key: str, value: str) -> None:
        await self.client.set(key, value)

    async def delete(self, *keys: str) -> None:
        if keys:
            await self.client.delete(*keys)

    async def aclose(self) -> None:
        await self.client.close()


def create_storage(settings: Settings) -> BaseStorage:
    """Build the storage backend selected by settings."""
    keys = StorageKeys(settings.storage_prefix)

    if settings.storage_backend == "memory":
        return MemoryStorage(keys)
    if settings.storage_backend == "redis":
        return RedisStorage.from_credentials(settings.redis_url, settings.redis_token, keys)
    return FileStorage(settings.storage_path, keys)
