"""
Persisted key/value storage surviving across sessions.

Supports an in-memory fallback for tests, a JSON file for local runs and a
Redis-backed implementation for shared deployments.
"""

from __future__ import annotations

import json
import logging
import os
import threading
from dataclasses import dataclass, field
from typing import Any, Optional, Protocol

import redis
from redis import exceptions as redis_exceptions

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when a value cannot be persisted."""


class LocalStorage(Protocol):
    """String key/value store, modeled on the browser's localStorage."""

    def get_item(self, key: str) -> Optional[str]:
        ...

    def set_item(self, key: str, value: str) -> None:
        ...

    def remove_item(self, key: str) -> None:
        ...


@dataclass
class InMemoryLocalStorage:
    """Simple dict-backed storage for testing/dev."""

    items: dict[str, str] = field(default_factory=dict)

    def get_item(self, key: str) -> Optional[str]:
        return self.items.get(key)

    def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    def remove_item(self, key: str) -> None:
        self.items.pop(key, None)


@dataclass
class JsonFileLocalStorage:
    """Keeps every key in a single JSON object on disk."""

    path: str

    def __post_init__(self):
        self._lock = threading.Lock()

    def _read(self) -> dict[str, str]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, ValueError):
            logger.exception("Unreadable storage file %s, starting empty", self.path)
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: dict[str, str]) -> None:
        tmp_path = f"{self.path}.tmp"
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as exc:
            raise StorageError(f"Cannot write {self.path}: {exc}") from exc

    def get_item(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read().get(key)

    def set_item(self, key: str, value: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = value
            self._write(data)

    def remove_item(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if data.pop(key, None) is not None:
                self._write(data)


@dataclass
class RedisLocalStorage:
    """Redis-backed storage; keys are namespaced under a prefix."""

    url: str
    prefix: str = "portfolio:"

    def __post_init__(self):
        self.client = redis.Redis.from_url(self.url)

    def _key(self, key: str) -> str:
        return f"{self.prefix}{key}"

    def get_item(self, key: str) -> Optional[str]:
        try:
            value = self.client.get(self._key(key))
        except redis_exceptions.ConnectionError:
            # Treat a dropped connection as a miss and reconnect for next time.
            logger.warning("Redis unavailable reading %s", key)
            self.client = redis.Redis.from_url(self.url)
            return None
        return value.decode("utf-8") if value is not None else None

    def set_item(self, key: str, value: str) -> None:
        try:
            self.client.set(self._key(key), value)
        except redis_exceptions.ConnectionError as exc:
            self.client = redis.Redis.from_url(self.url)
            raise StorageError(f"Cannot write {key}: {exc}") from exc

    def remove_item(self, key: str) -> None:
        try:
            self.client.delete(self._key(key))
        except redis_exceptions.ConnectionError as exc:
            self.client = redis.Redis.from_url(self.url)
            raise StorageError(f"Cannot remove {key}: {exc}") from exc


def load_json(storage: LocalStorage, key: str, default: Any) -> Any:
    """Read a JSON value, falling back to default when absent or corrupt."""
    raw = storage.get_item(key)
    if raw is None:
        return default
    try:
        return json.loads(raw)
    except ValueError:
        logger.warning("Discarding corrupt value stored under %s", key)
        return default


def save_json(storage: LocalStorage, key: str, value: Any) -> None:
    storage.set_item(key, json.dumps(value))
