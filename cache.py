import json
import logging
import os
import re
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Callable, Dict, Iterable, Optional

from pydantic import ValidationError

from exceptions import StoreUnavailable
from models import CollectionEntry, Disc


logger = logging.getLogger(__name__)

CACHE_KEY_PREFIX = "discs_data_"
DEFAULT_TTL_SECONDS = 60 * 60 * 24  # cache for 1 day

_UNSAFE_KEY_CHARS = re.compile(r"[^A-Za-z0-9_.-]")


@dataclass(frozen=True)
class StoredValue:
    """A raw value as held by a cache store"""
    value: str
    stored_at: float
    ttl_seconds: int


class CacheStore(ABC):
    """Key/value store with per-entry expiration enforced at read time"""

    @abstractmethod
    def get(self, key: str) -> Optional[StoredValue]:
        """Return the stored value, or None when missing or expired"""

    @abstractmethod
    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        """Store a value, replacing any previous one and restarting its TTL"""


class MemoryCacheStore(CacheStore):
    """In-process store; the clock is injectable so tests can move time forward"""

    def __init__(self, clock: Callable[[], float] = time.time):
        self.clock = clock
        self._entries: Dict[str, StoredValue] = {}

    def get(self, key: str) -> Optional[StoredValue]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        if self.clock() - entry.stored_at >= entry.ttl_seconds:
            del self._entries[key]
            return None
        return entry

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        self._entries[key] = StoredValue(value, self.clock(), ttl_seconds)


class FileCacheStore(CacheStore):
    """Disk store holding one JSON file per key in the cache directory"""

    def __init__(self, cache_dir: str = "cache", clock: Callable[[], float] = time.time):
        self.cache_dir = Path(cache_dir)
        self.clock = clock

    def _path_for(self, key: str) -> Path:
        return self.cache_dir / f"{_UNSAFE_KEY_CHARS.sub('_', key)}.json"

    def get(self, key: str) -> Optional[StoredValue]:
        path = self._path_for(key)
        if not path.exists():
            return None

        try:
            with open(path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except ValueError:
            # JSONDecodeError and UnicodeDecodeError
            logger.warning("Ignoring corrupted cache file %s", path)
            return None
        except OSError as exc:
            raise StoreUnavailable(f"Cannot read cache file {path}: {exc}") from exc

        try:
            entry = StoredValue(
                value=data["value"],
                stored_at=float(data["stored_at"]),
                ttl_seconds=int(data["ttl_seconds"]),
            )
        except (KeyError, TypeError, ValueError):
            logger.warning("Ignoring cache file %s with unexpected layout", path)
            return None

        if self.clock() - entry.stored_at >= entry.ttl_seconds:
            return None
        return entry

    def put(self, key: str, value: str, ttl_seconds: int) -> None:
        path = self._path_for(key)
        tmp_path = path.with_suffix(".tmp")
        data = {"value": value, "stored_at": self.clock(), "ttl_seconds": ttl_seconds}

        try:
            self.cache_dir.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(data, f)
            os.replace(tmp_path, path)
        except OSError as exc:
            raise StoreUnavailable(f"Cannot write cache file {path}: {exc}") from exc


def cache_key(account_id: str) -> str:
    """Store key for an account's disc list"""
    return f"{CACHE_KEY_PREFIX}{account_id}"


def serialize_discs(discs: Iterable[Disc]) -> str:
    return json.dumps([disc.to_wire() for disc in discs], ensure_ascii=False)


def deserialize_discs(value: str) -> tuple[Disc, ...]:
    return tuple(Disc.model_validate(item) for item in json.loads(value))


class CollectionCache:
    """Per-account disc lists on top of a CacheStore, with a fixed TTL"""

    def __init__(self, store: CacheStore, ttl_seconds: int = DEFAULT_TTL_SECONDS):
        self.store = store
        self.ttl_seconds = ttl_seconds

    def get(self, account_id: str) -> Optional[CollectionEntry]:
        """Return the fresh entry for an account, or None when absent or expired"""
        stored = self.store.get(cache_key(account_id))
        if stored is None:
            return None

        try:
            discs = deserialize_discs(stored.value)
        except (ValueError, TypeError, ValidationError):
            # json.JSONDecodeError is a ValueError
            logger.warning("Cached disc list for account %s is unreadable", account_id)
            return None

        return CollectionEntry(
            account_id=account_id,
            discs=discs,
            fetched_at=datetime.fromtimestamp(stored.stored_at, tz=timezone.utc),
            ttl_seconds=stored.ttl_seconds,
        )

    def put(self, account_id: str, discs: Iterable[Disc]) -> None:
        """Replace the entry for an account and restart its TTL window"""
        self.store.put(cache_key(account_id), serialize_discs(discs), self.ttl_seconds)
        logger.info("Cached disc list for account %s", account_id)
