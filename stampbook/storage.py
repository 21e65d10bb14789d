"""
Persistence adapters for the prize collection.

Every backend stores the whole collection as one JSON array blob, either as
file contents or as the value of a single key. Reads degrade to an empty
collection on failure; writes raise StorageUnavailable.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Protocol, Sequence

import redis
import requests
from redis import exceptions as redis_exceptions

from stampbook.config import Settings
from stampbook.errors import StorageUnavailable
from stampbook.models import Prize

logger = logging.getLogger(__name__)


class PrizeStore(Protocol):
    """Defines the operations the collection needs from a backend."""

    def load_all(self) -> list[Prize]:
        ...

    def save_all(self, prizes: Sequence[Prize]) -> None:
        ...

    def describe(self) -> str:
        ...


def encode_prizes(prizes: Sequence[Prize], *, indent: Optional[int] = None) -> str:
    return json.dumps([p.as_dict() for p in prizes], ensure_ascii=False, indent=indent)


def decode_prizes(blob) -> list[Prize]:
    if blob is None:
        return []
    if isinstance(blob, bytes):
        blob = blob.decode("utf-8")
    # Some KV clients hand back the array already parsed.
    data = json.loads(blob) if isinstance(blob, str) else blob
    if not isinstance(data, list):
        raise ValueError(f"expected a JSON array, got {type(data).__name__}")
    if not all(isinstance(item, dict) for item in data):
        raise ValueError("expected an array of prize objects")
    return [Prize.from_dict(item) for item in data]


@dataclass
class InMemoryPrizeStore:
    """Test double that keeps the serialized blob in memory."""

    blob: Optional[str] = None

    def load_all(self) -> list[Prize]:
        return decode_prizes(self.blob)

    def save_all(self, prizes: Sequence[Prize]) -> None:
        self.blob = encode_prizes(prizes)

    def describe(self) -> str:
        return "memory"

    def reset(self) -> None:
        """Clear stored data (useful in tests)."""
        self.blob = None


@dataclass
class FilePrizeStore:
    """JSON file on local disk."""

    path: Path

    def __post_init__(self):
        self.path = Path(self.path)

    def _ensure_dir(self) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def load_all(self) -> list[Prize]:
        try:
            self._ensure_dir()
            if not self.path.exists():
                return []
            return decode_prizes(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError, KeyError, TypeError):
            logger.exception("Error loading prizes from %s", self.path)
            return []

    def save_all(self, prizes: Sequence[Prize]) -> None:
        try:
            self._ensure_dir()
            self.path.write_text(encode_prizes(prizes, indent=2), encoding="utf-8")
        except OSError as exc:
            logger.exception("Error saving prizes to %s", self.path)
            raise StorageUnavailable("Failed to save prizes") from exc

    def describe(self) -> str:
        return f"file:{self.path}"


@dataclass
class ReadOnlyPrizeStore:
    """
    Stand-in used on serverless platforms without a KV store, where the
    filesystem cannot be written.
    """

    reason: str = "No persistent storage configured for serverless environment"

    def load_all(self) -> list[Prize]:
        return []

    def save_all(self, prizes: Sequence[Prize]) -> None:
        logger.error("Refusing to save %d prizes: %s", len(prizes), self.reason)
        raise StorageUnavailable(self.reason)

    def describe(self) -> str:
        return "read-only"


@dataclass
class RedisPrizeStore:
    """Redis-backed store keeping the collection under one string key."""

    url: str
    key: str = "prizes"

    def __post_init__(self):
        self.client = redis.Redis.from_url(self.url)

    def load_all(self) -> list[Prize]:
        try:
            return decode_prizes(self.client.get(self.key))
        except redis_exceptions.RedisError:
            logger.exception("Error loading prizes from Redis key %s", self.key)
            return []
        except (ValueError, KeyError, TypeError):
            logger.exception("Malformed prize blob under Redis key %s", self.key)
            return []

    def save_all(self, prizes: Sequence[Prize]) -> None:
        try:
            self.client.set(self.key, encode_prizes(prizes))
        except redis_exceptions.RedisError as exc:
            logger.exception("Error saving prizes to Redis key %s", self.key)
            raise StorageUnavailable("Failed to save prizes") from exc

    def describe(self) -> str:
        return "redis"


@dataclass
class KvPrizeStore:
    """
    Hosted KV store spoken to over its REST API (Upstash / Vercel KV).

    Commands are posted as JSON arrays, e.g. ``["GET", "prizes"]``, and the
    service answers with ``{"result": ...}`` or ``{"error": "..."}``.
    """

    url: str
    token: str
    key: str = "prizes"
    timeout: float = 10.0
    session: requests.Session = field(default=None, repr=False)

    def __post_init__(self):
        self.url = self.url.rstrip("/")
        if self.session is None:
            self.session = requests.Session()
        self.session.headers.update({"Authorization": f"Bearer {self.token}"})

    def _command(self, *args):
        response = self.session.post(self.url, json=list(args), timeout=self.timeout)
        response.raise_for_status()
        payload = response.json()
        if not isinstance(payload, dict):
            raise ValueError("unexpected KV response")
        if payload.get("error"):
            raise StorageUnavailable(f"KV error: {payload['error']}")
        return payload.get("result")

    def load_all(self) -> list[Prize]:
        try:
            return decode_prizes(self._command("GET", self.key))
        except (requests.RequestException, StorageUnavailable):
            logger.exception("Error loading prizes from KV key %s", self.key)
            return []
        except (ValueError, KeyError, TypeError):
            logger.exception("Malformed prize blob under KV key %s", self.key)
            return []

    def save_all(self, prizes: Sequence[Prize]) -> None:
        try:
            self._command("SET", self.key, encode_prizes(prizes))
        except StorageUnavailable:
            logger.exception("KV rejected write to key %s", self.key)
            raise
        except (requests.RequestException, ValueError) as exc:
            logger.exception("Error saving prizes to KV key %s", self.key)
            raise StorageUnavailable("Failed to save prizes") from exc

    def describe(self) -> str:
        return "kv"


def build_store(settings: Settings) -> PrizeStore:
    """
    Pick the single active backend for this process: hosted KV, then Redis,
    then the local file (unless running serverless).
    """
    if settings.use_in_memory_backends:
        store: PrizeStore = InMemoryPrizeStore()
    elif settings.kv_configured:
        store = KvPrizeStore(
            url=settings.kv_rest_api_url,
            token=settings.kv_rest_api_token,
            key=settings.prizes_key,
            timeout=settings.kv_timeout_seconds,
        )
    elif settings.redis_url:
        store = RedisPrizeStore(url=settings.redis_url, key=settings.prizes_key)
    elif settings.serverless:
        logger.warning(
            "Serverless environment without KV storage; prizes are read-only"
        )
        store = ReadOnlyPrizeStore()
    else:
        store = FilePrizeStore(Path(settings.data_file))
    logger.info("Prize storage backend: %s", store.describe())
    return store
