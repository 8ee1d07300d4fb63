# tourney_api/cache.py
from __future__ import annotations

import hashlib
import json
import time
from typing import Any, Dict, Optional, Tuple

# In-memory TTL cache for computed views (single-instance deploys).
# Entries are pure functions of their key, so a stale hit is never wrong, only old.
# key -> (expires_at_epoch, value)
_cache: Dict[str, Tuple[float, Any]] = {}

DEFAULT_MAX_ENTRIES = 256


def make_key(namespace: str, payload: Any) -> str:
    """
    Namespaced key over a structural hash of a JSON-able payload.
    Example:
      make_key("standings", {"teams": [...], ...}) -> "standings:3f1a..."
    """
    namespace = namespace.strip()
    if not namespace:
        raise ValueError("Cache namespace must be non-empty")
    canonical = json.dumps(payload, sort_keys=True, separators=(",", ":"), default=str)
    digest = hashlib.sha256(canonical.encode("utf-8")).hexdigest()
    return f"{namespace}:{digest}"


def get(key: str) -> Optional[Any]:
    item = _cache.get(key)
    if not item:
        return None

    expires_at, value = item
    if time.time() > expires_at:
        _cache.pop(key, None)
        return None

    return value


def _sweep_expired(now: float) -> None:
    for k in [k for k, (exp, _) in _cache.items() if now > exp]:
        _cache.pop(k, None)


def set(key: str, value: Any, ttl_seconds: int = 60, max_entries: int = DEFAULT_MAX_ENTRIES) -> None:
    """
    Payload-hash keys are rarely read twice, so expired entries are swept on
    every insert and the oldest entries are evicted beyond `max_entries`.
    """
    if ttl_seconds <= 0:
        # TTL of 0 disables caching
        return

    now = time.time()
    _sweep_expired(now)

    # re-inserting moves the key to the newest position
    _cache.pop(key, None)
    while _cache and len(_cache) >= max(1, max_entries):
        _cache.pop(next(iter(_cache)))

    _cache[key] = (now + ttl_seconds, value)


def size() -> int:
    return len(_cache)


def clear() -> None:
    _cache.clear()
