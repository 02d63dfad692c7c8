"""
Single-payload memo for derived view-models.
Holds derivations for the latest payload only; a new payload evicts the old entries.
"""

import hashlib
import json
import logging
from dataclasses import asdict, is_dataclass
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

_MISSING = object()


class ViewCache:

    def __init__(self):
        self._fingerprint: Optional[str] = None
        self._store: Dict[str, Any] = {}
        self.hits = 0
        self.misses = 0

    @staticmethod
    def fingerprint(payload: Any) -> str:
        if payload is None:
            return "none"
        data = asdict(payload) if is_dataclass(payload) else payload
        blob = json.dumps(data, sort_keys=True, default=str)
        return hashlib.md5(blob.encode()).hexdigest()[:12]

    def _select(self, fingerprint: str) -> None:
        if fingerprint != self._fingerprint:
            if self._store:
                logger.debug(f"View cache evicted {len(self._store)} entries for {self._fingerprint}")
            self._store = {}
            self._fingerprint = fingerprint

    def cached(self, name: str, payload: Any, fn: Callable[[Any], Any]) -> Any:
        """Get the derivation `name` for `payload`, computing it on first use."""
        self._select(self.fingerprint(payload))
        result = self._store.get(name, _MISSING)
        if result is not _MISSING:
            self.hits += 1
            logger.debug(f"View cache hit: {name}")
            return result
        self.misses += 1
        result = fn(payload)
        self._store[name] = result
        return result

    def clear_all(self) -> None:
        self._store = {}
        self._fingerprint = None
        logger.info("View cache cleared")

    def stats(self) -> dict:
        return {
            "fingerprint": self._fingerprint,
            "entries": len(self._store),
            "hits": self.hits,
            "misses": self.misses,
        }
