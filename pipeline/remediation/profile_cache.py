"""pipeline.remediation.profile_cache

Process-wide cache of TAC-limiting device-link profiles, keyed by ceiling.

This is the only mutable state shared across backend runs. Guarantees:

* one build per ceiling, even when several threads ask at once
  (per-ceiling lock; late callers block until the first build finishes);
* distinct ceilings never block each other;
* a failed build is not cached, the next caller tries again;
* an artifact that disappeared from disk is rebuilt rather than handed out.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Callable, Dict

logger = logging.getLogger(__name__)


class RemediationProfileCache:
    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._key_locks: Dict[float, threading.Lock] = {}
        self._artifacts: Dict[float, Path] = {}
        self.builds = 0

    def _cached(self, ceiling: float):
        artifact = self._artifacts.get(ceiling)
        if artifact is not None and Path(artifact).exists():
            return artifact
        return None

    def get(self, ceiling: float, build: Callable[[float], Path]) -> Path:
        key = float(ceiling)
        with self._lock:
            hit = self._cached(key)
            if hit is not None:
                return hit
            key_lock = self._key_locks.setdefault(key, threading.Lock())

        with key_lock:
            with self._lock:
                hit = self._cached(key)
                if hit is not None:
                    return hit

            logger.info("building TAC device-link profile for %g%%", key)
            artifact = Path(build(key))

            with self._lock:
                self._artifacts[key] = artifact
                self.builds += 1
            return artifact

    def clear(self) -> None:
        with self._lock:
            self._artifacts.clear()
            self.builds = 0


DEFAULT_PROFILE_CACHE = RemediationProfileCache()
