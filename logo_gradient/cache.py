"""
cache.py
────────
In-memory memo of finished gradients.

Behaviour
─────────
  • Unbounded and non-expiring unless ``max_entries`` / ``ttl`` are given.
    With ``max_entries`` the least recently used entry is evicted first.
  • Only finished results are stored. Failures are never cached, so the next
    call for a failed key decodes again from scratch.
  • Callers asking for a key that is already being computed on the same event
    loop await that computation instead of starting their own.
  • Keys are used verbatim – no URL normalisation of any kind.
"""

from __future__ import annotations

import asyncio
import threading
import time
from collections import OrderedDict
from typing import Awaitable, Callable, Dict, Hashable, Optional, Tuple

from .gradient import GradientResult

Compute = Callable[[], Awaitable[GradientResult]]


class GradientCache:
    """Key → ``GradientResult`` store with optional LRU bound and TTL."""

    def __init__(
        self,
        max_entries: Optional[int] = None,
        ttl: Optional[float] = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries is not None and max_entries < 1:
            raise ValueError(f"max_entries must be at least 1, got {max_entries!r}")
        if ttl is not None and ttl <= 0:
            raise ValueError(f"ttl must be positive, got {ttl!r}")
        self.max_entries = max_entries
        self.ttl = ttl
        self._clock = clock
        self._entries: "OrderedDict[Hashable, Tuple[float, GradientResult]]" = OrderedDict()
        self._pending: Dict[Tuple[int, Hashable], "asyncio.Task[GradientResult]"] = {}
        self._lock = threading.Lock()

    # ── Plain mapping operations ──────────────────────────────────────────────

    def get(self, key: Hashable) -> Optional[GradientResult]:
        """Return the stored result for *key*, or ``None``."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            stored_at, result = entry
            if self._expired(stored_at):
                del self._entries[key]
                return None
            self._entries.move_to_end(key)
            return result

    def put(self, key: Hashable, result: GradientResult) -> None:
        with self._lock:
            self._entries[key] = (self._clock(), result)
            self._entries.move_to_end(key)
            if self.max_entries is not None:
                while len(self._entries) > self.max_entries:
                    self._entries.popitem(last=False)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and not self._expired(entry[0])

    # ── Memoised computation ──────────────────────────────────────────────────

    async def get_or_compute(self, key: Hashable, compute: Compute) -> GradientResult:
        """
        Return the cached result for *key*, computing it with *compute* once.

        A hit returns immediately without suspending.
        """
        hit = self.get(key)
        if hit is not None:
            return hit

        loop = asyncio.get_running_loop()
        slot = (id(loop), key)
        with self._lock:
            task = self._pending.get(slot)
            if task is None:
                task = loop.create_task(self._compute_and_store(slot, key, compute))
                self._pending[slot] = task
        # Shielded so one cancelled waiter does not cancel the shared work
        return await asyncio.shield(task)

    async def _compute_and_store(
        self,
        slot: Tuple[int, Hashable],
        key: Hashable,
        compute: Compute,
    ) -> GradientResult:
        try:
            result = await compute()
            self.put(key, result)
            return result
        finally:
            with self._lock:
                self._pending.pop(slot, None)

    def _expired(self, stored_at: float) -> bool:
        return self.ttl is not None and self._clock() - stored_at >= self.ttl
