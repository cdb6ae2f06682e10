"""Per-provider rate limiting for outbound model calls.

This module provides fixed-window admission control per provider, plus an
optional prompt-token throughput budget backed by aiolimiter. Admission is a
single check-and-increment under a per-provider lock, so concurrent callers
can never push a window past its configured limit.
"""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional

from aiolimiter import AsyncLimiter

from modelweave.catalog.catalog import ProviderCatalog
from modelweave.catalog.models import RateLimit


@dataclass
class RateWindow:
    """Current admission window for a provider.

    Attributes:
        window_start: Monotonic timestamp (seconds) when the window opened
        window_end: Monotonic timestamp (seconds) when the window closes
        count: Calls admitted within the window
    """

    window_start: float
    window_end: float
    count: int = 0


@dataclass(frozen=True)
class Admission:
    """Decision returned by an admission attempt.

    Attributes:
        provider_id: Provider the decision applies to
        admitted: True if the call may proceed
        retry_after: Seconds until the window resets (0.0 when admitted)
        reason: "requests" or "tokens" when rejected
    """

    provider_id: str
    admitted: bool
    retry_after: float = 0.0
    reason: Optional[str] = None


class RateLimiter:
    """Multi-provider rate limiter.

    Windows are created lazily on first admission. Each provider has its own
    lock, so traffic to one provider never serializes traffic to another.
    Admissions are not rolled back when the admitted call later fails: the
    limiter bounds attempted call volume, not successful call volume.

    Example:
        >>> limiter = RateLimiter(catalog)
        >>> decision = limiter.try_admit("openai")
        >>> if not decision.admitted:
        ...     print(f"retry in {decision.retry_after:.1f}s")
    """

    def __init__(
        self,
        catalog: ProviderCatalog,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize rate limiter.

        Args:
            catalog: Catalog that supplies each provider's RateLimit
            clock: Time source in seconds (injectable for tests)
        """
        self._catalog = catalog
        self._clock = clock
        self._windows: dict[str, RateWindow] = {}
        self._locks: dict[str, threading.Lock] = {}
        self._token_limiters: dict[str, AsyncLimiter] = {}
        self._registry_lock = threading.Lock()
        self._rejections: dict[str, int] = {}

    def _lock_for(self, provider_id: str) -> threading.Lock:
        """Get or create the lock guarding a provider's window."""
        with self._registry_lock:
            lock = self._locks.get(provider_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[provider_id] = lock
            return lock

    def _limit_for(self, provider_id: str) -> RateLimit:
        return self._catalog.get_provider(provider_id).rate_limit

    def try_admit(self, provider_id: str, now: Optional[float] = None) -> Admission:
        """Atomically check and consume one request slot.

        - No window yet, or the window has elapsed: open a new window with
          count 1 and admit.
        - Count below the limit: increment and admit.
        - Otherwise: reject with the time remaining until the window ends.

        Args:
            provider_id: Provider to admit a call for
            now: Timestamp in seconds (defaults to the limiter clock)

        Returns:
            Admission decision

        Raises:
            ProviderNotRegisteredError: If the provider is not in the catalog
        """
        limit = self._limit_for(provider_id)
        with self._lock_for(provider_id):
            current = self._clock() if now is None else now
            window = self._windows.get(provider_id)

            if window is None or current >= window.window_end:
                self._windows[provider_id] = RateWindow(
                    window_start=current,
                    window_end=current + limit.window_seconds,
                    count=1,
                )
                return Admission(provider_id=provider_id, admitted=True)

            if window.count < limit.requests:
                window.count += 1
                return Admission(provider_id=provider_id, admitted=True)

            self._rejections[provider_id] = self._rejections.get(provider_id, 0) + 1
            return Admission(
                provider_id=provider_id,
                admitted=False,
                retry_after=max(0.0, window.window_end - current),
                reason="requests",
            )

    async def admit(self, provider_id: str, tokens: int = 0) -> Admission:
        """Admit a call, also charging the provider's token budget if it has one.

        The token budget is only charged once the request window has admitted
        the call. Neither check suspends before the charge, so within one event
        loop the combined check is atomic.

        Args:
            provider_id: Provider to admit a call for
            tokens: Estimated prompt tokens for the call

        Returns:
            Admission decision
        """
        limit = self._limit_for(provider_id)
        token_limiter = self._token_limiter_for(provider_id, limit)

        if token_limiter is not None and tokens > 0:
            amount = min(tokens, limit.tokens_per_minute or tokens)
            if not token_limiter.has_capacity(amount):
                self._record_rejection(provider_id)
                return Admission(
                    provider_id=provider_id,
                    admitted=False,
                    retry_after=60.0 * amount / token_limiter.max_rate,
                    reason="tokens",
                )

        decision = self.try_admit(provider_id)
        if decision.admitted and token_limiter is not None and tokens > 0:
            await token_limiter.acquire(amount)
        return decision

    def _token_limiter_for(
        self, provider_id: str, limit: RateLimit
    ) -> Optional[AsyncLimiter]:
        if limit.tokens_per_minute is None:
            return None
        with self._registry_lock:
            limiter = self._token_limiters.get(provider_id)
            if limiter is None:
                limiter = AsyncLimiter(max_rate=limit.tokens_per_minute, time_period=60.0)
                self._token_limiters[provider_id] = limiter
            return limiter

    def is_limited(self, provider_id: str, now: Optional[float] = None) -> bool:
        """Check whether the provider's current window is full, without consuming.

        Args:
            provider_id: Provider to inspect
            now: Timestamp in seconds (defaults to the limiter clock)

        Returns:
            True if a call attempted now would be rejected
        """
        limit = self._limit_for(provider_id)
        with self._lock_for(provider_id):
            current = self._clock() if now is None else now
            window = self._windows.get(provider_id)
            if window is None or current >= window.window_end:
                return False
            return window.count >= limit.requests

    def window_state(self, provider_id: str) -> Optional[RateWindow]:
        """Get a snapshot of the provider's current window.

        Returns:
            Copy of the window, or None if no call has been admitted yet
        """
        with self._lock_for(provider_id):
            window = self._windows.get(provider_id)
            if window is None:
                return None
            return RateWindow(window.window_start, window.window_end, window.count)

    def _record_rejection(self, provider_id: str) -> None:
        with self._lock_for(provider_id):
            self._rejections[provider_id] = self._rejections.get(provider_id, 0) + 1

    def rejection_count(self, provider_id: str) -> int:
        """Number of calls rejected for a provider since the last reset."""
        with self._lock_for(provider_id):
            return self._rejections.get(provider_id, 0)

    def reset(self, provider_id: Optional[str] = None) -> None:
        """Clear windows for one provider, or for every provider.

        Each provider is cleared under its own lock, so an admission in
        progress finishes against the old window before it is dropped.

        Args:
            provider_id: Provider to reset; None resets all
        """
        if provider_id is None:
            with self._registry_lock:
                provider_ids = list(self._locks)
        else:
            provider_ids = [provider_id]

        for pid in provider_ids:
            with self._lock_for(pid):
                self._windows.pop(pid, None)
                self._rejections.pop(pid, None)
                with self._registry_lock:
                    self._token_limiters.pop(pid, None)
