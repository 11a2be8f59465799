"""Per-client request limits.

Limits are counted per client address in process memory with a moving
window. Each ``RateLimit`` is a FastAPI dependency:

- login counts only rejected credentials, so a user who signs in
  successfully never locks themselves out
- registration and catalog browsing count every request
"""

import math
import time
from collections.abc import AsyncGenerator

import structlog
from fastapi import Request
from limits import RateLimitItem, parse
from limits.storage import MemoryStorage
from limits.strategies import MovingWindowRateLimiter

from axgbolt.domain.exceptions import AuthenticationError, RateLimitExceededError
from axgbolt.infrastructure.config import settings

logger = structlog.get_logger()

_storage = MemoryStorage()
_strategy = MovingWindowRateLimiter(_storage)


def client_address(request: Request) -> str:
    return request.client.host if request.client else "unknown"


def reset_rate_limits() -> None:
    """Forget every counter."""
    _storage.reset()


class RateLimit:
    """A named limit whose rate is read from ``settings`` on each request.

    Args:
        scope: Counter namespace.
        setting: Name of the settings field holding the rate, e.g. "5/15 minutes".
        message: Error message once the limit is reached.
        failures_only: Count only requests rejected with AuthenticationError.
    """

    def __init__(self, scope: str, setting: str, message: str, failures_only: bool = False) -> None:
        self.scope = scope
        self.setting = setting
        self.message = message
        self.failures_only = failures_only

    @property
    def item(self) -> RateLimitItem:
        return parse(getattr(settings, self.setting))

    async def __call__(self, request: Request) -> AsyncGenerator[None, None]:
        if not settings.rate_limit_enabled:
            yield
            return

        item = self.item
        address = client_address(request)
        if self.failures_only:
            allowed = _strategy.test(item, self.scope, address)
        else:
            allowed = _strategy.hit(item, self.scope, address)
        if not allowed:
            self._reject(item, address, request)

        try:
            yield
        except AuthenticationError:
            if self.failures_only:
                _strategy.hit(item, self.scope, address)
            raise

    def _reject(self, item: RateLimitItem, address: str, request: Request) -> None:
        reset_at, _ = _strategy.get_window_stats(item, self.scope, address)
        retry_after = max(1, math.ceil(reset_at - time.time()))
        logger.warning(
            "Rate limit exceeded",
            scope=self.scope,
            client=address,
            path=request.url.path,
            retry_after=retry_after,
        )
        raise RateLimitExceededError(self.message, retry_after=retry_after)


login_limit = RateLimit(
    "login",
    "login_rate_limit",
    "Too many authentication attempts, please try again after 15 minutes.",
    failures_only=True,
)
register_limit = RateLimit(
    "register",
    "register_rate_limit",
    "Too many registration attempts, please try again after 1 hour.",
)
catalog_limit = RateLimit(
    "catalog",
    "catalog_rate_limit",
    "Too many product requests, please try again in a minute.",
)
