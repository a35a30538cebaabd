"""
Fixed-window rate limiting for the authentication endpoints.

The limiter is looked up through ``settings.RATE_LIMITER_CLASS`` so a
deployment can swap the backing store. ``CacheRateLimiter`` keeps its
counters in Django's cache: with the default local-memory cache the limit
is per process and best-effort, a shared cache (Redis, Memcached) makes it
hold across instances.
"""

import logging
import math
import time
from collections import namedtuple

from django.conf import settings
from django.core.cache import caches
from django.utils.module_loading import import_string
from rest_framework.throttling import BaseThrottle

logger = logging.getLogger(__name__)

RateLimitResult = namedtuple('RateLimitResult', ['allowed', 'remaining', 'retry_after'])


class RateLimiter:
    """Interface: ``check(key)`` counts one hit and reports whether it is allowed."""

    def __init__(self, max_requests, window_seconds):
        self.max_requests = max_requests
        self.window_seconds = window_seconds

    def check(self, key):
        raise NotImplementedError


class CacheRateLimiter(RateLimiter):
    """Fixed-window counter stored in a Django cache; entries expire with the window."""

    cache_alias = 'default'
    key_prefix = 'ratelimit'

    def __init__(self, max_requests, window_seconds, timer=time.time):
        super().__init__(max_requests, window_seconds)
        self.timer = timer

    @property
    def cache(self):
        return caches[self.cache_alias]

    def check(self, key):
        cache_key = f'{self.key_prefix}:{key}'
        now = self.timer()
        entry = self.cache.get(cache_key)

        if entry is None or now >= entry['reset_at']:
            entry = {'count': 1, 'reset_at': now + self.window_seconds}
            self.cache.set(cache_key, entry, timeout=self.window_seconds)
            return RateLimitResult(True, self.max_requests - 1, self.window_seconds)

        retry_after = max(1, math.ceil(entry['reset_at'] - now))

        if entry['count'] >= self.max_requests:
            return RateLimitResult(False, 0, retry_after)

        entry['count'] += 1
        self.cache.set(cache_key, entry, timeout=retry_after)
        return RateLimitResult(True, self.max_requests - entry['count'], retry_after)


def get_rate_limiter(scope):
    """Build the configured limiter for a scope listed in ``settings.RATE_LIMITS``."""
    max_requests, window_seconds = settings.RATE_LIMITS[scope]
    limiter_class = import_string(settings.RATE_LIMITER_CLASS)
    return limiter_class(max_requests, window_seconds)


class ScopedRateThrottle(BaseThrottle):
    """
    DRF throttle keyed by client IP and a per-view ``rate_limit_scope``.

    Views opt in with ``throttle_classes = [ScopedRateThrottle]`` and a
    ``rate_limit_scope`` attribute naming an entry of ``RATE_LIMITS``.
    """

    def __init__(self):
        self.result = None

    def allow_request(self, request, view):
        scope = getattr(view, 'rate_limit_scope', None)
        if not scope:
            return True

        ident = self.get_ident(request)
        self.result = get_rate_limiter(scope).check(f'{scope}:{ident}')

        if not self.result.allowed:
            logger.warning('Rate limit hit for scope %s from %s', scope, ident)
        return self.result.allowed

    def wait(self):
        if self.result is None:
            return None
        return self.result.retry_after
