from dataclasses import dataclass
import logging
import threading
import time

import redis

from pda.services.redis_client import get_redis_client

logger = logging.getLogger(__name__)

REDIS_RETRY_SECONDS = 30.0


@dataclass
class RateLimitDecision:
    allowed: bool
    limit: int
    remaining: int
    retry_after_seconds: int
    reset_after_seconds: int

    def headers(self) -> dict[str, str]:
        values = {
            "X-RateLimit-Limit": str(self.limit),
            "X-RateLimit-Remaining": str(self.remaining),
            "X-RateLimit-Reset-Seconds": str(self.reset_after_seconds),
        }
        if not self.allowed:
            values["Retry-After"] = str(self.retry_after_seconds)
        return values


def _decide(count: int, limit: int, reset_seconds: int) -> RateLimitDecision:
    allowed = count <= limit
    reset_seconds = max(1, reset_seconds)
    return RateLimitDecision(
        allowed=allowed,
        limit=limit,
        remaining=max(0, limit - count),
        retry_after_seconds=0 if allowed else reset_seconds,
        reset_after_seconds=reset_seconds,
    )


class RateLimitService:
    """Fixed-window request counter.

    Counts live in Redis when it answers; otherwise in a process-local dict.
    After a Redis failure the local counters are used for REDIS_RETRY_SECONDS
    before Redis is tried again.
    """

    def __init__(self, redis_client: redis.Redis | None = None, *, use_redis: bool = True) -> None:
        if redis_client is None and use_redis:
            redis_client = get_redis_client()
        self._redis = redis_client
        self._redis_retry_at = 0.0
        self._memory_counters: dict[str, tuple[int, float]] = {}
        self._lock = threading.Lock()

    def check(self, key: str, *, limit: int, window_seconds: int) -> RateLimitDecision:
        safe_limit = max(1, int(limit))
        safe_window = max(1, int(window_seconds))
        decision = self._check_redis(key, safe_limit, safe_window)
        if decision:
            return decision
        return self._check_memory(key, safe_limit, safe_window)

    def reset(self) -> None:
        with self._lock:
            self._memory_counters.clear()

    def _check_redis(
        self,
        key: str,
        limit: int,
        window_seconds: int,
    ) -> RateLimitDecision | None:
        if self._redis is None or time.monotonic() < self._redis_retry_at:
            return None
        bucket = int(time.time() // window_seconds)
        redis_key = f"pda:ratelimit:{key}:{bucket}"
        try:
            pipe = self._redis.pipeline()
            pipe.incr(redis_key, 1)
            pipe.ttl(redis_key)
            count_value, ttl_value = pipe.execute()
            ttl = int(ttl_value) if isinstance(ttl_value, int) else -1
            if ttl < 0:
                self._redis.expire(redis_key, window_seconds + 1)
                ttl = window_seconds
        except redis.RedisError as exc:
            self._redis_retry_at = time.monotonic() + REDIS_RETRY_SECONDS
            logger.warning("Rate limiter falling back to memory: %s", exc)
            return None
        return _decide(int(count_value), limit, ttl)

    def _check_memory(
        self,
        key: str,
        limit: int,
        window_seconds: int,
    ) -> RateLimitDecision:
        now_epoch = time.time()
        with self._lock:
            stale_keys = [
                bucket_key
                for bucket_key, (_, reset_epoch) in self._memory_counters.items()
                if now_epoch > reset_epoch + 1
            ]
            for stale_key in stale_keys:
                self._memory_counters.pop(stale_key, None)

            bucket = int(now_epoch // window_seconds)
            bucket_key = f"{key}:{bucket}"
            current_count, reset_epoch = self._memory_counters.get(
                bucket_key,
                (0, float((bucket + 1) * window_seconds)),
            )
            next_count = current_count + 1
            self._memory_counters[bucket_key] = (next_count, reset_epoch)
            return _decide(next_count, limit, int(reset_epoch - now_epoch))


rate_limit_service = RateLimitService()
