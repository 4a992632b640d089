"""
按客户端key的固定窗口限流

计数交给 limits 的 MemoryStorage，只在当前进程内有效
"""

import math
import time
from dataclasses import dataclass

from limits import RateLimitItemPerSecond
from limits.storage import MemoryStorage
from limits.strategies import FixedWindowRateLimiter as FixedWindowStrategy


@dataclass
class RateLimitResult:
    allowed: bool
    retry_after_seconds: float = 0.0

    @property
    def retry_after_minutes(self) -> int:
        return max(1, math.ceil(self.retry_after_seconds / 60))


class FixedWindowRateLimiter:
    """
    每个key在窗口内最多 max_requests 次

    窗口从该key的第一次请求开始计时；被拒绝的请求同样计数
    """

    def __init__(self, window_seconds: int, max_requests: int, namespace: str = "nepriziv"):
        self.window_seconds = window_seconds
        self.max_requests = max_requests
        self._item = RateLimitItemPerSecond(max_requests, window_seconds, namespace=namespace)
        self._storage = MemoryStorage()
        self._strategy = FixedWindowStrategy(self._storage)

    def hit(self, key: str) -> RateLimitResult:
        if self._strategy.hit(self._item, key):
            return RateLimitResult(allowed=True)
        reset_time, _ = self._strategy.get_window_stats(self._item, key)
        return RateLimitResult(allowed=False, retry_after_seconds=max(0.0, reset_time - time.time()))

    def reset(self) -> None:
        self._storage.reset()
