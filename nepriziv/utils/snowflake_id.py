import threading
import time
from typing import Optional

# 2024-01-01 00:00:00 UTC
DEFAULT_EPOCH_MS = 1704067200000

SEQUENCE_BITS = 12
WORKER_BITS = 10
MAX_SEQUENCE = (1 << SEQUENCE_BITS) - 1
MAX_WORKER_ID = (1 << WORKER_BITS) - 1


class SnowflakeIDGenerator:
    """
    64位雪花ID生成器

    结构：41位毫秒时间戳 | 10位worker | 12位序列号。
    同一毫秒内序列号耗尽时自旋等待下一毫秒，时钟回拨直接报错。
    """

    def __init__(self, worker_id: int = 0, epoch_ms: int = DEFAULT_EPOCH_MS):
        if not 0 <= worker_id <= MAX_WORKER_ID:
            raise ValueError(f"worker_id必须在0-{MAX_WORKER_ID}之间")
        self.worker_id = worker_id
        self.epoch_ms = epoch_ms
        self._sequence = 0
        self._last_ms = -1
        self._lock = threading.Lock()

    @staticmethod
    def _now_ms() -> int:
        return time.time_ns() // 1_000_000

    def next_id(self) -> int:
        with self._lock:
            now = self._now_ms()
            if now < self._last_ms:
                raise RuntimeError(f"时钟回拨：{now} < {self._last_ms}")

            if now == self._last_ms:
                self._sequence = (self._sequence + 1) & MAX_SEQUENCE
                if self._sequence == 0:
                    while now <= self._last_ms:
                        now = self._now_ms()
            else:
                self._sequence = 0

            self._last_ms = now
            return ((now - self.epoch_ms) << (WORKER_BITS + SEQUENCE_BITS)) | (self.worker_id << SEQUENCE_BITS) | self._sequence


_generator: Optional[SnowflakeIDGenerator] = None
_generator_lock = threading.Lock()


def get_snowflake_generator() -> SnowflakeIDGenerator:
    global _generator
    if _generator is None:
        with _generator_lock:
            if _generator is None:
                _generator = SnowflakeIDGenerator()
    return _generator


def generate_snowflake_id() -> int:
    return get_snowflake_generator().next_id()
