"""
Round-robin API key pool with temporary blocking of failing keys
"""
import asyncio
from typing import List, Optional, Dict, Any
from dataclasses import dataclass
from datetime import datetime, timedelta
from loguru import logger


def mask_key(key: str) -> str:
    """Short, log-safe form of an API key"""
    return key[:8] + "..."


@dataclass
class KeyStats:
    """Usage counters for one API key"""
    key: str
    usage_count: int = 0
    error_count: int = 0
    last_used: Optional[datetime] = None
    last_error: Optional[datetime] = None
    block_until: Optional[datetime] = None

    @property
    def is_blocked(self) -> bool:
        return self.block_until is not None


class KeyRotationManager:
    """
    Hands out API keys in round-robin order

    A key that fails ``max_errors_per_key`` times in a row is skipped for
    ``block_duration_minutes``. A success resets its error count.
    """

    def __init__(
        self,
        keys: List[str],
        max_errors_per_key: int = 3,
        block_duration_minutes: int = 5,
    ):
        self.keys = [key.strip() for key in keys if key.strip()]
        if not self.keys:
            raise ValueError("At least one API key must be provided")

        self.max_errors_per_key = max_errors_per_key
        self.block_duration = timedelta(minutes=block_duration_minutes)
        self.key_stats: Dict[str, KeyStats] = {key: KeyStats(key=key) for key in self.keys}

        self._next_index = 0
        self._lock = asyncio.Lock()

        logger.info(f"Initialized KeyRotationManager with {len(self.keys)} keys")

    async def get_next_key(self) -> Optional[str]:
        """
        Get the next unblocked key

        Returns:
            API key string or None if all keys are blocked
        """
        async with self._lock:
            self._release_expired_blocks()

            for offset in range(len(self.keys)):
                index = (self._next_index + offset) % len(self.keys)
                stats = self.key_stats[self.keys[index]]
                if stats.is_blocked:
                    continue

                self._next_index = index + 1
                stats.usage_count += 1
                stats.last_used = datetime.now()
                logger.debug(f"Selected API key: {mask_key(stats.key)} (usage: {stats.usage_count})")
                return stats.key

            logger.warning("All API keys are currently blocked")
            return None

    async def report_error(self, key: str, error: Exception) -> None:
        """Count a failure for ``key``, blocking it once the threshold is hit"""
        async with self._lock:
            stats = self.key_stats.get(key)
            if stats is None:
                return

            stats.error_count += 1
            stats.last_error = datetime.now()
            logger.warning(f"Error reported for key {mask_key(key)}: {error} (total errors: {stats.error_count})")

            if stats.error_count >= self.max_errors_per_key:
                stats.block_until = datetime.now() + self.block_duration
                logger.error(f"Key {mask_key(key)} blocked until {stats.block_until}")

    async def report_success(self, key: str) -> None:
        """Reset the error count of ``key``"""
        async with self._lock:
            stats = self.key_stats.get(key)
            if stats is not None:
                stats.error_count = 0

    async def get_key_statistics(self) -> Dict[str, Dict[str, Any]]:
        """Per-key counters, keyed by masked key"""
        async with self._lock:
            self._release_expired_blocks()
            return {
                mask_key(key): {
                    "usage_count": stats.usage_count,
                    "error_count": stats.error_count,
                    "last_used": stats.last_used.isoformat() if stats.last_used else None,
                    "last_error": stats.last_error.isoformat() if stats.last_error else None,
                    "is_blocked": stats.is_blocked,
                    "block_until": stats.block_until.isoformat() if stats.block_until else None
                }
                for key, stats in self.key_stats.items()
            }

    def _release_expired_blocks(self) -> None:
        now = datetime.now()
        for stats in self.key_stats.values():
            if stats.is_blocked and now >= stats.block_until:
                stats.block_until = None
                stats.error_count = 0
                logger.info(f"Auto-unblocked key {mask_key(stats.key)} after cooldown period")
