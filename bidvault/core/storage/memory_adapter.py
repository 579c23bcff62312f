from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Tuple

from bidvault.utils.logger import get_logger

logger = get_logger("storage.memory")


class MemoryAdapter:
    """
    In-memory backend with the same interface as SQLiteAdapter.

    Used by tests and the demo chain. A transaction() scope snapshots every
    bucket on entry and restores the snapshot if the scope raises.
    """

    def __init__(self):
        self._buckets: Dict[str, Dict[str, bytes]] = {}
        self._depth = 0

    @contextmanager
    def transaction(self) -> Iterator[None]:
        if self._depth:
            self._depth += 1
            try:
                yield
            finally:
                self._depth -= 1
            return

        snapshot = {name: dict(data) for name, data in self._buckets.items()}
        self._depth = 1
        try:
            yield
        except BaseException:
            self._buckets = snapshot
            logger.debug("Rolled back transaction")
            raise
        finally:
            self._depth = 0

    def put(self, key: str, value: bytes, bucket: str = "default"):
        self._buckets.setdefault(bucket, {})[key] = bytes(value)

    def get(self, key: str, bucket: str = "default") -> Optional[bytes]:
        return self._buckets.get(bucket, {}).get(key)

    def items(self, bucket: str = "default") -> List[Tuple[str, bytes]]:
        data = self._buckets.get(bucket, {})
        return [(key, data[key]) for key in sorted(data)]

    def count(self, bucket: str = "default") -> int:
        return len(self._buckets.get(bucket, {}))

    def close(self) -> None:
        pass
