"""In-memory KV store."""

from typing import Iterable, Iterator, Mapping

from .base import KVStore, check_bytes


class Memory(KVStore):
    """A memory-backed KV store."""

    def __init__(self) -> None:
        self.memory: dict[str, bytes] = {}

    def get(self, key: str) -> bytes | None:
        return self.memory.get(key)

    def write(
        self, writes: Mapping[str, bytes], deletes: Iterable[str] = ()
    ) -> None:
        check_bytes(writes)
        deletes = tuple(deletes)
        self.memory.update(writes)
        for key in deletes:
            self.memory.pop(key, None)

    def keys(self, prefix: str = "") -> Iterator[str]:
        return (key for key in list(self.memory) if key.startswith(prefix))

    def __contains__(self, key: str) -> bool:
        return key in self.memory

    def __len__(self) -> int:
        return len(self.memory)

    def clear(self) -> None:
        self.memory.clear()
