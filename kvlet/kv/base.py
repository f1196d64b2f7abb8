"""Abstract KV store interface."""

from abc import ABC, abstractmethod
from typing import Iterable, Iterator, Mapping


class KVStore(ABC):
    """Key-value store operating on bytes only.

    Everything a repository persists (objects, refs, staging state) is a
    key in one of these. Encoding happens at higher layers.
    """

    @abstractmethod
    def get(self, key: str) -> bytes | None:
        """Get bytes value for key, or None if not found."""

    @abstractmethod
    def write(
        self, writes: Mapping[str, bytes], deletes: Iterable[str] = ()
    ) -> None:
        """Apply a batch of writes and deletes atomically.

        Either every write and delete in the batch is applied, or none is.
        """

    @abstractmethod
    def keys(self, prefix: str = "") -> Iterator[str]:
        """Iterate over keys starting with ``prefix``."""

    @abstractmethod
    def __contains__(self, key: str) -> bool:
        """Check if key exists in store."""

    @abstractmethod
    def clear(self) -> None:
        """Remove all items from the store."""

    def set(self, key: str, value: bytes) -> None:
        """Set a single key."""
        self.write({key: value})

    def remove(self, key: str) -> None:
        """Remove a key if present."""
        self.write({}, (key,))

    def close(self) -> None:
        """Release backend resources. A no-op for in-memory stores."""


def check_bytes(writes: Mapping[str, bytes]) -> None:
    for key, value in writes.items():
        if not isinstance(value, bytes):
            raise TypeError(f"Expected bytes for {key}, got {type(value).__name__}")
