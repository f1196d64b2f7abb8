"""Disk-backed KV store using diskcache."""

from typing import Iterable, Iterator, Mapping, cast

from diskcache import Cache

from .base import KVStore, check_bytes

ONE_GB = 1024 * 1024 * 1024


class Disk(KVStore):
    """KV store backed by diskcache (SQLite + mmap).

    Eviction is disabled: a repository never loses objects to a size
    limit.
    """

    def __init__(self, directory: str, size_limit: int = ONE_GB) -> None:
        self.directory = directory
        self.cache = Cache(
            directory, size_limit=size_limit, eviction_policy="none"
        )

    def get(self, key: str) -> bytes | None:
        return cast(bytes | None, self.cache.get(key))

    def write(
        self, writes: Mapping[str, bytes], deletes: Iterable[str] = ()
    ) -> None:
        check_bytes(writes)
        with self.cache.transact():
            for key, value in writes.items():
                self.cache.set(key, value)
            for key in deletes:
                self.cache.delete(key, retry=False)

    def keys(self, prefix: str = "") -> Iterator[str]:
        for key in self.cache.iterkeys():
            if isinstance(key, str) and key.startswith(prefix):
                yield key

    def __contains__(self, key: str) -> bool:
        return key in self.cache

    def clear(self) -> None:
        self.cache.clear()

    def close(self) -> None:
        self.cache.close()
