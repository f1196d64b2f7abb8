"""Content-addressed object storage over a KV store."""

import hashlib
import json
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Iterator, Mapping

from loguru import logger

from .errors import AmbiguousObjectId, CorruptRepository, ObjectNotFound
from .kv.base import KVStore

BLOB_KEY = "__blob__%s"
COMMIT_KEY = "__commit__%s"


def object_id(data: bytes) -> str:
    """Hex SHA-256 digest identifying ``data``."""
    return hashlib.sha256(data).hexdigest()


@dataclass(frozen=True)
class Commit:
    """An immutable commit node.

    ``tree`` maps a working-tree path to the id of its blob. ``parents``
    holds zero ids for the root commit, one for a regular commit and two
    for a merge (current branch first).
    """

    message: str
    timestamp: float
    parents: tuple[str, ...] = ()
    tree: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "parents", tuple(self.parents))
        object.__setattr__(self, "tree", MappingProxyType(dict(self.tree)))

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1

    def encode(self) -> bytes:
        """Canonical serialization; the commit id is its digest."""
        payload = {
            "message": self.message,
            "parents": list(self.parents),
            "timestamp": self.timestamp,
            "tree": dict(sorted(self.tree.items())),
        }
        return json.dumps(
            payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False
        ).encode("utf-8")

    @classmethod
    def decode(cls, data: bytes) -> "Commit":
        payload = json.loads(data.decode("utf-8"))
        return cls(
            message=payload["message"],
            timestamp=payload["timestamp"],
            parents=tuple(payload["parents"]),
            tree=dict(payload["tree"]),
        )


class ObjectStore:
    """Immutable objects keyed by the hash of their bytes.

    There is no update or delete: once stored, an object stays for the
    lifetime of the repository.
    """

    def __init__(self, store: KVStore, key_format: str = BLOB_KEY) -> None:
        self.store = store
        self._key_format = key_format
        self._prefix = key_format.replace("%s", "")

    def _key(self, oid: str) -> str:
        return self._key_format % oid

    def prepare(self, data: bytes) -> tuple[str, dict[str, bytes]]:
        """Return the id of ``data`` and the writes needed to store it.

        The writes are empty when the object already exists, so callers
        can fold them into a larger atomic batch.
        """
        oid = object_id(data)
        key = self._key(oid)
        if key in self.store:
            return oid, {}
        return oid, {key: data}

    def put(self, data: bytes) -> str:
        """Store ``data`` and return its id. Known content is not rewritten."""
        oid, writes = self.prepare(data)
        if writes:
            self.store.write(writes)
            logger.debug("Stored object {} ({} bytes)", oid[:8], len(data))
        return oid

    def get(self, oid: str) -> bytes:
        data = self.store.get(self._key(oid))
        if data is None:
            raise ObjectNotFound()
        return data

    def exists(self, oid: str) -> bool:
        return self._key(oid) in self.store

    def ids(self) -> Iterator[str]:
        """All stored ids, in backend order."""
        for key in self.store.keys(self._prefix):
            yield key[len(self._prefix):]

    def __len__(self) -> int:
        return sum(1 for _ in self.ids())

    def resolve(self, prefix: str) -> str:
        """Expand an abbreviated id to the full id of a stored object.

        Raises:
            ObjectNotFound: No stored id starts with ``prefix``.
            AmbiguousObjectId: More than one does.
        """
        if not prefix:
            raise ObjectNotFound()
        if self.exists(prefix):
            return prefix
        matches = sorted(oid for oid in self.ids() if oid.startswith(prefix))
        if not matches:
            raise ObjectNotFound()
        if len(matches) > 1:
            raise AmbiguousObjectId(prefix, matches)
        return matches[0]


class CommitStore(ObjectStore):
    """Object store holding encoded ``Commit`` objects.

    Decoded commits are cached for the life of the instance, which is one
    repository operation.
    """

    def __init__(self, store: KVStore) -> None:
        super().__init__(store, COMMIT_KEY)
        self._cache: dict[str, Commit] = {}

    def put_commit(self, commit: Commit) -> str:
        oid = self.put(commit.encode())
        self._cache[oid] = commit
        return oid

    def prepare_commit(self, commit: Commit) -> tuple[str, dict[str, bytes]]:
        """Id and writes for ``commit``. It is cached once read back."""
        return self.prepare(commit.encode())

    def get_commit(self, oid: str) -> Commit:
        if oid in self._cache:
            return self._cache[oid]
        data = self.get(oid)
        try:
            commit = Commit.decode(data)
        except (ValueError, KeyError) as e:
            raise CorruptRepository(f"Commit {oid} cannot be decoded: {e}") from e
        self._cache[oid] = commit
        return commit

    def commits(self) -> Iterator[tuple[str, Commit]]:
        for oid in self.ids():
            yield oid, self.get_commit(oid)
