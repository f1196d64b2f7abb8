"""Three-way merge of commit trees."""

from dataclasses import dataclass
from enum import Enum
from typing import Mapping

CONFLICT_START = b"<<<<<<< HEAD\n"
CONFLICT_SEP = b"=======\n"
CONFLICT_END = b">>>>>>>\n"


class Side(Enum):
    """How one side of a merge relates to the split point for a path."""

    SAME = "same"  # identical to the split point (both may be absent)
    ABSENT = "absent"  # present at the split point, gone on this side
    VALUE = "value"  # new or changed content


class Resolution(Enum):
    CURRENT = "current"  # keep the current branch's version
    OTHER = "other"  # take the other branch's version
    CONFLICT = "conflict"  # write both sides with conflict markers
    ABSENT = "absent"  # the path is not in the merged tree


_TABLE: dict[tuple[Side, Side], Resolution] = {
    (Side.SAME, Side.VALUE): Resolution.OTHER,
    (Side.SAME, Side.ABSENT): Resolution.OTHER,
    (Side.VALUE, Side.SAME): Resolution.CURRENT,
    (Side.ABSENT, Side.SAME): Resolution.CURRENT,
    (Side.VALUE, Side.VALUE): Resolution.CONFLICT,
    (Side.VALUE, Side.ABSENT): Resolution.CONFLICT,
    (Side.ABSENT, Side.VALUE): Resolution.CONFLICT,
}


def side(blob: str | None, base: str | None) -> Side:
    if blob == base:
        return Side.SAME
    if blob is None:
        return Side.ABSENT
    return Side.VALUE


def resolve(cur: str | None, oth: str | None, base: str | None) -> Resolution:
    """Decide the merged state of one path from its three blob ids.

    None means the path is absent in that tree.
    """
    if cur == oth:
        resolution = Resolution.CURRENT
    else:
        resolution = _TABLE[(side(cur, base), side(oth, base))]
    if resolution is Resolution.CURRENT and cur is None:
        return Resolution.ABSENT
    if resolution is Resolution.OTHER and oth is None:
        return Resolution.ABSENT
    return resolution


@dataclass(frozen=True)
class MergePlan:
    """Per-path outcome of a three-way merge, relative to the current tree.

    ``take`` maps paths to the other side's blob id; ``delete`` lists
    tracked paths the merge removes; ``conflicts`` lists paths needing
    conflict markers.
    """

    resolutions: Mapping[str, Resolution]
    take: Mapping[str, str]
    delete: tuple[str, ...]
    conflicts: tuple[str, ...]

    @property
    def is_empty(self) -> bool:
        return not (self.take or self.delete or self.conflicts)

    @property
    def touched(self) -> tuple[str, ...]:
        """Paths the merge changes in the working tree."""
        return tuple(sorted({*self.take, *self.delete, *self.conflicts}))


def plan_merge(
    current: Mapping[str, str],
    other: Mapping[str, str],
    base: Mapping[str, str],
) -> MergePlan:
    """Classify every path in the union of the three trees."""
    resolutions: dict[str, Resolution] = {}
    take: dict[str, str] = {}
    delete: list[str] = []
    conflicts: list[str] = []

    for path in sorted(set(current) | set(other) | set(base)):
        cur, oth = current.get(path), other.get(path)
        resolution = resolve(cur, oth, base.get(path))
        resolutions[path] = resolution
        if resolution is Resolution.OTHER and oth is not None:
            take[path] = oth
        elif resolution is Resolution.ABSENT and cur is not None:
            delete.append(path)
        elif resolution is Resolution.CONFLICT:
            conflicts.append(path)

    return MergePlan(
        resolutions=resolutions,
        take=take,
        delete=tuple(delete),
        conflicts=tuple(conflicts),
    )


def conflict_content(current: bytes | None, other: bytes | None) -> bytes:
    """Both versions of a file between conflict markers.

    An absent side contributes empty content. Contents are joined as-is,
    so a side without a trailing newline runs into the next marker.
    """
    return b"".join(
        (
            CONFLICT_START,
            current or b"",
            CONFLICT_SEP,
            other or b"",
            CONFLICT_END,
        )
    )


@dataclass(frozen=True)
class MergeResult:
    """Result of a merge operation."""

    commit: str
    strategy: str  # "fast_forward", "three_way"
    conflicts: tuple[str, ...] = ()
    taken: tuple[str, ...] = ()
    deleted: tuple[str, ...] = ()

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)
