"""Decision helpers for converging individual paths against a snapshot."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Mapping, Union

PathLike = Union[str, "os.PathLike[str]"]


@dataclass(frozen=True)
class InodeRef:
    """A file's (device, inode) identity, used to recognise renames."""

    device: str = ""
    inode: int = 0

    def is_zero(self) -> bool:
        """Report whether no identity was recorded."""
        return self.device == "" and self.inode == 0


def should_update_inode_stamp(
    inodes: Mapping[str, InodeRef], relative_path: str, current: InodeRef
) -> bool:
    """Report whether the recorded inode for ``relative_path`` is stale.

    A zero ``current`` never updates the record: inode tracking is off or the
    stat failed, and path identity alone still converges correctly.
    """
    if current.is_zero():
        return False
    existing = inodes.get(relative_path)
    if existing is None:
        return True
    return existing != current


def pick_rename_source(
    candidates: Iterable[str], file_hashes: Mapping[str, str], fresh_hash: str
) -> str:
    """Return the first candidate whose recorded hash equals ``fresh_hash``.

    A match means the existing chunks can be copied to the new path instead
    of embedding again. Returns "" when nothing matches.
    """
    return next(
        (candidate for candidate in candidates if file_hashes.get(candidate, "") == fresh_hash),
        "",
    )


def file_exists(path: PathLike) -> bool:
    """Report whether ``path`` exists, counting a dangling symlink as present."""
    try:
        os.lstat(path)
    except (OSError, ValueError):
        return False
    return True


def order_paths_by_presence(root: PathLike, relative_paths: Iterable[str]) -> list[str]:
    """Return the paths with those present on disk first, each group sorted.

    Present files converge before missing ones so that a rename's destination
    can still find its source's inode in the snapshot before the source's
    removal drops it.
    """
    base = Path(root)
    return sorted(
        relative_paths,
        key=lambda relative: (not file_exists(base / relative), relative),
    )