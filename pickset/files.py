"""File and directory metadata listing.

Only regular files are reported. Symbolic links, sockets, devices and other
special entries are skipped, and a directory that cannot be read produces an
empty listing rather than an error.
"""

import os
import stat
from collections.abc import Collection
from dataclasses import dataclass
from pathlib import Path

from loguru import logger


@dataclass(frozen=True, kw_only=True)
class FileRecord:
    """Metadata for one regular file.

    Attributes:
        name: Full path of the file
        size: Size in bytes
        atime: Last access time (epoch seconds)
        ctime: Last inode change time (epoch seconds)
        mtime: Last modification time (epoch seconds)
        octal: Full mode as an octal string, e.g. "100644"
        owner: Owner UID
        perms: Full mode as an integer
    """

    name: str
    size: int
    atime: int
    ctime: int
    mtime: int
    octal: str
    owner: int
    perms: int

    @classmethod
    def from_stat(cls, path: str, st: os.stat_result) -> "FileRecord":
        return cls(
            name=path,
            size=st.st_size,
            atime=int(st.st_atime),
            ctime=int(st.st_ctime),
            mtime=int(st.st_mtime),
            octal=format(st.st_mode, "o"),
            owner=st.st_uid,
            perms=st.st_mode,
        )


def _matches(name: str, exts: Collection[str] | None) -> bool:
    """True if ``exts`` is empty or the file's extension is listed."""
    if not exts:
        return True
    return Path(name).suffix.removeprefix(".") in exts


def _scan(directory: str | os.PathLike[str]) -> list[os.DirEntry[str]]:
    try:
        with os.scandir(directory) as entries:
            return sorted(entries, key=lambda entry: entry.name)
    except OSError as e:
        logger.debug(f"Cannot list {directory}: {e}")
        return []


def get_directory_contents(
    directory: str | os.PathLike[str],
    recursive: bool = False,
    exts: Collection[str] | None = None,
) -> list[FileRecord]:
    """
    Return metadata for the regular files in ``directory``.

    Args:
        directory: Directory to list
        recursive: Also descend into subdirectories
        exts: If given, only report files with these extensions. Do not
            include dots, e.g. ["txt", "jpg", "sql"]

    Returns:
        One FileRecord per file, ordered by name within each directory.
        Missing or unreadable directories give an empty list.

    Example:
        >>> for record in get_directory_contents("/var/log", exts=["log"]):
        ...     print(record.name, record.size)
    """
    files: list[FileRecord] = []

    for entry in _scan(directory):
        try:
            if entry.is_file(follow_symlinks=False):
                if _matches(entry.name, exts):
                    files.append(
                        FileRecord.from_stat(
                            entry.path, entry.stat(follow_symlinks=False)
                        )
                    )
            elif recursive and entry.is_dir(follow_symlinks=False):
                files.extend(get_directory_contents(entry.path, recursive, exts))
        except OSError as e:
            # Entry vanished or became unreadable between listing and stat
            logger.debug(f"Skipping {entry.path}: {e}")

    return files


def scandir_chrono(
    path: str | os.PathLike[str],
    reverse: bool = False,
    exts: Collection[str] | None = None,
) -> list[str]:
    """
    Return the names of the regular files in ``path`` ordered by date.

    Args:
        path: Directory to list
        reverse: Newest first instead of oldest first
        exts: If given, only include files with these extensions (no dots)

    Returns:
        File names (not full paths) ordered by modification time.
        Files sharing an mtime are listed by ascending name in either order
    """
    dated: list[tuple[float, str]] = []

    for entry in _scan(path):
        try:
            st = entry.stat(follow_symlinks=False)
        except OSError as e:
            logger.debug(f"Skipping {entry.path}: {e}")
            continue
        if stat.S_ISREG(st.st_mode) and _matches(entry.name, exts):
            dated.append((st.st_mtime, entry.name))

    if reverse:
        dated.sort(key=lambda item: (-item[0], item[1]))
    else:
        dated.sort()
    return [name for _, name in dated]
