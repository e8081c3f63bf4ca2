# Filesystem seam.
#
# Every component that touches the disk takes a ``fs: FileSystem`` argument so
# tests can swap in an in-memory tree (tests/fs_mock.py) that simulates
# unreadable files and unlistable directories without changing permissions on
# the real filesystem.

from __future__ import annotations

import os
import stat as statmod
from dataclasses import dataclass
from typing import Protocol


@dataclass(slots=True, frozen=True)
class FileStat:
    is_dir: bool
    is_file: bool
    dev: int = 0
    ino: int = 0


@dataclass(slots=True, frozen=True)
class DirEntry:
    path: str
    name: str
    # Both flags describe the entry itself, not a symlink target.
    is_dir: bool
    is_symlink: bool = False


class FileSystem(Protocol):
    def expanduser(self, path: str) -> str: ...

    def exists(self, path: str) -> bool: ...

    def absolute(self, path: str) -> str: ...

    def stat(self, path: str, follow_symlinks: bool = True) -> FileStat: ...

    def scandir(self, path: str) -> list[DirEntry]: ...

    def read_bytes(self, path: str) -> bytes: ...

    def read_text(self, path: str) -> str: ...


class OsFileSystem:
    def expanduser(self, path: str) -> str:
        return os.path.expanduser(path)

    def exists(self, path: str) -> bool:
        return os.path.exists(path)

    def absolute(self, path: str) -> str:
        return os.path.abspath(path)

    def stat(self, path: str, follow_symlinks: bool = True) -> FileStat:
        st = os.stat(path, follow_symlinks=follow_symlinks)
        return FileStat(
            is_dir=statmod.S_ISDIR(st.st_mode),
            is_file=statmod.S_ISREG(st.st_mode),
            dev=st.st_dev,
            ino=st.st_ino,
        )

    def scandir(self, path: str) -> list[DirEntry]:
        with os.scandir(path) as entries:
            return [
                DirEntry(
                    path=entry.path,
                    name=entry.name,
                    is_dir=entry.is_dir(follow_symlinks=False),
                    is_symlink=entry.is_symlink(),
                )
                for entry in entries
            ]

    def read_bytes(self, path: str) -> bytes:
        with open(path, "rb") as fh:
            return fh.read()

    def read_text(self, path: str) -> str:
        with open(path, encoding="utf-8") as fh:
            return fh.read()


DEFAULT_FS: FileSystem = OsFileSystem()
