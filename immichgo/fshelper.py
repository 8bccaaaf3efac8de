"""File-system views over command-line arguments: directories, file lists and zip archives."""

from __future__ import annotations

import errno
import glob
import json
import os
import posixpath
import stat
import sys
import zipfile
from dataclasses import dataclass
from datetime import datetime
from typing import IO, Any, Iterable


class ParsePathError(Exception):
    """Raised when some arguments could not be turned into file systems.

    The file systems built from the other arguments are kept in file_systems.
    """

    def __init__(self, errors: Iterable[Exception], file_systems: Iterable[Any] = ()) -> None:
        self.errors = list(errors)
        self.file_systems = list(file_systems)
        super().__init__("\n".join(str(e) for e in self.errors))


def has_magic(path: str) -> bool:
    """Tell whether the path holds a glob wildcard character."""
    magic = "*?[" if sys.platform == "win32" else "*?[\\"
    return any(char in path for char in magic)


def _ext(name: str) -> str:
    base = name.replace("\\", "/").rsplit("/", 1)[-1]
    index = base.rfind(".")
    return base[index:] if index >= 0 else ""


def _not_found(name: str) -> FileNotFoundError:
    return FileNotFoundError(errno.ENOENT, "file does not exist", name)


def _join(directory: str, name: str) -> str:
    return os.path.join(directory, *name.split("/"))


def _sorted_entries(path: str) -> list[os.DirEntry[str]]:
    with os.scandir(path) as entries:
        return sorted(entries, key=lambda entry: entry.name)


def read_json(fsys: Any, name: str) -> Any:
    """Read and decode a JSON file of the file system."""
    with fsys.open(name) as stream:
        return json.load(stream)


def remove(fsys: Any, name: str) -> None:
    """Remove a file when the file system supports removal; do nothing otherwise."""
    remover = getattr(fsys, "remove", None)
    if callable(remover):
        remover(name)


class PathFS:
    """A directory, restricted to a list of file names when one is given.

    A listed file also exposes its sidecar, the same name followed by .xmp.
    """

    def __init__(self, directory: str | os.PathLike[str], files: Iterable[str] | None = None) -> None:
        os.stat(directory)
        self.directory = os.fspath(directory)
        self.files = list(files or [])

    def listed(self, name: str) -> bool:
        if not self.files:
            return True
        ext = _ext(name)
        if ext == ".xmp":
            name = name[: -len(ext)]
        return name in self.files

    def open(self, name: str) -> IO[bytes]:
        if not self.listed(name):
            raise _not_found(name)
        return open(_join(self.directory, name), "rb")

    def stat(self, name: str) -> os.stat_result:
        if name == ".":
            return os.stat(self.directory)
        if not self.listed(name):
            raise _not_found(name)
        return os.stat(_join(self.directory, name))

    def read_dir(self, name: str) -> list[os.DirEntry[str]]:
        entries = _sorted_entries(_join(self.directory, name))
        if self.files:
            entries = [entry for entry in entries if self.listed(entry.name)]
        return entries


class DirRemoveFS:
    """A directory whose files can be removed."""

    def __init__(self, directory: str | os.PathLike[str]) -> None:
        self.directory = os.fspath(directory)

    def open(self, name: str) -> IO[bytes]:
        return open(_join(self.directory, name), "rb")

    def stat(self, name: str) -> os.stat_result:
        return os.stat(_join(self.directory, name))

    def read_dir(self, name: str) -> list[os.DirEntry[str]]:
        return _sorted_entries(_join(self.directory, name))

    def remove(self, name: str) -> None:
        os.remove(_join(self.directory, name))


@dataclass(frozen=True)
class _ZipEntry:
    name: str
    directory: bool
    size: int = 0
    modified: datetime | None = None

    def is_dir(self) -> bool:
        return self.directory


def _parent(name: str) -> str:
    return posixpath.dirname(name) or "."


def _clean(name: str) -> str:
    name = posixpath.normpath(name.strip("/")) if name else "."
    return "." if name in ("", ".") else name


class _ZipIndex:
    def __init__(self, archive: zipfile.ZipFile) -> None:
        self.archive = archive
        self.files: dict[str, zipfile.ZipInfo] = {}
        self.dirs: set[str] = {"."}
        for info in archive.infolist():
            name = _clean(info.filename)
            if info.is_dir():
                self._add_dir(name)
            else:
                self.files[name] = info
                self._add_dir(_parent(name))

    def _add_dir(self, name: str) -> None:
        while name not in self.dirs:
            self.dirs.add(name)
            name = _parent(name)

    def entry(self, name: str) -> _ZipEntry | None:
        if name in self.files:
            info = self.files[name]
            return _ZipEntry(posixpath.basename(name), False, info.file_size, datetime(*info.date_time))
        if name in self.dirs:
            return _ZipEntry(posixpath.basename(name) if name != "." else ".", True)
        return None


class MultiZipFS:
    """Several zip archives seen as one tree; the first archive wins on conflicts."""

    def __init__(self, paths: Iterable[str | os.PathLike[str]]) -> None:
        self._indexes: list[_ZipIndex] = []
        try:
            for path in paths:
                self._indexes.append(_ZipIndex(zipfile.ZipFile(path)))
        except Exception:
            self.close()
            raise

    def open(self, name: str) -> IO[bytes]:
        name = _clean(name)
        for index in self._indexes:
            if name in index.files:
                return index.archive.open(index.files[name])
            if name in index.dirs:
                raise IsADirectoryError(errno.EISDIR, "is a directory", name)
        raise _not_found(name)

    def stat(self, name: str) -> _ZipEntry:
        name = _clean(name)
        for index in self._indexes:
            found = index.entry(name)
            if found is not None:
                return found
        raise _not_found(name)

    def read_dir(self, name: str) -> list[_ZipEntry]:
        name = _clean(name)
        children: dict[str, _ZipEntry] = {}
        found = False
        for index in self._indexes:
            if name not in index.dirs:
                continue
            found = True
            for path in [*index.files, *index.dirs]:
                if path == "." or _parent(path) != name:
                    continue
                child = posixpath.basename(path)
                if child not in children:
                    entry = index.entry(path)
                    if entry is not None:
                        children[child] = entry
        if not found:
            raise _not_found(name)
        return [children[key] for key in sorted(children)]

    def close(self) -> None:
        for index in self._indexes:
            index.archive.close()
        self._indexes = []

    def __enter__(self) -> MultiZipFS:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()


def parse_path(args: Iterable[str], google_photos: bool = False) -> list[Any]:
    """Turn command-line paths, globs and zip archives into file systems.

    Raises ParsePathError listing every argument that could not be used.
    """
    errors: list[Exception] = []
    files: list[str] = []
    paths: dict[str, list[str]] = {}
    zips: list[str] = []
    unsupported: dict[str, None] = {}

    def handle(name: str) -> None:
        try:
            info = os.stat(name)
        except OSError as exc:
            errors.append(exc)
            return
        if stat.S_ISDIR(info.st_mode):
            paths.setdefault(name, [])
            return
        ext = _ext(name).lower()
        if ext == ".zip":
            zips.append(name)
        elif ext == ".tgz":
            unsupported[ext] = None
        elif not google_photos:
            files.append(name)

    for arg in args:
        if not has_magic(arg):
            handle(arg)
            continue
        matches = sorted(glob.glob(arg))
        if not matches:
            errors.append(FileNotFoundError(f"no file matches '{arg}'"))
            continue
        for match in matches:
            if google_photos and _ext(match).lower() != ".zip":
                raise ParsePathError(
                    [ValueError(f"wildcard '{os.path.basename(arg)}' not allowed with the google-photos options")]
                )
            handle(match)

    for name in files:
        directory, base = os.path.split(name)
        directory = os.path.normpath(directory) if directory else "."
        paths.setdefault(directory, []).append(base)

    file_systems: list[Any] = []
    for directory, names in paths.items():
        try:
            file_systems.append(PathFS(directory, names))
        except OSError as exc:
            errors.append(exc)

    if zips:
        try:
            file_systems.append(MultiZipFS(zips))
        except (OSError, zipfile.BadZipFile) as exc:
            errors.append(exc)

    for ext in unsupported:
        errors.append(ValueError(f"files with extension '{ext}' are not supported"))

    if errors:
        raise ParsePathError(errors, file_systems)
    return file_systems