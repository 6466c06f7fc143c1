"""Utility helpers for working with files."""

from __future__ import annotations

import logging
import os
import shutil
import stat
import tempfile
from pathlib import Path
from typing import Iterable, Iterator

from findreplace.models import WalkEntry

LOGGER = logging.getLogger(__name__)

ALLOWED_EXTENSIONS: frozenset[str] = frozenset({"md", "txt"})

EXCLUDED_DIR_NAMES: frozenset[str] = frozenset(
    {
        ".git",
        "__MACOSX",
        ".Spotlight-V100",
        ".Trashes",
        ".fseventsd",
        "DerivedData",
        "xcuserdata",
        ".build",
        "build",
        "Index.noindex",
        "Codex Reports",
        "node_modules",
        ".swiftpm",
    }
)

_WINDOWS_HIDDEN_ATTRIBUTE = 0x2


def file_extension(path: Path | str) -> str:
    """Return the lower-cased extension of ``path`` without the leading dot."""
    return Path(path).suffix.lower().lstrip(".")


def is_eligible_file(path: Path | str, name: str | None = None) -> bool:
    """True for regular files whose extension is one of ALLOWED_EXTENSIONS.

    ``name`` overrides the name the extension is taken from, e.g. the link
    name the user typed when ``path`` is its resolved target.
    """
    candidate = Path(path)
    if file_extension(name or candidate.name) not in ALLOWED_EXTENSIONS:
        return False
    try:
        return candidate.is_file()
    except OSError:
        return False


def _flagged_hidden(info: os.stat_result | None) -> bool:
    if info is None:
        return False
    flags = getattr(info, "st_flags", 0)
    if flags & getattr(stat, "UF_HIDDEN", 0):
        return True
    attributes = getattr(info, "st_file_attributes", 0)
    return bool(attributes & _WINDOWS_HIDDEN_ATTRIBUTE)


def is_hidden(name: str, info: os.stat_result | None = None) -> bool:
    """True for dot-names or entries the filesystem marks as hidden."""
    return name.startswith(".") or _flagged_hidden(info)


def should_prune_directory(name: str, info: os.stat_result | None = None) -> bool:
    """True for directories that are never descended into."""
    return is_hidden(name, info) or name in EXCLUDED_DIR_NAMES


def _entry_stat(entry: os.DirEntry) -> os.stat_result | None:
    try:
        return entry.stat(follow_symlinks=False)
    except OSError:
        return None


def iter_walk_entries(root: Path) -> Iterator[WalkEntry]:
    """Walk ``root`` depth-first in name order, yielding files and skip signals.

    Pruned directories are reported once and never entered. Symbolic links
    are not followed, so nothing below a pruned directory is reachable
    through an alias. Entries that cannot be read are reported as skips;
    the walk carries on.
    """
    stack: list[Path] = [Path(root)]

    while stack:
        directory = stack.pop()
        try:
            with os.scandir(directory) as scanner:
                entries = sorted(scanner, key=lambda item: item.name)
        except OSError as exc:
            yield WalkEntry.skip(directory, f"error: {exc.strerror or exc}")
            continue

        subdirectories: list[Path] = []
        for entry in entries:
            path = Path(entry.path)
            try:
                if entry.is_symlink():
                    yield WalkEntry.skip(path, "symlink")
                    continue
                is_dir = entry.is_dir(follow_symlinks=False)
                is_file = not is_dir and entry.is_file(follow_symlinks=False)
            except OSError as exc:
                yield WalkEntry.skip(path, f"error: {exc.strerror or exc}")
                continue

            info = _entry_stat(entry)
            if is_dir:
                if should_prune_directory(entry.name, info):
                    reason = "hidden" if is_hidden(entry.name, info) else "excluded"
                    yield WalkEntry.skip(path, reason)
                else:
                    subdirectories.append(path)
                continue

            if not is_file:
                yield WalkEntry.skip(path, "not a regular file")
            elif is_hidden(entry.name, info):
                yield WalkEntry.skip(path, "hidden")
            elif file_extension(entry.name) not in ALLOWED_EXTENSIONS:
                yield WalkEntry.skip(path, "ineligible")
            else:
                yield WalkEntry(path=path)

        # Reversed so the stack pops subdirectories in name order.
        stack.extend(reversed(subdirectories))


def walk_text_files(root: Path) -> Iterator[Path]:
    """Yield eligible text files below ``root``, logging skipped entries."""
    for item in iter_walk_entries(root):
        if item.skipped:
            LOGGER.debug("Skipping %s (%s)", item.path, item.reason)
            continue
        yield item.path


def atomic_write_bytes(path: Path, data: bytes) -> None:
    """Replace the content of ``path`` with ``data`` all-or-nothing.

    The bytes go to a temporary file in the same directory which is then
    renamed over the target, so readers never see a partial file.
    """
    path = Path(path)
    temp_path: str | None = None
    try:
        with tempfile.NamedTemporaryFile(
            mode="wb",
            delete=False,
            dir=path.parent,
            prefix=f".{path.name}.",
            suffix=".tmp",
        ) as handle:
            temp_path = handle.name
            handle.write(data)
            handle.flush()
            os.fsync(handle.fileno())
        if path.exists():
            shutil.copymode(path, temp_path)
        os.replace(temp_path, path)
    except BaseException:
        if temp_path and os.path.exists(temp_path):
            try:
                os.remove(temp_path)
            except OSError as exc:
                LOGGER.warning("Failed to remove temporary file %s: %s", temp_path, exc)
        raise


def _tilde(path: Path) -> str:
    home = str(Path.home())
    text = str(path)
    if text == home:
        return "~"
    if text.startswith(home + os.sep):
        return "~" + text[len(home):]
    return text


def describe_scope(inputs: Iterable[str]) -> str:
    """Build a short human-readable label for a selection of paths."""
    dirs: list[Path] = []
    files: list[Path] = []
    for raw in inputs:
        path = Path(os.path.abspath(os.path.expanduser(raw)))
        if path.is_dir():
            dirs.append(path)
        elif path.exists():
            files.append(path)

    if dirs:
        first = _tilde(dirs[0])
        extra_dirs = len(dirs) - 1
        if not extra_dirs and not files:
            return first
        if not extra_dirs:
            return f"{first} (+{len(files)} files)"
        if not files:
            return f"{first} (+{extra_dirs} more)"
        return f"{first} (+{extra_dirs} folders, {len(files)} files)"

    if files:
        parents = {file.parent for file in files}
        if len(parents) == 1:
            return _tilde(parents.pop())
        return f"Multiple folders ({len(files)} files)"

    return ""
