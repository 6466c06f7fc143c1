"""Turn user-supplied paths into a deduplicated list of candidate files."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Iterable, Iterator, List

from findreplace.models import DirectoryArgument, FileArgument, MissingArgument, PathArgument
from findreplace.utils.files import is_eligible_file, walk_text_files

LOGGER = logging.getLogger(__name__)


def canonical_path(path: Path | str) -> Path:
    """Absolute, symlink-resolved form of ``path`` used as a dedup key."""
    return Path(os.path.realpath(os.path.expanduser(str(path))))


def classify_argument(raw: str | Path) -> PathArgument:
    """Expand and canonicalise ``raw`` once and tag what it points at."""
    path = canonical_path(raw)
    try:
        if path.is_dir():
            return DirectoryArgument(path)
        if path.exists():
            return FileArgument(path, given_name=Path(os.path.expanduser(str(raw))).name)
    except OSError as exc:
        LOGGER.debug("Cannot inspect %s: %s", raw, exc)
    return MissingArgument(str(raw))


def iter_argument_files(argument: PathArgument) -> Iterator[Path]:
    """Yield the candidate files one classified argument contributes."""
    if isinstance(argument, DirectoryArgument):
        for path in walk_text_files(argument.path):
            yield canonical_path(path)
    elif isinstance(argument, FileArgument):
        if is_eligible_file(argument.path, argument.given_name or None):
            yield argument.path
        else:
            LOGGER.debug("Ignoring ineligible file %s", argument.path)
    else:
        LOGGER.debug("Ignoring missing path %s", argument.raw)


def resolve_targets(inputs: Iterable[str | Path]) -> List[Path]:
    """Resolve files and folders into an ordered list of unique text files.

    Missing or ineligible inputs contribute nothing; an empty result is a
    valid outcome.
    """
    seen: set[Path] = set()
    targets: List[Path] = []
    for raw in inputs:
        for path in iter_argument_files(classify_argument(raw)):
            if path in seen:
                continue
            seen.add(path)
            targets.append(path)

    LOGGER.info("Resolved %d candidate files", len(targets))
    return targets
