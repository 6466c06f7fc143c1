"""Text file decoding and re-encoding.

Files are decoded strictly with the first encoding in an ordered list that
accepts every byte, and written back with exactly that encoding so that
untouched parts of a file keep their byte representation.
"""

from __future__ import annotations

import codecs
import logging
from pathlib import Path
from typing import Sequence, Tuple

from findreplace.models import DecodedDocument

LOGGER = logging.getLogger(__name__)

# UTF-8 first, then legacy single-byte encodings. cp1252 goes before
# mac_roman, so Windows files with smart quotes or dashes decode as cp1252
# rather than as Mac Roman look-alikes. mac_roman maps all 256 byte values,
# so it has to stay last. latin-1 is left out because it would never be
# reached.
DEFAULT_ENCODINGS: Tuple[str, ...] = ("utf-8", "cp1252", "mac_roman")

_BOM_ENCODINGS: Tuple[Tuple[bytes, str], ...] = (
    (codecs.BOM_UTF16_LE, "utf-16-le"),
    (codecs.BOM_UTF16_BE, "utf-16-be"),
)


class DecodeFailure(ValueError):
    """No candidate encoding could decode a file."""

    def __init__(self, path: Path | None, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"{path}: {reason}" if path is not None else reason)


class EncodeFailure(ValueError):
    """Text cannot be represented in the encoding a file was read with."""

    def __init__(self, encoding: str, reason: str) -> None:
        self.encoding = encoding
        self.reason = reason
        super().__init__(f"not representable in {encoding}: {reason}")


def candidate_encodings(data: bytes, encodings: Sequence[str] = DEFAULT_ENCODINGS) -> list[str]:
    """Return the encodings to try for ``data``, in order."""
    ordered: list[str] = []
    for bom, name in _BOM_ENCODINGS:
        if data.startswith(bom):
            ordered.append(name)
            break
    ordered.extend(name for name in encodings if name not in ordered)
    return ordered


def decode_bytes(data: bytes, encodings: Sequence[str] = DEFAULT_ENCODINGS) -> Tuple[str, str]:
    """Decode ``data`` with the first encoding that validates all of it."""
    for encoding in candidate_encodings(data, encodings):
        try:
            return data.decode(encoding, errors="strict"), encoding
        except UnicodeDecodeError:
            continue
        except LookupError:
            LOGGER.warning("Unknown encoding %r in candidate list", encoding)
            continue
    raise DecodeFailure(None, "no supported encoding matches the file content")


def decode_file(path: Path, encodings: Sequence[str] = DEFAULT_ENCODINGS) -> DecodedDocument:
    """Read ``path`` and decode it, raising :class:`DecodeFailure` on failure."""
    try:
        data = Path(path).read_bytes()
    except OSError as exc:
        raise DecodeFailure(path, f"cannot read file: {exc.strerror or exc}") from exc

    try:
        text, encoding = decode_bytes(data, encodings)
    except DecodeFailure as exc:
        raise DecodeFailure(path, exc.reason) from None

    LOGGER.debug("Decoded %s as %s", path, encoding)
    return DecodedDocument(path=Path(path), text=text, encoding=encoding)


def encode_text(text: str, encoding: str) -> bytes:
    """Encode ``text`` with ``encoding``, raising :class:`EncodeFailure` if impossible."""
    try:
        return text.encode(encoding, errors="strict")
    except UnicodeEncodeError as exc:
        bad = exc.object[exc.start : exc.end]
        raise EncodeFailure(encoding, f"character {bad!r} at position {exc.start}") from exc
