"""Unpack the inner mashup archive to disk and pack a directory back."""

import io
import zipfile
import zlib
from fnmatch import fnmatchcase
from pathlib import Path, PurePosixPath, PureWindowsPath
from typing import Iterable, List, Union

from .errors import InputNotFoundError, MalformedArchiveError

COMPRESSION = {
    "deflated": zipfile.ZIP_DEFLATED,
    "stored": zipfile.ZIP_STORED,
}


def _destination(dest_root: Path, entry_name: str) -> Path:
    # Entry names are used verbatim; only names escaping the root are refused,
    # under both POSIX and Windows path rules.
    relative = PurePosixPath(entry_name)
    windows = PureWindowsPath(entry_name)
    if (
        relative.is_absolute()
        or windows.anchor
        or ".." in relative.parts
        or ".." in windows.parts
    ):
        raise MalformedArchiveError(f"Entry '{entry_name}' escapes the output directory")
    return dest_root.joinpath(*relative.parts)


def unpack(inner: bytes, dest_root: Union[str, Path]) -> List[Path]:
    """Write every entry of the inner archive under ``dest_root``.

    Returns the written paths in archive order. Directory entries are
    skipped; their files still create the directories they need.
    """
    dest_root = Path(dest_root)
    written = []
    try:
        with zipfile.ZipFile(io.BytesIO(inner), "r") as zin:
            for item in zin.infolist():
                if item.is_dir():
                    continue
                dest_path = _destination(dest_root, item.filename)
                dest_path.parent.mkdir(parents=True, exist_ok=True)
                dest_path.write_bytes(zin.read(item))
                written.append(dest_path)
    except (zipfile.BadZipFile, zlib.error, EOFError) as e:
        raise MalformedArchiveError(f"Inner mashup archive is unreadable: {e}") from e
    return written


def iter_source_files(source_root: Path, exclude: Iterable[str] = ()):
    """Yield ``(entry_name, path)`` for every regular file, sorted by name."""
    patterns = list(exclude)
    for path in sorted(source_root.rglob("*")):
        if not path.is_file():
            continue
        entry_name = path.relative_to(source_root).as_posix()
        if any(fnmatchcase(entry_name, pattern) for pattern in patterns):
            continue
        yield entry_name, path


def pack(
    source_root: Union[str, Path],
    compression: str = "deflated",
    exclude: Iterable[str] = (),
) -> bytes:
    """Build inner archive bytes from the files under ``source_root``."""
    source_root = Path(source_root)
    if not source_root.is_dir():
        raise InputNotFoundError(f"Source directory '{source_root}' not found.")
    if compression not in COMPRESSION:
        raise ValueError(f"Unsupported compression: {compression}")

    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=COMPRESSION[compression]) as zout:
        for entry_name, path in iter_source_files(source_root, exclude):
            zout.writestr(entry_name, path.read_bytes())
    return buffer.getvalue()
