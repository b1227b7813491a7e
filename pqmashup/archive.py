import os
import tempfile
import zipfile
import zlib
from pathlib import Path
from typing import List, Union

from .base import ArchiveBackend
from .errors import InputNotFoundError, MalformedArchiveError


class ZipArchive(ArchiveBackend):
    """Read session over an OOXML workbook using ``zipfile``."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)
        if not self.path.is_file():
            raise InputNotFoundError(f"File '{self.path}' not found.")
        try:
            self._zip = zipfile.ZipFile(self.path, "r")
        except zipfile.BadZipFile as e:
            raise MalformedArchiveError(f"'{self.path}' is not a valid workbook archive: {e}") from e

    def names(self) -> List[str]:
        return [info.filename for info in self._zip.infolist()]

    def read(self, name: str) -> bytes:
        try:
            return self._zip.read(name)
        except (zipfile.BadZipFile, zlib.error) as e:
            raise MalformedArchiveError(f"Cannot read '{name}' from '{self.path}': {e}") from e

    def close(self):
        self._zip.close()


def replace_entry(path: Union[str, Path], name: str, data: bytes):
    """Rewrite the archive at ``path`` with entry ``name`` holding ``data``.

    Every other entry is copied with its original ``ZipInfo`` and bytes. The
    new archive is written beside the old one and swapped in once complete.
    """
    path = Path(path)
    fd, tmp_name = tempfile.mkstemp(prefix=path.name + ".", suffix=".tmp", dir=str(path.parent))
    os.close(fd)
    replaced = False
    try:
        with zipfile.ZipFile(path, "r") as zin:
            with zipfile.ZipFile(tmp_name, "w") as zout:
                zout.comment = zin.comment
                for item in zin.infolist():
                    buffer = zin.read(item.filename)
                    if item.filename == name:
                        buffer = data
                        replaced = True
                    zout.writestr(item, buffer)
        if not replaced:
            raise MalformedArchiveError(f"Entry '{name}' not found in '{path}'")
        os.replace(tmp_name, path)
    except zipfile.BadZipFile as e:
        raise MalformedArchiveError(f"'{path}' is not a valid workbook archive: {e}") from e
    finally:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)
