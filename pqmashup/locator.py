"""Find the DataMashup element inside a workbook's customXml parts."""

from pathlib import Path
from typing import Any, NamedTuple, Optional, Tuple, Union

from .archive import ZipArchive
from .base import ArchiveBackend, XmlBackend
from .errors import BlobNotFoundError, MalformedArchiveError
from .xmldoc import LxmlBackend

DEFAULT_ITEM_GLOB = "customXml/item*.xml"
MASHUP_LOCAL_NAME = "DataMashup"


class MashupLocation(NamedTuple):
    entry: str
    text: str


def find_mashup_element(xml: XmlBackend, data: bytes) -> Tuple[Any, Optional[Any]]:
    """Parse ``data`` and return ``(document, DataMashup element or None)``."""
    document = xml.parse(data)
    return document, xml.find_local(document, MASHUP_LOCAL_NAME)


def locate(
    archive: ArchiveBackend,
    xml: Optional[XmlBackend] = None,
    pattern: str = DEFAULT_ITEM_GLOB,
) -> MashupLocation:
    """Return the first customXml entry holding a DataMashup element.

    Entries are visited in the archive's enumeration order (for ``zipfile``
    that is central directory order, not numeric suffix order). Parts that
    are not well-formed XML are skipped.
    """
    xml = xml or LxmlBackend()
    candidates = archive.glob(pattern)
    if not candidates:
        raise BlobNotFoundError(f"No entries match '{pattern}'")

    for name in candidates:
        try:
            _, element = find_mashup_element(xml, archive.read(name))
        except MalformedArchiveError:
            continue
        if element is None:
            continue
        return MashupLocation(name, xml.get_text(element))

    raise BlobNotFoundError(f"No {MASHUP_LOCAL_NAME} element found in '{pattern}'")


def read_mashup_text(path: Union[str, Path], pattern: str = DEFAULT_ITEM_GLOB) -> MashupLocation:
    with ZipArchive(path) as archive:
        return locate(archive, pattern=pattern)
