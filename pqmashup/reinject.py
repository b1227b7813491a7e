"""Write a rebuilt DataMashup blob into a copy of a template workbook."""

import shutil
import sys
from pathlib import Path
from typing import Optional, Union

from . import codec
from .archive import ZipArchive, replace_entry
from .base import XmlBackend
from .errors import BlobNotFoundError
from .locator import DEFAULT_ITEM_GLOB, MashupLocation, find_mashup_element, locate
from .xmldoc import LxmlBackend


def harvest_template_header(text: str, strict: bool = False) -> bytes:
    """Header bytes from the template's blob.

    Without an archive signature the header is empty unless ``strict`` is
    set, in which case the template is rejected.
    """
    if strict:
        header, _ = codec.decode(text)
        return header
    header = codec.harvest_header(text)
    if not header:
        print("Warning: template DataMashup has no header; writing an empty one.", file=sys.stderr)
    return header


def reinject(
    template: Union[str, Path],
    new_inner: bytes,
    output: Union[str, Path],
    pattern: str = DEFAULT_ITEM_GLOB,
    strict_header: bool = False,
    xml: Optional[XmlBackend] = None,
) -> MashupLocation:
    """Copy ``template`` to ``output`` with ``new_inner`` as its mashup archive.

    Only the entry holding the DataMashup element changes; every other entry
    keeps the template's bytes. Returns the location that was rewritten.
    """
    xml = xml or LxmlBackend()
    template = Path(template)
    output = Path(output)

    with ZipArchive(template) as archive:
        location = locate(archive, xml, pattern)

    header = harvest_template_header(location.text, strict=strict_header)
    new_text = codec.encode(header, new_inner)

    if output.resolve() != template.resolve():
        output.parent.mkdir(parents=True, exist_ok=True)
        shutil.copyfile(template, output)

    with ZipArchive(output) as archive:
        document, element = find_mashup_element(xml, archive.read(location.entry))
    if element is None:
        raise BlobNotFoundError(f"DataMashup element vanished from '{location.entry}'")

    xml.set_text(element, new_text)
    replace_entry(output, location.entry, xml.serialize(document))
    return MashupLocation(location.entry, new_text)
