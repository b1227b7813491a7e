from typing import Optional

from lxml import etree

from .base import XmlBackend
from .errors import MalformedArchiveError


class LxmlBackend(XmlBackend):
    """``lxml.etree`` implementation of the XML capability.

    Documents round-trip with their declared encoding, so a UTF-16
    ``customXml`` part is written back as UTF-16.
    """

    def __init__(self):
        self._parser = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=True)

    def parse(self, data: bytes) -> etree._ElementTree:
        try:
            root = etree.fromstring(data, parser=self._parser)
        except etree.XMLSyntaxError as e:
            raise MalformedArchiveError(f"Invalid XML: {e}") from e
        return root.getroottree()

    def find_local(self, document, local_name: str) -> Optional[etree._Element]:
        found = document.xpath("//*[local-name()=$name]", name=local_name)
        return found[0] if found else None

    def get_text(self, element) -> str:
        return element.text or ""

    def set_text(self, element, text: str):
        element.text = text

    def serialize(self, document) -> bytes:
        docinfo = document.docinfo
        return etree.tostring(
            document,
            encoding=docinfo.encoding or "utf-8",
            xml_declaration=True,
            standalone=docinfo.standalone,
        )
