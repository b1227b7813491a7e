import io
import struct
import zipfile
from pathlib import Path
from typing import Dict

import openpyxl
import pytest

from pqmashup import codec

DM_NS = "http://schemas.microsoft.com/DataMashup"

# Version 0 plus a PackageParts length; opaque to the code under test.
HEADER = struct.pack("<II", 0, 0x1234)

SECTION = 'section Section1;\r\n\r\nshared A = 1+1;\r\nshared #"B C" = foo();\r\n'

INNER_FILES = {
    "[Content_Types].xml": b'<?xml version="1.0" encoding="utf-8"?><Types/>',
    "Config/Package.xml": b'<?xml version="1.0" encoding="utf-8"?><Package/>',
    "Formulas/Section1.m": SECTION.encode("utf-8"),
}


def make_inner(files: Dict[str, bytes]) -> bytes:
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=zipfile.ZIP_DEFLATED) as z:
        for name, data in files.items():
            z.writestr(name, data)
    return buffer.getvalue()


def mashup_xml(text: str, encoding: str = "utf-8") -> bytes:
    xml = f'<?xml version="1.0" encoding="{encoding}"?><DataMashup xmlns="{DM_NS}">{text}</DataMashup>'
    if encoding == "utf-16":
        return xml.encode("utf-16")
    return xml.encode(encoding)


def make_workbook(path: Path, items: Dict[str, bytes]) -> Path:
    """Save a real workbook with openpyxl and append the given parts."""
    wb = openpyxl.Workbook()
    wb.active["A1"] = 1
    wb.save(path)
    with zipfile.ZipFile(path, "a") as z:
        for name, data in items.items():
            z.writestr(name, data)
    return path


def read_entries(path: Path) -> Dict[str, bytes]:
    with zipfile.ZipFile(path, "r") as z:
        return {info.filename: z.read(info.filename) for info in z.infolist()}


@pytest.fixture
def inner_bytes() -> bytes:
    return make_inner(INNER_FILES)


@pytest.fixture
def mashup_text(inner_bytes) -> str:
    return codec.encode(HEADER, inner_bytes)


@pytest.fixture
def workbook(tmp_path, mashup_text) -> Path:
    return make_workbook(
        tmp_path / "template.xlsx",
        {
            "customXml/item1.xml": mashup_xml(mashup_text),
            "customXml/itemProps1.xml": b'<?xml version="1.0"?><ds:datastoreItem xmlns:ds="urn:x"/>',
        },
    )
