import zipfile

import pytest

from pqmashup import codec
from pqmashup.errors import BlobNotFoundError
from pqmashup.locator import read_mashup_text
from pqmashup.reinject import reinject

from conftest import HEADER, make_inner, make_workbook, mashup_xml, read_entries


@pytest.fixture
def new_inner():
    return make_inner({"Formulas/Section1.m": b"section Section1;\r\nshared New = 42;"})


def test_reinject_replaces_only_the_mashup_entry(workbook, new_inner, tmp_path):
    output = tmp_path / "out.xlsx"

    location = reinject(workbook, new_inner, output)

    before = read_entries(workbook)
    after = read_entries(output)
    assert location.entry == "customXml/item1.xml"
    assert list(after) == list(before)
    changed = [name for name in before if before[name] != after[name]]
    assert changed == ["customXml/item1.xml"]


def test_reinject_keeps_template_header(workbook, new_inner, tmp_path):
    output = tmp_path / "out.xlsx"

    reinject(workbook, new_inner, output)

    header, inner = codec.decode(read_mashup_text(output).text)
    assert header == HEADER
    assert inner == new_inner


def test_reinject_leaves_template_untouched(workbook, new_inner, tmp_path):
    original = workbook.read_bytes()

    reinject(workbook, new_inner, tmp_path / "out.xlsx")

    assert workbook.read_bytes() == original


def test_reinject_preserves_utf16_parts(tmp_path, mashup_text, new_inner):
    template = make_workbook(
        tmp_path / "template.xlsx",
        {"customXml/item1.xml": mashup_xml(mashup_text, encoding="utf-16")},
    )
    output = tmp_path / "out.xlsx"

    reinject(template, new_inner, output)

    with zipfile.ZipFile(output) as z:
        assert b"\x00" in z.read("customXml/item1.xml")
    assert codec.decode(read_mashup_text(output).text)[1] == new_inner


def test_template_without_header_is_lenient(tmp_path, new_inner, capsys):
    text = codec.encode(b"", b"no signature at all")
    template = make_workbook(tmp_path / "template.xlsx", {"customXml/item1.xml": mashup_xml(text)})
    output = tmp_path / "out.xlsx"

    reinject(template, new_inner, output)

    assert codec.decode(read_mashup_text(output).text) == (b"", new_inner)
    assert "Warning" in capsys.readouterr().err


def test_template_without_header_strict(tmp_path, new_inner):
    text = codec.encode(b"", b"no signature at all")
    template = make_workbook(tmp_path / "template.xlsx", {"customXml/item1.xml": mashup_xml(text)})
    output = tmp_path / "out.xlsx"

    with pytest.raises(BlobNotFoundError):
        reinject(template, new_inner, output, strict_header=True)
    assert not output.exists()


def test_template_without_element_writes_nothing(tmp_path, new_inner):
    template = make_workbook(tmp_path / "template.xlsx", {"customXml/item1.xml": b"<root/>"})
    output = tmp_path / "out.xlsx"

    with pytest.raises(BlobNotFoundError):
        reinject(template, new_inner, output)
    assert not output.exists()
