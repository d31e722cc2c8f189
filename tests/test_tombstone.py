# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Unit tests for tombstone.py."""

from io import BytesIO

import pikepdf
from conftest import make_cid_pdf, make_pdf_with_page, save_and_reopen
from pikepdf import Array, Dictionary, Name

from pdfretext.objects import ObjectGraph
from pdfretext.tombstone import clear_object, resolve_identifier, tombstone_objects


def _add_image(pdf, resource_name="/Im0", name_entry=None):
    page = pdf.pages[0]
    image = pikepdf.Stream(pdf, b"\xff\x00\x00")
    image.Type = Name.XObject
    image.Subtype = Name.Image
    image.Width = 1
    image.Height = 1
    image.BitsPerComponent = 8
    image.ColorSpace = Name.DeviceRGB
    if name_entry is not None:
        image.Name = Name(name_entry)
    image = pdf.make_indirect(image)
    resources = page.obj.get("/Resources")
    if resources is None:
        page.obj.Resources = Dictionary()
        resources = page.obj.Resources
    resources.XObject = Dictionary({resource_name: image})
    return image


def _saved_bytes(pdf) -> bytes:
    buf = BytesIO()
    pdf.save(buf, deterministic_id=True)
    return buf.getvalue()


class TestClearObject:
    """Tests for clear_object."""

    def test_stream_keeps_dictionary(self):
        pdf = make_pdf_with_page()
        image = _add_image(pdf)
        assert clear_object(image) is True
        assert image.read_bytes() == b""
        assert image.Subtype == Name.Image

    def test_dictionary_loses_entries(self):
        pdf = make_pdf_with_page()
        obj = pdf.make_indirect(Dictionary(A=1, B=Name.X))
        assert clear_object(obj) is True
        assert len(obj.keys()) == 0

    def test_array_loses_elements(self):
        pdf = make_pdf_with_page()
        obj = pdf.make_indirect(Array([1, 2, 3]))
        assert clear_object(obj) is True
        assert len(obj) == 0

    def test_other_types(self):
        assert clear_object(Name.X) is False


class TestResolveIdentifier:
    """Tests for resolve_identifier."""

    def test_by_number(self):
        pdf = make_pdf_with_page()
        image = _add_image(pdf)
        graph = ObjectGraph(pdf)
        found = resolve_identifier(graph, pdf.pages[0], image.objgen[0])
        assert [obj.objgen for obj in found] == [image.objgen]

    def test_by_name_entry_first(self):
        pdf = make_pdf_with_page()
        named = _add_image(pdf, resource_name="/Im0", name_entry="/Im1")
        graph = ObjectGraph(pdf)
        found = resolve_identifier(graph, pdf.pages[0], "/Im1")
        assert [obj.objgen for obj in found] == [named.objgen]

    def test_falls_back_to_page_resources(self):
        pdf = make_pdf_with_page()
        image = _add_image(pdf, resource_name="/Im0")
        graph = ObjectGraph(pdf)
        found = resolve_identifier(graph, pdf.pages[0], "/Im0")
        assert [obj.objgen for obj in found] == [image.objgen]

    def test_boolean_is_ignored(self):
        pdf = make_pdf_with_page()
        assert resolve_identifier(ObjectGraph(pdf), pdf.pages[0], True) == []

    def test_unknown_number(self):
        pdf = make_pdf_with_page()
        assert resolve_identifier(ObjectGraph(pdf), pdf.pages[0], 9999) == []


class TestTombstoneObjects:
    """Tests for tombstone_objects."""

    def test_clears_image_and_keeps_reference(self):
        pdf = make_pdf_with_page()
        _add_image(pdf)

        cleared = tombstone_objects(ObjectGraph(pdf), pdf.pages[0], ["/Im0"])
        assert len(cleared) == 1

        pdf = save_and_reopen(pdf)
        reopened = pdf.pages[0].obj.Resources.XObject.Im0
        assert isinstance(reopened, pikepdf.Stream)
        assert reopened.Subtype == Name.Image
        assert reopened.read_bytes() == b""

    def test_duplicates_are_cleared_once(self):
        pdf = make_pdf_with_page()
        image = _add_image(pdf)
        cleared = tombstone_objects(
            ObjectGraph(pdf), pdf.pages[0], ["/Im0", image.objgen[0]]
        )
        assert len(cleared) == 1

    def test_no_match_leaves_document_unchanged(self):
        pdf = make_cid_pdf()
        before = _saved_bytes(pdf)

        cleared = tombstone_objects(ObjectGraph(pdf), pdf.pages[0], ["/Watermark"])

        assert cleared == []
        assert _saved_bytes(pdf) == before

    def test_clears_by_number(self):
        pdf = make_cid_pdf()
        font = pdf.pages[0].obj.Resources.Font.F1
        cleared = tombstone_objects(ObjectGraph(pdf), pdf.pages[0], [font.objgen[0]])
        assert len(cleared) == 1
        assert len(pdf.pages[0].obj.Resources.Font.F1.keys()) == 0

    def test_empty_identifiers(self):
        pdf = make_cid_pdf()
        assert tombstone_objects(ObjectGraph(pdf), pdf.pages[0], []) == []
