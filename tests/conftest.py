# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Pytest fixtures for the pdfretext test suite."""

from io import BytesIO
from pathlib import Path

import pikepdf
import pytest
from font_helpers import make_identity_font
from pikepdf import Array, Dictionary, Name, Pdf

from pdfretext.fonts.loader import FontLoader

# -- Global PDF tracker --

_tracked_pdfs: list[Pdf] = []


@pytest.fixture(autouse=True)
def _auto_close_pdfs():
    """Close all tracked PDF objects after each test."""
    yield
    for pdf in reversed(_tracked_pdfs):
        try:
            pdf.close()
        except Exception:
            pass
    _tracked_pdfs.clear()


def new_pdf(**kwargs) -> Pdf:
    """Create a tracked Pdf (auto-closed after test)."""
    pdf = Pdf.new(**kwargs)
    _tracked_pdfs.append(pdf)
    return pdf


def open_pdf(source, **kwargs) -> Pdf:
    """Open a tracked Pdf (auto-closed after test)."""
    pdf = Pdf.open(source, **kwargs)
    _tracked_pdfs.append(pdf)
    return pdf


# -- Shared test helpers (not fixtures) --

HELLO_CONTENT = (
    b"BT /F1 12 Tf 72 720 Td (Hello) Tj 0 -14 Td <00480065006C006C006F> Tj ET"
)

OLD_FONT_PROGRAM = b"old font program"


def make_pdf_with_page() -> Pdf:
    """Create a minimal PDF with one page (auto-tracked)."""
    pdf = new_pdf()
    page = pikepdf.Page(Dictionary(Type=Name.Page, MediaBox=Array([0, 0, 612, 792])))
    pdf.pages.append(page)
    return pdf


def make_cid_pdf(
    content: bytes = HELLO_CONTENT,
    *,
    pages: int = 1,
    with_w: bool = True,
    with_descriptor: bool = True,
    with_program: bool = True,
) -> Pdf:
    """Create a PDF whose pages show text with a Type0/CIDFontType2 font.

    Every page shares the font ``/F1`` and gets its own copy of
    ``content``. The font program stream holds ``OLD_FONT_PROGRAM``.

    Args:
        content: Content stream data of each page.
        pages: Number of pages.
        with_w: Give the descendant font a ``/W`` array ``[1 [500]]``.
        with_descriptor: Give the descendant font a ``/FontDescriptor``.
        with_program: Give the descriptor a ``/FontFile2`` stream.

    Returns:
        The PDF (auto-tracked).
    """
    pdf = new_pdf()

    descendant = Dictionary(
        Type=Name.Font,
        Subtype=Name.CIDFontType2,
        BaseFont=Name("/OldFont"),
        CIDSystemInfo=Dictionary(
            Registry=pikepdf.String("Adobe"),
            Ordering=pikepdf.String("Identity"),
            Supplement=0,
        ),
        DW=1000,
        CIDToGIDMap=Name.Identity,
    )
    if with_w:
        descendant.W = Array([1, Array([500])])
    if with_descriptor:
        descriptor = Dictionary(
            Type=Name.FontDescriptor,
            FontName=Name("/OldFont"),
            Flags=32,
        )
        if with_program:
            font_file = pikepdf.Stream(pdf, OLD_FONT_PROGRAM)
            font_file.Length1 = len(OLD_FONT_PROGRAM)
            descriptor.FontFile2 = pdf.make_indirect(font_file)
        descendant.FontDescriptor = pdf.make_indirect(descriptor)

    type0_font = pdf.make_indirect(
        Dictionary(
            Type=Name.Font,
            Subtype=Name.Type0,
            BaseFont=Name("/OldFont"),
            Encoding=Name("/Identity-H"),
            DescendantFonts=Array([pdf.make_indirect(descendant)]),
        )
    )

    for _ in range(pages):
        page = pikepdf.Page(
            Dictionary(
                Type=Name.Page,
                MediaBox=Array([0, 0, 612, 792]),
                Resources=Dictionary(Font=Dictionary(F1=type0_font)),
                Contents=pdf.make_stream(content),
            )
        )
        pdf.pages.append(page)
    return pdf


def save_and_reopen(pdf: Pdf) -> Pdf:
    """Save a PDF to bytes and reopen it (auto-tracked)."""
    buf = BytesIO()
    pdf.save(buf)
    pdf.close()
    buf.seek(0)
    return open_pdf(buf)


def page_text(pdf: Pdf, index: int = 0) -> bytes:
    """Returns the decoded content stream of a page."""
    return pdf.pages[index].obj.Contents.read_bytes()


def descendant_of(pdf: Pdf, index: int = 0) -> Dictionary:
    """Returns the descendant font of ``/F1`` on a page."""
    font = pdf.pages[index].obj.Resources.Font.F1
    return font.DescendantFonts[0]


# -- Fixtures --


@pytest.fixture
def tmp_dir(tmp_path: Path) -> Path:
    """Temporary directory for tests.

    Args:
        tmp_path: Pytest-provided temporary directory.

    Returns:
        Path to the temporary directory.
    """
    return tmp_path


@pytest.fixture
def font_bytes() -> bytes:
    """Identity-mapped ASCII replacement font as bytes."""
    return make_identity_font()


@pytest.fixture
def fonts_dir(tmp_dir: Path, font_bytes: bytes) -> Path:
    """Directory holding the replacement font as ``Test.ttf``."""
    directory = tmp_dir / "fonts"
    directory.mkdir()
    (directory / "Test.ttf").write_bytes(font_bytes)
    return directory


@pytest.fixture
def font_loader(fonts_dir: Path) -> FontLoader:
    """FontLoader reading from the test fonts directory."""
    return FontLoader(fonts_dir)


@pytest.fixture
def cid_pdf(tmp_dir: Path) -> Path:
    """PDF with one page showing "Hello" as literal and as hex run.

    Args:
        tmp_dir: Temporary directory.

    Returns:
        Path to the PDF file.
    """
    pdf = make_cid_pdf()
    pdf_path = tmp_dir / "hello.pdf"
    pdf.save(pdf_path)
    return pdf_path


@pytest.fixture
def sample_pdf(tmp_dir: Path) -> Path:
    """Minimal valid PDF without fonts on disk."""
    pdf = make_pdf_with_page()
    pdf_path = tmp_dir / "sample.pdf"
    pdf.save(pdf_path)
    return pdf_path


@pytest.fixture
def encrypted_pdf(tmp_dir: Path) -> Path:
    """Encrypted PDF for error tests.

    Args:
        tmp_dir: Temporary directory.

    Returns:
        Path to the encrypted PDF file.
    """
    pdf = make_cid_pdf()
    encrypted_path = tmp_dir / "encrypted.pdf"
    pdf.save(encrypted_path, encryption=pikepdf.Encryption(owner="testpassword"))
    return encrypted_path
