# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Patching of composite fonts to match a replacement font.

A Type0 font points to its CIDFont through ``/DescendantFonts``; the last
descendant is taken as the one in use. The CIDFont carries the ``/W``
width array and a ``/FontDescriptor`` whose ``/FontFile2`` stream holds the
embedded TrueType program.

Width patching only appends: the ``/W`` array grows by one
``gid [width]`` pair per glyph with a nonzero width on every call. Callers
patch a given font once per document.

The replacement program is written as-is. Glyph indices already used by
the page's content stream are assumed to mean the same glyphs in the
replacement font.
"""

import logging
from collections.abc import Mapping

import pikepdf
from pikepdf import Array, Dictionary, Name, Stream

from ..exceptions import FontChainError, FontResourceError
from ..utils import resolve_indirect as _resolve_indirect
from .constants import FONT_PROGRAM_KEY
from .metrics import GlyphMetric

logger = logging.getLogger(__name__)


class FontPatcher:
    """Applies replacement font widths and program to a page font."""

    def page_fonts(self, page: pikepdf.Page) -> list[tuple[str, Dictionary]]:
        """Returns the fonts of a page's ``/Resources/Font`` in key order.

        Args:
            page: A pikepdf Page object.

        Returns:
            List of (resource name, font dictionary) tuples.
        """
        resources = page.obj.get("/Resources")
        if resources is None:
            return []
        font_dict = _resolve_indirect(resources).get("/Font")
        if font_dict is None:
            return []
        font_dict = _resolve_indirect(font_dict)
        if not isinstance(font_dict, Dictionary):
            return []

        fonts = []
        for font_key in list(font_dict.keys()):
            font_obj = _resolve_indirect(font_dict[font_key])
            if isinstance(font_obj, Dictionary):
                fonts.append((str(font_key), font_obj))
        return fonts

    def select_font(self, page: pikepdf.Page, font_index: int) -> Dictionary:
        """Selects a page font by position.

        Raises:
            FontResourceError: If ``font_index`` is out of range.
        """
        fonts = self.page_fonts(page)
        if not 0 <= font_index < len(fonts):
            raise FontResourceError(
                f"cannot index {font_index} in font resources "
                f"({len(fonts)} font(s) on page)"
            )
        font_name, font_obj = fonts[font_index]
        logger.debug("Selected font %s (index %d)", font_name, font_index)
        return font_obj

    def descendant_font(self, font: Dictionary) -> Dictionary:
        """Returns the last descendant font of a Type0 font.

        Raises:
            FontChainError: If the font has no descendant fonts.
        """
        descendants = font.get("/DescendantFonts")
        if descendants is not None:
            descendants = _resolve_indirect(descendants)
        if not isinstance(descendants, Array) or len(descendants) == 0:
            raise FontChainError("none of the descendant fonts found")

        descendant = _resolve_indirect(descendants[len(descendants) - 1])
        if not isinstance(descendant, Dictionary):
            raise FontChainError("descendant font is not a dictionary")
        return descendant

    def append_widths(
        self,
        descendant: Dictionary,
        metrics: Mapping[int, GlyphMetric],
    ) -> int:
        """Appends ``gid [width]`` pairs to the descendant's ``/W`` array.

        Glyphs with zero width are skipped. Nothing happens when the font
        has no ``/W`` array.

        Args:
            descendant: CIDFont dictionary.
            metrics: Glyph metrics of the replacement font.

        Returns:
            Number of pairs appended.
        """
        w_array = descendant.get("/W")
        if w_array is None:
            logger.debug("Descendant font has no /W array, widths unchanged")
            return 0
        w_array = _resolve_indirect(w_array)
        if not isinstance(w_array, Array):
            logger.debug("Descendant font /W is not an array, widths unchanged")
            return 0

        appended = 0
        for gid, metric in metrics.items():
            if not metric.width:
                continue
            w_array.append(gid)
            w_array.append(Array([metric.width]))
            appended += 1

        logger.debug("Appended %d width entr(y/ies) to /W", appended)
        return appended

    def font_program(self, descendant: Dictionary) -> Stream:
        """Returns the embedded font program stream of a descendant font.

        Raises:
            FontChainError: If the descriptor or the program is missing.
        """
        descriptor = descendant.get("/FontDescriptor")
        if descriptor is not None:
            descriptor = _resolve_indirect(descriptor)
        if not isinstance(descriptor, Dictionary):
            raise FontChainError("cannot address /FontDescriptor")

        font_file = descriptor.get(FONT_PROGRAM_KEY)
        if font_file is not None:
            font_file = _resolve_indirect(font_file)
        if not isinstance(font_file, Stream):
            raise FontChainError(f"cannot address {FONT_PROGRAM_KEY}")
        return font_file

    def swap_font_program(self, descendant: Dictionary, font_data: bytes) -> Stream:
        """Replaces the embedded font program with ``font_data``.

        Args:
            descendant: CIDFont dictionary.
            font_data: Raw replacement font bytes.

        Returns:
            The rewritten font program stream.

        Raises:
            FontChainError: If the descriptor or the program is missing.
        """
        font_file = self.font_program(descendant)
        font_file.write(font_data)
        font_file[Name.Length1] = len(font_data)
        logger.debug("Font program replaced (%d bytes)", len(font_data))
        return font_file

    def patch(
        self,
        page: pikepdf.Page,
        font_index: int,
        metrics: Mapping[int, GlyphMetric],
        font_data: bytes,
    ) -> int:
        """Patches widths and program of a page font.

        Widths are appended before the program is looked up, so a missing
        program leaves the appended widths in place.

        Returns:
            Number of width pairs appended.

        Raises:
            FontResourceError: If ``font_index`` is out of range.
            FontChainError: If a link of the font chain is missing.
        """
        font = self.select_font(page, font_index)
        descendant = self.descendant_font(font)
        appended = self.append_widths(descendant, metrics)
        self.swap_font_program(descendant, font_data)
        return appended
