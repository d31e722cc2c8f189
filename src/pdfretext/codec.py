# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Glyph-index <-> Unicode codec for CID-keyed hex strings.

Composite fonts with an Identity encoding show text as hex strings made of
fixed-width code units, each unit being a glyph index. Recovering the text
needs a glyph-index -> code point mapping (a "cmap" here), which is built
from the glyph metrics of the font.

The codec is lossy by policy:

- Decoding skips glyph indices that map to code point 0 (fillers such as
  ``.notdef``) and indices missing from the cmap.
- Encoding skips code points that no glyph maps to.

Skipped units are counted in :attr:`HexCodec.dropped` so callers can
report them.
"""

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING

from .fonts.constants import DEFAULT_CODE_UNIT_WIDTH

if TYPE_CHECKING:
    from .fonts.metrics import GlyphMetric

logger = logging.getLogger(__name__)


def build_cmap(metrics: Mapping[int, "GlyphMetric"]) -> dict[int, int]:
    """Builds a glyph index -> code point mapping from glyph metrics.

    Args:
        metrics: Glyph metrics keyed by glyph index.

    Returns:
        Mapping in the iteration order of ``metrics``.
    """
    return {gid: metric.unicode for gid, metric in metrics.items()}


class HexCodec:
    """Converts between hex runs and text through a cmap.

    The reverse lookup used by :meth:`encode` is built once. When several
    glyphs map to the same code point, the first one in cmap iteration
    order wins.
    """

    def __init__(
        self,
        cmap: Mapping[int, int],
        code_unit_width: int = DEFAULT_CODE_UNIT_WIDTH,
    ) -> None:
        """Initializes the codec.

        Args:
            cmap: Glyph index -> Unicode code point mapping.
            code_unit_width: Bytes per code unit (2 for Identity-H).

        Raises:
            ValueError: If code_unit_width is not positive.
        """
        if code_unit_width < 1:
            raise ValueError(f"Code unit width must be positive: {code_unit_width}")

        self.cmap = dict(cmap)
        self.code_unit_width = code_unit_width
        self.dropped = 0

        self._inverse: dict[int, int] = {}
        for gid, code_point in self.cmap.items():
            if code_point:
                self._inverse.setdefault(code_point, gid)

    @property
    def digits(self) -> int:
        """Number of hex digits per code unit."""
        return self.code_unit_width * 2

    def split_units(self, hex_run: str) -> list[int]:
        """Splits a hex run into glyph indices.

        A trailing partial unit is ignored and counted as dropped.

        Raises:
            ValueError: If the run contains non-hex characters.
        """
        digits = self.digits
        units = [
            int(hex_run[i : i + digits], 16)
            for i in range(0, len(hex_run) - digits + 1, digits)
        ]
        if len(hex_run) % digits:
            self.dropped += 1
        return units

    def decode(self, hex_run: str) -> str:
        """Decodes a hex run to text.

        Args:
            hex_run: Hex digits without the ``<`` ``>`` delimiters.

        Returns:
            The decoded text.
        """
        chars = []
        for gid in self.split_units(hex_run):
            code_point = self.cmap.get(gid)
            if code_point is None:
                self.dropped += 1
                continue
            if code_point == 0:
                continue
            chars.append(chr(code_point))
        return "".join(chars)

    def encode(self, text: str) -> str:
        """Encodes text to a hex run of zero-padded glyph indices.

        Args:
            text: Text to encode, iterated by code point.

        Returns:
            Upper-case hex digits without delimiters.
        """
        digits = self.digits
        parts = []
        for char in text:
            gid = self._inverse.get(ord(char))
            if gid is None:
                self.dropped += 1
                logger.debug("No glyph for U+%04X, dropped", ord(char))
                continue
            parts.append(f"{gid:0{digits}X}")
        return "".join(parts)


def decode_hex(
    hex_run: str,
    cmap: Mapping[int, int],
    code_unit_width: int = DEFAULT_CODE_UNIT_WIDTH,
) -> str:
    """Decodes a hex run with a throwaway :class:`HexCodec`."""
    return HexCodec(cmap, code_unit_width).decode(hex_run)


def encode_hex(
    text: str,
    cmap: Mapping[int, int],
    code_unit_width: int = DEFAULT_CODE_UNIT_WIDTH,
) -> str:
    """Encodes text with a throwaway :class:`HexCodec`."""
    return HexCodec(cmap, code_unit_width).encode(text)
