# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Text extraction and replacement in page content streams.

Content streams are edited as text rather than tokenized: the decoded
stream bytes are mapped to ``str`` with ``surrogateescape`` so that binary
data (inline images) survives the round trip unchanged, literal
replacements are plain substring replacements, and hex strings shown with
``Tj`` are decoded through the replacement font's cmap, edited and
re-encoded.
"""

import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field

import pikepdf

from .codec import HexCodec, build_cmap
from .exceptions import ContentStreamError
from .fonts.constants import DEFAULT_CODE_UNIT_WIDTH
from .fonts.metrics import GlyphMetric

logger = logging.getLogger(__name__)

# <hex digits> followed by the show-text operator
HEX_TJ_PATTERN = re.compile(r"<([0-9A-Fa-f]+)>\s*Tj")

STREAM_ENCODING = "utf-8"
STREAM_ERRORS = "surrogateescape"


@dataclass
class HexMatch:
    """A hex string shown with ``Tj`` and its decoded text."""

    source_hex: str
    decoded: str


@dataclass
class TextExtraction:
    """Text found in a content stream.

    Attributes:
        cmap: Glyph index -> code point mapping used for decoding.
        hex_matches: Hex runs in stream order.
        stream_text: Decoded stream text (after replacement, if any).
        dropped: Code units the codec could not map.
    """

    cmap: dict[int, int]
    hex_matches: list[HexMatch] = field(default_factory=list)
    stream_text: str = ""
    dropped: int = 0


def read_stream_text(stream: pikepdf.Stream) -> str:
    """Returns the decoded payload of a stream as text."""
    return stream.read_bytes().decode(STREAM_ENCODING, STREAM_ERRORS)


def write_stream_text(stream: pikepdf.Stream, text: str) -> None:
    """Replaces the payload of a stream with ``text``."""
    stream.write(text.encode(STREAM_ENCODING, STREAM_ERRORS))


class ContentStreamEditor:
    """Extracts and rewrites text shown by a content stream.

    Args:
        metrics: Glyph metrics of the replacement font.
        code_unit_width: Bytes per code unit in hex runs.
    """

    def __init__(
        self,
        metrics: Mapping[int, GlyphMetric],
        code_unit_width: int = DEFAULT_CODE_UNIT_WIDTH,
    ) -> None:
        self.cmap = build_cmap(metrics)
        self.codec = HexCodec(self.cmap, code_unit_width)

    def extract(self, stream: pikepdf.Stream) -> TextExtraction:
        """Extracts hex-encoded ``Tj`` strings from a content stream.

        Raises:
            ContentStreamError: If ``stream`` is not a stream.
        """
        if not isinstance(stream, pikepdf.Stream):
            raise ContentStreamError(
                f"Contents is not a stream: {type(stream).__name__}"
            )

        try:
            stream_text = read_stream_text(stream)
        except pikepdf.PdfError as e:
            raise ContentStreamError(f"Could not decode content stream: {e}") from e

        dropped_before = self.codec.dropped
        hex_matches = [
            HexMatch(source_hex=source, decoded=self.codec.decode(source))
            for source in HEX_TJ_PATTERN.findall(stream_text)
        ]
        logger.debug("Found %d hex Tj string(s)", len(hex_matches))

        return TextExtraction(
            cmap=self.cmap,
            hex_matches=hex_matches,
            stream_text=stream_text,
            dropped=self.codec.dropped - dropped_before,
        )

    def replace(
        self,
        stream: pikepdf.Stream,
        replacements: Mapping[str, str],
    ) -> TextExtraction:
        """Applies text replacements to a content stream in place.

        Two passes run in order. First every ``key -> value`` pair is
        replaced in the raw stream text, which covers literal strings.
        Then each hex run found before the first pass is decoded, receives
        the same replacements, is re-encoded, and when the result differs
        (ignoring case) every occurrence of the original run is replaced.

        Args:
            stream: Page content stream, modified in place.
            replacements: Ordered ``old -> new`` text pairs.

        Returns:
            The extraction of the original stream, with ``stream_text``
            holding the new text.

        Raises:
            ContentStreamError: If the stream cannot be read or written.
        """
        extraction = self.extract(stream)
        stream_text = extraction.stream_text

        for key, value in replacements.items():
            if key:
                stream_text = stream_text.replace(key, value)

        dropped_before = self.codec.dropped
        for match in extraction.hex_matches:
            decoded = match.decoded
            for key, value in replacements.items():
                if key:
                    decoded = decoded.replace(key, value)
            if decoded == match.decoded:
                continue

            new_hex = self.codec.encode(decoded)
            if new_hex.lower() != match.source_hex.lower():
                stream_text = stream_text.replace(match.source_hex, new_hex)

        extraction.dropped += self.codec.dropped - dropped_before
        if extraction.dropped:
            logger.warning(
                "%d code unit(s) without glyph mapping were dropped",
                extraction.dropped,
            )

        try:
            write_stream_text(stream, stream_text)
        except (pikepdf.PdfError, UnicodeEncodeError) as e:
            raise ContentStreamError(f"Could not write content stream: {e}") from e

        extraction.stream_text = stream_text
        return extraction
