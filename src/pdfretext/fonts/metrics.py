# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Glyph metrics extraction from replacement fonts."""

import logging
from dataclasses import dataclass
from io import BytesIO
from typing import TYPE_CHECKING

from ..exceptions import FontLoadError
from .constants import GLYPH_RANGE_END, GLYPH_RANGE_START, WIDTH_UNITS_PER_EM

if TYPE_CHECKING:
    from fontTools.ttLib import TTFont

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GlyphMetric:
    """Metrics of one glyph of a replacement font.

    Attributes:
        name: Glyph name from the font's glyph order.
        unicode: First Unicode code point mapped to the glyph, 0 if none.
        width: Advance width scaled to 1000 units per em.
    """

    name: str
    unicode: int
    width: int


def _glyph_to_unicode(tt_font: "TTFont") -> dict[int, int]:
    """Maps each glyph index to its first Unicode code point."""
    try:
        cmap = tt_font.getBestCmap()
    except KeyError:
        cmap = None
    if cmap is None:
        return {}

    glyph_name_to_gid = {name: i for i, name in enumerate(tt_font.getGlyphOrder())}
    gid_to_unicode: dict[int, int] = {}
    for unicode_val, glyph_name in cmap.items():
        gid = glyph_name_to_gid.get(glyph_name)
        if gid is not None and gid not in gid_to_unicode:
            gid_to_unicode[gid] = unicode_val
    return gid_to_unicode


def extract_glyph_metrics(
    tt_font: "TTFont",
    glyph_start: int = GLYPH_RANGE_START,
    glyph_end: int = GLYPH_RANGE_END,
) -> dict[int, GlyphMetric]:
    """Builds glyph metrics for a glyph index range of a parsed font.

    Glyph indices beyond the font's glyph count are skipped.

    Args:
        tt_font: fonttools TTFont object.
        glyph_start: First glyph index (inclusive).
        glyph_end: Last glyph index (exclusive).

    Returns:
        Dictionary mapping glyph index to :class:`GlyphMetric`.
    """
    hmtx = tt_font["hmtx"]
    scale = WIDTH_UNITS_PER_EM / tt_font["head"].unitsPerEm
    glyph_order = tt_font.getGlyphOrder()
    gid_to_unicode = _glyph_to_unicode(tt_font)

    metrics: dict[int, GlyphMetric] = {}
    for gid in range(max(glyph_start, 0), min(glyph_end, len(glyph_order))):
        glyph_name = glyph_order[gid]
        advance = hmtx.metrics.get(glyph_name, (0, 0))[0]
        metrics[gid] = GlyphMetric(
            name=glyph_name,
            unicode=gid_to_unicode.get(gid, 0),
            width=round(advance * scale),
        )
    return metrics


def load_glyph_metrics(
    font_data: bytes,
    glyph_start: int = GLYPH_RANGE_START,
    glyph_end: int = GLYPH_RANGE_END,
) -> dict[int, GlyphMetric]:
    """Parses font bytes and builds glyph metrics over [glyph_start, glyph_end).

    Args:
        font_data: Raw TrueType/OpenType font data.
        glyph_start: First glyph index (inclusive).
        glyph_end: Last glyph index (exclusive).

    Returns:
        Dictionary mapping glyph index to :class:`GlyphMetric`.

    Raises:
        FontLoadError: If the font data cannot be parsed.
    """
    from fontTools.ttLib import TTFont

    try:
        tt_font = TTFont(BytesIO(font_data))
    except Exception as e:
        raise FontLoadError(f"Font could not be loaded: {e}") from e

    try:
        metrics = extract_glyph_metrics(tt_font, glyph_start, glyph_end)
    except Exception as e:
        raise FontLoadError(f"Font metrics could not be read: {e}") from e
    finally:
        tt_font.close()

    logger.debug(
        "Loaded metrics for %d glyph(s) in [%d, %d)",
        len(metrics),
        glyph_start,
        glyph_end,
    )
    return metrics
