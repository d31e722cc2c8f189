# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Replacement font loading, glyph metrics and font patching."""

from ..exceptions import FontChainError, FontLoadError, FontResourceError
from .constants import DEFAULT_CODE_UNIT_WIDTH, GLYPH_RANGE_END, GLYPH_RANGE_START
from .loader import FontLoader
from .metrics import GlyphMetric, extract_glyph_metrics, load_glyph_metrics
from .patcher import FontPatcher

__all__ = [
    # Exceptions
    "FontLoadError",
    "FontResourceError",
    "FontChainError",
    # Constants
    "DEFAULT_CODE_UNIT_WIDTH",
    "GLYPH_RANGE_START",
    "GLYPH_RANGE_END",
    # Metrics
    "GlyphMetric",
    "extract_glyph_metrics",
    "load_glyph_metrics",
    # Helper classes
    "FontLoader",
    "FontPatcher",
]
