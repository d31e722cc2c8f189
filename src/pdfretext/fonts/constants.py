# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Font constants for glyph metrics and font patching."""

# Glyph index range read from a replacement font (half-open)
GLYPH_RANGE_START = 0
GLYPH_RANGE_END = 256

# Bytes per code unit in CID-keyed hex runs (Identity-H uses two)
DEFAULT_CODE_UNIT_WIDTH = 2

# Glyph widths are expressed in thousandths of the em square
WIDTH_UNITS_PER_EM = 1000

# Key of the embedded TrueType program inside a font descriptor
FONT_PROGRAM_KEY = "/FontFile2"
