# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Replacement font loading."""

import logging
import threading
from pathlib import Path
from urllib.parse import quote

from ..exceptions import FontLoadError
from .constants import GLYPH_RANGE_END, GLYPH_RANGE_START
from .metrics import GlyphMetric, load_glyph_metrics

logger = logging.getLogger(__name__)


class FontLoader:
    """Loads and caches replacement font files.

    Font identifiers are resolved inside a single fonts directory. The
    identifier is percent-encoded before it is joined to the directory,
    so ``../x`` names the file ``..%2Fx`` and never leaves it.

    One loader may be shared by several edit sessions running in
    parallel; the caches are lock-protected and hold immutable data.
    """

    def __init__(self, fonts_dir: Path | str) -> None:
        """Initializes the FontLoader.

        Args:
            fonts_dir: Directory holding the replacement fonts.
        """
        self.fonts_dir = Path(fonts_dir)
        self._font_cache: dict[str, bytes] = {}
        self._metrics_cache: dict[tuple[str, int, int], dict[int, GlyphMetric]] = {}
        self._lock = threading.Lock()

    def resolve_path(self, font_id: str) -> Path:
        """Returns the file path of a font identifier.

        Raises:
            FontLoadError: If the identifier is empty.
        """
        if not font_id:
            raise FontLoadError("No font given")
        return self.fonts_dir / quote(font_id, safe="")

    def load_bytes(self, font_id: str) -> bytes:
        """Loads the raw bytes of a font.

        Args:
            font_id: Font identifier, usually a file name.

        Returns:
            Font data as bytes.

        Raises:
            FontLoadError: If the font cannot be read.
        """
        with self._lock:
            if font_id in self._font_cache:
                return self._font_cache[font_id]

        font_path = self.resolve_path(font_id)
        try:
            font_data = font_path.read_bytes()
        except OSError as e:
            raise FontLoadError(f"Could not read font '{font_id}': {e}") from e

        with self._lock:
            self._font_cache[font_id] = font_data
        logger.debug("Font loaded: %s (%d bytes)", font_path, len(font_data))
        return font_data

    def load_metrics(
        self,
        font_id: str,
        glyph_start: int = GLYPH_RANGE_START,
        glyph_end: int = GLYPH_RANGE_END,
    ) -> dict[int, GlyphMetric]:
        """Loads glyph metrics of a font over [glyph_start, glyph_end).

        Raises:
            FontLoadError: If the font cannot be read or parsed.
        """
        cache_key = (font_id, glyph_start, glyph_end)
        with self._lock:
            if cache_key in self._metrics_cache:
                return dict(self._metrics_cache[cache_key])

        metrics = load_glyph_metrics(self.load_bytes(font_id), glyph_start, glyph_end)

        with self._lock:
            self._metrics_cache[cache_key] = metrics
        return dict(metrics)
