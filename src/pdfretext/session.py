# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Edit session applying a list of edit options to one document.

Each option runs through the stages of :class:`EditStage` in order. A
recoverable failure (:class:`~pdfretext.exceptions.EditError`) becomes a
warning and ends the current option; stages already applied to the page
stay applied. Plugin failures are the exception: they are recorded and the
option continues.

After all options, :meth:`EditSession.save` serializes the document. A
failure there is fatal for the document.
"""

import enum
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO

import pikepdf

from .content import ContentStreamEditor, TextExtraction
from .exceptions import (
    ContentStreamError,
    DocumentError,
    EditError,
    FontLoadError,
    PageIndexError,
)
from .fonts.loader import FontLoader
from .fonts.metrics import GlyphMetric
from .fonts.patcher import FontPatcher
from .objects import ObjectGraph
from .options import EditOption
from .plugins import PluginRegistry, default_registry
from .tombstone import tombstone_objects
from .utils import obj_key
from .utils import resolve_indirect as _resolve_indirect

logger = logging.getLogger(__name__)


class EditStage(enum.Enum):
    """Last stage an edit option completed."""

    INIT = "init"
    PAGE_VALIDATED = "page_validated"
    OBJECTS_TOMBSTONED = "objects_tombstoned"
    METRICS_LOADED = "metrics_loaded"
    TEXT_REPLACED = "text_replaced"
    PLUGINS_RUN = "plugins_run"
    FONT_PATCHED = "font_patched"
    DONE = "done"


@dataclass
class OptionReport:
    """Outcome of one edit option.

    Attributes:
        option: The edit option.
        stage: Last stage completed.
        warnings: Warnings raised while applying the option.
        cleared: Number of objects cleared.
        widths_appended: Number of ``/W`` pairs appended.
        extraction: Text extracted from the page, if replacement ran.
    """

    option: EditOption
    stage: EditStage = EditStage.INIT
    warnings: list[str] = field(default_factory=list)
    cleared: int = 0
    widths_appended: int = 0
    extraction: TextExtraction | None = None

    @property
    def completed(self) -> bool:
        return self.stage is EditStage.DONE


@dataclass
class EditResult:
    """Outcome of a whole edit session.

    Attributes:
        warnings: Warnings of all options, in order.
        output_name: Output base name chosen by plugins, or None.
        reports: One report per edit option.
    """

    warnings: list[str] = field(default_factory=list)
    output_name: str | None = None
    reports: list[OptionReport] = field(default_factory=list)


class EditSession:
    """Applies edit options to one open document.

    A session owns its document for its whole lifetime and must not be
    shared between threads. The font loader may be shared.
    """

    def __init__(
        self,
        pdf: pikepdf.Pdf,
        font_loader: FontLoader,
        *,
        plugins: PluginRegistry | None = None,
        output_name: str | None = None,
    ) -> None:
        """Initializes the EditSession.

        Args:
            pdf: Opened pikepdf PDF object, modified in place.
            font_loader: Source of replacement font bytes and metrics.
            plugins: Plugin registry (default: the built-in registry).
            output_name: Initial output base name.
        """
        self.pdf = pdf
        self.graph = ObjectGraph(pdf)
        self.font_loader = font_loader
        self.plugins = plugins if plugins is not None else default_registry
        self.output_name = output_name
        self._patcher = FontPatcher()
        self._patched_fonts: set[tuple[int, int]] = set()

    def apply(self, options: Iterable[EditOption]) -> EditResult:
        """Applies edit options in order.

        Args:
            options: Edit options, one per page edit.

        Returns:
            EditResult with the warnings of all options.
        """
        result = EditResult()
        for option in options:
            report = self.apply_option(option)
            result.reports.append(report)
            result.warnings.extend(report.warnings)
        result.output_name = self.output_name
        return result

    def apply_option(self, option: EditOption) -> OptionReport:
        """Applies one edit option, converting recoverable errors to warnings."""
        report = OptionReport(option=option)
        try:
            self._run_stages(option, report)
        except EditError as e:
            self._warn(report, str(e))
        return report

    def _warn(self, report: OptionReport, message: str) -> None:
        logger.warning(
            "Page %d: %s (after stage %s)",
            report.option.page_number,
            message,
            report.stage.value,
        )
        report.warnings.append(message)

    def _run_stages(self, option: EditOption, report: OptionReport) -> None:
        page = self._get_page(option.page_number)
        report.stage = EditStage.PAGE_VALIDATED

        try:
            cleared = tombstone_objects(self.graph, page, option.remove_objects)
        except pikepdf.PdfError as e:
            raise EditError(f"err removing objects: {e}") from e
        report.cleared = len(cleared)
        report.stage = EditStage.OBJECTS_TOMBSTONED

        metrics = self._load_metrics(option)
        report.stage = EditStage.METRICS_LOADED

        try:
            editor = ContentStreamEditor(metrics, option.code_unit_width)
            report.extraction = editor.replace(
                self._content_stream(page), option.text_replacements
            )
        except ContentStreamError as e:
            raise ContentStreamError(f"err replacing text: {e}") from e
        report.stage = EditStage.TEXT_REPLACED

        self._run_plugins(option, report)
        report.stage = EditStage.PLUGINS_RUN

        report.widths_appended = self._patch_font(page, option, metrics)
        report.stage = EditStage.FONT_PATCHED

        report.stage = EditStage.DONE

    def _get_page(self, page_number: int) -> pikepdf.Page:
        total_pages = len(self.pdf.pages)
        if not 0 <= page_number < total_pages:
            raise PageIndexError(
                f"cannot index page {page_number}/{total_pages}: no such page"
            )
        return self.pdf.pages[page_number]

    def _load_metrics(self, option: EditOption) -> dict[int, GlyphMetric]:
        try:
            return self.font_loader.load_metrics(option.font)
        except FontLoadError as e:
            raise FontLoadError(f"err parsing font metrics: {e}") from e

    def _content_stream(self, page: pikepdf.Page) -> pikepdf.Stream:
        contents = page.obj.get("/Contents")
        if contents is None:
            raise ContentStreamError("page has no /Contents")
        contents = _resolve_indirect(contents)
        if not isinstance(contents, pikepdf.Stream):
            raise ContentStreamError(
                f"/Contents is not a single stream ({type(contents).__name__})"
            )
        return contents

    def _run_plugins(self, option: EditOption, report: OptionReport) -> None:
        for name in option.plugins:
            if name not in self.plugins:
                self._warn(report, f"err <Plugin {name}>: unknown plugin")
                continue
            try:
                plugin_result = self.plugins.run(name, option, report.extraction)
            except Exception as e:
                self._warn(report, f"err <Plugin {name}>: {e}")
                continue
            if plugin_result.output_name is not None:
                if not plugin_result.output_name or any(
                    sep in plugin_result.output_name for sep in ("/", "\\")
                ):
                    self._warn(
                        report,
                        f"err <Plugin {name}>: invalid output name "
                        f"{plugin_result.output_name!r}",
                    )
                    continue
                logger.info(
                    "Plugin %s renamed output: %s -> %s",
                    name,
                    self.output_name,
                    plugin_result.output_name,
                )
                self.output_name = plugin_result.output_name

    def _patch_font(
        self,
        page: pikepdf.Page,
        option: EditOption,
        metrics: dict[int, GlyphMetric],
    ) -> int:
        font = self._patcher.select_font(page, option.font_index)
        descendant = self._patcher.descendant_font(font)

        appended = 0
        key = obj_key(descendant)
        if key is not None and key in self._patched_fonts:
            logger.debug("Widths of font %s already patched, skipping", key)
        else:
            appended = self._patcher.append_widths(descendant, metrics)
            if key is not None:
                self._patched_fonts.add(key)

        font_data = self.font_loader.load_bytes(option.font)
        self._patcher.swap_font_program(descendant, font_data)
        return appended

    def save(self, target: Path | str | BinaryIO) -> None:
        """Serializes the edited document.

        Args:
            target: Output path or writable binary stream.

        Raises:
            DocumentError: If the document cannot be written.
        """
        try:
            self.pdf.save(target)
        except (pikepdf.PdfError, OSError) as e:
            raise DocumentError(f"Could not save PDF: {e}") from e
        logger.debug("Document saved: %s", target)
