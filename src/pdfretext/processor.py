# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""File-level editing: open, edit, save, and report per input file."""

# Standard Library
import logging
import threading
import time
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath

# Third Party
import pikepdf
from tqdm import tqdm

# Local
from .exceptions import DocumentError, PDFReTextError, UnsupportedPDFError
from .fonts.loader import FontLoader
from .options import EditOption
from .plugins import PluginRegistry
from .session import EditSession
from .utils import is_pdf_encrypted

logger = logging.getLogger(__name__)

OUTPUT_SUFFIX = "_edited"


@dataclass
class EditFileResult:
    """Result of editing one PDF file.

    Attributes:
        success: True if the file was edited and saved.
        input_path: Path to the input PDF.
        output_path: Path of the saved PDF (after plugin renames).
        warnings: Warnings of all edit options.
        processing_time: Processing time in seconds.
        error: Error message if success=False.
    """

    success: bool
    input_path: Path
    output_path: Path
    warnings: list[str] = field(default_factory=list)
    processing_time: float = 0.0
    error: str | None = None

    def to_record(self, locator_prefix: str = "/") -> dict | str:
        """Returns the per-file record reported to callers.

        Successful files give ``{name, locator, stats}`` where ``stats``
        holds the warnings; failed files give ``"err: <message>"``.

        Args:
            locator_prefix: Public location the output directory is served at.
        """
        if not self.success:
            return f"err: {self.error}"
        name = self.output_path.name
        return {
            "name": name,
            "locator": str(PurePosixPath(locator_prefix) / name),
            "stats": list(self.warnings),
        }


def generate_output_path(
    input_path: Path,
    output_dir: Path | None = None,
) -> Path:
    """Generates the output path for an edited PDF.

    Args:
        input_path: Path to the input PDF.
        output_dir: Optional output directory.

    Returns:
        Path for the edited PDF.
    """
    output_name = f"{input_path.stem}{OUTPUT_SUFFIX}.pdf"
    if output_dir is not None:
        return output_dir / output_name
    return input_path.parent / output_name


def _check_renamed_output(
    input_path: Path, output_path: Path, force_overwrite: bool
) -> None:
    if input_path.resolve() == output_path.resolve():
        raise DocumentError(f"Input and output paths must differ: {input_path}")
    if output_path.exists() and not force_overwrite:
        raise DocumentError("Output file already exists")


def edit_pdf(
    input_path: Path,
    output_path: Path,
    options: list[EditOption],
    font_loader: FontLoader,
    *,
    plugins: PluginRegistry | None = None,
    ignore_encryption: bool = False,
    force_overwrite: bool = False,
) -> EditFileResult:
    """Applies edit options to a PDF file and saves the result.

    Plugins may rename the output; the returned result carries the final
    path. A renamed output must not be the input and, unless
    ``force_overwrite`` is set, must not exist yet.

    Args:
        input_path: Path to the input PDF.
        output_path: Default path for the edited PDF.
        options: Edit options, applied in order.
        font_loader: Source of replacement fonts.
        plugins: Plugin registry (default: the built-in registry).
        ignore_encryption: If True, encrypted PDFs are edited anyway.
        force_overwrite: If False, an existing file at a plugin-renamed
            output path is not overwritten.

    Returns:
        EditFileResult with the warnings of all options.

    Raises:
        DocumentError: If the PDF cannot be read, parsed or saved, or the
            renamed output path is not usable.
        UnsupportedPDFError: If the PDF is encrypted.
    """
    start_time = time.perf_counter()
    pdf: pikepdf.Pdf | None = None

    logger.info("Starting edit: %s -> %s", input_path, output_path)

    if input_path.resolve() == output_path.resolve():
        raise DocumentError(f"Input and output paths must differ: {input_path}")

    try:
        logger.debug("Opening PDF: %s", input_path)
        pdf = pikepdf.open(input_path)

        if is_pdf_encrypted(pdf) and not ignore_encryption:
            raise UnsupportedPDFError(
                f"PDF is encrypted and cannot be edited: {input_path}"
            )

        session = EditSession(
            pdf, font_loader, plugins=plugins, output_name=output_path.name
        )
        edit_result = session.apply(options)

        if edit_result.output_name and edit_result.output_name != output_path.name:
            output_path = output_path.with_name(edit_result.output_name)
            _check_renamed_output(input_path, output_path, force_overwrite)

        output_path.parent.mkdir(parents=True, exist_ok=True)
        logger.debug("Saving PDF: %s", output_path)
        session.save(output_path)

        processing_time = time.perf_counter() - start_time
        logger.info(
            "Edit successful: %s (%d warning(s), %.2f seconds)",
            output_path,
            len(edit_result.warnings),
            processing_time,
        )

        return EditFileResult(
            success=True,
            input_path=input_path,
            output_path=output_path,
            warnings=edit_result.warnings,
            processing_time=processing_time,
        )

    except pikepdf.PasswordError as e:
        error_msg = f"PDF is password protected: {input_path}"
        logger.error(error_msg)
        raise UnsupportedPDFError(error_msg) from e

    except pikepdf.PdfError as e:
        error_msg = f"PDF processing error: {e}"
        logger.error(error_msg)
        raise DocumentError(error_msg) from e

    except OSError as e:
        error_msg = f"Could not read {input_path}: {e}"
        logger.error(error_msg)
        raise DocumentError(error_msg) from e

    except PDFReTextError:
        raise

    except Exception as e:
        error_msg = f"Unexpected error during edit: {e}"
        logger.error(error_msg)
        raise DocumentError(error_msg) from e

    finally:
        if pdf is not None:
            pdf.close()


def _edit_one(
    input_path: Path,
    output_path: Path,
    options: list[EditOption],
    font_loader: FontLoader,
    force_overwrite: bool,
    plugins: PluginRegistry | None,
    ignore_encryption: bool,
) -> EditFileResult:
    # Overwrite protection
    if output_path.exists() and not force_overwrite:
        logger.warning(
            "Skipping %s: Output file already exists (%s)",
            input_path.name,
            output_path,
        )
        return EditFileResult(
            success=False,
            input_path=input_path,
            output_path=output_path,
            error="Output file already exists",
        )

    try:
        return edit_pdf(
            input_path,
            output_path,
            options,
            font_loader,
            plugins=plugins,
            ignore_encryption=ignore_encryption,
            force_overwrite=force_overwrite,
        )
    except PDFReTextError as e:
        logger.error("Error for %s: %s", input_path.name, e)
        return EditFileResult(
            success=False,
            input_path=input_path,
            output_path=output_path,
            error=str(e),
        )


def edit_files(
    file_pairs: list[tuple[Path, Path]],
    options: list[EditOption],
    font_loader: FontLoader,
    *,
    plugins: PluginRegistry | None = None,
    ignore_encryption: bool = False,
    force_overwrite: bool = False,
    jobs: int = 1,
    on_progress: Callable[[int, int, str], None] | None = None,
    cancel_event: threading.Event | None = None,
) -> list[EditFileResult]:
    """Edits a list of PDF files with the same edit options.

    A failing file never fails the batch: it yields a result with
    ``success=False``. Each file gets its own document and session, so
    files may run in parallel; only ``font_loader`` is shared.

    Args:
        file_pairs: List of (input_path, output_path) tuples.
        options: Edit options applied to every file.
        font_loader: Source of replacement fonts.
        plugins: Plugin registry (default: the built-in registry).
        ignore_encryption: If True, encrypted PDFs are edited anyway.
        force_overwrite: If True, existing output files are overwritten.
            If False, existing outputs are skipped with an error result.
        jobs: Number of files edited in parallel.
        on_progress: Optional callback(current_idx, total, filename) called
            as each file is started.
        cancel_event: Optional threading.Event; when set, no further files
            are started.

    Returns:
        List of EditFileResult in input order, for the files started.
    """
    total = len(file_pairs)

    def _run(idx: int, input_path: Path, output_path: Path) -> EditFileResult | None:
        if cancel_event is not None and cancel_event.is_set():
            return None
        if on_progress is not None:
            on_progress(idx, total, input_path.name)
        return _edit_one(
            input_path,
            output_path,
            options,
            font_loader,
            force_overwrite,
            plugins,
            ignore_encryption,
        )

    if jobs <= 1:
        results: list[EditFileResult | None] = []
        for idx, (input_path, output_path) in enumerate(file_pairs):
            result = _run(idx, input_path, output_path)
            if result is None:
                logger.info("Editing cancelled")
                break
            results.append(result)
    else:
        with ThreadPoolExecutor(max_workers=jobs) as executor:
            futures = [
                executor.submit(_run, idx, input_path, output_path)
                for idx, (input_path, output_path) in enumerate(file_pairs)
            ]
            results = [future.result() for future in futures]
        if any(result is None for result in results):
            logger.info("Editing cancelled")

    return [result for result in results if result is not None]


def edit_directory(
    input_dir: Path,
    options: list[EditOption],
    font_loader: FontLoader,
    output_dir: Path | None = None,
    *,
    recursive: bool = False,
    show_progress: bool = True,
    plugins: PluginRegistry | None = None,
    ignore_encryption: bool = False,
    force_overwrite: bool = False,
    jobs: int = 1,
) -> list[EditFileResult]:
    """Edits all PDFs in a directory.

    Args:
        input_dir: Input directory with PDF files.
        options: Edit options applied to every file.
        font_loader: Source of replacement fonts.
        output_dir: Optional output directory. If None, files are saved
            in the same directory as the input.
        recursive: If True, subdirectories are included.
        show_progress: If True, a progress bar is shown.
        plugins: Plugin registry (default: the built-in registry).
        ignore_encryption: If True, encrypted PDFs are edited anyway.
        force_overwrite: If True, existing output files are overwritten.
        jobs: Number of files edited in parallel.

    Returns:
        List of EditFileResult for all processed files.

    Raises:
        DocumentError: If the input directory does not exist.
    """
    if not input_dir.is_dir():
        raise DocumentError(f"Directory does not exist: {input_dir}")

    pattern = "**/*.pdf" if recursive else "*.pdf"
    pdf_files = sorted(input_dir.glob(pattern))

    # When output goes to the same directory, exclude previous outputs
    if output_dir is None:
        pdf_files = [p for p in pdf_files if not p.stem.endswith(OUTPUT_SUFFIX)]

    if not pdf_files:
        logger.warning("No PDF files found in: %s", input_dir)
        return []

    logger.info(
        "Found: %d PDF file(s) in %s%s",
        len(pdf_files),
        input_dir,
        " (recursive)" if recursive else "",
    )

    if output_dir is not None:
        output_dir.mkdir(parents=True, exist_ok=True)

    file_pairs: list[tuple[Path, Path]] = []
    for pdf_file in pdf_files:
        if output_dir is not None and recursive:
            rel_path = pdf_file.relative_to(input_dir)
            out_subdir = output_dir / rel_path.parent
            out_subdir.mkdir(parents=True, exist_ok=True)
            out_path = generate_output_path(pdf_file, out_subdir)
        else:
            out_path = generate_output_path(pdf_file, output_dir)
        file_pairs.append((pdf_file, out_path))

    progress_bar = None
    if show_progress:
        progress_bar = tqdm(
            total=len(file_pairs),
            desc="Editing",
            unit="file",
            ncols=80,
        )

    progress_lock = threading.Lock()

    def _on_progress(current_idx: int, total: int, filename: str) -> None:
        if progress_bar is not None:
            with progress_lock:
                progress_bar.update(1)
                progress_bar.set_postfix_str(filename)

    results = edit_files(
        file_pairs,
        options,
        font_loader,
        plugins=plugins,
        ignore_encryption=ignore_encryption,
        force_overwrite=force_overwrite,
        jobs=jobs,
        on_progress=_on_progress if show_progress else None,
    )

    if progress_bar is not None:
        progress_bar.close()

    successful = sum(1 for r in results if r.success)
    logger.info(
        "Directory editing completed: %d successful, %d failed",
        successful,
        len(results) - successful,
    )

    return results
