# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Click-based CLI for pdfretext.

This module provides the command-line interface for replacing text and
fonts in PDF files.
"""

# Standard Library
import json
import logging
import sys
from pathlib import Path

# Third Party
import click
from colorama import Fore, Style, init

# Local
from . import __version__
from .exceptions import (
    DocumentError,
    OptionsError,
    UnsupportedPDFError,
)
from .fonts.loader import FontLoader
from .options import EditOption, decode_options, load_options
from .processor import (
    EditFileResult,
    edit_directory,
    edit_files,
    generate_output_path,
)
from .utils import setup_logging

EXIT_SUCCESS = 0
EXIT_GENERAL_ERROR = 1
EXIT_FILE_NOT_FOUND = 2
EXIT_EDIT_FAILED = 3
EXIT_PERMISSION_ERROR = 5

logger = logging.getLogger(__name__)


def print_success(msg: str) -> None:
    """Prints a success message in green.

    Args:
        msg: The message to output.
    """
    click.echo(f"{Fore.GREEN}\u2713{Style.RESET_ALL} {msg}")


def print_error(msg: str) -> None:
    """Prints an error message in red.

    Args:
        msg: The error message to output.
    """
    click.echo(f"{Fore.RED}\u2717 Error:{Style.RESET_ALL} {msg}", err=True)


def print_warning(msg: str) -> None:
    """Prints a warning in yellow.

    Args:
        msg: The warning to output.
    """
    click.echo(f"{Fore.YELLOW}\u26a0{Style.RESET_ALL} {msg}")


def _print_result(result: EditFileResult, quiet: bool) -> None:
    """Prints the result of one file in a formatted way.

    Args:
        result: The edit result.
        quiet: If True, only output errors.
    """
    if result.success:
        if not quiet:
            print_success(
                f"Edited: {result.input_path.name} -> "
                f"{result.output_path.name} ({result.processing_time:.2f}s)"
            )
            for warning in result.warnings:
                print_warning(warning)
    else:
        print_error(f"{result.input_path.name}: {result.error}")


def _print_json(results: list[EditFileResult], locator_prefix: str) -> None:
    """Prints results in the upload API envelope."""
    click.echo(
        json.dumps(
            {
                "success": True,
                "data": [r.to_record(locator_prefix) for r in results],
                "msg": "processed",
            },
            ensure_ascii=False,
        )
    )


def _read_options(
    options_file: str | None, options_b64: str | None
) -> list[EditOption]:
    if options_file and options_b64:
        raise click.UsageError("Use either --options or --options-b64, not both.")
    if options_file:
        return load_options(Path(options_file))
    if options_b64:
        return decode_options(options_b64)
    raise click.UsageError(
        "Edit options are required (--options or --options-b64)."
    )


@click.command()
@click.argument("input_path", required=False, type=click.Path(exists=True))
@click.argument("output", required=False, type=click.Path())
@click.option(
    "-o",
    "--options",
    "options_file",
    type=click.Path(exists=True, dir_okay=False),
    help="JSON file with the list of edit options",
)
@click.option(
    "--options-b64",
    "options_b64",
    help="Edit options as base64-encoded JSON",
)
@click.option(
    "--fonts-dir",
    "fonts_dir",
    type=click.Path(exists=True, file_okay=False),
    envvar="PDFRETEXT_FONTS_DIR",
    default=".",
    show_default=True,
    help="Directory holding replacement fonts (env: PDFRETEXT_FONTS_DIR)",
)
@click.option(
    "--ignore-encryption",
    is_flag=True,
    help="Edit encrypted PDFs instead of rejecting them",
)
@click.option(
    "-r",
    "--recursive",
    is_flag=True,
    help="Process directories recursively",
)
@click.option(
    "-f",
    "--force",
    is_flag=True,
    help="Overwrite existing files",
)
@click.option(
    "-j",
    "--jobs",
    type=click.IntRange(min=1),
    default=1,
    show_default=True,
    help="Number of files edited in parallel",
)
@click.option(
    "--json",
    "as_json",
    is_flag=True,
    help="Print per-file results as JSON",
)
@click.option(
    "--locator-prefix",
    default="/bucket",
    show_default=True,
    help="Public location prefix used in JSON results",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    help="Only output errors",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Detailed output",
)
@click.version_option(version=__version__)
def main(
    input_path: str | None,
    output: str | None,
    options_file: str | None,
    options_b64: str | None,
    fonts_dir: str,
    ignore_encryption: bool,
    recursive: bool,
    force: bool,
    jobs: int,
    as_json: bool,
    locator_prefix: str,
    quiet: bool,
    verbose: bool,
) -> None:
    """Replaces text and fonts in PDF files.

    INPUT is the path to the input PDF or a directory.
    OUTPUT is optionally the path for the output PDF (or directory).
    """
    # Initialize colorama for Windows compatibility
    init()

    if input_path is None:
        click.echo(click.get_current_context().get_help())
        sys.exit(EXIT_GENERAL_ERROR)

    setup_logging(verbose=verbose, quiet=quiet or as_json)

    input_path_obj = Path(input_path)
    font_loader = FontLoader(Path(fonts_dir))

    try:
        options = _read_options(options_file, options_b64)

        if input_path_obj.is_file():
            output_path = (
                Path(output) if output else generate_output_path(input_path_obj)
            )
            results = edit_files(
                [(input_path_obj, output_path)],
                options,
                font_loader,
                ignore_encryption=ignore_encryption,
                force_overwrite=force,
            )
        elif input_path_obj.is_dir():
            results = edit_directory(
                input_path_obj,
                options,
                font_loader,
                Path(output) if output else None,
                recursive=recursive,
                show_progress=not (quiet or as_json),
                ignore_encryption=ignore_encryption,
                force_overwrite=force,
                jobs=jobs,
            )
        else:
            print_error(f"Invalid path: {input_path}")
            sys.exit(EXIT_FILE_NOT_FOUND)

        if as_json:
            _print_json(results, locator_prefix)
        else:
            for result in results:
                _print_result(result, quiet)

        exit_code = (
            EXIT_EDIT_FAILED if any(not r.success for r in results) else EXIT_SUCCESS
        )

    except click.UsageError:
        raise
    except FileNotFoundError as e:
        print_error(str(e))
        exit_code = EXIT_FILE_NOT_FOUND
    except PermissionError as e:
        print_error(f"Access denied: {e}")
        exit_code = EXIT_PERMISSION_ERROR
    except OptionsError as e:
        print_error(str(e))
        exit_code = EXIT_GENERAL_ERROR
    except (DocumentError, UnsupportedPDFError) as e:
        print_error(str(e))
        exit_code = EXIT_EDIT_FAILED
    except Exception as e:
        logger.exception("Unexpected error")
        print_error(f"Unexpected error: {e}")
        exit_code = EXIT_GENERAL_ERROR

    sys.exit(exit_code)


if __name__ == "__main__":
    main()
