# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Utility functions shared by the pdfretext modules."""

import logging
import sys
from typing import Any

import pikepdf

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(verbose: bool = False, quiet: bool = False) -> logging.Logger:
    """Configures logging for pdfretext.

    Args:
        verbose: If True, DEBUG level is used.
        quiet: If True, only ERROR and higher are output.
            Takes precedence over verbose.

    Returns:
        Configured logger for pdfretext.
    """
    if quiet:
        level = logging.ERROR
    elif verbose:
        level = logging.DEBUG
    else:
        level = logging.INFO

    pdfretext_logger = logging.getLogger("pdfretext")
    pdfretext_logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    pdfretext_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    pdfretext_logger.addHandler(handler)

    logger.debug("Logging configured with level: %s", logging.getLevelName(level))
    return pdfretext_logger


def is_pdf_encrypted(pdf: pikepdf.Pdf) -> bool:
    """Checks if a PDF is encrypted.

    Args:
        pdf: Opened pikepdf PDF object.

    Returns:
        True if the PDF is encrypted.
    """
    return pdf.is_encrypted


def resolve_indirect(obj: Any) -> Any:
    """Resolve indirect object reference if needed.

    pikepdf objects may be indirect references that need to be resolved.
    This safely handles the resolution without using hasattr which can
    throw exceptions on certain pikepdf object types.

    Args:
        obj: A pikepdf object that may be an indirect reference.

    Returns:
        The resolved object.
    """
    try:
        return obj.get_object()
    except Exception:
        return obj


def obj_key(obj: pikepdf.Object) -> tuple[int, int] | None:
    """Returns a stable identity key for an object.

    Uses pikepdf's objgen (object number, generation) which is stable
    across repeated accesses, unlike Python id() which can be reused
    for transient wrapper objects.

    Args:
        obj: A pikepdf object.

    Returns:
        The (obj_num, gen) tuple for indirect objects, or None for
        direct objects.
    """
    try:
        og = obj.objgen
        if og != (0, 0):
            return og
    except Exception:
        pass
    return None


def check_visited(obj: pikepdf.Object, visited: set[tuple[int, int]]) -> bool:
    """Checks if an object has been visited and marks it if not.

    Args:
        obj: A pikepdf object to check.
        visited: Set of objgen tuples already visited.

    Returns:
        True if the object was already visited (should be skipped),
        False if it's new (and has now been added to visited).
    """
    key = obj_key(obj)
    if key is None:
        # Direct objects have no identity to share
        return False
    if key in visited:
        return True
    visited.add(key)
    return False


def safe_str(obj: Any, fallback: str = "Unknown") -> str:
    """Converts a pikepdf object to string, handling non-UTF-8 bytes.

    Args:
        obj: pikepdf object to convert.
        fallback: Value to return if conversion fails entirely.

    Returns:
        String representation of the object.
    """
    try:
        return str(obj)
    except (UnicodeDecodeError, UnicodeEncodeError):
        try:
            return bytes(obj).decode("latin-1")
        except Exception:
            return fallback
