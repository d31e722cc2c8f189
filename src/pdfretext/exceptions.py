# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Custom exceptions for pdfretext.

Errors deriving from :class:`EditError` are recoverable: the edit session
turns them into warnings for the current edit option. All other errors are
fatal for the document being processed.
"""


class PDFReTextError(Exception):
    """Base exception for all pdfretext errors."""


class DocumentError(PDFReTextError):
    """Input could not be read, parsed or serialized."""


class UnsupportedPDFError(PDFReTextError):
    """PDF format is not supported."""


class OptionsError(PDFReTextError):
    """Edit option list is malformed."""


class EditError(PDFReTextError):
    """Recoverable failure while applying one edit option."""


class PageIndexError(EditError):
    """Page number is outside the document."""


class FontLoadError(EditError):
    """Replacement font could not be read or parsed."""


class ContentStreamError(EditError):
    """Page content stream could not be located or rewritten."""


class FontResourceError(EditError):
    """Font resource could not be selected on the page."""


class FontChainError(EditError):
    """Descendant font, font descriptor or font program is missing."""


class PluginError(EditError):
    """A plugin rejected its input."""
