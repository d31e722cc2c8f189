# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""pdfretext - Replace text and fonts in PDF content streams."""

from importlib.metadata import PackageNotFoundError, version

from .codec import HexCodec, decode_hex, encode_hex
from .content import ContentStreamEditor, HexMatch, TextExtraction
from .exceptions import (
    ContentStreamError,
    DocumentError,
    EditError,
    FontChainError,
    FontLoadError,
    FontResourceError,
    OptionsError,
    PageIndexError,
    PDFReTextError,
    PluginError,
    UnsupportedPDFError,
)
from .objects import ObjectGraph
from .options import EditOption, decode_options, load_options, parse_options
from .plugins import PluginRegistry, PluginResult, default_registry
from .processor import EditFileResult, edit_directory, edit_files, edit_pdf
from .session import EditResult, EditSession, EditStage, OptionReport
from .tombstone import tombstone_objects

try:
    __version__ = version("pdfretext")
except PackageNotFoundError:
    __version__ = "unknown"

__all__ = [
    "__version__",
    # Editing
    "edit_pdf",
    "edit_files",
    "edit_directory",
    "EditFileResult",
    "EditSession",
    "EditResult",
    "EditStage",
    "OptionReport",
    "EditOption",
    "parse_options",
    "load_options",
    "decode_options",
    # Building blocks
    "HexCodec",
    "decode_hex",
    "encode_hex",
    "ObjectGraph",
    "ContentStreamEditor",
    "TextExtraction",
    "HexMatch",
    "tombstone_objects",
    "PluginRegistry",
    "PluginResult",
    "default_registry",
    # Exceptions
    "PDFReTextError",
    "DocumentError",
    "UnsupportedPDFError",
    "OptionsError",
    "EditError",
    "PageIndexError",
    "FontLoadError",
    "ContentStreamError",
    "FontResourceError",
    "FontChainError",
    "PluginError",
]
