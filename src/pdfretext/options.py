# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Edit option parsing.

Edit options arrive as a JSON list with one object per page edit. Both the
camelCase keys of the upload front-end and snake_case keys are accepted::

    [{"pageNumber": 0, "font": "Arial.ttf",
      "textReplacements": {"Hello": "World"},
      "removeObjects": ["/Watermark", 12], "plugins": ["xbmu"]}]
"""

import base64
import binascii
import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from .exceptions import OptionsError
from .fonts.constants import DEFAULT_CODE_UNIT_WIDTH

logger = logging.getLogger(__name__)

# field name -> accepted keys, first match wins
_FIELD_KEYS: dict[str, tuple[str, ...]] = {
    "page_number": ("pageNumber", "page_number"),
    "font": ("font",),
    "font_index": ("fontIdx", "font_index"),
    "code_unit_width": ("codeUnitWidth", "code_unit_width"),
    "text_replacements": ("textReplacements", "text_replacements"),
    "remove_objects": ("removeObjects", "remove_objects"),
    "plugins": ("plugins",),
}


@dataclass
class EditOption:
    """Instructions for editing one page.

    Attributes:
        page_number: Zero-based page index.
        font: Identifier of the replacement font.
        font_index: Position of the patched font in the page's font resources.
        code_unit_width: Bytes per code unit in hex text runs.
        text_replacements: Ordered ``old -> new`` text pairs.
        remove_objects: Object names (``"/Im0"``) or numbers to clear.
        plugins: Names of plugins to run on the extracted text.
    """

    page_number: int
    font: str = ""
    font_index: int = 0
    code_unit_width: int = DEFAULT_CODE_UNIT_WIDTH
    text_replacements: dict[str, str] = field(default_factory=dict)
    remove_objects: list[str | int] = field(default_factory=list)
    plugins: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EditOption":
        """Builds an option from a JSON object.

        Raises:
            OptionsError: If a value has the wrong type.
        """
        if not isinstance(data, Mapping):
            raise OptionsError(f"Edit option must be an object, got {data!r}")

        values = {}
        for name, keys in _FIELD_KEYS.items():
            for key in keys:
                if key in data:
                    values[name] = data[key]
                    break

        if "page_number" not in values:
            raise OptionsError("Edit option is missing pageNumber")

        option = cls(**values)
        option.validate()
        return option

    def validate(self) -> None:
        """Checks field types.

        Raises:
            OptionsError: If a field has the wrong type.
        """
        for name in ("page_number", "font_index", "code_unit_width"):
            value = getattr(self, name)
            if isinstance(value, bool) or not isinstance(value, int):
                raise OptionsError(f"{name} must be an integer, got {value!r}")
        if self.code_unit_width < 1:
            raise OptionsError(
                f"code_unit_width must be positive, got {self.code_unit_width}"
            )
        if not isinstance(self.font, str):
            raise OptionsError(f"font must be a string, got {self.font!r}")
        if not isinstance(self.text_replacements, Mapping) or not all(
            isinstance(k, str) and isinstance(v, str)
            for k, v in self.text_replacements.items()
        ):
            raise OptionsError("text_replacements must map strings to strings")
        if not isinstance(self.remove_objects, list) or not all(
            isinstance(o, (str, int)) and not isinstance(o, bool)
            for o in self.remove_objects
        ):
            raise OptionsError("remove_objects must list names or object numbers")
        if not isinstance(self.plugins, list) or not all(
            isinstance(p, str) for p in self.plugins
        ):
            raise OptionsError("plugins must list plugin names")
        self.text_replacements = dict(self.text_replacements)


def parse_options(data: Any) -> list[EditOption]:
    """Parses a decoded JSON edit option list.

    A single object is accepted as a one-element list.

    Raises:
        OptionsError: If the data is not a list of option objects.
    """
    if isinstance(data, Mapping):
        data = [data]
    if not isinstance(data, list):
        raise OptionsError(f"Edit options must be a list, got {type(data).__name__}")
    options = [EditOption.from_dict(item) for item in data]
    logger.debug("Parsed %d edit option(s)", len(options))
    return options


def load_options(path: Path) -> list[EditOption]:
    """Loads edit options from a JSON file.

    Raises:
        OptionsError: If the file cannot be read or parsed.
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise OptionsError(f"Could not load edit options from {path}: {e}") from e
    return parse_options(data)


def decode_options(encoded: str) -> list[EditOption]:
    """Decodes base64-encoded JSON edit options.

    A leading ``?options=`` or ``options=`` query prefix is stripped.

    Raises:
        OptionsError: If the text is not base64 JSON.
    """
    encoded = encoded.strip()
    for prefix in ("?options=", "options="):
        if encoded.startswith(prefix):
            encoded = encoded[len(prefix) :]
            break
    try:
        data = json.loads(base64.b64decode(encoded, validate=True).decode("utf-8"))
    except (binascii.Error, ValueError) as e:
        raise OptionsError(f"Could not decode edit options: {e}") from e
    return parse_options(data)
