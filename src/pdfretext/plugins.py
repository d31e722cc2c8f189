# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Named plugins reacting to the text extracted from a page.

A plugin is a function ``(option, extraction) -> PluginResult | None``.
It must not touch the document. To rename the output it returns a
:class:`PluginResult`; the edit session applies it after the call.

Example:
    .. code-block:: python

        @default_registry.register("invoice")
        def invoice(option, extraction):
            return PluginResult(output_name="invoice.pdf")
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

from .exceptions import PluginError

if TYPE_CHECKING:
    from .content import TextExtraction
    from .options import EditOption

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PluginResult:
    """Changes a plugin asks the edit session to apply.

    Attributes:
        output_name: New base name for the output file, or None.
    """

    output_name: str | None = None


Plugin = Callable[["EditOption", "TextExtraction | None"], "PluginResult | None"]


class PluginRegistry:
    """A name -> plugin function map."""

    def __init__(self) -> None:
        self._plugins: dict[str, Plugin] = {}

    @property
    def names(self) -> set[str]:
        """Returns the set of registered plugin names."""
        return set(self._plugins.keys())

    def __contains__(self, name: object) -> bool:
        return name in self._plugins

    def register(self, name: str) -> Callable[[Plugin], Plugin]:
        """Decorator registering a function under ``name``.

        Args:
            name: Plugin name used in edit options.

        Raises:
            ValueError: If ``name`` is already registered.
        """

        def decorator(func: Plugin) -> Plugin:
            if name in self._plugins:
                raise ValueError(f"Plugin {name!r} is already registered")
            self._plugins[name] = func
            return func

        return decorator

    def get(self, name: str) -> Plugin | None:
        return self._plugins.get(name)

    def run(
        self,
        name: str,
        option: "EditOption",
        extraction: "TextExtraction | None",
    ) -> PluginResult:
        """Runs one plugin and normalizes its return value.

        Raises:
            KeyError: If no plugin is registered under ``name``.
        """
        plugin = self._plugins[name]
        result = plugin(option, extraction)
        if result is None:
            return PluginResult()
        if not isinstance(result, PluginResult):
            raise PluginError(
                f"plugin returned {type(result).__name__}, expected PluginResult"
            )
        return result


default_registry = PluginRegistry()

# Fewest hex runs shown by an xbmu form
_XBMU_MIN_RUNS = 17


@default_registry.register("xbmu")
def xbmu(
    option: "EditOption", extraction: "TextExtraction | None"
) -> PluginResult | None:
    """Names the output after fields of an xbmu form.

    The form shows its fields as hex runs; runs 10, 12 and 14 hold the
    date parts, run 4 the reference and run 0 the holder name.

    Raises:
        PluginError: If the name would contain a path separator.
    """
    if extraction is None or len(extraction.hex_matches) < _XBMU_MIN_RUNS:
        return None

    runs = [match.decoded for match in extraction.hex_matches]
    new_name = (
        f"{runs[10]}-{runs[12]}-{runs[14]}_{runs[4]}_{runs[0].replace(' ', '_')}.pdf"
    )
    if "/" in new_name or "\\" in new_name:
        raise PluginError(f"filename contains path sep: {new_name}")

    logger.debug("xbmu: output renamed to %s", new_name)
    return PluginResult(output_name=new_name)
