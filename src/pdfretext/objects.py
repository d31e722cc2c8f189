# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Lookup of objects in a parsed PDF object graph.

pikepdf keeps every indirect object in a table keyed by its object number.
Containers hold references into that table, so an object returned here is
the shared instance: changing it changes it for every holder.
"""

import logging
from collections.abc import Iterator

import pikepdf
from pikepdf import Array, Dictionary, Stream

from .utils import check_visited, safe_str

logger = logging.getLogger(__name__)


def _is_dict_like(obj: pikepdf.Object) -> bool:
    return isinstance(obj, (Dictionary, Stream))


def _is_indirect(obj: object) -> bool:
    # Integers, reals and booleans come back as Python scalars
    return isinstance(obj, pikepdf.Object) and obj.is_indirect


class ObjectGraph:
    """Finds objects of a pikepdf document by number or by key.

    All lookups scan the indirect object table. No index is kept because
    the graph is mutated between lookups.
    """

    def __init__(self, pdf: pikepdf.Pdf) -> None:
        self.pdf = pdf

    def iter_objects(self) -> Iterator[pikepdf.Object]:
        """Yields every indirect object of the document."""
        for obj in self.pdf.objects:
            if not isinstance(obj, pikepdf.Object) or obj.objgen == (0, 0):
                continue
            yield obj

    def find_by_number(self, obj_num: int) -> pikepdf.Object | None:
        """Finds an indirect object by its object number.

        Args:
            obj_num: Object number of the reference.

        Returns:
            The object, or None if no live object has that number.
        """
        for obj in self.iter_objects():
            if obj.objgen[0] == obj_num:
                return obj
        return None

    def find_by_type_key(
        self,
        key: str,
        value: str | None,
        obj_type: type | None = None,
    ) -> list[pikepdf.Object]:
        """Finds objects whose ``key`` entry equals ``value``.

        Each indirect object is inspected together with the direct elements
        of an array object. An object matches when it is an instance of
        ``obj_type`` (if given) or when it is a dictionary or stream whose
        ``key`` entry stringifies to ``value``. With neither ``value`` nor
        ``obj_type`` every indirect object matches.

        Args:
            key: Dictionary key, e.g. ``"/Type"``.
            value: Expected value as string, e.g. ``"/Font"``.
            obj_type: Optional pikepdf class to match instead.

        Returns:
            All matches in object-number order, without duplicates.
        """
        matched: list[pikepdf.Object] = []
        visited: set[tuple[int, int]] = set()

        for obj in self.iter_objects():
            if value is None and obj_type is None:
                matched.append(obj)
                continue

            candidates = list(obj) if isinstance(obj, Array) else [obj]
            for candidate in candidates:
                if self._matches(candidate, key, value, obj_type):
                    if check_visited(candidate, visited):
                        continue
                    matched.append(candidate)

        return matched

    @staticmethod
    def _matches(
        obj: pikepdf.Object,
        key: str,
        value: str | None,
        obj_type: type | None,
    ) -> bool:
        if obj_type is not None and isinstance(obj, obj_type):
            return True
        if value is None or not _is_dict_like(obj):
            return False
        entry = obj.get(key)
        return entry is not None and safe_str(entry) == value

    def find_by_type(
        self, type_name: str, obj_type: type | None = None
    ) -> list[pikepdf.Object]:
        """Finds objects by their ``/Type`` entry."""
        return self.find_by_type_key("/Type", type_name, obj_type)

    def find_by_name(self, name: str) -> list[pikepdf.Object]:
        """Finds objects by their ``/Name`` entry."""
        return self.find_by_type_key("/Name", name)

    def find_in_page_resources(
        self, page: pikepdf.Page, name: str
    ) -> list[pikepdf.Object]:
        """Finds objects stored under ``name`` one level below the page.

        Two shapes are searched:

        - page dictionary entries that are dictionaries (``/Resources``):
          each sub-dictionary (``/XObject``, ``/Font``...) is searched for an
          indirect entry keyed ``name``;
        - page dictionary entries that are arrays (``/Annots``): each
          indirect dictionary element is searched for an entry keyed
          ``name``.

        Args:
            page: The page to search.
            name: Key to look for, e.g. ``"/Im0"``.

        Returns:
            Matching objects, without duplicates.
        """
        matched: list[pikepdf.Object] = []
        visited: set[tuple[int, int]] = set()

        for _page_key, node in page.obj.items():
            if isinstance(node, Dictionary):
                for _res_key, sub_dict in node.items():
                    if not isinstance(sub_dict, Dictionary):
                        continue
                    for entry_key, entry in sub_dict.items():
                        if entry_key != name or not _is_indirect(entry):
                            continue
                        if not check_visited(entry, visited):
                            matched.append(entry)
            elif isinstance(node, Array):
                for element in node:
                    if not _is_indirect(element) or not _is_dict_like(element):
                        continue
                    for entry_key, entry in element.items():
                        if entry_key != name:
                            continue
                        if not check_visited(entry, visited):
                            matched.append(entry)

        logger.debug("Found %d resource(s) named %s on page", len(matched), name)
        return matched
