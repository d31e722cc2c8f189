# This Source Code Form is subject to the terms of the Mozilla Public
# License, v. 2.0. If a copy of the MPL was not distributed with this
# file, You can obtain one at https://mozilla.org/MPL/2.0/.

"""Clearing of objects without removing them from the object graph.

A cleared ("tombstoned") object keeps its object number, so every
reference to it stays valid: streams keep their dictionary but lose their
data, dictionaries lose all entries, arrays lose all elements.
"""

import logging
from collections.abc import Iterable

import pikepdf
from pikepdf import Array, Dictionary, Stream

from .objects import ObjectGraph
from .utils import check_visited

logger = logging.getLogger(__name__)


def clear_object(obj: pikepdf.Object) -> bool:
    """Clears the payload of a stream, dictionary or array in place.

    Args:
        obj: The object to clear.

    Returns:
        True if the object was cleared, False for other object types.
    """
    if isinstance(obj, Stream):
        obj.write(b"")
    elif isinstance(obj, Dictionary):
        for key in list(obj.keys()):
            del obj[key]
    elif isinstance(obj, Array):
        for i in reversed(range(len(obj))):
            del obj[i]
    else:
        return False
    return True


def resolve_identifier(
    graph: ObjectGraph,
    page: pikepdf.Page,
    identifier: str | int,
) -> list[pikepdf.Object]:
    """Resolves an object name or number to concrete objects.

    Numbers are looked up directly. Names are matched against ``/Name``
    entries of all objects first and, failing that, against resource keys
    one level below the page.

    Args:
        graph: Object graph of the document.
        page: The page the identifier belongs to.
        identifier: Name such as ``"/Im0"`` or an object number.

    Returns:
        Matching objects (possibly empty).
    """
    if isinstance(identifier, bool):
        logger.debug("Ignoring boolean object identifier: %r", identifier)
        return []
    if isinstance(identifier, int):
        obj = graph.find_by_number(identifier)
        return [obj] if obj is not None else []
    if isinstance(identifier, str):
        matched = graph.find_by_name(identifier)
        if not matched:
            matched = graph.find_in_page_resources(page, identifier)
        return matched

    logger.debug("Ignoring object identifier of type %s", type(identifier).__name__)
    return []


def tombstone_objects(
    graph: ObjectGraph,
    page: pikepdf.Page,
    identifiers: Iterable[str | int],
) -> list[pikepdf.Object]:
    """Clears every object matched by ``identifiers``.

    An identifier matching nothing is skipped silently.

    Args:
        graph: Object graph of the document.
        page: The page the identifiers belong to.
        identifiers: Object names and/or object numbers.

    Returns:
        The objects actually cleared.
    """
    cleared: list[pikepdf.Object] = []
    visited: set[tuple[int, int]] = set()

    for identifier in identifiers:
        for obj in resolve_identifier(graph, page, identifier):
            if check_visited(obj, visited):
                continue
            if clear_object(obj):
                cleared.append(obj)

        logger.debug("Object identifier %r processed", identifier)

    if cleared:
        logger.info("Cleared %d object(s)", len(cleared))
    return cleared
