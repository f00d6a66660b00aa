"""Locate the XML element addressed by a title path.

The walk is depth-first in document order. A folder whose title matches the
current segment consumes it and is descended into; a link only matches the
final segment. The consumed-segment count travels with the walk and is not
rolled back when a descent fails, so with duplicate sibling titles only the
first duplicate is reachable. Older documents depend on that order, so the
behaviour is kept as is (known limitation, see DESIGN.md).
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

from lxml import etree

from .model import BookmarkItem, path_of, split_legacy_path
from .parse_xbel import BOOKMARK_TAG, FOLDER_TAG, element_title

_Found = Tuple[Optional[etree._Element], int]


def resolve(
    root_el: Optional[etree._Element],
    path: Sequence[str],
    target_is_folder: Optional[bool] = None,
) -> Optional[etree._Element]:
    """Return the element for ``path`` or ``None``.

    ``target_is_folder`` restricts the final match to one node kind; ``None``
    accepts whichever kind comes first in document order.
    """
    if root_el is None or not path:
        return None
    found, _consumed = _walk(root_el, list(path), 0, target_is_folder)
    return found


def resolve_legacy(root_el: Optional[etree._Element], segments: Sequence[str]) -> Optional[etree._Element]:
    titles, is_folder = split_legacy_path(segments)
    return resolve(root_el, titles, is_folder)


def resolve_node(root_el: Optional[etree._Element], node: BookmarkItem) -> Optional[etree._Element]:
    return resolve(root_el, path_of(node), node.is_folder)


def _walk(el: etree._Element, path: list, consumed: int, want_folder: Optional[bool]) -> _Found:
    last = len(path) - 1
    for child in el:
        if child.tag == BOOKMARK_TAG:
            if consumed != last or want_folder is True:
                continue
            if element_title(child) == path[consumed]:
                return child, consumed + 1
        elif child.tag == FOLDER_TAG:
            if consumed == last and want_folder is False:
                continue
            if element_title(child) != path[consumed]:
                continue
            consumed += 1
            if consumed == len(path):
                return child, consumed
            found, consumed = _walk(child, path, consumed, want_folder)
            if found is not None:
                return found, consumed
    return None, consumed
