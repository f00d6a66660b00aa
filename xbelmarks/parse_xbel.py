from __future__ import annotations

from pathlib import Path
from typing import Optional

from lxml import etree

from .errors import ParseError, StoreIOError
from .log import get_logger
from .model import BookmarkItem

log = get_logger(__name__)

FOLDER_TAG = "folder"
BOOKMARK_TAG = "bookmark"
TITLE_TAG = "title"
INFO_TAG = "info"
METADATA_TAG = "metadata"

_INT_FIELDS = {
    "time_visited": "time_last_visited",
    "time_added": "time_added",
    "visit_count": "visit_count",
}
_FLAG_FIELDS = {
    "operator_bookmark": "is_operator_bookmark",
    "deleted": "is_deleted",
}


def make_parser() -> etree.XMLParser:
    # recover=True keeps whatever libxml2 can salvage from a damaged file.
    return etree.XMLParser(
        recover=True,
        remove_blank_text=True,
        resolve_entities=False,
        no_network=True,
    )


def parse_document(path: Path) -> etree._ElementTree:
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        raise StoreIOError(f"cannot read {path}: {e}") from e
    try:
        root = etree.fromstring(data, make_parser())
    except etree.XMLSyntaxError as e:
        raise ParseError(f"{path}: {e}") from e
    if root is None:
        raise ParseError(f"{path}: no root element")
    return root.getroottree()


def parse_file(path: Path) -> BookmarkItem:
    doc = parse_document(path)
    return tree_from_element(doc.getroot())


def tree_from_element(root_el: etree._Element) -> BookmarkItem:
    root = _read_item(root_el, is_folder=True).mark_root()
    _propagate_visit_counts(root)
    return root


def is_item_element(el) -> bool:
    return isinstance(el.tag, str) and el.tag in (FOLDER_TAG, BOOKMARK_TAG)


def element_title(el: etree._Element) -> Optional[str]:
    t = find_child(el, TITLE_TAG)
    if t is None:
        return None
    return "".join(t.itertext())


def find_child(el: etree._Element, tag: str) -> Optional[etree._Element]:
    for c in el:
        if c.tag == tag:
            return c
    return None


def _read_item(el: etree._Element, *, is_folder: bool) -> BookmarkItem:
    item = BookmarkItem(is_folder=is_folder)
    for c in el:
        if not isinstance(c.tag, str):
            continue
        if c.tag == TITLE_TAG:
            item.name = "".join(c.itertext())
        elif c.tag == INFO_TAG:
            _read_info(item, c)
        elif c.tag == BOOKMARK_TAG:
            child = _read_item(c, is_folder=False)
            child.url = c.get("href")
            child.favicon_file = c.get("favicon")
            child.thumbnail_file = c.get("thumbnail")
            item.add_child(child)
        elif c.tag == FOLDER_TAG:
            item.add_child(_read_item(c, is_folder=True))
    return item


def _read_info(item: BookmarkItem, info: etree._Element) -> None:
    # Flags may sit beside <metadata> or inside it depending on the writer.
    for c in info:
        if c.tag == METADATA_TAG:
            for m in c:
                _assign_field(item, m)
        else:
            _assign_field(item, c)


def _assign_field(item: BookmarkItem, el: etree._Element) -> None:
    if not isinstance(el.tag, str):
        return
    if el.tag in _INT_FIELDS:
        setattr(item, _INT_FIELDS[el.tag], _int_text(el))
    elif el.tag in _FLAG_FIELDS:
        setattr(item, _FLAG_FIELDS[el.tag], _int_text(el) != 0)


def _int_text(el: etree._Element) -> int:
    text = (el.text or "").strip()
    try:
        return int(text)
    except ValueError:
        log.debug("Non-numeric <%s> value %r, using 0", el.tag, text)
        return 0


def _propagate_visit_counts(node: BookmarkItem) -> int:
    if not node.is_folder:
        return node.visit_count
    best = 0
    for c in node.children:
        best = max(best, _propagate_visit_counts(c))
    node.visit_count = best
    return best
