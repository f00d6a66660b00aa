from __future__ import annotations

import os
from pathlib import Path
from typing import Optional

from lxml import etree

from .errors import InvalidParameter, NotFound, StoreIOError
from .lockfile import AdvisoryLock
from .log import get_logger
from .model import BookmarkItem, path_of
from .parse_xbel import (
    BOOKMARK_TAG,
    FOLDER_TAG,
    INFO_TAG,
    METADATA_TAG,
    TITLE_TAG,
    find_child,
    is_item_element,
    parse_document,
    tree_from_element,
)
from .resolver import resolve_node
from .urls import same_origin

log = get_logger(__name__)


def build_element(item: BookmarkItem) -> etree._Element:
    """Serialize ``item`` and its subtree into a detached element."""
    if item.is_folder:
        el = etree.Element(FOLDER_TAG, folded="no")
    else:
        el = etree.Element(BOOKMARK_TAG)
        el.set("href", item.url or "")
        if item.favicon_file is not None:
            el.set("favicon", item.favicon_file)
        if item.thumbnail_file is not None:
            el.set("thumbnail", item.thumbnail_file)

    etree.SubElement(el, TITLE_TAG).text = item.name
    metadata = etree.SubElement(etree.SubElement(el, INFO_TAG), METADATA_TAG)
    etree.SubElement(metadata, "time_visited").text = str(item.time_last_visited)
    etree.SubElement(metadata, "time_added").text = str(item.time_added)
    if not item.is_folder:
        etree.SubElement(metadata, "visit_count").text = str(item.visit_count)
    if item.is_operator_bookmark:
        etree.SubElement(metadata, "operator_bookmark").text = "1"
        etree.SubElement(metadata, "deleted").text = "1" if item.is_deleted else "0"

    for c in item.children:
        el.append(build_element(c))
    return el


def find_field(el: etree._Element, tag: str) -> Optional[etree._Element]:
    """First ``tag`` under any <info>, directly or inside its <metadata>."""
    for info in el:
        if info.tag != INFO_TAG:
            continue
        for c in info:
            if c.tag == tag:
                return c
            if c.tag == METADATA_TAG:
                hit = find_child(c, tag)
                if hit is not None:
                    return hit
    return None


def ensure_metadata(el: etree._Element) -> etree._Element:
    first_info = None
    for info in el:
        if info.tag != INFO_TAG:
            continue
        md = find_child(info, METADATA_TAG)
        if md is not None:
            return md
        if first_info is None:
            first_info = info
    if first_info is None:
        first_info = etree.Element(INFO_TAG)
        title = find_child(el, TITLE_TAG)
        if title is not None:
            title.addnext(first_info)
        else:
            el.insert(0, first_info)
    return etree.SubElement(first_info, METADATA_TAG)


def set_field(el: etree._Element, tag: str, value: str) -> None:
    field = find_field(el, tag)
    if field is None:
        field = etree.SubElement(ensure_metadata(el), tag)
    field.text = value


class XbelDocument:
    """One freshly parsed copy of the backing file.

    Edits only touch the in-memory document; nothing reaches disk until
    :meth:`save`.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self.tree: Optional[etree._ElementTree] = None

    def __enter__(self) -> "XbelDocument":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def open(self) -> None:
        self.tree = parse_document(self.path)

    def close(self) -> None:
        self.tree = None

    @property
    def root(self) -> etree._Element:
        if self.tree is None:
            raise StoreIOError(f"{self.path} is not open")
        return self.tree.getroot()

    def to_tree(self) -> BookmarkItem:
        return tree_from_element(self.root)

    def locate(self, node: BookmarkItem, *, allow_root: bool = False) -> etree._Element:
        """Element for ``node``.

        Only nodes whose parent chain reaches a loaded root are addressable.
        The root itself has an empty path and is returned only with
        ``allow_root``.
        """
        if not node.is_attached:
            raise NotFound(f"{node.name!r} is not part of a loaded bookmark tree")
        if node.is_root:
            if allow_root:
                return self.root
            raise NotFound("empty path does not address a bookmark")
        el = resolve_node(self.root, node)
        if el is None:
            raise NotFound(f"no element for path {path_of(node)!r}")
        return el

    # structural edits

    def add_child(self, parent: BookmarkItem, item: BookmarkItem, position: int = -1) -> None:
        if not parent.is_folder:
            raise InvalidParameter(f"parent {parent.name!r} is not a folder")
        new_el = build_element(item)
        if parent.children:
            n = len(parent.children)
            append = position < 0 or position >= n
            anchor = self.locate(parent.children[n - 1 if append else position])
            if append:
                anchor.addnext(new_el)
            else:
                anchor.addprevious(new_el)
        else:
            self.locate(parent, allow_root=True).append(new_el)

    def add_duplicate(self, anchor: BookmarkItem, item: BookmarkItem) -> None:
        new_el = build_element(item)
        if anchor.is_root:
            root = self.root
            for i, c in enumerate(root):
                if is_item_element(c):
                    root.insert(i, new_el)
                    return
            root.append(new_el)
            return
        self.locate(anchor).addnext(new_el)

    def append_to_root(self, item: BookmarkItem) -> None:
        self.root.append(build_element(item))

    def remove(self, node: BookmarkItem) -> None:
        if node.is_root:
            raise InvalidParameter("the root folder cannot be removed")
        if node.is_operator_bookmark:
            self.mark_operator_deleted(node)
            return
        el = self.locate(node)
        el.getparent().remove(el)

    # field edits

    def set_name(self, node: BookmarkItem, name: str) -> None:
        if name is None:
            raise InvalidParameter("name is required")
        title = find_child(self.locate(node), TITLE_TAG)
        if title is None:
            raise NotFound(f"element for {node.name!r} has no <title>")
        for c in list(title):
            title.remove(c)
        title.text = name

    def set_url(self, node: BookmarkItem, url: str) -> None:
        if node.is_folder:
            raise InvalidParameter(f"{node.name!r} is a folder")
        if url is None:
            raise InvalidParameter("url is required")
        el = self.locate(node)
        old = el.get("href")
        el.set("href", url)
        if not same_origin(old, url):
            el.set("favicon", "")
            el.set("thumbnail", "")

    def set_thumbnail(self, node: BookmarkItem, ref: str) -> None:
        if node.is_folder:
            raise InvalidParameter(f"{node.name!r} is a folder")
        self.locate(node).set("thumbnail", ref or "")

    def set_time_last_visited(self, node: BookmarkItem, ts: int) -> None:
        set_field(self.locate(node), "time_visited", str(int(ts)))

    def set_visit_count(self, node: BookmarkItem, count: int) -> None:
        if count is None or int(count) < 0:
            raise InvalidParameter(f"bad visit count {count!r}")
        set_field(self.locate(node), "visit_count", str(int(count)))

    def mark_operator_deleted(self, node: BookmarkItem) -> None:
        if not node.is_operator_bookmark:
            raise InvalidParameter(f"{node.name!r} is not an operator bookmark")
        set_field(self.locate(node), "deleted", "1")

    # persistence

    def serialize(self) -> bytes:
        if self.tree is None:
            raise StoreIOError(f"{self.path} is not open")
        return etree.tostring(self.tree, xml_declaration=True, encoding="UTF-8", pretty_print=True)

    def save(self, lock: AdvisoryLock) -> None:
        payload = self.serialize()
        with lock:
            try:
                with open(self.path, "wb") as fh:
                    fh.write(payload)
                    fh.flush()
                    os.fsync(fh.fileno())
            except OSError as e:
                raise StoreIOError(f"cannot write {self.path}: {e}") from e
        log.debug("Wrote %d bytes to %s", len(payload), self.path)
