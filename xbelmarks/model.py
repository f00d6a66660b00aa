from __future__ import annotations

import time
import weakref
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Iterator, List, Optional, Sequence, Tuple

from .errors import InvalidParameter

# Legacy callers addressed links by "<title>.bm" so a link and a folder with the
# same title produced different path segments.
LINK_SUFFIX = ".bm"


class SortType(IntEnum):
    NAME_ASC = 0
    NAME_DSC = 1
    LASTVISIT_ASC = 2
    LASTVISIT_DSC = 3
    VISITCOUNT_ASC = 4


class SortOrder(IntEnum):
    ASC = 0
    DSC = 1


@dataclass
class BookmarkItem:
    is_folder: bool
    name: str = ""
    url: Optional[str] = None
    favicon_file: Optional[str] = None
    thumbnail_file: Optional[str] = None
    children: List["BookmarkItem"] = field(default_factory=list)

    time_added: int = 0
    time_last_visited: int = 0
    visit_count: int = 0

    is_operator_bookmark: bool = False
    is_deleted: bool = False

    _parent: Optional["weakref.ReferenceType[BookmarkItem]"] = field(
        default=None, repr=False, compare=False
    )
    # Set only on the top node of a tree read from a document.
    _document_root: bool = field(default=False, repr=False, compare=False)

    @classmethod
    def new_folder(cls, name: str, *, now: Optional[int] = None) -> "BookmarkItem":
        tick = int(time.time()) if now is None else now
        return cls(is_folder=True, name=name, time_added=tick, time_last_visited=tick)

    @classmethod
    def new_link(
        cls,
        name: str,
        url: str,
        *,
        operator: bool = False,
        now: Optional[int] = None,
    ) -> "BookmarkItem":
        tick = int(time.time()) if now is None else now
        return cls(
            is_folder=False,
            name=name,
            url=url,
            time_added=tick,
            time_last_visited=tick,
            is_operator_bookmark=operator,
        )

    @property
    def parent(self) -> Optional["BookmarkItem"]:
        return self._parent() if self._parent is not None else None

    @parent.setter
    def parent(self, value: Optional["BookmarkItem"]) -> None:
        self._parent = weakref.ref(value) if value is not None else None

    @property
    def is_root(self) -> bool:
        return self._document_root

    def mark_root(self) -> "BookmarkItem":
        self._document_root = True
        return self

    def top(self) -> "BookmarkItem":
        cur = self
        while cur.parent is not None:
            cur = cur.parent
        return cur

    @property
    def is_attached(self) -> bool:
        """True when the parent chain still reaches a document root."""
        return self.top().is_root

    def add_child(self, item: "BookmarkItem", position: int = -1) -> "BookmarkItem":
        """Attach ``item`` at ``position`` (``-1`` appends) and return it."""
        if not self.is_folder:
            raise InvalidParameter(f"cannot add children to link {self.name!r}")
        if item.parent is not None:
            item.detach()
        if position < 0 or position >= len(self.children):
            self.children.append(item)
        else:
            self.children.insert(position, item)
        item.parent = self
        return item

    def detach(self) -> None:
        p = self.parent
        if p is None:
            return
        p.children = [c for c in p.children if c is not self]
        self.parent = None

    def walk(self) -> Iterator["BookmarkItem"]:
        yield self
        for c in self.children:
            yield from c.walk()

    def folders(self) -> List["BookmarkItem"]:
        return [c for c in self.children if c.is_folder]

    def path(self) -> List[str]:
        return path_of(self)


def path_of(node: BookmarkItem) -> List[str]:
    """Titles from the root (exclusive) down to ``node`` (inclusive)."""
    out: List[str] = []
    cur: Optional[BookmarkItem] = node
    while cur is not None and cur.parent is not None:
        out.append(cur.name)
        cur = cur.parent
    out.reverse()
    return out


def encode_link_name(name: str) -> str:
    return name + LINK_SUFFIX


def decode_link_name(name: str) -> str:
    if name.endswith(LINK_SUFFIX):
        return name[: -len(LINK_SUFFIX)]
    return name


def legacy_path(node: BookmarkItem) -> List[str]:
    segments = path_of(node)
    if segments and not node.is_folder:
        segments[-1] = encode_link_name(segments[-1])
    return segments


def split_legacy_path(segments: Sequence[str]) -> Tuple[List[str], bool]:
    """Turn a legacy path into ``(titles, target_is_folder)``."""
    titles = list(segments)
    if titles and titles[-1].endswith(LINK_SUFFIX):
        titles[-1] = decode_link_name(titles[-1])
        return titles, False
    return titles, True


def sort_order_for(sort_type: SortType) -> SortOrder:
    if sort_type in (SortType.NAME_DSC, SortType.LASTVISIT_DSC):
        return SortOrder.DSC
    return SortOrder.ASC


def _sort_key(item: BookmarkItem, sort_type: SortType):
    if sort_type in (SortType.NAME_ASC, SortType.NAME_DSC):
        return item.name.casefold()
    if sort_type in (SortType.LASTVISIT_ASC, SortType.LASTVISIT_DSC):
        return item.time_last_visited
    return item.visit_count


def sorted_position(children: Sequence[BookmarkItem], item: BookmarkItem, sort_type: SortType) -> int:
    """Index ``item`` takes among already sorted ``children``; ``-1`` means append."""
    key = _sort_key(item, sort_type)
    descending = sort_order_for(sort_type) == SortOrder.DSC
    for i, c in enumerate(children):
        other = _sort_key(c, sort_type)
        if (other < key) if descending else (other > key):
            return i
    return -1
