from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable, List, Optional

from lxml import etree

from . import lockfile
from .config import Settings
from .errors import BookmarkError, InvalidParameter, NotFound
from .lockfile import AdvisoryLock
from .log import get_logger
from .model import BookmarkItem, SortType, sorted_position
from .parse_xbel import parse_file
from .prefs import PrefsStore, get_sort_type
from .urls import same_origin
from .xbel_doc import XbelDocument

log = get_logger(__name__)


class BookmarkStore:
    """Public entry points over the backing XBEL file.

    Every call re-parses the file, edits it, writes it back under the lock
    file and returns whether that worked. Failures are logged and leave the
    file as it was. On success the caller's in-memory nodes are updated to
    match.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        path: Optional[Path] = None,
        prefs: Optional[PrefsStore] = None,
    ):
        self.settings = settings or Settings.from_env()
        self.path = Path(path) if path else self.settings.bookmarks_path
        self.lock_path = self.path.parent / self.settings.lock_file
        self.backup_path = lockfile.backup_path_for(self.path, self.settings.backup_suffix)
        self.prefs = prefs or PrefsStore(self.settings.prefs_path)
        # Nodes only hold weak parent links; keep the latest tree alive for them.
        self.root: Optional[BookmarkItem] = None

    def _edit(self, what: str, fn: Callable[[XbelDocument], None]) -> bool:
        try:
            with XbelDocument(self.path) as doc:
                fn(doc)
                doc.save(AdvisoryLock(self.lock_path))
        except BookmarkError as e:
            log.warning("%s failed: %s", what, e)
            return False
        except etree.LxmlError as e:
            log.error("%s failed in XML layer: %s", what, e)
            return False
        return True

    def _reject(self, what: str, reason: str) -> bool:
        log.warning("%s rejected: %s", what, reason)
        return False

    # reading

    def load(self) -> Optional[BookmarkItem]:
        try:
            root = parse_file(self.path)
        except BookmarkError as e:
            log.error("Cannot load bookmarks from %s: %s", self.path, e)
            return None
        self.root = root
        return root

    def folders_list(self) -> List[str]:
        out = [f"MY:{self.settings.root_label}"]
        root = self.load()
        if root is not None:
            out.extend(f"USER:{f.name}" for f in root.folders())
        return out

    # structural edits

    def add_child(self, parent: BookmarkItem, item: BookmarkItem, position: int = -1) -> bool:
        if parent is None or item is None or not parent.is_folder:
            return self._reject("add_child", "parent must be a folder and item is required")
        if not self._edit("add_child", lambda doc: doc.add_child(parent, item, position)):
            return False
        parent.add_child(item, position)
        return True

    def add_child_sorted(
        self,
        parent: BookmarkItem,
        item: BookmarkItem,
        sort_type: Optional[SortType] = None,
    ) -> bool:
        if parent is None or item is None or not parent.is_folder:
            return self._reject("add_child_sorted", "parent must be a folder and item is required")
        st = get_sort_type(self.prefs) if sort_type is None else sort_type
        return self.add_child(parent, item, sorted_position(parent.children, item, st))

    def add_duplicate_item(self, anchor: BookmarkItem, item: BookmarkItem) -> bool:
        """Insert ``item`` right after ``anchor`` (first child when ``anchor`` is the root)."""
        if anchor is None or item is None:
            return self._reject("add_duplicate_item", "anchor and item are required")
        if not self._edit("add_duplicate_item", lambda doc: doc.add_duplicate(anchor, item)):
            return False
        if anchor.is_root:
            anchor.add_child(item, 0)
        else:
            holder = anchor.parent
            idx = next(i for i, c in enumerate(holder.children) if c is anchor)
            holder.add_child(item, idx + 1)
        return True

    def add_folder(self, root: BookmarkItem, item: BookmarkItem) -> bool:
        if root is None or item is None or not root.is_root:
            return self._reject("add_folder", "a loaded root is required")
        if not self._edit("add_folder", lambda doc: doc.append_to_root(item)):
            return False
        root.add_child(item)
        return True

    def remove(self, node: BookmarkItem) -> bool:
        if node is None or node.is_root:
            return self._reject("remove", "cannot remove the root")
        if not self._edit("remove", lambda doc: doc.remove(node)):
            return False
        _mirror_removal(node)
        return True

    def remove_list(self, nodes: Iterable[BookmarkItem]) -> bool:
        items = [n for n in nodes if n is not None and not n.is_root]
        done: List[BookmarkItem] = []

        def apply(doc: XbelDocument) -> None:
            for n in items:
                try:
                    doc.remove(n)
                except NotFound as e:
                    log.warning("Skipping %r: %s", n.name, e)
                    continue
                done.append(n)

        if not self._edit("remove_list", apply):
            return False
        for n in done:
            _mirror_removal(n)
        return True

    # field edits

    def set_name(self, node: BookmarkItem, name: str) -> bool:
        if node is None or name is None:
            return self._reject("set_name", "node and name are required")
        if not self._edit("set_name", lambda doc: doc.set_name(node, name)):
            return False
        node.name = name
        return True

    def set_url(self, node: BookmarkItem, url: str) -> bool:
        if node is None or url is None or node.is_folder:
            return self._reject("set_url", "a link node and a url are required")
        if not self._edit("set_url", lambda doc: doc.set_url(node, url)):
            return False
        if not same_origin(node.url, url):
            node.favicon_file = ""
            node.thumbnail_file = ""
        node.url = url
        return True

    def set_thumbnail(self, node: BookmarkItem, ref: str) -> bool:
        if node is None or node.is_folder:
            return self._reject("set_thumbnail", "a link node is required")
        if not self._edit("set_thumbnail", lambda doc: doc.set_thumbnail(node, ref)):
            return False
        node.thumbnail_file = ref or ""
        return True

    def set_time_last_visited(self, node: BookmarkItem, ts: int) -> bool:
        if node is None or ts is None:
            return self._reject("set_time_last_visited", "node and timestamp are required")
        if not self._edit("set_time_last_visited", lambda doc: doc.set_time_last_visited(node, ts)):
            return False
        node.time_last_visited = int(ts)
        return True

    def set_visit_count(self, node: BookmarkItem, count: int) -> bool:
        if node is None or count is None or int(count) < 0:
            return self._reject("set_visit_count", "node and a non-negative count are required")
        if not self._edit("set_visit_count", lambda doc: doc.set_visit_count(node, count)):
            return False
        node.visit_count = int(count)
        return True

    def mark_operator_deleted(self, node: BookmarkItem) -> bool:
        try:
            _check_operator(node)
        except InvalidParameter as e:
            return self._reject("mark_operator_deleted", str(e))
        if not self._edit("mark_operator_deleted", lambda doc: doc.mark_operator_deleted(node)):
            return False
        node.is_deleted = True
        return True

    # backup

    def create_backup(self) -> bool:
        return lockfile.create_backup(self.path, self.backup_path)

    def restore_from_backup(self) -> Optional[BookmarkItem]:
        if not lockfile.restore_from_backup(self.path, self.backup_path, title=self.settings.root_label):
            return None
        return self.load()


def _check_operator(node: Optional[BookmarkItem]) -> None:
    if node is None:
        raise InvalidParameter("node is required")
    if not node.is_operator_bookmark:
        raise InvalidParameter(f"{node.name!r} is not an operator bookmark")


def _mirror_removal(node: BookmarkItem) -> None:
    if node.is_operator_bookmark:
        node.is_deleted = True
    else:
        node.detach()
