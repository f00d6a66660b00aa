from __future__ import annotations

import html
from pathlib import Path
from typing import Iterable, List, Optional

from .log import get_logger
from .model import BookmarkItem
from .urls import export_href

log = get_logger(__name__)

HEADER = (
    "<!DOCTYPE NETSCAPE-Bookmark-file-1>\n"
    "<!-- This is an automatically generated file.\n"
    "It will be read and overwritten.\n"
    "Do Not Edit! -->\n"
    '<META HTTP-EQUIV="Content-Type" CONTENT="text/html; charset=UTF-8">\n'
    "<TITLE>Bookmarks</TITLE>\n"
    "<H1>Bookmarks</H1>\n\n"
    "<DL><p>\n"
)
FOOTER = "</DL><p>\n"

_TITLE_ESCAPES = {">": "&gt;", "<": "&lt;", "&": "&amp;", '"': "&quot;", "\r": "&#13;"}


def escape_title(s: str) -> str:
    return "".join(_TITLE_ESCAPES.get(ch, ch) for ch in s)


def render_bookmarks(items: Iterable[BookmarkItem], parent_name: Optional[str] = None) -> str:
    """Netscape HTML for ``items``; ``parent_name`` renames top-level folders."""
    parts: List[str] = [HEADER]
    for item in items:
        _write_item(parts, item, parent_name)
    parts.append(FOOTER)
    return "".join(parts)


def export_bookmarks(out_path: Path, items: Iterable[BookmarkItem], parent_name: Optional[str] = None) -> bool:
    if out_path is None or items is None:
        log.warning("Export needs an output path and items")
        return False
    text = render_bookmarks(items, parent_name)
    try:
        Path(out_path).write_text(text, encoding="utf-8")
    except OSError as e:
        log.error("Failed to write %s: %s", out_path, e)
        return False
    log.info("Exported bookmarks to %s", out_path)
    return True


def _write_item(parts: List[str], item: BookmarkItem, parent_name: Optional[str]) -> None:
    if not item.is_folder:
        attrs = [f'HREF="{html.escape(export_href(item.url or ""), quote=True)}"']
        if item.time_added > 0:
            attrs.append(f'ADD_DATE="{item.time_added}"')
        if item.time_last_visited > 0:
            attrs.append(f'LAST_VISIT="{item.time_last_visited}"')
        parts.append(f"\t<DT><A {' '.join(attrs)}>{escape_title(item.name)}</A>\n")
        return

    name = parent_name if parent_name is not None else item.name
    parts.append(f'<DT><H3 ADD_DATE="0">{escape_title(name)}</H3>\n<DL><p>\n')
    for c in item.children:
        _write_item(parts, c, None)
    parts.append("</DL><p>\n")
