from __future__ import annotations

import re
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

from bs4 import BeautifulSoup  # type: ignore

from .log import get_logger
from .model import BookmarkItem

log = get_logger(__name__)

NETSCAPE_MARKER = b"NETSCAPE-Bookmark-file"
BOOKMARKS_MARKER = b"Bookmarks"
PROBE_LINES = 10

# Matched against the raw line so match offsets index it directly.
_FOLDER_OPEN = re.compile(r"<dt><h3", re.IGNORECASE | re.ASCII)
_FOLDER_CLOSE = re.compile(r"</dl>", re.IGNORECASE | re.ASCII)
_ANCHOR_OPEN = re.compile(r"<a href=", re.IGNORECASE | re.ASCII)
_ANCHOR_END = re.compile(r"</a>", re.IGNORECASE | re.ASCII)
_H3_END = re.compile(r"</h3>", re.IGNORECASE | re.ASCII)

_NAMED = {"amp": "&", "lt": "<", "gt": ">", "quot": '"', "#39": "'"}
_ENTITY_RE = re.compile(r"&(amp|lt|gt|quot|#39);|&#(\d+);", re.IGNORECASE)


def iter_lines(stream: BinaryIO) -> Iterator[bytes]:
    """Yield raw lines, terminator included; a trailing fragment counts as a line."""
    while True:
        line = stream.readline()
        if not line:
            return
        yield line


def is_netscape_file(path: Path) -> bool:
    try:
        with open(path, "rb") as fh:
            lines = iter_lines(fh)
            first = next(lines, None)
            if first is None:
                return False
            if NETSCAPE_MARKER in first:
                return True
            for _i, line in zip(range(PROBE_LINES), lines):
                if BOOKMARKS_MARKER in line:
                    return True
    except OSError as e:
        log.warning("Cannot probe %s: %s", path, e)
    return False


def to_unicode(raw: bytes) -> str:
    for enc in ("utf-8", "windows-1252"):
        try:
            return raw.decode(enc)
        except UnicodeDecodeError:
            continue
    return raw.decode("iso-8859-1")


def unescape_entities(text: str) -> str:
    def repl(m: re.Match) -> str:
        if m.group(1):
            return _NAMED[m.group(1).lower()]
        code = int(m.group(2))
        if 0 < code < 0x110000:
            return chr(code)
        return m.group(0)

    return _ENTITY_RE.sub(repl, text)


def import_bookmarks(path: Path, folder_name: str) -> Optional[BookmarkItem]:
    """Read a Netscape bookmark dump into a new folder named ``folder_name``."""
    if not is_netscape_file(path):
        log.warning("Not a Netscape bookmark file: %s", path)
        return None

    top = BookmarkItem.new_folder(folder_name)
    scope = top
    links = folders = 0
    try:
        with open(path, "rb") as fh:
            for raw in iter_lines(fh):
                line = to_unicode(raw)
                if _FOLDER_OPEN.search(line):
                    folder = _parse_folder_line(line)
                    if folder is not None:
                        scope = scope.add_child(folder)
                        folders += 1
                elif _FOLDER_CLOSE.search(line):
                    if scope.parent is not None:
                        scope = scope.parent
                elif _ANCHOR_OPEN.search(line):
                    link = _parse_link_line(line)
                    if link is not None:
                        scope.add_child(link)
                        links += 1
    except OSError as e:
        log.error("Failed to read %s: %s", path, e)
        return None

    log.info("Imported %d links in %d folders from %s", links, folders, path)
    return top


def _parse_link_line(line: str) -> Optional[BookmarkItem]:
    m = _ANCHOR_OPEN.search(line)
    if m is None:
        return None
    url_end = line.find('"', m.end() + 1)
    if url_end == -1:
        return None
    name_start = line.find('">', url_end)
    if name_start == -1:
        return None
    name_start += 2

    a = BeautifulSoup(line, "lxml").find("a")
    if a is None:
        return None
    return BookmarkItem(
        is_folder=False,
        name=unescape_entities(_cut(line, name_start, _ANCHOR_END)),
        url=a.get("href", ""),
        time_added=_maybe_int(a.get("add_date")),
        time_last_visited=_maybe_int(a.get("last_visit")),
    )


def _parse_folder_line(line: str) -> Optional[BookmarkItem]:
    m = _FOLDER_OPEN.search(line)
    if m is None:
        return None
    gt = line.find(">", m.end())
    if gt == -1:
        return None

    h3 = BeautifulSoup(line, "lxml").find("h3")
    add_date = _maybe_int(h3.get("add_date")) if h3 is not None else 0
    return BookmarkItem(
        is_folder=True,
        name=unescape_entities(_cut(line, gt + 1, _H3_END)),
        time_added=add_date,
    )


def _cut(line: str, begin: int, closer: "re.Pattern[str]") -> str:
    m = closer.search(line, begin)
    if m is None:
        return line[begin:].rstrip("\r\n")
    return line[begin : m.start()]


def _maybe_int(v) -> int:
    if v is None:
        return 0
    try:
        return int(v)
    except (TypeError, ValueError):
        return 0
