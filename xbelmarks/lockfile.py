from __future__ import annotations

import html
import shutil
import time
from pathlib import Path
from typing import Optional

from .errors import BookmarkError, StoreIOError
from .log import get_logger
from .parse_xbel import parse_document

log = get_logger(__name__)

EMPTY_TEMPLATE = (
    '<?xml version="1.0"?>'
    '<!DOCTYPE xbel PUBLIC "+//IDN python.org//DTD XML Bookmark Exchange Language 1.0//EN//XML" '
    '"http://www.python.org/topics/xml/dtds/xbel-1.0.dtd">'
    '<xbel version="1.0">'
    "<info><metadata><default_folder>yes</default_folder></metadata></info>"
    "<title>{title}</title>"
    "<info><metadata>"
    "<time_visited>{now}</time_visited>"
    "<time_added>{now}</time_added>"
    "</metadata></info>"
    "</xbel>"
)


class AdvisoryLock:
    """Zero-byte sentinel file meaning "write in progress".

    Cooperative only: acquiring never waits and a crash leaves the file behind.
    """

    def __init__(self, path: Path):
        self.path = Path(path)
        self.held = False

    def __enter__(self) -> "AdvisoryLock":
        self.acquire()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.release()

    def acquire(self) -> None:
        if self.path.exists():
            log.warning("Stale bookmark lock file present: %s", self.path)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_bytes(b"")
        except OSError as e:
            raise StoreIOError(f"cannot create lock {self.path}: {e}") from e
        self.held = True

    def release(self) -> None:
        if not self.held:
            return
        self.held = False
        try:
            self.path.unlink()
        except FileNotFoundError:
            log.debug("Lock file already gone: %s", self.path)


def backup_path_for(primary: Path, suffix: str = ".backup") -> Path:
    return primary.with_name(primary.name + suffix)


def create_backup(primary: Path, backup: Optional[Path] = None) -> bool:
    backup = backup or backup_path_for(primary)
    if not primary.is_file():
        log.warning("Nothing to back up, %s does not exist", primary)
        return False
    try:
        shutil.copyfile(primary, backup)
    except OSError as e:
        log.error("Backup of %s failed: %s", primary, e)
        return False
    log.info("Backed up bookmarks to %s", backup)
    return True


def write_empty_template(primary: Path, *, title: str = "My bookmarks", now: Optional[int] = None) -> None:
    tick = int(time.time()) if now is None else now
    primary.parent.mkdir(parents=True, exist_ok=True)
    primary.write_text(EMPTY_TEMPLATE.format(title=html.escape(title, quote=False), now=tick), encoding="utf-8")


def restore_from_backup(primary: Path, backup: Optional[Path] = None, *, title: str = "My bookmarks") -> bool:
    """Overwrite ``primary`` with the backup; fall back to an empty document.

    Returns True when ``primary`` parses afterwards.
    """
    backup = backup or backup_path_for(primary)
    try:
        if backup.is_file():
            shutil.copyfile(backup, primary)
            log.info("Restored bookmarks from %s", backup)
        else:
            log.warning("No backup at %s", backup)
    except OSError as e:
        log.error("Restore from %s failed: %s", backup, e)

    try:
        parse_document(primary)
        return True
    except BookmarkError as e:
        log.warning("Restored bookmarks unusable (%s); writing empty template", e)

    try:
        write_empty_template(primary, title=title)
        parse_document(primary)
    except (OSError, BookmarkError) as e:
        log.error("Could not recreate %s: %s", primary, e)
        return False
    return True
