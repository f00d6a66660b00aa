from __future__ import annotations

import argparse
from pathlib import Path
from typing import List

from . import __version__
from .config import Settings, load_settings
from .log import LogConfig, get_logger, setup_logging
from .model import BookmarkItem
from .parse_netscape import import_bookmarks
from .provision import bootstrap
from .store import BookmarkStore
from .writer_netscape import export_bookmarks

log = get_logger(__name__)


def main(argv: List[str] | None = None) -> int:
    p = argparse.ArgumentParser(
        prog="xbelmarks",
        description="Path-addressed XBEL bookmark store with Netscape HTML import/export.",
    )
    p.add_argument("-V", "--version", action="version", version=f"xbelmarks {__version__}")
    p.add_argument("--config", default=None, help="YAML config file (optional). Env vars override defaults.")
    p.add_argument("--log-level", default=None, help="DEBUG/INFO/WARN/ERROR (overrides env/config).")
    p.add_argument("--no-color", action="store_true", help="Disable colored logging.")
    sub = p.add_subparsers(dest="cmd", required=True)

    sub.add_parser("show", help="Print the bookmark tree.")

    imp = sub.add_parser("import", help="Import a Netscape bookmarks HTML file as a new top-level folder.")
    imp.add_argument("html", help="Netscape bookmarks HTML file.")
    imp.add_argument("--folder", default="Imported bookmarks", help="Name of the folder to create.")

    exp = sub.add_parser("export", help="Export all bookmarks as Netscape HTML.")
    exp.add_argument("out", help="Output HTML path.")
    exp.add_argument("--parent-name", default=None, help="Rename top-level folders in the export.")

    sub.add_parser("backup", help="Snapshot the bookmark file.")
    sub.add_parser("restore", help="Restore the bookmark file from its snapshot.")
    sub.add_parser("bootstrap", help="Seed ~/.bookmarks from the system copy.")

    args = p.parse_args(argv)
    cfg = load_settings(args.config)
    if args.log_level:
        cfg.log_level = args.log_level
    if args.no_color:
        cfg.no_color = True
    setup_logging(LogConfig(level=cfg.log_level, no_color=cfg.no_color))

    handlers = {
        "show": _cmd_show,
        "import": _cmd_import,
        "export": _cmd_export,
        "backup": _cmd_backup,
        "restore": _cmd_restore,
        "bootstrap": _cmd_bootstrap,
    }
    return handlers[args.cmd](args, cfg)


def _cmd_show(args, cfg: Settings) -> int:
    root = BookmarkStore(cfg).load()
    if root is None:
        return 2
    for line in _outline(root):
        print(line)
    return 0


def _outline(root: BookmarkItem) -> List[str]:
    out: List[str] = []

    def visit(node: BookmarkItem, depth: int) -> None:
        pad = "  " * depth
        if node.is_folder:
            out.append(f"{pad}[{node.name}] (visits: {node.visit_count})")
            for c in node.children:
                visit(c, depth + 1)
        else:
            flag = " (deleted)" if node.is_operator_bookmark and node.is_deleted else ""
            out.append(f"{pad}{node.name} <{node.url}> visits={node.visit_count}{flag}")

    visit(root, 0)
    return out


def _cmd_import(args, cfg: Settings) -> int:
    folder = import_bookmarks(Path(args.html), args.folder)
    if folder is None:
        log.error("Nothing imported from %s", args.html)
        return 2
    store = BookmarkStore(cfg)
    root = store.load()
    if root is None:
        return 2
    return 0 if store.add_folder(root, folder) else 2


def _cmd_export(args, cfg: Settings) -> int:
    root = BookmarkStore(cfg).load()
    if root is None:
        return 2
    return 0 if export_bookmarks(Path(args.out), root.children, args.parent_name) else 2


def _cmd_backup(args, cfg: Settings) -> int:
    return 0 if BookmarkStore(cfg).create_backup() else 2


def _cmd_restore(args, cfg: Settings) -> int:
    return 0 if BookmarkStore(cfg).restore_from_backup() is not None else 2


def _cmd_bootstrap(args, cfg: Settings) -> int:
    stats = bootstrap(cfg)
    log.info(
        "Bootstrap: created_dir=%s copied_bookmarks=%s thumbnails=%d",
        stats.created_dir,
        stats.copied_bookmarks,
        stats.copied_thumbnails,
    )
    return 0
