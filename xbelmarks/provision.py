from __future__ import annotations

import shutil
from dataclasses import dataclass
from pathlib import Path

from .config import Settings
from .log import get_logger

log = get_logger(__name__)


@dataclass
class BootstrapStats:
    created_dir: bool = False
    copied_bookmarks: bool = False
    copied_thumbnails: int = 0


def bootstrap(settings: Settings) -> BootstrapStats:
    """Seed the user's bookmark directory from the shared system copy.

    Existing user files are never overwritten.
    """
    stats = BootstrapStats()
    data_dir = settings.data_dir
    if not data_dir.exists():
        data_dir.mkdir(parents=True, mode=0o755)
        stats.created_dir = True

    system_dir = Path(settings.system_dir)
    seed = system_dir / "bookmarks" / settings.bookmarks_file
    if not settings.bookmarks_path.exists():
        if seed.is_file():
            shutil.copyfile(seed, settings.bookmarks_path)
            stats.copied_bookmarks = True
            log.info("Seeded %s from %s", settings.bookmarks_path, seed)
        else:
            log.warning("No seed bookmark file at %s", seed)

    seed_thumbs = system_dir / "thumbnails"
    if seed_thumbs.is_dir() and not settings.thumbnails_path.exists():
        settings.thumbnails_path.mkdir(parents=True)
        for f in sorted(seed_thumbs.iterdir()):
            if f.is_file():
                shutil.copyfile(f, settings.thumbnails_path / f.name)
                stats.copied_thumbnails += 1
        log.info("Copied %d default thumbnails", stats.copied_thumbnails)
    return stats
