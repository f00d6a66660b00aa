from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import yaml


def _env_bool(name: str, default: bool) -> bool:
    v = os.getenv(name)
    if v is None or v == "":
        return default
    return v.strip().lower() in ("1", "true", "yes", "y", "on")


def _env_str(name: str, default: str) -> str:
    v = os.getenv(name)
    return default if v is None else v


def _default_home() -> str:
    # HOME wins over the passwd entry, like the device shell does.
    return os.getenv("HOME") or str(Path.home())


@dataclass
class Settings:
    # Locations (relative names are resolved against home)
    home: str = ""
    bookmarks_dir: str = ".bookmarks"
    bookmarks_file: str = "MyBookmarks.xml"
    backup_suffix: str = ".backup"
    lock_file: str = ".lock"
    favicons_dir: str = "favicons"
    thumbnails_dir: str = "thumbnails"
    prefs_file: str = "prefs.yaml"

    # Provisioning
    system_dir: str = "/usr/share/bookmark-manager"

    # Labels
    root_label: str = "My bookmarks"

    # Logging / UX
    log_level: str = "INFO"
    no_color: bool = False

    def __post_init__(self) -> None:
        if not self.home:
            self.home = _default_home()

    @property
    def data_dir(self) -> Path:
        return Path(self.home) / self.bookmarks_dir

    @property
    def bookmarks_path(self) -> Path:
        return self.data_dir / self.bookmarks_file

    @property
    def backup_path(self) -> Path:
        p = self.bookmarks_path
        return p.with_name(p.name + self.backup_suffix)

    @property
    def lock_path(self) -> Path:
        return self.data_dir / self.lock_file

    @property
    def favicons_path(self) -> Path:
        return self.data_dir / self.favicons_dir

    @property
    def thumbnails_path(self) -> Path:
        return self.data_dir / self.thumbnails_dir

    @property
    def prefs_path(self) -> Path:
        return self.data_dir / self.prefs_file

    @staticmethod
    def from_env() -> "Settings":
        s = Settings()
        s.home = _env_str("XBM_HOME", s.home)
        s.bookmarks_dir = _env_str("XBM_BOOKMARKS_DIR", s.bookmarks_dir)
        s.bookmarks_file = _env_str("XBM_BOOKMARKS_FILE", s.bookmarks_file)
        s.backup_suffix = _env_str("XBM_BACKUP_SUFFIX", s.backup_suffix)
        s.lock_file = _env_str("XBM_LOCK_FILE", s.lock_file)
        s.prefs_file = _env_str("XBM_PREFS_FILE", s.prefs_file)
        s.system_dir = _env_str("XBM_SYSTEM_DIR", s.system_dir)
        s.root_label = _env_str("XBM_ROOT_LABEL", s.root_label)

        s.log_level = _env_str("XBM_LOG_LEVEL", s.log_level)
        s.no_color = _env_bool("XBM_NO_COLOR", s.no_color)
        return s

    @staticmethod
    def from_file(path: Path) -> "Settings":
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
        s = Settings.from_env()
        for k, v in data.items():
            if hasattr(s, k):
                setattr(s, k, v)
        return s


def load_settings(config_path: Optional[str]) -> Settings:
    if config_path:
        return Settings.from_file(Path(config_path))
    return Settings.from_env()
