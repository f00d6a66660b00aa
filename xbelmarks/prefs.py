from __future__ import annotations

from pathlib import Path
from typing import Any, Dict

import yaml

from .log import get_logger
from .model import SortOrder, SortType, sort_order_for

log = get_logger(__name__)

SORT_KEY = "/apps/osso/bookmark/sort"


class PrefsStore:
    """Flat key -> value preferences kept in a YAML file."""

    def __init__(self, path: Path):
        self.path = Path(path)

    def _load(self) -> Dict[str, Any]:
        if not self.path.is_file():
            return {}
        try:
            data = yaml.safe_load(self.path.read_text(encoding="utf-8")) or {}
        except (OSError, yaml.YAMLError) as e:
            log.warning("Unreadable preferences %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            log.warning("Ignoring preferences %s: not a mapping", self.path)
            return {}
        return data

    def get_int(self, key: str, default: int = 0) -> int:
        v = self._load().get(key)
        if v is None:
            return default
        try:
            return int(v)
        except (TypeError, ValueError):
            return default

    def set_int(self, key: str, value: int) -> bool:
        if not key:
            return False
        data = self._load()
        data[key] = int(value)
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(yaml.safe_dump(data, sort_keys=True), encoding="utf-8")
        except OSError as e:
            log.error("Cannot write preferences %s: %s", self.path, e)
            return False
        return True


def get_sort_type(prefs: PrefsStore) -> SortType:
    raw = prefs.get_int(SORT_KEY, int(SortType.NAME_ASC))
    try:
        return SortType(raw)
    except ValueError:
        log.debug("Unknown sort type %r, using name order", raw)
        return SortType.NAME_ASC


def set_sort_type(prefs: PrefsStore, sort_type: SortType) -> bool:
    return prefs.set_int(SORT_KEY, int(sort_type))


def get_sorting_order(prefs: PrefsStore) -> SortOrder:
    return sort_order_for(get_sort_type(prefs))
