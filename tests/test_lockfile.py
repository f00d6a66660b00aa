from pathlib import Path

import pytest

from xbelmarks.config import Settings
from xbelmarks.errors import StoreIOError
from xbelmarks.lockfile import AdvisoryLock, create_backup, restore_from_backup, write_empty_template
from xbelmarks.parse_xbel import parse_file
from xbelmarks.store import BookmarkStore


def test_lock_creates_and_removes_sentinel(tmp_path: Path):
    lock_path = tmp_path / ".lock"
    with AdvisoryLock(lock_path) as lock:
        assert lock.held
        assert lock_path.exists() and lock_path.stat().st_size == 0
    assert not lock_path.exists()


def test_lock_released_when_body_raises(tmp_path: Path):
    lock_path = tmp_path / ".lock"
    with pytest.raises(RuntimeError):
        with AdvisoryLock(lock_path):
            raise RuntimeError("write failed")
    assert not lock_path.exists()


def test_stale_lock_does_not_block(tmp_path: Path):
    lock_path = tmp_path / ".lock"
    lock_path.write_bytes(b"")
    with AdvisoryLock(lock_path):
        pass
    assert not lock_path.exists()


def test_lock_in_unwritable_place_is_io_error(tmp_path: Path):
    blocker = tmp_path / "file"
    blocker.write_text("x")
    with pytest.raises(StoreIOError):
        AdvisoryLock(blocker / ".lock").acquire()


def test_empty_template_parses(tmp_path: Path):
    p = tmp_path / "MyBookmarks.xml"
    write_empty_template(p, title="Mine & yours", now=42)
    root = parse_file(p)
    assert root.is_folder and root.name == "Mine & yours"
    assert root.children == []
    assert root.time_added == 42


def test_backup_and_restore_round_trip(sample_file: Path):
    original = sample_file.read_bytes()
    assert create_backup(sample_file)
    backup = sample_file.with_name(sample_file.name + ".backup")
    assert backup.read_bytes() == original

    sample_file.write_bytes(b"<xbel><folder><title>half writ")
    assert restore_from_backup(sample_file)
    assert sample_file.read_bytes() == original


def test_restore_without_usable_backup_writes_template(tmp_path: Path):
    p = tmp_path / "MyBookmarks.xml"
    p.write_bytes(b"")
    assert restore_from_backup(p, title="Fresh")
    assert parse_file(p).name == "Fresh"


def test_backup_of_missing_file_fails(tmp_path: Path):
    assert create_backup(tmp_path / "none.xml") is False


def test_store_backup_helpers(sample_file: Path):
    store = BookmarkStore(Settings.from_env())
    assert store.create_backup()
    sample_file.write_text("garbage", encoding="utf-8")
    root = store.restore_from_backup()
    assert root is not None
    assert [c.name for c in root.children] == ["News", "Tom & Jerry", "Operator"]
