from pathlib import Path

from xbelmarks.config import Settings, load_settings


def test_paths_follow_home_env(home):
    s = Settings.from_env()
    assert s.home == str(home)
    assert s.bookmarks_path == home / ".bookmarks" / "MyBookmarks.xml"
    assert s.backup_path == home / ".bookmarks" / "MyBookmarks.xml.backup"
    assert s.lock_path == home / ".bookmarks" / ".lock"


def test_env_overrides(monkeypatch, home):
    monkeypatch.setenv("XBM_BOOKMARKS_FILE", "Other.xml")
    monkeypatch.setenv("XBM_NO_COLOR", "yes")
    s = Settings.from_env()
    assert s.bookmarks_path.name == "Other.xml"
    assert s.no_color is True


def test_yaml_file_overrides_env(monkeypatch, home, tmp_path: Path):
    monkeypatch.setenv("XBM_ROOT_LABEL", "From env")
    cfg = tmp_path / "cfg.yaml"
    cfg.write_text("root_label: From file\nlog_level: DEBUG\nunknown_key: 1\n", encoding="utf-8")
    s = load_settings(str(cfg))
    assert s.root_label == "From file"
    assert s.log_level == "DEBUG"
    assert not hasattr(s, "unknown_key")
