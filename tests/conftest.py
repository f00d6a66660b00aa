import sys
from pathlib import Path

import pytest

# Allow `import xbelmarks` without installing the package.
ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

SAMPLE_XBEL = """<?xml version="1.0"?>
<xbel version="1.0">
  <info><metadata><default_folder>yes</default_folder></metadata></info>
  <title>My bookmarks</title>
  <info><metadata><time_visited>10</time_visited><time_added>10</time_added></metadata></info>
  <folder folded="no">
    <title>News</title>
    <info><metadata><time_visited>20</time_visited><time_added>21</time_added></metadata></info>
    <bookmark href="http://news.example/" favicon="fav/news.ico" thumbnail="thumb/news.png">
      <title>Daily</title>
      <info><metadata><time_visited>30</time_visited><time_added>31</time_added><visit_count>4</visit_count></metadata></info>
    </bookmark>
    <folder folded="yes">
      <title>Sport</title>
      <info><metadata><time_visited>0</time_visited><time_added>0</time_added></metadata></info>
      <bookmark href="http://sport.example/scores" favicon="" thumbnail="">
        <title>Scores</title>
        <info><metadata><time_visited>0</time_visited><time_added>0</time_added><visit_count>9</visit_count></metadata></info>
      </bookmark>
    </folder>
  </folder>
  <bookmark href="http://a.com/x" favicon="fav/a.ico" thumbnail="thumb/a.png">
    <title>Tom &amp; Jerry</title>
    <info><metadata><time_visited>5</time_visited><time_added>6</time_added><visit_count>2</visit_count></metadata></info>
  </bookmark>
  <bookmark href="http://operator.example/" favicon="" thumbnail="">
    <title>Operator</title>
    <info><metadata><time_visited>0</time_visited><time_added>0</time_added><visit_count>0</visit_count><operator_bookmark>1</operator_bookmark><deleted>0</deleted></metadata></info>
  </bookmark>
</xbel>
"""


@pytest.fixture
def home(tmp_path, monkeypatch):
    """A private $HOME with an empty ~/.bookmarks directory."""
    monkeypatch.setenv("HOME", str(tmp_path))
    for name in ("XBM_HOME", "XBM_BOOKMARKS_DIR", "XBM_BOOKMARKS_FILE", "XBM_LOCK_FILE"):
        monkeypatch.delenv(name, raising=False)
    (tmp_path / ".bookmarks").mkdir()
    return tmp_path


@pytest.fixture
def sample_file(home):
    p = home / ".bookmarks" / "MyBookmarks.xml"
    p.write_text(SAMPLE_XBEL, encoding="utf-8")
    return p
