from pathlib import Path

from xbelmarks.model import SortOrder, SortType
from xbelmarks.prefs import SORT_KEY, PrefsStore, get_sort_type, get_sorting_order, set_sort_type


def test_get_int_defaults_when_missing(tmp_path: Path):
    prefs = PrefsStore(tmp_path / "prefs.yaml")
    assert prefs.get_int("anything") == 0
    assert prefs.get_int("anything", 5) == 5
    assert get_sort_type(prefs) == SortType.NAME_ASC


def test_sort_type_round_trip(tmp_path: Path):
    prefs = PrefsStore(tmp_path / "sub" / "prefs.yaml")
    assert set_sort_type(prefs, SortType.LASTVISIT_DSC)
    assert prefs.get_int(SORT_KEY) == 3
    assert get_sort_type(prefs) == SortType.LASTVISIT_DSC
    assert get_sorting_order(prefs) == SortOrder.DSC


def test_bad_values_fall_back(tmp_path: Path):
    p = tmp_path / "prefs.yaml"
    p.write_text(f'"{SORT_KEY}": 42\nother: nope\n', encoding="utf-8")
    prefs = PrefsStore(p)
    assert get_sort_type(prefs) == SortType.NAME_ASC
    assert prefs.get_int("other", 1) == 1

    p.write_text("- not\n- a mapping\n", encoding="utf-8")
    assert prefs.get_int(SORT_KEY, 2) == 2


def test_set_keeps_other_keys(tmp_path: Path):
    prefs = PrefsStore(tmp_path / "prefs.yaml")
    assert prefs.set_int("a", 1)
    assert prefs.set_int("b", 2)
    assert prefs.get_int("a") == 1 and prefs.get_int("b") == 2
    assert prefs.set_int("", 3) is False
