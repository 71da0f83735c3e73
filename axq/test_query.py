import pytest

from axq.errors import InvalidPredicate
from axq.memory import MemoryNode
from axq.query import (
    Predicate, ancestor_with_role, find_elements, find_outline, find_window_root,
    match_element, outline_rows, wait_for,
)
from axq.titles import MatchOptions


def paths(matches):
    return [m.path for m in matches]


def test_find_is_preorder(bridge, finder):
    matches = find_elements(bridge, finder, Predicate(role="AXButton"))
    assert paths(matches) == [[0, 0, 0], [0, 1, 0]]
    assert matches[0].address(42) == "ax://42/0.0.0"


def test_find_includes_root(bridge, finder):
    matches = find_elements(bridge, finder, Predicate(role="Application"))
    assert paths(matches) == [[0]]
    assert matches[0].node is finder


def test_empty_predicate_matches_everything(bridge, finder):
    window = finder.children[0].children[1]
    matches = find_elements(bridge, window, Predicate(), root_path=[0, 0, 1])
    assert paths(matches) == [[0, 0, 1], [0, 0, 1, 0]]


def test_title_and_identifier_are_exact(bridge, finder):
    assert find_elements(bridge, finder, Predicate(title="ok")) == []
    assert paths(find_elements(bridge, finder, Predicate(identifier="ok-button"))) == [[0, 0, 0]]
    # description stands in for a missing title
    assert paths(find_elements(bridge, finder, Predicate(title="Name"))) == [[0, 0, 2]]


def test_text_is_case_insensitive_substring(bridge, finder):
    assert paths(find_elements(bridge, finder, Predicate(text="DRAF"))) == [[0, 0, 2]]
    assert paths(find_elements(bridge, finder, Predicate(text="hello"))) == [[0, 0, 1, 0]]


def test_text_ignores_control_titles(bridge, finder):
    # "Remember" is the AXTitle of a checkbox, not display text
    assert find_elements(bridge, finder, Predicate(text="Remember")) == []


def test_text_through_descendants(bridge, finder):
    pred = Predicate(role="AXGroup", text="hello world", text_descendants=True)
    assert paths(find_elements(bridge, finder, pred)) == [[0, 0, 1]]
    assert find_elements(bridge, finder, Predicate(role="AXGroup", text="hello world")) == []


def test_descendants_without_text_is_invalid():
    with pytest.raises(InvalidPredicate):
        Predicate(role="AXGroup", text_descendants=True).validate()


def test_text_with_match_options(bridge):
    node = MemoryNode("AXStaticText", value="Export  as PDF…")
    opts = MatchOptions(contains=True, case_insensitive=True, normalize_ellipsis=True)
    assert match_element(bridge, node, Predicate(text="as pdf..."), match_options=opts)
    assert not match_element(bridge, node, Predicate(text="as pdf..."))


def test_ancestor_with_role(bridge, finder):
    window = ancestor_with_role(bridge, [0, 0, 1, 0], finder, "Window")
    assert window is finder.children[0]
    group = ancestor_with_role(bridge, [0, 0, 1, 0], finder, "AXGroup")
    assert group is finder.children[0].children[1]
    # nearest-first: the target itself counts
    text = ancestor_with_role(bridge, [0, 0, 1, 0], finder, "AXStaticText")
    assert text is finder.children[0].children[1].children[0]
    assert ancestor_with_role(bridge, [0, 0, 1, 0], finder, "AXSheet") is None


def test_ancestor_stops_at_bad_index(bridge, finder):
    assert ancestor_with_role(bridge, [0, 0, 9, 0], finder, "AXWindow") is finder.children[0]


def test_find_window_root(bridge, finder):
    window, path = find_window_root(bridge, finder, "downl")
    assert window is finder.children[1]
    assert path == [0, 1]
    assert find_window_root(bridge, finder, "Trash") is None


def test_outline_rows(bridge, finder):
    outline = find_outline(bridge, finder)
    assert outline is finder.children[0].children[4]
    assert find_outline(bridge, finder, "side") is outline
    assert find_outline(bridge, finder, "Inspector") is None
    assert len(outline_rows(bridge, outline)) == 2


class FakeClock:
    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


def test_wait_for_appears():
    clock = FakeClock()
    results = iter([False, False, True])
    assert wait_for(lambda: next(results), timeout=5, clock=clock, sleep=clock.sleep)
    assert clock.sleeps == [0.2, 0.2]


def test_wait_for_gone():
    clock = FakeClock()
    results = iter([True, False])
    assert wait_for(lambda: next(results), gone=True, timeout=5, clock=clock, sleep=clock.sleep)


def test_wait_for_times_out():
    clock = FakeClock()
    assert not wait_for(lambda: False, timeout=1, clock=clock, sleep=clock.sleep)
    assert clock.now >= 1


def test_wait_for_probes_once_with_zero_timeout():
    clock = FakeClock()
    calls = []

    def probe():
        calls.append(1)
        return True

    assert wait_for(probe, timeout=0, clock=clock, sleep=clock.sleep)
    assert calls == [1]
