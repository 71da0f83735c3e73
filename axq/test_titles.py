from axq.titles import EXACT, MatchOptions, normalize_title, title_matches


def test_normalize_collapses_whitespace():
    assert normalize_title("  Save   As \t Copy ") == "Save As Copy"


def test_normalize_options():
    opts = MatchOptions(case_insensitive=True, normalize_ellipsis=True)
    assert normalize_title("Settings…", opts) == "settings..."
    assert normalize_title("Settings…") == "Settings…"


def test_exact_by_default():
    assert title_matches("File", "File")
    assert not title_matches("File", "file")
    assert not title_matches("New Window", "New")


def test_contains_case_insensitive_ellipsis():
    opts = MatchOptions(contains=True, case_insensitive=True, normalize_ellipsis=True)
    assert title_matches("Settings…", "settings...", opts)
    assert title_matches("Battery Settings…", "SETTINGS", opts)
    assert not title_matches("Settings…", "settings...", MatchOptions(contains=True))


def test_both_sides_normalized():
    assert title_matches("Open  Recent", " Open Recent ", EXACT)
