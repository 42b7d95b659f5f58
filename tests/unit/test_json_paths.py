from services.recipe_extraction.json_paths import (
    find_first_key,
    first_str,
    get_at_path,
    get_str_at_path,
    loads_or_none,
)

PAYLOAD = {"a": {"b": [{"c": " text "}, {"c": 3}]}, "d": ""}


def test_get_at_path_walks_dicts_and_lists():
    assert get_at_path(PAYLOAD, ["a", "b", 1, "c"]) == 3
    assert get_at_path(PAYLOAD, ["a", "b", -1, "c"]) == 3


def test_get_at_path_returns_none_for_wrong_shapes():
    assert get_at_path(PAYLOAD, ["a", "b", 5]) is None
    assert get_at_path(PAYLOAD, ["a", "b", "c"]) is None
    assert get_at_path(PAYLOAD, ["a", 0]) is None
    assert get_at_path(None, ["a"]) is None


def test_get_str_at_path_only_returns_non_blank_strings():
    assert get_str_at_path(PAYLOAD, ["a", "b", 0, "c"]) == "text"
    assert get_str_at_path(PAYLOAD, ["a", "b", 1, "c"]) is None
    assert get_str_at_path(PAYLOAD, ["d"]) is None


def test_first_str_tries_paths_in_order():
    assert first_str(PAYLOAD, ["d"], ["missing"], ["a", "b", 0, "c"]) == "text"


def test_find_first_key_searches_depth_first():
    assert find_first_key({"x": [{"y": {"desc": "deep"}}], "desc": ""}, "desc") == "deep"


def test_loads_or_none():
    assert loads_or_none('{"a": 1}') == {"a": 1}
    assert loads_or_none("{broken") is None
    assert loads_or_none(None) is None
