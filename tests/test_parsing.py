from script_generator.parsing import extract_json, pick_list


def test_plain_object():
    assert extract_json('{"a": 1}') == {"a": 1}


def test_markdown_fence():
    raw = 'Here you go:\n```json\n{"hooks": [{"text": "x"}]}\n```\nEnjoy!'
    assert extract_json(raw) == {"hooks": [{"text": "x"}]}


def test_object_surrounded_by_prose():
    raw = 'بالتأكيد! إليك التحليل: {"pain_points": ["الوقت"]} أتمنى أن يفيدك'
    assert extract_json(raw) == {"pain_points": ["الوقت"]}


def test_trailing_commas_and_smart_quotes_are_repaired():
    assert extract_json('{"a": [1, 2,],}') == {"a": [1, 2]}
    assert extract_json("{“a”: “b”}") == {"a": "b"}


def test_bare_array_is_wrapped():
    assert extract_json('[{"text": "x"}]') == {"items": [{"text": "x"}]}


def test_garbage_returns_none():
    assert extract_json("لا يوجد JSON هنا") is None
    assert extract_json("") is None
    assert extract_json("   ") is None
    assert extract_json("{not: valid") is None
    assert extract_json("42") is None


def test_pick_list():
    assert pick_list({"hooks": [1, 2]}, "hooks") == [1, 2]
    assert pick_list({"items": [3]}, "hooks") == [3]
    assert pick_list({"hooks": "nope"}, "hooks") == []
    assert pick_list(None, "hooks") == []
