from shoot.core.json_utils import ParsedJson, UnparseableJson, dumps_text, extract_json, loads_text


def test_extract_json_object_inside_markdown() -> None:
    reply = 'Sure! Here it is:\n```json\n{"files": {"a.ts": "x"}, "changes": ["one"]}\n```\nEnjoy.'
    result = extract_json(reply)
    assert isinstance(result, ParsedJson)
    assert result.value["changes"] == ["one"]


def test_extract_json_is_greedy_first_to_last_delimiter() -> None:
    # Two separate objects make the greedy span invalid JSON.
    result = extract_json('{"a": 1} and then {"b": 2}')
    assert isinstance(result, UnparseableJson)
    assert result.reason == "invalid_json"


def test_extract_json_array_shape() -> None:
    result = extract_json('Ideas: [{"name": "x"}, {"name": "y"}] done', "array")
    assert isinstance(result, ParsedJson)
    assert [item["name"] for item in result.value] == ["x", "y"]


def test_extract_json_without_delimiters() -> None:
    result = extract_json("no json here")
    assert isinstance(result, UnparseableJson)
    assert result.reason == "no_json_found"
    assert result.raw_text == "no json here"


def test_extract_json_strips_control_characters() -> None:
    result = extract_json('\ufeff{"a":\x01 1}')
    assert result == ParsedJson(value={"a": 1})


def test_loads_text_defaults() -> None:
    assert loads_text(None, default=[]) == []
    assert loads_text("", default={}) == {}
    assert loads_text("{broken", default="fallback") == "fallback"
    assert loads_text('{"x": 1}') == {"x": 1}
    assert dumps_text(None) is None
    assert dumps_text({"é": 1}) == '{"é": 1}'
