import pytest

from app.antigravity import raw_json


def test_member_spans():
    text = '{"a": 1, "b" : [1, {"c": 2}] ,"d":"x"}'

    spans = raw_json.member_spans(text, 0)

    assert {key: text[begin:end] for key, (begin, end) in spans.items()} == {
        "a": "1",
        "b": '[1, {"c": 2}]',
        "d": '"x"',
    }


def test_member_spans_nested_start():
    text = '{"outer": { "inner": true }}'
    start = raw_json.member_spans(text, 0)["outer"][0]

    spans = raw_json.member_spans(text, start)

    assert text[slice(*spans["inner"])] == "true"


def test_member_spans_empty_object():
    assert raw_json.member_spans("{ \n }", 0) == {}


def test_member_spans_escaped_keys():
    text = '{"a\\"b": 1, "\\u00e9": 2}'

    assert set(raw_json.member_spans(text, 0)) == {'a"b', "é"}


def test_member_spans_duplicate_keeps_last():
    text = '{"k": 1, "k": 22}'

    begin, end = raw_json.member_spans(text, 0)["k"]
    assert text[begin:end] == "22"


def test_member_spans_requires_object():
    with pytest.raises(ValueError):
        raw_json.member_spans("[1]", 0)


def test_skip_whitespace():
    assert raw_json.skip_whitespace("  \t\n{", 0) == 4
    assert raw_json.skip_whitespace("{", 0) == 0


def test_insert_member():
    assert raw_json.insert_member('{"a": 1}', 0, "b", "2", empty=False) == '{"b":2,"a": 1}'
    assert raw_json.insert_member("{}", 0, "b", "2", empty=True) == '{"b":2}'


def test_insert_array_item():
    assert raw_json.insert_array_item("[1]", 0, "0", empty=False) == "[0,1]"
    assert raw_json.insert_array_item("[ ]", 0, "0", empty=True) == "[0 ]"


def test_insert_array_item_requires_array():
    with pytest.raises(ValueError):
        raw_json.insert_array_item("{}", 0, "0", empty=True)


def test_replace_span():
    assert raw_json.replace_span('{"a": null}', (6, 10), "[]") == '{"a": []}'


def test_dump_is_compact():
    assert raw_json.dump({"text": "é", "n": [1, 2]}) == '{"text":"é","n":[1,2]}'
