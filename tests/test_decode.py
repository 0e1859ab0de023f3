"""Tests for summarizer response decoding."""

from cortex.memory.decode import decode_object, extract_json, is_string_list, preview


def test_extract_plain_json():
    result = extract_json('{"a": [1, 2]}')
    assert result.success
    assert result.value == {"a": [1, 2]}


def test_extract_fenced_json():
    text = 'Here you go:\n```json\n{"untested_hypotheses": []}\n```\nDone.'
    result = extract_json(text)
    assert result.success
    assert result.value == {"untested_hypotheses": []}


def test_extract_fence_without_language():
    result = extract_json('```\n{"x": 1}\n```')
    assert result.success
    assert result.value == {"x": 1}


def test_extract_object_surrounded_by_prose():
    result = extract_json('Sure! {"x": {"y": 2}} Hope this helps.')
    assert result.success
    assert result.value == {"x": {"y": 2}}


def test_extract_empty_is_invalid():
    assert not extract_json("").success
    assert not extract_json("   \n").success


def test_extract_garbage_is_invalid():
    result = extract_json("I could not produce JSON this time.")
    assert not result.success
    assert result.error


def test_decode_object_rejects_arrays():
    result = decode_object('["a", "b"]')
    assert not result.success
    assert "object" in result.error


def test_is_string_list():
    assert is_string_list([])
    assert is_string_list(["a", "b"])
    assert not is_string_list("not an array")
    assert not is_string_list(["a", 1])
    assert not is_string_list(None)


def test_preview_truncates():
    assert preview("short") == "short"
    assert preview("x" * 600).endswith("...")
    assert len(preview("x" * 600)) == 503
    assert preview(None) == ""
