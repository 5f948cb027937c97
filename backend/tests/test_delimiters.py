import json

from llm_sanitizer.domain.delimiters import (
    StructuralContext,
    StructureIndex,
    apply_corrections,
    classify_position,
    find_closer_corrections,
    unclosed_openers,
)


class TestClassifyPosition:
    def test_object(self):
        text = '{"a": 1, '
        assert classify_position(text, len(text)) == StructuralContext.OBJECT

    def test_array_of_objects(self):
        text = '[{"a": 1}, '
        assert classify_position(text, len(text)) == StructuralContext.ARRAY_OF_OBJECTS

    def test_array_of_scalars(self):
        text = "[1, 2, "
        assert classify_position(text, len(text)) == StructuralContext.ARRAY_OF_SCALARS

    def test_top_level(self):
        assert classify_position("abc", 3) == StructuralContext.TOP_LEVEL

    def test_braces_inside_strings_are_ignored(self):
        text = '["{", '
        assert classify_position(text, len(text)) == StructuralContext.ARRAY_OF_SCALARS

    def test_closed_nested_array_is_skipped(self):
        text = '{"a": [1, 2], '
        assert classify_position(text, len(text)) == StructuralContext.OBJECT

    def test_index_matches_backward_scan_at_every_offset(self):
        text = '{"a": [1, {"b": "]}\\"["}, [2, 3]], "c": ] "d": [ {"e": 1} 4 } x'
        index = StructureIndex(text)
        for position in range(len(text) + 2):
            assert index.classify(position) == classify_position(text, position), position

    def test_index_on_empty_text(self):
        assert StructureIndex("").classify(5) == StructuralContext.TOP_LEVEL


def test_mismatched_closer_is_replaced_with_expected() -> None:
    text = '{"a": [1,2,3}'
    corrections = find_closer_corrections(text)
    assert len(corrections) == 1
    assert corrections[0].position == 12
    assert corrections[0].replacement == "]"
    assert apply_corrections(text, corrections) == '{"a": [1,2,3]'


def test_unclosed_object_inside_array_closes_both() -> None:
    text = '{"items": [{"a": 1], "other": 2}'
    repaired = apply_corrections(text, find_closer_corrections(text))
    assert json.loads(repaired) == {"items": [{"a": 1}], "other": 2}


def test_balanced_text_needs_no_corrections() -> None:
    assert find_closer_corrections('{"a": [1, {"b": "]"}]}') == []


def test_unclosed_openers_closers_innermost_first() -> None:
    state = unclosed_openers('{"a": [1, {"b": 2')
    assert state.stack == ["{", "[", "{"]
    assert state.closers == "}]}"
    assert state.in_string is False
