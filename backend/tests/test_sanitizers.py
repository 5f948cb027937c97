import json
import time

from llm_sanitizer.sanitizers import CATALOG, get_step
from llm_sanitizer.sanitizers.delimiter_repair import (
    add_missing_commas,
    complete_truncated_structures,
    fix_mismatched_delimiters,
    remove_trailing_commas,
)
from llm_sanitizer.sanitizers.noise import (
    remove_binary_corruption_markers,
    remove_llm_commentary,
    remove_truncation_markers,
)
from llm_sanitizer.sanitizers.normalization import (
    normalize_curly_quotes,
    remove_control_characters,
    remove_thought_markers,
    strip_code_fences,
    trim_whitespace,
)
from llm_sanitizer.sanitizers.properties import (
    add_missing_property_colons,
    fix_property_name_typos,
    fix_truncated_property_names,
    merge_concatenated_property_names,
    quote_property_names,
)
from llm_sanitizer.sanitizers.structure import (
    fill_dangling_properties,
    insert_missing_object_openers,
    reconstruct_array_element_wrappers,
)
from llm_sanitizer.sanitizers.values import (
    fix_invalid_escapes,
    merge_concatenated_values,
    quote_unquoted_values,
    remove_stray_text,
    replace_nonstandard_literals,
)


def test_catalog_order_ends_with_delimiter_repair() -> None:
    names = [step.name for step in CATALOG]
    assert len(names) == len(set(names))
    assert names[0] == "trim_whitespace"
    assert names[-4:] == [
        "add_missing_commas",
        "remove_trailing_commas",
        "fix_mismatched_delimiters",
        "complete_truncated_structures",
    ]
    assert get_step("quote_property_names").fixpoint is True
    assert get_step("remove_trailing_commas").fixpoint is False


class TestNormalization:
    def test_trim_whitespace(self):
        result = trim_whitespace("  {}  \n")
        assert result.changed is True
        assert result.content == "{}"
        assert trim_whitespace("{}").changed is False

    def test_strip_code_fences(self):
        result = strip_code_fences('```json\n{"a": 1}\n```')
        assert result.content == '{"a": 1}'

    def test_remove_thought_markers(self):
        result = remove_thought_markers('<ctrl94>thought\n{"a": 1}')
        assert result.content == '{"a": 1}'

    def test_curly_quotes_as_delimiters(self):
        result = normalize_curly_quotes("{\u201cname\u201d: \u201cFoo\u201d}")
        assert result.changed is True
        assert json.loads(result.content) == {"name": "Foo"}

    def test_curly_quotes_inside_ascii_string_are_kept(self):
        text = '{"quote": "he said \u201chi\u201d"}'
        assert normalize_curly_quotes(text).changed is False

    def test_curly_quote_before_colon_inside_ascii_string(self):
        text = '{"msg": "say \u201chi\u201d: now", "b": 1}'
        assert normalize_curly_quotes(text).changed is False

    def test_control_characters_outside_strings_are_dropped(self):
        result = remove_control_characters('{\x00"a": 1\u200b}')
        assert result.content == '{"a": 1}'

    def test_raw_newline_inside_string_is_escaped(self):
        result = remove_control_characters('{"a": "line1\nline2"}')
        assert result.content == '{"a": "line1\\nline2"}'
        assert json.loads(result.content) == {"a": "line1\nline2"}


class TestStructuralNoise:
    def test_binary_marker_removed(self):
        result = remove_binary_corruption_markers('{"a": 1,<x_bin_12> "b": 2}')
        assert result.content == '{"a": 1, "b": 2}'

    def test_binary_marker_inside_string_untouched(self):
        assert remove_binary_corruption_markers('{"a": "<x_bin_1>"}').changed is False

    def test_truncation_marker_line_removed(self):
        result = remove_truncation_markers("[\n  1,\n  2,\n  ...\n]")
        assert "..." not in result.content
        assert result.changed is True

    def test_extra_commentary_line_removed(self):
        result = remove_llm_commentary('{"a": 1,\nextra_thoughts: I think so\n"b": 2}')
        assert result.content == '{"a": 1,\n"b": 2}'


class TestPropertyNames:
    def test_bare_names_quoted(self):
        result = quote_property_names('{name: "Foo", count: 2}')
        assert result.content == '{"name": "Foo", "count": 2}'

    def test_single_quoted_name(self):
        assert quote_property_names("{'name': 1}").content == '{"name": 1}'

    def test_missing_opening_quote(self):
        assert quote_property_names('{"a": 1, b": 2}').content == '{"a": 1, "b": 2}'

    def test_missing_closing_quote(self):
        assert quote_property_names('{"name: "Foo"}').content == '{"name": "Foo"}'

    def test_concatenated_name(self):
        result = merge_concatenated_property_names('{"first" + "Name": 1}')
        assert result.content == '{"firstName": 1}'

    def test_truncated_name_from_table(self):
        result = fix_truncated_property_names('{"eferences": []}')
        assert result.content == '{"references": []}'
        assert fix_truncated_property_names('{"foo": 1}').changed is False

    def test_trailing_underscore_typo(self):
        result = fix_property_name_typos('{"type_": "x", "name": "y"}')
        assert result.content == '{"type": "x", "name": "y"}'

    def test_missing_colon(self):
        assert add_missing_property_colons('{"type" "Widget"}').content == '{"type": "Widget"}'

    def test_missing_colon_not_applied_in_arrays(self):
        assert add_missing_property_colons('["a" "b"]').changed is False


class TestValues:
    def test_nonstandard_literals(self):
        result = replace_nonstandard_literals('{"a": undefined, "b": NaN, "c": True, "d": None}')
        assert json.loads(result.content) == {"a": None, "b": None, "c": True, "d": None}

    def test_literal_inside_string_untouched(self):
        assert replace_nonstandard_literals('{"a": "NaN"}').changed is False

    def test_string_concatenation(self):
        assert merge_concatenated_values('{"a": "x" + "y"}').content == '{"a": "xy"}'

    def test_identifier_in_concatenation_dropped(self):
        assert merge_concatenated_values('{"a": "x" + someVar}').content == '{"a": "x"}'

    def test_unquoted_value(self):
        result = quote_unquoted_values('{"status": in progress, "n": 1}')
        assert result.content == '{"status": "in progress", "n": 1}'
        assert quote_unquoted_values('{"a": true}').changed is False

    def test_stray_text_before_property(self):
        assert remove_stray_text('{abc"name": "x"}').content == '{"name": "x"}'

    def test_stray_text_after_value(self):
        assert remove_stray_text('{"name": "x"junk, "b": 1}').content == '{"name": "x", "b": 1}'

    def test_corrupted_colon(self):
        assert remove_stray_text('{"name":g": "x"}').content == '{"name": "x"}'

    def test_encoded_number_marker(self):
        assert remove_stray_text('{"n":_CODE`4}').content == '{"n": 4}'

    def test_invalid_escape_doubled(self):
        result = fix_invalid_escapes('{"a": "x\\qy"}')
        assert result.content == '{"a": "x\\\\qy"}'
        assert json.loads(result.content) == {"a": "x\\qy"}

    def test_escaped_single_quote(self):
        assert fix_invalid_escapes('{"a": "it\\\'s"}').content == '{"a": "it\'s"}'

    def test_incomplete_unicode_escape(self):
        assert fix_invalid_escapes('{"a": "\\u12"}').content == '{"a": "\\\\u12"}'

    def test_valid_escapes_untouched(self):
        assert fix_invalid_escapes('{"a": "tab\\t \\u00e9 \\" \\\\"}').changed is False


class TestStructure:
    def test_missing_object_opener(self):
        result = insert_missing_object_openers('[{"a": 1}, "b": 2}]')
        assert result.content == '[{"a": 1}, {"b": 2}]'

    def test_missing_object_opener_with_missing_quote(self):
        result = insert_missing_object_openers('[{"a": 1}, b": 2}]')
        assert result.content == '[{"a": 1}, {"b": 2}]'

    def test_array_element_wrapper(self):
        result = reconstruct_array_element_wrappers('[{"name": "A"}, ab"Widget", "kind": "x"}]')
        assert json.loads(result.content) == [{"name": "A"}, {"name": "Widget", "kind": "x"}]

    def test_dangling_property_name(self):
        result = fill_dangling_properties('{"a": 1, "name "}')
        assert result.content == '{"a": 1, "name": null}'

    def test_dangling_colon(self):
        result = fill_dangling_properties('{"a": 1, "b":}')
        assert result.content == '{"a": 1, "b": null}'

    def test_long_scalar_array_scans_in_linear_time(self):
        items = ", ".join(f'"t{i}"' for i in range(20000))
        text = '{"tags": [' + items + '], "x": 1}'
        started = time.perf_counter()
        result = fill_dangling_properties(text)
        assert time.perf_counter() - started < 5
        assert result.changed is False


class TestDelimiters:
    def test_comma_added_between_lines(self):
        result = add_missing_commas('{\n  "a": 1\n  "b": 2\n}')
        assert result.content == '{\n  "a": 1,\n  "b": 2\n}'

    def test_trailing_commas(self):
        result = remove_trailing_commas('{"a": [1, 2,], }')
        assert result.content == '{"a": [1, 2] }'

    def test_runs_of_trailing_commas(self):
        assert remove_trailing_commas('{"a": 1,,}').content == '{"a": 1}'
        assert remove_trailing_commas('[1, 2,,]').content == "[1, 2]"
        assert remove_trailing_commas('[1, 2, ,\n ]').content == "[1, 2 \n ]"

    def test_trailing_comma_inside_string_untouched(self):
        assert remove_trailing_commas('{"a": ",]"}').changed is False

    def test_mismatched_closer(self):
        assert fix_mismatched_delimiters('{"a": [1,2,3}').content == '{"a": [1,2,3]'

    def test_complete_closes_containers(self):
        assert complete_truncated_structures('{"a": [1, 2,').content == '{"a": [1, 2]}'

    def test_complete_closes_string(self):
        assert complete_truncated_structures('{"a": "b').content == '{"a": "b"}'

    def test_complete_fills_dangling_value(self):
        assert complete_truncated_structures('{"a": 1, "b":').content == '{"a": 1, "b": null}'

    def test_complete_fills_dangling_key(self):
        assert complete_truncated_structures('{"a": 1, "na').content == '{"a": 1, "na": null}'

    def test_complete_leaves_balanced_text(self):
        assert complete_truncated_structures('{"a": 1}').changed is False
