from llm_sanitizer.domain.span import extract_span, strip_code_fences


def test_prose_around_object_is_dropped() -> None:
    span = extract_span('Here is the JSON: {"a": 1} thanks')
    assert span is not None
    assert span.content == '{"a": 1}'
    assert span.truncated is False


def test_array_inside_prose() -> None:
    span = extract_span("The data: [1, 2, 3] is ready")
    assert span is not None
    assert span.content == "[1, 2, 3]"


def test_no_opener_returns_none() -> None:
    assert extract_span("no json here") is None
    assert extract_span("") is None


def test_code_brace_is_not_a_candidate() -> None:
    span = extract_span('if (x) else{ y } then {"a": 1}')
    assert span is not None
    assert span.content == '{"a": 1}'


def test_unbalanced_leading_candidate_runs_to_end() -> None:
    span = extract_span('{"a": [1, 2')
    assert span is not None
    assert span.truncated is True
    assert span.content == '{"a": [1, 2'


def test_fenced_payload() -> None:
    span = extract_span('```json\n{"a": 1}\n```')
    assert span is not None
    assert span.content == '{"a": 1}'


def test_trailing_commentary_after_balanced_object() -> None:
    span = extract_span('{"a": 1}\nPlease note {this} was generated.')
    assert span is not None
    assert span.content == '{"a": 1}'


def test_strip_code_fences_keeps_backticks_inside_payload() -> None:
    text = '{"code": "```py```"}'
    assert strip_code_fences(text) == text


def test_bracketed_note_before_object_is_skipped() -> None:
    span = extract_span('Note [1]: see below {"a": 1}')
    assert span is not None
    assert span.content == '{"a": 1}'


def test_array_kept_when_following_object_does_not_parse() -> None:
    span = extract_span('Values: [1, 2, 3] and {broken: 1}')
    assert span is not None
    assert span.content == "[1, 2, 3]"


def test_leading_array_kept_before_object() -> None:
    span = extract_span('[{"a": 1}] {"b": 2, "c": 3}')
    assert span is not None
    assert span.content == '[{"a": 1}]'
