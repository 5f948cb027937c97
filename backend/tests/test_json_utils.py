import pytest
from pydantic import BaseModel

from llm_sanitizer.core.errors import (
    JsonSanitizationError,
    NoJsonContentFound,
    SchemaValidationFailed,
    UnparseableAfterRepair,
)
from llm_sanitizer.core.json_utils import (
    parse_and_validate,
    parse_llm_json,
    parse_llm_json_object,
    sanitize_llm_json,
)


class Widget(BaseModel):
    name: str
    count: int


def test_parse_llm_json_returns_data() -> None:
    assert parse_llm_json('Sure! {"name": "Foo",}') == {"name": "Foo"}


def test_sanitize_reports_steps() -> None:
    result = sanitize_llm_json('{"name": "Foo",}')
    assert result.changed is True
    assert result.original_text == '{"name": "Foo",}'


def test_unparseable_raises_with_steps() -> None:
    with pytest.raises(UnparseableAfterRepair) as exc_info:
        parse_llm_json('{"a": 1 2 3}')
    assert exc_info.value.code == "unparseable_after_repair"
    assert exc_info.value.parse_error


def test_no_json_content() -> None:
    with pytest.raises(NoJsonContentFound):
        parse_llm_json("nothing to see")


def test_object_required() -> None:
    assert parse_llm_json_object('{"a": 1}') == {"a": 1}
    with pytest.raises(UnparseableAfterRepair):
        parse_llm_json_object("[1, 2]")


class TestParseAndValidate:
    def test_valid(self):
        widget = parse_and_validate('```json\n{"name": "w", "count": "3",}\n```', Widget)
        assert widget == Widget(name="w", count=3)

    def test_invalid(self):
        with pytest.raises(SchemaValidationFailed) as exc_info:
            parse_and_validate('{"name": "w"}', Widget)
        assert any(issue.startswith("count") for issue in exc_info.value.issues)

    def test_errors_share_a_base(self):
        with pytest.raises(JsonSanitizationError):
            parse_and_validate("no payload", Widget)
