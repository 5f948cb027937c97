import pytest

from llm_sanitizer.domain.property_names import (
    DEFAULT_TABLES,
    KNOWN_PROPERTIES,
    PROPERTY_NAME_MAPPINGS,
    PropertyNameTables,
)


def test_tables_are_read_only() -> None:
    with pytest.raises(TypeError):
        PROPERTY_NAME_MAPPINGS["x"] = "y"  # type: ignore[index]


def test_no_mapping_rewrites_a_known_property() -> None:
    assert not set(PROPERTY_NAME_MAPPINGS) & KNOWN_PROPERTIES


class TestDefaultTables:
    def test_truncated_name(self):
        assert DEFAULT_TABLES.canonical_for_truncation("eferences") == "references"
        assert DEFAULT_TABLES.canonical_for_truncation("name") is None
        assert DEFAULT_TABLES.canonical_for_truncation("unrelated") is None

    def test_typo_table(self):
        assert DEFAULT_TABLES.canonical_for_typo("cyclometicComplexity") == "cyclomaticComplexity"

    def test_trailing_underscore(self):
        assert DEFAULT_TABLES.canonical_for_typo("type_") == "type"
        assert DEFAULT_TABLES.canonical_for_typo("type") is None

    def test_leading_underscore_is_kept(self):
        assert DEFAULT_TABLES.canonical_for_typo("_private") is None
        assert DEFAULT_TABLES.canonical_for_typo("__typename") is None


def test_custom_tables() -> None:
    tables = PropertyNameTables.from_dicts(
        mappings={"ttl": "title"},
        known_properties={"title"},
        numeric_properties={"pageCount"},
    )
    assert tables.canonical_for_truncation("ttl") == "title"
    assert tables.canonical_for_truncation("eferences") is None
    assert "pagecount" in tables.numeric_properties
