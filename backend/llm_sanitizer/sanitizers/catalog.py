from __future__ import annotations

from llm_sanitizer.sanitizers.base import SanitizationStep, StepGroup
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


# Order matters: normalization first, delimiter repair last.
CATALOG: tuple[SanitizationStep, ...] = (
    SanitizationStep("trim_whitespace", StepGroup.NORMALIZATION, trim_whitespace),
    SanitizationStep("strip_code_fences", StepGroup.NORMALIZATION, strip_code_fences),
    SanitizationStep("remove_thought_markers", StepGroup.NORMALIZATION, remove_thought_markers),
    SanitizationStep("normalize_curly_quotes", StepGroup.NORMALIZATION, normalize_curly_quotes),
    SanitizationStep("remove_control_characters", StepGroup.NORMALIZATION, remove_control_characters),
    SanitizationStep("remove_binary_corruption_markers", StepGroup.STRUCTURAL_NOISE, remove_binary_corruption_markers),
    SanitizationStep("remove_truncation_markers", StepGroup.STRUCTURAL_NOISE, remove_truncation_markers),
    SanitizationStep("remove_llm_commentary", StepGroup.STRUCTURAL_NOISE, remove_llm_commentary),
    SanitizationStep("quote_property_names", StepGroup.PROPERTY_NAMES, quote_property_names, fixpoint=True),
    SanitizationStep(
        "merge_concatenated_property_names",
        StepGroup.PROPERTY_NAMES,
        merge_concatenated_property_names,
        fixpoint=True,
    ),
    SanitizationStep(
        "fix_truncated_property_names",
        StepGroup.PROPERTY_NAMES,
        fix_truncated_property_names,
        fixpoint=True,
    ),
    SanitizationStep("fix_property_name_typos", StepGroup.PROPERTY_NAMES, fix_property_name_typos, fixpoint=True),
    SanitizationStep(
        "add_missing_property_colons",
        StepGroup.PROPERTY_NAMES,
        add_missing_property_colons,
        fixpoint=True,
    ),
    SanitizationStep("replace_nonstandard_literals", StepGroup.VALUES, replace_nonstandard_literals),
    SanitizationStep("merge_concatenated_values", StepGroup.VALUES, merge_concatenated_values, fixpoint=True),
    SanitizationStep("quote_unquoted_values", StepGroup.VALUES, quote_unquoted_values),
    SanitizationStep("remove_stray_text", StepGroup.VALUES, remove_stray_text, fixpoint=True),
    SanitizationStep("fix_invalid_escapes", StepGroup.VALUES, fix_invalid_escapes),
    SanitizationStep(
        "insert_missing_object_openers",
        StepGroup.STRUCTURAL,
        insert_missing_object_openers,
        fixpoint=True,
    ),
    SanitizationStep(
        "reconstruct_array_element_wrappers",
        StepGroup.STRUCTURAL,
        reconstruct_array_element_wrappers,
    ),
    SanitizationStep("fill_dangling_properties", StepGroup.STRUCTURAL, fill_dangling_properties),
    SanitizationStep("add_missing_commas", StepGroup.DELIMITERS, add_missing_commas),
    SanitizationStep("remove_trailing_commas", StepGroup.DELIMITERS, remove_trailing_commas),
    SanitizationStep("fix_mismatched_delimiters", StepGroup.DELIMITERS, fix_mismatched_delimiters),
    SanitizationStep("complete_truncated_structures", StepGroup.DELIMITERS, complete_truncated_structures),
)


def get_step(name: str) -> SanitizationStep:
    for step in CATALOG:
        if step.name == name:
            return step
    raise KeyError(name)
