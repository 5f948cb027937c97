"""Read-only property-name lookup tables.

The default tables target the source-summary schema (purpose, description,
parameters, publicFunctions, ...). Fragments that are also plausible real
keys (single letters, ``names``, ``total``) are left out so a valid key is
never rewritten. Callers with another schema pass their own
``PropertyNameTables`` to the pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Mapping


PROPERTY_NAME_MAPPINGS: Mapping[str, str] = MappingProxyType(
    {
        # truncated starts
        "eferences": "references",
        "ferences": "references",
        "refere": "references",
        "nam": "name",
        "alues": "codeSmells",
        "lues": "codeSmells",
        "integra": "integration",
        "integrat": "integration",
        "implemen": "implementation",
        "implem": "implementation",
        "impleme": "implementation",
        "implementa": "implementation",
        "implementat": "implementation",
        "implementati": "implementation",
        "implementatio": "implementation",
        "purpos": "purpose",
        "purpo": "purpose",
        "purp": "purpose",
        "descript": "description",
        "descr": "description",
        "descri": "description",
        "descrip": "description",
        "descripti": "description",
        "descriptio": "description",
        "parame": "parameters",
        "paramet": "parameters",
        "paramete": "parameters",
        "ameters": "parameters",
        "meters": "parameters",
        "eters": "parameters",
        "returnT": "returnType",
        "returnTy": "returnType",
        "returnTyp": "returnType",
        # truncated or shortened compound names
        "extraReferences": "externalReferences",
        "exterReferences": "externalReferences",
        "externReferences": "externalReferences",
        "externalRefs": "externalReferences",
        "alReferences": "externalReferences",
        "internReferences": "internalReferences",
        "internalRefs": "internalReferences",
        "ernalReferences": "internalReferences",
        "publMethods": "publicFunctions",
        "publicMeth": "publicFunctions",
        "publicMeths": "publicFunctions",
        "publFunctions": "publicFunctions",
        "publicFunc": "publicFunctions",
        "publicFuncs": "publicFunctions",
        "unctions": "publicFunctions",
        "nctions": "publicFunctions",
        "_publicConstants": "publicConstants",
        "publConstants": "publicConstants",
        "publicConst": "publicConstants",
        "publicConsts": "publicConstants",
        "nstants": "publicConstants",
        "integrationPt": "integrationPoints",
        "integrationPts": "integrationPoints",
        "integPoints": "integrationPoints",
        "egrationPoints": "integrationPoints",
        "grationPoints": "integrationPoints",
        "rationPoints": "integrationPoints",
        "ationPoints": "integrationPoints",
        "dbIntegration": "databaseIntegration",
        "databaseInteg": "databaseIntegration",
        "aseIntegration": "databaseIntegration",
        "seIntegration": "databaseIntegration",
        "QualityMetrics": "codeQualityMetrics",
    }
)

PROPERTY_TYPO_CORRECTIONS: Mapping[str, str] = MappingProxyType(
    {
        "cyclometicComplexity": "cyclomaticComplexity",
        "publicMethods": "publicFunctions",
        "nameprobably": "name",
        "namelikely": "name",
        "namemaybe": "name",
        "typeprobably": "type",
        "valueprobably": "value",
    }
)

KNOWN_PROPERTIES: frozenset[str] = frozenset(
    {
        "name",
        "purpose",
        "description",
        "parameters",
        "returnType",
        "cyclomaticComplexity",
        "linesOfCode",
        "codeSmells",
        "type",
        "value",
        "mechanism",
        "path",
        "method",
        "direction",
        "requestBody",
        "responseBody",
        "internalReferences",
        "externalReferences",
        "publicConstants",
        "publicFunctions",
        "integrationPoints",
        "databaseIntegration",
        "codeQualityMetrics",
    }
)


# Keys compared lowercased; string values under them are coerced to numbers.
NUMERIC_PROPERTIES: frozenset[str] = frozenset(
    {
        "cyclomaticcomplexity",
        "linesofcode",
        "totalfunctions",
        "averagecomplexity",
        "maxcomplexity",
        "averagefunctionlength",
    }
)


@dataclass(frozen=True, slots=True)
class PropertyNameTables:
    mappings: Mapping[str, str] = field(default_factory=lambda: PROPERTY_NAME_MAPPINGS)
    typo_corrections: Mapping[str, str] = field(default_factory=lambda: PROPERTY_TYPO_CORRECTIONS)
    known_properties: frozenset[str] = KNOWN_PROPERTIES
    numeric_properties: frozenset[str] = NUMERIC_PROPERTIES

    @classmethod
    def from_dicts(
        cls,
        mappings: Mapping[str, str] | None = None,
        typo_corrections: Mapping[str, str] | None = None,
        known_properties: set[str] | frozenset[str] | None = None,
        numeric_properties: set[str] | frozenset[str] | None = None,
    ) -> "PropertyNameTables":
        return cls(
            mappings=MappingProxyType(dict(mappings or {})),
            typo_corrections=MappingProxyType(dict(typo_corrections or {})),
            known_properties=frozenset(known_properties or ()),
            numeric_properties=frozenset(name.lower() for name in numeric_properties or ()),
        )

    def canonical_for_truncation(self, name: str) -> str | None:
        if name in self.known_properties:
            return None
        return self.mappings.get(name)

    def canonical_for_typo(self, name: str) -> str | None:
        if name in self.known_properties:
            return None
        fixed = self.typo_corrections.get(name)
        if fixed:
            return fixed
        if name.startswith("_"):
            return None
        stripped = name.rstrip("_")
        if stripped and stripped != name:
            return stripped
        return None


DEFAULT_TABLES = PropertyNameTables()
