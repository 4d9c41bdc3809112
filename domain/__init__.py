"""
Domain layer: Business logic with minimal external dependencies.

Contains:
- schemas: Pydantic models for taxonomies, reference data and session values
- taxonomy: Token grammar, source classification and variable collection
- catalog: Reference entity cache with subscriptions
- resolution: Value resolution, format projection and level rendering
"""

from domain.schemas import (
    ConsumerType,
    CustomOverride,
    FieldSource,
    ManualValue,
    ReferenceEntity,
    ResolutionContext,
    TaxonomyDefinition,
    TaxonomyFormat,
    TaxonomyGroup,
    VariableToken,
)

__all__ = [
    "TaxonomyFormat",
    "FieldSource",
    "ConsumerType",
    "TaxonomyGroup",
    "TaxonomyDefinition",
    "ReferenceEntity",
    "CustomOverride",
    "ManualValue",
    "ResolutionContext",
    "VariableToken",
]
