"""
Taxonomy structure: token grammar, source classification and variable collection.

All functions in this module are pure (no file I/O).
"""

from domain.taxonomy.classifier import DEFAULT_SOURCE_RULES, SourceRules, classify_variable
from domain.taxonomy.loader import parse_source_rules, parse_taxonomy_definition
from domain.taxonomy.parser import (
    LEVEL_SEPARATOR,
    TokenOccurrence,
    find_malformed_tokens,
    join_levels,
    parse_tokens,
    placeholder,
    split_template,
)
from domain.taxonomy.variables import collect_variables, manual_variables

__all__ = [
    # Grammar
    "LEVEL_SEPARATOR",
    "TokenOccurrence",
    "parse_tokens",
    "split_template",
    "join_levels",
    "placeholder",
    "find_malformed_tokens",
    # Sources
    "SourceRules",
    "DEFAULT_SOURCE_RULES",
    "classify_variable",
    # Loading
    "parse_source_rules",
    "parse_taxonomy_definition",
    # Variables
    "collect_variables",
    "manual_variables",
]
