"""Editable variable collection across the selected taxonomies."""

import logging
from collections.abc import Mapping

from domain.schemas import ConsumerType, TaxonomyDefinition, TaxonomyGroup, VariableToken
from domain.taxonomy.classifier import DEFAULT_SOURCE_RULES, SourceRules
from domain.taxonomy.parser import find_malformed_tokens, parse_tokens

logger = logging.getLogger(__name__)


def collect_variables(
    definitions: Mapping[TaxonomyGroup, TaxonomyDefinition],
    consumer: ConsumerType,
    rules: SourceRules = DEFAULT_SOURCE_RULES,
) -> list[VariableToken]:
    """
    Collect the distinct variables visible to a consumer.

    Variables are deduplicated by name; every format a name is requested in is
    kept on the single entry, in order of first appearance. Groups are walked in
    ``TaxonomyGroup`` order and levels in ascending order, so the result is stable.

    Args:
        definitions: Selected taxonomy per group (missing groups are skipped)
        consumer: Consumer type deciding the visible level range
        rules: Source classification rules

    Returns:
        Ordered, deduplicated list of VariableToken
    """
    by_name: dict[str, VariableToken] = {}

    for group in TaxonomyGroup:
        definition = definitions.get(group)
        if definition is None:
            continue
        for level in definition.levels_for(consumer):
            for malformed in find_malformed_tokens(level.template):
                logger.warning(
                    "Taxonomy %s level %d: %s is not a valid token and is kept as literal text",
                    definition.id,
                    level.number,
                    malformed,
                )
            for token in parse_tokens(level.template):
                var = by_name.get(token.name)
                if var is None:
                    var = VariableToken(
                        name=token.name,
                        source=rules.classify(token.name),
                        scope=consumer,
                    )
                    by_name[token.name] = var
                if token.format not in var.formats:
                    var.formats.append(token.format)
                if level.number not in var.levels:
                    var.levels.append(level.number)
                if group not in var.groups:
                    var.groups.append(group)

    logger.debug(
        "Collected %d variables for %s consumer: %s",
        len(by_name),
        consumer.value,
        [(v.name, [f.value for f in v.formats]) for v in by_name.values()],
    )
    return list(by_name.values())


def manual_variables(variables: list[VariableToken]) -> list[VariableToken]:
    """Variables the user fills in (everything not inherited from campaign or tactique)."""
    return [v for v in variables if not v.inherited]
