"""Saved taxonomy fields for one placement or creatif."""

from collections.abc import Mapping
from typing import Any

from application.constants import generated_taxonomies_field, level_field
from domain.resolution.renderer import ValueOf, generate_level_string
from domain.schemas import ConsumerType, TaxonomyDefinition, TaxonomyGroup
from domain.taxonomy.parser import LEVEL_SEPARATOR


def generate_taxonomy_fields(
    definitions: Mapping[TaxonomyGroup, TaxonomyDefinition],
    consumer: ConsumerType,
    value_of: ValueOf,
) -> dict[str, Any]:
    """
    Build the record fields holding generated tag strings.

    For a placement this yields ``PL_Tag_1..4``, ``PL_Plateforme_1..4``,
    ``PL_MO_1..4`` and ``PL_Generated_Taxonomies``; a creatif gets the ``CR_``
    fields for levels 5 and 6. Levels without a template (or groups without a
    selected taxonomy) are saved as empty strings and left out of the joined
    string.

    Args:
        definitions: Selected taxonomy per group
        consumer: Consumer type
        value_of: Resolver callback (None for unresolved variables)

    Returns:
        Mapping of field name to value
    """
    fields: dict[str, Any] = {}
    generated: dict[str, str] = {}

    for group in TaxonomyGroup:
        definition = definitions.get(group)
        strings = []
        for number in consumer.levels:
            level = definition.level(number) if definition is not None else None
            text = generate_level_string(level.template, value_of) if level is not None else ""
            fields[level_field(consumer, group, number)] = text
            if text:
                strings.append(text)
        generated[group.value] = LEVEL_SEPARATOR.join(strings)

    fields[generated_taxonomies_field(consumer)] = generated
    return fields
