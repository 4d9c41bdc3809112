"""
Application layer: Use cases and workflow orchestration.

This layer coordinates between domain logic and infrastructure,
implementing the editing session and batch regeneration workflows.
"""

from application.editing import (
    CatalogOption,
    CatalogSelected,
    FieldChangeCoordinator,
    FreeText,
    initial_editor_state,
    transition,
)
from application.engine import FieldState, TaxonomyEngine
from application.generation import generate_taxonomy_fields
from application.preview import GroupPreview, PreviewAggregator
from application.regenerate import (
    RegenerationError,
    attach_and_serialize_taxonomies,
    open_record_session,
    regenerate_record,
    regenerate_table,
)

__all__ = [
    # Main workflows
    "TaxonomyEngine",
    "FieldState",
    "open_record_session",
    "regenerate_record",
    "regenerate_table",
    "RegenerationError",
    "attach_and_serialize_taxonomies",
    # Previews
    "PreviewAggregator",
    "GroupPreview",
    "generate_taxonomy_fields",
    # Editing
    "FieldChangeCoordinator",
    "CatalogOption",
    "FreeText",
    "CatalogSelected",
    "initial_editor_state",
    "transition",
]
