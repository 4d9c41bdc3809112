"""Format projection of raw values through the reference catalog."""

import logging

from domain.catalog.cache import ReferenceCache
from domain.resolution.values import RawValue
from domain.schemas import CustomOverride, ReferenceEntity, TaxonomyFormat

logger = logging.getLogger(__name__)


def project_entity(entity: ReferenceEntity, override: CustomOverride | None, fmt: TaxonomyFormat) -> str:
    """
    Pick the textual projection of an entity for a catalog format.

    Args:
        entity: Cached reference entity
        override: Client override for the entity, if any
        fmt: Requested format (``open`` falls back to the French display name)

    Returns:
        Projected text (may be empty when the entity itself has empty fields)
    """
    if fmt is TaxonomyFormat.CODE:
        return entity.code
    if fmt is TaxonomyFormat.DISPLAY_FR:
        return entity.display_name_fr
    if fmt is TaxonomyFormat.DISPLAY_EN:
        return entity.display_name_en or entity.display_name_fr
    if fmt is TaxonomyFormat.UTM:
        return entity.default_utm or entity.code
    if fmt is TaxonomyFormat.CUSTOM_UTM:
        custom = override.custom_utm if override else None
        return custom or entity.default_utm or entity.code
    if fmt is TaxonomyFormat.CUSTOM_CODE:
        custom = override.custom_code if override else None
        return custom or entity.code
    return entity.display_name_fr


class FormatProjector:
    """Projects raw values or reference ids into a requested format."""

    def __init__(self, cache: ReferenceCache):
        self.cache = cache

    def project(self, value: str | RawValue, fmt: TaxonomyFormat) -> str:
        """
        Project a value. Never raises and never blocks.

        A plain string is taken as a reference id. While the entity is not
        cached the id itself is returned as an interim value and a fetch is
        scheduled; once the entity is known to be absent the id stays.
        """
        raw = value if isinstance(value, RawValue) else None
        fallback = raw.text if raw is not None else str(value)

        if fmt is TaxonomyFormat.OPEN:
            if raw is not None:
                return raw.open_text or raw.text
            return fallback

        ref_id = raw.lookup_id if raw is not None else fallback
        if not ref_id:
            return fallback

        try:
            entity = self.cache.get(ref_id)
            if entity is None:
                return ref_id
            return project_entity(entity, self.cache.override_for(ref_id), fmt)
        except Exception:
            logger.exception("Projection failed for %s as %s; using raw text", ref_id, fmt.value)
            return ref_id
