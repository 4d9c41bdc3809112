import asyncio

import pytest

from domain.catalog.cache import ReferenceCache
from domain.resolution.projector import FormatProjector, project_entity
from domain.resolution.values import RawValue
from domain.schemas import CustomOverride, FieldSource, ReferenceEntity, TaxonomyFormat

FULL = ReferenceEntity(
    id="pubGoogle01",
    code="GOOG",
    display_name_fr="Google FR",
    display_name_en="Google EN",
    default_utm="google",
)
BARE = ReferenceEntity(id="bare01", code="B1")


@pytest.mark.parametrize(
    ("entity", "fmt", "expected"),
    [
        (FULL, TaxonomyFormat.CODE, "GOOG"),
        (FULL, TaxonomyFormat.DISPLAY_FR, "Google FR"),
        (FULL, TaxonomyFormat.DISPLAY_EN, "Google EN"),
        (FULL, TaxonomyFormat.UTM, "google"),
        (FULL, TaxonomyFormat.CUSTOM_UTM, "google"),
        (FULL, TaxonomyFormat.CUSTOM_CODE, "GOOG"),
        (BARE, TaxonomyFormat.DISPLAY_FR, "B1"),
        (BARE, TaxonomyFormat.DISPLAY_EN, "B1"),
        (BARE, TaxonomyFormat.UTM, "B1"),
        (BARE, TaxonomyFormat.CUSTOM_UTM, "B1"),
    ],
)
def test_project_entity_without_override(entity: ReferenceEntity, fmt: TaxonomyFormat, expected: str) -> None:
    assert project_entity(entity, None, fmt) == expected


def test_override_only_affects_custom_formats() -> None:
    override = CustomOverride(reference_id="pubGoogle01", custom_utm="google_ads", custom_code="GGL")

    assert project_entity(FULL, override, TaxonomyFormat.CUSTOM_UTM) == "google_ads"
    assert project_entity(FULL, override, TaxonomyFormat.CUSTOM_CODE) == "GGL"
    assert project_entity(FULL, override, TaxonomyFormat.UTM) == "google"
    assert project_entity(FULL, override, TaxonomyFormat.CODE) == "GOOG"


def test_partial_override_falls_back_to_default_utm() -> None:
    override = CustomOverride(reference_id="pubGoogle01", custom_code="GGL")
    assert project_entity(FULL, override, TaxonomyFormat.CUSTOM_UTM) == "google"


def test_projector_uses_cache_and_overrides() -> None:
    cache = ReferenceCache()
    cache.put_many([FULL])
    cache.set_overrides([CustomOverride(reference_id="pubGoogle01", custom_utm="google_ads")])
    projector = FormatProjector(cache)

    assert projector.project("pubGoogle01", TaxonomyFormat.CUSTOM_UTM) == "google_ads"
    raw = RawValue("Google", FieldSource.MANUAL, reference_id="pubGoogle01")
    assert projector.project(raw, TaxonomyFormat.CODE) == "GOOG"


def test_open_format_never_looks_up() -> None:
    projector = FormatProjector(ReferenceCache())

    typed = RawValue("x", FieldSource.MANUAL, open_text="typed text")
    assert projector.project(typed, TaxonomyFormat.OPEN) == "typed text"
    assert projector.project("pubGoogle01", TaxonomyFormat.OPEN) == "pubGoogle01"


def test_interim_value_is_the_id_until_fetch_completes() -> None:
    async def fetch(ref_id: str):
        return FULL if ref_id == "pubGoogle01" else None

    cache = ReferenceCache(fetch)
    projector = FormatProjector(cache)

    assert projector.project("pubGoogle01", TaxonomyFormat.CODE) == "pubGoogle01"
    asyncio.run(cache.drain())
    assert projector.project("pubGoogle01", TaxonomyFormat.CODE) == "GOOG"


def test_missing_id_keeps_raw_id() -> None:
    async def fetch(ref_id: str):
        return None

    cache = ReferenceCache(fetch)
    projector = FormatProjector(cache)
    projector.project("unknown01", TaxonomyFormat.CODE)
    asyncio.run(cache.drain())

    assert cache.is_missing("unknown01")
    assert projector.project("unknown01", TaxonomyFormat.DISPLAY_FR) == "unknown01"


def test_projection_errors_fall_back_to_id() -> None:
    class BrokenCache(ReferenceCache):
        def get(self, ref_id: str):
            raise RuntimeError("corrupt entry")

    projector = FormatProjector(BrokenCache())
    assert projector.project("pubGoogle01", TaxonomyFormat.CODE) == "pubGoogle01"
