"""Batch regeneration of saved taxonomy strings for a table of records."""

import json
import logging
from pathlib import Path
from typing import Any

import pandas as pd

from application.constants import (
    ERROR_KEY,
    ORIGINAL_INDEX_KEY,
    RECORD_ID_KEY,
    TAXONOMIES_KEY,
    generated_taxonomies_field,
    level_field,
    taxonomy_id_field,
    taxonomy_values_field,
)
from application.editing import FieldChangeCoordinator
from application.engine import TaxonomyEngine
from domain.catalog.cache import ReferenceCache
from domain.schemas import ConsumerType, FieldSource, ResolutionContext, TaxonomyGroup
from domain.taxonomy.classifier import DEFAULT_SOURCE_RULES, SourceRules
from infrastructure.config.models import EngineConfig, LookupConfig
from infrastructure.io.datasets import row_to_record
from infrastructure.observability.logging import get_log_context, record_scope
from infrastructure.store.base import RecordKind, StoreError, TaxonomyStore

logger = logging.getLogger(__name__)

# Optional columns pointing at stored parent records
CAMPAIGN_ID_KEY = "campaign_id"
TACTIQUE_ID_KEY = "tactique_id"
PLACEMENT_ID_KEY = "placement_id"


class RegenerationError(RuntimeError):
    """A record's taxonomies could not be regenerated."""


def split_record(record: dict[str, Any], rules: SourceRules = DEFAULT_SOURCE_RULES) -> tuple[dict, dict]:
    """Campaign and tactique fields carried inline on a flat record."""
    campaign = {k: v for k, v in record.items() if rules.classify(k) is FieldSource.CAMPAIGN}
    tactique = {k: v for k, v in record.items() if rules.classify(k) is FieldSource.TACTIQUE}
    return campaign, tactique


def _parse_overlay(raw: Any) -> dict[str, Any] | None:
    if raw is None or isinstance(raw, dict):
        return raw
    if isinstance(raw, str):
        if not raw.strip():
            return None
        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError as e:
            raise RegenerationError(f"Stored manual values are not valid JSON: {e}") from e
        if isinstance(parsed, dict):
            return parsed
    raise RegenerationError(f"Stored manual values must be a mapping, got {type(raw).__name__}")


async def _parent_record(store: TaxonomyStore, kind: RecordKind, record_id: str | None) -> dict[str, Any]:
    if not record_id:
        return {}
    doc = await store.get_record(kind, record_id)
    if doc is None:
        logger.warning("%s record %s not found; resolving without it", kind.value, record_id)
        return {}
    return doc


async def open_record_session(
    store: TaxonomyStore,
    client_id: str,
    record: dict[str, Any],
    consumer: ConsumerType,
    *,
    rules: SourceRules = DEFAULT_SOURCE_RULES,
    lookup: LookupConfig | None = None,
    cache: ReferenceCache | None = None,
) -> TaxonomyEngine:
    """
    Open an engine over a stored placement or creatif record.

    The record's taxonomy id fields select the definitions and its
    ``*_Taxonomy_Values`` field holds the manual values. Campaign and tactique
    values come from the stored parent records (``campaign_id`` /
    ``tactique_id``) overlaid with any inline ``CA_``/``TC_`` fields.

    Raises:
        RegenerationError: If a selected taxonomy cannot be loaded or manual values cannot be read
        StoreError: If a parent record cannot be read
    """
    inline_campaign, inline_tactique = split_record(record, rules)
    campaign = {**await _parent_record(store, RecordKind.CAMPAIGN, record.get(CAMPAIGN_ID_KEY)), **inline_campaign}
    tactique = {**await _parent_record(store, RecordKind.TACTIQUE, record.get(TACTIQUE_ID_KEY)), **inline_tactique}
    placement = None
    if consumer is ConsumerType.CREATIF:
        placement = await _parent_record(store, RecordKind.PLACEMENT, record.get(PLACEMENT_ID_KEY)) or None

    overlay = FieldChangeCoordinator.from_record(_parse_overlay(record.get(taxonomy_values_field(consumer)))).overlay
    context = ResolutionContext(
        campaign_record=campaign,
        tactique_record=tactique,
        placement_record=placement,
        form_data=record,
    )

    engine = TaxonomyEngine(
        store,
        client_id,
        consumer,
        context=context,
        overlay=overlay,
        rules=rules,
        lookup=lookup,
        cache=cache,
    )
    selection = {g: record.get(taxonomy_id_field(consumer, g)) for g in TaxonomyGroup}
    if not await engine.load_definitions(selection):
        engine.close()
        raise RegenerationError(engine.load_error or "taxonomy load failed")
    return engine


async def regenerate_record(
    store: TaxonomyStore,
    client_id: str,
    record: dict[str, Any],
    consumer: ConsumerType,
    *,
    rules: SourceRules = DEFAULT_SOURCE_RULES,
    lookup: LookupConfig | None = None,
    cache: ReferenceCache | None = None,
) -> dict[str, Any]:
    """
    Resolve and generate the saved taxonomy fields of one placement or creatif.

    Lookups are drained before the strings are generated, so catalog values
    are final. Option lists are not loaded.

    Returns:
        Mapping of generated field name to value

    Raises:
        RegenerationError: If a selected taxonomy cannot be loaded or manual values cannot be read
        StoreError: If a parent record cannot be read
    """
    lookup = (lookup or LookupConfig()).model_copy(update={"prefetch_options": False})
    engine = await open_record_session(store, client_id, record, consumer, rules=rules, lookup=lookup, cache=cache)
    try:
        await engine.settle()
        return engine.generate_fields()
    finally:
        engine.close()


async def regenerate_table(df: pd.DataFrame, store: TaxonomyStore, cfg: EngineConfig) -> list[dict[str, Any]]:
    """
    Regenerate every row of a record table.

    The reference cache and the client's custom codes are shared across rows.
    A row that fails is reported with its error and does not stop the batch.
    """
    cache = ReferenceCache(fetch_entity=store.get_reference)
    try:
        cache.set_overrides(await store.list_custom_overrides(cfg.client_id))
    except StoreError as e:
        logger.warning("Failed to load custom codes for client %s: %s", cfg.client_id, e)

    results: list[dict[str, Any]] = []
    for position, (_, row) in enumerate(df.iterrows()):
        record = row_to_record(row)
        entry: dict[str, Any] = {ORIGINAL_INDEX_KEY: position, RECORD_ID_KEY: record.get(RECORD_ID_KEY)}
        with record_scope(entry[RECORD_ID_KEY] or f"row{position}"):
            try:
                entry[TAXONOMIES_KEY] = await regenerate_record(
                    store,
                    cfg.client_id,
                    record,
                    cfg.consumer,
                    rules=cfg.source_rules,
                    lookup=cfg.lookup,
                    cache=cache,
                )
                entry[ERROR_KEY] = None
            except (RegenerationError, StoreError) as e:
                logger.warning("Row %d: %s", position, e)
                entry[TAXONOMIES_KEY] = None
                entry[ERROR_KEY] = str(e)
        results.append(entry)

    failed = sum(1 for r in results if r[ERROR_KEY])
    logger.info("Regenerated %d/%d records (%d failed)", len(results) - failed, len(results), failed)
    return results


def attach_and_serialize_taxonomies(
    df: pd.DataFrame,
    results: list[dict[str, Any]],
    consumer: ConsumerType,
    output_path: Path,
) -> tuple[pd.DataFrame, Path]:
    """
    Attach generated fields to the DataFrame and write output_path as a JSON report.
    """
    df_out = df.copy()
    generated = [r.get(TAXONOMIES_KEY) or {} for r in results]

    for group in TaxonomyGroup:
        for number in consumer.levels:
            name = level_field(consumer, group, number)
            df_out[name] = [g.get(name, "") for g in generated]

    joined = generated_taxonomies_field(consumer)
    df_out[joined] = [json.dumps(g.get(joined, {}), ensure_ascii=False) for g in generated]

    report = {"context": get_log_context(), "consumer": consumer.value, "records": results}
    output_path.parent.mkdir(parents=True, exist_ok=True)
    with output_path.open("w", encoding="utf-8") as f:
        json.dump(report, f, ensure_ascii=False, indent=2)

    logger.info("Saved regenerated taxonomies JSON: %s", output_path)

    return df_out, output_path
