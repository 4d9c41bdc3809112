"""
CLI entrypoint for the taxonomy engine.

This script performs the following steps:
- loads .env, configs/engine.yaml (with field source rules)
- creates a per-session output folder under outputs/
- builds the configured taxonomy store
- either previews one stored placement/creatif record (--record), logging the
  rendered levels and the editable fields, or regenerates the saved taxonomy
  strings of every row in a table (--table) and writes a JSON report
"""

import argparse
import asyncio
import json
import logging
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

from application import attach_and_serialize_taxonomies, open_record_session, regenerate_table
from application.constants import CONFIG_SNAPSHOT_FILENAME, LOG_FILENAME, REGENERATED_FILENAME
from infrastructure.config import EngineConfig, load_engine_config
from infrastructure.constants import ENGINE_FILE
from infrastructure.io import ensure_exists, read_table, write_document, write_table
from infrastructure.observability import configure_logging, make_session_tag, set_log_context
from infrastructure.store import RecordKind, TaxonomyStore, make_store

logger = logging.getLogger(__name__)


def _parse_args() -> argparse.Namespace:
    p = argparse.ArgumentParser(description="Resolve and preview taxonomy templates")
    p.add_argument(
        "--engine",
        type=str,
        default=str(ENGINE_FILE),
        help="Path to engine.yaml (default: configs/engine.yaml)",
    )
    p.add_argument(
        "--env",
        type=str,
        default=".env",
        help="Path to .env file (default: .env; skipped when missing)",
    )
    mode = p.add_mutually_exclusive_group()
    mode.add_argument(
        "--record",
        type=str,
        default=None,
        help="Id of a stored placement/creatif record to preview.",
    )
    mode.add_argument(
        "--table",
        type=str,
        default=None,
        help="CSV/Excel table of records to regenerate (default: table_file from engine.yaml).",
    )
    p.add_argument(
        "--console-level",
        type=str,
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Console log level",
    )
    p.add_argument(
        "--file-level",
        type=str,
        default="DEBUG",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="File log level",
    )
    return p.parse_args()


async def _preview_record(cfg: EngineConfig, store: TaxonomyStore, record_id: str) -> dict:
    record = await store.get_record(RecordKind(cfg.consumer.value), record_id)
    if record is None:
        raise SystemExit(f"No {cfg.consumer.value} record {record_id!r} in {cfg.data_dir}")

    engine = await open_record_session(
        store,
        cfg.client_id,
        record,
        cfg.consumer,
        rules=cfg.source_rules,
        lookup=cfg.lookup,
    )
    await engine.load_overrides()
    previews = await engine.settle()

    for group, preview in previews.items():
        logger.info(
            "%s taxonomy %s (%d/%d resolved)",
            group.value,
            preview.taxonomy_id,
            preview.resolved_count,
            preview.token_count,
        )
        for level in preview.levels:
            marker = "" if level.is_complete else "  [incomplete]"
            logger.info("  %d. %s: %s%s", level.number, level.title, level.text, marker)

    for state in engine.field_states():
        logger.info(
            "Field %s (%s, formats=%s): %s%s",
            state.name,
            state.variable.source.value,
            ",".join(f.value for f in state.variable.formats),
            state.preview,
            f" [{len(state.options)} options]" if state.has_catalog else "",
        )

    resolved, total = engine.completion()
    logger.info("Completion: %d/%d tokens resolved", resolved, total)
    return engine.generate_fields()


def main() -> None:
    args = _parse_args()

    env_file = Path(args.env)
    if env_file.exists():
        load_dotenv(env_file, override=True)

    engine_path = Path(args.engine)
    ensure_exists(engine_path, "engine.yaml")

    cfg = load_engine_config(engine_path)
    if args.table:
        cfg.table_file = Path(args.table)

    if not args.record and cfg.table_file is None:
        raise SystemExit("Nothing to do: pass --record ID or --table PATH (or set table_file in engine.yaml)")

    # ---- Per-session output folder ----
    ts = datetime.now().strftime("%Y%m%d_%H%M%S")
    mode = f"record-{args.record}" if args.record else "table"
    session_id = f"{ts}_{cfg.client_id}_{cfg.consumer.value}_{mode}"

    run_dir = cfg.output_dir / session_id
    run_dir.mkdir(parents=True, exist_ok=True)

    log_path = run_dir / LOG_FILENAME
    configure_logging(
        log_file=log_path,
        console_level=getattr(logging, args.console_level),
        file_level=getattr(logging, args.file_level),
    )

    set_log_context(
        session_id_full=session_id,
        client_id=cfg.client_id,
        consumer=cfg.consumer.value,
    )

    logger.info("Starting session: session_id=%s (tag=%s)", session_id, make_session_tag(session_id))
    logger.info("Session output directory: %s", run_dir)

    write_document(run_dir / CONFIG_SNAPSHOT_FILENAME, cfg.model_dump(mode="json"))

    logger.info("Initializing %s store...", cfg.store.value)
    store = make_store(cfg)

    if args.record:
        fields = asyncio.run(_preview_record(cfg, store, args.record))
        print(json.dumps(fields, ensure_ascii=False, indent=2))
    else:
        logger.info("Loading records from %s...", cfg.table_file)
        df = read_table(cfg.table_file)
        logger.info("Records loaded: %d rows, %d columns", df.shape[0], df.shape[1])

        results = asyncio.run(regenerate_table(df, store, cfg))
        df_out, report_path = attach_and_serialize_taxonomies(
            df,
            results,
            cfg.consumer,
            run_dir / REGENERATED_FILENAME,
        )
        suffix = ".csv" if cfg.table_file.suffix.lower() == ".csv" else ".xlsx"
        table_path = write_table(df_out, run_dir / f"regenerated{suffix}")
        logger.info("Report: %s", report_path)
        logger.info("Regenerated table: %s", table_path)

    logger.info("Detailed log: %s", log_path)


if __name__ == "__main__":
    main()
