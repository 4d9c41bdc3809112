"""Scaffold a client data folder for the file store."""

from __future__ import annotations

import argparse
import shutil
from pathlib import Path

CLIENT_REL_FILES = [
    Path("taxonomies/tags.yaml"),
    Path("taxonomies/platform.yaml"),
    Path("taxonomies/mediaocean.yaml"),
    Path("custom_codes.yaml"),
]

STUB_TAXONOMY = """display_name: {name}
# Levels 1-4 are shown on placements, 5-6 on creatives.
NA_Name_Level_1_Title: Level 1
NA_Name_Level_1: ""
NA_Name_Level_2_Title: Level 2
NA_Name_Level_2: ""
NA_Name_Level_3_Title: Level 3
NA_Name_Level_3: ""
NA_Name_Level_4_Title: Level 4
NA_Name_Level_4: ""
NA_Name_Level_5_Title: Level 5
NA_Name_Level_5: ""
NA_Name_Level_6_Title: Level 6
NA_Name_Level_6: ""
"""

STUB_CUSTOM_CODES = """# One entry per overridden reference:
# - CC_Shortcode_ID: <reference id>
#   CC_Custom_Code: <code>
#   CC_Custom_UTM: <utm>
[]
"""


# scaffold empty client files with stubs
def scaffold_empty(dest_root: Path, client: str, force: bool) -> None:
    if dest_root.exists() and any(dest_root.iterdir()) and not force:
        raise SystemExit(f"Destination exists and is not empty: {dest_root} (use --force)")

    (dest_root / "lists").mkdir(parents=True, exist_ok=True)
    for rel in CLIENT_REL_FILES:
        path = dest_root / rel
        path.parent.mkdir(parents=True, exist_ok=True)
        if path.exists() and not force:
            continue
        if rel.name == "custom_codes.yaml":
            path.write_text(STUB_CUSTOM_CODES, encoding="utf-8")
        else:
            path.write_text(STUB_TAXONOMY.format(name=f"{client} {rel.stem}"), encoding="utf-8")


# scaffold client files by copying from an existing client
def scaffold_from_template(clients_root: Path, client: str, template: str, force: bool) -> None:
    src = clients_root / template
    dest = clients_root / client

    if not src.exists():
        raise SystemExit(f"Template client folder not found: {src}")

    if dest.exists():
        if force:
            shutil.rmtree(dest)
        else:
            raise SystemExit(f"Destination exists: {dest} (use --force to overwrite)")

    shutil.copytree(src, dest)


def main(argv: list[str] | None = None) -> None:
    ap = argparse.ArgumentParser()
    ap.add_argument("--client", required=True, help="New client id (folder name under <data-dir>/clients)")
    ap.add_argument("--data-dir", default="data", help="File store data directory (default: data)")
    ap.add_argument("--from", dest="template", default=None, help="Copy files from an existing client")
    ap.add_argument("--empty", action="store_true", help="Create folder structure with stub files")
    ap.add_argument("--force", action="store_true", help="Overwrite if destination exists")
    args = ap.parse_args(argv)

    clients_root = Path(args.data_dir) / "clients"
    dest_root = clients_root / args.client

    if args.template:
        scaffold_from_template(clients_root, args.client, args.template, args.force)
        print(f"Copied client files from {args.template!r} -> {args.client!r}: {dest_root}")
        return
    if args.empty:
        scaffold_empty(dest_root, args.client, args.force)
        print(f"Scaffolded empty client tree at: {dest_root}")
        return

    raise SystemExit("Choose one: --from <client> or --empty")


if __name__ == "__main__":
    main()
