"""Run the arrow damage patch over JSON rule files.

Usage examples:
    python -m scripts.run_patch --plugin Skyrim.json
    python -m scripts.run_patch --plugin Skyrim.json --plugin Mod.json --settings settings.json
    python -m scripts.run_patch --plugin Skyrim.json --output patch.json
    python -m scripts.run_patch --plugin Skyrim.json --json
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from arrow_scaling.engine.settings import check_settings, load_settings
from arrow_scaling.engine.targets import PatchTargets
from arrow_scaling.patcher.perk_patcher import PatchReport, PerkPatcher
from arrow_scaling.store.perk_store import InMemoryPerkStore
from arrow_scaling.store.serialization import dump_perks, load_rule_file


logger = logging.getLogger(__name__)


def _resolve_plugins(paths: list[Path]) -> list[Path]:
    missing = [p for p in paths if not p.exists()]
    if missing:
        raise FileNotFoundError(
            "Missing plugins: " + ", ".join(str(p) for p in missing)
        )
    return paths


def _print_summary(report: PatchReport) -> None:
    print(f"Perks scanned: {report.perks_scanned}")
    print(f"Damage entry points considered: {report.effects_considered}")
    print(f"Unsupported entry points skipped: {report.effects_unsupported}")
    print(f"Entry points added: {report.effects_added}")
    for editor_id in report.patched_perks:
        print(f"  - {editor_id}")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Scale arrow damage with bow damage perks")
    parser.add_argument(
        "--plugin",
        type=Path,
        action="append",
        required=True,
        help="Rule file path; repeat in load order (last wins).",
    )
    parser.add_argument("--settings", type=Path, help="Path to settings JSON file.")
    parser.add_argument("--output", type=Path, help="Write overridden perks to this file.")
    parser.add_argument("--json", action="store_true", help="Emit overridden perks as JSON on stdout.")
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity.",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = load_settings(args.settings)
    except (FileNotFoundError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 2
    errors = check_settings(settings)
    if errors:
        for error in errors:
            print(f"Error: {error}", file=sys.stderr)
        print("At least one of the provided settings was not valid.", file=sys.stderr)
        return 2

    try:
        plugin_paths = _resolve_plugins(args.plugin)
        logger.info("Loading plugins: %s", ", ".join(str(p) for p in plugin_paths))
        store = InMemoryPerkStore.from_plugins([load_rule_file(p) for p in plugin_paths])
    except (FileNotFoundError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    patcher = PerkPatcher(store, settings, PatchTargets())
    report = patcher.run()
    payload = dump_perks(store.overrides())

    if args.json:
        print(json.dumps(payload, indent=2))
        return 0

    _print_summary(report)
    if args.output is not None:
        args.output.write_text(json.dumps(payload, indent=2))
        print(f"Patch written: {args.output}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
