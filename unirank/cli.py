from __future__ import annotations

"""
命令行入口。

示例用法：

    python -m unirank.cli calc fsr --staff 100 --students 2000
    python -m unirank.cli sample university_rankings_sample.xlsx
    python -m unirank.cli import rankings.xlsx --user u-1
    python -m unirank.cli load "UCL" --user u-1 --csv university-data.csv
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from unirank import config as config_mod
from unirank.compute.ratios import FAMILY_FIELDS, IndicatorFamily, calculate, validate
from unirank.errors import (
    ImportBusyError,
    InterchangeError,
    NotAuthenticatedError,
    PersistenceError,
    RecordNotFoundError,
)
from unirank.exporters import write_record_csv, write_sample_workbook, write_workbook
from unirank.importer import SpreadsheetImporter
from unirank.logging_utils import setup_logger_from_config
from unirank.records import load_named_record
from unirank.store import SQLiteStore

# 各指标族的命令行参数名 -> 字段名
CALC_OPTIONS: Dict[IndicatorFamily, Dict[str, str]] = {
    IndicatorFamily.FSR: {"--staff": "total_academic_staff", "--students": "total_students"},
    IndicatorFamily.IFR: {"--international-staff": "international_staff", "--total-staff": "total_academic_staff"},
    IndicatorFamily.ISR: {"--international-students": "international_students", "--total-students": "total_students"},
}


def _number(text: str) -> float | int:
    value = float(text)
    return int(value) if value.is_integer() else value


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="unirank")
    parser.add_argument("--config", type=str, default=None, help="Path to config.yaml")
    parser.add_argument("--profile", type=str, default=None, help="Config profile name")
    parser.add_argument("--db", type=str, default=None, help="Override db_path (SQLite store)")
    parser.add_argument("--log-level", type=str, default=None, help="Override log_level")

    subparsers = parser.add_subparsers(dest="command", required=True)

    calc_parser = subparsers.add_parser("calc", help="Compute ratio / percentage / score for one indicator")
    calc_sub = calc_parser.add_subparsers(dest="family", required=True)
    for family, options in CALC_OPTIONS.items():
        fam_parser = calc_sub.add_parser(family.value, help=f"{family.value.upper()} indicator")
        for flag, field in options.items():
            fam_parser.add_argument(flag, dest=field, type=_number, default=None)

    import_parser = subparsers.add_parser("import", help="Import an .xlsx file into the store")
    import_parser.add_argument("file", type=str)
    import_parser.add_argument("--user", type=str, default=None, help="Importing user id")

    sample_parser = subparsers.add_parser("sample", help="Write the sample .xlsx file")
    sample_parser.add_argument("output", nargs="?", default=None)

    export_parser = subparsers.add_parser(
        "export",
        help="Write records (JSON array keyed by column header) as an importable .xlsx",
    )
    export_parser.add_argument("records", type=str, help="JSON file with a list of records")
    export_parser.add_argument("output", type=str)

    load_parser = subparsers.add_parser("load", help="Load one stored record by institution name")
    load_parser.add_argument("name", type=str)
    load_parser.add_argument("--user", type=str, required=True)
    load_parser.add_argument(
        "--csv",
        nargs="?",
        const="",
        default=None,
        help="Also write a flat field,value CSV (defaults to export.csv_filename)",
    )

    return parser


def make_effective_config(args: argparse.Namespace) -> Dict[str, Any]:
    overrides: Dict[str, Any] = {}
    if args.db:
        overrides["db_path"] = args.db
    if args.log_level:
        overrides["log_level"] = args.log_level

    config_path = Path(args.config) if args.config else None
    return config_mod.build_effective_config(
        profile=args.profile,
        overrides=overrides or None,
        config_path=config_path,
    )


def _fail(message: str) -> int:
    print(f"Error: {message}", file=sys.stderr)
    return 1


def _run_calc(args: argparse.Namespace) -> int:
    family = IndicatorFamily(args.family)
    inputs = {name: getattr(args, name) for name in FAMILY_FIELDS[family]}
    result = calculate(family, inputs)
    if result is None:
        for err in validate(family, inputs):
            print(f"{err.path}: {err.message}", file=sys.stderr)
        return 1
    print(json.dumps(result.to_dict()))
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    cfg = make_effective_config(args)
    logger = setup_logger_from_config(cfg)
    table = str(cfg.get("table") or "university_excel_data")
    export_cfg = dict(cfg.get("export") or {})
    sheet_title = str(export_cfg.get("sheet_title") or "University Rankings")

    if args.command == "calc":
        return _run_calc(args)

    if args.command == "sample":
        out = Path(args.output or export_cfg.get("sample_filename") or "university_rankings_sample.xlsx")
        write_sample_workbook(out, sheet_title=sheet_title)
        print(f"Sample written to {out}")
        return 0

    if args.command == "export":
        try:
            records = json.loads(Path(args.records).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            return _fail(f"cannot read records file {args.records}: {e}")
        if not isinstance(records, list):
            return _fail("records file must contain a JSON array")
        out = write_workbook(records, Path(args.output), sheet_title=sheet_title)
        print(f"Exported {len(records)} record(s) to {out}")
        return 0

    store = SQLiteStore(Path(cfg.get("db_path") or "unirank.sqlite3"))

    if args.command == "import":
        importer = SpreadsheetImporter(
            store,
            table=table,
            header_offset=config_mod.header_row_offset(cfg),
        )
        try:
            content = Path(args.file).read_bytes()
            result = importer.run(content, args.user)
        except (OSError, InterchangeError, NotAuthenticatedError, ImportBusyError, PersistenceError) as e:
            return _fail(str(e))
        print(f"Successfully imported {result.inserted_count} records to the database.")
        return 0

    if args.command == "load":
        try:
            record = load_named_record(store, table, args.name, args.user)
        except (RecordNotFoundError, PersistenceError) as e:
            return _fail(str(e))
        logger.info("loaded record for %s", args.name)
        print(json.dumps(record.to_dict(), ensure_ascii=False, indent=2))
        if args.csv is not None:
            out = Path(args.csv or export_cfg.get("csv_filename") or "university-data.csv")
            write_record_csv(record, out)
        return 0

    parser.print_help()
    return 1


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
