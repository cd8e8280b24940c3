"""Command line front end for schema-described query mappings.

Usage:
    querymap parse --schema schema.json "n=1&tag=a&tag=b"
    querymap serialize --schema schema.json --value value.json
    querymap check --schema schema.json

Structured JSON output goes to stdout; human messages go to stderr.
Exit codes: 0 ok, 1 parse failed (or warned under ``--strict``), 2 bad input.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Any

import orjson

from querymap.errors import MappingConfigError, classify_message
from querymap.mapping import ParamMapping
from querymap.result import Failure, result_to_json
from querymap.runner import format_query, parse_query
from querymap.schema import mapping_from_json, mapping_to_json

log = logging.getLogger("querymap.cli")


def _dump_json(obj: Any) -> None:
    sys.stdout.buffer.write(orjson.dumps(obj, option=orjson.OPT_INDENT_2))
    sys.stdout.buffer.write(b"\n")
    sys.stdout.flush()


def _log(msg: str) -> None:
    """Write human-readable message to stderr."""
    print(msg, file=sys.stderr)


def _load_json_file(path: Path) -> Any:
    return orjson.loads(path.read_bytes())


def _load_schema(path: Path) -> ParamMapping[Any]:
    mapping = mapping_from_json(_load_json_file(path))
    log.debug("Loaded schema %s: %s", path, type(mapping).__name__)
    return mapping


def _cmd_parse(args: argparse.Namespace) -> int:
    mapping = _load_schema(args.schema)
    result = parse_query(mapping, args.query)
    report = result_to_json(result)
    report["kinds"] = {
        msg: str(kind) if (kind := classify_message(msg)) is not None else None
        for msg in (*result.errors, *result.warnings)
    }
    _dump_json(report)
    if isinstance(result, Failure):
        _log(f"Parse failed with {len(result.errors)} error(s)")
        return 1
    if args.strict and result.warnings:
        _log(f"Parse produced {len(result.warnings)} warning(s) (--strict)")
        return 1
    return 0


def _cmd_serialize(args: argparse.Namespace) -> int:
    mapping = _load_schema(args.schema)
    value = _load_json_file(args.value)
    print(format_query(mapping, value))
    return 0


def _cmd_check(args: argparse.Namespace) -> int:
    mapping = _load_schema(args.schema)
    _dump_json(mapping_to_json(mapping))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="querymap",
        description="Parse and serialize query parameters with a JSON schema.",
    )
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p_parse = sub.add_parser("parse", help="Parse a query string")
    p_parse.add_argument("--schema", type=Path, required=True, help="Schema JSON path")
    p_parse.add_argument(
        "--strict",
        action="store_true",
        help="Exit non-zero when the parse produced warnings",
    )
    p_parse.add_argument("query", help="Query string, e.g. 'a=1&a=2&b=x'")
    p_parse.set_defaults(func=_cmd_parse)

    p_ser = sub.add_parser("serialize", help="Serialize a JSON value to a query string")
    p_ser.add_argument("--schema", type=Path, required=True, help="Schema JSON path")
    p_ser.add_argument("--value", type=Path, required=True, help="Value JSON path")
    p_ser.set_defaults(func=_cmd_serialize)

    p_check = sub.add_parser("check", help="Validate a schema and print its normal form")
    p_check.add_argument("--schema", type=Path, required=True, help="Schema JSON path")
    p_check.set_defaults(func=_cmd_check)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        return args.func(args)
    except OSError as exc:
        _log(f"Error: cannot read input ({exc})")
        return 2
    except orjson.JSONDecodeError as exc:
        _log(f"Error: invalid JSON ({exc})")
        return 2
    except MappingConfigError as exc:
        _log(f"Error: invalid schema: {exc}")
        return 2
    except (KeyError, AttributeError, TypeError) as exc:
        _log(f"Error: value does not match schema ({exc!r})")
        return 2


if __name__ == "__main__":
    sys.exit(main())
