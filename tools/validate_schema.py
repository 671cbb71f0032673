#!/usr/bin/env python3
"""
VoxAnalysis v1 Record Checker

Checks analysis output against the published v1 schemas. Every document the
CLI writes is either an analysis result or an error record; the checker tells
them apart by the "code" field, so callers do not need to know which one a
run produced.

Usage:
    python tools/validate_schema.py RECORD.json [RECORD.json ...]
    python tools/validate_schema.py --audio take.wav [--base64]

With --audio the file is analysed in-process and whatever the library returns
(result, or the error record of the AnalysisError it raised) is checked.

Exit codes: 0 all documents conform, 1 at least one does not, 2 unreadable input.
"""

import argparse
import json
import sys
from pathlib import Path

import jsonschema


SCHEMA_DIR = Path(__file__).parent.parent / "schemas"

SCHEMA_FILES = {
    "result": "analysis_result.schema.json",
    "error": "error.schema.json",
}


def load_schema(schema_name: str) -> dict:
    """Load a schema by name."""
    if schema_name not in SCHEMA_FILES:
        raise ValueError(f"Unknown schema: {schema_name}. Valid: {list(SCHEMA_FILES.keys())}")
    return json.loads((SCHEMA_DIR / SCHEMA_FILES[schema_name]).read_text())


def schema_for(document) -> str:
    """Error records carry a "code"; everything else is checked as a result."""
    if isinstance(document, dict) and "code" in document:
        return "error"
    return "result"


def validate_document(document: dict, schema: dict) -> list[str]:
    """
    Validate a document against a schema.

    Returns:
        List of "path: message" strings (empty if valid).
    """
    validator = jsonschema.Draft7Validator(schema)
    errors = []
    for error in sorted(validator.iter_errors(document), key=lambda e: list(e.absolute_path)):
        path = ".".join(str(p) for p in error.absolute_path) or "(root)"
        errors.append(f"{path}: {error.message}")
    return errors


def check_record(document, schema_name: str | None = None) -> tuple[str, list[str]]:
    """Validate a CLI or library record, picking the schema when not given."""
    name = schema_name or schema_for(document)
    return name, validate_document(document, load_schema(name))


def analyze_to_record(raw: bytes, envelope: bool = False, config=None) -> dict:
    """
    Run the analysis core and return the record the CLI would write.

    AnalysisError is turned into its error record instead of propagating.
    """
    from voxanalysis import analyze_base64, analyze_bytes
    from voxanalysis.errors import AnalysisError

    try:
        if envelope:
            return analyze_base64(raw, config).to_dict()
        return analyze_bytes(raw, config).to_dict()
    except AnalysisError as e:
        return e.to_dict()


def _report(label: str, schema_name: str, errors: list[str]) -> None:
    if errors:
        print(f"INVALID {label} ({schema_name}): {len(errors)} error(s)")
        for error in errors:
            print(f"  - {error}")
    else:
        print(f"VALID {label} ({schema_name})")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Check VoxAnalysis v1 result and error records against their schemas"
    )
    parser.add_argument("records", nargs="*", type=Path, help="JSON records to check")
    parser.add_argument("--audio", type=Path, metavar="PATH", help="Analyse PATH and check the record")
    parser.add_argument("--base64", action="store_true", help="--audio file is a base64 envelope")
    parser.add_argument(
        "--schema",
        choices=list(SCHEMA_FILES.keys()),
        help="Force a schema instead of detecting it per record",
    )
    args = parser.parse_args(argv)

    if not args.records and args.audio is None:
        parser.error("give at least one record or --audio")

    failed = False
    documents = []
    for path in args.records:
        try:
            documents.append((str(path), json.loads(path.read_text())))
        except OSError as e:
            print(f"Error: Cannot read {path}: {e.strerror or e}", file=sys.stderr)
            return 2
        except json.JSONDecodeError as e:
            print(f"Error: Invalid JSON in {path}: {e}", file=sys.stderr)
            return 2

    if args.audio is not None:
        try:
            raw = args.audio.read_bytes()
        except OSError as e:
            print(f"Error: Cannot read {args.audio}: {e.strerror or e}", file=sys.stderr)
            return 2
        documents.append((str(args.audio), analyze_to_record(raw, envelope=args.base64)))

    for label, document in documents:
        schema_name, errors = check_record(document, args.schema)
        _report(label, schema_name, errors)
        failed = failed or bool(errors)

    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
