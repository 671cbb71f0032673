"""
VoxAnalysis v1 CLI - Argument parsing and dispatch.

Responsibilities:
- Argument parsing
- Logging setup
- Reading input files (raw WAV or base64 envelope)
- Printing results/errors
- Exit codes

Forbidden:
- No signal processing (pipeline does that)
"""

import argparse
import json
import logging
import sys
from pathlib import Path


LOG_FORMAT = "%(asctime)s | %(name)s | %(levelname)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser with frozen help text."""
    parser = argparse.ArgumentParser(
        prog="voxanalysis",
        description="VoxAnalysis v1 command-line interface.",
    )
    parser.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity on stderr (default: WARNING).",
    )

    subparsers = parser.add_subparsers(dest="command")

    # analyze subcommand
    analyze_parser = subparsers.add_parser(
        "analyze",
        help="Run local signal analysis on a WAV file.",
        description=(
            "Run local signal analysis on a WAV file.\n\n"
            "Computes duration, RMS level, peak amplitude, silence ratio,\n"
            "edit-candidate timestamps and a waveform envelope. No network access."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    analyze_parser.add_argument(
        "--input",
        metavar="PATH",
        required=True,
        help="Path to input audio file (WAV).",
    )
    analyze_parser.add_argument(
        "--base64",
        action="store_true",
        help="Treat the input file as a base64 text envelope.",
    )
    analyze_parser.add_argument(
        "--output",
        metavar="PATH",
        help="Write the JSON result (or error record) here instead of stdout.",
    )
    analyze_parser.add_argument(
        "--config",
        metavar="PATH",
        help="JSON file with analysis parameters.",
    )
    analyze_parser.add_argument("--silence-threshold", type=float, metavar="F")
    analyze_parser.add_argument("--edit-window-ms", type=int, metavar="N")
    analyze_parser.add_argument("--edit-delta", type=float, metavar="F")
    analyze_parser.add_argument("--edit-floor", type=float, metavar="F")
    analyze_parser.add_argument("--waveform-points", type=int, metavar="N")
    analyze_parser.add_argument(
        "--sequential",
        action="store_true",
        help="Run independent stages one after another instead of on a thread pool.",
    )

    # credentials subcommand
    cred_parser = subparsers.add_parser(
        "credentials",
        help="Manage the stored remote report API key.",
    )
    cred_parser.add_argument(
        "action",
        choices=["show", "set", "delete"],
        help="Operation on the stored key.",
    )
    cred_parser.add_argument(
        "--store",
        metavar="PATH",
        default=None,
        help="Credential store file (default: ./vox_config.json).",
    )
    cred_parser.add_argument(
        "--value",
        metavar="KEY",
        help="API key to store (required for 'set').",
    )

    return parser


def build_config(args: argparse.Namespace):
    """Merge --config file and per-field flags into an AnalysisConfig."""
    from voxanalysis.config import AnalysisConfig

    data: dict = {}
    if args.config:
        data.update(json.loads(Path(args.config).read_text()))

    overrides = {
        "silence_threshold": args.silence_threshold,
        "edit_window_ms": args.edit_window_ms,
        "edit_delta_threshold": args.edit_delta,
        "edit_energy_floor": args.edit_floor,
        "waveform_points": args.waveform_points,
    }
    data.update({k: v for k, v in overrides.items() if v is not None})
    if args.sequential:
        data["parallel"] = False

    return AnalysisConfig.from_dict(data)


def write_output(path: Path, text: str) -> bool:
    """Write a JSON document to --output; report failures on stderr."""
    try:
        path.write_text(text)
    except OSError as e:
        print(f"Error: Cannot write output file {path}: {e.strerror or e}", file=sys.stderr)
        return False
    return True


def cmd_analyze(args: argparse.Namespace) -> int:
    """
    Handle the 'analyze' subcommand.

    With --output, a failed analysis writes its error record to the output
    file so callers always find a schema-valid document there.

    Returns exit code.
    """
    from voxanalysis.errors import AnalysisError
    from voxanalysis.pipeline import analyze_base64, analyze_bytes
    from voxanalysis.utils import serialize_json

    input_path = Path(args.input)
    if not input_path.exists():
        print(f"Error: Input file not found: {input_path}", file=sys.stderr)
        return 1
    if not input_path.is_file():
        print(f"Error: Input path is not a file: {input_path}", file=sys.stderr)
        return 1

    try:
        config = build_config(args)
    except (OSError, ValueError, TypeError) as e:
        print(f"Error: Invalid configuration: {e}", file=sys.stderr)
        return 1

    try:
        if args.base64:
            result = analyze_base64(input_path.read_bytes(), config)
        else:
            result = analyze_bytes(input_path.read_bytes(), config)
    except AnalysisError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        if args.output:
            write_output(Path(args.output), serialize_json(e.to_dict()))
        return 1

    if result.dropped_samples:
        print(
            f"Warning: {result.dropped_samples} unparseable samples were dropped",
            file=sys.stderr,
        )

    output = serialize_json(result.to_dict())
    if args.output:
        if not write_output(Path(args.output), output):
            return 1
        print(f"Analysis written: {args.output}")
    else:
        sys.stdout.write(output)
    return 0


def cmd_credentials(args: argparse.Namespace) -> int:
    """Handle the 'credentials' subcommand."""
    from voxanalysis.credentials import (
        DEFAULT_STORE_FILE,
        CredentialStoreError,
        JsonFileCredentialStore,
        mask_secret,
        resolve_api_key,
    )

    store = JsonFileCredentialStore(Path(args.store or DEFAULT_STORE_FILE))

    try:
        if args.action == "set":
            if not args.value:
                print("Error: --value is required for 'set'", file=sys.stderr)
                return 1
            store.set(args.value)
            print("API key stored.")
        elif args.action == "delete":
            store.delete()
            print("API key deleted.")
        else:
            key = resolve_api_key(store)
            if key is None:
                print("No API key configured.")
            else:
                print(f"API key: {mask_secret(key)}")
    except CredentialStoreError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def main() -> None:
    """Main entry point."""
    parser = create_parser()
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
        stream=sys.stderr,
    )

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "analyze":
        sys.exit(cmd_analyze(args))

    if args.command == "credentials":
        sys.exit(cmd_credentials(args))
