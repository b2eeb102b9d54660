"""stagecraft CLI entry point."""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

_LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def main() -> None:
    parser = argparse.ArgumentParser(
        prog="stagecraft",
        description="stagecraft: visual-novel step compiler and player",
    )
    parser.add_argument(
        "--log-level", default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging verbosity (default: WARNING)",
    )
    sub = parser.add_subparsers(dest="command", metavar="COMMAND")
    validate_parser = sub.add_parser("validate-script", help="Validate a play JSON file")
    validate_parser.add_argument(
        "--script", required=True, metavar="play.json",
        help="Path to a play JSON file",
    )
    compile_parser = sub.add_parser(
        "compile",
        help="Compile a play's steps into beats and print them as canonical JSON",
    )
    compile_parser.add_argument(
        "--script", required=True, metavar="play.json",
        help="Path to a play JSON file",
    )
    compile_parser.add_argument(
        "--output", metavar="beats.json",
        help="Destination path (default: stdout)",
    )
    convert_parser = sub.add_parser(
        "convert-legacy",
        help="Convert a legacy play JSON file to the current document format",
    )
    convert_parser.add_argument(
        "--legacy", required=True, metavar="legacy.json",
        help="Path to a legacy play JSON file",
    )
    convert_parser.add_argument(
        "--output", required=True, metavar="play.json",
        help="Destination path for the converted play",
    )
    args = parser.parse_args()

    logging.basicConfig(level=args.log_level, format=_LOG_FORMAT, datefmt="%H:%M:%S")

    if args.command == "validate-script":
        sys.exit(validate_script(Path(args.script)))
    elif args.command == "compile":
        sys.exit(compile_script(Path(args.script), Path(args.output) if args.output else None))
    elif args.command == "convert-legacy":
        sys.exit(convert_legacy(Path(args.legacy), Path(args.output)))
    else:
        parser.print_help()
        sys.exit(1)


def validate_script(script_path: Path) -> int:
    """Contract + rule validation; advisory step problems are only warnings."""
    import jsonschema

    from stagecraft.contract_validate import validate_script_document
    from stagecraft.errors import StagecraftError
    from stagecraft.validator import collect_step_warnings, load_json_object, validate_script_rules

    try:
        data = load_json_object(script_path)
        validate_script_document(data)
    except (ValueError, jsonschema.ValidationError):
        print("ERROR: invalid Script")
        return 1
    if validate_script_rules(data):
        print("ERROR: invalid Script")
        return 1

    try:
        warnings = collect_step_warnings(data)
    except (ValueError, StagecraftError):
        print("ERROR: invalid Script")
        return 1
    for warning in warnings:
        print(f"WARNING: {warning}")
    print("OK: Script is valid")
    return 0


def compile_script(script_path: Path, output_path: Path | None) -> int:
    """Compile a play and emit its beats and bookmarks as canonical JSON."""
    from stagecraft.errors import StagecraftError
    from stagecraft.schemas.script_v1 import load_script

    try:
        script = load_script(script_path)
    except FileNotFoundError:
        print(f"ERROR: no such file: {script_path}")
        return 1
    except (ValueError, StagecraftError) as exc:
        # pydantic.ValidationError and json.JSONDecodeError are ValueErrors
        print(f"ERROR: {exc}")
        return 1

    payload = {
        "beats": [
            {"index": i, **beat.to_json()} for i, beat in enumerate(script.beats)
        ],
        "bookmarks": [[beat_index, label] for beat_index, label in script.bookmarks],
    }
    text = json.dumps(payload, sort_keys=True, indent=2, ensure_ascii=False)
    if output_path is None:
        print(text)
    else:
        output_path.write_text(text + "\n", encoding="utf-8")
    return 0


def convert_legacy(legacy_path: Path, output_path: Path) -> int:
    from stagecraft.errors import StagecraftError
    from stagecraft.legacy import load_legacy_file
    from stagecraft.schemas.script_v1 import dump_script

    try:
        script = load_legacy_file(legacy_path)
    except FileNotFoundError:
        print(f"ERROR: no such file: {legacy_path}")
        return 1
    except (ValueError, StagecraftError) as exc:
        print(f"ERROR: {exc}")
        return 1

    output_path.write_text(dump_script(script) + "\n", encoding="utf-8")
    print(f"OK: wrote {output_path}")
    return 0


if __name__ == "__main__":
    main()
