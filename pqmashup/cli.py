import argparse
import sys
from pathlib import Path
from typing import List, Optional

from .commands import COMMANDS
from .config import Settings, load_settings, load_yaml
from .errors import ConfigError


class ArgumentParser(argparse.ArgumentParser):
    """argparse parser that exits with status 1 on usage errors."""

    def error(self, message):
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _add_extract_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("xlsx", type=Path, help="Workbook to extract the DataMashup from.")
    parser.add_argument("-o", "--output", type=Path, default=Path("."), help="Directory to unpack files into (default: current).")
    parser.add_argument("-s", "--split", action="store_true", help="Parse Section1.m into individual .m query files.")


def _add_repack_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("-s", "--source", type=Path, required=True, help="Directory with unpacked DataMashup files.")
    parser.add_argument("-t", "--target", type=Path, required=True, help="Original workbook used as the template.")
    parser.add_argument("-o", "--output", type=Path, required=True, help="Path for the new workbook.")
    parser.add_argument("--strict-header", action="store_true", default=None, help="Fail when the template's blob has no header instead of writing an empty one.")


def _add_refresh_arguments(parser: argparse.ArgumentParser):
    parser.add_argument("xlsx", type=Path, help="Workbook to refresh and save in place (requires Windows and Excel).")


def _add_config_argument(parser: argparse.ArgumentParser):
    parser.add_argument("--config", type=Path, help="YAML settings file.")


ADDERS = {
    "extract": _add_extract_arguments,
    "repack": _add_repack_arguments,
    "refresh": _add_refresh_arguments,
}


def _settings_for(args: argparse.Namespace) -> Settings:
    settings = load_settings(args.config)
    return settings.merged({"strict_header": getattr(args, "strict_header", None)})


def _run_command(name: str, args: argparse.Namespace) -> int:
    try:
        settings = _settings_for(args)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    command = COMMANDS[name](vars(args), settings)
    return 0 if command.run() else 1


def run_manifest(manifest_path: Path, settings: Settings) -> int:
    """Run every job of a YAML manifest; returns 1 if any job failed."""
    manifest = load_yaml(manifest_path)
    settings = settings.merged(manifest.get("settings"))
    jobs = manifest.get("jobs") or []
    if not isinstance(jobs, list):
        raise ConfigError(f"Manifest 'jobs' must be a list, got {type(jobs).__name__}")
    print(f"Found {len(jobs)} jobs in manifest.")

    failures = 0
    for job in jobs:
        if not isinstance(job, dict):
            print(f"Skipping invalid job: {job}")
            failures += 1
            continue
        job_id = job.get("id")
        command_name = job.get("command")
        job_args = job.get("args") or {}

        if not job_id or not command_name or not isinstance(job_args, dict):
            print(f"Skipping invalid job: {job}")
            failures += 1
            continue
        if command_name not in COMMANDS:
            print(f"  Warning: Command '{command_name}' is unknown. Skipping.")
            failures += 1
            continue

        print(f"Processing job: {job_id} (Command: {command_name})")
        if COMMANDS[command_name](job_args, settings).run():
            print(f"  Success: {job_id}")
        else:
            print(f"  Failed: {job_id}")
            failures += 1
    return 1 if failures else 0


def build_parser() -> argparse.ArgumentParser:
    parser = ArgumentParser(prog="pqmashup", description="Extract and repack Power Query DataMashup content in Excel workbooks.")
    subparsers = parser.add_subparsers(dest="command", parser_class=ArgumentParser)
    subparsers.required = True

    for name, adder in ADDERS.items():
        sub = subparsers.add_parser(name, help=COMMANDS[name].__doc__)
        adder(sub)
        _add_config_argument(sub)

    batch = subparsers.add_parser("batch", help="Run the jobs listed in a YAML manifest.")
    batch.add_argument("manifest", type=Path, help="Path to the manifest YAML file.")
    _add_config_argument(batch)
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    if args.command == "batch":
        try:
            return run_manifest(args.manifest, load_settings(args.config))
        except ConfigError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
    return _run_command(args.command, args)


def _single_command_main(name: str, description: str, argv: Optional[List[str]]) -> int:
    parser = ArgumentParser(description=description)
    ADDERS[name](parser)
    _add_config_argument(parser)
    return _run_command(name, parser.parse_args(argv))


def extract_main(argv: Optional[List[str]] = None) -> int:
    return _single_command_main("extract", "Unpack the DataMashup of an Excel workbook.", argv)


def repack_main(argv: Optional[List[str]] = None) -> int:
    return _single_command_main("repack", "Inject an unpacked DataMashup directory into a workbook.", argv)


def refresh_main(argv: Optional[List[str]] = None) -> int:
    return _single_command_main("refresh", "Refresh all Power Query connections with Excel.", argv)


if __name__ == "__main__":
    sys.exit(main())
