"""Top-level extract, repack and refresh pipelines.

Each command reports progress on stdout and turns any failure into a single
diagnostic on stderr plus a ``False`` result, so callers only need the
boolean.
"""

import sys
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from . import codec, composer, splitter
from .archive import ZipArchive
from .config import Settings
from .errors import BlobNotFoundError, ConfigError, InputNotFoundError
from .locator import locate
from .refresh import refresh_workbook
from .reinject import reinject


class BaseCommand(ABC):
    """Abstract base class for all pipelines."""

    action = "processing"
    required = ()

    def __init__(self, args: Dict[str, Any], settings: Optional[Settings] = None):
        self.args = args
        self.settings = settings or Settings()

    def run(self) -> bool:
        try:
            missing = [key for key in self.required if not self.args.get(key)]
            if missing:
                raise ConfigError(f"Missing required argument(s): {', '.join(missing)}")
            self.execute()
        except (InputNotFoundError, BlobNotFoundError, ConfigError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return False
        except Exception as e:
            print(f"An error occurred during {self.action}: {e}", file=sys.stderr)
            return False
        return True

    @abstractmethod
    def execute(self):
        """Run the pipeline, raising on failure."""


class ExtractCommand(BaseCommand):
    """Unpack a workbook's DataMashup archive into a directory."""

    action = "extraction"
    required = ("xlsx",)

    def execute(self):
        xlsx = Path(self.args["xlsx"])
        output_dir = Path(self.args.get("output") or ".")

        with ZipArchive(xlsx) as archive:
            try:
                location = locate(archive, pattern=self.settings.item_glob)
                _, inner = codec.decode(location.text)
            except BlobNotFoundError as e:
                raise BlobNotFoundError(f"No DataMashup contents found in '{xlsx}'.") from e

        output_dir.mkdir(parents=True, exist_ok=True)
        for path in composer.unpack(inner, output_dir):
            print(f"Extracted: {path.relative_to(output_dir).as_posix()} -> {path}")

        if self.args.get("split"):
            splitter.split_file(
                output_dir / self.settings.section_path,
                output_dir / self.settings.queries_dir,
                keep_spaces=self.settings.keep_spaces,
            )


class RepackCommand(BaseCommand):
    """Pack a directory and inject it into a copy of a template workbook."""

    action = "repacking"
    required = ("source", "target", "output")

    def execute(self):
        source = Path(self.args["source"])
        target = Path(self.args["target"])
        output = Path(self.args["output"])

        if not source.is_dir():
            raise InputNotFoundError(f"Source directory '{source}' not found.")
        if not target.is_file():
            raise InputNotFoundError(f"Target template '{target}' not found.")

        inner = composer.pack(
            source,
            compression=self.settings.compression,
            exclude=self.settings.exclude,
        )
        location = reinject(
            target,
            inner,
            output,
            pattern=self.settings.item_glob,
            strict_header=self.settings.strict_header,
        )
        print(f"Injected updated DataMashup into {location.entry}")
        print(f"Wrote {output}")


class RefreshCommand(BaseCommand):
    """Have Excel refresh every query of a workbook and save it in place."""

    action = "Excel automation"
    required = ("xlsx",)

    def __init__(
        self,
        args: Dict[str, Any],
        settings: Optional[Settings] = None,
        dispatch: Optional[Callable[[str], Any]] = None,
    ):
        super().__init__(args, settings)
        self.dispatch = dispatch

    def execute(self):
        refresh_workbook(self.args["xlsx"], dispatch=self.dispatch)
        print("Refresh successful. Workbook saved.")


COMMANDS: Dict[str, Any] = {
    "extract": ExtractCommand,
    "repack": RepackCommand,
    "refresh": RefreshCommand,
}
