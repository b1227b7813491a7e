import dataclasses
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .composer import COMPRESSION
from .errors import ConfigError
from .locator import DEFAULT_ITEM_GLOB


_TEXT_FIELDS = ("item_glob", "section_path", "queries_dir", "compression")
_FLAG_FIELDS = ("strict_header", "keep_spaces")


@dataclass
class Settings:
    """Knobs shared by the extract and repack pipelines."""

    item_glob: str = DEFAULT_ITEM_GLOB
    section_path: str = "Formulas/Section1.m"
    queries_dir: str = "Individual_Queries"
    compression: str = "deflated"
    exclude: List[str] = field(default_factory=list)
    strict_header: bool = False
    keep_spaces: bool = False

    def __post_init__(self):
        if self.exclude is None:
            self.exclude = []
        elif isinstance(self.exclude, str):
            self.exclude = [self.exclude]
        for name in _TEXT_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, str) or not value:
                raise ConfigError(f"Setting '{name}' must be a non-empty string, got {value!r}")
        for name in _FLAG_FIELDS:
            value = getattr(self, name)
            if not isinstance(value, bool):
                raise ConfigError(f"Setting '{name}' must be true or false, got {value!r}")
        if not isinstance(self.exclude, list) or not all(isinstance(p, str) for p in self.exclude):
            raise ConfigError(f"Setting 'exclude' must be a list of patterns, got {self.exclude!r}")
        if self.compression not in COMPRESSION:
            raise ConfigError(f"Unsupported compression '{self.compression}'")

    @classmethod
    def from_mapping(cls, data: Optional[Dict[str, Any]]) -> "Settings":
        data = data or {}
        if not isinstance(data, dict):
            raise ConfigError(f"Expected a settings mapping, got {type(data).__name__}")
        known = {f.name for f in dataclasses.fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown settings: {', '.join(unknown)}")
        return cls(**data)

    def merged(self, overrides: Optional[Dict[str, Any]]) -> "Settings":
        overrides = overrides or {}
        if not isinstance(overrides, dict):
            raise ConfigError(f"Expected a settings mapping, got {type(overrides).__name__}")
        values = dataclasses.asdict(self)
        values.update({k: v for k, v in overrides.items() if v is not None})
        return Settings.from_mapping(values)


def load_yaml(path: Union[str, Path]) -> Dict[str, Any]:
    path = Path(path)
    if not path.exists():
        raise ConfigError(f"Config file not found at {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigError(f"Error parsing {path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Expected YAML mapping at {path}, got {type(data).__name__}")
    return data


def load_settings(path: Optional[Union[str, Path]] = None) -> Settings:
    if path is None:
        return Settings()
    return Settings.from_mapping(load_yaml(path))
