"""
User configuration for the cork front end.

Configuration lives in a YAML file. Missing keys take their defaults and
unknown keys are ignored. Without an explicit path the usual locations
under the home directory are read in order; the last file found wins.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, List, Optional

import yaml

from cork.cork_datatypes import Mode, OutputRadix, ConfigError

DEFAULT_PROMPT = "cork> "

# Accepted spellings for output_radix, lower-cased
_RADIX_SPELLINGS = {
    "hex": OutputRadix.HEX,
    "decimal": OutputRadix.DECIMAL,
    "dec": OutputRadix.DECIMAL,
    "octal": OutputRadix.OCTAL,
    "oct": OutputRadix.OCTAL,
    "binary": OutputRadix.BINARY,
    "bin": OutputRadix.BINARY,
}


@dataclass
class Config:
    prompt: str = DEFAULT_PROMPT
    header: bool = True
    history: bool = False
    output_radix: OutputRadix = OutputRadix.HEX
    punctuate_output: bool = False
    mode: Mode = Mode.HEX

    @classmethod
    def from_mapping(cls, data: Optional[dict]) -> Config:
        """Builds a Config from parsed YAML, validating each known key."""
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ConfigError(f"config must be a mapping, got {type(data).__name__}")
        cfg = cls()
        if 'prompt' in data:
            cfg.prompt = str(data['prompt'])
        for key in ('header', 'history', 'punctuate_output'):
            if key in data:
                setattr(cfg, key, _as_bool(key, data[key]))
        if 'output_radix' in data:
            cfg.output_radix = parse_output_radix(data['output_radix'])
        if 'mode' in data:
            cfg.mode = parse_mode(data['mode'])
        return cfg

    def override_from_options(self, options: Any) -> Config:
        """Returns a copy with command-line flags applied on top."""
        cfg = replace(self)
        if getattr(options, 'punctuate_output', False):
            cfg.punctuate_output = True
        if getattr(options, 'hex', False):
            cfg.output_radix = OutputRadix.HEX
        elif getattr(options, 'dec', False):
            cfg.output_radix = OutputRadix.DECIMAL
        elif getattr(options, 'oct', False):
            cfg.output_radix = OutputRadix.OCTAL
        elif getattr(options, 'bin', False):
            cfg.output_radix = OutputRadix.BINARY
        if getattr(options, 'history', False):
            cfg.history = True
        mode = getattr(options, 'mode', None)
        if mode:
            cfg.mode = parse_mode(mode)
        return cfg


def _as_bool(key: str, value: Any) -> bool:
    if isinstance(value, bool):
        return value
    raise ConfigError(f"{key} must be true or false, got {value!r}")


def parse_output_radix(value: Any) -> OutputRadix:
    radix = _RADIX_SPELLINGS.get(str(value).strip().lower())
    if radix is None:
        raise ConfigError(f"invalid output_radix {value!r}, expected one of Hex, Decimal, Octal, Binary")
    return radix


def parse_mode(value: Any) -> Mode:
    if isinstance(value, Mode):
        return value
    try:
        return Mode(str(value).strip().lower())
    except ValueError:
        raise ConfigError(f"invalid mode {value!r}, expected 'hex' or 'dec'") from None


def config_locations(home: Optional[Path] = None) -> List[Path]:
    home = home if home is not None else Path.home()
    return [
        home / ".cork.yml",
        home / ".cork" / "cork.yml",
        home / ".config" / "cork" / "cork.yml",
    ]


def load_config_text(text: str) -> Config:
    try:
        data = yaml.safe_load(text) if text.strip() else None
    except yaml.YAMLError as e:
        raise ConfigError(f"Failed to parse config: {e}") from e
    return Config.from_mapping(data)


def read_config(user_path: Optional[str] = None, home: Optional[Path] = None) -> Config:
    """Reads the configuration from user_path, or from the default locations."""
    content = ""
    if user_path is not None:
        try:
            content = Path(user_path).read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Failed to read config {user_path}: {e}") from e
    else:
        for loc in config_locations(home):
            if loc.is_file():
                try:
                    content = loc.read_text(encoding="utf-8")
                except OSError as e:
                    raise ConfigError(f"Failed to read config {loc}: {e}") from e
    return load_config_text(content)
