"""
Configuration system for the complexity checker.

Supports YAML and JSON configuration files for the complexity limit,
file selection, fact persistence and output.
"""

import argparse
import json
from pathlib import Path
from typing import Dict, Any, Optional, List
from dataclasses import dataclass, field, asdict

import yaml

from cyclomatic.core.complexity import DEFAULT_LIMIT
from cyclomatic.core.errors import ConfigurationError


PROG_NAME = "cyclomatic"

# Default configuration file names to search for
CONFIG_FILE_NAMES = [
    ".cyclomatic.yaml",
    ".cyclomatic.yml",
    ".cyclomatic.json",
    "cyclomatic.yaml",
    "cyclomatic.yml",
    "cyclomatic.json",
]

DEFAULT_EXCLUDE_PATTERNS = [
    ".git/**",
    "__pycache__/**",
    "*.pyc",
    ".tox/**",
    "venv/**",
    ".venv/**",
    "vendor/**",
    "node_modules/**",
    "dist/**",
    "build/**",
    "*.egg-info/**",
    "testdata/**",
]


def option_name(prog: str, name: str) -> str:
    """
    Name a command-line option of this check.

    Run on its own the option keeps its bare name; inside a combined tool
    that hosts several checks it is prefixed with the check's name.
    """
    if Path(prog).stem == PROG_NAME:
        return name
    return f"{PROG_NAME}-{name}"


def add_limit_option(parser: argparse.ArgumentParser, prog: str = PROG_NAME) -> str:
    """Register the limit option on a parser and return its destination."""
    flag = option_name(prog, "limit")
    dest = flag.replace("-", "_")
    parser.add_argument(
        f"--{flag}",
        dest=dest,
        type=int,
        default=None,
        metavar="N",
        help=f"limit of cyclomatic complexity (default: {DEFAULT_LIMIT})",
    )
    return dest


def validate_limit(value: Any) -> int:
    """Check that a limit is a non-negative integer."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError("limit", value, "must be an integer")
    if value < 0:
        raise ConfigurationError("limit", value, "must not be negative")
    return value


@dataclass
class OutputConfig:
    """Configuration for output formatting."""
    format: str = "text"  # text, json, sarif
    output_file: Optional[str] = None
    verbose: bool = False
    color: bool = True
    show_all: bool = False


@dataclass
class CheckConfig:
    """
    Main configuration for the complexity checker.

    Example YAML config:

    ```yaml
    check:
      limit: 10
      exclude:
        - "vendor/**"
      include:
        - "**/*.py"
        - "**/*.go"
      max_file_size: 10485760
      max_workers: 4
      facts_path: .cyclomatic-facts.json

    output:
      format: text
      verbose: false
      color: true
      show_all: false
    ```
    """
    limit: int = DEFAULT_LIMIT
    exclude_patterns: List[str] = field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    include_patterns: Optional[List[str]] = None
    max_file_size: int = 10 * 1024 * 1024  # 10MB
    max_workers: int = 4
    languages: Optional[List[str]] = None
    facts_path: Optional[str] = None

    output: OutputConfig = field(default_factory=OutputConfig)

    def __post_init__(self):
        validate_limit(self.limit)
        if self.max_workers < 1:
            raise ConfigurationError("max_workers", self.max_workers, "must be at least 1")

    def to_dict(self) -> Dict[str, Any]:
        """Convert config to a dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CheckConfig":
        """Create config from a dictionary."""
        data = dict(data)

        if "check" in data and isinstance(data["check"], dict):
            data.update(data.pop("check"))
        if "output" in data and isinstance(data["output"], dict):
            data["output"] = OutputConfig(**data["output"])

        # Map some common alternative names
        if "exclude" in data:
            data["exclude_patterns"] = data.pop("exclude")
        if "include" in data:
            data["include_patterns"] = data.pop("include")
        if "facts" in data:
            data["facts_path"] = data.pop("facts")

        known_fields = {f.name for f in cls.__dataclass_fields__.values()}
        filtered_data = {k: v for k, v in data.items() if k in known_fields}

        return cls(**filtered_data)


def load_config(path: str) -> Dict[str, Any]:
    """
    Load raw configuration data from a file.

    Supports YAML and JSON formats.
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    content = path.read_text(encoding="utf-8")

    if path.suffix == ".json":
        data = json.loads(content)
    else:
        data = yaml.safe_load(content)

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigurationError(str(path), type(data).__name__, "top level must be a mapping")
    return data


def find_config(start_path: str = ".") -> Optional[str]:
    """
    Find a configuration file by searching up the directory tree.

    Returns the path to the first config file found, or None.
    """
    current = Path(start_path).resolve()
    if current.is_file():
        current = current.parent

    while True:
        for name in CONFIG_FILE_NAMES:
            config_path = current / name
            if config_path.is_file():
                return str(config_path)
        if current == current.parent:
            return None
        current = current.parent


def load_check_config(path: Optional[str] = None, start_dir: str = ".") -> CheckConfig:
    """
    Load a CheckConfig from a file or create a default one.

    If path is None, searches for a config file starting from start_dir.
    """
    if path is None:
        path = find_config(start_dir)

    if path is None:
        return CheckConfig()

    return CheckConfig.from_dict(load_config(path))


def create_default_config() -> str:
    """
    Create a default configuration file content.
    """
    config = {
        "check": {
            "limit": DEFAULT_LIMIT,
            "exclude": list(DEFAULT_EXCLUDE_PATTERNS),
            "max_file_size": 10485760,
            "max_workers": 4,
            "facts_path": None,
        },
        "output": {
            "format": "text",
            "verbose": False,
            "color": True,
            "show_all": False,
        },
    }

    return yaml.safe_dump(config, default_flow_style=False, sort_keys=False)
