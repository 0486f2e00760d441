"""YAML settings source with layered files and include: support."""

from __future__ import annotations

import os
import sys
from pathlib import Path

import yaml
from platformdirs import user_config_dir
from pydantic_settings import BaseSettings, YamlConfigSettingsSource

from conflux.core.log import logger

DEFAULTS_FILE = Path(__file__).parent.parent / "defaults" / "default.yaml"
PROJECT_FILE = "conflux.yaml"


def user_config_file() -> Path:
    return Path(user_config_dir("conflux", appauthor=False)) / PROJECT_FILE


class YamlWithIncludesSettingsSource(YamlConfigSettingsSource):
    """Loads and deep-merges every YAML layer, lowest priority first:

    packaged defaults < user config < ./conflux.yaml < --include files.

    Each file may itself pull in others with an include: key.
    """

    def __init__(self, settings_cls: type[BaseSettings], yaml_file=None):
        # --include is consumed here, before pydantic parses the CLI.
        includes = []
        args = sys.argv[1:]
        for i, arg in enumerate(args):
            if arg == "--include" and i + 1 < len(args):
                includes.append(args[i + 1])

        self.includes = includes
        self.explicit_file = yaml_file
        super().__init__(settings_cls, yaml_file)

    def _read_files(self, files, deep_merge: bool = False):  # noqa: ARG002
        files_to_load = [DEFAULTS_FILE]
        if self.explicit_file:
            files_to_load.append(Path(self.explicit_file))
        else:
            files_to_load += [user_config_file(), Path(PROJECT_FILE)]
        files_to_load += [Path(f).expanduser() for f in self.includes]

        result = {}
        for file_path in files_to_load:
            if file_path.is_file():
                logger.debug("Loading configuration", file=str(file_path))
                data = self._load_file_recursive(file_path, set())
                result = self._deep_merge(result, data)
            else:
                logger.spew("Configuration file not found", file=str(file_path))
        return result

    def _load_file_recursive(self, filepath: Path, visited: set[Path]) -> dict:
        """Load a file with its include: directives resolved.

        Raises:
            ValueError: On a circular include
        """
        filepath = filepath.resolve()
        if filepath in visited:
            raise ValueError(f"Circular include: {filepath}")
        visited.add(filepath)

        with open(filepath, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        includes = data.pop("include", None) or []
        if isinstance(includes, (str, os.PathLike)):
            includes = [includes]

        for inc in includes:
            inc_path = self._resolve_path(inc, filepath)
            inc_data = self._load_file_recursive(inc_path, visited.copy())
            # The including file wins over what it includes.
            data = self._deep_merge(inc_data, data)

        return data

    @staticmethod
    def _resolve_path(include_path: str, relative_to: Path) -> Path:
        path = Path(include_path).expanduser()
        if path.is_absolute():
            return path
        return (relative_to.parent / path).resolve()

    def _deep_merge(self, base: dict, override: dict) -> dict:
        result = base.copy()
        for key, value in override.items():
            if isinstance(result.get(key), dict) and isinstance(value, dict):
                result[key] = self._deep_merge(result[key], value)
            else:
                result[key] = value
        return result
