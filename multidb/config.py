"""
Configuration loading for multidb.

Loads a YAML configuration file into a DotDict, substitutes ``${VAR}`` and
``${VAR:default}`` references from the process environment, and applies
``MULTIDB_<SECTION>_<KEY>`` environment overrides on top.

Provider-family variables such as ``PG_HOST`` or ``SQLITE_PATH`` are only ever
read here, through substitution in the ``databases`` section. The core
components never look at them.
"""

import copy
import os
import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import yaml  # type: ignore[import-untyped]

from .dot_dict import DotDict
from .exceptions import ConfigError

# Maximum config file size (10MB)
MAX_CONFIG_SIZE_BYTES = 10 * 1024 * 1024

DEFAULT_CONFIG_FILENAME = "multidb.yaml"
CONFIG_ENV_VAR = "MULTIDB_CONFIG"
ENV_PREFIX = "MULTIDB_"

DEFAULTS: dict[str, Any] = {
    "paths": {
        "clients": "db/clients",
        "schemas": "db/schemas",
        "migrations": "db/migrations",
    },
    "tool": {
        "command": ["npx", "prisma"],
        "timeout": None,
    },
    "health": {
        "timeout": 5.0,
        "max_workers": 8,
    },
    "discovery": {
        "timeout": 10.0,
        "auto_register": True,
    },
    "logging": {
        "level": "info",
        "colors": True,
        "micros": False,
    },
    "databases": {},
}

# ${NAME} or ${NAME:default}
_SUBST_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)(?::([^}]*))?\}")


def _merge(base: dict[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Recursively merge override into a copy of base."""
    result = copy.deepcopy(base)
    for key, val in override.items():
        if isinstance(val, Mapping) and isinstance(result.get(key), dict):
            result[key] = _merge(result[key], val)
        else:
            result[key] = copy.deepcopy(val)
    return result


def _check_file_size(path: Path) -> None:
    size = os.path.getsize(path)
    if size > MAX_CONFIG_SIZE_BYTES:
        raise ConfigError(
            f"Configuration file '{path}' is {size} bytes, exceeding maximum size",
            limit=MAX_CONFIG_SIZE_BYTES,
        )


def _convert_env_value(value: str) -> Any:
    """Convert an environment override string to a typed value."""
    lowered = value.lower()
    if lowered in ("null", "none", ""):
        return None
    if lowered in ("true", "false"):
        return lowered == "true"
    if "," in value:
        return [_convert_env_value(v.strip()) for v in value.split(",")]
    try:
        return float(value) if "." in value else int(value)
    except ValueError:
        return value


class Config(DotDict):
    """
    Configuration loaded from YAML with environment substitution and overrides.

    Environment Override Format:
        MULTIDB_<SECTION>_<KEY>=value

    Examples:
        MULTIDB_LOGGING_LEVEL=debug
        MULTIDB_HEALTH_MAX_WORKERS=4

    Underscores are resolved against existing keys first, so
    ``MULTIDB_HEALTH_MAX_WORKERS`` maps to ``health.max_workers``.

    Example:
        cfg = Config("etc/multidb.yaml")
        cfg.paths.clients
        cfg.get("health.timeout")
    """

    def __init__(
        self,
        fname: str | Path | None = None,
        data: Mapping[str, Any] | None = None,
        env: Mapping[str, str] | None = None,
        enable_env_overrides: bool = True,
    ) -> None:
        """
        Initialize configuration.

        Args:
            fname: Optional path to a YAML configuration file
            data: Optional mapping merged on top of the file contents
            env: Environment used for substitution and overrides (os.environ by default)
            enable_env_overrides: Whether MULTIDB_* variables override keys
        """
        super().__init__()
        env = os.environ if env is None else env

        content = copy.deepcopy(DEFAULTS)
        if fname is not None:
            content = _merge(content, self._read(Path(fname)))
        if data:
            content = _merge(content, data)

        content = self._substitute(content, env)
        if enable_env_overrides:
            self._apply_env_overrides(content, env)

        self.set(**content)
        self._source = Path(fname).resolve() if fname else None

    @staticmethod
    def _read(path: Path) -> dict[str, Any]:
        if not path.is_file():
            raise ConfigError(f"Configuration file not found: {path}")
        _check_file_size(path)
        with open(path) as f:
            try:
                loaded = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ConfigError(f"Malformed configuration file: {path}") from e
        if loaded is None:
            return {}
        if not isinstance(loaded, dict):
            raise ConfigError(f"Configuration root must be a mapping: {path}")
        return loaded

    def _substitute(self, content: Any, env: Mapping[str, str]) -> Any:
        """Recursively replace ${VAR} / ${VAR:default} in string values."""
        if isinstance(content, dict):
            return {k: self._substitute(v, env) for k, v in content.items()}
        if isinstance(content, list):
            return [self._substitute(v, env) for v in content]
        if isinstance(content, str):
            return self._substitute_str(content, env)
        return content

    @staticmethod
    def _substitute_str(value: str, env: Mapping[str, str]) -> str:
        def replace(match: re.Match) -> str:
            name, default = match.group(1), match.group(2)
            if env.get(name):
                return env[name]
            if default is not None:
                return default
            raise ConfigError(f"Environment variable '{name}' is not set")

        return _SUBST_PATTERN.sub(replace, value)

    def _apply_env_overrides(
        self, content: dict[str, Any], env: Mapping[str, str]
    ) -> None:
        for key, value in env.items():
            if not key.startswith(ENV_PREFIX) or key == CONFIG_ENV_VAR:
                continue
            parts = key[len(ENV_PREFIX) :].lower().split("_")
            path = self._env_parts_to_path(content, parts)
            self._set_nested_value(content, path, _convert_env_value(value))

    @staticmethod
    def _env_parts_to_path(content: dict[str, Any], parts: list[str]) -> list[str]:
        """Join underscore-separated parts greedily against existing keys."""
        path: list[str] = []
        cur: Any = content
        i = 0
        while i < len(parts):
            match = None
            if isinstance(cur, dict):
                for j in range(len(parts), i, -1):
                    candidate = "_".join(parts[i:j])
                    if candidate in cur:
                        match = (candidate, j)
                        break
            if match is None:
                path.append(parts[i])
                cur = None
                i += 1
            else:
                path.append(match[0])
                cur = cur[match[0]]
                i = match[1]
        return path

    @staticmethod
    def _set_nested_value(data: dict[str, Any], path: list[str], value: Any) -> None:
        current = data
        for part in path[:-1]:
            if not isinstance(current.get(part), dict):
                current[part] = {}
            current = current[part]
        current[path[-1]] = value

    @property
    def source(self) -> Path | None:
        """Path of the file this configuration was loaded from, if any."""
        return self._source

    def resolve_path(self, key: str) -> Path:
        """
        Resolve a path setting relative to the config file's project root.

        Relative paths are resolved against the parent of the ``etc`` directory
        holding the config file, or the current directory when no file was used.
        """
        value = self.get(key)
        if value is None:
            raise ConfigError(f"Missing configuration value: {key}")
        path = Path(str(value)).expanduser()
        if path.is_absolute():
            return path
        return get_project_root(self.source) / path


def get_project_root(config_path: Path | None = None) -> Path:
    """
    Determine the project root.

    A config file inside an ``etc`` directory belongs to the project holding
    that directory. Any other config file marks its own directory as the root.
    Without a config file the current working directory is used.
    """
    if config_path is None:
        return Path.cwd()
    if config_path.parent.name == "etc":
        return config_path.parent.parent
    return config_path.parent


def find_config_file(explicit: str | None = None, env: Mapping[str, str] | None = None) -> Path | None:
    """
    Locate the configuration file.

    Order: explicit argument, ``MULTIDB_CONFIG``, ``./etc/multidb.yaml``.
    Returns None when no file exists and none was requested explicitly.
    """
    env = os.environ if env is None else env
    if explicit:
        return Path(explicit)
    if env.get(CONFIG_ENV_VAR):
        return Path(env[CONFIG_ENV_VAR])
    candidate = Path.cwd() / "etc" / DEFAULT_CONFIG_FILENAME
    return candidate if candidate.is_file() else None
