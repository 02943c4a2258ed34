"""Configuration loading from pyproject.toml."""

import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import cast


class ConfigError(Exception):
    """Error in corrsample configuration."""


@dataclass(slots=True, frozen=True)
class ScriptSource:
    """Script path with optional variable name."""

    script: Path
    name: str | None = None


@dataclass(slots=True, frozen=True)
class ModuleSource:
    """Module path with variable name (e.g., 'examples.dice:total')."""

    module_path: str


TargetSource = ScriptSource | ModuleSource


@dataclass(slots=True, frozen=True)
class CorrsampleConfig:
    """Configuration loaded from the [tool.corrsample] table of pyproject.toml.

    All relative paths are resolved from the project root (directory containing pyproject.toml).
    """

    target: TargetSource | None = None
    count: int | None = None
    output: Path | None = None
    project_root: Path | None = None


def find_pyproject_toml(start_dir: Path | None = None) -> Path | None:
    """Find pyproject.toml by walking up from start_dir.

    Args:
        start_dir: Starting directory. Defaults to current working directory.

    Returns:
        Path to pyproject.toml if found, None otherwise.

    """
    if start_dir is None:
        start_dir = Path.cwd()

    current = start_dir.resolve()

    while True:
        candidate = current / "pyproject.toml"
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent


def parse_target(value: object, project_root: Path | None = None) -> TargetSource:
    """Parse a target given as a module path string or a script table.

    A string containing ':' whose part before the colon is not a file is a
    module path. Any other string is treated as a script path.

    Args:
        value: The raw value (string or dict)
        project_root: Directory for resolving relative script paths

    Returns:
        Parsed TargetSource

    Raises:
        ConfigError: If the value format is invalid

    """
    if isinstance(value, str):
        head, sep, name = value.partition(":")
        if sep and not head.endswith(".py"):
            return ModuleSource(module_path=value)
        return ScriptSource(script=_resolve(Path(head), project_root), name=name or None)

    if isinstance(value, dict):
        # Script path format: { script = "path.py", name = "total" }
        value_dict = cast("dict[str, object]", value)
        script_value = value_dict.get("script")
        if not isinstance(script_value, str):
            msg = "Invalid [tool.corrsample].target.script: expected string path"
            raise ConfigError(msg)

        name = value_dict.get("name")
        if name is not None and not isinstance(name, str):
            msg = "Invalid [tool.corrsample].target.name: expected string"
            raise ConfigError(msg)

        return ScriptSource(script=_resolve(Path(script_value), project_root), name=name)

    msg = "Invalid [tool.corrsample].target configuration. Expected string or table with 'script' key."
    raise ConfigError(msg)


def _resolve(path: Path, project_root: Path | None) -> Path:
    if project_root is None or path.is_absolute():
        return path
    return project_root / path


def load_config(pyproject_path: Path) -> CorrsampleConfig:
    """Load and validate [tool.corrsample] config from pyproject.toml.

    Args:
        pyproject_path: Path to pyproject.toml

    Returns:
        Parsed CorrsampleConfig

    Raises:
        ConfigError: If the configuration is invalid

    """
    project_root = pyproject_path.parent

    with pyproject_path.open("rb") as f:
        try:
            data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            msg = f"Invalid TOML in {pyproject_path}: {e}"
            raise ConfigError(msg) from e

    section = data.get("tool", {}).get("corrsample", {})
    if not section:
        return CorrsampleConfig(project_root=project_root)

    target: TargetSource | None = None
    if "target" in section:
        target = parse_target(section["target"], project_root)

    count: int | None = None
    if "count" in section:
        count_value = section["count"]
        if isinstance(count_value, bool) or not isinstance(count_value, int) or count_value < 0:
            msg = "Invalid [tool.corrsample].count: expected non-negative integer"
            raise ConfigError(msg)
        count = count_value

    output_path: Path | None = None
    if "output" in section:
        output_value = section["output"]
        if not isinstance(output_value, str):
            msg = "Invalid [tool.corrsample].output: expected string path"
            raise ConfigError(msg)
        output_path = _resolve(Path(output_value), project_root)

    return CorrsampleConfig(
        target=target,
        count=count,
        output=output_path,
        project_root=project_root,
    )


def get_config() -> CorrsampleConfig:
    """Get config from pyproject.toml in current directory or parents.

    Returns:
        CorrsampleConfig (may be empty if no pyproject.toml or no [tool.corrsample] section)

    """
    pyproject_path = find_pyproject_toml()
    if pyproject_path is None:
        return CorrsampleConfig()
    return load_config(pyproject_path)
