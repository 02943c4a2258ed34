"""Utilities to discover uncertain values in scripts and modules.

This module was adapted from `fastapi_cli.discover` of package `fastapi-cli` version 0.0.8 (77e6d1f).
"""

from __future__ import annotations

import importlib
import logging
import sys
from dataclasses import dataclass
from typing import TYPE_CHECKING

from corrsample._uncertain import Uncertain

from .config import ModuleSource, ScriptSource

if TYPE_CHECKING:
    from pathlib import Path
    from types import ModuleType

    from .config import TargetSource

logger = logging.getLogger(__name__)


@dataclass
class ModuleData:
    """Module data for a Python module."""

    module_import_str: str
    extra_sys_path: Path
    module_paths: list[Path]


def get_module_data_from_path(path: Path) -> ModuleData:
    """Get module data from a file path.

    Args:
        path: Path to a Python file or package

    Returns:
        ModuleData containing module import information

    """
    use_path = path.resolve()
    module_path = use_path
    if use_path.is_file() and use_path.stem == "__init__":
        module_path = use_path.parent
    module_paths = [module_path]
    extra_sys_path = module_path.parent
    for parent in module_path.parents:
        init_path = parent / "__init__.py"
        if init_path.is_file():
            module_paths.insert(0, parent)
            extra_sys_path = parent.parent
        else:
            break

    module_str = ".".join(p.stem for p in module_paths)
    return ModuleData(
        module_import_str=module_str,
        extra_sys_path=extra_sys_path.resolve(),
        module_paths=module_paths,
    )


def _get_uncertain(module: ModuleType, name: str) -> Uncertain:
    if not hasattr(module, name):
        msg = f"Could not find '{name}' in {module.__name__}"
        raise ValueError(msg)
    handle = getattr(module, name)
    if not isinstance(handle, Uncertain):
        msg = f"'{name}' in {module.__name__} is not an Uncertain instance"
        raise TypeError(msg)
    return handle


def load_uncertain_from_script(script_path: Path, name: str | None = None) -> tuple[str, Uncertain]:
    """Load an uncertain value from a Python script path.

    Args:
        script_path: Path to the Python script defining the value
        name: Name of the variable. If None, the script must define exactly one Uncertain

    Returns:
        The variable name and the loaded Uncertain instance

    Raises:
        ImportError: If the module cannot be imported
        ValueError: If no value is found, several are found, or the name doesn't exist
        TypeError: If the specified variable is not an Uncertain instance

    """
    module_data = get_module_data_from_path(script_path)
    if str(module_data.extra_sys_path) not in sys.path:
        sys.path.insert(0, str(module_data.extra_sys_path))

    try:
        module = importlib.import_module(module_data.module_import_str)
    except (ImportError, ValueError):
        logger.exception("Import error")
        logger.warning("Ensure all the package directories have an __init__.py file")
        raise

    if name:
        return name, _get_uncertain(module, name)

    found = [attr for attr in dir(module) if isinstance(getattr(module, attr), Uncertain)]
    if len(found) == 1:
        logger.debug(f"Found uncertain value: {found[0]}")
        return found[0], getattr(module, found[0])

    if not found:
        msg = f"Could not find an Uncertain in {module_data.module_import_str}"
    else:
        msg = f"Found several Uncertain values in {module_data.module_import_str} ({', '.join(found)}), pick one"
    raise ValueError(msg)


def load_uncertain_from_module_path(module_path: str) -> tuple[str, Uncertain]:
    """Load an uncertain value from a module path (e.g., 'examples.dice:total').

    Args:
        module_path: Module path in format 'module.path:variable_name'

    Returns:
        The variable name and the loaded Uncertain instance

    Raises:
        ValueError: If module path format is invalid
        TypeError: If the specified variable is not an Uncertain instance

    """
    if ":" not in module_path:
        msg = "Module path must be in format 'module.path:variable_name'"
        raise ValueError(msg)

    module_name, name = module_path.split(":", 1)
    module = importlib.import_module(module_name)
    return name, _get_uncertain(module, name)


def load_uncertain_from_source(source: TargetSource) -> tuple[str, Uncertain]:
    """Load an uncertain value from a TargetSource (script or module)."""
    match source:
        case ScriptSource(script=script, name=name):
            return load_uncertain_from_script(script, name)
        case ModuleSource(module_path=module_path):
            return load_uncertain_from_module_path(module_path)
