"""Tests for the configuration module."""

from pathlib import Path

import pytest

from corrsample._cli.config import (
    ConfigError,
    CorrsampleConfig,
    ModuleSource,
    ScriptSource,
    find_pyproject_toml,
    load_config,
    parse_target,
)


class TestFindPyprojectToml:
    def test_finds_in_current_directory(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[project]\nname = 'test'\n")
        assert find_pyproject_toml(tmp_path) == pyproject

    def test_finds_in_parent_directory(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[project]\nname = 'test'\n")
        subdir = tmp_path / "src" / "pkg"
        subdir.mkdir(parents=True)
        assert find_pyproject_toml(subdir) == pyproject


class TestParseTarget:
    def test_module_path(self) -> None:
        assert parse_target("examples.dice:total") == ModuleSource(module_path="examples.dice:total")

    def test_script_path(self) -> None:
        assert parse_target("examples/dice.py") == ScriptSource(script=Path("examples/dice.py"))

    def test_script_path_with_name(self) -> None:
        assert parse_target("examples/dice.py:total") == ScriptSource(script=Path("examples/dice.py"), name="total")

    def test_script_table_resolved_against_root(self, tmp_path: Path) -> None:
        result = parse_target({"script": "dice.py", "name": "total"}, tmp_path)
        assert result == ScriptSource(script=tmp_path / "dice.py", name="total")

    def test_script_table_missing_script(self) -> None:
        with pytest.raises(ConfigError, match="target.script"):
            parse_target({"name": "total"})

    def test_script_table_bad_name(self) -> None:
        with pytest.raises(ConfigError, match="target.name"):
            parse_target({"script": "dice.py", "name": 3})

    def test_invalid_type(self) -> None:
        with pytest.raises(ConfigError, match="Expected string or table"):
            parse_target(42)


class TestLoadConfig:
    def test_no_section(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[project]\nname = 'test'\n")
        assert load_config(pyproject) == CorrsampleConfig(project_root=tmp_path)

    def test_full_section(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            """
[tool.corrsample]
target = "examples.dice:total"
count = 25
output = "out/samples.toml"
""",
        )
        config = load_config(pyproject)
        assert config.target == ModuleSource(module_path="examples.dice:total")
        assert config.count == 25
        assert config.output == tmp_path / "out" / "samples.toml"

    def test_script_table(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            """
[tool.corrsample.target]
script = "models/budget.py"
name = "margin"
""",
        )
        config = load_config(pyproject)
        assert config.target == ScriptSource(script=tmp_path / "models" / "budget.py", name="margin")

    @pytest.mark.parametrize("value", ["-1", "'ten'", "true", "1.5"])
    def test_invalid_count(self, tmp_path: Path, value: str) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(f"[tool.corrsample]\ncount = {value}\n")
        with pytest.raises(ConfigError, match="count"):
            load_config(pyproject)

    def test_invalid_output(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[tool.corrsample]\noutput = 3\n")
        with pytest.raises(ConfigError, match="output"):
            load_config(pyproject)

    def test_invalid_toml(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text("[tool.corrsample\n")
        with pytest.raises(ConfigError, match="Invalid TOML"):
            load_config(pyproject)
