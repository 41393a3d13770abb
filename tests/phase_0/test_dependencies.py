"""Dependency alignment tests between packaging metadata and imports."""

from __future__ import annotations

import ast
import re
import sys
from pathlib import Path

import tomllib


PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Import names that differ from their distribution names on the index.
DISTRIBUTION_NAMES = {"yaml": "pyyaml"}


def _read_requirements(path: Path) -> list[str]:
    """Load requirement strings from a file, ignoring comments and blanks."""

    return [
        line.strip()
        for line in path.read_text().splitlines()
        if line.strip() and not line.lstrip().startswith("#")
    ]


def _distribution(requirement: str) -> str:
    return re.split(r"[<>=!~\[; ]", requirement, maxsplit=1)[0].lower().replace("-", "_")


def _third_party_imports(root: Path) -> set[str]:
    modules: set[str] = set()
    for path in root.rglob("*.py"):
        tree = ast.parse(path.read_text(encoding="utf-8"))
        for node in ast.walk(tree):
            if isinstance(node, ast.Import):
                modules.update(alias.name.split(".")[0] for alias in node.names)
            elif isinstance(node, ast.ImportFrom) and node.level == 0 and node.module:
                modules.add(node.module.split(".")[0])
    return {
        name
        for name in modules
        if name not in sys.stdlib_module_names and name not in {"__future__", "kasmo"}
    }


def test_requirements_match_pyproject_dependencies() -> None:
    """Ensure runtime dependencies stay in sync between pyproject and requirements."""

    pyproject = tomllib.loads((PROJECT_ROOT / "pyproject.toml").read_text())
    pyproject_deps = sorted(pyproject["project"]["dependencies"])

    base_requirements = _read_requirements(PROJECT_ROOT / "requirements" / "base.txt")
    assert sorted(base_requirements) == pyproject_deps


def test_dev_requirements_match_optional_group() -> None:
    """Ensure dev requirements mirror the optional dev extra for local installs."""

    pyproject = tomllib.loads((PROJECT_ROOT / "pyproject.toml").read_text())
    expected_dev = sorted(pyproject["project"]["optional-dependencies"]["dev"])

    dev_requirements = _read_requirements(PROJECT_ROOT / "requirements" / "dev.txt")
    assert dev_requirements[0] == "-r base.txt"
    assert sorted(dev_requirements[1:]) == expected_dev


def test_package_imports_are_declared() -> None:
    """Every third-party module imported by the package must be a runtime dependency."""

    pyproject = tomllib.loads((PROJECT_ROOT / "pyproject.toml").read_text())
    declared = {_distribution(item) for item in pyproject["project"]["dependencies"]}

    imported = _third_party_imports(PROJECT_ROOT / "kasmo")
    imported |= _third_party_imports(PROJECT_ROOT / "scripts")
    missing = {
        name
        for name in imported
        if DISTRIBUTION_NAMES.get(name, name).lower().replace("-", "_") not in declared
    }
    assert not missing
    assert {"httpx", "numpy", "pydantic", "yaml"} <= imported
