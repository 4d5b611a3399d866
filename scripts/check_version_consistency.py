"""Fail when pyproject.toml and how.__version__ disagree."""

from __future__ import annotations

import re
from pathlib import Path

import tomllib

VERSION_PATTERN = re.compile(r'^__version__\s*=\s*"([^"]+)"', re.MULTILINE)


def project_version(root: Path) -> str:
    pyproject = tomllib.loads((root / "pyproject.toml").read_text(encoding="utf-8"))
    version = pyproject.get("project", {}).get("version")
    if not isinstance(version, str) or not version:
        raise SystemExit("Could not find project.version in pyproject.toml")
    return version


def module_version(root: Path) -> str:
    source = (root / "src" / "how" / "__init__.py").read_text(encoding="utf-8")
    match = VERSION_PATTERN.search(source)
    if match is None:
        raise SystemExit("Could not find __version__ in src/how/__init__.py")
    return match.group(1)


def main() -> None:
    root = Path(__file__).resolve().parent.parent
    expected = project_version(root)
    actual = module_version(root)
    if expected != actual:
        raise SystemExit(
            f"Version mismatch: pyproject.toml project.version={expected} "
            f"!= how.__version__={actual}"
        )
    print(f"Version check passed: {expected}")


if __name__ == "__main__":
    main()
