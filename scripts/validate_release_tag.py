"""Check that a release tag names the version in pyproject.toml."""

from __future__ import annotations

import os
import re
import sys
from pathlib import Path

import tomllib

TAG_PATTERN = re.compile(r"v(\d+\.\d+\.\d+)")


def load_project_version(path: Path = Path("pyproject.toml")) -> str:
    pyproject = tomllib.loads(path.read_text(encoding="utf-8"))
    version = pyproject.get("project", {}).get("version")
    if not isinstance(version, str) or not version:
        raise SystemExit("Could not find project.version in pyproject.toml")
    return version


def validate_release_tag(tag: str, version: str) -> None:
    match = TAG_PATTERN.fullmatch(tag)
    if match is None:
        raise SystemExit(f"Invalid release tag {tag!r}; expected vX.Y.Z such as v0.2.0")
    if match.group(1) != version:
        raise SystemExit(f"Release tag {tag} does not match project.version {version}")
    print(f"Release tag check passed: {tag}")


def main(argv: list[str]) -> None:
    # CI passes nothing and exports the tag instead.
    tag = argv[0] if argv else os.getenv("GITHUB_REF_NAME")
    if not tag:
        raise SystemExit("usage: validate_release_tag.py TAG (or set GITHUB_REF_NAME)")
    validate_release_tag(tag, load_project_version())


if __name__ == "__main__":
    main(sys.argv[1:])
