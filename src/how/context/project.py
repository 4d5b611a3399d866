"""Detect what kind of project lives in a directory."""

import json
import logging
from collections.abc import Callable
from pathlib import Path

from how.models import ProjectContext

log = logging.getLogger(__name__)

NODE_FRAMEWORKS = (
    ("react", "react"),
    ("vue", "vue"),
    ("@angular/core", "angular"),
    ("next", "next.js"),
    ("express", "express"),
)
PYTHON_MARKERS = ("requirements.txt", "setup.py", "pyproject.toml", "Pipfile")
PYTHON_FRAMEWORKS = ("django", "flask", "fastapi")


def detect_nodejs(directory: Path) -> ProjectContext | None:
    package_json = directory / "package.json"
    if not package_json.is_file():
        return None

    ctx = ProjectContext(type="nodejs")
    try:
        data = json.loads(package_json.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        log.debug("cannot parse %s: %s", package_json, e)
        return ctx
    if not isinstance(data, dict):
        return ctx

    ctx.name = str(data.get("name") or "")
    ctx.version = str(data.get("version") or "")
    scripts = data.get("scripts")
    if isinstance(scripts, dict):
        ctx.scripts = {str(k): str(v) for k, v in scripts.items()}
    dependencies = data.get("dependencies")
    if isinstance(dependencies, dict):
        ctx.dependencies = sorted(dependencies)
        for package, framework in NODE_FRAMEWORKS:
            if package in dependencies:
                ctx.framework = framework
                break
    return ctx


def read_requirements(path: Path) -> list[str]:
    """Return requirement names from a requirements.txt, without version specifiers."""
    names = []
    for raw_line in path.read_text(encoding="utf-8", errors="replace").splitlines():
        line = raw_line.split("#", 1)[0].strip()
        if not line or line.startswith("-"):
            continue
        for sep in ("==", ">=", "<=", "~=", "!=", ">", "<", "[", ";", " "):
            line = line.split(sep, 1)[0]
        if line:
            names.append(line)
    return names


def detect_python(directory: Path) -> ProjectContext | None:
    marker = next((name for name in PYTHON_MARKERS if (directory / name).is_file()), None)
    if marker is None and not any(directory.glob("*.py")):
        return None

    ctx = ProjectContext(type="python", name=directory.name)
    if marker == "requirements.txt":
        try:
            ctx.dependencies = read_requirements(directory / marker)
        except OSError as e:
            log.debug("cannot read requirements: %s", e)
        lowered = [dep.lower() for dep in ctx.dependencies]
        for framework in PYTHON_FRAMEWORKS:
            if any(framework in dep for dep in lowered):
                ctx.framework = framework
                break
    return ctx


def detect_go(directory: Path) -> ProjectContext | None:
    go_mod = directory / "go.mod"
    if not go_mod.is_file():
        return None

    ctx = ProjectContext(type="go")
    try:
        for line in go_mod.read_text(encoding="utf-8").splitlines():
            line = line.strip()
            if line.startswith("module "):
                ctx.name = line[len("module "):].strip().rsplit("/", 1)[-1]
                break
    except OSError as e:
        log.debug("cannot read %s: %s", go_mod, e)
    return ctx


def detect_rust(directory: Path) -> ProjectContext | None:
    if not (directory / "Cargo.toml").is_file():
        return None
    return ProjectContext(type="rust", name=directory.name)


def detect_docker(directory: Path) -> ProjectContext | None:
    markers = ("Dockerfile", "docker-compose.yml", "docker-compose.yaml")
    if not any((directory / name).is_file() for name in markers):
        return None
    return ProjectContext(type="docker", name=directory.name)


DETECTORS: tuple[Callable[[Path], ProjectContext | None], ...] = (
    detect_nodejs,
    detect_python,
    detect_go,
    detect_rust,
    detect_docker,
)


def detect_project(directory: Path) -> ProjectContext | None:
    """Return the first matching project type, checked in a fixed priority order."""
    for detector in DETECTORS:
        project = detector(directory)
        if project is not None:
            log.debug("detected %s project in %s", project.type, directory)
            return project
    return None
