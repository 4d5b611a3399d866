"""Gather a snapshot of the user's working environment for the prompt."""

import fnmatch
import logging
import os
from collections.abc import Mapping
from pathlib import Path

from how.context.git import get_git_context
from how.context.project import detect_project
from how.context.shell_history import get_recent_commands
from how.models import Context, ContextConfig, FileContext

log = logging.getLogger(__name__)

MAX_FILES = 50
MAX_INLINE_SIZE = 2048

DEFAULT_EXCLUSIONS = frozenset(
    {
        ".git",
        ".svn",
        ".hg",
        "node_modules",
        "__pycache__",
        ".pytest_cache",
        "target",
        "build",
        "dist",
        ".next",
        ".DS_Store",
        "Thumbs.db",
    }
)

IMPORTANT_FILES = frozenset(
    {
        "README.md",
        "README.txt",
        "README.rst",
        "README",
        "package.json",
        "go.mod",
        "requirements.txt",
        "setup.py",
        "pyproject.toml",
        "Cargo.toml",
        "Dockerfile",
        "docker-compose.yml",
        "docker-compose.yaml",
        "Makefile",
        "makefile",
        ".gitignore",
        ".env.example",
        "tsconfig.json",
        "pom.xml",
        "build.gradle",
    }
)

LANGUAGES = {
    ".go": "go",
    ".js": "javascript",
    ".ts": "typescript",
    ".py": "python",
    ".rs": "rust",
    ".java": "java",
    ".cpp": "cpp",
    ".c": "c",
    ".h": "c",
    ".sh": "bash",
    ".bash": "bash",
    ".zsh": "zsh",
    ".fish": "fish",
    ".yaml": "yaml",
    ".yml": "yaml",
    ".json": "json",
    ".xml": "xml",
    ".html": "html",
    ".css": "css",
    ".sql": "sql",
    ".md": "markdown",
    ".txt": "text",
}

ENVIRONMENT_VARIABLES = (
    "PATH",
    "HOME",
    "USER",
    "SHELL",
    "PWD",
    "NODE_ENV",
    "PYTHON_VERSION",
    "GOPATH",
    "GOROOT",
    "DOCKER_HOST",
    "KUBERNETES_NAMESPACE",
    "AWS_REGION",
    "AWS_PROFILE",
    "GIT_AUTHOR_NAME",
    "GIT_AUTHOR_EMAIL",
)

__all__ = [
    "detect_language",
    "detect_project",
    "detect_shell",
    "gather_context",
    "gather_environment",
    "gather_files",
    "get_git_context",
    "get_recent_commands",
    "is_excluded",
]


def detect_shell(environ: Mapping[str, str] | None = None) -> str:
    """Return the basename of ``$SHELL``, or ``unknown``."""
    env = os.environ if environ is None else environ
    shell = env.get("SHELL", "")
    return os.path.basename(shell) if shell else "unknown"


def detect_language(filename: str) -> str:
    return LANGUAGES.get(Path(filename).suffix, "unknown")


def is_excluded(name: str, patterns: list[str]) -> bool:
    if name in DEFAULT_EXCLUSIONS:
        return True
    return any(fnmatch.fnmatchcase(name, pattern) for pattern in patterns)


def gather_files(directory: Path, exclude_patterns: list[str]) -> list[FileContext]:
    """List directory entries, inlining small important files."""
    files: list[FileContext] = []
    try:
        with os.scandir(directory) as it:
            entries = sorted(it, key=lambda entry: entry.name)
    except OSError as e:
        log.debug("cannot list %s: %s", directory, e)
        return files

    for entry in entries:
        if is_excluded(entry.name, exclude_patterns):
            continue
        try:
            is_dir = entry.is_dir()
            size = 0 if is_dir else entry.stat().st_size
        except OSError as e:
            log.debug("cannot stat %s: %s", entry.path, e)
            continue

        file_ctx = FileContext(
            path=entry.name,
            type="directory" if is_dir else "file",
            size=size,
            language="" if is_dir else detect_language(entry.name),
            is_important=entry.name in IMPORTANT_FILES,
        )
        if file_ctx.is_important and not is_dir and size < MAX_INLINE_SIZE:
            try:
                file_ctx.content = Path(entry.path).read_text(encoding="utf-8", errors="replace")
            except OSError as e:
                log.debug("cannot read %s: %s", entry.path, e)
        files.append(file_ctx)
        if len(files) >= MAX_FILES:
            break
    return files


def gather_environment(environ: Mapping[str, str] | None = None) -> dict[str, str]:
    env = os.environ if environ is None else environ
    return {name: env[name] for name in ENVIRONMENT_VARIABLES if env.get(name)}


def gather_context(config: ContextConfig, cwd: Path | None = None) -> Context:
    """Collect every enabled source; a failing source leaves its field empty."""
    directory = cwd or Path.cwd()
    shell = detect_shell()
    ctx = Context(working_directory=str(directory), shell=shell)

    if config.include_files:
        ctx.files = gather_files(directory, config.exclude_patterns)
    if config.include_history > 0:
        ctx.recent_commands = get_recent_commands(shell, config.include_history)
    if config.include_environment:
        ctx.environment = gather_environment()
    if config.include_git:
        ctx.git = get_git_context(directory)
    ctx.project = detect_project(directory)

    log.debug(
        "context: %d files, %d commands, git=%s, project=%s",
        len(ctx.files),
        len(ctx.recent_commands),
        ctx.git is not None,
        ctx.project.type if ctx.project else None,
    )
    return ctx
