"""Git repository lookups, run through the ``git`` executable."""

import logging
import subprocess
from pathlib import Path

from how.models import GitContext

log = logging.getLogger(__name__)

RECENT_COMMITS = 5


def _git(args: list[str], cwd: Path | None = None) -> str | None:
    """Run ``git <args>`` and return stripped stdout, or None on any failure."""
    try:
        result = subprocess.run(
            ["git", *args],
            capture_output=True,
            text=True,
            timeout=5,
            cwd=cwd,
        )
    except (subprocess.TimeoutExpired, FileNotFoundError, PermissionError) as e:
        log.debug("git %s failed: %s", " ".join(args), e)
        return None
    if result.returncode != 0:
        log.debug("git %s returned rc=%d", " ".join(args), result.returncode)
        return None
    return result.stdout.strip()


def summarize_status(porcelain: str) -> str:
    """Condense ``git status --porcelain`` output into e.g. ``2 modified, 1 added``."""
    if not porcelain.strip():
        return "clean"
    counts = {"modified": 0, "added": 0, "deleted": 0, "untracked": 0}
    for line in porcelain.splitlines():
        if len(line) < 2:
            continue
        code = line[:2]
        if code == "??":
            counts["untracked"] += 1
        elif "M" in code:
            counts["modified"] += 1
        elif "A" in code:
            counts["added"] += 1
        elif "D" in code:
            counts["deleted"] += 1
    return ", ".join(f"{n} {label}" for label, n in counts.items() if n) or "changed"


def get_git_context(cwd: Path | None = None) -> GitContext | None:
    """Collect repository facts; None when cwd is not inside a git work tree."""
    if _git(["rev-parse", "--git-dir"], cwd) is None:
        return None

    ctx = GitContext()
    toplevel = _git(["rev-parse", "--show-toplevel"], cwd)
    if toplevel:
        ctx.repository = Path(toplevel).name
    ctx.branch = _git(["branch", "--show-current"], cwd) or ""
    ctx.commit_hash = _git(["rev-parse", "--short=7", "HEAD"], cwd) or ""

    status = _git(["status", "--porcelain"], cwd)
    if status is not None:
        ctx.status = summarize_status(status)

    log_output = _git(["log", "--oneline", f"-{RECENT_COMMITS}"], cwd)
    if log_output:
        ctx.recent_commits = [line for line in log_output.splitlines() if line]

    ctx.remote_url = _git(["remote", "get-url", "origin"], cwd) or ""
    log.debug("git context: repo=%s branch=%s", ctx.repository, ctx.branch)
    return ctx
