"""Conversation log kept beside the config file."""

import logging
from datetime import datetime
from pathlib import Path

import yaml
from pydantic import ValidationError

from how.config import CONFIG_DIR
from how.errors import HowError
from how.models import HistoryConfig, HistoryEntry

log = logging.getLogger(__name__)

HISTORY_FILE = CONFIG_DIR / "history.txt"


def history_path(config: HistoryConfig | None = None) -> Path:
    if config is not None and config.file_path:
        return Path(config.file_path).expanduser()
    return HISTORY_FILE


def read_history(path: Path | None = None) -> list[HistoryEntry]:
    """Return logged exchanges, oldest first; a missing log is empty."""
    path = path or HISTORY_FILE
    try:
        with open(path, encoding="utf-8") as f:
            documents = [doc for doc in yaml.safe_load_all(f) if doc]
    except FileNotFoundError:
        return []
    except (OSError, yaml.YAMLError) as e:
        raise HowError(f"cannot read history {path}: {e}") from e
    entries = []
    for doc in documents:
        if not isinstance(doc, dict) or "prompt" not in doc:
            log.debug("skipping malformed history record: %r", doc)
            continue
        try:
            entries.append(HistoryEntry.model_validate(doc))
        except ValidationError as e:
            log.debug("skipping invalid history record (%d errors)", e.error_count())
    return entries


def append_entry(
    prompt: str,
    response: str,
    path: Path | None = None,
    max_size: int = 100,
) -> HistoryEntry:
    """Log one exchange, keeping only the ``max_size`` most recent entries."""
    path = path or HISTORY_FILE
    entry = HistoryEntry(prompt=prompt, response=response, timestamp=datetime.now())
    entries = [*read_history(path), entry]
    if max_size > 0:
        entries = entries[-max_size:]
    records = [e.model_dump(mode="json") for e in entries]
    try:
        path.parent.mkdir(parents=True, exist_ok=True, mode=0o700)
        with open(path, "w", encoding="utf-8") as f:
            yaml.safe_dump_all(records, f, explicit_start=True, sort_keys=False, allow_unicode=True)
    except OSError as e:
        raise HowError(f"cannot write history {path}: {e}") from e
    log.debug("history now holds %d entries", len(entries))
    return entry


def clear_history(path: Path | None = None) -> bool:
    """Delete the log; return False when there was nothing to delete."""
    path = path or HISTORY_FILE
    try:
        path.unlink()
    except FileNotFoundError:
        return False
    except OSError as e:
        raise HowError(f"cannot clear history {path}: {e}") from e
    return True
