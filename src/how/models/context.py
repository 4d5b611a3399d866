"""Snapshot of the user's working environment sent alongside a prompt."""

from datetime import datetime

from pydantic import BaseModel, Field


class FileContext(BaseModel):
    path: str
    type: str = "file"
    size: int = 0
    content: str = ""
    language: str = ""
    is_important: bool = False


class CommandHistory(BaseModel):
    command: str
    exit_code: int = 0
    timestamp: datetime | None = None


class GitContext(BaseModel):
    repository: str = ""
    branch: str = ""
    commit_hash: str = ""
    status: str = ""
    recent_commits: list[str] = Field(default_factory=list)
    remote_url: str = ""


class ProjectContext(BaseModel):
    type: str
    name: str = ""
    version: str = ""
    dependencies: list[str] = Field(default_factory=list)
    scripts: dict[str, str] = Field(default_factory=dict)
    framework: str = ""


class HistoryEntry(BaseModel):
    prompt: str
    response: str
    timestamp: datetime | None = None


class Context(BaseModel):
    working_directory: str = ""
    shell: str = ""
    files: list[FileContext] = Field(default_factory=list)
    recent_commands: list[CommandHistory] = Field(default_factory=list)
    environment: dict[str, str] = Field(default_factory=dict)
    git: GitContext | None = None
    project: ProjectContext | None = None
    previous_prompts: list[HistoryEntry] = Field(default_factory=list)
