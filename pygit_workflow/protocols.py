"""Protocols and abstract interfaces for dependency injection."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from pygit_workflow.models import (
    ChangedPath,
    CommitSummary,
    GitIdentity,
    OperationResult,
    WorkflowConfig,
    WorkflowResult,
)


class GitRepository(Protocol):
    """Protocol for the git commands the workflow relies on"""

    def is_repository(self) -> bool: ...
    def remote_url(self, name: str = 'origin') -> str | None: ...
    def working_tree_diff(self) -> list[ChangedPath]: ...
    def recent_log(self, count: int) -> list[CommitSummary]: ...
    def revision(self, ref: str) -> str | None: ...
    def merge_base(self, first: str, second: str) -> str | None: ...
    def upstream(self) -> tuple[str, str] | None: ...
    def fetch(self, remote: str = 'origin') -> OperationResult: ...
    def stage_all(self) -> OperationResult: ...
    def has_staged_changes(self) -> bool: ...
    def commit(self, message: str) -> OperationResult: ...
    def pull(self, remote: str, branch: str, rebase: bool = False) -> OperationResult: ...
    def push(self, remote: str, branch: str, set_upstream: bool = False) -> OperationResult: ...
    def add_remote(self, name: str, url: str) -> OperationResult: ...
    def list_remote_branches(self, remote: str = 'origin') -> list[str]: ...
    def unpushed_commits(self, branch: str | None = None) -> list[str]: ...
    def init(self, default_branch: str) -> OperationResult: ...
    def clone(self, url: str, shallow: bool = False) -> OperationResult: ...
    def set_global_identity(self, name: str, email: str) -> OperationResult: ...
    def get_global_identity(self) -> GitIdentity: ...

    @property
    def path(self) -> Path: ...

    @property
    def git_dir(self) -> Path: ...

    @property
    def current_branch(self) -> str | None: ...


class OutputHandler(Protocol):
    """Protocol for notifying the user"""

    def info(self, message: str, indent: int = 0) -> None: ...
    def success(self, message: str, indent: int = 0) -> None: ...
    def warning(self, message: str, indent: int = 0) -> None: ...
    def error(self, message: str, indent: int = 0) -> None: ...
    def section(self, title: str) -> None: ...
    def debug(self, message: str) -> None: ...


class Prompter(Protocol):
    """Protocol for asking the user. A None answer means the prompt was cancelled."""

    def ask(self, message: str, options: Sequence[str]) -> str | None: ...
    def ask_text(self, message: str, default: str = '') -> str | None: ...


class WorkflowHook(ABC):
    """Abstract base class for workflow hooks (plugin architecture)"""

    @abstractmethod
    def before_workflow(self, repo: GitRepository, config: WorkflowConfig) -> bool:
        """Called before the workflow starts. Return False to skip the run."""
        pass

    @abstractmethod
    def after_workflow(self, repo: GitRepository, result: WorkflowResult) -> None:
        """Called after a completed run with its result."""
        pass

    @abstractmethod
    def on_error(self, repo: GitRepository, error: Exception) -> None:
        """Called when an unhandled error occurs during the run."""
        pass
