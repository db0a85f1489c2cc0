"""Domain models: enums, dataclasses, and configuration."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum, auto
from pathlib import Path
from typing import Any

EMAIL_PATTERN = re.compile(r'^[^@\s]+@[^@\s]+\.[A-Za-z]{2,}$')


class NotARepositoryError(Exception):
    """Raised when the working directory is not inside a git repository."""

    def __init__(self, path: Path | str):
        self.path = Path(path)
        super().__init__(f"Not a git repository: {self.path}")


class SyncState(Enum):
    """Relationship between the local branch and its upstream"""
    UP_TO_DATE = auto()
    AHEAD = auto()
    BEHIND = auto()
    DIVERGED = auto()
    UNKNOWN = auto()


class WorkflowDecision(Enum):
    """Answer to a yes/no/don't-ask-again confirmation"""
    PROCEED = auto()
    DECLINE = auto()
    SUPPRESS_FUTURE = auto()


class CommitOutcome(Enum):
    """What the stage/commit step produced"""
    COMMITTED = auto()
    STAGED_ONLY = auto()
    SKIPPED = auto()


class IssueType(Enum):
    """Type-safe issue categories"""
    FAILED = auto()
    ENVIRONMENT = auto()
    OFFLINE = auto()
    FETCH_FAILED = auto()
    NO_UPSTREAM = auto()
    DIVERGED = auto()
    NOT_A_REPOSITORY = auto()


class OperationType(Enum):
    """Types of git operations"""
    FETCH = auto()
    PULL = auto()
    REBASE = auto()
    PUSH = auto()
    STAGE = auto()
    COMMIT = auto()
    REMOTE_ADD = auto()
    INIT = auto()
    CLONE = auto()
    CONFIG = auto()


_CHANGE_KINDS = {
    'A': 'added',
    'M': 'modified',
    'D': 'deleted',
    'R': 'renamed',
    'C': 'copied',
    'U': 'unmerged',
    'T': 'type changed',
    '?': 'untracked',
}


@dataclass(frozen=True)
class ChangedPath:
    """One working-tree entry from porcelain status"""
    code: str
    path: str

    @property
    def kind(self) -> str:
        """Human-readable label for the status code (e.g. 'modified')."""
        return _CHANGE_KINDS.get(self.code, 'changed')

    def __str__(self) -> str:
        return f"{self.code} {self.path}"


@dataclass(frozen=True)
class CommitSummary:
    """A single entry of the short commit log"""
    short_id: str
    subject: str
    relative_age: str

    def __str__(self) -> str:
        return f"{self.short_id} - {self.subject} ({self.relative_age})"


@dataclass(frozen=True)
class RepositoryStatus:
    """Snapshot of a repository, recomputed every time it is needed"""
    branch: str = ''
    remote_url: str | None = None
    changed_paths: tuple[ChangedPath, ...] = ()
    recent_commits: tuple[CommitSummary, ...] = ()
    status_text: str = ''
    upstream_remote: str | None = None
    upstream_branch: str | None = None

    @property
    def is_clean(self) -> bool:
        return not self.changed_paths

    @property
    def has_remote(self) -> bool:
        return self.remote_url is not None

    def upstream_target(self, default_remote: str) -> tuple[str, str]:
        """Remote and branch to pull from or push to.

        The tracked upstream when known, otherwise `default_remote` and the
        local branch name.
        """
        if self.upstream_remote and self.upstream_branch:
            return self.upstream_remote, self.upstream_branch
        return default_remote, self.branch


@dataclass(frozen=True)
class RevisionPointers:
    """The three revisions a sync state is derived from, and the upstream they were read from"""
    local: str | None
    remote_tracking: str | None
    merge_base: str | None
    upstream_remote: str | None = None
    upstream_branch: str | None = None


@dataclass(frozen=True)
class GitIdentity:
    """Commit author identity (user.name / user.email)"""
    name: str = ''
    email: str = ''

    @property
    def is_complete(self) -> bool:
        """Return True if the name is non-empty and the email looks like local@domain.tld."""
        return bool(self.name.strip()) and is_valid_email(self.email)


def is_valid_email(email: str) -> bool:
    """Return True if the string is shaped like local@domain.tld."""
    return bool(EMAIL_PATTERN.match(email.strip()))


@dataclass(frozen=True)
class OperationResult:
    """Result of a single git operation"""
    success: bool
    operation: OperationType
    message: str
    error: Exception | None = None


@dataclass(frozen=True)
class WorkflowIssue:
    """Immutable issue record"""
    issue_type: IssueType
    details: str
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"[{self.timestamp:%H:%M:%S}] {self.issue_type.name}: {self.details}"


@dataclass
class WorkflowResult:
    """Mutable result accumulator for one workflow run"""
    commit_outcome: CommitOutcome | None = None
    sync_state: SyncState | None = None
    operations: list[OperationResult] = field(default_factory=list)
    issues: list[WorkflowIssue] = field(default_factory=list)

    def add_issue(self, issue: WorkflowIssue) -> None:
        """Record an issue encountered during the run."""
        self.issues.append(issue)

    def record(self, operation: OperationResult) -> None:
        """Record a git operation that was attempted."""
        self.operations.append(operation)

    def get_issues_by_type(self, issue_type: IssueType) -> list[WorkflowIssue]:
        """Filter issues by category (e.g. FAILED, DIVERGED)."""
        return [issue for issue in self.issues if issue.issue_type == issue_type]

    def has_issues(self) -> bool:
        """Return True if any issues were recorded."""
        return len(self.issues) > 0

    def succeeded(self, operation: OperationType) -> bool:
        """Return True if an operation of this type was recorded as successful."""
        return any(op.success and op.operation == operation for op in self.operations)

    def merge(self, other: WorkflowResult) -> None:
        """Fold the results of a sub-flow into this accumulator."""
        if other.commit_outcome is not None:
            self.commit_outcome = other.commit_outcome
        if other.sync_state is not None:
            self.sync_state = other.sync_state
        self.operations.extend(other.operations)
        self.issues.extend(other.issues)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dict for JSON output."""
        return {
            'commit_outcome': self.commit_outcome.name if self.commit_outcome else None,
            'sync_state': self.sync_state.name if self.sync_state else None,
            'operations': [
                {
                    'operation': op.operation.name,
                    'success': op.success,
                    'message': op.message,
                }
                for op in self.operations
            ],
            'issues': [
                {
                    'type': i.issue_type.name,
                    'details': i.details,
                    'timestamp': i.timestamp.isoformat(),
                }
                for i in self.issues
            ],
        }


@dataclass(frozen=True)
class WorkflowConfig:
    """Configuration for a workflow run, built once at startup"""
    remote_name: str = 'origin'
    default_branch: str = 'main'
    max_status_lines: int = 20
    recent_commit_count: int = 5
    commit_message_template: str = 'Update {timestamp}'
    timestamp_format: str = '%Y-%m-%d %H:%M:%S'
    accepted_url_schemes: tuple[str, ...] = ('https://', 'http://', 'ssh://', 'git@')
    network_host: str = 'github.com'
    network_port: int = 443
    network_timeout: float = 2.0
    skip_network_check: bool = False
    shallow_clone: bool = False
    use_rebase: bool = False
    preferences_filename: str = 'workflow-prefs.json'
    git_executable: str = 'git'
    verbose: bool = False
    log_level: str = 'INFO'
    json_output: bool = False

    def with_updates(self, **kwargs) -> WorkflowConfig:
        """Return a new WorkflowConfig with the given fields replaced."""
        current = {f.name: getattr(self, f.name) for f in self.__dataclass_fields__.values()}
        current.update(kwargs)
        return WorkflowConfig(**current)

    def default_commit_message(self, now: datetime) -> str:
        """Render the commit message template for the given time."""
        return self.commit_message_template.format(timestamp=now.strftime(self.timestamp_format))

    def is_accepted_remote_url(self, url: str) -> bool:
        """Return True if the URL starts with one of the accepted scheme prefixes."""
        url = url.strip()
        return any(url.startswith(prefix) and len(url) > len(prefix) for prefix in self.accepted_url_schemes)
