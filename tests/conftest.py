"""Shared fakes and fixtures."""

from collections.abc import Sequence
from pathlib import Path
from typing import Optional

import pytest

from pygit_workflow import (
    BufferedOutputHandler,
    ChangedPath,
    CommitSummary,
    GitIdentity,
    OperationResult,
    OperationType,
    PreferenceStore,
    WorkflowConfig,
)


class FakeGitRepository:
    """In-memory stand-in for GitPythonRepository. Records every mutating call."""

    def __init__(self, path: Path):
        self._path = path
        self._git_dir = path / ".git"
        self.is_repo = True
        self.branch: Optional[str] = "main"
        self.remotes: dict[str, str] = {"origin": "https://example.com/repo.git"}
        self.changes: list[ChangedPath] = []
        self.log: list[CommitSummary] = []
        self.revisions: dict[str, Optional[str]] = {"@": "aaa111", "@{u}": "aaa111"}
        self.base: Optional[str] = "aaa111"
        self.unpushed: list[str] = []
        self.other_unpushed: list[str] = []
        self.tracking: Optional[tuple[str, str]] = ("origin", "main")
        self.remote_branches: list[str] = []
        self.identity = GitIdentity("Test User", "test@example.com")
        self.staged = True
        self.fetch_success = True
        self.stage_success = True
        self.commit_success = True
        self.pull_success = True
        self.push_success = True
        self.add_remote_success = True
        self.init_success = True
        self.clone_success = True
        self.identity_success = True
        self.calls: list[tuple] = []

    @property
    def path(self) -> Path:
        return self._path

    @property
    def git_dir(self) -> Path:
        return self._git_dir

    @property
    def current_branch(self) -> Optional[str]:
        return self.branch

    def is_repository(self) -> bool:
        self.calls.append(("is_repository",))
        return self.is_repo

    def remote_url(self, name: str = "origin") -> Optional[str]:
        return self.remotes.get(name)

    def working_tree_diff(self) -> list[ChangedPath]:
        return list(self.changes)

    def recent_log(self, count: int) -> list[CommitSummary]:
        return self.log[:count]

    def revision(self, ref: str) -> Optional[str]:
        return self.revisions.get(ref)

    def merge_base(self, first: str, second: str) -> Optional[str]:
        return self.base

    def _result(self, ok: bool, op: OperationType, name: str, *args) -> OperationResult:
        self.calls.append((name, *args))
        if ok:
            return OperationResult(True, op, f"{name} ok")
        return OperationResult(False, op, f"{name} failed: fatal: simulated error", RuntimeError("boom"))

    def upstream(self) -> Optional[tuple[str, str]]:
        return self.tracking

    def fetch(self, remote: str = "origin") -> OperationResult:
        return self._result(self.fetch_success, OperationType.FETCH, "fetch", remote)

    def stage_all(self) -> OperationResult:
        return self._result(self.stage_success, OperationType.STAGE, "stage_all")

    def has_staged_changes(self) -> bool:
        return self.staged

    def commit(self, message: str) -> OperationResult:
        return self._result(self.commit_success, OperationType.COMMIT, "commit", message)

    def pull(self, remote: str, branch: str, rebase: bool = False) -> OperationResult:
        return self._result(self.pull_success, OperationType.PULL, "pull", remote, branch)

    def push(self, remote: str, branch: str, set_upstream: bool = False) -> OperationResult:
        return self._result(self.push_success, OperationType.PUSH, "push", remote, branch, set_upstream)

    def add_remote(self, name: str, url: str) -> OperationResult:
        if self.add_remote_success:
            self.remotes[name] = url
        return self._result(self.add_remote_success, OperationType.REMOTE_ADD, "add_remote", name, url)

    def list_remote_branches(self, remote: str = "origin") -> list[str]:
        return list(self.remote_branches)

    def unpushed_commits(self, branch: Optional[str] = None) -> list[str]:
        """`unpushed` sits on the current branch, `other_unpushed` on other local branches."""
        if branch:
            return list(self.unpushed)
        return self.unpushed + self.other_unpushed

    def init(self, default_branch: str) -> OperationResult:
        if self.init_success:
            self.is_repo = True
            self.branch = None
        return self._result(self.init_success, OperationType.INIT, "init", default_branch)

    def clone(self, url: str, shallow: bool = False) -> OperationResult:
        if self.clone_success:
            self.is_repo = True
        return self._result(self.clone_success, OperationType.CLONE, "clone", url, shallow)

    def set_global_identity(self, name: str, email: str) -> OperationResult:
        if self.identity_success:
            self.identity = GitIdentity(name, email)
        return self._result(self.identity_success, OperationType.CONFIG, "set_global_identity", name, email)

    def get_global_identity(self) -> GitIdentity:
        return self.identity

    def called(self, name: str) -> list[tuple]:
        """Return the recorded calls of one method."""
        return [call for call in self.calls if call[0] == name]


class ScriptedPrompter:
    """Answers prompts from a queue. Fails the test on an unexpected prompt."""

    def __init__(self, *answers: Optional[str]):
        self.answers = list(answers)
        self.questions: list[tuple[str, tuple[str, ...]]] = []

    def _next(self, message: str, options: Sequence[str]) -> Optional[str]:
        self.questions.append((message, tuple(options)))
        if not self.answers:
            raise AssertionError(f"Unexpected prompt: {message}")
        return self.answers.pop(0)

    def ask(self, message: str, options: Sequence[str]) -> Optional[str]:
        answer = self._next(message, options)
        assert answer is None or answer in options, f"{answer!r} not in {options}"
        return answer

    def ask_text(self, message: str, default: str = "") -> Optional[str]:
        return self._next(message, (default,))

    def script(self, *answers: Optional[str]) -> None:
        self.answers.extend(answers)


@pytest.fixture
def fake_repo(tmp_path: Path) -> FakeGitRepository:
    repo_dir = tmp_path / "repo"
    (repo_dir / ".git").mkdir(parents=True)
    return FakeGitRepository(repo_dir)


@pytest.fixture
def prompter() -> ScriptedPrompter:
    return ScriptedPrompter()


@pytest.fixture
def output() -> BufferedOutputHandler:
    return BufferedOutputHandler()


@pytest.fixture
def config() -> WorkflowConfig:
    return WorkflowConfig(skip_network_check=False)


@pytest.fixture
def preferences(fake_repo: FakeGitRepository, config: WorkflowConfig) -> PreferenceStore:
    return PreferenceStore.for_repository(fake_repo, config)
