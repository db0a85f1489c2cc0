"""Integration tests using real git repositories.

Creates bare repos (acting as remotes) and local clones to run the
inspect / commit / sync pipeline end-to-end.
"""

import json
import subprocess
from pathlib import Path

import pytest

from pygit_workflow import (
    BufferedOutputHandler,
    ChangedPath,
    CommitOutcome,
    GitIdentity,
    GitPythonRepository,
    IssueType,
    NullOutputHandler,
    OperationType,
    StatusInspector,
    SyncOrchestrator,
    SyncState,
    WorkflowConfig,
    WorkflowOrchestrator,
    WorkflowResult,
)
from pygit_workflow.committer import STAGE_AND_COMMIT, STAGE_ONLY
from pygit_workflow.prompts import NEVER, NO, YES

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _git(cwd: Path, *args: str) -> str:
    """Run a git command and return stdout."""
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout.strip()


def _commit_file(repo: Path, filename: str, content: str, message: str) -> str:
    """Create/overwrite a file and commit it. Returns the commit hash."""
    filepath = repo / filename
    filepath.parent.mkdir(parents=True, exist_ok=True)
    filepath.write_text(content)
    _git(repo, "add", filename)
    _git(repo, "commit", "-m", message)
    return _git(repo, "rev-parse", "HEAD")


def _push_via_clone(tmp_path: Path, bare_remote: Path, name: str,
                    files: dict[str, str], message: str) -> Path:
    """Clone the bare remote, commit files, and push. Returns pusher path."""
    pusher = tmp_path / name
    _git(tmp_path, "clone", str(bare_remote), name)
    for filename, content in files.items():
        (pusher / filename).write_text(content)
        _git(pusher, "add", filename)
    _git(pusher, "commit", "-m", message)
    _git(pusher, "push", "origin", "main")
    return pusher


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(autouse=True)
def git_home(tmp_path: Path, monkeypatch) -> Path:
    """Isolate global git config in a throwaway HOME with a known identity."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.delenv("GIT_CONFIG_GLOBAL", raising=False)
    _git(home, "config", "--global", "user.name", "Test")
    _git(home, "config", "--global", "user.email", "test@test.com")
    _git(home, "config", "--global", "init.defaultBranch", "main")
    return home


@pytest.fixture
def bare_remote(tmp_path: Path) -> Path:
    """Create a bare repo that acts as a remote, seeded with one commit."""
    remote = tmp_path / "remote.git"
    remote.mkdir()
    _git(remote, "init", "--bare", "-b", "main")
    _push_via_clone(tmp_path, remote, "seed", {"README.md": "hello\n"}, "Initial commit")
    return remote


@pytest.fixture
def local_clone(tmp_path: Path, bare_remote: Path) -> Path:
    """Clone the bare remote into a local working copy."""
    _git(tmp_path, "clone", str(bare_remote), "local")
    return tmp_path / "local"


@pytest.fixture
def config() -> WorkflowConfig:
    return WorkflowConfig(skip_network_check=True, accepted_url_schemes=("https://", "file://"))


def _open(path: Path) -> GitPythonRepository:
    return GitPythonRepository(path)


def _run_workflow(path: Path, prompter, config: WorkflowConfig) -> WorkflowResult:
    repo = _open(path)
    try:
        return WorkflowOrchestrator(repo, NullOutputHandler(), prompter, config).run()
    finally:
        repo.close()


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------

class TestGitPythonRepository:
    def test_plain_directory_is_not_a_repository(self, tmp_path):
        plain = tmp_path / "plain"
        plain.mkdir()
        assert _open(plain).is_repository() is False

    def test_missing_directory_is_not_a_repository(self, tmp_path):
        assert _open(tmp_path / "missing").is_repository() is False

    def test_clone_basics(self, local_clone, bare_remote):
        repo = _open(local_clone)
        assert repo.is_repository()
        assert repo.current_branch == "main"
        assert repo.remote_url("origin") == str(bare_remote)
        assert repo.remote_url("upstream") is None
        assert repo.git_dir == local_clone / ".git"

    def test_working_tree_diff(self, local_clone):
        (local_clone / "README.md").write_text("changed\n")
        (local_clone / "docs").mkdir()
        (local_clone / "docs" / "new file.md").write_text("new\n")
        changes = _open(local_clone).working_tree_diff()
        assert set(changes) == {ChangedPath("M", "README.md"), ChangedPath("?", "docs/new file.md")}

    def test_staged_rename(self, local_clone):
        _git(local_clone, "mv", "README.md", "INTRO.md")
        changes = _open(local_clone).working_tree_diff()
        assert changes == [ChangedPath("R", "INTRO.md")]

    def test_recent_log(self, local_clone):
        _commit_file(local_clone, "a.txt", "a", "Add a")
        commits = _open(local_clone).recent_log(5)
        assert [c.subject for c in commits] == ["Add a", "Initial commit"]
        assert all(c.relative_age for c in commits)

    def test_unborn_repository(self, tmp_path):
        path = tmp_path / "fresh"
        repo = _open(path)
        assert repo.init("main").success
        assert repo.is_repository()
        assert repo.current_branch is None
        assert repo.recent_log(5) == []
        assert repo.revision("@") is None
        assert (path / ".git").is_dir()

    def test_stage_and_commit(self, local_clone):
        repo = _open(local_clone)
        (local_clone / "notes.md").write_text("notes\n")
        assert repo.has_staged_changes() is False
        assert repo.stage_all().success
        assert repo.has_staged_changes() is True
        assert repo.commit("Add notes").success
        assert repo.working_tree_diff() == []
        assert repo.unpushed_commits()[0].endswith("Add notes")

    def test_upstream(self, local_clone):
        repo = _open(local_clone)
        assert repo.upstream() == ("origin", "main")
        _git(local_clone, "checkout", "-b", "work", "--track", "origin/main")
        assert repo.upstream() == ("origin", "main")
        _git(local_clone, "checkout", "-b", "feature")
        assert repo.upstream() is None

    def test_unpushed_commits_by_branch(self, local_clone):
        _git(local_clone, "checkout", "-b", "feature")
        _commit_file(local_clone, "f.txt", "f", "Feature work")
        _git(local_clone, "checkout", "main")
        repo = _open(local_clone)
        assert repo.unpushed_commits("main") == []
        assert [line.split(" ", 1)[1] for line in repo.unpushed_commits()] == ["Feature work"]

    def test_failed_push_carries_git_stderr(self, local_clone):
        repo = _open(local_clone)
        result = repo.push("nowhere", "main")
        assert not result.success
        assert result.operation is OperationType.PUSH
        assert "nowhere" in result.message

    def test_list_remote_branches(self, local_clone):
        assert _open(local_clone).list_remote_branches("origin") == ["main"]

    def test_global_identity(self, git_home):
        repo = _open(git_home)
        assert repo.get_global_identity() == GitIdentity("Test", "test@test.com")
        assert repo.set_global_identity("Other", "other@example.com").success
        assert _git(git_home, "config", "--global", "user.name") == "Other"


class TestSyncStates:
    def _state(self, path: Path, config: WorkflowConfig) -> SyncState:
        repo = _open(path)
        sync = SyncOrchestrator(repo, NullOutputHandler(), None, config)
        status = StatusInspector(repo, config).inspect()
        return sync.determine_state(status, WorkflowResult())

    def test_up_to_date(self, local_clone, config):
        assert self._state(local_clone, config) is SyncState.UP_TO_DATE

    def test_behind(self, tmp_path, bare_remote, local_clone, config):
        _push_via_clone(tmp_path, bare_remote, "other", {"b.txt": "b"}, "Remote work")
        assert self._state(local_clone, config) is SyncState.BEHIND

    def test_ahead(self, local_clone, config):
        _commit_file(local_clone, "a.txt", "a", "Local work")
        assert self._state(local_clone, config) is SyncState.AHEAD

    def test_diverged(self, tmp_path, bare_remote, local_clone, config):
        _push_via_clone(tmp_path, bare_remote, "other", {"b.txt": "b"}, "Remote work")
        _commit_file(local_clone, "a.txt", "a", "Local work")
        assert self._state(local_clone, config) is SyncState.DIVERGED

    def test_no_upstream(self, local_clone, config):
        _git(local_clone, "checkout", "-b", "feature")
        result = WorkflowResult()
        repo = _open(local_clone)
        sync = SyncOrchestrator(repo, NullOutputHandler(), None, config)
        state = sync.determine_state(StatusInspector(repo, config).inspect(), result)
        assert state is SyncState.UNKNOWN
        assert result.get_issues_by_type(IssueType.NO_UPSTREAM)


class TestWorkflowEndToEnd:
    def test_commit_and_push(self, bare_remote, local_clone, prompter, config):
        (local_clone / "notes.md").write_text("notes\n")
        prompter.script(STAGE_AND_COMMIT, "Add notes", YES)
        result = _run_workflow(local_clone, prompter, config)
        assert result.commit_outcome is CommitOutcome.COMMITTED
        assert result.sync_state is SyncState.AHEAD
        assert result.succeeded(OperationType.PUSH)
        assert _git(bare_remote, "log", "-1", "--format=%s", "main") == "Add notes"

    def test_stage_only_leaves_remote_alone(self, bare_remote, local_clone, prompter, config):
        before = _git(bare_remote, "rev-parse", "main")
        (local_clone / "notes.md").write_text("notes\n")
        prompter.script(STAGE_ONLY)
        result = _run_workflow(local_clone, prompter, config)
        assert result.commit_outcome is CommitOutcome.STAGED_ONLY
        assert _git(local_clone, "diff", "--cached", "--name-only") == "notes.md"
        assert _git(bare_remote, "rev-parse", "main") == before

    def test_clean_and_behind_pulls(self, tmp_path, bare_remote, local_clone, prompter, config):
        _push_via_clone(tmp_path, bare_remote, "other", {"b.txt": "from remote"}, "Remote work")
        prompter.script(YES)
        result = _run_workflow(local_clone, prompter, config)
        assert result.sync_state is SyncState.BEHIND
        assert (local_clone / "b.txt").read_text() == "from remote"

    def test_declined_pull_never_asked_again(self, tmp_path, bare_remote, local_clone, prompter, config):
        _push_via_clone(tmp_path, bare_remote, "other", {"b.txt": "b"}, "Remote work")
        prompter.script(NEVER)
        _run_workflow(local_clone, prompter, config)
        prefs = json.loads((local_clone / ".git" / config.preferences_filename).read_text())
        assert prefs == {"Skip_pull_changes": True}

        prompter.questions.clear()
        _run_workflow(local_clone, prompter, config)
        assert prompter.questions == []
        assert not (local_clone / "b.txt").exists()

    def test_diverged_is_left_alone(self, tmp_path, bare_remote, local_clone, prompter, config):
        _push_via_clone(tmp_path, bare_remote, "other", {"b.txt": "b"}, "Remote work")
        local_head = _commit_file(local_clone, "a.txt", "a", "Local work")
        result = _run_workflow(local_clone, prompter, config)
        assert result.sync_state is SyncState.DIVERGED
        assert _git(local_clone, "rev-parse", "HEAD") == local_head
        assert prompter.questions == []

    def test_new_repository_with_remote_setup(self, tmp_path, prompter, config):
        empty_remote = tmp_path / "empty.git"
        empty_remote.mkdir()
        _git(empty_remote, "init", "--bare", "-b", "main")
        project = tmp_path / "project"
        project.mkdir()
        (project / "todo.md").write_text("- write tests\n")

        # not a repository: init, then commit the file
        prompter.script("Initialize a new repository here", STAGE_AND_COMMIT, "First commit",
                        YES, empty_remote.as_uri(), YES)
        result = _run_workflow(project, prompter, config)
        assert result.commit_outcome is CommitOutcome.COMMITTED
        assert result.succeeded(OperationType.REMOTE_ADD)
        assert result.succeeded(OperationType.PUSH)
        assert _git(empty_remote, "log", "-1", "--format=%s", "main") == "First commit"
        assert _git(project, "rev-parse", "--abbrev-ref", "main@{u}") == "origin/main"

    def test_json_summary(self, local_clone, prompter, config):
        result = _run_workflow(local_clone, prompter, config)
        data = json.loads(json.dumps(result.to_dict()))
        assert data["sync_state"] == "UP_TO_DATE"
        assert data["operations"][0]["operation"] == "FETCH"
        assert data["issues"] == []

    def test_declining_push_keeps_commit_local(self, bare_remote, local_clone, prompter, config):
        before = _git(bare_remote, "rev-parse", "main")
        (local_clone / "notes.md").write_text("notes\n")
        prompter.script(STAGE_AND_COMMIT, "", NO)
        result = _run_workflow(local_clone, prompter, config)
        assert result.commit_outcome is CommitOutcome.COMMITTED
        assert _git(local_clone, "log", "-1", "--format=%s").startswith("Update ")
        assert _git(bare_remote, "rev-parse", "main") == before


class TestTrackedUpstream:
    """A local branch named differently from the remote branch it tracks."""

    def test_behind_pulls_tracked_branch(self, tmp_path, bare_remote, local_clone, prompter, config):
        _git(local_clone, "checkout", "-b", "work", "--track", "origin/main")
        _push_via_clone(tmp_path, bare_remote, "other", {"b.txt": "from remote"}, "Remote work")
        prompter.script(YES)
        result = _run_workflow(local_clone, prompter, config)
        assert result.sync_state is SyncState.BEHIND
        assert result.succeeded(OperationType.PULL)
        assert (local_clone / "b.txt").read_text() == "from remote"

    def test_ahead_pushes_to_tracked_branch(self, bare_remote, local_clone, prompter, config):
        _git(local_clone, "checkout", "-b", "work", "--track", "origin/main")
        local_head = _commit_file(local_clone, "a.txt", "a", "Local work")
        prompter.script(YES)
        result = _run_workflow(local_clone, prompter, config)
        assert result.sync_state is SyncState.AHEAD
        assert result.succeeded(OperationType.PUSH)
        assert _git(bare_remote, "rev-parse", "main") == local_head
        assert _git(bare_remote, "for-each-ref", "--format=%(refname:short)", "refs/heads") == "main"


class TestUnpushedOnOtherBranches:
    def test_listed_without_push_offer(self, bare_remote, local_clone, prompter, config):
        _git(local_clone, "checkout", "-b", "feature")
        _commit_file(local_clone, "f.txt", "f", "Feature work")
        _git(local_clone, "checkout", "main")
        output = BufferedOutputHandler()
        repo = _open(local_clone)
        try:
            result = WorkflowOrchestrator(repo, output, prompter, config).run()
        finally:
            repo.close()
        assert result.sync_state is SyncState.UP_TO_DATE
        assert prompter.questions == []
        assert all(op.operation is not OperationType.PUSH for op in result.operations)
        assert any(m.endswith("Feature work") for m in output.messages)
        assert any("up to date" in m for m in output.messages_at("success"))
        assert _git(bare_remote, "for-each-ref", "--format=%(refname:short)", "refs/heads") == "main"
