"""Concrete GitPython-based repository implementation."""

from __future__ import annotations

import logging
import re
from pathlib import Path

from git import Git, GitCommandError, InvalidGitRepositoryError, NoSuchPathError, Repo

from pygit_workflow.models import (
    ChangedPath,
    CommitSummary,
    GitIdentity,
    NotARepositoryError,
    OperationResult,
    OperationType,
)
from pygit_workflow.output import GitProgressBar

_LOG_FIELD_SEPARATOR = '\x1f'
_STDERR_WRAPPER = re.compile(r"^\s*stderr: '(.*)'\s*$", re.DOTALL)


def parse_porcelain(output: str) -> list[ChangedPath]:
    """Parse ``git status --porcelain -z`` output into one entry per path."""
    entries = output.split('\0')
    changes: dict[str, ChangedPath] = {}
    index = 0
    while index < len(entries):
        entry = entries[index]
        index += 1
        if len(entry) < 4:
            continue
        xy, path = entry[:2], entry[3:]
        if 'R' in xy or 'C' in xy:
            # -z puts the original path of a rename/copy in the next field
            index += 1
        changes.setdefault(path, ChangedPath(_status_code(xy), path))
    return list(changes.values())


def _status_code(xy: str) -> str:
    if xy == '??':
        return '?'
    if 'U' in xy or xy in ('AA', 'DD'):
        return 'U'
    return xy[0] if xy[0] != ' ' else xy[1]


def parse_log(output: str) -> list[CommitSummary]:
    """Parse ``%h<US>%s<US>%cr`` formatted log lines."""
    commits = []
    for line in output.splitlines():
        parts = line.split(_LOG_FIELD_SEPARATOR)
        if len(parts) != 3:
            continue
        commits.append(CommitSummary(*parts))
    return commits


def describe_git_error(error: GitCommandError) -> str:
    """Extract git's own diagnostic text from a GitCommandError."""
    text = error.stderr or ''
    match = _STDERR_WRAPPER.match(text)
    if match:
        text = match.group(1)
    text = text.strip()
    return text or str(error)


class GitPythonRepository:
    """Concrete implementation using GitPython.

    The repository is opened lazily so the same object can first report that
    no repository exists and later run ``init``/``clone`` into its path.
    """

    def __init__(self, repo_path: Path, show_progress: bool = False):
        self._path = Path(repo_path)
        self._repo: Repo | None = None
        self._show_progress = show_progress
        self._logger = logging.getLogger(__name__)

    def _open(self) -> Repo:
        if self._repo is None:
            try:
                self._repo = Repo(self._path, search_parent_directories=True)
            except (InvalidGitRepositoryError, NoSuchPathError) as e:
                raise NotARepositoryError(self._path) from e
        return self._repo

    def close(self) -> None:
        """Release underlying git resources."""
        if self._repo is not None:
            self._repo.close()
            self._repo = None

    @property
    def path(self) -> Path:
        return self._path

    @property
    def git_dir(self) -> Path:
        """The repository's private metadata directory (usually .git)."""
        return Path(self._open().git_dir)

    @property
    def current_branch(self) -> str | None:
        """Name of the checked-out branch, or None if HEAD is detached or unborn."""
        try:
            repo = self._open()
            if repo.head.is_detached or not repo.head.is_valid():
                return None
            return repo.active_branch.name
        except (NotARepositoryError, TypeError, ValueError):
            return None

    def is_repository(self) -> bool:
        """Return True if the path is inside a git working tree."""
        try:
            self._open()
            return True
        except NotARepositoryError:
            return False

    def remote_url(self, name: str = 'origin') -> str | None:
        """Return the configured URL of a remote, or None if it does not exist."""
        repo = self._open()
        if name not in repo.remotes:
            return None
        return repo.remotes[name].url

    def working_tree_diff(self) -> list[ChangedPath]:
        """Return staged, unstaged and untracked changes, one entry per path."""
        output = self._open().git.status('--porcelain', '-z', '--untracked-files=all')
        return parse_porcelain(output)

    def recent_log(self, count: int) -> list[CommitSummary]:
        """Return up to `count` commits of the current branch, newest first."""
        try:
            output = self._open().git.log(
                f'-n{count}', f'--pretty=format:%h{_LOG_FIELD_SEPARATOR}%s{_LOG_FIELD_SEPARATOR}%cr'
            )
        except GitCommandError:
            # unborn branch: no commits yet
            return []
        return parse_log(output)

    def revision(self, ref: str) -> str | None:
        """Resolve a ref (e.g. '@', '@{u}') to a commit id, or None if it does not resolve."""
        try:
            return self._open().git.rev_parse('--verify', '--quiet', ref).strip() or None
        except GitCommandError:
            return None

    def merge_base(self, first: str, second: str) -> str | None:
        """Return the nearest common ancestor of two commits, or None for unrelated histories."""
        try:
            return self._open().git.merge_base(first, second).strip() or None
        except GitCommandError:
            return None

    def upstream(self) -> tuple[str, str] | None:
        """Return (remote, branch) that the current branch tracks, or None.

        Upstreams on the local repository (``branch.<name>.remote = .``) count as none.
        """
        repo = self._open()
        try:
            name = repo.git.rev_parse('--abbrev-ref', '--symbolic-full-name', '@{u}').strip()
        except GitCommandError:
            return None
        # remote names may contain '/', so match the longest configured one
        for remote in sorted((r.name for r in repo.remotes), key=len, reverse=True):
            if name.startswith(remote + '/'):
                return remote, name[len(remote) + 1:]
        self._logger.debug("upstream %r does not belong to a configured remote", name)
        return None

    def fetch(self, remote: str = 'origin') -> OperationResult:
        """Fetch from a remote, showing a progress bar when enabled."""
        progress = GitProgressBar(f"Fetching {remote}") if self._show_progress else None
        try:
            self._open().remotes[remote].fetch(progress=progress)
            return OperationResult(True, OperationType.FETCH, f"Fetched from {remote}")
        except GitCommandError as e:
            self._logger.debug("fetch from %s failed: %s", remote, e)
            return OperationResult(False, OperationType.FETCH, f"Fetch failed: {describe_git_error(e)}", e)
        finally:
            if progress is not None:
                progress.close()

    def stage_all(self) -> OperationResult:
        """Stage every change in the working tree, including deletions and untracked files."""
        try:
            self._open().git.add('--all')
            return OperationResult(True, OperationType.STAGE, "Staged all changes")
        except GitCommandError as e:
            return OperationResult(False, OperationType.STAGE, f"Staging failed: {describe_git_error(e)}", e)

    def has_staged_changes(self) -> bool:
        """Return True if the index differs from HEAD."""
        try:
            self._open().git.diff('--cached', '--quiet')
            return False
        except GitCommandError as e:
            if e.status == 1:
                return True
            self._logger.warning("Could not compare index with HEAD: %s", describe_git_error(e))
            return False

    def commit(self, message: str) -> OperationResult:
        """Commit the staged changes with the given message."""
        try:
            self._open().git.commit('-m', message)
            return OperationResult(True, OperationType.COMMIT, f"Committed: {message}")
        except GitCommandError as e:
            return OperationResult(False, OperationType.COMMIT, f"Commit failed: {describe_git_error(e)}", e)

    def pull(self, remote: str, branch: str, rebase: bool = False) -> OperationResult:
        """Pull from remote/branch, using rebase or merge. Aborts on failure."""
        op_type = OperationType.REBASE if rebase else OperationType.PULL
        repo = self._open()
        try:
            if rebase:
                repo.git.pull('--rebase', remote, branch)
            else:
                repo.git.pull(remote, branch)
            return OperationResult(True, op_type, f"Pulled from {remote}/{branch}")
        except GitCommandError as e:
            try:
                if rebase:
                    repo.git.rebase('--abort')
                else:
                    repo.git.merge('--abort')
            except GitCommandError:
                pass
            return OperationResult(False, op_type, f"Pull failed: {describe_git_error(e)}", e)

    def push(self, remote: str, branch: str, set_upstream: bool = False) -> OperationResult:
        """Push a local branch, optionally recording remote/branch as its upstream."""
        args = ['-u', remote, branch] if set_upstream else [remote, branch]
        try:
            self._open().git.push(*args)
            return OperationResult(True, OperationType.PUSH, f"Pushed {branch} to {remote}")
        except GitCommandError as e:
            return OperationResult(False, OperationType.PUSH, f"Push failed: {describe_git_error(e)}", e)

    def add_remote(self, name: str, url: str) -> OperationResult:
        """Register a new remote."""
        try:
            self._open().create_remote(name, url)
            return OperationResult(True, OperationType.REMOTE_ADD, f"Added remote {name} -> {url}")
        except GitCommandError as e:
            return OperationResult(
                False, OperationType.REMOTE_ADD, f"Adding remote failed: {describe_git_error(e)}", e
            )

    def list_remote_branches(self, remote: str = 'origin') -> list[str]:
        """Ask the remote which branches it has (``git ls-remote --heads``)."""
        try:
            output = self._open().git.ls_remote('--heads', remote)
        except GitCommandError as e:
            self._logger.warning("Could not list branches of %s: %s", remote, describe_git_error(e))
            return []
        branches = []
        for line in output.splitlines():
            _sha, _, ref = line.partition('\t')
            if ref.startswith('refs/heads/'):
                branches.append(ref[len('refs/heads/'):])
        return branches

    def unpushed_commits(self, branch: str | None = None) -> list[str]:
        """Return one-line summaries of commits that no remote-tracking branch has.

        Only commits reachable from `branch` when given, otherwise from any local branch.
        """
        tips = [branch] if branch else ['--branches']
        try:
            output = self._open().git.log(*tips, '--not', '--remotes', '--oneline', '--')
        except GitCommandError:
            return []
        return [line for line in output.splitlines() if line.strip()]

    def init(self, default_branch: str) -> OperationResult:
        """Create a new repository at the path with the given initial branch."""
        try:
            self._path.mkdir(parents=True, exist_ok=True)
            self._repo = Repo.init(self._path, initial_branch=default_branch)
            return OperationResult(True, OperationType.INIT, f"Initialized repository on {default_branch}")
        except GitCommandError as e:
            return OperationResult(False, OperationType.INIT, f"Init failed: {describe_git_error(e)}", e)

    def clone(self, url: str, shallow: bool = False) -> OperationResult:
        """Clone `url` into the path, optionally truncated to the latest commit."""
        progress = GitProgressBar("Cloning") if self._show_progress else None
        kwargs = {'depth': 1} if shallow else {}
        try:
            self._repo = Repo.clone_from(url, self._path, progress=progress, **kwargs)
            return OperationResult(True, OperationType.CLONE, f"Cloned {url}")
        except GitCommandError as e:
            return OperationResult(False, OperationType.CLONE, f"Clone failed: {describe_git_error(e)}", e)
        finally:
            if progress is not None:
                progress.close()

    def set_global_identity(self, name: str, email: str) -> OperationResult:
        """Write user.name and user.email to the global git config."""
        git = Git()
        try:
            git.config('--global', 'user.name', name)
            git.config('--global', 'user.email', email)
            return OperationResult(True, OperationType.CONFIG, f"Configured identity {name} <{email}>")
        except GitCommandError as e:
            return OperationResult(
                False, OperationType.CONFIG, f"Saving identity failed: {describe_git_error(e)}", e
            )

    def get_global_identity(self) -> GitIdentity:
        """Read user.name and user.email from the global git config (empty when unset)."""
        git = Git()
        values = []
        for key in ('user.name', 'user.email'):
            try:
                values.append(git.config('--global', '--get', key).strip())
            except GitCommandError:
                values.append('')
        return GitIdentity(*values)
