"""StatusInspector: builds a RepositoryStatus from git queries."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from pygit_workflow.models import (
    ChangedPath,
    NotARepositoryError,
    RepositoryStatus,
    RevisionPointers,
    WorkflowConfig,
)
from pygit_workflow.protocols import GitRepository

logger = logging.getLogger(__name__)


def format_status_block(changes: Sequence[ChangedPath], max_lines: int) -> str:
    """Render changes one per line, cut to `max_lines` with a marker for the rest."""
    lines = [str(change) for change in changes]
    if len(lines) > max_lines:
        hidden = len(lines) - max_lines
        lines = lines[:max_lines]
        lines.append(f"... truncated, run 'git status' for the full list ({hidden} more)")
    return "\n".join(lines)


class StatusInspector:
    """Read-only view of a repository's branch, remote, changes and history"""

    def __init__(self, repo: GitRepository, config: WorkflowConfig):
        self.repo = repo
        self.config = config

    def inspect(self) -> RepositoryStatus:
        """Query git and return a fresh RepositoryStatus.

        Raises NotARepositoryError before running any other query when the
        path is not inside a repository.
        """
        if not self.repo.is_repository():
            raise NotARepositoryError(self.repo.path)

        changes = tuple(self.repo.working_tree_diff())
        commits = tuple(self.repo.recent_log(self.config.recent_commit_count))
        status = RepositoryStatus(
            branch=self.repo.current_branch or '',
            remote_url=self.repo.remote_url(self.config.remote_name),
            changed_paths=changes,
            recent_commits=commits[:self.config.recent_commit_count],
            status_text=format_status_block(changes, self.config.max_status_lines),
        )
        logger.debug(
            "Inspected %s: branch=%r remote=%r changes=%d",
            self.repo.path, status.branch, status.remote_url, len(changes),
        )
        return status

    def revision_pointers(self) -> RevisionPointers | None:
        """Resolve HEAD, its upstream and their merge base.

        Returns None when HEAD has no commit or the branch has no upstream.
        The upstream remote and branch name are carried along so pull and push
        target the branch that was compared.
        """
        local = self.repo.revision('@')
        if local is None:
            return None
        remote_tracking = self.repo.revision('@{u}')
        if remote_tracking is None:
            return None
        merge_base = self.repo.merge_base(local, remote_tracking)
        upstream_remote, upstream_branch = self.repo.upstream() or (None, None)
        logger.debug(
            "local=%s upstream=%s (%s/%s) base=%s",
            local, remote_tracking, upstream_remote, upstream_branch, merge_base,
        )
        return RevisionPointers(local, remote_tracking, merge_base, upstream_remote, upstream_branch)
