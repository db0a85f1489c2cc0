"""Sync strategies: one class per SyncState."""

from __future__ import annotations

from abc import ABC, abstractmethod

from pygit_workflow.models import (
    IssueType,
    OperationResult,
    RepositoryStatus,
    SyncState,
    WorkflowConfig,
    WorkflowDecision,
    WorkflowIssue,
    WorkflowResult,
)
from pygit_workflow.output import SECTION_WIDTH
from pygit_workflow.preferences import PreferenceKey, PreferenceStore
from pygit_workflow.prompts import confirm
from pygit_workflow.protocols import GitRepository, OutputHandler, Prompter


class SyncStateStrategy(ABC):
    """Abstract strategy reacting to one sync state."""

    def __init__(
        self,
        repo: GitRepository,
        output: OutputHandler,
        prompter: Prompter,
        preferences: PreferenceStore,
        config: WorkflowConfig,
    ):
        self.repo = repo
        self.output = output
        self.prompter = prompter
        self.preferences = preferences
        self.config = config

    @abstractmethod
    def can_handle(self, state: SyncState) -> bool:
        """Return True if this strategy applies to the given state."""
        pass

    @abstractmethod
    def react(self, status: RepositoryStatus, result: WorkflowResult) -> None:
        """Act on the state (possibly after asking the user), recording into `result`."""
        pass

    def _gate(self, key: PreferenceKey, message: str) -> bool:
        """Ask a Yes/No/don't-ask-again question unless the user silenced it.

        Returns True only when the user chose to proceed.
        """
        if self.preferences.should_skip(key):
            self.output.debug(f"Prompt suppressed by preference {key.storage_key}")
            return False
        decision = confirm(self.prompter, message)
        if decision is WorkflowDecision.SUPPRESS_FUTURE:
            self.preferences.set_skip(key)
            self.output.info("Okay, this question won't be asked again for this repository", indent=1)
        return decision is WorkflowDecision.PROCEED

    def _apply(self, operation: OperationResult, result: WorkflowResult) -> bool:
        result.record(operation)
        if operation.success:
            self.output.success(f"\u2713 {operation.message}", indent=1)
            return True
        self.output.error(f"\u2717 {operation.message}", indent=1)
        result.add_issue(WorkflowIssue(IssueType.FAILED, operation.message))
        return False


class UpToDateStrategy(SyncStateStrategy):
    """Branch matches its upstream; still look for commits no remote has."""

    def can_handle(self, state: SyncState) -> bool:
        return state is SyncState.UP_TO_DATE

    def react(self, status: RepositoryStatus, result: WorkflowResult) -> None:
        if not self.offer_unpushed_push(status.branch, result):
            self.output.success("\u2713 Already up to date")

    def offer_unpushed_push(self, branch: str, result: WorkflowResult) -> bool:
        """Offer to push `branch` if it holds commits no remote has.

        Unpushed commits that only other local branches hold are listed, not
        pushed. Returns False when the current branch has nothing unpushed.
        """
        own = self.repo.unpushed_commits(branch) if branch else []
        others = [line for line in self.repo.unpushed_commits() if line not in own]
        if not own and not others:
            return False

        if others:
            self.output.info(f"\u2139 {len(others)} commit(s) on other local branches are not on any remote:")
            self._list(others)
            self.output.info("Check out those branches and push them to publish these commits", indent=1)
        if not branch:
            self.output.warning("\u26a0 HEAD is not on a branch; check out a branch to push", indent=1)
            return True
        if not own:
            return False

        self.output.info(f"\u2139 {len(own)} commit(s) on '{branch}' are not on any remote:")
        self._list(own)
        if self._gate(PreferenceKey.UNPUSHED_COMMITS, f"Push '{branch}' to {self.config.remote_name}?"):
            self._apply(self.repo.push(self.config.remote_name, branch, set_upstream=True), result)
        return True

    def _list(self, lines: list[str]) -> None:
        limit = self.config.recent_commit_count
        for line in lines[:limit]:
            self.output.info(line, indent=1)
        if len(lines) > limit:
            self.output.info(f"... and {len(lines) - limit} more", indent=1)


class BehindRemoteStrategy(SyncStateStrategy):
    """Remote has commits the local branch lacks."""

    def can_handle(self, state: SyncState) -> bool:
        return state is SyncState.BEHIND

    def react(self, status: RepositoryStatus, result: WorkflowResult) -> None:
        remote, upstream = status.upstream_target(self.config.remote_name)
        self.output.info(f"\u2139 {remote}/{upstream} has commits '{status.branch}' lacks")
        if self._gate(PreferenceKey.PULL_CHANGES, f"Pull the latest changes from {remote}/{upstream}?"):
            self._apply(self.repo.pull(remote, upstream, self.config.use_rebase), result)


class AheadOfRemoteStrategy(SyncStateStrategy):
    """Local branch has commits its upstream lacks."""

    def can_handle(self, state: SyncState) -> bool:
        return state is SyncState.AHEAD

    def react(self, status: RepositoryStatus, result: WorkflowResult) -> None:
        remote, upstream = status.upstream_target(self.config.remote_name)
        self.output.info(f"\u2139 '{status.branch}' has commits not yet on {remote}/{upstream}")
        # push local:upstream when the names differ, never a new remote branch
        refspec = status.branch if upstream == status.branch else f"{status.branch}:{upstream}"
        if self._gate(PreferenceKey.PUSH_CHANGES, f"Push '{status.branch}' to {remote}/{upstream}?"):
            self._apply(self.repo.push(remote, refspec), result)


class DivergedBranchStrategy(SyncStateStrategy):
    """Both sides advanced independently. Never acts, only explains."""

    def can_handle(self, state: SyncState) -> bool:
        return state is SyncState.DIVERGED

    def react(self, status: RepositoryStatus, result: WorkflowResult) -> None:
        remote, upstream = status.upstream_target(self.config.remote_name)
        branch = status.branch
        refspec = branch if upstream == branch else f"{branch}:{upstream}"
        self.output.warning("\u26a0 Local and remote history have diverged")
        self.output.info("\u2501" * SECTION_WIDTH, indent=1)
        self.output.info("Both sides have commits the other lacks. Nothing was pulled or pushed.", indent=1)
        self.output.info("Resolve it manually with one of:", indent=1)
        self.output.info("")
        self.output.info(f"1. Merge:      git pull --no-rebase {remote} {upstream}", indent=1)
        self.output.info("   Keeps both histories and adds a merge commit.", indent=1)
        self.output.info("   Safe, but you may have to resolve conflicts.", indent=1)
        self.output.info(f"2. Rebase:     git pull --rebase {remote} {upstream}", indent=1)
        self.output.info("   Replays your commits on top of the remote for a linear history.", indent=1)
        self.output.info("   Rewrites your local commits; conflicts are resolved commit by commit.", indent=1)
        self.output.info(f"3. Force-push: git push --force-with-lease {remote} {refspec}", indent=1)
        self.output.info("   Replaces the remote history with yours.", indent=1)
        self.output.info("   Destroys the remote-only commits for everyone. Only if you are sure.", indent=1)
        self.output.info("\u2501" * SECTION_WIDTH, indent=1)

        result.add_issue(WorkflowIssue(IssueType.DIVERGED, f"'{branch}' diverged from {remote}/{upstream}"))


class UnknownStateStrategy(SyncStateStrategy):
    """State could not be determined; warn softly and stop."""

    def can_handle(self, state: SyncState) -> bool:
        return state is SyncState.UNKNOWN

    def react(self, status: RepositoryStatus, result: WorkflowResult) -> None:
        self.output.warning("\u26a0 Could not compare with the remote; skipping pull/push this time")
