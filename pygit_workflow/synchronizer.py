"""SyncOrchestrator: fetch, classify, and react; plus first-time remote setup."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import replace

from pygit_workflow.classifier import classify_pointers
from pygit_workflow.connectivity import probe_from_config
from pygit_workflow.inspector import StatusInspector
from pygit_workflow.models import (
    IssueType,
    OperationResult,
    RepositoryStatus,
    RevisionPointers,
    SyncState,
    WorkflowConfig,
    WorkflowDecision,
    WorkflowIssue,
    WorkflowResult,
)
from pygit_workflow.preferences import PreferenceKey, PreferenceStore
from pygit_workflow.prompts import confirm, prompt_until_valid
from pygit_workflow.protocols import GitRepository, OutputHandler, Prompter
from pygit_workflow.strategies import (
    AheadOfRemoteStrategy,
    BehindRemoteStrategy,
    DivergedBranchStrategy,
    SyncStateStrategy,
    UnknownStateStrategy,
    UpToDateStrategy,
)

logger = logging.getLogger(__name__)


class RemoteSetupFlow:
    """Offers to add a remote when none is configured, then pulls/pushes once."""

    def __init__(
        self,
        repo: GitRepository,
        output: OutputHandler,
        prompter: Prompter,
        preferences: PreferenceStore,
        config: WorkflowConfig,
        unpushed: UpToDateStrategy,
    ):
        self.repo = repo
        self.output = output
        self.prompter = prompter
        self.preferences = preferences
        self.config = config
        self.unpushed = unpushed

    def run(self, status: RepositoryStatus, result: WorkflowResult) -> None:
        remote = self.config.remote_name
        if self.preferences.should_skip(PreferenceKey.GIT_REMOTE):
            self.output.info(f"No remote '{remote}' configured (setup prompt disabled)")
            return

        self.output.warning(f"\u26a0 No remote '{remote}' is configured")
        decision = confirm(self.prompter, f"Add a remote '{remote}' now?")
        if decision is WorkflowDecision.SUPPRESS_FUTURE:
            self.preferences.set_skip(PreferenceKey.GIT_REMOTE)
            self.output.info("Okay, this question won't be asked again for this repository", indent=1)
            return
        if decision is WorkflowDecision.DECLINE:
            self.output.info("Continuing without a remote")
            return

        schemes = ', '.join(self.config.accepted_url_schemes)
        url = prompt_until_valid(
            self.prompter, self.output,
            f"URL of '{remote}':",
            self.config.is_accepted_remote_url,
            f"The URL must start with one of: {schemes}",
        )
        if url is None:
            self.output.info("Remote setup cancelled")
            return

        if not self._apply(self.repo.add_remote(remote, url), result):
            return

        remote_branches = self.repo.list_remote_branches(remote)
        if remote_branches:
            target = self._pick_branch(status.branch, remote_branches)
            self.output.info(f"Remote already has branches; pulling '{target}' once")
            if not self._apply(self.repo.pull(remote, target), result):
                return
        else:
            self.output.info("Remote has no branches yet")

        self.unpushed.offer_unpushed_push(self.repo.current_branch or '', result)

    def _pick_branch(self, local_branch: str, remote_branches: list[str]) -> str:
        for candidate in (local_branch, self.config.default_branch):
            if candidate and candidate in remote_branches:
                return candidate
        return remote_branches[0]

    def _apply(self, operation: OperationResult, result: WorkflowResult) -> bool:
        result.record(operation)
        if operation.success:
            self.output.success(f"\u2713 {operation.message}", indent=1)
            return True
        self.output.error(f"\u2717 {operation.message}", indent=1)
        result.add_issue(WorkflowIssue(IssueType.FAILED, operation.message))
        return False


class SyncOrchestrator:
    """Responsible for bringing one repository in line with its remote"""

    def __init__(
        self,
        repo: GitRepository,
        output: OutputHandler,
        prompter: Prompter,
        config: WorkflowConfig,
        preferences: PreferenceStore | None = None,
        connectivity: Callable[[], bool] | None = None,
    ):
        """Create a synchronizer. Preferences default to the repository's own store."""
        self.repo = repo
        self.output = output
        self.prompter = prompter
        self.config = config
        self.preferences = preferences or PreferenceStore.for_repository(repo, config)
        self.connectivity = connectivity or probe_from_config(config)
        self.inspector = StatusInspector(repo, config)

        args = (repo, output, prompter, self.preferences, config)
        up_to_date = UpToDateStrategy(*args)
        self.strategies: list[SyncStateStrategy] = [
            up_to_date,
            BehindRemoteStrategy(*args),
            AheadOfRemoteStrategy(*args),
            DivergedBranchStrategy(*args),
            UnknownStateStrategy(*args),
        ]
        self.remote_setup = RemoteSetupFlow(*args, unpushed=up_to_date)

    def synchronize(self, after_commit: bool = False) -> WorkflowResult:
        """Check the network, then set up a remote or fetch, classify and react."""
        result = WorkflowResult()
        self.output.section("Synchronizing with remote")

        if not self.config.skip_network_check and not self.connectivity():
            self.output.warning("\u26a0 Network unreachable; skipping remote synchronization")
            result.add_issue(WorkflowIssue(IssueType.OFFLINE, "Network unreachable"))
            return result

        status = self.inspector.inspect()
        if not status.has_remote:
            self.remote_setup.run(status, result)
            return result

        if after_commit:
            self.output.debug("Synchronizing after a fresh commit")
        state, pointers = self._classify(status, result)
        result.sync_state = state
        if pointers is not None and pointers.upstream_branch:
            status = replace(
                status,
                upstream_remote=pointers.upstream_remote,
                upstream_branch=pointers.upstream_branch,
            )
        logger.debug("sync state for %s: %s", status.branch, state.name)

        for strategy in self.strategies:
            if strategy.can_handle(state):
                strategy.react(status, result)
                break
        return result

    def determine_state(self, status: RepositoryStatus, result: WorkflowResult) -> SyncState:
        """Fetch, then classify. Any failure along the way yields UNKNOWN."""
        return self._classify(status, result)[0]

    def _classify(
        self, status: RepositoryStatus, result: WorkflowResult
    ) -> tuple[SyncState, RevisionPointers | None]:
        remote = self.config.remote_name
        self.output.info(f"Fetching from {remote}...")
        fetched = self.repo.fetch(remote)
        result.record(fetched)
        if not fetched.success:
            self.output.warning(f"\u26a0 {fetched.message}", indent=1)
            result.add_issue(WorkflowIssue(IssueType.FETCH_FAILED, fetched.message))
            return SyncState.UNKNOWN, None

        pointers = self.inspector.revision_pointers()
        if pointers is None:
            if not status.branch:
                details = "No branch checked out or no commits yet"
                self.output.warning(f"\u26a0 {details}", indent=1)
            else:
                details = f"'{status.branch}' has no upstream branch"
                self.output.warning(f"\u26a0 {details}", indent=1)
                self.output.info(f"Publish it with: git push -u {remote} {status.branch}", indent=1)
            result.add_issue(WorkflowIssue(IssueType.NO_UPSTREAM, details))
            return SyncState.UNKNOWN, None

        return classify_pointers(pointers), pointers
