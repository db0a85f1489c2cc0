"""WorkflowOrchestrator: sequences setup, inspection, commit and sync."""

from __future__ import annotations

import logging
import shutil
from collections.abc import Callable

from pygit_workflow.committer import CommitCoordinator
from pygit_workflow.connectivity import probe_from_config
from pygit_workflow.inspector import StatusInspector
from pygit_workflow.models import (
    CommitOutcome,
    IssueType,
    NotARepositoryError,
    RepositoryStatus,
    WorkflowConfig,
    WorkflowIssue,
    WorkflowResult,
)
from pygit_workflow.preferences import PreferenceStore
from pygit_workflow.prompts import prompt_until_valid
from pygit_workflow.protocols import GitRepository, OutputHandler, Prompter, WorkflowHook
from pygit_workflow.synchronizer import SyncOrchestrator

INIT_REPOSITORY = "Initialize a new repository here"
CLONE_REPOSITORY = "Clone an existing repository"
CANCEL_SETUP = "Cancel"


class WorkflowOrchestrator:
    """Main orchestrator - runs the whole workflow for one directory"""

    def __init__(
        self,
        repo: GitRepository,
        output: OutputHandler,
        prompter: Prompter,
        config: WorkflowConfig,
        hooks: list[WorkflowHook] | None = None,
        connectivity: Callable[[], bool] | None = None,
        tool_locator: Callable[[str], str | None] = shutil.which,
    ):
        """Create an orchestrator. `connectivity` and `tool_locator` are injectable probes."""
        self.repo = repo
        self.output = output
        self.prompter = prompter
        self.config = config
        self.hooks = hooks or []
        self.connectivity = connectivity or probe_from_config(config)
        self.tool_locator = tool_locator
        self.inspector = StatusInspector(repo, config)
        self._logger = logging.getLogger(__name__)

    def run(self) -> WorkflowResult:
        """Run the workflow once. Never raises; failures end up in the result."""
        result = WorkflowResult()
        try:
            for hook in self.hooks:
                if not hook.before_workflow(self.repo, self.config):
                    return result

            if not self._ensure_tool(result):
                return result
            if not self._ensure_repository(result):
                return result

            status = self.inspector.inspect()
            self._show_status(status)

            if status.is_clean:
                result.merge(self._synchronizer().synchronize(after_commit=False))
            else:
                coordinator = CommitCoordinator(self.repo, self.prompter, self.output, self.config)
                outcome = coordinator.coordinate(status, result)
                result.commit_outcome = outcome
                if outcome is CommitOutcome.COMMITTED:
                    result.merge(self._synchronizer().synchronize(after_commit=True))
                else:
                    self.output.info("No new commit; skipping remote synchronization")

            for hook in self.hooks:
                hook.after_workflow(self.repo, result)
            return result

        except NotARepositoryError as e:
            self.output.error(str(e))
            result.add_issue(WorkflowIssue(IssueType.NOT_A_REPOSITORY, str(e)))
            return result
        except Exception as e:
            self._logger.exception("Workflow failed")
            self.output.error(f"Unexpected error: {e}")
            for hook in self.hooks:
                hook.on_error(self.repo, e)
            result.add_issue(WorkflowIssue(IssueType.FAILED, f"Unexpected error: {e}"))
            return result

    def _synchronizer(self) -> SyncOrchestrator:
        return SyncOrchestrator(
            self.repo, self.output, self.prompter, self.config,
            preferences=PreferenceStore.for_repository(self.repo, self.config),
            connectivity=self.connectivity,
        )

    def _ensure_tool(self, result: WorkflowResult) -> bool:
        """Check that the git executable is on PATH."""
        location = self.tool_locator(self.config.git_executable)
        if location:
            self._logger.debug("using %s", location)
            return True
        details = f"'{self.config.git_executable}' was not found on PATH"
        self.output.error(f"\u2717 {details}")
        self.output.info("Install git from https://git-scm.com/downloads and run again.", indent=1)
        result.add_issue(WorkflowIssue(IssueType.ENVIRONMENT, details))
        return False

    def _ensure_repository(self, result: WorkflowResult) -> bool:
        """Offer to init or clone when the directory holds no repository."""
        if self.repo.is_repository():
            return True

        self.output.warning(f"\u26a0 {self.repo.path} is not a git repository")
        choice = self.prompter.ask(
            "How would you like to set it up?",
            [INIT_REPOSITORY, CLONE_REPOSITORY, CANCEL_SETUP],
        )
        if choice == INIT_REPOSITORY:
            operation = self.repo.init(self.config.default_branch)
        elif choice == CLONE_REPOSITORY:
            operation = self._clone(result)
            if operation is None:
                return False
        else:
            self.output.info("Repository setup declined; nothing to do")
            return False

        result.record(operation)
        if not operation.success:
            self.output.error(f"\u2717 {operation.message}")
            result.add_issue(WorkflowIssue(IssueType.FAILED, operation.message))
            return False
        self.output.success(f"\u2713 {operation.message}")
        return True

    def _clone(self, result: WorkflowResult):
        if not self.config.skip_network_check and not self.connectivity():
            self.output.warning("\u26a0 Network unreachable; cannot clone")
            result.add_issue(WorkflowIssue(IssueType.OFFLINE, "Network unreachable"))
            return None
        schemes = ', '.join(self.config.accepted_url_schemes)
        url = prompt_until_valid(
            self.prompter, self.output,
            "Repository URL to clone:",
            self.config.is_accepted_remote_url,
            f"The URL must start with one of: {schemes}",
        )
        if url is None:
            self.output.info("Clone cancelled")
            return None
        self.output.info(f"Cloning {url}...")
        return self.repo.clone(url, shallow=self.config.shallow_clone)

    def _show_status(self, status: RepositoryStatus) -> None:
        self.output.section(f"Repository: {self.repo.path}")
        self.output.info(f"Branch: {status.branch or '(no branch)'}")
        self.output.info(f"Remote: {status.remote_url or '(none)'}")
        if status.is_clean:
            self.output.info("Working tree clean")
        else:
            self.output.info(f"Changes ({len(status.changed_paths)}):")
            for line in status.status_text.splitlines():
                self.output.info(line, indent=1)
        if status.recent_commits:
            self.output.info("Recent commits:")
            for commit in status.recent_commits:
                self.output.info(str(commit), indent=1)
