"""CommitCoordinator: the stage/commit decision tree."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from pygit_workflow.models import (
    CommitOutcome,
    IssueType,
    OperationResult,
    RepositoryStatus,
    WorkflowConfig,
    WorkflowIssue,
    WorkflowResult,
    is_valid_email,
)
from pygit_workflow.prompts import prompt_until_valid
from pygit_workflow.protocols import GitRepository, OutputHandler, Prompter

STAGE_AND_COMMIT = "Stage and commit all changes"
STAGE_ONLY = "Stage changes only"
DO_NOTHING = "Do nothing"


class CommitCoordinator:
    """Drives identity setup, staging and committing for a dirty working tree"""

    def __init__(
        self,
        repo: GitRepository,
        prompter: Prompter,
        output: OutputHandler,
        config: WorkflowConfig,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.repo = repo
        self.prompter = prompter
        self.output = output
        self.config = config
        self.clock = clock
        self._logger = logging.getLogger(__name__)

    def coordinate(self, status: RepositoryStatus, result: WorkflowResult | None = None) -> CommitOutcome:
        """Ask what to do with the pending changes and do it.

        Only COMMITTED allows the caller to go on to remote synchronization.
        Git operations and failures are recorded on `result` when given.
        """
        result = result if result is not None else WorkflowResult()
        if status.is_clean:
            self.output.info("Working tree is clean, nothing to commit")
            return CommitOutcome.SKIPPED

        if not self.ensure_identity(result):
            self.output.warning("Commit skipped: git identity is not configured")
            return CommitOutcome.SKIPPED

        choice = self.prompter.ask(
            f"{len(status.changed_paths)} changed file(s) on '{status.branch or 'HEAD'}'. What would you like to do?",
            [STAGE_AND_COMMIT, STAGE_ONLY, DO_NOTHING],
        )
        self._logger.debug("commit choice: %r", choice)
        if choice == STAGE_AND_COMMIT:
            return self._stage_and_commit(result)
        if choice == STAGE_ONLY:
            return self._stage_only(result)

        self.output.info("Leaving changes untouched")
        return CommitOutcome.SKIPPED

    def ensure_identity(self, result: WorkflowResult | None = None) -> bool:
        """Make sure user.name and a valid user.email are configured, asking if needed.

        Returns False if the user cancels or the identity cannot be saved.
        """
        identity = self.repo.get_global_identity()
        if identity.is_complete:
            return True

        self.output.warning("Git needs your name and email to record commits.")
        name = prompt_until_valid(
            self.prompter, self.output,
            "Your name:",
            lambda value: bool(value),
            "Name cannot be empty.",
            default=identity.name,
        )
        if name is None:
            return False
        email = prompt_until_valid(
            self.prompter, self.output,
            "Your email:",
            is_valid_email,
            "Enter a valid email address, e.g. jane@example.com.",
            default=identity.email,
        )
        if email is None:
            return False

        saved = self.repo.set_global_identity(name, email)
        if not self._report(saved, result):
            return False
        self.output.success(f"\u2713 Identity set to {name} <{email}>", indent=1)
        return True

    def _stage_and_commit(self, result: WorkflowResult) -> CommitOutcome:
        staged = self.repo.stage_all()
        if not self._report(staged, result):
            return CommitOutcome.SKIPPED

        if not self.repo.has_staged_changes():
            self.output.warning("Nothing was staged (all changes ignored?); no commit created")
            return CommitOutcome.SKIPPED

        default_message = self.config.default_commit_message(self.clock())
        message = self.prompter.ask_text("Commit message:", default_message)
        if message is None:
            self.output.info("Commit cancelled; changes remain staged")
            return CommitOutcome.STAGED_ONLY
        if not message.strip():
            message = default_message

        committed = self.repo.commit(message)
        if not self._report(committed, result):
            return CommitOutcome.SKIPPED
        self.output.success(f"\u2713 Committed: {message}", indent=1)
        return CommitOutcome.COMMITTED

    def _stage_only(self, result: WorkflowResult) -> CommitOutcome:
        staged = self.repo.stage_all()
        if self._report(staged, result):
            self.output.success("\u2713 Changes staged (not committed)", indent=1)
        return CommitOutcome.STAGED_ONLY

    def _report(self, operation: OperationResult, result: WorkflowResult | None) -> bool:
        """Record an operation, surface its error, and return whether it succeeded."""
        if result is not None:
            result.record(operation)
        if operation.success:
            return True
        self.output.error(f"\u2717 {operation.message}", indent=1)
        if result is not None:
            result.add_issue(WorkflowIssue(IssueType.FAILED, operation.message))
        return False
