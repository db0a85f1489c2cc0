"""SummaryReporter: generates and displays the end-of-run report."""

from __future__ import annotations

from pygit_workflow.models import (
    CommitOutcome,
    IssueType,
    SyncState,
    WorkflowIssue,
    WorkflowResult,
)
from pygit_workflow.output import SECTION_WIDTH
from pygit_workflow.protocols import OutputHandler

_COMMIT_LABELS = {
    CommitOutcome.COMMITTED: "committed",
    CommitOutcome.STAGED_ONLY: "staged only, not committed",
    CommitOutcome.SKIPPED: "skipped",
}

_STATE_LABELS = {
    SyncState.UP_TO_DATE: "up to date",
    SyncState.AHEAD: "ahead of remote",
    SyncState.BEHIND: "behind remote",
    SyncState.DIVERGED: "diverged from remote",
    SyncState.UNKNOWN: "unknown",
}


class SummaryReporter:
    """Generates and displays summary reports"""

    def __init__(self, output: OutputHandler):
        self.output = output

    def print_summary(self, result: WorkflowResult):
        """Print what happened this run, then any issues with recommendations."""
        self.output.section("\u2554" + "=" * SECTION_WIDTH + "\u2557")
        self.output.info("\u2551" + "SUMMARY".center(SECTION_WIDTH) + "\u2551")
        self.output.info("\u255a" + "=" * SECTION_WIDTH + "\u255d")
        self.output.info("")

        if result.commit_outcome is not None:
            self.output.info(f"Local changes: {_COMMIT_LABELS[result.commit_outcome]}")
        if result.sync_state is not None:
            self.output.info(f"Sync state: {_STATE_LABELS[result.sync_state]}")
        for operation in result.operations:
            mark = "\u2713" if operation.success else "\u2717"
            self.output.info(f"{mark} {operation.message}", indent=1)
        self.output.info("")

        if result.has_issues():
            self._print_issues_summary(result)
        else:
            self.output.success("\u2705 All done")

        self.output.info("")
        self.output.info("=" * SECTION_WIDTH)

    def _print_issues_summary(self, result: WorkflowResult):
        self.output.warning("\u26a0\ufe0f  ATTENTION REQUIRED")
        self.output.info("")

        self._print_issue_category("\U0001f534 FAILED OPERATIONS", result.get_issues_by_type(IssueType.FAILED))
        self._print_issue_category("\U0001f9f0 ENVIRONMENT", result.get_issues_by_type(IssueType.ENVIRONMENT))
        self._print_issue_category("\U0001f4e1 OFFLINE", result.get_issues_by_type(IssueType.OFFLINE))
        self._print_issue_category("\U0001f4e5 FETCH FAILED", result.get_issues_by_type(IssueType.FETCH_FAILED))
        self._print_issue_category("\U0001f517 NO UPSTREAM", result.get_issues_by_type(IssueType.NO_UPSTREAM))
        self._print_issue_category("\U0001f500 DIVERGED", result.get_issues_by_type(IssueType.DIVERGED))
        self._print_issue_category("\U0001f4c1 NOT A REPOSITORY", result.get_issues_by_type(IssueType.NOT_A_REPOSITORY))

        self.output.info("=" * SECTION_WIDTH)
        self.output.info("")
        self.output.info("\U0001f4a1 RECOMMENDATIONS:")
        self.output.info("")

        if result.get_issues_by_type(IssueType.DIVERGED):
            self.output.info("\u2022 Diverged history needs a manual merge, rebase or force-push")
        if result.get_issues_by_type(IssueType.OFFLINE) or result.get_issues_by_type(IssueType.FETCH_FAILED):
            self.output.info("\u2022 Check your connection and credentials, then run again")
        if result.get_issues_by_type(IssueType.NO_UPSTREAM):
            self.output.info("\u2022 Push the branch with 'git push -u' to start tracking it")

    def _print_issue_category(self, title: str, issues: list[WorkflowIssue]):
        if not issues:
            return

        self.output.info(f"{title} ({len(issues)}):")
        self.output.info("-" * SECTION_WIDTH)
        for issue in issues:
            self.output.info(f"  \u21b3 {issue.details}")
        self.output.info("")
