"""
pygit-workflow: interactive commit-and-sync workflow for a git repository

Inspects a working directory, helps stage and commit local changes, then
compares the branch with its remote and offers to pull or push.
"""

import os

from colorama import init as colorama_init

# GitPython refuses to import without a git executable; the workflow reports
# a missing git itself instead.
os.environ.setdefault("GIT_PYTHON_REFRESH", "quiet")

colorama_init(autoreset=True)

__version__ = "0.3.0"

# Re-export public API so `from pygit_workflow import X` keeps working.
from pygit_workflow.classifier import classify_pointers, classify_sync_state  # noqa: E402
from pygit_workflow.cli import main  # noqa: E402
from pygit_workflow.committer import CommitCoordinator  # noqa: E402
from pygit_workflow.config import create_argument_parser, load_config_file  # noqa: E402
from pygit_workflow.connectivity import is_network_available  # noqa: E402
from pygit_workflow.inspector import StatusInspector, format_status_block  # noqa: E402
from pygit_workflow.models import (  # noqa: E402
    ChangedPath,
    CommitOutcome,
    CommitSummary,
    GitIdentity,
    IssueType,
    NotARepositoryError,
    OperationResult,
    OperationType,
    RepositoryStatus,
    RevisionPointers,
    SyncState,
    WorkflowConfig,
    WorkflowDecision,
    WorkflowIssue,
    WorkflowResult,
)
from pygit_workflow.orchestrator import WorkflowOrchestrator  # noqa: E402
from pygit_workflow.output import (  # noqa: E402
    SECTION_WIDTH,
    BufferedOutputHandler,
    ConsoleOutputHandler,
    NullOutputHandler,
)
from pygit_workflow.preferences import PreferenceKey, PreferenceStore  # noqa: E402
from pygit_workflow.prompts import ConsolePrompter  # noqa: E402
from pygit_workflow.protocols import GitRepository, OutputHandler, Prompter, WorkflowHook  # noqa: E402
from pygit_workflow.reporter import SummaryReporter  # noqa: E402
from pygit_workflow.repository import GitPythonRepository  # noqa: E402
from pygit_workflow.strategies import (  # noqa: E402
    AheadOfRemoteStrategy,
    BehindRemoteStrategy,
    DivergedBranchStrategy,
    SyncStateStrategy,
    UnknownStateStrategy,
    UpToDateStrategy,
)
from pygit_workflow.synchronizer import RemoteSetupFlow, SyncOrchestrator  # noqa: E402

__all__ = [
    "__version__",
    # Models
    "ChangedPath",
    "CommitOutcome",
    "CommitSummary",
    "GitIdentity",
    "IssueType",
    "NotARepositoryError",
    "OperationResult",
    "OperationType",
    "RepositoryStatus",
    "RevisionPointers",
    "SyncState",
    "WorkflowConfig",
    "WorkflowDecision",
    "WorkflowIssue",
    "WorkflowResult",
    # Protocols
    "GitRepository",
    "OutputHandler",
    "Prompter",
    "WorkflowHook",
    # Implementations
    "GitPythonRepository",
    "BufferedOutputHandler",
    "ConsoleOutputHandler",
    "NullOutputHandler",
    "ConsolePrompter",
    "PreferenceKey",
    "PreferenceStore",
    "SECTION_WIDTH",
    # Strategies
    "AheadOfRemoteStrategy",
    "BehindRemoteStrategy",
    "DivergedBranchStrategy",
    "SyncStateStrategy",
    "UnknownStateStrategy",
    "UpToDateStrategy",
    # Services
    "classify_pointers",
    "classify_sync_state",
    "format_status_block",
    "is_network_available",
    "CommitCoordinator",
    "RemoteSetupFlow",
    "StatusInspector",
    "SummaryReporter",
    "SyncOrchestrator",
    "WorkflowOrchestrator",
    # Config / CLI
    "create_argument_parser",
    "load_config_file",
    "main",
]
