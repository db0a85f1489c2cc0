"""Interactive prompts: the terminal Prompter and shared question helpers."""

from __future__ import annotations

import logging
import sys
from collections.abc import Callable, Sequence

from InquirerPy import inquirer

from pygit_workflow.models import WorkflowDecision
from pygit_workflow.protocols import OutputHandler, Prompter

logger = logging.getLogger(__name__)

YES = "Yes"
NO = "No"
NEVER = "No, and don't ask again"

_DECISIONS = {
    YES: WorkflowDecision.PROCEED,
    NO: WorkflowDecision.DECLINE,
    NEVER: WorkflowDecision.SUPPRESS_FUTURE,
}


class ConsolePrompter:
    """Prompter built on InquirerPy. Ctrl-C or the skip key cancels the prompt (None)."""

    def _interactive(self) -> bool:
        if sys.stdin.isatty():
            return True
        logger.warning("stdin is not a terminal; treating prompt as cancelled")
        return False

    def ask(self, message: str, options: Sequence[str]) -> str | None:
        if not self._interactive():
            return None
        try:
            return inquirer.select(message=message, choices=list(options), mandatory=False).execute()
        except KeyboardInterrupt:
            return None

    def ask_text(self, message: str, default: str = '') -> str | None:
        if not self._interactive():
            return None
        try:
            answer = inquirer.text(message=message, default=default, mandatory=False).execute()
        except KeyboardInterrupt:
            return None
        return None if answer is None else answer.strip()


def confirm(prompter: Prompter, message: str) -> WorkflowDecision:
    """Ask a Yes / No / don't-ask-again question. Cancelling counts as No."""
    answer = prompter.ask(message, [YES, NO, NEVER])
    return _DECISIONS.get(answer, WorkflowDecision.DECLINE)


def prompt_until_valid(
    prompter: Prompter,
    output: OutputHandler,
    message: str,
    is_valid: Callable[[str], bool],
    error_message: str,
    default: str = '',
) -> str | None:
    """Re-ask until `is_valid` accepts the answer. Returns None as soon as the user cancels."""
    while True:
        answer = prompter.ask_text(message, default)
        if answer is None:
            return None
        answer = answer.strip()
        if is_valid(answer):
            return answer
        output.error(error_message, indent=1)
