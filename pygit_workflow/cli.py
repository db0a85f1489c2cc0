"""CLI entry point: main() function."""

from __future__ import annotations

import json
import logging
import sys
from pathlib import Path

from colorama import Fore, Style

from pygit_workflow.config import create_argument_parser, load_config_file
from pygit_workflow.models import WorkflowConfig
from pygit_workflow.orchestrator import WorkflowOrchestrator
from pygit_workflow.output import ConsoleOutputHandler
from pygit_workflow.prompts import ConsolePrompter
from pygit_workflow.reporter import SummaryReporter
from pygit_workflow.repository import GitPythonRepository

# Settings only available through the config file
_FILE_ONLY_KEYS = (
    'max_status_lines',
    'recent_commit_count',
    'commit_message_template',
    'timestamp_format',
    'network_host',
    'network_port',
    'network_timeout',
    'preferences_filename',
)


def explicit_dests(parser, argv: list[str]) -> set[str]:
    """Return the dests of options given on the command line, in `--opt value` or `--opt=value` form."""
    found = set()
    for action in parser._actions:
        if action.dest in ('help', 'version'):
            continue
        for opt_string in action.option_strings:
            if any(arg == opt_string or arg.startswith(opt_string + '=') for arg in argv):
                found.add(action.dest)
                break
    return found


def build_config(args, file_config: dict, cli_explicit: set[str]) -> WorkflowConfig:
    """Merge CLI flags, config file values and defaults (in that order of precedence)."""
    def effective(dest: str, toml_key: str):
        if dest in cli_explicit:
            return getattr(args, dest)
        if toml_key in file_config:
            return file_config[toml_key]
        return getattr(args, dest)

    extra = {key: file_config[key] for key in _FILE_ONLY_KEYS if key in file_config}
    if 'accepted_url_schemes' in file_config:
        extra['accepted_url_schemes'] = tuple(file_config['accepted_url_schemes'])

    verbose = effective('verbose', 'verbose')
    log_level = effective('log_level', 'log_level')
    return WorkflowConfig(
        remote_name=effective('remote', 'remote_name'),
        default_branch=effective('default_branch', 'default_branch'),
        skip_network_check=effective('skip_network_check', 'skip_network_check'),
        shallow_clone=effective('shallow_clone', 'shallow_clone'),
        use_rebase=effective('use_rebase', 'use_rebase'),
        json_output=effective('json_output', 'json_output'),
        verbose=verbose,
        log_level='DEBUG' if verbose else str(log_level).upper(),
        **extra,
    )


def main():
    """Main entry point"""
    parser = create_argument_parser()
    args = parser.parse_args()

    work_dir = Path(args.directory).resolve()
    if not work_dir.is_dir():
        print(f"{Fore.RED}Error: Invalid directory '{work_dir}'{Style.RESET_ALL}")
        sys.exit(1)

    file_config = load_config_file(work_dir, args.config)

    config = build_config(args, file_config, explicit_dests(parser, sys.argv[1:]))

    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )

    output = ConsoleOutputHandler(verbose=config.verbose)
    repo = GitPythonRepository(work_dir, show_progress=not config.json_output)
    orchestrator = WorkflowOrchestrator(repo, output, ConsolePrompter(), config)

    try:
        result = orchestrator.run()

        if config.json_output:
            print(json.dumps(result.to_dict(), indent=2))
        else:
            SummaryReporter(output).print_summary(result)

    except KeyboardInterrupt:
        output.warning("\n\nInterrupted by user")
        sys.exit(130)
    finally:
        repo.close()
