"""Configuration: argument parser and config file loader."""

from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any

try:
    import tomllib
except ModuleNotFoundError:
    import tomli as tomllib  # type: ignore[no-redef]

CONFIG_FILENAME = '.pygit-workflow.toml'
LOG_LEVELS = ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')


def create_argument_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser with all pygit-workflow flags."""
    # Lazy import to avoid circular dependency with __init__.py
    from pygit_workflow import __version__

    parser = argparse.ArgumentParser(
        description="Inspect a git repository, commit local changes and sync with its remote",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                                   # Work on the current directory
  %(prog)s ~/notes --verbose                 # Another directory, debug output
  %(prog)s --skip-network-check              # Don't probe connectivity first
  %(prog)s --log-level WARNING --json        # Quiet logs, JSON summary
        """
    )

    parser.add_argument('--version', action='version', version=f'%(prog)s {__version__}')
    parser.add_argument('directory', nargs='?', default='.',
                       help='Working directory (default: current)')
    parser.add_argument('--verbose', action='store_true',
                       help='Verbose output (implies --log-level DEBUG)')
    parser.add_argument('--log-level', type=str.upper, choices=LOG_LEVELS, default='INFO',
                       help='Logging level (default: INFO)')
    parser.add_argument('--skip-network-check', action='store_true',
                       help='Do not probe network reachability before remote operations')
    parser.add_argument('--remote', default='origin',
                       help='Remote name to sync with (default: origin)')
    parser.add_argument('--default-branch', default='main',
                       help='Initial branch for new repositories (default: main)')
    parser.add_argument('--shallow', dest='shallow_clone', action='store_true',
                       help='Clone with --depth 1 when cloning a repository')
    parser.add_argument('--rebase', dest='use_rebase', action='store_true',
                       help='Pull with --rebase instead of merging')
    parser.add_argument('--json', dest='json_output', action='store_true',
                       help='Print the run summary as JSON')
    parser.add_argument('--config', type=str, default=None,
                       help=f'Path to config file (default: {CONFIG_FILENAME} in the directory or home)')

    return parser


def load_config_file(search_dir: Path, config_path: str | None = None) -> dict[str, Any]:
    """Load the TOML config from an explicit path, the working dir, or the home dir.

    Returns an empty dict if nothing is found or the file cannot be parsed.
    """
    candidates = [Path(config_path)] if config_path else [search_dir / CONFIG_FILENAME, Path.home() / CONFIG_FILENAME]
    for path in candidates:
        if path.is_file():
            try:
                with open(path, 'rb') as f:
                    return tomllib.load(f)
            except (OSError, tomllib.TOMLDecodeError) as e:
                print(f"Warning: Failed to parse {path}: {e}")
                return {}
    if config_path:
        print(f"Warning: Config file '{config_path}' not found. Ignoring.")
    return {}
