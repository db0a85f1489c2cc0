"""Per-repository "don't ask again" preferences."""

from __future__ import annotations

import json
import logging
from enum import Enum
from pathlib import Path

from pygit_workflow.models import WorkflowConfig
from pygit_workflow.protocols import GitRepository

logger = logging.getLogger(__name__)


class PreferenceKey(str, Enum):
    """Prompt sites that can be silenced"""
    PULL_CHANGES = 'pull_changes'
    PUSH_CHANGES = 'push_changes'
    UNPUSHED_COMMITS = 'unpushed_commits'
    GIT_REMOTE = 'git_remote'

    @property
    def storage_key(self) -> str:
        return f"Skip_{self.value}"


class PreferenceStore:
    """Flat key -> bool JSON document kept inside the repository's git dir.

    A missing file or key means "ask". An unreadable or corrupt document is
    treated as empty. Writes are whole-document read-modify-write with no
    locking; one interactive operator at a time is assumed.
    """

    def __init__(self, path: Path):
        self.path = Path(path)

    @classmethod
    def for_repository(cls, repo: GitRepository, config: WorkflowConfig) -> PreferenceStore:
        """Store scoped to a repository: <git-dir>/<preferences_filename>."""
        return cls(repo.git_dir / config.preferences_filename)

    def should_skip(self, key: PreferenceKey | str) -> bool:
        """Return True if the user asked not to be prompted for `key` again."""
        return bool(self._load().get(_storage_key(key), False))

    def set_skip(self, key: PreferenceKey | str) -> None:
        """Remember that the prompt for `key` should not be shown again."""
        data = self._load()
        data[_storage_key(key)] = True
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self.path.write_text(json.dumps(data, indent=2, sort_keys=True) + "\n", encoding='utf-8')
        except OSError as e:
            logger.warning("Could not save preference %s to %s: %s", _storage_key(key), self.path, e)

    def _load(self) -> dict[str, bool]:
        if not self.path.is_file():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding='utf-8'))
        except (OSError, ValueError) as e:
            logger.warning("Ignoring unreadable preferences file %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            logger.warning("Ignoring preferences file %s: expected a JSON object", self.path)
            return {}
        return {str(k): v is True for k, v in data.items()}


def _storage_key(key: PreferenceKey | str) -> str:
    if isinstance(key, PreferenceKey):
        return key.storage_key
    return key if key.startswith('Skip_') else f"Skip_{key}"
