"""Classify local vs remote history from three revision ids."""

from __future__ import annotations

from pygit_workflow.models import RevisionPointers, SyncState


def classify_sync_state(
    local: str | None,
    remote_tracking: str | None,
    merge_base: str | None,
) -> SyncState:
    """Map (local tip, upstream tip, merge base) to a SyncState.

    Pure: no git, network or disk access. A missing local or upstream tip
    (no commit yet, no upstream configured) gives UNKNOWN. A missing merge
    base with two different tips means unrelated histories, which is
    reported as DIVERGED.
    """
    if not local or not remote_tracking:
        return SyncState.UNKNOWN
    if local == remote_tracking:
        return SyncState.UP_TO_DATE
    if local == merge_base:
        return SyncState.BEHIND
    if remote_tracking == merge_base:
        return SyncState.AHEAD
    return SyncState.DIVERGED


def classify_pointers(pointers: RevisionPointers | None) -> SyncState:
    """Classify a RevisionPointers triple; None means there was nothing to compare."""
    if pointers is None:
        return SyncState.UNKNOWN
    return classify_sync_state(pointers.local, pointers.remote_tracking, pointers.merge_base)
