"""Decide which installed versions to delete."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from .scanner import VersionEntry


class RetentionMode(Enum):
    """How the version to keep is chosen."""

    HEURISTIC = "heuristic"  # evict the newest, keep the rest
    EXPLICIT = "explicit"  # keep one caller-selected version, evict the rest


@dataclass(frozen=True)
class RetentionDecision:
    """Partition of a scanned version list into kept and deleted entries.

    Both tuples keep the scanned order. Together they hold every scanned
    entry exactly once.
    """

    kept: tuple[VersionEntry, ...]
    to_delete: tuple[VersionEntry, ...]
    selected: VersionEntry | None = None


def _keep_all(versions: Sequence[VersionEntry]) -> RetentionDecision:
    return RetentionDecision(kept=tuple(versions), to_delete=())


def heuristic_decision(versions: Sequence[VersionEntry]) -> RetentionDecision:
    """Mark only the newest entry for deletion when more than one is installed."""
    if len(versions) <= 1:
        return _keep_all(versions)
    return RetentionDecision(kept=tuple(versions[:-1]), to_delete=(versions[-1],))


def resolve_selection(versions: Sequence[VersionEntry], keep: int | str | None) -> VersionEntry | None:
    """Find the entry named by an index or a version name.

    Returns None for anything that does not name exactly one entry.
    """
    if keep is None or isinstance(keep, bool):
        return None
    if isinstance(keep, int):
        if 0 <= keep < len(versions):
            return versions[keep]
        return None
    for entry in versions:
        if entry.name == keep:
            return entry
    return None


def explicit_decision(versions: Sequence[VersionEntry], keep: int | str | None) -> RetentionDecision:
    """Keep the selected entry and mark every other one for deletion.

    An invalid or missing selection deletes nothing.
    """
    selected = resolve_selection(versions, keep)
    if selected is None:
        return _keep_all(versions)
    return RetentionDecision(
        kept=(selected,),
        to_delete=tuple(entry for entry in versions if entry is not selected),
        selected=selected,
    )


def decide(
    versions: Sequence[VersionEntry],
    mode: RetentionMode,
    keep: int | str | None = None,
) -> RetentionDecision:
    """Apply a retention mode to a scanned version list."""
    if mode is RetentionMode.EXPLICIT:
        return explicit_decision(versions, keep)
    return heuristic_decision(versions)
