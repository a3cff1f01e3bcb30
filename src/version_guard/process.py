"""Detect whether the protected application is running."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol, runtime_checkable

import psutil


@runtime_checkable
class ProcessInspector(Protocol):
    """Answers whether the target application is running."""

    def is_target_running(self) -> bool:
        ...


class PsutilProcessInspector:
    """Matches live process names exactly (case-sensitive) against known names."""

    def __init__(self, process_names: Iterable[str]) -> None:
        self.process_names = frozenset(process_names)

    def running_processes(self) -> list[tuple[int, str]]:
        """List (pid, name) of every live process with a matching name.

        Processes whose name cannot be read report None and never match.
        """
        matches: list[tuple[int, str]] = []
        for proc in psutil.process_iter(["name"]):
            name = proc.info.get("name")
            if name in self.process_names:
                matches.append((proc.pid, name))
        return matches

    def is_target_running(self) -> bool:
        return bool(self.running_processes())
