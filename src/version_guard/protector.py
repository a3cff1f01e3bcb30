"""Protection sequence: pin the installed version and block the updater."""

from __future__ import annotations

import shutil
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Protocol

from .blockers import UpdateBlockerInstaller, blocker_paths
from .config_lock import lock_configuration
from .paths import VersionGuardError
from .readonly import clear_readonly_recursive
from .retention import RetentionMode, decide
from .scanner import VersionScanner

if TYPE_CHECKING:
    import logging

    from .cache import CacheCleaner
    from .config import GuardConfig
    from .paths import InstallPaths
    from .process import ProcessInspector


class ProtectionState(Enum):
    """Stages of a protection run, in execution order."""

    IDLE = "idle"
    CHECKING_PROCESS = "checking_process"
    CLEANING_VERSIONS = "cleaning_versions"
    CLEANING_CACHE = "cleaning_cache"
    LOCKING_CONFIG = "locking_config"
    CREATING_BLOCKERS = "creating_blockers"
    COMPLETE = "complete"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (ProtectionState.COMPLETE, ProtectionState.FAILED)


@dataclass
class ProtectionOptions:
    """Caller choices for one protection run."""

    mode: RetentionMode = RetentionMode.HEURISTIC
    keep: int | str | None = None
    clean_cache: bool = True
    lock_config: bool = True
    create_blockers: bool = True

    @classmethod
    def from_config(cls, config: GuardConfig) -> ProtectionOptions:
        return cls(
            mode=config.retention_mode,
            keep=config.keep_version,
            clean_cache=config.clean_cache,
            lock_config=config.lock_config,
            create_blockers=config.create_blockers,
        )


@dataclass(frozen=True)
class ProtectionResult:
    """Result of a protection run.

    ``logs`` holds every progress line in order, including the failure line
    when the run did not complete.
    """

    success: bool
    state: ProtectionState
    logs: tuple[str, ...]
    error: str | None = None
    deleted: tuple[str, ...] = ()


class ProtectionObserver(Protocol):
    """Receives progress synchronously from the orchestrator."""

    def on_transition(self, state: ProtectionState) -> None:
        ...

    def on_log(self, line: str) -> None:
        ...


class NullObserver:
    """Observer that ignores everything."""

    def on_transition(self, state: ProtectionState) -> None:
        pass

    def on_log(self, line: str) -> None:
        pass


class StageFailedError(VersionGuardError):
    """A protection stage could not complete."""


class ProtectionOrchestrator:
    """Runs the protection stages strictly in sequence.

    Stages: process check, version cleanup, cache cleanup, config lock and
    blocker creation. The first failing stage ends the run; side effects of
    earlier stages are kept.
    """

    def __init__(
        self,
        paths: InstallPaths,
        inspector: ProcessInspector,
        logger: logging.Logger,
        *,
        app_name: str = "CapCut",
        scanner: VersionScanner | None = None,
        blocker_installer: UpdateBlockerInstaller | None = None,
        cache_cleaner: CacheCleaner | None = None,
        observer: ProtectionObserver | None = None,
    ) -> None:
        self.paths = paths
        self.inspector = inspector
        self.logger = logger
        self.app_name = app_name
        self.scanner = scanner or VersionScanner()
        self.blocker_installer = blocker_installer or UpdateBlockerInstaller(logger)
        self.cache_cleaner = cache_cleaner
        self.observer: ProtectionObserver = observer or NullObserver()

        self.state = ProtectionState.IDLE
        self._logs: list[str] = []
        self._deleted: list[str] = []
        self._running = False

    def _transition(self, state: ProtectionState) -> None:
        self.logger.debug("State %s -> %s", self.state.value, state.value)
        self.state = state
        self.observer.on_transition(state)

    def _log(self, line: str) -> None:
        self._logs.append(line)
        self.logger.debug("%s", line)
        self.observer.on_log(line)

    def _result(self, error: str | None = None) -> ProtectionResult:
        return ProtectionResult(
            success=error is None,
            state=self.state,
            logs=tuple(self._logs),
            error=error,
            deleted=tuple(self._deleted),
        )

    def run(self, options: ProtectionOptions | None = None) -> ProtectionResult:
        """Run the full protection sequence.

        Args:
            options: Stage toggles and retention choice. Defaults if None.

        Returns:
            Result with the complete progress log.

        Raises:
            RuntimeError: If a run is already in progress on this orchestrator.

        """
        if self._running:
            raise RuntimeError("A protection run is already in progress")
        if options is None:
            options = ProtectionOptions()

        self._running = True
        self.state = ProtectionState.IDLE
        self._logs = []
        self._deleted = []

        try:
            self._check_process()
            self._clean_versions(options)
            self._clean_cache(options)
            self._lock_config(options)
            self._create_blockers(options)
        except StageFailedError as e:
            reason = str(e)
            self.logger.error("Protection failed during %s: %s", self.state.value, reason)
            self._transition(ProtectionState.FAILED)
            self._log(f"[FAILED] {reason}")
            return self._result(error=reason)
        finally:
            self._running = False

        self._transition(ProtectionState.COMPLETE)
        self._log("[OK] Protection complete")
        self.logger.info("Protection complete for %s", self.paths.install_root)
        return self._result()

    def _check_process(self) -> None:
        self._transition(ProtectionState.CHECKING_PROCESS)
        self._log("Checking system state...")

        if self.inspector.is_target_running():
            raise StageFailedError(f"{self.app_name} is currently running - close it first.")

        if not self.paths.apps_root.is_dir():
            raise StageFailedError(f"Apps folder not found at {self.paths.apps_root}")

        self._log("[OK] No running instances")

    def _clean_versions(self, options: ProtectionOptions) -> None:
        self._transition(ProtectionState.CLEANING_VERSIONS)
        self._log("Cleaning old versions...")

        versions = self.scanner.scan(self.paths.apps_root)
        decision = decide(versions, options.mode, options.keep)

        if options.mode is RetentionMode.EXPLICIT and decision.selected is None and versions:
            self._log(f"[!] No valid version selected ({options.keep!r}), nothing deleted")
        elif decision.selected is not None:
            self._log(f"Keeping: {decision.selected.name}")

        for entry in decision.to_delete:
            self._log(f"Deleting: {entry.name}")
            try:
                if entry.path.is_symlink():
                    # Only the link goes, never its target
                    entry.path.unlink()
                else:
                    clear_readonly_recursive(entry.path)
                    shutil.rmtree(entry.path)
            except OSError as e:
                raise StageFailedError(f"Failed to delete {entry.name}: {e}") from e
            self._deleted.append(entry.name)
            self.logger.info("Deleted version %s (%.1f MB)", entry.name, entry.size_mb)

        if decision.to_delete:
            self._log(f"[OK] Deleted {len(decision.to_delete)} version(s)")
        else:
            self._log("[OK] No versions to delete")

    def _clean_cache(self, options: ProtectionOptions) -> None:
        self._transition(ProtectionState.CLEANING_CACHE)
        if not options.clean_cache or self.cache_cleaner is None:
            self._log("Skipping cache cleaning (disabled)")
            return

        self._log("Cleaning cache directories...")
        result = self.cache_cleaner.clean(self.paths.install_root)
        for path, error in result.errors.items():
            self._log(f"[!] Warning: could not remove {path.name}: {error}")
        self._log(f"[OK] Cache cleaned ({len(result.removed)} removed)")

    def _lock_config(self, options: ProtectionOptions) -> None:
        self._transition(ProtectionState.LOCKING_CONFIG)
        if not options.lock_config:
            self._log("Skipping config lock (disabled)")
            return

        self._log("Modifying config...")
        try:
            lock_configuration(self.paths.config_file)
        except OSError as e:
            raise StageFailedError(f"Failed to lock configuration: {e}") from e
        self._log("[OK] Configuration locked")

    def _create_blockers(self, options: ProtectionOptions) -> None:
        self._transition(ProtectionState.CREATING_BLOCKERS)
        if not options.create_blockers:
            self._log("Skipping blocker creation (disabled)")
            return

        self._log("Creating blockers...")
        try:
            self.blocker_installer.install_all(self.paths.install_root, self.paths.apps_root)
        except OSError as e:
            raise StageFailedError(f"Failed to create blockers: {e}") from e
        self._log("[OK] Update blockers created")


def protected_paths(paths: InstallPaths) -> list[Path]:
    """Files the protection sequence writes, for display."""
    return [paths.config_file, *blocker_paths(paths.install_root, paths.apps_root)]
