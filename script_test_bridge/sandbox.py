"""Temporary directory owned by a single bridged test invocation."""

import logging
import shutil
import tempfile
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path

log = logging.getLogger(__name__)

SANDBOX_PREFIX = "script-test-bridge-"


@dataclass(kw_only=True)
class Sandbox:
    """A uniquely named directory plus the files extracted into it."""

    base_path: Path
    retain: bool = False
    _tracked_files: list[Path] = field(default_factory=list, repr=False)
    _cleaned: bool = field(default=False, repr=False)

    @classmethod
    def create(
        cls,
        *,
        retain: bool = False,
        prefix: str = SANDBOX_PREFIX,
        parent: Path | None = None,
    ) -> "Sandbox":
        """Create a new, collision-free sandbox directory."""
        base_path = Path(tempfile.mkdtemp(prefix=prefix, dir=parent)).resolve()
        log.debug("Created sandbox %s (retain=%s)", base_path, retain)
        return cls(base_path=base_path, retain=retain)

    @property
    def tracked_files(self) -> Sequence[Path]:
        """Files written into the sandbox, in extraction order."""
        return tuple(self._tracked_files)

    def track(self, path: Path) -> None:
        """Record a file so cleanup removes it."""
        self._tracked_files.append(path)

    def cleanup(self) -> None:
        """Delete tracked files and the directory unless retained.

        Deletion problems are logged rather than raised so they never mask
        the fault that ended the invocation. Calling this twice is a no-op.
        """
        if self._cleaned:
            return
        self._cleaned = True

        if self.retain:
            log.info("Keeping sandbox %s for inspection", self.base_path)
            return

        for path in self._tracked_files:
            try:
                path.unlink(missing_ok=True)
            except OSError as e:
                log.warning("Unable to delete %s: %s", path, e)

        shutil.rmtree(
            self.base_path,
            onexc=lambda _func, path, exc: log.warning(
                "Unable to delete %s: %s", path, exc
            ),
        )
        log.debug("Removed sandbox %s", self.base_path)


@contextmanager
def open_sandbox(
    *, retain: bool = False, parent: Path | None = None
) -> Iterator[Sandbox]:
    """Provide a sandbox that is always cleaned up on exit."""
    sandbox = Sandbox.create(retain=retain, parent=parent)
    try:
        yield sandbox
    finally:
        sandbox.cleanup()
