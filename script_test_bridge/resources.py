"""Extraction of packaged scripts and support files into a sandbox."""

import logging
import shutil
from contextlib import AbstractContextManager
from dataclasses import dataclass
from importlib import resources
from pathlib import Path
from typing import BinaryIO

from script_test_bridge.errors import ResourceExtractionError
from script_test_bridge.models.descriptor import Origin

log = logging.getLogger(__name__)

COPY_BUFFER_SIZE = 64 * 1024


def open_resource(origin: Origin, locator: str) -> AbstractContextManager[BinaryIO]:
    """Open a named resource from its origin as a binary stream.

    A ``str`` origin is an importable package or module anchor resolved with
    :mod:`importlib.resources`; a ``Path`` origin is a plain directory.

    Raises:
        FileNotFoundError: If the resource does not exist in the origin
        ModuleNotFoundError: If a package origin cannot be imported
        TypeError: If a package origin is a relative module name

    """
    if isinstance(origin, Path):
        resource = origin / locator
        if not resource.is_file():
            raise FileNotFoundError(f"Resource {locator!r} not found in {origin}")
        return resource.open("rb")

    traversable = resources.files(origin).joinpath(*locator.split("/"))
    if not traversable.is_file():
        raise FileNotFoundError(f"Resource {locator!r} not found in {origin!r}")
    return traversable.open("rb")


@dataclass(frozen=True, kw_only=True)
class ResourceExtractor:
    """Copies resources to files under a sandbox root."""

    sandbox_root: Path

    def resolve_target(self, relative_path: str) -> Path:
        """Resolve a sandbox-relative path to an absolute destination."""
        return (self.sandbox_root / relative_path).resolve()

    def extract(
        self,
        origin: Origin | None,
        locator: str,
        destination: Path | str,
    ) -> Path:
        """Copy the resource ``locator`` from ``origin`` to ``destination``.

        Args:
            origin: Package/module anchor or directory holding the resource
            locator: Resource path inside the origin
            destination: Absolute file path; must lie inside the sandbox root

        Returns:
            The resolved destination path

        Raises:
            ResourceExtractionError: If the arguments are empty, the
                destination escapes the sandbox or already exists, the
                resource cannot be found, or the copy fails

        """
        if origin is None or (isinstance(origin, str) and not origin.strip()):
            raise ResourceExtractionError("Resource origin may not be empty")
        if not locator:
            raise ResourceExtractionError("Resource locator may not be empty")
        if not str(destination):
            raise ResourceExtractionError("Destination path may not be empty")

        target = Path(destination).resolve()
        root = self.sandbox_root.resolve()
        if not target.is_relative_to(root):
            raise ResourceExtractionError(
                f"Destination {target} must be at or below the sandbox root {root}"
            )

        log.debug("Extracting %s from %s to %s", locator, origin, target)
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            with (
                open_resource(origin, locator) as source,
                target.open("xb") as sink,
            ):
                shutil.copyfileobj(source, sink, COPY_BUFFER_SIZE)
        except FileExistsError as e:
            raise ResourceExtractionError(
                f"Destination {target} already exists"
            ) from e
        except (OSError, ImportError, ValueError, TypeError) as e:
            raise ResourceExtractionError(
                f"Unable to write resource {locator!r} from {origin!r} to {target}: {e}"
            ) from e

        return target
