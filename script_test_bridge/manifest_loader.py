"""Loading external test bindings from a YAML manifest."""

from collections.abc import Mapping, Sequence
from pathlib import Path

import yaml
from pydantic import Field, ValidationError

from script_test_bridge.errors import MissingDescriptorError
from script_test_bridge.models.base import Model
from script_test_bridge.models.descriptor import (
    ExternalTestBinding,
    Origin,
    SupportFileDescriptor,
    TestDescriptor,
    Variant,
)


def resolve_origin(origin: Origin | None, base_dir: Path) -> Origin | None:
    """Turn a path-like origin into a directory relative to ``base_dir``.

    Origins starting with ``.`` or containing a slash name directories;
    anything else stays a package or module name.
    """
    if isinstance(origin, str) and (origin.startswith(".") or "/" in origin):
        return (base_dir / origin).resolve()
    return origin


class SupportFileEntry(Model):
    """A support file as written in the manifest."""

    source: str = Field(..., description="Resource path inside the origin")
    target: str = Field(..., description="Destination relative to the sandbox")
    origin: Origin | None = Field(default=None, description="Resource origin")


class TestEntry(Model):
    """One external test as written in the manifest."""

    __test__ = False

    script: str = Field(..., description="Resource path of the script")
    name: str = Field(..., description="Test method to select")
    variant: Variant = Field(default="plain", description="Test variant")
    origin: Origin | None = Field(default=None, description="Resource origin")
    support_files: Sequence[SupportFileEntry] = Field(
        default_factory=list, description="Files extracted next to the script"
    )

    def to_binding(self, base_dir: Path) -> ExternalTestBinding:
        """Convert the manifest entry into descriptor records.

        Path-like origins are resolved against ``base_dir``.
        """
        return ExternalTestBinding(
            test=TestDescriptor(
                script_locator=self.script,
                test_method_name=self.name,
                origin=resolve_origin(self.origin, base_dir),
                variant=self.variant,
            ),
            support_files=tuple(
                SupportFileDescriptor(
                    source_locator=entry.source,
                    target_path=entry.target,
                    origin=resolve_origin(entry.origin, base_dir),
                )
                for entry in self.support_files
            ),
        )


class Manifest(Model):
    """Complete manifest loaded from a YAML file."""

    version: str = Field(..., description="Manifest schema version")
    origin: Origin | None = Field(
        default=None, description="Default origin for every entry"
    )
    tests: Mapping[str, TestEntry] = Field(
        default_factory=dict, description="Tests keyed by identifier"
    )


def load_manifest(path: Path) -> Mapping[str, ExternalTestBinding]:
    """Load all external test bindings declared in a manifest file.

    Entries without an origin use the manifest's ``origin``, or the directory
    holding the manifest when that is absent too.

    Args:
        path: Path to the YAML manifest

    Returns:
        Bindings keyed by test identifier, in file order

    Raises:
        FileNotFoundError: If the manifest does not exist
        ValueError: If the file is empty, not YAML, or fails validation

    """
    if not path.exists():
        raise FileNotFoundError(f"Manifest file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        raise ValueError(f"Empty manifest file: {path}")

    try:
        manifest = Manifest.model_validate(data)
    except ValidationError as e:
        raise ValueError(f"Invalid manifest schema in {path}: {e}") from e

    base_dir = path.parent.resolve()
    default_origin = resolve_origin(manifest.origin, base_dir) or base_dir
    return {
        test_id: entry.to_binding(base_dir).with_default_origin(default_origin)
        for test_id, entry in manifest.tests.items()
    }


def load_binding(path: Path, test_id: str) -> ExternalTestBinding:
    """Load the binding for one test identifier from a manifest.

    Raises:
        MissingDescriptorError: If the manifest has no such test

    """
    bindings = load_manifest(path)
    try:
        return bindings[test_id]
    except KeyError:
        raise MissingDescriptorError(
            f"Test {test_id!r} not found in {path}. Available tests: {list(bindings)}"
        ) from None
