"""Descriptor records identifying an external test and its support files."""

from collections.abc import Sequence
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator

from script_test_bridge.models.base import Model

Variant = Literal["plain", "suppressible"]
Origin = str | Path


class TestDescriptor(Model):
    """Identifies one external test script and the test method to select."""

    __test__ = False

    script_locator: str = Field(
        ..., description="Resource path of the script inside its origin"
    )
    test_method_name: str = Field(
        ..., description="Test method selected with --name=<test_method_name>"
    )
    origin: Origin | None = Field(
        default=None,
        description="Package/module anchor or directory holding the script "
        "(None means the caller's own module)",
    )
    variant: Variant = Field(
        default="plain",
        description="'suppressible' tests accept the display-suppression flag",
    )

    @field_validator("script_locator", "test_method_name")
    @classmethod
    def _require_text(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value


class SupportFileDescriptor(Model):
    """A resource that must be extracted next to the script before it runs."""

    source_locator: str = Field(
        ..., description="Resource path of the file inside its origin"
    )
    target_path: str = Field(
        ..., description="Destination relative to the sandbox root"
    )
    origin: Origin | None = Field(
        default=None,
        description="Package/module anchor or directory holding the file "
        "(None means the caller's own module)",
    )

    @field_validator("source_locator", "target_path")
    @classmethod
    def _require_text(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("must not be empty")
        return value


class ExternalTestBinding(Model):
    """The single test descriptor of a caller plus its support files."""

    test: TestDescriptor
    support_files: Sequence[SupportFileDescriptor] = Field(default_factory=tuple)

    def with_default_origin(self, origin: Origin) -> "ExternalTestBinding":
        """Fill in ``origin`` on every descriptor that does not name one."""
        test = self.test
        if test.origin is None:
            test = test.model_copy(update={"origin": origin})

        support_files = tuple(
            support_file.model_copy(update={"origin": origin})
            if support_file.origin is None
            else support_file
            for support_file in self.support_files
        )
        return ExternalTestBinding(test=test, support_files=support_files)
