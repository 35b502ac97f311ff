"""Data records exchanged between the bridge components."""

from script_test_bridge.models.descriptor import (
    ExternalTestBinding,
    Origin,
    SupportFileDescriptor,
    TestDescriptor,
    Variant,
)
from script_test_bridge.models.result import TestResult

__all__ = [
    "ExternalTestBinding",
    "Origin",
    "SupportFileDescriptor",
    "TestDescriptor",
    "TestResult",
    "Variant",
]
