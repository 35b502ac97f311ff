"""Bridge pytest to test cases implemented in an external scripting runtime."""

from script_test_bridge.bridge import BridgeState, ExternalTestBridge
from script_test_bridge.config import BridgeConfig, load_config
from script_test_bridge.errors import (
    BridgeError,
    ConfigurationError,
    ExternalTestFailure,
    MissingDescriptorError,
    ProcessInvocationError,
    ProcessTimeoutError,
    ResourceExtractionError,
)
from script_test_bridge.manifest_loader import load_binding, load_manifest
from script_test_bridge.models import (
    ExternalTestBinding,
    SupportFileDescriptor,
    TestDescriptor,
    TestResult,
)
from script_test_bridge.resolver import (
    external_test,
    resolve_binding,
    support_file,
    suppressible_test,
)

__all__ = [
    "BridgeConfig",
    "BridgeError",
    "BridgeState",
    "ConfigurationError",
    "ExternalTestBinding",
    "ExternalTestBridge",
    "ExternalTestFailure",
    "MissingDescriptorError",
    "ProcessInvocationError",
    "ProcessTimeoutError",
    "ResourceExtractionError",
    "SupportFileDescriptor",
    "TestDescriptor",
    "TestResult",
    "external_test",
    "load_binding",
    "load_config",
    "load_manifest",
    "resolve_binding",
    "support_file",
    "suppressible_test",
]
