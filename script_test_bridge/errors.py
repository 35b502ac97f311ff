"""Exceptions raised by the external test bridge."""


class BridgeError(Exception):
    """Base class for faults raised before a test result exists."""


class ConfigurationError(BridgeError):
    """Raised when a caller declares more than one external test."""


class MissingDescriptorError(BridgeError):
    """Raised when a caller declares no external test at all."""


class ResourceExtractionError(BridgeError):
    """Raised when a script or support file cannot be written to the sandbox."""


class ProcessInvocationError(BridgeError):
    """Raised when the external interpreter cannot be started."""


class ProcessTimeoutError(ProcessInvocationError):
    """Raised when the external interpreter exceeds the configured timeout."""


class ExternalTestFailure(AssertionError):
    """Raised by the default asserter when an external test fails."""
