"""Models for external test results."""

from dataclasses import dataclass


@dataclass(frozen=True, kw_only=True)
class TestResult:
    """Counts reported by one external test run.

    ``message`` carries the raw interpreter output (or a diagnostic wrapping
    it when the output could not be parsed).
    """

    __test__ = False

    tests: int
    assertions: int
    failures: int
    errors: int
    message: str = ""

    def __post_init__(self) -> None:
        if self.tests < 1:
            raise ValueError(
                f"Number of tests in a TestResult must be at least 1, got {self.tests}"
            )
        for name in ("assertions", "failures", "errors"):
            if (value := getattr(self, name)) < 0:
                raise ValueError(
                    f"Number of {name} in a TestResult must be at least 0, got {value}"
                )

    @property
    def success(self) -> bool:
        """True when the run reported no failures and no errors."""
        return self.failures == 0 and self.errors == 0
