"""Parsing of test/unit style summaries into test results."""

import logging
import re

from script_test_bridge.models.result import TestResult

log = logging.getLogger(__name__)

UNPARSEABLE_OUTPUT_PREFIX = "*** Unable to parse output from external test ***\n"

SUMMARY_PATTERN = re.compile(
    r"(\d+)\s*tests[^\d]*(\d+)\s*assertions[^\d]*(\d+)\s*failures[^\d]*(\d+)\s*errors",
    re.IGNORECASE | re.MULTILINE,
)


def parse_output(output: str) -> TestResult:
    """Convert interpreter output into a TestResult.

    Looks for a summary line such as ``3 tests, 5 assertions, 0 failures,
    0 errors``. Output without a usable summary yields a result with one
    error, so it can never be mistaken for a pass.

    Examples:
        >>> parse_output("3 tests, 5 assertions, 0 failures, 0 errors").success
        True

        >>> parse_output("garbage").errors
        1

    """
    if (match := SUMMARY_PATTERN.search(output)) is not None:
        tests, assertions, failures, errors = (int(group) for group in match.groups())
        try:
            return TestResult(
                tests=tests,
                assertions=assertions,
                failures=failures,
                errors=errors,
                message=output,
            )
        except ValueError as e:
            log.warning("Rejecting summary %r: %s", match.group(0), e)
    else:
        log.warning("No test summary found in output (%d chars)", len(output))

    return fail_safe_result(output)


def fail_safe_result(output: str) -> TestResult:
    """Build the losing result reported for unparseable output."""
    return TestResult(
        tests=1,
        assertions=0,
        failures=0,
        errors=1,
        message=UNPARSEABLE_OUTPUT_PREFIX + output,
    )
