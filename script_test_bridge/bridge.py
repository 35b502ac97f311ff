"""Orchestration of one bridged external test.

One invocation resolves the test, extracts the script and its support files
into a fresh sandbox, runs the interpreter, parses the summary, reports it and
removes the sandbox again, whatever happened along the way.
"""

import enum
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path, PurePosixPath
from typing import Any, TextIO, TypeAlias

from script_test_bridge.config import BridgeConfig
from script_test_bridge.errors import ExternalTestFailure
from script_test_bridge.models.descriptor import ExternalTestBinding
from script_test_bridge.models.result import TestResult
from script_test_bridge.resolver import resolve_binding
from script_test_bridge.resources import ResourceExtractor
from script_test_bridge.result_parser import parse_output
from script_test_bridge.runner import ProcessRunner
from script_test_bridge.sandbox import Sandbox

log = logging.getLogger(__name__)

RESULTS_DIVIDER = "\n----------\n"
SCRIPT_FILENAME = "__external_test_script"

Asserter: TypeAlias = Callable[[bool, str], None]


class BridgeState(enum.StrEnum):
    """Stages of a single bridged invocation."""

    IDLE = "idle"
    RESOLVING = "resolving"
    EXTRACTING = "extracting"
    RUNNING = "running"
    PARSING = "parsing"
    REPORTING = "reporting"
    CLEANING_UP = "cleaning_up"
    DONE = "done"
    FAULTED = "faulted"


def default_asserter(condition: bool, message: str) -> None:
    """Raise ExternalTestFailure when ``condition`` is false."""
    if not condition:
        raise ExternalTestFailure(message)


def describe(binding: ExternalTestBinding) -> str:
    """Human readable identification of a bridged test."""
    return (
        f"Script [{binding.test.script_locator}]; "
        f"Test [{binding.test.test_method_name}]"
    )


@dataclass(kw_only=True)
class BridgeInvocation:
    """Tracks the state of one invocation as it moves through the stages."""

    on_transition: Callable[[BridgeState, BridgeState], None] | None = None
    state: BridgeState = BridgeState.IDLE
    history: list[BridgeState] = field(default_factory=lambda: [BridgeState.IDLE])

    def advance(self, state: BridgeState) -> None:
        """Move to ``state`` and notify the observer."""
        previous, self.state = self.state, state
        self.history.append(state)
        log.debug("Bridge state %s -> %s", previous, state)
        if self.on_transition is not None:
            self.on_transition(previous, state)


@dataclass(frozen=True, kw_only=True)
class ExternalTestBridge:
    """Runs external tests on behalf of host test functions."""

    config: BridgeConfig = field(default_factory=BridgeConfig)
    runner: ProcessRunner | None = None
    asserter: Asserter = default_asserter
    sandbox_parent: Path | None = None
    on_transition: Callable[[BridgeState, BridgeState], None] | None = None

    @property
    def process_runner(self) -> ProcessRunner:
        """The configured runner, or one built from the config."""
        if self.runner is not None:
            return self.runner
        return ProcessRunner(
            interpreter=self.config.interpreter,
            display_suppression_flag=self.config.display_suppression_flag,
            timeout=self.config.timeout,
        )

    def execute_for(
        self,
        target: Callable[..., Any],
        *,
        make_assertions: bool = True,
        display_output: bool = True,
    ) -> TestResult:
        """Resolve the external test declared on ``target`` and run it."""
        invocation = BridgeInvocation(on_transition=self.on_transition)
        invocation.advance(BridgeState.RESOLVING)
        try:
            binding = resolve_binding(target)
        except Exception:
            invocation.advance(BridgeState.FAULTED)
            invocation.advance(BridgeState.CLEANING_UP)
            raise
        return self._execute(
            binding,
            invocation,
            make_assertions=make_assertions,
            display_output=display_output,
        )

    def execute(
        self,
        binding: ExternalTestBinding,
        *,
        make_assertions: bool = True,
        display_output: bool = True,
    ) -> TestResult:
        """Run an already resolved external test.

        Args:
            binding: Test descriptor and support files to run
            make_assertions: Pass the outcome to the asserter
            display_output: Write a summary to the configured streams

        Returns:
            The parsed result; a failing result is returned (or asserted),
            never raised as a bridge fault

        Raises:
            ResourceExtractionError: If a file cannot be extracted
            ProcessInvocationError: If the interpreter cannot be started

        """
        invocation = BridgeInvocation(on_transition=self.on_transition)
        invocation.advance(BridgeState.RESOLVING)
        return self._execute(
            binding,
            invocation,
            make_assertions=make_assertions,
            display_output=display_output,
        )

    def _execute(
        self,
        binding: ExternalTestBinding,
        invocation: BridgeInvocation,
        *,
        make_assertions: bool,
        display_output: bool,
    ) -> TestResult:
        log.info("Bridging %s", describe(binding))
        sandbox: Sandbox | None = None
        try:
            sandbox = Sandbox.create(
                retain=not self.config.delete_temp_files_when_finished,
                parent=self.sandbox_parent,
            )

            invocation.advance(BridgeState.EXTRACTING)
            script_path = self._extract_files(binding, sandbox)

            invocation.advance(BridgeState.RUNNING)
            output = self.process_runner.run(
                script_path,
                binding.test.test_method_name,
                binding.test.variant,
                sandbox.base_path,
                self.config.suppress_display,
            )

            invocation.advance(BridgeState.PARSING)
            result = parse_output(output)

            invocation.advance(BridgeState.REPORTING)
            log.info(
                "%s: tests=%d assertions=%d failures=%d errors=%d",
                describe(binding),
                result.tests,
                result.assertions,
                result.failures,
                result.errors,
            )
            if display_output:
                self._write_summary(binding, result)
            if make_assertions:
                self.asserter(result.success, self._failure_message(binding, result))
        except Exception as e:
            if invocation.state in (
                BridgeState.RESOLVING,
                BridgeState.EXTRACTING,
                BridgeState.RUNNING,
            ):
                log.error(
                    "Bridging %s failed: %s", describe(binding), e, exc_info=True
                )
                invocation.advance(BridgeState.FAULTED)
            raise
        finally:
            invocation.advance(BridgeState.CLEANING_UP)
            if sandbox is not None:
                sandbox.cleanup()

        invocation.advance(BridgeState.DONE)
        return result

    def _extract_files(self, binding: ExternalTestBinding, sandbox: Sandbox) -> Path:
        """Extract the script and support files, returning the script path."""
        extractor = ResourceExtractor(sandbox_root=sandbox.base_path)

        suffix = PurePosixPath(binding.test.script_locator).suffix
        script_path = extractor.resolve_target(f"{SCRIPT_FILENAME}{suffix}")
        extractor.extract(binding.test.origin, binding.test.script_locator, script_path)
        sandbox.track(script_path)

        for support_file in binding.support_files:
            target = extractor.resolve_target(support_file.target_path)
            extractor.extract(support_file.origin, support_file.source_locator, target)
            sandbox.track(target)

        log.debug(
            "Extracted %d file(s) into %s",
            len(sandbox.tracked_files),
            sandbox.base_path,
        )
        return script_path

    def _write_summary(self, binding: ExternalTestBinding, result: TestResult) -> None:
        if not result.message:
            return

        if result.success:
            stream: TextIO | None = self.config.resolve_success_stream()
            outcome = "SUCCESS"
        else:
            stream = self.config.resolve_failure_stream()
            outcome = "FAILED"

        if stream is None:
            return
        print(f"{describe(binding)}: {outcome}", file=stream)
        print(result.message, file=stream)
        print(RESULTS_DIVIDER, file=stream)

    def _failure_message(self, binding: ExternalTestBinding, result: TestResult) -> str:
        message = f"{describe(binding)}: FAILED"
        if self.config.fail_message_from_test_output:
            message += result.message + RESULTS_DIVIDER
        return message
