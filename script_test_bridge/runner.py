"""Invocation of the external interpreter for one bridged test."""

import logging
import subprocess
import sys
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from script_test_bridge.errors import ProcessInvocationError, ProcessTimeoutError
from script_test_bridge.models.descriptor import Variant

log = logging.getLogger(__name__)

DEFAULT_INTERPRETER: Sequence[str] = ("ruby",)
DEFAULT_DISPLAY_SUPPRESSION_FLAG = "-b"


@dataclass(frozen=True, kw_only=True)
class ProcessRunner:
    """Runs an external test script and captures its standard output.

    There is no timeout unless one is configured: a hung interpreter blocks
    the invocation until it exits.
    """

    interpreter: Sequence[str] = DEFAULT_INTERPRETER
    display_suppression_flag: str = DEFAULT_DISPLAY_SUPPRESSION_FLAG
    timeout: float | None = None

    def build_command(
        self,
        script_path: Path,
        test_method_name: str,
        variant: Variant,
        suppress_display: bool,
    ) -> list[str]:
        """Build the argument list for one test method of a script."""
        command = [*self.interpreter, str(script_path), f"--name={test_method_name}"]
        if variant == "suppressible" and suppress_display:
            command.append(self.display_suppression_flag)
        return command

    def run(
        self,
        script_path: Path,
        test_method_name: str,
        variant: Variant,
        working_directory: Path,
        suppress_display: bool,
    ) -> str:
        """Run the script and return everything it wrote to stdout.

        The exit code is logged but never treated as a failure; the caller
        decides the outcome from the printed summary.

        Raises:
            ProcessInvocationError: If the interpreter cannot be started
            ProcessTimeoutError: If a configured timeout is exceeded

        """
        command = self.build_command(
            script_path, test_method_name, variant, suppress_display
        )
        log.info("Running %s in %s", " ".join(command), working_directory)

        try:
            completed = subprocess.run(
                command,
                cwd=working_directory,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                text=True,
                errors="replace",
                timeout=self.timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            raise ProcessTimeoutError(
                f"{self.interpreter[0]} did not finish {test_method_name} "
                f"within {self.timeout} seconds"
            ) from e
        except OSError as e:
            print(
                f"Unable to start {self.interpreter[0]!r}: {e}",
                file=sys.stderr,
            )
            raise ProcessInvocationError(
                f"Unable to start interpreter {self.interpreter[0]!r}: {e}"
            ) from e

        log.debug(
            "Interpreter exited with code %d for %s",
            completed.returncode,
            test_method_name,
        )
        return completed.stdout
