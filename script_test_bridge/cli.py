"""CLI entry point for running a bridged external test from a manifest."""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any

from script_test_bridge.bridge import ExternalTestBridge, describe
from script_test_bridge.config import BridgeConfig, load_config
from script_test_bridge.errors import BridgeError
from script_test_bridge.manifest_loader import load_binding, load_manifest
from script_test_bridge.models.result import TestResult

EXIT_SUCCESS = 0
EXIT_TEST_FAILED = 1
EXIT_BRIDGE_ERROR = 2

STATUS_SYMBOLS = {
    True: "✓",
    False: "✗",
}


def log_result_summary(log: logging.Logger, test_id: str, result: TestResult) -> None:
    """Log a formatted summary of one external test result."""
    log.info("=" * 80)
    log.info("External Test Result:")
    log.info("=" * 80)
    log.info(
        "%s %s: %d tests, %d assertions, %d failures, %d errors",
        STATUS_SYMBOLS[result.success],
        test_id,
        result.tests,
        result.assertions,
        result.failures,
        result.errors,
    )


def format_output(test_id: str, result: TestResult) -> dict[str, Any]:
    """Format a result for JSON output."""
    return {
        "test": test_id,
        "tests": result.tests,
        "assertions": result.assertions,
        "failures": result.failures,
        "errors": result.errors,
        "success": result.success,
        "message": result.message,
    }


def load_bridge_config(config_path: Path | None) -> BridgeConfig:
    """Combine environment settings with an optional YAML config file."""
    config = BridgeConfig.from_env()
    if config_path is not None:
        config = load_config(config_path, base=config)
    return config


def run(
    manifest_path: Path,
    test_id: str,
    config: BridgeConfig,
    *,
    display_output: bool = True,
) -> int:
    """Run one external test and return the exit code."""
    log = logging.getLogger("script_test_bridge")

    log.info("Loading manifest: %s", manifest_path)
    binding = load_binding(manifest_path, test_id)

    log.info("Running %s", describe(binding))
    bridge = ExternalTestBridge(config=config)
    result = bridge.execute(
        binding, make_assertions=False, display_output=display_output
    )

    log_result_summary(log, test_id, result)
    print(json.dumps(format_output(test_id, result), indent=2))

    return EXIT_SUCCESS if result.success else EXIT_TEST_FAILED


def list_tests(manifest_path: Path) -> int:
    """Print the test identifiers declared in a manifest."""
    for test_id, binding in load_manifest(manifest_path).items():
        print(f"{test_id}\t{describe(binding)}")
    return EXIT_SUCCESS


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Run an external test script through the test bridge"
    )
    parser.add_argument(
        "--manifest",
        type=Path,
        required=True,
        help="Path to the YAML manifest declaring external tests",
    )
    target = parser.add_mutually_exclusive_group(required=True)
    target.add_argument("--test", help="Identifier of the test to run")
    target.add_argument(
        "--list", action="store_true", help="List the tests in the manifest"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML file with bridge settings",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Do not write the success/failure summary to the output streams",
    )
    parser.add_argument(
        "--verbose", action="store_true", help="Enable debug logging"
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    try:
        if args.list:
            exit_code = list_tests(args.manifest)
        else:
            exit_code = run(
                manifest_path=args.manifest,
                test_id=args.test,
                config=load_bridge_config(args.config),
                display_output=not args.quiet,
            )
    except (BridgeError, FileNotFoundError, ValueError) as e:
        logging.getLogger("script_test_bridge").error("%s", e)
        exit_code = EXIT_BRIDGE_ERROR
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
