"""pytest integration: run the external test declared on the current test.

Enabled automatically through the ``pytest11`` entry point::

    @external_test("scripts/calculator_test.rb", "test_addition")
    def test_addition(external_test):
        external_test()
"""

from collections.abc import Callable
from pathlib import Path
from typing import TypeAlias

import pytest

from script_test_bridge.bridge import ExternalTestBridge
from script_test_bridge.config import BridgeConfig, load_config
from script_test_bridge.models.result import TestResult

CONFIG_INI_KEY = "script_test_bridge_config"

RunExternalTest: TypeAlias = Callable[..., TestResult]


def pytest_addoption(parser: pytest.Parser) -> None:
    """Register the ini setting pointing at a YAML bridge config."""
    parser.addini(
        CONFIG_INI_KEY,
        help="YAML file with external test bridge settings "
        "(overrides SCRIPT_TEST_BRIDGE_* environment variables)",
        default="",
    )


def _fail(condition: bool, message: str) -> None:
    if not condition:
        pytest.fail(message, pytrace=False)


@pytest.fixture
def bridge_config(pytestconfig: pytest.Config) -> BridgeConfig:
    """Bridge settings from the environment and the optional ini file."""
    config = BridgeConfig.from_env()
    if config_path := pytestconfig.getini(CONFIG_INI_KEY):
        config = load_config(pytestconfig.rootpath / Path(config_path), base=config)
    return config


@pytest.fixture
def external_test(
    request: pytest.FixtureRequest, bridge_config: BridgeConfig
) -> RunExternalTest:
    """Callable that runs the external test declared on the requesting test."""
    bridge = ExternalTestBridge(config=bridge_config, asserter=_fail)

    def run(*, make_assertions: bool = True, display_output: bool = True) -> TestResult:
        return bridge.execute_for(
            request.function,
            make_assertions=make_assertions,
            display_output=display_output,
        )

    return run
