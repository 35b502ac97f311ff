"""Tests for the pytest plugin using pytester."""

import shlex
import shutil
import sys
from pathlib import Path

import pytest

TEST_MODULE = '''
from script_test_bridge import external_test, support_file, suppressible_test


@external_test("scripts/emulated_test.py", "test_valid")
def test_bridged_pass(external_test):
    result = external_test()
    assert result.success


@external_test("scripts/emulated_test.py", "test_invalid")
def test_bridged_fail(external_test):
    external_test()


@external_test("scripts/emulated_test.py", "test_invalid")
def test_bridged_fail_without_assertions(external_test):
    result = external_test(make_assertions=False)
    assert result.failures == 1


@support_file("support/supportfile.txt", "supportfile.txt")
@support_file("support/supportfile1.txt", "SubFolder1/supportfile1.txt")
@support_file("support/supportfile2.txt", "SubFolder1/SubFolder2/supportfile2.txt")
@external_test("scripts/emulated_test.py", "test_support_files")
def test_bridged_support_files(external_test):
    external_test()


@suppressible_test("scripts/emulated_test.py", "test_display_suppressed")
def test_bridged_suppressed(external_test):
    external_test()


def test_native_only():
    assert True


def test_not_declared(external_test):
    external_test()
'''


@pytest.fixture
def bridged_project(
    pytester: pytest.Pytester,
    monkeypatch: pytest.MonkeyPatch,
    scripts_origin: Path,
) -> Path:
    """A project whose tests bridge to emulated external tests."""
    monkeypatch.setenv(
        "SCRIPT_TEST_BRIDGE_INTERPRETER", shlex.quote(sys.executable)
    )
    monkeypatch.setenv("SCRIPT_TEST_BRIDGE_SUCCESS_STREAM", "None")
    pytester.makeconftest('pytest_plugins = ["script_test_bridge.pytest_plugin"]\n')

    shutil.copytree(scripts_origin, pytester.path, dirs_exist_ok=True)

    pytester.makepyfile(test_bridged=TEST_MODULE)
    return pytester.path


def test_outcomes(pytester: pytest.Pytester, bridged_project: Path) -> None:
    """Bridged tests pass and fail alongside native tests."""
    result = pytester.runpytest_subprocess("-p", "no:cacheprovider", "test_bridged.py")

    result.assert_outcomes(passed=5, failed=2)
    result.stdout.fnmatch_lines(
        [
            "*Script [[]scripts/emulated_test.py[]]; Test [[]test_invalid[]]: FAILED*",
        ]
    )
    result.stdout.fnmatch_lines(["*MissingDescriptorError*"])


def test_config_file_from_ini(pytester: pytest.Pytester, bridged_project: Path) -> None:
    """The ini option points at a YAML config overriding the environment."""
    pytester.makeini(
        """
        [pytest]
        script_test_bridge_config = bridge.yaml
        """
    )
    (bridged_project / "bridge.yaml").write_text("ShowBrowserWindow: true\n")

    result = pytester.runpytest_subprocess(
        "-p", "no:cacheprovider", "-k", "suppressed", "test_bridged.py"
    )

    result.assert_outcomes(failed=1)
    result.stdout.fnmatch_lines(["*Display was not suppressed*"])
