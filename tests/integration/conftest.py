"""Fixtures for integration tests.

The external runtime is emulated with the running Python interpreter: the
scripts below accept ``--name=<test>`` and an optional ``-b`` flag and print a
test/unit style summary line.
"""

import sys
from pathlib import Path

import pytest

from script_test_bridge.config import BridgeConfig

EMULATED_TEST_SCRIPT = '''\
import sys
from pathlib import Path

SUPPORT_FILES = {
    "supportfile.txt": "top level\\n",
    "SubFolder1/supportfile1.txt": "first level\\n",
    "SubFolder1/SubFolder2/supportfile2.txt": "second level\\n",
}


def test_valid():
    assert True, "This unit test should always pass."


def test_invalid():
    assert False, "This unit test should always fail."


def test_support_files():
    for relative, content in SUPPORT_FILES.items():
        path = Path(relative)
        assert path.exists(), f"{relative} does not exist."
        assert path.read_text() == content, f"{relative} has wrong content."


def test_display_suppressed():
    assert "-b" in sys.argv[1:], "Display was not suppressed."


def test_display_shown():
    assert "-b" not in sys.argv[1:], "Display was suppressed."


def test_crash():
    raise RuntimeError("unexpected crash")


selected = next(
    arg.split("=", 1)[1] for arg in sys.argv[1:] if arg.startswith("--name=")
)
print("Loaded suite", Path(sys.argv[0]).name)
print("Started")
failures = errors = 0
try:
    globals()[selected]()
except AssertionError as exc:
    failures = 1
    print("  1) Failure:")
    print(f"{selected}: {exc}")
except Exception as exc:
    errors = 1
    print("  1) Error:")
    print(f"{selected}: {exc!r}")
print()
print(f"1 tests, 1 assertions, {failures} failures, {errors} errors")
sys.exit(1 if failures or errors else 0)
'''

GARBAGE_SCRIPT = """\
print("interpreter exploded before running any test")
"""


@pytest.fixture
def scripts_origin(tmp_path: Path) -> Path:
    """Directory origin holding emulated test scripts and support files."""
    origin = tmp_path / "resources"
    (origin / "scripts").mkdir(parents=True)
    (origin / "scripts" / "emulated_test.py").write_text(EMULATED_TEST_SCRIPT)
    (origin / "scripts" / "garbage_test.py").write_text(GARBAGE_SCRIPT)

    support = origin / "support"
    support.mkdir()
    (support / "supportfile.txt").write_text("top level\n")
    (support / "supportfile1.txt").write_text("first level\n")
    (support / "supportfile2.txt").write_text("second level\n")
    return origin


@pytest.fixture
def sandbox_parent(tmp_path: Path) -> Path:
    """Directory the bridge creates sandboxes in."""
    parent = tmp_path / "sandboxes"
    parent.mkdir()
    return parent


@pytest.fixture
def python_config() -> BridgeConfig:
    """Bridge settings running scripts with the current interpreter."""
    return BridgeConfig(interpreter=(sys.executable,), timeout=60)
