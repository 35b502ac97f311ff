"""Configuration for the external test bridge.

Settings come from string-keyed sources (environment variables, YAML files,
plain mappings). Every key is optional and falls back to a safe default, and
a value that cannot be interpreted falls back to that key's default instead of
failing the run.
"""

import logging
import math
import os
import shlex
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path
from typing import Any, Literal, TextIO, TypeAlias

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

log = logging.getLogger(__name__)

ENV_PREFIX = "SCRIPT_TEST_BRIDGE_"

StreamName: TypeAlias = Literal["None", "Out", "Error"]

TRUE_STRINGS = frozenset({"true", "1", "yes", "on"})
FALSE_STRINGS = frozenset({"false", "0", "no", "off"})

# Key names used by existing settings files, mapped to field names.
LEGACY_KEYS: Mapping[str, str] = {
    "ShowBrowserWindow": "show_browser_window",
    "DeleteTempFilesWhenFinished": "delete_temp_files_when_finished",
    "FailureStream": "failure_stream",
    "SuccessStream": "success_stream",
    "FailMessageFromTestOutput": "fail_message_from_test_output",
    "Interpreter": "interpreter",
    "DisplaySuppressionFlag": "display_suppression_flag",
    "Timeout": "timeout",
}


def _field_default(cls: type[BaseModel], name: str) -> Any:
    return cls.model_fields[name].get_default(call_default_factory=True)


class BridgeConfig(BaseModel):
    """Read-only snapshot of the bridge settings for one invocation."""

    model_config = ConfigDict(frozen=True)

    show_browser_window: bool = Field(
        default=False,
        description="Omit the display-suppression flag for suppressible tests",
    )
    delete_temp_files_when_finished: bool = Field(
        default=True, description="Remove the sandbox once the test finished"
    )
    failure_stream: StreamName = Field(
        default="None", description="Where failure summaries are written"
    )
    success_stream: StreamName = Field(
        default="Out", description="Where success summaries are written"
    )
    fail_message_from_test_output: bool = Field(
        default=True,
        description="Embed the raw test output in assertion failure messages",
    )
    interpreter: Sequence[str] = Field(
        default=("ruby",), description="Command used to run external scripts"
    )
    display_suppression_flag: str = Field(
        default="-b", description="Argument appended to hide the test display"
    )
    timeout: float | None = Field(
        default=None,
        description="Seconds to wait for the interpreter (None waits forever)",
    )

    @field_validator(
        "show_browser_window",
        "delete_temp_files_when_finished",
        "fail_message_from_test_output",
        mode="before",
    )
    @classmethod
    def _lenient_bool(cls, value: Any, info: ValidationInfo) -> Any:
        if isinstance(value, bool) or value is None:
            return _field_default(cls, info.field_name) if value is None else value

        text = str(value).strip().lower()
        if text in TRUE_STRINGS:
            return True
        if text in FALSE_STRINGS:
            return False

        default = _field_default(cls, info.field_name)
        log.warning(
            "Ignoring unparseable boolean %r for %s, using default %s",
            value,
            info.field_name,
            default,
        )
        return default

    @field_validator("failure_stream", "success_stream", mode="before")
    @classmethod
    def _lenient_stream(cls, value: Any, info: ValidationInfo) -> Any:
        if value in ("None", "Out", "Error"):
            return value

        default = _field_default(cls, info.field_name)
        if value not in (None, ""):
            log.warning(
                "Ignoring unknown stream %r for %s, using default %s",
                value,
                info.field_name,
                default,
            )
        return default

    @field_validator("interpreter", mode="before")
    @classmethod
    def _split_interpreter(cls, value: Any) -> Any:
        if isinstance(value, str):
            value = shlex.split(value)
        if not value:
            return _field_default(cls, "interpreter")
        return tuple(value)

    @field_validator("timeout", mode="before")
    @classmethod
    def _optional_timeout(cls, value: Any) -> Any:
        if value in (None, ""):
            return None
        try:
            seconds = float(value)
        except (TypeError, ValueError):
            log.warning("Ignoring unparseable timeout %r, waiting forever", value)
            return None
        return seconds if math.isfinite(seconds) and seconds > 0 else None

    @property
    def suppress_display(self) -> bool:
        """Whether suppressible tests should hide their display."""
        return not self.show_browser_window

    def resolve_failure_stream(self) -> TextIO | None:
        """Return the text stream failure summaries go to, if any."""
        return _resolve_stream(self.failure_stream)

    def resolve_success_stream(self) -> TextIO | None:
        """Return the text stream success summaries go to, if any."""
        return _resolve_stream(self.success_stream)

    @classmethod
    def from_settings(cls, settings: Mapping[str, Any]) -> "BridgeConfig":
        """Build a config from a mapping keyed by field or legacy key names.

        Unrecognized keys are ignored with a debug message.
        """
        values: dict[str, Any] = {}
        for key, value in settings.items():
            name = LEGACY_KEYS.get(key, key)
            if name not in cls.model_fields:
                log.debug("Ignoring unrecognized setting %s", key)
                continue
            values[name] = value
        return cls(**values)

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "BridgeConfig":
        """Build a config from ``SCRIPT_TEST_BRIDGE_<FIELD>`` variables."""
        environ = os.environ if environ is None else environ
        settings = {
            name: environ[f"{ENV_PREFIX}{name.upper()}"]
            for name in cls.model_fields
            if f"{ENV_PREFIX}{name.upper()}" in environ
        }
        return cls.from_settings(settings)


def _resolve_stream(name: StreamName) -> TextIO | None:
    # Looked up at call time so captured/redirected streams are honoured.
    match name:
        case "Out":
            return sys.stdout
        case "Error":
            return sys.stderr
        case _:
            return None


def load_config(path: Path, base: BridgeConfig | None = None) -> BridgeConfig:
    """Load bridge settings from a YAML mapping file.

    Args:
        path: YAML file with setting keys at the top level
        base: Settings that keys in the file override (e.g. from the
            environment); defaults when omitted

    Returns:
        The merged configuration

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not valid YAML or not a mapping

    """
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, Mapping):
        raise ValueError(f"Config file {path} must contain a mapping")

    merged: dict[str, Any] = dict(base.model_dump()) if base else {}
    merged.update(
        (LEGACY_KEYS.get(key, key), value) for key, value in data.items()
    )
    return BridgeConfig.from_settings(merged)
