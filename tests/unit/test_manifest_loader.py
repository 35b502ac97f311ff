"""Tests for manifest loader."""

from pathlib import Path

import pytest

from script_test_bridge.errors import MissingDescriptorError
from script_test_bridge.manifest_loader import load_binding, load_manifest


class TestLoadManifest:
    """Tests for load_manifest function."""

    def test_loads_valid_yaml(self, tmp_path: Path) -> None:
        """Loads and parses a valid manifest."""
        manifest = tmp_path / "external_tests.yaml"
        manifest.write_text(
            """
version: "1.0"
tests:
  login:
    script: scripts/login_test.rb
    name: test_login
    variant: suppressible
    support_files:
      - source: data/users.csv
        target: fixtures/users.csv
"""
        )

        bindings = load_manifest(manifest)

        binding = bindings["login"]
        assert binding.test.script_locator == "scripts/login_test.rb"
        assert binding.test.test_method_name == "test_login"
        assert binding.test.variant == "suppressible"
        assert binding.test.origin == tmp_path.resolve()
        assert len(binding.support_files) == 1
        assert binding.support_files[0].source_locator == "data/users.csv"
        assert binding.support_files[0].target_path == "fixtures/users.csv"
        assert binding.support_files[0].origin == tmp_path.resolve()

    def test_keeps_file_order(self, tmp_path: Path) -> None:
        """Bindings are returned in the order of the file."""
        manifest = tmp_path / "external_tests.yaml"
        manifest.write_text(
            """
version: "1.0"
tests:
  zebra:
    script: z.rb
    name: test_z
  apple:
    script: a.rb
    name: test_a
"""
        )

        assert list(load_manifest(manifest)) == ["zebra", "apple"]

    def test_manifest_origin_applies_to_entries(self, tmp_path: Path) -> None:
        """A top-level origin is the default for every entry."""
        manifest = tmp_path / "external_tests.yaml"
        manifest.write_text(
            """
version: "1.0"
origin: my_package.fixtures
tests:
  calc:
    script: calc_test.rb
    name: test_add
    support_files:
      - source: a.txt
        target: a.txt
        origin: other_package
"""
        )

        binding = load_manifest(manifest)["calc"]

        assert binding.test.origin == "my_package.fixtures"
        assert binding.support_files[0].origin == "other_package"

    def test_path_like_origins_resolve_against_manifest(self, tmp_path: Path) -> None:
        """Origins starting with '.' or holding a slash are directories."""
        manifest = tmp_path / "suite" / "external_tests.yaml"
        manifest.parent.mkdir()
        shared = tmp_path / "shared"
        manifest.write_text(
            f"""
version: "1.0"
origin: ./fixtures
tests:
  calc:
    script: calc_test.rb
    name: test_add
    support_files:
      - source: a.txt
        target: a.txt
        origin: ../shared
      - source: b.txt
        target: b.txt
        origin: {shared}
      - source: c.txt
        target: c.txt
        origin: my_package.data
"""
        )

        binding = load_manifest(manifest)["calc"]

        assert binding.test.origin == (tmp_path / "suite" / "fixtures").resolve()
        assert [support.origin for support in binding.support_files] == [
            shared.resolve(),
            shared.resolve(),
            "my_package.data",
        ]

    def test_raises_for_missing_file(self, tmp_path: Path) -> None:
        """Raises FileNotFoundError for a missing manifest."""
        with pytest.raises(FileNotFoundError, match="Manifest file not found"):
            load_manifest(tmp_path / "missing.yaml")

    def test_raises_for_invalid_yaml(self, tmp_path: Path) -> None:
        """Raises ValueError for malformed YAML."""
        manifest = tmp_path / "external_tests.yaml"
        manifest.write_text("invalid: yaml: content: [")

        with pytest.raises(ValueError, match="Invalid YAML"):
            load_manifest(manifest)

    def test_raises_for_empty_file(self, tmp_path: Path) -> None:
        """Raises ValueError for an empty manifest."""
        manifest = tmp_path / "external_tests.yaml"
        manifest.write_text("")

        with pytest.raises(ValueError, match="Empty manifest file"):
            load_manifest(manifest)

    def test_raises_for_invalid_variant(self, tmp_path: Path) -> None:
        """Raises ValueError for schema validation errors."""
        manifest = tmp_path / "external_tests.yaml"
        manifest.write_text(
            """
version: "1.0"
tests:
  calc:
    script: calc_test.rb
    name: test_add
    variant: browser
"""
        )

        with pytest.raises(ValueError, match="Invalid manifest schema"):
            load_manifest(manifest)

    def test_raises_for_missing_required_fields(self, tmp_path: Path) -> None:
        """Raises ValueError when required fields are missing."""
        manifest = tmp_path / "external_tests.yaml"
        manifest.write_text(
            """
tests:
  calc:
    script: calc_test.rb
"""
        )

        with pytest.raises(ValueError, match="Invalid manifest schema"):
            load_manifest(manifest)

    def test_raises_for_unknown_keys(self, tmp_path: Path) -> None:
        """Misspelled keys are rejected."""
        manifest = tmp_path / "external_tests.yaml"
        manifest.write_text(
            """
version: "1.0"
tests:
  calc:
    script: calc_test.rb
    name: test_add
    suport_files: []
"""
        )

        with pytest.raises(ValueError, match="Invalid manifest schema"):
            load_manifest(manifest)


class TestLoadBinding:
    """Tests for load_binding function."""

    def test_returns_named_binding(self, tmp_path: Path) -> None:
        """Returns the binding for the requested test id."""
        manifest = tmp_path / "external_tests.yaml"
        manifest.write_text(
            """
version: "1.0"
tests:
  calc:
    script: calc_test.rb
    name: test_add
"""
        )

        binding = load_binding(manifest, "calc")

        assert binding.test.test_method_name == "test_add"

    def test_raises_for_unknown_test(self, tmp_path: Path) -> None:
        """Unknown ids raise MissingDescriptorError listing available ids."""
        manifest = tmp_path / "external_tests.yaml"
        manifest.write_text(
            """
version: "1.0"
tests:
  calc:
    script: calc_test.rb
    name: test_add
"""
        )

        with pytest.raises(
            MissingDescriptorError, match=r"Available tests: \['calc'\]"
        ):
            load_binding(manifest, "login")
