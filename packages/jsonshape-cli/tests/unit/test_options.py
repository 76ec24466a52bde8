"""Unit tests for jsonshape_cli.options module."""

from __future__ import annotations

from pathlib import Path

import pytest

from jsonshape_cli.errors import EXIT_SYSTEM_ERROR, CLIError
from jsonshape_cli.options import resolve_export_config
from jsonshape_core import ExportConfig, ReusePolicy, Target


class TestResolveExportConfig:
    """Tests for resolve_export_config()."""

    def test_defaults(self) -> None:
        assert resolve_export_config(None, {"target": None, "reused": None}) == ExportConfig()

    def test_overrides_without_file(self) -> None:
        config = resolve_export_config(None, {"target": "draft-7", "cycles": None})
        assert config.target is Target.draft_7

    def test_file_with_overrides(self, tmp_path: Path) -> None:
        path = tmp_path / "jsonshape.yaml"
        path.write_text("target: draft-7\nreused: ref\n")
        config = resolve_export_config(str(path), {"target": "draft-2020-12", "reused": None})
        assert config.target is Target.draft_2020_12
        assert config.reused is ReusePolicy.ref

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(CLIError, match="File not found") as exc_info:
            resolve_export_config(str(tmp_path / "missing.yaml"), {})
        assert exc_info.value.exit_code == EXIT_SYSTEM_ERROR

    def test_invalid_file(self, tmp_path: Path) -> None:
        path = tmp_path / "jsonshape.yaml"
        path.write_text("reused: sometimes\n")
        with pytest.raises(CLIError, match="Invalid configuration"):
            resolve_export_config(str(path), {})

    def test_invalid_override(self) -> None:
        with pytest.raises(CLIError, match="Invalid options") as exc_info:
            resolve_export_config(None, {"uri_template": "schema.json"})
        assert "uri_template" in exc_info.value.message
