"""Unit tests for jsonshape_cli.errors module."""

from __future__ import annotations

import pytest
from pydantic import ValidationError as PydanticValidationError

from jsonshape_cli.errors import (
    EXIT_SYSTEM_ERROR,
    EXIT_USER_ERROR,
    CLIError,
    format_pydantic_error,
    missing_file,
    reported_as,
)
from jsonshape_core import ExportConfig
from jsonshape_core.errors import CycleError, UnrepresentableTypeError


def _validation_error() -> PydanticValidationError:
    with pytest.raises(PydanticValidationError) as exc_info:
        ExportConfig(target="draft-4", cycles="explode")  # type: ignore[arg-type]
    return exc_info.value


class TestCLIError:
    """Tests for CLIError."""

    def test_default_exit_code(self) -> None:
        assert CLIError("bad").exit_code == EXIT_USER_ERROR

    def test_custom_exit_code(self) -> None:
        assert CLIError("bad", exit_code=EXIT_SYSTEM_ERROR).exit_code == 2

    def test_show_prints_message(self, capsys: pytest.CaptureFixture[str]) -> None:
        CLIError("Something broke").show()
        assert "Something broke" in capsys.readouterr().out


class TestFormatPydanticError:
    """Tests for format_pydantic_error()."""

    def test_one_line_per_field(self) -> None:
        lines = format_pydantic_error(_validation_error()).splitlines()
        assert lines[0] == "Validation failed:"
        assert [line.split(":")[0] for line in lines[1:]] == ["  - target", "  - cycles"]


class TestMissingFile:
    """Tests for missing_file()."""

    def test_names_option_and_uses_system_exit_code(self) -> None:
        with pytest.raises(CLIError, match="File not found: jsonshape.yaml") as exc_info:
            missing_file("jsonshape.yaml", "--file")
        assert exc_info.value.exit_code == EXIT_SYSTEM_ERROR
        assert "use --file to specify a path" in exc_info.value.message


class TestReportedAs:
    """Tests for the reported_as() context manager."""

    def test_passes_through_on_success(self) -> None:
        with reported_as("Schema export", "out.json"):
            value = 1
        assert value == 1

    def test_core_error_uses_user_message(self) -> None:
        with pytest.raises(CLIError, match="Schema export failed: Date cannot be represented"):
            with reported_as("Schema export", "out.json"):
                raise UnrepresentableTypeError("date")

    def test_core_error_is_a_user_error(self) -> None:
        with pytest.raises(CLIError) as exc_info:
            with reported_as("Registry export", "schemas"):
                raise CycleError(["properties", "tree"])
        assert exc_info.value.exit_code == EXIT_USER_ERROR
        assert exc_info.value.__cause__ is None

    def test_permission_error_is_a_system_error(self) -> None:
        with pytest.raises(CLIError, match="cannot write schemas") as exc_info:
            with reported_as("Registry export", "schemas"):
                raise PermissionError("schemas")
        assert exc_info.value.exit_code == EXIT_SYSTEM_ERROR

    def test_other_errors_propagate(self) -> None:
        with pytest.raises(KeyError):
            with reported_as("Schema export", "out.json"):
                raise KeyError("x")
