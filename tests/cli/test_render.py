"""Tests for tsdiag render command."""

from __future__ import annotations

import json
from collections.abc import Generator
from pathlib import Path
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from tsdiag.cli.main import cli

runner = CliRunner()

EVENT = {
    "seq": 0,
    "type": "event",
    "event": "semanticDiag",
    "body": {
        "file": "/p/a.ts",
        "diagnostics": [
            {
                "start": {"line": 5, "offset": 3},
                "end": {"line": 5, "offset": 10},
                "text": "'x' is declared but its value is never read.",
                "category": "error",
                "code": 6133,
                "reportsUnnecessary": True,
            }
        ],
    },
}


@pytest.fixture(autouse=True)
def isolated_global_config(tmp_path: Path) -> Generator[None, None, None]:
    with patch("tsdiag.config.loader.GLOBAL_CONFIG_PATH", tmp_path / "global.yaml"):
        yield


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    root = tmp_path / "workspace"
    root.mkdir()
    return root


@pytest.fixture
def event_file(tmp_path: Path) -> Path:
    path = tmp_path / "event.json"
    path.write_text(json.dumps(EVENT))
    return path


class TestRenderCommand:
    """Tests for the render command."""

    def test_text_output(self, workspace: Path, event_file: Path) -> None:
        result = runner.invoke(cli, ["render", str(event_file), "--workspace", str(workspace)])

        assert result.exit_code == 0, result.output
        assert "file:///p/a.ts:5:3 warning TS6133" in result.output
        assert "x is declared but its value is never read." in result.output
        assert "\x1b[" not in result.output

    def test_style_warnings_disabled(self, workspace: Path, event_file: Path) -> None:
        result = runner.invoke(
            cli,
            ["render", str(event_file), "--workspace", str(workspace), "--no-style-warnings"],
        )

        assert result.exit_code == 0, result.output
        assert "file:///p/a.ts:5:3 error TS6133" in result.output

    def test_color_kept_when_requested(self, workspace: Path, event_file: Path) -> None:
        result = runner.invoke(
            cli, ["render", str(event_file), "--workspace", str(workspace), "--color"]
        )

        assert result.exit_code == 0, result.output
        assert "\x1b[1;32m" in result.output

    def test_json_output(self, workspace: Path, event_file: Path) -> None:
        result = runner.invoke(
            cli, ["render", str(event_file), "--workspace", str(workspace), "--json"]
        )

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["uri"] == "file:///p/a.ts"
        (diagnostic,) = data["diagnostics"]
        assert diagnostic["range"] == {
            "start": {"line": 4, "character": 2},
            "end": {"line": 4, "character": 9},
        }
        assert diagnostic["severity"] == "warning"
        assert diagnostic["code"] == 6133
        assert diagnostic["tags"] == ["unnecessary"]
        assert diagnostic["filetype"] == "markdown"
        assert diagnostic["message"].endswith("\n\n")

    def test_reads_stdin(self, workspace: Path) -> None:
        result = runner.invoke(
            cli, ["render", "--workspace", str(workspace)], input=json.dumps(EVENT["body"])
        )

        assert result.exit_code == 0, result.output
        assert "TS6133" in result.output

    def test_workspace_config_applies(self, workspace: Path, event_file: Path) -> None:
        (workspace / ".tsdiag").mkdir()
        (workspace / ".tsdiag" / "config.yaml").write_text("diagnostics:\n  show_link: true\n")

        result = runner.invoke(
            cli, ["render", str(event_file), "--workspace", str(workspace), "--json"]
        )

        assert result.exit_code == 0, result.output
        message = json.loads(result.stdout)["diagnostics"][0]["message"]
        assert "https://typescript.tv/errors/#ts6133" in message

    def test_hide_link_overrides_config(self, workspace: Path, event_file: Path) -> None:
        (workspace / ".tsdiag").mkdir()
        (workspace / ".tsdiag" / "config.yaml").write_text("diagnostics:\n  show_link: true\n")

        result = runner.invoke(
            cli,
            ["render", str(event_file), "--workspace", str(workspace), "--json", "--hide-link"],
        )

        message = json.loads(result.stdout)["diagnostics"][0]["message"]
        assert "typescript.tv" not in message

    def test_no_diagnostics(self, workspace: Path) -> None:
        result = runner.invoke(
            cli,
            ["render", "--workspace", str(workspace)],
            input=json.dumps({"file": "/p/a.ts", "diagnostics": []}),
        )

        assert result.exit_code == 0
        assert "file:///p/a.ts: no diagnostics" in result.output

    def test_invalid_event(self, workspace: Path) -> None:
        result = runner.invoke(cli, ["render", "--workspace", str(workspace)], input="{oops")

        assert result.exit_code != 0
        assert "JSON parse error" in result.output

    def test_logging_config_applies(self, workspace: Path, tmp_path: Path) -> None:
        """Logging outputs come from the workspace config; failures point at the log file."""
        # Given
        log_file = tmp_path / "logs" / "tsdiag.log"
        (workspace / ".tsdiag").mkdir()
        (workspace / ".tsdiag" / "config.yaml").write_text(
            "logging:\n"
            "  level: DEBUG\n"
            "  outputs:\n"
            f"    - destination: {log_file}\n"
            "      format: json\n"
        )

        # When
        result = runner.invoke(cli, ["render", "--workspace", str(workspace)], input="{oops")

        # Then
        assert result.exit_code != 0
        assert f"See {log_file} for details." in result.output
        assert "event_parse_failed" in log_file.read_text()

    def test_invalid_config(self, workspace: Path, event_file: Path) -> None:
        (workspace / ".tsdiag").mkdir()
        (workspace / ".tsdiag" / "config.yaml").write_text("reload:\n  debounce_sec: -2\n")

        result = runner.invoke(cli, ["render", str(event_file), "--workspace", str(workspace)])

        assert result.exit_code != 0
        assert "CONFIG_INVALID_VALUE" in result.output


class TestCli:
    """Tests for the command group."""

    def test_version(self) -> None:
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_help_lists_render(self) -> None:
        result = runner.invoke(cli, ["--help"])

        assert "render" in result.output
