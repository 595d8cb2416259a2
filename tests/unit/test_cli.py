import importlib.metadata
import json
import logging
import os
import stat
from pathlib import Path
from textwrap import dedent
from typing import Iterator
from unittest import mock

import pytest
import typer.testing

from treeforge.core.config import get_config
from treeforge.interface.cli import app

runner = typer.testing.CliRunner()

LAYOUT = dedent(
    """
    name: build
    permission: "0755"
    children:
      - type: directory
        name: content
        children:
          - type: file
            name: content2.txt
            permission: "0444"
            content: Hello twice.
      - type: file
        name: content1.txt
        permission: "0444"
        content: Hello once.
    """
)


def invoke_expecting_sucess(app: typer.Typer, args: list[str]) -> typer.testing.Result:
    result = runner.invoke(app, args, catch_exceptions=False)
    assert result.exit_code == 0, result.output
    return result


def invoke_expecting_invalid_usage(app: typer.Typer, args: list[str]) -> typer.testing.Result:
    result = runner.invoke(app, args)
    assert result.exit_code == 2, (
        f"expected exit_code=2, got exit_code={result.exit_code}\n"
        "command output:\n"
        f"{result.output}"
    )
    return result


@pytest.fixture(autouse=True)
def detach_log_handlers() -> Iterator[None]:
    """Drop the handlers setup_logging() attached, they point to the runner's closed stderr."""
    yield
    logger = logging.getLogger("treeforge")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def layout_file(tmp_path: Path) -> Path:
    path = tmp_path / "layout.yaml"
    path.write_text(LAYOUT)
    return path


class TestTopLevelOpts:
    def test_version_option(self) -> None:
        expect_version = importlib.metadata.version("treeforge")
        result = invoke_expecting_sucess(app, ["--version"])
        assert result.output.splitlines()[0] == f"treeforge {expect_version}"

    def test_config_file_option(self, layout_file: Path, tmp_cwd: Path) -> None:
        config_file = tmp_cwd / "config.yaml"
        config_file.write_text('render_marker: ">>"\n')

        result = invoke_expecting_sucess(
            app, ["--config-file", str(config_file), "plan", str(layout_file)]
        )

        assert ">>Name:" in result.output
        assert get_config().render_marker == ">>"

    def test_invalid_config_file(self, layout_file: Path, tmp_cwd: Path) -> None:
        config_file = tmp_cwd / "config.yaml"
        config_file.write_text("no_such_option: true\n")

        result = invoke_expecting_invalid_usage(
            app, ["--config-file", str(config_file), "plan", str(layout_file)]
        )

        assert "Error: InvalidInput: 1 validation error for user input" in result.output

    def test_log_level_option(self, layout_file: Path, tmp_cwd: Path) -> None:
        result = invoke_expecting_sucess(
            app, ["--log-level", "DEBUG", "plan", str(layout_file)]
        )
        assert "Name:" in result.output

    def test_missing_command(self) -> None:
        result = runner.invoke(app, [])
        assert "Usage:" in result.output


class TestPlan:
    def test_plan(self, layout_file: Path, tmp_cwd: Path) -> None:
        result = invoke_expecting_sucess(app, ["plan", str(layout_file)])

        names = [line.split()[-1] for line in result.output.splitlines() if "Name:" in line]
        assert names == ["build", "content", "content2.txt", "content1.txt"]
        assert f"Full path:      {tmp_cwd / 'build'}" in result.output
        assert "SHA1" not in result.output
        # nothing is created
        assert not (tmp_cwd / "build").exists()

    def test_plan_invalid_yaml(self, tmp_path: Path, tmp_cwd: Path) -> None:
        layout_file = tmp_path / "layout.yaml"
        layout_file.write_text("name: [unclosed\n")

        result = invoke_expecting_invalid_usage(app, ["plan", str(layout_file)])

        assert "Error: UnexpectedFormat:" in result.output
        assert "is not a valid YAML file" in result.output

    def test_plan_invalid_layout(self, tmp_path: Path, tmp_cwd: Path) -> None:
        layout_file = tmp_path / "layout.yaml"
        layout_file.write_text("name: build\nchildren:\n  - type: fifo\n    name: pipe\n")

        result = invoke_expecting_invalid_usage(app, ["plan", str(layout_file)])

        assert "Error: InvalidInput: 1 validation error for user input" in result.output
        assert "children -> 0" in result.output

    def test_plan_missing_file(self, tmp_path: Path) -> None:
        invoke_expecting_invalid_usage(app, ["plan", str(tmp_path / "nope.yaml")])


class TestDeploy:
    def test_deploy(self, layout_file: Path, tmp_cwd: Path) -> None:
        result = invoke_expecting_sucess(app, ["deploy", str(layout_file)])

        assert (tmp_cwd / "build/content1.txt").read_text() == "Hello once."
        assert (tmp_cwd / "build/content/content2.txt").read_text() == "Hello twice."
        assert stat.S_IMODE(os.stat(tmp_cwd / "build/content1.txt").st_mode) == 0o444

        assert "SHA1:           18c3c923828c73bb90e75b0aa2a2973797ed73f7" in result.output
        assert result.output.count("Name:") == 4

    def test_deploy_no_digests(self, layout_file: Path, tmp_cwd: Path) -> None:
        result = invoke_expecting_sucess(app, ["deploy", "--no-digests", str(layout_file)])
        assert "SHA" not in result.output

    def test_deploy_with_manifest(self, layout_file: Path, tmp_cwd: Path) -> None:
        invoke_expecting_sucess(app, ["deploy", str(layout_file), "--output", "manifest.json"])

        manifest = json.loads((tmp_cwd / "manifest.json").read_text())
        assert manifest["root"] == str(tmp_cwd / "build")
        assert manifest["entries"][-1] == {
            "path": "content1.txt",
            "type": "file",
            "mode": "0444",
            "sha1": "18c3c923828c73bb90e75b0aa2a2973797ed73f7",
            "sha256": "14e82e69cc1449d831c47073bf4f886212c8159cd99693e4f9a9ec55d0d5ed56",
        }

    def test_deploy_manifest_write_failure(self, layout_file: Path, tmp_cwd: Path) -> None:
        result = runner.invoke(app, ["deploy", str(layout_file), "-o", "missing_dir/m.json"])

        assert result.exit_code == 1, result.output
        assert "Error: FilesystemError: Failed to write the manifest to" in result.output
        assert "The tree itself was deployed." in result.output
        # the deployment happened and was reported before the manifest failed
        assert (tmp_cwd / "build/content1.txt").read_text() == "Hello once."
        assert result.output.count("Name:") == 4
        assert not isinstance(result.exception, OSError)

    def test_deploy_existing_tree(self, layout_file: Path, tmp_cwd: Path) -> None:
        (tmp_cwd / "build").mkdir()

        result = runner.invoke(app, ["deploy", str(layout_file)])

        assert result.exit_code == 1, result.output
        assert "Error: FilesystemError: Failed to create directory" in result.output
        assert "treeforge does not roll back" in result.output

    def test_deploy_unexpected_error(self, layout_file: Path, tmp_cwd: Path) -> None:
        with mock.patch("treeforge.interface.cli.deploy_layout") as mock_deploy:
            mock_deploy.side_effect = RuntimeError("something broke")
            result = runner.invoke(app, ["deploy", str(layout_file)])

        assert result.exit_code == 1
        assert isinstance(result.exception, RuntimeError)
