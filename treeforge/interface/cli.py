import functools
import importlib.metadata
import logging
import sys
from pathlib import Path
from typing import Any, Callable, Optional

import typer
import yaml

import treeforge.core.config as config
from treeforge.core.builder import build_from_layout
from treeforge.core.errors import FilesystemError, TreeforgeError, UnexpectedFormat
from treeforge.core.models.input import Layout, parse_user_input
from treeforge.core.models.output import Manifest
from treeforge.core.pipeline import deploy_layout
from treeforge.core.render import render_tree
from treeforge.interface.logging import LogLevel, setup_logging

app = typer.Typer(no_args_is_help=True, pretty_exceptions_show_locals=False)
log = logging.getLogger(__name__)


LAYOUT_ARG = typer.Argument(
    ...,
    exists=True,
    dir_okay=False,
    resolve_path=True,
    readable=True,
    help="YAML file describing the directory tree.",
)


def _bail_out_with_error(e: TreeforgeError) -> None:
    """Report and error and set correct exit code."""
    log.error("%s: %s", type(e).__name__, str(e).replace("\n", r"\n"))
    print(f"Error: {type(e).__name__}: {e.friendly_msg()}", file=sys.stderr)
    raise typer.Exit(2 if e.is_invalid_usage else 1)


def handle_errors(cmd: Callable[..., None]) -> Callable[..., None]:
    """Decorate a CLI command function with an error handler.

    All errors will be logged at ERROR level before exiting.
    Expected errors will be printed in a friendlier format rather than showing the whole traceback.
    Errors that we consider invalid usage will result in exit code 2.
    """

    def log_error(error: Exception) -> None:
        log.error("%s: %s", type(error).__name__, str(error).replace("\n", r"\n"))

    @functools.wraps(cmd)
    def cmd_with_error_handling(*args: tuple[Any, ...], **kwargs: dict[str, Any]) -> None:
        try:
            cmd(*args, **kwargs)
        except TreeforgeError as e:
            _bail_out_with_error(e)
        except Exception as e:
            log_error(e)
            raise

    return cmd_with_error_handling


def version_callback(value: bool) -> None:
    """If --version was used, print the treeforge version and exit."""
    if not value:
        return

    print("treeforge", importlib.metadata.version("treeforge"))
    raise typer.Exit()


@app.callback()
@handle_errors
def treeforge(  # noqa: D103; docstring becomes part of --help message
    version: bool = typer.Option(
        False,
        "--version",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    config_file: Path = typer.Option(
        None,
        "--config-file",
        help="Read configuration from this file.",
        dir_okay=False,
        exists=True,
        resolve_path=True,
        readable=True,
    ),
    log_level: LogLevel = typer.Option(
        LogLevel.INFO.value,
        "--log-level",
        case_sensitive=False,
        help="Set log level.",
    ),
) -> None:
    setup_logging(log_level)
    if config_file:
        config.set_config(config_file)


def _load_layout(layout_file: Path) -> Layout:
    try:
        raw_layout = yaml.safe_load(layout_file.read_text())
    except yaml.YAMLError as e:
        raise UnexpectedFormat(f"{layout_file} is not a valid YAML file: {e}") from e

    return parse_user_input(Layout.model_validate, raw_layout)


@app.command()
@handle_errors
def plan(layout_file: Path = LAYOUT_ARG) -> None:
    """Show the tree a layout file describes, without touching the disk.

    Paths are shown as they would be if the layout was deployed from the current directory.
    """
    tree = build_from_layout(_load_layout(layout_file))
    print(render_tree(tree, show_digests=False), end="")


@app.command()
@handle_errors
def deploy(
    layout_file: Path = LAYOUT_ARG,
    output: Optional[Path] = typer.Option(
        None,
        "-o",
        "--output",
        dir_okay=False,
        resolve_path=True,
        help="Write a JSON manifest of the deployed tree to this file.",
    ),
    digests: bool = typer.Option(
        True, "--digests/--no-digests", help="Show file digests in the printed tree."
    ),
) -> None:
    """Create the tree a layout file describes in the current directory.

    \b
    # example layout file
    name: build
    permission: "0755"
    children:
      - type: file
        name: content1.txt
        permission: "0444"
        content: Hello once.
      - type: directory
        name: content
        children:
          - type: file
            name: content2.txt
            permission: "0444"
            content: Hello twice.
    """  # noqa: D301; backslashes intentional
    tree = deploy_layout(_load_layout(layout_file))
    print(render_tree(tree, show_digests=digests), end="")

    if output:
        manifest = Manifest.from_tree(tree)
        try:
            output.write_text(manifest.model_dump_json(indent=2, exclude_none=True))
        except OSError as e:
            raise FilesystemError(
                f"Failed to write the manifest to {output}: {e.strerror}",
                path=output,
                solution=(
                    "The tree itself was deployed. Please write the manifest to an existing, "
                    "writable directory."
                ),
            ) from e
        log.info("Wrote manifest to %s", output)
