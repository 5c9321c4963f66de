# src/ddply/main.py
import typer
from pathlib import Path
from typing_extensions import Annotated
from typing import Optional

from .exceptions import (
    ConfigNotFoundError,
    ConfigParseError,
    RemovalError,
    ResolutionError,
)
from .logging_config import setup_logging
from .logic import deploy, is_dir
from .models import DeployMode

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("ddply")
except PackageNotFoundError:
    # running from a source checkout
    __version__ = "0.9.1"


# --- exit codes ---
EXIT_MISSING_ARGUMENTS = 1
EXIT_INVALID_SOURCE = 2
EXIT_IO_ERROR = 3
EXIT_CONFIG_NOT_FOUND = 4
EXIT_CONFIG_PARSE_ERROR = 6


app = typer.Typer(
    name="ddply",
    help="Sets up modern PHP apps to work better when using docker.",
    add_completion=False,
)

def version_callback(value: bool):
    if value:
        typer.echo(f"ddply version: {__version__}")
        raise typer.Exit()

def fail(message: str, code: int):
    typer.secho(message, fg=typer.colors.RED, err=True)
    raise typer.Exit(code=code)


@app.command()
def run(
    source: Annotated[Optional[Path], typer.Argument(
        help="Application directory to deploy from.",
        show_default=False,
    )] = None,

    destination: Annotated[Optional[Path], typer.Argument(
        help="Where the application is deployed to. Created if missing.",
        show_default=False,
    )] = None,

    config: Annotated[Optional[Path], typer.Option(
        "--config", "-c",
        help="Load configuration from FILE. Defaults to .ddply inside SOURCE.",
        metavar="FILE",
        envvar="DEPLOY_CONFIG_FILE",
        show_default=False,
    )] = None,

    debug: Annotated[bool, typer.Option(
        "--debug", "-d",
        help="Increase verbosity of running messages.",
    )] = False,

    version: Annotated[Optional[bool], typer.Option(
        "--version", "-v",
        help="Show the application's version and exit.",
        callback=version_callback,
        is_eager=True,
    )] = None,
):
    """
    Copies SOURCE to DESTINATION and symlinks the shared paths listed in the
    config back into SOURCE. Without a config DESTINATION becomes a symlink
    to SOURCE.
    """
    if source is None or destination is None:
        fail("Source and/or destination not specified", EXIT_MISSING_ARGUMENTS)

    if not is_dir(source):
        fail("Source argument does not point to valid directory", EXIT_INVALID_SOURCE)

    setup_logging(debug=debug)

    try:
        report = deploy(source, destination, config_path=config)
    except ConfigNotFoundError:
        fail("Specified config file not found", EXIT_CONFIG_NOT_FOUND)
    except ConfigParseError as e:
        fail(str(e), EXIT_CONFIG_PARSE_ERROR)
    except (ResolutionError, RemovalError) as e:
        fail(f"Error: Linking failed: {e}", EXIT_IO_ERROR)
    except OSError as e:
        fail(f"Error: {e}", EXIT_IO_ERROR)

    if report.mode is DeployMode.LINK_ONLY:
        typer.secho(f"Linked {destination} to {source}", fg=typer.colors.GREEN)
    else:
        typer.secho(f"Deployed {source} to {destination}", fg=typer.colors.GREEN)


if __name__ == "__main__":
    app()
