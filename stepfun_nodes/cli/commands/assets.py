"""
Packaging asset commands
"""
import logging
from pathlib import Path
from typing import Optional

import typer

from stepfun_nodes.assets import copy_assets
from stepfun_nodes.cli.utils import setup_logging


# Configure logging
logger = logging.getLogger("stepfun_nodes.assets")
app = typer.Typer(help="Packaging asset commands")


@app.callback()
def callback(
    debug: bool = typer.Option(
        False,
        "--debug",
        "-d",
        help="Enable debug mode",
    ),
):
    """
    Asset command line tool
    """
    global logger
    logger = setup_logging(debug, "stepfun_nodes.assets")


@app.command("copy")
def copy(
    root: Path = typer.Option(
        Path("."),
        "-r", "--root",
        help="Project root containing icons/, templates/ and README.md",
        file_okay=False,
        dir_okay=True,
    ),
    dist: Optional[Path] = typer.Option(
        None,
        "-o", "--dist",
        help="Output directory (default: <root>/dist)",
        file_okay=False,
        dir_okay=True,
    ),
):
    """
    Copy icons, README and templates into the packaged output
    """
    try:
        copied = copy_assets(root, dist)
    except OSError as e:
        logger.error("Failed to copy assets: %s", str(e), exc_info=True)
        typer.echo(f"Failed to copy assets: {str(e)}")
        raise typer.Exit(1)
    typer.echo(f"Copied {len(copied)} asset file(s)")
