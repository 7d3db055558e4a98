"""
Credential related commands
"""
import logging

import typer

from stepfun_nodes.cli.utils import setup_logging
from stepfun_nodes.credentials import check_credential
from stepfun_nodes.host import LocalHost


# Configure logging
logger = logging.getLogger("stepfun_nodes.credentials")
app = typer.Typer(help="Credential related commands")


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
    Credential command line tool
    """
    global logger
    logger = setup_logging(debug, "stepfun_nodes.credentials")


@app.command("test")
def test(
    name: str = typer.Option(
        "stepFunApi",
        "-n", "--name",
        help="Registered credential name",
    ),
):
    """
    Check that the configured API key and base URL work
    """
    try:
        response = check_credential(LocalHost(), name)
    except Exception as e:
        logger.error("Credential test failed: %s", str(e), exc_info=True)
        typer.echo(f"Credential test failed: {str(e)}")
        raise typer.Exit(1)

    models = response.get("data", []) if isinstance(response, dict) else []
    typer.echo(f"Credential {name} is valid ({len(models)} model(s) available)")
