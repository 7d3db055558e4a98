"""
Main CLI entry point for stepfun-nodes
"""
import typer

# Import and register subcommands
from stepfun_nodes.cli.commands import tts, asr, credentials, assets

app = typer.Typer(
    name="stepfun-nodes",
    help="Run the StepFun speech nodes outside a workflow host",
    add_completion=False,
)

# Register text-to-speech commands
app.add_typer(tts.app, name="tts", help="Text-to-speech commands")

# Register speech-to-text commands
app.add_typer(asr.app, name="asr", help="Speech-to-text commands")

# Register credential commands
app.add_typer(
    credentials.app,
    name="credentials",
    help="Credential related commands"
)

# Register asset commands
app.add_typer(assets.app, name="assets", help="Packaging asset commands")


def main():
    """Main entry point for the CLI"""
    app()


if __name__ == "__main__":
    main()
