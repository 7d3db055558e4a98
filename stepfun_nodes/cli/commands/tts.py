"""
Text-to-speech commands
"""
import logging
from pathlib import Path
from typing import Optional

import typer

from stepfun_nodes.cli.utils import setup_logging
from stepfun_nodes.host import LocalHost
from stepfun_nodes.nodes.tts import StepFunTtsNode


# Configure logging
logger = logging.getLogger("stepfun_nodes.tts")
app = typer.Typer(help="Text-to-speech commands")


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
    StepFun text-to-speech command line tool
    """
    global logger
    logger = setup_logging(debug, "stepfun_nodes.tts")


@app.command("speak")
def speak(
    text: Optional[str] = typer.Option(
        None,
        "-t", "--text",
        help="Text to convert to speech",
    ),
    text_file: Optional[Path] = typer.Option(
        None,
        "-T", "--text-file",
        help="Text file to convert to speech",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    output_file: Optional[Path] = typer.Option(
        None,
        "-o", "--output",
        help="Output audio file path (default: generated file name)",
        file_okay=True,
        dir_okay=False,
    ),
    voice: str = typer.Option(
        "",
        "-v", "--voice",
        help="Voice ID to use for synthesis",
    ),
    model: str = typer.Option(
        "step-tts-2",
        "-m", "--model",
        help="TTS model",
    ),
    output_format: str = typer.Option(
        "mp3",
        "-f", "--format",
        help="Audio format (mp3, aac, flac, wav, pcm, opus)",
    ),
    speed: Optional[float] = typer.Option(
        None,
        "--speed",
        help="Speech speed (0.5 - 2.0)",
    ),
    volume: Optional[float] = typer.Option(
        None,
        "--volume",
        help="Speech volume (0.1 - 2.0)",
    ),
    mime_type: str = typer.Option(
        "auto",
        "--mime-type",
        help="MIME type of the output, 'auto' derives it from the format",
    ),
):
    """
    Convert text to speech
    """
    if text_file is not None:
        text = text_file.read_text(encoding="utf-8")
    if text is None:
        typer.echo("Either --text or --text-file is required")
        raise typer.Exit(1)

    parameters = {
        "text": text,
        "voice": voice,
        "model": model,
        "outputFormat": output_format,
        "speed": speed,
        "volume": volume,
    }
    preset_mime_types = StepFunTtsNode.description.get_property(
        "mimeType"
    ).option_values()
    if mime_type in preset_mime_types:
        parameters["mimeType"] = mime_type
    else:
        parameters["mimeType"] = "custom"
        parameters["customMimeType"] = mime_type

    logger.debug(
        "Converting text to speech: %d chars -> %s (voice=%s, model=%s, "
        "format=%s, speed=%s, volume=%s)",
        len(text), output_file, voice, model, output_format, speed, volume
    )

    try:
        host = LocalHost(parameters=parameters)
        node = StepFunTtsNode()
        result = node.execute(host)[0]
        binary = result.binary[node.get_parameter(
            host, "binaryPropertyName", 0
        )]

        target = output_file or Path(binary.file_name)
        target.write_bytes(binary.data)
        typer.echo(f"Successfully converted text to speech: {target}")
    except Exception as e:
        logger.error(
            "Failed to convert text to speech: %s",
            str(e),
            exc_info=True
        )
        typer.echo(f"Failed to convert text to speech: {str(e)}")
        raise typer.Exit(1)


@app.command("voices")
def voices():
    """
    List the available system voices
    """
    try:
        host = LocalHost()
        options = StepFunTtsNode().load_options("getVoices", host)
    except Exception as e:
        logger.error("Failed to load voices: %s", str(e), exc_info=True)
        typer.echo(f"Failed to load voices: {str(e)}")
        raise typer.Exit(1)

    if not options:
        typer.echo("No voices found")
        return
    for option in options:
        typer.echo(f"{option['value']}\t{option['name']}")
