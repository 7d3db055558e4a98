"""
Speech-to-text commands
"""
import logging
import mimetypes
from pathlib import Path
from typing import Optional

import typer

from stepfun_nodes.cli.utils import setup_logging, dump_json
from stepfun_nodes.host import LocalHost
from stepfun_nodes.models import BinaryData, Item
from stepfun_nodes.nodes.asr import StepFunAsrNode


# Configure logging
logger = logging.getLogger("stepfun_nodes.asr")
app = typer.Typer(help="Speech-to-text commands")


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
    StepFun speech-to-text command line tool
    """
    global logger
    logger = setup_logging(debug, "stepfun_nodes.asr")


@app.command("transcribe")
def transcribe(
    audio_file: Optional[Path] = typer.Option(
        None,
        "-a", "--audio",
        help="Audio file to transcribe",
        exists=True,
        file_okay=True,
        dir_okay=False,
    ),
    audio_url: Optional[str] = typer.Option(
        None,
        "-u", "--url",
        help="URL of the audio to transcribe",
    ),
    output_file: Optional[Path] = typer.Option(
        None,
        "-o", "--output",
        help="Write the transcription to this file instead of stdout",
        file_okay=True,
        dir_okay=False,
    ),
    model: str = typer.Option(
        "step-asr-mini",
        "-m", "--model",
        help="ASR model",
    ),
    language: str = typer.Option(
        "",
        "-l", "--language",
        help="Language hint, e.g. zh",
    ),
    prompt: str = typer.Option(
        "",
        "-p", "--prompt",
        help="Prompt to guide the transcription",
    ),
    response_format: str = typer.Option(
        "json",
        "-f", "--format",
        help="Response format (json, text, verbose_json, srt, vtt)",
    ),
    endpoint_path: str = typer.Option(
        "/audio/transcriptions",
        "--endpoint",
        help="Transcription endpoint path",
    ),
):
    """
    Convert speech to text
    """
    if (audio_file is None) == (audio_url is None):
        typer.echo("Exactly one of --audio or --url is required")
        raise typer.Exit(1)

    parameters = {
        "endpointPath": endpoint_path,
        "model": model,
        "language": language,
        "prompt": prompt,
        "responseFormat": response_format,
    }
    items = [Item()]
    if audio_file is not None:
        mime_type, _ = mimetypes.guess_type(str(audio_file))
        items = [Item(binary={"data": BinaryData(
            data=audio_file.read_bytes(),
            file_name=audio_file.name,
            mime_type=mime_type,
            file_extension=audio_file.suffix.lstrip(".") or None,
        )})]
        parameters["audioSource"] = "binary"
        parameters["binaryPropertyName"] = "data"
    else:
        parameters["audioSource"] = "url"
        parameters["audioUrl"] = audio_url

    logger.debug(
        f"Transcribing {audio_file or audio_url} (model={model}, "
        f"format={response_format}, language={language})"
    )

    try:
        host = LocalHost(items=items, parameters=parameters)
        result = StepFunAsrNode().execute(host)[0].json
    except Exception as e:
        logger.error(
            f"Failed to convert speech to text: input={audio_file or audio_url}, "
            f"format={response_format}, error={str(e)}",
            exc_info=True
        )
        typer.echo(f"Failed to convert speech to text: {str(e)}")
        raise typer.Exit(1)

    if set(result) == {"text", "responseFormat"}:
        content = result["text"]
    else:
        content = dump_json(result)

    if output_file is None:
        typer.echo(content)
    else:
        output_file.write_text(content, encoding="utf-8")
        typer.echo(f"Successfully converted speech to text: {output_file}")
