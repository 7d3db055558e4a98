"""StepFun text-to-speech node.

Converts item text into speech with the StepFun speech endpoint and
attaches the synthesized audio as binary data. The list of voices can be
loaded on demand from the system voices endpoint.
"""

import json
import logging
from typing import Any, Dict, List

from stepfun_nodes.errors import NodeOperationError
from stepfun_nodes.models import HttpRequest, Item, ENCODING_BYTES
from stepfun_nodes.nodes.base import (
    BaseNode,
    NodeDescription,
    NodeProperty,
    register_node,
)
from stepfun_nodes.utils import (
    DEFAULT_OUTPUT_FORMAT,
    build_file_name,
    output_format_mime,
)

logger = logging.getLogger(__name__)

CREDENTIAL_NAME = "stepFunApi"
VOICE_LIST_PATH = "/audio/system_voices"
VOICE_LIST_MODEL = "step-tts-mini"
DEFAULT_FILE_STEM = "stepfun-tts"

MIME_TYPE_AUTO = "auto"
MIME_TYPE_CUSTOM = "custom"

TTS_PROPERTIES = [
    NodeProperty(
        name="text",
        display_name="Text",
        default="",
        required=True,
        description="The text to convert to speech (max 1000 characters)",
    ),
    NodeProperty(
        name="voice",
        display_name="Voice",
        default="",
        load_options_method="getVoices",
        description=(
            "The voice to use for speech synthesis. Pick one from the "
            "loaded list or enter a voice ID"
        ),
    ),
    NodeProperty(
        name="model",
        display_name="Model",
        default="step-tts-2",
        required=True,
        description="The TTS model to use, e.g. step-tts-2 or step-tts-mini",
    ),
    NodeProperty(
        name="outputFormat",
        display_name="Output Format",
        type="options",
        options=[
            ("MP3", "mp3"),
            ("AAC", "aac"),
            ("FLAC", "flac"),
            ("WAV", "wav"),
            ("PCM", "pcm"),
            ("Opus", "opus"),
        ],
        default=DEFAULT_OUTPUT_FORMAT,
        description="The audio format for the output file",
    ),
    NodeProperty(
        name="speed",
        display_name="Speed",
        type="number",
        default=None,
        min_value=0.5,
        max_value=2.0,
        precision=2,
        description="Speech speed, 0.5 to 2.0",
    ),
    NodeProperty(
        name="volume",
        display_name="Volume",
        type="number",
        default=None,
        min_value=0.1,
        max_value=2.0,
        precision=2,
        description="Speech volume, 0.1 to 2.0",
    ),
    NodeProperty(
        name="mimeType",
        display_name="MIME Type",
        type="options",
        options=[
            ("From Output Format", MIME_TYPE_AUTO),
            ("audio/mpeg", "audio/mpeg"),
            ("audio/aac", "audio/aac"),
            ("audio/flac", "audio/flac"),
            ("audio/wav", "audio/wav"),
            ("audio/pcm", "audio/pcm"),
            ("audio/opus", "audio/opus"),
            ("audio/ogg", "audio/ogg"),
            ("Custom", MIME_TYPE_CUSTOM),
        ],
        default=MIME_TYPE_AUTO,
        description="MIME type stored with the generated audio",
    ),
    NodeProperty(
        name="customMimeType",
        display_name="Custom MIME Type",
        default="",
        required=True,
        placeholder="audio/x-custom",
        show={"mimeType": [MIME_TYPE_CUSTOM]},
    ),
    NodeProperty(
        name="binaryPropertyName",
        display_name="Put Output File in Field",
        default="audio",
        required=True,
    ),
    NodeProperty(
        name="fileName",
        display_name="File Name",
        default=DEFAULT_FILE_STEM,
        description="Output file name without extension",
    ),
    NodeProperty(
        name="endpointPath",
        display_name="Endpoint Path",
        default="/audio/speech",
        required=True,
    ),
]


def parse_voice_options(payload: Any) -> List[Dict[str, str]]:
    """Map a system voices response to option pairs.

    The payload may be a bare list or an object holding the list under
    ``data`` or ``voices``. Any other shape yields no options.
    """
    if isinstance(payload, list):
        voices = payload
    elif isinstance(payload, dict):
        voices = payload.get("data")
        if voices is None:
            voices = payload.get("voices")
    else:
        voices = None
    if not isinstance(voices, list):
        return []

    options = []
    for voice in voices:
        if not isinstance(voice, dict):
            continue
        options.append({
            "name": str(_first_present(voice, "name", "display_name", "id")),
            "value": str(_first_present(voice, "id", "voice_id", "name")),
        })
    return options


def _first_present(values: Dict[str, Any], *keys: str) -> Any:
    for key in keys:
        if values.get(key) is not None:
            return values[key]
    return ""


@register_node("stepFunTts")
class StepFunTtsNode(BaseNode):
    """Convert text into speech using StepFun's TTS models."""

    description = NodeDescription(
        name="stepFunTts",
        display_name="Stepfun.ai",
        description="Convert Text Into Speech using Stepfun.ai's Model (TTS)",
        properties=TTS_PROPERTIES,
        credentials=[CREDENTIAL_NAME],
        defaults={"name": "Convert Text Into Speech"},
        documentation_url="https://platform.stepfun.ai/",
        aliases=[
            "tts", "text to speech", "text-to-speech", "speech synthesis",
            "voice", "stepfun",
        ],
    )
    load_options_methods = {"getVoices": "get_voices"}

    def get_voices(self, host) -> List[Dict[str, str]]:
        """Load the system voices for the voice picker.

        The bearer header is added here instead of going through the
        authenticated helper. Failures of any kind return an empty list.
        """
        try:
            credential = host.fetch_credentials(CREDENTIAL_NAME)
            response = host.send(HttpRequest(
                method="GET",
                url=credential.url(VOICE_LIST_PATH),
                headers=credential.authorization_header(),
                params={"model": VOICE_LIST_MODEL},
            ))
            if isinstance(response, (str, bytes)):
                response = json.loads(response)
            options = parse_voice_options(response)
        except Exception as e:
            logger.warning(f"Failed to load voices: {str(e)}")
            return []
        logger.info(f"Loaded {len(options)} voice(s)")
        return options

    def _resolve_mime_type(self, host, output_format: str,
                           item_index: int) -> str:
        selector = self.get_parameter(host, "mimeType", item_index)
        if selector == MIME_TYPE_AUTO:
            return output_format_mime(output_format)
        if selector == MIME_TYPE_CUSTOM:
            custom = self.get_parameter(host, "customMimeType", item_index)
            return str(custom).strip()
        return selector

    def execute_item(self, host, credential: Any, item: Item,
                     item_index: int) -> Item:
        text = self.get_parameter(host, "text", item_index)
        if not isinstance(text, str) or not text.strip():
            raise NodeOperationError("Text is required", item_index)

        voice = self.get_parameter(host, "voice", item_index)
        model = self.get_parameter(host, "model", item_index)
        output_format = self.get_parameter(host, "outputFormat", item_index)
        speed = self.get_parameter(host, "speed", item_index)
        volume = self.get_parameter(host, "volume", item_index)
        mime_type = self._resolve_mime_type(host, output_format, item_index)
        if not mime_type:
            raise NodeOperationError("Custom MIME Type is required",
                                     item_index)
        field_name = self.get_parameter(
            host, "binaryPropertyName", item_index
        )
        stem = self.get_parameter(host, "fileName", item_index)
        endpoint_path = self.get_parameter(host, "endpointPath", item_index)

        body: Dict[str, Any] = {
            "model": model,
            "input": text,
            "response_format": output_format,
        }
        if voice:
            body["voice"] = voice
        if speed is not None:
            body["speed"] = speed
        if volume is not None:
            body["volume"] = volume

        logger.info(
            f"Synthesizing item {item_index} with {model} "
            f"(voice={voice}, format={output_format}, {len(text)} chars)"
        )
        audio = host.send_authenticated(CREDENTIAL_NAME, HttpRequest(
            method="POST",
            url=credential.url(endpoint_path),
            json=body,
            encoding=ENCODING_BYTES,
        ))
        if not audio:
            raise ValueError("Speech endpoint returned no audio")

        file_name = build_file_name(stem or DEFAULT_FILE_STEM, mime_type)
        binary = host.write_binary(bytes(audio), file_name, mime_type)
        logger.debug(
            f"Item {item_index} audio: {len(binary.data)} bytes as "
            f"{file_name} ({mime_type})"
        )

        json_data: Dict[str, Any] = {
            "text": text,
            "voice": voice,
            "model": model,
            "outputFormat": output_format,
            "mimeType": mime_type,
            "fileName": file_name,
        }
        if speed is not None:
            json_data["speed"] = speed
        if volume is not None:
            json_data["volume"] = volume
        return Item(json=json_data, binary={field_name: binary})
