"""StepFun speech-to-text node.

Transcribes audio taken from an item's binary data or downloaded from a
URL by posting a multipart form to the transcription endpoint.
"""

import logging
from typing import Any, Dict, Tuple

from stepfun_nodes.models import (
    HttpRequest,
    Item,
    ENCODING_BYTES,
    ENCODING_JSON,
    ENCODING_TEXT,
)
from stepfun_nodes.nodes.base import (
    BaseNode,
    NodeDescription,
    NodeProperty,
    register_node,
)

logger = logging.getLogger(__name__)

DEFAULT_FILE_NAME = "audio"
DEFAULT_CONTENT_TYPE = "application/octet-stream"
JSON_RESPONSE_FORMATS = ("json", "verbose_json")

ASR_PROPERTIES = [
    NodeProperty(
        name="audioSource",
        display_name="Audio Source",
        type="options",
        options=[("Binary", "binary"), ("URL", "url")],
        default="binary",
    ),
    NodeProperty(
        name="binaryPropertyName",
        display_name="Binary Property",
        default="data",
        required=True,
        show={"audioSource": ["binary"]},
    ),
    NodeProperty(
        name="audioUrl",
        display_name="Audio URL",
        default="",
        # An empty URL is rejected locally as a validation error; failed
        # downloads of a given URL are API errors.
        required=True,
        show={"audioSource": ["url"]},
    ),
    NodeProperty(
        name="endpointPath",
        display_name="Endpoint Path",
        default="/audio/transcriptions",
        required=True,
    ),
    NodeProperty(
        name="model",
        display_name="Model",
        default="step-asr-mini",
        required=True,
    ),
    NodeProperty(
        name="language",
        display_name="Language",
        default="",
        placeholder="zh",
    ),
    NodeProperty(
        name="prompt",
        display_name="Prompt",
        default="",
    ),
    NodeProperty(
        name="responseFormat",
        display_name="Response Format",
        type="options",
        options=[
            ("JSON", "json"),
            ("Text", "text"),
            ("Verbose JSON", "verbose_json"),
            ("SRT", "srt"),
            ("VTT", "vtt"),
        ],
        default="json",
    ),
]


@register_node("stepFunAsr")
class StepFunAsrNode(BaseNode):
    """Speech-to-text via StepFun."""

    description = NodeDescription(
        name="stepFunAsr",
        display_name="StepFun ASR",
        description="Speech-to-text via StepFun",
        properties=ASR_PROPERTIES,
        credentials=["stepFunApi"],
        defaults={"name": "StepFun ASR"},
        documentation_url="https://platform.stepfun.com/",
        aliases=[
            "asr", "speech to text", "speech-to-text", "transcribe",
            "transcription", "stt",
        ],
    )

    def _load_audio(self, host, item: Item,
                    item_index: int) -> Tuple[bytes, str, str]:
        """Return audio bytes, file name and content type for an item."""
        audio_source = self.get_parameter(host, "audioSource", item_index)
        if audio_source == "binary":
            field_name = self.get_parameter(
                host, "binaryPropertyName", item_index
            )
            binary = host.read_binary(item, field_name)
            logger.debug(
                f"Using binary property {field_name} of item {item_index} "
                f"({len(binary.data)} bytes)"
            )
            return (
                binary.data,
                binary.file_name or DEFAULT_FILE_NAME,
                binary.mime_type or DEFAULT_CONTENT_TYPE,
            )

        audio_url = self.get_parameter(host, "audioUrl", item_index)
        logger.info(f"Downloading audio for item {item_index}: {audio_url}")
        data = host.send(HttpRequest(
            method="GET",
            url=audio_url,
            encoding=ENCODING_BYTES,
        ))
        return bytes(data), DEFAULT_FILE_NAME, DEFAULT_CONTENT_TYPE

    def execute_item(self, host, credential: Any, item: Item,
                     item_index: int) -> Item:
        endpoint_path = self.get_parameter(host, "endpointPath", item_index)
        model = self.get_parameter(host, "model", item_index)
        language = self.get_parameter(host, "language", item_index)
        prompt = self.get_parameter(host, "prompt", item_index)
        response_format = self.get_parameter(
            host, "responseFormat", item_index
        )

        audio, file_name, content_type = self._load_audio(
            host, item, item_index
        )

        form: Dict[str, Any] = {"model": model}
        if language:
            form["language"] = language
        if prompt:
            form["prompt"] = prompt
        if response_format:
            form["response_format"] = response_format

        decode_json = response_format in JSON_RESPONSE_FORMATS
        request = HttpRequest(
            method="POST",
            url=credential.url(endpoint_path),
            data=form,
            files={"file": (file_name, audio, content_type)},
            encoding=ENCODING_JSON if decode_json else ENCODING_TEXT,
        )
        logger.info(
            f"Transcribing item {item_index} with {model} "
            f"(format={response_format}, {len(audio)} bytes)"
        )
        response = host.send_authenticated(
            self.description.credentials[0], request
        )

        if isinstance(response, str):
            return Item(json={
                "text": response,
                "responseFormat": response_format,
            })
        if isinstance(response, dict):
            json_data = dict(response)
            json_data["responseFormat"] = response_format
            return Item(json=json_data)
        raise ValueError(
            f"Unexpected transcription response type: "
            f"{type(response).__name__}"
        )
