"""Tests for the command line interface."""

import logging
from unittest.mock import MagicMock, patch

import pytest
from typer.testing import CliRunner

from stepfun_nodes.cli.main import app
from stepfun_nodes.cli.utils import setup_logging


runner = CliRunner()


@pytest.fixture(autouse=True)
def api_env(monkeypatch):
    monkeypatch.setenv('STEPFUN_API_KEY', 'cli-key')
    monkeypatch.setenv('STEPFUN_BASE_URL', 'https://api.example.com/v1')


@pytest.fixture
def mock_request():
    """Mock requests.request used by the local host."""
    with patch('stepfun_nodes.host.requests.request') as mock:
        yield mock


def make_response(status_code=200, json_data=None, content=b"", text=""):
    response = MagicMock()
    response.status_code = status_code
    response.content = content
    response.text = text
    response.json.return_value = json_data
    return response


def test_tts_speak(mock_request, tmp_path):
    mock_request.return_value = make_response(content=b"audio-bytes")
    output = tmp_path / "hello.wav"

    result = runner.invoke(app, [
        "tts", "speak", "-t", "hello", "-o", str(output),
        "-f", "wav", "--speed", "1.5",
    ])

    assert result.exit_code == 0, result.output
    assert output.read_bytes() == b"audio-bytes"
    _, kwargs = mock_request.call_args
    assert kwargs["json"]["response_format"] == "wav"
    assert kwargs["json"]["speed"] == 1.5
    assert kwargs["headers"]["Authorization"] == "Bearer cli-key"


def test_tts_speak_blank_text_fails(mock_request, tmp_path):
    result = runner.invoke(app, [
        "tts", "speak", "-t", "  ", "-o", str(tmp_path / "x.mp3"),
    ])

    assert result.exit_code == 1
    assert "Text is required" in result.output
    mock_request.assert_not_called()


def test_tts_voices(mock_request):
    mock_request.return_value = make_response(
        json_data={"data": [{"id": "v1", "name": "Voice One"}]}
    )

    result = runner.invoke(app, ["tts", "voices"])

    assert result.exit_code == 0, result.output
    assert "v1\tVoice One" in result.output


def test_asr_transcribe(mock_request, tmp_path):
    audio = tmp_path / "speech.wav"
    audio.write_bytes(b"RIFF")
    mock_request.return_value = make_response(json_data={"text": "hi"})

    result = runner.invoke(app, ["asr", "transcribe", "-a", str(audio)])

    assert result.exit_code == 0, result.output
    assert "hi" in result.output
    _, kwargs = mock_request.call_args
    assert kwargs["files"]["file"][0] == "speech.wav"
    assert kwargs["data"]["model"] == "step-asr-mini"


def test_asr_requires_one_source():
    result = runner.invoke(app, ["asr", "transcribe"])

    assert result.exit_code == 1


def test_credentials_test(mock_request):
    mock_request.return_value = make_response(
        text='{"data": [{"id": "step-tts-2"}]}'
    )

    result = runner.invoke(app, ["credentials", "test"])

    assert result.exit_code == 0, result.output
    assert "1 model(s)" in result.output
    args, _ = mock_request.call_args
    assert args == ("GET", "https://api.example.com/v1/models")


def test_credentials_test_empty_reply(mock_request):
    mock_request.return_value = make_response(status_code=204)

    result = runner.invoke(app, ["credentials", "test"])

    assert result.exit_code == 0, result.output
    assert "is valid" in result.output


def test_credentials_test_failure(mock_request):
    mock_request.return_value = make_response(
        status_code=401, json_data={"error": "invalid"}
    )

    result = runner.invoke(app, ["credentials", "test"])

    assert result.exit_code == 1
    assert "Credential test failed" in result.output


def test_assets_copy(tmp_path):
    (tmp_path / "README.md").write_text("readme")

    result = runner.invoke(app, [
        "assets", "copy", "-r", str(tmp_path), "-o", str(tmp_path / "dist"),
    ])

    assert result.exit_code == 0, result.output
    assert (tmp_path / "dist" / "README.md").exists()


def test_setup_logging_levels():
    logger = setup_logging(True, "stepfun_nodes.tts")

    assert logger.getEffectiveLevel() == logging.DEBUG
    assert logging.getLogger("stepfun_nodes.host").getEffectiveLevel() \
        == logging.DEBUG

    setup_logging(False, "stepfun_nodes.tts")

    assert logging.getLogger("stepfun_nodes").level == logging.INFO
