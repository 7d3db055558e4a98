"""Unit tests for the StepFun credential definition."""

from unittest.mock import MagicMock, patch

import pytest

from stepfun_nodes.credentials import (
    DEFAULT_BASE_URL,
    StepFunCredential,
    check_credential,
    get_credential_class,
)
from stepfun_nodes.errors import HttpError
from stepfun_nodes.host import HostConfig, LocalHost
from stepfun_nodes.models import HttpRequest


class TestStepFunCredential:
    """Tests for StepFunCredential class."""

    def test_create_config_with_defaults(self, monkeypatch):
        """Test creating the credential from environment variables."""
        monkeypatch.setenv('STEPFUN_API_KEY', 'env-key')
        monkeypatch.delenv('STEPFUN_BASE_URL', raising=False)

        credential = StepFunCredential()

        assert credential.api_key == 'env-key'
        assert credential.base_url == DEFAULT_BASE_URL

    def test_base_url_from_environment(self, monkeypatch):
        monkeypatch.setenv('STEPFUN_API_KEY', 'env-key')
        monkeypatch.setenv('STEPFUN_BASE_URL', 'https://api.stepfun.com/v1')

        assert StepFunCredential().base_url == 'https://api.stepfun.com/v1'

    def test_config_validation_error(self, monkeypatch):
        """Test validation error when the API key is missing."""
        monkeypatch.delenv('STEPFUN_API_KEY', raising=False)

        with pytest.raises(ValueError, match="api_key is required"):
            StepFunCredential()

    def test_empty_base_url_rejected(self):
        with pytest.raises(ValueError, match="base_url is required"):
            StepFunCredential(api_key="key", base_url="")

    def test_from_dict_host_field_names(self):
        credential = StepFunCredential.from_dict({
            "apiKey": "key",
            "baseUrl": "https://api.example.com/v1/",
        })

        assert credential.api_key == "key"
        assert credential.url("/models") == \
            "https://api.example.com/v1/models"

    def test_authenticate_adds_bearer_header(self):
        credential = StepFunCredential(api_key="secret")
        request = HttpRequest(
            method="GET",
            url="https://x",
            headers={"Accept": "application/json"},
        )

        authenticated = credential.authenticate(request)

        assert authenticated.headers == {
            "Accept": "application/json",
            "Authorization": "Bearer secret",
        }
        assert request.headers == {"Accept": "application/json"}

    def test_test_request_normalises_slashes(self):
        credential = StepFunCredential(
            api_key="key", base_url="https://api.example.com/v1///"
        )

        request = credential.test_request()

        assert request.method == "GET"
        assert request.url == "https://api.example.com/v1/models"

    def test_repr_hides_key(self):
        credential = StepFunCredential(api_key="secret")

        assert "secret" not in repr(credential)

    def test_registered(self):
        assert get_credential_class("stepFunApi") is StepFunCredential

    def test_unknown_credential(self):
        with pytest.raises(ValueError, match="Unknown credential type"):
            get_credential_class("otherApi")


class TestCheckCredential:
    """Tests for the credential self-test."""

    def test_success(self, make_host):
        host = make_host(handler=lambda request: {"data": [{"id": "m"}]})

        response = check_credential(host)

        assert response == {"data": [{"id": "m"}]}
        request = host.requests[0]
        assert request.url == "https://api.example.com/v1/models"
        assert request.headers["Authorization"] == "Bearer test-key"

    def test_failure_propagates_http_error(self, make_host):
        host = make_host(
            handler=lambda request: HttpError("unauthorized", 401, "denied")
        )

        with pytest.raises(HttpError) as exc_info:
            check_credential(host)

        assert exc_info.value.status_code == 401
        assert len(host.requests) == 1


class TestCheckCredentialLocalHost:
    """Tests for the credential self-test over the requests-based host."""

    @pytest.fixture
    def host(self):
        return LocalHost(
            credentials={"stepFunApi": StepFunCredential(
                api_key="test-key", base_url="https://api.example.com/v1"
            )},
            config=HostConfig(timeout=5),
        )

    @pytest.mark.parametrize("status_code,text", [
        (204, ""),
        (200, "ok"),
    ])
    def test_non_json_success_accepted(self, host, status_code, text):
        response = MagicMock()
        response.status_code = status_code
        response.text = text
        response.content = text.encode()
        response.json.side_effect = ValueError("no json")

        with patch('stepfun_nodes.host.requests.request',
                   return_value=response):
            assert check_credential(host) == text

    def test_json_listing_decoded(self, host):
        response = MagicMock()
        response.status_code = 200
        response.text = '{"data": [{"id": "step-tts-2"}]}'
        response.content = response.text.encode()

        with patch('stepfun_nodes.host.requests.request',
                   return_value=response) as mock_request:
            result = check_credential(host)

        assert result == {"data": [{"id": "step-tts-2"}]}
        _, kwargs = mock_request.call_args
        assert kwargs["headers"] == {"Authorization": "Bearer test-key"}
