"""Credential definitions for the StepFun API.

A credential bundles the settings needed to reach the remote service and
knows how to authenticate an outbound request. Credentials are registered
by name so hosts can resolve the credential a node asks for.
"""

import json
import logging
import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from stepfun_nodes.models import HttpRequest, ENCODING_TEXT
from stepfun_nodes.utils import join_url

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.stepfun.ai/v1"

# Credential registry
_registered_credentials: Dict[str, type] = {}


def register_credential(name: str):
    """Decorator to register a credential type.

    Args:
        name: The name nodes use to request the credential.
    """
    def decorator(cls):
        cls.name = name
        _registered_credentials[name] = cls
        logger.debug(f"Registered credential: {name}")
        return cls
    return decorator


def get_credential_class(name: str) -> type:
    """Return the credential class registered under ``name``.

    Raises:
        ValueError: If no credential is registered with that name.
    """
    try:
        return _registered_credentials[name]
    except KeyError:
        raise ValueError(
            f"Unknown credential type: {name}. Registered: "
            f"{', '.join(sorted(_registered_credentials))}"
        )


@register_credential("stepFunApi")
@dataclass
class StepFunCredential:
    """StepFun API credential.

    This class automatically loads configuration from environment variables
    if not provided during initialization.

    Attributes:
        api_key: StepFun API key
        base_url: API base URL (default: https://api.stepfun.ai/v1)

    Environment variables:
        STEPFUN_API_KEY: StepFun API key
        STEPFUN_BASE_URL: API base URL
    """
    display_name = "Stepfun AI API Key"
    documentation_url = "https://platform.stepfun.ai/"
    supported_nodes = ["stepFunTts", "stepFunAsr"]

    api_key: Optional[str] = field(
        default_factory=lambda: os.environ.get('STEPFUN_API_KEY')
    )
    base_url: str = field(
        default_factory=lambda: os.environ.get(
            'STEPFUN_BASE_URL', DEFAULT_BASE_URL
        )
    )

    def __post_init__(self):
        """Validate configuration and log loading process."""
        self._log_config_loading()
        self._validate_config()

    def _log_config_loading(self):
        """Log configuration loading process."""
        if self.api_key:
            logger.info("StepFun API key loaded")
        else:
            logger.error(
                "StepFun API key not found in constructor or environment"
            )
        logger.info(f"StepFun base URL: {self.base_url}")

    def _validate_config(self):
        """Validate StepFun credential."""
        if not self.api_key:
            raise ValueError(
                "api_key is required. Set it either in constructor "
                "or through STEPFUN_API_KEY environment variable"
            )
        if not self.base_url:
            raise ValueError(
                "base_url is required. Set it either in constructor "
                "or through STEPFUN_BASE_URL environment variable"
            )

    @classmethod
    def from_dict(cls, values: Dict[str, Any]) -> 'StepFunCredential':
        """Create a credential from host-stored fields.

        Accepts both ``apiKey``/``baseUrl`` and ``api_key``/``base_url``.
        """
        api_key = values.get("apiKey", values.get("api_key"))
        base_url = values.get("baseUrl", values.get("base_url"))
        if base_url is None:
            return cls(api_key=api_key)
        return cls(api_key=api_key, base_url=base_url)

    def url(self, path: str) -> str:
        """Return the absolute URL of an API path."""
        return join_url(self.base_url, path)

    def authorization_header(self) -> Dict[str, str]:
        return {"Authorization": f"Bearer {self.api_key}"}

    def authenticate(self, request: HttpRequest) -> HttpRequest:
        """Return a copy of ``request`` carrying the bearer token."""
        return request.with_headers(**self.authorization_header())

    def test_request(self) -> HttpRequest:
        """Request used to check that the credential works."""
        return HttpRequest(
            method="GET",
            url=self.url("/models"),
            encoding=ENCODING_TEXT,
        )

    def __repr__(self):
        return (
            f"{self.__class__.__name__}(api_key='***', "
            f"base_url={self.base_url!r})"
        )


def check_credential(host, name: str = "stepFunApi") -> Any:
    """Check a credential by listing the available models.

    Any non-error HTTP status counts as success, whatever the body holds.
    Failures propagate the host's HttpError unchanged.

    Args:
        host: Host used to resolve the credential and send the request
        name: Registered credential name

    Returns:
        The models listing when the body is JSON, otherwise the raw body
    """
    credential = host.fetch_credentials(name)
    logger.info(f"Testing credential {name} against {credential.base_url}")
    response = host.send_authenticated(name, credential.test_request())
    logger.info(f"Credential {name} test succeeded")
    if isinstance(response, bytes):
        response = response.decode("utf-8", errors="replace")
    if isinstance(response, str) and response.strip():
        try:
            return json.loads(response)
        except ValueError:
            logger.debug(f"Models response of {name} is not JSON")
    return response
