"""Host capabilities consumed by the nodes.

Nodes never talk to the network or the workflow engine directly. Everything
they need (input items, parameters, credentials, HTTP and binary helpers) is
reached through a host object implementing :class:`BaseHost`. A workflow
engine adapter provides its own host; :class:`LocalHost` runs the nodes
standalone on top of ``requests``.
"""

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

import requests
from tenacity import (
    retry,
    stop_after_attempt,
    wait_exponential,
    retry_if_exception_type,
    before_sleep_log
)

from stepfun_nodes.credentials import get_credential_class
from stepfun_nodes.errors import (
    BinaryDataMissingError,
    HttpError,
    HttpRateLimitError,
)
from stepfun_nodes.models import (
    BinaryData,
    HttpRequest,
    Item,
    ENCODING_BYTES,
    ENCODING_TEXT,
)

logger = logging.getLogger(__name__)

_MISSING = object()


class BaseHost(ABC):
    """Interface a workflow host offers to nodes.

    Attributes:
        continue_on_fail: Whether a failing item is turned into an error
            item instead of aborting the whole run.
    """

    continue_on_fail: bool = False

    @abstractmethod
    def get_input_data(self) -> List[Item]:
        """Return the items the node should process."""
        pass

    @abstractmethod
    def get_node_parameter(self, name: str, item_index: int,
                           default: Any = None) -> Any:
        """Resolve a node parameter for one item."""
        pass

    @abstractmethod
    def fetch_credentials(self, name: str) -> Any:
        """Return the credential registered under ``name``."""
        pass

    @abstractmethod
    def send(self, request: HttpRequest) -> Any:
        """Send an unauthenticated request and return the decoded body.

        Raises:
            HttpError: If the request fails or returns an error status.
        """
        pass

    def send_authenticated(self, credential_name: str,
                           request: HttpRequest) -> Any:
        """Send a request authenticated with the named credential."""
        credential = self.fetch_credentials(credential_name)
        return self.send(credential.authenticate(request))

    def read_binary(self, item: Item, field_name: str) -> BinaryData:
        """Return the binary data stored on ``item`` under ``field_name``.

        Raises:
            BinaryDataMissingError: If the item has no such binary field.
        """
        binary = item.binary.get(field_name)
        if binary is None:
            raise BinaryDataMissingError(
                f"No binary data property '{field_name}' exists on item"
            )
        return binary

    def write_binary(self, data: bytes, file_name: str,
                     mime_type: Optional[str]) -> BinaryData:
        """Wrap raw bytes as a binary attachment."""
        extension = Path(file_name).suffix.lstrip(".") or None
        return BinaryData(
            data=data,
            file_name=file_name,
            mime_type=mime_type,
            file_extension=extension,
        )


@dataclass
class HostConfig:
    """Settings of the standalone host.

    Attributes:
        timeout: Timeout in seconds for every HTTP request (default: 60)

    Environment variables:
        STEPFUN_HTTP_TIMEOUT: Timeout in seconds
    """
    timeout: float = field(
        default_factory=lambda: float(
            os.environ.get('STEPFUN_HTTP_TIMEOUT', '60')
        )
    )

    def __post_init__(self):
        """Validate configuration and log loading process."""
        self._log_config_loading()
        self._validate_config()

    def _log_config_loading(self):
        """Log configuration loading process."""
        logger.info(f"HTTP timeout: {self.timeout}")

    def _validate_config(self):
        """Validate host configuration."""
        if self.timeout <= 0:
            raise ValueError("Timeout must be positive")


ParameterValue = Union[Any, Callable[[Item], Any]]


class LocalHost(BaseHost):
    """Standalone host backed by ``requests``.

    Parameters may be plain values or callables taking the current item,
    which lets a value differ per item the way host expressions do.
    Credentials that are not passed in are created from the environment
    through the credential registry.
    """

    def __init__(
        self,
        items: Optional[List[Item]] = None,
        parameters: Optional[Dict[str, ParameterValue]] = None,
        credentials: Optional[Dict[str, Any]] = None,
        config: Optional[HostConfig] = None,
        continue_on_fail: bool = False,
    ):
        self.items = [Item()] if items is None else list(items)
        self.parameters = parameters or {}
        self.credentials = dict(credentials or {})
        self.config = config or HostConfig()
        self.continue_on_fail = continue_on_fail
        self.proxies = self._get_proxies()
        logger.debug(f"Using proxies: {self.proxies}")

    def _get_proxies(self) -> Dict[str, Optional[str]]:
        """Get proxy settings from environment.

        Returns:
            Dict[str, Optional[str]]: Proxy settings.
        """
        return {
            "http": os.environ.get("HTTP_PROXY"),
            "https": os.environ.get("HTTPS_PROXY")
        }

    def get_input_data(self) -> List[Item]:
        return list(self.items)

    def get_node_parameter(self, name: str, item_index: int,
                           default: Any = None) -> Any:
        value = self.parameters.get(name, _MISSING)
        if value is _MISSING:
            return default
        if callable(value):
            return value(self.items[item_index])
        return value

    def fetch_credentials(self, name: str) -> Any:
        if name not in self.credentials:
            credential_class = get_credential_class(name)
            logger.info(f"Loading credential {name} from environment")
            self.credentials[name] = credential_class()
        return self.credentials[name]

    @retry(
        retry=retry_if_exception_type(HttpRateLimitError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        before_sleep=before_sleep_log(logger, logging.WARNING),
        reraise=True
    )
    def send(self, request: HttpRequest) -> Any:
        logger.debug(
            f"Sending {request.method} {request.url} "
            f"(params={request.params}, encoding={request.encoding})"
        )
        try:
            response = requests.request(
                request.method,
                request.url,
                headers=request.headers,
                params=request.params or None,
                json=request.json,
                data=request.data,
                files=request.files,
                timeout=self.config.timeout,
                proxies=self.proxies,
            )
        except requests.exceptions.RequestException as e:
            logger.error(f"Request to {request.url} failed: {str(e)}")
            raise HttpError(f"Request to {request.url} failed: {str(e)}")

        if response.status_code == 429:
            raise HttpRateLimitError(
                "Rate limit exceeded", 429, self._error_body(response)
            )
        if response.status_code >= 400:
            body = self._error_body(response)
            logger.error(
                f"Request to {request.url} returned "
                f"{response.status_code}: {body}"
            )
            raise HttpError(
                f"{request.method} {request.url} returned "
                f"{response.status_code}",
                response.status_code,
                body
            )

        logger.debug(
            f"Received {response.status_code} from {request.url} "
            f"({len(response.content)} bytes)"
        )
        return self._decode(response, request.encoding)

    @staticmethod
    def _decode(response: requests.Response, encoding: str) -> Any:
        if encoding == ENCODING_BYTES:
            return response.content
        if encoding == ENCODING_TEXT:
            return response.text
        try:
            return response.json()
        except ValueError:
            raise HttpError(
                "Response is not valid JSON",
                response.status_code,
                response.text
            )

    @staticmethod
    def _error_body(response: requests.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return response.text
