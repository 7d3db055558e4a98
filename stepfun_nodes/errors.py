"""Exceptions raised by hosts and nodes."""

import json
from typing import Any, Dict, Optional

# Longest remote body excerpt carried in an error message
MAX_REMOTE_MESSAGE = 500


class NodeError(Exception):
    """Base exception for node execution errors"""

    def __init__(self, message: str, item_index: Optional[int] = None):
        self.item_index = item_index
        if item_index is not None:
            message = f"{message} [item {item_index}]"
        super().__init__(message)


class NodeOperationError(NodeError):
    """Raised when parameters fail local validation before any request"""
    pass


class NodeApiError(NodeError):
    """Raised when a request to the remote API fails.

    The error payload is kept verbatim in ``payload``. When the remote
    service answered with a body, its message is part of the error text so
    the reason the service gave reaches the user.
    """

    def __init__(self, payload: Dict[str, Any],
                 item_index: Optional[int] = None):
        self.payload = payload
        self.http_code = payload.get("httpCode")
        message = str(payload.get("message") or "Request failed")
        if self.http_code and str(self.http_code) not in message:
            message = f"{message} (HTTP {self.http_code})"
        detail = remote_message(payload.get("body"))
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message, item_index)

    @classmethod
    def from_exception(cls, error: Exception,
                       item_index: Optional[int] = None) -> 'NodeApiError':
        """Wrap any exception raised while handling an item."""
        if isinstance(error, NodeApiError):
            return cls(error.payload, item_index)
        payload: Dict[str, Any] = {
            "message": str(error),
            "type": error.__class__.__name__,
        }
        if isinstance(error, HttpError):
            payload["httpCode"] = error.status_code
            payload["body"] = error.body
        return cls(payload, item_index)


class HttpError(Exception):
    """Raised by a host when an HTTP request fails"""

    def __init__(self, message: str, status_code: Optional[int] = None,
                 body: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class HttpRateLimitError(HttpError):
    """Raised when the remote API answers with HTTP 429"""
    pass


class BinaryDataMissingError(Exception):
    """Raised when an item has no binary data under the requested field"""
    pass


def remote_message(body: Any) -> str:
    """Extract a readable reason from an error response body.

    Prefers ``error.message`` or ``message`` of a JSON body and falls back
    to the compact JSON, or to the text of a non-JSON body.
    """
    if body is None:
        return ""
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
        if isinstance(error, str) and error:
            return error
        if body.get("message"):
            return str(body["message"])
    if isinstance(body, (dict, list, tuple)):
        text = json.dumps(body, ensure_ascii=False, separators=(",", ":"))
    else:
        text = str(body).strip()
    if len(text) > MAX_REMOTE_MESSAGE:
        text = text[:MAX_REMOTE_MESSAGE] + "..."
    return text
