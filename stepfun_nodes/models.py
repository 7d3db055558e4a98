"""Data types exchanged between the host and the nodes."""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional

# Response decoding modes understood by hosts
ENCODING_JSON = "json"
ENCODING_TEXT = "text"
ENCODING_BYTES = "arraybuffer"


@dataclass
class BinaryData:
    """Binary attachment carried by an item.

    Attributes:
        data: Raw file bytes
        file_name: File name including extension, if any
        mime_type: Mime type of the data
        file_extension: Extension without leading dot, if any
    """
    data: bytes
    file_name: Optional[str] = None
    mime_type: Optional[str] = None
    file_extension: Optional[str] = None


@dataclass
class Item:
    """One unit of workflow data.

    Attributes:
        json: JSON fields of the item
        binary: Named binary attachments
        paired_item: Index of the input item this item was produced from
    """
    json: Dict[str, Any] = field(default_factory=dict)
    binary: Dict[str, BinaryData] = field(default_factory=dict)
    paired_item: Optional[int] = None


@dataclass
class HttpRequest:
    """Description of an outbound HTTP request.

    ``json`` is sent as a JSON body, ``data`` and ``files`` as a multipart
    form. ``encoding`` selects how the host decodes the response body.
    """
    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    params: Dict[str, Any] = field(default_factory=dict)
    json: Any = None
    data: Optional[Dict[str, Any]] = None
    files: Optional[Dict[str, Any]] = None
    encoding: str = ENCODING_JSON

    def with_headers(self, **headers: str) -> 'HttpRequest':
        """Return a copy of the request with extra headers."""
        merged = dict(self.headers)
        merged.update(headers)
        return replace(self, headers=merged)
