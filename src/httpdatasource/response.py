"""
response.py
-----------
Turns a raw response into a ResponseResult: status acceptance, content-type
sanity check, header flattening and body extraction.
"""
import re
from typing import Dict, Mapping, Optional, Tuple

import requests

from .context import ExecutionContext
from .exceptions import (
    Cancelled,
    HTTPDataSourceError,
    ResponseReadError,
    ResponseStatusError,
    TransportError,
)
from .log import get_logger
from .models import ResponseResult

logger = get_logger(__name__)

ACCEPTED_STATUS_CODES = frozenset({200, 201, 202, 204})

# Anything else may be binary and unprintable once stored as a string
TEXT_CONTENT_TYPES = [
    re.compile(r"^text/.+"),
    re.compile(r"^application/json$"),
    re.compile(r"^application/samlmetadata\+xml"),
]
TEXT_CHARSETS = {"", "utf-8", "us-ascii"}

_TOKEN = r"[!#$%&'*+\-.^_`|~0-9A-Za-z]+"
_MEDIA_TYPE = re.compile(rf"\s*({_TOKEN}(?:/{_TOKEN})?)\s*")
_PARAMETER = re.compile(rf';\s*({_TOKEN})\s*=\s*({_TOKEN}|"(?:[^"\\]|\\.)*")\s*')
_QUOTED_PAIR = re.compile(r"\\(.)")
_FIRST_LIST_ELEMENT = re.compile(r'(?:[^,"]|"(?:[^"\\]|\\.)*")*')


def parse_media_type(value: str) -> Optional[Tuple[str, Dict[str, str]]]:
    """
    Split a Content-Type value into its lower-cased media type and parameters.
    Returns None when the value is malformed or repeats a parameter.
    """
    match = _MEDIA_TYPE.match(value)
    if not match:
        return None
    media_type = match.group(1).lower()
    params: Dict[str, str] = {}
    rest = value[match.end():]
    while rest.strip():
        param = _PARAMETER.match(rest)
        if not param:
            if rest.strip() == ";":
                break  # trailing semicolon
            return None
        key = param.group(1).lower()
        raw = param.group(2)
        if raw.startswith('"'):
            raw = _QUOTED_PAIR.sub(r"\1", raw[1:-1])
        if key in params:
            return None
        params[key] = raw
        rest = rest[param.end():]
    return media_type, params


def is_text_content_type(content_type: str) -> bool:
    parsed = parse_media_type(content_type)
    if parsed is None:
        return False
    media_type, params = parsed
    for pattern in TEXT_CONTENT_TYPES:
        if pattern.match(media_type):
            return params.get("charset", "").lower() in TEXT_CHARSETS
    return False


def first_header_value(headers, name: str) -> str:
    """
    First occurrence of a header. Mappings that already joined repeated
    lines keep only the part before the first unquoted comma.
    """
    if hasattr(headers, "getlist"):
        values = headers.getlist(name)
        return values[0] if values else ""
    value = headers.get(name, "")
    return _FIRST_LIST_ELEMENT.match(value).group(0).strip()


def content_type_warning(headers: Mapping[str, str]) -> Optional[str]:
    content_type = first_header_value(headers, "Content-Type")
    if content_type and is_text_content_type(content_type):
        return None
    return f'Content-Type is not recognized as a text type, got "{content_type}"'


def _raw_headers(response: requests.Response):
    raw_headers = getattr(response.raw, "headers", None)
    if raw_headers is not None and hasattr(raw_headers, "getlist"):
        return raw_headers
    return response.headers


def flatten_headers(response: requests.Response) -> Dict[str, str]:
    """Join repeated header values with ", " (RFC 2616 section 4.2)."""
    headers = _raw_headers(response)
    if hasattr(headers, "getlist"):
        return {name: ", ".join(headers.getlist(name)) for name in headers}
    return dict(headers)


def read_body(response: requests.Response) -> str:
    try:
        content = response.content
    except requests.exceptions.RequestException as e:
        raise ResponseReadError(f"Error reading response body: {e}", cause=e) from e
    return content.decode("utf-8", errors="replace")


def _read(response: requests.Response, context: Optional[ExecutionContext]) -> str:
    if context is None:
        return read_body(response)
    try:
        return context.run(read_body, response)
    except Cancelled as e:
        raise TransportError(f"Error making request: {e}", cause=e) from e


def check_status(response: requests.Response, context: Optional[ExecutionContext] = None) -> None:
    # TODO: accept status codes per verb (e.g. 205 for DELETE) once callers need it
    if response.status_code in ACCEPTED_STATUS_CODES:
        return
    try:
        body = _read(response, context)
    except HTTPDataSourceError:
        body = None
    logger.warning("Response status rejected", status_code=response.status_code)
    raise ResponseStatusError(response.status_code, body)


def normalize(
    response: requests.Response,
    url: str,
    context: Optional[ExecutionContext] = None,
) -> ResponseResult:
    check_status(response, context)

    headers = _raw_headers(response)
    warning = content_type_warning(headers)
    if warning:
        logger.warning("Unrecognized content type", content_type=first_header_value(headers, "Content-Type"))

    body = _read(response, context)
    return ResponseResult(
        id=url,
        body=body,
        response_headers=flatten_headers(response),
        status_code=response.status_code,
        content_type_warning=warning,
    )
