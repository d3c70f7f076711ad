"""
transport.py
------------
Issues exactly one HTTP request per read on a fresh requests session whose
HTTPS adapter carries the per-read SSL context.
"""
import ssl
from contextlib import contextmanager
from typing import Iterator, Mapping, Optional

import requests
from requests.adapters import HTTPAdapter

from .config import settings
from .context import ExecutionContext
from .exceptions import Cancelled, RequestBuildError, TransportError
from .log import get_logger

logger = get_logger(__name__)


class TLSAdapter(HTTPAdapter):
    """HTTPAdapter whose certificate verification is driven by an SSLContext."""

    def __init__(self, ssl_context: ssl.SSLContext, **kwargs):
        self.ssl_context = ssl_context
        super().__init__(**kwargs)

    def init_poolmanager(self, connections, maxsize, block=False, **pool_kwargs):
        pool_kwargs["ssl_context"] = self.ssl_context
        super().init_poolmanager(connections, maxsize, block=block, **pool_kwargs)

    def proxy_manager_for(self, proxy, **proxy_kwargs):
        proxy_kwargs["ssl_context"] = self.ssl_context
        return super().proxy_manager_for(proxy, **proxy_kwargs)

    def cert_verify(self, conn, url, verify, cert):
        # trust store and client identity already live in ssl_context
        return


def build_request(
    session: requests.Session,
    method: str,
    url: str,
    headers: Mapping[str, str],
    body: Optional[bytes] = None,
) -> requests.PreparedRequest:
    request = requests.Request(method, url, data=body)
    for name, value in headers.items():
        request.headers[name] = value
    try:
        return session.prepare_request(request)
    except (requests.exceptions.RequestException, ValueError) as e:
        raise RequestBuildError(f"Error creating request: {e}", cause=e) from e


def send(
    session: requests.Session,
    prepared: requests.PreparedRequest,
    context: ExecutionContext,
) -> requests.Response:
    send_kwargs = session.merge_environment_settings(prepared.url, {}, True, None, None)
    # trust store lives in the pinned SSL context; a CA bundle from the
    # environment would be loaded on top of it
    send_kwargs["verify"] = True
    timeout = context.remaining()
    if timeout is None:
        timeout = settings.SOCKET_TIMEOUT
    try:
        return context.run(session.send, prepared, timeout=timeout, **send_kwargs)
    except (Cancelled, requests.exceptions.RequestException) as e:
        logger.warning("Request failed", method=prepared.method, url=prepared.url, error=str(e))
        raise TransportError(f"Error making request: {e}", cause=e) from e


@contextmanager
def open_response(
    method: str,
    url: str,
    headers: Mapping[str, str],
    body: Optional[bytes],
    ssl_context: ssl.SSLContext,
    context: ExecutionContext,
) -> Iterator[requests.Response]:
    """
    Yield the raw, still unread response. The response and its session are
    released when the block exits, whatever the exit path.
    """
    session = requests.Session()
    session.mount("https://", TLSAdapter(ssl_context))
    try:
        prepared = build_request(session, method, url, headers, body)
        logger.info("Sending request", method=prepared.method, url=prepared.url)
        response = send(session, prepared, context)
        try:
            logger.info("Response received", url=prepared.url, status_code=response.status_code)
            yield response
        finally:
            response.close()
    finally:
        session.close()
