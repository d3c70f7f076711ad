"""
resolver.py
-----------
Derives the effective verb and body of the request from the declared inputs.
Empty strings count as undeclared, the way the host engine reports unset
attributes.
"""
from typing import NamedTuple, Optional

from .log import get_logger
from .models import RequestSpec
from .utils.validation import validate_method

logger = get_logger(__name__)

DEFAULT_METHOD = "GET"
BODY_METHOD = "POST"


class ResolvedRequest(NamedTuple):
    method: str
    body: Optional[str]

    def payload(self) -> Optional[bytes]:
        if self.body is None:
            return None
        return self.body.encode("utf-8")


def resolve(spec: RequestSpec) -> ResolvedRequest:
    """
    An explicit method always wins. Without one, a declared body implies POST
    and everything else is GET. A body is sent even when the override is GET.
    """
    method = DEFAULT_METHOD
    body = spec.request_body or None
    if body is not None:
        method = BODY_METHOD
    if spec.method:
        validate_method(spec.method)
        method = spec.method
    logger.debug("Request resolved", method=method, url=spec.url, has_body=body is not None)
    return ResolvedRequest(method, body)
