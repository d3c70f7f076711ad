"""
http_exec.py
------------
Implements HTTPExecutor, which performs the single request of an HTTP data
source read: resolve the verb, build the SSL context, send, normalize.
"""
from typing import Optional, Tuple

import pydantic

from ..context import ExecutionContext
from ..exceptions import ValidationError
from ..log import get_logger
from ..models import RequestSpec, ResponseResult, TLSMaterial
from ..resolver import resolve
from ..response import normalize
from ..tls import build_ssl_context
from ..transport import open_response
from .base import BaseExecutor

logger = get_logger(__name__)

REQUEST_FIELDS = ("url", "method", "request_headers", "request_body")
TLS_FIELDS = ("ca", "client_crt", "client_key")


def parse_attributes(params: dict) -> Tuple[RequestSpec, TLSMaterial]:
    try:
        spec = RequestSpec(**{k: params[k] for k in REQUEST_FIELDS if params.get(k) is not None})
        material = TLSMaterial(**{k: params[k] for k in TLS_FIELDS if params.get(k) is not None})
    except pydantic.ValidationError as e:
        # include_input=False keeps client_key out of the message
        errors = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors(include_input=False)
        )
        raise ValidationError(f"Invalid data source attributes: {errors}", cause=e) from e
    return spec, material


class HTTPExecutor(BaseExecutor):
    def execute(self, params, context):
        spec, material = parse_attributes(params)
        return self.read(spec, material, context).model_dump()

    def read(
        self,
        spec: RequestSpec,
        material: Optional[TLSMaterial] = None,
        context: Optional[ExecutionContext] = None,
    ) -> ResponseResult:
        context = context or ExecutionContext()
        resolved = resolve(spec)
        ssl_context = build_ssl_context(material)
        with open_response(
            resolved.method,
            spec.url,
            spec.request_headers,
            resolved.payload(),
            ssl_context,
            context,
        ) as response:
            return normalize(response, spec.url, context)
