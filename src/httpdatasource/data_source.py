"""
data_source.py
--------------
Entry point used by the host engine. Runs one read and reports the outcome
as a ReadResult: the computed attributes plus warning and error diagnostics.
"""
from typing import Optional

from .config import settings
from .context import ExecutionContext
from .exceptions import HTTPDataSourceError
from .executors.http_exec import HTTPExecutor
from .log import get_logger
from .models import Diagnostic, ReadResult, Severity

logger = get_logger(__name__)

CONTENT_TYPE_DETAIL = (
    "If the content is binary data, consumers of the response may not "
    "properly handle its contents."
)


def read(params: dict, context: Optional[ExecutionContext] = None) -> ReadResult:
    if context is None:
        context = ExecutionContext(timeout=settings.REQUEST_TIMEOUT)
    try:
        result = HTTPExecutor().execute(params, context)
    except HTTPDataSourceError as e:
        logger.error("Data source read failed", url=params.get("url"), error=e.message)
        return ReadResult(diagnostics=[Diagnostic(severity=Severity.ERROR, summary=e.message)])

    diagnostics = []
    if result["content_type_warning"]:
        diagnostics.append(
            Diagnostic(
                severity=Severity.WARNING,
                summary=result["content_type_warning"],
                detail=CONTENT_TYPE_DETAIL,
            )
        )
    return ReadResult(
        id=result["id"],
        body=result["body"],
        response_headers=result["response_headers"],
        diagnostics=diagnostics,
    )
