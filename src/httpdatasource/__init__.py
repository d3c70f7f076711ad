# Re-export main modules and objects for easier imports
from .config import settings
from .context import ExecutionContext
from .data_source import read
from .exceptions import (
    HTTPDataSourceError,
    ValidationError,
    ConfigurationError,
    RequestBuildError,
    TransportError,
    ResponseStatusError,
    ResponseReadError,
)
from .executors import HTTPExecutor
from .log import configure_logging
from .models import RequestSpec, TLSMaterial, ResponseResult, Diagnostic, ReadResult, Severity
