from .base import BaseExecutor
from .http_exec import HTTPExecutor
