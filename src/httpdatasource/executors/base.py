"""
base.py
-------
Defines the BaseExecutor interface for data source executors.
Executors receive the raw attributes of one read and must not keep state
between calls.
"""
from ..context import ExecutionContext


class BaseExecutor:
    def execute(self, params: dict, context: ExecutionContext) -> dict:
        """
        params: data source attributes as handed over by the host engine
        context: cancellation and deadline of the current read
        Returns: dict with result data
        """
        raise NotImplementedError
