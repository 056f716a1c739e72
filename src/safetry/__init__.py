"""safetry: exception-free results for sync and async operations.

Public API:
    - catch(): Wrap a value-returning or awaitable-returning operation
    - catch_cancellable(): Same, handing each attempt a CancelToken
    - sleep(): Millisecond delay helper
    - Result: Success/failure value
    - AsyncOperation: Chainable timeout/retry/backoff handle

Example:
    result = await catch(lambda: client.get(url)).with_timeout(3000).with_retry(2)
    if result.error is not None:
        ...
"""

from __future__ import annotations

import logging

from safetry.cancellation import CancelToken
from safetry.config import BackoffConfig, ExecutionConfig
from safetry.errors import (
    ConfigurationError,
    InternalError,
    InvalidInputError,
    OperationTimeoutError,
    RetryExhaustedError,
    SafeTryError,
    UnwrapError,
)
from safetry.executor import execute, sleep
from safetry.operation import AsyncOperation, catch, catch_cancellable
from safetry.result import Result
from safetry.settings import Settings, clear_settings_cache, resolve_settings

try:
    from importlib.metadata import PackageNotFoundError, version

    __version__ = version("safetry")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"

# Library-level NullHandler: stay silent unless the consumer configures logging.
logging.getLogger("safetry").addHandler(logging.NullHandler())

__all__ = [
    "AsyncOperation",
    "BackoffConfig",
    "CancelToken",
    "ConfigurationError",
    "ExecutionConfig",
    "InternalError",
    "InvalidInputError",
    "OperationTimeoutError",
    "Result",
    "RetryExhaustedError",
    "SafeTryError",
    "Settings",
    "UnwrapError",
    "catch",
    "catch_cancellable",
    "clear_settings_cache",
    "execute",
    "resolve_settings",
    "sleep",
]
