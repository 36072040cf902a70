from ._version import version as __version__

__all__ = [
    "__version__",
    "AsyncRemover",
    "OpaqueRegionPolicy",
    "UnasyncError",
    "UnasyncUsageError",
    "remove_async_await",
    "remove_async_await_source",
    "remove_async_await_string",
    "remove_async_await_text",
]

from .errors import UnasyncError, UnasyncUsageError
from .main import (
    AsyncRemover,
    remove_async_await,
    remove_async_await_string,
)
from .rewrite import (
    OpaqueRegionPolicy,
    remove_async_await_source,
    remove_async_await_text,
)
