"""
Rewriting comes in two flavours:

1. Structural (the default). The unit is parsed and `RemoveAsyncAwait` walks the tree, dropping `async` from
   definitions, loops, context managers and comprehensions, and unwrapping every `await` it can reach.  Arguments of
   calls registered with the `OpaqueRegionPolicy` are left exactly as written.

2. Textual (the fallback). The `async ` and `await ` tokens are deleted from the text without looking at its
   structure. See the warning in `textual`.
"""
from .opaque import OpaqueRegionPolicy  # noreorder
from .structural import RemoveAsyncAwait
from .conversion import remove_async_await_function
from .conversion import remove_async_await_source
from .conversion import remove_async_await_tree
from .textual import remove_async_await_text

__all__ = [
    "OpaqueRegionPolicy",
    "RemoveAsyncAwait",
    "remove_async_await_function",
    "remove_async_await_source",
    "remove_async_await_text",
    "remove_async_await_tree",
]
