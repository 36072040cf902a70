"""
The "dumb" transform: remove async and await by deleting text.

Use this only when the structural rewrite can not do what you need (usually because an `await` sits inside the
arguments of an opaque call).  It does not parse anything. It deletes every occurrence of `"async "` and of `"await "`
from the text, wherever they are.  This means that **an identifier (or string) which ends in `async` or `await` and is
followed by a space gets mangled**, e.g. `use_async = True` turns into `use_= True`.  Check your names before using it.

The reverse also holds: a keyword *not* followed by a plain space is left in place.  The parenthesised form
`await(get_string())`, and `async` followed by a tab or a line break, survive the transform (and the result then fails
to compile).  Write `await get_string()` with a single space in functions meant for this remover.
"""

__all__ = ["ASYNC_TOKEN", "AWAIT_TOKEN", "remove_async_await_text"]

ASYNC_TOKEN = "async "
AWAIT_TOKEN = "await "


def remove_async_await_text(text: str) -> str:
    return text.replace(ASYNC_TOKEN, "").replace(AWAIT_TOKEN, "")
