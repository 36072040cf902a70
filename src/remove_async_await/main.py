import logging
from typing import Any
from typing import Callable
from typing import ClassVar
from typing import FrozenSet
from typing import Iterable
from typing import Optional

from typing_extensions import ParamSpec

from remove_async_await.parse import unparse
from remove_async_await.rewrite import OpaqueRegionPolicy
from remove_async_await.rewrite import remove_async_await_source
from remove_async_await.rewrite import remove_async_await_text
from remove_async_await.rewrite import remove_async_await_tree
from remove_async_await.runner import SourceUnit

__all__ = [
    "AsyncRemover",
    "remove_async_await",
    "remove_async_await_string",
]

logger = logging.getLogger(__name__)

_P = ParamSpec("_P")


class AsyncRemover:
    """
    A function/method decorator which replaces an `async def` with its blocking twin, by rewriting the function's
    source and declaring the result in the function's own module.  For example:

    >>> ASYNC = False  # e.g. read from your package's build settings
    >>>
    >>> @AsyncRemover(enabled=not ASYNC)
    >>> async def get_string() -> str:
    >>>     return "hello world"
    >>>
    >>> @AsyncRemover(enabled=not ASYNC)
    >>> async def print_string() -> None:
    >>>     string = await get_string()
    >>>     print(string)

    With `ASYNC = False`, both functions above are plain functions and `print_string()` just runs.  With `ASYNC = True`
    the decorator hands the coroutine functions back untouched.

    **Structural vs Textual**

    By default, the function's tree is rewritten (see `rewrite.RemoveAsyncAwait`).  Calls registered in
    `opaque_calls` keep their arguments as written, so an `await` inside them is *not* removed (and the definition will
    then fail to compile).  Either move the awaited expression into a local variable first, or switch that one function
    to the textual remover (`remove_async_await_string`) which deletes `async ` and `await ` from the raw text.  Read
    the warning in `rewrite.textual` before doing so.

    **Other decorators**

    Decorators listed above the remover are applied by Python to the blocking function, as usual.  Decorators listed
    below it run twice: Python first applies them to the `async def` (that is what the remover receives), then they
    are applied again to the new blocking function.  A decorator with side effects, such as one which registers the
    function somewhere (`@router.get("/")`), therefore registers both versions.  Put the remover innermost (directly on
    the `async def`) and such decorators above it:

    >>> @router.get("/")
    >>> @remove_async_await
    >>> async def index() -> str:
    >>>     ...

    Decorators below the remover must use `functools.wraps`, so that the remover can find the original function.
    Their arguments are evaluated again in the function's module, along with the free variables of the function
    itself; a variable that only the decorator expression used in an enclosing function is not available there.

    **Configuration**

    Subclass and set the class level defaults, or pass the same values to the constructor:

    >>> class LoggingSafeRemover(AsyncRemover):
    >>>     opaque_calls = frozenset({"log.debug", "log.info"})
    """

    __remove_async_await__: ClassVar[bool] = True
    """Marks this class (and so every instance) as a remover when it shows up in a decorator list"""

    opaque_calls: ClassVar[FrozenSet[str]] = frozenset()
    """Dotted names of callees whose arguments must be left exactly as written"""

    textual: ClassVar[bool] = False
    """Use the textual fallback rather than the structural rewrite"""

    enabled: bool
    policy: OpaqueRegionPolicy
    use_textual: bool

    def __init__(
        self,
        enabled: bool = True,
        opaque_calls: Optional[Iterable[str]] = None,
        textual: Optional[bool] = None,
    ) -> None:
        self.enabled = enabled
        self.use_textual = self.textual if textual is None else textual
        self.policy = OpaqueRegionPolicy.from_names(self.opaque_calls if opaque_calls is None else opaque_calls)
        if self.use_textual and self.policy.opaque_calls:
            raise TypeError("opaque_calls has no effect with the textual remover. Set only one of these values.")

    def __init_subclass__(cls) -> None:
        super().__init_subclass__()
        if cls.textual and cls.opaque_calls:
            raise TypeError(
                f"Class '{cls}' defined with both 'textual' and 'opaque_calls'. The textual remover does not look at "
                f"calls, set only one of these values."
            )

    def __repr__(self) -> str:
        return (
            f"{type(self).__name__}(enabled={self.enabled!r}, opaque_calls={sorted(self.policy.opaque_calls)!r}, "
            f"textual={self.use_textual!r})"
        )

    def __call__(self, fn: Callable[_P, Any]) -> Callable[_P, Any]:
        if not self.enabled:
            return fn

        unit = SourceUnit(fn)
        logger.debug("Input (%s:%d): %s", unit.filename, unit.first_line, unit.source_code)
        if self.use_textual:
            tree = unit.parse(remove_async_await_text(unit.source_code))
        else:
            tree = remove_async_await_tree(unit.parse(), self.policy, unit.filename)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug("Output: %s", unparse(tree))

        return unit.compile_function(tree)

    def transform_source(self, source: str, filename: str = "<unknown>") -> str:
        """
        Same as decorating, but for a unit of source text rather than a live function: return the replacement text
        for the unit.  When disabled, the text is returned exactly as given.
        """
        if not self.enabled:
            return source
        if self.use_textual:
            return remove_async_await_text(source)
        return remove_async_await_source(source, self.policy, filename)


remove_async_await = AsyncRemover()
"""Remove `async` and `await` by rewriting the function's tree. This is the one you should almost always use."""

remove_async_await_string = AsyncRemover(textual=True)
"""
Remove `async` and `await` by deleting them from the function's text. Only use this when `remove_async_await`
doesn't work for your function: any name ending in `async` or `await` followed by a space will be broken.
"""
