"""
In this module, we go from a unit of async source code (or its tree) to its synchronous equivalent.
"""
import ast
import logging
from copy import deepcopy
from typing import Optional

from remove_async_await.errors import UnasyncUsageError
from remove_async_await.parse import get_function_def
from remove_async_await.parse import parse
from remove_async_await.parse import unparse
from remove_async_await.rewrite.opaque import OpaqueRegionPolicy
from remove_async_await.rewrite.structural import RemoveAsyncAwait

__all__ = ["remove_async_await_function", "remove_async_await_tree", "remove_async_await_source"]

logger = logging.getLogger(__name__)


def remove_async_await_function(node: ast.AST, policy: Optional[OpaqueRegionPolicy] = None) -> ast.FunctionDef:
    """
    Given a function definition, return a new, synchronous definition.  The given node is not modified.

    Raises UnasyncUsageError if the node is anything other than a function (or method) definition.
    """
    if not isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef)):
        raise UnasyncUsageError(type(node).__name__, lineno=getattr(node, "lineno", None))

    result = RemoveAsyncAwait(policy).visit(deepcopy(node))
    assert isinstance(result, ast.FunctionDef)
    return result


def remove_async_await_tree(
    tree: ast.Module, policy: Optional[OpaqueRegionPolicy] = None, filename: Optional[str] = None
) -> ast.Module:
    """
    Rewrite a parsed unit which holds exactly one function definition. Comments that sit next to the definition in
    the module body are kept in place.  Returns a new module, the given tree is not modified.
    """
    definition = get_function_def(tree, filename)
    body = [remove_async_await_function(n, policy) if n is definition else deepcopy(n) for n in tree.body]
    return ast.Module(body=body, type_ignores=list(tree.type_ignores))


def remove_async_await_source(
    source: str, policy: Optional[OpaqueRegionPolicy] = None, filename: str = "<unknown>"
) -> str:
    """
    Structural transform of one function-shaped unit of source: decorators, docstring and comments are passed
    through, `async` is dropped from the definition and every reachable `await` is unwrapped.

    e.g:

    >>> remove_async_await_source("async def f():\\n    return await g()\\n")
    'def f():\\n    return g()'
    """
    logger.debug("Input: %s", source)
    tree = parse(source, filename)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Parsed input: %s", ast.dump(tree, indent=2))

    output = unparse(remove_async_await_tree(tree, policy, filename))
    logger.debug("Output: %s", output)
    return output
