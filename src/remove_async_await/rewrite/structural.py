import ast
from typing import Optional
from typing import Type
from typing import TypeVar

from remove_async_await.parse.ast_util import copy_ast_line_info
from remove_async_await.rewrite.opaque import OpaqueRegionPolicy

__all__ = ["RemoveAsyncAwait"]

_NodeT = TypeVar("_NodeT", bound=ast.AST)


def _as_sync_node(node: ast.AST, sync_class: Type[_NodeT]) -> _NodeT:
    """Build the synchronous twin of an async statement. All fields (and position info) are carried over unchanged"""
    return sync_class(**dict(ast.iter_fields(node)), **copy_ast_line_info(node))


class RemoveAsyncAwait(ast.NodeTransformer):
    """
    Walk a tree depth-first and take the asynchrony out of it:

      * `async def` becomes `def` (for the unit itself and for every nested function)
      * `async for` / `async with` become `for` / `with`
      * async comprehensions become ordinary comprehensions
      * `await <expr>` is replaced by `<expr>`

    The `await` removal is a tree operation rather than a text edit, so the grouping of the inner expression is kept
    exactly (`-(await f())` unparses as `-f()`, `(await f()).x` as `f().x`).

    Every shape without a rule below goes through `generic_visit()`, which visits all of its children.  The one
    exception is a call which the opaque region policy claims: only its callee is visited.

    Note: the visitor rewrites the tree it is given, in place. Callers wanting to keep their input intact must hand
    it a copy (see `conversion.remove_async_await_function()`).
    """

    policy: OpaqueRegionPolicy

    def __init__(self, policy: Optional[OpaqueRegionPolicy] = None) -> None:
        self.policy = policy or OpaqueRegionPolicy()

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef) -> ast.AST:
        return self.generic_visit(_as_sync_node(node, ast.FunctionDef))

    def visit_AsyncFor(self, node: ast.AsyncFor) -> ast.AST:
        return self.generic_visit(_as_sync_node(node, ast.For))

    def visit_AsyncWith(self, node: ast.AsyncWith) -> ast.AST:
        return self.generic_visit(_as_sync_node(node, ast.With))

    def visit_comprehension(self, node: ast.comprehension) -> ast.AST:
        node.is_async = 0
        return self.generic_visit(node)

    def visit_Await(self, node: ast.Await) -> ast.AST:
        return self.visit(node.value)

    def visit_Call(self, node: ast.Call) -> ast.AST:
        if self.policy.is_opaque(node):
            # args and keywords are copied as written
            node.func = self.visit(node.func)
            return node
        return self.generic_visit(node)
