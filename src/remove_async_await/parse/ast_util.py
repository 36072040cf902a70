import ast
from typing import Any
from typing import List
from typing import Mapping
from typing import Optional
from typing import Union

import ast_comments  # type: ignore
from more_itertools import one
from typing_extensions import cast

from remove_async_await.errors import UnasyncUsageError

__all__ = [
    "FunctionNode",
    "PrivateNameMangler",
    "parse",
    "unparse",
    "get_function_def",
    "copy_ast_line_info",
    "code_statements",
]

FunctionNode = Union[ast.FunctionDef, ast.AsyncFunctionDef]
"""A function or method definition, either with or without the `async` qualifier"""


def parse(source: Union[str, bytes], filename: str = "<unknown>", keep_comments: bool = True) -> ast.Module:
    """
    Parse a unit of source into a module tree.  When `keep_comments` is set, the `ast_comments` parser is used so
    that `# ...` comments appear in the tree (as `ast_comments.Comment` nodes) and survive a trip through `unparse()`.
    Such a tree can not be compiled; parse with `keep_comments=False` when the result is headed for `compile()`.
    """
    if keep_comments:
        return cast(ast.Module, ast_comments.parse(source, filename, "exec"))
    return ast.parse(source, filename, "exec")


def unparse(ast_obj: ast.AST) -> str:
    return cast(str, ast_comments.unparse(ast_obj))


def code_statements(body: List[ast.AST]) -> List[ast.AST]:
    """Statements of the given body, leaving out any comment nodes"""
    return [node for node in body if not isinstance(node, ast_comments.Comment)]


def get_function_def(tree: ast.Module, filename: Optional[str] = None) -> FunctionNode:
    """
    A unit of source must hold exactly one function definition (decorators, docstring and comments included).  Find
    it, or raise UnasyncUsageError naming what was found instead.
    """
    statements = code_statements(tree.body)
    too_long = None
    if len(statements) > 1:
        too_long = UnasyncUsageError(f"{len(statements)} statements", filename, statements[1].lineno)

    definition = one(
        statements,
        too_short=UnasyncUsageError("an empty unit", filename, 1),
        too_long=too_long,
    )
    if not isinstance(definition, (ast.FunctionDef, ast.AsyncFunctionDef)):
        raise UnasyncUsageError(type(definition).__name__, filename, getattr(definition, "lineno", None))
    return definition


def copy_ast_line_info(node: ast.AST) -> Mapping[str, Any]:
    """Extract the line and position attributes from a node so they can initialize a new node"""
    return dict(
        lineno=node.lineno,
        col_offset=node.col_offset,
        end_lineno=node.end_lineno,
        end_col_offset=node.end_col_offset,
    )


class PrivateNameMangler(ast.NodeTransformer):
    """
    Apply the compiler's private name mangling (`self.__secret` -> `self._Vault__secret`) to a definition that was
    lifted out of the body of class `class_name`, so that it still finds the names it found before.

    The name of the definition handed to `visit()` is left as it is.  Nested classes are mangled by the compiler with
    their own name, so only their name and header are visited.
    """

    def __init__(self, class_name: str) -> None:
        self.prefix = "_" + class_name.lstrip("_")
        self._top: Optional[ast.AST] = None

    def mangle(self, name: str) -> str:
        if self.prefix == "_" or not name.startswith("__") or name.endswith("__") or "." in name:
            return name
        return self.prefix + name

    def visit(self, node: ast.AST) -> Any:
        if self._top is None:
            self._top = node
        return super().visit(node)

    def visit_Name(self, node: ast.Name) -> ast.Name:
        node.id = self.mangle(node.id)
        return node

    def visit_Attribute(self, node: ast.Attribute) -> ast.Attribute:
        node.attr = self.mangle(node.attr)
        self.generic_visit(node)
        return node

    def visit_arg(self, node: ast.arg) -> ast.arg:
        node.arg = self.mangle(node.arg)
        self.generic_visit(node)
        return node

    def visit_keyword(self, node: ast.keyword) -> ast.keyword:
        if node.arg is not None:
            node.arg = self.mangle(node.arg)
        self.generic_visit(node)
        return node

    def visit_Global(self, node: ast.Global) -> ast.Global:
        node.names = [self.mangle(name) for name in node.names]
        return node

    def visit_Nonlocal(self, node: ast.Nonlocal) -> ast.Nonlocal:
        node.names = [self.mangle(name) for name in node.names]
        return node

    def visit_FunctionDef(self, node: ast.FunctionDef) -> ast.FunctionDef:
        if node is not self._top:
            node.name = self.mangle(node.name)
        self.generic_visit(node)
        return node

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef) -> ast.AsyncFunctionDef:
        if node is not self._top:
            node.name = self.mangle(node.name)
        self.generic_visit(node)
        return node

    def visit_ClassDef(self, node: ast.ClassDef) -> ast.ClassDef:
        node.name = self.mangle(node.name)
        node.bases = [self.visit(base) for base in node.bases]
        node.keywords = [self.visit(keyword) for keyword in node.keywords]
        node.decorator_list = [self.visit(decorator) for decorator in node.decorator_list]
        return node
