"""
In this subpackage, we turn a unit of source code into a syntax tree and back again.  Parsing goes through
`ast_comments` (which wraps the standard `ast.parse()`) so that comments in the unit are carried into the tree and
written back out by `unparse()`.

Nothing here knows about async or await.  The rewriting itself lives in the `rewrite` subpackage.
"""

from .ast_util import FunctionNode, PrivateNameMangler, get_function_def, parse, unparse

__all__ = ["FunctionNode", "PrivateNameMangler", "get_function_def", "parse", "unparse"]
