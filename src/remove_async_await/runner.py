import ast
import builtins
import inspect
import logging
from functools import partial
from textwrap import dedent
from types import CellType
from types import CodeType
from types import FunctionType
from typing import Any
from typing import Callable
from typing import Dict
from typing import List
from typing import Optional
from typing import Union

from more_itertools import one

from remove_async_await.errors import UnasyncUsageError
from remove_async_await.parse import FunctionNode
from remove_async_await.parse import PrivateNameMangler
from remove_async_await.parse import get_function_def
from remove_async_await.parse import parse
from remove_async_await.util import dotted_name
from remove_async_await.util import resolve_dotted_name

__all__ = ["REMOVER_MARKER", "SourceUnit"]

logger = logging.getLogger(__name__)

REMOVER_MARKER = "__remove_async_await__"
"""Objects carrying this attribute (set to True) are recognized as the remover when found in a decorator list"""

_SCOPE_NAME = "__remove_async_await_scope__"
_FACTORY_NAME = "__remove_async_await_factory__"


def _nested_code(code: CodeType, name: str) -> CodeType:
    return one(const for const in code.co_consts if isinstance(const, CodeType) and const.co_name == name)


class SourceUnit:
    """
    The source of one function (or method), together with where it came from: the file it was read from, the line it
    starts on, the namespace it was defined in and the closure cells it shares with its enclosing scopes.

    Facilitates declaring a new version of the function in that same scope, so that the new definition sees the
    same globals, imports, enclosing variables and `__class__` as the original.
    """

    name: str
    """The name the definition is bound to (for a raw string unit, whatever name the caller gave it)"""

    qualname: str

    filename: Optional[str]
    """The filename, if applicable. This will be None if source was a raw string (e.g. in a test case)"""

    namespace: Dict[str, Any]
    """Globals for the new definition: the module dict of the original function"""

    free_cells: Dict[str, CellType]
    """Closure cells of the original function by variable name (includes `__class__` for methods using `super()`)"""

    code_name: Optional[str]
    """Name of the original function's code object, which must match the name of the definition that was read"""

    source_code: str
    """The source of the unit alone, dedented so that a method parses as a top-level function"""

    first_line: int
    """Line number (1-based) in `filename` of the first line of `source_code`"""

    def __init__(
        self,
        code: Union[Callable[..., Any], str],
        name: str = "<unit>",
        namespace: Optional[Dict[str, Any]] = None,
    ) -> None:
        if isinstance(code, str):
            self.name = self.qualname = name
            self.filename = None
            self.namespace = namespace if namespace is not None else {}
            self.free_cells = {}
            self.code_name = None
            self.source_code = dedent(code)
            self.first_line = 1
            return

        if isinstance(code, partial):
            func = code.func
        elif isinstance(code, (staticmethod, classmethod)):
            func = code.__func__
        else:
            func = code
        func = inspect.unwrap(func)

        self.name = getattr(func, "__name__", name)
        self.qualname = getattr(func, "__qualname__", self.name)
        self.namespace = namespace if namespace is not None else getattr(func, "__globals__", {})

        func_code = getattr(func, "__code__", None)
        self.code_name = func_code.co_name if func_code is not None else None
        self.free_cells = dict(zip(func_code.co_freevars, func.__closure__ or ())) if func_code is not None else {}

        try:
            self.filename = inspect.getsourcefile(func)
            lines, line_no = inspect.getsourcelines(func)
        except (TypeError, OSError) as e:
            # builtins, callable instances, and functions made by exec() or typed into a REPL have no source to read
            raise UnasyncUsageError(type(code).__name__, getattr(func_code, "co_filename", None)) from e
        self.source_code = dedent("".join(lines))
        self.first_line = line_no

    @property
    def owner_class(self) -> Optional[str]:
        """Name of the class whose body holds the definition, if any (taken from the qualified name)"""
        parts = self.qualname.split(".")
        if len(parts) < 2 or parts[-2] == "<locals>":
            return None
        return parts[-2]

    def parse(self, source: Optional[str] = None) -> ast.Module:
        """
        Parse this unit (or a rewritten text of it) into a tree ready for `compile()`.  Line numbers are shifted so
        that they refer to lines in the original file.
        """
        try:
            tree = parse(self.source_code if source is None else source, self.filename or "<unknown>", False)
        except SyntaxError as e:
            if e.lineno is not None:
                e.lineno += self.first_line - 1
            if getattr(e, "end_lineno", None) is not None:
                e.end_lineno += self.first_line - 1
            raise

        ast.increment_lineno(tree, self.first_line - 1)
        return tree

    def is_remover(self, decorator: ast.expr) -> bool:
        """True if the decorator expression refers to a remover (e.g. `@remove_async_await`, `@AsyncRemover(...)`)"""
        target = decorator.func if isinstance(decorator, ast.Call) else decorator
        name = dotted_name(target)
        if name is None:
            return False
        return getattr(resolve_dotted_name(name, self.namespace), REMOVER_MARKER, False) is True

    def remaining_decorators(self, definition: FunctionNode) -> List[ast.expr]:
        """
        Decorators listed below the remover have not been applied yet when the remover runs, so they stay on the
        new definition.  The remover itself, and anything above it, will be applied by Python to whatever the remover
        returns, so they must be dropped.
        """
        decorators = definition.decorator_list
        for index in reversed(range(len(decorators))):
            if self.is_remover(decorators[index]):
                return decorators[index + 1 :]

        logger.debug(
            "No remover found in the decorators of %s, dropping all %d of them", self.qualname, len(decorators)
        )
        return []

    def scope_tree(self, definition: FunctionNode, decorators: List[ast.expr]) -> ast.Module:
        """
        Nest the definition in two generated functions which rebuild the scope it was written in:

        >>> def __remove_async_await_scope__():
        >>>     prefix = None  # one for each free variable of the original (`__class__` included)
        >>>     def __remove_async_await_factory__():
        >>>         def greet(name): ...
        >>>         greet.__qualname__ = "make.<locals>.greet"
        >>>         greet = decorator(greet)  # the remaining decorators, innermost first
        >>>         return greet

        Compiled this way, the definition refers to those variables as free variables of the factory.  The factory is
        then bound to the original closure cells (see `compile_function()`).
        """
        name = definition.name
        scope = ast.parse(f"def {_SCOPE_NAME}():\n    def {_FACTORY_NAME}():\n        pass\n")
        outer = scope.body[0]
        assert isinstance(outer, ast.FunctionDef)
        factory = outer.body[0]
        assert isinstance(factory, ast.FunctionDef)

        outer.body[:0] = [ast.parse(f"{variable} = None").body[0] for variable in self.free_cells]
        factory.body = [definition] + ast.parse(f"{name}.__qualname__ = {self.qualname!r}").body
        for decorator in reversed(decorators):
            apply = ast.Assign(
                targets=[ast.Name(id=name, ctx=ast.Store())],
                value=ast.Call(func=decorator, args=[ast.Name(id=name, ctx=ast.Load())], keywords=[]),
            )
            factory.body.append(ast.copy_location(apply, decorator))
        factory.body.append(ast.Return(value=ast.Name(id=name, ctx=ast.Load())))
        return ast.fix_missing_locations(scope)

    def compile_function(self, tree: ast.Module) -> Any:
        """
        Take the given (rewritten) unit and declare it within the scope of the original function: its module
        globals, and the closure cells it shares with enclosing functions and with its class.  The module itself is
        left untouched, the new object is returned.
        """
        definition = get_function_def(tree, self.filename)
        if self.code_name is not None and definition.name != self.code_name:
            raise UnasyncUsageError(
                f"the definition of '{definition.name}' (the source read for '{self.code_name}')",
                self.filename,
                definition.lineno,
            )

        decorators = self.remaining_decorators(definition)
        definition.decorator_list = []
        owner = self.owner_class
        if owner is not None:
            mangler = PrivateNameMangler(owner)
            definition = mangler.visit(definition)
            decorators = [mangler.visit(decorator) for decorator in decorators]

        compiled = compile(self.scope_tree(definition, decorators), self.filename or "<unknown>", mode="exec")
        factory_code = _nested_code(_nested_code(compiled, _SCOPE_NAME), _FACTORY_NAME)
        closure = tuple(self.free_cells[variable] for variable in factory_code.co_freevars)

        self.namespace.setdefault("__builtins__", builtins)
        factory = FunctionType(factory_code, self.namespace, _FACTORY_NAME, None, closure)
        return factory()
