import ast
import builtins
import importlib.util
import sys
from pathlib import Path
from types import ModuleType
from typing import Any
from typing import Mapping
from typing import Optional
from typing import TypeVar

__all__ = ["not_optional", "import_module_from_file", "dotted_name", "resolve_dotted_name"]

_T = TypeVar("_T")

_UNRESOLVED = object()


def not_optional(val: Optional[_T]) -> _T:
    """Raise TypeError if the given value is None"""
    if val is None:
        raise TypeError("Value cannot be None")
    return val


def import_module_from_file(module_name: str, module_file: Path) -> ModuleType:
    spec = not_optional(importlib.util.spec_from_file_location(module_name, str(module_file.absolute())))
    module = not_optional(importlib.util.module_from_spec(spec))
    sys.modules[module_name] = module
    not_optional(spec.loader).exec_module(module)
    return module


def dotted_name(node: ast.AST) -> Optional[str]:
    """
    Spell out a `Name` or a chain of `Attribute` lookups ending in a `Name` as a dotted string, e.g.
    `trio.from_thread.run`.  Any other expression shape has no dotted name and gives None.
    """
    parts = []
    while isinstance(node, ast.Attribute):
        parts.append(node.attr)
        node = node.value
    if not isinstance(node, ast.Name):
        return None
    parts.append(node.id)
    return ".".join(reversed(parts))


def resolve_dotted_name(name: str, namespace: Mapping[str, Any]) -> Any:
    """
    Look up a dotted name in the given namespace (falling back to builtins for the first part). Returns a sentinel
    which is never equal to anything else if any part can not be found, rather than raising.
    """
    head, *rest = name.split(".")
    obj = namespace.get(head, getattr(builtins, head, _UNRESOLVED))
    for attr in rest:
        if obj is _UNRESOLVED:
            break
        obj = getattr(obj, attr, _UNRESOLVED)
    return obj
