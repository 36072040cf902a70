"""
The boundary of what the structural rewriter is allowed to look at.

Python has no macros, but some calls take arguments whose meaning is decided by the callee rather than by the language
(e.g. code handed to a different event loop, or a logging helper that must see exactly what was written).  Callees
registered here own their argument region: the rewriter copies those arguments verbatim and never looks inside them.
The callee expression itself is still rewritten as usual.
"""
import ast
from dataclasses import dataclass
from dataclasses import field
from typing import FrozenSet
from typing import Iterable
from typing import Optional

from remove_async_await.util import dotted_name

__all__ = ["OpaqueRegionPolicy"]


@dataclass(frozen=True)
class OpaqueRegionPolicy:
    opaque_calls: FrozenSet[str] = field(default_factory=frozenset)
    """Dotted callee names (e.g. `print`, `log.info`) whose call arguments must not be rewritten"""

    @classmethod
    def from_names(cls, names: Optional[Iterable[str]]) -> "OpaqueRegionPolicy":
        if isinstance(names, str):
            raise TypeError("opaque_calls must be a collection of dotted names, not a single string")
        return cls(frozenset(names or ()))

    def is_opaque(self, node: ast.Call) -> bool:
        """True if the argument region of this call must be left exactly as written"""
        if not self.opaque_calls:
            return False
        name = dotted_name(node.func)
        return name is not None and name in self.opaque_calls
