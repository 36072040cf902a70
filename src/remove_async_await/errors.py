from typing import Optional

__all__ = ["UnasyncError", "UnasyncUsageError"]


class UnasyncError(Exception):
    """Base class for errors raised while removing async / await from a unit of source"""


class UnasyncUsageError(UnasyncError):
    """
    The unit handed to the rewriter is not a single function (or method) definition.  Nothing is produced when this
    is raised.
    """

    def __init__(self, kind: str, filename: Optional[str] = None, lineno: Optional[int] = None) -> None:
        super().__init__(kind, filename, lineno)
        self.kind = kind
        self.filename = filename
        self.lineno = lineno

    @property
    def location(self) -> str:
        return f"{self.filename or '<unknown>'}:{self.lineno if self.lineno is not None else '?'}"

    def __str__(self) -> str:
        return (
            f"{self.location}: remove_async_await currently only supports functions and methods, got {self.kind}. If "
            f"you are using it on a supported item, make sure the unit holds exactly one definition."
        )
