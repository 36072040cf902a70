import ast
import re
from textwrap import dedent

import ast_comments  # type: ignore
import pytest

from remove_async_await.errors import UnasyncUsageError
from remove_async_await.parse import PrivateNameMangler
from remove_async_await.parse import get_function_def
from remove_async_await.parse import parse
from remove_async_await.parse import unparse


def test_comments_survive_round_trip() -> None:
    """Comments are part of the unit's documentation and must come back out of unparse()"""
    source = dedent(
        """\
        async def documented(a: int) -> int:
            # I'm a comment
            return a + 1  # and I'm inline
        """
    )
    tree = parse(source)
    definition = tree.body[0]
    assert isinstance(definition, ast.AsyncFunctionDef)
    assert isinstance(definition.body[0], ast_comments.Comment)

    output = unparse(tree)
    assert "# I'm a comment" in output
    assert "# and I'm inline" in output


def test_parse_without_comments_compiles() -> None:
    tree = parse("def f():\n    # comment\n    return 1\n", keep_comments=False)
    assert not any(isinstance(n, ast_comments.Comment) for n in ast.walk(tree))
    _ = compile(tree, "", "exec")


@pytest.mark.parametrize(
    "source",
    [
        "def f():\n    pass\n",
        "async def f():\n    pass\n",
        "# leading comment\n@decorated\nasync def f():\n    pass\n",
        "def f():\n    pass\n# trailing comment\n",
    ],
)
def test_get_function_def(source: str) -> None:
    definition = get_function_def(parse(source))
    assert definition.name == "f"


@pytest.mark.parametrize(
    ("source", "expected_kind", "expected_line"),
    [
        ("", "an empty unit", 1),
        ("# only a comment\n", "an empty unit", 1),
        ("x = 1\n", "Assign", 1),
        ("class A:\n    pass\n", "ClassDef", 1),
        ("\n\nimport os\n", "Import", 3),
        ("def a():\n    pass\ndef b():\n    pass\n", "2 statements", 3),
    ],
)
def test_get_function_def_errors(source: str, expected_kind: str, expected_line: int) -> None:
    with pytest.raises(UnasyncUsageError, match=re.escape(expected_kind)) as exc_info:
        get_function_def(parse(source), "unit.py")

    assert exc_info.value.kind == expected_kind
    assert exc_info.value.lineno == expected_line
    assert str(exc_info.value).startswith(f"unit.py:{expected_line}: ")


def test_usage_error_without_location() -> None:
    error = UnasyncUsageError("Lambda")
    assert str(error).startswith("<unknown>:?: remove_async_await currently only supports functions and methods")
    assert "got Lambda" in str(error)


def test_private_name_mangling() -> None:
    source = dedent(
        """\
        def reveal(self, __key=None):
            global __counter

            class __Nested(__Base):
                hidden = self.__kept

            def __inner():
                return self.__secret

            return __inner() + f(__flag=1) + __dunder__ + _Vault__already + __Nested
        """
    )
    definition = ast.parse(source).body[0]
    mangled = unparse(PrivateNameMangler("__Vault").visit(definition))

    assert mangled.startswith("def reveal(self, _Vault__key=None):"), "the definition keeps its own name"
    for expected in (
        "global _Vault__counter",
        "class _Vault__Nested(_Vault__Base):",
        "hidden = self.__kept",
        "def _Vault__inner():",
        "return self._Vault__secret",
        "_Vault__inner() + f(_Vault__flag=1) + __dunder__ + _Vault__already + _Vault__Nested",
    ):
        assert expected in mangled

    untouched = ast.parse(source).body[0]
    assert unparse(PrivateNameMangler("___").visit(untouched)) == unparse(ast.parse(source).body[0])
