"""
Calls registered with the opaque region policy keep their arguments exactly as written: nothing inside them is
visited.  Their callee, and everything outside them, is rewritten as usual.
"""
import ast
from textwrap import dedent
from typing import List

import pytest

from remove_async_await.rewrite import OpaqueRegionPolicy
from remove_async_await.rewrite import RemoveAsyncAwait
from remove_async_await.rewrite import remove_async_await_source
from remove_async_await.rewrite import remove_async_await_text


def call_node(expression: str) -> ast.Call:
    node = ast.parse(expression, mode="eval").body
    assert isinstance(node, ast.Call)
    return node


@pytest.mark.parametrize(
    ("opaque_calls", "expression", "expect_opaque"),
    [
        ({"print"}, "print(x)", True),
        ({"print"}, "builtins.print(x)", False),
        ({"log.info"}, "log.info(x)", True),
        ({"log.info"}, "log.debug(x)", False),
        ({"log.info"}, "info(x)", False),
        ({"run"}, "get_runner()(x)", False),
        (set(), "print(x)", False),
    ],
)
def test_is_opaque(opaque_calls: set, expression: str, expect_opaque: bool) -> None:
    policy = OpaqueRegionPolicy.from_names(opaque_calls)
    assert policy.is_opaque(call_node(expression)) is expect_opaque


def test_from_names() -> None:
    assert OpaqueRegionPolicy.from_names(None) == OpaqueRegionPolicy()
    assert OpaqueRegionPolicy.from_names(["a", "b.c"]).opaque_calls == frozenset({"a", "b.c"})
    with pytest.raises(TypeError):
        OpaqueRegionPolicy.from_names("print")


def test_await_inside_opaque_call_is_kept() -> None:
    """
    The known limitation: an `await` handed straight to an opaque call survives. The textual transform removes it,
    and so does binding the result to a local first.
    """
    source = dedent(
        """\
        async def issue():
            print("{}".format(await get_string()))
        """
    )
    policy = OpaqueRegionPolicy.from_names({"print"})

    structural = remove_async_await_source(source, policy)
    assert structural == "def issue():\n    print('{}'.format(await get_string()))"

    assert remove_async_await_text(source) == 'def issue():\n    print("{}".format(get_string()))\n'

    workaround = dedent(
        """\
        async def workaround():
            string = await get_string()
            print("{}".format(string))
        """
    )
    assert "await" not in remove_async_await_source(workaround, policy)


def test_rest_of_function_still_rewritten() -> None:
    source = dedent(
        """\
        async def mixed():
            value = await fetch()
            log.info("got %s", await describe(value), extra=await context())
            return await store(value)
        """
    )
    output = remove_async_await_source(source, OpaqueRegionPolicy.from_names({"log.info"}))
    assert output == dedent(
        """\
        def mixed():
            value = fetch()
            log.info('got %s', await describe(value), extra=await context())
            return store(value)"""
    )


def test_opaque_call_nested_in_transparent_call() -> None:
    source = "async def f():\n    return wrap(await a(), print(await b()))\n"
    output = remove_async_await_source(source, OpaqueRegionPolicy.from_names({"print"}))
    assert output == "def f():\n    return wrap(a(), print(await b()))"


def test_callee_is_visited_but_arguments_are_not() -> None:
    """The callee of an opaque call goes through the visitor, its argument region never does"""

    class RecordingRewriter(RemoveAsyncAwait):
        seen: List[str]

        def visit_Name(self, node: ast.Name) -> ast.AST:
            self.seen.append(node.id)
            return self.generic_visit(node)

    tree = ast.parse("async def f():\n    log.info(await x, key=await y)\n")
    rewriter = RecordingRewriter(OpaqueRegionPolicy.from_names({"log.info"}))
    rewriter.seen = []
    rewriter.visit(tree)

    assert "log" in rewriter.seen
    assert "x" not in rewriter.seen
    assert "y" not in rewriter.seen


def test_default_policy_is_transparent() -> None:
    source = "async def f():\n    print(await g())\n"
    assert remove_async_await_source(source) == "def f():\n    print(g())"
