"""Wrap every link of a method chain in a capture call.

Given the chain ``value.strip().lower()`` and a context name ``ctx`` the
rewrite produces::

    ctx.capture(ctx.mark(), 8, value.strip()).lower()

where ``8`` is the line of ``.strip``. Arguments are evaluated left to right,
so ``ctx.mark()`` runs before the link and its receivers, and ``capture``
hands the link's value straight back. The outermost link is left bare; its
value is recorded by :meth:`examine.session.Invocation.finish`.

The input tree is never modified: each rebuilt link is a fresh node and
everything that is not a link (leaves, call arguments) is shared as is.
"""
from __future__ import annotations

import ast
import copy

CAPTURE: str = "capture"
MARK: str = "mark"


def is_step(node: ast.AST) -> bool:
    """Return ``True`` for chain-shaped nodes: ``recv.name(...)`` or ``recv.name``.

    A plain dotted name such as ``os.path`` or ``self.items`` is the value a
    chain starts from, not a link of it.
    """
    if isinstance(node, ast.Call):
        return isinstance(node.func, ast.Attribute)
    return (
        isinstance(node, ast.Attribute)
        and isinstance(node.ctx, ast.Load)
        and not is_dotted_name(node)
    )


def is_dotted_name(node: ast.AST) -> bool:
    while isinstance(node, ast.Attribute):
        node = node.value
    return isinstance(node, ast.Name)


def receiver(node: ast.AST) -> ast.expr:
    """Return the previous step of a chain-shaped ``node``."""
    if isinstance(node, ast.Call):
        return node.func.value  # type: ignore[attr-defined]
    return node.value  # type: ignore[attr-defined]


def step_line(node: ast.AST) -> int:
    """Return the line a step is written on.

    For links this is the line of the ``.name`` token, which is where the
    attribute node ends. Any other expression reports its last line.
    """
    attribute = node.func if isinstance(node, ast.Call) else node
    if isinstance(attribute, ast.Attribute) and attribute.end_lineno is not None:
        return attribute.end_lineno
    return getattr(node, "end_lineno", None) or getattr(node, "lineno", 0)


def rewrite(tree: ast.expr, context_name: str, depth: int = 0) -> ast.expr:
    """Return a copy of ``tree`` with every inner link wrapped in a capture."""
    if not is_step(tree):
        return tree

    inner = rewrite(receiver(tree), context_name, depth + 1)
    rebuilt = _with_receiver(tree, inner)
    if depth == 0:
        return rebuilt
    return _capture(rebuilt, step_line(tree), context_name)


def link_text(node: ast.expr) -> str:
    """Return the source-like text of the outermost link, e.g. ``.lower()``.

    Falls back to the whole expression when the receiver is not printed as a
    prefix of it (a parenthesized receiver, for instance).
    """
    rendered = ast.unparse(node)
    if not is_step(node):
        return rendered
    prefix = ast.unparse(receiver(node))
    if rendered.startswith(prefix) and rendered[len(prefix):].startswith("."):
        return rendered[len(prefix):]
    return rendered


def count_steps(tree: ast.expr) -> int:
    """Return how many links the chain rooted at ``tree`` has."""
    steps = 0
    while is_step(tree):
        steps += 1
        tree = receiver(tree)
    return steps


def _with_receiver(node: ast.expr, value: ast.expr) -> ast.expr:
    if isinstance(node, ast.Call):
        func = copy.copy(node.func)
        func.value = value  # type: ignore[attr-defined]
        rebuilt = copy.copy(node)
        rebuilt.func = func
        return rebuilt
    rebuilt = copy.copy(node)
    rebuilt.value = value  # type: ignore[attr-defined]
    return rebuilt


def _capture(node: ast.expr, line: int, context_name: str) -> ast.expr:
    def context_attr(name: str) -> ast.Attribute:
        return ast.Attribute(
            value=ast.Name(id=context_name, ctx=ast.Load()),
            attr=name,
            ctx=ast.Load(),
        )

    wrapped = ast.Call(
        func=context_attr(CAPTURE),
        args=[
            ast.Call(func=context_attr(MARK), args=[], keywords=[]),
            ast.Constant(value=line),
            node,
        ],
        keywords=[],
    )
    ast.copy_location(wrapped, node)
    return ast.fix_missing_locations(wrapped)


__all__ = [
    "CAPTURE",
    "MARK",
    "count_steps",
    "is_dotted_name",
    "is_step",
    "link_text",
    "receiver",
    "rewrite",
    "step_line",
]
