"""Unit tests for the line-range analyzer."""
from __future__ import annotations

import ast

from examine.line_range import analyze


def _name(identifier: str, line: int) -> ast.Name:
    return ast.Name(
        id=identifier,
        ctx=ast.Load(),
        lineno=line,
        end_lineno=line,
        col_offset=0,
        end_col_offset=len(identifier),
    )


def test_analyze_folds_every_node() -> None:
    # synthesized BinOps carry no position; only the leaves do
    tree = ast.BinOp(
        left=_name("a", 3),
        op=ast.Add(),
        right=ast.BinOp(
            left=_name("b", 5),
            op=ast.Add(),
            right=ast.BinOp(left=_name("c", 5), op=ast.Add(), right=_name("d", 9)),
        ),
    )

    assert analyze(tree) == (3, 9)


def test_analyze_returns_none_without_metadata() -> None:
    tree = ast.BinOp(left=ast.Name(id="x", ctx=ast.Load()), op=ast.Add(), right=ast.Constant(value=1))

    assert analyze(tree) is None


def test_analyze_is_order_independent() -> None:
    left_heavy = ast.BinOp(left=_name("a", 9), op=ast.Add(), right=_name("b", 3))
    right_heavy = ast.BinOp(left=_name("a", 3), op=ast.Add(), right=_name("b", 9))

    assert analyze(left_heavy) == analyze(right_heavy) == (3, 9)


def test_analyze_uses_end_lines_of_parsed_chains() -> None:
    source = "(\n    text\n    .strip()\n    .lower()\n)\n"
    tree = ast.parse(source, mode="eval").body

    assert analyze(tree) == (2, 4)
    assert analyze(tree) == analyze(tree)


def test_analyze_single_line_expression() -> None:
    tree = ast.parse("x + y", mode="eval").body

    assert analyze(tree) == (1, 1)
