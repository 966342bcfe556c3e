"""Unit tests for the capture rewriter."""
from __future__ import annotations

import ast
from typing import Any, Dict

from examine.rewriter import count_steps, is_step, link_text, receiver, rewrite, step_line


def _expr(source: str) -> ast.expr:
    return ast.parse(source, mode="eval").body


class RecordingContext:
    """Stand-in for an Invocation that logs marks and captures in order."""

    def __init__(self) -> None:
        self.events: list[tuple[str, Any]] = []
        self.captured: Dict[int, Any] = {}
        self._clock = 0

    def mark(self) -> int:
        self._clock += 1
        self.events.append(("mark", self._clock))
        return self._clock

    def capture(self, started: int, line: int, value: Any) -> Any:
        self.events.append(("capture", line))
        self.captured[line] = value
        return value


def _evaluate(tree: ast.expr, namespace: Dict[str, Any]) -> Any:
    expression = ast.fix_missing_locations(ast.Expression(body=tree))
    return eval(compile(expression, "<rewritten>", "eval"), namespace)


def test_is_step_matches_method_calls_and_attributes() -> None:
    assert is_step(_expr("value.strip()"))
    assert is_step(_expr("value.strip().real"))
    assert is_step(_expr("os.path.join(root)"))
    assert not is_step(_expr("strip(value)"))
    assert not is_step(_expr("value"))
    assert not is_step(_expr("value + 1"))


def test_receiver_and_step_line() -> None:
    tree = _expr("(value\n .strip()\n .lower())")

    assert ast.unparse(receiver(tree)) == "value.strip()"
    assert step_line(tree) == 3
    assert step_line(receiver(tree)) == 2
    assert step_line(_expr("value")) == 1


def test_outermost_step_stays_bare() -> None:
    tree = _expr("value.strip().lower()")

    assert ast.unparse(rewrite(tree, "ctx")) == "ctx.capture(ctx.mark(), 1, value.strip()).lower()"


def test_every_inner_step_is_wrapped_with_its_line() -> None:
    tree = _expr("(value\n .strip()\n .title()\n .split())")

    assert ast.unparse(rewrite(tree, "ctx")) == (
        "ctx.capture(ctx.mark(), 3, ctx.capture(ctx.mark(), 2, value.strip()).title()).split()"
    )


def test_depth_zero_only_matters_for_the_root() -> None:
    tree = _expr("value.strip().lower()")

    assert ast.unparse(rewrite(tree, "ctx", depth=1)) == (
        "ctx.capture(ctx.mark(), 1, ctx.capture(ctx.mark(), 1, value.strip()).lower())"
    )


def test_leaves_and_plain_calls_are_returned_unchanged() -> None:
    leaf = _expr("value")
    call = _expr("transform(value.strip())")

    assert rewrite(leaf, "ctx") is leaf
    assert rewrite(call, "ctx") is call


def test_arguments_of_links_are_not_rewritten() -> None:
    tree = _expr("items.extend(other.copy()).count(1)")

    assert ast.unparse(rewrite(tree, "ctx")) == (
        "ctx.capture(ctx.mark(), 1, items.extend(other.copy())).count(1)"
    )


def test_input_tree_is_not_mutated() -> None:
    tree = _expr("(value\n .strip()\n .lower())")
    before = ast.dump(tree, include_attributes=True)

    rewrite(tree, "ctx")

    assert ast.dump(tree, include_attributes=True) == before


def test_capture_count_is_links_minus_one() -> None:
    tree = _expr("value.strip().lower().title().split()")
    rewritten = ast.unparse(rewrite(tree, "ctx"))

    assert count_steps(tree) == 4
    assert rewritten.count("ctx.capture(") == 3
    assert count_steps(_expr("value")) == 0


def test_rewritten_chain_evaluates_to_the_same_value() -> None:
    tree = _expr("(value\n .strip()\n .lower()\n .replace(' ', '-'))")
    ctx = RecordingContext()

    result = _evaluate(rewrite(tree, "ctx"), {"ctx": ctx, "value": "  Hello World "})

    assert result == _evaluate(tree, {"value": "  Hello World "}) == "hello-world"
    assert ctx.captured == {2: "Hello World", 3: "hello world"}


def test_marks_run_before_the_steps_they_time() -> None:
    tree = _expr("(value\n .strip()\n .lower()\n .title())")
    ctx = RecordingContext()

    _evaluate(rewrite(tree, "ctx"), {"ctx": ctx, "value": " abc "})

    # outer mark first: it times the whole sub-chain below it
    assert ctx.events == [("mark", 1), ("mark", 2), ("capture", 2), ("capture", 3)]


def test_steps_run_exactly_once() -> None:
    calls: list[str] = []

    class Box:
        def __init__(self, value: int) -> None:
            self.value = value

        def add(self, amount: int) -> "Box":
            calls.append(f"add {amount}")
            return Box(self.value + amount)

    tree = _expr("(Box(1)\n .add(2)\n .add(3)\n .add(4))")
    result = _evaluate(rewrite(tree, "ctx"), {"ctx": RecordingContext(), "Box": Box})

    assert result.value == 10
    assert calls == ["add 2", "add 3", "add 4"]


def test_attribute_links_are_captured() -> None:
    tree = _expr("(value\n .strip()\n .__class__\n .__name__)")
    ctx = RecordingContext()

    assert _evaluate(rewrite(tree, "ctx"), {"ctx": ctx, "value": " x "}) == "str"
    assert ctx.captured == {2: "x", 3: str}


def test_dotted_names_start_the_chain() -> None:
    tree = _expr("(os.path\n .join('a', 'b'))")

    assert not is_step(receiver(tree))
    assert count_steps(tree) == 1
    assert ast.unparse(rewrite(tree, "ctx")) == "os.path.join('a', 'b')"
    assert ast.unparse(rewrite(_expr("self.items.copy().pop()"), "ctx")) == (
        "ctx.capture(ctx.mark(), 1, self.items.copy()).pop()"
    )


def test_link_text_is_the_outermost_link() -> None:
    assert link_text(_expr("(text\n .strip()\n .lower())")) == ".lower()"
    assert link_text(_expr("values.count(1)")) == ".count(1)"
    assert link_text(_expr("(a + b).bit_length()")) == "(a + b).bit_length()"
    assert link_text(_expr("x + y")) == "x + y"
