"""Source transform that expands ``inspect`` call sites.

Two spellings are recognized wherever ``examine`` (or its ``inspect``
function) is imported in a module::

    examine.inspect(x + y, show_vars=True)

    (
        text
        .strip()
        .lower()
        .pipe(examine.inspect, inspect_pipeline=True)
    )

Each site is replaced by an expression of the form::

    (__examine_ctx_0__ := __examine_rt__.Invocation(site, options)).finish(expr)

The source slice, the synthesized rendering and the option validation all
happen here, once per site, before any of the module's code runs. When the
environment gate is closed the site collapses to the bare expression.
"""
from __future__ import annotations

import ast
import logging
from types import CodeType
from typing import Any, Dict, Optional, Set, Tuple

from .config import OPTION_NAMES, RUNTIME_OPTIONS, Options, Settings
from .errors import ExamineConfigError
from .report import CONTEXT_PREFIX
from .rewriter import count_steps, link_text, rewrite, step_line
from .source_slice import SourceSlice, extract

logger = logging.getLogger(__name__)

PACKAGE: str = "examine"
ENTRY_POINT: str = "inspect"
PIPE_METHOD: str = "pipe"
RUNTIME_MODULE: str = "examine.session"
RUNTIME_ALIAS: str = "__examine_rt__"


def transform_source(
    source: str,
    filename: str,
    settings: Optional[Settings] = None,
) -> ast.Module:
    """Parse ``source`` and expand every ``inspect`` call site in it."""
    tree = ast.parse(source, filename=filename)
    return transform_tree(tree, filename, settings)


def transform_tree(
    tree: ast.Module,
    filename: str,
    settings: Optional[Settings] = None,
) -> ast.Module:
    settings = settings or Settings.from_env()
    modules, functions = _entry_point_bindings(tree)
    if not modules and not functions:
        return tree

    transformer = InspectTransformer(filename, settings, modules, functions)
    tree = transformer.visit(tree)
    if transformer.sites:
        _insert_runtime_import(tree)
    return ast.fix_missing_locations(tree)


def compile_source(
    source: str,
    filename: str,
    settings: Optional[Settings] = None,
) -> CodeType:
    """Transform and compile ``source`` as a module body."""
    tree = transform_source(source, filename, settings)
    return compile(tree, filename, "exec")


class InspectTransformer(ast.NodeTransformer):
    """Replace ``inspect`` call sites with instrumented expressions."""

    def __init__(
        self,
        filename: str,
        settings: Settings,
        modules: Set[str],
        functions: Set[str],
    ) -> None:
        super().__init__()
        self.filename = filename
        self.settings = settings
        self.modules = modules
        self.functions = functions
        self.sites = 0

    # ----------------------------------------------------------- matching
    def is_entry_point(self, node: ast.AST) -> bool:
        if isinstance(node, ast.Name):
            return node.id in self.functions
        return (
            isinstance(node, ast.Attribute)
            and node.attr == ENTRY_POINT
            and isinstance(node.value, ast.Name)
            and node.value.id in self.modules
        )

    def match(self, node: ast.Call) -> Optional[Tuple[ast.expr, int]]:
        """Return ``(expression, call_line)`` when ``node`` is a call site."""
        if self.is_entry_point(node.func):
            if len(node.args) != 1 or isinstance(node.args[0], ast.Starred):
                raise self._error(node.lineno, "inspect() takes exactly one positional argument")
            return node.args[0], node.lineno

        func = node.func
        if (
            isinstance(func, ast.Attribute)
            and func.attr == PIPE_METHOD
            and node.args
            and self.is_entry_point(node.args[0])
        ):
            line = func.end_lineno or node.lineno
            if len(node.args) != 1:
                raise self._error(line, "pipe(inspect) accepts keyword options only")
            return func.value, line
        return None

    # ------------------------------------------------------------ visiting
    def visit_Call(self, node: ast.Call) -> Any:
        matched = self.match(node)
        if matched is None:
            return self.generic_visit(node)
        expr, call_line = matched

        if not self.settings.enabled:
            logger.debug(
                "%s:%d: instrumentation disabled for env %r",
                self.filename,
                call_line,
                self.settings.env,
            )
            return self.visit(expr)

        options, label = self._options(node.keywords, call_line)
        source = extract(self.filename, call_line, expr)
        rendered = ast.unparse(expr)
        outer_line = step_line(expr)
        tail = link_text(expr) if source is not None else None
        context_name = f"{CONTEXT_PREFIX}ctx_{self.sites}__"
        self.sites += 1

        if label is not None:
            label = self.visit(label)
        expr = self.visit(expr)
        if options.inspect_pipeline:
            logger.debug(
                "%s:%d: capturing %d inner step(s)",
                self.filename,
                call_line,
                max(count_steps(expr) - 1, 0),
            )
            expr = rewrite(expr, context_name)

        replacement = self._invocation(
            context_name,
            expr,
            self._site(call_line, source, rendered, outer_line, tail),
            self._options_node(options, label),
            options.show_vars,
        )
        return ast.fix_missing_locations(ast.copy_location(replacement, node))

    # ------------------------------------------------------------- options
    def _options(
        self,
        keywords: list[ast.keyword],
        call_line: int,
    ) -> Tuple[Options, Optional[ast.expr]]:
        values: Dict[str, Any] = {}
        label: Optional[ast.expr] = None
        for keyword in keywords:
            name = keyword.arg
            if name is None:
                raise self._error(call_line, "options cannot be passed with **")
            if name not in OPTION_NAMES:
                supported = ", ".join(sorted(OPTION_NAMES))
                raise self._error(
                    call_line, f"unknown option {name}. Expected any of: {supported}"
                )
            if name in RUNTIME_OPTIONS:
                label = keyword.value
                continue
            try:
                values[name] = ast.literal_eval(keyword.value)
            except ValueError as exc:
                raise self._error(call_line, f"option '{name}' must be a literal") from exc
        try:
            return Options.from_mapping(values, self.settings), label
        except ExamineConfigError as exc:
            raise self._error(call_line, str(exc)) from exc

    def _error(self, line: int, message: str) -> ExamineConfigError:
        return ExamineConfigError(f"{self.filename}:{line}: {message}")

    # ---------------------------------------------------------- generation
    def _site(
        self,
        call_line: int,
        source: Optional[SourceSlice],
        rendered: str,
        outer_line: int,
        tail: Optional[str] = None,
    ) -> ast.expr:
        if source is None:
            source_node: ast.expr = ast.Constant(value=None)
        else:
            source_node = ast.Tuple(
                elts=[
                    ast.Tuple(
                        elts=[ast.Constant(value=text), ast.Constant(value=index)],
                        ctx=ast.Load(),
                    )
                    for text, index in source
                ],
                ctx=ast.Load(),
            )
        return ast.Call(
            func=_runtime_attr("Site"),
            args=[
                ast.Constant(value=self.filename),
                ast.Constant(value=call_line),
                source_node,
                ast.Constant(value=rendered),
                ast.Constant(value=outer_line),
                ast.Constant(value=tail),
            ],
            keywords=[],
        )

    def _options_node(self, options: Options, label: Optional[ast.expr]) -> ast.expr:
        mapping = options.as_mapping()
        keys: list[Optional[ast.expr]] = []
        values: list[ast.expr] = []
        for name, value in mapping.items():
            keys.append(ast.Constant(value=name))
            if name == "label" and label is not None:
                values.append(label)
            else:
                values.append(ast.Constant(value=value))
        return ast.Dict(keys=keys, values=values)

    def _invocation(
        self,
        context_name: str,
        expr: ast.expr,
        site: ast.expr,
        options: ast.expr,
        show_vars: bool,
    ) -> ast.expr:
        invocation = ast.NamedExpr(
            target=ast.Name(id=context_name, ctx=ast.Store()),
            value=ast.Call(func=_runtime_attr("Invocation"), args=[site, options], keywords=[]),
        )
        args = [expr]
        if show_vars:
            args.append(ast.Call(func=ast.Name(id="locals", ctx=ast.Load()), args=[], keywords=[]))
        return ast.Call(
            func=ast.Attribute(value=invocation, attr="finish", ctx=ast.Load()),
            args=args,
            keywords=[],
        )


def _runtime_attr(name: str) -> ast.Attribute:
    return ast.Attribute(
        value=ast.Name(id=RUNTIME_ALIAS, ctx=ast.Load()),
        attr=name,
        ctx=ast.Load(),
    )


def _entry_point_bindings(tree: ast.AST) -> Tuple[Set[str], Set[str]]:
    """Return the names bound to the package and to its ``inspect`` function."""
    modules: Set[str] = set()
    functions: Set[str] = set()
    for node in ast.walk(tree):
        if isinstance(node, ast.Import):
            for alias in node.names:
                if alias.name == PACKAGE:
                    modules.add(alias.asname or PACKAGE)
        elif isinstance(node, ast.ImportFrom) and node.level == 0:
            if node.module not in (PACKAGE, f"{PACKAGE}.api"):
                continue
            for alias in node.names:
                if alias.name == ENTRY_POINT:
                    functions.add(alias.asname or ENTRY_POINT)
    return modules, functions


def _insert_runtime_import(tree: ast.Module) -> None:
    position = 0
    body = tree.body
    if (
        body
        and isinstance(body[0], ast.Expr)
        and isinstance(body[0].value, ast.Constant)
        and isinstance(body[0].value.value, str)
    ):
        position = 1
    while (
        position < len(body)
        and isinstance(body[position], ast.ImportFrom)
        and body[position].module == "__future__"  # type: ignore[attr-defined]
    ):
        position += 1
    body.insert(position, ast.Import(names=[ast.alias(name=RUNTIME_MODULE, asname=RUNTIME_ALIAS)]))


__all__ = [
    "InspectTransformer",
    "compile_source",
    "transform_source",
    "transform_tree",
]
