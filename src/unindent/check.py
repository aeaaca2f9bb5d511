"""Static checks for block text constructors in Python sources.

Block text is meant to be written as a literal in the source. This module
finds constructor calls whose text is computed at runtime, and format calls
whose arguments cannot fill the transformed template.
"""

from __future__ import annotations

import ast
from collections import Counter

from unindent.errors import CheckSyntaxError, Severity, UsageError
from unindent.spans import Position, Span, node_span, source_lines
from unindent.text import Transform, template_fields

# Constructor name -> transformation applied to its literal
CONSTRUCTORS: dict[str, Transform] = {
    "make_unindented": Transform.UNINDENT,
    "make_folded": Transform.FOLD,
    "unindented_view": Transform.UNINDENT,
    "folded_view": Transform.FOLD,
}


def check_source(source: str, filename: str = "<string>") -> list[UsageError]:
    """Check a Python source and return findings ordered by position.

    Raises CheckSyntaxError if the source does not parse.
    """
    try:
        tree = ast.parse(source, filename)
    except SyntaxError as exc:
        line = exc.lineno or 1
        col = exc.offset or 1
        end = Position(exc.end_lineno or line, exc.end_offset or col + 1)
        raise CheckSyntaxError(exc.msg, Span(Position(line, col), end), source) from None
    except ValueError as exc:
        # 3.11 raises ValueError for NUL bytes; 3.12+ raises SyntaxError
        raise CheckSyntaxError(str(exc), Span(Position(1, 1), Position(1, 2)), source) from None

    checker = _Checker(source)
    checker.collect_constants(tree)
    checker.visit(tree)
    return sorted(
        checker.problems,
        key=lambda p: (p.span.start.line, p.span.start.column),
    )


class _Checker(ast.NodeVisitor):
    def __init__(self, source: str) -> None:
        self._source = source
        self._lines = source_lines(source)
        self._constants: dict[str, str] = {}  # module-level name -> template
        self._scopes: list[tuple[set[str], bool]] = []  # (local names, is class body)
        self.problems: list[UsageError] = []

    def collect_constants(self, module: ast.Module) -> None:
        """Record module-level names bound once, directly to a constructor call.

        A name bound anywhere else at module level, or declared global in a
        function, may hold something else by the time it is formatted.
        """
        counts = Counter(_scope_bindings(module.body))
        rebound = {
            name
            for node in ast.walk(module)
            if isinstance(node, ast.Global)
            for name in node.names
        }
        for stmt in module.body:
            if isinstance(stmt, ast.Assign):
                if len(stmt.targets) != 1 or not isinstance(stmt.targets[0], ast.Name):
                    continue
                name = stmt.targets[0].id
                value = stmt.value
            elif isinstance(stmt, ast.AnnAssign) and stmt.value is not None:
                if not isinstance(stmt.target, ast.Name):
                    continue
                name = stmt.target.id
                value = stmt.value
            else:
                continue
            if counts[name] != 1 or name in rebound:
                continue
            template = self._template_of(value)
            if template is not None:
                self._constants[name] = template

    # ------------------------------------------------------------------
    # Scopes
    # ------------------------------------------------------------------

    def visit_FunctionDef(self, node: ast.FunctionDef) -> None:
        self._visit_function(node)

    def visit_AsyncFunctionDef(self, node: ast.AsyncFunctionDef) -> None:
        self._visit_function(node)

    def visit_Lambda(self, node: ast.Lambda) -> None:
        self._visit_scope(node, _argument_names(node.args), is_class=False)

    def visit_ClassDef(self, node: ast.ClassDef) -> None:
        self._visit_scope(node, set(_scope_bindings(node.body)), is_class=True)

    def visit_ListComp(self, node: ast.ListComp) -> None:
        self._visit_comprehension(node)

    def visit_SetComp(self, node: ast.SetComp) -> None:
        self._visit_comprehension(node)

    def visit_DictComp(self, node: ast.DictComp) -> None:
        self._visit_comprehension(node)

    def visit_GeneratorExp(self, node: ast.GeneratorExp) -> None:
        self._visit_comprehension(node)

    def _visit_function(self, node: ast.FunctionDef | ast.AsyncFunctionDef) -> None:
        declared = {
            name
            for child in _scope_nodes(node.body)
            if isinstance(child, (ast.Global, ast.Nonlocal))
            for name in child.names
        }
        local = (set(_scope_bindings(node.body)) | _argument_names(node.args)) - declared
        self._visit_scope(node, local, is_class=False)

    def _visit_comprehension(
        self, node: ast.ListComp | ast.SetComp | ast.DictComp | ast.GeneratorExp
    ) -> None:
        targets = [gen.target for gen in node.generators]
        self._visit_scope(node, set(_scope_bindings(targets)), is_class=False)

    def _visit_scope(self, node: ast.AST, local: set[str], *, is_class: bool) -> None:
        self._scopes.append((local, is_class))
        try:
            self.generic_visit(node)
        finally:
            self._scopes.pop()

    def _is_shadowed(self, name: str) -> bool:
        """Return True if name resolves to a local of an enclosing scope."""
        for depth, (local, is_class) in enumerate(reversed(self._scopes)):
            # Class bodies are not visible from nested scopes
            if is_class and depth > 0:
                continue
            if name in local:
                return True
        return False

    def visit_Call(self, node: ast.Call) -> None:
        name = _callee_name(node.func)
        if name in CONSTRUCTORS:
            self._check_text_argument(node, name)
        elif isinstance(node.func, ast.Attribute) and node.func.attr == "format":
            template = self._template_of(node.func.value)
            if template is not None:
                self._check_format(node, template)
        self.generic_visit(node)

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    def _check_text_argument(self, call: ast.Call, name: str) -> None:
        arg = _text_argument(call)
        if arg is None:
            self._report(f"{name}() missing text argument", call)
            return
        if isinstance(arg, ast.Constant) and isinstance(arg.value, str):
            return
        self._report(f"{name}() needs a string literal, not {_describe(arg)}", arg)

    def _check_format(self, call: ast.Call, template: str) -> None:
        try:
            fields = template_fields(template)
        except ValueError as exc:
            self._report(f"invalid format template: {exc}", call)
            return

        if not any(isinstance(a, ast.Starred) for a in call.args):
            given = len(call.args)
            if given < fields.positional:
                self._report(
                    f"format template expects {_plural(fields.positional, 'positional argument')}"
                    f", got {given}",
                    call,
                )
            elif given > fields.positional:
                extra = given - fields.positional
                self._report(
                    f"{_plural(extra, 'unused positional argument')} to format",
                    call.args[fields.positional],
                    Severity.WARNING,
                )

        keywords = {kw.arg for kw in call.keywords}
        if None not in keywords:
            for missing in sorted(fields.names - keywords):
                self._report(f"format template needs keyword argument '{missing}'", call)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _template_of(self, expr: ast.expr) -> str | None:
        """Return the transformed literal expr evaluates to, if statically known."""
        if isinstance(expr, ast.Name):
            if self._is_shadowed(expr.id):
                return None
            return self._constants.get(expr.id)
        if not isinstance(expr, ast.Call):
            return None
        transform = CONSTRUCTORS.get(_callee_name(expr.func) or "")
        arg = _text_argument(expr)
        if transform is None or not isinstance(arg, ast.Constant):
            return None
        if not isinstance(arg.value, str):
            return None
        return transform(arg.value)

    def _report(
        self,
        message: str,
        node: ast.expr,
        severity: Severity = Severity.ERROR,
    ) -> None:
        span = node_span(node, self._lines)
        self.problems.append(UsageError(message, span, self._source, severity))


def _callee_name(func: ast.expr) -> str | None:
    if isinstance(func, ast.Name):
        return func.id
    if isinstance(func, ast.Attribute):
        return func.attr
    return None


def _text_argument(call: ast.Call) -> ast.expr | None:
    if call.args:
        return call.args[0]
    for kw in call.keywords:
        if kw.arg == "text":
            return kw.value
    return None


def _describe(expr: ast.expr) -> str:
    if isinstance(expr, ast.JoinedStr):
        return "an f-string"
    if isinstance(expr, ast.Name):
        return f"name '{expr.id}'"
    if isinstance(expr, ast.Call):
        return "a call"
    if isinstance(expr, ast.Starred):
        return "an unpacked argument"
    if isinstance(expr, ast.Constant):
        return f"a {type(expr.value).__name__} literal"
    return "an expression"


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}" if count == 1 else f"{count} {noun}s"


_NESTED_SCOPES = (
    ast.FunctionDef,
    ast.AsyncFunctionDef,
    ast.ClassDef,
    ast.Lambda,
    ast.ListComp,
    ast.SetComp,
    ast.DictComp,
    ast.GeneratorExp,
)


def _scope_nodes(nodes: list[ast.stmt] | list[ast.expr]) -> list[ast.AST]:
    """Return every node in the given scope, without entering nested scopes.

    Nested function and class definitions are included themselves, since
    their names bind in this scope.
    """
    found: list[ast.AST] = []
    stack: list[ast.AST] = list(nodes)
    while stack:
        node = stack.pop()
        found.append(node)
        if not isinstance(node, _NESTED_SCOPES):
            stack.extend(ast.iter_child_nodes(node))
    return found


def _scope_bindings(nodes: list[ast.stmt] | list[ast.expr]) -> list[str]:
    """Return the names bound in a scope, once per binding."""
    names: list[str] = []
    for node in _scope_nodes(nodes):
        if isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
            names.append(node.name)
        elif isinstance(node, ast.Name) and isinstance(node.ctx, (ast.Store, ast.Del)):
            names.append(node.id)
        elif isinstance(node, ast.alias) and node.name != "*":
            names.append(node.asname or node.name.split(".")[0])
        elif isinstance(node, ast.ExceptHandler) and node.name:
            names.append(node.name)
        elif isinstance(node, (ast.MatchAs, ast.MatchStar)) and node.name:
            names.append(node.name)
        elif isinstance(node, ast.MatchMapping) and node.rest:
            names.append(node.rest)
    return names


def _argument_names(args: ast.arguments) -> set[str]:
    params = [*args.posonlyargs, *args.args, *args.kwonlyargs]
    if args.vararg is not None:
        params.append(args.vararg)
    if args.kwarg is not None:
        params.append(args.kwarg)
    return {p.arg for p in params}
