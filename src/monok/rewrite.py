"""Call-site rewriting for ok/error pipelines.

Inside a function decorated with ``@pipeline``, a call on the right of ``|``
or ``>>`` receives the Ok payload of the left operand as its first argument:

    @pipeline
    def total(raw):
        return parse(raw) >> validate(limit=10) | sum() | round(2)

``value | f(a)`` means ``fmap(value, lambda v: f(v, a))`` and ``value >> f(a)``
means ``bind(value, lambda v: f(v, a))``. The function is parsed and
recompiled once, when it is decorated. Sites whose left operand is a literal
``Ok(...)`` or ``Err(...)`` are resolved right there: an Ok literal is
inlined into the call, an Err literal replaces the whole site so the call
never reaches the compiled code. Everything else is deferred to the runtime
combinators, which branch on the concrete variant.

Steps run left to right whatever their operator, so ``r | f() >> g()`` is
``(r | f()) >> g()`` even though Python binds ``>>`` tighter. A ``>>`` step whose
call returns something other than a Result raises TypeError, whether its left
operand is a literal or not.

``value @ Ok(f)`` is not rewritten; Result.__matmul__ applies it at runtime.
"""

from __future__ import annotations

import __future__
import ast
import builtins
import functools
import inspect
import textwrap
import types
from typing import Callable, TypeVar

from . import combinators
from .errors import ErrorCode, RewriteError
from .log import get_logger
from .result import Err, Ok, ensure_result
from .settings import get_settings

logger = get_logger("rewrite")

Fn = TypeVar("Fn", bound=Callable[..., object])

_FMAP = "__monok_fmap__"
_BIND = "__monok_bind__"
_CHECK = "__monok_result__"
_FACTORY = "__monok_factory__"
_HELPERS: dict[str, Callable[..., object]] = {
    _FMAP: combinators.fmap,
    _BIND: combinators.bind,
    _CHECK: ensure_result,
}

_MISSING = object()

# Right-hand sides that can never be called, flagged when the left side is a literal
_NOT_CALLABLE = (
    ast.Constant, ast.List, ast.Tuple, ast.Set, ast.Dict, ast.JoinedStr,
    ast.ListComp, ast.SetComp, ast.DictComp, ast.GeneratorExp,
)

# Expressions that change meaning once moved into a lambda body
_SCOPE_SENSITIVE = (ast.Await, ast.Yield, ast.YieldFrom, ast.NamedExpr)


def _is_site(node: ast.AST) -> bool:
    return (
        isinstance(node, ast.BinOp)
        and isinstance(node.op, (ast.BitOr, ast.RShift))
        and isinstance(node.right, ast.Call)
    )


def _is_bare_super(node: ast.AST) -> bool:
    return (
        isinstance(node, ast.Call)
        and isinstance(node.func, ast.Name)
        and node.func.id == "super"
        and not node.args
    )


class CallSiteRewriter(ast.NodeTransformer):
    """Rewrites ``|`` / ``>>`` sites with a call on the right.

    Args:
        namespace: Globals used to recognise the Ok/Err constructors by identity
        local_names: Names bound locally in the function being rewritten; these
            shadow the namespace and are never treated as constructors
        filename: Reported in RewriteError
    """

    def __init__(
        self,
        namespace: dict[str, object] | None = None,
        local_names: frozenset[str] = frozenset(),
        filename: str = "<pipeline>",
    ) -> None:
        self.namespace = namespace or {}
        self.local_names = local_names
        self.filename = filename
        self.count = 0
        self._fresh = 0

    # ─── Literal Recognition ───────────────────────────────────────────

    def _resolve(self, node: ast.expr) -> object:
        if isinstance(node, ast.Name):
            if node.id in self.local_names:
                return _MISSING
            if node.id in self.namespace:
                return self.namespace[node.id]
            return getattr(builtins, node.id, _MISSING)
        if isinstance(node, ast.Attribute):
            base = self._resolve(node.value)
            if isinstance(base, types.ModuleType):
                return getattr(base, node.attr, _MISSING)
        return _MISSING

    def literal_variant(self, node: ast.expr) -> Callable[..., object] | None:
        """Return Ok or Err if node is statically a one-argument construction of it."""
        if (
            isinstance(node, ast.Call)
            and len(node.args) == 1
            and not node.keywords
            and not isinstance(node.args[0], ast.Starred)
        ):
            ctor = self._resolve(node.func)
            if ctor is Ok or ctor is Err:
                return ctor  # type: ignore[return-value]
        return None

    # ─── Rewriting ─────────────────────────────────────────────────────

    def _error(self, node: ast.AST, message: str, code: ErrorCode) -> RewriteError:
        return RewriteError.create(message, code, filename=self.filename, lineno=getattr(node, "lineno", None))

    @staticmethod
    def _inject(call: ast.Call, payload: ast.expr) -> ast.Call:
        return ast.copy_location(ast.Call(func=call.func, args=[payload, *call.args], keywords=call.keywords), call)

    def _step(self, helper: str, call: ast.Call, payload: ast.expr) -> ast.Call:
        """Inject payload into call; bind steps also get their return value checked."""
        injected = self._inject(call, payload)
        if helper != _BIND:
            return injected
        name = ast.Constant(value=ast.unparse(call.func))
        return ast.copy_location(ast.Call(func=ast.Name(id=_CHECK, ctx=ast.Load()), args=[injected, name], keywords=[]), call)

    def _deferred(self, helper: str, left: ast.expr, call: ast.Call) -> ast.Call:
        for sub in ast.walk(call):
            if isinstance(sub, _SCOPE_SENSITIVE) or _is_bare_super(sub):
                what = "super()" if isinstance(sub, ast.Call) else type(sub).__name__.lower()
                raise self._error(
                    sub,
                    f"{what} cannot appear in a call whose left operand is only known at runtime",
                    ErrorCode.UNSUPPORTED_SITE,
                )
        name = f"_monok_value_{self._fresh}"
        self._fresh += 1
        lam = ast.parse(f"lambda {name}: None", mode="eval").body
        lam.body = self._step(helper, call, ast.Name(id=name, ctx=ast.Load()))  # type: ignore[attr-defined]
        ast.copy_location(lam.args.args[0], call)  # type: ignore[attr-defined]
        ast.copy_location(lam, call)
        return ast.Call(func=ast.Name(id=helper, ctx=ast.Load()), args=[left, lam], keywords=[])

    @staticmethod
    def _left_associate(node: ast.BinOp) -> ast.BinOp:
        """``a | (b >> c())`` → ``(a | b) >> c()``.

        ``>>`` binds tighter than ``|``, but pipeline steps run left to right
        whatever their operator. Inner ``>>`` sites left over on the new left
        side are rotated when that side is visited.
        """
        inner: ast.BinOp = node.right  # type: ignore[assignment]
        left = ast.copy_location(ast.BinOp(left=node.left, op=node.op, right=inner.left), node)
        return ast.copy_location(ast.BinOp(left=left, op=inner.op, right=inner.right), node)

    def visit_BinOp(self, node: ast.BinOp) -> ast.expr:  # noqa: N802
        if isinstance(node.op, ast.BitOr) and _is_site(node.right) and isinstance(node.right.op, ast.RShift):  # type: ignore[attr-defined]
            node = self._left_associate(node)
        if isinstance(node.op, (ast.BitOr, ast.RShift)) and _is_site(node.right):
            raise self._error(
                node.right,
                "right-hand side of a pipeline step is itself a pipeline; write the steps left to right",
                ErrorCode.UNSUPPORTED_SITE,
            )
        self.generic_visit(node)
        if isinstance(node.op, ast.BitOr):
            helper = _FMAP
        elif isinstance(node.op, ast.RShift):
            helper = _BIND
        else:
            return node

        left, right = node.left, node.right
        variant = self.literal_variant(left)
        if not isinstance(right, ast.Call):
            if variant is not None and isinstance(right, _NOT_CALLABLE):
                raise self._error(
                    right,
                    f"right-hand side of {'|' if helper == _FMAP else '>>'} must be a call expression",
                    ErrorCode.NOT_A_CALL,
                )
            return node

        self.count += 1
        if variant is Err:
            return left
        if variant is Ok:
            call = self._step(helper, right, left.args[0])  # type: ignore[attr-defined]
            if helper == _BIND:
                return ast.copy_location(call, node)
            return ast.copy_location(ast.Call(func=left.func, args=[call], keywords=[]), node)  # type: ignore[attr-defined]
        return ast.copy_location(self._deferred(helper, left, right), node)


def rewrite_source(source: str, namespace: dict[str, object] | None = None) -> ast.Module:
    """Parse source and rewrite its pipeline sites, returning the new tree.

    namespace is used to recognise Ok/Err literals; without it every site is
    deferred to the runtime helpers, which are looked up as ``__monok_fmap__``
    and ``__monok_bind__``.

    Example:
        >>> ast.unparse(rewrite_source("Ok(7) | str()", {"Ok": Ok}))
        'Ok(str(7))'
    """
    tree = ast.parse(textwrap.dedent(source))
    tree = CallSiteRewriter(namespace).visit(tree)
    return ast.fix_missing_locations(tree)


def helpers() -> dict[str, Callable[..., object]]:
    """Names the rewritten code refers to, for exec()-ing rewrite_source output."""
    return dict(_HELPERS)


# ═════════════════════════════════════════════════════════════════════════════
# Decorator
# ═════════════════════════════════════════════════════════════════════════════


def _owner_class(func: types.FunctionType) -> str | None:
    """Name of the class whose body defines func, if any (drives name mangling)."""
    parts = func.__qualname__.split(".")
    return parts[-2] if len(parts) > 1 and parts[-2] != "<locals>" else None


def _child_code(code: types.CodeType, name: str) -> types.CodeType | None:
    for const in code.co_consts:
        if isinstance(const, types.CodeType) and const.co_name == name:
            return const
    return None


def _load(func: types.FunctionType) -> tuple[ast.FunctionDef | ast.AsyncFunctionDef, str]:
    name = func.__qualname__
    if func.__name__ == "<lambda>":
        raise RewriteError.create(f"{name}: lambdas have no rewritable source", ErrorCode.SOURCE_UNAVAILABLE)
    try:
        lines, start = inspect.getsourcelines(func)
        tree = ast.parse(textwrap.dedent("".join(lines)))
    except (OSError, TypeError, SyntaxError) as e:
        raise RewriteError.create(f"{name}: source unavailable ({e})", ErrorCode.SOURCE_UNAVAILABLE) from e
    if not tree.body or not isinstance(tree.body[0], (ast.FunctionDef, ast.AsyncFunctionDef)):
        raise RewriteError.create(f"{name}: source is not a function definition", ErrorCode.SOURCE_UNAVAILABLE)
    ast.increment_lineno(tree, start - 1)
    return tree.body[0], func.__code__.co_filename


def _recompile(
    func: types.FunctionType,
    node: ast.FunctionDef | ast.AsyncFunctionDef,
    filename: str,
) -> types.FunctionType:
    """Compile node as func's replacement, keeping its globals, defaults and closure cells.

    The def is nested in a factory whose parameters are func's free variables
    plus the helpers, so the compiler resolves those names as closure
    variables. The factory itself never runs; only the inner code object is
    used.
    """
    code = func.__code__
    params = ", ".join([*code.co_freevars, *_HELPERS])
    owner = _owner_class(func)
    template = f"def {_FACTORY}({params}):\n" + (f"    class {owner}:\n        pass\n" if owner else "    pass\n")
    module = ast.parse(template)
    factory = module.body[0]
    scope = factory.body[0] if owner else factory  # type: ignore[attr-defined]
    scope.body = [node]
    ast.fix_missing_locations(module)

    flags = code.co_flags & __future__.annotations.compiler_flag
    compiled = compile(module, filename, "exec", flags=flags, dont_inherit=True)
    new_code = _child_code(compiled, _FACTORY)
    if new_code is not None and owner:
        new_code = _child_code(new_code, owner)
    if new_code is not None:
        new_code = _child_code(new_code, node.name)
    if new_code is None:  # pragma: no cover
        raise RuntimeError(f"compiled pipeline for {func.__qualname__} not found")

    cells = dict(zip(code.co_freevars, func.__closure__ or ()))
    closure = tuple(
        types.CellType(_HELPERS[n]) if n in _HELPERS else cells[n]
        for n in new_code.co_freevars
    )
    new = types.FunctionType(new_code, func.__globals__, func.__name__, func.__defaults__, closure or None)
    new.__kwdefaults__ = func.__kwdefaults__
    return functools.update_wrapper(new, func)


def pipeline(func: Fn) -> Fn:
    """Rewrite ``|`` and ``>>`` call sites in func into Result combinator calls.

    Apply it as the innermost decorator. Inside the function, any ``|`` or
    ``>>`` with a call on the right is a pipeline step, so set unions,
    bitwise or and shifts against a call result must be written outside it.
    Returns func unchanged if it has no such site or MONOK_REWRITE_ENABLED is
    false.

    Raises:
        RewriteError: func is not a plain function, already wraps another
            function, has no retrievable source, or contains an ill-formed site
    """
    settings = get_settings().rewrite
    if not settings.enabled:
        return func
    if not isinstance(func, types.FunctionType):
        raise RewriteError.create(
            f"@pipeline expects a function, got {type(func).__name__}", ErrorCode.NOT_A_FUNCTION,
        )
    if hasattr(func, "__wrapped__"):
        raise RewriteError.create(
            f"{func.__qualname__}: @pipeline must be the innermost decorator", ErrorCode.ALREADY_WRAPPED,
        )

    node, filename = _load(func)
    node.decorator_list = []
    code = func.__code__
    rewriter = CallSiteRewriter(
        func.__globals__,
        frozenset(code.co_varnames + code.co_cellvars + code.co_freevars),
        filename,
    )
    node = rewriter.visit(node)
    if not rewriter.count:
        logger.debug(f"[{func.__qualname__}] no pipeline sites, left as is")
        return func

    logger.debug(f"[{func.__qualname__}] rewrote {rewriter.count} pipeline site(s)")
    if settings.dump_source:
        logger.debug(f"[{func.__qualname__}] rewritten source:\n{ast.unparse(node)}")
    return _recompile(func, node, filename)  # type: ignore[return-value]
