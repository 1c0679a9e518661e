"""Result value for ok/error pipelines.

A discriminated union of ``Ok(value)`` and ``Err(reason)`` with the usual
combinators:
- Functor: map, map_err
- Applicative: apply
- Monad: flat_map (bind)
- Bifunctor: bimap
- Operators: ``|`` (map), ``>>`` (flat_map), ``@`` (apply)

``Err`` is absorbing: once a chain holds an error, no further function runs
and the same error comes out the other end.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable, Generic, TypeVar

from .errors import UnwrapError

if TYPE_CHECKING:
    from collections.abc import Iterator

T = TypeVar("T")  # Success type
E = TypeVar("E")  # Error type
U = TypeVar("U")  # Mapped success type
F = TypeVar("F")  # Mapped error type

_OK = True
_ERR = False


def _name_of(f: object) -> str:
    return getattr(f, "__qualname__", None) or repr(f)


def ensure_result(out: object, name: str) -> Result:
    """Return out if it is a Result, else raise TypeError naming the bind step that produced it."""
    if not isinstance(out, Result):
        raise TypeError(f"bind function {name} must return a Result, got {type(out).__name__}")
    return out


class Result(Generic[T, E]):
    """Discriminated union representing success (Ok) or failure (Err).

    Examples:
        >>> Ok(42).map(lambda x: x * 2).unwrap()
        84
        >>> Err("failed").map(lambda x: x * 2).unwrap_err()
        'failed'
        >>> Ok(5).flat_map(lambda x: Ok(x * 2) if x > 0 else Err("neg"))
        Ok(10)

        Operators mirror the methods:
        >>> Ok(7) | str
        Ok('7')
        >>> Ok(7) >> (lambda x: Err("too_low") if x < 10 else Ok(x))
        Err('too_low')
        >>> Ok(3) @ Ok(lambda x: x + 1)
        Ok(4)

    Notes:
        - Uses __slots__, no per-instance dict
        - Immutable (all operations return a new Result or self)
        - Failure reasons are opaque, an Err holding a Result is never unwrapped
    """

    __slots__ = ("_value", "_is_ok")
    __match_args__ = ("_value",)

    def __init__(self, value: T | E, is_ok: bool) -> None:
        """Private constructor. Use Ok() or Err() instead."""
        self._value = value
        self._is_ok = is_ok

    # ─── Type Checking ───────────────────────────────────────────────

    def is_ok(self) -> bool:
        """Check if Result is Ok variant."""
        return self._is_ok

    def is_err(self) -> bool:
        """Check if Result is Err variant."""
        return not self._is_ok

    # ─── Value Extraction ──────────────────────────────────────────────

    def unwrap(self) -> T:
        """Extract Ok value. Raises UnwrapError on Err."""
        if self._is_ok:
            return self._value  # type: ignore[return-value]
        raise UnwrapError.wrong_variant(f"unwrap() on Err: {self._value!r}")

    def unwrap_err(self) -> E:
        """Extract Err value. Raises UnwrapError on Ok."""
        if not self._is_ok:
            return self._value  # type: ignore[return-value]
        raise UnwrapError.wrong_variant(f"unwrap_err() on Ok: {self._value!r}")

    def unwrap_or(self, default: T) -> T:
        """Extract Ok value or return default."""
        return self._value if self._is_ok else default  # type: ignore[return-value]

    def unwrap_or_else(self, f: Callable[[E], T]) -> T:
        """Extract Ok value or compute one from the error."""
        return self._value if self._is_ok else f(self._value)  # type: ignore[return-value,arg-type]

    def expect(self, msg: str) -> T:
        """Extract Ok value, raising UnwrapError with msg on Err."""
        if self._is_ok:
            return self._value  # type: ignore[return-value]
        raise UnwrapError.wrong_variant(f"{msg}: {self._value!r}")

    def expect_err(self, msg: str) -> E:
        """Extract Err value, raising UnwrapError with msg on Ok."""
        if not self._is_ok:
            return self._value  # type: ignore[return-value]
        raise UnwrapError.wrong_variant(f"{msg}: {self._value!r}")

    # ─── Functor Operations ────────────────────────────────────────────

    def map(self, f: Callable[[T], U]) -> Result[U, E]:
        """Apply f to Ok value. Signature: Result[T,E] → (T→U) → Result[U,E]"""
        return Result(f(self._value), _OK) if self._is_ok else self  # type: ignore[arg-type,return-value]

    def map_err(self, f: Callable[[E], F]) -> Result[T, F]:
        """Apply f to Err value. Signature: Result[T,E] → (E→F) → Result[T,F]"""
        return Result(f(self._value), _ERR) if not self._is_ok else self  # type: ignore[arg-type,return-value]

    # ─── Bifunctor Operations ──────────────────────────────────────────

    def bimap(self, ok_fn: Callable[[T], U], err_fn: Callable[[E], F]) -> Result[U, F]:
        """Apply ok_fn if Ok, err_fn if Err."""
        return Result(ok_fn(self._value), _OK) if self._is_ok else Result(err_fn(self._value), _ERR)  # type: ignore[arg-type]

    # ─── Monad Operations ──────────────────────────────────────────────

    def flat_map(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """Monadic bind (>>=). Chain operations that can fail.

        The Result returned by f becomes the outcome as is, without re-wrapping.

        Example:
            >>> def parse_int(s: str) -> Result[int, str]:
            ...     return Ok(int(s)) if s.isdigit() else Err(f"invalid int: {s}")
            >>> Ok("42").flat_map(parse_int)
            Ok(42)
            >>> Ok("x").flat_map(parse_int).map(lambda n: n + 1)
            Err('invalid int: x')

        Raises:
            TypeError: If f returns something other than a Result
        """
        if not self._is_ok:
            return self  # type: ignore[return-value]
        return ensure_result(f(self._value), _name_of(f))  # type: ignore[arg-type,return-value]

    def and_then(self, f: Callable[[T], Result[U, E]]) -> Result[U, E]:
        """Alias for flat_map."""
        return self.flat_map(f)

    def or_else(self, f: Callable[[E], Result[T, F]]) -> Result[T, F]:
        """Chain alternative on Err. If Ok, passes through."""
        return f(self._value) if not self._is_ok else self  # type: ignore[arg-type,return-value]

    # ─── Applicative Operations ────────────────────────────────────────

    def apply(self, f_result: Result[Callable[[T], U], E]) -> Result[U, E]:
        """Apply wrapped function to wrapped value (Applicative).

        This value's error wins when both sides are Err; the function side's
        error is returned only when this value is Ok.
        """
        if not isinstance(f_result, Result):
            raise TypeError(f"apply() expects a Result-wrapped function, got {type(f_result).__name__}")
        if not self._is_ok:
            return self  # type: ignore[return-value]
        if not f_result._is_ok:
            return f_result  # type: ignore[return-value]
        return Result(f_result._value(self._value), _OK)  # type: ignore[operator,arg-type]

    # ─── Logical Combinators ───────────────────────────────────────────

    def and_(self, other: Result[U, E]) -> Result[U, E]:
        """Return other if self is Ok, otherwise self's Err."""
        return other if self._is_ok else self  # type: ignore[return-value]

    def or_(self, other: Result[T, F]) -> Result[T, F]:
        """Return self if Ok, otherwise other."""
        return self if self._is_ok else other  # type: ignore[return-value]

    # ─── Inspection & Utilities ────────────────────────────────────────

    def ok(self) -> T | None:
        """Ok value, or None if Err."""
        return self._value if self._is_ok else None  # type: ignore[return-value]

    def err(self) -> E | None:
        """Err value, or None if Ok."""
        return self._value if not self._is_ok else None  # type: ignore[return-value]

    def inspect(self, f: Callable[[T], None]) -> Result[T, E]:
        """Call f with the Ok value for side effects, return self."""
        if self._is_ok:
            f(self._value)  # type: ignore[arg-type]
        return self

    def inspect_err(self, f: Callable[[E], None]) -> Result[T, E]:
        """Call f with the Err value for side effects, return self."""
        if not self._is_ok:
            f(self._value)  # type: ignore[arg-type]
        return self

    # ─── Pattern Matching ──────────────────────────────────────────────

    def match(self, *, ok: Callable[[T], U], err: Callable[[E], U]) -> U:
        """Exhaustive case analysis over both variants.

        Example:
            >>> Ok(42).match(ok=lambda x: f"success: {x}", err=lambda e: f"failed: {e}")
            'success: 42'
        """
        return ok(self._value) if self._is_ok else err(self._value)  # type: ignore[arg-type]

    # ─── Conversion ────────────────────────────────────────────────────

    def to_tuple(self) -> tuple[T | None, E | None]:
        """Convert to (ok_value, err_value) tuple."""
        return (self._value, None) if self._is_ok else (None, self._value)  # type: ignore[return-value]

    def flatten(self: Result[Result[T, E], E]) -> Result[T, E]:
        """Flatten nested Result: Result[Result[T, E], E] → Result[T, E].

        Only the Ok side is joined; an Err reason is left as it is.
        """
        return self._value if self._is_ok else self  # type: ignore[return-value]

    # ─── Operators ─────────────────────────────────────────────────────

    def __or__(self, f: object) -> Result:
        """``result | f`` is ``result.map(f)``."""
        if not callable(f):
            return NotImplemented
        return self.map(f)

    def __rshift__(self, f: object) -> Result:
        """``result >> f`` is ``result.flat_map(f)``."""
        if not callable(f):
            return NotImplemented
        return self.flat_map(f)

    def __matmul__(self, f_result: object) -> Result:
        """``result @ Ok(f)`` is ``result.apply(Ok(f))``."""
        if not isinstance(f_result, Result):
            return NotImplemented
        return self.apply(f_result)

    # ─── Dunder Methods ────────────────────────────────────────────────

    def __bool__(self) -> bool:
        return self._is_ok

    def __repr__(self) -> str:
        return f"{'Ok' if self._is_ok else 'Err'}({self._value!r})"

    __str__ = __repr__

    def __eq__(self, other: object) -> bool:
        """Structural equality."""
        if not isinstance(other, Result):
            return NotImplemented
        return self._is_ok == other._is_ok and self._value == other._value

    def __hash__(self) -> int:
        return hash((self._is_ok, self._value))

    def __iter__(self) -> Iterator[T]:
        """Yield the Ok value once, nothing for Err."""
        if self._is_ok:
            yield self._value  # type: ignore[misc]


# ═════════════════════════════════════════════════════════════════════════════
# Constructor Functions
# ═════════════════════════════════════════════════════════════════════════════


def Ok(value: T) -> Result[T, E]:  # noqa: N802
    """Construct Ok variant (success)."""
    return Result(value, _OK)


def Err(error: E) -> Result[T, E]:  # noqa: N802
    """Construct Err variant (failure)."""
    return Result(error, _ERR)


# ═════════════════════════════════════════════════════════════════════════════
# Collection Operations
# ═════════════════════════════════════════════════════════════════════════════


def sequence(results: list[Result[T, E]]) -> Result[list[T], E]:
    """Convert list of Results to Result of list, failing fast on the first Err.

    Example:
        >>> sequence([Ok(1), Ok(2), Ok(3)])
        Ok([1, 2, 3])
        >>> sequence([Ok(1), Err("fail"), Err("later")])
        Err('fail')
    """
    values: list[T] = []
    for r in results:
        if not r._is_ok:
            return r  # type: ignore[return-value]
        values.append(r._value)  # type: ignore[arg-type]
    return Result(values, _OK)


def traverse(items: list[T], f: Callable[[T], Result[U, E]]) -> Result[list[U], E]:
    """Map f over items and sequence the results. Stops calling f at the first Err.

    Example:
        >>> traverse(["1", "2"], lambda s: Ok(int(s)) if s.isdigit() else Err(s))
        Ok([1, 2])
    """
    values: list[U] = []
    for item in items:
        r = f(item)
        if not r._is_ok:
            return r  # type: ignore[return-value]
        values.append(r._value)  # type: ignore[arg-type]
    return Result(values, _OK)


def collect_results(results: list[Result[T, E]]) -> Result[list[T], list[E]]:
    """Collect all Results, accumulating every error instead of failing fast.

    Example:
        >>> collect_results([Ok(1), Err("e1"), Ok(3), Err("e2")])
        Err(['e1', 'e2'])
    """
    values: list[T] = []
    errors: list[E] = []
    for r in results:
        (values if r._is_ok else errors).append(r._value)  # type: ignore[arg-type]
    return Result(values, _OK) if not errors else Result(errors, _ERR)
