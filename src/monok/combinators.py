"""Free-function combinators over Result values.

These are the functional spellings of the Result methods, and the targets the
pipeline rewriter emits for sites it cannot resolve at definition time.

    >>> fmap(Ok(1), lambda x: x + 1)
    Ok(2)
    >>> fmap(fmap(Ok(1), lambda x: x + 1), lambda x: x * 2)
    Ok(4)
    >>> fmap(Err("reason"), lambda x: x + 1)
    Err('reason')

Extra arguments follow the payload, the way a pipe puts its left operand first:

    >>> fmap(Ok([1, 2, 3]), lambda xs, n: [x + n for x in xs], 1)
    Ok([2, 3, 4])
"""

from __future__ import annotations

from typing import Callable, TypeVar

from .result import Result, _name_of, ensure_result

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")

Step = Callable[..., object] | tuple[object, ...]


def _require_result(value: object, op: str) -> Result:
    if not isinstance(value, Result):
        raise TypeError(f"{op}() expects a Result, got {type(value).__name__}: {value!r}")
    return value


def fmap(value: Result[T, E], f: Callable[..., U], *args: object, **kwargs: object) -> Result[U, E]:
    """Functor map: ``Ok(x)`` → ``Ok(f(x, *args, **kwargs))``, ``Err(r)`` unchanged.

    f is never called for an Err and exceptions it raises are not caught.
    """
    value = _require_result(value, "fmap")
    if not value.is_ok():
        return value  # type: ignore[return-value]
    return value.map(lambda x: f(x, *args, **kwargs))


def lift(value: Result[T, E], wrapped_fn: Result[Callable[[T], U], E]) -> Result[U, E]:
    """Applicative apply: call the function inside wrapped_fn with the payload of value.

    When both operands are Err, the error of value wins:

        >>> lift(Ok(2), Ok(lambda x: x * 10))
        Ok(20)
        >>> lift(Err("r1"), Err("r2"))
        Err('r1')
        >>> lift(Ok(2), Err("r2"))
        Err('r2')
    """
    return _require_result(value, "lift").apply(_require_result(wrapped_fn, "lift"))


def bind(value: Result[T, E], f: Callable[..., Result[U, E]], *args: object, **kwargs: object) -> Result[U, E]:
    """Monadic bind: ``Ok(x)`` → ``f(x, *args, **kwargs)``, ``Err(r)`` unchanged.

    f must itself return a Result, which is passed on without re-wrapping.

        >>> check = lambda n: Ok(n) if n >= 10 else Err("too_low")
        >>> bind(Ok(12), check)
        Ok(12)
        >>> bind(Ok(7), check)
        Err('too_low')
    """
    value = _require_result(value, "bind")
    if not value.is_ok():
        return value  # type: ignore[return-value]
    return ensure_result(f(value.unwrap(), *args, **kwargs), _name_of(f))  # type: ignore[return-value]


def pipe(value: Result[T, E], *steps: Step) -> Result:
    """Thread value through steps with fmap, stopping at the first Err.

    A step is a callable, or a ``(callable, *args)`` tuple whose args follow
    the payload.

        >>> pipe(Ok(3), lambda n: n - 1, lambda n: n - 1)
        Ok(1)
        >>> pipe(Ok("a,b"), (str.split, ","), len)
        Ok(2)
    """
    out = _require_result(value, "pipe")
    for step in steps:
        if not out.is_ok():
            break
        if isinstance(step, tuple):
            if not step or not callable(step[0]):
                raise TypeError(f"pipe() step tuple must start with a callable, got {step!r}")
            out = fmap(out, step[0], *step[1:])
        else:
            out = fmap(out, step)
    return out
