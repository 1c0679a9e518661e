"""Tests for the Result value.

Validates:
- Functor and monad laws
- Applicative precedence (value-side error wins)
- Operator overloads
- Failure reasons stay opaque
"""

from __future__ import annotations

from typing import Callable

import pytest

from monok import Err, Ok, Result, UnwrapError, collect_results, sequence, traverse


# ═════════════════════════════════════════════════════════════════════════════
# Laws
# ═════════════════════════════════════════════════════════════════════════════


def test_functor_identity() -> None:
    """fmap id = id"""
    assert Ok(42).map(lambda x: x) == Ok(42)
    assert Err("fail").map(lambda x: x) == Err("fail")


def test_functor_composition() -> None:
    """fmap (f . g) = fmap f . fmap g"""
    f: Callable[[int], int] = lambda x: x + 1
    g: Callable[[int], int] = lambda x: x * 2
    assert Ok(5).map(lambda x: f(g(x))) == Ok(5).map(g).map(f)


def test_monad_left_identity() -> None:
    """return a >>= f = f a"""
    f: Callable[[int], Result[int, str]] = lambda x: Ok(x * 2)
    assert Ok(42).flat_map(f) == f(42)


def test_monad_right_identity() -> None:
    """m >>= return = m"""
    assert Ok(42).flat_map(Ok) == Ok(42)
    assert Err("e").flat_map(Ok) == Err("e")


def test_monad_associativity() -> None:
    """(m >>= f) >>= g = m >>= (\\x -> f x >>= g)"""
    f: Callable[[int], Result[int, str]] = lambda x: Ok(x + 1)
    g: Callable[[int], Result[int, str]] = lambda x: Ok(x * 2) if x < 10 else Err("big")
    m: Result[int, str] = Ok(5)
    assert m.flat_map(f).flat_map(g) == m.flat_map(lambda x: f(x).flat_map(g))


# ═════════════════════════════════════════════════════════════════════════════
# Construction & Extraction
# ═════════════════════════════════════════════════════════════════════════════


def test_ok_construction() -> None:
    result: Result[int, str] = Ok(42)
    assert result.is_ok() and not result.is_err()
    assert result.unwrap() == 42
    assert result.ok() == 42
    assert result.err() is None


def test_err_construction() -> None:
    result: Result[int, str] = Err("failed")
    assert result.is_err() and not result.is_ok()
    assert result.unwrap_err() == "failed"
    assert result.ok() is None
    assert result.err() == "failed"


def test_unwrap_on_err_raises() -> None:
    with pytest.raises(UnwrapError, match="unwrap\\(\\) on Err"):
        Err("boom").unwrap()
    with pytest.raises(RuntimeError):
        Ok(1).unwrap_err()


def test_expect_messages() -> None:
    assert Ok(1).expect("needed a value") == 1
    with pytest.raises(UnwrapError, match="needed a value: 'boom'"):
        Err("boom").expect("needed a value")
    assert Err("e").expect_err("needed an error") == "e"


def test_unwrap_or() -> None:
    assert Ok(1).unwrap_or(0) == 1
    assert Err("e").unwrap_or(0) == 0
    assert Err("abc").unwrap_or_else(len) == 3


# ═════════════════════════════════════════════════════════════════════════════
# Functor / Monad / Applicative
# ═════════════════════════════════════════════════════════════════════════════


def test_map_on_err_keeps_same_error() -> None:
    err = Err("fail")
    assert err.map(lambda x: x * 2) is err


def test_map_err() -> None:
    assert Err("fail").map_err(lambda e: f"Error: {e}") == Err("Error: fail")
    assert Ok(42).map_err(lambda e: f"Error: {e}") == Ok(42)


def test_bimap() -> None:
    assert Ok(5).bimap(lambda x: x * 2, str.upper) == Ok(10)
    assert Err("fail").bimap(lambda x: x * 2, str.upper) == Err("FAIL")


def test_flat_map_does_not_rewrap() -> None:
    assert Ok(5).flat_map(lambda x: Err("failed")) == Err("failed")
    assert Ok(5).and_then(lambda x: Ok(Ok(x))) == Ok(Ok(5))


def test_flat_map_rejects_plain_return() -> None:
    def not_a_result(x: int) -> int:
        return x

    with pytest.raises(TypeError, match="not_a_result must return a Result"):
        Ok(1).flat_map(not_a_result)


def test_apply() -> None:
    assert Ok(3).apply(Ok(lambda x: x + 1)) == Ok(4)
    assert Ok(3).apply(Err("no fn")) == Err("no fn")
    assert Err("no value").apply(Ok(lambda x: x + 1)) == Err("no value")


def test_apply_value_error_wins() -> None:
    assert Err("r1").apply(Err("r2")) == Err("r1")


def test_or_else() -> None:
    assert Err("e").or_else(lambda e: Ok(len(e))) == Ok(1)
    assert Ok(2).or_else(lambda e: Ok(0)) == Ok(2)


def test_and_or_combinators() -> None:
    assert Ok(1).and_(Ok(2)) == Ok(2)
    assert Err("a").and_(Ok(2)) == Err("a")
    assert Ok(1).or_(Ok(2)) == Ok(1)
    assert Err("a").or_(Ok(2)) == Ok(2)


# ═════════════════════════════════════════════════════════════════════════════
# Operators
# ═════════════════════════════════════════════════════════════════════════════


def test_pipe_operator_maps() -> None:
    assert Ok(7) | str == Ok("7")
    assert (Ok(3) | (lambda n: n - 1) | (lambda n: n - 1)) == Ok(1)
    assert Err("e") | str == Err("e")


def test_shift_operator_binds() -> None:
    check = lambda n: Ok(n) if n >= 10 else Err("too_low")  # noqa: E731
    assert Ok(12) >> check == Ok(12)
    assert Ok(7) >> check == Err("too_low")


def test_matmul_operator_applies() -> None:
    assert Ok(3) @ Ok(lambda x: x * 3) == Ok(9)
    assert Err("r1") @ Err("r2") == Err("r1")


def test_operators_reject_non_callables() -> None:
    with pytest.raises(TypeError):
        Ok(1) | 2  # noqa: B018
    with pytest.raises(TypeError):
        Ok(1) >> "x"  # noqa: B018
    with pytest.raises(TypeError):
        Ok(1) @ (lambda x: x)  # noqa: B018


# ═════════════════════════════════════════════════════════════════════════════
# Data Model
# ═════════════════════════════════════════════════════════════════════════════


def test_structural_equality_and_hash() -> None:
    assert Ok(1) == Ok(1)
    assert Ok(1) != Err(1)
    assert Ok([1]) != Ok([2])
    assert len({Ok(1), Ok(1), Err(1)}) == 2


def test_error_reason_is_opaque() -> None:
    nested = Err(Err("inner"))
    assert nested.map(str) is nested
    assert nested.flat_map(Ok) == Err(Err("inner"))
    assert Ok(1).apply(nested) == Err(Err("inner"))
    assert nested.flatten() == Err(Err("inner"))


def test_flatten() -> None:
    assert Ok(Ok(1)).flatten() == Ok(1)
    assert Ok(Err("e")).flatten() == Err("e")


def test_match_method_and_statement() -> None:
    assert Ok(42).match(ok=lambda x: f"ok {x}", err=lambda e: f"err {e}") == "ok 42"
    assert Err("x").match(ok=lambda x: f"ok {x}", err=lambda e: f"err {e}") == "err x"

    match Ok(5):
        case Result(value):
            captured = value
    assert captured == 5


def test_truthiness_iteration_tuple() -> None:
    assert Ok(0)
    assert not Err("e")
    assert list(Ok(1)) == [1]
    assert list(Err("e")) == []
    assert Ok(1).to_tuple() == (1, None)
    assert Err("e").to_tuple() == (None, "e")


def test_inspect_runs_only_on_matching_variant() -> None:
    seen: list[object] = []
    assert Ok(1).inspect(seen.append).inspect_err(seen.append) == Ok(1)
    assert Err("e").inspect(seen.append).inspect_err(seen.append) == Err("e")
    assert seen == [1, "e"]


def test_repr() -> None:
    assert repr(Ok("a")) == "Ok('a')"
    assert str(Err(3)) == "Err(3)"


# ═════════════════════════════════════════════════════════════════════════════
# Collection Operations
# ═════════════════════════════════════════════════════════════════════════════


def test_sequence() -> None:
    assert sequence([Ok(1), Ok(2), Ok(3)]) == Ok([1, 2, 3])
    assert sequence([Ok(1), Err("first"), Err("second")]) == Err("first")
    assert sequence([]) == Ok([])


def test_traverse_stops_at_first_err() -> None:
    calls: list[str] = []

    def parse(s: str) -> Result[int, str]:
        calls.append(s)
        return Ok(int(s)) if s.isdigit() else Err(f"invalid: {s}")

    assert traverse(["1", "2"], parse) == Ok([1, 2])
    calls.clear()
    assert traverse(["1", "bad", "3"], parse) == Err("invalid: bad")
    assert calls == ["1", "bad"]


def test_collect_results() -> None:
    assert collect_results([Ok(1), Ok(2)]) == Ok([1, 2])
    assert collect_results([Ok(1), Err("e1"), Ok(3), Err("e2")]) == Err(["e1", "e2"])


# ═════════════════════════════════════════════════════════════════════════════
# Railway Patterns
# ═════════════════════════════════════════════════════════════════════════════


def _parse_int(s: str) -> Result[int, str]:
    try:
        return Ok(int(s))
    except ValueError:
        return Err(f"invalid: {s}")


def _validate_positive(n: int) -> Result[int, str]:
    return Ok(n) if n > 0 else Err("must be positive")


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("42", Ok(84)),
        ("bad", Err("invalid: bad")),
        ("-5", Err("must be positive")),
    ],
)
def test_railway(raw: str, expected: Result[int, str]) -> None:
    result = Ok(raw).flat_map(_parse_int).flat_map(_validate_positive).map(lambda n: n * 2)
    assert result == expected


def test_fallback_chain() -> None:
    result = (
        Err("primary unavailable")
        .or_else(lambda _: Err("backup unavailable"))
        .or_else(lambda _: Ok("cached data"))
    )
    assert result == Ok("cached data")
