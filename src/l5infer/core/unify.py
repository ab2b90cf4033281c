"""Unification over mutable type variable cells, with occurs check.

Every public entry point runs as one transaction: the variables bound while
it runs are recorded on a trail, and if the entry point ends in an error all
of them are unbound again. A failed unification therefore never leaves
partial bindings behind.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import Union

from loguru import logger

from l5infer.core.errors import (
    ArityMismatch,
    BadTypeExpression,
    CompositeError,
    OccursCheckViolation,
    TypeCheckError,
    TypeMismatch,
)
from l5infer.core.types import AtomicType, ProcType, TExp, TypeVar, walk
from l5infer.surface.ast import Exp

TypeOrError = Union[TExp, TypeCheckError]

Trail = list[TypeVar]


def unify(te1: TypeOrError, te2: TypeOrError, exp: Exp | None = None) -> TypeCheckError | None:
    """Make te1 and te2 equal, binding free variables as needed.

    Args:
        te1: First type, or an error from a previous step
        te2: Second type, or an error from a previous step
        exp: Expression being checked, used in messages only

    Returns:
        None on success, otherwise the error. An error input is returned
        unchanged.
    """
    return _atomically(lambda trail: _check_equal_type(te1, te2, exp, trail))


def unify_all(
    tes1: Sequence[TExp], tes2: Sequence[TExp], exp: Exp | None = None
) -> TypeCheckError | None:
    """Unify two sequences pairwise.

    Unlike `unify`, every pair is attempted; all failures are reported
    together in one CompositeError.
    """
    return _atomically(lambda trail: _check_equal_types(tes1, tes2, exp, trail))


def resolve_var(var: TypeVar, target: TExp, exp: Exp | None = None) -> TypeCheckError | None:
    """Make var equal to target, binding var if it is still free."""
    return _atomically(lambda trail: _check_tvar_equal_type(var, target, exp, trail))


def occurs_check(var: TypeVar, texp: TExp, exp: Exp | None = None) -> TypeCheckError | None:
    """Check that var does not occur in texp.

    Bound variables inside texp are followed through their contents. Every
    component of a procedure type is checked; the first failure is returned.
    """

    def loop(t: object) -> TypeCheckError | None:
        match t:
            case AtomicType():
                return None
            case ProcType():
                failures = [err for c in t.components() if (err := loop(c)) is not None]
                return failures[0] if failures else None
            case TypeVar() if t is var:
                return OccursCheckViolation(var, texp, exp)
            case TypeVar() if t.contents is not None:
                return loop(t.contents)
            case TypeVar():
                return None
            case _:
                return BadTypeExpression(t, exp)

    return loop(texp)


def _atomically(check: Callable[[Trail], TypeCheckError | None]) -> TypeCheckError | None:
    trail: Trail = []
    result = check(trail)
    if result is not None and trail:
        logger.debug("unify.rollback vars={}", [v.name for v in trail])
        for var in reversed(trail):
            var._unbind()
    return result


def _check_equal_type(
    te1: TypeOrError, te2: TypeOrError, exp: Exp | None, trail: Trail
) -> TypeCheckError | None:
    match te1, te2:
        case TypeCheckError(), _:
            return te1
        case _, TypeCheckError():
            return te2
        case TypeVar(), TypeVar() if te1 is te2:
            return None
        case TypeVar(), _:
            return _check_tvar_equal_type(te1, te2, exp, trail)
        case _, TypeVar():
            return _check_tvar_equal_type(te2, te1, exp, trail)
        case AtomicType(), AtomicType():
            if te1 == te2:
                return None
            return TypeMismatch(te1, te2, exp)
        case ProcType(), ProcType():
            return _check_proc_equal_types(te1, te2, exp, trail)
        case _:
            return TypeMismatch(te1, te2, exp, structural=True)


def _check_equal_types(
    tes1: Sequence[TExp], tes2: Sequence[TExp], exp: Exp | None, trail: Trail
) -> TypeCheckError | None:
    if len(tes1) != len(tes2):
        return ArityMismatch(list(tes1), list(tes2), exp)
    results = [_check_equal_type(te1, te2, exp, trail) for te1, te2 in zip(tes1, tes2)]
    errors = [r for r in results if r is not None]
    if errors:
        return CompositeError(errors, exp)
    return None


def _check_proc_equal_types(
    te1: ProcType, te2: ProcType, exp: Exp | None, trail: Trail
) -> TypeCheckError | None:
    if len(te1.params) != len(te2.params):
        return ArityMismatch(te1, te2, exp)
    return _check_equal_types(te1.components(), te2.components(), exp, trail)


def _check_tvar_equal_type(
    tvar: TypeVar, te: TExp, exp: Exp | None, trail: Trail
) -> TypeCheckError | None:
    if tvar.contents is not None:
        return _check_equal_type(tvar.contents, te, exp, trail)

    target = walk(te)
    if target is tvar:
        return None
    occurs = occurs_check(tvar, target, exp)
    if occurs is not None:
        return occurs

    tvar._bind(target)
    trail.append(tvar)
    logger.debug("unify.bind {} := {}", tvar.name, target)
    return None
