"""Error types for the L5 type inferencer.

Inference returns these as values (`TExp | TypeCheckError`); it never raises
them. They subclass Exception so that callers embedding the inferencer can
raise them at their own boundary.
"""

from __future__ import annotations

from collections.abc import Iterator, Sequence

from l5infer.core.types import TExp, TypeVar
from l5infer.surface.ast import Exp
from l5infer.surface.unparse import unparse, unparse_texp


def _show(texps: TExp | Sequence[TExp]) -> str:
    if isinstance(texps, TExp):
        return unparse_texp(texps)
    return "[" + ", ".join(unparse_texp(t) for t in texps) + "]"


class TypeCheckError(Exception):
    """Base class for type errors."""

    exp: Exp | None

    def __init__(self, message: str, exp: Exp | None = None):
        super().__init__(message)
        self.message = message
        self.exp = exp

    def leaves(self) -> Iterator[TypeCheckError]:
        """The non-composite errors this error is made of."""
        yield self


class UnboundVariable(TypeCheckError):
    """Variable not found anywhere in the environment chain."""

    def __init__(self, name: str, exp: Exp | None = None):
        self.name = name
        super().__init__(f"Unbound variable {name}", exp)


class TypeMismatch(TypeCheckError):
    """Two types that cannot be made equal: atomic kinds or shapes differ."""

    def __init__(self, te1: TExp, te2: TExp, exp: Exp | None = None, *, structural: bool = False):
        self.te1 = te1
        self.te2 = te2
        if structural:
            message = f"Incompatible types structure: {unparse_texp(te1)} - {unparse_texp(te2)}"
        else:
            message = f"Incompatible atomic types {unparse_texp(te1)} - {unparse_texp(te2)}"
        super().__init__(message, exp)


class ArityMismatch(TypeCheckError):
    """Procedure types with different parameter counts, or type sequences of
    different lengths."""

    def __init__(
        self,
        te1: TExp | Sequence[TExp],
        te2: TExp | Sequence[TExp],
        exp: Exp | None = None,
    ):
        self.te1 = te1
        self.te2 = te2
        super().__init__(f"Wrong number of args {_show(te1)} - {_show(te2)}", exp)


class OccursCheckViolation(TypeCheckError):
    """Binding the variable would produce a circular type."""

    def __init__(self, var: TypeVar, texp: TExp, exp: Exp | None = None):
        self.var = var
        self.texp = texp
        where = f" in {unparse(exp)}" if exp is not None else ""
        super().__init__(
            f"Occur check error - {var.name} occurs in {unparse_texp(texp)}{where}", exp
        )


class BadTypeExpression(TypeCheckError):
    """A node that is not part of the type expression model."""

    def __init__(self, texp: object, exp: Exp | None = None):
        self.texp = texp
        where = f" in {unparse(exp)}" if exp is not None else ""
        super().__init__(f"Bad type expression - {texp!r}{where}", exp)


class UnsupportedConstruct(TypeCheckError):
    """A construct the inferencer does not type: non-procedure letrec
    bindings, unknown node shapes, programs."""


class CompositeError(TypeCheckError):
    """Several independent failures reported together."""

    def __init__(self, errors: Sequence[TypeCheckError], exp: Exp | None = None):
        self.errors = list(errors)
        messages = "; ".join(e.message for e in self.errors)
        if exp is not None:
            message = f"Check {unparse(exp)}: errors {messages}"
        else:
            message = messages
        super().__init__(message, exp)

    def leaves(self) -> Iterator[TypeCheckError]:
        for error in self.errors:
            yield from error.leaves()
