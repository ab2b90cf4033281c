"""Abstract syntax of the typed L5 language."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Union

from l5infer.core.types import TExp
from l5infer.utils.location import Location


class Exp:
    """Base class for expressions."""

    pass


@dataclass(frozen=True)
class NumExp(Exp):
    value: int | float
    location: Location | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class BoolExp(Exp):
    value: bool
    location: Location | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class StrExp(Exp):
    value: str
    location: Location | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class PrimOp(Exp):
    """Reference to a primitive operator such as `+` or `eq?`."""

    op: str
    location: Location | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class VarRef(Exp):
    var: str
    location: Location | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class VarDecl:
    """A binder with its type annotation.

    Binders written without an annotation carry a fresh type variable
    allocated by the parser.
    """

    var: str
    texp: TExp


@dataclass(frozen=True)
class Binding:
    var: VarDecl
    val: Exp


@dataclass(frozen=True)
class IfExp(Exp):
    test: Exp
    then: Exp
    alt: Exp
    location: Location | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class ProcExp(Exp):
    """(lambda ((x1 : t1) ... (xn : tn)) : t body ...)"""

    args: tuple[VarDecl, ...]
    return_te: TExp
    body: tuple[Exp, ...]
    location: Location | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class AppExp(Exp):
    rator: Exp
    rands: tuple[Exp, ...]
    location: Location | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class LetExp(Exp):
    bindings: tuple[Binding, ...]
    body: tuple[Exp, ...]
    location: Location | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class LetrecExp(Exp):
    """Recursive bindings. Only procedure initializers are typeable."""

    bindings: tuple[Binding, ...]
    body: tuple[Exp, ...]
    location: Location | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class DefineExp(Exp):
    var: VarDecl
    val: Exp
    location: Location | None = field(default=None, compare=False, repr=False)


@dataclass(frozen=True)
class Program(Exp):
    exps: tuple[Exp, ...]
    location: Location | None = field(default=None, compare=False, repr=False)


CExp = Union[NumExp, BoolExp, StrExp, PrimOp, VarRef, IfExp, ProcExp, AppExp, LetExp, LetrecExp]
Parsed = Union[CExp, DefineExp, Program]
