"""Type expressions for L5: atomic types, type variables and procedure types."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import Literal, Union

AtomicKind = Literal["number", "boolean", "string", "void"]

ATOMIC_KINDS: tuple[str, ...] = ("number", "boolean", "string", "void")


class TExp:
    """Base class for type expressions."""

    pass


@dataclass(frozen=True)
class AtomicType(TExp):
    """Atomic type. Two atomic types are equal iff they have the same kind."""

    kind: AtomicKind

    def __str__(self) -> str:
        return self.kind


@dataclass(eq=False)
class TypeVar(TExp):
    """Type variable cell.

    A cell starts unbound and is bound at most once, by the unifier, after an
    occurs check. Equality is identity: two distinct cells are never equal,
    whatever their names or bindings.
    """

    index: int
    name: str
    _contents: TExp | None = field(default=None, repr=False)

    @property
    def is_bound(self) -> bool:
        return self._contents is not None

    @property
    def contents(self) -> TExp | None:
        return self._contents

    def _bind(self, texp: TExp) -> None:
        # Only l5infer.core.unify calls this, after a passing occurs check.
        if self._contents is not None:
            raise RuntimeError(f"Type variable {self.name} is already bound to {self._contents}")
        self._contents = texp

    def _unbind(self) -> None:
        # Trail rollback of a failed unification.
        self._contents = None

    def __str__(self) -> str:
        if self._contents is not None:
            return str(self._contents)
        return self.name


@dataclass(frozen=True)
class ProcType(TExp):
    """Procedure type: t1 * ... * tn -> t.

    Structural equality: same arity and pairwise-equal parameters, then equal
    return types.
    """

    params: tuple[TExp, ...]
    ret: TExp

    def __post_init__(self) -> None:
        if not isinstance(self.params, tuple):
            object.__setattr__(self, "params", tuple(self.params))

    def components(self) -> list[TExp]:
        """Parameters followed by the return type."""
        return [*self.params, self.ret]

    def __str__(self) -> str:
        if self.params:
            params_str = " * ".join(_nested_str(p) for p in self.params)
        else:
            params_str = "Empty"
        return f"{params_str} -> {_nested_str(self.ret)}"


TypeRepr = Union[AtomicType, TypeVar, ProcType]

NUMBER = AtomicType("number")
BOOLEAN = AtomicType("boolean")
STRING = AtomicType("string")
VOID = AtomicType("void")


def walk(texp: TExp) -> TExp:
    """Follow a chain of bound variables to the first non-bound node."""
    while isinstance(texp, TypeVar) and texp.contents is not None:
        texp = texp.contents
    return texp


def resolve(texp: TExp) -> TExp:
    """Replace every bound variable in texp by its contents, recursively."""
    match walk(texp):
        case ProcType(params, ret):
            return ProcType(tuple(resolve(p) for p in params), resolve(ret))
        case other:
            return other


def free_vars(texp: TExp) -> list[TypeVar]:
    """Unbound variables reachable from texp, in first-occurrence order."""
    result: list[TypeVar] = []

    def visit(t: TExp) -> None:
        match walk(t):
            case TypeVar() as var:
                if not any(var is seen for seen in result):
                    result.append(var)
            case ProcType(params, ret):
                for p in params:
                    visit(p)
                visit(ret)
            case _:
                pass

    visit(texp)
    return result


def _nested_str(texp: TExp) -> str:
    if isinstance(walk(texp), ProcType):
        return f"({texp})"
    return str(texp)


class TypeVarStore:
    """Allocates type variable cells with sequential indices.

    One store is shared by the parser and the inferencer working on the same
    source so that printed variable names never collide.
    """

    def __init__(self, prefix: str = "T") -> None:
        self.prefix = prefix
        self._counter = itertools.count(1)
        self.allocated: list[TypeVar] = []

    def fresh(self, name: str | None = None) -> TypeVar:
        index = next(self._counter)
        var = TypeVar(index, name if name is not None else f"{self.prefix}_{index}")
        self.allocated.append(var)
        return var

    def __len__(self) -> int:
        return len(self.allocated)
