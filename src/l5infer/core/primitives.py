"""Types of the primitive operators."""

from __future__ import annotations

from collections.abc import Callable

from l5infer.core.errors import UnsupportedConstruct
from l5infer.core.types import BOOLEAN, NUMBER, VOID, ProcType, TExp, TypeVarStore

NUMERIC_OPS = ("+", "-", "*", "/")
COMPARISON_OPS = ("<", ">", "=")
EQUALITY_OPS = ("eq?", "string=?")
PREDICATE_OPS = ("number?", "boolean?", "string?", "symbol?", "list?")


def _numeric(_: TypeVarStore) -> TExp:
    return ProcType((NUMBER, NUMBER), NUMBER)


def _comparison(_: TypeVarStore) -> TExp:
    return ProcType((NUMBER, NUMBER), BOOLEAN)


def _not(_: TypeVarStore) -> TExp:
    return ProcType((BOOLEAN,), BOOLEAN)


def _equality(store: TypeVarStore) -> TExp:
    return ProcType((store.fresh(), store.fresh()), BOOLEAN)


def _predicate(store: TypeVarStore) -> TExp:
    return ProcType((store.fresh(),), BOOLEAN)


def _display(store: TypeVarStore) -> TExp:
    return ProcType((store.fresh(),), VOID)


def _newline(_: TypeVarStore) -> TExp:
    return ProcType((), VOID)


PRIMITIVES: dict[str, Callable[[TypeVarStore], TExp]] = {
    **{op: _numeric for op in NUMERIC_OPS},
    **{op: _comparison for op in COMPARISON_OPS},
    "not": _not,
    **{op: _equality for op in EQUALITY_OPS},
    **{op: _predicate for op in PREDICATE_OPS},
    "display": _display,
    "newline": _newline,
}


def is_primitive(op: str) -> bool:
    return op in PRIMITIVES


def type_of_primitive(op: str, store: TypeVarStore) -> TExp | UnsupportedConstruct:
    """Signature of a primitive operator.

    Type variables in a signature are fresh on every call, so two uses of
    `eq?` do not constrain each other.
    """
    signature = PRIMITIVES.get(op)
    if signature is None:
        return UnsupportedConstruct(f"Unknown primitive {op}")
    return signature(store)
