"""Printers for expressions and type expressions.

Used in error messages and by the CLI. Type expressions print without outer
parentheses (`number -> number`); inside an expression, annotations print
in the parenthesized concrete form (`(number -> number)`).
"""

from __future__ import annotations

import json

from l5infer.core.types import ProcType, TExp, walk
from l5infer.surface.ast import (
    AppExp,
    Binding,
    BoolExp,
    DefineExp,
    Exp,
    IfExp,
    LetExp,
    LetrecExp,
    NumExp,
    PrimOp,
    ProcExp,
    Program,
    StrExp,
    VarDecl,
    VarRef,
)


def unparse_texp(texp: TExp) -> str:
    """Print a type expression, dereferencing bound variables."""
    return str(texp)


def _annotation(texp: TExp) -> str:
    if isinstance(walk(texp), ProcType):
        return f"({texp})"
    return str(texp)


def _var_decl(decl: VarDecl) -> str:
    return f"({decl.var} : {_annotation(decl.texp)})"


def _binding(binding: Binding) -> str:
    return f"({_var_decl(binding.var)} {unparse(binding.val)})"


def _seq(exps: tuple[Exp, ...]) -> str:
    return " ".join(unparse(e) for e in exps)


def _number(value: int | float) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


def unparse(exp: Exp) -> str:
    """Print an expression in concrete syntax."""
    match exp:
        case NumExp(value):
            return _number(value)
        case BoolExp(value):
            return "#t" if value else "#f"
        case StrExp(value):
            return json.dumps(value, ensure_ascii=False)
        case PrimOp(op):
            return op
        case VarRef(var):
            return var
        case IfExp(test, then, alt):
            return f"(if {unparse(test)} {unparse(then)} {unparse(alt)})"
        case ProcExp(args, return_te, body):
            params = " ".join(_var_decl(a) for a in args)
            return f"(lambda ({params}) : {_annotation(return_te)} {_seq(body)})"
        case AppExp(rator, rands):
            if not rands:
                return f"({unparse(rator)})"
            return f"({unparse(rator)} {_seq(rands)})"
        case LetExp(bindings, body):
            return f"(let ({' '.join(_binding(b) for b in bindings)}) {_seq(body)})"
        case LetrecExp(bindings, body):
            return f"(letrec ({' '.join(_binding(b) for b in bindings)}) {_seq(body)})"
        case DefineExp(var, val):
            return f"(define {_var_decl(var)} {unparse(val)})"
        case Program(exps):
            if not exps:
                return "(L5)"
            return f"(L5 {_seq(exps)})"
        case _:
            return repr(exp)
