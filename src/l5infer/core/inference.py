"""Type inference for L5 expressions.

Each expression shape has one typing rule. Rules return either a type
expression or a TypeCheckError value; failures propagate upward as values.
Unification with type variables fills in what annotations leave open, e.g.
the result type of an application.
"""

from __future__ import annotations

from collections.abc import Sequence

from loguru import logger

from l5infer.core.env import TypeEnv
from l5infer.core.errors import CompositeError, TypeCheckError, UnsupportedConstruct
from l5infer.core.primitives import type_of_primitive
from l5infer.core.types import BOOLEAN, NUMBER, STRING, VOID, ProcType, TypeVar, TypeVarStore
from l5infer.core.unify import TypeOrError, unify
from l5infer.surface.ast import (
    AppExp,
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
    VarRef,
)
from l5infer.surface.unparse import unparse


def _collect(results: Sequence[TypeCheckError | None], exp: Exp) -> TypeCheckError | None:
    """Merge per-item failures: none, the single one, or a CompositeError."""
    errors = [r for r in results if r is not None]
    if not errors:
        return None
    if len(errors) == 1:
        return errors[0]
    return CompositeError(errors, exp)


class Inferencer:
    """Computes the type of fully annotated L5 expressions.

    The inferencer allocates exactly one fresh type variable per application
    it types, from `store`, and records it in `fresh_vars`.
    """

    def __init__(self, store: TypeVarStore | None = None):
        self.store = store if store is not None else TypeVarStore()
        self.fresh_vars: list[TypeVar] = []

    def type_of(self, exp: Exp, tenv: TypeEnv) -> TypeOrError:
        """Compute the type of exp in tenv."""
        match exp:
            case NumExp():
                return NUMBER
            case BoolExp():
                return BOOLEAN
            case StrExp():
                return STRING
            case PrimOp(op):
                return type_of_primitive(op, self.store)
            case VarRef(var):
                return tenv.lookup(var)
            case IfExp():
                return self.type_of_if(exp, tenv)
            case ProcExp():
                return self.type_of_proc(exp, tenv)
            case AppExp():
                return self.type_of_app(exp, tenv)
            case LetExp():
                return self.type_of_let(exp, tenv)
            case LetrecExp():
                return self.type_of_letrec(exp, tenv)
            case DefineExp():
                return self.type_of_define(exp, tenv)
            case Program():
                return self.type_of_program(exp, tenv)
            case _:
                return UnsupportedConstruct(f"Unknown expression {exp!r}")

    def type_of_exps(self, exps: Sequence[Exp], tenv: TypeEnv) -> TypeOrError:
        """Type of the last expression; earlier ones must type-check.

        Stops at the first failing expression.

        Raises:
            ValueError: If exps is empty
        """
        if not exps:
            raise ValueError("Cannot type an empty sequence of expressions")
        for exp in exps[:-1]:
            match self.type_of(exp, tenv):
                case TypeCheckError() as error:
                    return error
                case _:
                    pass
        return self.type_of(exps[-1], tenv)

    def type_of_if(self, exp: IfExp, tenv: TypeEnv) -> TypeOrError:
        """(if test then alt): test is boolean, then and alt agree."""
        test_te = self.type_of(exp.test, tenv)
        then_te = self.type_of(exp.then, tenv)
        alt_te = self.type_of(exp.alt, tenv)
        constraint1 = unify(test_te, BOOLEAN, exp)
        if constraint1 is not None:
            return constraint1
        constraint2 = unify(then_te, alt_te, exp)
        if constraint2 is not None:
            return constraint2
        return then_te

    def type_of_proc(self, exp: ProcExp, tenv: TypeEnv) -> TypeOrError:
        """(lambda ((x1 : t1) ... (xn : tn)) : t body ...) has type t1 * ... * tn -> t
        when the body has type t with x1..xn bound to t1..tn."""
        arg_tes = tuple(arg.texp for arg in exp.args)
        ext_tenv = tenv.extend([arg.var for arg in exp.args], arg_tes)
        body_te = self.type_of_exps(exp.body, ext_tenv)
        constraint = unify(body_te, exp.return_te, exp)
        if constraint is not None:
            return constraint
        return ProcType(arg_tes, exp.return_te)

    def type_of_app(self, exp: AppExp, tenv: TypeEnv) -> TypeOrError:
        """(rator rand1 ... randn): rator must unify with t1 * ... * tn -> T
        for the operand types ti and a fresh variable T, the result."""
        rator_te = self.type_of(exp.rator, tenv)
        if isinstance(rator_te, TypeCheckError):
            return rator_te

        rand_tes = [self.type_of(rand, tenv) for rand in exp.rands]
        failed = _collect([t if isinstance(t, TypeCheckError) else None for t in rand_tes], exp)
        if failed is not None:
            return failed

        return_te = self.store.fresh()
        self.fresh_vars.append(return_te)
        logger.opt(lazy=True).debug(
            "infer.app.fresh {} for {}", lambda: return_te.name, lambda: unparse(exp)
        )
        constraint = unify(rator_te, ProcType(tuple(rand_tes), return_te), exp)
        if constraint is not None:
            return constraint
        return return_te

    def type_of_let(self, exp: LetExp, tenv: TypeEnv) -> TypeOrError:
        """(let ((x1 : t1 e1) ...) body ...): each ei has type ti in the outer
        environment; the body is typed with every xi bound to ti."""
        names = [b.var.var for b in exp.bindings]
        var_tes = [b.var.texp for b in exp.bindings]
        constraints = [
            unify(b.var.texp, self.type_of(b.val, tenv), exp) for b in exp.bindings
        ]
        failed = _collect(constraints, exp)
        if failed is not None:
            return failed
        return self.type_of_exps(exp.body, tenv.extend(names, var_tes))

    def type_of_letrec(self, exp: LetrecExp, tenv: TypeEnv) -> TypeOrError:
        """(letrec ((p1 (lambda ...)) ...) body ...).

        The signature of every pi comes from its own annotations. All
        signatures are visible in every procedure body and in the letrec
        body. Only procedure initializers are supported.
        """
        procs = [b.val for b in exp.bindings if isinstance(b.val, ProcExp)]
        if len(procs) != len(exp.bindings):
            return UnsupportedConstruct(
                f"letrec - only support binding of procedures - {unparse(exp)}", exp
            )

        names = [b.var.var for b in exp.bindings]
        signatures = [ProcType(tuple(arg.texp for arg in p.args), p.return_te) for p in procs]
        tenv_body = tenv.extend(names, signatures)

        constraints = []
        for proc in procs:
            tenv_i = tenv_body.extend([a.var for a in proc.args], [a.texp for a in proc.args])
            body_te = self.type_of_exps(proc.body, tenv_i)
            constraints.append(unify(body_te, proc.return_te, exp))
        failed = _collect(constraints, exp)
        if failed is not None:
            return failed
        return self.type_of_exps(exp.body, tenv_body)

    def type_of_define(self, exp: DefineExp, tenv: TypeEnv) -> TypeOrError:
        """(define x e) is typed void. The value is not checked."""
        return VOID

    def type_of_program(self, exp: Program, tenv: TypeEnv) -> TypeOrError:
        """Programs are not typed yet."""
        return UnsupportedConstruct("Typing of L5 programs is not yet supported", exp)


def infer(exp: Exp, tenv: TypeEnv | None = None, store: TypeVarStore | None = None) -> TypeOrError:
    """Type exp with a new Inferencer, in the empty environment by default."""
    return Inferencer(store).type_of(exp, tenv if tenv is not None else TypeEnv.empty())
