"""Tests for error values and their messages."""

from l5infer.core.errors import (
    ArityMismatch,
    CompositeError,
    OccursCheckViolation,
    TypeMismatch,
    UnboundVariable,
    UnsupportedConstruct,
)
from l5infer.core.types import NUMBER, STRING, ProcType, TypeVarStore
from l5infer.surface.ast import AppExp, NumExp, VarRef


class TestMessages:
    """Error messages print types and expressions in concrete syntax."""

    def test_str_is_message(self):
        error = UnboundVariable("x")
        assert str(error) == error.message == "Unbound variable x"

    def test_type_mismatch(self):
        assert TypeMismatch(NUMBER, STRING).message == "Incompatible atomic types number - string"

    def test_structural_mismatch(self):
        error = TypeMismatch(NUMBER, ProcType((), NUMBER), structural=True)
        assert error.message == "Incompatible types structure: number - Empty -> number"

    def test_arity_of_sequences(self):
        error = ArityMismatch([NUMBER], [NUMBER, STRING])
        assert error.message == "Wrong number of args [number] - [number, string]"

    def test_occurs_check_names_expression(self):
        store = TypeVarStore()
        v = store.fresh()
        exp = AppExp(VarRef("f"), (VarRef("f"),))
        error = OccursCheckViolation(v, ProcType((v,), NUMBER), exp)
        assert error.message == "Occur check error - T_1 occurs in T_1 -> number in (f f)"
        assert error.exp is exp

    def test_composite_names_context(self):
        exp = AppExp(VarRef("g"), (NumExp(1),))
        error = CompositeError([UnboundVariable("a"), UnboundVariable("b")], exp)
        assert error.message == "Check (g 1): errors Unbound variable a; Unbound variable b"

    def test_composite_without_context(self):
        error = CompositeError([UnboundVariable("a")])
        assert error.message == "Unbound variable a"


class TestLeaves:
    """Tests for flattening nested composite errors."""

    def test_single_error_is_its_own_leaf(self):
        error = UnsupportedConstruct("nope")
        assert list(error.leaves()) == [error]

    def test_nested(self):
        a = UnboundVariable("a")
        b = UnboundVariable("b")
        c = UnboundVariable("c")
        error = CompositeError([a, CompositeError([b, c])])
        assert list(error.leaves()) == [a, b, c]
