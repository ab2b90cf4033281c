"""Tests for the parser."""

import pytest

from l5infer.core.types import BOOLEAN, NUMBER, STRING, VOID, ProcType, TypeVar, TypeVarStore
from l5infer.surface.ast import (
    AppExp,
    Binding,
    BoolExp,
    DefineExp,
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
from l5infer.surface.parser import ParseError, parse, parse_forms, parse_texp


class TestAtoms:
    """Tests for atomic expressions."""

    def test_integer(self):
        assert parse("42") == NumExp(42)

    def test_float(self):
        exp = parse("-2.5")
        assert exp == NumExp(-2.5)
        assert isinstance(exp.value, float)

    def test_booleans(self):
        assert parse("#t") == BoolExp(True)
        assert parse("#false") == BoolExp(False)

    def test_string(self):
        assert parse('"hi"') == StrExp("hi")

    def test_variable(self):
        assert parse("x") == VarRef("x")

    def test_primitive(self):
        assert parse("string=?") == PrimOp("string=?")

    def test_keyword_as_variable(self):
        with pytest.raises(ParseError, match="Keyword if used as a variable"):
            parse("if")

    def test_location_recorded(self):
        exp = parse("\n  x")
        assert exp.location.line == 2
        assert exp.location.column == 3


class TestCompound:
    """Tests for special forms and applications."""

    def test_if(self):
        assert parse("(if #t 1 2)") == IfExp(BoolExp(True), NumExp(1), NumExp(2))

    def test_if_arity(self):
        with pytest.raises(ParseError, match="if expects exactly 3"):
            parse("(if #t 1)")

    def test_application(self):
        assert parse("(f 1 x)") == AppExp(VarRef("f"), (NumExp(1), VarRef("x")))

    def test_application_without_operands(self):
        assert parse("(newline)") == AppExp(PrimOp("newline"), ())

    def test_empty_application(self):
        with pytest.raises(ParseError, match="Empty application"):
            parse("()")

    def test_annotated_lambda(self):
        exp = parse("(lambda ((x : number)) : boolean (> x 0))")
        assert exp == ProcExp(
            (VarDecl("x", NUMBER),),
            BOOLEAN,
            (AppExp(PrimOp(">"), (VarRef("x"), NumExp(0))),),
        )

    def test_inline_param_annotations(self):
        exp = parse("(lambda (x : number y : string) : void (display y))")
        assert [a.var for a in exp.args] == ["x", "y"]
        assert [a.texp for a in exp.args] == [NUMBER, STRING]
        assert exp.return_te == VOID

    def test_unannotated_lambda_gets_fresh_variables(self):
        store = TypeVarStore()
        exp = parse("(lambda (x y) x)", store)
        x, y = (a.texp for a in exp.args)
        assert isinstance(x, TypeVar) and isinstance(y, TypeVar)
        assert isinstance(exp.return_te, TypeVar)
        assert len({id(x), id(y), id(exp.return_te)}) == 3
        assert [v.name for v in store.allocated] == ["T_1", "T_2", "T_3"]

    def test_lambda_body_sequence(self):
        exp = parse("(lambda () : number 1 2 3)")
        assert exp.body == (NumExp(1), NumExp(2), NumExp(3))

    def test_lambda_without_body(self):
        with pytest.raises(ParseError, match="body must not be empty"):
            parse("(lambda (x) : number)")

    def test_missing_return_type(self):
        with pytest.raises(ParseError, match="Missing return type"):
            parse("(lambda (x) :)")

    def test_let(self):
        exp = parse('(let ((x : number 1) (s "a")) x)')
        assert isinstance(exp, LetExp)
        first, second = exp.bindings
        assert first == Binding(VarDecl("x", NUMBER), NumExp(1))
        assert second.var.var == "s"
        assert isinstance(second.var.texp, TypeVar)
        assert exp.body == (VarRef("x"),)

    def test_let_parenthesized_binder(self):
        exp = parse("(let (((x : number) 1)) x)")
        assert exp.bindings[0] == Binding(VarDecl("x", NUMBER), NumExp(1))

    def test_letrec(self):
        exp = parse("(letrec ((f : (number -> number) (lambda (n : number) : number n))) (f 1))")
        assert isinstance(exp, LetrecExp)
        assert exp.bindings[0].var == VarDecl("f", ProcType((NUMBER,), NUMBER))

    def test_binding_needs_one_value(self):
        with pytest.raises(ParseError, match="one value"):
            parse("(let ((x 1 2)) x)")

    def test_binding_reserved_name(self):
        with pytest.raises(ParseError, match="Cannot bind reserved name"):
            parse("(let ((+ 1)) 2)")

    def test_unsupported_special_form(self):
        with pytest.raises(ParseError, match="Unsupported special form: quote"):
            parse("(quote x)")


class TestTopLevel:
    """Tests for define and L5 programs."""

    def test_define(self):
        assert parse("(define (x : number) 1)") == DefineExp(VarDecl("x", NUMBER), NumExp(1))

    def test_define_inline_annotation(self):
        assert parse("(define x : number 1)") == DefineExp(VarDecl("x", NUMBER), NumExp(1))

    def test_define_malformed(self):
        with pytest.raises(ParseError, match="define expects"):
            parse("(define x)")

    def test_define_nested(self):
        with pytest.raises(ParseError, match="only allowed at top level"):
            parse("(if #t (define x 1) 2)")

    def test_program(self):
        exp = parse("(L5 (define x : number 1) x)")
        assert isinstance(exp, Program)
        assert exp.exps[1] == VarRef("x")

    def test_empty_program(self):
        assert parse("(L5)") == Program(())

    def test_parse_forms(self):
        forms = parse_forms("1 ; one\n(define y 2)\n#t")
        assert [type(f) for f in forms] == [NumExp, DefineExp, BoolExp]

    def test_named_type_variables_scoped_per_form(self):
        first, second = parse_forms("(lambda ((x : T)) : T x)\n(lambda ((y : T)) : T y)")
        assert first.args[0].texp is first.return_te
        assert second.args[0].texp is second.return_te
        assert first.return_te is not second.return_te


class TestTypeExpressions:
    """Tests for type expression syntax."""

    @pytest.mark.parametrize("name", ["number", "boolean", "string", "void"])
    def test_atomic(self, name):
        assert str(parse_texp(name)) == name

    def test_procedure(self):
        assert parse_texp("(number * string -> boolean)") == ProcType((NUMBER, STRING), BOOLEAN)

    def test_empty_params(self):
        assert parse_texp("(Empty -> void)") == ProcType((), VOID)

    def test_nested(self):
        texp = parse_texp("((number -> number) -> (Empty -> boolean))")
        assert texp == ProcType((ProcType((NUMBER,), NUMBER),), ProcType((), BOOLEAN))

    def test_named_variables_are_shared(self):
        texp = parse_texp("(T * U -> T)")
        assert isinstance(texp, ProcType)
        assert texp.params[0] is texp.ret
        assert texp.params[1] is not texp.ret
        assert texp.params[0].name == "T"

    def test_names_shared_across_one_expression(self):
        exp = parse("(lambda ((x : T)) : T x)")
        assert exp.args[0].texp is exp.return_te

    @pytest.mark.parametrize(
        "source",
        [
            "(number number -> number)",
            "(number * -> number)",
            "(-> number)",
            "(number -> number -> number)",
            "(number)",
            "->",
            "1",
        ],
    )
    def test_malformed(self, source):
        with pytest.raises(ParseError):
            parse_texp(source)


class TestErrors:
    """Tests for reader errors."""

    def test_unbalanced(self):
        with pytest.raises(ParseError, match="Unbalanced parentheses"):
            parse("(f 1")

    def test_unexpected_close(self):
        with pytest.raises(ParseError, match="Unexpected \\)"):
            parse(")")

    def test_trailing_input(self):
        with pytest.raises(ParseError, match="after expression"):
            parse("1 2")

    def test_empty_input(self):
        with pytest.raises(ParseError, match="end of input"):
            parse("")

    def test_lexer_error_wrapped(self):
        with pytest.raises(ParseError, match="Unterminated string"):
            parse('"abc')
