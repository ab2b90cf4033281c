"""Recursive descent parser for the L5 surface language.

Parsing happens in two steps: tokens are read into s-expressions, then each
s-expression is parsed into an expression or a type expression.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Union

from l5infer.core.primitives import is_primitive
from l5infer.core.types import ATOMIC_KINDS, AtomicType, ProcType, TExp, TypeVar, TypeVarStore
from l5infer.surface.ast import (
    AppExp,
    Binding,
    BoolExp,
    CExp,
    DefineExp,
    Exp,
    IfExp,
    LetExp,
    LetrecExp,
    NumExp,
    Parsed,
    PrimOp,
    ProcExp,
    Program,
    StrExp,
    VarDecl,
    VarRef,
)
from l5infer.surface.lexer import Lexer, LexerError, Token, TokenType
from l5infer.utils.location import Location

KEYWORDS = frozenset({"if", "lambda", "let", "letrec", "define", "L5", "quote", "set!"})
TYPE_ARROW = "->"
TYPE_PRODUCT = "*"
EMPTY_PARAMS = "Empty"


class ParseError(Exception):
    """Error during parsing."""

    def __init__(self, message: str, location: Location | None = None):
        super().__init__(f"{location}: {message}" if location is not None else message)
        self.message = message
        self.location = location


@dataclass(frozen=True)
class SList:
    """A parenthesized s-expression."""

    items: tuple[SExp, ...]
    location: Location


SExp = Union[Token, SList]


def _loc(sexp: SExp) -> Location:
    return sexp.location


def _is_symbol(sexp: SExp, name: str | None = None) -> bool:
    if not isinstance(sexp, Token) or sexp.type != TokenType.SYMBOL:
        return False
    return name is None or sexp.value == name


def _is_colon(sexp: SExp) -> bool:
    return isinstance(sexp, Token) and sexp.type == TokenType.COLON


class Parser:
    """Parser for L5 expressions with type annotations.

    Grammar:
        exp     ::= NUMBER | BOOLEAN | STRING | SYMBOL
                  | "(" "if" exp exp exp ")"
                  | "(" "lambda" "(" param* ")" (":" texp)? exp+ ")"
                  | "(" "let" "(" binding* ")" exp+ ")"
                  | "(" "letrec" "(" binding* ")" exp+ ")"
                  | "(" "define" vardecl exp ")"
                  | "(" "L5" exp* ")"
                  | "(" exp exp* ")"

        param   ::= SYMBOL | "(" SYMBOL ":" texp ")" | SYMBOL ":" texp
        binding ::= "(" SYMBOL exp ")"
                  | "(" "(" SYMBOL ":" texp ")" exp ")"
                  | "(" SYMBOL ":" texp exp ")"
        vardecl ::= SYMBOL | "(" SYMBOL ":" texp ")" | SYMBOL ":" texp

        texp    ::= "number" | "boolean" | "string" | "void" | SYMBOL
                  | "(" "Empty" "->" texp ")"
                  | "(" texp ("*" texp)* "->" texp ")"

    Binders without an annotation, and lambdas without a return annotation,
    get a fresh type variable. A type variable name used more than once in
    one top-level form denotes the same variable.
    """

    def __init__(self, tokens: list[Token], store: TypeVarStore | None = None):
        """Initialize parser with token stream."""
        self.tokens = tokens
        self.pos = 0
        self.store = store if store is not None else TypeVarStore()
        self._named_tvars: dict[str, TypeVar] = {}

    # =====================================================================
    # Reader
    # =====================================================================

    def _current(self) -> Token:
        if self.pos < len(self.tokens):
            return self.tokens[self.pos]
        return self.tokens[-1]

    def _advance(self) -> Token:
        token = self._current()
        if self.pos < len(self.tokens) - 1:
            self.pos += 1
        return token

    def at_end(self) -> bool:
        return self._current().type == TokenType.EOF

    def read(self) -> SExp:
        """Read one s-expression."""
        token = self._advance()
        match token.type:
            case TokenType.LPAREN:
                items: list[SExp] = []
                while self._current().type != TokenType.RPAREN:
                    if self.at_end():
                        raise ParseError("Unbalanced parentheses: expected )", token.location)
                    items.append(self.read())
                self._advance()
                return SList(tuple(items), token.location)
            case TokenType.RPAREN:
                raise ParseError("Unexpected )", token.location)
            case TokenType.EOF:
                raise ParseError("Unexpected end of input", token.location)
            case _:
                return token

    # =====================================================================
    # Expressions
    # =====================================================================

    def parse(self) -> Parsed:
        """Parse exactly one top-level form."""
        exp = self.parse_form(self.read())
        if not self.at_end():
            raise ParseError("Unexpected input after expression", self._current().location)
        return exp

    def parse_forms(self) -> list[Parsed]:
        """Parse every top-level form until end of input.

        Named type variables are scoped to one form: `T` in two forms
        denotes two different variables.
        """
        forms = []
        while not self.at_end():
            self._named_tvars = {}
            forms.append(self.parse_form(self.read()))
        return forms

    def parse_form(self, sexp: SExp) -> Parsed:
        """Parse a top-level form: a program, a define or an expression."""
        if isinstance(sexp, SList) and sexp.items:
            head = sexp.items[0]
            if _is_symbol(head, "L5"):
                return Program(tuple(self.parse_form(s) for s in sexp.items[1:]), sexp.location)
            if _is_symbol(head, "define"):
                return self.parse_define(sexp)
        return self.parse_exp(sexp)

    def parse_exp(self, sexp: SExp) -> CExp:
        """Parse an expression (no define or program)."""
        if isinstance(sexp, Token):
            return self.parse_atom(sexp)
        if not sexp.items:
            raise ParseError("Empty application ()", sexp.location)

        head = sexp.items[0]
        if isinstance(head, Token) and head.type == TokenType.SYMBOL and head.value in KEYWORDS:
            match head.value:
                case "if":
                    return self.parse_if(sexp)
                case "lambda":
                    return self.parse_proc(sexp)
                case "let":
                    bindings, body = self._parse_let_parts(sexp)
                    return LetExp(bindings, body, sexp.location)
                case "letrec":
                    bindings, body = self._parse_let_parts(sexp)
                    return LetrecExp(bindings, body, sexp.location)
                case "define" | "L5":
                    raise ParseError(f"{head.value} is only allowed at top level", sexp.location)
                case _:
                    raise ParseError(f"Unsupported special form: {head.value}", sexp.location)

        rator = self.parse_exp(head)
        rands = tuple(self.parse_exp(s) for s in sexp.items[1:])
        return AppExp(rator, rands, sexp.location)

    def parse_atom(self, token: Token) -> CExp:
        match token.type:
            case TokenType.NUMBER:
                text = token.value
                value: int | float = float(text) if "." in text else int(text)
                return NumExp(value, token.location)
            case TokenType.BOOLEAN:
                return BoolExp(token.value in ("#t", "#true"), token.location)
            case TokenType.STRING:
                return StrExp(token.value, token.location)
            case TokenType.SYMBOL:
                if token.value in KEYWORDS:
                    raise ParseError(f"Keyword {token.value} used as a variable", token.location)
                if is_primitive(token.value):
                    return PrimOp(token.value, token.location)
                return VarRef(token.value, token.location)
            case _:
                raise ParseError(f"Unexpected token: {token}", token.location)

    def parse_if(self, sexp: SList) -> IfExp:
        if len(sexp.items) != 4:
            raise ParseError("if expects exactly 3 expressions: test, then, alt", sexp.location)
        test, then, alt = (self.parse_exp(s) for s in sexp.items[1:])
        return IfExp(test, then, alt, sexp.location)

    def parse_proc(self, sexp: SList) -> ProcExp:
        items = sexp.items
        if len(items) < 3 or not isinstance(items[1], SList):
            raise ParseError("lambda expects a parameter list and a body", sexp.location)
        args = self.parse_params(items[1])

        rest = items[2:]
        if rest and _is_colon(rest[0]):
            if len(rest) < 2:
                raise ParseError("Missing return type after :", _loc(rest[0]))
            return_te = self.parse_texp(rest[1])
            rest = rest[2:]
        else:
            return_te = self.store.fresh()

        if not rest:
            raise ParseError("lambda body must not be empty", sexp.location)
        body = tuple(self.parse_exp(s) for s in rest)
        return ProcExp(tuple(args), return_te, body, sexp.location)

    def parse_params(self, params: SList) -> list[VarDecl]:
        decls = []
        items = params.items
        i = 0
        while i < len(items):
            decl, i = self._parse_var_decl(items, i)
            decls.append(decl)
        return decls

    def parse_define(self, sexp: SList) -> DefineExp:
        items = sexp.items
        decl, i = self._parse_var_decl(items, 1) if len(items) > 1 else (None, 1)
        if decl is None or len(items) != i + 1:
            raise ParseError("define expects a variable and a value", sexp.location)
        return DefineExp(decl, self.parse_exp(items[i]), sexp.location)

    def _parse_let_parts(self, sexp: SList) -> tuple[tuple[Binding, ...], tuple[Exp, ...]]:
        keyword = sexp.items[0].value  # type: ignore[union-attr]
        if len(sexp.items) < 3 or not isinstance(sexp.items[1], SList):
            raise ParseError(f"{keyword} expects a binding list and a body", sexp.location)
        bindings = tuple(self.parse_binding(b) for b in sexp.items[1].items)
        body = tuple(self.parse_exp(s) for s in sexp.items[2:])
        return bindings, body

    def parse_binding(self, sexp: SExp) -> Binding:
        if not isinstance(sexp, SList) or not sexp.items:
            raise ParseError("Binding must be a non-empty list", _loc(sexp))
        decl, i = self._parse_var_decl(sexp.items, 0)
        if len(sexp.items) != i + 1:
            raise ParseError("Binding expects a variable and one value", sexp.location)
        return Binding(decl, self.parse_exp(sexp.items[i]))

    def _parse_var_decl(self, items: tuple[SExp, ...], i: int) -> tuple[VarDecl, int]:
        """Parse a binder starting at items[i]; return it and the next index."""
        item = items[i]
        if isinstance(item, SList):
            if len(item.items) != 3 or not _is_colon(item.items[1]):
                raise ParseError("Expected (name : type)", item.location)
            name = self._binder_name(item.items[0])
            return VarDecl(name, self.parse_texp(item.items[2])), i + 1

        name = self._binder_name(item)
        if i + 1 < len(items) and _is_colon(items[i + 1]):
            if i + 2 >= len(items):
                raise ParseError(f"Missing type after {name} :", _loc(items[i + 1]))
            return VarDecl(name, self.parse_texp(items[i + 2])), i + 3
        return VarDecl(name, self.store.fresh()), i + 1

    def _binder_name(self, sexp: SExp) -> str:
        if not _is_symbol(sexp):
            raise ParseError("Expected a variable name", _loc(sexp))
        name = sexp.value  # type: ignore[union-attr]
        if name in KEYWORDS or is_primitive(name):
            raise ParseError(f"Cannot bind reserved name {name}", _loc(sexp))
        return name

    # =====================================================================
    # Type expressions
    # =====================================================================

    def parse_texp(self, sexp: SExp) -> TExp:
        """Parse a type expression."""
        if isinstance(sexp, Token):
            if sexp.type != TokenType.SYMBOL:
                raise ParseError(f"Unexpected token in type: {sexp}", sexp.location)
            if sexp.value in ATOMIC_KINDS:
                return AtomicType(sexp.value)  # type: ignore[arg-type]
            if sexp.value in (TYPE_ARROW, TYPE_PRODUCT, EMPTY_PARAMS):
                raise ParseError(f"Unexpected {sexp.value} in type", sexp.location)
            return self._named_tvar(sexp.value)
        return self.parse_proc_texp(sexp)

    def parse_proc_texp(self, sexp: SList) -> ProcType:
        items = sexp.items
        arrows = [i for i, s in enumerate(items) if _is_symbol(s, TYPE_ARROW)]
        if len(arrows) != 1 or arrows[0] != len(items) - 2:
            raise ParseError("Procedure type must have the form (t1 * ... * tn -> t)", sexp.location)

        left = items[: arrows[0]]
        ret = self.parse_texp(items[-1])
        if len(left) == 1 and _is_symbol(left[0], EMPTY_PARAMS):
            return ProcType((), ret)
        if not left:
            raise ParseError("Missing parameter types; use Empty for none", sexp.location)

        params = []
        for i, item in enumerate(left):
            if i % 2 == 1:
                if not _is_symbol(item, TYPE_PRODUCT):
                    raise ParseError("Parameter types must be separated by *", _loc(item))
                continue
            params.append(self.parse_texp(item))
        if len(left) % 2 == 0:
            raise ParseError("Dangling * in procedure type", sexp.location)
        return ProcType(tuple(params), ret)

    def _named_tvar(self, name: str) -> TypeVar:
        var = self._named_tvars.get(name)
        if var is None:
            var = self.store.fresh(name)
            self._named_tvars[name] = var
        return var


# =============================================================================
# Convenience Functions
# =============================================================================


def _parser(source: str, store: TypeVarStore | None, filename: str | None) -> Parser:
    try:
        tokens = Lexer(source, filename).tokenize()
    except LexerError as e:
        raise ParseError(str(e)) from e
    return Parser(tokens, store)


def parse(source: str, store: TypeVarStore | None = None, filename: str | None = None) -> Parsed:
    """Parse a single top-level form.

    Example:
        >>> parse("(lambda (x : number) : number x)").return_te
        AtomicType(kind='number')
    """
    return _parser(source, store, filename).parse()


def parse_forms(
    source: str, store: TypeVarStore | None = None, filename: str | None = None
) -> list[Parsed]:
    """Parse every top-level form in source."""
    return _parser(source, store, filename).parse_forms()


def parse_texp(source: str, store: TypeVarStore | None = None) -> TExp:
    """Parse a type expression written on its own, e.g. `(number * T -> T)`."""
    parser = _parser(source, store, None)
    texp = parser.parse_texp(parser.read())
    if not parser.at_end():
        raise ParseError("Unexpected input after type", parser._current().location)
    return texp
