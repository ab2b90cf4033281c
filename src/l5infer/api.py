"""Entry points that go from source text to a type."""

from __future__ import annotations

import sys
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from loguru import logger

from l5infer.core.env import TypeEnv
from l5infer.core.errors import TypeCheckError, UnsupportedConstruct
from l5infer.core.inference import Inferencer
from l5infer.core.types import TypeVarStore
from l5infer.core.unify import TypeOrError
from l5infer.surface.ast import Exp
from l5infer.surface.parser import ParseError, parse, parse_forms
from l5infer.surface.unparse import unparse, unparse_texp

DEFAULT_RECURSION_LIMIT = 10000


@contextmanager
def recursion_limit(limit: int) -> Iterator[None]:
    """Raise the interpreter recursion limit to at least `limit` for the block."""
    previous = sys.getrecursionlimit()
    if previous < limit:
        sys.setrecursionlimit(limit)
    try:
        yield
    finally:
        sys.setrecursionlimit(previous)


def _type_of(inferencer: Inferencer, exp: Exp) -> TypeOrError:
    try:
        return inferencer.type_of(exp, TypeEnv.empty())
    except RecursionError:
        logger.warning("infer.too_deep")
        return UnsupportedConstruct("Expression is nested too deeply to type", exp)


def infer_source(
    source: str, *, tvar_prefix: str = "T", max_depth: int = DEFAULT_RECURSION_LIMIT
) -> TypeOrError:
    """Parse one form and infer its type in the empty environment.

    `max_depth` bounds the interpreter recursion used while parsing and
    typing; input nested deeper than that is reported, not raised.

    Raises:
        ParseError: If source is not a single well-formed form
    """
    store = TypeVarStore(tvar_prefix)
    with recursion_limit(max_depth):
        try:
            exp = parse(source, store)
        except RecursionError as e:
            raise ParseError("Expression is nested too deeply to parse") from e
        return _type_of(Inferencer(store), exp)


def infer_type_of(
    source: str, *, tvar_prefix: str = "T", max_depth: int = DEFAULT_RECURSION_LIMIT
) -> str:
    """Printed type of source, or the error message if it has none."""
    try:
        result = infer_source(source, tvar_prefix=tvar_prefix, max_depth=max_depth)
    except ParseError as e:
        logger.debug("infer.parse_error {}", e)
        return str(e)
    match result:
        case TypeCheckError() as error:
            return error.message
        case texp:
            return unparse_texp(texp)


@dataclass(frozen=True)
class FormResult:
    """Outcome of typing one top-level form."""

    exp: Exp
    result: TypeOrError

    @property
    def ok(self) -> bool:
        return not isinstance(self.result, TypeCheckError)

    @property
    def text(self) -> str:
        match self.result:
            case TypeCheckError() as error:
                return error.message
            case texp:
                return unparse_texp(texp)

    def __str__(self) -> str:
        return f"{unparse(self.exp)} => {self.text}"


def check_forms(
    source: str,
    *,
    tvar_prefix: str = "T",
    filename: str | None = None,
    max_depth: int = DEFAULT_RECURSION_LIMIT,
) -> list[FormResult]:
    """Type every top-level form in source independently.

    Forms do not see each other's definitions or type variables.

    Raises:
        ParseError: If source is not well formed
    """
    store = TypeVarStore(tvar_prefix)
    with recursion_limit(max_depth):
        try:
            exps = parse_forms(source, store, filename)
        except RecursionError as e:
            raise ParseError("Expression is nested too deeply to parse") from e
        results = [FormResult(exp, _type_of(Inferencer(store), exp)) for exp in exps]
    logger.debug(
        "check.done forms={} failed={}", len(results), sum(1 for r in results if not r.ok)
    )
    return results
